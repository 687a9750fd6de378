"""Configuration and call-target rules."""

from rules.config import (
    CONFIG_FILENAME,
    ConfigError,
    LoggingConfig,
    SqlbindConfig,
    TargetsConfig,
    load_config,
)
from rules.targets import call_line_pattern, line_may_hold_call

__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "LoggingConfig",
    "SqlbindConfig",
    "TargetsConfig",
    "call_line_pattern",
    "line_may_hold_call",
    "load_config",
]
