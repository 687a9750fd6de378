from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import tomllib
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from errors import SqlbindError
from utils import DEFAULT_SQL_EXTENSION

CONFIG_FILENAME = "sqlbind.toml"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class TargetsConfig(_StrictModel):
    """Member names that mark parameterized-query call sites."""

    file_call: str = Field(
        default="sql",
        description="Member name of calls whose first argument is a dotted SQL file key",
    )
    query_call: str = Field(
        default="query",
        description="Member name of calls whose first argument is inline SQL text",
    )

    @field_validator("file_call", "query_call")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        if not v.isidentifier():
            msg = f"Call target '{v}' must be a plain identifier"
            raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def validate_distinct(self) -> TargetsConfig:
        if self.file_call == self.query_call:
            msg = "file_call and query_call must name different members"
            raise ValueError(msg)
        return self


class LoggingConfig(_StrictModel):
    level: LogLevel = Field(default="WARNING", description="Root log level")
    format: Literal["console", "json"] = Field(
        default="console",
        description="Log renderer for stderr output",
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v


class SqlbindConfig(_StrictModel):
    """Configuration for a sqlbind workspace."""

    dialect: str = Field(
        default="postgres",
        description="sqlglot dialect used to parse SQL text",
    )
    sql_extension: str = Field(
        default=DEFAULT_SQL_EXTENSION,
        description="Suffix appended to dotted keys when locating SQL files",
    )
    include: list[str] = Field(
        default_factory=list,
        description="Glob patterns for source files to check (empty = all supported files)",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns excluded from source and SQL file search",
    )
    nested_gitignore: bool = Field(
        default=False,
        description=(
            "Enable nested .gitignore composition (default: false for root-only)"
        ),
    )
    targets: TargetsConfig = Field(default_factory=TargetsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("sql_extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        if not v.startswith(".") or len(v) < 2 or "/" in v:
            msg = f"sql_extension must look like '.sql', got '{v}'"
            raise ValueError(msg)
        return v

    @field_validator("dialect")
    @classmethod
    def validate_dialect(cls, v: str) -> str:
        from sqlglot.dialects.dialect import Dialect

        try:
            Dialect.get_or_raise(v)
        except ValueError as exc:
            msg = f"Unknown SQL dialect '{v}'"
            raise ValueError(msg) from exc
        return v


class ConfigError(SqlbindError):
    """Raised when config file exists but cannot be parsed."""


def load_config(root: Path) -> SqlbindConfig:
    """Load configuration from sqlbind.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return SqlbindConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return SqlbindConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
