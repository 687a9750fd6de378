"""Quick textual pre-filters for lines that may hold binding calls."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rules.config import TargetsConfig


def call_line_pattern(call_name: str) -> re.Pattern[str]:
    """Match ``.<call_name>(`` (optionally with type arguments) followed by a quote."""
    return re.compile(rf"\.{re.escape(call_name)}\b[^(]*\(\s*['\"`]")


def line_may_hold_call(line: str, targets: TargetsConfig) -> bool:
    return any(
        call_line_pattern(name).search(line)
        for name in (targets.file_call, targets.query_call)
    )

