"""Rendering and serialization of document reports."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import orjson

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from binding.models import Diagnostic, DocumentReport


def format_diagnostic(path: str, diagnostic: Diagnostic) -> str:
    """Render ``path:line:col: severity: message [code]`` with 1-based positions."""
    start = diagnostic.range.start
    return (
        f"{path}:{start.line + 1}:{start.character + 1}: "
        f"{diagnostic.severity.value}: {diagnostic.message} [{diagnostic.code.value}]"
    )


def format_reports(reports: Sequence[DocumentReport]) -> list[str]:
    return [
        format_diagnostic(report.path, diagnostic)
        for report in reports
        for diagnostic in report.all_diagnostics()
    ]


def _diagnostic_record(path: str, diagnostic: Diagnostic) -> dict[str, Any]:
    record = diagnostic.model_dump(mode="json")
    record["path"] = path
    return record


def diagnostic_records(reports: Sequence[DocumentReport]) -> list[dict[str, Any]]:
    return [
        _diagnostic_record(report.path, diagnostic)
        for report in reports
        for diagnostic in report.all_diagnostics()
    ]


def dumps_reports(reports: Sequence[DocumentReport]) -> bytes:
    opts = orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2
    return orjson.dumps(diagnostic_records(reports), option=opts)


def write_jsonl(path: Path, reports: Sequence[DocumentReport]) -> None:
    with path.open("wb") as f:
        for record in diagnostic_records(reports):
            f.write(orjson.dumps(record, option=orjson.OPT_SORT_KEYS))
            f.write(b"\n")


__all__ = ["diagnostic_records", "dumps_reports", "format_diagnostic", "format_reports", "write_jsonl"]
