"""Resolution of the parameters a call site is expected to bind.

The query form carries its SQL inline; the file form names a ``.sql`` file
by dotted key. Both end in the same SQL parameter parser.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from binding.models import CallForm, ExpectedParameters
from log import get_logger
from parse.sql_params import DEFAULT_DIALECT, SqlParseError, parse_sql_parameters

if TYPE_CHECKING:
    from pathlib import Path

    from binding.models import CallSite, SourceRange

logger = get_logger(__name__)

INLINE_ORIGIN = "<inline>"


class FileLocator(Protocol):
    async def find_by_key(self, key: str) -> Path | None: ...

    async def read_text(self, path: Path) -> str: ...


@dataclass(frozen=True)
class Resolved:
    expected: ExpectedParameters


@dataclass(frozen=True)
class BindingTargetNotFound:
    key: str
    range: SourceRange


@dataclass(frozen=True)
class SqlParseFailure:
    target: str
    range: SourceRange
    reason: str
    form: CallForm


Resolution = Resolved | BindingTargetNotFound | SqlParseFailure


def _parse(
    sql_text: str, origin: str, call_site: CallSite, dialect: str
) -> Resolved | SqlParseFailure:
    try:
        parameters = parse_sql_parameters(sql_text, dialect)
    except SqlParseError as exc:
        logger.debug("sql_parse_failed", origin=origin, error=str(exc))
        return SqlParseFailure(
            target=call_site.literal_text,
            range=call_site.literal_range,
            reason=str(exc),
            form=call_site.form,
        )
    return Resolved(
        expected=ExpectedParameters(
            names=tuple(parameter.name for parameter in parameters),
            origin=origin,
        )
    )


async def resolve_expected(
    call_site: CallSite,
    locator: FileLocator,
    *,
    dialect: str = DEFAULT_DIALECT,
) -> Resolution:
    """Resolve the expected parameter set for one call site."""
    if call_site.form is CallForm.QUERY:
        return _parse(call_site.literal_text, INLINE_ORIGIN, call_site, dialect)

    path = await locator.find_by_key(call_site.literal_text)
    if path is None:
        return BindingTargetNotFound(
            key=call_site.literal_text, range=call_site.literal_range
        )

    sql_text = await locator.read_text(path)
    return _parse(sql_text, str(path), call_site, dialect)


__all__ = [
    "INLINE_ORIGIN",
    "BindingTargetNotFound",
    "FileLocator",
    "Resolution",
    "Resolved",
    "SqlParseFailure",
    "resolve_expected",
]
