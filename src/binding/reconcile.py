"""Set reconciliation between expected and supplied SQL parameters."""

from __future__ import annotations

from typing import TYPE_CHECKING

from binding.models import ReconciliationResult

if TYPE_CHECKING:
    from collections.abc import Iterable

    from binding.models import ExpectedParameters, SuppliedParameters


def _ordered_difference(left: Iterable[str], right: Iterable[str]) -> tuple[str, ...]:
    """Return ``left - right`` as distinct names in first-seen order of ``left``."""
    excluded = set(right)
    seen: set[str] = set()
    result: list[str] = []
    for name in left:
        if name in excluded or name in seen:
            continue
        seen.add(name)
        result.append(name)
    return tuple(result)


def reconcile(
    expected: ExpectedParameters, supplied: SuppliedParameters
) -> ReconciliationResult:
    """Compare the parameters a statement needs with those a call passes.

    ``extra`` is always computed from the visible names. ``missing`` is only
    computed for exhaustive literals; a spread or computed key may supply any
    name, so missing names are suppressed for those.
    """
    extra = _ordered_difference(supplied.names, expected.names)
    missing: tuple[str, ...] = ()
    if supplied.exhaustive:
        missing = _ordered_difference(expected.names, supplied.names)
    return ReconciliationResult(extra=extra, missing=missing)


__all__ = ["reconcile"]
