"""Binding analysis of one document's current text."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from binding.diagnostics import (
    parse_failure_diagnostic,
    reconciliation_diagnostics,
    target_not_found_diagnostic,
)
from binding.models import CallForm, DiagnosticCategory, DocumentReport
from binding.reconcile import reconcile
from binding.resolve import (
    BindingTargetNotFound,
    SqlParseFailure,
    resolve_expected,
)
from log import get_logger
from parse.callsites import locate_document

if TYPE_CHECKING:
    from pathlib import PurePath

    from binding.models import CallSite, Diagnostic
    from binding.resolve import FileLocator
    from rules.config import SqlbindConfig

logger = get_logger(__name__)


async def analyze_call_site(
    call_site: CallSite, locator: FileLocator, *, dialect: str
) -> list[Diagnostic]:
    """Resolve, reconcile and format the findings for a single call site."""
    if call_site.form is CallForm.QUERY and call_site.parameters is None:
        return []

    resolution = await resolve_expected(call_site, locator, dialect=dialect)

    if isinstance(resolution, BindingTargetNotFound):
        return [target_not_found_diagnostic(resolution)]
    if isinstance(resolution, SqlParseFailure):
        return [parse_failure_diagnostic(resolution)]
    if call_site.parameters is None:
        return []

    result = reconcile(resolution.expected, call_site.parameters)
    logger.debug(
        "call_site_reconciled",
        target=call_site.literal_text,
        origin=resolution.expected.origin,
        missing=list(result.missing),
        extra=list(result.extra),
    )
    return reconciliation_diagnostics(call_site, result)


async def _analyze_isolated(
    call_site: CallSite, locator: FileLocator, *, dialect: str
) -> list[Diagnostic]:
    try:
        return await analyze_call_site(call_site, locator, dialect=dialect)
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(
            "sql_target_unreadable",
            target=call_site.literal_text,
            line=call_site.literal_range.start.line + 1,
            error=str(exc),
        )
        return []
    except Exception:
        logger.exception(
            "call_site_analysis_failed",
            target=call_site.literal_text,
            line=call_site.literal_range.start.line + 1,
        )
        return []


def _group(diagnostics: list[Diagnostic]) -> dict[DiagnosticCategory, list[Diagnostic]]:
    grouped: dict[DiagnosticCategory, list[Diagnostic]] = {
        category: [] for category in DiagnosticCategory
    }
    for diagnostic in diagnostics:
        grouped[diagnostic.category].append(diagnostic)
    return grouped


async def analyze_document(
    text: str,
    path: str | PurePath,
    *,
    locator: FileLocator,
    config: SqlbindConfig,
) -> DocumentReport:
    """Check every binding call in ``text`` and group findings by category.

    Call sites are resolved concurrently; findings keep call-site source order
    regardless of completion order. Every category is present in the report,
    possibly empty, so publishing it replaces stale findings.
    """
    call_sites = locate_document(text, path, config.targets)

    per_call_site = await asyncio.gather(
        *(
            _analyze_isolated(call_site, locator, dialect=config.dialect)
            for call_site in call_sites
        )
    )

    diagnostics = [
        diagnostic for findings in per_call_site for diagnostic in findings
    ]
    logger.debug(
        "document_analyzed",
        path=str(path),
        call_sites=len(call_sites),
        diagnostics=len(diagnostics),
    )
    return DocumentReport(path=str(path), diagnostics=_group(diagnostics))


__all__ = ["analyze_call_site", "analyze_document"]
