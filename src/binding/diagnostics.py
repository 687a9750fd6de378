"""Diagnostic construction for binding findings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from binding.models import (
    CallForm,
    Diagnostic,
    DiagnosticCategory,
    DiagnosticCode,
    Severity,
)
from utils import pluralize

if TYPE_CHECKING:
    from binding.models import CallSite, ReconciliationResult
    from binding.resolve import BindingTargetNotFound, SqlParseFailure


def _names(names: tuple[str, ...]) -> str:
    return ", ".join(names)


def parameter_category(form: CallForm) -> DiagnosticCategory:
    if form is CallForm.FILE:
        return DiagnosticCategory.FILE_PARAMETERS
    return DiagnosticCategory.QUERY_PARAMETERS


def missing_parameters_diagnostic(
    call_site: CallSite, missing: tuple[str, ...]
) -> Diagnostic | None:
    if not missing or call_site.parameters is None:
        return None
    noun = pluralize(len(missing), "parameter")
    return Diagnostic(
        range=call_site.parameters.range,
        message=f"Missing {noun} [{_names(missing)}] for [{call_site.target_label}].",
        severity=Severity.ERROR,
        category=parameter_category(call_site.form),
        code=DiagnosticCode.MISSING_PARAMETER,
    )


def extra_parameters_diagnostic(
    call_site: CallSite, extra: tuple[str, ...]
) -> Diagnostic | None:
    if not extra or call_site.parameters is None:
        return None
    noun = pluralize(len(extra), "parameter")
    return Diagnostic(
        range=call_site.parameters.range,
        message=f"Unused {noun} [{_names(extra)}] for [{call_site.target_label}].",
        severity=Severity.WARNING,
        category=parameter_category(call_site.form),
        code=DiagnosticCode.EXTRA_PARAMETER,
    )


def reconciliation_diagnostics(
    call_site: CallSite, result: ReconciliationResult
) -> list[Diagnostic]:
    """Return the missing diagnostic (if any) followed by the extra one."""
    diagnostics = [
        missing_parameters_diagnostic(call_site, result.missing),
        extra_parameters_diagnostic(call_site, result.extra),
    ]
    return [diagnostic for diagnostic in diagnostics if diagnostic is not None]


def target_not_found_diagnostic(outcome: BindingTargetNotFound) -> Diagnostic:
    return Diagnostic(
        range=outcome.range,
        message=f"SQL file [{outcome.key}] not found.",
        severity=Severity.ERROR,
        category=DiagnosticCategory.TARGET_MISSING,
        code=DiagnosticCode.TARGET_NOT_FOUND,
    )


def parse_failure_diagnostic(outcome: SqlParseFailure) -> Diagnostic:
    if outcome.form is CallForm.FILE:
        message = f"SQL file [{outcome.target}] could not be parsed: {outcome.reason}"
        category = DiagnosticCategory.TARGET_MISSING
    else:
        message = f"SQL query could not be parsed: {outcome.reason}"
        category = DiagnosticCategory.QUERY_PARAMETERS
    return Diagnostic(
        range=outcome.range,
        message=message,
        severity=Severity.WARNING,
        category=category,
        code=DiagnosticCode.SQL_PARSE_FAILURE,
    )


__all__ = [
    "extra_parameters_diagnostic",
    "missing_parameters_diagnostic",
    "parameter_category",
    "parse_failure_diagnostic",
    "reconciliation_diagnostics",
    "target_not_found_diagnostic",
]
