"""Binding reconciliation between SQL call sites and their SQL targets."""

from binding.models import (
    CallForm,
    CallSite,
    Diagnostic,
    DiagnosticCategory,
    DiagnosticCode,
    DocumentReport,
    ExpectedParameters,
    Position,
    ReconciliationResult,
    Severity,
    SourceRange,
    SuppliedParameters,
)

__all__ = [
    "CallForm",
    "CallSite",
    "Diagnostic",
    "DiagnosticCategory",
    "DiagnosticCode",
    "DocumentReport",
    "ExpectedParameters",
    "Position",
    "ReconciliationResult",
    "Severity",
    "SourceRange",
    "SuppliedParameters",
]
