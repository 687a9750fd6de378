"""Models for call sites, parameter sets and binding diagnostics."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

DIAGNOSTIC_SOURCE = "sqlbind"


class CallForm(str, Enum):
    """How a call site names its binding target."""

    FILE = "file"
    QUERY = "query"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class DiagnosticCategory(str, Enum):
    """Diagnostic groups that are published and cleared independently."""

    TARGET_MISSING = "sql-target-missing"
    FILE_PARAMETERS = "file-parameters"
    QUERY_PARAMETERS = "query-parameters"


class DiagnosticCode(str, Enum):
    MISSING_PARAMETER = "missing-parameter"
    EXTRA_PARAMETER = "extra-parameter"
    TARGET_NOT_FOUND = "target-not-found"
    SQL_PARSE_FAILURE = "sql-parse-failure"


class Position(BaseModel):
    """Zero-based line and character offset."""

    model_config = ConfigDict(frozen=True)

    line: int
    character: int


class SourceRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position


class SuppliedParameters(BaseModel):
    """Property names visible in a call's object-literal argument.

    ``exhaustive`` is true only when every property is a plain or shorthand
    assignment. Spreads, computed keys and methods make the real key set
    unknowable.
    """

    model_config = ConfigDict(frozen=True)

    names: tuple[str, ...] = Field(default_factory=tuple)
    exhaustive: bool = True
    range: SourceRange


class CallSite(BaseModel):
    """One located invocation of a parameterized-query function."""

    model_config = ConfigDict(frozen=True)

    form: CallForm
    target_name: str
    literal_text: str
    literal_range: SourceRange
    parameters: SuppliedParameters | None = None

    @property
    def target_label(self) -> str:
        """Name used for the binding target in messages."""
        if self.form is CallForm.FILE:
            return self.literal_text
        return "sql query"


class ExpectedParameters(BaseModel):
    """Named placeholders required by the resolved SQL text."""

    model_config = ConfigDict(frozen=True)

    names: tuple[str, ...] = Field(default_factory=tuple)
    origin: str


class ReconciliationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    extra: tuple[str, ...] = Field(default_factory=tuple)
    missing: tuple[str, ...] = Field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.extra and not self.missing


class Diagnostic(BaseModel):
    model_config = ConfigDict(frozen=True)

    range: SourceRange
    message: str
    severity: Severity
    category: DiagnosticCategory
    code: DiagnosticCode
    source: str = DIAGNOSTIC_SOURCE


class DocumentReport(BaseModel):
    """Diagnostics produced by one analysis pass over one document."""

    path: str
    diagnostics: dict[DiagnosticCategory, list[Diagnostic]] = Field(
        default_factory=dict
    )

    def all_diagnostics(self) -> list[Diagnostic]:
        return [
            diagnostic
            for category in DiagnosticCategory
            for diagnostic in self.diagnostics.get(category, [])
        ]

    @property
    def has_errors(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self.all_diagnostics())


__all__ = [
    "DIAGNOSTIC_SOURCE",
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
