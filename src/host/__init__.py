"""Host integration layer for publishing binding diagnostics."""

from host.session import DiagnosticsSession, DocumentId

__all__ = ["DiagnosticsSession", "DocumentId"]
