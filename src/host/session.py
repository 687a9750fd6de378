"""In-process diagnostics store driven by document lifecycle events.

The session owns the mapping from document identity to the findings of its
latest analysis pass, split by category. Each pass replaces every category for
its document. Passes for one document are last-writer-wins: starting a pass
cancels the one in flight, and a result is only published while its pass is
still the newest for that document.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from binding.analyze import analyze_document
from log import get_logger
from rules.targets import line_may_hold_call

if TYPE_CHECKING:
    from collections.abc import Iterable

    from binding.models import Diagnostic, DiagnosticCategory, DocumentReport
    from binding.resolve import FileLocator
    from rules.config import SqlbindConfig

logger = get_logger(__name__)

DocumentId = str


class DiagnosticsSession:
    def __init__(self, locator: FileLocator, config: SqlbindConfig) -> None:
        self._locator = locator
        self._config = config
        self._published: dict[DocumentId, dict[DiagnosticCategory, list[Diagnostic]]] = {}
        self._generations: dict[DocumentId, int] = {}
        self._tasks: dict[DocumentId, asyncio.Task[DocumentReport]] = {}

    async def on_open(self, doc_id: DocumentId, text: str) -> DocumentReport | None:
        return await self._run(doc_id, text)

    async def on_save(self, doc_id: DocumentId, text: str) -> DocumentReport | None:
        return await self._run(doc_id, text)

    async def on_change(
        self, doc_id: DocumentId, text: str, changed_lines: Iterable[int]
    ) -> DocumentReport | None:
        """Re-analyze only when a changed line (0-based) looks like a binding call."""
        lines = text.splitlines()
        targets = self._config.targets
        if not any(
            0 <= number < len(lines) and line_may_hold_call(lines[number], targets)
            for number in changed_lines
        ):
            return None
        return await self._run(doc_id, text)

    def on_close(self, doc_id: DocumentId) -> None:
        self._generations[doc_id] = self._generations.get(doc_id, 0) + 1
        task = self._tasks.pop(doc_id, None)
        if task is not None and not task.done():
            task.cancel()
        self._published.pop(doc_id, None)

    def documents(self) -> list[DocumentId]:
        return sorted(self._published)

    def diagnostics(
        self, doc_id: DocumentId, category: DiagnosticCategory | None = None
    ) -> list[Diagnostic]:
        by_category = self._published.get(doc_id, {})
        if category is not None:
            return list(by_category.get(category, []))
        return [diagnostic for findings in by_category.values() for diagnostic in findings]

    async def _run(self, doc_id: DocumentId, text: str) -> DocumentReport | None:
        generation = self._generations.get(doc_id, 0) + 1
        self._generations[doc_id] = generation

        previous = self._tasks.get(doc_id)
        if previous is not None and not previous.done():
            previous.cancel()

        task = asyncio.ensure_future(
            analyze_document(text, doc_id, locator=self._locator, config=self._config)
        )
        self._tasks[doc_id] = task

        try:
            report = await task
        except asyncio.CancelledError:
            if self._generations.get(doc_id) != generation:
                logger.debug("pass_superseded", document=doc_id, generation=generation)
                return None
            raise
        finally:
            if self._tasks.get(doc_id) is task:
                del self._tasks[doc_id]

        if self._generations.get(doc_id) != generation:
            logger.debug("stale_pass_discarded", document=doc_id, generation=generation)
            return None

        self._published[doc_id] = {
            category: list(findings) for category, findings in report.diagnostics.items()
        }
        return report


__all__ = ["DiagnosticsSession", "DocumentId"]
