"""Workspace lookup of SQL files by dotted key."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from log import get_logger
from scan.files import find_files
from utils import DEFAULT_SQL_EXTENSION, key_to_relative_path, path_matches_key

if TYPE_CHECKING:
    from pathlib import Path

    from rules.config import SqlbindConfig

logger = get_logger(__name__)


class SqlFileLocator:
    """Resolve dotted keys such as ``users.findById`` to workspace SQL files.

    Every lookup rescans the workspace so a pass always sees the current
    file tree. Dependency directories are pruned from the search.
    """

    def __init__(
        self,
        root: Path,
        *,
        extension: str = DEFAULT_SQL_EXTENSION,
        exclude_patterns: list[str] | None = None,
        nested_gitignore: bool = False,
    ) -> None:
        self.root = root
        self.extension = extension
        self.exclude_patterns = exclude_patterns or []
        self.nested_gitignore = nested_gitignore

    @classmethod
    def from_config(cls, root: Path, config: SqlbindConfig) -> SqlFileLocator:
        return cls(
            root,
            extension=config.sql_extension,
            exclude_patterns=config.exclude,
            nested_gitignore=config.nested_gitignore,
        )

    def search(self, key: str) -> Path | None:
        """Return the first matching file in relative-path order, or None."""
        key_path = key_to_relative_path(key, self.extension)
        for path in find_files(
            self.root,
            suffixes={self.extension.lower()},
            exclude_patterns=self.exclude_patterns,
            nested_gitignore=self.nested_gitignore,
        ):
            if path_matches_key(path.relative_to(self.root).as_posix(), key_path):
                return path
        return None

    async def find_by_key(self, key: str) -> Path | None:
        path = await asyncio.to_thread(self.search, key)
        logger.debug("sql_file_lookup", key=key, found=str(path) if path else None)
        return path

    async def read_text(self, path: Path) -> str:
        return await asyncio.to_thread(path.read_text, encoding="utf-8")


__all__ = ["SqlFileLocator"]
