"""File scanning utilities for sqlbind."""

from __future__ import annotations

import os
from fnmatch import fnmatch
from pathlib import Path
from typing import TYPE_CHECKING, cast

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

from parse.languages import SUFFIX_LANGUAGES

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Iterator

    from rules.config import SqlbindConfig

# Dependency, cache and VCS directories are never searched.
PRUNED_DIRS: frozenset[str] = frozenset(
    (
        ".git",
        ".hg",
        ".svn",
        "node_modules",
        "bower_components",
        ".pnpm-store",
        ".yarn",
        ".next",
        ".nuxt",
        ".turbo",
        "venv",
        ".venv",
        ".tox",
        ".nox",
        "__pycache__",
        ".mypy_cache",
        ".pytest_cache",
        "site-packages",
    )
)


def _should_include_file(
    path: Path,
    directory: Path,
    gitignore_matches: Callable[[str], bool] | None,
    include_patterns: list[str] | None,
    exclude_patterns: list[str] | None,
) -> bool:
    """Check if a file should be included based on all filtering rules."""
    if not path.is_file() or path.is_symlink():
        return False

    if not _is_within_root(path, directory):
        return False

    try:
        rel_path = path.relative_to(directory)
    except ValueError:
        return False

    rel_path_str = rel_path.as_posix()

    if gitignore_matches is not None and gitignore_matches(str(path)):
        return False

    if include_patterns and not any(
        fnmatch(rel_path_str, pat) for pat in include_patterns
    ):
        return False

    has_excluded_match = exclude_patterns and any(
        fnmatch(rel_path_str, pat) for pat in exclude_patterns
    )
    return not has_excluded_match


def _is_within_root(path: Path, root: Path) -> bool:
    """Return True when the resolved path stays within the resolved root."""
    try:
        root_resolved = root.resolve()
        path_resolved = path.resolve()
    except OSError:
        return False

    try:
        path_resolved.relative_to(root_resolved)
    except ValueError:
        return False

    return True


def _walk_files(root: Path, pruned_dirs: Collection[str]) -> Iterator[Path]:
    """Yield every file below ``root`` without descending into pruned dirs."""
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [name for name in dirnames if name not in pruned_dirs]
        base = Path(dirpath)
        for filename in filenames:
            yield base / filename


def _iter_gitignore_files(root: Path) -> list[Path]:
    """Return sorted list of .gitignore files under root (including root)."""
    unique_paths = {
        path
        for path in _walk_files(root, PRUNED_DIRS)
        if path.name == ".gitignore" and path.is_file()
    }
    return sorted(unique_paths, key=lambda p: p.relative_to(root).as_posix())


def _build_gitignore_matcher(
    root: Path,
    *,
    nested_gitignore: bool,
) -> Callable[[str], bool] | None:
    if not nested_gitignore:
        gitignore_path = root / ".gitignore"
        if gitignore_path.is_file():
            return cast("Callable[[str], bool]", parse_gitignore(gitignore_path))
        return None

    gitignore_paths = _iter_gitignore_files(root)
    if not gitignore_paths:
        return None

    matchers = [parse_gitignore(path) for path in gitignore_paths]

    def matches(path_str: str) -> bool:
        for matcher in matchers:
            try:
                if matcher(path_str):
                    return True
            except ValueError:
                continue
        return False

    return matches


def find_files(
    directory: Path,
    *,
    suffixes: Collection[str],
    include_patterns: list[str] | None = None,
    exclude_patterns: list[str] | None = None,
    nested_gitignore: bool = False,
    pruned_dirs: Collection[str] = PRUNED_DIRS,
) -> Iterator[Path]:
    """Find files with one of ``suffixes`` in a directory, respecting .gitignore.

    Args:
        directory: Directory to search
        suffixes: Lowercase file suffixes to keep (e.g. {".ts", ".sql"})
        include_patterns: Optional list of fnmatch patterns; if provided,
            files must match at least one pattern to be included
        exclude_patterns: Optional list of fnmatch patterns; files matching
            any pattern are excluded
        nested_gitignore: Compose every .gitignore below ``directory``
        pruned_dirs: Directory names that are never descended into

    Yields:
        Path objects for each matching file, sorted lexicographically
        by relative path for deterministic ordering.
    """
    gitignore_matches = _build_gitignore_matcher(
        directory,
        nested_gitignore=nested_gitignore,
    )

    matched_files = [
        path
        for path in _walk_files(directory, pruned_dirs)
        if path.suffix.lower() in suffixes
        and _should_include_file(
            path,
            directory,
            gitignore_matches,
            include_patterns,
            exclude_patterns,
        )
    ]

    matched_files.sort(key=lambda p: p.relative_to(directory).as_posix())

    yield from matched_files


def find_source_files(directory: Path, config: SqlbindConfig) -> Iterator[Path]:
    """Find source files of every supported language under ``directory``."""
    yield from find_files(
        directory,
        suffixes=frozenset(SUFFIX_LANGUAGES),
        include_patterns=config.include,
        exclude_patterns=config.exclude,
        nested_gitignore=config.nested_gitignore,
    )


__all__ = ["PRUNED_DIRS", "_should_include_file", "find_files", "find_source_files"]
