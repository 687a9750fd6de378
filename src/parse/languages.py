"""Tree-sitter grammar selection for supported source languages."""

from __future__ import annotations

from enum import Enum
from pathlib import PurePath

import tree_sitter_javascript
import tree_sitter_python
import tree_sitter_typescript
from tree_sitter import Language, Parser

from errors import SqlbindError


class SourceLanguage(str, Enum):
    TYPESCRIPT = "typescript"
    TSX = "tsx"
    JAVASCRIPT = "javascript"
    PYTHON = "python"

    @property
    def is_python(self) -> bool:
        return self is SourceLanguage.PYTHON


SUFFIX_LANGUAGES: dict[str, SourceLanguage] = {
    ".ts": SourceLanguage.TYPESCRIPT,
    ".mts": SourceLanguage.TYPESCRIPT,
    ".cts": SourceLanguage.TYPESCRIPT,
    ".tsx": SourceLanguage.TSX,
    ".js": SourceLanguage.JAVASCRIPT,
    ".mjs": SourceLanguage.JAVASCRIPT,
    ".cjs": SourceLanguage.JAVASCRIPT,
    ".jsx": SourceLanguage.JAVASCRIPT,
    ".py": SourceLanguage.PYTHON,
}

_PARSERS: dict[SourceLanguage, Parser] = {}


class UnsupportedLanguageError(SqlbindError):
    """Raised when a file suffix maps to no supported grammar."""


def _load_language(language: SourceLanguage) -> Language:
    if language is SourceLanguage.TYPESCRIPT:
        return Language(tree_sitter_typescript.language_typescript())
    if language is SourceLanguage.TSX:
        return Language(tree_sitter_typescript.language_tsx())
    if language is SourceLanguage.JAVASCRIPT:
        return Language(tree_sitter_javascript.language())
    return Language(tree_sitter_python.language())


def get_parser(language: SourceLanguage) -> Parser:
    """Return the cached Tree-sitter parser for ``language``."""
    parser = _PARSERS.get(language)
    if parser is None:
        parser = Parser(_load_language(language))
        _PARSERS[language] = parser
    return parser


def language_for_path(path: str | PurePath) -> SourceLanguage | None:
    suffix = PurePath(path).suffix.lower()
    return SUFFIX_LANGUAGES.get(suffix)


def require_language(path: str | PurePath) -> SourceLanguage:
    language = language_for_path(path)
    if language is None:
        msg = f"Unsupported source file type: {PurePath(path).name}"
        raise UnsupportedLanguageError(msg)
    return language


__all__ = [
    "SUFFIX_LANGUAGES",
    "SourceLanguage",
    "UnsupportedLanguageError",
    "get_parser",
    "language_for_path",
    "require_language",
]
