"""Parsing utilities for source call sites and SQL parameters."""

from parse.callsites import (
    extract_parameter_literal,
    literal_text,
    locate_call_sites,
    locate_document,
)
from parse.languages import (
    SourceLanguage,
    UnsupportedLanguageError,
    get_parser,
    language_for_path,
)
from parse.sql_params import SqlParameter, SqlParseError, parse_sql_parameters

__all__ = [
    "SourceLanguage",
    "SqlParameter",
    "SqlParseError",
    "UnsupportedLanguageError",
    "extract_parameter_literal",
    "get_parser",
    "language_for_path",
    "literal_text",
    "locate_call_sites",
    "locate_document",
    "parse_sql_parameters",
]
