"""Named-parameter extraction from SQL text using sqlglot.

Only colon-style named placeholders (``:name``) count as parameters. They are
read from the sqlglot token stream, so casts (``::int``), string literals and
comments never produce parameters, and statements sqlglot only understands as
opaque commands (``CALL``, ``VACUUM``) keep theirs. Parsing the statements is
what decides whether the text is valid SQL at all.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import sqlglot
from sqlglot.errors import ParseError, TokenError
from sqlglot.tokens import Token, TokenType

from errors import SqlbindError

DEFAULT_DIALECT = "postgres"

_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_$]*")

# A colon glued to one of these is a slice or path separator, not a placeholder.
_OPERAND_TOKENS = frozenset(
    {
        TokenType.VAR,
        TokenType.IDENTIFIER,
        TokenType.NUMBER,
        TokenType.R_BRACKET,
        TokenType.R_PAREN,
    }
)


@dataclass(frozen=True)
class SqlParameter:
    name: str


class SqlParseError(SqlbindError):
    """Raised when SQL text cannot be tokenized or parsed."""


def _describe(exc: ParseError) -> str:
    # str(exc) embeds ANSI-highlighted context; keep the first plain description.
    if exc.errors:
        error = exc.errors[0]
        description = error.get("description") or "Invalid SQL"
        line, col = error.get("line"), error.get("col")
        if line is not None and col is not None:
            return f"{description} (line {line}, col {col})"
        return str(description)
    return str(exc).splitlines()[0] if str(exc) else "Invalid SQL"


def _adjacent(left: Token, right: Token) -> bool:
    return right.start == left.end + 1


def _placeholder_names(tokens: list[Token]) -> list[str]:
    """Distinct ``:name`` placeholders in first-occurrence order."""
    names: list[str] = []
    for index, token in enumerate(tokens[:-1]):
        if token.token_type != TokenType.COLON:
            continue
        following = tokens[index + 1]
        if not _adjacent(token, following) or not _NAME_RE.fullmatch(following.text):
            continue
        if index > 0:
            previous = tokens[index - 1]
            if previous.token_type in _OPERAND_TOKENS and _adjacent(previous, token):
                continue
        if following.text not in names:
            names.append(following.text)
    return names


def parse_sql_parameters(
    sql_text: str, dialect: str = DEFAULT_DIALECT
) -> list[SqlParameter]:
    """Return the distinct named parameters referenced in ``sql_text``.

    Parameters are listed in first-occurrence order with duplicates collapsed.

    Raises:
        SqlParseError: If sqlglot cannot tokenize or parse the text.
    """
    if not sql_text.strip():
        return []

    try:
        tokens = sqlglot.tokenize(sql_text, read=dialect)
        sqlglot.parse(sql_text, read=dialect)
    except ParseError as exc:
        raise SqlParseError(_describe(exc)) from exc
    except TokenError as exc:
        raise SqlParseError(str(exc)) from exc
    except RecursionError as exc:
        raise SqlParseError("SQL is nested too deeply to parse") from exc

    return [SqlParameter(name=name) for name in _placeholder_names(tokens)]


__all__ = ["DEFAULT_DIALECT", "SqlParameter", "SqlParseError", "parse_sql_parameters"]
