"""Tree-sitter based location of parameterized-query call sites.

A call site qualifies when its callee is a member access whose name is one of
the configured targets (``db.sql(...)``, ``this.pg.query(...)``), its first
argument is a literal string without interpolation and it has at least two
arguments. The second argument is inspected only when it is an object
literal (a Python ``dict`` display for Python sources).
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import TYPE_CHECKING

from binding.models import (
    CallForm,
    CallSite,
    Position,
    SourceRange,
    SuppliedParameters,
)
from log import get_logger
from parse.languages import SourceLanguage, get_parser, language_for_path

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping
    from pathlib import PurePath

    from tree_sitter import Node, Point

    from rules.config import TargetsConfig

logger = get_logger(__name__)


@dataclass(frozen=True)
class _Grammar:
    call: str
    member: str
    member_name_field: str
    object_literal: str


_JS_GRAMMAR = _Grammar(
    call="call_expression",
    member="member_expression",
    member_name_field="property",
    object_literal="object",
)

_PY_GRAMMAR = _Grammar(
    call="call",
    member="attribute",
    member_name_field="attribute",
    object_literal="dictionary",
)

_ESCAPE_RE = re.compile(
    r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|U[0-9a-fA-F]{8}|x[0-9a-fA-F]{2}"
    r"|N\{[^}]*\}|[0-7]{1,3}|\r\n|[\s\S])"
)

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "\n": "",
    "\r\n": "",
}

# Python keeps the backslash of unrecognized escapes; JS drops it.
_PY_SELF_ESCAPES = frozenset({"\\", "'", '"'})


def _grammar_for(language: SourceLanguage) -> _Grammar:
    return _PY_GRAMMAR if language.is_python else _JS_GRAMMAR


def _decode_node_text(source_bytes: bytes, node: Node) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf8", errors="replace")


def _position(source_bytes: bytes, byte_offset: int, point: Point) -> Position:
    # Tree-sitter columns count bytes; editors count characters.
    line_start = byte_offset - point[1]
    character = len(
        source_bytes[line_start:byte_offset].decode("utf8", errors="replace")
    )
    return Position(line=point[0], character=character)


def _make_range(source_bytes: bytes, node: Node) -> SourceRange:
    return SourceRange(
        start=_position(source_bytes, node.start_byte, node.start_point),
        end=_position(source_bytes, node.end_byte, node.end_point),
    )


def _code_point(digits: str, base: int, fallback: str) -> str:
    try:
        return chr(int(digits, base))
    except ValueError:
        return fallback


def _python_escape(body: str) -> str:
    if body == "a":
        return "\a"
    if body[0] == "U" and len(body) == 9:
        return _code_point(body[1:], 16, "\\" + body)
    if body.startswith("N{"):
        try:
            return unicodedata.lookup(body[2:-1])
        except KeyError:
            return "\\" + body
    if body in _PY_SELF_ESCAPES:
        return body
    return "\\" + body


def _unescape(raw: str, *, python: bool = False) -> str:
    """Apply JS (default) or Python backslash escape sequences to ``raw``."""

    def replace(match: re.Match[str]) -> str:
        body = match.group(1)
        if body in _SIMPLE_ESCAPES:
            return _SIMPLE_ESCAPES[body]
        if body[0] in "01234567":
            return chr(int(body, 8))
        if body.startswith("u{"):
            return ("\\" + body) if python else _code_point(body[2:-1], 16, body)
        if (body[0] == "x" and len(body) == 3) or (body[0] == "u" and len(body) == 5):
            return chr(int(body[1:], 16))
        if python:
            return _python_escape(body)
        return body

    return _ESCAPE_RE.sub(replace, raw)


def _js_literal_text(source_bytes: bytes, node: Node) -> str | None:
    if node.type not in ("string", "template_string"):
        return None
    if any(child.type == "template_substitution" for child in node.children):
        return None
    raw = _decode_node_text(source_bytes, node)
    return _unescape(raw[1:-1])


def _py_literal_text(source_bytes: bytes, node: Node) -> str | None:
    if node.type != "string":
        return None

    start = end = None
    for child in node.children:
        if child.type == "interpolation":
            return None
        if child.type == "string_start":
            start = child
        elif child.type == "string_end":
            end = child
    if start is None or end is None:
        return None

    prefix = _decode_node_text(source_bytes, start).lower()
    if "b" in prefix:
        return None
    content = source_bytes[start.end_byte : end.start_byte].decode(
        "utf8", errors="replace"
    )
    if "r" in prefix:
        return content
    return _unescape(content, python=True)


def literal_text(
    source_bytes: bytes, node: Node, language: SourceLanguage
) -> str | None:
    """Return the decoded text of a string literal node, or None.

    Interpolated templates and f-strings have no static text and return None.
    """
    if language.is_python:
        return _py_literal_text(source_bytes, node)
    return _js_literal_text(source_bytes, node)


def _js_number_key(text: str) -> str:
    """Canonical property name of a numeric key (``1.0`` and ``0x1`` are ``1``)."""
    digits = text.replace("_", "").removesuffix("n")
    try:
        if digits[:2].lower() in ("0x", "0o", "0b"):
            return str(int(digits, 0))
        value = float(digits)
    except ValueError:
        return text
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def _property_key_name(
    source_bytes: bytes, key: Node | None, language: SourceLanguage
) -> str | None:
    if key is None:
        return None
    if language.is_python:
        return _py_literal_text(source_bytes, key)
    if key.type == "property_identifier":
        return _decode_node_text(source_bytes, key)
    if key.type == "number":
        return _js_number_key(_decode_node_text(source_bytes, key))
    if key.type == "string":
        return _js_literal_text(source_bytes, key)
    return None


def extract_parameter_literal(
    source_bytes: bytes, node: Node, language: SourceLanguage
) -> SuppliedParameters | None:
    """Collect the explicitly assigned property names of an object literal.

    Returns None when ``node`` is not an object literal. Spreads, computed keys
    and method definitions are not named and mark the set non-exhaustive.
    """
    grammar = _grammar_for(language)
    if node.type != grammar.object_literal:
        return None

    names: list[str] = []
    exhaustive = True
    for child in node.named_children:
        if child.type == "comment":
            continue
        if child.type == "pair":
            name = _property_key_name(
                source_bytes, child.child_by_field_name("key"), language
            )
            if name is None:
                exhaustive = False
            else:
                names.append(name)
        elif child.type == "shorthand_property_identifier":
            names.append(_decode_node_text(source_bytes, child))
        else:
            exhaustive = False

    return SuppliedParameters(
        names=tuple(names),
        exhaustive=exhaustive,
        range=_make_range(source_bytes, node),
    )


def _call_arguments(node: Node) -> list[Node]:
    arguments_node = node.child_by_field_name("arguments")
    if arguments_node is None or arguments_node.type not in (
        "arguments",
        "argument_list",
    ):
        return []
    return [child for child in arguments_node.named_children if child.type != "comment"]


def _member_name(source_bytes: bytes, node: Node, grammar: _Grammar) -> str | None:
    callee_node = node.child_by_field_name("function")
    if callee_node is None or callee_node.type != grammar.member:
        return None
    name_node = callee_node.child_by_field_name(grammar.member_name_field)
    if name_node is None:
        return None
    return _decode_node_text(source_bytes, name_node)


def _iter_nodes(root: Node) -> Iterator[Node]:
    """Pre-order walk over every node below ``root``."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def _call_site_from_node(
    source_bytes: bytes,
    node: Node,
    language: SourceLanguage,
    targets: Mapping[str, CallForm],
) -> CallSite | None:
    grammar = _grammar_for(language)
    if node.type != grammar.call:
        return None

    target_name = _member_name(source_bytes, node, grammar)
    if target_name is None or target_name not in targets:
        return None

    arguments = _call_arguments(node)
    if len(arguments) < 2:
        return None

    text = literal_text(source_bytes, arguments[0], language)
    if text is None:
        return None

    return CallSite(
        form=targets[target_name],
        target_name=target_name,
        literal_text=text,
        literal_range=_make_range(source_bytes, arguments[0]),
        parameters=extract_parameter_literal(source_bytes, arguments[1], language),
    )


def _locate(
    root: Node,
    source_bytes: bytes,
    language: SourceLanguage,
    targets: Mapping[str, CallForm],
) -> list[CallSite]:
    call_sites: list[CallSite] = []
    for node in _iter_nodes(root):
        call_site = _call_site_from_node(source_bytes, node, language, targets)
        if call_site is not None:
            call_sites.append(call_site)
    return call_sites


def locate_call_sites(
    root: Node,
    source_bytes: bytes,
    language: SourceLanguage,
    target_name: str,
    form: CallForm,
) -> list[CallSite]:
    """Find every qualifying ``.<target_name>(...)`` call below ``root``."""
    return _locate(root, source_bytes, language, {target_name: form})


def locate_document(
    text: str,
    path: str | PurePath,
    targets: TargetsConfig,
    *,
    language: SourceLanguage | None = None,
) -> list[CallSite]:
    """Parse ``text`` and return its file-form and query-form call sites.

    Call sites are ordered by source position. Files whose suffix maps to no
    supported grammar yield an empty list.
    """
    language = language or language_for_path(path)
    if language is None:
        return []

    source_bytes = text.encode("utf8")
    tree = get_parser(language).parse(source_bytes)
    call_sites = _locate(
        tree.root_node,
        source_bytes,
        language,
        {targets.file_call: CallForm.FILE, targets.query_call: CallForm.QUERY},
    )
    logger.debug(
        "call_sites_located",
        path=str(path),
        language=language.value,
        count=len(call_sites),
    )
    return call_sites


__all__ = [
    "extract_parameter_literal",
    "literal_text",
    "locate_call_sites",
    "locate_document",
]
