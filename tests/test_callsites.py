from __future__ import annotations

import pytest

from binding.models import CallForm, Position
from parse.callsites import locate_call_sites, locate_document
from parse.languages import SourceLanguage, get_parser
from rules.config import TargetsConfig

TARGETS = TargetsConfig()


def _locate(source: str, path: str = "sample.ts"):
    return locate_document(source, path, TARGETS)


@pytest.mark.parametrize(
    ("source", "expected_form", "expected_text"),
    [
        ('db.sql("users.findById", { id: 1 })\n', CallForm.FILE, "users.findById"),
        ("db.sql('users.findById', { id: 1 })\n", CallForm.FILE, "users.findById"),
        (
            'db.query("SELECT * FROM t WHERE id = :id", { id: 1 })\n',
            CallForm.QUERY,
            "SELECT * FROM t WHERE id = :id",
        ),
        ("db.query(`SELECT 1`, {})\n", CallForm.QUERY, "SELECT 1"),
        ('this.pg.sql("a.b", {})\n', CallForm.FILE, "a.b"),
        ('db?.sql("a.b", {})\n', CallForm.FILE, "a.b"),
    ],
)
def test_locate_document_finds_literal_calls(
    source: str, expected_form: CallForm, expected_text: str
) -> None:
    call_sites = _locate(source)

    assert len(call_sites) == 1
    assert call_sites[0].form is expected_form
    assert call_sites[0].literal_text == expected_text


@pytest.mark.parametrize(
    "source",
    [
        'db.sql("users.findById")\n',
        "db.sql(key, { id: 1 })\n",
        "db.query(`SELECT * FROM ${table}`, { id: 1 })\n",
        'sql("users.findById", { id: 1 })\n',
        'db.select("users.findById", { id: 1 })\n',
        'db.sql("a" + "b", { id: 1 })\n',
    ],
)
def test_locate_document_skips_unqualified_calls(source: str) -> None:
    assert _locate(source) == []


def test_locate_document_decodes_escapes() -> None:
    call_sites = _locate('db.query("SELECT \\"x\\"\\nFROM t", { a: 1 })\n')

    assert call_sites[0].literal_text == 'SELECT "x"\nFROM t'


def test_locate_document_recurses_into_nested_constructs() -> None:
    source = """
export const repo = {
  find: async (id: number) => {
    function inner() {
      return db.sql("users.findById", { id })
    }
    return inner()
  },
}
"""
    call_sites = _locate(source)

    assert len(call_sites) == 1
    assert call_sites[0].parameters is not None
    assert call_sites[0].parameters.names == ("id",)
    assert call_sites[0].parameters.exhaustive is True


def test_locate_document_orders_by_source_position() -> None:
    source = (
        'db.query("SELECT :a", { a: 1 })\n'
        'db.sql("first.key", { x: db.sql("second.key", { y: 2 }) })\n'
    )

    call_sites = _locate(source)

    assert [c.literal_text for c in call_sites] == [
        "SELECT :a",
        "first.key",
        "second.key",
    ]


def test_type_arguments_are_allowed() -> None:
    call_sites = _locate('db.query<User>("SELECT 1", { a: 1 })\n')

    assert len(call_sites) == 1
    assert call_sites[0].form is CallForm.QUERY


def test_comments_are_not_arguments() -> None:
    assert _locate('db.sql("a.b" /* params omitted */)\n') == []


def test_parameter_literal_names_and_exhaustiveness() -> None:
    source = "db.sql(\"a.b\", { id: 1, 'user-id': 2, 3: 'x', name })\n"

    parameters = _locate(source)[0].parameters

    assert parameters is not None
    assert parameters.names == ("id", "user-id", "3", "name")
    assert parameters.exhaustive is True


@pytest.mark.parametrize(
    "literal",
    [
        "{ ...params, id: 1 }",
        "{ [key]: 1, id: 1 }",
        "{ id: 1, toJSON() { return 1 } }",
    ],
)
def test_parameter_literal_non_exhaustive(literal: str) -> None:
    parameters = _locate(f'db.sql("a.b", {literal})\n')[0].parameters

    assert parameters is not None
    assert parameters.names == ("id",)
    assert parameters.exhaustive is False


def test_parameter_literal_absent_for_non_object_argument() -> None:
    call_sites = _locate('db.sql("a.b", params)\n')

    assert len(call_sites) == 1
    assert call_sites[0].parameters is None


def test_ranges_cover_key_and_object_literal() -> None:
    call_site = _locate('db.sql("users.findById", { id: 1 })\n')[0]

    assert call_site.literal_range.start == Position(line=0, character=7)
    assert call_site.literal_range.end == Position(line=0, character=23)
    assert call_site.parameters is not None
    assert call_site.parameters.range.start == Position(line=0, character=25)
    assert call_site.parameters.range.end == Position(line=0, character=34)


def test_ranges_count_characters_not_bytes() -> None:
    call_site = _locate('/* é */ db.sql("a.b", { x: 1 })\n')[0]

    assert call_site.literal_range.start == Position(line=0, character=15)


def test_multiline_object_literal_range() -> None:
    source = 'db.sql("a.b", {\n  id: 1,\n  name: 2,\n})\n'

    parameters = _locate(source)[0].parameters

    assert parameters is not None
    assert parameters.range.start == Position(line=0, character=14)
    assert parameters.range.end == Position(line=3, character=1)


def test_javascript_and_tsx_sources() -> None:
    js_sites = _locate('module.exports = () => db.sql("a.b", { id })\n', "repo.js")
    tsx_sites = _locate(
        "export const View = () => <div>{db.query(`SELECT :id`, { id: 1 })}</div>\n",
        "view.tsx",
    )

    assert [c.literal_text for c in js_sites] == ["a.b"]
    assert [c.literal_text for c in tsx_sites] == ["SELECT :id"]


def test_python_sources() -> None:
    source = """
def handler(db, user_id, extra):
    db.sql("users.find_by_id", {"id": user_id, **extra})
    db.query(f"SELECT * FROM {table}", {"id": user_id})
    db.query(r"SELECT '\\d' WHERE id = :id", {"id": user_id, key: 1})
"""
    call_sites = _locate(source, "handlers.py")

    assert [c.literal_text for c in call_sites] == [
        "users.find_by_id",
        "SELECT '\\d' WHERE id = :id",
    ]
    first, second = call_sites
    assert first.parameters is not None
    assert first.parameters.names == ("id",)
    assert first.parameters.exhaustive is False
    assert second.parameters is not None
    assert second.parameters.names == ("id",)
    assert second.parameters.exhaustive is False


def test_unsupported_suffix_yields_nothing() -> None:
    assert _locate('db.sql("a.b", { id: 1 })\n', "notes.txt") == []


def test_custom_target_names() -> None:
    targets = TargetsConfig(file_call="file", query_call="raw")
    source = 'db.file("a.b", { id: 1 })\ndb.sql("c.d", { id: 1 })\ndb.raw("SELECT 1", {})\n'

    call_sites = locate_document(source, "sample.ts", targets)

    assert [(c.form, c.target_name) for c in call_sites] == [
        (CallForm.FILE, "file"),
        (CallForm.QUERY, "raw"),
    ]


def test_locate_call_sites_on_parsed_tree() -> None:
    source_bytes = b'db.query("SELECT 1", {})\ndb.sql("a.b", {})\n'
    tree = get_parser(SourceLanguage.TYPESCRIPT).parse(source_bytes)

    call_sites = locate_call_sites(
        tree.root_node, source_bytes, SourceLanguage.TYPESCRIPT, "sql", CallForm.FILE
    )

    assert [c.literal_text for c in call_sites] == ["a.b"]


def test_javascript_code_point_and_octal_escapes() -> None:
    call_sites = _locate(r'db.query("\u{1F600}\x41\101\U", { a: 1 })' + "\n")

    assert call_sites[0].literal_text == "\U0001F600AAU"


def test_python_escapes() -> None:
    source = r'db.query("\U0001F600 \N{BULLET} \101 \d", {"a": 1})' + "\n"

    call_sites = _locate(source, "handlers.py")

    assert call_sites[0].literal_text == "\U0001F600 • A \\d"


def test_python_byte_strings_are_not_literals() -> None:
    source = 'db.sql(b"users.find", {"id": 1})\ndb.sql("users.find", {b"id": 1, "x": 2})\n'

    call_sites = _locate(source, "handlers.py")

    assert [c.literal_text for c in call_sites] == ["users.find"]
    parameters = call_sites[0].parameters
    assert parameters is not None
    assert parameters.names == ("x",)
    assert parameters.exhaustive is False


def test_numeric_keys_use_canonical_property_names() -> None:
    parameters = _locate('db.sql("a.b", { 1.0: a, 0x10: b, 1.5: c, 7: d })\n')[
        0
    ].parameters

    assert parameters is not None
    assert parameters.names == ("1", "16", "1.5", "7")
    assert parameters.exhaustive is True
