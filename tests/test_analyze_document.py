from __future__ import annotations

import pytest
from fakes import FakeLocator
from structlog.testing import capture_logs

from binding.analyze import analyze_document
from binding.models import (
    DiagnosticCategory,
    DiagnosticCode,
    Position,
    Severity,
)
from rules.config import SqlbindConfig


async def _analyze(source: str, locator: FakeLocator, config: SqlbindConfig):
    return await analyze_document(source, "repo.ts", locator=locator, config=config)


@pytest.mark.asyncio
async def test_scenario_a_matching_inline_query(config, locator) -> None:
    report = await _analyze(
        'db.query("SELECT * FROM t WHERE id = :id", { id: 1 })\n', locator, config
    )

    assert report.all_diagnostics() == []


@pytest.mark.asyncio
async def test_scenario_b_missing_inline_parameter(config, locator) -> None:
    report = await _analyze(
        'db.query("SELECT * FROM t WHERE id = :id AND name = :name", { id: 1 })\n',
        locator,
        config,
    )

    (diagnostic,) = report.all_diagnostics()
    assert diagnostic.severity is Severity.ERROR
    assert diagnostic.code is DiagnosticCode.MISSING_PARAMETER
    assert diagnostic.message == "Missing parameter [name] for [sql query]."
    assert report.diagnostics[DiagnosticCategory.QUERY_PARAMETERS] == [diagnostic]


@pytest.mark.asyncio
async def test_scenario_c_unused_inline_parameter(config, locator) -> None:
    report = await _analyze(
        'db.query("SELECT * FROM t WHERE id = :id", { id: 1, extra: 2 })\n',
        locator,
        config,
    )

    (diagnostic,) = report.all_diagnostics()
    assert diagnostic.severity is Severity.WARNING
    assert diagnostic.message == "Unused parameter [extra] for [sql query]."


@pytest.mark.asyncio
async def test_scenario_d_missing_sql_file(config) -> None:
    report = await _analyze(
        'db.sql("users.findById", { id: 1 })\n', FakeLocator(), config
    )

    (diagnostic,) = report.all_diagnostics()
    assert diagnostic.code is DiagnosticCode.TARGET_NOT_FOUND
    assert diagnostic.severity is Severity.ERROR
    assert diagnostic.range.start == Position(line=0, character=7)
    assert diagnostic.range.end == Position(line=0, character=23)
    assert report.diagnostics[DiagnosticCategory.TARGET_MISSING] == [diagnostic]
    assert report.diagnostics[DiagnosticCategory.FILE_PARAMETERS] == []


@pytest.mark.asyncio
async def test_scenario_e_spread_suppresses_missing(config, locator) -> None:
    report = await _analyze(
        'db.sql("users.findById", { ...params })\n', locator, config
    )

    assert report.all_diagnostics() == []


@pytest.mark.asyncio
async def test_file_form_missing_and_extra(config, locator) -> None:
    report = await _analyze(
        'db.sql("users.findById", { userId: 1, limit: 2 })\n', locator, config
    )

    missing, extra = report.diagnostics[DiagnosticCategory.FILE_PARAMETERS]
    assert missing.message == "Missing parameter [id] for [users.findById]."
    assert extra.message == "Unused parameters [userId, limit] for [users.findById]."
    assert missing.range == extra.range
    assert missing.range.start == Position(line=0, character=25)


@pytest.mark.asyncio
async def test_fewer_than_two_arguments_produce_nothing(config) -> None:
    locator = FakeLocator()
    report = await _analyze(
        'db.sql("users.findById")\ndb.query("SELECT :id")\n', locator, config
    )

    assert report.all_diagnostics() == []
    assert locator.lookups == []


@pytest.mark.asyncio
async def test_dynamic_parameter_object_is_not_reconciled(config, locator) -> None:
    report = await _analyze(
        'db.sql("users.findById", params)\n'
        'db.query("SELECT * FROM t WHERE id = :id", params)\n',
        locator,
        config,
    )

    assert report.all_diagnostics() == []


@pytest.mark.asyncio
async def test_dynamic_parameter_object_still_reports_missing_file(config) -> None:
    report = await _analyze(
        'db.sql("users.gone", params)\n', FakeLocator(), config
    )

    (diagnostic,) = report.all_diagnostics()
    assert diagnostic.code is DiagnosticCode.TARGET_NOT_FOUND


@pytest.mark.asyncio
async def test_zero_expected_and_zero_supplied_is_clean(config) -> None:
    locator = FakeLocator({"health.ping": "SELECT 1"})

    report = await _analyze(
        'db.sql("health.ping", {})\ndb.query(`SELECT now()`, {})\n', locator, config
    )

    assert report.all_diagnostics() == []


@pytest.mark.asyncio
async def test_parse_failures_are_local_and_distinct(config, locator) -> None:
    locator.files["users.broken"] = "SELECT (1"
    source = (
        'db.sql("users.broken", { id: 1 })\n'
        'db.query("SELECT (1", { id: 1 })\n'
        'db.sql("users.findById", {})\n'
    )

    report = await _analyze(source, locator, config)

    target_missing = report.diagnostics[DiagnosticCategory.TARGET_MISSING]
    query = report.diagnostics[DiagnosticCategory.QUERY_PARAMETERS]
    file_params = report.diagnostics[DiagnosticCategory.FILE_PARAMETERS]
    assert [d.code for d in target_missing] == [DiagnosticCode.SQL_PARSE_FAILURE]
    assert target_missing[0].message.startswith(
        "SQL file [users.broken] could not be parsed:"
    )
    assert [d.code for d in query] == [DiagnosticCode.SQL_PARSE_FAILURE]
    assert [d.message for d in file_params] == [
        "Missing parameter [id] for [users.findById]."
    ]


@pytest.mark.asyncio
async def test_diagnostics_follow_call_site_order_not_completion_order(
    config,
) -> None:
    locator = FakeLocator(
        {
            "slow.key": "SELECT :a",
            "fast.key": "SELECT :b",
        },
        delays={"slow.key": 0.05, "fast.key": 0.0},
    )
    source = 'db.sql("slow.key", {})\ndb.sql("fast.key", {})\n'

    report = await _analyze(source, locator, config)

    messages = [d.message for d in report.diagnostics[DiagnosticCategory.FILE_PARAMETERS]]
    assert messages == [
        "Missing parameter [a] for [slow.key].",
        "Missing parameter [b] for [fast.key].",
    ]


@pytest.mark.asyncio
async def test_analysis_is_idempotent(config, locator) -> None:
    source = (
        'db.sql("users.findById", { id: 1, extra: 2 })\n'
        'db.sql("users.gone", { id: 1 })\n'
        'db.query("SELECT :a, :b", { a: 1 })\n'
    )

    first = await _analyze(source, locator, config)
    second = await _analyze(source, locator, config)

    assert first == second
    assert len(first.all_diagnostics()) == 3


@pytest.mark.asyncio
async def test_every_category_present_when_clean(config, locator) -> None:
    report = await _analyze("const x = 1\n", locator, config)

    assert set(report.diagnostics) == set(DiagnosticCategory)
    assert not report.has_errors


@pytest.mark.asyncio
async def test_call_statement_parameters_are_checked(config) -> None:
    locator = FakeLocator({"procs.run": "CALL do_thing(:a, :b)"})

    report = await _analyze(
        'db.sql("procs.run", { a: 1, b: 2 })\ndb.sql("procs.run", { a: 1 })\n',
        locator,
        config,
    )

    assert [d.message for d in report.all_diagnostics()] == [
        "Missing parameter [b] for [procs.run]."
    ]


@pytest.mark.asyncio
async def test_failing_call_site_does_not_abort_document(config, locator) -> None:
    locator.failures["users.boom"] = RuntimeError("locator exploded")
    source = (
        'db.sql("users.boom", { id: 1 })\n'
        'db.sql("missing.key", { id: 1 })\n'
        'db.sql("users.findById", { id: 1, extra: 2 })\n'
    )

    with capture_logs() as logs:
        report = await _analyze(source, locator, config)

    assert [d.message for d in report.all_diagnostics()] == [
        "SQL file [missing.key] not found.",
        "Unused parameter [extra] for [users.findById].",
    ]
    assert [log["event"] for log in logs if log["log_level"] == "error"] == [
        "call_site_analysis_failed"
    ]


@pytest.mark.asyncio
async def test_deeply_nested_sql_is_a_local_parse_failure(config) -> None:
    nested = "SELECT " + "(" * 3000 + ":a" + ")" * 3000
    locator = FakeLocator({"deep.q": nested})
    source = 'db.sql("deep.q", { a: 1 })\ndb.sql("missing.key", { a: 1 })\n'

    report = await _analyze(source, locator, config)

    assert [d.code for d in report.all_diagnostics()] == [
        DiagnosticCode.SQL_PARSE_FAILURE,
        DiagnosticCode.TARGET_NOT_FOUND,
    ]
