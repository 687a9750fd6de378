"""Command-line interface for sqlbind."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from binding.analyze import analyze_document
from binding.models import DocumentReport
from binding.report import dumps_reports, format_reports, write_jsonl
from log import configure_logging, get_logger
from parse.languages import UnsupportedLanguageError, require_language
from parse.sql_params import SqlParseError, parse_sql_parameters
from rules.config import ConfigError, SqlbindConfig, load_config
from scan.files import find_source_files
from scan.sql_files import SqlFileLocator

logger = get_logger(__name__)


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Workspace root (default: .)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override the configured log level",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sqlbind")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check", help="Check SQL parameter bindings in source files"
    )
    _add_common_paths(check_parser)
    check_parser.add_argument(
        "--path",
        dest="paths",
        action="append",
        default=None,
        help="Source file to check, relative to root (repeatable; default: all)",
    )
    check_parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format (default: text)",
    )
    check_parser.add_argument(
        "--out",
        default=None,
        help="Also write diagnostics as JSONL to this file",
    )

    resolve_parser = subparsers.add_parser(
        "resolve", help="Show the SQL file and parameters for a dotted key"
    )
    resolve_parser.add_argument("key", help="Dotted SQL key (e.g. users.findById)")
    _add_common_paths(resolve_parser)

    return parser


def _source_paths(root: Path, config: SqlbindConfig, paths: list[str] | None) -> list[Path]:
    if not paths:
        return list(find_source_files(root, config))

    selected: list[Path] = []
    for raw in paths:
        path = Path(raw)
        path = path if path.is_absolute() else root / path
        try:
            require_language(path)
        except UnsupportedLanguageError as exc:
            sys.stderr.write(f"skipping {raw}: {exc}\n")
            continue
        selected.append(path)
    return selected


def _display_path(root: Path, path: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


async def _check_files(
    root: Path, paths: list[Path], config: SqlbindConfig
) -> list[DocumentReport]:
    locator = SqlFileLocator.from_config(root, config)
    reports: list[DocumentReport] = []
    for path in paths:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("source_unreadable", path=str(path), error=str(exc))
            continue
        try:
            report = await analyze_document(
                text, _display_path(root, path), locator=locator, config=config
            )
        except Exception:
            logger.exception("document_analysis_failed", path=str(path))
            continue
        reports.append(report)
    return reports


def _handle_check(
    root: Path,
    config: SqlbindConfig,
    paths: list[str] | None,
    output_format: str,
    out: str | None,
) -> int:
    source_paths = _source_paths(root, config, paths)
    reports = asyncio.run(_check_files(root, source_paths, config))

    if output_format == "json":
        sys.stdout.write(dumps_reports(reports).decode("utf-8") + "\n")
    else:
        for line in format_reports(reports):
            sys.stdout.write(f"{line}\n")

    if out is not None:
        out_path = Path(out).expanduser().resolve()
        out_path.parent.mkdir(parents=True, exist_ok=True)
        write_jsonl(out_path, reports)

    return 1 if any(report.has_errors for report in reports) else 0


def _handle_resolve(root: Path, config: SqlbindConfig, key: str) -> int:
    locator = SqlFileLocator.from_config(root, config)
    path = locator.search(key)
    if path is None:
        sys.stderr.write(f"SQL file [{key}] not found.\n")
        return 1

    sys.stdout.write(f"{_display_path(root, path)}\n")
    try:
        parameters = parse_sql_parameters(
            path.read_text(encoding="utf-8"), config.dialect
        )
    except SqlParseError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    for parameter in parameters:
        sys.stdout.write(f"  :{parameter.name}\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    root = Path(args.root).expanduser().resolve()

    try:
        config = load_config(root)
    except ConfigError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    configure_logging(
        level=args.log_level or config.logging.level,
        log_format=config.logging.format,
    )

    if args.command == "check":
        return _handle_check(root, config, args.paths, args.format, args.out)

    if args.command == "resolve":
        return _handle_resolve(root, config, args.key)

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
