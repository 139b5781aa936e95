from __future__ import annotations

import argparse
import json
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from pathlib import Path

import psycopg2
from dotenv import load_dotenv

from employee_import.config.loader import ConfigError, load_config
from employee_import.db.connection import db_cursor
from employee_import.db.memory_store import MemoryStore
from employee_import.db.postgres_store import PostgresStore
from employee_import.db.store import Catalog, EmployeeStore
from employee_import.excel.reader import FormatError, read_table
from employee_import.logging.error_log import ErrorLogBuffer
from employee_import.logging.init import log_summary, setup_logging
from employee_import.models.assignment import AssignableKind, AssignableRef
from employee_import.models.config_models import ImportConfig
from employee_import.models.error_record import ErrorRecord
from employee_import.services.catalog_resolver import CatalogResolver
from employee_import.services.employee_export import EXPORT_EXTENSIONS, export_employees
from employee_import.services.error_report import write_failure_report
from employee_import.services.orchestrator import import_file, local_today
from employee_import.services.schedule_versioner import ONE_DAY, ScheduleVersioner
from employee_import.services.summary import render_summary

"""CLI entrypoint.

Subcommands:
- import: one CSV/XLSX/XLS export -> PostgreSQL, report on stdout
- assign-schedule / show-schedule: manual schedule versioning
- export: active or soft-deleted employees in the import (master) format
- inspect: normalized headers and sample rows, no database
- init-db: create the tables

Exit codes: 0 all rows processed, 2 some rows failed, 1 fatal.
``DISABLE_DB_CONNECT=1`` runs against an empty in-memory store. With
``import --json`` stdout carries only the JSON report; log lines go to stderr.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

INSPECT_SAMPLE_ROWS = 3


@contextmanager
def _open_store(cfg: ImportConfig, dry_run: bool = False) -> Iterator[EmployeeStore]:
    """Yield the store for this run: PostgreSQL, or in-memory when disabled via env."""
    if os.getenv("DISABLE_DB_CONNECT") == "1":
        yield MemoryStore()
        return
    with db_cursor(cfg.database) as cur:
        yield PostgresStore(cur, dry_run=dry_run)


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO date (YYYY-MM-DD): {value}") from None


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="employee-import", description="Employee master-data importer")
    p.add_argument("--config", type=Path, default=None, help="Config file (default: config/import.yml)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="Import a CSV/XLSX/XLS personnel export")
    imp.add_argument("file", type=Path)
    imp.add_argument("--dry-run", action="store_true", help="Process every row, then roll it back")
    imp.add_argument("--errors-xlsx", type=Path, default=None, help="Write failed rows to this .xlsx")
    imp.add_argument("--json", action="store_true", help="Print the report as JSON")
    imp.add_argument("--date", type=_iso_date, default=None, help="Effective date for schedule assignments")

    assign = sub.add_parser("assign-schedule", help="Assign a schedule to a user, area or campaign")
    assign.add_argument("--kind", required=True, choices=[k.value for k in AssignableKind])
    assign.add_argument("--id", type=int, required=True, dest="entity_id")
    assign.add_argument("--schedule-id", type=int, required=True)
    assign.add_argument("--from", type=_iso_date, default=None, dest="valid_from")
    assign.add_argument("--until", type=_iso_date, default=None, dest="valid_until")

    show = sub.add_parser("show-schedule", help="Print the schedule history of an entity")
    show.add_argument("--kind", required=True, choices=[k.value for k in AssignableKind])
    show.add_argument("--id", type=int, required=True, dest="entity_id")
    show.add_argument("--on", type=_iso_date, default=None)

    export = sub.add_parser("export", help="Export employees in the import (master) format")
    export.add_argument("output", type=Path, help="Output .xlsx or .csv path")
    export.add_argument("--bajas", action="store_true", help="Export soft-deleted employees instead of active ones")
    export.add_argument("--date", type=_iso_date, default=None, help="Date for the HORARIO column (default: today)")

    inspect = sub.add_parser("inspect", help="Print normalized headers and the first rows")
    inspect.add_argument("file", type=Path)

    sub.add_parser("init-db", help="Create the importer tables")
    return p.parse_args(argv)


def _cmd_import(args: argparse.Namespace, cfg: ImportConfig, logger) -> int:
    error_log = ErrorLogBuffer(Path(cfg.log_directory))
    if args.dry_run:
        logger.info("dry run: every row transaction is rolled back")
    try:
        with _open_store(cfg, dry_run=args.dry_run) as store:
            report = import_file(args.file, store, cfg, today=args.date, error_log=error_log)
    except FormatError as e:
        # row -1: the file never got as far as its rows
        error_log.append(ErrorRecord.create(args.file.name, -1, "file", "FORMAT_ERROR", str(e)))
        error_log.flush()
        raise

    if args.json:
        print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
    else:
        for f in report.failures:
            print(f"row={f.row} attribute={f.attribute} errors={'; '.join(f.errors)}")
        for w in report.warnings:
            print(f"row={w.row} warning={w.message}")

    if args.errors_xlsx is not None and report.failures:
        write_failure_report(report.failures, args.errors_xlsx)
        logger.info(f"failure report written to {args.errors_xlsx}")

    total_rows = report.processed + report.failed_rows
    log_summary(render_summary(args.file.name, total_rows, report))

    if report.failures:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def _cmd_assign_schedule(args: argparse.Namespace, cfg: ImportConfig, logger) -> int:
    ref = AssignableRef(AssignableKind.parse(args.kind), args.entity_id)
    effective = args.valid_from or local_today(cfg.timezone)
    with _open_store(cfg) as store:
        if not store.entity_exists(ref):
            logger.error(f"assignable not found: {ref}")
            return EXIT_FATAL
        if not any(e.id == args.schedule_id for e in store.load_catalog(Catalog.SCHEDULE)):
            logger.error(f"schedule not found or inactive: {args.schedule_id}")
            return EXIT_FATAL
        try:
            result = ScheduleVersioner(store).assign(ref, args.schedule_id, effective, args.valid_until)
        except ValueError as e:
            logger.error(str(e))
            return EXIT_FATAL

    a = result.assignment
    if result.closed is not None:
        print(f"closed id={result.closed.id} schedule={result.closed.schedule_id} until={effective - ONE_DAY}")
    print(f"{result.outcome.value} id={a.id} schedule={a.schedule_id} from={a.valid_from} until={a.valid_until or '-'}")
    return EXIT_SUCCESS_ALL


def _cmd_show_schedule(args: argparse.Namespace, cfg: ImportConfig, logger) -> int:
    ref = AssignableRef(AssignableKind.parse(args.kind), args.entity_id)
    on = args.on or local_today(cfg.timezone)
    with _open_store(cfg) as store:
        if not store.entity_exists(ref):
            logger.error(f"assignable not found: {ref}")
            return EXIT_FATAL
        versioner = ScheduleVersioner(store)
        for a in versioner.history(ref):
            marker = "*" if a.covers(on) else " "
            print(f"{marker} id={a.id} schedule={a.schedule_id} from={a.valid_from} until={a.valid_until or '-'}")
        if ref.kind is AssignableKind.USER:
            employee = store.get_employee(ref.id)
            default_id = CatalogResolver(store).schedule_id_by_name(cfg.default_schedule)
            effective = versioner.effective_schedule_id(employee, on, default_id)  # type: ignore[arg-type]
        else:
            active = versioner.active_assignment(ref, on)
            effective = active.schedule_id if active else None
    print(f"effective schedule on {on}: {effective if effective is not None else '-'}")
    return EXIT_SUCCESS_ALL


def _cmd_export(args: argparse.Namespace, cfg: ImportConfig, logger) -> int:
    if args.output.suffix.lower() not in EXPORT_EXTENSIONS:
        logger.error(f"export: unsupported output {args.output.name}, use .xlsx or .csv")
        return EXIT_FATAL
    on = args.date or local_today(cfg.timezone)
    with _open_store(cfg) as store:
        default_id = CatalogResolver(store).schedule_id_by_name(cfg.default_schedule)
        export_employees(store, args.output, on, trashed=args.bajas, default_schedule_id=default_id)
    return EXIT_SUCCESS_ALL


def _cmd_inspect(args: argparse.Namespace, cfg: ImportConfig) -> int:
    table = read_table(args.file, cfg.header_aliases)
    print(f"FILE: {args.file.name} data_rows={len(table.rows)}")
    for source, canonical in zip(table.source_columns, table.columns, strict=True):
        print(f"  {source!r} -> {canonical}")
    for row in table.rows[:INSPECT_SAMPLE_ROWS]:
        sample = {k: v for k, v in row.values.items() if v}
        print(f"  row={row.row_number} {json.dumps(sample, ensure_ascii=False)}")
    return EXIT_SUCCESS_ALL


def _cmd_init_db(cfg: ImportConfig, logger) -> int:
    with _open_store(cfg) as store:
        if isinstance(store, PostgresStore):
            store.create_schema()
            logger.info("schema created")
        else:
            logger.info("DB connect disabled; nothing to create")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    # [] must not fall back to sys.argv (pytest's own flags would leak in)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    # --json keeps stdout for the report alone
    stream = sys.stderr if getattr(args, "json", False) else None
    logger = setup_logging(debug=args.debug, stream=stream)
    logger.debug("debug mode enabled")

    # .env wins over the process environment for the DB connection
    if Path(".env").exists():
        load_dotenv(dotenv_path=Path(".env"), override=True)

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    try:
        if args.command == "import":
            return _cmd_import(args, cfg, logger)
        if args.command == "assign-schedule":
            return _cmd_assign_schedule(args, cfg, logger)
        if args.command == "show-schedule":
            return _cmd_show_schedule(args, cfg, logger)
        if args.command == "export":
            return _cmd_export(args, cfg, logger)
        if args.command == "inspect":
            return _cmd_inspect(args, cfg)
        return _cmd_init_db(cfg, logger)
    except FormatError as e:
        logger.error(f"file: {e}")
        return EXIT_FATAL
    except psycopg2.Error as e:
        logger.error(f"database: {e}")
        return EXIT_FATAL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
