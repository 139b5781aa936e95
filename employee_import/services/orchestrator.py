from __future__ import annotations

import logging
import time
from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo

from employee_import.db.store import EmployeeStore
from employee_import.excel.reader import read_rows
from employee_import.logging.error_log import ErrorLogBuffer
from employee_import.models.config_models import ImportConfig
from employee_import.models.processing_result import Failure, ImportReport, RowWarning
from employee_import.models.row_data import ImportRow, StageFailure
from employee_import.services.catalog_resolver import CatalogResolver
from employee_import.services.progress import RowProgress
from employee_import.services.reconciler import EmployeeReconciler
from employee_import.services.schedule_versioner import ScheduleVersioner
from employee_import.services.validator import validate_row

"""Batch orchestration: one import file -> one ImportReport.

Rows are processed sequentially, each through
validate -> resolve -> upsert (own transaction). A row's problem is recorded
in the report and the batch moves on; only an unreadable/unsupported file
(``FormatError``, raised by the reader before any row work) aborts the run.
"""

logger = logging.getLogger(__name__)


def local_today(timezone: str) -> date:
    """Current date in the configured timezone."""
    return datetime.now(ZoneInfo(timezone)).date()


class RowImporter:
    """Runs the per-row pipeline against one store.

    Holds the batch-scoped collaborators (catalog snapshots, versioner) so a
    batch resolves every row against the same catalogs.
    """

    def __init__(self, store: EmployeeStore, today: date) -> None:
        self.store = store
        self.today = today
        self.resolver = CatalogResolver(store)
        self.versioner = ScheduleVersioner(store)
        self.reconciler = EmployeeReconciler(store, self.versioner)
        self.resolver.preload()

    def process(self, row: ImportRow, report: ImportReport) -> Failure | None:
        """Process one row, recording its outcome in ``report``.

        Returns the Failure appended for the row, if any.
        """
        errors = validate_row(row)
        if errors:
            attribute = next(iter(errors))
            messages = [m for msgs in errors.values() for m in msgs]
            return self._fail(report, row, attribute, messages)

        resolved = self.resolver.resolve(row)
        if isinstance(resolved, StageFailure):
            return self._fail(report, row, resolved.attribute, resolved.errors)

        outcome = self.reconciler.try_upsert(row, resolved, self.today)
        if isinstance(outcome, StageFailure):
            return self._fail(report, row, outcome.attribute, outcome.errors)

        report.record_success(created=outcome.created)
        for message in resolved.warnings:
            report.warnings.append(RowWarning(row=row.row_number, message=message))
            logger.warning("row=%d %s", row.row_number, message)
        return None

    @staticmethod
    def _fail(report: ImportReport, row: ImportRow, attribute: str, errors: list[str]) -> Failure:
        failure = Failure(row=row.row_number, attribute=attribute, errors=list(errors), values=dict(row.values))
        report.failures.append(failure)
        logger.warning("row=%d attribute=%s %s", row.row_number, attribute, "; ".join(errors))
        return failure


def import_rows(
    rows: list[ImportRow],
    store: EmployeeStore,
    today: date,
    error_log: ErrorLogBuffer | None = None,
    source_name: str = "<rows>",
) -> ImportReport:
    """Import already-read rows. An empty list yields the empty-file report."""
    start = time.perf_counter()
    if not rows:
        report = ImportReport.empty_file()
        if error_log is not None:
            error_log.append_failure(source_name, report.failures[0])
        logger.error("file=%s %s", source_name, report.failures[0].errors[0])
        report.elapsed_seconds = time.perf_counter() - start
        return report

    report = ImportReport()
    importer = RowImporter(store, today)
    with RowProgress(len(rows)) as progress:
        for row in rows:
            failure = importer.process(row, report)
            if failure is not None and error_log is not None:
                error_log.append_failure(source_name, failure)
            progress.advance(ok=report.processed, failed=len(report.failures))
    report.elapsed_seconds = time.perf_counter() - start
    return report


def import_file(
    path: Path,
    store: EmployeeStore,
    config: ImportConfig,
    today: date | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> ImportReport:
    """Import one CSV/XLSX/XLS personnel export.

    Args:
        path: source file
        store: persistence collaborator (PostgreSQL or in-memory)
        config: run configuration (header aliases, timezone)
        today: effective date for schedule assignments (default: today in
            ``config.timezone``)
        error_log: optional JSON Lines buffer receiving one record per failure

    Raises:
        FormatError: unsupported extension or unreadable file
    """
    if today is None:
        today = local_today(config.timezone)
    logger.info("Importing %s (effective date %s)", path.name, today.isoformat())
    rows = read_rows(path, config.header_aliases)
    logger.debug("file=%s data_rows=%d", path.name, len(rows))
    report = import_rows(rows, store, today, error_log=error_log, source_name=path.name)
    if error_log is not None:
        try:
            error_log.flush()
        except OSError as e:
            # the report still carries every failure
            logger.error("could not write error log: %s", e)
    return report
