from __future__ import annotations

from employee_import.models.processing_result import ImportReport

"""SUMMARY line rendering for an import run.

The renderer produces the body only; ``log_summary`` adds the SUMMARY label.
"""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary(file_name: str, total_rows: int, report: ImportReport) -> str:
    """Render the SUMMARY body.

    Format:
    file={name} rows={total} processed={n} created={n} updated={n}
    failed={n} warnings={n} elapsed_sec={s}

    >>> from employee_import.models.processing_result import ImportReport
    >>> render_summary("alta.csv", 3, ImportReport(processed=2, created=2, elapsed_seconds=1.5))
    'file=alta.csv rows=3 processed=2 created=2 updated=0 failed=0 warnings=0 elapsed_sec=1.5'
    """
    return (
        f"file={file_name} "
        f"rows={total_rows} "
        f"processed={report.processed} "
        f"created={report.created} "
        f"updated={report.updated} "
        f"failed={len(report.failures)} "
        f"warnings={len(report.warnings)} "
        f"elapsed_sec={_format_seconds(report.elapsed_seconds)}"
    )
