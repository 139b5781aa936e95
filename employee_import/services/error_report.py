from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from employee_import.models.processing_result import Failure

"""Failure report export: the batch failures as a spreadsheet operators can fix and re-import."""

SHEET_NAME = "Errores de importación"
COLUMNS = ["Fila", "Campo", "Errores", "Valores (JSON)"]


def failures_frame(failures: Sequence[Failure]) -> pd.DataFrame:
    records = [
        [
            f.row,
            f.attribute,
            "; ".join(f.errors),
            json.dumps(f.values, ensure_ascii=False) if f.values else "",
        ]
        for f in failures
    ]
    return pd.DataFrame(records, columns=COLUMNS)


def write_failure_report(failures: Sequence[Failure], path: Path) -> Path:
    """Write ``failures`` to an .xlsx file.

    Raises:
        ValueError: there is nothing to export
    """
    if not failures:
        raise ValueError("No hay datos de errores para exportar.")
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        failures_frame(failures).to_excel(writer, sheet_name=SHEET_NAME, index=False)
        sheet = writer.sheets[SHEET_NAME]
        for column, width in zip("ABCD", (8, 20, 50, 60), strict=True):
            sheet.column_dimensions[column].width = width
    return path
