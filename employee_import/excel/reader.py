from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from typing import Any

import pandas as pd

from employee_import.excel.headers import normalize_header
from employee_import.models.config_models import DEFAULT_HEADER_ALIASES, HeaderAliasTable
from employee_import.models.row_data import ImportRow

"""Tabular reader: CSV and spreadsheet adapters.

Both adapters read the whole grid as raw cells with pandas, take row 1 as the
header (normalized through the alias table) and emit one ImportRow per
non-blank data row, numbered by its position in the source file.

Cells are returned as trimmed strings: pandas' NA conversion is disabled so a
literal "NA" or "N/A" in the export stays text, and spreadsheet numbers and
dates are rendered the way an operator would type them (``1001``,
``2024-01-15``).
"""

__all__ = [
    "FormatError",
    "TableData",
    "SUPPORTED_EXTENSIONS",
    "read_table",
    "read_rows",
    "read_csv_rows",
    "read_spreadsheet_rows",
]

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".csv", ".xlsx", ".xls")
CSV_ENCODINGS = ("utf-8-sig", "latin-1")


class FormatError(Exception):
    """Raised when the file extension is unsupported or the file is unreadable."""


@dataclass
class TableData:
    source_columns: list[str]  # header cells as found in the file
    columns: list[str]  # canonical / cleaned keys, same order
    rows: list[ImportRow]


def _cell_to_str(val: Any) -> str:
    if val is None:
        return ""
    if isinstance(val, float):
        if math.isnan(val):
            return ""
        if val.is_integer():
            return str(int(val))
        return str(val)
    if isinstance(val, datetime):  # includes pd.Timestamp
        if pd.isna(val):
            return ""
        if val.time() == time(0, 0):
            return val.date().isoformat()
        return val.isoformat(sep=" ")
    if isinstance(val, date):
        return val.isoformat()
    return str(val).strip()


def _frame_to_table(df: pd.DataFrame, aliases: HeaderAliasTable) -> TableData:
    """Header from the first grid row, ImportRows from the rest."""
    if df.shape[0] == 0:
        return TableData(source_columns=[], columns=[], rows=[])

    source_columns = [_cell_to_str(c) for c in df.iloc[0].tolist()]
    columns = [normalize_header(c, aliases) if c else "" for c in source_columns]

    rows: list[ImportRow] = []
    for offset, raw in enumerate(df.iloc[1:].itertuples(index=False, name=None)):
        cells = [_cell_to_str(v) for v in raw]
        if not any(cells):
            continue  # fully blank rows are not data
        values: dict[str, str] = {key: "" for key in aliases.canonical_keys}
        for key, cell in zip(columns, cells, strict=False):
            if key:
                values[key] = cell
        # header is row 1 -> first data row is 2
        rows.append(ImportRow(row_number=offset + 2, values=values))
    return TableData(source_columns=source_columns, columns=columns, rows=rows)


def _header_width(path: Path, encoding: str) -> int:
    head = pd.read_csv(path, header=None, nrows=1, dtype=str, keep_default_na=False, encoding=encoding)
    return head.shape[1]


def read_csv_rows(path: Path, aliases: HeaderAliasTable = DEFAULT_HEADER_ALIASES) -> TableData:
    """Read a comma separated export, trying UTF-8 first and Latin-1 after.

    The header fixes the column count: cells past it on a data row are
    dropped, so one over-wide record cannot fail the whole file.
    """
    for encoding in CSV_ENCODINGS:
        try:
            width = _header_width(path, encoding)

            def truncate(cells: list[str]) -> list[str]:
                logger.warning("dropping %d cell(s) past the header: %s", len(cells) - width, cells[width:])
                return cells[:width]

            df = pd.read_csv(
                path,
                header=None,
                names=list(range(width)),
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=False,
                encoding=encoding,
                engine="python",
                on_bad_lines=truncate,
            )
        except UnicodeDecodeError:
            continue
        except pd.errors.EmptyDataError:
            return TableData(source_columns=[], columns=[], rows=[])
        except (OSError, ValueError) as e:
            raise FormatError(f"cannot read CSV {path.name}: {e}") from e
        return _frame_to_table(df, aliases)
    raise FormatError(f"cannot decode CSV {path.name}")


def read_spreadsheet_rows(path: Path, aliases: HeaderAliasTable = DEFAULT_HEADER_ALIASES) -> TableData:
    """Read the first sheet of an .xlsx/.xls workbook."""
    try:
        df = pd.read_excel(path, sheet_name=0, header=None, dtype=object, keep_default_na=False)
    except Exception as e:  # openpyxl/xlrd raise a variety of types for corrupt files
        raise FormatError(f"cannot read spreadsheet {path.name}: {e}") from e
    return _frame_to_table(df, aliases)


def read_table(path: Path, aliases: HeaderAliasTable = DEFAULT_HEADER_ALIASES) -> TableData:
    """Dispatch on the file extension.

    Raises:
        FormatError: unsupported extension, missing or unreadable file
    """
    ext = path.suffix.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise FormatError(f"Formato no soportado: '{ext or path.name}'. Use .xlsx, .xls o .csv")
    if not path.is_file():
        raise FormatError(f"file not found: {path}")
    if ext == ".csv":
        return read_csv_rows(path, aliases)
    return read_spreadsheet_rows(path, aliases)


def read_rows(path: Path, aliases: HeaderAliasTable = DEFAULT_HEADER_ALIASES) -> list[ImportRow]:
    return read_table(path, aliases).rows
