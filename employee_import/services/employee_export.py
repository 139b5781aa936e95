from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

import pandas as pd

from employee_import.db.store import Catalog, EmployeeStore
from employee_import.models.employee import EmployeeRecord
from employee_import.services.schedule_versioner import ScheduleVersioner

"""Master-format employee export.

Writes active (or soft-deleted) employees with the same headings the importer
reads, so an exported file can be edited and imported back. Catalog names are
looked up including inactive entries; the HORARIO column carries the schedule
in effect on the export date. Missing values are left blank.
"""

logger = logging.getLogger(__name__)

HEADINGS = [
    "FECHA DE INGRESO",
    "SEDE",
    "TIPO DE INGRESO",
    "NOMBRE COMPLETO",
    "ÁREA",
    "CAMPAÑA",
    "PUESTO ESPECÍFICO",
    "HORARIO",
    "ESTATUS",
    "JEFE INMEDIATO",
    "NÚMERO DE EMPLEADO",
]
EXPORT_EXTENSIONS = (".xlsx", ".csv")
HIRE_DATE_FORMAT = "%d/%m/%Y"


def sheet_name(trashed: bool) -> str:
    return "Bajas" if trashed else "Activos"


class EmployeeExporter:
    """Builds the export grid from a store."""

    def __init__(self, store: EmployeeStore, on: date, default_schedule_id: int | None = None) -> None:
        self.store = store
        self.on = on
        self.default_schedule_id = default_schedule_id
        self.versioner = ScheduleVersioner(store)
        self._names = {
            catalog: {e.id: e.name for e in store.load_catalog(catalog, include_inactive=True)}
            for catalog in Catalog
        }
        self._managers: dict[int, str] = {}

    def _name(self, catalog: Catalog, entry_id: int | None) -> str:
        if entry_id is None:
            return ""
        return self._names[catalog].get(entry_id, "")

    def _manager_name(self, manager_id: int | None) -> str:
        if manager_id is None:
            return ""
        if manager_id not in self._managers:
            manager = self.store.get_employee(manager_id)
            self._managers[manager_id] = (manager.name or "") if manager else ""
        return self._managers[manager_id]

    def row(self, employee: EmployeeRecord) -> list[str]:
        profile = self.store.get_profile(employee.id)  # type: ignore[arg-type]
        schedule_id = self.versioner.effective_schedule_id(employee, self.on, self.default_schedule_id)
        hire_date = profile.hire_date if profile else None
        return [
            hire_date.strftime(HIRE_DATE_FORMAT) if hire_date else "",
            self._name(Catalog.SEDE, employee.sede_id),
            self._name(Catalog.HIRE_TYPE, profile.hire_type_id if profile else None),
            employee.name or "",
            self._name(Catalog.AREA, employee.area_id),
            self._name(Catalog.CAMPAIGN, employee.campaign_id),
            self._name(Catalog.POSITION, employee.position_id),
            self._name(Catalog.SCHEDULE, schedule_id),
            self._name(Catalog.EMPLOYEE_STATUS, profile.employee_status_id if profile else None),
            self._manager_name(profile.manager_id if profile else None),
            employee.employee_number,
        ]

    def frame(self, trashed: bool = False) -> pd.DataFrame:
        employees = self.store.list_employees(trashed=trashed)
        return pd.DataFrame([self.row(e) for e in employees], columns=HEADINGS)


def write_employee_export(frame: pd.DataFrame, path: Path, trashed: bool = False) -> Path:
    """Write the export as .xlsx (one sheet) or .csv.

    Raises:
        ValueError: unsupported output extension
    """
    ext = path.suffix.lower()
    if ext not in EXPORT_EXTENSIONS:
        raise ValueError(f"Formato de exportación no soportado: '{ext or path.name}'. Use .xlsx o .csv")
    path.parent.mkdir(parents=True, exist_ok=True)
    if ext == ".csv":
        frame.to_csv(path, index=False, encoding="utf-8-sig")
    else:
        name = sheet_name(trashed)
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            frame.to_excel(writer, sheet_name=name, index=False)
            sheet = writer.sheets[name]
            for cells in sheet.iter_cols(min_row=1, max_row=sheet.max_row):
                width = max(len(str(c.value or "")) for c in cells)
                sheet.column_dimensions[cells[0].column_letter].width = min(width + 2, 60)
    logger.info("exported %d employee(s) to %s", len(frame), path)
    return path


def export_employees(
    store: EmployeeStore,
    path: Path,
    on: date,
    trashed: bool = False,
    default_schedule_id: int | None = None,
) -> pd.DataFrame:
    """Export active employees (or the soft-deleted ones) to ``path``."""
    frame = EmployeeExporter(store, on, default_schedule_id).frame(trashed=trashed)
    write_employee_export(frame, path, trashed=trashed)
    return frame
