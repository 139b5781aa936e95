from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date

import pandas as pd

from employee_import.db.store import Catalog, EmployeeStore
from employee_import.excel.headers import fold
from employee_import.models.row_data import ImportRow, ResolvedRow, StageFailure

"""Catalog resolution: free-text row values -> internal identifiers.

Policy per field:

- ``fecha_de_ingreso``: unparseable -> row fails
- sede, campana, area, puesto_especifico, horario, estatus, tipo_de_ingreso:
  a non-empty value without an active catalog match fails the row, tagged
  with the field; an empty value resolves to None
- ``jefe_inmediato``: no match only adds a warning, the row still commits

Catalog matching is exact after trimming, lowercasing and accent folding.
Resolution stops at the first failing field.
"""

logger = logging.getLogger(__name__)

INVALID_HIRE_DATE = "Fecha de ingreso inválida."
MANAGER_NOT_FOUND = "Jefe inmediato no encontrado: {value}. Se deja sin asignar."

# spreadsheet serial day numbers (1954-10-03 .. 2119-01-07)
_SERIAL_RANGE = (20000, 80000)
_SERIAL = re.compile(r"^\d+(\.\d+)?$")
_ISO = re.compile(r"^\d{4}-\d{1,2}-\d{1,2}([ T].*)?$")
_DAY_FIRST = re.compile(r"^\d{1,2}[/-]\d{1,2}[/-]\d{4}$")


@dataclass(frozen=True)
class CatalogField:
    key: str  # canonical column
    catalog: Catalog
    attr: str  # ResolvedRow attribute
    not_found: str  # message prefix


STRICT_FIELDS = (
    CatalogField("sede", Catalog.SEDE, "sede_id", "Sede no encontrada"),
    CatalogField("campana", Catalog.CAMPAIGN, "campaign_id", "Campaña no encontrada"),
    CatalogField("area", Catalog.AREA, "area_id", "Área no encontrada"),
    CatalogField("puesto_especifico", Catalog.POSITION, "position_id", "Puesto no encontrado"),
    CatalogField("horario", Catalog.SCHEDULE, "schedule_id", "Horario no encontrado"),
    CatalogField("estatus", Catalog.EMPLOYEE_STATUS, "employee_status_id", "Estatus no encontrado"),
    CatalogField("tipo_de_ingreso", Catalog.HIRE_TYPE, "hire_type_id", "Tipo de ingreso no encontrado"),
)


def parse_hire_date(value: str) -> date:
    """Parse an export date.

    Accepts ISO dates (optionally with a time), day-first dates such as
    ``15/01/2024`` or ``15-01-2024`` and spreadsheet serial numbers. Day-first
    is strict: ``01/15/2024`` is rejected, never read month-first.

    Raises:
        ValueError: the value is not a date
    """
    text = value.strip()
    if _SERIAL.match(text):
        serial = float(text)
        if not _SERIAL_RANGE[0] <= serial <= _SERIAL_RANGE[1]:
            raise ValueError(f"not a date: {value!r}")
        ts = pd.to_datetime(serial, unit="D", origin="1899-12-30")
    elif _ISO.match(text):
        ts = pd.to_datetime(text)
    elif _DAY_FIRST.match(text):
        ts = pd.to_datetime(text.replace("-", "/"), format="%d/%m/%Y")
    else:
        raise ValueError(f"not a date: {value!r}")
    if pd.isna(ts):
        raise ValueError(f"not a date: {value!r}")
    return ts.date()


class CatalogIndex:
    """Folded name (and code) -> id for the active entries of one catalog."""

    def __init__(self, catalog: Catalog, store: EmployeeStore) -> None:
        self.catalog = catalog
        self._ids: dict[str, int] = {}
        for entry in sorted(store.load_catalog(catalog), key=lambda e: e.id):
            self._ids.setdefault(fold(entry.name), entry.id)
            if catalog.matches_code and entry.code:
                self._ids.setdefault(fold(entry.code), entry.id)

    def __len__(self) -> int:
        return len(self._ids)

    def lookup(self, value: str) -> int | None:
        value = value.strip()
        if not value:
            return None
        return self._ids.get(fold(value))


class CatalogResolver:
    """Resolves rows against catalog snapshots taken once per resolver.

    Catalogs are read-only for the importer, so one snapshot serves the whole
    batch. Managers are looked up live because earlier rows may create them.
    """

    def __init__(self, store: EmployeeStore) -> None:
        self.store = store
        self._indexes: dict[Catalog, CatalogIndex] = {}

    def index(self, catalog: Catalog) -> CatalogIndex:
        if catalog not in self._indexes:
            self._indexes[catalog] = CatalogIndex(catalog, self.store)
            logger.debug("catalog=%s active_keys=%d", catalog.value, len(self._indexes[catalog]))
        return self._indexes[catalog]

    def preload(self) -> None:
        """Snapshot every catalog up front, before the first row is touched."""
        for catalog_field in STRICT_FIELDS:
            self.index(catalog_field.catalog)

    def resolve(self, row: ImportRow) -> ResolvedRow | StageFailure:
        resolved: dict[str, object] = {}

        hire_date_str = row.get("fecha_de_ingreso").strip()
        resolved["hire_date"] = None
        if hire_date_str:
            try:
                resolved["hire_date"] = parse_hire_date(hire_date_str)
            except (ValueError, OverflowError):
                return StageFailure(attribute="fecha_de_ingreso", errors=[INVALID_HIRE_DATE])

        for catalog_field in STRICT_FIELDS:
            value = row.get(catalog_field.key).strip()
            found = self.index(catalog_field.catalog).lookup(value)
            if found is None and value:
                return StageFailure(attribute=catalog_field.key, errors=[f"{catalog_field.not_found}: {value}"])
            resolved[catalog_field.attr] = found

        warnings: list[str] = []
        manager = row.get("jefe_inmediato").strip()
        resolved["manager_id"] = None
        if manager:
            resolved["manager_id"] = self.store.find_active_employee_id_by_name(manager)
            if resolved["manager_id"] is None:
                warnings.append(MANAGER_NOT_FOUND.format(value=manager))

        return ResolvedRow(warnings=warnings, **resolved)  # type: ignore[arg-type]

    def schedule_id_by_name(self, name: str) -> int | None:
        return self.index(Catalog.SCHEDULE).lookup(name)
