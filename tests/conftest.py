# Shared pytest fixtures
from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import date
from pathlib import Path
from types import SimpleNamespace

import pandas as pd
import pytest

from employee_import.db.memory_store import MemoryStore
from employee_import.db.store import Catalog
from employee_import.logging.init import reset_logging

TODAY = date(2024, 3, 1)

HEADERS = [
    "Número de empleado",
    "Nombre completo",
    "Fecha de ingreso",
    "Sede",
    "Campaña",
    "Área",
    "Puesto específico",
    "Horario",
    "Estatus",
    "Tipo de ingreso",
    "Jefe inmediato",
]


@pytest.fixture(autouse=True)
def _fresh_logging() -> Iterator[None]:
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch, tmp_path: Path) -> Path:
    (tmp_path / "config").mkdir()
    (tmp_path / "data").mkdir()
    (tmp_path / "logs").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture()
def sample_config_yaml() -> str:
    return """timezone: America/Mexico_City
default_schedule: Por defecto
log_directory: ./logs
header_aliases:
  sede: [plaza]
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def catalogs(store: MemoryStore) -> SimpleNamespace:
    """Seed one active entry per catalog (plus a few extras) and return their ids."""
    return SimpleNamespace(
        sede=store.add_catalog_entry(Catalog.SEDE, "Monterrey", code="MTY"),
        sede_inactive=store.add_catalog_entry(Catalog.SEDE, "Puebla", code="PUE", is_active=False),
        campaign=store.add_catalog_entry(Catalog.CAMPAIGN, "Ventas Norte"),
        area=store.add_catalog_entry(Catalog.AREA, "Operaciones"),
        area_quality=store.add_catalog_entry(Catalog.AREA, "Calidad"),
        position=store.add_catalog_entry(Catalog.POSITION, "Agente"),
        schedule=store.add_catalog_entry(Catalog.SCHEDULE, "Matutino"),
        schedule_late=store.add_catalog_entry(Catalog.SCHEDULE, "Vespertino"),
        schedule_default=store.add_catalog_entry(Catalog.SCHEDULE, "Por defecto"),
        status=store.add_catalog_entry(Catalog.EMPLOYEE_STATUS, "Activo"),
        hire_type=store.add_catalog_entry(Catalog.HIRE_TYPE, "Nuevo ingreso"),
    )


def _employee_row(overrides: dict[str, str] | None = None) -> list[str]:
    values = {
        "Número de empleado": "E1001",
        "Nombre completo": "Ana López García",
        "Fecha de ingreso": "2024-01-15",
        "Sede": "Monterrey",
        "Campaña": "Ventas Norte",
        "Área": "Operaciones",
        "Puesto específico": "Agente",
        "Horario": "Matutino",
        "Estatus": "Activo",
        "Tipo de ingreso": "Nuevo ingreso",
        "Jefe inmediato": "",
    }
    values.update(overrides or {})
    return [values[h] for h in HEADERS]


@pytest.fixture()
def employee_row() -> Callable[..., list[str]]:
    """Builder of one data row in HEADERS order, valid unless overridden by header name."""
    return _employee_row


@pytest.fixture()
def today() -> date:
    return TODAY


@pytest.fixture()
def make_export(tmp_path: Path) -> Callable[..., Path]:
    """Write a header + rows grid as .csv or .xlsx (by the name's extension)."""

    def _make(name: str, rows: list[list[object]], headers: list[str] | None = None) -> Path:
        path = tmp_path / "data" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        grid = [headers or HEADERS, *rows]
        df = pd.DataFrame(grid)
        if path.suffix == ".csv":
            df.to_csv(path, header=False, index=False, encoding="utf-8")
        else:
            with pd.ExcelWriter(path, engine="openpyxl") as writer:
                df.to_excel(writer, sheet_name="Personal", header=False, index=False)
        return path

    return _make
