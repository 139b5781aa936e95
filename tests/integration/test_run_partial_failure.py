from __future__ import annotations

from datetime import date

import pytest

from employee_import.models.config_models import DatabaseConfig, ImportConfig
from employee_import.services.orchestrator import import_file

"""End-to-end batches against the in-memory store: real files in, report out."""


@pytest.fixture()
def cfg() -> ImportConfig:
    return ImportConfig(timezone="UTC", database=DatabaseConfig())


@pytest.mark.parametrize("name", ["alta.csv", "alta.xlsx"])
@pytest.mark.parametrize(
    "bad_index, override, attribute",
    [
        (1, {"Sede": "Sede inexistente"}, "sede"),
        (2, {"Área": "Área inexistente"}, "area"),
    ],
)
def test_one_bad_row_does_not_block_the_others(
    store, catalogs, cfg, make_export, employee_row, name, bad_index, override, attribute
):
    rows = [
        employee_row({"Número de empleado": "E1"}),
        employee_row({"Número de empleado": "E2", "Nombre completo": "Luis Pérez"}),
        employee_row({"Número de empleado": "E3", "Nombre completo": "Eva Ruiz"}),
    ]
    rows[bad_index] = employee_row({"Número de empleado": f"E{bad_index + 1}", **override})
    path = make_export(name, rows)
    report = import_file(path, store, cfg, today=date(2024, 3, 1))

    assert report.processed == 2
    assert report.created == 2
    (failure,) = report.failures
    assert failure.row == bad_index + 2
    assert failure.attribute == attribute
    committed = {"E1", "E2", "E3"} - {f"E{bad_index + 1}"}
    assert {e.employee_number for e in store.employees} == committed


def test_over_wide_csv_row_does_not_abort_the_batch(store, cfg, temp_workdir):
    path = temp_workdir / "data" / "ancho.csv"
    path.write_text(
        "Nombre completo,Sede\nAna Lopez,\nLuis Perez,,extra\nEva Ruiz,\n",
        encoding="utf-8",
    )
    report = import_file(path, store, cfg, today=date(2024, 3, 1))
    assert report.failures == []
    assert report.processed == 3
    assert sorted(e.name for e in store.employees) == ["Ana Lopez", "Eva Ruiz", "Luis Perez"]


def test_missing_name_row_writes_nothing(store, catalogs, cfg, make_export, employee_row):
    path = make_export("sin_nombre.csv", [employee_row({"Nombre completo": ""})])
    report = import_file(path, store, cfg, today=date(2024, 3, 1))
    assert report.processed == 0
    assert [(f.row, f.attribute) for f in report.failures] == [(2, "nombre_completo")]
    assert store.employees == []
    assert store.profiles == []
    assert store.assignments == []


def test_empty_file_reports_a_file_failure(store, cfg, make_export):
    path = make_export("vacio.csv", [])
    report = import_file(path, store, cfg)
    assert report.to_dict() == {
        "processed": 0,
        "created": 0,
        "updated": 0,
        "failures": [
            {"row": 0, "attribute": "file", "errors": ["El archivo no contiene filas de datos."], "values": {}}
        ],
        "warnings": [],
    }
