from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock, patch

import pandas as pd
import psycopg2
import pytest

from employee_import.cli.__main__ import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS_ALL, main
from employee_import.models.employee import EmployeeRecord
from employee_import.models.processing_result import ImportReport
from employee_import.services.employee_export import HEADINGS


@pytest.fixture()
def offline(monkeypatch, write_config):
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")


@contextmanager
def _fake_cursor(cursor):
    yield cursor


def test_import_success_prints_summary(offline, make_export, capsys):
    path = make_export("alta.csv", [["Ana López"]], headers=["Nombre completo"])
    code = main(["import", str(path)])
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS_ALL
    assert "SUMMARY file=alta.csv rows=1 processed=1 created=1 updated=0 failed=0 warnings=0" in out


def test_import_json_report(offline, temp_workdir, capsys):
    path = temp_workdir / "data" / "alta.csv"
    path.write_text("Nombre completo,Sede\nAna López,\n,Monterrey\n", encoding="utf-8")
    code = main(["import", str(path), "--json"])
    captured = capsys.readouterr()
    payload = json.loads(captured.out)
    assert code == EXIT_PARTIAL_FAILURE
    assert payload["processed"] == 1
    assert payload["failures"][0]["row"] == 3
    assert payload["failures"][0]["attribute"] == "nombre_completo"
    assert "SUMMARY file=alta.csv" in captured.err
    assert "INFO Importing alta.csv" in captured.err


def test_import_writes_failure_report_and_error_log(offline, temp_workdir, make_export, capsys):
    path = make_export("alta.csv", [["", "Monterrey"]], headers=["Nombre completo", "Sede"])
    out_xlsx = temp_workdir / "errores.xlsx"
    code = main(["import", str(path), "--errors-xlsx", str(out_xlsx)])
    assert code == EXIT_PARTIAL_FAILURE
    assert out_xlsx.exists()
    (log,) = (temp_workdir / "logs").glob("errors-*.log")
    record = json.loads(log.read_text(encoding="utf-8").splitlines()[0])
    assert record["error_type"] == "VALIDATION_ERROR"
    assert record["row"] == 2


def test_unsupported_file_is_fatal(offline, temp_workdir, capsys):
    bad = temp_workdir / "data" / "personal.txt"
    bad.write_text("x", encoding="utf-8")
    code = main(["import", str(bad)])
    assert code == EXIT_FATAL
    assert "ERROR file: Formato no soportado" in capsys.readouterr().out
    (log,) = (temp_workdir / "logs").glob("errors-*.log")
    record = json.loads(log.read_text(encoding="utf-8"))
    assert (record["row"], record["error_type"]) == (-1, "FORMAT_ERROR")


def test_missing_explicit_config_is_fatal(temp_workdir, capsys):
    code = main(["--config", "config/otro.yml", "inspect", "x.csv"])
    assert code == EXIT_FATAL
    assert "ERROR config:" in capsys.readouterr().out


def test_inspect_prints_header_mapping(write_config, make_export, employee_row, capsys):
    path = make_export("alta.csv", [employee_row()])
    code = main(["inspect", str(path)])
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS_ALL
    assert "'Número de empleado' -> numero_empleado" in out
    assert "row=2" in out


def test_dry_run_uses_a_rollback_only_store(write_config, make_export, monkeypatch, capsys):
    monkeypatch.delenv("DISABLE_DB_CONNECT", raising=False)
    path = make_export("alta.csv", [["Ana"]], headers=["Nombre completo"])
    cursor = MagicMock()
    with patch("employee_import.cli.__main__.db_cursor", return_value=_fake_cursor(cursor)), \
         patch("employee_import.cli.__main__.import_file", return_value=ImportReport(processed=1, updated=1)) as run:
        code = main(["import", str(path), "--dry-run", "--date", "2024-03-01"])
    assert code == EXIT_SUCCESS_ALL
    store = run.call_args.args[1]
    assert store.dry_run is True
    assert store.cursor is cursor
    assert run.call_args.kwargs["today"] == date(2024, 3, 1)


def test_unreachable_database_is_fatal(write_config, make_export, monkeypatch, capsys):
    monkeypatch.delenv("DISABLE_DB_CONNECT", raising=False)
    path = make_export("alta.csv", [["Ana"]], headers=["Nombre completo"])
    with patch("employee_import.cli.__main__.db_cursor", side_effect=psycopg2.OperationalError("could not connect")):
        code = main(["import", str(path)])
    assert code == EXIT_FATAL
    assert "ERROR database: could not connect" in capsys.readouterr().out


def test_init_db_creates_the_schema(write_config, monkeypatch):
    monkeypatch.delenv("DISABLE_DB_CONNECT", raising=False)
    cursor = MagicMock()
    with patch("employee_import.cli.__main__.db_cursor", return_value=_fake_cursor(cursor)):
        assert main(["init-db"]) == EXIT_SUCCESS_ALL
    assert "CREATE TABLE IF NOT EXISTS" in cursor.execute.call_args.args[0]


def test_bad_date_argument_exits_with_usage_error(write_config):
    with pytest.raises(SystemExit) as e:
        main(["import", "x.csv", "--date", "01/03/2024"])
    assert e.value.code == 2


class TestScheduleCommands:
    @pytest.fixture()
    def seeded(self, offline, store, catalogs):
        emp_id = store.add_employee(EmployeeRecord(employee_number="E1", name="Ana", area_id=catalogs.area))
        with patch("employee_import.cli.__main__.MemoryStore", return_value=store):
            yield emp_id

    def test_assign_then_replace(self, seeded, catalogs, capsys):
        base = ["assign-schedule", "--kind", "user", "--id", str(seeded)]
        assert main([*base, "--schedule-id", str(catalogs.schedule), "--from", "2024-03-01"]) == EXIT_SUCCESS_ALL
        assert main([*base, "--schedule-id", str(catalogs.schedule_late), "--from", "2024-04-01"]) == EXIT_SUCCESS_ALL
        out = capsys.readouterr().out
        assert "created id=" in out
        assert "until=2024-03-31" in out
        assert "replaced id=" in out

    def test_unknown_entity_or_schedule_is_fatal(self, seeded, catalogs, capsys):
        assert main(["assign-schedule", "--kind", "area", "--id", "999", "--schedule-id", str(catalogs.schedule)]) == EXIT_FATAL
        assert main(["assign-schedule", "--kind", "user", "--id", str(seeded), "--schedule-id", "999"]) == EXIT_FATAL
        out = capsys.readouterr().out
        assert "assignable not found: area#999" in out
        assert "schedule not found or inactive: 999" in out

    def test_until_before_from_is_fatal(self, seeded, catalogs):
        code = main([
            "assign-schedule", "--kind", "user", "--id", str(seeded), "--schedule-id", str(catalogs.schedule),
            "--from", "2024-03-01", "--until", "2024-02-01",
        ])
        assert code == EXIT_FATAL

    def test_show_schedule_falls_back_to_area_then_default(self, seeded, store, catalogs, capsys):
        assert main(["show-schedule", "--kind", "user", "--id", str(seeded), "--on", "2024-03-10"]) == EXIT_SUCCESS_ALL
        assert f"effective schedule on 2024-03-10: {catalogs.schedule_default}" in capsys.readouterr().out

        main(["assign-schedule", "--kind", "area", "--id", str(catalogs.area),
              "--schedule-id", str(catalogs.schedule_late), "--from", "2024-03-01"])
        capsys.readouterr()
        main(["show-schedule", "--kind", "user", "--id", str(seeded), "--on", "2024-03-10"])
        assert f"effective schedule on 2024-03-10: {catalogs.schedule_late}" in capsys.readouterr().out

        main(["show-schedule", "--kind", "area", "--id", str(catalogs.area), "--on", "2024-03-10"])
        out = capsys.readouterr().out
        assert "* id=" in out
        assert f"effective schedule on 2024-03-10: {catalogs.schedule_late}" in out


class TestExportCommand:
    @pytest.fixture()
    def seeded(self, offline, store, catalogs):
        active = store.add_employee(EmployeeRecord(employee_number="E1", name="Ana López", area_id=catalogs.area))
        gone = store.add_employee(EmployeeRecord(employee_number="E2", name="Luis Pérez"))
        store.soft_delete_employee(gone)
        with patch("employee_import.cli.__main__.MemoryStore", return_value=store):
            yield active

    def test_export_active_employees(self, seeded, temp_workdir: Path):
        out = temp_workdir / "activos.xlsx"
        assert main(["export", str(out), "--date", "2024-03-01"]) == EXIT_SUCCESS_ALL
        df = pd.read_excel(out, sheet_name="Activos", dtype=str, keep_default_na=False)
        assert list(df.columns) == HEADINGS
        assert df["NÚMERO DE EMPLEADO"].tolist() == ["E1"]
        assert df["ÁREA"].tolist() == ["Operaciones"]
        assert df["HORARIO"].tolist() == ["Por defecto"]

    def test_export_bajas(self, seeded, temp_workdir: Path):
        out = temp_workdir / "bajas.csv"
        assert main(["export", str(out), "--bajas"]) == EXIT_SUCCESS_ALL
        df = pd.read_csv(out, dtype=str, keep_default_na=False, encoding="utf-8-sig")
        assert df["NOMBRE COMPLETO"].tolist() == ["Luis Pérez"]

    def test_unsupported_output_is_fatal(self, seeded, temp_workdir: Path, capsys):
        assert main(["export", str(temp_workdir / "activos.txt")]) == EXIT_FATAL
        assert "ERROR export: unsupported output activos.txt" in capsys.readouterr().out
