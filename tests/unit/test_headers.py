from __future__ import annotations

import pytest

from employee_import.excel.headers import clean_header, fold, normalize_header
from employee_import.models.config_models import DEFAULT_HEADER_ALIASES


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("sede", "sede"),
        ("Centro", "sede"),
        ("  Fecha de Ingreso ", "fecha_de_ingreso"),
        ("Área", "area"),
        ("AREA", "area"),
        ("Campaña", "campana"),
        ("Numero de Empleado", "numero_empleado"),
        ("Número de empleado", "numero_empleado"),
        ("Jefe   Inmediato", "jefe_inmediato"),
        ("Puesto específico", "puesto_especifico"),
        ("Nombre", "nombre_completo"),
    ],
)
def test_normalize_header_maps_aliases_to_canonical_keys(raw, expected):
    assert normalize_header(raw) == expected


def test_unmatched_header_passes_through_cleaned():
    assert normalize_header("Teléfono Celular") == "teléfono_celular"


def test_clean_header_drops_punctuation():
    assert clean_header("Puesto (específico)!") == "puesto_específico"


def test_none_header_is_empty():
    assert normalize_header(None) == ""


def test_fold_is_case_and_accent_insensitive():
    assert fold("  Área ") == "area"
    assert fold("CAMPAÑA") == "campana"


def test_configured_aliases_extend_the_table():
    table = DEFAULT_HEADER_ALIASES.extended({"sede": ["Plaza Comercial"]})
    assert normalize_header("plaza comercial", table) == "sede"
    # built-ins still match
    assert normalize_header("Centro", table) == "sede"
    # the default table itself is untouched
    assert normalize_header("plaza comercial") == "plaza_comercial"


def test_extended_rejects_unknown_keys():
    with pytest.raises(KeyError):
        DEFAULT_HEADER_ALIASES.extended({"salario": ["sueldo"]})
