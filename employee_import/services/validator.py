from __future__ import annotations

from employee_import.models.row_data import ImportRow

"""Row validation: cheap presence checks that run before any catalog lookup."""

NAME_REQUIRED = "El nombre completo es obligatorio."


def validate_row(row: ImportRow) -> dict[str, list[str]]:
    """Return attribute -> error messages; an empty mapping means the row is valid."""
    errors: dict[str, list[str]] = {}
    if not row.get("nombre_completo").strip():
        errors["nombre_completo"] = [NAME_REQUIRED]
    return errors
