#!/usr/bin/env python3
"""Synthetic personnel export generator.

Writes a CSV or XLSX file shaped like the HR exports the importer consumes:
row 1 holds the Spanish headers, every following row one employee. Catalog
values are drawn from small fixed lists, so seed the database with the same
names (see ``--print-catalogs``) before importing the file.

A share of rows can be made deliberately broken (unknown area, empty name,
bad hire date) to exercise partial-failure runs.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd

HEADERS = [
    "Número de empleado",
    "Nombre completo",
    "Fecha de ingreso",
    "Centro",
    "Campaña",
    "Área",
    "Puesto específico",
    "Horario",
    "Estatus",
    "Tipo de ingreso",
    "Jefe inmediato",
]

CATALOGS: dict[str, list[str]] = {
    "Centro": ["Monterrey", "Guadalajara", "CDMX Norte"],
    "Campaña": ["Ventas Norte", "Cobranza", "Soporte"],
    "Área": ["Operaciones", "Calidad", "Recursos Humanos"],
    "Puesto específico": ["Agente", "Supervisor", "Analista"],
    "Horario": ["Matutino", "Vespertino", "Mixto"],
    "Estatus": ["Activo", "Incapacidad"],
    "Tipo de ingreso": ["Nuevo ingreso", "Reingreso"],
}

FIRST_NAMES = ["Ana", "Luis", "María José", "Carlos", "Lucía", "Jorge", "Sofía", "Diego"]
LAST_NAMES = ["López", "García", "Hernández", "Martínez", "Pérez", "Ramírez", "Torres", "Núñez"]


def generate_employees(rows: int, broken_ratio: float = 0.0, seed: int = 42) -> pd.DataFrame:
    """Build the export as a DataFrame with the source headers as columns."""
    rng = np.random.default_rng(seed)

    names = [
        f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)} {rng.choice(LAST_NAMES)}"
        for _ in range(rows)
    ]
    hire_dates = pd.to_datetime("2015-01-01") + pd.to_timedelta(rng.integers(0, 3650, rows), unit="D")
    data: dict[str, list[str]] = {
        "Número de empleado": [f"E{100000 + i}" for i in range(rows)],
        "Nombre completo": names,
        "Fecha de ingreso": [d.strftime("%d/%m/%Y") for d in hire_dates],
    }
    for header, values in CATALOGS.items():
        data[header] = rng.choice(values, rows).tolist()
    # first employee leads everybody else
    data["Jefe inmediato"] = [""] + [names[0]] * (rows - 1)

    df = pd.DataFrame(data, columns=HEADERS)
    if broken_ratio > 0:
        broken = rng.choice(rows, size=int(rows * broken_ratio), replace=False)
        for n, idx in enumerate(broken):
            kind = n % 3
            if kind == 0:
                df.at[idx, "Área"] = "Área inexistente"
            elif kind == 1:
                df.at[idx, "Nombre completo"] = ""
            else:
                df.at[idx, "Fecha de ingreso"] = "no es fecha"
    return df


def write_export(df: pd.DataFrame, output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if output_path.suffix.lower() == ".csv":
        df.to_csv(output_path, index=False, encoding="utf-8-sig")
    else:
        df.to_excel(output_path, index=False, engine="openpyxl")
    print(f"Created export: {output_path} ({len(df):,} rows)")


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate a synthetic personnel export")
    parser.add_argument("output", type=Path, help="Output .csv or .xlsx path")
    parser.add_argument("--rows", type=int, default=1_000, help="Number of employees (default: 1,000)")
    parser.add_argument("--broken-ratio", type=float, default=0.0, help="Share of rows made invalid (0-1)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--print-catalogs", action="store_true", help="Print the catalog names used and exit")
    args = parser.parse_args()

    if args.print_catalogs:
        for header, values in CATALOGS.items():
            print(f"{header}: {', '.join(values)}")
        return 0
    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1
    if not 0 <= args.broken_ratio <= 1:
        print("Error: --broken-ratio must be between 0 and 1", file=sys.stderr)
        return 1
    if args.output.suffix.lower() not in (".csv", ".xlsx"):
        print("Error: output must end in .csv or .xlsx", file=sys.stderr)
        return 1

    write_export(generate_employees(args.rows, args.broken_ratio, args.seed), args.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
