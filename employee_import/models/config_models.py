from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

"""Config dataclasses for the employee master-data importer.

These are the typed, immutable views of ``config/import.yml`` handed to the
services. The loader in ``employee_import.config.loader`` builds them.
"""


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class HeaderAliasTable:
    """Canonical field key -> accepted header synonyms.

    Order matters: the first canonical key whose aliases match wins.
    """
    entries: tuple[tuple[str, tuple[str, ...]], ...]

    @property
    def canonical_keys(self) -> tuple[str, ...]:
        return tuple(key for key, _ in self.entries)

    def aliases_for(self, canonical: str) -> tuple[str, ...]:
        for key, aliases in self.entries:
            if key == canonical:
                return aliases
        raise KeyError(canonical)

    def extended(self, extra: Mapping[str, Iterable[str]]) -> HeaderAliasTable:
        """Return a new table with ``extra`` aliases appended per canonical key."""
        unknown = set(extra) - set(self.canonical_keys)
        if unknown:
            raise KeyError(f"unknown canonical header keys: {sorted(unknown)}")
        entries = []
        for key, aliases in self.entries:
            added = tuple(a for a in extra.get(key, ()) if a not in aliases)
            entries.append((key, aliases + added))
        return HeaderAliasTable(entries=tuple(entries))


DEFAULT_HEADER_ALIASES = HeaderAliasTable(
    entries=(
        ("fecha_de_ingreso", ("fecha_de_ingreso", "fecha ingreso", "fecha de ingreso")),
        ("sede", ("sede", "centro", "ubicacion", "ubicación")),
        ("tipo_de_ingreso", ("tipo_de_ingreso", "tipo ingreso", "tipo de ingreso")),
        ("nombre_completo", ("nombre_completo", "nombre completo", "nombre")),
        ("area", ("area", "área")),
        ("campana", ("campana", "campaña", "campaign")),
        ("puesto_especifico", ("puesto_especifico", "puesto específico", "puesto")),
        ("horario", ("horario", "schedule")),
        ("estatus", ("estatus", "status", "estado")),
        ("jefe_inmediato", ("jefe_inmediato", "jefe inmediato", "jefe")),
        (
            "numero_empleado",
            ("numero_empleado", "número de empleado", "num_empleado", "no_empleado", "id"),
        ),
    )
)


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for an import run."""
    timezone: str  # "today" for schedule assignments (default: "UTC")
    database: DatabaseConfig
    header_aliases: HeaderAliasTable = DEFAULT_HEADER_ALIASES
    default_schedule: str = "Por defecto"  # fallback schedule name for effective lookups
    log_directory: str = "./logs"
