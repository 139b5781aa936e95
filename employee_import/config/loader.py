from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from employee_import.models.config_models import (
    DEFAULT_HEADER_ALIASES,
    DatabaseConfig,
    ImportConfig,
)

"""Config loader.

Responsibilities:
- Load YAML ``config/import.yml``
- Validate it against ``config_schema.json`` (shipped next to this module)
- Apply defaults (timezone=UTC, built-in header aliases)
- Build the immutable header alias table once, for injection into the reader
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/import.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or invalid, or the data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _check_timezone(name: str) -> str:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"unknown timezone: {name}") from e
    return name


def config_from_dict(data: dict[str, Any]) -> ImportConfig:
    """Validate a raw mapping and build the ImportConfig."""
    _validate_config_schema(data)

    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    aliases = DEFAULT_HEADER_ALIASES
    if data.get("header_aliases"):
        aliases = aliases.extended(data["header_aliases"])
    return ImportConfig(
        timezone=_check_timezone(data.get("timezone", "UTC")),
        database=db,
        header_aliases=aliases,
        default_schedule=data.get("default_schedule", "Por defecto"),
        log_directory=data.get("log_directory", "./logs"),
    )


def load_config(path: Path | None = None) -> ImportConfig:
    """Load the YAML config file.

    A missing default file is not an error: the built-in defaults apply and the
    connection comes from the environment. An explicitly given path must exist.
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return config_from_dict({})
        path = DEFAULT_CONFIG_PATH
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")
    return config_from_dict(data)
