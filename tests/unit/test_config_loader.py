from __future__ import annotations

from pathlib import Path

import pytest

from employee_import.config.loader import ConfigError, config_from_dict, load_config
from employee_import.excel.headers import normalize_header


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.timezone == "America/Mexico_City"
    assert cfg.default_schedule == "Por defecto"
    assert cfg.database.user == "appuser"
    assert cfg.database.port == 5432
    assert "plaza" in cfg.header_aliases.aliases_for("sede")
    assert normalize_header("Plaza", cfg.header_aliases) == "sede"


def test_defaults_apply_without_a_config_file(temp_workdir: Path):
    cfg = load_config()
    assert cfg.timezone == "UTC"
    assert cfg.log_directory == "./logs"
    assert cfg.database.host is None


def test_explicit_missing_file_is_an_error(temp_workdir: Path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(temp_workdir / "config" / "not_exists.yml")


def test_extra_field_is_rejected(write_config: Path):
    write_config.write_text(write_config.read_text(encoding="utf-8") + "\nsource_directory: ./data\n", encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "config validation failed" in str(e.value)


def test_unknown_alias_key_is_rejected():
    with pytest.raises(ConfigError, match="config validation failed"):
        config_from_dict({"header_aliases": {"salario": ["sueldo"]}})


def test_unknown_timezone_is_rejected():
    with pytest.raises(ConfigError, match="unknown timezone"):
        config_from_dict({"timezone": "Mars/Olympus"})


def test_invalid_yaml(write_config: Path):
    write_config.write_text("timezone: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(write_config)


def test_non_mapping_root(write_config: Path):
    write_config.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(write_config)
