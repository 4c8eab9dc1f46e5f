from __future__ import annotations

from pathlib import Path

import pytest

from tariff_refdata.config.loader import ConfigError, load_config


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.database.host == "localhost"
    assert cfg.database.port == 5432
    assert cfg.database.table == "reference_data"
    assert cfg.cache_ttl_seconds == 300
    assert cfg.snapshot_directory == "./snapshots"
    assert cfg.authorized_actors == frozenset({"admin"})
    assert cfg.extra_synonyms == {"voc": {"exempte": ["Hors VOC"]}}


def test_defaults_for_empty_file(temp_workdir: Path):
    path = temp_workdir / "config" / "refdata.yml"
    path.write_text("", encoding="utf-8")
    cfg = load_config(path)
    assert cfg.database.table == "reference_data"
    assert cfg.cache_ttl_seconds == 300
    assert cfg.logs_directory == "logs"
    assert cfg.authorized_actors == frozenset()


def test_can_mutate(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.can_mutate("admin")
    assert not cfg.can_mutate("guest")
    assert not cfg.can_mutate(None)


def test_missing_config_file(temp_workdir: Path):
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(temp_workdir / "config" / "absent.yml")


def test_invalid_yaml(temp_workdir: Path):
    path = temp_workdir / "config" / "refdata.yml"
    path.write_text("database: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(path)


def test_unknown_synonym_field_rejected(temp_workdir: Path):
    path = temp_workdir / "config" / "refdata.yml"
    path.write_text("extra_synonyms:\n  tec:\n    not_a_field: [x]\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="extra_synonyms"):
        load_config(path)
