from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..excel.schemas import get_schema
from ..models.dataset_kind import DatasetKind

"""Config loader.

Responsibilities:
- Load the YAML config (default config/refdata.yml)
- Validate it against config_schema.json (shipped next to this module)
- Apply defaults (table, cache TTL, snapshot and logs directories)
- Reject extra synonyms for fields the dataset kind does not have
"""

__all__ = [
    "ConfigError",
    "DatabaseConfig",
    "RefDataConfig",
    "load_config",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
]

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/refdata.yml")

DEFAULT_TTL_SECONDS = 300.0


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class DatabaseConfig:
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None
    table: str = "reference_data"
    connect_timeout: int = 5


@dataclass(frozen=True)
class RefDataConfig:
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    cache_ttl_seconds: float = DEFAULT_TTL_SECONDS
    snapshot_directory: str = ".refdata_snapshots"
    logs_directory: str = "logs"
    authorized_actors: frozenset[str] = frozenset()
    # kind value -> field -> extra header synonyms
    extra_synonyms: dict[str, dict[str, list[str]]] = field(default_factory=dict)

    def can_mutate(self, actor_id: str | None) -> bool:
        return bool(actor_id) and actor_id in self.authorized_actors


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or if
            the config data fails schema validation.
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigError(f"config validation failed at {location}: {e.message}") from e


def _check_synonym_fields(extra: dict[str, dict[str, list[str]]]) -> None:
    for kind_value, table in extra.items():
        try:
            get_schema(DatasetKind(kind_value), table)
        except KeyError as e:
            raise ConfigError(f"extra_synonyms: {e.args[0]}") from e


def load_config(path: Path) -> RefDataConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    _validate_config_schema(data)

    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
        table=db_raw.get("table", "reference_data"),
        connect_timeout=db_raw.get("connect_timeout", 5),
    )
    extra = data.get("extra_synonyms") or {}
    _check_synonym_fields(extra)
    return RefDataConfig(
        database=db,
        cache_ttl_seconds=float((data.get("cache") or {}).get("ttl_seconds", DEFAULT_TTL_SECONDS)),
        snapshot_directory=data.get("snapshot_directory", ".refdata_snapshots"),
        logs_directory=data.get("logs_directory", "logs"),
        authorized_actors=frozenset(data.get("authorized_actors") or ()),
        extra_synonyms={k: {f: list(v) for f, v in table.items()} for k, table in extra.items()},
    )
