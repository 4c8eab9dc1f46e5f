from __future__ import annotations

import os
from collections.abc import Callable
from typing import Any

import psycopg2

from ..config.loader import DatabaseConfig

"""PostgreSQL connection settings resolution.

Priority (highest first):
    1. DATABASE_URL / PGDSN environment variables (whole DSN)
    2. ``database.dsn`` from the config file
    3. individual PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE, each
       falling back to the matching ``database`` config key

The CLI loads ``.env`` with override=True before calling this, so values from
``.env`` win over the process environment.
"""

__all__ = [
    "resolve_dsn",
    "connection_factory",
]


def resolve_dsn(db_cfg: DatabaseConfig) -> str:
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


def connection_factory(db_cfg: DatabaseConfig) -> Callable[[], Any]:
    """Return a zero-argument callable opening a new psycopg2 connection."""
    dsn = resolve_dsn(db_cfg)

    def _connect() -> Any:
        conn = psycopg2.connect(dsn, connect_timeout=db_cfg.connect_timeout)
        conn.autocommit = False
        return conn

    return _connect
