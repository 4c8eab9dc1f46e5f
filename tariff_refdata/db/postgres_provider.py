from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Sequence
from typing import Any

import psycopg2
from psycopg2 import sql
from psycopg2.extras import Json, RealDictCursor

from ..models.dataset_kind import DatasetKind
from ..models.records import ReferenceRecord, records_from_wire
from ..models.reference_dataset import SOURCE_REMOTE, ReferenceDataset
from .reference_store import StoreError

"""Authoritative PostgreSQL provider for reference datasets.

Table layout (one JSONB document per dataset kind):

    id          bigserial / uuid primary key
    type        text          -- tec / voc / tarifport
    data        jsonb         -- array of wire records
    created_by  text null
    created_at  timestamptz default now()
    updated_at  timestamptz default now()

Every operation opens its own connection from the injected factory and runs
inside one transaction (``with conn``), so a failed save leaves the previous
document untouched. psycopg2 errors are wrapped in StoreError.
"""

__all__ = [
    "PostgresDatasetProvider",
    "DEFAULT_TABLE",
]

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "reference_data"

_COLUMNS = sql.SQL("id, type, data, created_by, created_at, updated_at")


class PostgresDatasetProvider:
    """Reads and writes reference datasets in a PostgreSQL table."""

    name = SOURCE_REMOTE

    def __init__(self, connect: Callable[[], Any], table: str = DEFAULT_TABLE) -> None:
        self._connect = connect
        self._table = sql.Identifier(table)
        self.table_name = table

    def get(self, kind: DatasetKind) -> ReferenceDataset | None:
        """Most recently updated dataset of ``kind``, or None when there is none."""
        query = sql.SQL(
            "SELECT {cols} FROM {table} WHERE type = %s ORDER BY updated_at DESC LIMIT 1"
        ).format(cols=_COLUMNS, table=self._table)
        row = self._run(lambda cur: (cur.execute(query, (kind.value,)), cur.fetchone())[1])
        return self._to_dataset(kind, row) if row else None

    def list_all(self) -> list[ReferenceDataset]:
        query = sql.SQL("SELECT {cols} FROM {table} ORDER BY type ASC, updated_at DESC").format(
            cols=_COLUMNS, table=self._table
        )
        rows = self._run(lambda cur: (cur.execute(query), cur.fetchall())[1]) or []
        datasets: list[ReferenceDataset] = []
        for row in rows:
            try:
                kind = DatasetKind(row["type"])
            except ValueError:
                logger.warning("skipping reference row id=%s with unknown type=%r", row.get("id"), row["type"])
                continue
            datasets.append(self._to_dataset(kind, row))
        return datasets

    def save(
        self, kind: DatasetKind, records: Sequence[ReferenceRecord], actor_id: str | None = None
    ) -> ReferenceDataset:
        """Upsert: replace the existing document of ``kind`` or insert a new one."""
        payload = Json([r.to_dict() for r in records])
        select_existing = sql.SQL(
            "SELECT id FROM {table} WHERE type = %s ORDER BY updated_at DESC LIMIT 1 FOR UPDATE"
        ).format(table=self._table)
        update = sql.SQL(
            "UPDATE {table} SET data = %s, updated_at = now() WHERE id = %s RETURNING {cols}"
        ).format(table=self._table, cols=_COLUMNS)
        insert = sql.SQL(
            "INSERT INTO {table} (type, data, created_by) VALUES (%s, %s, %s) RETURNING {cols}"
        ).format(table=self._table, cols=_COLUMNS)

        def _upsert(cur: Any) -> Any:
            cur.execute(select_existing, (kind.value,))
            existing = cur.fetchone()
            if existing:
                cur.execute(update, (payload, existing["id"]))
            else:
                cur.execute(insert, (kind.value, payload, actor_id))
            return cur.fetchone()

        start = time.perf_counter()
        row = self._run(_upsert)
        logger.debug(
            "upsert kind=%s records=%d elapsed=%.3fs", kind.value, len(records), time.perf_counter() - start
        )
        if not row:
            raise StoreError(f"upsert of {kind.value} returned no row")
        return self._to_dataset(kind, row)

    def delete(self, kind: DatasetKind) -> None:
        query = sql.SQL("DELETE FROM {table} WHERE type = %s").format(table=self._table)
        self._run(lambda cur: cur.execute(query, (kind.value,)))

    def _run(self, operation: Callable[[Any], Any]) -> Any:
        try:
            conn = self._connect()
        except psycopg2.Error as e:
            raise StoreError(f"connection failed: {e}") from e
        try:
            with conn:
                with conn.cursor(cursor_factory=RealDictCursor) as cur:
                    return operation(cur)
        except psycopg2.Error as e:
            raise StoreError(str(e).strip() or e.__class__.__name__) from e
        finally:
            conn.close()

    @staticmethod
    def _to_dataset(kind: DatasetKind, row: Any) -> ReferenceDataset:
        data = row["data"]
        try:
            if isinstance(data, str):
                data = json.loads(data)
            records = records_from_wire(kind, data or [])
        except (ValueError, TypeError) as e:
            raise StoreError(f"corrupt {kind.value} payload in row id={row.get('id')}: {e}") from e
        return ReferenceDataset(
            kind=kind,
            records=records,
            created_by=row.get("created_by"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
            dataset_id=row.get("id"),
            source=SOURCE_REMOTE,
        )
