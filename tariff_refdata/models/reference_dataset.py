from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .dataset_kind import DatasetKind
from .records import ReferenceRecord

"""ReferenceDataset and CacheEntry models.

A ReferenceDataset is the unit of persistence: the whole record list of one
kind, replaced wholesale on every save. ``source`` tells which provider of
the read chain produced it (remote / cache / snapshot / bundled).
"""

__all__ = [
    "ReferenceDataset",
    "CacheEntry",
    "SOURCE_REMOTE",
    "SOURCE_SNAPSHOT",
    "SOURCE_BUNDLED",
    "SOURCE_CACHE",
]

SOURCE_REMOTE = "remote"
SOURCE_SNAPSHOT = "snapshot"
SOURCE_BUNDLED = "bundled"
# last known in-memory copy served while the remote is unreachable
SOURCE_CACHE = "cache"


@dataclass(frozen=True)
class ReferenceDataset:
    kind: DatasetKind
    records: tuple[ReferenceRecord, ...]
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    dataset_id: Any = None  # primary key in the remote table, if any
    source: str = SOURCE_REMOTE

    def wire_records(self) -> list[dict[str, Any]]:
        return [r.to_dict() for r in self.records]

    def __len__(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class CacheEntry:
    """Immutable cache snapshot for one kind.

    ``fetched_at`` is a monotonic clock reading, only meaningful for TTL checks.
    """
    kind: DatasetKind
    records: tuple[ReferenceRecord, ...]
    fetched_at: float
    source: str = SOURCE_REMOTE
