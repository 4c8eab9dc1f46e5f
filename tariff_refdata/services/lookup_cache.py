from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections.abc import Callable

from ..db.reference_store import ReferenceStore, StoreError
from ..db.snapshot_provider import SnapshotDatasetProvider
from ..models.dataset_kind import DatasetKind
from ..models.records import ReferenceRecord
from ..models.reference_dataset import (
    SOURCE_BUNDLED,
    SOURCE_CACHE,
    SOURCE_REMOTE,
    CacheEntry,
    ReferenceDataset,
)

"""TTL cache in front of the ReferenceStore.

One CacheEntry per kind, replaced wholesale and never mutated in place.
Read paths:

- ``get_async``: fresh entry, else a store read in a worker thread.
- ``get_records`` / ``get_dataset``: same chain read, blocking. The last
  known entry (remote or snapshot data, even stale) is offered to the store
  as the tier right after the authoritative one, so a remote outage keeps
  serving real data instead of the bundled samples.
- ``get_sync``: never touches the network. Current in-memory entry (stale or
  not), else the local snapshot, else an empty list.

Datasets served by the authoritative tier, and datasets just saved, are
written to the local snapshot so that ``get_sync`` and the snapshot fallback
tier see them after a restart.

Every invalidation bumps a per-kind generation. A read that started before a
save or delete finished is returned to its caller but not cached, and does
not overwrite the snapshot.
"""

__all__ = [
    "LookupCache",
    "DEFAULT_TTL_SECONDS",
]

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0


class _LastKnownTier:
    """Read-only provider over the cache's own entries."""

    name = SOURCE_CACHE

    def __init__(self, entries: dict[DatasetKind, CacheEntry]) -> None:
        self._entries = entries

    def get(self, kind: DatasetKind) -> ReferenceDataset | None:
        entry = self._entries.get(kind)
        if entry is None or not entry.records or entry.source == SOURCE_BUNDLED:
            return None
        return ReferenceDataset(kind=kind, records=entry.records, source=SOURCE_CACHE)


class LookupCache:
    def __init__(
        self,
        store: ReferenceStore,
        snapshot: SnapshotDatasetProvider | None = None,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.store = store
        self.snapshot = snapshot
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[DatasetKind, CacheEntry] = {}
        self._generations: dict[DatasetKind, int] = {}
        # guards entries, generations and snapshot writes of reads
        self._lock = threading.Lock()
        self._last_known = _LastKnownTier(self._entries)

    def peek(self, kind: DatasetKind) -> CacheEntry | None:
        """Current entry for ``kind`` regardless of age."""
        return self._entries.get(kind)

    def is_fresh(self, entry: CacheEntry | None) -> bool:
        return entry is not None and (self._clock() - entry.fetched_at) < self.ttl_seconds

    def get_dataset(self, kind: DatasetKind) -> ReferenceDataset | None:
        """Read ``kind`` through the store chain and refresh the cache entry."""
        generation = self._generations.get(kind, 0)
        dataset = self.store.get(kind, last_known=self._last_known)
        self._remember(kind, dataset, generation)
        return dataset

    def get_records(self, kind: DatasetKind) -> list[ReferenceRecord]:
        entry = self._entries.get(kind)
        if self.is_fresh(entry):
            return list(entry.records)  # type: ignore[union-attr]
        try:
            dataset = self.get_dataset(kind)
        except StoreError as e:
            if entry is not None:
                logger.warning("kind=%s all tiers failed, serving stale cache: %s", kind.value, e)
                return list(entry.records)
            logger.warning("kind=%s all tiers failed, no cached data: %s", kind.value, e)
            return []
        return list(dataset.records) if dataset else []

    async def get_async(self, kind: DatasetKind) -> list[ReferenceRecord]:
        entry = self._entries.get(kind)
        if self.is_fresh(entry):
            return list(entry.records)  # type: ignore[union-attr]
        return await asyncio.to_thread(self.get_records, kind)

    def get_sync(self, kind: DatasetKind) -> list[ReferenceRecord]:
        entry = self._entries.get(kind)
        if entry is not None:
            return list(entry.records)
        if self.snapshot is None:
            return []
        try:
            dataset = self.snapshot.get(kind)
        except StoreError as e:
            logger.warning("kind=%s snapshot unreadable: %s", kind.value, e)
            return []
        return list(dataset.records) if dataset else []

    def invalidate(self, kind: DatasetKind | None = None) -> None:
        """Drop the entry for ``kind`` (all entries when None).

        Reads already in flight for the kind will not be cached.
        """
        kinds = list(DatasetKind) if kind is None else [kind]
        with self._lock:
            for k in kinds:
                self._generations[k] = self._generations.get(k, 0) + 1
                self._entries.pop(k, None)

    def record_saved(self, dataset: ReferenceDataset) -> None:
        """Reset the entry of a freshly saved dataset and refresh its snapshot."""
        self.invalidate(dataset.kind)
        self._write_snapshot(dataset)

    def record_deleted(self, kind: DatasetKind) -> None:
        self.invalidate(kind)
        if self.snapshot is not None:
            try:
                self.snapshot.delete(kind)
            except StoreError as e:
                logger.warning("kind=%s snapshot removal failed: %s", kind.value, e)

    def _remember(self, kind: DatasetKind, dataset: ReferenceDataset | None, generation: int) -> None:
        records = dataset.records if dataset else ()
        source = dataset.source if dataset else SOURCE_REMOTE
        with self._lock:
            if self._generations.get(kind, 0) != generation:
                logger.debug("kind=%s read overtaken by a save or delete, result not cached", kind.value)
                return
            self._entries[kind] = CacheEntry(kind=kind, records=records, fetched_at=self._clock(), source=source)
            if dataset is not None and dataset.source == SOURCE_REMOTE:
                self._write_snapshot(dataset)

    def _write_snapshot(self, dataset: ReferenceDataset) -> None:
        if self.snapshot is None:
            return
        try:
            self.snapshot.save(dataset)
        except StoreError as e:
            logger.warning("kind=%s snapshot write failed: %s", dataset.kind.value, e)
