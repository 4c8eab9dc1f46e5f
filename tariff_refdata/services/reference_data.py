from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from ..config.loader import RefDataConfig
from ..db.bundled_provider import BundledDatasetProvider
from ..db.connection import connection_factory
from ..db.postgres_provider import PostgresDatasetProvider
from ..db.reference_store import ReferenceStore
from ..db.snapshot_provider import SnapshotDatasetProvider
from ..excel.column_mapper import ColumnMapper
from ..excel.reader import WorkbookSource
from ..logging.issue_log import ImportIssueLog
from ..models.actor import Actor
from ..models.dataset_kind import DatasetKind
from ..models.import_result import ImportResult, ImportRun
from ..models.records import ReferenceRecord
from ..models.reference_dataset import ReferenceDataset
from .lookup_cache import LookupCache
from .lookups import ReferenceLookup
from .orchestrator import ImportOrchestrator

"""ReferenceDataService: composition root and public entry point.

Wires the provider chain (PostgreSQL -> snapshot -> bundled samples), the
lookup cache, the column mapper and the import orchestrator, and exposes the
import / get / save / delete operations on reference datasets.
"""

__all__ = [
    "ReferenceDataService",
]

logger = logging.getLogger(__name__)


class ReferenceDataService:
    def __init__(
        self,
        store: ReferenceStore,
        cache: LookupCache | None = None,
        mapper: ColumnMapper | None = None,
        issue_log: ImportIssueLog | None = None,
    ) -> None:
        self.store = store
        self.cache = cache or LookupCache(store)
        self.orchestrator = ImportOrchestrator(store, cache=self.cache, mapper=mapper, issue_log=issue_log)
        self.lookup = ReferenceLookup(self.cache)

    @classmethod
    def from_config(
        cls, cfg: RefDataConfig, connect: Callable[[], Any] | None = None
    ) -> ReferenceDataService:
        """Build the full stack from configuration.

        ``connect`` overrides the psycopg2 connection factory (tests).
        """
        snapshot = SnapshotDatasetProvider(Path(cfg.snapshot_directory))
        store = ReferenceStore(
            [
                PostgresDatasetProvider(connect or connection_factory(cfg.database), table=cfg.database.table),
                snapshot,
                BundledDatasetProvider(),
            ]
        )
        cache = LookupCache(store, snapshot=snapshot, ttl_seconds=cfg.cache_ttl_seconds)
        return cls(
            store,
            cache=cache,
            mapper=ColumnMapper(cfg.extra_synonyms),
            issue_log=ImportIssueLog(cfg.logs_directory),
        )

    @property
    def last_run(self) -> ImportRun | None:
        return self.orchestrator.last_run

    def import_kind(
        self,
        kind: DatasetKind,
        file: WorkbookSource,
        clear_existing: bool = False,
        actor: Actor | None = None,
        dry_run: bool = False,
    ) -> ImportResult:
        return self.orchestrator.import_file(file, kind, clear_existing=clear_existing, actor=actor, dry_run=dry_run)

    def import_kind_a(self, file: WorkbookSource, clear_existing: bool = False, actor: Actor | None = None) -> ImportResult:
        return self.import_kind(DatasetKind.TEC, file, clear_existing, actor)

    def import_kind_b(self, file: WorkbookSource, clear_existing: bool = False, actor: Actor | None = None) -> ImportResult:
        return self.import_kind(DatasetKind.VOC, file, clear_existing, actor)

    def import_kind_c(self, file: WorkbookSource, clear_existing: bool = False, actor: Actor | None = None) -> ImportResult:
        return self.import_kind(DatasetKind.TARIFPORT, file, clear_existing, actor)

    def get_reference_data(self, kind: DatasetKind) -> ReferenceDataset | None:
        """Current dataset of ``kind`` through the provider chain (refreshes the cache)."""
        return self.cache.get_dataset(kind)

    def save_reference_data(
        self, kind: DatasetKind, records: Sequence[ReferenceRecord], actor_id: str | None = None
    ) -> ReferenceDataset:
        dataset = self.store.save(kind, records, actor_id)
        self.cache.record_saved(dataset)
        return dataset

    def delete_reference_data(self, kind: DatasetKind) -> None:
        self.store.delete(kind)
        self.cache.record_deleted(kind)

    def get_all_reference_data(self) -> list[ReferenceDataset]:
        return self.store.list_all()
