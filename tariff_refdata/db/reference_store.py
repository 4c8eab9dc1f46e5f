from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from ..models.dataset_kind import DatasetKind
from ..models.records import ReferenceRecord
from ..models.reference_dataset import ReferenceDataset

"""ReferenceStore: ordered provider chain over the reference datasets.

Read path (remote -> last known copy -> local snapshot -> bundled defaults):
- the first provider is authoritative. Its answer is final, including
  "no dataset" (None)
- when a provider raises StoreError the next one is tried
- fallback providers that have nothing for the kind pass to the next one
- StoreError propagates only when every provider failed
- ``last_known`` (the caller's own copy, e.g. the lookup cache) is tried
  right after the authoritative provider

Write path: save/delete go to the authoritative provider only. The store does
not check authorization; callers gate mutations before reaching it.
"""

__all__ = [
    "StoreError",
    "DatasetProvider",
    "WritableDatasetProvider",
    "ReferenceStore",
]

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when a persistence backend cannot serve a request."""


@runtime_checkable
class DatasetProvider(Protocol):
    name: str

    def get(self, kind: DatasetKind) -> ReferenceDataset | None: ...


@runtime_checkable
class WritableDatasetProvider(DatasetProvider, Protocol):
    def save(
        self, kind: DatasetKind, records: Sequence[ReferenceRecord], actor_id: str | None = None
    ) -> ReferenceDataset: ...

    def delete(self, kind: DatasetKind) -> None: ...

    def list_all(self) -> list[ReferenceDataset]: ...


class ReferenceStore:
    """Provider chain whose first element is the authoritative store."""

    def __init__(self, providers: Sequence[DatasetProvider]) -> None:
        if not providers:
            raise ValueError("ReferenceStore requires at least one provider")
        authoritative = providers[0]
        if not isinstance(authoritative, WritableDatasetProvider):
            raise TypeError(f"authoritative provider {authoritative!r} must support save/delete")
        self._authoritative: WritableDatasetProvider = authoritative
        self._providers = list(providers)

    @property
    def authoritative(self) -> WritableDatasetProvider:
        return self._authoritative

    @property
    def providers(self) -> list[DatasetProvider]:
        return list(self._providers)

    def get(self, kind: DatasetKind, last_known: DatasetProvider | None = None) -> ReferenceDataset | None:
        providers = self._providers
        if last_known is not None:
            providers = [providers[0], last_known, *providers[1:]]
        failures: list[str] = []
        answered = False
        for position, provider in enumerate(providers):
            try:
                dataset = provider.get(kind)
            except StoreError as e:
                logger.warning("read kind=%s provider=%s failed: %s", kind.value, provider.name, e)
                failures.append(f"{provider.name}: {e}")
                continue
            if provider is last_known and dataset is None:
                continue
            answered = True
            if position == 0 or dataset is not None:
                if position > 0:
                    logger.info(
                        "read kind=%s served by fallback provider=%s records=%d",
                        kind.value, provider.name, len(dataset) if dataset else 0,
                    )
                return dataset
        if not answered:
            raise StoreError(f"all providers failed for {kind.value}: {'; '.join(failures)}")
        return None

    def save(
        self, kind: DatasetKind, records: Sequence[ReferenceRecord], actor_id: str | None = None
    ) -> ReferenceDataset:
        """Replace the dataset of ``kind`` wholesale (create if absent)."""
        dataset = self._authoritative.save(kind, records, actor_id)
        logger.info("saved kind=%s records=%d actor=%s", kind.value, len(records), actor_id)
        return dataset

    def delete(self, kind: DatasetKind) -> None:
        self._authoritative.delete(kind)
        logger.info("deleted kind=%s", kind.value)

    def list_all(self) -> list[ReferenceDataset]:
        return self._authoritative.list_all()
