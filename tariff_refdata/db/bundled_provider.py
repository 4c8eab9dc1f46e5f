from __future__ import annotations

from collections.abc import Mapping

from ..data.sample_data import SAMPLE_DATA
from ..models.dataset_kind import DatasetKind
from ..models.records import records_from_wire
from ..models.reference_dataset import SOURCE_BUNDLED, ReferenceDataset

"""Read-only provider serving the sample datasets shipped with the package."""

__all__ = [
    "BundledDatasetProvider",
]


class BundledDatasetProvider:
    name = SOURCE_BUNDLED

    def __init__(self, data: Mapping[DatasetKind, list[dict]] | None = None) -> None:
        self._data = SAMPLE_DATA if data is None else data

    def get(self, kind: DatasetKind) -> ReferenceDataset | None:
        items = self._data.get(kind)
        if not items:
            return None
        return ReferenceDataset(
            kind=kind,
            records=records_from_wire(kind, items),
            created_by=None,
            source=SOURCE_BUNDLED,
        )
