from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any

from ..models.dataset_kind import DatasetKind
from ..models.records import records_from_wire
from ..models.reference_dataset import SOURCE_SNAPSHOT, ReferenceDataset
from .reference_store import StoreError

"""Local snapshot provider: one JSON file per kind under a directory.

File layout (``<directory>/<kind>.json``)::

    {"kind": "tec", "created_by": "...", "created_at": "...",
     "updated_at": "...", "records": [ {wire record}, ... ]}

Files are written to a temp file in the same directory then moved in place
with ``os.replace``, so readers never see a half written snapshot. A missing
file means "no snapshot" (None); an unreadable one raises StoreError.
"""

__all__ = [
    "SnapshotDatasetProvider",
]

logger = logging.getLogger(__name__)


class SnapshotDatasetProvider:
    name = SOURCE_SNAPSHOT

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def path_for(self, kind: DatasetKind) -> Path:
        return self.directory / f"{kind.value}.json"

    def get(self, kind: DatasetKind) -> ReferenceDataset | None:
        path = self.path_for(kind)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as f:
                doc = json.load(f)
            records = records_from_wire(kind, doc.get("records") or [])
        except (OSError, ValueError, TypeError, AttributeError) as e:
            raise StoreError(f"unreadable snapshot {path}: {e}") from e
        return ReferenceDataset(
            kind=kind,
            records=records,
            created_by=doc.get("created_by"),
            created_at=_parse_ts(doc.get("created_at")),
            updated_at=_parse_ts(doc.get("updated_at")),
            source=SOURCE_SNAPSHOT,
        )

    def save(self, dataset: ReferenceDataset) -> Path:
        """Write ``dataset`` as the snapshot of its kind, replacing any previous one."""
        doc: dict[str, Any] = {
            "kind": dataset.kind.value,
            "created_by": dataset.created_by,
            "created_at": _format_ts(dataset.created_at),
            "updated_at": _format_ts(dataset.updated_at),
            "records": dataset.wire_records(),
        }
        path = self.path_for(dataset.kind)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{dataset.kind.value}-", suffix=".tmp", dir=self.directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(doc, f, ensure_ascii=False)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StoreError(f"cannot write snapshot {path}: {e}") from e
        logger.debug("snapshot written kind=%s records=%d path=%s", dataset.kind.value, len(dataset), path)
        return path

    def delete(self, kind: DatasetKind) -> None:
        try:
            self.path_for(kind).unlink(missing_ok=True)
        except OSError as e:
            raise StoreError(f"cannot remove snapshot for {kind.value}: {e}") from e


def _format_ts(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_ts(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None
