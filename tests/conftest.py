# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

import pandas as pd
import pytest

from tariff_refdata.db.reference_store import ReferenceStore, StoreError
from tariff_refdata.logging.init import reset_logging
from tariff_refdata.models.dataset_kind import DatasetKind
from tariff_refdata.models.records import ReferenceRecord
from tariff_refdata.models.reference_dataset import SOURCE_REMOTE, ReferenceDataset


class InMemoryProvider:
    """Authoritative provider double keeping datasets in a dict.

    ``fail = True`` makes every call raise StoreError (remote outage).
    """

    name = "memory"

    def __init__(self) -> None:
        self.datasets: dict[DatasetKind, ReferenceDataset] = {}
        self.fail = False
        self.get_calls = 0
        self.save_calls: list[tuple[DatasetKind, int, str | None]] = []
        self.delete_calls: list[DatasetKind] = []

    def _check(self) -> None:
        if self.fail:
            raise StoreError("remote unavailable")

    def get(self, kind: DatasetKind) -> ReferenceDataset | None:
        self.get_calls += 1
        self._check()
        return self.datasets.get(kind)

    def save(
        self, kind: DatasetKind, records: Sequence[ReferenceRecord], actor_id: str | None = None
    ) -> ReferenceDataset:
        self._check()
        now = datetime.now(UTC)
        previous = self.datasets.get(kind)
        dataset = ReferenceDataset(
            kind=kind,
            records=tuple(records),
            created_by=previous.created_by if previous else actor_id,
            created_at=previous.created_at if previous else now,
            updated_at=now,
            dataset_id=previous.dataset_id if previous else len(self.datasets) + 1,
            source=SOURCE_REMOTE,
        )
        self.datasets[kind] = dataset
        self.save_calls.append((kind, len(records), actor_id))
        return dataset

    def delete(self, kind: DatasetKind) -> None:
        self._check()
        self.datasets.pop(kind, None)
        self.delete_calls.append(kind)

    def list_all(self) -> list[ReferenceDataset]:
        self._check()
        return list(self.datasets.values())


@pytest.fixture(autouse=True)
def clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """database:
  host: localhost
  port: 5432
  user: refdata
  password: secret
  database: refdata
  table: reference_data
cache:
  ttl_seconds: 300
snapshot_directory: ./snapshots
logs_directory: ./logs
authorized_actors: [admin]
extra_synonyms:
  voc:
    exempte: ["Hors VOC"]
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "refdata.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def memory_provider() -> InMemoryProvider:
    return InMemoryProvider()


@pytest.fixture()
def memory_store(memory_provider: InMemoryProvider) -> ReferenceStore:
    return ReferenceStore([memory_provider])


@pytest.fixture()
def make_workbook(temp_workdir: Path):
    """Factory writing ``rows`` (first row = header) to an .xlsx under data/."""

    def _make(rows: list[list], name: str = "book.xlsx") -> Path:
        path = temp_workdir / "data" / name
        df = pd.DataFrame(rows[1:], columns=rows[0])
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Sheet1", index=False)
        return path

    return _make


@pytest.fixture()
def tec_rows() -> list[list]:
    return [
        ["Code SH10", "Désignation", "US", "DD", "RSTA", "PCS", "PUA", "PCC", "TVA", "Cumul Sans TVA", "Cumul Avec TVA", "Code SH6"],
        ["8471.30.00.00", "Ordinateurs portables", "U", "5", "0", "0,5", "0,5", "0,5", "18", "", "", "847130"],
        ["1006300000", "Riz blanchi", "KG", "10", "0", "0,8", "0,5", "0,5", "0", "11,8", "11,8", "100630"],
    ]


@pytest.fixture()
def voc_rows() -> list[list]:
    return [
        ["Code SH", "Désignation", "Observation", "Exempté"],
        ["1901901000", "Préparations à base de lait", "Produit de base", "oui"],
        ["8517130000", "Téléphones intelligents", "", "non"],
        ["8703230000", "Véhicules de tourisme", "Véhicule", "x"],
    ]


@pytest.fixture()
def tarifport_rows() -> list[list]:
    return [
        ["Libellé Produit", "Chapitre", "TP", "Code Redevance"],
        ["Redevance portuaire", "05", "RP", "RP001"],
        ["Taxe ISPS", "13", "ISPS", "ISPS001"],
    ]
