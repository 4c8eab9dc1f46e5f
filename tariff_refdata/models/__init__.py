"""Domain models for the tariff reference-data import pipeline.

This package contains the record types, dataset/cache containers and the
import result/lifecycle models shared by the excel, services and db layers.
"""

from .actor import Actor
from .dataset_kind import DatasetKind
from .import_issue import ImportIssue
from .import_result import ImportAbortedError, ImportResult, ImportRun, ImportState
from .records import ReferenceRecord, TarifPortProduct, TecArticle, VocProduct
from .reference_dataset import CacheEntry, ReferenceDataset

__all__ = [
    # Kinds and records
    "DatasetKind",
    "ReferenceRecord",
    "TecArticle",
    "VocProduct",
    "TarifPortProduct",
    # Persistence containers
    "ReferenceDataset",
    "CacheEntry",
    # Import lifecycle
    "Actor",
    "ImportIssue",
    "ImportAbortedError",
    "ImportResult",
    "ImportRun",
    "ImportState",
]
