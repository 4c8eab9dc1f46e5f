from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

"""Import result and import state models.

ImportResult is the only externally observable outcome of an import call.
ImportState / ImportRun track the one-directional lifecycle of a single call:

    IDLE -> READING -> MAPPING -> BUILDING -> PERSISTING -> DONE
    (any non-terminal state) -> ABORTED
"""

__all__ = [
    "ImportAbortedError",
    "ImportResult",
    "ImportState",
    "ImportRun",
]


class ImportAbortedError(Exception):
    """Base class of errors that abort an import before anything is persisted.

    ``issue_type`` classifies the error in the import-issue log.
    """
    issue_type = "IMPORT_ABORTED"


@dataclass(frozen=True)
class ImportResult:
    """Aggregated outcome of one import call.

    All four fields are always present, even on total failure.
    """
    success: bool
    imported: int
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @classmethod
    def failure(cls, error: str, warnings: list[str] | tuple[str, ...] = ()) -> ImportResult:
        return cls(success=False, imported=0, errors=(error,), warnings=tuple(warnings))

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "imported": self.imported,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


class ImportState(Enum):
    IDLE = "idle"
    READING = "reading"
    MAPPING = "mapping"
    BUILDING = "building"
    PERSISTING = "persisting"
    DONE = "done"
    ABORTED = "aborted"

    @property
    def terminal(self) -> bool:
        return self in (ImportState.DONE, ImportState.ABORTED)


_ORDER = [
    ImportState.IDLE,
    ImportState.READING,
    ImportState.MAPPING,
    ImportState.BUILDING,
    ImportState.PERSISTING,
    ImportState.DONE,
]


@dataclass
class ImportRun:
    """Mutable lifecycle tracker for one import call (not reusable)."""
    kind: str
    source: str
    state: ImportState = ImportState.IDLE
    history: list[ImportState] = field(default_factory=lambda: [ImportState.IDLE])
    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    end_time: datetime | None = None

    def can_enter(self, target: ImportState) -> bool:
        if self.state.terminal:
            return False
        if target is ImportState.ABORTED:
            return True
        if target is ImportState.DONE:
            # BUILDING -> DONE only for validation-only runs
            return self.state in (ImportState.BUILDING, ImportState.PERSISTING)
        return _ORDER.index(target) > _ORDER.index(self.state)

    @property
    def elapsed_seconds(self) -> float:
        end = self.end_time or datetime.now(UTC)
        return (end - self.start_time).total_seconds()
