from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..db.reference_store import ReferenceStore, StoreError
from ..excel.column_mapper import ColumnMapper, MappingError
from ..excel.reader import RawSheet, WorkbookSource, check_sheet_shape, read_workbook
from ..logging.issue_log import ImportIssueLog
from ..models.actor import Actor
from ..models.dataset_kind import DatasetKind
from ..models.import_issue import SEVERITY_ERROR, SEVERITY_WARNING, ImportIssue
from ..models.import_result import ImportAbortedError, ImportResult, ImportRun, ImportState
from ..models.records import ReferenceRecord
from .lookup_cache import LookupCache
from .progress import RowProgress
from .record_builder import RecordBuilder

"""Import orchestration: one spreadsheet -> one dataset kind.

Steps of one call:
1. READING     workbook -> RawSheet, header + at least one data row
2. MAPPING     header row -> column resolution (missing required -> abort)
3. BUILDING    every data row -> record or warning (rows never abort)
4. PERSISTING  authorization, optional clear, wholesale save, cache reset
5. DONE / ABORTED

Fatal errors (ImportAbortedError subclasses, StoreError) are folded into the
returned ImportResult; they never escape ``import_sheet`` / ``import_file``.
Warnings collected before an abort are still reported.

Note on ``clear_existing``: the delete runs before the save, outside any
common transaction. If the save then fails the kind is left empty.
"""

__all__ = [
    "ImportOrchestrator",
    "ImportAbortedError",
    "EmptyResultError",
    "AuthorizationError",
    "ImportStateError",
]

logger = logging.getLogger(__name__)

SHEET_LEVEL_ROW = -1


class EmptyResultError(ImportAbortedError):
    """No row produced a valid record."""
    issue_type = "EMPTY_RESULT"


class AuthorizationError(ImportAbortedError):
    """The caller may not mutate reference data."""
    issue_type = "UNAUTHORIZED"


class ImportStateError(RuntimeError):
    """Illegal lifecycle transition (programming error, not folded into results)."""


class ImportOrchestrator:
    """Drives imports for all dataset kinds against one store.

    Parameters
    ----------
    store: ReferenceStore receiving the saved datasets
    cache: LookupCache reset after every successful save (optional)
    mapper: ColumnMapper, defaults to one without extra synonyms
    issue_log: ImportIssueLog receiving every warning and error (optional)
    """

    def __init__(
        self,
        store: ReferenceStore,
        cache: LookupCache | None = None,
        mapper: ColumnMapper | None = None,
        issue_log: ImportIssueLog | None = None,
    ) -> None:
        self.store = store
        self.cache = cache
        self.mapper = mapper or ColumnMapper()
        self.issue_log = issue_log
        self.last_run: ImportRun | None = None

    def import_file(
        self,
        source: WorkbookSource,
        kind: DatasetKind,
        clear_existing: bool = False,
        actor: Actor | None = None,
        dry_run: bool = False,
    ) -> ImportResult:
        """Read the first worksheet of ``source`` and import it as ``kind``."""
        run = self._start(kind, _source_name(source))
        try:
            rows = read_workbook(source)
        except ImportAbortedError as e:
            return self._abort(run, e, [])
        return self._import_rows(run, rows, clear_existing, actor, dry_run)

    def import_sheet(
        self,
        raw_sheet: RawSheet,
        kind: DatasetKind,
        clear_existing: bool = False,
        actor: Actor | None = None,
        dry_run: bool = False,
        source: str = "<rows>",
    ) -> ImportResult:
        """Import already-read rows (first row = header)."""
        run = self._start(kind, source)
        return self._import_rows(run, raw_sheet, clear_existing, actor, dry_run)

    def _start(self, kind: DatasetKind, source: str) -> ImportRun:
        run = ImportRun(kind=kind.value, source=source)
        self.last_run = run
        self._advance(run, ImportState.READING)
        logger.info("import start kind=%s source=%s", kind.value, source)
        return run

    def _import_rows(
        self,
        run: ImportRun,
        rows: RawSheet,
        clear_existing: bool,
        actor: Actor | None,
        dry_run: bool,
    ) -> ImportResult:
        kind = DatasetKind(run.kind)
        warnings: list[str] = []
        try:
            check_sheet_shape(rows)

            self._advance(run, ImportState.MAPPING)
            try:
                resolution = self.mapper.resolve(rows[0], kind)
            except MappingError as e:
                self._warn_all(run, e.resolution.warnings(), warnings, SHEET_LEVEL_ROW, "COLUMN_MAPPING")
                raise
            self._warn_all(run, resolution.warnings(), warnings, SHEET_LEVEL_ROW, "COLUMN_MAPPING")

            self._advance(run, ImportState.BUILDING)
            builder = RecordBuilder(self.mapper.schema_for(kind), resolution)
            records = self._build_records(run, builder, rows[1:], warnings)
            if not records:
                raise EmptyResultError("No valid records found in file")

            if dry_run:
                self._warn(
                    run, f"Dry run: {len(records)} record(s) would be imported, nothing was written",
                    warnings, SHEET_LEVEL_ROW, "DRY_RUN",
                )
                self._advance(run, ImportState.DONE)
                return self._finish(run, ImportResult(True, 0, (), tuple(warnings)))

            actor = actor or Actor.anonymous()
            if not actor.can_mutate:
                raise AuthorizationError(f"Actor {actor.label} is not authorized to modify reference data")

            self._advance(run, ImportState.PERSISTING)
            self._persist(kind, records, clear_existing, actor)
            self._advance(run, ImportState.DONE)
            return self._finish(run, ImportResult(True, len(records), (), tuple(warnings)))
        except (ImportAbortedError, StoreError) as e:
            return self._abort(run, e, warnings)

    def _build_records(
        self,
        run: ImportRun,
        builder: RecordBuilder,
        data_rows: Sequence[Sequence[Any]],
        warnings: list[str],
    ) -> list[ReferenceRecord]:
        records: list[ReferenceRecord] = []
        skipped = 0
        with RowProgress(len(data_rows), description=f"Building {run.kind} rows") as progress:
            # Header is spreadsheet row 1
            for offset, row in enumerate(data_rows, start=2):
                outcome = builder.build(row, offset)
                progress.advance()
                if outcome.blank:
                    continue
                issue_type = "VALUE_COERCION" if outcome.record is not None else "ROW_SKIPPED"
                self._warn_all(run, outcome.warnings, warnings, offset, issue_type)
                if outcome.record is None:
                    skipped += 1
                    continue
                records.append(outcome.record)
            progress.set_postfix(valid=len(records), skipped=skipped)
        logger.debug("kind=%s built records=%d skipped_rows=%d", run.kind, len(records), skipped)
        return records

    def _persist(
        self, kind: DatasetKind, records: list[ReferenceRecord], clear_existing: bool, actor: Actor
    ) -> None:
        if clear_existing:
            self.store.delete(kind)
            if self.cache is not None:
                self.cache.record_deleted(kind)
        dataset = self.store.save(kind, records, actor.actor_id)
        if self.cache is not None:
            self.cache.record_saved(dataset)

    def _advance(self, run: ImportRun, target: ImportState) -> None:
        if not run.can_enter(target):
            raise ImportStateError(f"illegal import transition {run.state.value} -> {target.value}")
        run.state = target
        run.history.append(target)

    def _abort(self, run: ImportRun, error: Exception, warnings: list[str]) -> ImportResult:
        message = str(error)
        self._advance(run, ImportState.ABORTED)
        self._record(run, SHEET_LEVEL_ROW, SEVERITY_ERROR, getattr(error, "issue_type", "STORE_ERROR"), message)
        logger.error("import aborted kind=%s source=%s: %s", run.kind, run.source, message)
        return self._finish(run, ImportResult.failure(message, warnings))

    def _finish(self, run: ImportRun, result: ImportResult) -> ImportResult:
        run.end_time = datetime.now(UTC)
        if result.success:
            logger.info(
                "import done kind=%s source=%s imported=%d warnings=%d",
                run.kind, run.source, result.imported, len(result.warnings),
            )
        if self.issue_log is not None:
            try:
                path = self.issue_log.flush()
            except OSError as e:
                logger.warning("issue log flush failed: %s", e)
            else:
                if path is not None:
                    logger.info("import issues written to %s", path)
        return result

    def _warn(self, run: ImportRun, message: str, sink: list[str], row: int, issue_type: str) -> None:
        sink.append(message)
        self._record(run, row, SEVERITY_WARNING, issue_type, message)

    def _warn_all(
        self, run: ImportRun, messages: Sequence[str], sink: list[str], row: int, issue_type: str
    ) -> None:
        for message in messages:
            self._warn(run, message, sink, row, issue_type)

    def _record(self, run: ImportRun, row: int, severity: str, issue_type: str, message: str) -> None:
        if self.issue_log is None:
            return
        self.issue_log.append(ImportIssue.create(run.kind, run.source, row, severity, issue_type, message))


def _source_name(source: WorkbookSource) -> str:
    if isinstance(source, (str, Path)):
        return Path(source).name
    if isinstance(source, (bytes, bytearray)):
        return "<upload>"
    name = getattr(source, "name", None)
    return Path(name).name if isinstance(name, str) else "<upload>"
