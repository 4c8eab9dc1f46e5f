from __future__ import annotations

import logging
import unicodedata
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from ..models.dataset_kind import DatasetKind
from ..models.import_result import ImportAbortedError
from .coercion import is_empty
from .schemas import KindSchema, get_schema

"""Header -> canonical field resolution.

Resolution runs in two passes over the header row:

1. exact: normalized header equals a normalized synonym
2. partial: for headers still unmatched, header contains a synonym or a
   synonym contains the header; the first field in schema order wins

A field is claimed by at most one column. Later columns resolving to an
already claimed field are reported as duplicates and ignored. Every match is
kept in ``ColumnResolution.matches`` so that partial (ambiguous) matches can
be inspected instead of being applied silently.
"""

__all__ = [
    "MappingError",
    "ColumnMatch",
    "ColumnResolution",
    "ColumnMapper",
    "normalize_header",
]

logger = logging.getLogger(__name__)

METHOD_EXACT = "exact"
METHOD_PARTIAL = "partial"


class MappingError(ImportAbortedError):
    """Raised when required fields have no matching header column."""
    issue_type = "MISSING_COLUMNS"

    def __init__(self, missing: Sequence[str], resolution: ColumnResolution) -> None:
        self.missing = list(missing)
        self.resolution = resolution
        super().__init__(f"Missing required columns: {', '.join(self.missing)}")


def normalize_header(value: Any) -> str:
    """Trim, lowercase, strip diacritics and collapse internal whitespace."""
    text = "" if is_empty(value) else str(value)
    decomposed = unicodedata.normalize("NFD", text.strip().lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.split())


@dataclass(frozen=True)
class ColumnMatch:
    index: int
    header: str
    field: str
    method: str  # exact / partial
    synonym: str


@dataclass
class ColumnResolution:
    kind: DatasetKind
    matches: list[ColumnMatch] = field(default_factory=list)
    unmatched: list[str] = field(default_factory=list)
    duplicates: list[ColumnMatch] = field(default_factory=list)

    @property
    def mapping(self) -> dict[int, str]:
        """Column index -> field name."""
        return {m.index: m.field for m in sorted(self.matches, key=lambda m: m.index)}

    @property
    def mapped_fields(self) -> set[str]:
        return {m.field for m in self.matches}

    def column_of(self, field_name: str) -> int | None:
        for m in self.matches:
            if m.field == field_name:
                return m.index
        return None

    def warnings(self) -> list[str]:
        messages = [f'Unrecognized column: "{h}"' for h in self.unmatched]
        for m in self.matches:
            if m.method == METHOD_PARTIAL:
                messages.append(
                    f'Column "{m.header}" mapped to field "{m.field}" by partial match on "{m.synonym}"'
                )
        for d in self.duplicates:
            messages.append(
                f'Column "{d.header}" duplicates field "{d.field}" (already mapped), column ignored'
            )
        return messages


class ColumnMapper:
    """Resolve header rows against the synonym table of a dataset kind."""

    def __init__(self, extra_synonyms: dict[str, dict[str, list[str]]] | None = None) -> None:
        self._extra = extra_synonyms or {}

    def schema_for(self, kind: DatasetKind) -> KindSchema:
        return get_schema(kind, self._extra.get(kind.value))

    def resolve(self, headers: Sequence[Any], kind: DatasetKind) -> ColumnResolution:
        """Resolve ``headers`` for ``kind``.

        Raises:
            MappingError: If a required field has no column. The exception
                carries the partial resolution for diagnostics.
        """
        schema = self.schema_for(kind)
        resolution = ColumnResolution(kind=kind)
        normalized = [normalize_header(h) for h in headers]
        synonyms = [(f.name, [(s, normalize_header(s)) for s in f.synonyms]) for f in schema.fields]
        claimed: set[str] = set()
        pending: list[int] = []

        for index, norm in enumerate(normalized):
            if not norm:
                continue
            match = self._exact(index, str(headers[index]).strip(), norm, synonyms)
            if match is None:
                pending.append(index)
            elif match.field in claimed:
                resolution.duplicates.append(match)
            else:
                claimed.add(match.field)
                resolution.matches.append(match)

        for index in pending:
            header = str(headers[index]).strip()
            candidates = self._partial(index, header, normalized[index], synonyms, claimed)
            if not candidates:
                resolution.unmatched.append(header)
                continue
            if len(candidates) > 1:
                logger.debug(
                    "kind=%s header=%r ambiguous partial match fields=%s -> %s",
                    kind.value,
                    header,
                    [c.field for c in candidates],
                    candidates[0].field,
                )
            chosen = candidates[0]
            claimed.add(chosen.field)
            resolution.matches.append(chosen)

        for m in sorted(resolution.matches, key=lambda m: m.index):
            logger.debug(
                "kind=%s column=%d header=%r field=%s method=%s synonym=%r",
                kind.value, m.index, m.header, m.field, m.method, m.synonym,
            )

        missing = [name for name in schema.required_fields if name not in claimed]
        if missing:
            raise MappingError(missing, resolution)
        return resolution

    @staticmethod
    def _exact(
        index: int, header: str, norm: str, synonyms: list[tuple[str, list[tuple[str, str]]]]
    ) -> ColumnMatch | None:
        for field_name, pairs in synonyms:
            for raw, syn in pairs:
                if syn == norm:
                    return ColumnMatch(index, header, field_name, METHOD_EXACT, raw)
        return None

    @staticmethod
    def _partial(
        index: int,
        header: str,
        norm: str,
        synonyms: list[tuple[str, list[tuple[str, str]]]],
        claimed: set[str],
    ) -> list[ColumnMatch]:
        found: list[ColumnMatch] = []
        for field_name, pairs in synonyms:
            if field_name in claimed:
                continue
            for raw, syn in pairs:
                if syn and (syn in norm or norm in syn):
                    found.append(ColumnMatch(index, header, field_name, METHOD_PARTIAL, raw))
                    break
        return found
