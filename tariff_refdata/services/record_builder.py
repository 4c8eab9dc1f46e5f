from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from typing import Any

from ..excel.coercion import is_empty, to_boolean, to_code, to_number, to_text
from ..excel.column_mapper import ColumnResolution
from ..excel.schemas import FieldSpec, FieldType, KindSchema
from ..models.dataset_kind import DatasetKind
from ..models.records import ReferenceRecord, TecArticle

"""Row -> record assembly.

For every mapped column the cell is coerced according to its field type,
required fields are checked, then kind-specific derived fields are filled in.

Kind A (TEC) derived fallback: source sheets sometimes leave the cumulative
rate columns empty. When ``cumul_sans_tva`` is exactly 0 it is recomputed as
dd + rsta + pcs + pua + pcc; when ``cumul_avec_tva`` is exactly 0 it becomes
cumul_sans_tva + tva. A cumulative rate of 0 declared on purpose cannot be
told apart from a missing one and is recomputed as well.
"""

__all__ = [
    "RowOutcome",
    "RecordBuilder",
    "derive_cumulative_rates",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RowOutcome:
    """Result of building one data row.

    ``row_number`` uses spreadsheet numbering (header row = 1).
    """
    row_number: int
    record: ReferenceRecord | None = None
    warnings: tuple[str, ...] = ()
    blank: bool = False  # all-empty row, skipped without warning
    derived_fields: tuple[str, ...] = ()


def derive_cumulative_rates(article: TecArticle) -> tuple[TecArticle, tuple[str, ...]]:
    """Fill zero cumulative rates from the component rates.

    Returns the (possibly new) article and the names of recomputed fields.
    """
    derived: list[str] = []
    cumul_sans_tva = article.cumul_sans_tva
    cumul_avec_tva = article.cumul_avec_tva
    if cumul_sans_tva == 0:
        cumul_sans_tva = article.base_rate
        derived.append("cumul_sans_tva")
    if cumul_avec_tva == 0:
        cumul_avec_tva = cumul_sans_tva + article.tva
        derived.append("cumul_avec_tva")
    if not derived:
        return article, ()
    return replace(article, cumul_sans_tva=cumul_sans_tva, cumul_avec_tva=cumul_avec_tva), tuple(derived)


_DERIVATIONS: dict[DatasetKind, Callable[[Any], tuple[Any, tuple[str, ...]]]] = {
    DatasetKind.TEC: derive_cumulative_rates,
}


class RecordBuilder:
    """Builds records for one import, bound to its schema and column resolution."""

    def __init__(self, schema: KindSchema, resolution: ColumnResolution) -> None:
        self.schema = schema
        self.resolution = resolution
        # Resolved once: (column index, field spec)
        self._columns: list[tuple[int, FieldSpec]] = [
            (index, schema.field(name)) for index, name in resolution.mapping.items()
        ]

    def build(self, row: Sequence[Any], row_number: int) -> RowOutcome:
        if all(is_empty(cell) for cell in row):
            return RowOutcome(row_number=row_number, blank=True)

        warnings: list[str] = []
        values: dict[str, Any] = {}
        for index, spec in self._columns:
            raw = row[index] if index < len(row) else None

            def sink(message: str, _field: str = spec.name) -> None:
                warnings.append(f"Row {row_number}, column {_field}: {message}")

            values[spec.name] = self._coerce(spec, raw, sink)

        missing = [name for name in self.schema.required_fields if values.get(name) in (None, "")]
        if missing:
            warnings.append(
                f"Row {row_number}: missing required field(s) {', '.join(missing)} "
                f"({self._describe(values)}), row skipped"
            )
            return RowOutcome(row_number=row_number, warnings=tuple(warnings))

        record = self.schema.record_type(**values)
        derived: tuple[str, ...] = ()
        derive = _DERIVATIONS.get(self.schema.kind)
        if derive is not None:
            record, derived = derive(record)
            if derived:
                logger.debug(
                    "row=%d id=%s derived fields recomputed: %s", row_number, record.identifier, derived
                )
        return RowOutcome(
            row_number=row_number, record=record, warnings=tuple(warnings), derived_fields=derived
        )

    @staticmethod
    def _coerce(spec: FieldSpec, raw: Any, sink: Callable[[str], None]) -> Any:
        if spec.field_type is FieldType.NUMBER:
            return to_number(raw, sink)
        if spec.field_type is FieldType.BOOLEAN:
            return to_boolean(raw, sink)
        if spec.field_type is FieldType.CODE:
            return to_code(raw, spec.max_len or 10)
        return to_text(raw)

    def _describe(self, values: dict[str, Any]) -> str:
        """Best available identifier for warning messages."""
        primary = self.schema.record_type.identifier_field
        if values.get(primary):
            return f"{primary}={values[primary]}"
        for spec in self.schema.fields:
            value = values.get(spec.name)
            if spec.field_type in (FieldType.TEXT, FieldType.CODE) and value:
                return f"{spec.name}={value}"
        return "no identifier"
