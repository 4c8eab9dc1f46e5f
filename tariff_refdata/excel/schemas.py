from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from ..models.dataset_kind import DatasetKind
from ..models.records import ReferenceRecord, TarifPortProduct, TecArticle, VocProduct

"""Declarative column synonym tables, one per dataset kind.

Each kind is an ordered list of FieldSpec. Order matters: when a header only
matches partially, the first field (in this order) that matches wins. The
synonyms are written in their natural spelling; accents, case and spacing are
normalized at comparison time.
"""

__all__ = [
    "FieldType",
    "FieldSpec",
    "KindSchema",
    "SCHEMAS",
    "get_schema",
]


class FieldType(Enum):
    NUMBER = "number"
    BOOLEAN = "boolean"
    CODE = "code"
    TEXT = "text"


@dataclass(frozen=True)
class FieldSpec:
    name: str  # record attribute
    field_type: FieldType
    synonyms: tuple[str, ...]
    required: bool = False
    max_len: int | None = None  # CODE fields only


@dataclass(frozen=True)
class KindSchema:
    kind: DatasetKind
    record_type: type[ReferenceRecord]
    fields: tuple[FieldSpec, ...]

    @property
    def required_fields(self) -> list[str]:
        return [f.name for f in self.fields if f.required]

    def field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(name)

    def with_extra_synonyms(self, extra: dict[str, list[str]] | None) -> KindSchema:
        """Return a copy with configured synonyms appended after the built-in ones."""
        if not extra:
            return self
        unknown = set(extra) - {f.name for f in self.fields}
        if unknown:
            raise KeyError(f"unknown fields for {self.kind.value}: {sorted(unknown)}")
        fields = tuple(
            replace(f, synonyms=f.synonyms + tuple(extra.get(f.name, ()))) for f in self.fields
        )
        return replace(self, fields=fields)


def _rate(name: str, *synonyms: str) -> FieldSpec:
    return FieldSpec(name, FieldType.NUMBER, (name, *synonyms))


def _special(name: str) -> FieldSpec:
    return FieldSpec(name, FieldType.TEXT, (name,))


TEC_SCHEMA = KindSchema(
    kind=DatasetKind.TEC,
    record_type=TecArticle,
    fields=(
        FieldSpec(
            "sh10_code",
            FieldType.CODE,
            ("Code SH10", "SH10 Code", "Code SH 10", "SH10", "Code SH", "NTS"),
            required=True,
            max_len=10,
        ),
        FieldSpec(
            "designation",
            FieldType.TEXT,
            ("Désignation", "Designation des marchandises", "Libellé", "Description"),
            required=True,
        ),
        FieldSpec("us", FieldType.TEXT, ("US", "Unité", "Unité statistique")),
        _rate("dd", "Droit de douane", "Droits de douane"),
        _rate("rsta"),
        _rate("pcs"),
        _rate("pua"),
        _rate("pcc"),
        _rate("rrr"),
        _rate("rcp"),
        _rate("cumul_sans_tva", "Cumul Sans TVA", "Taux cumulé sans TVA", "Taux cumile sans TVA"),
        _rate("cumul_avec_tva", "Cumul Avec TVA", "Taux cumulé avec TVA", "Taux cumile avec TVA"),
        _rate("tva", "Taux TVA"),
        FieldSpec(
            "sh6_code",
            FieldType.CODE,
            ("Code SH6", "SH6 Code", "Code SH 6", "SH6", "H6 Cod", "H6 Code"),
            max_len=6,
        ),
        _special("tub"),
        _special("dus"),
        _special("dud"),
        _special("tcb"),
        _special("tsm"),
        _special("tsb"),
        _special("psv"),
        _special("tai"),
        _special("tab"),
        _special("tuf"),
    ),
)

VOC_SCHEMA = KindSchema(
    kind=DatasetKind.VOC,
    record_type=VocProduct,
    fields=(
        FieldSpec(
            "code_sh",
            FieldType.CODE,
            ("Code SH", "Code SH6", "Code SH 6", "Code SH10", "NTS"),
            required=True,
            max_len=10,
        ),
        FieldSpec("designation", FieldType.TEXT, ("Désignation", "Libellé", "Description"), required=True),
        FieldSpec("observation", FieldType.TEXT, ("Observation", "Observations", "Remarque")),
        FieldSpec("exempte", FieldType.BOOLEAN, ("Exempté", "Exempte", "Exemption", "Exonéré")),
    ),
)

TARIFPORT_SCHEMA = KindSchema(
    kind=DatasetKind.TARIFPORT,
    record_type=TarifPortProduct,
    fields=(
        FieldSpec(
            "libelle_produit",
            FieldType.TEXT,
            ("Libellé Produit", "Libelle_produit", "Produit", "Libellé"),
            required=True,
        ),
        FieldSpec("chapitre", FieldType.TEXT, ("Chapitre", "Chap")),
        FieldSpec("tp", FieldType.TEXT, ("TP", "Type produit")),
        FieldSpec("coderedevance", FieldType.TEXT, ("Code Redevance", "CodeRedevance", "Redevance")),
    ),
)

SCHEMAS: dict[DatasetKind, KindSchema] = {
    DatasetKind.TEC: TEC_SCHEMA,
    DatasetKind.VOC: VOC_SCHEMA,
    DatasetKind.TARIFPORT: TARIFPORT_SCHEMA,
}


def get_schema(kind: DatasetKind, extra_synonyms: dict[str, list[str]] | None = None) -> KindSchema:
    return SCHEMAS[kind].with_extra_synonyms(extra_synonyms)
