from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar

from .dataset_kind import DatasetKind

"""Record models for the three reference datasets.

Each record is one validated spreadsheet row after coercion. Field metadata
carries the ``wire`` name used in the stored JSON documents, so records read
back from the reference table keep the key names other consumers already
rely on (``sh10Code``, ``cumulSansTVA``, ``codeSH`` ...).
"""

__all__ = [
    "ReferenceRecord",
    "TecArticle",
    "VocProduct",
    "TarifPortProduct",
    "RECORD_TYPES",
    "records_from_wire",
]


def _wire(name: str) -> dict[str, str]:
    return {"wire": name}


class ReferenceRecord:
    """Mixin providing wire (de)serialization for record dataclasses."""

    # Attribute used as the human readable identifier in warnings
    identifier_field: ClassVar[str] = ""

    @property
    def identifier(self) -> str:
        return str(getattr(self, self.identifier_field, "") or "")

    def to_dict(self) -> dict[str, Any]:
        """Serialize using wire names (JSON-compatible values only)."""
        return {f.metadata.get("wire", f.name): getattr(self, f.name) for f in fields(self)}  # type: ignore[arg-type]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Any:
        """Build a record from a wire dict. Unknown keys are ignored, missing keys keep defaults."""
        kwargs: dict[str, Any] = {}
        for f in fields(cls):  # type: ignore[arg-type]
            wire = f.metadata.get("wire", f.name)
            if wire in data:
                kwargs[f.name] = data[wire]
            elif f.name in data:
                kwargs[f.name] = data[f.name]
        return cls(**kwargs)


@dataclass(frozen=True)
class TecArticle(ReferenceRecord):
    """Common external tariff article (kind A)."""
    identifier_field: ClassVar[str] = "sh10_code"

    sh10_code: str = field(default="", metadata=_wire("sh10Code"))
    designation: str = field(default="", metadata=_wire("designation"))
    us: str = field(default="", metadata=_wire("us"))  # statistical unit
    # Rates, in percent
    dd: float = field(default=0.0, metadata=_wire("dd"))  # customs duty
    rsta: float = field(default=0.0, metadata=_wire("rsta"))
    pcs: float = field(default=0.0, metadata=_wire("pcs"))
    pua: float = field(default=0.0, metadata=_wire("pua"))
    pcc: float = field(default=0.0, metadata=_wire("pcc"))
    rrr: float = field(default=0.0, metadata=_wire("rrr"))
    rcp: float = field(default=0.0, metadata=_wire("rcp"))
    cumul_sans_tva: float = field(default=0.0, metadata=_wire("cumulSansTVA"))
    cumul_avec_tva: float = field(default=0.0, metadata=_wire("cumulAvecTVA"))
    tva: float = field(default=0.0, metadata=_wire("tva"))
    sh6_code: str = field(default="", metadata=_wire("sh6Code"))
    # Opaque special codes
    tub: str = field(default="", metadata=_wire("tub"))
    dus: str = field(default="", metadata=_wire("dus"))
    dud: str = field(default="", metadata=_wire("dud"))
    tcb: str = field(default="", metadata=_wire("tcb"))
    tsm: str = field(default="", metadata=_wire("tsm"))
    tsb: str = field(default="", metadata=_wire("tsb"))
    psv: str = field(default="", metadata=_wire("psv"))
    tai: str = field(default="", metadata=_wire("tai"))
    tab: str = field(default="", metadata=_wire("tab"))
    tuf: str = field(default="", metadata=_wire("tuf"))

    @property
    def base_rate(self) -> float:
        """Sum of the duty and the four surcharges that make up the cumulative rate."""
        return self.dd + self.rsta + self.pcs + self.pua + self.pcc


@dataclass(frozen=True)
class VocProduct(ReferenceRecord):
    """Verification-of-conformity product (kind B)."""
    identifier_field: ClassVar[str] = "code_sh"

    code_sh: str = field(default="", metadata=_wire("codeSH"))
    designation: str = field(default="", metadata=_wire("designation"))
    observation: str = field(default="", metadata=_wire("observation"))
    exempte: bool = field(default=False, metadata=_wire("exempte"))


@dataclass(frozen=True)
class TarifPortProduct(ReferenceRecord):
    """Port fee schedule line (kind C)."""
    identifier_field: ClassVar[str] = "libelle_produit"

    libelle_produit: str = field(default="", metadata=_wire("libelle_produit"))
    chapitre: str = field(default="", metadata=_wire("chapitre"))
    tp: str = field(default="", metadata=_wire("tp"))
    coderedevance: str = field(default="", metadata=_wire("coderedevance"))


RECORD_TYPES: dict[DatasetKind, type[ReferenceRecord]] = {
    DatasetKind.TEC: TecArticle,
    DatasetKind.VOC: VocProduct,
    DatasetKind.TARIFPORT: TarifPortProduct,
}


def records_from_wire(kind: DatasetKind, items: Iterable[dict[str, Any]]) -> tuple[ReferenceRecord, ...]:
    """Rebuild typed records from stored JSON objects."""
    record_type = RECORD_TYPES[kind]
    return tuple(record_type.from_dict(item) for item in items if isinstance(item, dict))
