from __future__ import annotations

from enum import Enum

"""DatasetKind enum for the reference-data import pipeline.

Three fixed tariff schedules are handled, each imported and stored
independently. The letters A/B/C are the generic names used in reports;
the values are the identifiers stored in the ``type`` column of the
reference table.
"""

__all__ = [
    "DatasetKind",
]


class DatasetKind(Enum):
    """Tariff schedule type.

    - TEC (A): common external tariff articles (HS codes + duty rates)
    - VOC (B): verification-of-conformity product list
    - TARIFPORT (C): port fee schedule
    """
    TEC = "tec"
    VOC = "voc"
    TARIFPORT = "tarifport"

    @property
    def letter(self) -> str:
        return _LETTERS[self]

    @classmethod
    def parse(cls, value: str | DatasetKind) -> DatasetKind:
        """Resolve a kind from its value, member name or letter (case-insensitive).

        Raises:
            ValueError: If ``value`` names no known kind
        """
        if isinstance(value, DatasetKind):
            return value
        key = str(value).strip().lower()
        for kind in cls:
            if key in (kind.value, kind.name.lower(), kind.letter.lower()):
                return kind
        raise ValueError(f"unknown dataset kind: {value!r}")


_LETTERS = {
    DatasetKind.TEC: "A",
    DatasetKind.VOC: "B",
    DatasetKind.TARIFPORT: "C",
}
