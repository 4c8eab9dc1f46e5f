from __future__ import annotations

from dataclasses import dataclass

"""Actor model: who is calling, and whether they may mutate reference data.

Authentication and role checks live outside the pipeline; the pipeline only
consumes the resulting boolean.
"""

__all__ = [
    "Actor",
]


@dataclass(frozen=True)
class Actor:
    actor_id: str | None
    can_mutate: bool = False

    @classmethod
    def anonymous(cls) -> Actor:
        return cls(actor_id=None, can_mutate=False)

    @property
    def label(self) -> str:
        return self.actor_id or "<anonymous>"
