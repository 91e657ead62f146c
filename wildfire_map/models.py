"""
Data model for the wildfire map.

`FireRecord` is one row of the fire dataset and never changes after loading.
`SelectionState` is the only mutable application state; `VisibleFire` and
`Circle` are derived views rebuilt on every update.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import FrozenSet, Optional


@dataclass(frozen=True)
class FireRecord:
    """Immutable record for one fire."""
    name: Optional[str]
    latitude: float
    longitude: float
    size_acres: float
    discovered: Optional[datetime]
    contained: Optional[datetime]
    # 0 means the duration is unknown, not zero
    duration_days: float
    cause: Optional[str]
    record_id: Optional[str] = None

    def identity_key(self) -> str:
        """Key used to match this record against circles already on screen."""
        if isinstance(self.record_id, str) and self.record_id:
            return self.record_id
        name = self.name if isinstance(self.name, str) else None
        return f"{name}{self.latitude}{self.longitude}"


@dataclass(frozen=True)
class SelectionState:
    day_index: int = 0
    active_causes: FrozenSet[str] = field(default_factory=frozenset)
    query: str = ""

    def with_day(self, day_index: int) -> "SelectionState":
        return replace(self, day_index=day_index)

    def with_causes(self, causes) -> "SelectionState":
        return replace(self, active_causes=frozenset(causes))

    def with_query(self, query: str) -> "SelectionState":
        return replace(self, query=query or "")

    @property
    def normalized_query(self) -> str:
        return self.query.strip().lower()


@dataclass(frozen=True)
class VisibleFire:
    key: str
    x: float
    y: float
    radius: float
    color: str
    record: FireRecord


@dataclass
class Circle:
    """One on-screen circle; attributes are set when it enters."""
    key: str
    x: float
    y: float
    radius: float
    color: str
    record: FireRecord

    @classmethod
    def from_visible(cls, key: str, fire: VisibleFire) -> "Circle":
        return cls(key=key, x=fire.x, y=fire.y, radius=fire.radius, color=fire.color, record=fire.record)

    def rebind(self, fire: VisibleFire) -> None:
        self.x = fire.x
        self.y = fire.y
        self.radius = fire.radius
        self.color = fire.color
        self.record = fire.record
