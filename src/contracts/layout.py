from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .tokens import Cell, CellKind


@dataclass(frozen=True, slots=True)
class Column:
    # Page-local: built fresh for every clustering pass, no identity across pages.
    center: float
    kind: CellKind
    items: tuple[Cell, ...]  # ordered top-down (y desc), then x asc

    def cells_of(self, kind: CellKind) -> list[Cell]:
        return [c for c in self.items if c.kind == kind]

    def to_dict(self) -> dict[str, Any]:
        return {
            "center": self.center,
            "kind": self.kind.value,
            "items": len(self.items),
        }


@dataclass(frozen=True, slots=True)
class Pane:
    index: int  # 0-based, left to right
    columns: tuple[Column, ...]  # ordered by center asc
    min_x: float
    max_x: float

    def columns_of(self, kind: CellKind) -> list[Column]:
        return [c for c in self.columns if c.kind == kind]

    def center_x(self) -> float:
        return (self.min_x + self.max_x) / 2.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "min_x": self.min_x,
            "max_x": self.max_x,
            "centers": [c.center for c in self.columns],
        }
