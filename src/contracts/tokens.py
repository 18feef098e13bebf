from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class CellKind(str, Enum):
    DATE = "date"
    SESSION = "session"
    VALUE = "value"
    TAG = "tag"
    NOISE = "noise"


# Tie-break order used when labeling a column by majority kind.
KIND_PRIORITY: tuple[CellKind, ...] = (
    CellKind.DATE,
    CellKind.SESSION,
    CellKind.TAG,
    CellKind.VALUE,
    CellKind.NOISE,
)


@dataclass(frozen=True, slots=True)
class ValueDomain:
    """Inclusive integer range accepted as a draw value (0..9 for digit games, 1..80 for keno-style)."""

    min_value: int
    max_value: int

    def __post_init__(self) -> None:
        if self.min_value > self.max_value:
            raise ValueError(f"invalid domain: {self.min_value}..{self.max_value}")

    def contains(self, n: int) -> bool:
        return self.min_value <= n <= self.max_value

    def max_digits(self) -> int:
        return max(len(str(abs(self.min_value))), len(str(abs(self.max_value))))

    def to_dict(self) -> dict[str, Any]:
        return {"min_value": self.min_value, "max_value": self.max_value}


@dataclass(frozen=True, slots=True)
class Token:
    """Positioned text fragment supplied by the text-layer decoder (PDF space, y grows upward)."""

    text: str
    x: float
    y: float
    page: int

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "Token":
        return Token(
            text=str(d.get("text", "")),
            x=float(d["x"]),
            y=float(d["y"]),
            page=int(d["page"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "x": self.x, "y": self.y, "page": self.page}


@dataclass(frozen=True, slots=True)
class Cell:
    """
    A classified token.

    The normalized payload travels with the cell so later stages never re-parse text:
    - DATE cells carry `iso_date`
    - SESSION cells carry `session` (upper-case code)
    - VALUE cells carry `value`
    """

    text: str
    x: float
    y: float
    page: int
    kind: CellKind
    value: int | None = None
    iso_date: str | None = None
    session: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "text": self.text,
            "x": self.x,
            "y": self.y,
            "page": self.page,
            "kind": self.kind.value,
        }
        if self.value is not None:
            out["value"] = self.value
        if self.iso_date is not None:
            out["iso_date"] = self.iso_date
        if self.session is not None:
            out["session"] = self.session
        return out
