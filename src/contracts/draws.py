from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class SkipReason(str, Enum):
    NO_DATE_LEFT = "noDateLeft"
    DATE_PARSE_FAIL = "dateParseFail"
    NOT_ENOUGH_VALUES = "notEnoughValues"


@dataclass(frozen=True, slots=True)
class DrawRow:
    """
    One reconstructed draw.

    Invariants (enforced by the row assembler, never relaxed downstream):
    - len(values) == game arity, every value inside the game domain
    - values are ordered left-to-right by X on the page, not by value
    - `special`, when present, came from a different cell than every main value
    """

    date: str  # ISO YYYY-MM-DD
    session: str | None  # session code ("M", "E", ...) or None for single daily draws
    values: tuple[int, ...]
    special: int | None = None
    page: int | None = None
    pane: int | None = None

    def key(self) -> tuple[str, str]:
        return (self.date, self.session or "")

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "session": self.session,
            "values": list(self.values),
            "special": self.special,
            "page": self.page,
            "pane": self.pane,
        }


@dataclass(frozen=True, slots=True)
class SkipRecord:
    # Diagnostic only; never promoted to a DrawRow.
    page: int
    pane: int
    x: float
    y: float
    anchor_text: str
    reason: SkipReason

    def to_dict(self) -> dict[str, Any]:
        return {
            "page": self.page,
            "pane": self.pane,
            "x": self.x,
            "y": self.y,
            "anchor_text": self.anchor_text,
            "reason": self.reason.value,
        }


@dataclass(frozen=True, slots=True)
class AttemptSummary:
    attempt: int  # 0-based
    params: dict[str, float]
    built: int
    skipped: int
    skip_rate: float
    score: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempt": self.attempt,
            "params": dict(self.params),
            "built": self.built,
            "skipped": self.skipped,
            "skip_rate": self.skip_rate,
            "score": self.score,
        }


@dataclass(frozen=True, slots=True)
class PageSummary:
    page: int
    tokens_in: int
    cells_by_kind: dict[str, int]
    columns_by_kind: dict[str, int]
    panes: list[dict[str, Any]]
    built: int
    skipped: int
    chosen_attempt: int
    attempts: list[AttemptSummary]

    def to_dict(self) -> dict[str, Any]:
        return {
            "page": self.page,
            "tokens_in": self.tokens_in,
            "cells_by_kind": dict(self.cells_by_kind),
            "columns_by_kind": dict(self.columns_by_kind),
            "panes": [dict(p) for p in self.panes],
            "built": self.built,
            "skipped": self.skipped,
            "chosen_attempt": self.chosen_attempt,
            "attempts": [a.to_dict() for a in self.attempts],
        }


@dataclass(frozen=True, slots=True)
class DrawExtractionResult:
    game: str
    ok: bool
    errors: list[str]
    meta: dict[str, Any]  # config + version, counts, warnings, histograms
    rows: list[DrawRow]  # merged, unique per (date, session), ascending by date
    skips: list[SkipRecord]
    pages: list[PageSummary]

    def to_dict(self) -> dict[str, Any]:
        return {
            "game": self.game,
            "ok": self.ok,
            "errors": list(self.errors),
            "meta": dict(self.meta),
            "rows": [r.to_dict() for r in self.rows],
            "skips": [s.to_dict() for s in self.skips],
            "pages": [p.to_dict() for p in self.pages],
        }
