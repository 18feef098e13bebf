from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from contracts.tokens import ValueDomain

MIDDAY_EVENING: dict[str, str] = {"M": "midday", "E": "evening"}
FOUR_A_DAY: dict[str, str] = {"M": "morning", "D": "day", "E": "evening", "N": "night"}

_DIGITS = ValueDomain(0, 9)


class UnknownGameError(KeyError):
    pass


@dataclass(frozen=True, slots=True)
class GameSpec:
    """
    Per-game extraction parameters (configuration, never discovered at runtime).

    `pane_count` is the number of side-by-side draw tables a full page of the source
    document packs; the pane partitioner only splits when enough value columns exist
    to fill that many panes.
    """

    key: str
    arity: int
    domain: ValueDomain
    has_special: bool = False
    special_domain: ValueDomain | None = None
    session_codes: dict[str, str] = field(default_factory=dict)  # empty => one draw per day
    pane_count: int = 1
    distinct_values: bool = False
    era_start: str | None = None  # ISO date; earlier rows are dropped after merge
    tag_markers: tuple[str, ...] = ("FB",)

    def validate(self) -> None:
        if self.arity <= 0:
            raise ValueError("arity must be > 0")
        if self.pane_count <= 0:
            raise ValueError("pane_count must be > 0")
        if self.distinct_values and (self.domain.max_value - self.domain.min_value + 1) < self.arity:
            raise ValueError("domain too small for distinct values")
        for code in self.session_codes:
            if len(code) != 1 or not code.isalpha() or code != code.upper():
                raise ValueError(f"session codes must be single upper-case letters, got {code!r}")
        if self.has_special and not self.tag_markers:
            raise ValueError("has_special requires at least one tag marker")

    @property
    def has_sessions(self) -> bool:
        return bool(self.session_codes)

    def effective_special_domain(self) -> ValueDomain:
        return self.special_domain or self.domain

    def min_value_columns(self) -> int:
        return self.pane_count * self.arity

    def accepts_values(self, values: list[int] | tuple[int, ...]) -> bool:
        if len(values) != self.arity:
            return False
        if not all(self.domain.contains(v) for v in values):
            return False
        if self.distinct_values and len(set(values)) != len(values):
            return False
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "arity": self.arity,
            "domain": self.domain.to_dict(),
            "has_special": self.has_special,
            "special_domain": (None if self.special_domain is None else self.special_domain.to_dict()),
            "session_codes": dict(self.session_codes),
            "pane_count": self.pane_count,
            "distinct_values": self.distinct_values,
            "era_start": self.era_start,
            "tag_markers": list(self.tag_markers),
        }


def _digit_game(key: str, k: int, era_start: str) -> GameSpec:
    return GameSpec(
        key=key,
        arity=k,
        domain=_DIGITS,
        has_special=True,
        special_domain=_DIGITS,
        session_codes=MIDDAY_EVENING,
        pane_count=3,
        era_start=era_start,
    )


_REGISTRY: dict[str, GameSpec] = {
    g.key: g
    for g in (
        _digit_game("fl_pick2", 2, "2016-08-24"),
        _digit_game("fl_pick3", 3, "1988-05-03"),
        _digit_game("fl_pick4", 4, "1991-07-04"),
        _digit_game("fl_pick5", 5, "2016-08-24"),
        GameSpec(
            key="fl_fantasy5",
            arity=5,
            domain=ValueDomain(1, 36),
            session_codes=MIDDAY_EVENING,
            distinct_values=True,
            era_start="1999-04-25",
        ),
        GameSpec(key="fl_lotto", arity=6, domain=ValueDomain(1, 53), distinct_values=True, era_start="1999-10-24"),
        GameSpec(
            key="fl_jackpot_triple_play",
            arity=6,
            domain=ValueDomain(1, 46),
            distinct_values=True,
            era_start="2019-01-30",
        ),
        GameSpec(key="ny_pick10", arity=10, domain=ValueDomain(1, 80), distinct_values=True, era_start="1987-01-01"),
        GameSpec(key="ny_quick_draw", arity=20, domain=ValueDomain(1, 80), distinct_values=True, era_start="1995-09-02"),
        GameSpec(
            key="tx_all_or_nothing",
            arity=12,
            domain=ValueDomain(1, 24),
            session_codes=FOUR_A_DAY,
            distinct_values=True,
        ),
    )
}


def list_games() -> list[str]:
    return sorted(_REGISTRY)


def get_game(key: str) -> GameSpec:
    k = key.strip().lower()
    try:
        return _REGISTRY[k]
    except KeyError:
        raise UnknownGameError(f"Unknown game {key!r}; expected one of {', '.join(list_games())}") from None
