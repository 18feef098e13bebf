from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from contracts.layout import Column, Pane
from contracts.tokens import Cell, CellKind


@dataclass(frozen=True, slots=True)
class Exclusion:
    """X stripe around the special value; nothing inside it counts as a main value."""

    x: float
    radius: float

    def covers(self, x: float) -> bool:
        return abs(x - self.x) <= self.radius


@dataclass(frozen=True, slots=True)
class ValueSearch:
    """Everything a value strategy needs to look for one row's main values."""

    anchor: Cell
    tag: Cell | None
    exclusion: Exclusion | None
    pane: Pane
    # Value columns of this pane, then extended with the next pane(s) for cross-pane lookups.
    scopes: tuple[tuple[Column, ...], ...]
    y: float
    y_tol: float
    x_group_eps: float
    arity: int
    accepts: Callable[[list[int]], bool]
    # Center of the next date column right of the anchor: where the neighbouring table starts.
    x_limit: float | None = None
    baseline_slack: float = 0.0

    def excluded(self, x: float) -> bool:
        return self.exclusion is not None and self.exclusion.covers(x)

    def within_limit(self, x: float) -> bool:
        return self.x_limit is None or x < self.x_limit


def nearest_in_band(col: Column, y: float, tol: float, kind: CellKind, skip: Callable[[float], bool] | None = None) -> Cell | None:
    best: Cell | None = None
    best_dy = 0.0
    for it in col.cells_of(kind):
        if skip is not None and skip(it.x):
            continue
        dy = abs(it.y - y)
        if dy <= tol and (best is None or dy < best_dy):
            best, best_dy = it, dy
    return best


def _accept(search: ValueSearch, cells: list[Cell]) -> list[Cell] | None:
    values = [c.value for c in cells if c.value is not None]
    if len(cells) != search.arity or len(values) != search.arity:
        return None
    return cells if search.accepts(values) else None


def pick_values(search: ValueSearch, cols: tuple[Column, ...], x_min: float, x_max: float | None) -> list[Cell] | None:
    """
    Pick exactly `arity` values strictly inside (x_min, x_max) on the anchor's band.

    The window never reaches past `search.x_limit`, so a neighbouring table on the same
    baseline contributes nothing. Columns are scored by Y alignment (offsets within
    `baseline_slack` count as aligned), then by X distance to the window's center; a
    window with no right edge of its own is read from its left edge. When column scoring
    comes up short, fall back to scanning tokens grouped by X proximity (one value per
    group).
    """
    ref_x = x_min if x_max is None else (x_min + x_max) / 2.0

    def inside(x: float) -> bool:
        return x > x_min and (x_max is None or x < x_max) and search.within_limit(x)

    scored: list[tuple[float, float, float, Cell]] = []
    for col in cols:
        if not inside(col.center) or search.excluded(col.center):
            continue
        tok = nearest_in_band(col, search.y, search.y_tol, CellKind.VALUE, skip=search.excluded)
        if tok is None:
            continue
        misalign = max(0.0, abs(tok.y - search.y) - search.baseline_slack)
        scored.append((misalign, abs(col.center - ref_x), col.center, tok))
    scored.sort(key=lambda s: (s[0], s[1], s[2]))
    top = sorted(scored[: search.arity], key=lambda s: s[2])
    if len(top) == search.arity:
        found = _accept(search, [s[3] for s in top])
        if found is not None:
            return found

    tokens = sorted(
        (
            c
            for col in cols
            for c in col.items
            if c.kind == CellKind.VALUE
            and inside(c.x)
            and abs(c.y - search.y) <= search.y_tol
            and not search.excluded(c.x)
        ),
        key=lambda c: (c.x, -c.y),
    )
    if not tokens:
        return None
    groups: list[list[Cell]] = []
    for t in tokens:
        if not groups or abs(groups[-1][-1].x - t.x) > search.x_group_eps:
            groups.append([t])
        else:
            groups[-1].append(t)
    picked = sorted((min(g, key=lambda c: abs(c.y - search.y)) for g in groups), key=lambda c: c.x)
    return _accept(search, picked[: search.arity])


def between_anchor_and_tag(search: ValueSearch) -> list[Cell] | None:
    if search.tag is None:
        return None
    lo, hi = sorted((search.anchor.x, search.tag.x))
    for cols in search.scopes:
        found = pick_values(search, cols, lo, hi)
        if found is not None:
            return found
    return None


def right_of_tag(search: ValueSearch) -> list[Cell] | None:
    # Layouts where the special tag precedes the main values.
    if search.tag is None:
        return None
    for cols in search.scopes:
        found = pick_values(search, cols, search.tag.x, None)
        if found is not None:
            return found
    return None


def right_of_anchor(search: ValueSearch) -> list[Cell] | None:
    if search.tag is not None:
        return None
    for cols in search.scopes:
        found = pick_values(search, cols, search.anchor.x, None)
        if found is not None:
            return found
    return None


def pane_center_columns(search: ValueSearch) -> list[Cell] | None:
    """
    Last resort, confined to the anchor's pane: the text stream is column-major, so the
    main values are the value columns nearest the pane center. One value per column.
    """
    mid = search.pane.center_x()
    ranked: list[tuple[Column, Cell]] = []
    for col in search.pane.columns_of(CellKind.VALUE):
        if search.excluded(col.center) or not search.within_limit(col.center):
            continue
        tok = nearest_in_band(col, search.y, search.y_tol, CellKind.VALUE, skip=search.excluded)
        if tok is not None:
            ranked.append((col, tok))
    if len(ranked) < search.arity:
        return None
    ranked.sort(key=lambda r: (abs(r[0].center - mid), r[0].center))
    top = sorted(ranked[: search.arity], key=lambda r: r[0].center)
    return _accept(search, [r[1] for r in top])


ValueStrategy = Callable[[ValueSearch], "list[Cell] | None"]

# Tried in order; each escalates only when the previous one did not find exactly `arity` values.
VALUE_STRATEGIES: tuple[tuple[str, ValueStrategy], ...] = (
    ("between_anchor_and_tag", between_anchor_and_tag),
    ("right_of_tag", right_of_tag),
    ("right_of_anchor", right_of_anchor),
    ("pane_center_columns", pane_center_columns),
)


def find_values(search: ValueSearch) -> tuple[str, list[Cell]] | None:
    for name, strategy in VALUE_STRATEGIES:
        found = strategy(search)
        if found is not None:
            return name, found
    return None
