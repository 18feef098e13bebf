from __future__ import annotations

import logging
from collections import Counter
from statistics import median
from typing import Iterable

from contracts.layout import Column
from contracts.tokens import KIND_PRIORITY, Cell, CellKind

from .config import ColumnConfig

log = logging.getLogger(__name__)


def merge_epsilon(xs: list[float], hint: float | None, config: ColumnConfig) -> float:
    """
    Per-page X merge epsilon from the gaps actually observed between distinct X positions.

    Tight panes (small gaps) keep neighboring value columns apart; sub-pixel kerning
    jitter still lands in the same group.
    """
    ordered = sorted(xs)
    gaps = [b - a for a, b in zip(ordered, ordered[1:])]
    med_gap = float(median(gaps)) if gaps else config.fallback_gap
    eps = min(config.eps_max, max(config.eps_min, round(med_gap * config.eps_fraction)))
    if hint is not None:
        eps = min(eps, max(config.eps_min, round(hint)))
    return float(eps)


def _group_positions(xs: list[float], eps: float) -> list[list[float]]:
    groups: list[list[float]] = []
    for x in xs:
        if not groups or abs(groups[-1][-1] - x) > eps:
            groups.append([x])
        else:
            groups[-1].append(x)
    return groups


def _majority_kind(items: Iterable[Cell]) -> CellKind:
    counts = Counter(c.kind for c in items)
    if not counts:
        return CellKind.NOISE
    # Highest count wins; ties broken by fixed priority (date > session > tag > value > noise).
    return min(counts, key=lambda k: (-counts[k], KIND_PRIORITY.index(k)))


def cluster_columns(
    cells: list[Cell],
    *,
    eps_hint: float | None = None,
    config: ColumnConfig | None = None,
) -> list[Column]:
    """
    Group cells sharing a similar X coordinate into vertical columns.

    Columns are returned ordered by center; items within a column top-down (y desc, PDF space).
    """
    cfg = config or ColumnConfig()
    cfg.validate()
    if not cells:
        return []

    xs = sorted({float(round(c.x)) for c in cells})
    eps = merge_epsilon(xs, eps_hint, cfg)
    centers = [sum(g) / len(g) for g in _group_positions(xs, eps)]

    members: dict[int, list[Cell]] = {i: [] for i in range(len(centers))}
    for c in cells:
        best_i = 0
        best_d = abs(centers[0] - c.x)
        for i, cx in enumerate(centers[1:], start=1):
            d = abs(cx - c.x)
            if d < best_d:
                best_i, best_d = i, d
        members[best_i].append(c)

    columns: list[Column] = []
    for i, cx in enumerate(centers):
        items = members[i]
        if not items:
            continue
        ordered = tuple(sorted(items, key=lambda c: (-c.y, c.x, c.text)))
        columns.append(Column(center=cx, kind=_majority_kind(ordered), items=ordered))

    log.debug("clustered %d cells into %d columns (eps=%.1f)", len(cells), len(columns), eps)
    return columns
