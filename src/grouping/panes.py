from __future__ import annotations

import logging

from contracts.layout import Column, Pane
from contracts.tokens import CellKind

from .config import PaneConfig

log = logging.getLogger(__name__)


def kmeans_1d(values: list[float], k: int = 3, max_iter: int = 20) -> list[float]:
    """
    Plain 1-D k-means with quantile seeding (1/2k, 3/2k, ...). Deterministic.

    Returns the sorted centers; with k or fewer values the values themselves are returned.
    """
    if len(values) <= k:
        return sorted(values)
    ordered = sorted(values)
    n = len(ordered)
    mu = [ordered[int(n * (2 * i + 1) / (2 * k))] for i in range(k)]

    for _ in range(max_iter):
        buckets: list[list[float]] = [[] for _ in range(k)]
        for v in values:
            bi = 0
            bd = abs(v - mu[0])
            for i in range(1, k):
                d = abs(v - mu[i])
                if d < bd:
                    bi, bd = i, d
            buckets[bi].append(v)

        changed = False
        for i, b in enumerate(buckets):
            if not b:
                continue
            m = float(round(sum(b) / len(b)))
            if m != mu[i]:
                mu[i] = m
                changed = True
        if not changed:
            break

    return sorted(mu)


def _select_date_anchors(centers: list[float], k: int) -> list[float]:
    # Extremes first, then repeatedly the center farthest from every anchor chosen so far.
    # For k == 3 this is: leftmost, rightmost, and the one farthest from both.
    if len(centers) <= k:
        return sorted(centers)
    if k == 1:
        return [centers[len(centers) // 2]]
    chosen = [centers[0], centers[-1]]
    while len(chosen) < k:
        best = None
        best_d = -1.0
        for x in centers:
            if x in chosen:
                continue
            d = min(abs(x - a) for a in chosen)
            if d > best_d:
                best, best_d = x, d
        if best is None:
            break
        chosen.append(best)
    return sorted(chosen)


def _merge_close_anchors(anchors: list[float], gap_min: float) -> list[float]:
    merged: list[list[float]] = []
    for a in sorted(anchors):
        if merged and a - merged[-1][-1] < gap_min:
            merged[-1].append(a)
        else:
            merged.append([a])
    return [sum(g) / len(g) for g in merged]


def _make_pane(index: int, cols: list[Column]) -> Pane:
    ordered = tuple(sorted(cols, key=lambda c: c.center))
    return Pane(index=index, columns=ordered, min_x=ordered[0].center, max_x=ordered[-1].center)


def split_panes(
    columns: list[Column],
    *,
    pane_count: int,
    min_value_columns: int,
    gap_min: float,
    config: PaneConfig | None = None,
) -> list[Pane]:
    """
    Split a page's columns into independent side-by-side tables.

    Anchors are the Date-column centers when at least `pane_count` distinct ones exist,
    otherwise 1-D k-means centers over every non-noise column. Columns are assigned by the
    midpoints between consecutive anchors. Pages with fewer than `min_value_columns` value
    columns stay one pane: under-segmentation is preferred over over-segmentation.
    """
    cfg = config or PaneConfig()
    cfg.validate()

    core = sorted((c for c in columns if c.kind != CellKind.NOISE), key=lambda c: c.center)
    if not core:
        return []

    value_cols = sum(1 for c in core if c.kind == CellKind.VALUE)
    if pane_count <= 1 or value_cols < min_value_columns:
        return [_make_pane(0, core)]

    date_centers = sorted({c.center for c in core if c.kind == CellKind.DATE})
    if len(date_centers) >= pane_count:
        anchors = _select_date_anchors(date_centers, pane_count)
        source = "date"
    else:
        anchors = kmeans_1d([c.center for c in core], pane_count, cfg.kmeans_max_iter)
        source = "kmeans"
    anchors = _merge_close_anchors(anchors, gap_min)

    bounds = [(a + b) / 2.0 for a, b in zip(anchors, anchors[1:])]
    buckets: list[list[Column]] = [[] for _ in anchors]
    for c in core:
        i = 0
        while i < len(bounds) and c.center >= bounds[i]:
            i += 1
        buckets[i].append(c)

    panes = [_make_pane(i, b) for i, b in enumerate(x for x in buckets if x)]
    log.debug(
        "split %d columns into %d panes (anchors=%s via %s)",
        len(core),
        len(panes),
        [round(a, 1) for a in anchors],
        source,
    )
    return panes
