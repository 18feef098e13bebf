from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from statistics import median

from contracts.draws import DrawRow, SkipReason, SkipRecord
from contracts.layout import Column, Pane
from contracts.tokens import Cell, CellKind, ValueDomain
from games.registry import GameSpec
from grouping.columns import cluster_columns
from grouping.panes import split_panes

from .config import AssemblyConfig, ExtractionConfig, ToleranceParams
from .strategies import Exclusion, ValueSearch, find_values, nearest_in_band

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PaneTolerance:
    pitch: float
    y_tol: float
    y_tol_tag: float

    def to_dict(self) -> dict[str, float]:
        return {"pitch": self.pitch, "y_tol": self.y_tol, "y_tol_tag": self.y_tol_tag}


@dataclass(frozen=True, slots=True)
class PageAssembly:
    page: int
    rows: list[DrawRow]
    skips: list[SkipRecord]
    columns: list[Column]
    panes: list[Pane]
    tolerances: dict[int, PaneTolerance]
    strategy_counts: dict[str, int]


def _clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def anchor_cells(pane: Pane, game: GameSpec) -> list[Cell]:
    """Cells that each stand for one draw: session markers, or the dates of single-draw games."""
    kind = CellKind.SESSION if game.has_sessions else CellKind.DATE
    cells = [c for col in pane.columns for c in col.items if c.kind == kind]
    return sorted(cells, key=lambda c: (-c.y, c.x))


def pane_tolerance(pane: Pane, game: GameSpec, params: ToleranceParams, config: AssemblyConfig) -> PaneTolerance:
    ys = sorted({c.y for c in anchor_cells(pane, game)}, reverse=True)
    diffs = [a - b for a, b in zip(ys, ys[1:]) if a - b > 0]
    pitch = float(median(diffs)) if diffs else config.pitch_fallback
    y_tol = max(params.y_tol, _clamp(config.y_tol_fraction * pitch, config.y_tol_min, config.y_tol_max))
    y_tol_tag = max(
        params.y_tol_tag,
        _clamp(config.y_tol_tag_fraction * pitch, config.y_tol_tag_min, config.y_tol_tag_max),
    )
    return PaneTolerance(pitch=pitch, y_tol=y_tol, y_tol_tag=y_tol_tag)


def _find_date(anchor: Cell, pane: Pane, game: GameSpec, y_tol: float) -> Cell | None:
    if not game.has_sessions:
        return anchor
    # Nearest date column strictly to the left first, then further left.
    date_cols = sorted((c for c in pane.columns_of(CellKind.DATE) if c.center < anchor.x), key=lambda c: -c.center)
    for col in date_cols:
        hit = nearest_in_band(col, anchor.y, y_tol, CellKind.DATE)
        if hit is not None:
            return hit
    return None


def _find_tag(
    anchor: Cell,
    scopes: tuple[tuple[Column, ...], ...],
    y_tol_tag: float,
    *,
    left_limit: float,
    right_limit: float | None,
) -> Cell | None:
    # Only tags inside this row's own table segment: right of its date, left of the next date.
    for cols in scopes:
        tag_cols = [c for c in cols if c.kind == CellKind.TAG]
        right = [c for c in tag_cols if c.center > anchor.x and (right_limit is None or c.center < right_limit)]
        left = [c for c in tag_cols if left_limit < c.center < anchor.x]
        sides: list[Column] = []
        if right:
            sides.append(min(right, key=lambda c: c.center))
        if left:
            sides.append(max(left, key=lambda c: c.center))
        for col in sides:
            hit = nearest_in_band(col, anchor.y, y_tol_tag, CellKind.TAG)
            if hit is not None:
                return hit
    return None


def _find_special(
    tag: Cell,
    cols: tuple[Column, ...],
    bands: tuple[float, ...],
    max_dx: float,
    domain: ValueDomain,
    right_limit: float | None,
) -> Cell | None:
    """
    The special value paired with `tag`: right of it first, then left, within `max_dx`.

    Stacked rows sit closer together than the tag tolerance, so the neighbouring row's
    digit is usually in range too. Bands are tried narrowest first and candidates rank
    by Y offset before X distance.
    """
    cands = [
        c
        for col in cols
        for c in col.cells_of(CellKind.VALUE)
        if c.value is not None and domain.contains(c.value) and (right_limit is None or c.x < right_limit)
    ]
    for band in bands:
        in_band = [c for c in cands if abs(c.y - tag.y) <= band]
        right = [c for c in in_band if 0 < c.x - tag.x <= max_dx]
        if right:
            return min(right, key=lambda c: (abs(c.y - tag.y), c.x - tag.x))
        left = [c for c in in_band if 0 < tag.x - c.x <= max_dx]
        if left:
            return min(left, key=lambda c: (abs(c.y - tag.y), tag.x - c.x))
    return None


def _skip(anchor: Cell, pane: Pane, reason: SkipReason) -> SkipRecord:
    return SkipRecord(page=anchor.page, pane=pane.index, x=anchor.x, y=anchor.y, anchor_text=anchor.text, reason=reason)


def assemble_rows(
    panes: list[Pane],
    pane_index: int,
    game: GameSpec,
    *,
    y_tol: float,
    y_tol_tag: float,
    x_group_eps: float,
    config: AssemblyConfig,
) -> tuple[list[DrawRow], list[SkipRecord], dict[str, int]]:
    """
    Build one row per anchor of `panes[pane_index]`.

    A row is emitted only with exactly `arity` values; anything less becomes a SkipRecord.
    The next `cross_pane_lookahead` panes are searched too, because some layouts put a
    draw's values (or its tag) one pane to the right of its date and session.
    """
    pane = panes[pane_index]
    ahead = panes[pane_index : pane_index + 1 + config.cross_pane_lookahead]
    all_scopes = tuple(tuple(c for p in ahead[:n] for c in p.columns) for n in range(1, len(ahead) + 1))
    value_scopes = tuple(tuple(c for c in cols if c.kind == CellKind.VALUE) for cols in all_scopes)
    date_centers = sorted(c.center for c in all_scopes[-1] if c.kind == CellKind.DATE)
    special_domain = game.effective_special_domain()

    rows: list[DrawRow] = []
    skips: list[SkipRecord] = []
    used: Counter[str] = Counter()

    for anchor in anchor_cells(pane, game):
        date_cell = _find_date(anchor, pane, game, y_tol)
        if date_cell is None:
            skips.append(_skip(anchor, pane, SkipReason.NO_DATE_LEFT))
            continue
        if date_cell.iso_date is None:
            skips.append(_skip(anchor, pane, SkipReason.DATE_PARSE_FAIL))
            continue

        # Everything of this draw lies left of the next table's date column.
        right_limit = next((x for x in date_centers if x > anchor.x and x - date_cell.x > x_group_eps), None)
        tag: Cell | None = None
        special: Cell | None = None
        if game.has_special:
            tag = _find_tag(anchor, all_scopes, y_tol_tag, left_limit=date_cell.x, right_limit=right_limit)
            if tag is not None:
                special = _find_special(
                    tag,
                    all_scopes[-1],
                    (min(y_tol, y_tol_tag), y_tol_tag),
                    config.tag_value_max_dx,
                    special_domain,
                    right_limit,
                )

        search = ValueSearch(
            anchor=anchor,
            tag=tag,
            exclusion=(None if special is None else Exclusion(x=special.x, radius=config.tag_exclusion_radius)),
            pane=pane,
            scopes=value_scopes,
            y=anchor.y,
            y_tol=y_tol,
            x_group_eps=x_group_eps,
            arity=game.arity,
            accepts=game.accepts_values,
            x_limit=right_limit,
            baseline_slack=config.baseline_slack,
        )
        found = find_values(search)
        if found is None:
            skips.append(_skip(anchor, pane, SkipReason.NOT_ENOUGH_VALUES))
            continue

        strategy, cells = found
        used[strategy] += 1
        values = tuple(int(c.value) for c in sorted(cells, key=lambda c: c.x) if c.value is not None)
        rows.append(
            DrawRow(
                date=date_cell.iso_date,
                session=anchor.session if game.has_sessions else None,
                values=values,
                special=(None if special is None else special.value),
                page=anchor.page,
                pane=pane.index,
            )
        )

    return rows, skips, dict(used)


def assemble_page(
    cells: list[Cell],
    page: int,
    game: GameSpec,
    params: ToleranceParams,
    config: ExtractionConfig,
) -> PageAssembly:
    """One pass of column clustering, pane splitting and row assembly with fixed tolerances."""
    columns = cluster_columns(cells, eps_hint=params.x_group_eps, config=config.columns)
    panes = split_panes(
        columns,
        pane_count=game.pane_count,
        min_value_columns=game.min_value_columns(),
        gap_min=params.gap_min,
        config=config.panes,
    )

    rows: list[DrawRow] = []
    skips: list[SkipRecord] = []
    tolerances: dict[int, PaneTolerance] = {}
    strategy_counts: Counter[str] = Counter()
    for pane in panes:
        tol = pane_tolerance(pane, game, params, config.assembly)
        tolerances[pane.index] = tol
        log.debug(
            "page %d pane %d bounds=(%.1f, %.1f) pitch=%.1f y_tol=%.1f y_tol_tag=%.1f",
            page,
            pane.index,
            pane.min_x,
            pane.max_x,
            tol.pitch,
            tol.y_tol,
            tol.y_tol_tag,
        )
        r, s, used = assemble_rows(
            panes,
            pane.index,
            game,
            y_tol=tol.y_tol,
            y_tol_tag=tol.y_tol_tag,
            x_group_eps=params.x_group_eps,
            config=config.assembly,
        )
        rows.extend(r)
        skips.extend(s)
        strategy_counts.update(used)

    return PageAssembly(
        page=page,
        rows=rows,
        skips=skips,
        columns=columns,
        panes=panes,
        tolerances=tolerances,
        strategy_counts=dict(strategy_counts),
    )
