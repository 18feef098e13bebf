from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Iterable

from classify.classify_tokens import classify_page
from classify.dates import date_form
from contracts.draws import DrawExtractionResult, DrawRow, PageSummary, SkipRecord
from contracts.tokens import Cell, CellKind, Token
from games.registry import GameSpec, get_game

from .config import ExtractionConfig
from .errors import NoPagesError
from .merge import filter_era, merge_rows
from .tolerance_search import build_page

log = logging.getLogger(__name__)

_STAGE = "draw_assembly"
_VERSION = "draws_v1"
_SKIP_SAMPLE_LIMIT = 10


def _group_by_page(tokens: Iterable[Token]) -> dict[int, list[Token]]:
    # Only the page grouping of the input is relied on; order within a page is not.
    by_page: dict[int, list[Token]] = {}
    for t in tokens:
        by_page.setdefault(int(t.page), []).append(t)
    return {p: by_page[p] for p in sorted(by_page)}


def _warning(code: str, message: str, detail: dict[str, Any]) -> dict[str, Any]:
    return {"code": code, "message": message, "detail": detail}


def _canonicalize_meta(meta: dict[str, Any]) -> None:
    meta["warnings"] = sorted(
        meta["warnings"],
        key=lambda w: (str(w.get("code", "")), int(w.get("detail", {}).get("page", 0))),
    )
    meta["date_forms"] = dict(sorted(meta["date_forms"].items()))


def failed_result(game_key: str, errors: list[str], meta: dict[str, Any] | None = None) -> DrawExtractionResult:
    return DrawExtractionResult(
        game=game_key,
        ok=False,
        errors=list(errors),
        meta={"stage": _STAGE, "version": _VERSION, **(meta or {})},
        rows=[],
        skips=[],
        pages=[],
    )


def extract_draws(
    tokens: Iterable[Token],
    game: GameSpec | str,
    config: ExtractionConfig | None = None,
) -> DrawExtractionResult:
    """
    Reconstruct draw rows from one document's positioned tokens.

    Pages are processed strictly one at a time; every column and pane is page-local.
    Row-level and page-level problems are reported in `skips` and `meta["warnings"]`;
    only a document with no pages at all raises (NoPagesError).
    """
    game_spec = get_game(game) if isinstance(game, str) else game
    game_spec.validate()
    cfg = config or ExtractionConfig()
    cfg.validate()

    by_page = _group_by_page(tokens)
    if not by_page:
        raise NoPagesError("token stream contains no pages")

    meta: dict[str, Any] = {
        "stage": _STAGE,
        "version": _VERSION,
        "game": game_spec.to_dict(),
        "config": cfg.to_dict(),
        "counts": {},
        "warnings": [],
        "date_forms": {},
        "skip_samples": {},
    }

    all_rows: list[DrawRow] = []
    all_skips: list[SkipRecord] = []
    all_cells: list[Cell] = []
    pages: list[PageSummary] = []
    forms: Counter[str] = Counter()
    strategies: Counter[str] = Counter()

    for page, page_tokens in by_page.items():
        cells, cell_counts = classify_page(page_tokens, game_spec, cfg.classify)
        all_cells.extend(cells)
        for c in cells:
            if c.kind == CellKind.DATE:
                forms[date_form(c.text) or "other"] += 1

        build = build_page(cells, page, game_spec, cfg)
        a = build.assembly
        strategies.update(a.strategy_counts)
        all_rows.extend(a.rows)
        all_skips.extend(a.skips)

        if not a.rows:
            log.warning("page %d yielded no rows (%d anchors skipped)", page, len(a.skips))
            meta["warnings"].append(
                _warning("PAGE_NO_ROWS", "Page yielded zero rows after all attempts", {"page": page, "skipped": len(a.skips)})
            )
        if a.skips:
            meta["skip_samples"][f"page_{page:03d}"] = [s.to_dict() for s in a.skips[:_SKIP_SAMPLE_LIMIT]]

        pages.append(
            PageSummary(
                page=page,
                tokens_in=len(page_tokens),
                cells_by_kind=cell_counts,
                columns_by_kind=dict(Counter(c.kind.value for c in a.columns)),
                panes=[{**p.to_dict(), **a.tolerances[p.index].to_dict()} for p in a.panes],
                built=len(a.rows),
                skipped=len(a.skips),
                chosen_attempt=build.chosen_attempt,
                attempts=list(build.attempts),
            )
        )

    merged = merge_rows(all_rows, session_order=tuple(game_spec.session_codes))
    kept, era_dropped = filter_era(merged, game_spec.era_start)

    meta["date_forms"] = dict(forms)
    meta["counts"] = {
        "pages": len(pages),
        "tokens": sum(p.tokens_in for p in pages),
        "rows_built": len(all_rows),
        "rows_merged": len(merged),
        "duplicates_dropped": len(all_rows) - len(merged),
        "era_dropped": era_dropped,
        "rows_out": len(kept),
        "skipped": len(all_skips),
        "skips_by_reason": dict(sorted(Counter(s.reason.value for s in all_skips).items())),
        "strategies": dict(sorted(strategies.items())),
    }
    if not kept:
        meta["raw_cells"] = [c.to_dict() for c in sorted(all_cells, key=lambda c: (c.page, -c.y, c.x, c.text))]
    _canonicalize_meta(meta)

    log.info(
        "%s: %d pages, %d rows out (%d built, %d duplicates, %d before era), %d skipped",
        game_spec.key,
        len(pages),
        len(kept),
        len(all_rows),
        len(all_rows) - len(merged),
        era_dropped,
        len(all_skips),
    )
    return DrawExtractionResult(game=game_spec.key, ok=True, errors=[], meta=meta, rows=kept, skips=all_skips, pages=pages)
