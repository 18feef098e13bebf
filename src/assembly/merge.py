from __future__ import annotations

from typing import Iterable, Sequence

from contracts.draws import DrawRow


def _session_rank(session: str | None, order: Sequence[str]) -> tuple[int, str]:
    s = session or ""
    return (order.index(s), s) if s in order else (len(order), s)


def merge_rows(rows: Iterable[DrawRow], session_order: Sequence[str] = ()) -> list[DrawRow]:
    """
    Collapse duplicates across panes and pages, keyed by (date, session).

    A duplicate carrying a special value replaces one without; otherwise the first row
    seen is kept. Output is ascending by date, then by `session_order` (codes not listed
    sort after, alphabetically).
    """
    kept: dict[tuple[str, str], DrawRow] = {}
    for r in rows:
        k = r.key()
        cur = kept.get(k)
        if cur is None or (cur.special is None and r.special is not None):
            kept[k] = r
    return sorted(kept.values(), key=lambda r: (r.date, _session_rank(r.session, session_order)))


def filter_era(rows: Iterable[DrawRow], era_start: str | None) -> tuple[list[DrawRow], int]:
    """Drop rows dated before `era_start` (ISO). Returns (kept, dropped_count)."""
    rows = list(rows)
    if era_start is None:
        return rows, 0
    kept = [r for r in rows if r.date >= era_start]
    return kept, len(rows) - len(kept)


def split_by_session(rows: Iterable[DrawRow]) -> dict[str, list[DrawRow]]:
    out: dict[str, list[DrawRow]] = {}
    for r in rows:
        out.setdefault(r.session or "", []).append(r)
    return out
