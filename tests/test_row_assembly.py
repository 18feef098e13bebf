from __future__ import annotations

import unittest

from assembly.assemble import assemble_page, assemble_rows, pane_tolerance
from assembly.config import DEFAULT_LADDER, AssemblyConfig, ExtractionConfig
from classify.classify_tokens import classify_page
from contracts.draws import SkipReason
from contracts.layout import Column, Pane
from contracts.tokens import Cell, CellKind, Token, ValueDomain
from games.registry import MIDDAY_EVENING, GameSpec, get_game

K5 = GameSpec(key="test_k5", arity=5, domain=ValueDomain(1, 45), session_codes=MIDDAY_EVENING)
K5_FB = GameSpec(
    key="test_k5_fb",
    arity=5,
    domain=ValueDomain(1, 45),
    has_special=True,
    special_domain=ValueDomain(0, 9),
    session_codes=MIDDAY_EVENING,
)
K6_X3 = GameSpec(key="test_k6_x3", arity=6, domain=ValueDomain(1, 53), session_codes=MIDDAY_EVENING, pane_count=3)


def _tok(text: str, x: float, y: float, page: int = 1) -> Token:
    return Token(text=text, x=float(x), y=float(y), page=page)


def _assemble(tokens: list[Token], game: GameSpec, attempt: int = 0):
    cfg = ExtractionConfig()
    cells, _ = classify_page(tokens, game, cfg.classify)
    return assemble_page(cells, 1, game, DEFAULT_LADDER[attempt], cfg)


def _single_row(values: list[str], *, y: float = 100) -> list[Token]:
    toks = [_tok("10/14/25", 10, y), _tok("M", 40, y)]
    toks.extend(_tok(v, 60 + 20 * i, y) for i, v in enumerate(values))
    return toks


def _table(left: float, date: str | None, values: list[int], y: float = 100) -> list[Token]:
    toks = [] if date is None else [_tok(date, left, y)]
    toks.append(_tok("M", left + 40, y))
    toks.extend(_tok(str(v), left + 60 + 20 * i, y) for i, v in enumerate(values))
    return toks


class TestSinglePaneRows(unittest.TestCase):
    def test_session_row_without_tag(self) -> None:
        page = _assemble(_single_row(["7", "3", "19", "28", "41"]), K5)
        self.assertEqual(page.skips, [])
        (row,) = page.rows
        self.assertEqual(row.date, "2025-10-14")
        self.assertEqual(row.session, "M")
        self.assertEqual(row.values, (7, 3, 19, 28, 41))
        self.assertIsNone(row.special)
        self.assertEqual(page.strategy_counts, {"right_of_anchor": 1})

    def test_special_tag_after_values(self) -> None:
        toks = _single_row(["7", "3", "19", "28", "41"]) + [_tok("FB", 150, 101), _tok("8", 160, 101)]
        (row,) = _assemble(toks, K5_FB).rows
        self.assertEqual(row.values, (7, 3, 19, 28, 41))
        self.assertEqual(row.special, 8)

    def test_special_excluded_by_position_not_by_value(self) -> None:
        # A main value that happens to equal the special digit is still a main value.
        toks = _single_row(["8", "3", "19", "28", "41"]) + [_tok("FB", 150, 101), _tok("8", 160, 101)]
        page = _assemble(toks, K5_FB)
        (row,) = page.rows
        self.assertEqual(row.values, (8, 3, 19, 28, 41))
        self.assertEqual(row.special, 8)
        self.assertEqual(page.strategy_counts, {"between_anchor_and_tag": 1})

    def test_special_digit_never_completes_a_short_row(self) -> None:
        toks = _single_row(["7", "3", "19", "28"]) + [_tok("FB", 150, 100), _tok("8", 160, 100)]
        page = _assemble(toks, K5_FB)
        self.assertEqual(page.rows, [])
        self.assertEqual([s.reason for s in page.skips], [SkipReason.NOT_ENOUGH_VALUES])

    def test_fused_tag_before_values(self) -> None:
        toks = [_tok("10/14/25", 10, 100), _tok("M", 40, 100), _tok("FB 8", 60, 100)]
        toks.extend(_tok(str(v), 90 + 20 * i, 100) for i, v in enumerate([12, 5, 33, 21, 40]))
        page = _assemble(toks, K5_FB)
        (row,) = page.rows
        self.assertEqual(row.values, (12, 5, 33, 21, 40))
        self.assertEqual(row.special, 8)
        self.assertEqual(page.strategy_counts, {"right_of_tag": 1})

    def test_missing_value_is_skipped_never_padded(self) -> None:
        toks = _single_row(["7", "3", "19", "28"]) + [_tok("41", 140, 130)]
        page = _assemble(toks, K5, attempt=2)
        self.assertEqual(page.rows, [])
        (skip,) = page.skips
        self.assertEqual(skip.reason, SkipReason.NOT_ENOUGH_VALUES)
        self.assertEqual(skip.anchor_text, "M")

    def test_repeated_values_rejected_for_distinct_games(self) -> None:
        page = _assemble(_single_row(["7", "7", "19", "28", "31"]), get_game("fl_fantasy5"))
        self.assertEqual(page.rows, [])
        self.assertEqual([s.reason for s in page.skips], [SkipReason.NOT_ENOUGH_VALUES])

    def test_daily_game_anchors_on_date(self) -> None:
        toks = [_tok("10/15/2025", 20, 100)] + [_tok(str(v), 80 + 20 * i, 100) for i, v in enumerate([4, 17, 23, 38, 45, 52])]
        (row,) = _assemble(toks, get_game("fl_lotto")).rows
        self.assertEqual(row.date, "2025-10-15")
        self.assertIsNone(row.session)
        self.assertEqual(row.values, (4, 17, 23, 38, 45, 52))

    def test_two_sessions_per_day(self) -> None:
        toks = _single_row(["7", "3", "19", "28", "41"], y=100)
        toks += [_tok("10/14/25", 10, 88), _tok("E", 40, 88)] + [_tok(str(v), 60 + 20 * i, 88) for i, v in enumerate([1, 2, 3, 4, 5])]
        page = _assemble(toks, K5)
        self.assertEqual([(r.session, r.values) for r in page.rows], [("M", (7, 3, 19, 28, 41)), ("E", (1, 2, 3, 4, 5))])
        self.assertEqual({r.date for r in page.rows}, {"2025-10-14"})


class TestMultiPaneRows(unittest.TestCase):
    def test_values_spilling_into_next_pane_are_recovered(self) -> None:
        toks = (
            _table(20, "10/14/25", [1, 2, 3, 4, 5, 6])
            + _table(260, "10/13/25", [7, 8, 9, 10, 11, 12])
            + _table(500, "10/12/25", [13, 14, 15, 16, 17, 18])
        )
        page = _assemble(toks, K6_X3)
        self.assertEqual(len(page.panes), 3)
        self.assertEqual(page.skips, [])
        got = sorted((r.date, r.values) for r in page.rows)
        self.assertEqual(
            got,
            [
                ("2025-10-12", (13, 14, 15, 16, 17, 18)),
                ("2025-10-13", (7, 8, 9, 10, 11, 12)),
                ("2025-10-14", (1, 2, 3, 4, 5, 6)),
            ],
        )

    def test_missing_date_column_still_splits_three_panes(self) -> None:
        toks = (
            _table(20, "10/14/25", [1, 2, 3, 4, 5, 6])
            + _table(260, None, [7, 8, 9, 10, 11, 12])
            + _table(480, "10/13/25", [13, 14, 15, 16, 17, 18])
        )
        page = _assemble(toks, K6_X3)
        self.assertEqual(len(page.panes), 3)
        self.assertEqual(sorted(r.date for r in page.rows), ["2025-10-13", "2025-10-14"])
        (skip,) = page.skips
        self.assertEqual(skip.reason, SkipReason.NO_DATE_LEFT)
        self.assertEqual(skip.pane, 1)


def _cell(text: str, x: float, y: float, kind: CellKind, **kw) -> Cell:
    return Cell(text=text, x=x, y=y, page=1, kind=kind, **kw)


def _pane(cols: list[Column]) -> Pane:
    ordered = tuple(sorted(cols, key=lambda c: c.center))
    return Pane(index=0, columns=ordered, min_x=ordered[0].center, max_x=ordered[-1].center)


def _value_columns(start: float, values: list[int], y: float = 100) -> list[Column]:
    return [
        Column(center=start + 20 * i, kind=CellKind.VALUE, items=(_cell(str(v), start + 20 * i, y, CellKind.VALUE, value=v),))
        for i, v in enumerate(values)
    ]


class TestAnchorLookup(unittest.TestCase):
    def _rows(self, pane: Pane):
        return assemble_rows([pane], 0, K5, y_tol=9, y_tol_tag=12, x_group_eps=8, config=AssemblyConfig())

    def test_unparsable_date_cell(self) -> None:
        pane = _pane(
            [
                Column(10, CellKind.DATE, (_cell("99/99/99", 10, 100, CellKind.DATE),)),
                Column(40, CellKind.SESSION, (_cell("M", 40, 100, CellKind.SESSION, session="M"),)),
            ]
            + _value_columns(60, [1, 2, 3, 4, 5])
        )
        rows, skips, _ = self._rows(pane)
        self.assertEqual(rows, [])
        self.assertEqual([s.reason for s in skips], [SkipReason.DATE_PARSE_FAIL])

    def test_date_only_to_the_right(self) -> None:
        pane = _pane(
            [
                Column(40, CellKind.SESSION, (_cell("M", 40, 100, CellKind.SESSION, session="M"),)),
                Column(200, CellKind.DATE, (_cell("10/14/25", 200, 100, CellKind.DATE, iso_date="2025-10-14"),)),
            ]
            + _value_columns(60, [1, 2, 3, 4, 5])
        )
        rows, skips, _ = self._rows(pane)
        self.assertEqual(rows, [])
        self.assertEqual([s.reason for s in skips], [SkipReason.NO_DATE_LEFT])

    def test_further_left_date_column(self) -> None:
        pane = _pane(
            [
                Column(10, CellKind.DATE, (_cell("10/14/25", 10, 100, CellKind.DATE, iso_date="2025-10-14"),)),
                Column(30, CellKind.DATE, (_cell("10/20/25", 30, 200, CellKind.DATE, iso_date="2025-10-20"),)),
                Column(50, CellKind.SESSION, (_cell("E", 50, 100, CellKind.SESSION, session="E"),)),
            ]
            + _value_columns(70, [1, 2, 3, 4, 5])
        )
        rows, skips, used = self._rows(pane)
        self.assertEqual(skips, [])
        (row,) = rows
        self.assertEqual((row.date, row.session, row.values), ("2025-10-14", "E", (1, 2, 3, 4, 5)))
        self.assertEqual(used, {"right_of_anchor": 1})


def _col(x: float, kind: CellKind, *cells: Cell) -> Column:
    return Column(center=float(x), kind=kind, items=tuple(sorted(cells, key=lambda c: (-c.y, c.x))))


def _digit(v: int, x: float, y: float) -> Cell:
    return _cell(str(v), x, y, CellKind.VALUE, value=v)


def _date(text: str, iso: str, x: float, y: float) -> Cell:
    return _cell(text, x, y, CellKind.DATE, iso_date=iso)


def _session(code: str, x: float, y: float) -> Cell:
    return _cell(code, x, y, CellKind.SESSION, session=code)


def _indexed_pane(index: int, cols: list[Column]) -> Pane:
    ordered = tuple(sorted(cols, key=lambda c: c.center))
    return Pane(index=index, columns=ordered, min_x=ordered[0].center, max_x=ordered[-1].center)


class TestCrowdedLayouts(unittest.TestCase):
    PICK3 = get_game("fl_pick3")

    def _rows(self, panes: list[Pane], index: int):
        return assemble_rows(panes, index, self.PICK3, y_tol=9, y_tol_tag=12, x_group_eps=8, config=AssemblyConfig())

    def test_stacked_fireballs_pair_with_their_own_row(self) -> None:
        # Rows 12pt apart: the other row's Fireball digit is inside the tag tolerance and
        # sits half a point further left.
        pane = _indexed_pane(
            0,
            [
                _col(10, CellKind.DATE, _date("10/14/25", "2025-10-14", 10, 100), _date("10/14/25", "2025-10-14", 10, 88)),
                _col(40, CellKind.SESSION, _session("M", 40, 100), _session("E", 40, 88)),
                _col(60, CellKind.VALUE, _digit(1, 60, 100), _digit(5, 60, 88)),
                _col(70, CellKind.VALUE, _digit(2, 70, 100), _digit(6, 70, 88)),
                _col(80, CellKind.VALUE, _digit(3, 80, 100), _digit(7, 80, 88)),
                _col(95, CellKind.TAG, _cell("FB", 95, 100, CellKind.TAG), _cell("FB", 95, 88, CellKind.TAG)),
                _col(110, CellKind.VALUE, _digit(4, 110, 100), _digit(9, 109.5, 88)),
            ],
        )
        rows, skips, _ = self._rows([pane], 0)
        self.assertEqual(skips, [])
        self.assertEqual({r.session: (r.values, r.special) for r in rows}, {"M": ((1, 2, 3), 4), "E": ((5, 6, 7), 9)})

    def test_neighbouring_tables_on_one_baseline_stay_apart(self) -> None:
        # Table 0 predates the Fireball and its last digit is cut into pane 1 and sits one
        # point low. Tables 1 and 2 carry values and a Fireball on the same baseline.
        y = 700
        panes = [
            _indexed_pane(
                0,
                [
                    _col(0, CellKind.DATE, _date("10/14/25", "2025-10-14", 0, y)),
                    _col(30, CellKind.SESSION, _session("M", 30, y)),
                    _col(50, CellKind.VALUE, _digit(1, 50, y)),
                    _col(60, CellKind.VALUE, _digit(2, 60, y)),
                ],
            ),
            _indexed_pane(
                1,
                [
                    _col(70, CellKind.VALUE, _digit(3, 70, y - 1.0)),
                    _col(150, CellKind.DATE, _date("10/13/25", "2025-10-13", 150, y)),
                    _col(180, CellKind.SESSION, _session("M", 180, y)),
                    _col(200, CellKind.VALUE, _digit(4, 200, y)),
                    _col(210, CellKind.VALUE, _digit(5, 210, y)),
                    _col(220, CellKind.VALUE, _digit(6, 220, y)),
                    _col(235, CellKind.TAG, _cell("FB", 235, y, CellKind.TAG)),
                    _col(250, CellKind.VALUE, _digit(0, 250, y)),
                ],
            ),
            _indexed_pane(
                2,
                [
                    _col(300, CellKind.DATE, _date("10/12/25", "2025-10-12", 300, y)),
                    _col(330, CellKind.SESSION, _session("M", 330, y)),
                    _col(350, CellKind.VALUE, _digit(7, 350, y)),
                    _col(360, CellKind.VALUE, _digit(8, 360, y)),
                    _col(370, CellKind.VALUE, _digit(9, 370, y)),
                    _col(385, CellKind.TAG, _cell("FB", 385, y, CellKind.TAG)),
                    _col(400, CellKind.VALUE, _digit(1, 400, y)),
                ],
            ),
        ]

        got = {}
        for i in range(3):
            rows, skips, _ = self._rows(panes, i)
            self.assertEqual(skips, [])
            (row,) = rows
            got[row.date] = (row.values, row.special)

        self.assertEqual(
            got,
            {
                "2025-10-14": ((1, 2, 3), None),
                "2025-10-13": ((4, 5, 6), 0),
                "2025-10-12": ((7, 8, 9), 1),
            },
        )

    def test_pane_center_columns_stop_at_next_table(self) -> None:
        # No tag and no values right of the session: only the last resort can fire, and it
        # must not reach into the next table's columns.
        y = 100
        pane = _indexed_pane(
            0,
            [
                _col(0, CellKind.DATE, _date("10/14/25", "2025-10-14", 0, y)),
                _col(20, CellKind.VALUE, _digit(1, 20, y)),
                _col(30, CellKind.VALUE, _digit(2, 30, y)),
                _col(40, CellKind.SESSION, _session("M", 40, y)),
                _col(100, CellKind.DATE, _date("10/13/25", "2025-10-13", 100, y)),
                _col(110, CellKind.VALUE, _digit(3, 110, y)),
            ],
        )
        rows, skips, _ = self._rows([pane], 0)
        self.assertEqual(rows, [])
        self.assertEqual([s.reason for s in skips], [SkipReason.NOT_ENOUGH_VALUES])


class TestPaneTolerance(unittest.TestCase):
    def _pane_with_sessions(self, ys: list[float]) -> Pane:
        items = tuple(_cell("M", 40, y, CellKind.SESSION, session="M") for y in ys)
        return _pane([Column(40, CellKind.SESSION, items)])

    def test_pitch_derived_tolerance_floors_at_ladder(self) -> None:
        tol = pane_tolerance(self._pane_with_sessions([100, 80, 60]), K5, DEFAULT_LADDER[0], AssemblyConfig())
        self.assertEqual((tol.pitch, tol.y_tol, tol.y_tol_tag), (20.0, 9.0, 12.0))

    def test_wide_pitch_widens_tolerance(self) -> None:
        tol = pane_tolerance(self._pane_with_sessions([180, 140, 100]), K5, DEFAULT_LADDER[0], AssemblyConfig())
        self.assertEqual(tol.pitch, 40.0)
        self.assertAlmostEqual(tol.y_tol, 10.0)
        self.assertAlmostEqual(tol.y_tol_tag, 14.0)

    def test_single_anchor_uses_fallback_pitch(self) -> None:
        tol = pane_tolerance(self._pane_with_sessions([100]), K5, DEFAULT_LADDER[1], AssemblyConfig())
        self.assertEqual((tol.pitch, tol.y_tol, tol.y_tol_tag), (12.0, 11.0, 14.0))


if __name__ == "__main__":
    unittest.main()
