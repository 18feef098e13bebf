from __future__ import annotations

import unittest

from classify.classify_tokens import classify, classify_page, classify_token, coerce_value
from classify.config import ClassifyConfig
from classify.dates import date_form, find_date, to_iso_date
from contracts.tokens import CellKind, Token, ValueDomain
from games.registry import FOUR_A_DAY, get_game

DIGITS = ValueDomain(0, 9)
BALLS = ValueDomain(1, 36)


class TestDateNormalization(unittest.TestCase):
    def test_surface_forms_normalize_to_iso(self) -> None:
        self.assertEqual(to_iso_date("10/14/25"), "2025-10-14")
        self.assertEqual(to_iso_date("10-14-2025"), "2025-10-14")
        self.assertEqual(to_iso_date("10\u201314\u201325"), "2025-10-14")
        self.assertEqual(to_iso_date("14-OCT-2025"), "2025-10-14")
        self.assertEqual(to_iso_date("Oct 14, 2025"), "2025-10-14")

    def test_two_digit_year_pivot(self) -> None:
        self.assertEqual(to_iso_date("05/03/88"), "1988-05-03")
        self.assertEqual(to_iso_date("05/03/80"), "1980-05-03")
        self.assertEqual(to_iso_date("05/03/79"), "2079-05-03")

    def test_iso_input_is_idempotent(self) -> None:
        iso = to_iso_date("1/2/24")
        self.assertEqual(iso, "2024-01-02")
        self.assertEqual(to_iso_date(iso), iso)

    def test_impossible_dates_are_rejected_not_guessed(self) -> None:
        self.assertIsNone(to_iso_date("13/45/25"))
        self.assertIsNone(to_iso_date("02/30/2024"))
        self.assertIsNone(find_date("13/45/25"))

    def test_date_inside_longer_run(self) -> None:
        self.assertEqual(find_date("Sat 10/14/25"), ("10/14/25", "2025-10-14"))

    def test_date_form_names(self) -> None:
        self.assertEqual(date_form("2025-10-14"), "iso")
        self.assertEqual(date_form("10/14/25"), "numeric")
        self.assertEqual(date_form("14-OCT-2025"), "day_mon_year")
        self.assertEqual(date_form("Oct 14, 2025"), "mon_day_year")
        self.assertIsNone(date_form("hello"))


class TestClassify(unittest.TestCase):
    def test_kinds(self) -> None:
        self.assertEqual(classify("10/14/25", DIGITS), CellKind.DATE)
        self.assertEqual(classify("M", DIGITS), CellKind.SESSION)
        self.assertEqual(classify(" e: ", DIGITS), CellKind.SESSION)
        self.assertEqual(classify("M ", DIGITS), CellKind.SESSION)
        self.assertEqual(classify("FB", DIGITS), CellKind.TAG)
        self.assertEqual(classify("FB 8", DIGITS), CellKind.TAG)
        self.assertEqual(classify("7", DIGITS), CellKind.VALUE)
        self.assertEqual(classify("- 7", DIGITS), CellKind.VALUE)
        self.assertEqual(classify("12", DIGITS), CellKind.NOISE)
        self.assertEqual(classify("", DIGITS), CellKind.NOISE)
        self.assertEqual(classify("X", DIGITS), CellKind.NOISE)

    def test_session_codes_are_configurable(self) -> None:
        self.assertEqual(classify("N", BALLS), CellKind.NOISE)
        self.assertEqual(classify("N", BALLS, session_codes=FOUR_A_DAY), CellKind.SESSION)

    def test_boilerplate_is_noise(self) -> None:
        self.assertEqual(classify("Page 1 of 12", DIGITS), CellKind.NOISE)
        self.assertEqual(classify("FLORIDA LOTTERY - PICK 3", DIGITS), CellKind.NOISE)
        self.assertEqual(classify("E: Evening", DIGITS), CellKind.NOISE)
        self.assertEqual(classify("---", DIGITS), CellKind.NOISE)

    def test_value_domain(self) -> None:
        self.assertEqual(coerce_value("36", BALLS), 36)
        self.assertIsNone(coerce_value("37", BALLS))
        self.assertIsNone(coerce_value("0", BALLS))
        self.assertEqual(coerce_value("7 -", BALLS), 7)


class TestClassifyToken(unittest.TestCase):
    def test_fused_tag_splits_into_tag_and_value(self) -> None:
        game = get_game("fl_pick3")
        cfg = ClassifyConfig()
        cells = classify_token(Token(text="FB 8", x=200.0, y=100.0, page=1), game, cfg)
        self.assertEqual([c.kind for c in cells], [CellKind.TAG, CellKind.VALUE])
        self.assertEqual(cells[0].text, "FB")
        self.assertEqual(cells[1].value, 8)
        self.assertAlmostEqual(cells[1].x, 200.0 + cfg.fused_value_offset)

    def test_tags_ignored_for_games_without_special(self) -> None:
        cells = classify_token(Token(text="FB", x=1.0, y=1.0, page=1), get_game("fl_fantasy5"), ClassifyConfig())
        self.assertEqual(cells, [])

    def test_payloads_travel_with_cells(self) -> None:
        game = get_game("fl_pick3")
        toks = [
            Token(text="10/14/25", x=10.0, y=100.0, page=1),
            Token(text="m", x=40.0, y=100.0, page=1),
            Token(text="4", x=60.0, y=100.0, page=1),
            Token(text="Winning Numbers History", x=0.0, y=700.0, page=1),
        ]
        cells, counts = classify_page(toks, game, ClassifyConfig())
        self.assertEqual(len(cells), 3)
        self.assertEqual(cells[0].iso_date, "2025-10-14")
        self.assertEqual(cells[1].session, "M")
        self.assertEqual(cells[2].value, 4)
        self.assertEqual(counts["noise"], 1)
        self.assertEqual(counts["date"], 1)


if __name__ == "__main__":
    unittest.main()
