from __future__ import annotations

import re
from datetime import date

# hyphen, non-breaking hyphen, figure dash, en dash, em dash, minus
_DASHES = re.compile("[\u2010\u2011\u2012\u2013\u2014\u2212]")

_MONTHS = {m: i for i, m in enumerate(
    ["JAN", "FEB", "MAR", "APR", "MAY", "JUN", "JUL", "AUG", "SEP", "OCT", "NOV", "DEC"], start=1
)}

_ISO = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_NUMERIC = re.compile(r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{2}|\d{4})$")  # 10/14/25, 10-14-2025
_DAY_MON_YEAR = re.compile(r"^(\d{1,2})[- ]([A-Za-z]{3})[- ,]?\s*(\d{4})$")  # 14-OCT-2025, 14 OCT 2025
_MON_DAY_YEAR = re.compile(r"^([A-Za-z]{3})\.?\s+(\d{1,2}),?\s*(\d{4})$")  # Oct 14, 2025

# Date-shaped substring inside a longer glyph run ("Sat 10/14/25").
DATE_SHAPE = re.compile(
    r"\b(\d{4}-\d{2}-\d{2}"
    r"|\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4}"
    r"|[A-Za-z]{3}\.?\s+\d{1,2},?\s*\d{4}"
    r"|\d{1,2}[- ][A-Za-z]{3}[- ,]?\s*\d{4})\b"
)


def normalize_dashes(s: str) -> str:
    return _DASHES.sub("-", s)


def _expand_year(yy: str) -> int:
    if len(yy) == 4:
        return int(yy)
    n = int(yy)
    return 1900 + n if n >= 80 else 2000 + n


def _iso_or_none(y: int, m: int, d: int) -> str | None:
    try:
        return date(y, m, d).isoformat()
    except ValueError:
        return None


def date_form(text: str) -> str | None:
    """Name of the surface form `text` is written in, or None when it is not a full date."""
    s = " ".join(normalize_dashes(text).split())
    if _ISO.match(s):
        return "iso"
    if _NUMERIC.match(s):
        return "numeric"
    if _DAY_MON_YEAR.match(s):
        return "day_mon_year"
    if _MON_DAY_YEAR.match(s):
        return "mon_day_year"
    return None


def to_iso_date(text: str) -> str | None:
    """
    Normalize a calendar date written in any supported surface form to YYYY-MM-DD.

    Returns None for text that is not a date or names an impossible day (13/45/25);
    ambiguous text is never guessed. Already-ISO input is returned unchanged.
    """
    s = " ".join(normalize_dashes(text).split())

    m = _ISO.match(s)
    if m:
        return _iso_or_none(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    m = _NUMERIC.match(s)
    if m:
        mm, dd, yy = m.groups()
        return _iso_or_none(_expand_year(yy), int(mm), int(dd))

    m = _DAY_MON_YEAR.match(s)
    if m:
        dd, mon, yyyy = m.groups()
        month = _MONTHS.get(mon.upper())
        return None if month is None else _iso_or_none(int(yyyy), month, int(dd))

    m = _MON_DAY_YEAR.match(s)
    if m:
        mon, dd, yyyy = m.groups()
        month = _MONTHS.get(mon.upper())
        return None if month is None else _iso_or_none(int(yyyy), month, int(dd))

    return None


def find_date(text: str) -> tuple[str, str] | None:
    """Locate a date-shaped substring; returns (matched_text, iso_date) when it normalizes."""
    m = DATE_SHAPE.search(normalize_dashes(text))
    if not m:
        return None
    iso = to_iso_date(m.group(1))
    return None if iso is None else (m.group(1), iso)
