from __future__ import annotations

import logging
import re
from typing import Iterable

from contracts.tokens import Cell, CellKind, Token, ValueDomain
from games.registry import MIDDAY_EVENING, GameSpec

from .config import DEFAULT_BOILERPLATE, ClassifyConfig
from .dates import find_date, normalize_dashes

log = logging.getLogger(__name__)

_SESSION = re.compile(r"^([A-Za-z])\s*:?$")


def _value_pattern(domain: ValueDomain) -> re.Pattern[str]:
    # A lone number, optionally wrapped in the separator dashes the renderer emits
    # as separate glyph runs between columns ("- 7", "7 -").
    return re.compile(rf"^-?\s*(\d{{1,{domain.max_digits()}}})\s*-?$")


def _tag_patterns(markers: Iterable[str], domain: ValueDomain) -> tuple[re.Pattern[str], re.Pattern[str]]:
    alt = "|".join(re.escape(m) for m in markers) or r"(?!x)x"
    bare = re.compile(rf"^(?:{alt})\s*:?$", re.IGNORECASE)
    fused = re.compile(rf"^(?:{alt})\s*:?\s*(\d{{1,{domain.max_digits()}}})$", re.IGNORECASE)
    return bare, fused


def coerce_value(text: str, domain: ValueDomain) -> int | None:
    m = _value_pattern(domain).match(normalize_dashes(text).strip())
    if not m:
        return None
    n = int(m.group(1))
    return n if domain.contains(n) else None


def session_code(text: str, session_codes: dict[str, str]) -> str | None:
    m = _SESSION.match(text.replace("\u00a0", " ").strip())
    if not m:
        return None
    code = m.group(1).upper()
    return code if code in session_codes else None


def classify(
    text: str,
    domain: ValueDomain,
    *,
    session_codes: dict[str, str] = MIDDAY_EVENING,
    tag_markers: tuple[str, ...] = ("FB",),
    boilerplate: tuple[re.Pattern[str], ...] | None = None,
) -> CellKind:
    """
    Pure, total classification of one text fragment.

    A fused tag run ("FB 8") classifies as TAG; `classify_token` performs the split.
    """
    s = text.replace("\u00a0", " ").strip()
    if not s:
        return CellKind.NOISE
    patterns = boilerplate if boilerplate is not None else tuple(re.compile(p, re.IGNORECASE) for p in DEFAULT_BOILERPLATE)
    if any(p.search(s) for p in patterns):
        return CellKind.NOISE
    if find_date(s) is not None:
        return CellKind.DATE
    if session_code(s, session_codes) is not None:
        return CellKind.SESSION
    bare, fused = _tag_patterns(tag_markers, domain)
    if bare.match(s) or fused.match(s):
        return CellKind.TAG
    if coerce_value(s, domain) is not None:
        return CellKind.VALUE
    return CellKind.NOISE


def classify_token(
    token: Token,
    game: GameSpec,
    config: ClassifyConfig,
    *,
    boilerplate: tuple[re.Pattern[str], ...] | None = None,
) -> list[Cell]:
    """Classify a token into zero, one or two cells (fused tag runs split into TAG + VALUE)."""
    if boilerplate is None:
        boilerplate = config.compiled_boilerplate()
    s = token.text.replace("\u00a0", " ").strip()
    special_domain = game.effective_special_domain()
    tag_markers = game.tag_markers if game.has_special else ()

    kind = classify(
        s,
        game.domain,
        session_codes=game.session_codes,
        tag_markers=tag_markers,
        boilerplate=boilerplate,
    )

    if kind == CellKind.DATE:
        found = find_date(s)
        if found is None:
            return []
        return [Cell(text=found[0], x=token.x, y=token.y, page=token.page, kind=kind, iso_date=found[1])]

    if kind == CellKind.SESSION:
        code = session_code(s, game.session_codes)
        return [Cell(text=s, x=token.x, y=token.y, page=token.page, kind=kind, session=code)]

    if kind == CellKind.TAG:
        _bare, fused = _tag_patterns(tag_markers, special_domain)
        tag = Cell(text=s, x=token.x, y=token.y, page=token.page, kind=kind)
        m = fused.match(s)
        if not m:
            return [tag]
        tag_text = s[: m.start(1)].rstrip(" :")
        out = [Cell(text=tag_text, x=token.x, y=token.y, page=token.page, kind=kind)]
        n = int(m.group(1))
        if special_domain.contains(n):
            out.append(
                Cell(
                    text=m.group(1),
                    x=token.x + config.fused_value_offset,
                    y=token.y,
                    page=token.page,
                    kind=CellKind.VALUE,
                    value=n,
                )
            )
        return out

    if kind == CellKind.VALUE:
        return [Cell(text=s, x=token.x, y=token.y, page=token.page, kind=kind, value=coerce_value(s, game.domain))]

    return []


def classify_page(tokens: Iterable[Token], game: GameSpec, config: ClassifyConfig) -> tuple[list[Cell], dict[str, int]]:
    """
    Classify one page's tokens. Noise is dropped before clustering.

    Returns (cells, counts) where counts covers every kind including noise.
    """
    config.validate()
    counts = {k.value: 0 for k in CellKind}
    boilerplate = config.compiled_boilerplate()
    cells: list[Cell] = []
    for tok in tokens:
        produced = classify_token(tok, game, config, boilerplate=boilerplate)
        if not produced:
            counts[CellKind.NOISE.value] += 1
            continue
        for c in produced:
            counts[c.kind.value] += 1
        cells.extend(produced)
    log.debug("classified %d cells %s", len(cells), counts)
    return cells, counts
