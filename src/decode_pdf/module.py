from __future__ import annotations

import logging
import re
from pathlib import Path

from contracts.tokens import Token

from .contracts import DecodedPdf, DecodeEngineName, DecodePdfError, TextRun
from .data_access import resolve_under_data_root, source_sha256
from .engines import Pypdfium2TextEngine, TextLayerEngine

log = logging.getLogger(__name__)

_PIECE = re.compile(r"\S+")
_NUMBER_PIECE = re.compile(r"^-*\d+-*$")
_DASH_PIECE = re.compile(r"^-+$")
_PAGE_SPAN = re.compile(r"^\s*(\d+)\s*(?:-\s*(\d+)\s*)?$")


def parse_page_selection(selection: str | None, *, page_count: int) -> list[int]:
    """Expand a selection like "1,3-5" into sorted unique 1-indexed pages; blank selects all."""
    if not selection or not selection.strip():
        return list(range(1, page_count + 1))

    pages: set[int] = set()
    for part in filter(str.strip, selection.split(",")):
        m = _PAGE_SPAN.match(part)
        if m is None:
            raise ValueError(f"not a page or page range: {part.strip()!r}")
        first = int(m.group(1))
        last = int(m.group(2) or first)
        if first < 1 or last < first:
            raise ValueError(f"invalid page range: {part.strip()!r}")
        if last > page_count:
            raise ValueError(f"page {last} is past the last page ({page_count})")
        pages.update(range(first, last + 1))
    return sorted(pages)


def split_run(run: TextRun) -> list[Token]:
    """
    Turn one text run into tokens.

    Runs made only of whitespace-separated numbers ("7 3 19 28 41") are split into one
    token per number, placed by proportional character offset inside the run's box.
    Anything else ("Oct 14, 2025", "FB 8") stays a single token.
    """
    text = run.text.replace("\r", " ").replace("\n", " ")
    y = (run.bottom + run.top) / 2.0
    pieces = list(_PIECE.finditer(text))
    if not pieces:
        return []

    numbers = [m for m in pieces if _NUMBER_PIECE.match(m.group(0))]
    splittable = len(numbers) >= 2 and all(_NUMBER_PIECE.match(m.group(0)) or _DASH_PIECE.match(m.group(0)) for m in pieces)
    if not splittable:
        return [Token(text=text.strip(), x=run.left, y=y, page=run.page)]

    width = run.right - run.left
    n = len(text)
    return [Token(text=m.group(0), x=run.left + width * m.start() / n, y=y, page=run.page) for m in numbers]


def _get_engine(engine: DecodeEngineName) -> TextLayerEngine:
    if engine == DecodeEngineName.PYPDFIUM2:
        return Pypdfium2TextEngine()
    raise ValueError(f"Unsupported text-layer engine: {engine}")


def decode_pdf_tokens(
    pdf_file: Path,
    *,
    page_selection: str | None = None,
    engine: TextLayerEngine | None = None,
    source_pdf_relpath: str | None = None,
    compute_source_sha256: bool = False,
) -> DecodedPdf:
    """
    Read the positioned text layer of a PDF as Tokens (PDF points, y grows upward).

    Every backend failure surfaces as DecodePdfError; this is the one document-level
    failure point of the pipeline.
    """
    eng = engine or _get_engine(DecodeEngineName.PYPDFIUM2)
    relpath = source_pdf_relpath or pdf_file.name

    if not pdf_file.exists():
        raise DecodePdfError("DECODE_INPUT_NOT_FOUND", "Input PDF not found", {"pdf_file": str(pdf_file)})

    try:
        page_count = eng.get_page_count(pdf_file=pdf_file)
    except DecodePdfError:
        raise
    except Exception as e:
        raise DecodePdfError("DECODE_BACKEND_PAGECOUNT_FAILED", "Failed to read PDF page count", {"error": repr(e)}) from e

    try:
        pages = parse_page_selection(page_selection, page_count=page_count)
    except ValueError as e:
        raise DecodePdfError(
            "DECODE_BAD_PAGE_SELECTION",
            "Invalid page_selection",
            {"page_selection": page_selection, "error": str(e)},
        ) from e

    try:
        runs = eng.extract_text_runs(pdf_file=pdf_file, pages=pages)
    except DecodePdfError:
        raise
    except Exception as e:
        raise DecodePdfError("DECODE_BACKEND_TEXT_FAILED", "PDF text extraction failed", {"error": repr(e)}) from e

    tokens = [t for run in runs for t in split_run(run)]
    meta: dict[str, object] = {
        "backend": eng.backend_id(),
        "backend_version": eng.backend_version(),
        "runs": len(runs),
    }
    if compute_source_sha256:
        meta["source_sha256"] = source_sha256(pdf_file)

    log.debug("decoded %d tokens from %d runs on %d pages of %s", len(tokens), len(runs), len(pages), relpath)
    return DecodedPdf(
        source_pdf_relpath=relpath,
        engine=eng.backend_id(),
        page_count=page_count,
        pages=pages,
        tokens=tokens,
        meta=meta,
    )


def decode_pdf_relpath(
    *,
    data_root: Path,
    pdf_relpath: str,
    page_selection: str | None = None,
    engine: TextLayerEngine | None = None,
    compute_source_sha256: bool = False,
) -> DecodedPdf:
    if not pdf_relpath.lower().endswith(".pdf"):
        raise DecodePdfError("DECODE_INPUT_NOT_PDF", "Only PDFs are accepted (by .pdf extension)", {"pdf_relpath": pdf_relpath})
    pdf_file = resolve_under_data_root(data_root=data_root, relpath=pdf_relpath)
    return decode_pdf_tokens(
        pdf_file,
        page_selection=page_selection,
        engine=engine,
        source_pdf_relpath=pdf_relpath,
        compute_source_sha256=compute_source_sha256,
    )
