"""
Text-layer decoding (PDF -> positioned Tokens).

This package is intentionally limited to reading the embedded text layer:
- It emits Token(text, x, y, page) in PDF points, y growing upward.
- It performs NO classification, column grouping or row assembly.
- It is the ONLY package that touches PDFs.
"""

from .contracts import DecodedPdf, DecodeEngineName, DecodePdfError, TextRun
from .data_access import DataAccessError, resolve_under_data_root
from .engines import Pypdfium2TextEngine, TextLayerEngine
from .module import decode_pdf_relpath, decode_pdf_tokens, parse_page_selection, split_run

__all__ = [
    "DataAccessError",
    "DecodeEngineName",
    "DecodePdfError",
    "DecodedPdf",
    "Pypdfium2TextEngine",
    "TextLayerEngine",
    "TextRun",
    "decode_pdf_relpath",
    "decode_pdf_tokens",
    "parse_page_selection",
    "resolve_under_data_root",
    "split_run",
]
