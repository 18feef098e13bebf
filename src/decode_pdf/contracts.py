from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from contracts.tokens import Token


class DecodeEngineName(str, Enum):
    """
    Text-layer backend identifiers.
    """

    PYPDFIUM2 = "pypdfium2"


class DecodePdfError(Exception):
    """The text layer could not be read: missing backend, unreadable file, bad page selection."""

    def __init__(self, code: str, message: str, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "detail": self.detail}


@dataclass(frozen=True, slots=True)
class TextRun:
    # One positioned text segment as reported by the backend, PDF user space (y up).
    page: int  # 1-indexed
    text: str
    left: float
    bottom: float
    right: float
    top: float


@dataclass(frozen=True, slots=True)
class DecodedPdf:
    source_pdf_relpath: str
    engine: str  # backend id
    page_count: int
    pages: list[int]  # decoded pages, 1-indexed, ascending
    tokens: list[Token]
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_pdf_relpath": self.source_pdf_relpath,
            "engine": self.engine,
            "page_count": self.page_count,
            "pages": list(self.pages),
            "tokens": [t.to_dict() for t in self.tokens],
            "meta": dict(self.meta),
        }
