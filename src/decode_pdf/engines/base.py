from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from ..contracts import TextRun


class TextLayerEngine(ABC):
    """
    Text-layer extraction backend.

    Engines must:
    - Report text exactly as embedded in the PDF, with its bounding box in PDF points
    - Be deterministic for a given input
    - Perform NO classification, grouping or filtering
    """

    @abstractmethod
    def backend_id(self) -> str:
        raise NotImplementedError

    def backend_version(self) -> str | None:
        return None

    @abstractmethod
    def get_page_count(self, *, pdf_file: Path) -> int:
        raise NotImplementedError

    @abstractmethod
    def extract_text_runs(self, *, pdf_file: Path, pages: list[int]) -> list[TextRun]:
        """
        Return the text runs of `pages` (1-indexed), page by page in the given order.
        """

        raise NotImplementedError
