from __future__ import annotations

from pathlib import Path

from ..contracts import DecodePdfError, TextRun

from .base import TextLayerEngine


class Pypdfium2TextEngine(TextLayerEngine):
    def backend_id(self) -> str:
        return "pypdfium2"

    def backend_version(self) -> str | None:
        try:
            import pypdfium2 as pdfium  # type: ignore

            return getattr(pdfium, "__version__", None)
        except ImportError:
            return None

    def _require_pdfium(self):
        try:
            import pypdfium2 as pdfium  # type: ignore

            return pdfium
        except ImportError as e:
            raise DecodePdfError(
                "DECODE_BACKEND_MISSING",
                "Missing dependency: pypdfium2 is required to read the PDF text layer.",
            ) from e

    def get_page_count(self, *, pdf_file: Path) -> int:
        pdfium = self._require_pdfium()
        doc = pdfium.PdfDocument(str(pdf_file))
        try:
            return len(doc)
        finally:
            doc.close()

    def extract_text_runs(self, *, pdf_file: Path, pages: list[int]) -> list[TextRun]:
        pdfium = self._require_pdfium()
        doc = pdfium.PdfDocument(str(pdf_file))
        try:
            page_count = len(doc)
            runs: list[TextRun] = []
            for page_num in pages:
                if page_num < 1 or page_num > page_count:
                    raise ValueError(f"Page out of range: {page_num} (1..{page_count})")
                page = doc[page_num - 1]
                textpage = page.get_textpage()
                try:
                    # Text rects are pdfium's segments of same-line, same-style text.
                    for i in range(textpage.count_rects()):
                        left, bottom, right, top = textpage.get_rect(i)
                        text = textpage.get_text_bounded(left, bottom, right, top)
                        if not text or not text.strip():
                            continue
                        runs.append(
                            TextRun(
                                page=page_num,
                                text=text,
                                left=float(left),
                                bottom=float(bottom),
                                right=float(right),
                                top=float(top),
                            )
                        )
                finally:
                    textpage.close()
                    page.close()
            return runs
        finally:
            doc.close()
