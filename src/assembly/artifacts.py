from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from contracts.draws import DrawExtractionResult, DrawRow
from decode_pdf.contracts import DecodedPdf


def serialize_extraction_result(result: DrawExtractionResult) -> str:
    payload: dict[str, Any] = result.to_dict()
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, indent=2) + "\n"


def write_extraction_json(*, result: DrawExtractionResult, out_file: Path) -> None:
    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_text(serialize_extraction_result(result), encoding="utf-8")


def write_rows_json(*, rows: list[DrawRow], out_file: Path) -> None:
    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_text(
        json.dumps([r.to_dict() for r in rows], ensure_ascii=False, sort_keys=True, indent=2) + "\n",
        encoding="utf-8",
    )


def write_decoded_tokens_json(*, decoded: DecodedPdf, out_file: Path) -> None:
    # Same shape `--tokens-json` reads back: {"tokens": [...], ...}.
    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_text(json.dumps(decoded.to_dict(), ensure_ascii=False, sort_keys=True, indent=2) + "\n", encoding="utf-8")
