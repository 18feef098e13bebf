from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

from contracts.tokens import Token
from decode_pdf import DataAccessError, DecodePdfError, decode_pdf_relpath
from games.registry import UnknownGameError, get_game, list_games

from .artifacts import write_decoded_tokens_json, write_extraction_json, write_rows_json
from .errors import ExtractionError, TokenInputError
from .merge import split_by_session
from .module import extract_draws, failed_result


def _load_tokens_json(path: Path) -> list[Token]:
    """Read a JSON token list, or a decoded-document dump carrying one under "tokens"."""
    try:
        raw: Any = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise TokenInputError(f"cannot read tokens from {path}: {e}") from e

    items = raw.get("tokens", []) if isinstance(raw, dict) else raw
    if not isinstance(items, list):
        raise TokenInputError(f"expected a list of tokens in {path}, got {type(items).__name__}")

    tokens: list[Token] = []
    for i, d in enumerate(items):
        if not isinstance(d, dict):
            raise TokenInputError(f"token #{i} in {path} is not an object")
        try:
            tokens.append(Token.from_dict(d))
        except (KeyError, TypeError, ValueError) as e:
            raise TokenInputError(f"token #{i} in {path} is malformed: {e!r}") from e
    return tokens


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="draws-extract",
        description="Reconstruct lottery draw rows from a results PDF's positioned text layer.",
    )
    p.add_argument("--game", required=True, help=f"Game key, one of: {', '.join(list_games())}.")
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--pdf-relpath", help="PDF path relative to --data-root.")
    src.add_argument("--tokens-json", type=Path, help="Pre-decoded tokens: a JSON list of {text,x,y,page}.")
    p.add_argument("--data-root", type=Path, default=None, help="Resolved data root (required with --pdf-relpath).")
    p.add_argument("--pages", default=None, help='Optional page selection like "1,3-5". Default: all pages.')
    p.add_argument("--output", required=True, type=Path, help="Output JSON file for the full extraction result.")
    p.add_argument(
        "--split-sessions",
        action="store_true",
        help="Also write one rows file per session code next to --output.",
    )
    p.add_argument(
        "--compute-source-sha256",
        action="store_true",
        help="Include SHA-256 of the source PDF in meta for auditing.",
    )
    p.add_argument(
        "--tokens-out",
        type=Path,
        default=None,
        help="With --pdf-relpath: also write the decoded tokens as JSON (readable by --tokens-json).",
    )
    p.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    if args.pdf_relpath is not None and args.data_root is None:
        parser.error("--data-root is required with --pdf-relpath")
    if args.tokens_out is not None and args.pdf_relpath is None:
        parser.error("--tokens-out is only valid with --pdf-relpath")

    try:
        game = get_game(args.game)
    except UnknownGameError as e:
        parser.error(str(e.args[0]))

    decode_meta: dict[str, Any] = {}
    try:
        if args.tokens_json is not None:
            tokens = _load_tokens_json(args.tokens_json)
        else:
            decoded = decode_pdf_relpath(
                data_root=args.data_root,
                pdf_relpath=args.pdf_relpath,
                page_selection=args.pages,
                compute_source_sha256=args.compute_source_sha256,
            )
            tokens = decoded.tokens
            if args.tokens_out is not None:
                write_decoded_tokens_json(decoded=decoded, out_file=args.tokens_out)
            decode_meta = {"source_pdf_relpath": decoded.source_pdf_relpath, "decode": decoded.meta}
        result = extract_draws(tokens, game)
    except DecodePdfError as e:
        result = failed_result(game.key, [f"{e.code}: {e.message}"], {"decode_error": e.to_dict()})
    except (DataAccessError, ExtractionError) as e:
        result = failed_result(game.key, [f"{type(e).__name__}: {e}"])
    else:
        result.meta.update(decode_meta)

    write_extraction_json(result=result, out_file=args.output)
    if args.split_sessions and result.ok:
        for code, rows in sorted(split_by_session(result.rows).items()):
            suffix = code.lower() or "daily"
            write_rows_json(rows=rows, out_file=args.output.with_name(f"{args.output.stem}.{suffix}.json"))

    summary = {
        "ok": result.ok,
        "game": result.game,
        "pages": len(result.pages),
        "rows": len(result.rows),
        "skipped": len(result.skips),
        "errors": result.errors,
    }
    print(json.dumps(summary, sort_keys=True, separators=(",", ":"), ensure_ascii=False))
    return 0 if result.ok else 2


if __name__ == "__main__":
    raise SystemExit(main())
