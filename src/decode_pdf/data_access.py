from __future__ import annotations

import hashlib
from pathlib import Path, PurePosixPath, PureWindowsPath


class DataAccessError(Exception):
    """A source document path that would leave the configured data root."""


def _is_anchored(relpath: str) -> bool:
    # Drive letters and UNC shares count as absolute on every platform.
    return PurePosixPath(relpath).is_absolute() or bool(PureWindowsPath(relpath).anchor)


def resolve_under_data_root(*, data_root: Path, relpath: str) -> Path:
    """
    Map a results-PDF path, given relative to `data_root`, onto the filesystem.

    The resolved target must be the root itself or lie beneath it once symlinks and `..`
    segments are resolved.
    """
    if not relpath.strip() or _is_anchored(relpath):
        raise DataAccessError(f"source documents are addressed relative to the data root, got {relpath!r}")

    root = data_root.expanduser().resolve()
    target = (root / relpath).resolve()
    if target != root and root not in target.parents:
        raise DataAccessError(f"{relpath!r} resolves outside the data root")
    return target


def source_sha256(pdf_file: Path) -> str:
    # Draw-history PDFs are a few MB at most.
    return hashlib.sha256(pdf_file.read_bytes()).hexdigest()
