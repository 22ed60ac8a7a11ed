"""Log file access for file-backed tools and resources.

Paths are confined to ``LOG_EXPLAIN_BASE_DIR`` (default: the current working
directory). Only plain-text logs are accepted, each optionally gzip-compressed.
"""

from __future__ import annotations

import gzip
import os
from pathlib import Path
from typing import IO

from .config import BASE_DIR_ENV

ALLOWED_FILE_SUFFIXES = {".log", ".txt"}
COMPRESSED_SUFFIX = ".gz"
TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "replace"


def base_dir() -> Path:
    return Path(os.getenv(BASE_DIR_ENV) or os.getcwd()).resolve()


def is_compressed(path: Path) -> bool:
    return path.suffix.lower() == COMPRESSED_SUFFIX


def log_suffix(path: Path) -> str:
    """Suffix that identifies the log format, ignoring a trailing ``.gz``.

    ``app.log.gz`` gives ``.log``; a bare ``archive.gz`` gives ``""``.
    """
    suffixes = [s.lower() for s in path.suffixes]
    if suffixes and suffixes[-1] == COMPRESSED_SUFFIX:
        suffixes.pop()
    return suffixes[-1] if suffixes else ""


def safe_resolve(path: str) -> Path:
    """Resolve ``path`` against the base directory, refusing anything outside it."""
    base = base_dir()
    candidate = Path(path).expanduser()
    resolved = (candidate if candidate.is_absolute() else base / candidate).resolve()
    if not resolved.is_relative_to(base):
        raise ValueError("Path escapes base dir")
    return resolved


def ensure_allowed_suffix(path: Path) -> None:
    if log_suffix(path) in ALLOWED_FILE_SUFFIXES:
        return
    allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
    raise ValueError(f"File type not allowed. Allowed: {allowed} (optionally {COMPRESSED_SUFFIX}).")


def resolve_log_path(path: str) -> Path:
    """Resolve a caller-supplied path to an existing, allowed log file."""
    resolved = safe_resolve(path)
    if not resolved.is_file():
        raise FileNotFoundError(f"File not found: {resolved}")
    ensure_allowed_suffix(resolved)
    return resolved


def open_log_text(
    path: Path,
    *,
    encoding: str = TEXT_ENCODING,
    decode_errors: str = TEXT_ERRORS,
) -> IO[str]:
    """Open a log for text reading, decompressing ``.gz`` transparently."""
    if is_compressed(path):
        return gzip.open(path, mode="rt", encoding=encoding, errors=decode_errors)
    return open(path, encoding=encoding, errors=decode_errors)


def read_text(path: Path) -> str:
    with open_log_text(path) as f:
        return f.read()
