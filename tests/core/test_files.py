from __future__ import annotations

import gzip
from pathlib import Path

import pytest

from mcp_log_explain_server.core.config import BASE_DIR_ENV
from mcp_log_explain_server.core.files import (
    ensure_allowed_suffix,
    read_text,
    resolve_log_path,
    safe_resolve,
)


def test_safe_resolve_relative_to_base_dir(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv(BASE_DIR_ENV, str(tmp_path))

    assert safe_resolve("logs/app.log") == tmp_path.resolve() / "logs" / "app.log"


def test_safe_resolve_rejects_escape(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(BASE_DIR_ENV, str(tmp_path))

    with pytest.raises(ValueError, match="Path escapes base dir"):
        safe_resolve("../outside.log")


@pytest.mark.parametrize("name", ["app.log", "notes.TXT", "app.log.gz"])
def test_allowed_suffixes(name: str) -> None:
    ensure_allowed_suffix(Path(name))


@pytest.mark.parametrize("name", ["app.json", "archive.gz", "app"])
def test_rejected_suffixes(name: str) -> None:
    with pytest.raises(ValueError, match="File type not allowed"):
        ensure_allowed_suffix(Path(name))


def test_resolve_log_path_missing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(BASE_DIR_ENV, str(tmp_path))

    with pytest.raises(FileNotFoundError, match="File not found"):
        resolve_log_path("missing.log")


def test_read_text_plain_and_gzip(tmp_path: Path) -> None:
    plain = tmp_path / "a.log"
    plain.write_text("hello\n", encoding="utf-8")
    packed = tmp_path / "b.log.gz"
    with gzip.open(packed, "wt", encoding="utf-8") as f:
        f.write("hello\n")

    assert read_text(plain) == "hello\n"
    assert read_text(packed) == "hello\n"


def test_absolute_path_inside_base_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(BASE_DIR_ENV, str(tmp_path))
    log = tmp_path / "app.log.gz"
    with gzip.open(log, "wt", encoding="utf-8") as f:
        f.write("x\n")

    assert resolve_log_path(str(log)) == log.resolve()


def test_absolute_path_outside_base_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(BASE_DIR_ENV, str(tmp_path / "logs"))

    with pytest.raises(ValueError, match="Path escapes base dir"):
        safe_resolve(str(tmp_path / "other.log"))
