from __future__ import annotations

import pytest

from mcp_log_explain_server.core.config import (
    BATCH_LIMIT_ENV,
    FILE_LINE_LIMIT_ENV,
    INCIDENT_LIMIT_ENV,
    MAX_LINE_LENGTH_ENV,
    ExplainConfig,
    resolve_explain_config,
)


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (BATCH_LIMIT_ENV, INCIDENT_LIMIT_ENV, FILE_LINE_LIMIT_ENV, MAX_LINE_LENGTH_ENV):
        monkeypatch.delenv(name, raising=False)

    cfg = resolve_explain_config()

    assert cfg.batch_limit == 50
    assert cfg.incident_limit == 100
    assert cfg.file_line_limit == 5000
    assert cfg.max_line_length == 10_000


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(BATCH_LIMIT_ENV, "5")

    cfg = resolve_explain_config(ExplainConfig(incident_limit=7))

    assert cfg.batch_limit == 5
    assert cfg.incident_limit == 7


def test_empty_env_is_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(BATCH_LIMIT_ENV, "")

    assert resolve_explain_config().batch_limit == 50


@pytest.mark.parametrize(
    ("value", "message"),
    [("many", "must be an integer"), ("0", "must be >= 1")],
)
def test_invalid_env(monkeypatch: pytest.MonkeyPatch, value: str, message: str) -> None:
    monkeypatch.setenv(FILE_LINE_LIMIT_ENV, value)

    with pytest.raises(ValueError, match=message):
        resolve_explain_config()
