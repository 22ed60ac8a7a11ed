from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from mcp_log_explain_server.cli import build_parser, main


def test_parser_requires_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_stats_prints_json(capsys: pytest.CaptureFixture[str]) -> None:
    main(["stats"])

    out = json.loads(capsys.readouterr().out)
    assert out["totalPatterns"] == 61


def test_explain_json(capsys: pytest.CaptureFixture[str]) -> None:
    main(["explain", "--json", "ERROR: ECONNREFUSED 127.0.0.1:5432"])

    out = json.loads(capsys.readouterr().out)
    assert out["patternId"] == "DB_CONN_REFUSED"


def test_explain_text(capsys: pytest.CaptureFixture[str]) -> None:
    main(["explain", "FATAL: out of memory, JavaScript heap out of memory"])

    out = capsys.readouterr().out
    assert out.startswith("[CRITICAL 90] SYS_OOM (memory)")


def test_incident_from_file(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
    write_incident_log: Callable[[Path], None],
) -> None:
    log = tmp_path / "incident.log"
    write_incident_log(log)

    main(["incident", str(log), "--context", "checkout"])

    out = json.loads(capsys.readouterr().out)
    assert out["totalLogsAnalyzed"] == 4
    assert out["title"].endswith(" — checkout")


def test_empty_line_exits_with_usage_error(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["explain", "  "])

    assert exc.value.code == 2
    assert "Error: log must be a non-empty string" in capsys.readouterr().err


def test_missing_file_exits(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["batch", str(tmp_path / "nope.log")])

    assert exc.value.code == 2


def test_incident_is_capped_at_incident_limit(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    write_incident_log: Callable[[Path], None],
) -> None:
    monkeypatch.setenv("LOG_EXPLAIN_INCIDENT_LIMIT", "2")
    log = tmp_path / "incident.log"
    write_incident_log(log)

    main(["incident", str(log)])

    out = json.loads(capsys.readouterr().out)
    assert out["totalLogsAnalyzed"] == 2
