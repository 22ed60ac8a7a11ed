from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from mcp_log_explain_server.core.config import BASE_DIR_ENV, ExplainConfig
from mcp_log_explain_server.core.knowledge import PatternRegistry
from mcp_log_explain_server.tools.explain import (
    analyze_incident_impl,
    explain_batch_impl,
    explain_log_file_impl,
    explain_log_impl,
    knowledge_base_stats_impl,
    list_patterns_impl,
)


def test_explain_log_impl_returns_wire_dict(registry: PatternRegistry) -> None:
    out = explain_log_impl(log="ERROR: ECONNREFUSED 127.0.0.1:5432", registry=registry)

    assert out["patternId"] == "DB_CONN_REFUSED"
    assert out["severity"] == "HIGH"
    assert out["category"] == "database"
    assert out["metadata"]["errorCode"] == "ECONNREFUSED"


def test_explain_log_impl_source(registry: PatternRegistry) -> None:
    out = explain_log_impl(log="worker exited", registry=registry, source="billing")

    assert out["source"] == "billing"


@pytest.mark.parametrize("value", ["", "   ", None, 42])
def test_explain_log_impl_rejects_empty(registry: PatternRegistry, value: object) -> None:
    with pytest.raises(ValueError, match="log must be a non-empty string"):
        explain_log_impl(log=value, registry=registry)  # type: ignore[arg-type]


def test_explain_log_impl_rejects_long_line(registry: PatternRegistry) -> None:
    with pytest.raises(ValueError, match="maximum length of 10 characters"):
        explain_log_impl(log="x" * 11, registry=registry, cfg=ExplainConfig(max_line_length=10))


def test_explain_batch_impl(registry: PatternRegistry, incident_lines: list[str]) -> None:
    out = explain_batch_impl(logs=incident_lines, registry=registry)

    assert out["count"] == 3
    assert [e["patternId"] for e in out["explanations"]] == [
        "DB_CONN_REFUSED",
        "API_TIMEOUT",
        "API_SERVICE_UNAVAILABLE",
    ]


def test_explain_batch_impl_validation(registry: PatternRegistry) -> None:
    with pytest.raises(ValueError, match="logs must be a list of strings"):
        explain_batch_impl(logs="one line", registry=registry)
    with pytest.raises(ValueError, match="at least one entry"):
        explain_batch_impl(logs=[], registry=registry)
    with pytest.raises(ValueError, match=r"at most 2 entries \(got 3\)"):
        explain_batch_impl(logs=["a", "b", "c"], registry=registry, cfg=ExplainConfig(batch_limit=2))
    with pytest.raises(ValueError, match=r"logs\[1\] must be a non-empty string"):
        explain_batch_impl(logs=["a", ""], registry=registry)


def test_analyze_incident_impl_wire_keys(
    registry: PatternRegistry, incident_lines: list[str]
) -> None:
    out = analyze_incident_impl(
        logs=incident_lines, registry=registry, incident_context="checkout"
    )

    assert out["severity"] == "CRITICAL"
    assert out["severityScore"] == 95
    assert out["totalLogsAnalyzed"] == 3
    assert out["title"].endswith(" — checkout")
    assert out["categoryBreakdown"] == {"database": 1, "timeout": 1, "api": 1}
    assert set(out) >= {
        "rootCauseChain",
        "affectedSystems",
        "timeline",
        "recommendedActions",
        "correlations",
    }
    assert out["timeline"][0]["timestamp"] == "2026-02-11T10:30:00Z"


def test_analyze_incident_impl_limit(registry: PatternRegistry) -> None:
    with pytest.raises(ValueError, match="at most 1 entries"):
        analyze_incident_impl(
            logs=["a", "b"], registry=registry, cfg=ExplainConfig(incident_limit=1)
        )


@pytest.mark.asyncio
async def test_explain_log_file_impl(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    registry: PatternRegistry,
    write_incident_log: Callable[[Path], None],
) -> None:
    monkeypatch.setenv(BASE_DIR_ENV, str(tmp_path))
    write_incident_log(tmp_path / "app.log")

    out = await explain_log_file_impl(log_path="app.log", registry=registry, min_severity="high")

    assert out["count"] == 3
    assert [e["lineNo"] for e in out["explanations"]] == [3, 4, 5]
    assert out["explanations"][0]["patternId"] == "DB_CONN_REFUSED"


@pytest.mark.asyncio
async def test_explain_log_file_impl_limit_is_capped(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    registry: PatternRegistry,
    write_incident_log: Callable[[Path], None],
) -> None:
    monkeypatch.setenv(BASE_DIR_ENV, str(tmp_path))
    write_incident_log(tmp_path / "app.log")

    out = await explain_log_file_impl(
        log_path="app.log",
        registry=registry,
        limit=1000,
        cfg=ExplainConfig(file_line_limit=2),
    )

    assert out["count"] == 2


@pytest.mark.asyncio
async def test_explain_log_file_impl_rejects_bad_input(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    registry: PatternRegistry,
    write_incident_log: Callable[[Path], None],
) -> None:
    monkeypatch.setenv(BASE_DIR_ENV, str(tmp_path))
    write_incident_log(tmp_path / "app.log")
    (tmp_path / "data.json").write_text("{}", encoding="utf-8")

    with pytest.raises(ValueError, match="limit must be > 0"):
        await explain_log_file_impl(log_path="app.log", registry=registry, limit=0)
    with pytest.raises(ValueError, match="Unknown severity 'urgent'"):
        await explain_log_file_impl(log_path="app.log", registry=registry, min_severity="urgent")
    with pytest.raises(ValueError, match="Path escapes base dir"):
        await explain_log_file_impl(log_path="../app.log", registry=registry)
    with pytest.raises(ValueError, match="File type not allowed"):
        await explain_log_file_impl(log_path="data.json", registry=registry)
    with pytest.raises(FileNotFoundError):
        await explain_log_file_impl(log_path="missing.log", registry=registry)


def test_knowledge_base_stats_impl(registry: PatternRegistry) -> None:
    out = knowledge_base_stats_impl(registry=registry)

    assert out["totalPatterns"] == 61
    assert "database" in out["categories"]


def test_list_patterns_impl(registry: PatternRegistry) -> None:
    everything = list_patterns_impl(registry=registry)
    docker = list_patterns_impl(registry=registry, category="Docker")

    assert everything["count"] == 61
    assert docker["count"] == 5
    assert {p["category"] for p in docker["patterns"]} == {"docker"}
    first = docker["patterns"][0]
    assert set(first) >= {"id", "name", "severity", "keywords", "summary"}
    assert "matchers" not in first


def test_list_patterns_impl_unknown_category(registry: PatternRegistry) -> None:
    with pytest.raises(ValueError, match="Unknown category 'mainframe'"):
        list_patterns_impl(registry=registry, category="mainframe")
