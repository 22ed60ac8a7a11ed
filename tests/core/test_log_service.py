from __future__ import annotations

import gzip
from collections.abc import Callable
from pathlib import Path

import pytest

from mcp_log_explain_server.core.knowledge import PatternRegistry
from mcp_log_explain_server.core.log_service import (
    explain_batch,
    explain_log,
    explain_log_file,
    iter_log_file,
    knowledge_base_stats,
    severity_at_least,
)
from mcp_log_explain_server.core.models import LogCategory, SeverityLevel


def test_explain_connection_refused(registry: PatternRegistry) -> None:
    out = explain_log("ERROR: ECONNREFUSED 127.0.0.1:5432", registry=registry)

    assert out.pattern_id == "DB_CONN_REFUSED"
    assert out.confidence == 0.99
    assert out.severity is SeverityLevel.HIGH
    assert out.severity_score == 70
    assert out.engine == "rule-based"
    assert out.metadata["port"] == "5432"


def test_explain_auth_failure_extracts_username(registry: PatternRegistry) -> None:
    out = explain_log('FATAL: password authentication failed for user "admin"', registry=registry)

    assert out.pattern_id == "DB_AUTH_FAILED"
    assert out.metadata["username"] == "admin"


def test_explain_oom_is_critical(registry: PatternRegistry) -> None:
    out = explain_log("FATAL: out of memory, JavaScript heap out of memory", registry=registry)

    assert out.pattern_id == "SYS_OOM"
    assert out.severity is SeverityLevel.CRITICAL
    assert out.severity_score == 90


def test_explain_unknown_line(registry: PatternRegistry) -> None:
    out = explain_log("Something completely random and unknown happened", registry=registry)

    assert out.pattern_id == "unknown"
    assert out.category is LogCategory.UNKNOWN
    assert out.severity is SeverityLevel.MEDIUM
    assert out.severity_score == 40
    assert out.confidence == 0.0


def test_source_override(registry: PatternRegistry) -> None:
    line = "Feb 11 10:30:00 web01 sshd[1234]: Failed password for root from 10.0.0.9 port 22"

    assert explain_log(line, registry=registry).source == "web01"
    assert explain_log(line, registry=registry, source="bastion").source == "bastion"


def test_explain_is_deterministic(registry: PatternRegistry, incident_lines: list[str]) -> None:
    first = [e.to_wire() for e in explain_batch(incident_lines, registry=registry)]
    second = [e.to_wire() for e in explain_batch(incident_lines, registry=registry)]

    assert first == second
    assert [e["rawLog"] for e in first] == incident_lines


def test_knowledge_base_stats(registry: PatternRegistry) -> None:
    stats = knowledge_base_stats(registry)

    assert stats.total_patterns == 61
    assert stats.categories == [c.value for c in registry.categories()]
    assert stats.to_wire()["totalPatterns"] == 61


def test_severity_at_least() -> None:
    assert severity_at_least(SeverityLevel.CRITICAL, SeverityLevel.HIGH)
    assert severity_at_least(SeverityLevel.HIGH, SeverityLevel.HIGH)
    assert not severity_at_least(SeverityLevel.MEDIUM, SeverityLevel.HIGH)


@pytest.mark.asyncio
async def test_iter_log_file_skips_blank_lines(
    tmp_path: Path, write_incident_log: Callable[[Path], None]
) -> None:
    log = tmp_path / "app.log"
    write_incident_log(log)

    out = [n async for n, _ in iter_log_file(log)]

    assert out == [1, 3, 4, 5]


@pytest.mark.asyncio
async def test_iter_log_file_limit(
    tmp_path: Path, write_incident_log: Callable[[Path], None]
) -> None:
    log = tmp_path / "app.log"
    write_incident_log(log)

    out = [item async for item in iter_log_file(log, limit=2)]

    assert [n for n, _ in out] == [1, 3]
    assert out[0][1] == "2026-02-11T10:29:59Z INFO service started"


@pytest.mark.asyncio
async def test_iter_log_file_reads_gzip(tmp_path: Path) -> None:
    log = tmp_path / "app.log.gz"
    with gzip.open(log, "wt", encoding="utf-8") as f:
        f.write("first\n\nsecond\n")

    out = [item async for item in iter_log_file(log)]

    assert out == [(1, "first"), (3, "second")]


@pytest.mark.asyncio
async def test_iter_log_file_missing(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="Log file not found"):
        async for _ in iter_log_file(tmp_path / "nope.log"):
            pass


@pytest.mark.asyncio
async def test_iter_log_file_rejects_bad_limit(tmp_path: Path) -> None:
    log = tmp_path / "app.log"
    log.write_text("x\n", encoding="utf-8")

    with pytest.raises(ValueError, match="limit must be >= 1"):
        async for _ in iter_log_file(log, limit=0):
            pass


@pytest.mark.asyncio
async def test_explain_log_file_min_severity(
    tmp_path: Path,
    registry: PatternRegistry,
    write_incident_log: Callable[[Path], None],
) -> None:
    log = tmp_path / "app.log"
    write_incident_log(log)

    everything = await explain_log_file(log, registry=registry)
    assert [n for n, _ in everything] == [1, 3, 4, 5]

    high = await explain_log_file(log, registry=registry, min_severity=SeverityLevel.HIGH)
    assert [n for n, _ in high] == [3, 4, 5]
    assert [e.pattern_id for _, e in high] == [
        "DB_CONN_REFUSED",
        "API_TIMEOUT",
        "API_SERVICE_UNAVAILABLE",
    ]
