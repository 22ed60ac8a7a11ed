from __future__ import annotations

from mcp_log_explain_server.core.incident import (
    MAX_RECOMMENDED_ACTIONS,
    build_incident_summary,
    build_timeline,
    detect_correlations,
)
from mcp_log_explain_server.core.knowledge import PatternRegistry
from mcp_log_explain_server.core.log_service import summarize_incident
from mcp_log_explain_server.core.models import LogCategory, LogExplanation, SeverityLevel


def _exp(
    pattern_id: str,
    category: LogCategory,
    *,
    score: int = 70,
    severity: SeverityLevel = SeverityLevel.HIGH,
    timestamp: str | None = None,
    summary: str = "Disk is full",
    fixes: tuple[str, ...] = (),
) -> LogExplanation:
    return LogExplanation(
        raw_log="raw",
        pattern_id=pattern_id,
        summary=summary,
        category=category,
        severity=severity,
        severity_score=score,
        root_cause=f"root cause of {pattern_id}",
        recommended_fixes=list(fixes),
        timestamp=timestamp,
        confidence=0.9 if pattern_id != "unknown" else 0.0,
    )


def test_three_line_incident(registry: PatternRegistry, incident_lines: list[str]) -> None:
    summary = summarize_incident(incident_lines, registry=registry)

    assert summary.title == "CRITICAL Incident — 3 issue types detected across Database"
    assert summary.severity is SeverityLevel.CRITICAL
    assert summary.severity_score == 95
    assert summary.total_logs_analyzed == 3
    assert summary.category_breakdown == {"database": 1, "timeout": 1, "api": 1}
    assert summary.affected_systems == ["database", "timeout", "api"]
    assert summary.correlations == [
        "Database issues detected alongside API timeouts — the database may be the root "
        "cause of slow API responses"
    ]
    assert len(summary.root_cause_chain) == 3
    assert [ev.timestamp for ev in summary.timeline] == [
        "2026-02-11T10:30:00Z",
        "2026-02-11T10:30:02Z",
        "2026-02-11T10:30:03Z",
    ]
    assert summary.summary.startswith(
        "Analyzed 3 log entries. Overall severity: CRITICAL (score: 95/100)."
    )
    assert "1 critical-severity log(s) require immediate attention." in summary.summary
    assert "2 high-severity log(s) detected." in summary.summary
    assert "Correlations found:" in summary.summary


def test_incident_context_extends_title(
    registry: PatternRegistry, incident_lines: list[str]
) -> None:
    summary = summarize_incident(
        incident_lines, registry=registry, incident_context="checkout outage"
    )

    assert summary.title.endswith(" — checkout outage")


def test_empty_incident() -> None:
    summary = build_incident_summary([])

    assert summary.title == "No Logs Provided"
    assert summary.severity is SeverityLevel.LOW
    assert summary.severity_score == 0
    assert summary.total_logs_analyzed == 0
    assert summary.timeline == []


def test_single_pattern_title_uses_summary() -> None:
    summary = build_incident_summary(
        [_exp("DISK_FULL", LogCategory.DISK), _exp("DISK_FULL", LogCategory.DISK)]
    )

    assert summary.title == "HIGH Incident — Disk is full"
    assert summary.root_cause_chain == ["root cause of DISK_FULL"]


def test_all_unknown_title() -> None:
    unknown = _exp(
        "unknown", LogCategory.UNKNOWN, score=40, severity=SeverityLevel.MEDIUM
    )

    summary = build_incident_summary([unknown, unknown])

    assert summary.title == "MEDIUM Incident — Unrecognized Errors Detected"
    assert summary.affected_systems == []
    assert summary.root_cause_chain == []
    assert summary.category_breakdown == {"unknown": 2}


def test_top_category_tie_keeps_first_seen() -> None:
    summary = build_incident_summary(
        [_exp("DISK_FULL", LogCategory.DISK), _exp("DB_DOWN", LogCategory.DATABASE)]
    )

    assert summary.title.endswith("2 issue types detected across Disk")


def test_timeline_sorts_timestamped_first() -> None:
    events = build_timeline(
        [
            _exp("A", LogCategory.DISK, timestamp=None, summary="first"),
            _exp("B", LogCategory.DISK, timestamp="2026-02-11T10:30:05Z", summary="second"),
            _exp("C", LogCategory.DISK, timestamp="2026-02-11T10:30:01Z", summary="third"),
            _exp("D", LogCategory.DISK, timestamp=None, summary="fourth"),
        ]
    )

    assert [ev.summary for ev in events] == ["third", "second", "first", "fourth"]


def test_timeline_truncates_summary() -> None:
    events = build_timeline([_exp("A", LogCategory.DISK, summary="x" * 400)])

    assert len(events[0].summary) == 150


def test_recommended_actions_are_deduplicated_and_capped() -> None:
    explanations = [
        _exp(f"P{i}", LogCategory.DISK, fixes=tuple(f"fix {i}-{j}" for j in range(4)))
        for i in range(3)
    ]
    explanations.append(_exp("P0", LogCategory.DISK, fixes=("fix 0-0",)))

    summary = build_incident_summary(explanations)

    assert len(summary.recommended_actions) == MAX_RECOMMENDED_ACTIONS
    assert summary.recommended_actions[0] == "fix 0-0"
    assert len(set(summary.recommended_actions)) == MAX_RECOMMENDED_ACTIONS


def test_detect_correlations() -> None:
    assert detect_correlations([LogCategory.DATABASE], []) == []

    found = detect_correlations([LogCategory.DATABASE], ["API_TIMEOUT"])
    assert len(found) == 1
    assert found[0].startswith("Database issues detected alongside API timeouts")

    found = detect_correlations([LogCategory.PROCESS, LogCategory.MEMORY], [])
    assert len(found) == 1
    assert found[0].startswith("Memory issues detected alongside process crashes")

    found = detect_correlations(
        [LogCategory.DISK, LogCategory.DATABASE, LogCategory.TIMEOUT], []
    )
    assert len(found) == 2
