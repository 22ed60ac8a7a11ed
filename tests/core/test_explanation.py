from __future__ import annotations

from mcp_log_explain_server.core.explanation import (
    UNKNOWN_ROOT_CAUSE,
    UNKNOWN_SUMMARY,
    build_explanation,
    build_unknown_explanation,
)
from mcp_log_explain_server.core.extraction import parse_log_line
from mcp_log_explain_server.core.knowledge import PatternRegistry
from mcp_log_explain_server.core.models import (
    LogCategory,
    ParsedMetadata,
    SeverityLevel,
    SeverityResult,
)

_MEDIUM = SeverityResult(level=SeverityLevel.MEDIUM, score=40, reason="")


def test_matched_explanation_copies_template(registry: PatternRegistry) -> None:
    line = "ERROR: ECONNREFUSED 127.0.0.1:5432"
    rule = registry.get_pattern_by_id("DB_CONN_REFUSED")
    assert rule is not None

    out = build_explanation(
        line,
        rule,
        parse_log_line(line),
        SeverityResult(level=SeverityLevel.HIGH, score=70, reason=""),
        0.99,
    )

    assert out.pattern_id == "DB_CONN_REFUSED"
    assert out.category is LogCategory.DATABASE
    assert out.summary == rule.explanation.summary
    assert out.recommended_fixes == list(rule.explanation.recommended_fixes)
    assert out.raw_log == line
    assert list(out.metadata) == ["logLevel", "ipAddress", "port", "errorCode"]
    assert out.metadata["errorCode"] == "ECONNREFUSED"


def test_unknown_without_level() -> None:
    out = build_unknown_explanation("odd", ParsedMetadata(message_body="odd"), _MEDIUM)

    assert out.pattern_id == "unknown"
    assert out.category is LogCategory.UNKNOWN
    assert out.summary == UNKNOWN_SUMMARY
    assert out.root_cause == UNKNOWN_ROOT_CAUSE
    assert out.confidence == 0.0
    assert out.metadata == {}
    assert len(out.possible_causes) == 3
    assert len(out.recommended_fixes) == 3


def test_unknown_summary_follows_level_family() -> None:
    def summary(level: str) -> str:
        meta = ParsedMetadata(message_body="x", log_level=level)
        return build_unknown_explanation("x", meta, _MEDIUM).summary

    assert summary("ERROR").startswith("An error-level log entry")
    assert summary("EMERGENCY").startswith("An error-level log entry")
    assert summary("WARNING").startswith("A warning-level log entry")
    assert summary("INFO") == (
        'An informational log entry was detected with log level "INFO". '
        "No specific issue pattern was matched."
    )


def test_unknown_metadata_is_restricted() -> None:
    meta = ParsedMetadata(
        message_body="x",
        log_level="WARN",
        pid="42",
        port="8080",
        ip_address="10.0.0.1",
        http_status="500",
    )

    out = build_unknown_explanation("x", meta, _MEDIUM)

    assert out.metadata == {"logLevel": "WARN", "ipAddress": "10.0.0.1", "httpStatus": "500"}


def test_wire_shape_is_camel_case_without_nulls() -> None:
    wire = build_unknown_explanation("odd", ParsedMetadata(message_body="odd"), _MEDIUM).to_wire()

    assert wire["rawLog"] == "odd"
    assert wire["patternId"] == "unknown"
    assert wire["severityScore"] == 40
    assert wire["engine"] == "rule-based"
    assert "timestamp" not in wire
    assert "source" not in wire


def test_unknown_root_cause_text() -> None:
    out = build_unknown_explanation("odd", ParsedMetadata(message_body="odd"), _MEDIUM)

    assert out.root_cause == (
        "Unable to determine root cause — this log does not match any known pattern."
    )
