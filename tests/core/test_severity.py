from __future__ import annotations

import re

import pytest

from mcp_log_explain_server.core.models import (
    ExplanationTemplate,
    LogCategory,
    PatternRule,
    SeverityLevel,
    SeverityModifier,
    SeverityResult,
)
from mcp_log_explain_server.core.severity import (
    aggregate_severity,
    calculate_severity,
    score_to_level,
)


def _rule(
    severity: SeverityLevel,
    modifiers: tuple[SeverityModifier, ...] = (),
) -> PatternRule:
    return PatternRule(
        id="TEST_RULE",
        name="Test Rule",
        category=LogCategory.APPLICATION,
        matchers=(re.compile(r"boom"),),
        keywords=("boom",),
        severity=severity,
        explanation=ExplanationTemplate(
            summary="s", root_cause="r", possible_causes=(), recommended_fixes=()
        ),
        severity_modifiers=modifiers,
    )


@pytest.mark.parametrize(
    ("score", "expected"),
    [
        (100, SeverityLevel.CRITICAL),
        (80, SeverityLevel.CRITICAL),
        (79, SeverityLevel.HIGH),
        (55, SeverityLevel.HIGH),
        (54, SeverityLevel.MEDIUM),
        (30, SeverityLevel.MEDIUM),
        (29, SeverityLevel.LOW),
        (0, SeverityLevel.LOW),
    ],
)
def test_score_to_level_boundaries(score: int, expected: SeverityLevel) -> None:
    assert score_to_level(score) is expected


def test_unmatched_line_uses_log_level() -> None:
    assert calculate_severity("x", None, None).score == 40
    assert calculate_severity("x", None, "ERROR").level is SeverityLevel.HIGH
    assert calculate_severity("x", None, "FATAL").score == 90
    assert calculate_severity("x", None, "INFO").level is SeverityLevel.MEDIUM

    result = calculate_severity("x", None, "DEBUG")
    assert result.reason.startswith("No known pattern matched")


def test_rule_base_score() -> None:
    result = calculate_severity("boom", _rule(SeverityLevel.HIGH))

    assert result.score == 70
    assert result.level is SeverityLevel.HIGH
    assert "TEST_RULE" in result.reason


def test_modifier_raises_severity_and_sets_reason() -> None:
    rule = _rule(
        SeverityLevel.MEDIUM,
        (SeverityModifier(re.compile(r"primary"), SeverityLevel.HIGH, "Primary node affected"),),
    )

    result = calculate_severity("boom on primary replica", rule)

    assert result.score == 70
    assert result.reason == "Primary node affected"


def test_modifier_never_lowers_severity() -> None:
    rule = _rule(
        SeverityLevel.HIGH,
        (SeverityModifier(re.compile(r"boom"), SeverityLevel.LOW, "minor"),),
    )

    result = calculate_severity("boom", rule)

    assert result.score == 70
    assert result.reason != "minor"


def test_log_level_blends_upward_with_half_up_rounding() -> None:
    result = calculate_severity("boom", _rule(SeverityLevel.LOW), "ERROR")

    # (15 + 70) / 2 = 42.5
    assert result.score == 43
    assert result.level is SeverityLevel.MEDIUM


def test_lower_log_level_leaves_score() -> None:
    assert calculate_severity("boom", _rule(SeverityLevel.HIGH), "WARN").score == 70


def test_context_boost_applies_once_then_repetition() -> None:
    result = calculate_severity("boom: repeated outage in production", _rule(SeverityLevel.HIGH))

    assert result.score == 85
    assert result.level is SeverityLevel.CRITICAL


def test_score_is_clamped() -> None:
    result = calculate_severity("boom repeated in production", _rule(SeverityLevel.CRITICAL))

    assert result.score == 100


def _scores(*values: int) -> list[SeverityResult]:
    return [SeverityResult(level=score_to_level(v), score=v, reason="") for v in values]


def test_aggregate_empty() -> None:
    result = aggregate_severity([])

    assert result.level is SeverityLevel.LOW
    assert result.score == 0
    assert result.reason == "No logs to analyze"


def test_aggregate_bonuses() -> None:
    assert aggregate_severity(_scores(40)).score == 40
    assert aggregate_severity(_scores(60, 60, 60)).score == 65
    assert aggregate_severity(_scores(60, 60, 60, 60, 60)).score == 70
    assert aggregate_severity(_scores(85, 90)).score == 100


def test_aggregate_reason_counts() -> None:
    reason = aggregate_severity(_scores(70, 90, 20)).reason

    assert "Aggregate of 3 logs" in reason
    assert "Max score: 90" in reason
    assert "High-severity count: 2" in reason
    assert "Critical count: 1" in reason
