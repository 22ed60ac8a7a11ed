"""Severity scoring for single log lines and incident aggregates."""

from __future__ import annotations

import math
import re
from collections.abc import Sequence

from .extraction import level_severity
from .models import PatternRule, SeverityLevel, SeverityResult

BASE_SCORES: dict[SeverityLevel, int] = {
    SeverityLevel.LOW: 15,
    SeverityLevel.MEDIUM: 40,
    SeverityLevel.HIGH: 70,
    SeverityLevel.CRITICAL: 90,
}

HIGH_THRESHOLD = 55
CRITICAL_THRESHOLD = 80
MAX_SCORE = 100

# checked in order, only the first hit counts
_CONTEXT_BOOSTS: tuple[re.Pattern[str], ...] = (
    re.compile(r"production|prod\b", re.IGNORECASE),
    re.compile(r"outage", re.IGNORECASE),
    re.compile(r"data\s*loss", re.IGNORECASE),
    re.compile(r"security\s+breach", re.IGNORECASE),
    re.compile(r"ransomware", re.IGNORECASE),
    re.compile(r"exploit", re.IGNORECASE),
)
_CONTEXT_BOOST = 10
_REPETITION_RE = re.compile(r"repeated|recurring|frequent|multiple|consecutive", re.IGNORECASE)
_REPETITION_BOOST = 5


def score_to_level(score: int) -> SeverityLevel:
    if score >= CRITICAL_THRESHOLD:
        return SeverityLevel.CRITICAL
    if score >= HIGH_THRESHOLD:
        return SeverityLevel.HIGH
    if score >= 30:
        return SeverityLevel.MEDIUM
    return SeverityLevel.LOW


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(score: int) -> int:
    return max(0, min(MAX_SCORE, score))


def calculate_severity(
    raw: str,
    rule: PatternRule | None,
    log_level: str | None = None,
) -> SeverityResult:
    """Score one log line.

    Without a rule the extracted log level decides (MEDIUM when absent). With a
    rule the steps run in a fixed order: base score, raising modifiers,
    log-level blend, then the flat context and repetition boosts.
    """
    level_sev = level_severity(log_level)

    if rule is None:
        level = level_sev or SeverityLevel.MEDIUM
        return SeverityResult(
            level=level,
            score=BASE_SCORES[level],
            reason=(
                "No known pattern matched. Severity derived from log level: "
                f"{log_level or 'unknown'}"
            ),
        )

    score = BASE_SCORES[rule.severity]
    reason = f"Base severity: {rule.severity.value} (pattern: {rule.id})"

    for modifier in rule.severity_modifiers:
        if not modifier.condition.search(raw):
            continue
        modifier_score = BASE_SCORES[modifier.severity]
        if modifier_score > score:
            score = modifier_score
            reason = modifier.reason

    if level_sev is not None:
        level_score = BASE_SCORES[level_sev]
        if level_score > score:
            score = _round_half_up((score + level_score) / 2)

    for pattern in _CONTEXT_BOOSTS:
        if pattern.search(raw):
            score = min(score + _CONTEXT_BOOST, MAX_SCORE)
            break

    if _REPETITION_RE.search(raw):
        score = min(score + _REPETITION_BOOST, MAX_SCORE)

    score = _clamp(score)
    return SeverityResult(level=score_to_level(score), score=score, reason=reason)


def aggregate_severity(results: Sequence[SeverityResult]) -> SeverityResult:
    """Combine per-log results into one incident-level severity."""
    if not results:
        return SeverityResult(level=SeverityLevel.LOW, score=0, reason="No logs to analyze")

    scores = [r.score for r in results]
    score = max(scores)
    high_count = sum(1 for s in scores if s >= HIGH_THRESHOLD)
    critical_count = sum(1 for s in scores if s >= CRITICAL_THRESHOLD)

    if high_count >= 3:
        score += 5
    if high_count >= 5:
        score += 5
    if critical_count >= 2:
        score += 10

    score = _clamp(score)
    return SeverityResult(
        level=score_to_level(score),
        score=score,
        reason=(
            f"Aggregate of {len(results)} logs. Max score: {max(scores)}. "
            f"High-severity count: {high_count}. Critical count: {critical_count}."
        ),
    )
