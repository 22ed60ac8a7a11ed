"""Incident correlation over a set of per-line explanations."""

from __future__ import annotations

import re
from collections.abc import Collection, Iterable, Sequence

from .models import (
    UNKNOWN_PATTERN_ID,
    IncidentSummary,
    LogCategory,
    LogExplanation,
    SeverityLevel,
    SeverityResult,
    TimelineEvent,
)
from .severity import aggregate_severity

MAX_RECOMMENDED_ACTIONS = 10
TIMELINE_SUMMARY_LENGTH = 150
_TITLE_SUMMARY_LENGTH = 80
_WORD_START_RE = re.compile(r"\b\w")

# (first category, second categories, extra pattern ids, finding); evaluated in order
_CORRELATION_RULES: tuple[
    tuple[LogCategory, frozenset[LogCategory], frozenset[str], str], ...
] = (
    (
        LogCategory.DATABASE,
        frozenset({LogCategory.TIMEOUT}),
        frozenset({"API_TIMEOUT"}),
        "Database issues detected alongside API timeouts — the database may be the root "
        "cause of slow API responses",
    ),
    (
        LogCategory.MEMORY,
        frozenset({LogCategory.PROCESS}),
        frozenset(),
        "Memory issues detected alongside process crashes — out-of-memory condition likely "
        "caused the crash",
    ),
    (
        LogCategory.AUTHENTICATION,
        frozenset({LogCategory.SECURITY}),
        frozenset(),
        "Authentication failures alongside security alerts — potential coordinated attack",
    ),
    (
        LogCategory.DNS,
        frozenset({LogCategory.NETWORK}),
        frozenset(),
        "DNS resolution failures detected alongside network errors — DNS may be the initial "
        "failure point",
    ),
    (
        LogCategory.DISK,
        frozenset({LogCategory.DATABASE}),
        frozenset(),
        "Disk space issues alongside database errors — disk full condition may have caused "
        "database failure",
    ),
    (
        LogCategory.CONFIGURATION,
        frozenset({LogCategory.APPLICATION}),
        frozenset(),
        "Configuration errors alongside application failures — misconfiguration is a likely "
        "root cause",
    ),
)


def _dedupe(items: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(items))


def _label(category: str) -> str:
    return _WORD_START_RE.sub(lambda m: m.group(0).upper(), category.replace("_", " "))


def detect_correlations(
    categories: Collection[LogCategory],
    pattern_ids: Collection[str],
) -> list[str]:
    """Return fixed findings for co-occurring category pairs."""
    present = set(categories)
    ids = set(pattern_ids)
    findings: list[str] = []
    for first, seconds, extra_ids, finding in _CORRELATION_RULES:
        if first not in present:
            continue
        if present & seconds or ids & extra_ids:
            findings.append(finding)
    return findings


def build_timeline(explanations: Sequence[LogExplanation]) -> list[TimelineEvent]:
    """One event per explanation; timestamped first (ascending), then the rest in input order."""
    events = [
        TimelineEvent(
            timestamp=e.timestamp,
            summary=e.summary[:TIMELINE_SUMMARY_LENGTH],
            severity=e.severity,
            category=e.category,
        )
        for e in explanations
    ]
    events.sort(key=lambda ev: (ev.timestamp is None, ev.timestamp or ""))
    return events


def _incident_title(
    explanations: Sequence[LogExplanation],
    top_category: str,
    severity: SeverityLevel,
) -> str:
    known = [e for e in explanations if e.pattern_id != UNKNOWN_PATTERN_ID]
    if not known:
        return f"{severity.value} Incident — Unrecognized Errors Detected"

    pattern_count = len({e.pattern_id for e in known})
    if pattern_count == 1:
        return f"{severity.value} Incident — {known[0].summary[:_TITLE_SUMMARY_LENGTH]}"

    return (
        f"{severity.value} Incident — {pattern_count} issue types detected across "
        f"{_label(top_category)}"
    )


def _incident_text(
    explanations: Sequence[LogExplanation],
    severity: SeverityResult,
    affected: Sequence[str],
    correlations: Sequence[str],
) -> str:
    parts = [
        f"Analyzed {len(explanations)} log entries. "
        f"Overall severity: {severity.level.value} (score: {severity.score}/100)."
    ]
    if affected:
        systems = ", ".join(s.replace("_", " ") for s in affected)
        parts.append(f"Affected systems: {systems}.")

    critical = sum(1 for e in explanations if e.severity is SeverityLevel.CRITICAL)
    high = sum(1 for e in explanations if e.severity is SeverityLevel.HIGH)
    if critical:
        parts.append(f"{critical} critical-severity log(s) require immediate attention.")
    if high:
        parts.append(f"{high} high-severity log(s) detected.")

    if correlations:
        parts.append(f"Correlations found: {'; '.join(correlations)}.")
    return " ".join(parts)


def empty_incident_summary() -> IncidentSummary:
    return IncidentSummary(
        title="No Logs Provided",
        summary="No log entries were provided for incident analysis.",
        severity=SeverityLevel.LOW,
        severity_score=0,
    )


def build_incident_summary(explanations: Sequence[LogExplanation]) -> IncidentSummary:
    """Correlate explanations (in input order) into one incident summary."""
    if not explanations:
        return empty_incident_summary()

    aggregate = aggregate_severity(
        [SeverityResult(level=e.severity, score=e.severity_score, reason="") for e in explanations]
    )

    breakdown: dict[str, int] = {}
    for e in explanations:
        breakdown[e.category.value] = breakdown.get(e.category.value, 0) + 1
    affected = [c for c in breakdown if c != LogCategory.UNKNOWN.value]

    # max() keeps the first-seen category on ties
    top_category = max(breakdown.items(), key=lambda kv: kv[1])[0]

    correlations = detect_correlations(
        [e.category for e in explanations],
        [e.pattern_id for e in explanations],
    )

    return IncidentSummary(
        title=_incident_title(explanations, top_category, aggregate.level),
        summary=_incident_text(explanations, aggregate, affected, correlations),
        severity=aggregate.level,
        severity_score=aggregate.score,
        root_cause_chain=_dedupe(
            e.root_cause for e in explanations if e.pattern_id != UNKNOWN_PATTERN_ID
        ),
        affected_systems=affected,
        timeline=build_timeline(explanations),
        recommended_actions=_dedupe(
            fix for e in explanations for fix in e.recommended_fixes
        )[:MAX_RECOMMENDED_ACTIONS],
        total_logs_analyzed=len(explanations),
        category_breakdown=breakdown,
        correlations=correlations,
    )
