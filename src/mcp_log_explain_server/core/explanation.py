"""Explanation synthesis: turn a matched rule (or no rule) into a LogExplanation."""

from __future__ import annotations

from .models import (
    UNKNOWN_PATTERN_ID,
    LogCategory,
    LogExplanation,
    ParsedMetadata,
    PatternRule,
    SeverityResult,
)

# wire key -> ParsedMetadata attribute, in output order
_METADATA_FIELDS: tuple[tuple[str, str], ...] = (
    ("logLevel", "log_level"),
    ("pid", "pid"),
    ("ipAddress", "ip_address"),
    ("port", "port"),
    ("errorCode", "error_code"),
    ("username", "username"),
    ("filePath", "file_path"),
    ("httpStatus", "http_status"),
    ("httpMethod", "http_method"),
    ("url", "url"),
)
_UNKNOWN_METADATA_FIELDS: tuple[tuple[str, str], ...] = (
    ("logLevel", "log_level"),
    ("errorCode", "error_code"),
    ("ipAddress", "ip_address"),
    ("httpStatus", "http_status"),
)

_ERROR_LEVELS = frozenset({"ERROR", "ERR", "FATAL", "CRIT", "CRITICAL", "EMERG", "EMERGENCY"})
_WARNING_LEVELS = frozenset({"WARN", "WARNING"})

UNKNOWN_SUMMARY = (
    "This log entry could not be matched to a known pattern in the knowledge base."
)
UNKNOWN_ROOT_CAUSE = (
    "Unable to determine root cause — this log does not match any known pattern."
)
UNKNOWN_POSSIBLE_CAUSES: tuple[str, ...] = (
    "New or uncommon error not yet in the knowledge base",
    "Custom application-specific log format",
    "Informational log with no actionable issue",
)
UNKNOWN_RECOMMENDED_FIXES: tuple[str, ...] = (
    "Review the log message manually for context",
    "Check application documentation for this specific message",
    "If this is a recurring issue, consider adding a custom pattern to the knowledge base",
)


def _metadata_map(
    metadata: ParsedMetadata,
    fields: tuple[tuple[str, str], ...],
) -> dict[str, str]:
    out: dict[str, str] = {}
    for key, attr in fields:
        value = getattr(metadata, attr)
        if value:
            out[key] = value
    return out


def _unknown_summary(log_level: str | None) -> str:
    if not log_level:
        return UNKNOWN_SUMMARY
    label = log_level.upper()
    if label in _ERROR_LEVELS:
        return (
            "An error-level log entry was detected but does not match any known pattern. "
            "Manual review is recommended."
        )
    if label in _WARNING_LEVELS:
        return (
            "A warning-level log entry was detected but does not match any known pattern. "
            "It may indicate a non-critical issue."
        )
    return (
        f'An informational log entry was detected with log level "{label}". '
        "No specific issue pattern was matched."
    )


def build_unknown_explanation(
    raw: str,
    metadata: ParsedMetadata,
    severity: SeverityResult,
) -> LogExplanation:
    """Fallback explanation for a line no rule matched."""
    return LogExplanation(
        raw_log=raw,
        pattern_id=UNKNOWN_PATTERN_ID,
        summary=_unknown_summary(metadata.log_level),
        category=LogCategory.UNKNOWN,
        severity=severity.level,
        severity_score=severity.score,
        root_cause=UNKNOWN_ROOT_CAUSE,
        possible_causes=list(UNKNOWN_POSSIBLE_CAUSES),
        recommended_fixes=list(UNKNOWN_RECOMMENDED_FIXES),
        metadata=_metadata_map(metadata, _UNKNOWN_METADATA_FIELDS),
        timestamp=metadata.timestamp,
        source=metadata.source,
        confidence=0.0,
    )


def build_explanation(
    raw: str,
    rule: PatternRule | None,
    metadata: ParsedMetadata,
    severity: SeverityResult,
    confidence: float,
) -> LogExplanation:
    """Build the explanation for one line.

    The rule's template is copied verbatim; only metadata fields that were
    actually extracted appear in the ``metadata`` map.
    """
    if rule is None:
        return build_unknown_explanation(raw, metadata, severity)

    template = rule.explanation
    return LogExplanation(
        raw_log=raw,
        pattern_id=rule.id,
        summary=template.summary,
        category=rule.category,
        severity=severity.level,
        severity_score=severity.score,
        root_cause=template.root_cause,
        possible_causes=list(template.possible_causes),
        recommended_fixes=list(template.recommended_fixes),
        metadata=_metadata_map(metadata, _METADATA_FIELDS),
        timestamp=metadata.timestamp,
        source=metadata.source,
        confidence=confidence,
    )
