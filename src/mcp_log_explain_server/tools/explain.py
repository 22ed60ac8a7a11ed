"""MCP tool implementations.

This module contains the *implementation* behind the exposed MCP tools.
Keep this layer thin: validate inputs, translate them into core calls, and
return JSON-serializable data structures in the camelCase wire shape.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from mcp_log_explain_server.core.config import ExplainConfig, resolve_explain_config
from mcp_log_explain_server.core.files import resolve_log_path
from mcp_log_explain_server.core.knowledge import PatternRegistry
from mcp_log_explain_server.core.log_service import (
    explain_batch,
    explain_log,
    explain_log_file,
    knowledge_base_stats,
    summarize_incident,
)
from mcp_log_explain_server.core.models import LogCategory, PatternInfo, SeverityLevel

DEFAULT_FILE_LIMIT = 200
ALL_SEVERITIES = [s.value for s in SeverityLevel]
ALL_CATEGORIES = [c.value for c in LogCategory]


def _check_line(value: Any, *, name: str, max_length: int) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{name} must be a non-empty string")
    if len(value) > max_length:
        raise ValueError(f"{name} exceeds the maximum length of {max_length} characters")
    return value


def _check_lines(values: Any, *, limit: int, max_length: int) -> list[str]:
    if isinstance(values, str) or not isinstance(values, Sequence):
        raise ValueError("logs must be a list of strings")
    if not values:
        raise ValueError("logs must contain at least one entry")
    if len(values) > limit:
        raise ValueError(f"logs must contain at most {limit} entries (got {len(values)})")
    return [
        _check_line(v, name=f"logs[{i}]", max_length=max_length) for i, v in enumerate(values)
    ]


def _parse_severity(value: str | None) -> SeverityLevel | None:
    """Parse a user-supplied severity name (case-insensitive)."""
    if value is None or not value.strip():
        return None
    try:
        return SeverityLevel(value.strip().upper())
    except ValueError as e:
        valid = ", ".join(ALL_SEVERITIES)
        raise ValueError(f"Unknown severity '{value}'. Valid values: {valid}.") from e


def _parse_category(value: str | None) -> LogCategory | None:
    if value is None or not value.strip():
        return None
    try:
        return LogCategory(value.strip().lower())
    except ValueError as e:
        valid = ", ".join(ALL_CATEGORIES)
        raise ValueError(f"Unknown category '{value}'. Valid values: {valid}.") from e


def explain_log_impl(
    *,
    log: str,
    registry: PatternRegistry,
    source: str | None = None,
    cfg: ExplainConfig | None = None,
) -> dict[str, Any]:
    """Implementation for the `explain_log` MCP tool."""
    cfg = resolve_explain_config(cfg)
    line = _check_line(log, name="log", max_length=cfg.max_line_length)
    return explain_log(line, registry=registry, source=source).to_wire()


def explain_batch_impl(
    *,
    logs: Sequence[str],
    registry: PatternRegistry,
    source: str | None = None,
    cfg: ExplainConfig | None = None,
) -> dict[str, Any]:
    """Implementation for the `explain_batch` MCP tool."""
    cfg = resolve_explain_config(cfg)
    lines = _check_lines(logs, limit=cfg.batch_limit, max_length=cfg.max_line_length)
    explanations = explain_batch(lines, registry=registry, source=source)
    return {
        "count": len(explanations),
        "explanations": [e.to_wire() for e in explanations],
    }


def analyze_incident_impl(
    *,
    logs: Sequence[str],
    registry: PatternRegistry,
    incident_context: str | None = None,
    cfg: ExplainConfig | None = None,
) -> dict[str, Any]:
    """Implementation for the `analyze_incident` MCP tool."""
    cfg = resolve_explain_config(cfg)
    lines = _check_lines(logs, limit=cfg.incident_limit, max_length=cfg.max_line_length)
    summary = summarize_incident(lines, registry=registry, incident_context=incident_context)
    return summary.to_wire()


async def explain_log_file_impl(
    *,
    log_path: str,
    registry: PatternRegistry,
    limit: int | None = None,
    min_severity: str | None = None,
    cfg: ExplainConfig | None = None,
) -> dict[str, Any]:
    """Implementation for the `explain_log_file` MCP tool.

    Notes
    -----
    - log_path is resolved under LOG_EXPLAIN_BASE_DIR (.log/.txt, optionally .gz)
    - limit counts non-blank lines read; it defaults to 200 and is hard-capped
      at the configured file line limit
    - min_severity drops explanations below the given level
    """
    cfg = resolve_explain_config(cfg)
    if limit is None:
        limit = DEFAULT_FILE_LIMIT
    if limit <= 0:
        raise ValueError("limit must be > 0")
    if limit > cfg.file_line_limit:
        limit = cfg.file_line_limit

    minimum = _parse_severity(min_severity)
    path = resolve_log_path(log_path)

    results = await explain_log_file(path, registry=registry, limit=limit, min_severity=minimum)
    return {
        "count": len(results),
        "explanations": [{"lineNo": line_no, **e.to_wire()} for line_no, e in results],
    }


def knowledge_base_stats_impl(*, registry: PatternRegistry) -> dict[str, Any]:
    """Implementation for the `knowledge_base_stats` MCP tool."""
    return knowledge_base_stats(registry).to_wire()


def list_patterns_impl(
    *,
    registry: PatternRegistry,
    category: str | None = None,
) -> dict[str, Any]:
    """Implementation for the `list_patterns` MCP tool."""
    wanted = _parse_category(category)
    rules = [r for r in registry.patterns if wanted is None or r.category is wanted]
    return {
        "count": len(rules),
        "patterns": [PatternInfo.from_rule(r).to_wire() for r in rules],
    }
