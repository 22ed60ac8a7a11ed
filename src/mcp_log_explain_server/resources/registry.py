"""MCP resource registry.

Resources are addressable by URI and can be fetched by the MCP client on demand.
"""

from __future__ import annotations

import asyncio
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_log_explain_server.core.config import BASE_DIR_ENV
from mcp_log_explain_server.core.files import (
    ALLOWED_FILE_SUFFIXES,
    base_dir,
    read_text,
    resolve_log_path,
)
from mcp_log_explain_server.core.knowledge import PatternRegistry
from mcp_log_explain_server.core.models import IncidentSummary, LogExplanation, PatternInfo

SAMPLE_INCIDENT = (
    "2026-02-11T10:30:00Z ERROR Connection refused to database at 10.0.1.5:5432\n"
    "2026-02-11T10:30:02Z ERROR Request timeout on /api/v1/users after 30000ms\n"
    "2026-02-11T10:30:03Z CRITICAL 503 Service Unavailable - upstream server not responding\n"
)


def pattern_detail(registry: PatternRegistry, pattern_id: str) -> dict[str, Any]:
    """Return the public view of one rule, including its explanation template."""
    rule = registry.get_pattern_by_id(pattern_id)
    if rule is None:
        raise ValueError(f"Unknown pattern id: {pattern_id}")
    out = PatternInfo.from_rule(rule).to_wire()
    out["rootCause"] = rule.explanation.root_cause
    out["possibleCauses"] = list(rule.explanation.possible_causes)
    out["recommendedFixes"] = list(rule.explanation.recommended_fixes)
    return out


def register_resources(mcp: FastMCP, registry: PatternRegistry) -> None:
    """Register resource handlers on the MCP server."""

    @mcp.resource("app://log-explain/help")
    def help_resource() -> str:
        """Return a short list of available resource URIs."""
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        return (
            "Resources:\n"
            "- app://log-explain/help\n"
            "- app://log-explain/categories\n"
            "- app://log-explain/patterns/{pattern_id}\n"
            "- app://log-explain/schemas/log-explanation\n"
            "- app://log-explain/schemas/incident-summary\n"
            "- app://log-explain/examples/sample-incident\n"
            f"- log://{{path}} (restricted to {BASE_DIR_ENV}; allowed: {allowed}, .gz)\n"
            f"\nBase directory: {base_dir()}\n"
            f"Known patterns: {len(registry)}\n"
        )

    @mcp.resource("app://log-explain/categories")
    def categories() -> dict[str, list[str]]:
        """Return pattern ids grouped by category."""
        out: dict[str, list[str]] = {}
        for rule in registry.patterns:
            out.setdefault(rule.category.value, []).append(rule.id)
        return out

    @mcp.resource("app://log-explain/patterns/{pattern_id}")
    def pattern(pattern_id: str) -> dict[str, Any]:
        """Return one rule by id."""
        return pattern_detail(registry, pattern_id)

    @mcp.resource("app://log-explain/schemas/log-explanation")
    def log_explanation_schema() -> dict[str, Any]:
        """Return the JSON schema for a single log explanation."""
        return LogExplanation.model_json_schema(by_alias=True)

    @mcp.resource("app://log-explain/schemas/incident-summary")
    def incident_summary_schema() -> dict[str, Any]:
        """Return the JSON schema for an incident summary."""
        return IncidentSummary.model_json_schema(by_alias=True)

    @mcp.resource("app://log-explain/examples/sample-incident")
    def sample_incident() -> str:
        """Return a small incident log for demos and tests."""
        return SAMPLE_INCIDENT

    @mcp.resource("log://{path}")
    async def read_log(path: str) -> str:
        """Return the full log contents."""
        p = resolve_log_path(path)
        return await asyncio.to_thread(read_text, p)
