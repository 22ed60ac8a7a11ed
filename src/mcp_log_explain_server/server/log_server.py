"""MCP server entrypoint (stdio transport).

This module wires together:
- Tools: callable actions (e.g., explain a log line, analyze an incident)
- Resources: addressable data blobs (e.g., rule details, log contents via URI)
- Prompts: reusable conversation templates that clients can invoke

Run locally (stdio):
    python -m mcp_log_explain_server.server.log_server
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_log_explain_server.core.config import LOG_LEVEL_ENV
from mcp_log_explain_server.core.knowledge import default_registry
from mcp_log_explain_server.prompts.registry import register_prompts
from mcp_log_explain_server.resources.registry import register_resources
from mcp_log_explain_server.tools.explain import (
    analyze_incident_impl,
    explain_batch_impl,
    explain_log_file_impl,
    explain_log_impl,
    knowledge_base_stats_impl,
    list_patterns_impl,
)

LOGGER = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Configure a reasonable default logging setup.

    The MCP client typically captures stderr; keeping logs concise makes them easier to consume.
    """
    level_name = os.getenv(LOG_LEVEL_ENV, "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


REGISTRY = default_registry()

mcp = FastMCP("log-explain", json_response=True)

register_resources(mcp, REGISTRY)
register_prompts(mcp)


@mcp.tool()
def explain_log(log: str, source: str | None = None) -> dict[str, Any]:
    """Explain a single raw log line.

    Parameters
    ----------
    log:
        The raw log line, exactly as it appeared in the log.
    source:
        Optional origin label (service, host). Overrides any source found in the line.

    Returns
    -------
    dict:
        A LogExplanation: patternId, summary, category, severity, severityScore,
        rootCause, possibleCauses, recommendedFixes, metadata, confidence, ...
    """
    return explain_log_impl(log=log, registry=REGISTRY, source=source)


@mcp.tool()
def explain_batch(logs: list[str], source: str | None = None) -> dict[str, Any]:
    """Explain several independent log lines (at most 50 by default).

    Returns
    -------
    dict:
        {"count": int, "explanations": list[dict]} in input order.
    """
    return explain_batch_impl(logs=logs, registry=REGISTRY, source=source)


@mcp.tool()
def analyze_incident(logs: list[str], incident_context: str | None = None) -> dict[str, Any]:
    """Correlate related log lines into one incident summary.

    Parameters
    ----------
    logs:
        Lines belonging to the same incident (at most 100 by default).
    incident_context:
        Optional free text appended to the incident title.

    Returns
    -------
    dict:
        An IncidentSummary: title, summary, severity, severityScore, rootCauseChain,
        affectedSystems, timeline, recommendedActions, categoryBreakdown, correlations.
    """
    return analyze_incident_impl(
        logs=logs, registry=REGISTRY, incident_context=incident_context
    )


@mcp.tool()
async def explain_log_file(
    log_path: str,
    limit: int | None = None,
    min_severity: str | None = None,
) -> dict[str, Any]:
    """Explain the non-blank lines of a local log file.

    Parameters
    ----------
    log_path:
        Path to a .log or .txt file (optionally .gz), relative to LOG_EXPLAIN_BASE_DIR.
    limit:
        Maximum number of lines to read (default 200, hard-capped in the implementation).
    min_severity:
        Drop explanations below this level (LOW, MEDIUM, HIGH, CRITICAL).

    Returns
    -------
    dict:
        {"count": int, "explanations": list[dict]}; each explanation carries lineNo.
    """
    return await explain_log_file_impl(
        log_path=log_path,
        registry=REGISTRY,
        limit=limit,
        min_severity=min_severity,
    )


@mcp.tool()
def knowledge_base_stats() -> dict[str, Any]:
    """Return the number of known patterns and the categories they cover."""
    return knowledge_base_stats_impl(registry=REGISTRY)


@mcp.tool()
def list_patterns(category: str | None = None) -> dict[str, Any]:
    """List known patterns, optionally restricted to one category."""
    return list_patterns_impl(registry=REGISTRY, category=category)


def main(argv: Sequence[str] | None = None) -> None:
    """Start the MCP server over stdio."""
    _configure_logging()
    LOGGER.debug("Starting MCP server (transport=stdio, patterns=%d)", len(REGISTRY))
    _ = argv or sys.argv[1:]
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
