"""MCP prompt registry.

Prompts are predefined conversation/workflow templates that the client can invoke explicitly.
"""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP

_SYSTEM_PROMPT = (
    "You are a senior incident triage assistant for backend services. "
    "Base every statement on tool output. The explanations come from a fixed, "
    "rule-based knowledge base: quote pattern ids and confidence values as given "
    "and do not invent root causes for lines marked 'unknown'."
)


def register_prompts(mcp: FastMCP) -> None:
    """Register prompt templates on the MCP server."""

    @mcp.prompt()
    def explain_incident(log_path: str, context: str = "") -> list[dict[str, Any]]:
        """Build a prompt that turns a log file into an incident write-up."""
        context_line = f"- incident_context: {context}\n" if context else ""
        return [
            {"role": "system", "content": _SYSTEM_PROMPT},
            {
                "role": "user",
                "content": (
                    "Analyze the incident captured in this log file. Follow this workflow:\n"
                    "- Read the lines via the log resource below.\n"
                    "- Call analyze_incident with the non-blank lines as logs "
                    "(at most the incident limit; keep the most recent lines if longer).\n"
                    f"{context_line}"
                    "- For any line you want to discuss in depth, call explain_log.\n\n"
                    "Return this structure:\n"
                    "1) Title and overall severity (from the tool output)\n"
                    "2) Timeline (timestamp, severity, one-line summary)\n"
                    "3) Root-cause chain and correlations\n"
                    "4) Recommended actions (top 3-5)\n"
                ),
            },
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "Log contents:"},
                    {"type": "resource", "uri": f"log://{log_path}"},
                ],
            },
        ]

    @mcp.prompt()
    def triage_log_file(log_path: str, limit: int = 200) -> list[dict[str, Any]]:
        """Build a prompt for structured, per-line triage of a log file."""
        return [
            {"role": "system", "content": _SYSTEM_PROMPT},
            {
                "role": "user",
                "content": (
                    "Triage the log file using explain_log_file. Follow this workflow:\n"
                    "- Call explain_log_file with the parameters below.\n"
                    "- If nothing is returned, say so and suggest lowering min_severity.\n"
                    "- Group the results by patternId; mention lineNo for evidence.\n\n"
                    "Call explain_log_file with:\n"
                    f"- log_path: {log_path}\n"
                    f"- limit: {limit}\n"
                    "- min_severity: HIGH\n\n"
                    "Return this structure:\n"
                    "1) What happened (1-3 bullets)\n"
                    "2) Evidence (2-5 lines as [#lineNo] patternId severity)\n"
                    "3) Suspected root cause (say 'Unknown' if only unmatched lines remain)\n"
                    "4) Next actions (2-4 bullets, taken from recommendedFixes)\n"
                ),
            },
        ]
