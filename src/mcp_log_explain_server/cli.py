from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from mcp_log_explain_server.core.config import LOG_LEVEL_ENV, resolve_explain_config
from mcp_log_explain_server.core.knowledge import PatternRegistry, default_registry
from mcp_log_explain_server.tools.explain import (
    ALL_SEVERITIES,
    analyze_incident_impl,
    explain_batch_impl,
    explain_log_file_impl,
    explain_log_impl,
    knowledge_base_stats_impl,
)


def _read_lines(path: str) -> list[str]:
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"File not found: {p}")
    text = p.read_text(encoding="utf-8", errors="replace")
    return [line for line in text.splitlines() if line.strip()]


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _print_explanation(e: dict[str, Any]) -> None:
    print(f"[{e['severity']} {e['severityScore']}] {e['patternId']} ({e['category']})")
    print(f"confidence: {e['confidence']}")
    print(f"summary:    {e['summary']}")
    print(f"root cause: {e['rootCause']}")
    print("fixes:")
    for fix in e["recommendedFixes"]:
        print(f"  - {fix}")
    for key, value in e.get("metadata", {}).items():
        print(f"  {key}={value}")


def _cmd_explain(args: argparse.Namespace, registry: PatternRegistry) -> None:
    out = explain_log_impl(log=args.line, registry=registry, source=args.source)
    if args.json:
        _print_json(out)
    else:
        _print_explanation(out)


def _cmd_batch(args: argparse.Namespace, registry: PatternRegistry) -> None:
    limit = resolve_explain_config().batch_limit
    lines = _read_lines(args.file)[:limit]
    _print_json(explain_batch_impl(logs=lines, registry=registry, source=args.source))


def _cmd_incident(args: argparse.Namespace, registry: PatternRegistry) -> None:
    limit = resolve_explain_config().incident_limit
    lines = _read_lines(args.file)[:limit]
    _print_json(
        analyze_incident_impl(logs=lines, registry=registry, incident_context=args.context)
    )


def _cmd_file(args: argparse.Namespace, registry: PatternRegistry) -> None:
    out = asyncio.run(
        explain_log_file_impl(
            log_path=args.path,
            registry=registry,
            limit=args.limit,
            min_severity=args.min_severity,
        )
    )
    _print_json(out)


def _cmd_stats(args: argparse.Namespace, registry: PatternRegistry) -> None:
    _print_json(knowledge_base_stats_impl(registry=registry))


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="log-explain",
        description="Rule-based log explanation (no ML inference).",
    )
    sub = p.add_subparsers(dest="command", required=True)

    explain = sub.add_parser("explain", help="Explain a single log line")
    explain.add_argument("line")
    explain.add_argument("--source", default=None, help="Override the extracted source")
    explain.add_argument("--json", action="store_true", help="Print the raw JSON explanation")
    explain.set_defaults(func=_cmd_explain)

    batch = sub.add_parser("batch", help="Explain each line of a file (capped at the batch limit)")
    batch.add_argument("file")
    batch.add_argument("--source", default=None)
    batch.set_defaults(func=_cmd_batch)

    incident = sub.add_parser(
        "incident", help="Summarize the lines of a file as one incident (capped at the incident limit)"
    )
    incident.add_argument("file")
    incident.add_argument("--context", default=None, help="Appended to the incident title")
    incident.set_defaults(func=_cmd_incident)

    file_ = sub.add_parser("file", help="Explain a log file under LOG_EXPLAIN_BASE_DIR")
    file_.add_argument("path")
    file_.add_argument("--limit", type=int, default=None, help="Max lines read (default: 200)")
    file_.add_argument(
        "--min-severity",
        default=None,
        help=f"Drop results below this level ({', '.join(ALL_SEVERITIES)})",
    )
    file_.set_defaults(func=_cmd_file)

    stats = sub.add_parser("stats", help="Show knowledge base statistics")
    stats.set_defaults(func=_cmd_stats)
    return p


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    level_name = os.getenv(LOG_LEVEL_ENV, "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        args.func(args, default_registry())
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)


if __name__ == "__main__":
    main()
