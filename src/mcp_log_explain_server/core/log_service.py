"""Service facade: the single-line, batch, incident and file pipelines.

Every entry point takes the registry explicitly; nothing here holds state
between calls.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from dataclasses import replace
from pathlib import Path

import aiofiles
from aiofiles.threadpool import wrap

from .explanation import build_explanation
from .extraction import parse_log_line
from .files import is_compressed, open_log_text
from .incident import build_incident_summary
from .knowledge import PatternRegistry
from .models import (
    IncidentSummary,
    KnowledgeBaseStats,
    LogExplanation,
    SeverityLevel,
)
from .severity import calculate_severity

LOGGER = logging.getLogger(__name__)

_SEVERITY_ORDER: tuple[SeverityLevel, ...] = tuple(SeverityLevel)


def severity_at_least(level: SeverityLevel, minimum: SeverityLevel) -> bool:
    return _SEVERITY_ORDER.index(level) >= _SEVERITY_ORDER.index(minimum)


def explain_log(
    raw: str,
    *,
    registry: PatternRegistry,
    source: str | None = None,
) -> LogExplanation:
    """Explain one raw log line.

    A non-empty ``source`` replaces whatever source was extracted from the line.
    """
    started = time.perf_counter()

    metadata = parse_log_line(raw)
    if source:
        metadata = replace(metadata, source=source)

    matches = registry.find_matching_patterns(raw)
    top = matches[0] if matches else None
    rule = top.rule if top is not None else None

    severity = calculate_severity(raw, rule, metadata.log_level)
    explanation = build_explanation(
        raw,
        rule,
        metadata,
        severity,
        top.confidence if top is not None else 0.0,
    )

    LOGGER.debug(
        "Explained log in %.2fms | pattern=%s severity=%s confidence=%s",
        (time.perf_counter() - started) * 1000,
        explanation.pattern_id,
        explanation.severity.value,
        explanation.confidence,
    )
    return explanation


def explain_batch(
    lines: Sequence[str],
    *,
    registry: PatternRegistry,
    source: str | None = None,
) -> list[LogExplanation]:
    """Explain each line; output order matches input order."""
    return [explain_log(line, registry=registry, source=source) for line in lines]


def summarize_incident(
    lines: Sequence[str],
    *,
    registry: PatternRegistry,
    incident_context: str | None = None,
) -> IncidentSummary:
    """Explain every line, then correlate the results into one incident."""
    explanations = [explain_log(line, registry=registry) for line in lines]
    summary = build_incident_summary(explanations)

    if incident_context:
        summary = summary.model_copy(update={"title": f"{summary.title} — {incident_context}"})

    LOGGER.debug(
        "Incident summary: %d logs, severity=%s, score=%d",
        summary.total_logs_analyzed,
        summary.severity.value,
        summary.severity_score,
    )
    return summary


def knowledge_base_stats(registry: PatternRegistry) -> KnowledgeBaseStats:
    return KnowledgeBaseStats(
        total_patterns=len(registry),
        categories=[c.value for c in registry.categories()],
    )


@asynccontextmanager
async def _open_text(path: Path, *, encoding: str, decode_errors: str):
    """Open a log file for async text reading (plain or gzip)."""
    if is_compressed(path):
        af = wrap(open_log_text(path, encoding=encoding, decode_errors=decode_errors))
        try:
            yield af
        finally:
            await af.close()
    else:
        async with aiofiles.open(path, encoding=encoding, errors=decode_errors) as f:
            yield f


async def iter_log_file(
    log_path: str | Path,
    *,
    limit: int | None = None,
    encoding: str = "utf-8",
    decode_errors: str = "replace",
) -> AsyncIterator[tuple[int, str]]:
    """Yield ``(line_no, line)`` for non-blank lines, at most ``limit`` of them."""
    path = Path(log_path)
    if not path.is_file():
        raise FileNotFoundError(f"Log file not found: {path}")
    if limit is not None and limit < 1:
        raise ValueError("limit must be >= 1")

    yielded = 0
    async with _open_text(path, encoding=encoding, decode_errors=decode_errors) as f:
        line_no = 0
        async for line in f:
            line_no += 1
            line = line.rstrip("\r\n")
            if not line.strip():
                continue
            yield line_no, line
            yielded += 1
            if limit is not None and yielded >= limit:
                return


async def explain_log_file(
    log_path: str | Path,
    *,
    registry: PatternRegistry,
    limit: int | None = None,
    min_severity: SeverityLevel | None = None,
) -> list[tuple[int, LogExplanation]]:
    """Explain the first ``limit`` non-blank lines of a log file.

    ``limit`` bounds the lines read, not the results kept: with
    ``min_severity`` set, fewer explanations may come back.
    """
    out: list[tuple[int, LogExplanation]] = []
    async for line_no, line in iter_log_file(log_path, limit=limit):
        explanation = explain_log(line, registry=registry)
        if min_severity is not None and not severity_at_least(explanation.severity, min_severity):
            continue
        out.append((line_no, explanation))

    LOGGER.debug("Explained %d lines from %s", len(out), log_path)
    return out
