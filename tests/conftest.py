from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from mcp_log_explain_server.core.knowledge import PatternRegistry, default_registry

INCIDENT_LINES = [
    "2026-02-11T10:30:00Z ERROR Connection refused to database at 10.0.1.5:5432",
    "2026-02-11T10:30:02Z ERROR Request timeout on /api/v1/users after 30000ms",
    "2026-02-11T10:30:03Z CRITICAL 503 Service Unavailable - upstream server not responding",
]


@pytest.fixture(scope="session")
def registry() -> PatternRegistry:
    return default_registry()


@pytest.fixture
def incident_lines() -> list[str]:
    return list(INCIDENT_LINES)


@pytest.fixture
def write_incident_log() -> Callable[[Path], None]:
    def _write(path: Path) -> None:
        path.write_text(
            "\n".join(
                [
                    "2026-02-11T10:29:59Z INFO service started",
                    "",
                    *INCIDENT_LINES,
                ]
            )
            + "\n",
            encoding="utf-8",
        )

    return _write
