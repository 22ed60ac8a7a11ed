"""Request limits and their environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace

BATCH_LIMIT_ENV = "LOG_EXPLAIN_BATCH_LIMIT"
INCIDENT_LIMIT_ENV = "LOG_EXPLAIN_INCIDENT_LIMIT"
FILE_LINE_LIMIT_ENV = "LOG_EXPLAIN_FILE_LINE_LIMIT"
MAX_LINE_LENGTH_ENV = "LOG_EXPLAIN_MAX_LINE_LENGTH"
LOG_LEVEL_ENV = "LOG_EXPLAIN_LOG_LEVEL"
BASE_DIR_ENV = "LOG_EXPLAIN_BASE_DIR"


@dataclass(frozen=True, slots=True)
class ExplainConfig:
    batch_limit: int = 50
    incident_limit: int = 100

    # Lines read from a single file per request.
    file_line_limit: int = 5000

    max_line_length: int = 10_000


def _env_int(name: str) -> int | None:
    env = os.getenv(name)
    if env is None or env == "":
        return None
    try:
        value = int(env)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if value < 1:
        raise ValueError(f"{name} must be >= 1")
    return value


def resolve_explain_config(cfg: ExplainConfig | None = None) -> ExplainConfig:
    """Return config with optional env overrides applied."""
    if cfg is None:
        cfg = ExplainConfig()

    overrides: dict[str, int] = {}
    for field_name, env_name in (
        ("batch_limit", BATCH_LIMIT_ENV),
        ("incident_limit", INCIDENT_LIMIT_ENV),
        ("file_line_limit", FILE_LINE_LIMIT_ENV),
        ("max_line_length", MAX_LINE_LENGTH_ENV),
    ):
        value = _env_int(env_name)
        if value is not None:
            overrides[field_name] = value

    if not overrides:
        return cfg
    return replace(cfg, **overrides)
