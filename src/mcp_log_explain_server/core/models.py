"""Core data models for log explanation.

Engine records are frozen dataclasses; records that cross the wire are pydantic
models whose aliases are the camelCase field names consumers expect.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SeverityLevel(str, Enum):
    """Four-level ordinal severity."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class LogCategory(str, Enum):
    """Closed set of categories attached to rules and explanations."""

    DATABASE = "database"
    NETWORK = "network"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    MEMORY = "memory"
    DISK = "disk"
    CPU = "cpu"
    API = "api"
    TIMEOUT = "timeout"
    CONFIGURATION = "configuration"
    SECURITY = "security"
    APPLICATION = "application"
    FILESYSTEM = "filesystem"
    DNS = "dns"
    SSL_TLS = "ssl_tls"
    PROCESS = "process"
    KERNEL = "kernel"
    KUBERNETES = "kubernetes"
    DOCKER = "docker"
    MESSAGING = "messaging"
    CLOUD = "cloud"
    CACHING = "caching"
    EMAIL = "email"
    LOGGING = "logging"
    UNKNOWN = "unknown"


UNKNOWN_PATTERN_ID = "unknown"
ENGINE_TAG = "rule-based"


@dataclass(frozen=True, slots=True)
class SeverityModifier:
    """Raises a rule's severity when ``condition`` matches the raw line."""

    condition: re.Pattern[str]
    severity: SeverityLevel
    reason: str


@dataclass(frozen=True, slots=True)
class ExplanationTemplate:
    summary: str
    root_cause: str
    possible_causes: tuple[str, ...]
    recommended_fixes: tuple[str, ...]
    additional_context: str | None = None


@dataclass(frozen=True, slots=True)
class PatternRule:
    """One recognizable log category: matchers, keywords, severity and template."""

    id: str
    name: str
    category: LogCategory
    matchers: tuple[re.Pattern[str], ...]
    keywords: tuple[str, ...]
    severity: SeverityLevel
    explanation: ExplanationTemplate
    error_codes: tuple[str, ...] = ()
    severity_modifiers: tuple[SeverityModifier, ...] = ()


@dataclass(frozen=True, slots=True)
class ParsedMetadata:
    """Structured fields pulled out of one raw log line."""

    message_body: str
    timestamp: str | None = None  # raw substring, never reformatted
    log_level: str | None = None
    source: str | None = None
    pid: str | None = None
    error_code: str | None = None
    ip_address: str | None = None
    port: str | None = None
    username: str | None = None
    file_path: str | None = None
    http_status: str | None = None
    http_method: str | None = None
    url: str | None = None


@dataclass(frozen=True, slots=True)
class MatchCandidate:
    rule: PatternRule
    confidence: float

    @property
    def rule_id(self) -> str:
        return self.rule.id


@dataclass(frozen=True, slots=True)
class SeverityResult:
    level: SeverityLevel
    score: int
    reason: str


class WireModel(BaseModel):
    """Base for records serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-ready dict using wire field names."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class LogExplanation(WireModel):
    raw_log: str = Field(description="The log line exactly as received.")
    pattern_id: str = Field(description="Matched rule id, or 'unknown'.")
    summary: str
    category: LogCategory
    severity: SeverityLevel
    severity_score: int = Field(ge=0, le=100)
    root_cause: str
    possible_causes: list[str] = Field(default_factory=list)
    recommended_fixes: list[str] = Field(default_factory=list)
    metadata: dict[str, str] = Field(default_factory=dict)
    timestamp: str | None = None
    source: str | None = None
    confidence: float = Field(ge=0.0, le=1.0, description="0 when no rule matched.")
    engine: str = ENGINE_TAG


class TimelineEvent(WireModel):
    timestamp: str | None = None
    summary: str = Field(max_length=150)
    severity: SeverityLevel
    category: LogCategory


class IncidentSummary(WireModel):
    title: str
    summary: str
    severity: SeverityLevel
    severity_score: int = Field(ge=0, le=100)
    root_cause_chain: list[str] = Field(default_factory=list)
    affected_systems: list[str] = Field(default_factory=list)
    timeline: list[TimelineEvent] = Field(default_factory=list)
    recommended_actions: list[str] = Field(default_factory=list, max_length=10)
    total_logs_analyzed: int = 0
    category_breakdown: dict[str, int] = Field(default_factory=dict)
    correlations: list[str] = Field(default_factory=list)


class KnowledgeBaseStats(WireModel):
    total_patterns: int
    categories: list[str]


class PatternInfo(WireModel):
    """Public, regex-free view of a rule."""

    id: str
    name: str
    category: LogCategory
    severity: SeverityLevel
    keywords: list[str]
    error_codes: list[str] = Field(default_factory=list)
    summary: str

    @classmethod
    def from_rule(cls, rule: PatternRule) -> PatternInfo:
        return cls(
            id=rule.id,
            name=rule.name,
            category=rule.category,
            severity=rule.severity,
            keywords=list(rule.keywords),
            error_codes=list(rule.error_codes),
            summary=rule.explanation.summary,
        )
