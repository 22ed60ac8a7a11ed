from __future__ import annotations

import re

import pytest

from mcp_log_explain_server.core.knowledge import ALL_PATTERNS, PatternRegistry
from mcp_log_explain_server.core.models import (
    ExplanationTemplate,
    LogCategory,
    PatternRule,
    SeverityLevel,
)


def _rule(
    rule_id: str,
    *,
    matchers: tuple[re.Pattern[str], ...] = (re.compile(r"disk full", re.IGNORECASE),),
    keywords: tuple[str, ...] = ("disk",),
    error_codes: tuple[str, ...] = (),
) -> PatternRule:
    return PatternRule(
        id=rule_id,
        name="Disk Full",
        category=LogCategory.DISK,
        matchers=matchers,
        keywords=keywords,
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary="The disk is full.",
            root_cause="No space left.",
            possible_causes=("Large files",),
            recommended_fixes=("Free space",),
        ),
        error_codes=error_codes,
    )


def test_default_registry_loads_every_rule(registry: PatternRegistry) -> None:
    assert len(registry) == len(ALL_PATTERNS) == 61
    ids = [r.id for r in registry.patterns]
    assert len(ids) == len(set(ids))
    assert registry.get_pattern_by_id("DB_CONN_REFUSED") is not None
    assert registry.get_pattern_by_id("NOPE") is None


def test_categories_are_distinct_and_in_registry_order(registry: PatternRegistry) -> None:
    cats = registry.categories()
    assert len(cats) == len(set(cats))
    assert cats[0] is LogCategory.DATABASE
    assert LogCategory.UNKNOWN not in cats


def test_duplicate_ids_rejected() -> None:
    with pytest.raises(ValueError, match="Duplicate pattern id: DISK"):
        PatternRegistry([_rule("DISK"), _rule("DISK")])


def test_rule_without_matchers_rejected() -> None:
    with pytest.raises(ValueError, match="at least one matcher"):
        PatternRegistry([_rule("DISK", matchers=())])


def test_rule_without_keywords_rejected() -> None:
    with pytest.raises(ValueError, match="at least one keyword"):
        PatternRegistry([_rule("DISK", keywords=())])


def test_score_full_line_match_plus_keyword() -> None:
    reg = PatternRegistry([_rule("DISK")])
    rule = reg.patterns[0]

    assert reg.score(rule, "disk full") == 0.95
    assert reg.score(rule, "all good") == 0.0
    assert reg.score(rule, "") == 0.0


def test_score_error_code_bonus() -> None:
    reg = PatternRegistry([_rule("DISK", error_codes=("E42",))])

    assert reg.score(reg.patterns[0], "disk full E42") == 0.96


def test_find_matching_patterns_best_first(registry: PatternRegistry) -> None:
    matches = registry.find_matching_patterns("ERROR: ECONNREFUSED 127.0.0.1:5432")

    assert matches[0].rule_id == "DB_CONN_REFUSED"
    assert matches[0].confidence == 0.99
    scores = [m.confidence for m in matches]
    assert scores == sorted(scores, reverse=True)


def test_no_match_returns_empty(registry: PatternRegistry) -> None:
    assert registry.find_matching_patterns("") == []
    assert registry.find_matching_patterns("Something completely random and unknown happened") == []


def test_ties_keep_registry_order() -> None:
    reg = PatternRegistry([_rule("FIRST"), _rule("SECOND")])

    matches = reg.find_matching_patterns("disk full")

    assert [m.rule_id for m in matches] == ["FIRST", "SECOND"]


def test_keyword_candidates(registry: PatternRegistry) -> None:
    ids = [r.id for r in registry.find_candidates_by_keyword("redis timeout on cache node")]

    assert "CACHE_REDIS_ERROR" in ids
    assert registry.find_candidates_by_keyword("zzz") == []


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        (
            "Cannot connect to the Docker daemon at unix:///var/run/docker.sock. "
            "Is the docker daemon running?",
            "DOCKER_DAEMON_ERROR",
        ),
        ("Message moved to dead-letter queue after max retries exceeded", "MQ_DEAD_LETTER"),
        ("Task timed out after 3.00 seconds", "CLOUD_LAMBDA_TIMEOUT"),
        ("ERROR: deadlock detected", "DB_DEADLOCK"),
        (
            "upstream prematurely closed connection while reading response header from upstream",
            "NGINX_BAD_GATEWAY",
        ),
        ("FATAL: out of memory, JavaScript heap out of memory", "SYS_OOM"),
    ],
)
def test_representative_lines(registry: PatternRegistry, line: str, expected: str) -> None:
    assert registry.find_matching_patterns(line)[0].rule_id == expected


def test_keyword_bonus_is_capped() -> None:
    reg = PatternRegistry(
        [_rule("DISK", keywords=("disk", "full", "space", "volume"))]
    )

    # 0.6 + 0.3 * 9/29, plus 0.15 rather than 4 * 0.05
    assert reg.score(reg.patterns[0], "disk full: no space on volume") == 0.84


def test_error_code_bonus_respects_confidence_cap() -> None:
    reg = PatternRegistry(
        [
            _rule(
                "DISK",
                matchers=(re.compile(r"disk full E42"),),
                keywords=("disk", "full"),
                error_codes=("E42",),
            )
        ]
    )

    assert reg.score(reg.patterns[0], "disk full E42") == 0.99
