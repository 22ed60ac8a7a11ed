"""Pattern registry: the immutable rule base plus its keyword index."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable

from ..models import LogCategory, MatchCandidate, PatternRule

LOGGER = logging.getLogger(__name__)

BASE_CONFIDENCE = 0.6
RATIO_WEIGHT = 0.3
MATCH_CAP = 0.95
KEYWORD_BONUS = 0.05
KEYWORD_BONUS_CAP = 0.15
ERROR_CODE_BONUS = 0.1
CONFIDENCE_CAP = 0.99


def _round2(value: float) -> float:
    """Round half-up to two decimals."""
    return math.floor(value * 100 + 0.5) / 100


def _validate(rules: Iterable[PatternRule]) -> tuple[PatternRule, ...]:
    seen: set[str] = set()
    out: list[PatternRule] = []
    for rule in rules:
        if rule.id in seen:
            raise ValueError(f"Duplicate pattern id: {rule.id}")
        if not rule.matchers:
            raise ValueError(f"Pattern {rule.id} must declare at least one matcher")
        if not rule.keywords:
            raise ValueError(f"Pattern {rule.id} must declare at least one keyword")
        seen.add(rule.id)
        out.append(rule)
    return tuple(out)


class PatternRegistry:
    """Read-only collection of pattern rules.

    Build it once at startup and share the instance; nothing mutates it after
    construction, so concurrent lookups need no locking.
    """

    __slots__ = ("_rules", "_by_id", "_keyword_index")

    def __init__(self, rules: Iterable[PatternRule]) -> None:
        self._rules = _validate(rules)
        self._by_id = {rule.id: rule for rule in self._rules}

        index: dict[str, list[PatternRule]] = {}
        for rule in self._rules:
            for keyword in rule.keywords:
                bucket = index.setdefault(keyword.lower(), [])
                if rule not in bucket:
                    bucket.append(rule)
        self._keyword_index = {k: tuple(v) for k, v in index.items()}

        LOGGER.debug(
            "Pattern registry built: %d rules, %d keywords",
            len(self._rules),
            len(self._keyword_index),
        )

    def __len__(self) -> int:
        return len(self._rules)

    @property
    def patterns(self) -> tuple[PatternRule, ...]:
        return self._rules

    def get_pattern_by_id(self, pattern_id: str) -> PatternRule | None:
        return self._by_id.get(pattern_id)

    def categories(self) -> list[LogCategory]:
        """Distinct rule categories in registry order."""
        return list(dict.fromkeys(rule.category for rule in self._rules))

    def find_candidates_by_keyword(self, line: str) -> list[PatternRule]:
        """Rules owning at least one keyword that occurs in ``line``.

        This is a cheap pre-filter and computes no confidence.
        """
        lower = line.lower()
        hits: dict[str, PatternRule] = {}
        for keyword, rules in self._keyword_index.items():
            if keyword in lower:
                for rule in rules:
                    hits.setdefault(rule.id, rule)
        return [rule for rule in self._rules if rule.id in hits]

    def score(self, rule: PatternRule, line: str) -> float:
        """Return the confidence that ``rule`` explains ``line`` (0 when no matcher hits)."""
        if not line:
            return 0.0

        best = 0.0
        for matcher in rule.matchers:
            m = matcher.search(line)
            if m is None:
                continue
            ratio = len(m.group(0)) / len(line)
            best = max(best, min(BASE_CONFIDENCE + ratio * RATIO_WEIGHT, MATCH_CAP))

        if best <= 0:
            return 0.0

        lower = line.lower()
        hits = sum(1 for keyword in rule.keywords if keyword.lower() in lower)
        confidence = min(best + min(hits * KEYWORD_BONUS, KEYWORD_BONUS_CAP), CONFIDENCE_CAP)

        if rule.error_codes and any(code in line for code in rule.error_codes):
            confidence = min(confidence + ERROR_CODE_BONUS, CONFIDENCE_CAP)

        return _round2(confidence)

    def find_matching_patterns(self, line: str) -> list[MatchCandidate]:
        """Score every rule against ``line``; best first, ties in registry order."""
        candidates = [
            MatchCandidate(rule=rule, confidence=confidence)
            for rule in self._rules
            if (confidence := self.score(rule, line)) > 0
        ]
        candidates.sort(key=lambda c: c.confidence, reverse=True)
        return candidates
