"""Rule base: the bundled pattern rules and the registry that indexes them."""

from __future__ import annotations

from .patterns import ALL_PATTERNS
from .registry import PatternRegistry


def default_registry() -> PatternRegistry:
    """Build a registry over every bundled rule family."""
    return PatternRegistry(ALL_PATTERNS)


__all__ = [
    "ALL_PATTERNS",
    "PatternRegistry",
    "default_registry",
]
