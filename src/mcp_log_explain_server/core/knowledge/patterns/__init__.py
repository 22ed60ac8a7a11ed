"""Bundled rule families.

Each module exports one tuple of rules; ``ALL_PATTERNS`` concatenates them in
registry iteration order.
"""

from __future__ import annotations

from ...models import PatternRule
from .api import API_PATTERNS
from .auth import AUTH_PATTERNS
from .cloud import CLOUD_PATTERNS
from .config import CONFIG_PATTERNS
from .database import DATABASE_PATTERNS
from .docker import DOCKER_PATTERNS
from .infrastructure import INFRASTRUCTURE_PATTERNS
from .kubernetes import KUBERNETES_PATTERNS
from .messaging import MESSAGING_PATTERNS
from .network import NETWORK_PATTERNS
from .system import SYSTEM_PATTERNS

ALL_PATTERNS: tuple[PatternRule, ...] = (
    *DATABASE_PATTERNS,
    *NETWORK_PATTERNS,
    *AUTH_PATTERNS,
    *SYSTEM_PATTERNS,
    *API_PATTERNS,
    *CONFIG_PATTERNS,
    *KUBERNETES_PATTERNS,
    *DOCKER_PATTERNS,
    *CLOUD_PATTERNS,
    *MESSAGING_PATTERNS,
    *INFRASTRUCTURE_PATTERNS,
)

__all__ = [
    "ALL_PATTERNS",
    "API_PATTERNS",
    "AUTH_PATTERNS",
    "CLOUD_PATTERNS",
    "CONFIG_PATTERNS",
    "DATABASE_PATTERNS",
    "DOCKER_PATTERNS",
    "INFRASTRUCTURE_PATTERNS",
    "KUBERNETES_PATTERNS",
    "MESSAGING_PATTERNS",
    "NETWORK_PATTERNS",
    "SYSTEM_PATTERNS",
]
