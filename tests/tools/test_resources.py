from __future__ import annotations

import pytest

from mcp_log_explain_server.core.knowledge import PatternRegistry
from mcp_log_explain_server.resources.registry import SAMPLE_INCIDENT, pattern_detail
from mcp_log_explain_server.tools.explain import analyze_incident_impl


def test_pattern_detail_includes_template(registry: PatternRegistry) -> None:
    out = pattern_detail(registry, "SYS_OOM")

    assert out["id"] == "SYS_OOM"
    assert out["category"] == "memory"
    assert out["rootCause"]
    assert out["recommendedFixes"]
    assert isinstance(out["possibleCauses"], list)


def test_pattern_detail_unknown_id(registry: PatternRegistry) -> None:
    with pytest.raises(ValueError, match="Unknown pattern id: NOPE"):
        pattern_detail(registry, "NOPE")


def test_sample_incident_is_analyzable(registry: PatternRegistry) -> None:
    out = analyze_incident_impl(logs=SAMPLE_INCIDENT.splitlines(), registry=registry)

    assert out["totalLogsAnalyzed"] == 3
    assert len(out["correlations"]) == 1
