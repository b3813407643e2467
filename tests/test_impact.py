"""Tests for change-impact analysis."""

import pytest

from codebrev.indexer.impact import (
    RISK_HIGH,
    RISK_LOW,
    RISK_MEDIUM,
    ImpactAnalyzer,
    classify_risk,
)
from codebrev.indexer.models import TestInfo
from codebrev.indexer.outline import Outline


@pytest.mark.parametrize(
    "count,expected",
    [(0, RISK_LOW), (3, RISK_LOW), (4, RISK_MEDIUM), (10, RISK_MEDIUM), (11, RISK_HIGH)],
)
def test_risk_threshold_boundaries(count, expected):
    """Risk tiers switch above 3 and above 10 dependents."""
    assert classify_risk(count) == expected


def test_custom_thresholds():
    """Thresholds are configurable."""
    assert classify_risk(2, medium_threshold=1, high_threshold=5) == RISK_MEDIUM
    assert classify_risk(6, medium_threshold=1, high_threshold=5) == RISK_HIGH


def test_cycle_terminates_without_self():
    """A <-> B cycle terminates and A is not its own indirect dependent."""
    outline = Outline()
    outline.add_dependency("a", "b")
    outline.add_dependency("b", "a")

    impact = ImpactAnalyzer(outline).compute_impact("a")

    assert impact.direct_dependents == ["b"]
    assert "a" not in impact.indirect_dependents
    assert impact.indirect_dependents == []


def test_indirect_dependents_in_traversal_order():
    """Transitive dependents are collected once each, depth first."""
    outline = Outline()
    # core <- service <- handler <- main, service <- worker
    outline.add_dependency("service", "core")
    outline.add_dependency("handler", "service")
    outline.add_dependency("worker", "service")
    outline.add_dependency("main", "handler")
    outline.add_dependency("main", "worker")

    impact = ImpactAnalyzer(outline).compute_impact("core")

    assert impact.direct_dependents == ["service"]
    assert impact.indirect_dependents == ["handler", "main", "worker"]
    assert impact.total_dependents == 4
    assert impact.risk_level == RISK_MEDIUM


def test_recompute_overwrites_cache():
    """Recomputing replaces the cached record for a key."""
    outline = Outline()
    outline.add_dependency("b", "a")
    analyzer = ImpactAnalyzer(outline)

    first = analyzer.compute_impact("a")
    outline.add_dependency("c", "a")
    second = analyzer.compute_impact("a")

    assert outline.get_cached_impact("a") is second
    assert first is not second
    assert second.direct_dependents == ["b", "c"]


def test_get_impact_uses_cache():
    """get_impact returns the cached record until recomputed."""
    outline = Outline()
    outline.add_dependency("b", "a")
    analyzer = ImpactAnalyzer(outline)

    first = analyzer.get_impact("a")
    outline.add_dependency("c", "a")

    assert analyzer.get_impact("a") is first


def test_package_impact_uses_package_graph():
    """Package keys are analyzed over the package reverse graph."""
    outline = Outline()
    outline.add_package_dependency("api", "store")
    outline.add_package_dependency("cmd", "api")

    impact = ImpactAnalyzer(outline).compute_impact("store", package=True)

    assert impact.direct_dependents == ["api"]
    assert impact.indirect_dependents == ["cmd"]
    assert outline.get_cached_impact("store", package=True) is impact
    assert outline.get_cached_impact("store") is None


def test_compute_all_sets_risk_and_tests():
    """compute_all stores risk levels and gathers affected tests."""
    outline = Outline()
    outline.add_file("core.go", language="go")
    for i in range(11):
        name = f"dep{i}.go"
        outline.add_file(name, language="go")
        outline.add_dependency(name, "core.go")
    outline.files["dep0.go"].test_coverage = TestInfo(test_files=["dep0_test.go"])
    outline.files["core.go"].test_coverage = TestInfo(test_files=["core_test.go"])

    impacts = ImpactAnalyzer(outline).compute_all()

    assert outline.files["core.go"].risk_level == RISK_HIGH
    assert outline.files["dep1.go"].risk_level == RISK_LOW
    assert impacts["core.go"].tests_affected == ["core_test.go", "dep0_test.go"]
