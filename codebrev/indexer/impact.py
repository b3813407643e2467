"""Change-impact analysis over the reverse dependency graphs."""

import logging
from typing import Dict, List

from ..config import DEFAULT_RISK_HIGH, DEFAULT_RISK_MEDIUM
from .models import ImpactRecord
from .outline import Outline

logger = logging.getLogger(__name__)

RISK_LOW = "low"
RISK_MEDIUM = "medium"
RISK_HIGH = "high"


def classify_risk(
    total_dependents: int,
    medium_threshold: int = DEFAULT_RISK_MEDIUM,
    high_threshold: int = DEFAULT_RISK_HIGH,
) -> str:
    """Map a dependent count to a risk level."""
    if total_dependents > high_threshold:
        return RISK_HIGH
    if total_dependents > medium_threshold:
        return RISK_MEDIUM
    return RISK_LOW


def collect_indirect_dependents(
    reverse_deps: Dict[str, List[str]], key: str, direct: List[str]
) -> List[str]:
    """Walk the reverse graph depth-first from each direct dependent.

    Nodes are reported once, in pre-order, and neither the key nor its
    direct dependents are reported again.
    """
    visited = {key}
    visited.update(direct)
    result: List[str] = []

    for start in direct:
        stack = [iter(reverse_deps.get(start, []))]
        while stack:
            node = next(stack[-1], None)
            if node is None:
                stack.pop()
                continue
            if node in visited:
                continue
            visited.add(node)
            result.append(node)
            stack.append(iter(reverse_deps.get(node, [])))

    return result


class ImpactAnalyzer:
    """Compute and cache impact records for files and packages."""

    def __init__(
        self,
        outline: Outline,
        medium_threshold: int = DEFAULT_RISK_MEDIUM,
        high_threshold: int = DEFAULT_RISK_HIGH,
    ):
        """Initialize impact analyzer.

        Args:
            outline: Outline to analyze
            medium_threshold: Dependent count above which risk is medium
            high_threshold: Dependent count above which risk is high
        """
        self.outline = outline
        self.medium_threshold = medium_threshold
        self.high_threshold = high_threshold

    def compute_impact(self, key: str, package: bool = False) -> ImpactRecord:
        """Compute the impact of changing a file (or a package).

        Recomputing replaces any previously cached record for the key.

        Args:
            key: File path, or package directory when package=True
            package: Use the package-level reverse graph

        Returns:
            Fresh impact record
        """
        reverse = self.outline.package_reverse_deps if package else self.outline.reverse_deps
        direct = list(reverse.get(key, []))
        indirect = collect_indirect_dependents(reverse, key, direct)

        impact = ImpactRecord(
            key=key,
            direct_dependents=direct,
            indirect_dependents=indirect,
            risk_level=classify_risk(
                len(direct) + len(indirect), self.medium_threshold, self.high_threshold
            ),
        )
        if not package:
            impact.tests_affected = self._tests_affected([key] + direct + indirect)

        cache = self.outline.package_impact if package else self.outline.change_impact
        cache[key] = impact
        return impact

    def get_impact(self, key: str, package: bool = False) -> ImpactRecord:
        """Return the cached record for key, computing it on first request."""
        cached = self.outline.get_cached_impact(key, package)
        if cached is not None:
            return cached
        return self.compute_impact(key, package)

    def compute_all(self) -> Dict[str, ImpactRecord]:
        """Compute impact for every file and store each file's risk level."""
        for path in self.outline.list_files():
            impact = self.compute_impact(path)
            self.outline.files[path].risk_level = impact.risk_level
        logger.debug(f"Computed change impact for {len(self.outline.change_impact)} files")
        return self.outline.change_impact

    def _tests_affected(self, paths: List[str]) -> List[str]:
        tests: List[str] = []
        for path in paths:
            record = self.outline.get_file(path)
            if record is None or record.test_coverage is None:
                continue
            for test_file in record.test_coverage.test_files:
                if test_file not in tests:
                    tests.append(test_file)
        return tests
