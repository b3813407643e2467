"""MCP tool for change-impact queries."""

import logging

from ..indexer.impact import ImpactAnalyzer
from .outline_tool import OutlineTool

logger = logging.getLogger(__name__)


class ImpactTool:
    """Tool computing change impact over the outline held by an OutlineTool."""

    def __init__(self, outline_tool: OutlineTool, medium_threshold: int, high_threshold: int):
        """Initialize impact tool.

        Args:
            outline_tool: Tool owning the current outline
            medium_threshold: Dependent count above which risk is medium
            high_threshold: Dependent count above which risk is high
        """
        self.outline_tool = outline_tool
        self.medium_threshold = medium_threshold
        self.high_threshold = high_threshold

    def get_change_impact(self, key: str, package: bool = False, refresh: bool = False) -> dict:
        """Get direct and indirect dependents and the risk of changing a file or package.

        Args:
            key: File path, or package directory when package is True
            package: Use the package graph
            refresh: Recompute even when a cached record exists

        Returns:
            Dictionary with the impact record
        """
        outline = self.outline_tool.outline
        if outline is None:
            return {"success": False, "error": "No repository indexed yet"}

        try:
            known = outline.get_package(key) if package else outline.get_file(key)
            if known is None:
                kind = "package" if package else "file"
                return {"success": False, "error": f"Unknown {kind}: {key}"}

            analyzer = ImpactAnalyzer(outline, self.medium_threshold, self.high_threshold)
            impact = analyzer.compute_impact(key, package) if refresh else analyzer.get_impact(key, package)

            return {
                "success": True,
                "key": impact.key,
                "package": package,
                "risk_level": impact.risk_level,
                "direct_dependents": impact.direct_dependents,
                "indirect_dependents": impact.indirect_dependents,
                "total_dependents": impact.total_dependents,
                "tests_affected": impact.tests_affected,
            }

        except Exception as e:
            logger.error(f"Error computing change impact: {e}")
            return {"success": False, "error": str(e)}
