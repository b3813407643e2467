"""Mermaid flowchart builders for package and file dependency graphs."""

import re
from typing import Dict, List

from ..indexer.outline import Outline

# Larger graphs stop being readable in rendered Markdown
MAX_DIAGRAM_EDGES = 60

_ID_RE = re.compile(r"[^A-Za-z0-9_]")


def node_id(name: str) -> str:
    """Turn a path into a Mermaid-safe node identifier."""
    if name in (".", ""):
        return "root"
    return "n_" + _ID_RE.sub("_", name)


def _label(name: str) -> str:
    return (name or ".").replace('"', "'")


class MermaidBuilder:
    """Render dependency graphs of an Outline as Mermaid flowcharts."""

    def __init__(self, outline: Outline, max_edges: int = MAX_DIAGRAM_EDGES):
        self.outline = outline
        self.max_edges = max_edges

    def package_diagram(self) -> str:
        """Architecture overview: packages and their coupling strength."""
        edges = []
        for from_pkg in sorted(self.outline.package_deps):
            for to_pkg in sorted(self.outline.package_deps[from_pkg]):
                stat = self.outline.get_edge_stat(from_pkg, to_pkg)
                weight = stat.total if stat else 0
                edges.append((from_pkg, to_pkg, weight))

        # Keep the strongest couplings when trimming
        edges.sort(key=lambda e: (-e[2], e[0], e[1]))
        return self._render(
            sorted(self.outline.packages),
            [(a, b, str(w) if w else "") for a, b, w in edges[: self.max_edges]],
            truncated=len(edges) > self.max_edges,
        )

    def file_diagram(self) -> str:
        """File-level dependency graph."""
        edges = []
        for from_file in sorted(self.outline.dependencies):
            for to_file in sorted(self.outline.dependencies[from_file]):
                edges.append((from_file, to_file, ""))

        nodes = sorted({name for edge in edges[: self.max_edges] for name in edge[:2]})
        return self._render(nodes, edges[: self.max_edges], truncated=len(edges) > self.max_edges)

    @staticmethod
    def _render(nodes: List[str], edges: List[tuple], truncated: bool) -> str:
        lines = ["```mermaid", "flowchart LR"]
        seen: Dict[str, str] = {}
        for name in nodes:
            identifier = node_id(name)
            if identifier in seen:
                continue
            seen[identifier] = name
            lines.append(f'    {identifier}["{_label(name)}"]')

        for from_name, to_name, label in edges:
            arrow = f"-->|{label}|" if label else "-->"
            lines.append(f"    {node_id(from_name)} {arrow} {node_id(to_name)}")

        if truncated:
            lines.append("    %% graph truncated")
        lines.append("```")
        return "\n".join(lines)
