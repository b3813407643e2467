"""Markdown report rendering for a resolved Outline."""

import logging
from collections import Counter
from pathlib import Path
from typing import List, Optional

from ..config import DEFAULT_OUTPUT
from ..indexer.impact import RISK_HIGH, RISK_LOW, RISK_MEDIUM
from ..indexer.models import FileRecord, TypeRecord
from ..indexer.outline import Outline
from .mermaid import MermaidBuilder

logger = logging.getLogger(__name__)

RISK_ORDER = {RISK_HIGH: 0, RISK_MEDIUM: 1, RISK_LOW: 2}


def _inline(values: List[str]) -> str:
    return ", ".join(f"`{v}`" for v in values)


class OutlineWriter:
    """Render an Outline as a Markdown document."""

    def __init__(self, outline: Outline, include_diagrams: bool = True):
        """Initialize writer.

        Args:
            outline: Resolved outline
            include_diagrams: Whether to embed Mermaid diagrams
        """
        self.outline = outline
        self.include_diagrams = include_diagrams

    def render(self) -> str:
        """Render the full report.

        Returns:
            Markdown text
        """
        sections = [
            "# Code Outline",
            self._summary(),
        ]
        if self.include_diagrams and self.outline.packages:
            builder = MermaidBuilder(self.outline)
            sections.append("## Architecture Overview\n\n" + builder.package_diagram())
            if self.outline.dependencies:
                sections.append("## File Dependencies\n\n" + builder.file_diagram())

        sections.extend(
            [
                self._package_table(),
                self._public_api(),
                self._change_impact(),
                self._files(),
            ]
        )
        return "\n\n".join(s for s in sections if s) + "\n"

    def write(self, output_path: Optional[str] = None) -> str:
        """Render and write the report.

        Args:
            output_path: Destination file (defaults to codebrev.md)

        Returns:
            Path written to
        """
        path = Path(output_path or DEFAULT_OUTPUT)
        if path.parent and not path.parent.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render(), encoding="utf-8")
        logger.info(f"Wrote outline report to {path}")
        return str(path)

    def _summary(self) -> str:
        outline = self.outline
        languages = Counter(record.language for record in outline.files.values())

        lines = [
            "## Summary",
            "",
            f"- Files: {len(outline.files)}",
            f"- Packages: {len(outline.packages)}",
            f"- Types: {len(outline.types)}",
            f"- Test files: {len(outline.skipped_tests)}",
        ]
        if languages:
            breakdown = ", ".join(f"{lang} {count}" for lang, count in sorted(languages.items()))
            lines.append(f"- Languages: {breakdown}")
        for module in outline.modules:
            lines.append(f"- Module `{module.mod_path}` at `{module.dir_rel}`")
        return "\n".join(lines)

    def _package_table(self) -> str:
        if not self.outline.package_deps:
            return ""

        lines = [
            "## Package Dependencies",
            "",
            "| From | To | Imports | Calls | Type uses |",
            "|------|----|---------|-------|-----------|",
        ]
        for from_pkg in sorted(self.outline.package_deps):
            for to_pkg in sorted(self.outline.get_dependencies(from_pkg, package=True)):
                stat = self.outline.get_edge_stat(from_pkg, to_pkg)
                imports, calls, type_uses = (
                    (stat.imports, stat.calls, stat.type_uses) if stat else (0, 0, 0)
                )
                lines.append(f"| `{from_pkg}` | `{to_pkg}` | {imports} | {calls} | {type_uses} |")
        return "\n".join(lines)

    def _public_api(self) -> str:
        api = self.outline.public_api_by_file()
        if not api:
            return ""

        lines = ["## Public API"]
        for path, entries in api.items():
            lines.append("")
            lines.append(f"### {path}")
            lines.append("")
            lines.extend(f"- `{entry}`" for entry in entries)
        return "\n".join(lines)

    def _change_impact(self) -> str:
        risky = [
            impact
            for impact in self.outline.change_impact.values()
            if impact.risk_level != RISK_LOW
        ]
        if not risky:
            return ""

        risky.sort(key=lambda i: (RISK_ORDER.get(i.risk_level, 3), -i.total_dependents, i.key))
        lines = [
            "## Change Impact",
            "",
            "| File | Risk | Direct | Indirect | Tests affected |",
            "|------|------|--------|----------|----------------|",
        ]
        for impact in risky:
            lines.append(
                f"| `{impact.key}` | {impact.risk_level} | {len(impact.direct_dependents)} "
                f"| {len(impact.indirect_dependents)} | {len(impact.tests_affected)} |"
            )
        return "\n".join(lines)

    def _files(self) -> str:
        parts = ["## Files"]
        for path in self.outline.list_files():
            parts.append(self._file_section(self.outline.files[path]))
        return "\n\n".join(parts)

    def _file_section(self, record: FileRecord) -> str:
        header = f"### {record.path}"
        meta = [f"- Language: {record.language}", f"- Risk: {record.risk_level}"]
        if record.package_name:
            meta.append(f"- Package: `{record.package_name}`")
        if record.module:
            meta.append(f"- Module: `{record.module}`")

        lines = [header, ""] + meta

        if record.functions:
            lines.append("")
            lines.append("**Functions**")
            lines.append("")
            for function in record.functions:
                marker = " (exported)" if function.is_public else ""
                lines.append(f"- `{function.signature()}`{marker} L{function.line_number}")
                if function.calls_to:
                    lines.append(f"  - calls: {_inline(function.calls_to)}")

        if record.types:
            lines.append("")
            lines.append("**Types**")
            lines.append("")
            for name in record.types:
                type_record = self.outline.get_type(name)
                lines.extend(self._type_lines(name, type_record))

        for title, values in (
            ("Variables", record.vars),
            ("Imports", record.imports),
            ("Local dependencies", record.local_deps),
            ("Routes", record.routes),
        ):
            if values:
                lines.append("")
                lines.append(f"**{title}**: {_inline(values)}")

        dependents = self.outline.get_reverse_dependencies(record.path)
        if dependents:
            lines.append("")
            lines.append(f"**Used by**: {_inline(dependents)}")

        for key in sorted(record.annotations):
            lines.append("")
            lines.append(f"**{key}**: {_inline(record.annotations[key])}")

        if record.test_coverage is not None:
            lines.append("")
            lines.append(f"**Tests**: {_inline(record.test_coverage.test_files)}")
            if record.test_coverage.test_scenarios:
                lines.append(f"  - scenarios: {_inline(record.test_coverage.test_scenarios)}")

        return "\n".join(lines)

    @staticmethod
    def _type_lines(name: str, type_record: Optional[TypeRecord]) -> List[str]:
        if type_record is None:
            return [f"- `{name}`"]

        lines = [f"- `{name}`" + (" (exported)" if type_record.is_public else "")]
        for label, values in (
            ("fields", type_record.fields),
            ("methods", type_record.methods),
            ("contract keys", type_record.contract_keys),
            ("implements", type_record.implements),
            ("embeds", type_record.embedded_types),
        ):
            if values:
                lines.append(f"  - {label}: {_inline(values)}")
        return lines
