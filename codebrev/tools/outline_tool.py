"""MCP tool for indexing a repository and querying its outline."""

import logging
from dataclasses import asdict
from typing import Any, Dict, Optional

from ..indexer.outline import Outline
from ..indexer.processor import OutlineIndexer
from ..report.writer import OutlineWriter

logger = logging.getLogger(__name__)


class OutlineTool:
    """Tool holding the most recent outline and answering queries against it."""

    def __init__(self, indexer: OutlineIndexer, include_diagrams: bool = True):
        """Initialize outline tool.

        Args:
            indexer: Configured indexer
            include_diagrams: Whether written reports embed Mermaid diagrams
        """
        self.indexer = indexer
        self.include_diagrams = include_diagrams
        self.outline: Optional[Outline] = None

    def index_repository(self, root: str) -> dict:
        """Index a directory (or single file) and keep the outline.

        Args:
            root: Path to index

        Returns:
            Dictionary with index statistics
        """
        try:
            logger.info(f"Indexing repository: {root}")
            self.outline = self.indexer.index(root)
            outline = self.outline

            return {
                "success": True,
                "root": outline.root,
                "files": len(outline.files),
                "types": len(outline.types),
                "packages": len(outline.packages),
                "modules": [module.mod_path for module in outline.modules],
                "test_files": len(outline.skipped_tests),
            }

        except Exception as e:
            logger.error(f"Error indexing repository: {e}")
            return {"success": False, "error": str(e)}

    def _require_outline(self) -> Optional[dict]:
        if self.outline is None:
            return {"success": False, "error": "No repository indexed yet"}
        return None

    def get_file_outline(self, file_path: str) -> dict:
        """Get everything extracted from one file.

        Args:
            file_path: Repo-relative path of the file

        Returns:
            Dictionary with the file record
        """
        missing = self._require_outline()
        if missing:
            return missing

        try:
            record = self.outline.get_file(file_path)
            if record is None:
                return {"success": False, "error": f"File not indexed: {file_path}"}

            return {
                "success": True,
                "file": asdict(record),
                "dependents": self.outline.get_reverse_dependencies(file_path),
            }

        except Exception as e:
            logger.error(f"Error getting file outline: {e}")
            return {"success": False, "error": str(e)}

    def get_type_info(self, type_name: str) -> dict:
        """Get a type's fields, methods and usage locations."""
        missing = self._require_outline()
        if missing:
            return missing

        try:
            type_record = self.outline.get_type(type_name)
            if type_record is None:
                return {"success": False, "error": f"Unknown type: {type_name}"}
            return {"success": True, "type": asdict(type_record)}

        except Exception as e:
            logger.error(f"Error getting type info: {e}")
            return {"success": False, "error": str(e)}

    def get_dependencies(self, key: str, package: bool = False) -> dict:
        """Get forward and reverse dependencies of a file or package.

        Args:
            key: File path, or package directory when package is True
            package: Query the package graph instead of the file graph

        Returns:
            Dictionary with dependency lists (and edge counters for packages)
        """
        missing = self._require_outline()
        if missing:
            return missing

        try:
            outline = self.outline
            dependencies = outline.get_dependencies(key, package)
            result: Dict[str, Any] = {
                "success": True,
                "key": key,
                "package": package,
                "dependencies": dependencies,
                "dependents": outline.get_reverse_dependencies(key, package),
            }

            if package:
                edges = {}
                for target in dependencies:
                    stat = outline.get_edge_stat(key, target)
                    if stat is not None:
                        edges[target] = asdict(stat)
                result["edge_stats"] = edges

            return result

        except Exception as e:
            logger.error(f"Error getting dependencies: {e}")
            return {"success": False, "error": str(e)}

    def get_public_api(self, file_path: Optional[str] = None) -> dict:
        """List public API entries, optionally for a single file."""
        missing = self._require_outline()
        if missing:
            return missing

        try:
            api = self.outline.public_api_by_file()
            if file_path:
                api = {file_path: api.get(file_path, [])}

            return {
                "success": True,
                "public_api": api,
                "total_entries": sum(len(entries) for entries in api.values()),
            }

        except Exception as e:
            logger.error(f"Error getting public API: {e}")
            return {"success": False, "error": str(e)}

    def write_report(self, output_path: Optional[str] = None) -> dict:
        """Render the outline report and write it to disk."""
        missing = self._require_outline()
        if missing:
            return missing

        try:
            writer = OutlineWriter(self.outline, include_diagrams=self.include_diagrams)
            path = writer.write(output_path)
            return {"success": True, "output_path": path}

        except Exception as e:
            logger.error(f"Error writing report: {e}")
            return {"success": False, "error": str(e)}
