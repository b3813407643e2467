"""Shared symbol model populated by extractors and the resolution pass."""

import logging
from typing import Dict, List, Optional, Tuple

from .models import (
    EdgeStat,
    FileRecord,
    GoModule,
    ImpactRecord,
    PackageRecord,
    TypeRecord,
)

logger = logging.getLogger(__name__)


def _append_unique(mapping: Dict[str, List[str]], key: str, value: str) -> bool:
    """Append value to mapping[key] unless already present.

    Returns:
        True if the value was added
    """
    values = mapping.setdefault(key, [])
    if value in values:
        return False
    values.append(value)
    return True


class Outline:
    """In-memory code outline for one scan.

    Every accretion method is idempotent and creates its targets on first
    mention, so the final graph does not depend on file processing order.
    Forward edge maps are always mirrored into their reverse maps.
    """

    def __init__(self, root: str = "."):
        self.root = root
        self.files: Dict[str, FileRecord] = {}
        self.types: Dict[str, TypeRecord] = {}
        self.modules: List[GoModule] = []

        # file -> files it depends on, and the inverse
        self.dependencies: Dict[str, List[str]] = {}
        self.reverse_deps: Dict[str, List[str]] = {}

        # package dir -> package dirs it depends on, and the inverse
        self.package_deps: Dict[str, List[str]] = {}
        self.package_reverse_deps: Dict[str, List[str]] = {}
        self.package_edge_stats: Dict[Tuple[str, str], EdgeStat] = {}
        self.packages: Dict[str, PackageRecord] = {}

        self.function_calls: Dict[str, List[str]] = {}  # "path:func" -> callee names
        self.type_usage: Dict[str, List[str]] = {}  # type name -> "path:func" locations
        self.public_apis: Dict[str, List[str]] = {}  # file -> public entries

        self.change_impact: Dict[str, ImpactRecord] = {}
        self.package_impact: Dict[str, ImpactRecord] = {}
        self.skipped_tests: List[str] = []

        self.extraction_complete = False
        self.resolved = False

    # ------------------------------------------------------------------
    # Accretion
    # ------------------------------------------------------------------

    def set_modules(self, modules: List[GoModule]) -> None:
        self.modules = list(modules)

    @property
    def module_paths(self) -> Dict[str, str]:
        """Map of module directory (relative to the scan root) to module path."""
        return {m.dir_rel: m.mod_path for m in self.modules}

    def ensure_type(self, name: str) -> TypeRecord:
        """Return the type registered under name, creating it if needed."""
        type_record = self.types.get(name)
        if type_record is None:
            type_record = TypeRecord(name=name)
            self.types[name] = type_record
        return type_record

    def add_file(
        self,
        path: str,
        abs_path: str = "",
        language: str = "",
        module: str = "",
        package_dir: str = ".",
    ) -> FileRecord:
        """Register a file; adding the same path again returns the existing record."""
        existing = self.files.get(path)
        if existing is not None:
            return existing
        record = FileRecord(
            path=path,
            abs_path=abs_path or path,
            language=language,
            module=module,
            package_dir=package_dir,
        )
        self.files[path] = record
        return record

    def add_dependency(self, from_file: str, to_file: str) -> None:
        """Record that from_file depends on to_file."""
        _append_unique(self.dependencies, from_file, to_file)
        self._add_reverse_dependency(to_file, from_file)

    def _add_reverse_dependency(self, to_file: str, from_file: str) -> None:
        _append_unique(self.reverse_deps, to_file, from_file)

    def add_package_dependency(self, from_pkg: str, to_pkg: str) -> None:
        """Record that package from_pkg depends on package to_pkg."""
        _append_unique(self.package_deps, from_pkg, to_pkg)
        _append_unique(self.package_reverse_deps, to_pkg, from_pkg)

    def add_package_edge_stat(self, from_pkg: str, to_pkg: str, stat: EdgeStat) -> EdgeStat:
        """Accumulate coupling counters on the edge from_pkg -> to_pkg."""
        key = (from_pkg, to_pkg)
        current = self.package_edge_stats.get(key)
        if current is None:
            current = EdgeStat()
            self.package_edge_stats[key] = current
        current.add(stat)
        return current

    def add_function_call(self, caller: str, callee: str) -> None:
        _append_unique(self.function_calls, caller, callee)

    def add_type_usage(self, type_name: str, used_by: str) -> None:
        """Record that type_name is used at the qualified location used_by."""
        if _append_unique(self.type_usage, type_name, used_by):
            type_record = self.ensure_type(type_name)
            if used_by not in type_record.used_by:
                type_record.used_by.append(used_by)

    def add_public_api(self, file_path: str, entry: str) -> None:
        _append_unique(self.public_apis, file_path, entry)

    def complete_extraction(self) -> None:
        """Mark the walk-and-extract phase as drained."""
        self.extraction_complete = True
        logger.debug(f"Extraction complete: {len(self.files)} files, {len(self.types)} types")

    def remove_duplicates(self) -> None:
        """Drop repeated type and variable names from every file."""
        for record in self.files.values():
            record.types = list(dict.fromkeys(record.types))
            record.vars = list(dict.fromkeys(record.vars))

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    def list_files(self) -> List[str]:
        return sorted(self.files)

    def get_file(self, path: str) -> Optional[FileRecord]:
        return self.files.get(path)

    def get_type(self, name: str) -> Optional[TypeRecord]:
        return self.types.get(name)

    def get_package(self, path: str) -> Optional[PackageRecord]:
        return self.packages.get(path)

    def get_dependencies(self, key: str, package: bool = False) -> List[str]:
        """Forward dependencies of a file (or of a package when package=True)."""
        source = self.package_deps if package else self.dependencies
        return list(source.get(key, []))

    def get_reverse_dependencies(self, key: str, package: bool = False) -> List[str]:
        """Direct dependents of a file (or of a package when package=True)."""
        source = self.package_reverse_deps if package else self.reverse_deps
        return list(source.get(key, []))

    def get_edge_stat(self, from_pkg: str, to_pkg: str) -> Optional[EdgeStat]:
        return self.package_edge_stats.get((from_pkg, to_pkg))

    def get_cached_impact(self, key: str, package: bool = False) -> Optional[ImpactRecord]:
        cache = self.package_impact if package else self.change_impact
        return cache.get(key)

    def public_api_by_file(self) -> Dict[str, List[str]]:
        """All public API entries grouped by file, files sorted."""
        return {path: list(self.public_apis[path]) for path in sorted(self.public_apis)}

    def files_in_package(self, package_dir: str) -> List[str]:
        return sorted(p for p, r in self.files.items() if r.package_dir == package_dir)
