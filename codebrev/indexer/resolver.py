"""Second-pass import resolution and package aggregation.

Runs once every file has been extracted: raw import strings recorded by
the extractors are turned into file and package edges of the Outline.
"""

import logging
import posixpath
from typing import Dict, Iterable, Optional

from ..config import DEFAULT_SOURCE_ALIAS, DEFAULT_SOURCE_ROOT
from .models import EdgeStat, PackageRecord
from .outline import Outline

logger = logging.getLogger(__name__)

# Tried in this order when a script import carries no extension
SCRIPT_EXTENSIONS = (".tsx", ".ts", ".astro", ".js", ".jsx")

# TypeScript ESM sources import their siblings with a ".js" suffix
JS_SOURCE_FALLBACKS = (".ts", ".tsx")


def resolve_go_import(module_paths: Dict[str, str], import_path: str) -> Optional[str]:
    """Map a Go import path to a repo-relative package directory.

    The longest matching module path wins so nested modules shadow the
    modules that enclose them.

    Args:
        module_paths: Module directory (relative to the scan root) -> module path
        import_path: Import path as written in the source

    Returns:
        Package directory ("." for the root), or None for external imports
    """
    best_dir = ""
    best_mod = ""
    for dir_rel in sorted(module_paths):
        mod_path = module_paths[dir_rel]
        if not mod_path:
            continue
        if import_path == mod_path or import_path.startswith(mod_path + "/"):
            if len(mod_path) > len(best_mod):
                best_mod = mod_path
                best_dir = dir_rel

    if not best_mod:
        return None

    suffix = import_path[len(best_mod):].lstrip("/")
    if best_dir in ("", "."):
        return suffix or "."
    if not suffix:
        return best_dir
    return posixpath.normpath(posixpath.join(best_dir, suffix))


def is_local_script_import(spec: str, alias_token: str = DEFAULT_SOURCE_ALIAS) -> bool:
    """Check whether a script import specifier points inside the project."""
    if spec.startswith("./") or spec.startswith("../") or spec in (".", ".."):
        return True
    return bool(alias_token) and (spec == alias_token or spec.startswith(alias_token + "/"))


def normalize_script_import(
    spec: str,
    importer: str,
    alias_token: str = DEFAULT_SOURCE_ALIAS,
    source_root: str = DEFAULT_SOURCE_ROOT,
) -> Optional[str]:
    """Turn a local import specifier into a repo-relative path (no extension lookup).

    Args:
        spec: Import specifier, e.g. "~/components/Button" or "../lib/api"
        importer: Repo-relative path of the importing file
        alias_token: Alias prefix standing for the source root
        source_root: Directory the alias maps to

    Returns:
        Normalized path, or None for external or out-of-tree imports
    """
    for marker in ("?", "#"):
        if marker in spec:
            spec = spec.split(marker, 1)[0]
    if not spec:
        return None

    if alias_token and (spec == alias_token or spec.startswith(alias_token + "/")):
        path = source_root + spec[len(alias_token):]
    elif spec.startswith("./") or spec.startswith("../") or spec in (".", ".."):
        path = posixpath.join(posixpath.dirname(importer), spec)
    else:
        return None

    path = posixpath.normpath(path)
    if path == ".." or path.startswith("../"):
        return None
    return path


class FileIndex:
    """Lookup helper over the sorted set of indexed file paths."""

    def __init__(self, paths: Iterable[str]):
        self.paths = sorted(paths)
        self._path_set = set(self.paths)

    def match(self, candidate: str) -> Optional[str]:
        """Exact match first, then the first file ending in "/" + candidate."""
        if candidate in self._path_set:
            return candidate
        suffix = "/" + candidate
        for path in self.paths:
            if path.endswith(suffix):
                return path
        return None


def resolve_script_import(
    spec: str,
    importer: str,
    files: FileIndex,
    alias_token: str = DEFAULT_SOURCE_ALIAS,
    source_root: str = DEFAULT_SOURCE_ROOT,
) -> Optional[str]:
    """Resolve a script import specifier to an indexed file.

    Args:
        spec: Import specifier
        importer: Repo-relative path of the importing file
        files: Index of every extracted file
        alias_token: Alias prefix standing for the source root
        source_root: Directory the alias maps to

    Returns:
        Repo-relative path of the imported file, or None when unresolved
    """
    path = normalize_script_import(spec, importer, alias_token, source_root)
    if path is None:
        return None

    extension = posixpath.splitext(path)[1]
    if extension in SCRIPT_EXTENSIONS:
        candidates = [path]
        if extension == ".js":
            stem = path[: -len(extension)]
            candidates.extend(stem + ext for ext in JS_SOURCE_FALLBACKS)
    else:
        candidates = [path + ext for ext in SCRIPT_EXTENSIONS]
        candidates.extend(posixpath.join(path, "index" + ext) for ext in SCRIPT_EXTENSIONS)

    for candidate in candidates:
        match = files.match(candidate)
        if match is not None:
            return match
    return None


def build_package_index(outline: Outline) -> Dict[str, PackageRecord]:
    """Group files by package directory and pick each package's representative."""
    packages: Dict[str, PackageRecord] = {}
    for path in outline.list_files():
        package_dir = outline.files[path].package_dir
        package = packages.get(package_dir)
        if package is None:
            package = PackageRecord(path=package_dir)
            packages[package_dir] = package
        package.files.append(path)

    for package in packages.values():
        package.representative = min(package.files)
        go_files = [p for p in package.files if outline.files[p].language == "go"]
        package.go_representative = min(go_files) if go_files else ""

    outline.packages = packages
    return packages


class DependencyResolver:
    """Resolve recorded imports into file and package edges."""

    def __init__(
        self,
        outline: Outline,
        alias_token: str = DEFAULT_SOURCE_ALIAS,
        source_root: str = DEFAULT_SOURCE_ROOT,
    ):
        """Initialize dependency resolver.

        Args:
            outline: Outline whose extraction phase has completed
            alias_token: Alias prefix for frontend imports
            source_root: Directory the alias maps to
        """
        self.outline = outline
        self.alias_token = alias_token
        self.source_root = source_root

    def resolve(self) -> Outline:
        """Run the resolution pass.

        Raises:
            RuntimeError: If extraction has not been marked complete
        """
        if not self.outline.extraction_complete:
            raise RuntimeError("Cannot resolve dependencies before extraction completes")

        build_package_index(self.outline)
        files = FileIndex(self.outline.files)

        resolved = 0
        for path in files.paths:
            record = self.outline.files[path]
            if record.language == "go":
                resolved += self._resolve_go_file(path)
            else:
                resolved += self._resolve_script_file(path, files)

        self.outline.resolved = True
        logger.info(
            f"Resolved {resolved} local dependencies across {len(self.outline.packages)} packages"
        )
        return self.outline

    def _resolve_go_file(self, path: str) -> int:
        record = self.outline.files[path]
        count = 0
        for package_dir in record.local_pkg_deps:
            package = self.outline.get_package(package_dir)
            if package is None or not package.go_representative:
                logger.debug(f"{path}: no indexed Go files in package {package_dir}")
                continue
            target = package.go_representative
            if target == path:
                continue
            self._add_file_edge(path, target)
            count += 1
        return count

    def _resolve_script_file(self, path: str, files: FileIndex) -> int:
        record = self.outline.files[path]
        count = 0
        for spec in record.local_imports:
            target = resolve_script_import(
                spec, path, files, self.alias_token, self.source_root
            )
            if target is None or target == path:
                logger.debug(f"{path}: unresolved import {spec}")
                continue

            self._add_file_edge(path, target)
            count += 1

            from_pkg = record.package_dir
            to_pkg = self.outline.files[target].package_dir
            if from_pkg != to_pkg:
                self.outline.add_package_dependency(from_pkg, to_pkg)
                self.outline.add_package_edge_stat(from_pkg, to_pkg, EdgeStat(imports=1))
        return count

    def _add_file_edge(self, from_file: str, to_file: str) -> None:
        record = self.outline.files[from_file]
        if to_file not in record.local_deps:
            record.local_deps.append(to_file)
        self.outline.add_dependency(from_file, to_file)


def resolve_dependencies(
    outline: Outline,
    alias_token: str = DEFAULT_SOURCE_ALIAS,
    source_root: str = DEFAULT_SOURCE_ROOT,
) -> Outline:
    """Convenience wrapper around DependencyResolver.resolve()."""
    return DependencyResolver(outline, alias_token, source_root).resolve()

