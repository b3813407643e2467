"""Go module discovery from go.work and go.mod manifests."""

import logging
import os
from pathlib import Path
from typing import List, Optional

from .models import GoModule

logger = logging.getLogger(__name__)

WORK_FILE = "go.work"
MOD_FILE = "go.mod"


def find_nearest_file_up(start: str, name: str) -> Optional[str]:
    """Find name in start or the closest ancestor directory.

    Args:
        start: Directory (or file) to start searching from
        name: File name to look for

    Returns:
        Absolute path of the file, or None if no ancestor holds it
    """
    directory = os.path.abspath(start)
    if os.path.isfile(directory):
        directory = os.path.dirname(directory)

    while True:
        candidate = os.path.join(directory, name)
        if os.path.isfile(candidate):
            return candidate
        parent = os.path.dirname(directory)
        if parent == directory:
            return None
        directory = parent


def _strip_comment(line: str) -> str:
    return line.split("//", 1)[0].strip()


def read_module_path(go_mod_path: str) -> str:
    """Read the module directive of a go.mod file.

    Returns:
        Module path, or "" when the file is missing or has no directive
    """
    try:
        content = Path(go_mod_path).read_text(encoding="utf-8", errors="ignore")
    except OSError:
        return ""

    for raw in content.splitlines():
        line = _strip_comment(raw)
        if line.startswith("module ") or line.startswith("module\t"):
            return line[len("module"):].strip().strip('"`')
    return ""


def parse_work_use_dirs(content: str) -> List[str]:
    """Parse the directories listed by use directives in a go.work file.

    Handles both ``use ./server`` and the parenthesized block form.
    """
    dirs: List[str] = []
    in_use_block = False

    for raw in content.splitlines():
        line = _strip_comment(raw)
        if not line:
            continue

        if in_use_block:
            if line == ")":
                in_use_block = False
                continue
            entry = line.strip('"`').strip()
            if entry:
                dirs.append(entry)
            continue

        if not line.startswith("use"):
            continue
        rest = line[len("use"):].strip()
        if rest == "(":
            in_use_block = True
        elif rest.startswith("(") and rest.endswith(")"):
            entry = rest[1:-1].strip().strip('"`').strip()
            if entry:
                dirs.append(entry)
        elif rest and line[len("use")] in (" ", "\t"):
            entry = rest.strip('"`').strip()
            if entry:
                dirs.append(entry)

    return dirs


def _relative_dir(scan_root: str, dir_abs: str) -> str:
    rel = Path(os.path.relpath(dir_abs, scan_root)).as_posix()
    return rel if rel not in ("", ".") else "."


def sort_modules_nearest_first(modules: List[GoModule]) -> List[GoModule]:
    """Order modules deepest directory first so nested modules win."""
    return sorted(modules, key=lambda m: len(m.dir_abs), reverse=True)


class ModuleDetector:
    """Detect Go module boundaries for a scan root."""

    def __init__(self, scan_root: str):
        """Initialize module detector.

        Args:
            scan_root: Directory being indexed
        """
        self.scan_root = os.path.abspath(scan_root)

    def detect_modules(self) -> List[GoModule]:
        """Detect all modules visible from the scan root.

        A go.work above or at the scan root takes precedence; otherwise the
        nearest go.mod is used. Only modules with a readable module path
        are kept.

        Returns:
            Modules ordered deepest directory first (may be empty)
        """
        modules = self.detect_workspace_modules()
        if modules:
            logger.info(f"Found {len(modules)} Go modules from {WORK_FILE}")
            return modules

        module = self.detect_nearest_module()
        if module is not None:
            logger.info(f"Found Go module {module.mod_path} at {module.dir_rel}")
            return [module]

        logger.debug(f"No Go module manifest found above {self.scan_root}")
        return []

    def detect_workspace_modules(self) -> List[GoModule]:
        work_path = find_nearest_file_up(self.scan_root, WORK_FILE)
        if work_path is None:
            return []

        try:
            content = Path(work_path).read_text(encoding="utf-8", errors="ignore")
        except OSError as e:
            logger.warning(f"Error reading {work_path}: {e}")
            return []

        work_dir = os.path.dirname(work_path)
        modules = []
        for dir_rel in parse_work_use_dirs(content):
            dir_abs = os.path.normpath(os.path.join(work_dir, dir_rel))
            mod_path = read_module_path(os.path.join(dir_abs, MOD_FILE))
            if not mod_path:
                logger.debug(f"Skipping go.work entry without module path: {dir_rel}")
                continue
            modules.append(
                GoModule(
                    dir_abs=dir_abs,
                    dir_rel=_relative_dir(self.scan_root, dir_abs),
                    mod_path=mod_path,
                )
            )

        return sort_modules_nearest_first(modules)

    def detect_nearest_module(self) -> Optional[GoModule]:
        go_mod = find_nearest_file_up(self.scan_root, MOD_FILE)
        if go_mod is None:
            return None
        mod_path = read_module_path(go_mod)
        if not mod_path:
            return None
        dir_abs = os.path.dirname(go_mod)
        return GoModule(
            dir_abs=dir_abs,
            dir_rel=_relative_dir(self.scan_root, dir_abs),
            mod_path=mod_path,
        )


def owning_module(modules: List[GoModule], file_abs: str) -> Optional[GoModule]:
    """Return the nearest module containing file_abs.

    Args:
        modules: Modules ordered deepest first
        file_abs: Absolute file path

    Returns:
        Owning module or None
    """
    for module in modules:
        if file_abs == module.dir_abs or file_abs.startswith(module.dir_abs + os.sep):
            return module
    return None
