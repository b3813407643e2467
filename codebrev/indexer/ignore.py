"""Path exclusion for the tree walk: defaults, .gitignore files and user patterns."""

import fnmatch
import logging
import os
from pathlib import Path, PurePosixPath
from typing import Callable, Dict, List, Optional

from gitignore_parser import parse_gitignore

logger = logging.getLogger(__name__)

DEFAULT_IGNORED_DIRS = frozenset(
    {
        ".git",
        "node_modules",
        "vendor",
        "dist",
        "build",
        ".next",
        ".nuxt",
        ".astro",
        "__pycache__",
        ".idea",
        ".vscode",
        ".venv",
        "venv",
    }
)

DEFAULT_IGNORED_FILES = (".DS_Store", "*.tmp", "*.temp")

GITIGNORE = ".gitignore"


def find_git_root(start: str) -> Optional[str]:
    """Return the nearest directory at or above start that holds a .git entry."""
    directory = os.path.abspath(start)
    if os.path.isfile(directory):
        directory = os.path.dirname(directory)

    while True:
        if os.path.exists(os.path.join(directory, ".git")):
            return directory
        parent = os.path.dirname(directory)
        if parent == directory:
            return None
        directory = parent


class IgnoreFilter:
    """Decide whether a walked path is excluded from indexing.

    Matchers from .gitignore files are keyed by the directory holding them
    and consulted only for paths below that directory. Files between the git
    root and the scan root are loaded up front; nested ones are loaded the
    first time the walk asks about a path inside their directory.
    """

    def __init__(
        self,
        root: str,
        follow_gitignore: bool = True,
        exclude_patterns: Optional[List[str]] = None,
    ):
        """Initialize ignore filter.

        Args:
            root: Scan root (directory or single file)
            follow_gitignore: Whether to respect .gitignore files
            exclude_patterns: Extra glob patterns matched against repo-relative paths
        """
        root_abs = os.path.abspath(root)
        self.root = os.path.dirname(root_abs) if os.path.isfile(root_abs) else root_abs
        self.follow_gitignore = follow_gitignore
        self.exclude_patterns = list(exclude_patterns or [])
        self._matchers: Dict[str, Optional[Callable[[str], bool]]] = {}

        if follow_gitignore:
            self._load_ancestors()

    def _load_ancestors(self) -> None:
        git_root = find_git_root(self.root) or self.root
        chain = []
        directory = self.root
        while True:
            chain.append(directory)
            if directory == git_root:
                break
            parent = os.path.dirname(directory)
            if parent == directory:
                break
            directory = parent

        for directory in reversed(chain):
            self._matcher_for(directory)

    def _matcher_for(self, directory: str) -> Optional[Callable[[str], bool]]:
        if directory in self._matchers:
            return self._matchers[directory]

        matcher = None
        gitignore_path = os.path.join(directory, GITIGNORE)
        if os.path.isfile(gitignore_path):
            try:
                matcher = parse_gitignore(gitignore_path, base_dir=directory)
                logger.debug(f"Loaded .gitignore from {gitignore_path}")
            except Exception as e:
                logger.warning(f"Error parsing {gitignore_path}: {e}")

        self._matchers[directory] = matcher
        return matcher

    def should_ignore(self, abs_path: str) -> bool:
        """Check whether a file or directory should be skipped.

        Args:
            abs_path: Absolute path of the walked entry

        Returns:
            True if the entry (and, for directories, its subtree) is excluded
        """
        abs_path = os.path.abspath(abs_path)
        name = os.path.basename(abs_path)
        is_dir = os.path.isdir(abs_path)

        if is_dir and name in DEFAULT_IGNORED_DIRS:
            return True
        if not is_dir and any(fnmatch.fnmatch(name, pattern) for pattern in DEFAULT_IGNORED_FILES):
            return True

        if self.exclude_patterns and self._matches_exclude(abs_path):
            return True

        if self.follow_gitignore and self._matches_gitignore(abs_path):
            return True

        return False

    __call__ = should_ignore

    def _matches_exclude(self, abs_path: str) -> bool:
        try:
            rel = Path(abs_path).relative_to(self.root).as_posix()
        except ValueError:
            rel = Path(abs_path).name
        rel_path = PurePosixPath(rel)
        for pattern in self.exclude_patterns:
            if fnmatch.fnmatch(rel, pattern) or rel_path.match(pattern):
                return True
            if pattern in rel_path.parts:
                return True
        return False

    def _matches_gitignore(self, abs_path: str) -> bool:
        directory = os.path.dirname(abs_path)
        while True:
            if _is_within(directory, self.root):
                matcher = self._matcher_for(directory)
            else:
                # Ancestors above the scan root were loaded up front
                matcher = self._matchers.get(directory)
            if matcher is not None and matcher(abs_path):
                return True
            parent = os.path.dirname(directory)
            if parent == directory:
                return False
            directory = parent


def _is_within(path: str, root: str) -> bool:
    return path == root or path.startswith(root.rstrip(os.sep) + os.sep)
