"""Top-level indexing pipeline: discover modules, walk, extract, resolve, analyze."""

import logging
import os
import posixpath
import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..config import (
    DEFAULT_RISK_HIGH,
    DEFAULT_RISK_MEDIUM,
    DEFAULT_SOURCE_ALIAS,
    DEFAULT_SOURCE_ROOT,
)
from .grammars import LanguageRegistry, get_language_registry
from .ignore import IgnoreFilter
from .impact import ImpactAnalyzer
from .models import TestInfo
from .modules import ModuleDetector, owning_module
from .outline import Outline
from .registry import ExtractorRegistry
from .resolver import resolve_dependencies

logger = logging.getLogger(__name__)

IgnorePredicate = Callable[[str], bool]

GO_TEST_FUNC_RE = re.compile(r"^func\s+(Test\w*)\s*\(", re.MULTILINE)
SCRIPT_SCENARIO_RE = re.compile(r"""\b(?:it|test|describe)(?:\.\w+)?\s*\(\s*(['"`])(.+?)\1""")
SCRIPT_TEST_MARKER_RE = re.compile(r"\.(?:test|spec)\.")
TESTS_DIR = "__tests__"


def relative_posix(path: str, root: str) -> str:
    return Path(os.path.relpath(path, root)).as_posix()


def package_dir_of(rel_path: str) -> str:
    return posixpath.dirname(rel_path) or "."


def read_test_scenarios(abs_path: str, language: str) -> List[str]:
    """Collect test names (Go) or it/test/describe titles (scripts) from a test file."""
    try:
        source = Path(abs_path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning(f"Error reading test file {abs_path}: {e}")
        return []

    if language == "go":
        return GO_TEST_FUNC_RE.findall(source)
    return [title for _, title in SCRIPT_SCENARIO_RE.findall(source)]


def subject_candidates(test_path: str, language: str) -> List[str]:
    """Repo-relative source paths a test file most likely covers, best first.

    Args:
        test_path: Repo-relative path of the test file
        language: Language of the test file

    Returns:
        Candidate source file paths
    """
    directory, name = posixpath.split(test_path)

    if language == "go":
        if name.endswith("_test.go"):
            return [posixpath.join(directory, name[: -len("_test.go")] + ".go")]
        return []

    match = SCRIPT_TEST_MARKER_RE.search(name)
    if not match:
        return []
    stem = name[: match.start()]
    extension = posixpath.splitext(name)[1]

    directories = [directory]
    if posixpath.basename(directory) == TESTS_DIR:
        directories.append(posixpath.dirname(directory))

    candidates = []
    extensions = [extension] + [e for e in (".ts", ".tsx", ".js", ".jsx", ".astro") if e != extension]
    for base in directories:
        for ext in extensions:
            candidates.append(posixpath.join(base, stem + ext))
    return candidates


class OutlineIndexer:
    """Index a source tree into an Outline."""

    def __init__(
        self,
        script_parser: str = "regex",
        source_alias: str = DEFAULT_SOURCE_ALIAS,
        source_root: str = DEFAULT_SOURCE_ROOT,
        risk_medium_threshold: int = DEFAULT_RISK_MEDIUM,
        risk_high_threshold: int = DEFAULT_RISK_HIGH,
        follow_gitignore: bool = True,
        exclude_patterns: Optional[List[str]] = None,
        languages: Optional[LanguageRegistry] = None,
    ):
        """Initialize indexer.

        Args:
            script_parser: "regex" or "treesitter" for JavaScript / TypeScript
            source_alias: Import prefix standing for the frontend source root
            source_root: Directory the alias maps to
            risk_medium_threshold: Dependent count above which risk is medium
            risk_high_threshold: Dependent count above which risk is high
            follow_gitignore: Whether the default ignore filter reads .gitignore files
            exclude_patterns: Extra glob patterns for the default ignore filter
            languages: Language registry (defaults to the global instance)
        """
        self.languages = languages or get_language_registry()
        self.extractors = ExtractorRegistry(script_parser, source_alias, self.languages)
        self.source_alias = source_alias
        self.source_root = source_root
        self.risk_medium_threshold = risk_medium_threshold
        self.risk_high_threshold = risk_high_threshold
        self.follow_gitignore = follow_gitignore
        self.exclude_patterns = list(exclude_patterns or [])

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "OutlineIndexer":
        """Build an indexer from a get_env_config() dict."""
        return cls(
            script_parser=config.get("script_parser", "regex"),
            source_alias=config.get("source_alias", DEFAULT_SOURCE_ALIAS),
            source_root=config.get("source_root", DEFAULT_SOURCE_ROOT),
            risk_medium_threshold=config.get("risk_medium_threshold", DEFAULT_RISK_MEDIUM),
            risk_high_threshold=config.get("risk_high_threshold", DEFAULT_RISK_HIGH),
            follow_gitignore=config.get("follow_gitignore", True),
            exclude_patterns=config.get("exclude_patterns"),
        )

    def index(self, root: str, should_ignore: Optional[IgnorePredicate] = None) -> Outline:
        """Index everything under root.

        Args:
            root: Directory to scan, or a single source file
            should_ignore: Predicate on absolute paths; defaults to an IgnoreFilter

        Returns:
            Fully resolved outline

        Raises:
            FileNotFoundError: If root does not exist
            OSError: If root cannot be read
        """
        root_abs = os.path.abspath(root)
        if not os.path.exists(root_abs):
            raise FileNotFoundError(f"Scan root does not exist: {root}")

        single_file = os.path.isfile(root_abs)
        scan_dir = os.path.dirname(root_abs) if single_file else root_abs
        if not single_file:
            # Surface permission problems on the root itself
            os.listdir(scan_dir)

        if should_ignore is None:
            should_ignore = IgnoreFilter(scan_dir, self.follow_gitignore, self.exclude_patterns)

        logger.info(f"Indexing {root_abs}")

        outline = Outline(root=scan_dir)
        outline.set_modules(ModuleDetector(scan_dir).detect_modules())

        test_files: List[Tuple[str, str, str]] = []
        paths = [root_abs] if single_file else self._walk(scan_dir, should_ignore)
        for abs_path in paths:
            self._process_file(abs_path, scan_dir, outline, test_files)

        outline.complete_extraction()
        resolve_dependencies(outline, self.source_alias, self.source_root)

        self._associate_tests(outline, test_files)
        outline.remove_duplicates()
        ImpactAnalyzer(
            outline, self.risk_medium_threshold, self.risk_high_threshold
        ).compute_all()

        logger.info(
            f"Indexed {len(outline.files)} files ({len(outline.types)} types, "
            f"{len(outline.packages)} packages, {len(outline.skipped_tests)} test files skipped)"
        )
        return outline

    def _walk(self, scan_dir: str, should_ignore: IgnorePredicate):
        def on_error(error: OSError) -> None:
            logger.warning(f"Cannot read directory {error.filename}: {error}")

        for dirpath, dirnames, filenames in os.walk(scan_dir, onerror=on_error):
            dirnames[:] = sorted(
                d for d in dirnames if not should_ignore(os.path.join(dirpath, d))
            )
            for filename in sorted(filenames):
                abs_path = os.path.join(dirpath, filename)
                if should_ignore(abs_path):
                    logger.debug(f"Ignored {abs_path}")
                    continue
                yield abs_path

    def _process_file(
        self,
        abs_path: str,
        scan_dir: str,
        outline: Outline,
        test_files: List[Tuple[str, str, str]],
    ) -> None:
        language = self.languages.detect_language(abs_path)
        if language is None:
            return

        rel_path = relative_posix(abs_path, scan_dir)
        if self.languages.is_test_file(abs_path):
            outline.skipped_tests.append(rel_path)
            test_files.append((rel_path, abs_path, language))
            logger.debug(f"Skipping test file {rel_path}")
            return

        extractor = self.extractors.extractor_for_file(abs_path)
        if extractor is None:
            logger.debug(f"No extractor for {rel_path}")
            return

        module = owning_module(outline.modules, abs_path)
        record = outline.add_file(
            rel_path,
            abs_path=abs_path,
            language=language,
            module=module.mod_path if module else "",
            package_dir=package_dir_of(rel_path),
        )
        logger.debug(f"Extracting {rel_path} ({language})")
        extractor.extract(record, outline)

    def _associate_tests(self, outline: Outline, test_files: List[Tuple[str, str, str]]) -> None:
        """Attach skipped test files and their scenarios to the files they cover."""
        for test_path, abs_path, language in test_files:
            targets = []
            for candidate in subject_candidates(test_path, language):
                if candidate in outline.files:
                    targets.append(candidate)
                    break

            if not targets and language == "go":
                # Fall back to every Go file of the package
                targets = [
                    path
                    for path in outline.files_in_package(package_dir_of(test_path))
                    if outline.files[path].language == "go"
                ]

            if not targets:
                logger.debug(f"No source file found for test {test_path}")
                continue

            scenarios = read_test_scenarios(abs_path, language)
            for target in targets:
                record = outline.files[target]
                if record.test_coverage is None:
                    record.test_coverage = TestInfo()
                coverage = record.test_coverage
                if test_path not in coverage.test_files:
                    coverage.test_files.append(test_path)
                for scenario in scenarios:
                    if scenario not in coverage.test_scenarios:
                        coverage.test_scenarios.append(scenario)


def process_root(
    root: str,
    should_ignore: Optional[IgnorePredicate] = None,
    config: Optional[Dict[str, Any]] = None,
) -> Outline:
    """Index root and return the resolved outline.

    Args:
        root: Directory (or single file) to index
        should_ignore: Optional ignore predicate on absolute paths
        config: Optional get_env_config() dict; defaults apply otherwise

    Returns:
        Resolved outline with impact analysis applied
    """
    indexer = OutlineIndexer.from_config(config) if config else OutlineIndexer()
    return indexer.index(root, should_ignore)
