"""Language detection and test-file recognition driven by config/languages.json."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGES_FILE = Path(__file__).parent.parent.parent / "config" / "languages.json"


@dataclass
class LanguageConfig:
    """One entry of languages.json."""

    name: str
    extensions: List[str]
    extractor: str  # extractor kind: go, javascript, typescript, astro
    tree_sitter_language: Optional[str] = None
    test_patterns: List[str] = field(default_factory=list)

    def is_test_file(self, file_name: str) -> bool:
        """Check a base name against the test markers.

        A marker starting with "_" is a required suffix ("_test.go"); a
        marker wrapped in dots (".test.") may appear anywhere in the name.
        """
        for marker in self.test_patterns:
            if marker.startswith("_") and file_name.endswith(marker):
                return True
            if marker.startswith(".") and marker.endswith(".") and marker in file_name:
                return True
        return False


class LanguageRegistry:
    """Maps file extensions to language configurations."""

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize language registry.

        Args:
            config_path: languages.json to load (defaults to the repository copy)
        """
        self.config_path = config_path or DEFAULT_LANGUAGES_FILE
        self.languages: Dict[str, LanguageConfig] = {}
        self.extension_map: Dict[str, str] = {}
        self._load()

    def _load(self) -> None:
        try:
            entries = json.loads(Path(self.config_path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error(f"Cannot load language config {self.config_path}: {e}")
            raise

        for name, entry in entries.items():
            language = LanguageConfig(name=name, **entry)
            self.languages[name] = language
            for extension in language.extensions:
                self.extension_map[extension] = name

        logger.debug(
            f"Loaded {len(self.languages)} languages covering {sorted(self.extension_map)}"
        )

    def detect_language(self, file_path: str) -> Optional[str]:
        """Return the language name for a path, or None for unsupported extensions."""
        return self.extension_map.get(Path(file_path).suffix.lower())

    def get_language_config(self, language: str) -> Optional[LanguageConfig]:
        return self.languages.get(language)

    def get_supported_extensions(self) -> List[str]:
        return list(self.extension_map)

    def is_supported_file(self, file_path: str) -> bool:
        return self.detect_language(file_path) is not None

    def is_test_file(self, file_path: str) -> bool:
        """Check whether a supported file is a test file of its language.

        Args:
            file_path: Path to the file

        Returns:
            False for unsupported files and for ordinary sources
        """
        language = self.detect_language(file_path)
        if language is None:
            return False
        return self.languages[language].is_test_file(Path(file_path).name)


_registry: Optional[LanguageRegistry] = None


def get_language_registry(config_path: Optional[Path] = None) -> LanguageRegistry:
    """Return the process-wide registry, loading it on first use.

    Args:
        config_path: languages.json to load (only honored on the first call)
    """
    global _registry
    if _registry is None:
        _registry = LanguageRegistry(config_path)
    return _registry
