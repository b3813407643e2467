"""Extractor selection by file extension."""

import logging
from typing import Dict, List, Optional

from ..config import DEFAULT_SOURCE_ALIAS
from .astro_extractor import AstroExtractor
from .extractors import FileExtractor
from .go_extractor import GoExtractor
from .grammars import LanguageRegistry, get_language_registry
from .script_extractor import JavaScriptExtractor, TypeScriptExtractor
from .treesitter_script import TreeSitterScriptExtractor

logger = logging.getLogger(__name__)


class ExtractorRegistry:
    """Registry of file extractors keyed by extractor kind."""

    def __init__(
        self,
        script_parser: str = "regex",
        alias_token: str = DEFAULT_SOURCE_ALIAS,
        languages: Optional[LanguageRegistry] = None,
    ):
        """Initialize extractor registry.

        Args:
            script_parser: "regex" or "treesitter" for JavaScript / TypeScript
            alias_token: Import prefix standing for the frontend source root
            languages: Language registry (defaults to the global instance)
        """
        self.languages = languages or get_language_registry()
        self.script_parser = script_parser

        if script_parser == "treesitter":
            javascript: FileExtractor = TreeSitterScriptExtractor("javascript", alias_token)
            typescript: FileExtractor = TreeSitterScriptExtractor("typescript", alias_token)
            astro_script = TreeSitterScriptExtractor("astro", alias_token)
        else:
            javascript = JavaScriptExtractor("javascript", alias_token)
            typescript = TypeScriptExtractor("typescript", alias_token)
            astro_script = TypeScriptExtractor("astro", alias_token)

        self._extractors: Dict[str, FileExtractor] = {
            "go": GoExtractor(),
            "javascript": javascript,
            "typescript": typescript,
            "astro": AstroExtractor(alias_token, astro_script),
        }
        logger.debug(f"Extractor registry ready ({script_parser} script parser)")

    def get_extractor(self, kind: str) -> Optional[FileExtractor]:
        """Get the extractor registered for a kind (go, javascript, typescript, astro)."""
        return self._extractors.get(kind)

    def register_extractor(self, kind: str, extractor: FileExtractor) -> None:
        """Register or replace the extractor for a kind.

        Args:
            kind: Extractor kind named in languages.json
            extractor: FileExtractor instance
        """
        self._extractors[kind] = extractor

    def get_supported_kinds(self) -> List[str]:
        return list(self._extractors.keys())

    def extractor_for_file(self, file_path: str) -> Optional[FileExtractor]:
        """Pick the extractor for a file from its extension.

        Args:
            file_path: Path to the file

        Returns:
            Extractor, or None for unsupported extensions
        """
        language = self.languages.detect_language(file_path)
        if language is None:
            return None
        config = self.languages.get_language_config(language)
        return self._extractors.get(config.extractor)
