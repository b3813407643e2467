"""Lazily created tree-sitter parsers, one per grammar."""

import logging
from typing import Any, Dict, Optional

import tree_sitter_go as tsgo
import tree_sitter_javascript as tsjavascript
import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Parser

logger = logging.getLogger(__name__)

# Grammar name -> python module providing it
LANGUAGE_MODULES = {
    "go": tsgo,
    "javascript": tsjavascript,
    "typescript": tstypescript,
    "tsx": tstypescript,
}

# Modules that use non-standard language function names
LANGUAGE_FUNCTION_OVERRIDES = {
    "typescript": "language_typescript",
    "tsx": "language_tsx",
}

_languages: Dict[str, Language] = {}
_parsers: Dict[str, Parser] = {}


def get_language(grammar: str) -> Optional[Language]:
    """Get (and cache) the tree-sitter language for a grammar name.

    Args:
        grammar: Grammar name (go, javascript, typescript, tsx)

    Returns:
        Language or None if the grammar is unknown or fails to load
    """
    if grammar in _languages:
        return _languages[grammar]

    module = LANGUAGE_MODULES.get(grammar)
    if not module:
        logger.warning(f"No module found for grammar: {grammar}")
        return None

    lang_func_name = LANGUAGE_FUNCTION_OVERRIDES.get(grammar, "language")
    lang_func = getattr(module, lang_func_name, None)
    if not lang_func:
        logger.warning(f"Module for {grammar} has no function '{lang_func_name}'")
        return None

    try:
        language = Language(lang_func())
    except Exception as e:
        logger.error(f"Error initializing grammar {grammar}: {e}")
        return None

    _languages[grammar] = language
    logger.debug(f"Initialized grammar {grammar}")
    return language


def get_parser(grammar: str) -> Optional[Parser]:
    """Get (and cache) a parser for a grammar name."""
    if grammar in _parsers:
        return _parsers[grammar]

    language = get_language(grammar)
    if language is None:
        return None

    parser = Parser()
    parser.language = language
    _parsers[grammar] = parser
    return parser


def parse_source(grammar: str, source: bytes) -> Optional[Any]:
    """Parse source bytes and return the syntax tree.

    Args:
        grammar: Grammar name
        source: Source code

    Returns:
        Tree-sitter tree, or None if no parser is available
    """
    parser = get_parser(grammar)
    if parser is None:
        return None
    return parser.parse(source)


def node_text(node: Any) -> str:
    """Decode a node's source text."""
    if node is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def line_of(node: Any) -> int:
    """1-based line number of a node's first character."""
    return node.start_point[0] + 1
