"""Environment-driven configuration."""

import os
from typing import Any, Dict, List

DEFAULT_OUTPUT = "codebrev.md"
DEFAULT_SOURCE_ALIAS = "~"
DEFAULT_SOURCE_ROOT = "src"

# Change-impact tiers: more than MEDIUM dependents is medium risk,
# more than HIGH is high risk.
DEFAULT_RISK_MEDIUM = 3
DEFAULT_RISK_HIGH = 10

SCRIPT_PARSERS = ("regex", "treesitter")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_list(name: str) -> List[str]:
    raw = os.getenv(name, "")
    return [p.strip() for p in raw.split(",") if p.strip()]


def get_env_config() -> Dict[str, Any]:
    """Get configuration from environment variables."""
    script_parser = os.getenv("CODEBREV_SCRIPT_PARSER", "regex").lower()
    if script_parser not in SCRIPT_PARSERS:
        script_parser = "regex"

    return {
        "workspace_path": os.getenv("CODEBREV_ROOT", "."),
        "output_path": os.getenv("CODEBREV_OUTPUT", DEFAULT_OUTPUT),
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "log_file": os.getenv("LOG_FILE"),
        "script_parser": script_parser,
        "source_alias": os.getenv("CODEBREV_SOURCE_ALIAS", DEFAULT_SOURCE_ALIAS),
        "source_root": os.getenv("CODEBREV_SOURCE_ROOT", DEFAULT_SOURCE_ROOT),
        "risk_medium_threshold": int(os.getenv("CODEBREV_RISK_MEDIUM", str(DEFAULT_RISK_MEDIUM))),
        "risk_high_threshold": int(os.getenv("CODEBREV_RISK_HIGH", str(DEFAULT_RISK_HIGH))),
        "follow_gitignore": _env_flag("CODEBREV_FOLLOW_GITIGNORE", "true"),
        "include_diagrams": _env_flag("CODEBREV_DIAGRAMS", "true"),
        "exclude_patterns": _env_list("CODEBREV_EXCLUDE_PATTERNS"),
    }
