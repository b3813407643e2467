"""FastMCP server exposing the code outline and change-impact queries."""

import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP

from .config import get_env_config
from .indexer.processor import OutlineIndexer
from .tools.impact_tool import ImpactTool
from .tools.outline_tool import OutlineTool

config = get_env_config()

# Configure logging
formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

console_handler = logging.StreamHandler()
console_handler.setLevel(config["log_level"])
console_handler.setFormatter(formatter)

root_logger = logging.getLogger()
root_logger.setLevel(config["log_level"])
root_logger.addHandler(console_handler)

if config["log_file"]:
    file_handler = logging.FileHandler(config["log_file"])
    file_handler.setLevel(config["log_level"])
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("codebrev")

outline_tool: Optional[OutlineTool] = None
impact_tool: Optional[ImpactTool] = None


def initialize_components() -> None:
    """Build the indexer and tools from the environment configuration."""
    global outline_tool, impact_tool

    logger.info("Initializing components...")
    indexer = OutlineIndexer.from_config(config)
    outline_tool = OutlineTool(indexer, include_diagrams=config["include_diagrams"])
    impact_tool = ImpactTool(
        outline_tool,
        medium_threshold=config["risk_medium_threshold"],
        high_threshold=config["risk_high_threshold"],
    )
    logger.info(f"Script parser: {config['script_parser']}")


@mcp.tool()
def index_repository(path: Optional[str] = None) -> dict:
    """Index a Go / JavaScript / TypeScript / Astro source tree.

    Args:
        path: Directory or file to index (defaults to CODEBREV_ROOT)

    Returns:
        Dictionary with file, type and package counts
    """
    if not outline_tool:
        return {"success": False, "error": "Server not initialized"}

    return outline_tool.index_repository(path or config["workspace_path"])


@mcp.tool()
def get_file_outline(file_path: str) -> dict:
    """Get functions, types, imports and dependencies extracted from a file.

    Args:
        file_path: Repo-relative path (e.g., "internal/api/server.go")

    Returns:
        Dictionary with the file record and its direct dependents
    """
    if not outline_tool:
        return {"success": False, "error": "Server not initialized"}

    return outline_tool.get_file_outline(file_path)


@mcp.tool()
def get_type_info(type_name: str) -> dict:
    """Get fields, methods, contract keys and usage locations of a type.

    Args:
        type_name: Type name (e.g., "User")

    Returns:
        Dictionary with the type record
    """
    if not outline_tool:
        return {"success": False, "error": "Server not initialized"}

    return outline_tool.get_type_info(type_name)


@mcp.tool()
def get_dependencies(key: str, package: bool = False) -> dict:
    """Get what a file or package depends on and what depends on it.

    Args:
        key: File path, or package directory when package is true
        package: Query the package graph instead of the file graph

    Returns:
        Dictionary with forward and reverse dependency lists
    """
    if not outline_tool:
        return {"success": False, "error": "Server not initialized"}

    return outline_tool.get_dependencies(key, package)


@mcp.tool()
def get_change_impact(key: str, package: bool = False, refresh: bool = False) -> dict:
    """Estimate the blast radius of changing a file or package.

    Args:
        key: File path, or package directory when package is true
        package: Use the package graph
        refresh: Recompute instead of returning the cached result

    Returns:
        Dictionary with direct/indirect dependents, risk level and affected tests
    """
    if not impact_tool:
        return {"success": False, "error": "Server not initialized"}

    return impact_tool.get_change_impact(key, package, refresh)


@mcp.tool()
def get_public_api(file_path: Optional[str] = None) -> dict:
    """List exported functions and types, grouped by file.

    Args:
        file_path: Restrict the listing to one file

    Returns:
        Dictionary mapping files to public API entries
    """
    if not outline_tool:
        return {"success": False, "error": "Server not initialized"}

    return outline_tool.get_public_api(file_path)


@mcp.tool()
def write_report(output_path: Optional[str] = None) -> dict:
    """Write the Markdown outline report of the indexed repository.

    Args:
        output_path: Destination file (defaults to CODEBREV_OUTPUT)

    Returns:
        Dictionary with the written path
    """
    if not outline_tool:
        return {"success": False, "error": "Server not initialized"}

    return outline_tool.write_report(output_path or config["output_path"])


@mcp.tool()
def health_check() -> dict:
    """Check server status.

    Returns:
        Dictionary with initialization and index state
    """
    indexed = outline_tool is not None and outline_tool.outline is not None
    return {
        "success": True,
        "initialized": outline_tool is not None,
        "indexed": indexed,
        "files": len(outline_tool.outline.files) if indexed else 0,
        "script_parser": config["script_parser"],
    }


if __name__ == "__main__":
    logger.info("Starting codebrev MCP Server...")

    initialize_components()

    logger.info("Server ready!")

    try:
        mcp.run()
    except KeyboardInterrupt:
        logger.info("Server interrupted")
    except Exception as e:
        logger.error(f"Server error: {e}")
        raise
