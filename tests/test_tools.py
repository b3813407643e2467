"""Tests for the outline and change-impact tools."""

from pathlib import Path

import pytest

from codebrev.config import get_env_config
from codebrev.indexer.processor import OutlineIndexer
from codebrev.tools.impact_tool import ImpactTool
from codebrev.tools.outline_tool import OutlineTool

GO_PROJECT = {
    "go.mod": "module m\n",
    "a.go": 'package main\n\nimport "m/b"\n\nfunc main() {\n\tb.F(b.Item{})\n}\n',
    "b/b.go": "package b\n\ntype Item struct {\n\tName string\n}\n\nfunc F(i Item) {}\n",
}


@pytest.fixture
def tools(make_project):
    root = make_project(GO_PROJECT)
    outline_tool = OutlineTool(OutlineIndexer())
    impact_tool = ImpactTool(outline_tool, medium_threshold=3, high_threshold=10)
    result = outline_tool.index_repository(str(root))
    assert result["success"]
    return outline_tool, impact_tool


def test_queries_before_indexing():
    outline_tool = OutlineTool(OutlineIndexer())
    impact_tool = ImpactTool(outline_tool, medium_threshold=3, high_threshold=10)

    assert outline_tool.get_file_outline("a.go") == {"success": False, "error": "No repository indexed yet"}
    assert not impact_tool.get_change_impact("a.go")["success"]


def test_index_repository_reports_counts(make_project):
    root = make_project(GO_PROJECT)
    result = OutlineTool(OutlineIndexer()).index_repository(str(root))

    assert result["success"]
    assert result["files"] == 2
    assert result["packages"] == 2
    assert result["modules"] == ["m"]
    assert result["test_files"] == 0


def test_index_missing_root_returns_error(temp_dir: Path):
    result = OutlineTool(OutlineIndexer()).index_repository(str(temp_dir / "missing"))

    assert not result["success"]
    assert "does not exist" in result["error"]


def test_file_and_type_queries(tools):
    outline_tool, _ = tools

    file_result = outline_tool.get_file_outline("b/b.go")
    assert file_result["success"]
    assert file_result["file"]["exported_funcs"] == ["F"]
    assert file_result["dependents"] == ["a.go"]

    type_result = outline_tool.get_type_info("Item")
    assert type_result["type"]["fields"] == ["Name string"]

    assert not outline_tool.get_file_outline("nope.go")["success"]
    assert not outline_tool.get_type_info("Nope")["success"]


def test_dependency_queries(tools):
    outline_tool, _ = tools

    file_deps = outline_tool.get_dependencies("a.go")
    assert file_deps["dependencies"] == ["b/b.go"]

    package_deps = outline_tool.get_dependencies(".", package=True)
    assert package_deps["dependencies"] == ["b"]
    assert package_deps["edge_stats"]["b"]["imports"] == 1


def test_public_api_query(tools):
    outline_tool, _ = tools

    result = outline_tool.get_public_api("b/b.go")

    assert result["public_api"] == {"b/b.go": ["type:Item", "F"]}
    assert result["total_entries"] == 2


def test_change_impact_query(tools):
    _, impact_tool = tools

    result = impact_tool.get_change_impact("b/b.go")
    assert result["success"]
    assert result["direct_dependents"] == ["a.go"]
    assert result["risk_level"] == "low"

    refreshed = impact_tool.get_change_impact("b", package=True, refresh=True)
    assert refreshed["direct_dependents"] == ["."]

    assert impact_tool.get_change_impact("x.go")["error"] == "Unknown file: x.go"
    assert impact_tool.get_change_impact("x", package=True)["error"] == "Unknown package: x"


def test_write_report(tools, temp_dir: Path):
    outline_tool, _ = tools
    target = temp_dir / "report.md"

    result = outline_tool.write_report(str(target))

    assert result == {"success": True, "output_path": str(target)}
    assert "### b/b.go" in target.read_text(encoding="utf-8")


def test_env_config(monkeypatch):
    """Environment variables override defaults; unknown parsers fall back to regex."""
    monkeypatch.setenv("CODEBREV_SCRIPT_PARSER", "wasm")
    monkeypatch.setenv("CODEBREV_RISK_HIGH", "20")
    monkeypatch.setenv("CODEBREV_FOLLOW_GITIGNORE", "false")
    monkeypatch.setenv("CODEBREV_EXCLUDE_PATTERNS", "gen, *.pb.go")

    config = get_env_config()

    assert config["script_parser"] == "regex"
    assert config["risk_high_threshold"] == 20
    assert config["risk_medium_threshold"] == 3
    assert config["follow_gitignore"] is False
    assert config["exclude_patterns"] == ["gen", "*.pb.go"]
