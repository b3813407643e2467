"""Tests for the end-to-end indexing pipeline."""

import os
from pathlib import Path

import pytest

from codebrev.indexer.processor import (
    OutlineIndexer,
    package_dir_of,
    process_root,
    read_test_scenarios,
    subject_candidates,
)

GO_PROJECT = {
    "go.mod": "module m\n\ngo 1.22\n",
    "a.go": 'package main\n\nimport "m/b"\n\nfunc main() {\n\tb.F()\n}\n',
    "b/b.go": "package b\n\nfunc F() {}\n",
    "b/b_test.go": 'package b\n\nimport "testing"\n\nfunc TestF(t *testing.T) {}\n',
    "b/extra_test.go": 'package b\n\nimport "testing"\n\nfunc TestExtra(t *testing.T) {}\n',
    "gen/x.go": "package gen\n\nfunc X() {}\n",
}

TS_PROJECT = {
    "src/pages/index.tsx": (
        'import { Button } from "~/components/Button";\n'
        'import { format } from "./util";\n'
        "\n"
        "export const Page = () => <Button label={format(1)} />;\n"
    ),
    "src/pages/util.ts": "export function format(n: number): string {\n  return String(n);\n}\n",
    "src/components/Button.tsx": "export function Button(props: Props) {\n  return null;\n}\n",
    "src/components/Button.test.tsx": (
        'describe("Button", () => {\n  it("renders", () => {});\n});\n'
    ),
    "README.md": "# readme\n",
}


def test_package_dir_of():
    assert package_dir_of("main.go") == "."
    assert package_dir_of("internal/api/h.go") == "internal/api"


def test_subject_candidates():
    """Go tests map to their sibling; script tests also look above __tests__."""
    assert subject_candidates("pkg/a_test.go", "go") == ["pkg/a.go"]
    assert subject_candidates("README", "typescript") == []

    candidates = subject_candidates("src/__tests__/Button.test.tsx", "tsx")
    assert candidates[0] == "src/__tests__/Button.tsx"
    assert "src/Button.tsx" in candidates
    assert "src/Button.ts" in candidates


def test_read_test_scenarios(make_project):
    root = make_project(TS_PROJECT)
    path = str(root / "src/components/Button.test.tsx")

    assert read_test_scenarios(path, "tsx") == ["Button", "renders"]
    assert read_test_scenarios(str(root / "missing.test.ts"), "typescript") == []


def test_go_project_end_to_end(make_project):
    """Module imports resolve to package representatives and tests attach to sources."""
    root = make_project(GO_PROJECT)

    outline = process_root(str(root))

    assert sorted(outline.files) == ["a.go", "b/b.go", "gen/x.go"]
    assert outline.files["a.go"].local_deps == ["b/b.go"]
    assert outline.files["a.go"].module == "m"
    assert outline.get_reverse_dependencies("b/b.go") == ["a.go"]
    assert outline.files["b/b.go"].exported_funcs == ["F"]
    assert outline.get_dependencies(".", package=True) == ["b"]

    assert outline.skipped_tests == ["b/b_test.go", "b/extra_test.go"]
    coverage = outline.files["b/b.go"].test_coverage
    assert coverage.test_files == ["b/b_test.go", "b/extra_test.go"]
    assert coverage.test_scenarios == ["TestF", "TestExtra"]

    impact = outline.change_impact["b/b.go"]
    assert impact.direct_dependents == ["a.go"]
    assert impact.risk_level == "low"
    assert outline.resolved


def test_script_project_end_to_end(make_project):
    """Alias and relative imports resolve across the TypeScript tree."""
    root = make_project(TS_PROJECT)

    outline = process_root(str(root))

    page = outline.files["src/pages/index.tsx"]
    assert page.language == "tsx"
    assert page.local_deps == ["src/components/Button.tsx", "src/pages/util.ts"]
    assert outline.get_dependencies("src/pages", package=True) == ["src/components"]
    assert "README.md" not in outline.files

    coverage = outline.files["src/components/Button.tsx"].test_coverage
    assert coverage.test_files == ["src/components/Button.test.tsx"]
    assert coverage.test_scenarios == ["Button", "renders"]


def test_custom_ignore_predicate(make_project):
    root = make_project(GO_PROJECT)

    outline = OutlineIndexer().index(str(root), should_ignore=lambda p: os.path.basename(p) == "gen")

    assert "gen/x.go" not in outline.files
    assert "a.go" in outline.files


def test_gitignore_is_followed_by_default(make_project):
    root = make_project(dict(GO_PROJECT, **{".gitignore": "gen/\n"}))

    outline = process_root(str(root))

    assert "gen/x.go" not in outline.files


def test_single_file_root(make_project):
    """Indexing one file keeps paths relative to its directory."""
    root = make_project(GO_PROJECT)

    outline = process_root(str(root / "a.go"))

    assert list(outline.files) == ["a.go"]
    assert outline.files["a.go"].local_deps == []


def test_missing_root_raises(temp_dir: Path):
    with pytest.raises(FileNotFoundError):
        process_root(str(temp_dir / "nope"))


def test_config_selects_thresholds(make_project):
    """Thresholds from configuration flow into the impact pass."""
    root = make_project(GO_PROJECT)
    config = {"risk_medium_threshold": 0, "risk_high_threshold": 5}

    outline = process_root(str(root), config=config)

    assert outline.change_impact["b/b.go"].risk_level == "medium"


def test_unreadable_root_raises(make_project, monkeypatch):
    """A root directory that cannot be listed fails the run."""
    root = make_project(GO_PROJECT)
    real_listdir = os.listdir

    def listdir(path="."):
        if os.path.abspath(path) == os.path.abspath(str(root)):
            raise PermissionError(13, "Permission denied", path)
        return real_listdir(path)

    monkeypatch.setattr("codebrev.indexer.processor.os.listdir", listdir)

    with pytest.raises(PermissionError):
        process_root(str(root))


def test_go_import_of_mixed_directory(make_project):
    """Go imports of a directory that also holds scripts land on the Go file."""
    root = make_project(
        {
            "go.mod": "module m\n",
            "cmd/x.go": 'package main\n\nimport "m/web"\n\nfunc main() {\n\tweb.Serve()\n}\n',
            "web/embed.go": "package web\n\nfunc Serve() {}\n",
            "web/app.ts": "export function start(): void {}\n",
        }
    )

    outline = process_root(str(root))

    assert outline.files["cmd/x.go"].local_deps == ["web/embed.go"]
    assert outline.get_reverse_dependencies("web/embed.go") == ["cmd/x.go"]
    assert outline.get_reverse_dependencies("web/app.ts") == []
    assert outline.change_impact["web/embed.go"].direct_dependents == ["cmd/x.go"]
