"""Tests for the shared outline store."""

from codebrev.indexer.models import EdgeStat, FunctionRecord
from codebrev.indexer.outline import Outline


def test_add_dependency_is_idempotent():
    """Adding the same file edge twice keeps one entry in each direction."""
    outline = Outline()
    outline.add_dependency("a.ts", "b.ts")
    outline.add_dependency("a.ts", "b.ts")

    assert outline.get_dependencies("a.ts") == ["b.ts"]
    assert outline.get_reverse_dependencies("b.ts") == ["a.ts"]


def test_package_dependency_is_idempotent():
    """Package edges are deduplicated and mirrored as well."""
    outline = Outline()
    outline.add_package_dependency("api", "store")
    outline.add_package_dependency("api", "store")

    assert outline.get_dependencies("api", package=True) == ["store"]
    assert outline.get_reverse_dependencies("store", package=True) == ["api"]


def test_reverse_edges_mirror_forward_edges():
    """Every forward edge has its inverse after an arbitrary insertion sequence."""
    outline = Outline()
    edges = [("a", "b"), ("b", "c"), ("c", "a"), ("a", "c"), ("b", "c"), ("d", "a")]
    for from_file, to_file in edges:
        outline.add_dependency(from_file, to_file)

    for from_file, targets in outline.dependencies.items():
        for to_file in targets:
            assert from_file in outline.reverse_deps[to_file]
    for to_file, sources in outline.reverse_deps.items():
        for from_file in sources:
            assert to_file in outline.dependencies[from_file]


def test_reverse_edges_only_written_through_add_dependency():
    """The reverse index has no public writer of its own."""
    outline = Outline()
    outline.add_dependency("a", "b")

    assert not hasattr(outline, "add_reverse_dependency")
    assert outline.get_reverse_dependencies("b") == ["a"]
    assert outline.get_reverse_dependencies("a") == []


def test_insertion_order_is_kept():
    """Adjacency lists are insertion ordered, not sorted."""
    outline = Outline()
    outline.add_dependency("a", "z")
    outline.add_dependency("a", "m")

    assert outline.get_dependencies("a") == ["z", "m"]


def test_edge_stats_accumulate():
    """EdgeStat counters add up per directed package edge."""
    outline = Outline()
    outline.add_package_edge_stat("api", "store", EdgeStat(imports=1))
    outline.add_package_edge_stat("api", "store", EdgeStat(calls=2, type_uses=1))

    stat = outline.get_edge_stat("api", "store")
    assert (stat.imports, stat.calls, stat.type_uses) == (1, 2, 1)
    assert stat.total == 4
    assert outline.get_edge_stat("store", "api") is None


def test_type_usage_creates_type_lazily():
    """Usage recorded before the declaration still lands on the type record."""
    outline = Outline()
    outline.add_type_usage("User", "b.go:Load")

    declared = outline.ensure_type("User")
    declared.fields.append("ID int")

    assert outline.get_type("User").used_by == ["b.go:Load"]
    assert outline.get_type("User").fields == ["ID int"]
    assert outline.type_usage["User"] == ["b.go:Load"]


def test_add_file_returns_existing_record():
    """Registering a path twice keeps the first record."""
    outline = Outline()
    first = outline.add_file("a.go", "/repo/a.go", "go")
    second = outline.add_file("a.go", "/other/a.go", "go")

    assert first is second
    assert outline.list_files() == ["a.go"]


def test_remove_duplicates_keeps_functions():
    """Duplicate type and var names are dropped, overloaded functions are kept."""
    outline = Outline()
    record = outline.add_file("a.ts", language="typescript")
    record.types = ["A", "B", "A"]
    record.vars = ["X", "X"]
    record.functions = [FunctionRecord(name="f"), FunctionRecord(name="f")]

    outline.remove_duplicates()

    assert record.types == ["A", "B"]
    assert record.vars == ["X"]
    assert len(record.functions) == 2


def test_public_api_grouped_by_sorted_file():
    """Public API entries are grouped per file with files sorted."""
    outline = Outline()
    outline.add_public_api("z.go", "Run")
    outline.add_public_api("a.go", "type:Config")
    outline.add_public_api("a.go", "type:Config")

    assert outline.public_api_by_file() == {"a.go": ["type:Config"], "z.go": ["Run"]}
