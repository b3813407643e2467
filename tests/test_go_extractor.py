"""Tests for the tree-sitter Go extractor."""

from codebrev.indexer.go_extractor import (
    GoExtractor,
    contract_keys_from_tag,
    parse_struct_tag,
)
from codebrev.indexer.models import GoModule
from codebrev.indexer.outline import Outline


def _extract(outline: Outline, source: str, path: str = "internal/api/server.go", package_dir: str = "internal/api"):
    record = outline.add_file(path, abs_path="/repo/" + path, language="go", package_dir=package_dir)
    GoExtractor().extract_source(source, record, outline)
    return record


def test_struct_tag_parsing():
    tag = '`json:"user_id,omitempty" db:"user_id" form:"-"`'
    assert parse_struct_tag(tag) == {"json": "user_id,omitempty", "db": "user_id", "form": "-"}
    assert contract_keys_from_tag("UserID", tag) == ["json:user_id"]
    assert contract_keys_from_tag("Email", '`json:",omitempty"`') == ["json:Email"]


def test_package_imports_and_values(go_outline: Outline, sample_go_code: str):
    """Package name, imports and package-level names are recorded."""
    record = _extract(go_outline, sample_go_code)

    assert record.package_name == "api"
    assert record.imports == ["encoding/json", "net/http", "example.com/app/internal/store"]
    assert record.local_pkg_deps == ["internal/store"]
    assert record.vars == ["MaxUsers", "defaultTimeout"]


def test_struct_fields_and_contract_keys(go_outline: Outline, sample_go_code: str):
    """Struct fields, embedded types and tag-derived contract keys."""
    _extract(go_outline, sample_go_code)

    user = go_outline.get_type("User")
    assert user.is_public
    assert user.fields == ["ID int", "Name string", "Secret string", "Email string"]
    assert user.embedded_types == ["Base"]
    assert user.contract_keys == ["json:id", "json:name", "query:name", "json:Email"]
    assert user.declared_in == ["internal/api/server.go"]


def test_interface_methods_and_embeds(go_outline: Outline, sample_go_code: str):
    _extract(go_outline, sample_go_code)

    repository = go_outline.get_type("Repository")
    assert repository.methods == ["Find"]
    assert repository.embedded_types == ["Closer"]


def test_functions_and_methods(go_outline: Outline, sample_go_code: str):
    """Free functions and receiver methods with signatures and visibility."""
    record = _extract(go_outline, sample_go_code)
    functions = {f.name: f for f in record.functions}

    new_server = functions["NewServer"]
    assert new_server.params == ["db *store.DB", "addr string"]
    assert new_server.return_type == "*Server"
    assert new_server.is_public
    assert new_server.uses_types == ["DB", "Server"]

    routes = functions["(Server) Routes"]
    assert routes.calls_to == ["Get", "Post"]

    list_users = functions["(Server) listUsers"]
    assert not list_users.is_public
    assert "writeError" in list_users.calls_to
    assert "Count" in list_users.calls_to

    assert functions["helper"].uses_types == ["User"]
    assert go_outline.get_type("Server").methods == ["Routes", "listUsers"]
    assert record.exported_funcs == ["NewServer"]
    assert record.exported_types == ["User", "Repository", "Server"]


def test_public_api_and_type_usage(go_outline: Outline, sample_go_code: str):
    _extract(go_outline, sample_go_code)

    assert go_outline.public_apis["internal/api/server.go"] == [
        "type:User",
        "type:Repository",
        "type:Server",
        "NewServer",
    ]
    assert "internal/api/server.go:NewServer" in go_outline.get_type("DB").used_by
    assert "internal/api/server.go:helper" in go_outline.type_usage["User"]
    assert "string" not in go_outline.types
    assert "writeError" in go_outline.function_calls["internal/api/server.go:(Server) listUsers"]


def test_routes(go_outline: Outline, sample_go_code: str):
    """Router calls with a string path and a handler become routes."""
    record = _extract(go_outline, sample_go_code)

    assert record.routes == ["GET /users", "POST /users"]


def test_package_coupling(go_outline: Outline, sample_go_code: str):
    """Imports, selector calls and signature types count toward the package edge."""
    _extract(go_outline, sample_go_code)

    assert go_outline.get_dependencies("internal/api", package=True) == ["internal/store"]
    stat = go_outline.get_edge_stat("internal/api", "internal/store")
    assert stat.imports == 1
    assert stat.calls == 1
    assert stat.type_uses == 1


def test_generic_receiver_collapses_to_base_type():
    outline = Outline()
    source = """package ds

type Stack[T any] struct {
	items []T
}

func (s *Stack[T]) Push(v T) {
	s.items = append(s.items, v)
}
"""
    record = _extract(outline, source, path="ds/stack.go", package_dir="ds")

    assert outline.get_type("Stack").methods == ["Push"]
    assert record.functions[0].name == "(Stack) Push"


def test_aliased_import():
    """An import alias is used for coupling instead of the last path element."""
    outline = Outline()
    outline.set_modules([GoModule(dir_abs="/repo", dir_rel=".", mod_path="m")])
    source = """package main

import db "m/internal/storage"

func main() {
	db.Open()
}
"""
    _extract(outline, source, path="main.go", package_dir=".")

    stat = outline.get_edge_stat(".", "internal/storage")
    assert stat.imports == 1
    assert stat.calls == 1


def test_syntax_errors_are_best_effort():
    """Broken files still yield what the parser recovered."""
    outline = Outline()
    source = """package broken

func Good() int { return 1 }

func Bad( {
"""
    record = _extract(outline, source, path="broken.go", package_dir=".")

    assert record.package_name == "broken"
    assert "Good" in [f.name for f in record.functions]


def test_unreadable_file_leaves_empty_record(temp_dir):
    """Read failures are absorbed at the extractor boundary."""
    outline = Outline()
    record = outline.add_file("gone.go", abs_path=str(temp_dir / "gone.go"), language="go")

    GoExtractor().extract(record, outline)

    assert record.functions == []
    assert record.types == []
