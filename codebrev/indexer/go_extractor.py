"""Go extraction over the tree-sitter Go syntax tree."""

import logging
import re
from typing import Any, Dict, Iterator, List, Optional

from .extractors import FileExtractor
from .models import EdgeStat, FileRecord, FunctionRecord, TypeRecord
from .outline import Outline
from .parsers import line_of, node_text, parse_source
from .resolver import resolve_go_import

logger = logging.getLogger(__name__)

# Struct tag keys that describe an external contract surface
CONTRACT_TAG_KEYS = ("json", "form", "query", "header", "path", "param", "url")

# Router method names recognized as route registrations
ROUTE_VERBS = (
    "Get",
    "Post",
    "Put",
    "Patch",
    "Delete",
    "Head",
    "Options",
    "Route",
    "Mount",
    "Handle",
    "HandleFunc",
)

BUILTIN_TYPES = frozenset(
    [
        "any",
        "bool",
        "byte",
        "comparable",
        "complex64",
        "complex128",
        "error",
        "float32",
        "float64",
        "int",
        "int8",
        "int16",
        "int32",
        "int64",
        "rune",
        "string",
        "uint",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "uintptr",
    ]
)

_TAG_PAIR_RE = re.compile(r'(\w+):"((?:[^"\\]|\\.)*)"')

_WRAPPER_TYPES = ("pointer_type", "parenthesized_type")


def is_exported(name: str) -> bool:
    return bool(name) and name[0].isupper()


def unquote(literal: str) -> str:
    """Strip the quotes of an interpreted or raw Go string literal."""
    if len(literal) >= 2 and literal[0] == literal[-1] and literal[0] in ('"', "`"):
        return literal[1:-1]
    return literal


def parse_struct_tag(tag: str) -> Dict[str, str]:
    """Parse a struct tag body like `json:"id,omitempty" db:"id"`."""
    return {key: value for key, value in _TAG_PAIR_RE.findall(unquote(tag))}


def contract_keys_from_tag(field_name: str, tag: str) -> List[str]:
    """Contract keys ("json:user_id") declared by one struct field tag."""
    values = parse_struct_tag(tag)
    keys = []
    for key in CONTRACT_TAG_KEYS:
        raw = values.get(key)
        if not raw:
            continue
        name = raw.split(",")[0].strip()
        if name == "-":
            continue
        keys.append(f"{key}:{name or field_name}")
    return keys


def walk(node: Any) -> Iterator[Any]:
    """Pre-order traversal of a node and all of its descendants."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def compact(text: str) -> str:
    return " ".join(text.split())


def types_in_expr(node: Any) -> List[str]:
    """Named, non-builtin types referenced by a type expression."""
    if node is None:
        return []
    kind = node.type
    if kind == "type_identifier":
        name = node_text(node)
        return [] if name in BUILTIN_TYPES else [name]
    if kind == "qualified_type":
        return [node_text(node.child_by_field_name("name"))]
    if kind == "generic_type":
        found = types_in_expr(node.child_by_field_name("type"))
        arguments = node.child_by_field_name("type_arguments")
        if arguments is not None:
            for argument in arguments.named_children:
                found.extend(types_in_expr(argument))
        return found
    if kind in _WRAPPER_TYPES or kind in ("type_elem", "type_arguments"):
        found = []
        for child in node.named_children:
            found.extend(types_in_expr(child))
        return found
    if kind in ("slice_type", "array_type"):
        return types_in_expr(node.child_by_field_name("element"))
    if kind == "map_type":
        return types_in_expr(node.child_by_field_name("key")) + types_in_expr(
            node.child_by_field_name("value")
        )
    if kind == "channel_type":
        return types_in_expr(node.child_by_field_name("value"))
    return []


def local_packages_in_expr(node: Any, alias_to_pkg: Dict[str, str]) -> List[str]:
    """Local package directories referenced through pkg.Type in a type expression."""
    found: List[str] = []
    if node is None:
        return found
    for child in walk(node):
        if child.type != "qualified_type":
            continue
        alias = node_text(child.child_by_field_name("package"))
        package_dir = alias_to_pkg.get(alias)
        if package_dir is not None and package_dir not in found:
            found.append(package_dir)
    return found


def receiver_type_name(receiver: Any) -> str:
    """Base type name of a method receiver: (s *Server) and (s Stack[T]) give Server, Stack."""
    for param in receiver.named_children:
        if param.type != "parameter_declaration":
            continue
        node = param.child_by_field_name("type")
        while node is not None and node.type in _WRAPPER_TYPES:
            node = node.named_children[0] if node.named_children else None
        if node is None:
            break
        if node.type == "generic_type":
            node = node.child_by_field_name("type")
        return node_text(node)
    return "???"


class GoExtractor(FileExtractor):
    """Go extraction using tree-sitter."""

    def __init__(self):
        super().__init__("go")

    def extract_source(self, source: str, record: FileRecord, outline: Outline) -> None:
        tree = parse_source("go", source.encode("utf-8"))
        if tree is None:
            logger.warning(f"No Go parser available, skipping {record.path}")
            return

        root = tree.root_node
        if root.has_error:
            logger.warning(f"Syntax errors in {record.path}, extracting best-effort")

        alias_to_pkg: Dict[str, str] = {}
        for child in root.named_children:
            kind = child.type
            if kind == "package_clause":
                for name_node in child.named_children:
                    record.package_name = node_text(name_node)
            elif kind == "import_declaration":
                self._extract_imports(child, record, outline, alias_to_pkg)
            elif kind == "type_declaration":
                self._extract_type_declaration(child, record, outline)
            elif kind in ("var_declaration", "const_declaration"):
                self._extract_values(child, record)
            elif kind == "function_declaration":
                self._extract_function(child, record, outline, alias_to_pkg)
            elif kind == "method_declaration":
                self._extract_method(child, record, outline, alias_to_pkg)

        for node in walk(root):
            if node.type == "call_expression":
                route = self._route_from_call(node)
                if route and route not in record.routes:
                    record.routes.append(route)

    # ------------------------------------------------------------------
    # Imports
    # ------------------------------------------------------------------

    def _extract_imports(
        self,
        declaration: Any,
        record: FileRecord,
        outline: Outline,
        alias_to_pkg: Dict[str, str],
    ) -> None:
        for spec in walk(declaration):
            if spec.type != "import_spec":
                continue
            import_path = unquote(node_text(spec.child_by_field_name("path")))
            if not import_path:
                continue
            record.imports.append(import_path)

            name_node = spec.child_by_field_name("name")
            alias = node_text(name_node) if name_node is not None else import_path.rsplit("/", 1)[-1]

            package_dir = resolve_go_import(outline.module_paths, import_path)
            if package_dir is None:
                continue
            if package_dir not in record.local_pkg_deps:
                record.local_pkg_deps.append(package_dir)
            alias_to_pkg[alias] = package_dir
            outline.add_package_dependency(record.package_dir, package_dir)
            outline.add_package_edge_stat(record.package_dir, package_dir, EdgeStat(imports=1))

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def _extract_type_declaration(self, declaration: Any, record: FileRecord, outline: Outline) -> None:
        for spec in declaration.named_children:
            if spec.type not in ("type_spec", "type_alias"):
                continue
            name = node_text(spec.child_by_field_name("name"))
            if not name:
                continue

            record.types.append(name)
            type_record = outline.ensure_type(name)
            type_record.is_public = is_exported(name)
            type_record.line_number = line_of(spec)
            if record.path not in type_record.declared_in:
                type_record.declared_in.append(record.path)

            if type_record.is_public:
                if name not in record.exported_types:
                    record.exported_types.append(name)
                outline.add_public_api(record.path, f"type:{name}")

            body = spec.child_by_field_name("type")
            if body is None:
                continue
            if body.type == "struct_type":
                self._extract_struct(body, type_record)
            elif body.type == "interface_type":
                self._extract_interface(body, type_record)

    def _extract_struct(self, struct: Any, type_record: TypeRecord) -> None:
        for field_decl in _children_of(struct, "field_declaration_list"):
            if field_decl.type != "field_declaration":
                continue
            type_node = field_decl.child_by_field_name("type")
            names = [node_text(n) for n in field_decl.children_by_field_name("name")]

            if not names:
                for embedded in types_in_expr(type_node):
                    _append(type_record.embedded_types, embedded)
                continue

            type_text = compact(node_text(type_node))
            tag_node = field_decl.child_by_field_name("tag")
            for field_name in names:
                _append(type_record.fields, f"{field_name} {type_text}".strip())
                if tag_node is not None:
                    for key in contract_keys_from_tag(field_name, node_text(tag_node)):
                        _append(type_record.contract_keys, key)

    def _extract_interface(self, interface: Any, type_record: TypeRecord) -> None:
        for element in interface.named_children:
            if element.type in ("method_elem", "method_spec"):
                _append(type_record.methods, node_text(element.child_by_field_name("name")))
            elif element.type in ("type_elem", "constraint_elem", "interface_type_name"):
                for embedded in types_in_expr(element):
                    _append(type_record.embedded_types, embedded)
            elif element.type in ("type_identifier", "qualified_type"):
                for embedded in types_in_expr(element):
                    _append(type_record.embedded_types, embedded)

    def _extract_values(self, declaration: Any, record: FileRecord) -> None:
        for spec in _children_of(declaration, "var_spec_list"):
            if spec.type not in ("var_spec", "const_spec"):
                continue
            for name_node in spec.children_by_field_name("name"):
                name = node_text(name_node)
                if name and name != "_":
                    record.vars.append(name)

    # ------------------------------------------------------------------
    # Functions
    # ------------------------------------------------------------------

    def _extract_function(
        self,
        declaration: Any,
        record: FileRecord,
        outline: Outline,
        alias_to_pkg: Dict[str, str],
    ) -> None:
        function = self._function_record(declaration, node_text(declaration.child_by_field_name("name")))
        record.functions.append(function)

        if function.is_public:
            if function.name not in record.exported_funcs:
                record.exported_funcs.append(function.name)
            outline.add_public_api(record.path, function.name)

        self._record_usage(function, record, outline)
        self._record_coupling(declaration, record, outline, alias_to_pkg)

    def _extract_method(
        self,
        declaration: Any,
        record: FileRecord,
        outline: Outline,
        alias_to_pkg: Dict[str, str],
    ) -> None:
        method_name = node_text(declaration.child_by_field_name("name"))
        receiver = declaration.child_by_field_name("receiver")
        receiver_name = receiver_type_name(receiver) if receiver is not None else "???"

        type_record = outline.ensure_type(receiver_name)
        type_record.is_public = is_exported(receiver_name)
        _append(type_record.methods, method_name)

        function = self._function_record(declaration, method_name)
        function.name = f"({receiver_name}) {method_name}"
        record.functions.append(function)

        self._record_usage(function, record, outline)
        self._record_coupling(declaration, record, outline, alias_to_pkg)

    def _function_record(self, declaration: Any, name: str) -> FunctionRecord:
        function = FunctionRecord(
            name=name,
            is_public=is_exported(name),
            line_number=line_of(declaration),
        )

        parameters = declaration.child_by_field_name("parameters")
        if parameters is not None:
            for param in parameters.named_children:
                if param.type not in ("parameter_declaration", "variadic_parameter_declaration"):
                    continue
                type_node = param.child_by_field_name("type")
                type_text = compact(node_text(type_node))
                if param.type == "variadic_parameter_declaration":
                    type_text = "..." + type_text
                function.uses_types.extend(types_in_expr(type_node))

                names = [node_text(n) for n in param.children_by_field_name("name")]
                if names:
                    function.params.extend(f"{n} {type_text}" for n in names)
                else:
                    function.params.append(type_text)

        result = declaration.child_by_field_name("result")
        if result is not None:
            if result.type == "parameter_list":
                result_types = []
                for param in result.named_children:
                    type_node = param.child_by_field_name("type")
                    if type_node is None:
                        continue
                    result_types.append(compact(node_text(type_node)))
                    function.uses_types.extend(types_in_expr(type_node))
                function.return_type = ", ".join(result_types)
            else:
                function.return_type = compact(node_text(result))
                function.uses_types.extend(types_in_expr(result))

        body = declaration.child_by_field_name("body")
        if body is not None:
            for node in walk(body):
                if node.type == "call_expression":
                    callee = self._callee_name(node)
                    if callee:
                        function.calls_to.append(callee)
                elif node.type in ("composite_literal", "type_assertion_expression"):
                    function.uses_types.extend(types_in_expr(node.child_by_field_name("type")))

        function.calls_to = list(dict.fromkeys(function.calls_to))
        function.uses_types = list(dict.fromkeys(function.uses_types))
        return function

    @staticmethod
    def _callee_name(call: Any) -> Optional[str]:
        target = call.child_by_field_name("function")
        if target is None:
            return None
        if target.type == "identifier":
            return node_text(target)
        if target.type == "selector_expression":
            return node_text(target.child_by_field_name("field"))
        return None

    @staticmethod
    def _record_usage(function: FunctionRecord, record: FileRecord, outline: Outline) -> None:
        location = f"{record.path}:{function.name}"
        for callee in function.calls_to:
            outline.add_function_call(location, callee)
        for type_name in function.uses_types:
            outline.add_type_usage(type_name, location)

    def _record_coupling(
        self,
        declaration: Any,
        record: FileRecord,
        outline: Outline,
        alias_to_pkg: Dict[str, str],
    ) -> None:
        """Count cross-package type uses in the signature and calls in the body."""
        if not alias_to_pkg:
            return
        from_pkg = record.package_dir

        for field_name in ("parameters", "result"):
            node = declaration.child_by_field_name(field_name)
            if node is None:
                continue
            entries = node.named_children if node.type == "parameter_list" else [node]
            for entry in entries:
                type_node = entry.child_by_field_name("type") if entry.type.endswith(
                    "parameter_declaration"
                ) else entry
                for to_pkg in local_packages_in_expr(type_node, alias_to_pkg):
                    outline.add_package_dependency(from_pkg, to_pkg)
                    outline.add_package_edge_stat(from_pkg, to_pkg, EdgeStat(type_uses=1))

        body = declaration.child_by_field_name("body")
        if body is None:
            return
        for node in walk(body):
            if node.type != "call_expression":
                continue
            target = node.child_by_field_name("function")
            if target is None or target.type != "selector_expression":
                continue
            operand = target.child_by_field_name("operand")
            if operand is None or operand.type != "identifier":
                continue
            to_pkg = alias_to_pkg.get(node_text(operand))
            if to_pkg is None:
                continue
            outline.add_package_dependency(from_pkg, to_pkg)
            outline.add_package_edge_stat(from_pkg, to_pkg, EdgeStat(calls=1))

    # ------------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------------

    @staticmethod
    def _route_from_call(call: Any) -> Optional[str]:
        """Route string for router-style calls such as r.Get("/users", handler)."""
        target = call.child_by_field_name("function")
        if target is None or target.type != "selector_expression":
            return None
        method = node_text(target.child_by_field_name("field"))
        if method not in ROUTE_VERBS:
            return None

        arguments = call.child_by_field_name("arguments")
        if arguments is None:
            return None
        args = [a for a in arguments.named_children if a.type != "comment"]
        # http.Header.Get("X") and friends take a single argument
        if len(args) < 2:
            return None
        if args[0].type not in ("interpreted_string_literal", "raw_string_literal"):
            return None
        path = unquote(node_text(args[0]))
        if not path:
            return None
        return f"{method.upper()} {path}"


def _append(values: List[str], value: str) -> None:
    if value and value not in values:
        values.append(value)


def _children_of(node: Any, list_type: str) -> Iterator[Any]:
    """Named children of node, flattening one level of list_type wrappers."""
    for child in node.named_children:
        if child.type == list_type:
            yield from child.named_children
        else:
            yield child
