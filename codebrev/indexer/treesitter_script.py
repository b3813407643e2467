"""Script extraction over tree-sitter JavaScript / TypeScript / TSX trees.

Selected with CODEBREV_SCRIPT_PARSER=treesitter. Produces the same
FileRecord shape as the regex extractor, with grammar-level accuracy for
declarations, calls and JSX usage.
"""

import logging
from pathlib import PurePosixPath
from typing import Any, List, Optional, Set

from ..config import DEFAULT_SOURCE_ALIAS
from .extractors import FileExtractor
from .go_extractor import walk
from .models import FileRecord, FunctionRecord, TypeRecord
from .outline import Outline
from .parsers import line_of, node_text, parse_source
from .resolver import is_local_script_import
from .script_extractor import (
    declare_script_type,
    is_meaningful_constant,
    parse_params,
    publish_exports,
    type_references,
)

logger = logging.getLogger(__name__)

GRAMMAR_BY_EXTENSION = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "tsx",
    ".astro": "typescript",
}

FUNCTION_NODES = ("function_declaration", "generator_function_declaration")
FUNCTION_VALUES = ("arrow_function", "function_expression", "function", "generator_function")
CLASS_NODES = ("class_declaration", "abstract_class_declaration", "class")
COMPONENT_TYPE_NAMES = ("FC", "FunctionComponent", "VFC", "Component")


def unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"`":
        return text[1:-1]
    return text


def strip_annotation(text: str) -> str:
    """Turn ": Foo" from a type_annotation node into "Foo"."""
    return " ".join(text.lstrip(":").split())


def callee_name(call: Any) -> Optional[str]:
    target = call.child_by_field_name("function")
    if target is None:
        return None
    if target.type in ("identifier", "import"):
        return node_text(target)
    if target.type == "member_expression":
        return node_text(target.child_by_field_name("property"))
    return None


class _Context:
    def __init__(self, record: FileRecord, outline: Outline, line_offset: int, keep_all_constants: bool):
        self.record = record
        self.outline = outline
        self.line_offset = line_offset
        self.keep_all_constants = keep_all_constants
        self.export_names: Set[str] = set()
        self.declared_types: List[str] = []

    def line(self, node: Any) -> int:
        return line_of(node) + self.line_offset


class TreeSitterScriptExtractor(FileExtractor):
    """JavaScript / TypeScript extraction using tree-sitter."""

    def __init__(self, language: str = "javascript", alias_token: str = DEFAULT_SOURCE_ALIAS):
        super().__init__(language)
        self.alias_token = alias_token

    def extract_source(self, source: str, record: FileRecord, outline: Outline) -> None:
        suffix = PurePosixPath(record.path).suffix
        self.extract_script(
            source,
            record,
            outline,
            jsx=suffix != ".ts",
            grammar=GRAMMAR_BY_EXTENSION.get(suffix, "javascript"),
        )

    def extract_script(
        self,
        source: str,
        record: FileRecord,
        outline: Outline,
        line_offset: int = 0,
        jsx: bool = True,
        keep_all_constants: bool = False,
        grammar: str = "typescript",
    ) -> None:
        """Extract declarations from script text into record.

        Args:
            source: Script source
            record: File record to populate
            outline: Shared outline
            line_offset: Added to line numbers (for embedded scripts)
            jsx: Whether to record JSX component usage
            keep_all_constants: Record every top-level const, not only meaningful ones
            grammar: Grammar to parse with (javascript, typescript, tsx)
        """
        tree = parse_source(grammar, source.encode("utf-8"))
        if tree is None:
            logger.warning(f"No {grammar} parser available, skipping {record.path}")
            return

        root = tree.root_node
        if root.has_error:
            logger.warning(f"Syntax errors in {record.path}, extracting best-effort")

        ctx = _Context(record, outline, line_offset, keep_all_constants)
        for child in root.named_children:
            self._declaration(child, ctx, exported=False)

        self._scan_tree(root, ctx, jsx)
        publish_exports(record, outline, ctx.export_names, ctx.declared_types)

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _declaration(self, node: Any, ctx: _Context, exported: bool) -> None:
        kind = node.type
        if kind == "import_statement":
            self._add_import(node.child_by_field_name("source"), ctx)
        elif kind == "export_statement":
            self._export(node, ctx)
        elif kind in FUNCTION_NODES:
            name = node_text(node.child_by_field_name("name"))
            if name:
                self._add_function(name, node, ctx, exported)
        elif kind in CLASS_NODES:
            self._class(node, ctx, exported)
        elif kind in ("lexical_declaration", "variable_declaration"):
            self._variables(node, ctx, exported)
        elif kind == "interface_declaration":
            self._interface(node, ctx, exported)
        elif kind == "type_alias_declaration":
            self._type_alias(node, ctx, exported)
        elif kind == "enum_declaration":
            self._enum(node, ctx, exported)

    def _export(self, node: Any, ctx: _Context) -> None:
        source = node.child_by_field_name("source")
        if source is not None:
            self._add_import(source, ctx)

        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            self._declaration(declaration, ctx, exported=True)
            return

        value = node.child_by_field_name("value")
        if value is not None and value.type == "identifier":
            ctx.export_names.add(node_text(value))
            return
        if value is not None and value.type in CLASS_NODES + FUNCTION_VALUES:
            self._declaration(value, ctx, exported=True)
            return

        for clause in node.named_children:
            if clause.type != "export_clause":
                continue
            for specifier in clause.named_children:
                alias = specifier.child_by_field_name("alias")
                name = specifier.child_by_field_name("name")
                ctx.export_names.add(node_text(alias if alias is not None else name))

    def _add_import(self, source: Any, ctx: _Context) -> None:
        if source is None:
            return
        spec = unquote(node_text(source))
        if not spec:
            return
        record = ctx.record
        if spec not in record.imports:
            record.imports.append(spec)
        if is_local_script_import(spec, self.alias_token) and spec not in record.local_imports:
            record.local_imports.append(spec)

    def _add_function(self, name: str, node: Any, ctx: _Context, exported: bool) -> FunctionRecord:
        parameters = node.child_by_field_name("parameters")
        if parameters is not None:
            params = parse_params(node_text(parameters)[1:-1])
        else:
            single = node.child_by_field_name("parameter")
            params = [node_text(single)] if single is not None else []

        return_type = node.child_by_field_name("return_type")
        function = FunctionRecord(
            name=name,
            params=params,
            return_type=strip_annotation(node_text(return_type)) if return_type is not None else "",
            is_public=exported,
            line_number=ctx.line(node),
        )

        annotations = [p.split(":", 1)[1] for p in params if ":" in p]
        annotations.append(function.return_type)
        for annotation in annotations:
            for type_name in type_references(annotation):
                if type_name not in function.uses_types:
                    function.uses_types.append(type_name)

        self._collect_calls(node.child_by_field_name("body"), function.calls_to, f"{ctx.record.path}:{name}", ctx)
        ctx.record.functions.append(function)
        return function

    def _collect_calls(self, body: Any, calls: List[str], location: str, ctx: _Context) -> None:
        if body is None:
            return
        for node in walk(body):
            if node.type != "call_expression":
                continue
            callee = callee_name(node)
            if callee and callee not in calls:
                calls.append(callee)
                ctx.outline.add_function_call(location, callee)

    def _variables(self, node: Any, ctx: _Context, exported: bool) -> None:
        is_const = node.type == "lexical_declaration" and node_text(node).startswith("const")
        for declarator in node.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            if name_node is None or name_node.type != "identifier":
                continue
            name = node_text(name_node)

            type_node = declarator.child_by_field_name("type")
            value = declarator.child_by_field_name("value")
            if type_node is not None and any(
                t in COMPONENT_TYPE_NAMES for t in type_references(node_text(type_node))
            ):
                ctx.record.annotate("components", name)

            if value is not None and value.type in FUNCTION_VALUES:
                self._add_function(name, value, ctx, exported)
                continue

            if exported:
                ctx.export_names.add(name)
            if is_const and (ctx.keep_all_constants or is_meaningful_constant(name)):
                ctx.record.vars.append(name)

    def _declare(self, node: Any, ctx: _Context, exported: bool) -> Optional[TypeRecord]:
        name = node_text(node.child_by_field_name("name"))
        if not name:
            return None
        type_record = declare_script_type(ctx.record, ctx.outline, name, exported, ctx.line(node))
        ctx.declared_types.append(name)
        if exported:
            ctx.export_names.add(name)
        return type_record

    def _class(self, node: Any, ctx: _Context, exported: bool) -> None:
        type_record = self._declare(node, ctx, exported)
        if type_record is None:
            return

        for heritage in node.named_children:
            if heritage.type != "class_heritage":
                continue
            for clause in heritage.named_children:
                if clause.type == "extends_clause":
                    base = clause.child_by_field_name("value") or (
                        clause.named_children[0] if clause.named_children else None
                    )
                    _append(type_record.embedded_types, node_text(base))
                elif clause.type == "implements_clause":
                    for iface in clause.named_children:
                        _append(type_record.implements, node_text(iface).split("<")[0])
                else:
                    _append(type_record.embedded_types, node_text(clause))

        body = node.child_by_field_name("body")
        if body is None:
            return
        for member in body.named_children:
            if member.type in ("method_definition", "method_signature", "abstract_method_signature"):
                name = node_text(member.child_by_field_name("name"))
                _append(type_record.methods, self._signature(name, member))
                self._collect_calls(
                    member.child_by_field_name("body"),
                    [],
                    f"{ctx.record.path}:{type_record.name}.{name}",
                    ctx,
                )
            elif member.type in ("field_definition", "public_field_definition"):
                name_node = member.child_by_field_name("name") or member.child_by_field_name("property")
                name = node_text(name_node)
                type_node = member.child_by_field_name("type")
                annotation = strip_annotation(node_text(type_node)) if type_node is not None else ""
                _append(type_record.fields, f"{name}: {annotation}" if annotation else name)

    def _interface(self, node: Any, ctx: _Context, exported: bool) -> None:
        type_record = self._declare(node, ctx, exported)
        if type_record is None:
            return
        for child in node.named_children:
            if child.type == "extends_type_clause":
                for base in child.named_children:
                    _append(type_record.embedded_types, node_text(base).split("<")[0])
        self._object_members(node.child_by_field_name("body"), type_record)

    def _type_alias(self, node: Any, ctx: _Context, exported: bool) -> None:
        type_record = self._declare(node, ctx, exported)
        if type_record is None:
            return
        value = node.child_by_field_name("value")
        if value is None:
            return
        if value.type == "object_type":
            self._object_members(value, type_record)
        else:
            _append(type_record.fields, "= " + " ".join(node_text(value).split()))

    def _enum(self, node: Any, ctx: _Context, exported: bool) -> None:
        type_record = self._declare(node, ctx, exported)
        if type_record is None:
            return
        body = node.child_by_field_name("body")
        if body is None:
            return
        for member in body.named_children:
            if member.type == "enum_assignment":
                _append(type_record.fields, node_text(member.child_by_field_name("name")))
            elif member.type in ("property_identifier", "string"):
                _append(type_record.fields, unquote(node_text(member)))

    def _object_members(self, body: Any, type_record: TypeRecord) -> None:
        if body is None:
            return
        for member in body.named_children:
            optional = "?" if any(c.type == "?" for c in member.children) else ""
            name = node_text(member.child_by_field_name("name")) + optional
            if member.type == "property_signature":
                type_node = member.child_by_field_name("type")
                annotation = strip_annotation(node_text(type_node)) if type_node is not None else "any"
                _append(type_record.fields, f"{name}: {annotation}")
            elif member.type == "method_signature":
                _append(type_record.methods, self._signature(name, member))

    @staticmethod
    def _signature(name: str, node: Any) -> str:
        parameters = node.child_by_field_name("parameters")
        params = parse_params(node_text(parameters)[1:-1]) if parameters is not None else []
        signature = f"{name}({', '.join(params)})"
        return_type = node.child_by_field_name("return_type")
        if return_type is not None:
            signature += f" -> {strip_annotation(node_text(return_type))}"
        return signature

    # ------------------------------------------------------------------
    # Whole-tree scans
    # ------------------------------------------------------------------

    def _scan_tree(self, root: Any, ctx: _Context, jsx: bool) -> None:
        """Hooks, JSX components, require() and dynamic import() anywhere in the file."""
        for node in walk(root):
            if node.type == "call_expression":
                callee = callee_name(node)
                if callee and callee.startswith("use") and callee[3:4].isupper():
                    ctx.record.annotate("hooks", callee)
                elif callee in ("require", "import"):
                    arguments = node.child_by_field_name("arguments")
                    if arguments is not None and arguments.named_children:
                        first = arguments.named_children[0]
                        if first.type == "string":
                            self._add_import(first, ctx)
            elif jsx and node.type in ("jsx_opening_element", "jsx_self_closing_element"):
                tag = node_text(node.child_by_field_name("name"))
                if tag[:1].isupper():
                    ctx.record.annotate("jsx_components", tag)


def _append(values: List[str], value: str) -> None:
    value = value.strip() if value else value
    if value and value not in values:
        values.append(value)
