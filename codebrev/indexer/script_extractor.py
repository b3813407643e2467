"""Line-oriented extraction for JavaScript, TypeScript, JSX and TSX.

This is the lossy fidelity tier: declarations are recognized with regular
expressions and scoped by tracking brace depth, not by a grammar. Class,
interface and enum members are only read one level below the line that
opened the declaration; top-level declarations only at depth 0.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Iterator, List, Optional, Set, Tuple

from ..config import DEFAULT_SOURCE_ALIAS
from .extractors import FileExtractor
from .models import FileRecord, FunctionRecord, TypeRecord
from .outline import Outline
from .resolver import is_local_script_import

logger = logging.getLogger(__name__)

# Names that almost always denote loop counters or scratch values
TEMP_VAR_NAMES = frozenset(
    [
        "i", "j", "k", "x", "y", "z", "a", "b", "c", "d", "e", "f",
        "n", "m", "o", "p", "q", "r", "s", "t", "u", "v", "w",
        "idx", "len", "tmp", "temp", "val", "res", "ret", "err", "ctx", "req",
        "resp", "data", "item", "elem", "node", "key", "value", "index", "count", "size",
        "str", "num", "obj", "arr", "fn", "cb", "callback", "handler", "listener",
    ]
)

MEANINGFUL_CONSTANT_HINTS = ("config", "default", "option", "setting")

# Identifiers followed by "(" that are not calls
NON_CALL_KEYWORDS = frozenset(
    [
        "if", "for", "while", "switch", "catch", "return", "function", "typeof",
        "do", "else", "with", "void", "delete", "in", "of", "instanceof", "yield",
        "await", "async", "super",
    ]
)

# Type names provided by the language or its standard library
SCRIPT_BUILTIN_TYPES = frozenset(
    [
        "Array", "Date", "Error", "Function", "Map", "Object", "Omit", "Partial",
        "Pick", "Promise", "Readonly", "ReadonlyArray", "Record", "Required",
        "ReturnType", "Set", "String", "Number", "Boolean", "WeakMap", "WeakSet",
    ]
)

IMPORT_FROM_RE = re.compile(r"""^\s*import\s+(?:type\s+)?(.+?)\s+from\s+['"]([^'"]+)['"]""")
IMPORT_SIDE_EFFECT_RE = re.compile(r"""^\s*import\s+['"]([^'"]+)['"]""")
EXPORT_FROM_RE = re.compile(
    r"""^\s*export\s+(?:type\s+)?(?:\*(?:\s+as\s+\w+)?|\{[^}]*\})\s+from\s+['"]([^'"]+)['"]"""
)
REQUIRE_RE = re.compile(r"""\b(?:require|import)\(\s*['"]([^'"]+)['"]\s*\)""")
OPEN_BRACE_LIST_RE = re.compile(r"^\s*(?:import|export)\s+(?:type\s+)?(?:\w+\s*,\s*)?\{")

EXPORT_LIST_RE = re.compile(r"^\s*export\s+(?:type\s+)?\{([^}]*)\}\s*;?\s*$")
EXPORT_DEFAULT_NAME_RE = re.compile(r"^\s*export\s+default\s+([A-Za-z_$][\w$]*)\s*;?\s*$")

CLASS_RE = re.compile(
    r"^\s*(?:export\s+)?(?:default\s+)?(?:declare\s+)?(?:abstract\s+)?class\s+(\w+)"
    r"(?:\s*<[^{]*?>)?"
    r"(?:\s+extends\s+([\w.]+)(?:<[^{]*?>)?)?"
    r"(?:\s+implements\s+([\w\s,.<>]+?))?\s*(?:\{|$)"
)
FUNCTION_RE = re.compile(
    r"^\s*(?:export\s+)?(?:default\s+)?(?:declare\s+)?(?:async\s+)?function\s*\*?\s*(\w+)"
    r"\s*(?:<[^>]*>)?\s*\(([^)]*)\)(?:\s*:\s*([^{;]+))?"
)
FUNCTION_EXPR_RE = re.compile(
    r"^\s*(?:export\s+)?(?:const|let|var)\s+(\w+)(?:\s*:\s*[^=]+?)?\s*=\s*(?:async\s+)?"
    r"function\b\s*\*?\s*\w*\s*\(([^)]*)\)(?:\s*:\s*([^{;]+))?"
)
ARROW_RE = re.compile(
    r"^\s*(?:export\s+)?(?:const|let|var)\s+(\w+)(?:\s*:\s*[^=]+?)?\s*=\s*(?:async\s+)?"
    r"(?:<[^>]*>\s*)?\(([^)]*)\)(?:\s*:\s*([^=]+?))?\s*=>"
)
SIMPLE_ARROW_RE = re.compile(
    r"^\s*(?:export\s+)?(?:const|let|var)\s+(\w+)\s*=\s*(?:async\s+)?(\w+)\s*=>"
)
COMPONENT_RE = re.compile(
    r"^\s*(?:export\s+)?(?:const|let|var)\s+(\w+)\s*[:=]\s*(?:React\.)?"
    r"(?:Component|FC|FunctionComponent|VFC)\b"
)
CONST_RE = re.compile(r"^\s*(?:export\s+)?const\s+(\w+)")

METHOD_RE = re.compile(
    r"^\s*(?:(?:public|private|protected|static|async|readonly|override|abstract|get|set)\s+)*"
    r"\*?\s*(#?\w+)\s*(?:<[^>]*>)?\s*\(([^)]*)\)(?:\s*:\s*([^{;]+))?\s*[{;]?\s*$"
)
CLASS_PROPERTY_RE = re.compile(
    r"^\s*(?:(?:public|private|protected|static|readonly|declare|override)\s+)*"
    r"(#?\w+)[?!]?\s*(?::\s*([^=;]+?))?\s*(?:=|;|$)"
)

INTERFACE_RE = re.compile(
    r"^\s*(?:export\s+)?(?:default\s+)?(?:declare\s+)?interface\s+(\w+)"
    r"(?:\s*<[^{]*?>)?(?:\s+extends\s+([\w\s,.<>]+?))?\s*(?:\{|$)"
)
TYPE_ALIAS_RE = re.compile(
    r"^\s*(?:export\s+)?(?:declare\s+)?type\s+(\w+)(?:\s*<[^=]*?>)?\s*=\s*(.*)$"
)
ENUM_RE = re.compile(r"^\s*(?:export\s+)?(?:declare\s+)?(?:const\s+)?enum\s+(\w+)")
PROP_RE = re.compile(r"^\s*(?:readonly\s+)?([\w$]+)(\?)?\s*:\s*(.+?)\s*[;,]?\s*$")
SIGNATURE_RE = re.compile(
    r"^\s*(?:readonly\s+)?([\w$]+)(\?)?\s*(?:<[^>]*>)?\s*\(([^)]*)\)\s*(?::\s*(.+?))?\s*[;,]?\s*$"
)
ENUM_MEMBER_RE = re.compile(r"^\s*([A-Za-z_$][\w$]*)\s*(?:=\s*[^,]+)?,?\s*$")

CALL_RE = re.compile(r"(?<![\w$.])(?:[A-Za-z_$][\w$]*\.)*([A-Za-z_$][\w$]*)\s*(?:<[^<>()]*>)?\s*\(")
HOOK_RE = re.compile(r"\b(use[A-Z]\w*)\s*(?:<[^>]*>)?\s*\(")
JSX_TAG_RE = re.compile(r"(?<![\w$.])<([A-Z]\w*(?:\.\w+)*)[\s/>]")
TYPE_REF_RE = re.compile(r"\b([A-Z]\w*)\b")

# Lines that may open a parameter list continued on the following lines
DECLARATION_HEAD_RE = re.compile(
    r"^\s*(?:export\s+)?(?:default\s+)?(?:declare\s+)?(?:async\s+)?function\b"
    r"|^\s*(?:export\s+)?(?:const|let|var)\s+\w+[^=]*=\s*(?:async\s+)?(?:function\b|(?:<[^>]*>\s*)?\()"
    r"|^\s*(?:(?:public|private|protected|static|async|readonly|override|abstract|get|set)\s+)*"
    r"\*?\s*(?!(?:return|if|for|while|switch|catch|await|typeof|yield)\b)#?\w+\s*(?:<[^>]*>)?\s*\("
)
MAX_SIGNATURE_LINES = 40

# Lexical state carried from one line to the next
IN_CODE = "code"
IN_COMMENT = "comment"
IN_TEMPLATE = "template"

# A "/" after one of these starts a regular expression literal, not a division
REGEX_PRECEDING_CHARS = frozenset("=(,:[!&|?{};")
REGEX_PRECEDING_KEYWORD_RE = re.compile(r"(?<![\w$.])(?:return|typeof|case|yield|void)$")


def _closing_delimiter(line: str, start: int, delimiter: str) -> int:
    """Index of the first unescaped delimiter at or after start, or -1.

    For regular expression literals a "/" inside a character class does
    not close the literal.
    """
    i = start
    in_class = False
    while i < len(line):
        ch = line[i]
        if ch == "\\":
            i += 2
            continue
        if delimiter == "/" and ch == "[":
            in_class = True
        elif delimiter == "/" and ch == "]":
            in_class = False
        elif ch == delimiter and not in_class:
            return i
        i += 1
    return -1


def _starts_regex(code_so_far: str) -> bool:
    """Whether a "/" following code_so_far opens a regular expression literal."""
    previous = code_so_far.rstrip()
    if not previous:
        return False
    return previous[-1] in REGEX_PRECEDING_CHARS or bool(REGEX_PRECEDING_KEYWORD_RE.search(previous))


def strip_line(line: str, state: str = IN_CODE, keep_strings: bool = False) -> Tuple[str, str]:
    """Remove comments from one line and blank out literal contents.

    String, template and regular expression literals are reduced to their
    delimiters so braces inside them never count towards nesting depth.

    Args:
        line: Raw source line
        state: Lexical state at the start of the line (IN_CODE, IN_COMMENT or IN_TEMPLATE)
        keep_strings: Keep literal contents and only remove comments

    Returns:
        Remaining code and the lexical state at the end of the line
    """
    out: List[str] = []
    i = 0
    n = len(line)
    while i < n:
        if state == IN_COMMENT:
            end = line.find("*/", i)
            if end == -1:
                break
            i = end + 2
            state = IN_CODE
            continue
        if state == IN_TEMPLATE:
            end = _closing_delimiter(line, i, "`")
            if end == -1:
                if keep_strings:
                    out.append(line[i:])
                break
            out.append(line[i : end + 1] if keep_strings else "`")
            i = end + 1
            state = IN_CODE
            continue

        ch = line[i]
        if line.startswith("//", i):
            break
        if line.startswith("/*", i):
            state = IN_COMMENT
            i += 2
            continue

        is_regex = ch == "/" and _starts_regex("".join(out))
        if ch in "'\"`" or is_regex:
            end = _closing_delimiter(line, i + 1, ch)
            if end == -1 and ch == "`":
                out.append(line[i:] if keep_strings else ch)
                state = IN_TEMPLATE
                break
            if end == -1 and is_regex:
                # unterminated, so a division after all
                out.append(ch)
                i += 1
                continue
            if end == -1:
                end = n - 1
            if is_regex:
                while end + 1 < n and line[end + 1].isalpha():
                    end += 1
            if keep_strings:
                out.append(line[i : end + 1])
            else:
                out.append('""' if is_regex else ch + ch)
            i = end + 1
            continue

        out.append(ch)
        i += 1
    return "".join(out), state


def split_top_level(text: str, separator: str = ",") -> List[str]:
    """Split on separator, ignoring separators nested in brackets."""
    parts = []
    depth = 0
    current = []
    for index, ch in enumerate(text):
        arrow = ch == "=" and text[index + 1 : index + 2] == ">"
        if ch in "([{<":
            depth += 1
        elif ch in ")]}" or (ch == ">" and text[index - 1 : index] != "="):
            depth = max(0, depth - 1)
        if ch == separator and depth == 0 and not arrow:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    parts.append("".join(current))
    return [p.strip() for p in parts if p.strip()]


def parse_params(params: str) -> List[str]:
    """Normalize a parameter list to "name" or "name: type" entries, defaults dropped."""
    result = []
    for param in split_top_level(params):
        name_part = split_top_level(param, "=")[0] if "=" in param else param
        if ":" in name_part and not name_part.startswith("{"):
            name, annotation = name_part.split(":", 1)
            name_part = f"{name.strip()}: {' '.join(annotation.split())}"
        elif name_part.startswith("{") and "}:" in name_part.replace(" ", ""):
            pattern, annotation = name_part.rsplit(":", 1)
            name_part = f"{' '.join(pattern.split())}: {annotation.strip()}"
        else:
            name_part = " ".join(name_part.split())
        result.append(name_part)
    return result


def type_references(annotation: str) -> List[str]:
    """Capitalized type names mentioned in a type annotation."""
    found = []
    for name in TYPE_REF_RE.findall(annotation or ""):
        if name not in SCRIPT_BUILTIN_TYPES and name not in found:
            found.append(name)
    return found


def is_meaningful_constant(name: str) -> bool:
    """Whether a top-level constant is worth listing as a file variable."""
    lowered = name.lower()
    if lowered in TEMP_VAR_NAMES or len(name) <= 1:
        return False
    if name.upper() == name and name.lower() != name:
        return True
    return any(hint in lowered for hint in MEANINGFUL_CONSTANT_HINTS)


def is_exported_declaration(line: str) -> bool:
    return line.lstrip().startswith("export ")


def export_list_names(body: str) -> List[str]:
    """Names published by an export list body such as "a, b as c"."""
    names = []
    for item in body.split(","):
        item = item.strip()
        if item.startswith("type "):
            item = item[len("type "):].strip()
        if not item:
            continue
        names.append(item.split(" as ")[-1].strip())
    return names


def declare_script_type(
    record: FileRecord, outline: Outline, name: str, exported: bool, line_number: int
) -> TypeRecord:
    """Register a class, interface, type alias or enum declared in record."""
    record.types.append(name)
    type_record = outline.ensure_type(name)
    type_record.is_public = type_record.is_public or exported
    if not type_record.line_number:
        type_record.line_number = line_number
    _append(type_record.declared_in, record.path)
    return type_record


def publish_exports(
    record: FileRecord, outline: Outline, export_names: Set[str], declared_types: List[str]
) -> None:
    """Mark exported functions and types public and record their type usage."""
    for function in record.functions:
        if function.name in export_names:
            function.is_public = True
        location = f"{record.path}:{function.name}"
        for type_name in function.uses_types:
            outline.add_type_usage(type_name, location)
        if function.is_public:
            _append(record.exported_funcs, function.name)
            outline.add_public_api(record.path, function.name)

    for name in declared_types:
        if name in export_names:
            outline.ensure_type(name).is_public = True
            _append(record.exported_types, name)
            outline.add_public_api(record.path, f"type:{name}")


@dataclass
class _Scope:
    kind: str  # class, interface, object_type, enum or function
    name: str
    open_depth: int
    opened: bool = False
    type_record: Optional[TypeRecord] = None
    location: str = ""
    calls: List[str] = field(default_factory=list)


@dataclass
class _ScanState:
    record: FileRecord
    outline: Outline
    jsx: bool
    keep_all_constants: bool
    depth: int = 0
    scopes: List[_Scope] = field(default_factory=list)
    export_names: Set[str] = field(default_factory=set)
    declared_types: List[str] = field(default_factory=list)


class JavaScriptExtractor(FileExtractor):
    """Regex extraction for JavaScript and JSX."""

    def __init__(self, language: str = "javascript", alias_token: str = DEFAULT_SOURCE_ALIAS):
        """Initialize script extractor.

        Args:
            language: Language name recorded on extracted files
            alias_token: Import prefix that stands for the source root
        """
        super().__init__(language)
        self.alias_token = alias_token

    def extract_source(self, source: str, record: FileRecord, outline: Outline) -> None:
        jsx = PurePosixPath(record.path).suffix != ".ts"
        self.extract_script(source, record, outline, jsx=jsx)

    def extract_script(
        self,
        source: str,
        record: FileRecord,
        outline: Outline,
        line_offset: int = 0,
        jsx: bool = True,
        keep_all_constants: bool = False,
    ) -> None:
        """Extract declarations from script text into record.

        Args:
            source: Script source
            record: File record to populate
            outline: Shared outline
            line_offset: Added to line numbers (for embedded scripts)
            jsx: Whether to look for JSX component tags
            keep_all_constants: Record every top-level const, not only meaningful ones
        """
        state = _ScanState(
            record=record,
            outline=outline,
            jsx=jsx,
            keep_all_constants=keep_all_constants,
        )
        for line_number, text, code in self._logical_lines(source):
            self._scan_line(state, line_number + line_offset, text, code)
        self._finish(state)

    # ------------------------------------------------------------------
    # Line handling
    # ------------------------------------------------------------------

    @staticmethod
    def _logical_lines(source: str) -> Iterator[Tuple[int, str, str]]:
        """Yield (line number, text, code) for each logical line.

        text is the line with comments removed; code additionally has
        literal contents blanked. Import and export lists are joined up to
        their closing brace, and a declaration whose parameter list spans
        several lines is joined until the list closes.
        """
        state = IN_CODE
        pending: List[str] = []
        pending_code: List[str] = []
        pending_start = 0
        closer = ""
        parens = 0

        for index, raw in enumerate(source.splitlines(), start=1):
            text, _ = strip_line(raw, state, keep_strings=True)
            code, state = strip_line(raw, state)
            if pending:
                pending.append(text.strip())
                pending_code.append(code.strip())
                if closer == "}":
                    done = "}" in code
                else:
                    parens += code.count("(") - code.count(")")
                    done = parens <= 0 or len(pending) >= MAX_SIGNATURE_LINES
                if done:
                    yield pending_start, " ".join(pending), " ".join(pending_code)
                    pending, pending_code = [], []
                continue
            if OPEN_BRACE_LIST_RE.match(text) and "}" not in code:
                pending, pending_code = [text.strip()], [code.strip()]
                pending_start, closer = index, "}"
                continue
            parens = code.count("(") - code.count(")")
            if parens > 0 and "{" not in code and DECLARATION_HEAD_RE.match(code):
                pending, pending_code = [text.strip()], [code.strip()]
                pending_start, closer = index, ")"
                continue
            yield index, text, code

        if pending:
            yield pending_start, " ".join(pending), " ".join(pending_code)

    def _scan_line(self, state: _ScanState, line_number: int, raw: str, code: str) -> None:
        if not code.strip():
            return

        depth_before = state.depth
        state.depth = max(0, depth_before + code.count("{") - code.count("}"))

        # A declaration whose body never opened is dropped
        if state.scopes and not state.scopes[-1].opened and "{" not in code:
            state.scopes.pop()

        self._scan_imports(state, raw)
        self._scan_annotations(state, code)

        scope = state.scopes[-1] if state.scopes else None
        new_scope = None
        if (
            scope is not None
            and scope.kind != "function"
            and scope.opened
            and depth_before == scope.open_depth + 1
        ):
            new_scope = self._scan_member(state, scope, raw, code, line_number, depth_before)
        elif depth_before == 0:
            new_scope = self._scan_top_level(state, raw, code, line_number)

        if new_scope is not None:
            self._collect_calls(state, new_scope, code, skip=new_scope.name)
        else:
            function_scope = self._innermost_function(state)
            if function_scope is not None:
                self._collect_calls(state, function_scope, code)

        if new_scope is not None:
            if state.depth > depth_before:
                state.scopes.append(new_scope)
            elif "{" not in code and new_scope.kind != "function":
                # body opens on a following line
                state.scopes.append(new_scope)

        for open_scope in state.scopes:
            if state.depth > open_scope.open_depth:
                open_scope.opened = True
        while state.scopes and state.scopes[-1].opened and state.depth <= state.scopes[-1].open_depth:
            state.scopes.pop()

    @staticmethod
    def _innermost_function(state: _ScanState) -> Optional[_Scope]:
        for scope in reversed(state.scopes):
            if scope.kind == "function":
                return scope
        return None

    def _collect_calls(self, state: _ScanState, scope: _Scope, code: str, skip: str = "") -> None:
        if scope.kind != "function":
            return
        for callee in CALL_RE.findall(code):
            if callee in NON_CALL_KEYWORDS or callee == skip:
                continue
            if callee not in scope.calls:
                scope.calls.append(callee)
                state.outline.add_function_call(scope.location, callee)

    # ------------------------------------------------------------------
    # Imports and annotations
    # ------------------------------------------------------------------

    def _scan_imports(self, state: _ScanState, raw: str) -> None:
        specs = []
        match = IMPORT_FROM_RE.match(raw)
        if match:
            specs.append(match.group(2))
        else:
            match = IMPORT_SIDE_EFFECT_RE.match(raw)
            if match:
                specs.append(match.group(1))
        match = EXPORT_FROM_RE.match(raw)
        if match:
            specs.append(match.group(1))
        specs.extend(REQUIRE_RE.findall(raw))

        record = state.record
        for spec in specs:
            if spec not in record.imports:
                record.imports.append(spec)
            if is_local_script_import(spec, self.alias_token) and spec not in record.local_imports:
                record.local_imports.append(spec)

    def _scan_annotations(self, state: _ScanState, code: str) -> None:
        for hook in HOOK_RE.findall(code):
            state.record.annotate("hooks", hook)
        if state.jsx:
            for tag in JSX_TAG_RE.findall(code):
                state.record.annotate("jsx_components", tag)

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _scan_top_level(
        self, state: _ScanState, raw: str, code: str, line_number: int
    ) -> Optional[_Scope]:
        record = state.record
        exported = is_exported_declaration(raw)

        match = EXPORT_LIST_RE.match(raw)
        if match:
            state.export_names.update(export_list_names(match.group(1)))
            return None
        match = EXPORT_DEFAULT_NAME_RE.match(raw)
        if match:
            state.export_names.add(match.group(1))
            return None

        match = CLASS_RE.match(raw)
        if match:
            name = match.group(1)
            type_record = self._declare_type(state, name, exported, line_number)
            if match.group(2):
                _append(type_record.embedded_types, match.group(2))
            if match.group(3):
                for iface in split_top_level(match.group(3)):
                    _append(type_record.implements, iface.split("<")[0].strip())
            return _Scope(kind="class", name=name, open_depth=0, type_record=type_record)

        scope = self._scan_type_declaration(state, raw, exported, line_number)
        if scope is not None:
            return scope

        function = None
        for pattern in (FUNCTION_RE, FUNCTION_EXPR_RE, ARROW_RE):
            match = pattern.match(raw)
            if match:
                function = FunctionRecord(
                    name=match.group(1),
                    params=parse_params(match.group(2)),
                    return_type=" ".join((match.group(3) or "").split()),
                    is_public=exported,
                    line_number=line_number,
                )
                break
        if function is None:
            match = SIMPLE_ARROW_RE.match(raw)
            if match:
                function = FunctionRecord(
                    name=match.group(1),
                    params=[match.group(2)],
                    is_public=exported,
                    line_number=line_number,
                )

        match = COMPONENT_RE.match(raw)
        if match:
            record.annotate("components", match.group(1))

        if function is not None:
            annotations = [p.split(":", 1)[1] for p in function.params if ":" in p]
            annotations.append(function.return_type)
            for annotation in annotations:
                for type_name in type_references(annotation):
                    _append(function.uses_types, type_name)
            record.functions.append(function)
            location = f"{record.path}:{function.name}"
            return _Scope(
                kind="function",
                name=function.name,
                open_depth=0,
                location=location,
                calls=function.calls_to,
            )

        match = CONST_RE.match(raw)
        if match:
            name = match.group(1)
            if state.keep_all_constants or is_meaningful_constant(name):
                record.vars.append(name)
            if exported:
                state.export_names.add(name)
        return None

    def _scan_type_declaration(
        self, state: _ScanState, raw: str, exported: bool, line_number: int
    ) -> Optional[_Scope]:
        """Hook for dialects with extra declaration forms."""
        return None

    def _declare_type(
        self, state: _ScanState, name: str, exported: bool, line_number: int
    ) -> TypeRecord:
        type_record = declare_script_type(state.record, state.outline, name, exported, line_number)
        state.declared_types.append(name)
        if exported:
            state.export_names.add(name)
        return type_record

    def _scan_member(
        self,
        state: _ScanState,
        scope: _Scope,
        raw: str,
        code: str,
        line_number: int,
        depth: int,
    ) -> Optional[_Scope]:
        type_record = scope.type_record
        if type_record is None:
            return None

        if scope.kind == "class":
            match = METHOD_RE.match(raw)
            if match and match.group(1) not in NON_CALL_KEYWORDS:
                name = match.group(1)
                _append(type_record.methods, _signature(name, match.group(2), match.group(3)))
                return _Scope(
                    kind="function",
                    name=name,
                    open_depth=depth,
                    location=f"{state.record.path}:{scope.name}.{name}",
                )
            match = CLASS_PROPERTY_RE.match(raw)
            if match:
                name = match.group(1)
                if "=>" in code:
                    _append(type_record.methods, f"{name}()")
                    return _Scope(
                        kind="function",
                        name=name,
                        open_depth=depth,
                        location=f"{state.record.path}:{scope.name}.{name}",
                    )
                annotation = " ".join((match.group(2) or "").split())
                _append(type_record.fields, f"{name}: {annotation}" if annotation else name)
            return None

        if scope.kind in ("interface", "object_type"):
            self._add_type_member(type_record, raw)
            return None

        if scope.kind == "enum":
            for part in split_top_level(raw.strip()):
                match = ENUM_MEMBER_RE.match(part)
                if match:
                    _append(type_record.fields, match.group(1))
        return None

    @staticmethod
    def _add_type_member(type_record: TypeRecord, text: str) -> None:
        match = SIGNATURE_RE.match(text)
        if match:
            name = match.group(1) + (match.group(2) or "")
            _append(type_record.methods, _signature(name, match.group(3), match.group(4)))
            return
        match = PROP_RE.match(text)
        if match:
            name = match.group(1) + (match.group(2) or "")
            annotation = match.group(3).rstrip("{").strip() or "{...}"
            _append(type_record.fields, f"{name}: {annotation}")

    # ------------------------------------------------------------------
    # Finalization
    # ------------------------------------------------------------------

    def _finish(self, state: _ScanState) -> None:
        publish_exports(state.record, state.outline, state.export_names, state.declared_types)


class TypeScriptExtractor(JavaScriptExtractor):
    """Regex extraction for TypeScript and TSX (adds interfaces, type aliases, enums)."""

    def __init__(self, language: str = "typescript", alias_token: str = DEFAULT_SOURCE_ALIAS):
        super().__init__(language, alias_token)

    def _scan_type_declaration(
        self, state: _ScanState, raw: str, exported: bool, line_number: int
    ) -> Optional[_Scope]:
        match = INTERFACE_RE.match(raw)
        if match:
            name = match.group(1)
            type_record = self._declare_type(state, name, exported, line_number)
            if match.group(2):
                for base in split_top_level(match.group(2)):
                    _append(type_record.embedded_types, base.split("<")[0].strip())
            self._inline_members(type_record, raw)
            return _Scope(kind="interface", name=name, open_depth=0, type_record=type_record)

        match = TYPE_ALIAS_RE.match(raw)
        if match:
            name = match.group(1)
            value = match.group(2).strip().rstrip(";").strip()
            type_record = self._declare_type(state, name, exported, line_number)
            if value.startswith("{"):
                self._inline_members(type_record, raw)
                return _Scope(kind="object_type", name=name, open_depth=0, type_record=type_record)
            if value:
                _append(type_record.fields, f"= {value}")
            return None

        match = ENUM_RE.match(raw)
        if match:
            name = match.group(1)
            type_record = self._declare_type(state, name, exported, line_number)
            if "{" in raw and "}" in raw:
                body = raw[raw.index("{") + 1 : raw.rindex("}")]
                for part in split_top_level(body):
                    member = ENUM_MEMBER_RE.match(part)
                    if member:
                        _append(type_record.fields, member.group(1))
            return _Scope(kind="enum", name=name, open_depth=0, type_record=type_record)

        return None

    def _inline_members(self, type_record: TypeRecord, raw: str) -> None:
        """Members written on the declaration line, e.g. interface A { x: number }."""
        if "{" not in raw or "}" not in raw:
            return
        body = raw[raw.index("{") + 1 : raw.rindex("}")]
        for member in split_top_level(body.replace(";", ","), ","):
            self._add_type_member(type_record, member)


def _signature(name: str, params: Optional[str], return_type: Optional[str]) -> str:
    signature = f"{name}({', '.join(parse_params(params or ''))})"
    return_type = " ".join((return_type or "").split()).rstrip("{").strip()
    if return_type:
        signature += f" -> {return_type}"
    return signature


def _append(values: List[str], value: str) -> None:
    if value and value not in values:
        values.append(value)
