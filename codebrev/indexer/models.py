"""Data models for the code outline."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class FunctionRecord:
    """A function or method declared in a source file."""

    name: str  # receiver-qualified for methods, e.g. "(Server) Start"
    params: List[str] = field(default_factory=list)
    return_type: str = ""
    is_public: bool = False
    calls_to: List[str] = field(default_factory=list)
    uses_types: List[str] = field(default_factory=list)
    line_number: int = 0

    def signature(self) -> str:
        sig = f"{self.name}({', '.join(self.params)})"
        if self.return_type:
            sig += f" -> {self.return_type}"
        return sig


@dataclass
class TestInfo:
    """Test files associated with a source file."""

    __test__ = False  # not a pytest class

    test_files: List[str] = field(default_factory=list)
    test_scenarios: List[str] = field(default_factory=list)


@dataclass
class FileRecord:
    """Everything extracted from one indexed source file."""

    path: str  # repo-relative, forward slashes
    abs_path: str
    language: str
    module: str = ""  # owning module identifier, empty when unknown
    package_dir: str = "."
    package_name: str = ""  # Go only
    functions: List[FunctionRecord] = field(default_factory=list)
    types: List[str] = field(default_factory=list)
    vars: List[str] = field(default_factory=list)
    imports: List[str] = field(default_factory=list)  # raw import strings
    local_imports: List[str] = field(default_factory=list)  # raw local specifiers awaiting resolution
    local_deps: List[str] = field(default_factory=list)  # resolved file paths
    local_pkg_deps: List[str] = field(default_factory=list)  # resolved package dirs
    exported_funcs: List[str] = field(default_factory=list)
    exported_types: List[str] = field(default_factory=list)
    routes: List[str] = field(default_factory=list)
    annotations: Dict[str, List[str]] = field(default_factory=dict)
    test_coverage: Optional[TestInfo] = None
    risk_level: str = "low"

    def annotate(self, key: str, value: str) -> None:
        """Add a framework annotation, ignoring duplicates."""
        values = self.annotations.setdefault(key, [])
        if value not in values:
            values.append(value)


@dataclass
class TypeRecord:
    """A named type, shared across every file that declares or uses it."""

    name: str
    fields: List[str] = field(default_factory=list)
    methods: List[str] = field(default_factory=list)
    is_public: bool = False
    implements: List[str] = field(default_factory=list)
    embedded_types: List[str] = field(default_factory=list)
    contract_keys: List[str] = field(default_factory=list)  # e.g. "json:user_id"
    used_by: List[str] = field(default_factory=list)  # "path:function" locations
    declared_in: List[str] = field(default_factory=list)
    line_number: int = 0


@dataclass
class PackageRecord:
    """A directory-level package and the file that stands in for it."""

    path: str
    files: List[str] = field(default_factory=list)
    representative: str = ""
    go_representative: str = ""  # smallest .go file, target of Go import edges


@dataclass
class EdgeStat:
    """Coupling counters for one directed package edge."""

    imports: int = 0
    calls: int = 0
    type_uses: int = 0

    def add(self, other: "EdgeStat") -> None:
        self.imports += other.imports
        self.calls += other.calls
        self.type_uses += other.type_uses

    @property
    def total(self) -> int:
        return self.imports + self.calls + self.type_uses


@dataclass
class ImpactRecord:
    """Change impact of a file or package."""

    key: str
    direct_dependents: List[str] = field(default_factory=list)
    indirect_dependents: List[str] = field(default_factory=list)
    risk_level: str = "low"
    tests_affected: List[str] = field(default_factory=list)

    @property
    def total_dependents(self) -> int:
        return len(self.direct_dependents) + len(self.indirect_dependents)


@dataclass
class GoModule:
    """A Go module root discovered from go.work or go.mod."""

    dir_abs: str  # absolute directory holding go.mod
    dir_rel: str  # relative to the scan root, "." for the root itself
    mod_path: str  # value of the go.mod "module" directive
