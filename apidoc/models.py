"""Core data models shared across apidoc components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

ACCESS_ERROR = "AccessError"
PARSE_DIAGNOSTIC = "ParseDiagnostic"
DUPLICATE_SYMBOL = "DuplicateSymbol"

KIND_FUNCTION = "function"
KIND_TYPE = "type"
KIND_FIELD = "field"


@dataclass(frozen=True)
class SourceFile:
    """A source file read by the scanner."""

    path: str
    content: str
    language: str


@dataclass(frozen=True)
class Diagnostic:
    """Non-fatal problem recorded while scanning, parsing or merging."""

    kind: str
    message: str
    path: str = ""
    line: Optional[int] = None

    def sort_key(self) -> Tuple[str, int, str, str]:
        return (self.path, self.line or 0, self.kind, self.message)

    def __str__(self) -> str:
        location = self.path
        if self.line:
            location = f"{location}:{self.line}"
        prefix = f"{location}: " if location else ""
        return f"{prefix}{self.kind}: {self.message}"


@dataclass(frozen=True)
class Annotation:
    """A decorator or annotation attached to a declaration."""

    name: str
    arguments: str = ""


@dataclass(frozen=True)
class Parameter:
    """A function/method parameter."""

    name: str
    type: Optional[str] = None
    description: str = ""
    default: Optional[str] = None
    required: bool = False
    location: Optional[str] = None
    annotations: Tuple[Annotation, ...] = ()


@dataclass(frozen=True)
class Endpoint:
    """HTTP route exposed by a handler declaration."""

    methods: Tuple[str, ...]
    path: str
    content_type: str = "FormData"
    framework: Optional[str] = None

    @property
    def method(self) -> str:
        return "/".join(self.methods)


@dataclass(frozen=True)
class Declaration:
    """A named unit of source code extracted by a parser."""

    name: str
    kind: str
    path: str
    line: int
    qualified_name: str = ""
    parameters: Tuple[Parameter, ...] = ()
    returns: Optional[str] = None
    returns_description: str = ""
    doc: str = ""
    summary: str = ""
    owner: Optional[str] = None
    modifiers: Tuple[str, ...] = ()
    annotations: Tuple[Annotation, ...] = ()
    bases: Tuple[str, ...] = ()
    type_parameters: Tuple[str, ...] = ()
    tags: Tuple[Tuple[str, str], ...] = ()
    endpoint: Optional[Endpoint] = None
    required: bool = False
    deprecated: bool = False

    def __post_init__(self) -> None:
        if not self.qualified_name:
            qualified = f"{self.owner}.{self.name}" if self.owner else self.name
            object.__setattr__(self, "qualified_name", qualified)

    @property
    def signature(self) -> str:
        if self.kind != KIND_FUNCTION:
            return self.returns or ""
        params = ", ".join(
            f"{param.name}: {param.type}" if param.type else param.name
            for param in self.parameters
        )
        suffix = f" -> {self.returns}" if self.returns else ""
        return f"{self.name}({params}){suffix}"

    @property
    def is_private(self) -> bool:
        if "private" in self.modifiers:
            return True
        return self.name.startswith("_") and not self.name.startswith("__")

    def tag(self, name: str) -> Optional[str]:
        for key, value in self.tags:
            if key == name:
                return value
        return None


@dataclass
class ParseResult:
    """Output of parsing one source file."""

    path: str
    module: str
    language: str
    declarations: List[Declaration] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)


@dataclass(frozen=True)
class DocInfo:
    """Document-level metadata shown in rendered headers."""

    title: str = "API Documentation"
    version: str = ""
    author: str = ""
    date: str = ""
    application_name: str = ""


class ApiModel:
    """Ordered mapping of module key to declarations, frozen before rendering."""

    def __init__(self, info: DocInfo | None = None) -> None:
        self.info = info or DocInfo()
        self._modules: Dict[str, Dict[str, Declaration]] = {}
        self._references: Dict[str, str] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "ApiModel":
        self._frozen = True
        return self

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RuntimeError("ApiModel is frozen and cannot be modified")

    def put(self, module: str, declaration: Declaration) -> Optional[Declaration]:
        """Insert or replace a declaration, returning the one it replaced."""
        self._check_mutable()
        entries = self._modules.setdefault(module, {})
        previous = entries.get(declaration.qualified_name)
        entries[declaration.qualified_name] = declaration
        return previous

    def discard_members(self, module: str, owner: str, path: str) -> int:
        """Drop members of ``owner``, nested ones included, declared in ``path``."""
        self._check_mutable()
        entries = self._modules.get(module, {})
        stale = [
            key
            for key, decl in entries.items()
            if decl.path == path
            and decl.owner is not None
            and (decl.owner == owner or decl.owner.startswith(f"{owner}."))
        ]
        for key in stale:
            del entries[key]
        return len(stale)

    def add_reference(self, type_name: str, target: str) -> None:
        self._check_mutable()
        self._references.setdefault(type_name, target)

    def modules(self) -> List[str]:
        return list(self._modules)

    def declarations(self, module: str) -> List[Declaration]:
        return list(self._modules.get(module, {}).values())

    def get(self, module: str, qualified_name: str) -> Optional[Declaration]:
        return self._modules.get(module, {}).get(qualified_name)

    def items(self) -> Iterator[Tuple[str, List[Declaration]]]:
        for module, entries in self._modules.items():
            yield module, list(entries.values())

    def members(self, module: str, owner: str) -> List[Declaration]:
        return [decl for decl in self.declarations(module) if decl.owner == owner]

    def resolve(self, type_name: str) -> Optional[str]:
        """Return the `module#qualified_name` anchor for a declared type."""
        return self._references.get(type_name)

    def find_type(self, type_name: str) -> Optional[Tuple[str, Declaration]]:
        target = self.resolve(type_name)
        if target is None:
            return None
        module, _, qualified = target.partition("#")
        declaration = self.get(module, qualified)
        if declaration is None:
            return None
        return module, declaration

    @property
    def references(self) -> Dict[str, str]:
        return dict(self._references)

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._modules.values())


@dataclass(frozen=True)
class RenderOutput:
    """Serialized document for one output format."""

    format: str
    filename: str
    content: str


__all__ = [
    "ACCESS_ERROR",
    "DUPLICATE_SYMBOL",
    "PARSE_DIAGNOSTIC",
    "KIND_FIELD",
    "KIND_FUNCTION",
    "KIND_TYPE",
    "Annotation",
    "ApiModel",
    "Declaration",
    "Diagnostic",
    "DocInfo",
    "Endpoint",
    "Parameter",
    "ParseResult",
    "RenderOutput",
    "SourceFile",
]
