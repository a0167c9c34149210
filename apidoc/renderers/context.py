"""View-model shared by the template based renderers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from ..config import DocSettings
from ..models import KIND_FIELD, KIND_FUNCTION, KIND_TYPE, ApiModel, Declaration
from ..schema import EndpointView, FieldRow, SchemaBuilder, simplify_type

_IDENTIFIER = re.compile(r"[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*")

_TYPE_KEYWORDS = ("@interface", "interface", "enum", "record", "class")


@dataclass
class EndpointEntry:
    declaration: Declaration
    view: EndpointView
    anchor: str


@dataclass
class TypeEntry:
    declaration: Declaration
    anchor: str
    keyword: str
    fields: List[FieldRow] = field(default_factory=list)
    methods: List[Declaration] = field(default_factory=list)


@dataclass
class ModuleEntry:
    name: str
    anchor: str
    endpoints: List[EndpointEntry] = field(default_factory=list)
    types: List[TypeEntry] = field(default_factory=list)
    functions: List[Declaration] = field(default_factory=list)
    constants: List[Declaration] = field(default_factory=list)


def anchor_id(*parts: str) -> str:
    text = "-".join(part for part in parts if part)
    slug = re.sub(r"[^A-Za-z0-9_-]+", "-", text).strip("-").lower()
    return slug or "root"


def type_keyword(declaration: Declaration) -> str:
    for keyword in _TYPE_KEYWORDS:
        if keyword in declaration.modifiers:
            return keyword
    return "class"


def is_java(declaration: Declaration) -> bool:
    return declaration.path.endswith(".java")


def link_types(
    type_text: Optional[str],
    model: ApiModel,
    link: Callable[[str, str], str],
    escape: Callable[[str], str],
    java: bool = True,
) -> str:
    """Render a type expression, turning declared types into links.

    ``link(label, anchor)`` formats one reference and ``escape`` is applied to
    everything in between, so the same walk serves Markdown and HTML.
    """
    text = simplify_type(type_text, java=java) if type_text else ""
    pieces: List[str] = []
    position = 0
    for match in _IDENTIFIER.finditer(text):
        pieces.append(escape(text[position:match.start()]))
        token = match.group(0)
        target = model.resolve(token)
        if target is None:
            pieces.append(escape(token))
        else:
            module, _, qualified = target.partition("#")
            pieces.append(link(token, anchor_id(module, qualified)))
        position = match.end()
    pieces.append(escape(text[position:]))
    return "".join(pieces)


def build_context(model: ApiModel, settings: DocSettings | None = None) -> Dict[str, object]:
    """Group the frozen model into modules of endpoints, types and functions."""
    settings = settings or DocSettings()
    schema = SchemaBuilder(model, settings)
    modules: List[ModuleEntry] = []
    for module, declarations in model.items():
        entry = ModuleEntry(name=module, anchor=anchor_id("module", module))
        type_entries: Dict[str, TypeEntry] = {}
        for declaration in declarations:
            if declaration.kind == KIND_TYPE:
                type_entry = TypeEntry(
                    declaration=declaration,
                    anchor=anchor_id(module, declaration.qualified_name),
                    keyword=type_keyword(declaration),
                    fields=_own_fields(declarations, declaration, java=is_java(declaration)),
                )
                type_entries[declaration.qualified_name] = type_entry
                entry.types.append(type_entry)
                continue

            if declaration.endpoint is not None:
                view = schema.describe(declaration)
                if view is not None:
                    entry.endpoints.append(
                        EndpointEntry(
                            declaration=declaration,
                            view=view,
                            anchor=anchor_id(module, declaration.qualified_name, "endpoint"),
                        )
                    )

            owner = type_entries.get(declaration.owner or "")
            if declaration.kind == KIND_FUNCTION:
                if owner is not None:
                    owner.methods.append(declaration)
                elif declaration.owner is None:
                    entry.functions.append(declaration)
            elif declaration.kind == KIND_FIELD and declaration.owner is None:
                entry.constants.append(declaration)
        modules.append(entry)

    return {
        "info": model.info,
        "settings": settings,
        "modules": modules,
    }


def _own_fields(declarations: List[Declaration], owner: Declaration, java: bool) -> List[FieldRow]:
    return [
        FieldRow(
            name=member.name,
            type=simplify_type(member.returns, java=java),
            required=member.required,
            description=member.summary,
        )
        for member in declarations
        if member.owner == owner.qualified_name and member.kind == KIND_FIELD
    ]


__all__ = [
    "EndpointEntry",
    "ModuleEntry",
    "TypeEntry",
    "anchor_id",
    "build_context",
    "is_java",
    "link_types",
    "type_keyword",
]
