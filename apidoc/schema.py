"""Field tables and example payloads for endpoint documentation."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Set, Tuple

from .config import DocSettings
from .models import KIND_FIELD, KIND_TYPE, ApiModel, Declaration

JAVA_TYPE_NAMES = {
    "int": "Integer",
    "long": "Long",
    "double": "Double",
    "float": "Float",
    "boolean": "Boolean",
    "byte": "Byte",
    "short": "Short",
    "char": "Character",
    "java.lang.Integer": "Integer",
    "java.lang.Long": "Long",
    "java.lang.Double": "Double",
    "java.lang.Float": "Float",
    "java.lang.Boolean": "Boolean",
    "java.lang.Byte": "Byte",
    "java.lang.Short": "Short",
    "java.lang.Character": "Character",
    "java.lang.String": "String",
    "java.util.Date": "DateTime",
    "Date": "DateTime",
    "LocalDateTime": "DateTime",
    "java.time.LocalDateTime": "DateTime",
    "LocalDate": "Date",
    "java.time.LocalDate": "Date",
    "LocalTime": "Time",
    "java.time.LocalTime": "Time",
    "java.math.BigDecimal": "BigDecimal",
    "java.math.BigInteger": "BigInteger",
}

_EXAMPLE_VALUES: Dict[str, Any] = {
    "Integer": 0,
    "Long": 0,
    "Short": 0,
    "Byte": 0,
    "BigDecimal": 0,
    "BigInteger": 0,
    "Double": 0.0,
    "Float": 0.0,
    "Boolean": False,
    "Character": "",
    "String": "String",
    "DateTime": "DateTime",
    "Date": "Date",
    "Time": "Time",
    "int": 0,
    "float": 0.0,
    "bool": False,
    "str": "string",
    "bytes": "",
    "datetime": "datetime",
    "date": "date",
}

_COLLECTIONS = {
    "List",
    "ArrayList",
    "LinkedList",
    "Set",
    "HashSet",
    "Collection",
    "Iterable",
    "list",
    "set",
    "tuple",
    "Sequence",
}
_MAPPINGS = {"Map", "HashMap", "LinkedHashMap", "dict", "Dict", "Mapping"}
_VOID = {"void", "Void", "None"}

# Bound on nesting for self-referencing models.
MAX_DEPTH = 8


@dataclass(frozen=True)
class FieldRow:
    """One row of a request/response field table."""

    name: str
    type: str
    required: bool
    description: str
    depth: int = 0


@dataclass(frozen=True)
class EndpointView:
    """Render-ready description of one endpoint."""

    url: str
    method: str
    content_type: str
    request_rows: Tuple[FieldRow, ...]
    response_rows: Tuple[FieldRow, ...]
    request_example: str
    response_example: str


def split_generic(type_name: str) -> Tuple[str, List[str]]:
    """Split ``List<User>`` or ``list[User]`` into base and top-level arguments."""
    text = type_name.strip()
    if text.endswith("[]"):
        return "List", [text[:-2]]
    match = re.match(r"^([^<\[]+)[<\[](.*)[>\]]$", text)
    if not match:
        return text, []
    base, inner = match.group(1).strip(), match.group(2)
    args: List[str] = []
    depth = 0
    current: List[str] = []
    for char in inner:
        if char in "<[":
            depth += 1
        elif char in ">]":
            depth -= 1
        if char == "," and depth == 0:
            args.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    if "".join(current).strip():
        args.append("".join(current).strip())
    return base, args


def simplify_type(type_name: Optional[str], java: bool = True) -> str:
    """Return a documentation-friendly type name without package qualifiers."""
    if not type_name:
        return ""
    text = re.sub(r"\s+", " ", type_name.strip())
    if java and text in JAVA_TYPE_NAMES:
        return JAVA_TYPE_NAMES[text]

    def _identifier(match: re.Match[str]) -> str:
        token = match.group(0)
        if java and token in JAVA_TYPE_NAMES:
            return JAVA_TYPE_NAMES[token]
        simple = token.rsplit(".", 1)[-1]
        if java and simple in JAVA_TYPE_NAMES:
            return JAVA_TYPE_NAMES[simple]
        return simple

    return re.sub(r"[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*", _identifier, text)


def _base_name(type_name: str) -> str:
    return split_generic(type_name)[0].rsplit(".", 1)[-1]


def substitute_type(type_name: str, bindings: Dict[str, str]) -> str:
    """Replace type variables anywhere in ``type_name``, e.g. ``List<T>`` with ``{"T": "User"}``."""
    if not bindings:
        return type_name
    return re.sub(
        r"[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*",
        lambda match: bindings.get(match.group(0), match.group(0)),
        type_name,
    )


def _bindings(declaration: Declaration, type_name: str) -> Dict[str, str]:
    _, args = split_generic(type_name)
    return dict(zip(declaration.type_parameters, args))


class SchemaBuilder:
    """Expands declared model types into field rows and example payloads."""

    def __init__(self, model: ApiModel, settings: DocSettings | None = None) -> None:
        self.model = model
        self.settings = settings or DocSettings()

    def lookup(self, type_name: str) -> Optional[Tuple[str, Declaration]]:
        base = _base_name(type_name)
        found = self.model.find_type(base)
        if found is None or found[1].kind != KIND_TYPE:
            return None
        return found

    def element_type(self, type_name: str) -> Optional[str]:
        """Return the model type a value of ``type_name`` documents, if any."""
        if not type_name:
            return None
        if self.lookup(type_name) is not None:
            return type_name
        base, args = split_generic(type_name)
        simple = base.rsplit(".", 1)[-1]
        if simple in {"Optional", "Annotated"} and args:
            return self.element_type(args[0])
        if simple in _MAPPINGS:
            return None
        if len(args) == 1:
            return self.element_type(args[0])
        return None

    def fields(self, type_name: str, prefix: str = "", depth: int = 0, visited: Set[str] | None = None) -> List[FieldRow]:
        visited = set() if visited is None else visited
        found = self.lookup(type_name)
        if found is None or depth > MAX_DEPTH:
            return []
        module, declaration = found
        if declaration.qualified_name in visited:
            return []
        visited = visited | {declaration.qualified_name}

        rows: List[FieldRow] = []
        for field_decl in self._collect_fields(module, declaration, set(), _bindings(declaration, type_name)):
            field_type = field_decl.returns or ""
            name = f"{prefix}{field_decl.name}"
            rows.append(
                FieldRow(
                    name=name,
                    type=simplify_type(field_type, java=field_decl.path.endswith(".java")),
                    required=field_decl.required,
                    description=field_decl.summary,
                    depth=depth,
                )
            )
            nested = self.element_type(field_type)
            if nested is not None:
                rows.extend(self.fields(nested, prefix=f"{name}.", depth=depth + 1, visited=visited))
        return rows

    def _collect_fields(
        self,
        module: str,
        declaration: Declaration,
        seen: Set[str],
        bindings: Dict[str, str] | None = None,
    ) -> List[Declaration]:
        """Own fields first, then inherited ones, skipping excluded classes and fields.

        Field types come back with ``bindings`` applied, and a generic base such
        as ``Page<T>`` is bound from the subclass's own arguments.
        """
        bindings = bindings or {}
        if declaration.qualified_name in seen:
            return []
        seen.add(declaration.qualified_name)
        excluded = self.settings.excluded_fields_for(declaration.name)
        collected = [
            replace(member, returns=substitute_type(member.returns, bindings)) if member.returns else member
            for member in self.model.members(module, declaration.qualified_name)
            if member.kind == KIND_FIELD
            and "static" not in member.modifiers
            and member.name not in excluded
            and not member.name.startswith("_")
        ]
        for base in declaration.bases:
            base_name = _base_name(base)
            if base_name in {"Object", "BaseModel"} or self.settings.is_class_excluded(base_name):
                continue
            bound_base = substitute_type(base, bindings)
            found = self.lookup(bound_base)
            if found is None:
                continue
            names = {member.name for member in collected}
            for member in self._collect_fields(found[0], found[1], seen, _bindings(found[1], bound_base)):
                if member.name not in names and member.name not in excluded:
                    collected.append(member)
        return collected

    def example(self, type_name: Optional[str], depth: int = 0, visited: Set[str] | None = None) -> Any:
        visited = set() if visited is None else visited
        if not type_name or type_name in _VOID:
            return None
        found = self.lookup(type_name)
        if found is not None and depth <= MAX_DEPTH:
            module, declaration = found
            if declaration.qualified_name in visited:
                return {}
            visited = visited | {declaration.qualified_name}
            payload: Dict[str, Any] = {}
            for field_decl in self._collect_fields(module, declaration, set(), _bindings(declaration, type_name)):
                payload[field_decl.name] = self.example(field_decl.returns or "", depth + 1, visited)
            return payload

        base, args = split_generic(type_name)
        simple = base.rsplit(".", 1)[-1]
        if simple in _COLLECTIONS or type_name.endswith("[]"):
            item = self.example(args[0], depth + 1, visited) if args else None
            return [item] if item is not None else []
        if simple in _MAPPINGS:
            return {}
        if simple in {"Optional", "Annotated", "ResponseEntity", "Mono"} and args:
            return self.example(args[0], depth, visited)
        simplified = simplify_type(simple)
        if simplified in _EXAMPLE_VALUES:
            return _EXAMPLE_VALUES[simplified]
        if simple in _EXAMPLE_VALUES:
            return _EXAMPLE_VALUES[simple]
        return simplified

    def describe(self, declaration: Declaration) -> Optional[EndpointView]:
        endpoint = declaration.endpoint
        if endpoint is None:
            return None
        java = declaration.path.endswith(".java")

        request_rows: List[FieldRow] = []
        request_payload: Dict[str, Any] = {}
        for param in declaration.parameters:
            param_type = param.type or ""
            nested = self.element_type(param_type) if param.location in ("body", "query", None) else None
            if nested is not None:
                request_rows.extend(self.fields(nested))
                value = self.example(param_type)
                if isinstance(value, dict):
                    request_payload.update(value)
                else:
                    request_payload[param.name] = value
                continue
            request_rows.append(
                FieldRow(
                    name=param.name,
                    type=simplify_type(param_type, java=java),
                    required=param.required,
                    description=param.description,
                )
            )
            request_payload[param.name] = self.example(param_type)

        response_rows: List[FieldRow] = []
        nested_response = self.element_type(declaration.returns or "")
        if nested_response is not None:
            response_rows = self.fields(nested_response)
        response_payload = self.example(declaration.returns)

        prefix = self.settings.application_name.strip("/")
        url = f"/{prefix}{endpoint.path}" if prefix else endpoint.path
        return EndpointView(
            url=url,
            method=endpoint.method,
            content_type=endpoint.content_type,
            request_rows=tuple(request_rows),
            response_rows=tuple(response_rows),
            request_example=_dump(request_payload) if request_payload else "",
            response_example=_dump(response_payload) if response_payload is not None else "",
        )


def _dump(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


__all__ = [
    "EndpointView",
    "FieldRow",
    "SchemaBuilder",
    "simplify_type",
    "split_generic",
    "substitute_type",
]
