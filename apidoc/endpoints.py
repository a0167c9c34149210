"""HTTP route helpers shared by the framework-aware parsers."""

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

from .models import Annotation

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")

SPRING_SHORTCUTS = {
    "GetMapping": "GET",
    "PostMapping": "POST",
    "PutMapping": "PUT",
    "DeleteMapping": "DELETE",
    "PatchMapping": "PATCH",
}

# Verbs documented for a @RequestMapping that names none.
SPRING_ANY_METHOD = ("GET", "POST")

_PARAM_PATTERNS: List[Tuple[re.Pattern[str], str]] = [
    (re.compile(r"/:([A-Za-z_][A-Za-z0-9_]*)"), r"/{\1}"),
    (
        re.compile(r"/<(?:(?:[A-Za-z_][A-Za-z0-9_]*):)?([A-Za-z_][A-Za-z0-9_]*)>"),
        r"/{\1}",
    ),
    (re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\s*:\s*[^}]+\}"), r"{\1}"),
]

_STRING_LITERAL = re.compile(r"(?P<quote>['\"])(?P<value>(?:\\.|(?!(?P=quote)).)*)(?P=quote)")


def normalize_path(path: str) -> str:
    """Return a canonical representation for endpoint paths."""
    if not path:
        return "/"
    result = path.strip()
    if not result.startswith("/"):
        result = "/" + result
    for pattern, replacement in _PARAM_PATTERNS:
        result = pattern.sub(replacement, result)
    result = re.sub(r"/{2,}", "/", result)
    if len(result) > 1 and result.endswith("/"):
        result = result[:-1]
    return result or "/"


def join_paths(prefix: str, route: str) -> str:
    """Combine class-level and method-level paths."""
    prefix_norm = normalize_path(prefix) if prefix else ""
    route_norm = normalize_path(route)
    if not prefix_norm or prefix_norm == "/":
        return route_norm
    if route_norm == "/":
        return prefix_norm
    return normalize_path(f"{prefix_norm}{route_norm}")


def line_of(text: str, index: int) -> int:
    """Return 1-based line number for a character index."""
    return text.count("\n", 0, index) + 1


def annotation_argument(annotation: Annotation, *names: str) -> Optional[str]:
    """Return a named annotation argument, or the positional one for ``value``.

    Array values such as ``{"/a", "/b"}`` resolve to their first element.
    """
    args = annotation.arguments.strip()
    if not args:
        return None
    for name in names:
        match = re.search(rf"\b{re.escape(name)}\s*=\s*", args)
        if match:
            return _first_value(args[match.end():])
    if "value" in names and not re.match(r"^\s*[A-Za-z_]\w*\s*=", args):
        return _first_value(args)
    return None


def _first_value(text: str) -> str:
    text = text.strip()
    if text.startswith("{"):
        text = text[1:]
    literal = _STRING_LITERAL.match(text.strip())
    if literal:
        return literal.group("value")
    token = re.match(r"[^,})]+", text)
    return token.group(0).strip() if token else ""


def parse_request_methods(text: str) -> Tuple[str, ...]:
    """Extract verbs from a ``method = {RequestMethod.GET, ...}`` expression."""
    methods: List[str] = []
    cleaned = text.replace("{", "").replace("}", "")
    for part in cleaned.split(","):
        token = part.strip().rsplit(".", 1)[-1]
        token = re.sub(r"[^A-Za-z]", "", token).upper()
        if token in HTTP_METHODS and token not in methods:
            methods.append(token)
    return tuple(methods)


def spring_route(annotations: Sequence[Annotation]) -> Optional[Tuple[Tuple[str, ...], str]]:
    """Return ``(methods, path)`` for the first Spring mapping annotation."""
    for annotation in annotations:
        name = annotation.name.rsplit(".", 1)[-1]
        if name in SPRING_SHORTCUTS:
            path = annotation_argument(annotation, "value", "path") or ""
            return (SPRING_SHORTCUTS[name],), path
        if name == "RequestMapping":
            path = annotation_argument(annotation, "value", "path") or ""
            methods: Tuple[str, ...] = ()
            match = re.search(r"\bmethod\s*=\s*(\{[^}]*\}|[\w.]+)", annotation.arguments)
            if match:
                methods = parse_request_methods(match.group(1))
            return methods or SPRING_ANY_METHOD, path
    return None


def spring_base_path(annotations: Sequence[Annotation]) -> str:
    """Return the class-level ``@RequestMapping`` path, if any."""
    for annotation in annotations:
        if annotation.name.rsplit(".", 1)[-1] == "RequestMapping":
            return annotation_argument(annotation, "value", "path") or ""
    return ""


__all__ = [
    "HTTP_METHODS",
    "SPRING_SHORTCUTS",
    "annotation_argument",
    "join_paths",
    "line_of",
    "normalize_path",
    "parse_request_methods",
    "spring_base_path",
    "spring_route",
]
