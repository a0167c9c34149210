"""Declaration parser implementations and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Dict, Iterable, List, Sequence, Set

from .base import DeclarationParser
from .java import JavaParser
from .python import PythonParser

_ENTRY_POINT_GROUP = "apidoc.parsers"

_BUILTIN_FACTORIES: dict[str, Callable[[], DeclarationParser]] = {
    "python": PythonParser,
    "java": JavaParser,
}


def discover_parsers(enabled: Sequence[str] | None = None) -> List[DeclarationParser]:
    """Return instantiated parsers, honoring optional enabled names."""

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    parsers: List[DeclarationParser] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], DeclarationParser]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, DeclarationParser):
            raise TypeError(f"Parser factory for '{name}' did not return a DeclarationParser instance")
        parsers.append(instance)
        seen.add(key)
        if enabled_set is not None:
            enabled_set.discard(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        name = entry.name
        try:
            loaded = entry.load()
        except Exception as exc:
            raise RuntimeError(f"Failed to load parser entry point '{name}': {exc}") from exc

        def _factory(obj: object = loaded) -> DeclarationParser:
            return _coerce_parser(obj)

        _add(name, _factory)

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ValueError(f"Unknown parsers requested: {missing}")

    return parsers


def parsers_by_language(parsers: Iterable[DeclarationParser]) -> Dict[str, DeclarationParser]:
    """Index parsers by the language tag they handle; first one wins."""
    index: Dict[str, DeclarationParser] = {}
    for parser in parsers:
        index.setdefault(parser.language, parser)
    return index


def _coerce_parser(obj: object) -> DeclarationParser:
    if isinstance(obj, DeclarationParser):
        return obj
    if isinstance(obj, type) and issubclass(obj, DeclarationParser):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, DeclarationParser):
            return instance
    raise TypeError("Parser entry point must be a DeclarationParser subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "DeclarationParser",
    "JavaParser",
    "PythonParser",
    "discover_parsers",
    "parsers_by_language",
]
