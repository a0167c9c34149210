"""Output format registry."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Type

from ..config import DocSettings
from ..errors import ConfigError
from ..models import ApiModel, RenderOutput
from .base import Renderer, TemplateRenderer
from .html import HtmlRenderer
from .json_renderer import JsonRenderer
from .markdown import MarkdownRenderer

RENDERERS: Dict[str, Type[Renderer]] = {
    "markdown": MarkdownRenderer,
    "html": HtmlRenderer,
    "json": JsonRenderer,
}

_ALIASES = {"md": "markdown", "htm": "html"}


def normalize_format(name: str) -> str:
    key = name.strip().lower()
    return _ALIASES.get(key, key)


def available_formats() -> List[str]:
    return sorted(RENDERERS)


def get_renderer(
    name: str,
    settings: DocSettings | None = None,
    templates_dir: Path | None = None,
) -> Renderer:
    key = normalize_format(name)
    renderer_cls = RENDERERS.get(key)
    if renderer_cls is None:
        raise ConfigError(f"Unknown output format '{name}' (available: {', '.join(available_formats())})")
    return renderer_cls(settings=settings, templates_dir=templates_dir)


def render(
    model: ApiModel,
    name: str,
    settings: DocSettings | None = None,
    templates_dir: Path | None = None,
) -> RenderOutput:
    """Render ``model`` in one format; identical input gives identical bytes."""
    return get_renderer(name, settings=settings, templates_dir=templates_dir).render(model)


__all__ = [
    "HtmlRenderer",
    "JsonRenderer",
    "MarkdownRenderer",
    "RENDERERS",
    "Renderer",
    "TemplateRenderer",
    "available_formats",
    "get_renderer",
    "normalize_format",
    "render",
]
