"""Renderer interface and the Jinja2 environment shared by template renderers."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader

from ..config import DocSettings
from ..models import ApiModel, RenderOutput

TEMPLATES_ROOT = Path(__file__).resolve().parent.parent / "templates"
OUTPUT_STEM = "api-docs"


class Renderer(ABC):
    """Serializes a frozen ApiModel into one output format."""

    format: str = ""
    extension: str = ""

    def __init__(self, settings: DocSettings | None = None, templates_dir: Path | None = None) -> None:
        self.settings = settings or DocSettings()
        self.templates_dir = templates_dir

    @property
    def filename(self) -> str:
        return f"{OUTPUT_STEM}.{self.extension}"

    @abstractmethod
    def render_text(self, model: ApiModel) -> str:
        """Return the document text for ``model``."""

    def render(self, model: ApiModel) -> RenderOutput:
        if not model.frozen:
            raise RuntimeError("ApiModel must be frozen before rendering")
        return RenderOutput(format=self.format, filename=self.filename, content=self.render_text(model))


class TemplateRenderer(Renderer):
    """Renderer backed by ``templates/<format>/document.j2``."""

    template_name = "document.j2"
    autoescape = False

    def __init__(self, settings: DocSettings | None = None, templates_dir: Path | None = None) -> None:
        super().__init__(settings, templates_dir)
        self._env = self._create_env(templates_dir)

    def _create_env(self, templates_dir: Optional[Path]) -> Environment:
        directories = []
        if templates_dir:
            # Overrides may be laid out per format or flat.
            directories.append(str(Path(templates_dir) / self.format))
            directories.append(str(templates_dir))
        directories.append(str(TEMPLATES_ROOT / self.format))
        loader = FileSystemLoader(directories)
        env = Environment(
            loader=loader,
            autoescape=self.autoescape,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        return env

    @property
    def environment(self) -> Environment:
        return self._env

    @staticmethod
    def tidy(text: str) -> str:
        text = re.sub(r"[ \t]+\n", "\n", text)
        text = re.sub(r"\n{3,}", "\n\n", text)
        return text.strip() + "\n"


__all__ = ["OUTPUT_STEM", "Renderer", "TEMPLATES_ROOT", "TemplateRenderer"]
