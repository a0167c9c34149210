"""Markdown renderer."""

from __future__ import annotations

from pathlib import Path

from ..config import DocSettings
from ..models import ApiModel
from ..postproc.toc import TableOfContentsBuilder
from .base import TemplateRenderer
from .context import build_context, link_types


def markdown_escape(text: object) -> str:
    value = "" if text is None else str(text)
    value = value.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
    return value.replace("|", "\\|")


def markdown_cell(text: object) -> str:
    value = markdown_escape(text).strip()
    return "<br>".join(line.strip() for line in value.splitlines()) if value else ""


class MarkdownRenderer(TemplateRenderer):
    format = "markdown"
    extension = "md"

    def __init__(
        self,
        settings: DocSettings | None = None,
        templates_dir: Path | None = None,
        toc_builder: TableOfContentsBuilder | None = None,
    ) -> None:
        super().__init__(settings, templates_dir)
        self.toc_builder = toc_builder or TableOfContentsBuilder()
        self.environment.filters["cell"] = markdown_cell

    def render_text(self, model: ApiModel) -> str:
        context = build_context(model, self.settings)

        def types(type_text: str | None, java: bool = True) -> str:
            return link_types(
                type_text,
                model,
                link=lambda label, anchor: f"[{label}](#{anchor})",
                escape=markdown_escape,
                java=java,
            )

        template = self.environment.get_template(self.template_name)
        text = template.render(
            types=types,
            toc_placeholder=TableOfContentsBuilder.PLACEHOLDER,
            **context,
        )
        return self.tidy(self.toc_builder.build(text))


__all__ = ["MarkdownRenderer", "markdown_cell", "markdown_escape"]
