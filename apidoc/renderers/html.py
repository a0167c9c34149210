"""HTML renderer."""

from __future__ import annotations

from markupsafe import Markup, escape

from ..models import ApiModel
from .base import TemplateRenderer
from .context import build_context, link_types


class HtmlRenderer(TemplateRenderer):
    format = "html"
    extension = "html"
    autoescape = True

    def render_text(self, model: ApiModel) -> str:
        context = build_context(model, self.settings)

        def types(type_text: str | None, java: bool = True) -> Markup:
            return Markup(
                link_types(
                    type_text,
                    model,
                    link=lambda label, anchor: f'<a href="#{escape(anchor)}"><code>{escape(label)}</code></a>',
                    escape=lambda text: str(escape(text)),
                    java=java,
                )
            )

        template = self.environment.get_template(self.template_name)
        return self.tidy(template.render(types=types, **context))


__all__ = ["HtmlRenderer"]
