"""JSON renderer: a sorted, indented dump of the model."""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any, Dict

from ..models import ApiModel, Declaration
from .base import Renderer


def _declaration_payload(declaration: Declaration) -> Dict[str, Any]:
    payload = asdict(declaration)
    payload["tags"] = [list(item) for item in declaration.tags]
    payload["signature"] = declaration.signature
    return payload


class JsonRenderer(Renderer):
    format = "json"
    extension = "json"

    def render_text(self, model: ApiModel) -> str:
        document = {
            "info": asdict(model.info),
            "modules": {
                module: [_declaration_payload(declaration) for declaration in declarations]
                for module, declarations in model.items()
            },
            "references": model.references,
        }
        return json.dumps(document, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


__all__ = ["JsonRenderer"]
