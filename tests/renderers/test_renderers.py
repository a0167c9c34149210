"""Tests for the output renderers."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path

import pytest

from apidoc.builder import DocModelBuilder
from apidoc.config import DocSettings
from apidoc.errors import ConfigError
from apidoc.models import ApiModel, DocInfo, SourceFile
from apidoc.parsers.java import JavaParser
from apidoc.parsers.python import PythonParser
from apidoc.renderers import available_formats, get_renderer, render

JAVA = """
package com.demo;

/**
 * Order endpoints.
 * @author peach
 */
@RestController
@RequestMapping("/orders")
public class OrderController {
    /** Place an order. */
    @PostMapping
    public Order place(@RequestBody Order order) { return order; }
}

/** A customer order. */
public class Order {
    /** Order number. */
    @NotNull
    private String number;
    private List<Line> lines;
}

public class Line {
    private String sku; // stock keeping unit
    private int quantity;
}
"""

PYTHON = '''
"""Helpers."""

RETRIES: int = 3
"""How often to retry."""


def checksum(data: bytes, seed: int = 0) -> int:
    """Compute a checksum.

    Args:
        data: Raw bytes.
    """
'''


def _model() -> ApiModel:
    sources = [
        SourceFile(path="src/com/demo/Orders.java", content=JAVA.lstrip("\n"), language="Java"),
        SourceFile(path="tools/helpers.py", content=textwrap.dedent(PYTHON).lstrip("\n"), language="Python"),
    ]
    results = [JavaParser().parse(sources[0]), PythonParser().parse(sources[1])]
    info = DocInfo(title="Shop API", version="V1.2.0", author="peach", date="2024-01-02")
    model, _ = DocModelBuilder().build(results, info)
    return model


def test_available_formats() -> None:
    assert available_formats() == ["html", "json", "markdown"]


def test_unknown_format_raises_config_error() -> None:
    with pytest.raises(ConfigError):
        get_renderer("pdf")


def test_rendering_requires_frozen_model() -> None:
    with pytest.raises(RuntimeError):
        render(ApiModel(), "json")


@pytest.mark.parametrize("name", ["markdown", "html", "json"])
def test_rendering_is_deterministic(name: str) -> None:
    model = _model()

    first = render(model, name)
    second = render(model, name)

    assert first.content.encode("utf-8") == second.content.encode("utf-8")
    assert first == second


def test_markdown_document_layout() -> None:
    output = render(_model(), "md", settings=DocSettings(application_name="shop"))

    assert output.format == "markdown"
    assert output.filename == "api-docs.md"
    text = output.content
    assert text.startswith("# Shop API\n")
    assert "| V1.2.0 | peach | 2024-01-02 |" in text
    assert "## Table of Contents" in text
    assert "### POST /shop/orders" in text
    assert "- **Content-Type:** `JSON`" in text
    assert "| number | String | Yes | Order number. |" in text
    assert "| lines.sku | String | No | stock keeping unit |" in text
    assert '"quantity": 0' in text
    assert "- **Author:** peach" in text
    # Declared types link to their section.
    assert "List&lt;[Line](#com-demo-line)&gt;" in text
    assert '<a id="com-demo-line"></a>' in text
    assert "#### `checksum(data: bytes, seed: int) -> int`" in text
    assert "| RETRIES | int | 3 | How often to retry. |" in text
    assert "\n\n\n" not in text


def test_markdown_respects_json_toggles() -> None:
    settings = DocSettings(show_request_json=False, show_response_json=False)

    text = render(_model(), "markdown", settings=settings).content

    assert "Request example" not in text
    assert "Response example" not in text


def test_html_document_escapes_and_links() -> None:
    text = render(_model(), "html").content

    assert text.startswith("<!DOCTYPE html>")
    assert "<h1>Shop API</h1>" in text
    assert '<h3 id="com-demo-ordercontroller-place-endpoint">POST /orders</h3>' in text
    assert 'List&lt;<a href="#com-demo-line"><code>Line</code></a>&gt;' in text
    assert "&#34;quantity&#34;: 0" in text or "&quot;quantity&quot;: 0" in text


def test_json_document_structure() -> None:
    output = render(_model(), "json")
    data = json.loads(output.content)

    assert output.filename == "api-docs.json"
    assert data["info"]["title"] == "Shop API"
    assert list(data["modules"]) == ["com.demo", "tools.helpers"]
    place = next(item for item in data["modules"]["com.demo"] if item["name"] == "place")
    assert place["endpoint"]["methods"] == ["POST"]
    assert place["endpoint"]["path"] == "/orders"
    assert data["references"]["Order"] == "com.demo#Order"


def test_templates_dir_override(tmp_path: Path) -> None:
    override = tmp_path / "templates" / "markdown"
    override.mkdir(parents=True)
    (override / "document.j2").write_text(
        "# {{ info.title }}\n{% for module in modules %}- {{ module.name }}\n{% endfor %}",
        encoding="utf-8",
    )

    text = render(_model(), "markdown", templates_dir=tmp_path / "templates").content

    assert text == "# Shop API\n- com.demo\n- tools.helpers\n"
