"""Doc comment parsing for Javadoc blocks and Google-style docstrings."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

_HTML_TAG = re.compile(
    r"</?(p|br|li|ul|ol|h[1-6]|div|span|code|pre|b|i|em|strong|tt|a|img|table|thead|tbody|tr|td|th|hr)(\s+[^>]*)?/?>",
    re.IGNORECASE,
)
_INLINE_TAG = re.compile(r"\{@(?:link|linkplain|code|literal|value)\s+([^}]*)\}")
_JAVADOC_TAG = re.compile(r"^@(\w+)\s*(.*)$")

_GOOGLE_SECTION = re.compile(
    r"^\s*(Args|Arguments|Parameters|Returns|Return|Yields|Raises|Attributes|"
    r"Examples?|Notes?|Deprecated|See Also):\s*$",
    re.IGNORECASE,
)
_GOOGLE_PARAM = re.compile(r"^\s*(\*{0,2}\w+)\s*(?:\(([^)]+)\))?\s*:\s*(.*)$")


@dataclass
class DocComment:
    """Structured view of a doc comment."""

    text: str = ""
    summary: str = ""
    params: Dict[str, str] = field(default_factory=dict)
    returns: str = ""
    attributes: Dict[str, str] = field(default_factory=dict)
    tags: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def deprecated(self) -> bool:
        return any(name == "deprecated" for name, _ in self.tags)


def strip_html(text: str) -> str:
    """Remove the HTML markup Javadoc commonly carries."""
    text = _INLINE_TAG.sub(lambda match: match.group(1).strip(), text)
    return _HTML_TAG.sub("", text)


def collapse(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def summarize(text: str) -> str:
    """Return the first non-empty line of a description."""
    for line in text.splitlines():
        stripped = line.strip()
        if stripped:
            return stripped
    return ""


def javadoc_body(raw: str) -> str:
    """Strip comment delimiters and leading asterisks from a Javadoc block."""
    body = raw.strip()
    if body.startswith("/**"):
        body = body[3:]
    elif body.startswith("/*"):
        body = body[2:]
    if body.endswith("*/"):
        body = body[:-2]
    lines = []
    for line in body.splitlines():
        stripped = line.strip()
        if stripped.startswith("*"):
            stripped = stripped[1:]
            if stripped.startswith(" "):
                stripped = stripped[1:]
        lines.append(stripped.rstrip())
    return "\n".join(lines).strip("\n")


def parse_javadoc(raw: str) -> DocComment:
    """Parse a ``/** ... */`` block into description and block tags."""
    if not raw:
        return DocComment()

    description: List[str] = []
    tags: List[List[str]] = []
    for line in javadoc_body(raw).splitlines():
        match = _JAVADOC_TAG.match(line.strip())
        if match:
            tags.append([match.group(1), match.group(2)])
        elif tags:
            tags[-1][1] = f"{tags[-1][1]} {line.strip()}".strip()
        else:
            description.append(strip_html(line).strip())

    text = "\n".join(description).strip()
    doc = DocComment(text=text, summary=summarize(text))
    for name, value in tags:
        value = collapse(strip_html(value))
        if name == "param":
            param_name, _, param_desc = value.partition(" ")
            doc.params[param_name.strip("<>")] = param_desc.strip()
        elif name == "return":
            doc.returns = value
        else:
            doc.tags.append((name, value))
    return doc


def parse_docstring(docstring: str) -> DocComment:
    """Parse a Google-style docstring (already dedented)."""
    if not docstring:
        return DocComment()

    sections: Dict[str, List[str]] = {}
    current = "_description"
    order: List[str] = [current]
    sections[current] = []
    for line in docstring.splitlines():
        match = _GOOGLE_SECTION.match(line)
        if match:
            current = match.group(1).lower()
            sections.setdefault(current, [])
            order.append(current)
            continue
        sections[current].append(line)

    text = "\n".join(sections["_description"]).strip()
    doc = DocComment(text=text, summary=summarize(text))

    for name in order[1:]:
        content = sections.get(name, [])
        if name in ("args", "arguments", "parameters"):
            doc.params.update(_parse_google_params(content))
        elif name == "attributes":
            doc.attributes.update(_parse_google_params(content))
        elif name in ("returns", "return", "yields"):
            value = collapse(" ".join(content))
            _, sep, rest = value.partition(":")
            # "Type: description" form.
            doc.returns = rest.strip() if sep and " " not in value.split(":", 1)[0] else value
        elif name == "deprecated":
            doc.tags.append(("deprecated", collapse(" ".join(content))))
        elif name == "raises":
            for raised, desc in _parse_google_params(content).items():
                doc.tags.append(("raises", f"{raised} {desc}".strip()))
    return doc


def _parse_google_params(lines: List[str]) -> Dict[str, str]:
    params: Dict[str, str] = {}
    current: str | None = None
    for line in lines:
        match = _GOOGLE_PARAM.match(line)
        if match and (current is None or _indent(line) <= _indent_of_first(lines)):
            current = match.group(1).lstrip("*")
            params[current] = match.group(3).strip()
        elif current and line.strip():
            params[current] = f"{params[current]} {line.strip()}".strip()
    return params


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip(" "))


def _indent_of_first(lines: List[str]) -> int:
    for line in lines:
        if line.strip():
            return _indent(line)
    return 0


__all__ = [
    "DocComment",
    "collapse",
    "javadoc_body",
    "parse_docstring",
    "parse_javadoc",
    "strip_html",
    "summarize",
]
