"""Java declaration parser with Spring MVC endpoint extraction.

The parser works on a masked copy of the source in which comments and the
contents of string literals are blanked out, so brace and parenthesis
matching never trips over text. Positions stay aligned with the original,
which lets annotation arguments and types be sliced from the unmasked code.
Class bodies are split into members at depth-zero ``;`` and ``{...}``
boundaries; a member that cannot be understood becomes a diagnostic and
parsing resumes with the next member. When braces do not balance, a member
whose body swallows the next member declared at its own indentation is cut
short there, so one bad body costs one member rather than the whole file.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from pathlib import PurePosixPath
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from ..endpoints import join_paths, line_of, spring_base_path, spring_route, annotation_argument
from ..logging import get_logger
from ..models import (
    KIND_FIELD,
    KIND_FUNCTION,
    KIND_TYPE,
    Annotation,
    Declaration,
    Endpoint,
    Parameter,
    ParseResult,
    SourceFile,
)
from .base import DeclarationParser
from .doc_comments import DocComment, collapse, parse_javadoc

logger = get_logger("parsers.java")

_MODIFIERS = {
    "public",
    "protected",
    "private",
    "static",
    "final",
    "abstract",
    "synchronized",
    "native",
    "transient",
    "volatile",
    "strictfp",
    "default",
    "sealed",
    "non-sealed",
}

_TYPE_DECLARATION = re.compile(r"(@interface|class|interface|enum|record)\s+([A-Za-z_$][\w$]*)")
_IDENTIFIER = re.compile(r"[A-Za-z_$][\w$]*")
_TYPE_TEXT = re.compile(r"^[\w$.<>\[\]?,&\s]*[\w$>\]]$")
_PARAMETER = re.compile(r"^(?P<type>.*?[\w$>\]])\s*(?P<varargs>\.\.\.)?\s+(?P<name>[A-Za-z_$][\w$]*)$")
_FIELD = re.compile(r"^(?P<type>.*?[\w$>\]])\s+(?P<name>[A-Za-z_$][\w$]*)\s*(?:\[\s*\]\s*)*$")
_PACKAGE = re.compile(r"^\s*package\s+([\w.]+)\s*;", re.MULTILINE)
_MEMBER_START = re.compile(
    r"@[A-Za-z_$]"
    r"|(?:public|protected|private|static|final|abstract|class|interface|enum|record)\b"
    r"|[A-Za-z_$][\w$.]*(?:<[^;{}()]*>)?(?:\[\])*\s+[A-Za-z_$][\w$]*\s*[(;=]"
)
_STATEMENT_WORDS = {
    "assert",
    "break",
    "case",
    "catch",
    "continue",
    "do",
    "else",
    "finally",
    "for",
    "if",
    "new",
    "return",
    "super",
    "switch",
    "this",
    "throw",
    "try",
    "while",
    "yield",
}

_REQUIRED_ANNOTATIONS = {"NotNull", "NotEmpty", "NotBlank"}
_DESCRIPTION_ANNOTATIONS = ("ApiModelProperty", "Schema", "JsonProperty")
_CONTROLLER_ANNOTATIONS = {"RestController", "Controller"}

_SPECIAL_PARAMETER_TYPES = {
    "HttpServletRequest",
    "HttpServletResponse",
    "HttpSession",
    "BindingResult",
    "Model",
    "ModelMap",
    "RedirectAttributes",
    "Errors",
}


class _Malformed(Exception):
    """Raised for a member that cannot be parsed."""

    def __init__(self, message: str, index: int) -> None:
        super().__init__(message)
        self.index = index


@dataclass
class _Masked:
    text: str
    code: str
    structure: str
    javadocs: List[Tuple[int, int]]
    line_comments: List[Tuple[int, str]]


@dataclass
class _Unit:
    start: int
    header_end: int
    body_start: Optional[int] = None
    body_end: Optional[int] = None
    # Body brace never closed; body_end is where splitting resumed.
    unterminated: bool = False
    error: Optional[str] = None


def mask_source(text: str) -> _Masked:
    """Blank out comments (and literal contents in ``structure``) preserving offsets."""
    code = list(text)
    structure = list(text)
    javadocs: List[Tuple[int, int]] = []
    line_comments: List[Tuple[int, str]] = []

    def _blank(buffer: List[str], start: int, end: int) -> None:
        for index in range(start, end):
            if buffer[index] != "\n":
                buffer[index] = " "

    i = 0
    length = len(text)
    while i < length:
        char = text[i]
        if text.startswith("//", i):
            end = text.find("\n", i)
            end = length if end == -1 else end
            line_comments.append((i, text[i + 2 : end].strip()))
            _blank(code, i, end)
            _blank(structure, i, end)
            i = end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            end = length if end == -1 else end + 2
            if text.startswith("/**", i) and not text.startswith("/**/", i):
                javadocs.append((i, end))
            _blank(code, i, end)
            _blank(structure, i, end)
            i = end
        elif text.startswith('"""', i):
            end = text.find('"""', i + 3)
            end = length if end == -1 else end + 3
            _blank(structure, i + 3, max(i + 3, end - 3))
            i = end
        elif char in "\"'":
            j = i + 1
            while j < length and text[j] != char and text[j] != "\n":
                j += 2 if text[j] == "\\" else 1
            _blank(structure, i + 1, min(j, length))
            i = j + 1
        else:
            i += 1
    return _Masked(
        text=text,
        code="".join(code),
        structure="".join(structure),
        javadocs=javadocs,
        line_comments=line_comments,
    )


def _match(structure: str, index: int, end: int, opening: str, closing: str) -> Optional[int]:
    depth = 0
    for position in range(index, end):
        char = structure[position]
        if char == opening:
            depth += 1
        elif char == closing:
            depth -= 1
            if depth == 0:
                return position
    return None


def _previous_char(structure: str, index: int, floor: int) -> str:
    position = index - 1
    while position >= floor and structure[position].isspace():
        position -= 1
    return structure[position] if position >= floor else ""


def _line_indent(structure: str, index: int) -> int:
    line_start = structure.rfind("\n", 0, index) + 1
    line_end = structure.find("\n", line_start)
    line = structure[line_start : len(structure) if line_end == -1 else line_end]
    return len(line) - len(line.lstrip())


def _looks_like_member(content: str) -> bool:
    word = re.match(r"[A-Za-z_$][\w$]*", content)
    if word and word.group(0) in _STATEMENT_WORDS:
        return False
    return bool(_MEMBER_START.match(content))


def _member_start_after(structure: str, brace: int, limit: int, indent: int) -> Optional[int]:
    """Offset of the first line in ``(brace, limit)`` that opens a member at or left of ``indent``."""
    position = structure.find("\n", brace, limit)
    while position != -1:
        line_start = position + 1
        line_end = structure.find("\n", line_start, limit)
        line = structure[line_start : limit if line_end == -1 else line_end]
        content = line.lstrip()
        if content and len(line) - len(content) <= indent and _looks_like_member(content):
            return line_start
        position = line_end
    return None


def split_members(structure: str, start: int, end: int, open_ended: bool = False) -> Iterator[_Unit]:
    """Yield member units between ``start`` and ``end`` of a masked body.

    Brace problems never stop the walk. A ``{`` without a match, or one whose
    match runs past a member starting at the header's indentation when the
    enclosing body is already known to be unbalanced (``open_ended``), yields
    an ``unterminated`` unit and splitting resumes at that member. Stray
    ``}`` and trailing text come back as ``error`` units.
    """
    unit_start = start
    paren = 0
    has_assign = False
    i = start
    while i < end:
        char = structure[i]
        if char == "(":
            paren += 1
        elif char == ")":
            paren = max(0, paren - 1)
        elif char == "=" and paren == 0:
            neighbours = structure[i - 1 : i] + structure[i + 1 : i + 2]
            if not any(op in neighbours for op in "=!<>"):
                has_assign = True
        elif char == ";" and paren == 0:
            yield _Unit(unit_start, i)
            unit_start = i + 1
            has_assign = False
        elif char == "{":
            close = _match(structure, i, end, "{", "}")
            expression = has_assign or (paren > 0 and _previous_char(structure, i, unit_start) in ("=", ",", "("))
            if close is not None and expression:
                i = close + 1
                continue
            resume = None
            if close is None or open_ended:
                lead = len(structure) - len(structure[unit_start:].lstrip())
                resume = _member_start_after(
                    structure, i, end if close is None else close, _line_indent(structure, lead)
                )
            paren = 0
            has_assign = False
            if close is None or resume is not None:
                body_end = end if resume is None else resume
                yield _Unit(unit_start, i, i, body_end, unterminated=True)
                unit_start = i = body_end
                continue
            yield _Unit(unit_start, i, i, close)
            unit_start = close + 1
            i = close + 1
            continue
        elif char == "}":
            yield _Unit(i, i + 1, error="Unexpected closing brace")
            unit_start = i + 1
            paren = 0
            has_assign = False
        i += 1
    if structure[unit_start:end].strip():
        yield _Unit(unit_start, end, error="Unterminated declaration")


def _split_top_level(text: str, structure: str, separator: str = ",") -> List[Tuple[str, str]]:
    """Split ``text`` on separators outside ``<>``, ``()``, ``{}`` and ``[]``."""
    parts: List[Tuple[str, str]] = []
    depth = 0
    last = 0
    for index, char in enumerate(structure):
        if char in "<({[":
            depth += 1
        elif char in ">)}]":
            depth = max(0, depth - 1)
        elif char == separator and depth == 0:
            parts.append((text[last:index], structure[last:index]))
            last = index + 1
    parts.append((text[last:], structure[last:]))
    return [(code, struct) for code, struct in parts if struct.strip()]


def _split_prefix(code: str, structure: str) -> Tuple[List[Annotation], List[str], int]:
    """Consume leading annotations and modifiers, returning the offset of the rest."""
    annotations: List[Annotation] = []
    modifiers: List[str] = []
    pos = 0
    length = len(structure)
    while True:
        while pos < length and structure[pos].isspace():
            pos += 1
        if pos >= length:
            break
        if structure[pos] == "@" and not structure.startswith("@interface", pos):
            match = re.match(r"@\s*([\w$.]+)", structure[pos:])
            if not match:
                raise _Malformed("Malformed annotation", pos)
            name = match.group(1)
            pos += match.end()
            look = pos
            while look < length and structure[look].isspace():
                look += 1
            arguments = ""
            if look < length and structure[look] == "(":
                close = _match(structure, look, length, "(", ")")
                if close is None:
                    raise _Malformed(f"Unbalanced parentheses in annotation @{name}", look)
                arguments = collapse(code[look + 1 : close])
                pos = close + 1
            annotations.append(Annotation(name=name, arguments=arguments))
            continue
        match = re.match(r"[a-z-]+", structure[pos:])
        if match and match.group(0) in _MODIFIERS:
            modifiers.append(match.group(0))
            pos += match.end()
            continue
        break
    return annotations, modifiers, pos


def _strip_type_parameters(structure: str) -> int:
    stripped = len(structure) - len(structure.lstrip())
    if structure[stripped:stripped + 1] != "<":
        return 0
    close = _match(structure, stripped, len(structure), "<", ">")
    return 0 if close is None else close + 1


def _type_parameters(tail: str) -> Tuple[str, ...]:
    """Names declared by a leading ``<K, V extends Bound>`` clause."""
    end = _strip_type_parameters(tail)
    if not end:
        return ()
    inner = tail[tail.index("<") + 1 : end - 1]
    names = []
    for code, _ in _split_top_level(inner, inner):
        match = re.match(r"\s*(?:@[\w.]+\s+)*([A-Za-z_$][\w$]*)", code)
        if match:
            names.append(match.group(1))
    return tuple(names)


def _overload_name(owner: str, name: str, parameters: Sequence[Parameter]) -> str:
    return f"{owner}.{name}({', '.join(param.type or '?' for param in parameters)})"


def _simple(name: str) -> str:
    return re.sub(r"<.*", "", name).rsplit(".", 1)[-1].strip()


def _has_annotation(annotations: Sequence[Annotation], name: str) -> Optional[Annotation]:
    for annotation in annotations:
        if annotation.name.rsplit(".", 1)[-1] == name:
            return annotation
    return None


def _required_flag(annotation: Annotation) -> Optional[bool]:
    match = re.search(r"\brequired\s*=\s*([\w.]+)", annotation.arguments)
    if not match:
        return None
    value = match.group(1).upper()
    if value.endswith("FALSE"):
        return False
    if value.endswith("TRUE"):
        return True
    return None


class JavaParser(DeclarationParser):
    """Extracts types, methods, fields and Spring routes from Java sources."""

    language = "Java"

    def parse(self, source: SourceFile) -> ParseResult:
        masked = mask_source(source.content)
        package = _PACKAGE.search(masked.structure)
        result = ParseResult(
            path=source.path,
            module=package.group(1) if package else self._module_from_path(source.path),
            language=self.language,
        )
        self._parse_body(source, masked, result, 0, len(masked.structure), owner=None, context={})
        logger.debug(
            "Parsed %s: %d declarations, %d diagnostics",
            source.path,
            len(result.declarations),
            len(result.diagnostics),
        )
        return result

    @staticmethod
    def _module_from_path(path: str) -> str:
        parent = PurePosixPath(path).parent.parts
        return ".".join(parent) if parent else "default"

    def _parse_body(
        self,
        source: SourceFile,
        masked: _Masked,
        result: ParseResult,
        start: int,
        end: int,
        owner: Optional[str],
        context: Dict[str, str],
        open_ended: bool = False,
    ) -> None:
        structure = masked.structure
        for unit in split_members(structure, start, end, open_ended=open_ended):
            if unit.error is not None:
                # The orphaned closer of a body that was already reported as unbalanced.
                if open_ended and structure[unit.start] == "}" and not structure[unit.header_end : end].strip():
                    continue
                lead = len(structure) - len(structure[unit.start :].lstrip())
                result.diagnostics.append(
                    self.diagnostic(source, unit.error, line=line_of(masked.text, lead))
                )
                continue
            try:
                self._parse_unit(source, masked, result, unit, owner, context, open_ended)
            except _Malformed as exc:
                result.diagnostics.append(
                    self.diagnostic(source, str(exc), line=line_of(masked.text, exc.index))
                )

    def _parse_unit(
        self,
        source: SourceFile,
        masked: _Masked,
        result: ParseResult,
        unit: _Unit,
        owner: Optional[str],
        context: Dict[str, str],
        open_ended: bool = False,
    ) -> None:
        header_struct = masked.structure[unit.start : unit.header_end]
        header_code = masked.code[unit.start : unit.header_end]
        stripped = header_struct.strip()
        if not stripped or stripped == "static":
            return
        lead = unit.start + len(header_struct) - len(header_struct.lstrip())
        if owner is None and re.match(r"(package|import)\b", stripped):
            return

        annotations, modifiers, offset = _split_prefix(header_code, header_struct)
        rest_struct = header_struct[offset:]
        rest_code = header_code[offset:]
        doc = self._doc_for(masked, unit.start, lead)

        type_match = _TYPE_DECLARATION.match(rest_struct.lstrip())
        if type_match:
            self._parse_type(
                source, masked, result, unit, owner, context, annotations, modifiers,
                rest_code.lstrip(), type_match, doc, lead, open_ended,
            )
            return
        if unit.unterminated:
            raise _Malformed("Unbalanced braces", unit.body_start)
        if owner is None:
            raise _Malformed("Unexpected top-level declaration", lead)

        paren = rest_struct.find("(")
        assign = rest_struct.find("=")
        if paren != -1 and (assign == -1 or paren < assign):
            declaration = self._parse_method(
                rest_code, rest_struct, owner, context, annotations, modifiers, doc, source, lead, result,
            )
        else:
            if unit.body_start is not None:
                raise _Malformed("Unrecognized member declaration", lead)
            self._parse_fields(
                source, masked, result, unit, rest_code, rest_struct, owner, annotations, modifiers, doc, lead,
            )
            return
        result.declarations.append(declaration)

    def _doc_for(self, masked: _Masked, floor: int, lead: int) -> DocComment:
        raw = ""
        for start, end in masked.javadocs:
            if start >= floor and end <= lead:
                raw = masked.text[start:end]
        return parse_javadoc(raw)

    def _parse_type(
        self,
        source: SourceFile,
        masked: _Masked,
        result: ParseResult,
        unit: _Unit,
        owner: Optional[str],
        context: Dict[str, str],
        annotations: List[Annotation],
        modifiers: List[str],
        rest_code: str,
        match: re.Match[str],
        doc: DocComment,
        lead: int,
        open_ended: bool = False,
    ) -> None:
        keyword, name = match.group(1), match.group(2)
        if unit.body_start is None or unit.body_end is None:
            raise _Malformed(f"Missing body for {keyword} {name}", lead)

        qualified = f"{owner}.{name}" if owner else name
        tail = rest_code[match.end():]
        type_parameters = _type_parameters(tail)
        tail = tail[_strip_type_parameters(tail):]
        bases: List[str] = []
        for clause in ("extends", "implements"):
            clause_match = re.search(rf"\b{clause}\s+(.+?)(?=\bimplements\b|\bpermits\b|$)", tail, re.DOTALL)
            if clause_match:
                clause = clause_match.group(1)
                bases.extend(collapse(code) for code, _ in _split_top_level(clause, clause))

        result.declarations.append(
            Declaration(
                name=name,
                kind=KIND_TYPE,
                path=source.path,
                line=line_of(masked.text, lead),
                qualified_name=qualified,
                doc=doc.text,
                summary=doc.summary,
                owner=owner,
                modifiers=tuple([*modifiers, keyword]),
                annotations=tuple(annotations),
                bases=tuple(bases),
                type_parameters=type_parameters,
                tags=tuple(doc.tags),
                deprecated=doc.deprecated or _has_annotation(annotations, "Deprecated") is not None,
            )
        )

        type_context = dict(context)
        type_context["owner_simple"] = name
        if _has_annotation(annotations, "RequestMapping") or any(
            _has_annotation(annotations, item) for item in _CONTROLLER_ANNOTATIONS
        ):
            type_context["base_path"] = join_paths(context.get("base_path", ""), spring_base_path(annotations))

        if keyword == "record":
            self._record_components(source, masked, result, rest_code, qualified, lead, doc)

        body_start = unit.body_start + 1
        if keyword == "enum":
            body_start = self._enum_constants(source, masked, result, body_start, unit.body_end, qualified)
        before = len(result.diagnostics)
        self._parse_body(
            source, masked, result, body_start, unit.body_end, qualified, type_context,
            open_ended=unit.unterminated or open_ended,
        )
        if unit.unterminated and len(result.diagnostics) == before:
            result.diagnostics.append(
                self.diagnostic(source, f"Unbalanced braces in {keyword} {name}", line=line_of(masked.text, lead))
            )

    def _record_components(
        self,
        source: SourceFile,
        masked: _Masked,
        result: ParseResult,
        rest_code: str,
        owner: str,
        lead: int,
        doc: DocComment,
    ) -> None:
        open_index = rest_code.find("(")
        if open_index == -1:
            return
        close = _match(rest_code, open_index, len(rest_code), "(", ")")
        if close is None:
            raise _Malformed("Unbalanced record components", lead)
        inner = rest_code[open_index + 1 : close]
        for code, struct in _split_top_level(inner, inner):
            annotations, _, offset = _split_prefix(code, struct)
            match = _PARAMETER.match(collapse(code[offset:]))
            if not match:
                continue
            name = match.group("name")
            result.declarations.append(
                Declaration(
                    name=name,
                    kind=KIND_FIELD,
                    path=source.path,
                    line=line_of(masked.text, lead),
                    owner=owner,
                    returns=match.group("type"),
                    doc=doc.params.get(name, ""),
                    summary=doc.params.get(name, ""),
                    annotations=tuple(annotations),
                    required=any(_has_annotation(annotations, item) for item in _REQUIRED_ANNOTATIONS),
                )
            )

    def _enum_constants(
        self,
        source: SourceFile,
        masked: _Masked,
        result: ParseResult,
        start: int,
        end: int,
        owner: str,
    ) -> int:
        structure = masked.structure
        terminator = end
        depth = 0
        for index in range(start, end):
            char = structure[index]
            if char in "({":
                depth += 1
            elif char in ")}":
                depth -= 1
            elif char == ";" and depth == 0:
                terminator = index
                break
        segment_code = masked.code[start:terminator]
        segment_struct = structure[start:terminator]
        cursor = start
        for code, struct in _split_top_level(segment_code, segment_struct):
            position = segment_struct.find(struct, cursor - start) + start
            cursor = position + len(struct)
            annotations, _, offset = _split_prefix(code, struct)
            match = _IDENTIFIER.match(struct[offset:].strip())
            if not match:
                continue
            lead = position + offset + (len(struct[offset:]) - len(struct[offset:].lstrip()))
            doc = self._doc_for(masked, position, lead)
            result.declarations.append(
                Declaration(
                    name=match.group(0),
                    kind=KIND_FIELD,
                    path=source.path,
                    line=line_of(masked.text, lead),
                    owner=owner,
                    returns=owner.rsplit(".", 1)[-1],
                    doc=doc.text,
                    summary=doc.summary,
                    modifiers=("public", "static", "final"),
                    annotations=tuple(annotations),
                    deprecated=doc.deprecated,
                )
            )
        return terminator + 1 if terminator < end else end

    def _parse_method(
        self,
        rest_code: str,
        rest_struct: str,
        owner: str,
        context: Dict[str, str],
        annotations: List[Annotation],
        modifiers: List[str],
        doc: DocComment,
        source: SourceFile,
        lead: int,
        result: ParseResult,
    ) -> Declaration:
        paren = rest_struct.find("(")
        before = rest_struct[:paren].rstrip()
        name_match = re.search(r"([A-Za-z_$][\w$]*)$", before)
        if not name_match:
            raise _Malformed("Malformed method declaration", lead)
        name = name_match.group(1)
        close = _match(rest_struct, paren, len(rest_struct), "(", ")")
        if close is None:
            raise _Malformed(f"Unbalanced parentheses in declaration of {name}", lead)

        prefix_start = _strip_type_parameters(rest_struct[: name_match.start()])
        return_type = collapse(rest_code[prefix_start : name_match.start()])
        is_constructor = not return_type and name == context.get("owner_simple")
        if not is_constructor:
            if not return_type:
                raise _Malformed(f"Missing return type for {name}", lead)
            if not _TYPE_TEXT.match(return_type):
                raise _Malformed(f"Malformed return type for {name}", lead)

        parameters = self._parameters(rest_code[paren + 1 : close], rest_struct[paren + 1 : close], doc)
        endpoint = None
        route = spring_route(annotations)
        if route is not None:
            methods, path = route
            parameters = self._endpoint_parameters(parameters)
            has_body = any(param.location == "body" for param in parameters)
            endpoint = Endpoint(
                methods=methods,
                path=join_paths(context.get("base_path", ""), path),
                content_type="JSON" if has_body else "FormData",
                framework="Spring",
            )

        # Overloads are all keyed by signature, including the first one seen.
        qualified = f"{owner}.{name}"
        for index, decl in enumerate(result.declarations):
            if decl.owner == owner and decl.kind == KIND_FUNCTION and decl.name == name:
                qualified = _overload_name(owner, name, parameters)
                if decl.qualified_name == f"{owner}.{name}":
                    result.declarations[index] = replace(
                        decl, qualified_name=_overload_name(owner, name, decl.parameters)
                    )

        return Declaration(
            name=name,
            kind=KIND_FUNCTION,
            path=source.path,
            line=line_of(source.content, lead),
            qualified_name=qualified,
            parameters=tuple(parameters),
            returns=None if is_constructor else return_type,
            returns_description=doc.returns,
            doc=doc.text,
            summary=doc.summary,
            owner=owner,
            modifiers=tuple(modifiers + (["constructor"] if is_constructor else [])),
            annotations=tuple(annotations),
            tags=tuple(doc.tags),
            endpoint=endpoint,
            deprecated=doc.deprecated or _has_annotation(annotations, "Deprecated") is not None,
        )

    def _parameters(self, code: str, structure: str, doc: DocComment) -> List[Parameter]:
        parameters: List[Parameter] = []
        for part_code, part_struct in _split_top_level(code, structure):
            annotations, _, offset = _split_prefix(part_code, part_struct)
            text = collapse(part_code[offset:])
            match = _PARAMETER.match(text)
            if not match:
                parameters.append(Parameter(name=text, annotations=tuple(annotations)))
                continue
            name = match.group("name")
            type_name = match.group("type") + ("..." if match.group("varargs") else "")
            parameters.append(
                Parameter(
                    name=name,
                    type=type_name,
                    description=doc.params.get(name, ""),
                    required=any(_has_annotation(annotations, item) for item in _REQUIRED_ANNOTATIONS),
                    annotations=tuple(annotations),
                )
            )
        return parameters

    def _endpoint_parameters(self, parameters: Sequence[Parameter]) -> List[Parameter]:
        """Resolve Spring binding for handler parameters, dropping framework-injected ones."""
        located: List[Parameter] = []
        for param in parameters:
            type_name = param.type or ""
            simple = _simple(type_name)
            if (
                simple in _SPECIAL_PARAMETER_TYPES
                or "MultipartFile" in type_name
                or type_name.startswith("org.springframework.web.")
            ):
                continue
            body = _has_annotation(param.annotations, "RequestBody")
            query = _has_annotation(param.annotations, "RequestParam")
            path_var = _has_annotation(param.annotations, "PathVariable")
            attribute = _has_annotation(param.annotations, "RequestAttribute")

            name = param.name
            required = param.required
            if body is not None:
                location = "body"
                flag = _required_flag(body)
                required = True if flag is None else flag
            elif path_var is not None:
                location = "path"
                name = annotation_argument(path_var, "value", "name") or name
                flag = _required_flag(path_var)
                required = True if flag is None else flag
            elif query is not None:
                location = "query"
                name = annotation_argument(query, "value", "name") or name
                flag = _required_flag(query)
                if flag is not None:
                    required = flag
                else:
                    required = "defaultValue" not in query.arguments
            elif attribute is not None:
                # Request attributes carry server-side context, not client input.
                continue
            else:
                location = "query"

            located.append(
                Parameter(
                    name=name,
                    type=param.type,
                    description=param.description,
                    default=param.default,
                    required=required,
                    location=location,
                    annotations=param.annotations,
                )
            )
        return located

    def _parse_fields(
        self,
        source: SourceFile,
        masked: _Masked,
        result: ParseResult,
        unit: _Unit,
        rest_code: str,
        rest_struct: str,
        owner: str,
        annotations: List[Annotation],
        modifiers: List[str],
        doc: DocComment,
        lead: int,
    ) -> None:
        declarators = _split_top_level(rest_code, rest_struct)
        if not declarators:
            raise _Malformed("Empty member declaration", lead)

        description = self._field_description(masked, unit, annotations, doc)
        required = any(_has_annotation(annotations, item) for item in _REQUIRED_ANNOTATIONS)
        field_type: Optional[str] = None
        for index, (code, struct) in enumerate(declarators):
            declared, _, initializer = code.partition("=")
            declared = collapse(declared)
            if index == 0:
                match = _FIELD.match(declared)
                if not match or not _TYPE_TEXT.match(match.group("type")):
                    raise _Malformed("Unrecognized member declaration", lead)
                field_type = match.group("type")
                name = match.group("name")
            else:
                name_match = _IDENTIFIER.fullmatch(declared.rstrip("[] "))
                if not name_match:
                    raise _Malformed("Unrecognized member declaration", lead)
                name = name_match.group(0)
            initializer = collapse(initializer)
            result.declarations.append(
                Declaration(
                    name=name,
                    kind=KIND_FIELD,
                    path=source.path,
                    line=line_of(masked.text, lead),
                    returns=field_type,
                    doc=description,
                    summary=description.splitlines()[0] if description else "",
                    owner=owner,
                    modifiers=tuple(modifiers),
                    annotations=tuple(annotations),
                    tags=(("default", initializer),) if initializer else (),
                    required=required,
                    deprecated=doc.deprecated or _has_annotation(annotations, "Deprecated") is not None,
                )
            )

    def _field_description(
        self,
        masked: _Masked,
        unit: _Unit,
        annotations: Sequence[Annotation],
        doc: DocComment,
    ) -> str:
        for name in _DESCRIPTION_ANNOTATIONS:
            annotation = _has_annotation(annotations, name)
            if annotation is None:
                continue
            value = annotation_argument(annotation, "value", "description")
            if value:
                return value
        if doc.text:
            return doc.text
        line_end = masked.text.find("\n", unit.header_end)
        line_end = len(masked.text) if line_end == -1 else line_end
        for start, comment in masked.line_comments:
            if unit.header_end < start < line_end:
                return comment
        return ""


__all__ = ["JavaParser", "mask_source", "split_members"]
