"""Python declaration parser built on the standard library ``ast`` module."""

from __future__ import annotations

import ast
import re
from dataclasses import replace
from pathlib import PurePosixPath
from typing import Iterable, List, Optional, Sequence, Tuple

from ..endpoints import normalize_path
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
from .doc_comments import DocComment, parse_docstring

logger = get_logger("parsers.python")

_ROUTE_VERBS = {"get", "post", "put", "delete", "patch", "head", "options"}
_SCALAR_TYPES = {"str", "int", "float", "bool", "bytes", "None", "Any"}
_CONTINUATION_KEYWORDS = ("else", "elif", "except", "finally")
_FunctionNode = (ast.FunctionDef, ast.AsyncFunctionDef)


def module_key(path: str) -> str:
    """Map ``pkg/mod.py`` to ``pkg.mod`` (``__init__`` and a leading ``src`` dropped)."""
    parts = list(PurePosixPath(path).with_suffix("").parts)
    if parts and parts[-1] == "__init__" and len(parts) > 1:
        parts = parts[:-1]
    if len(parts) > 1 and parts[0] == "src":
        parts = parts[1:]
    return ".".join(parts)


def split_blocks(text: str) -> List[Tuple[int, str]]:
    """Split source into top-level statement blocks as ``(first_line, text)``.

    A block starts at every unindented line except closing brackets,
    continuation keywords and comments. Decorators stay with the statement
    they decorate.
    """
    blocks: List[Tuple[int, List[str]]] = []
    pending_decorator = False
    for index, line in enumerate(text.splitlines(keepends=True), start=1):
        starts_block = (
            bool(line)
            and not line[0].isspace()
            and not line.startswith(("#", ")", "]", "}"))
            and not re.match(rf"({'|'.join(_CONTINUATION_KEYWORDS)})\b", line)
        )
        if starts_block and not pending_decorator or not blocks:
            blocks.append((index, [line]))
        else:
            blocks[-1][1].append(line)
        if starts_block:
            pending_decorator = line.startswith("@")
    return [(start, "".join(lines)) for start, lines in blocks]


class PythonParser(DeclarationParser):
    """Extracts functions, classes, fields and FastAPI routes from Python modules."""

    language = "Python"

    def parse(self, source: SourceFile) -> ParseResult:
        result = ParseResult(path=source.path, module=module_key(source.path), language=self.language)
        try:
            tree = ast.parse(source.content, filename=source.path)
        except SyntaxError:
            logger.debug("Falling back to block parsing for %s", source.path)
            statements = list(self._parse_blocks(source, result))
        else:
            statements = list(tree.body)

        for index, node in enumerate(statements):
            following = statements[index + 1] if index + 1 < len(statements) else None
            result.declarations.extend(self._visit(source, node, owner=None, following=following))
        return result

    def _parse_blocks(self, source: SourceFile, result: ParseResult) -> Iterable[ast.stmt]:
        for start, block in split_blocks(source.content):
            if not block.strip():
                continue
            try:
                tree = ast.parse(block, filename=source.path)
            except SyntaxError as exc:
                line = start + (exc.lineno or 1) - 1
                result.diagnostics.append(
                    self.diagnostic(source, f"Malformed declaration: {exc.msg}", line=line)
                )
                continue
            ast.increment_lineno(tree, start - 1)
            yield from tree.body

    def _visit(
        self,
        source: SourceFile,
        node: ast.stmt,
        owner: Optional[str],
        following: Optional[ast.stmt] = None,
    ) -> List[Declaration]:
        if isinstance(node, _FunctionNode):
            return [self._function(source, node, owner)]
        if isinstance(node, ast.ClassDef):
            return self._class(source, node, owner)
        if isinstance(node, (ast.AnnAssign, ast.Assign)):
            declaration = self._field(source, node, owner, following)
            return [declaration] if declaration is not None else []
        return []

    def _class(self, source: SourceFile, node: ast.ClassDef, owner: Optional[str]) -> List[Declaration]:
        doc = parse_docstring(ast.get_docstring(node) or "")
        qualified = f"{owner}.{node.name}" if owner else node.name
        declarations = [
            Declaration(
                name=node.name,
                kind=KIND_TYPE,
                path=source.path,
                line=node.lineno,
                qualified_name=qualified,
                doc=doc.text,
                summary=doc.summary,
                owner=owner,
                annotations=_decorators(node.decorator_list),
                bases=tuple(ast.unparse(base) for base in node.bases),
                type_parameters=_type_parameters(node),
                tags=tuple(doc.tags),
                deprecated=doc.deprecated,
            )
        ]
        body = list(node.body)
        for index, child in enumerate(body):
            following = body[index + 1] if index + 1 < len(body) else None
            for member in self._visit(source, child, owner=qualified, following=following):
                if member.kind == KIND_FIELD and not member.doc and member.name in doc.attributes:
                    description = doc.attributes[member.name]
                    member = replace(member, doc=description, summary=description)
                declarations.append(member)
        return declarations

    def _function(self, source: SourceFile, node: ast.FunctionDef | ast.AsyncFunctionDef, owner: Optional[str]) -> Declaration:
        doc = parse_docstring(ast.get_docstring(node) or "")
        decorators = _decorators(node.decorator_list)
        decorator_names = {decorator.name.rsplit(".", 1)[-1] for decorator in decorators}

        modifiers: List[str] = []
        if isinstance(node, ast.AsyncFunctionDef):
            modifiers.append("async")
        for name in ("staticmethod", "classmethod", "property"):
            if name in decorator_names:
                modifiers.append(name)

        skip_first = owner is not None and "staticmethod" not in decorator_names
        parameters = _parameters(node.args, doc, skip_first=skip_first)
        endpoint = _fastapi_endpoint(node.decorator_list, parameters)
        if endpoint is not None:
            parameters = _locate_parameters(parameters, endpoint)

        return Declaration(
            name=node.name,
            kind=KIND_FUNCTION,
            path=source.path,
            line=node.lineno,
            parameters=tuple(parameters),
            returns=ast.unparse(node.returns) if node.returns is not None else None,
            returns_description=doc.returns,
            doc=doc.text,
            summary=doc.summary,
            owner=owner,
            modifiers=tuple(modifiers),
            annotations=decorators,
            tags=tuple(doc.tags),
            endpoint=endpoint,
            deprecated=doc.deprecated,
        )

    def _field(
        self,
        source: SourceFile,
        node: ast.AnnAssign | ast.Assign,
        owner: Optional[str],
        following: Optional[ast.stmt],
    ) -> Optional[Declaration]:
        if isinstance(node, ast.AnnAssign):
            if not isinstance(node.target, ast.Name):
                return None
            name = node.target.id
            type_hint: Optional[str] = ast.unparse(node.annotation)
            value = node.value
        else:
            if len(node.targets) != 1 or not isinstance(node.targets[0], ast.Name):
                return None
            name = node.targets[0].id
            # Only constants are documented when there is no annotation.
            if owner is None and not name.isupper():
                return None
            if owner is not None and (name.startswith("__") or not name.isupper()):
                return None
            type_hint = None
            value = node.value

        description = ""
        if (
            isinstance(following, ast.Expr)
            and isinstance(following.value, ast.Constant)
            and isinstance(following.value.value, str)
        ):
            description = following.value.value.strip()

        return Declaration(
            name=name,
            kind=KIND_FIELD,
            path=source.path,
            line=node.lineno,
            returns=type_hint,
            doc=description,
            summary=description.splitlines()[0] if description else "",
            owner=owner,
            tags=(("default", ast.unparse(value)),) if value is not None else (),
            required=value is None,
        )


def _type_parameters(node: ast.ClassDef) -> Tuple[str, ...]:
    """Type variables from ``class Page[T]`` or a ``Generic[K, V]`` base."""
    names = [param.name for param in getattr(node, "type_params", [])]
    for base in node.bases:
        if isinstance(base, ast.Subscript) and ast.unparse(base.value).rsplit(".", 1)[-1] == "Generic":
            items = base.slice.elts if isinstance(base.slice, ast.Tuple) else [base.slice]
            names.extend(ast.unparse(item) for item in items)
    return tuple(names)


def _decorators(nodes: Sequence[ast.expr]) -> Tuple[Annotation, ...]:
    annotations = []
    for node in nodes:
        if isinstance(node, ast.Call):
            arguments = ", ".join(
                [ast.unparse(arg) for arg in node.args]
                + [f"{kw.arg}={ast.unparse(kw.value)}" if kw.arg else f"**{ast.unparse(kw.value)}" for kw in node.keywords]
            )
            annotations.append(Annotation(name=ast.unparse(node.func), arguments=arguments))
        else:
            annotations.append(Annotation(name=ast.unparse(node)))
    return tuple(annotations)


def _parameters(args: ast.arguments, doc: DocComment, *, skip_first: bool) -> List[Parameter]:
    positional = list(args.posonlyargs) + list(args.args)
    defaults: List[Optional[ast.expr]] = [None] * (len(positional) - len(args.defaults)) + list(args.defaults)
    entries: List[Tuple[ast.arg, Optional[ast.expr], str]] = [
        (arg, default, "") for arg, default in zip(positional, defaults)
    ]
    if skip_first and entries:
        entries = entries[1:]
    if args.vararg is not None:
        entries.append((args.vararg, None, "*"))
    for arg, default in zip(args.kwonlyargs, args.kw_defaults):
        entries.append((arg, default, ""))
    if args.kwarg is not None:
        entries.append((args.kwarg, None, "**"))

    parameters = []
    for arg, default, prefix in entries:
        parameters.append(
            Parameter(
                name=f"{prefix}{arg.arg}",
                type=ast.unparse(arg.annotation) if arg.annotation is not None else None,
                description=doc.params.get(arg.arg, ""),
                default=ast.unparse(default) if default is not None else None,
                required=default is None and not prefix,
            )
        )
    return parameters


def _fastapi_endpoint(decorators: Sequence[ast.expr], parameters: Sequence[Parameter]) -> Optional[Endpoint]:
    for node in decorators:
        if not isinstance(node, ast.Call) or not isinstance(node.func, ast.Attribute):
            continue
        verb = node.func.attr.lower()
        if verb not in _ROUTE_VERBS or not node.args:
            continue
        first = node.args[0]
        if not isinstance(first, ast.Constant) or not isinstance(first.value, str):
            continue
        has_body = any(not _is_scalar(param.type) for param in parameters if param.type)
        return Endpoint(
            methods=(verb.upper(),),
            path=normalize_path(first.value),
            content_type="JSON" if has_body else "FormData",
            framework="FastAPI",
        )
    return None


def _locate_parameters(parameters: Sequence[Parameter], endpoint: Endpoint) -> List[Parameter]:
    path_names = set(re.findall(r"\{(\w+)\}", endpoint.path))
    located = []
    for param in parameters:
        if param.name in path_names:
            location = "path"
        elif param.type and not _is_scalar(param.type):
            location = "body"
        else:
            location = "query"
        located.append(
            Parameter(
                name=param.name,
                type=param.type,
                description=param.description,
                default=param.default,
                required=param.required or location == "path",
                location=location,
                annotations=param.annotations,
            )
        )
    return located


def _is_scalar(type_hint: Optional[str]) -> bool:
    if not type_hint:
        return True
    inner = re.sub(r"^(Optional|Annotated)\[(.*)\]$", r"\2", type_hint.strip())
    inner = inner.split(",")[0].split("|")[0].strip()
    return inner in _SCALAR_TYPES


__all__ = ["PythonParser", "module_key", "split_blocks"]
