"""Tests for the shared HTTP route helpers."""

from __future__ import annotations

import pytest

from apidoc.endpoints import (
    annotation_argument,
    join_paths,
    line_of,
    normalize_path,
    parse_request_methods,
    spring_base_path,
    spring_route,
)
from apidoc.models import Annotation


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("", "/"),
        ("users", "/users"),
        ("/users/", "/users"),
        ("//users//:id", "/users/{id}"),
        ("/items/<int:item_id>", "/items/{item_id}"),
        ("/files/{path:.+}", "/files/{path}"),
    ],
)
def test_normalize_path(raw: str, expected: str) -> None:
    assert normalize_path(raw) == expected


def test_join_paths_combines_prefix_and_route() -> None:
    assert join_paths("/api/users", "/{id}") == "/api/users/{id}"
    assert join_paths("/api/users/", "") == "/api/users"
    assert join_paths("/", "/health") == "/health"
    assert join_paths("", "status") == "/status"


def test_annotation_argument_variants() -> None:
    assert annotation_argument(Annotation("GetMapping", '"/a"'), "value", "path") == "/a"
    assert annotation_argument(Annotation("GetMapping", 'path = "/b"'), "value", "path") == "/b"
    assert annotation_argument(Annotation("GetMapping", 'value = {"/c", "/d"}'), "value") == "/c"
    assert annotation_argument(Annotation("RequestParam", 'required = false'), "value", "name") is None
    assert annotation_argument(Annotation("Deprecated"), "value") is None


def test_parse_request_methods() -> None:
    assert parse_request_methods("RequestMethod.GET") == ("GET",)
    assert parse_request_methods("{RequestMethod.PUT, RequestMethod.PATCH, RequestMethod.PUT}") == ("PUT", "PATCH")


def test_spring_route_prefers_first_mapping() -> None:
    annotations = [
        Annotation("ResponseBody"),
        Annotation("DeleteMapping", 'value = "/{id}"'),
    ]
    assert spring_route(annotations) == (("DELETE",), "/{id}")

    request_mapping = [Annotation("RequestMapping", '"/legacy"')]
    assert spring_route(request_mapping) == (("GET", "POST"), "/legacy")

    assert spring_route([Annotation("Override")]) is None


def test_spring_base_path() -> None:
    annotations = [Annotation("RestController"), Annotation("RequestMapping", 'path = "/api"')]
    assert spring_base_path(annotations) == "/api"
    assert spring_base_path([Annotation("RestController")]) == ""


def test_line_of_counts_newlines() -> None:
    text = "a\nb\nc"
    assert line_of(text, 0) == 1
    assert line_of(text, text.index("c")) == 3
