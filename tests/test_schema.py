"""Tests for field tables and example payloads."""

from __future__ import annotations

import json

from apidoc.builder import DocModelBuilder
from apidoc.config import DocSettings
from apidoc.models import SourceFile
from apidoc.parsers.java import JavaParser
from apidoc.schema import SchemaBuilder, simplify_type, split_generic

MODELS = """
package com.demo.dto;

public class BaseEntity {
    /** Row id. */
    private Long id;
    private String createdBy;
}

public class Result<T> {
    private int code;
    private String message;
    private T data;
}

public class PageResult<T> {
    private Long total;
    private List<T> records;
}

public class Pair<K, V> {
    private K left;
    private V right;
}

public class UserPage extends PageResult<User> {
    private int page;
}

public class Address {
    private String city;
    private User owner;
}

public class User extends BaseEntity {
    @NotNull
    private String name;
    private int age;
    private String password;
    private java.time.LocalDateTime createdAt;
    private List<Address> addresses;
    private static final String KIND = "user";
}

@RestController
@RequestMapping("/users")
public class UserController {
    /** Create a user. */
    @PostMapping
    public Result<User> create(@RequestBody User user) { return null; }

    @GetMapping("/{id}")
    public String name(@PathVariable Long id, @RequestParam(required = false) String locale) { return null; }
}
"""


def _model(settings: DocSettings | None = None):
    source = SourceFile(path="com/demo/dto/Models.java", content=MODELS.lstrip("\n"), language="Java")
    model, _ = DocModelBuilder().build([JavaParser().parse(source)])
    return model, SchemaBuilder(model, settings)


def test_simplify_type_maps_java_names() -> None:
    assert simplify_type("java.lang.String") == "String"
    assert simplify_type("int") == "Integer"
    assert simplify_type("java.util.List<com.demo.User>") == "List<User>"
    assert simplify_type("Map<String, java.time.LocalDateTime>") == "Map<String, DateTime>"
    assert simplify_type("int", java=False) == "int"
    assert simplify_type(None) == ""


def test_split_generic() -> None:
    assert split_generic("Map<String, List<User>>") == ("Map", ["String", "List<User>"])
    assert split_generic("list[Item]") == ("list", ["Item"])
    assert split_generic("User[]") == ("List", ["User"])
    assert split_generic("String") == ("String", [])


def test_fields_expand_nested_types_and_inherit_base_fields() -> None:
    _, schema = _model(DocSettings(excluded_fields={"User": ["password"]}))

    rows = schema.fields("User")

    names = [row.name for row in rows]
    assert names == [
        "name",
        "age",
        "createdAt",
        "addresses",
        "addresses.city",
        "addresses.owner",
        "id",
        "createdBy",
    ]
    by_name = {row.name: row for row in rows}
    assert by_name["name"].required is True
    assert by_name["age"].type == "Integer"
    assert by_name["createdAt"].type == "DateTime"
    assert by_name["addresses.city"].depth == 1
    assert by_name["id"].description == "Row id."


def test_excluded_parent_classes_are_skipped() -> None:
    _, schema = _model(DocSettings(excluded_parent_classes=["com.demo.dto.BaseEntity"]))

    names = [row.name for row in schema.fields("User")]

    assert "id" not in names
    assert "createdBy" not in names


def test_generic_wrapper_substitutes_type_argument() -> None:
    _, schema = _model()

    rows = schema.fields("Result<User>")
    names = [row.name for row in rows]

    assert names[:3] == ["code", "message", "data"]
    assert "data.name" in names
    assert {row.name: row.type for row in rows}["data"] == "User"


def test_generic_arguments_bind_by_position_inside_nested_types() -> None:
    _, schema = _model()

    page = {row.name: row.type for row in schema.fields("PageResult<User>")}
    pair = {row.name: row.type for row in schema.fields("Pair<User, Address>")}

    assert page["records"] == "List<User>"
    assert "records.name" in page
    assert schema.example("PageResult<User>")["records"][0]["age"] == 0
    assert pair["left"] == "User"
    assert pair["right"] == "Address"
    assert "right.city" in pair
    assert schema.example("Pair<User, Address>")["right"]["city"] == "String"


def test_generic_base_class_is_bound_from_subclass() -> None:
    _, schema = _model()

    rows = {row.name: row.type for row in schema.fields("UserPage")}

    assert rows["page"] == "Integer"
    assert rows["records"] == "List<User>"


def test_example_payload_is_cycle_safe() -> None:
    _, schema = _model()

    payload = schema.example("User")

    assert payload["name"] == "String"
    assert payload["age"] == 0
    assert payload["addresses"] == [{"city": "String", "owner": {}}]
    assert "KIND" not in payload


def test_describe_endpoint_builds_request_and_response_views() -> None:
    model, _ = _model()
    schema = SchemaBuilder(model, DocSettings(application_name="shop"))
    create = model.get("com.demo.dto", "UserController.create")
    lookup = model.get("com.demo.dto", "UserController.name")

    view = schema.describe(create)

    assert view.url == "/shop/users"
    assert view.method == "POST"
    assert view.content_type == "JSON"
    assert [row.name for row in view.request_rows][:2] == ["name", "age"]
    assert json.loads(view.request_example)["name"] == "String"
    assert json.loads(view.response_example)["data"]["age"] == 0
    assert [row.name for row in view.response_rows][:3] == ["code", "message", "data"]

    simple = schema.describe(lookup)
    assert simple.url == "/shop/users/{id}"
    assert [(row.name, row.type, row.required) for row in simple.request_rows] == [
        ("id", "Long", True),
        ("locale", "String", False),
    ]
    assert simple.response_rows == ()
    assert json.loads(simple.response_example) == "String"
