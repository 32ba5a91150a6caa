import json

import pytest
from pydantic import BaseModel, EmailStr
from typing_extensions import TypedDict

from apicontract import SchemaValidationError, Shape
from apicontract.schema import as_shape


class Contact(BaseModel):
    name: str
    email: EmailStr


class Point(TypedDict):
    x: int
    y: int


def test_parse_returns_typed_value():
    shape = Shape(Contact)
    value = shape.parse({"name": "Alice", "email": "alice@test.com"})
    assert value == Contact(name="Alice", email="alice@test.com")


def test_parse_typed_dict_returns_plain_dict():
    assert Shape(Point).parse({"x": "1", "y": 2}) == {"x": 1, "y": 2}


def test_parse_optional_union_accepts_none():
    assert Shape(Contact | None).parse(None) is None


def test_parse_failure_reports_ordered_issues():
    with pytest.raises(SchemaValidationError) as exc_info:
        Shape(Contact).parse({"email": "not-an-email"})
    issues = exc_info.value.issues
    assert [i.path for i in issues] == [("name",), ("email",)]
    assert issues[0].code == "missing"
    assert issues[1].code == "value_error"
    assert all(i.message for i in issues)


def test_error_message_is_serialized_issue_list():
    with pytest.raises(SchemaValidationError) as exc_info:
        Shape(Point).parse({"x": 1})
    decoded = json.loads(str(exc_info.value))
    assert decoded == [{"code": "missing", "path": ["y"], "message": "Field required"}]


def test_dump_returns_json_compatible_value():
    shape = Shape(Contact)
    assert shape.dump(Contact(name="A", email="a@test.com")) == {"name": "A", "email": "a@test.com"}


def test_json_schema():
    schema = Shape(Contact).json_schema()
    assert schema["title"] == "Contact"
    assert set(schema["properties"]) == {"name", "email"}


def test_shape_is_immutable():
    shape = Shape(int)
    with pytest.raises(AttributeError):
        shape._type = str


def test_as_shape():
    shape = Shape(int)
    assert as_shape(None) is None
    assert as_shape(shape) is shape
    assert isinstance(as_shape(int), Shape)
