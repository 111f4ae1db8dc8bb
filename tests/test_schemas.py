"""Tests for schema definition models."""

import pytest
from pydantic import ValidationError

from schema_store.schemas import PropertySpec, SchemaDefinition


def test_short_property_types():
    schema = SchemaDefinition(
        name="User",
        primary_key="id",
        properties={"id": "int", "name": "string", "email": "string?"},
    )

    assert schema.properties["id"] == PropertySpec(type="int")
    assert schema.properties["email"].optional is True
    assert schema.properties["name"].optional is False


def test_long_property_form():
    schema = SchemaDefinition(
        name="Task",
        properties={"done": {"type": "bool", "default": False, "indexed": True}},
    )

    spec = schema.properties["done"]
    assert spec.type == "bool"
    assert spec.default is False
    assert spec.indexed is True


def test_primary_key_is_optional():
    schema = SchemaDefinition(name="LogEntry", properties={"message": "string"})
    assert schema.primary_key is None


def test_unknown_property_type():
    with pytest.raises(ValidationError, match="Unknown property type"):
        SchemaDefinition(name="Bad", properties={"x": "uuid"})


def test_primary_key_must_be_a_property():
    with pytest.raises(ValidationError, match="is not a property"):
        SchemaDefinition(name="Bad", primary_key="id", properties={"name": "string"})


def test_primary_key_cannot_be_optional():
    with pytest.raises(ValidationError, match="cannot be optional"):
        SchemaDefinition(name="Bad", primary_key="id", properties={"id": "int?"})


def test_primary_key_type_restricted():
    with pytest.raises(ValidationError, match="must be int or string"):
        SchemaDefinition(name="Bad", primary_key="id", properties={"id": "date"})


@pytest.mark.parametrize("name", ["", "two words", "_internal"])
def test_invalid_schema_names(name):
    with pytest.raises(ValidationError):
        SchemaDefinition(name=name, properties={"x": "int"})


def test_invalid_property_names():
    with pytest.raises(ValidationError, match="Invalid property name"):
        SchemaDefinition(name="Bad", properties={"_rowid": "int"})


def test_schema_is_immutable():
    schema = SchemaDefinition(name="User", properties={"id": "int"})
    with pytest.raises(ValidationError):
        schema.name = "Other"
