"""Tests for document loading and validation."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from openapi_to_zod_generator.errors import (
    ConfigurationError,
    FileOperationError,
    SpecValidationError,
)
from openapi_to_zod_generator.loader import load_openapi_document

from .fixture_helpers import write_spec

_MINIMAL_SCHEMAS = {"components": {"schemas": {"Pet": {"type": "object"}}}}


def test_load_yaml_and_json(tmp_path: Path) -> None:
    """YAML and JSON documents load into the same structure."""
    yaml_path = write_spec(tmp_path, "components:\n  schemas:\n    Pet:\n      type: object\n")
    json_path = write_spec(tmp_path, json.dumps(_MINIMAL_SCHEMAS), name="openapi.json")

    assert load_openapi_document(yaml_path) == _MINIMAL_SCHEMAS
    assert load_openapi_document(json_path) == _MINIMAL_SCHEMAS


def test_missing_input_path_is_a_configuration_error() -> None:
    """No input path at all is a configuration problem."""
    with pytest.raises(ConfigurationError):
        load_openapi_document(None)


def test_missing_file(tmp_path: Path) -> None:
    """A nonexistent file raises FileOperationError carrying the path."""
    missing = tmp_path / "missing.yaml"
    with pytest.raises(FileOperationError) as exc_info:
        load_openapi_document(missing)
    assert exc_info.value.path == str(missing)


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("key: [unclosed\n", "Failed to parse YAML"),
        ("- a\n- b\n", "must deserialize to a mapping"),
        ("openapi: 3.1.0\n", "no components.schemas"),
        ("components:\n  schemas: {}\n", "declares no schemas"),
    ],
)
def test_unusable_documents(tmp_path: Path, content: str, message: str) -> None:
    """Malformed or schema-less documents are rejected."""
    with pytest.raises(SpecValidationError, match=message):
        load_openapi_document(write_spec(tmp_path, content))


def test_dangling_schema_reference(tmp_path: Path) -> None:
    """A $ref to an undeclared schema names the schema, path and ref."""
    content = """
components:
  schemas:
    User:
      type: object
      properties:
        address:
          $ref: "#/components/schemas/Address"
"""
    with pytest.raises(SpecValidationError) as exc_info:
        load_openapi_document(write_spec(tmp_path, content))

    assert exc_info.value.context == {
        "schema": "User",
        "path": "User.properties.address",
        "ref": "#/components/schemas/Address",
    }
    assert "ref=#/components/schemas/Address" in str(exc_info.value)


def test_reference_outside_components_schemas_must_still_resolve(tmp_path: Path) -> None:
    """Any $ref inside a schema has to name a declared schema."""
    content = """
components:
  schemas:
    Owner:
      type: object
      properties:
        pet:
          $ref: "#/definitions/Missing"
"""
    with pytest.raises(SpecValidationError, match="non-existent schema 'Missing'") as exc_info:
        load_openapi_document(write_spec(tmp_path, content))

    assert exc_info.value.context["ref"] == "#/definitions/Missing"


def test_unquoted_dates_stay_strings(tmp_path: Path) -> None:
    """YAML timestamps are not converted to date objects."""
    content = """
components:
  schemas:
    Event:
      type: string
      format: date
      example: 2024-01-15
      enum: [2024-01-01, 2024-02-01T10:00:00Z]
"""
    document = load_openapi_document(write_spec(tmp_path, content))

    event = document["components"]["schemas"]["Event"]
    assert event["example"] == "2024-01-15"
    assert event["enum"] == ["2024-01-01", "2024-02-01T10:00:00Z"]
