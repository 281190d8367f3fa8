"""Tests for native TypeScript type generation."""

from __future__ import annotations

from openapi_to_zod_generator.model_types import NamingOptions
from openapi_to_zod_generator.native_types import generate_native_type


def test_object_type_with_optional_members_and_constraint_tags() -> None:
    """Optional members get ? and constraints are listed in JSDoc."""
    schema = {
        "type": "object",
        "required": ["name"],
        "properties": {
            "name": {"type": "string", "maxLength": 10},
            "age": {"type": "integer"},
        },
    }
    result = generate_native_type(schema, schemas={}, naming=NamingOptions())

    assert result.code == "{\n  /** @maxLength 10 */\n  name: string;\n  age?: number;\n}"


def test_references_compositions_and_nullability() -> None:
    """References use type names and compositions map to & and |."""
    schemas = {"Pet": {"type": "object"}, "Owner": {"type": "object"}}
    result = generate_native_type(
        {
            "allOf": [
                {"$ref": "#/components/schemas/Pet"},
                {"$ref": "#/components/schemas/Owner"},
            ],
            "nullable": True,
        },
        schemas=schemas,
        naming=NamingOptions(),
    )

    assert result.code == "(Pet & Owner) | null"
    assert result.dependencies == ("Pet", "Owner")


def test_arrays_records_and_unions() -> None:
    """Arrays, maps and unions render as TypeScript generics and unions."""
    naming = NamingOptions()
    assert generate_native_type({"type": "array", "items": {"type": "string"}}, schemas={}, naming=naming).code == (
        "Array<string>"
    )
    assert generate_native_type({"type": "object"}, schemas={}, naming=naming).code == (
        "Record<string, unknown>"
    )
    assert generate_native_type(
        {"oneOf": [{"type": "string"}, {"type": "number"}]},
        schemas={},
        naming=naming,
    ).code == "string | number"
