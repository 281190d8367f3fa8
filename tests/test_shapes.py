"""Tests for Zod shape generation."""

from __future__ import annotations

from typing import Any

from openapi_to_zod_generator.model_types import ResolvedOptions
from openapi_to_zod_generator.shapes import ShapeContext, ShapeResult, generate_shape

_USER = {
    "type": "object",
    "required": ["id", "name", "email"],
    "properties": {
        "id": {"type": "string", "format": "uuid"},
        "name": {"type": "string"},
        "email": {"type": "string"},
    },
}


def _generate(
    schema: dict[str, Any],
    *,
    name: str | None = None,
    schemas: dict[str, Any] | None = None,
    circular: frozenset[str] = frozenset(),
    **options: Any,
) -> ShapeResult:
    context = ShapeContext(
        schemas=schemas or {},
        options=ResolvedOptions(**options),
        circular=circular,
    )
    return generate_shape(schema, name=name, context=context)


def test_properties_are_not_nullable_by_default() -> None:
    """Without defaultNullable no property gains a nullable modifier."""
    result = _generate(_USER, name="User")

    assert result.code == (
        "z.object({\n"
        "  id: z.uuid(),\n"
        "  name: z.string(),\n"
        "  email: z.string()\n"
        "})"
    )
    assert result.dependencies == ()


def test_default_nullable_skips_references() -> None:
    """defaultNullable applies to primitives but leaves references untouched."""
    schema = {
        **_USER,
        "required": [*_USER["required"], "status"],
        "properties": {
            **_USER["properties"],
            "status": {"$ref": "#/components/schemas/StatusEnum"},
        },
    }
    schemas = {"StatusEnum": {"type": "string", "enum": ["on", "off"]}, "User": schema}

    result = _generate(schema, name="User", schemas=schemas, default_nullable=True)

    assert result.code == (
        "z.object({\n"
        "  id: z.uuid().nullable(),\n"
        "  name: z.string().nullable(),\n"
        "  email: z.string().nullable(),\n"
        "  status: statusEnumSchema\n"
        "})"
    )
    assert result.dependencies == ("StatusEnum",)


def test_default_nullable_reaches_nested_objects_but_not_items() -> None:
    """Inline objects and arrays are nullable as properties; array items are not."""
    schema = {
        "type": "object",
        "properties": {
            "address": {"type": "object", "properties": {"city": {"type": "string"}}},
            "tags": {"type": "array", "items": {"type": "string"}},
            "code": {"type": "string", "nullable": False},
        },
    }

    code = _generate(schema, default_nullable=True).code

    assert "  address: z.object({\n    city: z.string().nullable().optional()\n  }).nullable().optional()" in code
    assert "  tags: z.array(z.string()).nullable().optional()" in code
    assert "  code: z.string().optional()" in code


def test_top_level_schema_ignores_default_nullable() -> None:
    """Top-level declarations only honour explicit nullability."""
    assert _generate({"type": "string"}, default_nullable=True).code == "z.string()"
    assert _generate({"type": ["string", "null"]}).code == "z.string().nullable()"


def test_self_reference_is_lazy() -> None:
    """A schema referencing itself uses z.lazy and records no self-edge."""
    schema = {"type": "object", "properties": {"next": {"$ref": "#/components/schemas/Node"}}}
    result = _generate(schema, name="Node", schemas={"Node": schema})

    assert "next: z.lazy((): z.ZodTypeAny => nodeSchema).optional()" in result.code
    assert result.uses_lazy
    assert result.dependencies == ()


def test_references_to_cycle_members_are_lazy() -> None:
    """References into a detected cycle use the deferred form."""
    schemas = {
        "A": {"type": "object", "properties": {"b": {"$ref": "#/components/schemas/B"}}},
        "B": {"type": "object", "properties": {"a": {"$ref": "#/components/schemas/A"}}},
    }
    result = _generate(schemas["A"], name="A", schemas=schemas, circular=frozenset({"A", "B"}))

    assert result.code == "z.object({\n  b: z.lazy((): z.ZodTypeAny => bSchema).optional()\n})"
    assert result.dependencies == ("B",)


def test_references_resolve_through_aliases() -> None:
    """Edges and identifiers point at the final alias target."""
    schemas = {
        "User": _USER,
        "Owner": {"$ref": "#/components/schemas/User"},
        "Author": {"allOf": [{"$ref": "#/components/schemas/Owner"}]},
    }
    result = _generate({"$ref": "#/components/schemas/Author"}, schemas=schemas)

    assert result.code == "userSchema"
    assert result.dependencies == ("User",)


def test_object_modes_and_additional_properties() -> None:
    """Validation mode and additionalProperties select the object constructor."""
    schema = {"type": "object", "properties": {"a": {"type": "string"}}}
    assert _generate(schema, mode="strict").code.startswith("z.strictObject(")
    assert _generate(schema, mode="loose").code.startswith("z.looseObject(")
    assert _generate({**schema, "additionalProperties": False}).code.startswith("z.strictObject(")
    assert _generate({**schema, "additionalProperties": {"type": "integer"}}).code.endswith(
        ".catchall(z.number().int())"
    )


def test_empty_objects_follow_policy() -> None:
    """Property-less objects use the configured empty-object behaviour."""
    assert _generate({"type": "object"}).code == "z.looseObject({})"
    assert _generate({"type": "object"}, empty_object_behavior="strict").code == "z.strictObject({})"
    assert _generate({"type": "object"}, empty_object_behavior="record").code == (
        "z.record(z.string(), z.unknown())"
    )
    assert _generate({"type": "object", "additionalProperties": {"type": "string"}}).code == (
        "z.record(z.string(), z.string())"
    )


def test_required_names_without_properties_are_refined() -> None:
    """Required names missing from properties become a refinement."""
    schema = {"type": "object", "required": ["a", "b"], "properties": {"a": {"type": "string"}}}
    code = _generate(schema).code

    assert code.startswith("z.object({\n  a: z.string()\n}).catchall(z.unknown()).refine(")
    assert 'message: "Missing required properties: b"' in code


def test_read_only_properties_hidden_from_requests() -> None:
    """Request schemas omit readOnly properties and responses omit writeOnly ones."""
    schema = {
        "type": "object",
        "properties": {
            "id": {"type": "string", "readOnly": True},
            "password": {"type": "string", "writeOnly": True},
        },
    }
    assert "id:" not in _generate(schema, schema_type="request").code
    assert "password:" not in _generate(schema, schema_type="response").code
    assert "id:" in _generate(schema).code


def test_all_of_conflicts_are_reported() -> None:
    """Overlapping allOf properties are recorded as conflicts and warnings."""
    schema = {
        "allOf": [
            {"type": "object", "properties": {"a": {"type": "string"}}},
            {"type": "object", "properties": {"a": {"type": "integer"}}},
        ]
    }
    result = _generate(schema, name="Merged")

    assert result.code == (
        "z.object({\n  a: z.string().optional()\n}).extend({\n  a: z.number().int().optional()\n})"
    )
    assert result.conflicts == ('Property "a" is defined in multiple allOf branches',)
    assert result.warnings == (
        'allOf property conflict in Merged: Property "a" is defined in multiple allOf branches',
    )


def test_all_of_with_non_object_branch_uses_intersection() -> None:
    """Branches that are not plain objects are combined with .and()."""
    schema = {"allOf": [{"type": "string"}, {"type": "string", "minLength": 1}]}
    assert _generate(schema).code == "z.string().and(z.string().min(1))"


def test_union_without_branches_warns() -> None:
    """Empty oneOf falls back to z.unknown with a warning."""
    result = _generate({"oneOf": []}, name="Empty")

    assert result.code == "z.unknown()"
    assert result.warnings == ("oneOf in Empty has no branches; falling back to z.unknown()",)


def test_unusable_discriminator_falls_back_to_union() -> None:
    """Explicit discriminators that cannot be honoured produce z.union and a warning."""
    schema = {"oneOf": [{"type": "string"}, {"type": "number"}], "discriminator": {"propertyName": "kind"}}
    result = _generate(schema, name="Mixed")

    assert result.code == "z.union([z.string(), z.number()])"
    assert result.discriminated_unions == 0
    assert len(result.warnings) == 1
    assert 'Discriminator "kind"' in result.warnings[0]


def test_discriminator_is_detected_without_annotation() -> None:
    """Required literal properties shared by every branch are detected."""
    schemas = {
        "Cat": {"type": "object", "required": ["pet"], "properties": {"pet": {"const": "cat"}}},
        "Dog": {"type": "object", "required": ["pet"], "properties": {"pet": {"enum": ["dog"]}}},
    }
    schema = {"anyOf": [{"$ref": "#/components/schemas/Cat"}, {"$ref": "#/components/schemas/Dog"}]}
    result = _generate(schema, schemas=schemas)

    assert result.code == 'z.discriminatedUnion("pet", [catSchema, dogSchema])'
    assert result.discriminated_unions == 1
    assert result.dependencies == ("Cat", "Dog")


def test_overlapping_literal_values_are_not_discriminators() -> None:
    """Branches sharing a literal value fall back to z.union."""
    schemas = {
        "Cat": {"type": "object", "required": ["pet"], "properties": {"pet": {"enum": ["cat", "feline"]}}},
        "Lion": {"type": "object", "required": ["pet"], "properties": {"pet": {"enum": ["feline", "lion"]}}},
    }
    schema = {"oneOf": [{"$ref": "#/components/schemas/Cat"}, {"$ref": "#/components/schemas/Lion"}]}

    result = _generate(schema, schemas=schemas)
    assert result.code == "z.union([catSchema, lionSchema])"
    assert result.discriminated_unions == 0
    assert result.warnings == ()

    explicit = _generate({**schema, "discriminator": {"propertyName": "pet"}}, name="Feline", schemas=schemas)
    assert explicit.code == "z.union([catSchema, lionSchema])"
    assert "distinct values" in explicit.warnings[0]


def test_tuple_not_and_multi_type() -> None:
    """prefixItems, not and multi-type schemas have dedicated shapes."""
    assert _generate(
        {"type": "array", "prefixItems": [{"type": "string"}, {"type": "number"}], "items": {"type": "boolean"}}
    ).code == "z.tuple([z.string(), z.number()]).rest(z.boolean())"
    assert _generate({"type": ["string", "integer"]}).code == "z.union([z.string(), z.number().int()])"
    assert _generate({"type": "string", "not": {"const": "x"}}).code == (
        'z.string().refine((val) => !z.literal("x").safeParse(val).success, '
        '{ message: "Value must not match the excluded schema" })'
    )


def test_describe_and_property_docs() -> None:
    """useDescribe appends .describe and property descriptions become JSDoc."""
    assert _generate({"type": "string", "description": "Hi"}, use_describe=True).code == (
        'z.string().describe("Hi")'
    )
    schema = {"type": "object", "properties": {"a": {"type": "string", "description": "First"}}}
    assert _generate(schema).code == "z.object({\n  /** First */\n  a: z.string().optional()\n})"
    assert _generate(schema, include_descriptions=False).code == (
        "z.object({\n  a: z.string().optional()\n})"
    )


def test_pattern_properties_validate_undeclared_keys() -> None:
    """patternProperties keep extra keys and check them against the first matching pattern."""
    schema = {
        "type": "object",
        "required": ["id"],
        "properties": {"id": {"type": "string"}},
        "patternProperties": {"^x-": {"type": "string"}},
    }
    code = _generate(schema).code

    assert code.startswith(
        "z.object({\n  id: z.string()\n}).catchall(z.unknown()).superRefine((obj, ctx) => {\n"
    )
    assert '  const declared = new Set(["id"]);\n' in code
    assert "  const patterns: [RegExp, z.ZodTypeAny][] = [[/^x-/, z.string()]];\n" in code
    assert code.endswith("})")


def test_property_names_constrain_keys() -> None:
    """propertyNames checks every key for pattern and length."""
    schema = {"type": "object", "propertyNames": {"pattern": "^[a-z]+$", "maxLength": 3}}
    code = _generate(schema).code

    assert code.startswith("z.looseObject({}).superRefine((obj, ctx) => {\n")
    assert "if (!/^[a-z]+$/.test(key)) failures.push(\"must match pattern '^[a-z]+$'\");" in code
    assert 'if (key.length > 3) failures.push("must be at most 3 characters");' in code
    assert "minLength" not in code


def test_dependent_required_refinement() -> None:
    """dependentRequired demands the listed keys once the trigger key is present."""
    schema = {
        "type": "object",
        "properties": {"card": {"type": "string"}, "billing": {"type": "string"}},
        "dependentRequired": {"card": ["billing"]},
    }

    assert _generate(schema).code == (
        "z.object({\n"
        "  card: z.string().optional(),\n"
        "  billing: z.string().optional()\n"
        '}).refine((obj) => obj["card"] === undefined || ["billing"].every((key) => obj[key] !== undefined), '
        "{ message: \"When 'card' is present, 'billing' must also be present\" })"
    )


def test_schema_dependencies_validate_whole_object() -> None:
    """Schema-valued dependencies parse the object once the trigger key is present."""
    schema = {
        "type": "object",
        "properties": {"card": {"type": "string"}},
        "dependencies": {"card": {"required": ["billing"]}},
    }
    code = _generate(schema).code

    assert (
        '.refine((obj) => obj["card"] === undefined || z.looseObject({}).refine('
        '(obj) => ["billing"].every((key) => key in obj), '
        '{ message: "Missing required properties: billing" }).safeParse(obj).success'
    ) in code


def test_unevaluated_properties_on_intersections() -> None:
    """unevaluatedProperties: false rejects keys no allOf branch declares."""
    schemas = {"Base": {"type": "object", "properties": {"id": {"type": "string"}}}}
    schema = {
        "allOf": [
            {"$ref": "#/components/schemas/Base"},
            {"type": "object", "properties": {"name": {"type": "string"}}},
        ],
        "unevaluatedProperties": False,
    }
    code = _generate(schema, schemas=schemas).code

    assert code.startswith("baseSchema.extend({\n  name: z.string().optional()\n})")
    assert code.endswith(
        ".catchall(z.unknown())"
        '.refine((obj) => Object.keys(obj).every((key) => new Set(["id", "name"]).has(key)), '
        '{ message: "No unevaluated properties allowed" })'
    )


def test_unevaluated_properties_on_plain_objects_act_as_additional() -> None:
    """Without composition unevaluatedProperties behaves like additionalProperties."""
    schema = {"type": "object", "properties": {"a": {"type": "string"}}}

    assert _generate({**schema, "unevaluatedProperties": False}).code.startswith("z.strictObject(")
    assert _generate({**schema, "unevaluatedProperties": {"type": "integer"}}).code.endswith(
        ".catchall(z.number().int())"
    )
