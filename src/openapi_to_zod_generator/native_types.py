"""Plain TypeScript type aliases for schemas generated without validators."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field

from .jsdoc import escape_jsdoc, generate_jsdoc
from .json_types import JSONObject, JSONValue
from .model_types import NamingOptions, SchemaKind
from .naming import quote_property_key, type_identifier
from .schema_utils import explicit_nullable, ref_name, resolve_alias_chain, schema_kind, type_list

_CONSTRAINT_TAGS: tuple[str, ...] = (
    "minLength",
    "maxLength",
    "pattern",
    "minimum",
    "maximum",
    "minItems",
    "maxItems",
    "minProperties",
    "maxProperties",
    "multipleOf",
    "format",
)
_PRIMITIVE_TYPES: dict[SchemaKind, str] = {
    SchemaKind.STRING: "string",
    SchemaKind.NUMBER: "number",
    SchemaKind.INTEGER: "number",
    SchemaKind.BOOLEAN: "boolean",
    SchemaKind.NULL: "null",
    SchemaKind.UNKNOWN: "unknown",
}


@dataclass(frozen=True)
class NativeTypeResult:
    """A TypeScript type expression and the schema names it mentions."""

    code: str
    dependencies: tuple[str, ...]


@dataclass
class _TypeState:
    schemas: Mapping[str, JSONValue]
    naming: NamingOptions
    include_descriptions: bool
    dependencies: dict[str, None] = field(default_factory=dict)


def generate_native_type(
    schema: JSONObject,
    *,
    schemas: Mapping[str, JSONValue],
    naming: NamingOptions,
    include_descriptions: bool = True,
) -> NativeTypeResult:
    """Generate a TypeScript type expression for a schema.

    Args:
        schema (JSONObject): Schema node to convert.
        schemas (Mapping[str, JSONValue]): Component schemas for alias lookup.
        naming (NamingOptions): Identifier decoration options.
        include_descriptions (bool): Whether property JSDoc is rendered.

    Returns:
        NativeTypeResult: Type expression and referenced schema names.
    """
    state = _TypeState(schemas=schemas, naming=naming, include_descriptions=include_descriptions)
    return NativeTypeResult(code=_type(schema, state), dependencies=tuple(state.dependencies))


def _type(schema: JSONObject, state: _TypeState) -> str:
    kind = schema_kind(schema)
    code = _type_body(schema, kind, state)
    if explicit_nullable(schema) and kind is not SchemaKind.NULL:
        return f"({code}) | null"
    return code


def _type_body(schema: JSONObject, kind: SchemaKind, state: _TypeState) -> str:
    if kind is SchemaKind.REF:
        target = resolve_alias_chain(str(ref_name(schema)), state.schemas)
        state.dependencies.setdefault(target, None)
        return type_identifier(target, state.naming)
    if kind is SchemaKind.CONST:
        return json.dumps(schema["const"])
    if kind is SchemaKind.ENUM:
        return " | ".join(json.dumps(value) for value in schema["enum"]) or "never"
    if kind is SchemaKind.ALL_OF:
        return _join(schema["allOf"], " & ", state)
    if kind in (SchemaKind.ONE_OF, SchemaKind.ANY_OF):
        return _join(schema[kind.value], " | ", state)
    if kind is SchemaKind.MULTI_TYPE:
        base = {key: value for key, value in schema.items() if key not in ("type", "nullable")}
        return " | ".join(_type({**base, "type": item}, state) for item in type_list(schema))
    if kind is SchemaKind.ARRAY:
        items = schema.get("items")
        if isinstance(items, dict):
            return f"Array<{_type(items, state)}>"
        return "unknown[]"
    if kind is SchemaKind.OBJECT:
        return _object_type(schema, state)
    return _PRIMITIVE_TYPES.get(kind, "unknown")


def _join(branches: JSONValue, separator: str, state: _TypeState) -> str:
    members = [_type(item, state) for item in branches if isinstance(item, dict)] if isinstance(
        branches, list
    ) else []
    if not members:
        return "unknown"
    if len(members) == 1:
        return members[0]
    return separator.join(f"({member})" if " " in member else member for member in members)


def _object_type(schema: JSONObject, state: _TypeState) -> str:
    properties = schema.get("properties")
    if not isinstance(properties, dict) or not properties:
        additional = schema.get("additionalProperties")
        if isinstance(additional, dict):
            return f"Record<string, {_type(additional, state)}>"
        return "Record<string, unknown>"

    required = schema.get("required")
    required_names = set(required) if isinstance(required, list) else set()
    lines: list[str] = []
    for name, property_schema in properties.items():
        if not isinstance(property_schema, dict):
            continue
        optional = "" if name in required_names else "?"
        member_type = _type(property_schema, state).replace("\n", "\n  ")
        doc = _property_doc(property_schema, state.include_descriptions)
        prefix = f"  {doc.rstrip()}\n" if doc else ""
        lines.append(f"{prefix}  {quote_property_key(str(name))}{optional}: {member_type};")
    return "{\n" + "\n".join(lines) + "\n}"


def _property_doc(schema: JSONObject, include_descriptions: bool) -> str:
    doc = generate_jsdoc(schema, include_descriptions=include_descriptions)
    if not include_descriptions:
        return doc
    tags = " ".join(f"@{key} {escape_jsdoc(str(schema[key]))}" for key in _CONSTRAINT_TAGS if key in schema)
    if not tags:
        return doc
    if not doc:
        return f"/** {tags} */\n"
    return f"{doc.rstrip()[:-2].rstrip()} {tags} */\n"
