"""Shared helpers for JSON-Schema shape inspection."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Optional

from .json_types import JSONObject, JSONValue
from .model_types import SchemaKind
from .naming import resolve_ref

_COMPOSITION_KINDS: tuple[tuple[str, SchemaKind], ...] = (
    ("allOf", SchemaKind.ALL_OF),
    ("oneOf", SchemaKind.ONE_OF),
    ("anyOf", SchemaKind.ANY_OF),
)
_PRIMITIVE_KINDS: dict[str, SchemaKind] = {
    "string": SchemaKind.STRING,
    "number": SchemaKind.NUMBER,
    "integer": SchemaKind.INTEGER,
    "boolean": SchemaKind.BOOLEAN,
    "null": SchemaKind.NULL,
    "object": SchemaKind.OBJECT,
    "array": SchemaKind.ARRAY,
}
_STRUCTURAL_KEYS: frozenset[str] = frozenset(
    {
        "properties",
        "items",
        "prefixItems",
        "allOf",
        "oneOf",
        "anyOf",
        "not",
        "enum",
        "const",
        "type",
        "additionalProperties",
    }
)
_SCHEMA_LIST_KEYS: tuple[str, ...] = ("allOf", "oneOf", "anyOf", "prefixItems")
_SCHEMA_VALUE_KEYS: tuple[str, ...] = ("items", "additionalProperties", "unevaluatedProperties", "not")
_SCHEMA_MAP_KEYS: tuple[str, ...] = ("patternProperties", "dependencies")


def schema_kind(schema: JSONObject) -> SchemaKind:
    """Classify a raw schema node into its closed shape tag.

    Args:
        schema (JSONObject): Schema node to classify.

    Returns:
        SchemaKind: The tag every generator dispatches on.
    """
    if isinstance(schema.get("$ref"), str):
        return SchemaKind.REF
    if "const" in schema:
        return SchemaKind.CONST
    if isinstance(schema.get("enum"), list):
        return SchemaKind.ENUM
    for key, kind in _COMPOSITION_KINDS:
        if isinstance(schema.get(key), list):
            return kind
    if isinstance(schema.get("not"), dict):
        return SchemaKind.NOT

    non_null_types = type_list(schema)
    if len(non_null_types) > 1:
        return SchemaKind.MULTI_TYPE
    if non_null_types:
        return _PRIMITIVE_KINDS.get(non_null_types[0], SchemaKind.UNKNOWN)
    if schema.get("type") == "null" or schema.get("type") == ["null"]:
        return SchemaKind.NULL
    if is_object_schema(schema):
        return SchemaKind.OBJECT
    if "items" in schema or "prefixItems" in schema:
        return SchemaKind.ARRAY
    return SchemaKind.UNKNOWN


def type_list(schema: JSONObject) -> list[str]:
    """Return the declared non-null type names of a schema, in order."""
    raw_type = schema.get("type")
    if isinstance(raw_type, str):
        return [] if raw_type == "null" else [raw_type]
    if isinstance(raw_type, list):
        return [item for item in raw_type if isinstance(item, str) and item != "null"]
    return []


def explicit_nullable(schema: JSONObject) -> Optional[bool]:
    """Return the schema's explicit nullability, or ``None`` when unannotated."""
    nullable = schema.get("nullable")
    if isinstance(nullable, bool):
        return nullable
    raw_type = schema.get("type")
    if isinstance(raw_type, list) and "null" in raw_type:
        return True
    return None


def is_nullable(schema: JSONObject, default: bool = False) -> bool:
    """Return whether a schema is nullable, falling back to ``default``."""
    explicit = explicit_nullable(schema)
    return default if explicit is None else explicit


def is_object_schema(schema: JSONObject) -> bool:
    """Return whether a schema behaves as an object schema.

    Args:
        schema (JSONObject): Schema node to inspect.

    Returns:
        bool: Whether object modeling rules should apply.
    """
    if schema.get("type") == "object":
        return True
    if isinstance(schema.get("properties"), dict):
        return True
    if isinstance(schema.get("patternProperties"), dict) or isinstance(schema.get("propertyNames"), dict):
        return True
    if "additionalProperties" in schema and "items" not in schema:
        return True
    return False


def ref_name(schema: JSONObject) -> Optional[str]:
    """Return the target schema name of a ``$ref`` node."""
    ref = schema.get("$ref")
    if isinstance(ref, str):
        return resolve_ref(ref)
    return None


def simple_alias_target(schema: JSONObject) -> Optional[str]:
    """Return the referenced name when a schema is nothing but an alias.

    Both ``{"$ref": ...}`` and ``{"allOf": [{"$ref": ...}]}`` qualify as long
    as no other structural keyword or explicit nullability is present.
    """
    if explicit_nullable(schema):
        return None
    target = ref_name(schema)
    if target is not None:
        if _STRUCTURAL_KEYS.intersection(schema):
            return None
        return target
    all_of = schema.get("allOf")
    if not isinstance(all_of, list) or len(all_of) != 1 or not isinstance(all_of[0], dict):
        return None
    if _STRUCTURAL_KEYS.difference({"allOf"}).intersection(schema):
        return None
    branch = all_of[0]
    if set(branch) != {"$ref"}:
        return None
    return ref_name(branch)


def resolve_alias_chain(name: str, schemas: Mapping[str, JSONValue]) -> str:
    """Follow simple aliases from ``name`` to the first non-alias schema."""
    seen = {name}
    current = name
    while True:
        schema = schemas.get(current)
        if not isinstance(schema, dict):
            return current
        target = simple_alias_target(schema)
        if target is None or target in seen or target not in schemas:
            return current
        seen.add(target)
        current = target


def iter_child_schemas(schema: JSONObject, path: str = "") -> Iterator[tuple[str, JSONObject]]:
    """Yield ``(path, child)`` for every nested schema node one level down."""
    properties = schema.get("properties")
    if isinstance(properties, dict):
        for property_name, property_schema in properties.items():
            if isinstance(property_schema, dict):
                yield f"{path}.properties.{property_name}", property_schema
    for key in _SCHEMA_MAP_KEYS:
        mapping = schema.get(key)
        if isinstance(mapping, dict):
            for entry_name, entry_schema in mapping.items():
                if isinstance(entry_schema, dict):
                    yield f"{path}.{key}.{entry_name}", entry_schema
    for key in _SCHEMA_VALUE_KEYS:
        child = schema.get(key)
        if isinstance(child, dict):
            yield f"{path}.{key}", child
    for key in _SCHEMA_LIST_KEYS:
        children = schema.get(key)
        if isinstance(children, list):
            for index, child in enumerate(children):
                if isinstance(child, dict):
                    yield f"{path}.{key}[{index}]", child


def extract_schema_refs(schema: JSONValue) -> list[str]:
    """Return every schema name referenced anywhere inside ``schema``.

    Names are returned once each, in first-seen order.
    """
    found: dict[str, None] = {}
    _collect_refs(schema, found)
    return list(found)


def _collect_refs(schema: JSONValue, found: dict[str, None]) -> None:
    if not isinstance(schema, dict):
        return
    target = ref_name(schema)
    if target is not None:
        found.setdefault(target, None)
    for _, child in iter_child_schemas(schema):
        _collect_refs(child, found)


def collect_property_names(
    schema: JSONObject,
    schemas: Mapping[str, JSONValue],
    _seen: Optional[set[str]] = None,
) -> list[str]:
    """Return the property names an object-like schema declares.

    References and nested ``allOf`` branches are followed so that a branch
    reports every property it contributes to an intersection.
    """
    seen = set() if _seen is None else _seen
    target = ref_name(schema)
    if target is not None:
        if target in seen:
            return []
        seen.add(target)
        resolved = schemas.get(target)
        return collect_property_names(resolved, schemas, seen) if isinstance(resolved, dict) else []

    names: list[str] = []
    properties = schema.get("properties")
    if isinstance(properties, dict):
        names.extend(str(key) for key in properties)
    all_of = schema.get("allOf")
    if isinstance(all_of, list):
        for branch in all_of:
            if isinstance(branch, dict):
                names.extend(
                    name for name in collect_property_names(branch, schemas, seen) if name not in names
                )
    return names
