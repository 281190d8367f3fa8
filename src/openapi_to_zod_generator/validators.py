"""Constraint chains for primitive and array validators."""

from __future__ import annotations

import json
from typing import Optional

from .json_types import JSONObject

_STRING_FORMATS: dict[str, str] = {
    "uuid": "z.uuid()",
    "email": "z.email()",
    "uri": "z.url()",
    "url": "z.url()",
    "date": "z.iso.date()",
    "time": "z.iso.time()",
    "duration": "z.iso.duration()",
    "ipv4": "z.ipv4()",
    "ipv6": "z.ipv6()",
    "hostname": "z.hostname()",
    "byte": "z.base64()",
    "base64": "z.base64()",
    "base64url": "z.base64url()",
    "emoji": "z.emoji()",
    "cuid": "z.cuid()",
    "cuid2": "z.cuid2()",
    "ulid": "z.ulid()",
    "nanoid": "z.nanoid()",
}
_CONTENT_ENCODINGS: dict[str, str] = {
    "base64": "z.base64()",
    "base64url": "z.base64url()",
}
_DEFAULT_DATE_TIME = "z.iso.datetime()"
_CONSTRAINT_KEYS: tuple[str, ...] = (
    "minLength",
    "maxLength",
    "pattern",
    "minimum",
    "maximum",
    "exclusiveMinimum",
    "exclusiveMaximum",
    "multipleOf",
    "minItems",
    "maxItems",
    "uniqueItems",
    "minProperties",
    "maxProperties",
)


def escape_regex_literal(pattern: str) -> str:
    """Escape unescaped forward slashes so a pattern fits in ``/.../``."""
    escaped: list[str] = []
    backslash_run = 0
    for char in pattern:
        if char == "/" and backslash_run % 2 == 0:
            escaped.append("\\/")
        else:
            escaped.append(char)
        backslash_run = backslash_run + 1 if char == "\\" else 0
    return "".join(escaped)


def date_time_validator(custom_regex: Optional[str]) -> str:
    """Return the validator used for ``format: date-time`` strings."""
    if not custom_regex:
        return _DEFAULT_DATE_TIME
    return f"z.string().regex(/{escape_regex_literal(custom_regex)}/)"


def string_validator(schema: JSONObject, *, custom_date_time_regex: Optional[str] = None) -> str:
    """Build the format-aware string validator and its constraint chain.

    Args:
        schema (JSONObject): String schema node.
        custom_date_time_regex (Optional[str]): Replacement for ISO date-time checks.

    Returns:
        str: Validator expression such as ``z.email().max(120)``.
    """
    format_name = schema.get("format")
    encoding = schema.get("contentEncoding")
    if format_name == "date-time":
        validation = date_time_validator(custom_date_time_regex)
    elif isinstance(format_name, str) and format_name in _STRING_FORMATS:
        validation = _STRING_FORMATS[format_name]
    elif isinstance(encoding, str) and encoding in _CONTENT_ENCODINGS:
        validation = _CONTENT_ENCODINGS[encoding]
    else:
        validation = "z.string()"

    if _is_number(schema.get("minLength")):
        validation += f".min({_number_text(schema['minLength'])})"
    if _is_number(schema.get("maxLength")):
        validation += f".max({_number_text(schema['maxLength'])})"
    pattern = schema.get("pattern")
    if isinstance(pattern, str) and pattern:
        validation += f".regex(/{escape_regex_literal(pattern)}/)"
    if schema.get("contentMediaType") == "application/json":
        validation += (
            ".refine((val) => { try { JSON.parse(val); return true; } catch { return false; } }, "
            '{ message: "Must be valid JSON" })'
        )
    return validation


def number_validator(schema: JSONObject, *, integer: bool) -> str:
    """Build a number validator with bound and ``multipleOf`` constraints.

    Both the OpenAPI 3.0 boolean form and the 3.1 numeric form of
    ``exclusiveMinimum``/``exclusiveMaximum`` are understood.
    """
    validation = "z.number().int()" if integer else "z.number()"

    minimum = schema.get("minimum")
    exclusive_minimum = schema.get("exclusiveMinimum")
    if _is_number(exclusive_minimum):
        validation += f".gt({_number_text(exclusive_minimum)})"
    elif _is_number(minimum):
        method = "gt" if exclusive_minimum is True else "gte"
        validation += f".{method}({_number_text(minimum)})"

    maximum = schema.get("maximum")
    exclusive_maximum = schema.get("exclusiveMaximum")
    if _is_number(exclusive_maximum):
        validation += f".lt({_number_text(exclusive_maximum)})"
    elif _is_number(maximum):
        method = "lt" if exclusive_maximum is True else "lte"
        validation += f".{method}({_number_text(maximum)})"

    multiple_of = schema.get("multipleOf")
    if _is_number(multiple_of):
        validation += f".multipleOf({_number_text(multiple_of)})"
    return validation


def array_constraints(schema: JSONObject) -> str:
    """Return the chained size and uniqueness checks for an array schema."""
    chain = ""
    if _is_number(schema.get("minItems")):
        chain += f".min({_number_text(schema['minItems'])})"
    if _is_number(schema.get("maxItems")):
        chain += f".max({_number_text(schema['maxItems'])})"
    if schema.get("uniqueItems") is True:
        chain += (
            ".refine((items) => new Set(items.map((item) => JSON.stringify(item))).size === "
            'items.length, { message: "Array items must be unique" })'
        )
    return chain


def has_constraints(schema: JSONObject) -> bool:
    """Return whether a schema declares any value constraint keyword."""
    return any(key in schema for key in _CONSTRAINT_KEYS)


def describe_call(description: str) -> str:
    """Return a ``.describe(...)`` call with a safely quoted argument."""
    return f".describe({json.dumps(description)})"


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _number_text(value: object) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
