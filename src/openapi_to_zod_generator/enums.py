"""Enum declarations for Zod validators and native TypeScript types."""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Optional

from .model_types import NamingOptions
from .naming import schema_identifier, to_enum_key, type_identifier


@dataclass(frozen=True)
class EnumResult:
    """Rendered pieces of one enum declaration.

    ``enum_code`` holds a native ``export enum`` block when one is emitted;
    it is rendered in the enum section ahead of every validator.
    """

    enum_code: Optional[str]
    schema_code: str
    type_code: str


def literal_expression(value: Any) -> str:
    """Return a ``z.literal`` for a JSON scalar, or ``z.null()`` for null."""
    if value is None:
        return "z.null()"
    return f"z.literal({json.dumps(value)})"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def enum_expression(values: Sequence[Any]) -> str:
    """Return the validator expression for a list of enum values.

    All-boolean sets collapse to ``z.boolean()``, all-string sets become
    ``z.enum([...])`` and anything else is a union of literals.
    """
    if not values:
        return "z.never()"
    if all(isinstance(value, bool) for value in values):
        return "z.boolean()"
    if all(isinstance(value, str) for value in values):
        return f"z.enum([{', '.join(json.dumps(value) for value in values)}])"
    return f"z.union([{', '.join(literal_expression(value) for value in values)}])"


def enum_members(values: Sequence[Any]) -> list[tuple[str, str]]:
    """Return ``(key, literal)`` pairs for a TypeScript enum body.

    Keys that collide after conversion receive numeric suffixes starting at 2.
    """
    members: list[tuple[str, str]] = []
    used: set[str] = set()
    for value in values:
        key = to_enum_key(str(value))
        if key in used:
            counter = 2
            while f"{key}{counter}" in used:
                counter += 1
            key = f"{key}{counter}"
        used.add(key)
        members.append((key, json.dumps(value)))
    return members


def _supports_native_enum(values: Sequence[Any]) -> bool:
    return bool(values) and all(isinstance(value, str) or _is_number(value) for value in values)


def render_native_enum(enum_name: str, values: Sequence[Any]) -> str:
    """Render an ``export enum`` block."""
    body = "".join(f"  {key} = {literal},\n" for key, literal in enum_members(values))
    return f"export enum {enum_name} {{\n{body}}}"


def generate_enum(
    name: str,
    values: Sequence[Any],
    *,
    enum_type: str,
    naming: NamingOptions,
    nullable: bool = False,
) -> EnumResult:
    """Generate an enum validator and its inferred type alias.

    Args:
        name (str): Component schema name.
        values (Sequence[Any]): Enum values in declaration order, without null.
        enum_type (str): ``"zod"`` for ``z.enum`` or ``"typescript"`` to emit a
            native enum that the validator wraps.
        naming (NamingOptions): Identifier decoration options.
        nullable (bool): Append ``.nullable()`` to the validator.

    Returns:
        EnumResult: Enum block (if any), validator and type alias code.
    """
    schema_name = schema_identifier(name, naming)
    type_name = type_identifier(name, naming)
    enum_code: Optional[str] = None
    if enum_type == "typescript" and _supports_native_enum(values):
        enum_name = f"{type_name}Enum"
        enum_code = render_native_enum(enum_name, values)
        expression = f"z.enum({enum_name})"
    else:
        expression = enum_expression(values)
    if nullable:
        expression += ".nullable()"
    return EnumResult(
        enum_code=enum_code,
        schema_code=f"export const {schema_name} = {expression};",
        type_code=f"export type {type_name} = z.infer<typeof {schema_name}>;",
    )


def generate_native_enum(
    name: str,
    values: Sequence[Any],
    *,
    native_enum_type: str,
    naming: NamingOptions,
) -> EnumResult:
    """Generate a TypeScript-only enum representation without a validator.

    ``native_enum_type="union"`` yields a literal union type alias, while
    ``"enum"`` yields an ``export enum`` plus an alias to it.
    """
    type_name = type_identifier(name, naming)
    if native_enum_type == "enum" and _supports_native_enum(values):
        enum_name = f"{type_name}Enum"
        return EnumResult(
            enum_code=render_native_enum(enum_name, values),
            schema_code="",
            type_code=f"export type {type_name} = {enum_name};",
        )
    union = " | ".join(json.dumps(value) for value in values) or "never"
    return EnumResult(
        enum_code=None,
        schema_code="",
        type_code=f"export type {type_name} = {union};",
    )
