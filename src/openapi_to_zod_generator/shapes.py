"""Zod shape generation for schema nodes.

Every entry point is a pure function of the schema node and a
:class:`ShapeContext`; per-call bookkeeping (dependency edges, warnings,
statistics flags) lives in a private accumulator that is discarded once the
:class:`ShapeResult` is built.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Optional

from .enums import enum_expression, literal_expression
from .jsdoc import generate_jsdoc
from .json_types import JSONObject, JSONValue
from .model_types import NamingOptions, ResolvedOptions, SchemaKind
from .naming import quote_property_key, schema_identifier
from .schema_utils import (
    collect_property_names,
    explicit_nullable,
    is_nullable,
    ref_name,
    resolve_alias_chain,
    schema_kind,
    type_list,
)
from .validators import (
    array_constraints,
    describe_call,
    escape_regex_literal,
    has_constraints,
    number_validator,
    string_validator,
)

_NOT_MESSAGE = "Value must not match the excluded schema"
_DEFAULT_NULLABLE_EXEMPT: frozenset[SchemaKind] = frozenset(
    {
        SchemaKind.REF,
        SchemaKind.ENUM,
        SchemaKind.CONST,
        SchemaKind.ALL_OF,
        SchemaKind.ONE_OF,
        SchemaKind.ANY_OF,
        SchemaKind.NULL,
    }
)
_EMPTY_OBJECTS: dict[str, str] = {
    "strict": "z.strictObject({})",
    "loose": "z.looseObject({})",
    "record": "z.record(z.string(), z.unknown())",
}


@dataclass(frozen=True)
class ShapeContext:
    """Everything shape generation reads, resolved once per usage context."""

    schemas: Mapping[str, JSONValue]
    options: ResolvedOptions
    naming: NamingOptions = field(default_factory=NamingOptions)
    circular: frozenset[str] = frozenset()


@dataclass(frozen=True)
class ShapeResult:
    """Generated expression plus the facts discovered while building it."""

    code: str
    dependencies: tuple[str, ...]
    uses_lazy: bool
    discriminated_unions: int
    has_constraints: bool
    conflicts: tuple[str, ...]
    warnings: tuple[str, ...]


@dataclass
class _ShapeState:
    current: Optional[str]
    dependencies: dict[str, None] = field(default_factory=dict)
    uses_lazy: bool = False
    discriminated_unions: int = 0
    has_constraints: bool = False
    conflicts: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def generate_shape(
    schema: JSONObject,
    *,
    name: Optional[str],
    context: ShapeContext,
) -> ShapeResult:
    """Generate the Zod expression for a top-level schema node.

    Top-level nodes never receive default nullability; only explicit
    ``nullable`` annotations apply.

    Args:
        schema (JSONObject): Schema node to convert.
        name (Optional[str]): Name of the enclosing declaration, used for
            self-reference detection and warning messages.
        context (ShapeContext): Resolved options and document schemas.

    Returns:
        ShapeResult: Expression, dependency edges and generation metadata.
    """
    state = _ShapeState(current=name)
    code = _shape(schema, context, state, property_position=False)
    return ShapeResult(
        code=code,
        dependencies=tuple(state.dependencies),
        uses_lazy=state.uses_lazy,
        discriminated_unions=state.discriminated_unions,
        has_constraints=state.has_constraints,
        conflicts=tuple(state.conflicts),
        warnings=tuple(state.warnings),
    )


def _shape(
    schema: JSONObject,
    ctx: ShapeContext,
    state: _ShapeState,
    *,
    property_position: bool,
) -> str:
    kind = schema_kind(schema)
    code = _shape_body(schema, kind, ctx, state)

    if kind is SchemaKind.NULL:
        nullable = False
    elif property_position and kind not in _DEFAULT_NULLABLE_EXEMPT:
        nullable = is_nullable(schema, ctx.options.default_nullable)
    else:
        nullable = explicit_nullable(schema) is True
    if kind is SchemaKind.ENUM and _enum_allows_null(schema):
        nullable = True
    if nullable:
        code += ".nullable()"

    description = schema.get("description")
    if ctx.options.use_describe and isinstance(description, str) and description.strip():
        code += describe_call(description.strip())
    return code


def _shape_body(
    schema: JSONObject,
    kind: SchemaKind,
    ctx: ShapeContext,
    state: _ShapeState,
) -> str:
    if has_constraints(schema):
        state.has_constraints = True

    if kind is SchemaKind.REF:
        return _reference(str(ref_name(schema)), ctx, state)
    if kind is SchemaKind.CONST:
        return literal_expression(schema["const"])
    if kind is SchemaKind.ENUM:
        values = [value for value in schema["enum"] if value is not None]
        return enum_expression(values)
    if kind is SchemaKind.ALL_OF:
        branches = _all_of_branches(schema)
        object_chain = bool(branches) and all(
            _produces_zod_object(branch, ctx, state) for branch in branches
        )
        return _all_of(schema, ctx, state) + _unevaluated_properties(
            schema, ctx, state, object_chain=object_chain
        )
    if kind in (SchemaKind.ONE_OF, SchemaKind.ANY_OF):
        return _union(schema, kind, ctx, state) + _unevaluated_properties(
            schema, ctx, state, object_chain=False
        )
    if kind is SchemaKind.NOT:
        return _not(schema, ctx, state)
    if kind is SchemaKind.MULTI_TYPE:
        variants = [
            _shape_body(variant, schema_kind(variant), ctx, state)
            for variant in _type_variants(schema)
        ]
        return f"z.union([{', '.join(variants)}])"
    if kind is SchemaKind.OBJECT:
        return _object(schema, ctx, state)
    if kind is SchemaKind.ARRAY:
        return _array(schema, ctx, state)
    if kind is SchemaKind.STRING:
        return string_validator(
            schema,
            custom_date_time_regex=ctx.options.custom_date_time_format_regex,
        )
    if kind in (SchemaKind.NUMBER, SchemaKind.INTEGER):
        return number_validator(schema, integer=kind is SchemaKind.INTEGER)
    if kind is SchemaKind.BOOLEAN:
        return "z.boolean()"
    if kind is SchemaKind.NULL:
        return "z.null()"
    return "z.unknown()"


def _enum_allows_null(schema: JSONObject) -> bool:
    values = schema.get("enum")
    return isinstance(values, list) and None in values


def _type_variants(schema: JSONObject) -> list[JSONObject]:
    base = {key: value for key, value in schema.items() if key not in ("type", "nullable")}
    return [{**base, "type": type_name} for type_name in type_list(schema)]


def _is_lazy_target(target: str, ctx: ShapeContext, state: _ShapeState) -> bool:
    return target == state.current or target in ctx.circular


def _reference(target: str, ctx: ShapeContext, state: _ShapeState) -> str:
    resolved = resolve_alias_chain(target, ctx.schemas)
    identifier = schema_identifier(resolved, ctx.naming)
    if resolved != state.current:
        state.dependencies.setdefault(resolved, None)
    if _is_lazy_target(resolved, ctx, state):
        state.uses_lazy = True
        return f"z.lazy((): z.ZodTypeAny => {identifier})"
    return identifier


def _is_hidden(schema: JSONObject, schema_type: str) -> bool:
    if schema_type == "request":
        return schema.get("readOnly") is True
    if schema_type == "response":
        return schema.get("writeOnly") is True
    return False


def _object_method(mode: str, additional: JSONValue) -> str:
    if additional is False or mode == "strict":
        return "z.strictObject"
    if mode == "loose":
        return "z.looseObject"
    return "z.object"


def _indent(code: str) -> str:
    return code.replace("\n", "\n  ")


def _property_lines(
    properties: Mapping[str, JSONValue],
    required: list[str],
    ctx: ShapeContext,
    state: _ShapeState,
) -> list[str]:
    lines: list[str] = []
    for key, property_schema in properties.items():
        if not isinstance(property_schema, dict):
            continue
        if _is_hidden(property_schema, ctx.options.schema_type):
            continue
        code = _indent(_shape(property_schema, ctx, state, property_position=True))
        if key not in required:
            code += ".optional()"
        doc = generate_jsdoc(
            property_schema,
            include_descriptions=ctx.options.include_descriptions,
        )
        line = f"  {quote_property_key(str(key))}: {code}"
        if doc:
            line = f"  {doc.rstrip()}\n{line}"
        lines.append(line)
    return lines


def _object_literal(lines: list[str]) -> str:
    if not lines:
        return "{}"
    return "{\n" + ",\n".join(lines) + "\n}"


def _required_names(schema: JSONObject) -> list[str]:
    required = schema.get("required")
    if not isinstance(required, list):
        return []
    return [item for item in required if isinstance(item, str)]


def _property_count_refinements(schema: JSONObject) -> str:
    chain = ""
    min_properties = schema.get("minProperties")
    if isinstance(min_properties, int) and not isinstance(min_properties, bool):
        chain += (
            f".refine((obj) => Object.keys(obj).length >= {min_properties}, "
            f'{{ message: "Object must have at least {min_properties} properties" }})'
        )
    max_properties = schema.get("maxProperties")
    if isinstance(max_properties, int) and not isinstance(max_properties, bool):
        chain += (
            f".refine((obj) => Object.keys(obj).length <= {max_properties}, "
            f'{{ message: "Object must have at most {max_properties} properties" }})'
        )
    return chain


def _missing_required_refinement(missing: list[str]) -> str:
    return (
        f".refine((obj) => {json.dumps(missing)}.every((key) => key in obj), "
        f'{{ message: {json.dumps("Missing required properties: " + ", ".join(missing))} }})'
    )


def _object(schema: JSONObject, ctx: ShapeContext, state: _ShapeState) -> str:
    raw_properties = schema.get("properties")
    properties: Mapping[str, JSONValue] = raw_properties if isinstance(raw_properties, dict) else {}
    # Without composition every unevaluated property is an additional one.
    additional = schema.get("additionalProperties", schema.get("unevaluatedProperties"))
    required = _required_names(schema)
    has_patterns = isinstance(schema.get("patternProperties"), dict)
    missing = [name for name in required if name not in properties]

    if not properties:
        if isinstance(additional, dict):
            code = f"z.record(z.string(), {_shape(additional, ctx, state, property_position=False)})"
        elif additional is False:
            code = _EMPTY_OBJECTS["strict"]
        elif has_patterns:
            code = _EMPTY_OBJECTS["loose"]
        else:
            code = _EMPTY_OBJECTS.get(ctx.options.empty_object_behavior, _EMPTY_OBJECTS["loose"])
        if missing and additional is not False:
            code += _missing_required_refinement(missing)
        return code + _property_count_refinements(schema) + _object_keywords(schema, ctx, state)

    method = _object_method(ctx.options.mode, additional)
    code = f"{method}({_object_literal(_property_lines(properties, required, ctx, state))})"

    has_catchall = False
    if isinstance(additional, dict):
        code += f".catchall({_shape(additional, ctx, state, property_position=False)})"
        has_catchall = True
    elif (additional is True or (additional is None and has_patterns)) and method != "z.looseObject":
        code += ".catchall(z.unknown())"
        has_catchall = True

    if missing:
        if not has_catchall and method != "z.looseObject":
            code += ".catchall(z.unknown())"
        code += _missing_required_refinement(missing)
    return code + _property_count_refinements(schema) + _object_keywords(schema, ctx, state)


def _object_keywords(schema: JSONObject, ctx: ShapeContext, state: _ShapeState) -> str:
    """Return refinements for the object keywords Zod has no builder for.

    ``patternProperties`` checks every undeclared key against the first
    matching pattern. ``propertyNames`` constrains the keys themselves.
    ``dependentRequired`` and array-valued ``dependencies`` require keys
    alongside a trigger key; schema-valued ``dependencies`` validate the
    whole object once the trigger key is present.
    """
    chain = ""
    patterns = schema.get("patternProperties")
    if isinstance(patterns, dict) and patterns:
        chain += _pattern_properties(schema, patterns, ctx, state)
    names = schema.get("propertyNames")
    if isinstance(names, dict):
        chain += _property_names(names)

    dependent = schema.get("dependentRequired")
    if isinstance(dependent, dict):
        for trigger, keys in dependent.items():
            if isinstance(keys, list) and keys:
                chain += _presence_refinement(str(trigger), [str(key) for key in keys])
    dependencies = schema.get("dependencies")
    if isinstance(dependencies, dict):
        for trigger, dependency in dependencies.items():
            if isinstance(dependency, list) and dependency:
                chain += _presence_refinement(str(trigger), [str(key) for key in dependency])
            elif isinstance(dependency, dict):
                dependency_schema = {"type": "object", **dependency}
                expression = _shape(dependency_schema, ctx, state, property_position=False)
                message = f"When '{trigger}' is present, object must satisfy additional schema constraints"
                chain += (
                    f".refine((obj) => obj[{json.dumps(str(trigger))}] === undefined || "
                    f"{expression}.safeParse(obj).success, {{ message: {json.dumps(message)} }})"
                )
    return chain


def _pattern_properties(
    schema: JSONObject,
    patterns: Mapping[str, JSONValue],
    ctx: ShapeContext,
    state: _ShapeState,
) -> str:
    properties = schema.get("properties")
    declared = list(properties) if isinstance(properties, dict) else []
    entries = [
        f"[/{escape_regex_literal(str(pattern))}/, {_shape(value, ctx, state, property_position=False)}]"
        for pattern, value in patterns.items()
        if isinstance(value, dict)
    ]
    return (
        ".superRefine((obj, ctx) => {\n"
        f"  const declared = new Set({json.dumps(declared)});\n"
        f"  const patterns: [RegExp, z.ZodTypeAny][] = [{', '.join(entries)}];\n"
        "  for (const [key, value] of Object.entries(obj)) {\n"
        "    if (declared.has(key)) continue;\n"
        "    const match = patterns.find(([pattern]) => pattern.test(key));\n"
        "    if (!match) continue;\n"
        "    const parsed = match[1].safeParse(value);\n"
        "    if (parsed.success) continue;\n"
        "    for (const issue of parsed.error.issues) {\n"
        "      ctx.addIssue({ code: \"custom\", path: [key, ...issue.path], "
        "message: `Property '${key}' (pattern '${match[0].source}'): ${issue.message}` });\n"
        "    }\n"
        "  }\n"
        "})"
    )


def _property_names(names: JSONObject) -> str:
    checks: list[str] = []
    pattern = names.get("pattern")
    if isinstance(pattern, str):
        failure = json.dumps(f"must match pattern '{pattern}'")
        checks.append(f"if (!/{escape_regex_literal(pattern)}/.test(key)) failures.push({failure});")
    min_length = names.get("minLength")
    if isinstance(min_length, int) and not isinstance(min_length, bool):
        failure = json.dumps(f"must be at least {min_length} characters")
        checks.append(f"if (key.length < {min_length}) failures.push({failure});")
    max_length = names.get("maxLength")
    if isinstance(max_length, int) and not isinstance(max_length, bool):
        failure = json.dumps(f"must be at most {max_length} characters")
        checks.append(f"if (key.length > {max_length}) failures.push({failure});")
    if not checks:
        return ""
    body = "".join(f"    {check}\n" for check in checks)
    return (
        ".superRefine((obj, ctx) => {\n"
        "  for (const key of Object.keys(obj)) {\n"
        "    const failures: string[] = [];\n"
        f"{body}"
        "    if (failures.length > 0) {\n"
        "      ctx.addIssue({ code: \"custom\", path: [key], "
        "message: `Property name '${key}' ${failures.join(\", \")}` });\n"
        "    }\n"
        "  }\n"
        "})"
    )


def _presence_refinement(trigger: str, keys: list[str]) -> str:
    listed = ", ".join(f"'{key}'" for key in keys)
    message = f"When '{trigger}' is present, {listed} must also be present"
    return (
        f".refine((obj) => obj[{json.dumps(trigger)}] === undefined || "
        f"{json.dumps(keys)}.every((key) => obj[key] !== undefined), "
        f"{{ message: {json.dumps(message)} }})"
    )


def _unevaluated_properties(
    schema: JSONObject,
    ctx: ShapeContext,
    state: _ShapeState,
    *,
    object_chain: bool,
) -> str:
    unevaluated = schema.get("unevaluatedProperties")
    if unevaluated is not False and not isinstance(unevaluated, dict):
        return ""
    evaluated = collect_property_names(schema, ctx.schemas)
    for key in ("oneOf", "anyOf"):
        branches = schema.get(key)
        for branch in branches if isinstance(branches, list) else []:
            if isinstance(branch, dict):
                evaluated.extend(
                    name for name in collect_property_names(branch, ctx.schemas) if name not in evaluated
                )
    known = f"new Set({json.dumps(evaluated)})"
    # Intersections built with .extend strip unknown keys before refinements run.
    chain = ".catchall(z.unknown())" if object_chain else ""
    if unevaluated is False:
        return (
            f"{chain}.refine((obj) => Object.keys(obj).every((key) => {known}.has(key)), "
            '{ message: "No unevaluated properties allowed" })'
        )
    extra = _shape(unevaluated, ctx, state, property_position=False)
    return (
        f"{chain}.refine((obj) => Object.keys(obj).filter((key) => !{known}.has(key))"
        f".every((key) => {extra}.safeParse(obj[key]).success), "
        '{ message: "Unevaluated properties must match the schema" })'
    )


def _array(schema: JSONObject, ctx: ShapeContext, state: _ShapeState) -> str:
    items = schema.get("items")
    prefix_items = schema.get("prefixItems")
    if isinstance(prefix_items, list):
        members = [
            _shape(item, ctx, state, property_position=False)
            for item in prefix_items
            if isinstance(item, dict)
        ]
        code = f"z.tuple([{', '.join(members)}])"
        if isinstance(items, dict):
            code += f".rest({_shape(items, ctx, state, property_position=False)})"
        return code

    if isinstance(items, dict):
        code = f"z.array({_shape(items, ctx, state, property_position=False)})"
    else:
        code = "z.array(z.unknown())"
    return code + array_constraints(schema)


def _not(schema: JSONObject, ctx: ShapeContext, state: _ShapeState) -> str:
    base_schema = {key: value for key, value in schema.items() if key != "not"}
    base_kind = schema_kind(base_schema)
    base = _shape_body(base_schema, base_kind, ctx, state)
    excluded = _shape(schema["not"], ctx, state, property_position=False)
    return (
        f"{base}.refine((val) => !{excluded}.safeParse(val).success, "
        f'{{ message: "{_NOT_MESSAGE}" }})'
    )


def _resolve_branch(branch: JSONObject, ctx: ShapeContext) -> Optional[JSONObject]:
    target = ref_name(branch)
    if target is None:
        return branch
    resolved = ctx.schemas.get(resolve_alias_chain(target, ctx.schemas))
    return resolved if isinstance(resolved, dict) else None


def _produces_zod_object(
    branch: JSONObject,
    ctx: ShapeContext,
    state: _ShapeState,
    seen: Optional[set[str]] = None,
) -> bool:
    seen = set() if seen is None else seen
    if explicit_nullable(branch):
        return False
    target = ref_name(branch)
    if target is not None:
        resolved_name = resolve_alias_chain(target, ctx.schemas)
        if _is_lazy_target(resolved_name, ctx, state) or resolved_name in seen:
            return False
        seen.add(resolved_name)
        resolved = ctx.schemas.get(resolved_name)
        return isinstance(resolved, dict) and _produces_zod_object(resolved, ctx, state, seen)

    kind = schema_kind(branch)
    if kind is SchemaKind.ALL_OF:
        return all(
            isinstance(item, dict) and _produces_zod_object(item, ctx, state, seen)
            for item in _all_of_branches(branch)
        )
    if kind is not SchemaKind.OBJECT:
        return False
    if branch.get("properties"):
        return True
    if isinstance(branch.get("additionalProperties"), dict):
        return False
    return ctx.options.empty_object_behavior != "record"


def _all_of_branches(schema: JSONObject) -> list[JSONObject]:
    branches = [item for item in schema.get("allOf", []) if isinstance(item, dict)]
    own_properties = schema.get("properties")
    if isinstance(own_properties, dict) and own_properties:
        inline: dict[str, JSONValue] = {"type": "object", "properties": own_properties}
        if "required" in schema:
            inline["required"] = schema["required"]
        branches.append(inline)
    return branches


def _all_of_conflicts(branches: list[JSONObject], ctx: ShapeContext) -> list[str]:
    owners: dict[str, int] = {}
    conflicts: list[str] = []
    for index, branch in enumerate(branches):
        for property_name in collect_property_names(branch, ctx.schemas):
            first = owners.setdefault(property_name, index)
            message = f'Property "{property_name}" is defined in multiple allOf branches'
            if first != index and message not in conflicts:
                conflicts.append(message)
    return conflicts


def _all_of(schema: JSONObject, ctx: ShapeContext, state: _ShapeState) -> str:
    branches = _all_of_branches(schema)
    if not branches:
        return "z.unknown()"
    if len(branches) == 1:
        return _shape(branches[0], ctx, state, property_position=False)

    conflicts = _all_of_conflicts(branches, ctx)
    for conflict in conflicts:
        if conflict not in state.conflicts:
            state.conflicts.append(conflict)
            owner = state.current or "inline schema"
            state.warnings.append(f"allOf property conflict in {owner}: {conflict}")

    if not all(_produces_zod_object(branch, ctx, state) for branch in branches):
        parts = [_shape(branch, ctx, state, property_position=False) for branch in branches]
        return parts[0] + "".join(f".and({part})" for part in parts[1:])

    code = _shape(branches[0], ctx, state, property_position=False)
    for branch in branches[1:]:
        properties = branch.get("properties")
        if ref_name(branch) is None and schema_kind(branch) is SchemaKind.OBJECT:
            lines = _property_lines(
                properties if isinstance(properties, dict) else {},
                _required_names(branch),
                ctx,
                state,
            )
            code += f".extend({_object_literal(lines)})"
        else:
            code += f".extend({_shape(branch, ctx, state, property_position=False)}.shape)"
    return code


def _literal_values(
    schema: JSONObject,
    property_name: str,
    ctx: ShapeContext,
    seen: Optional[set[int]] = None,
) -> Optional[list[JSONValue]]:
    """Return the literal values ``schema`` requires for ``property_name``, if any."""
    seen = set() if seen is None else seen
    if id(schema) in seen:
        return None
    seen.add(id(schema))

    properties = schema.get("properties")
    if isinstance(properties, dict) and property_name in _required_names(schema):
        candidate = properties.get(property_name)
        if isinstance(candidate, dict):
            values = _schema_literals(candidate, ctx)
            if values is not None:
                return values
    for branch in schema.get("allOf", []) if isinstance(schema.get("allOf"), list) else []:
        if not isinstance(branch, dict):
            continue
        resolved = _resolve_branch(branch, ctx)
        values = _literal_values(resolved, property_name, ctx, seen) if resolved is not None else None
        if values is not None:
            return values
    return None


def _schema_literals(schema: JSONObject, ctx: ShapeContext) -> Optional[list[JSONValue]]:
    resolved = _resolve_branch(schema, ctx)
    if resolved is None:
        return None
    kind = schema_kind(resolved)
    if kind is SchemaKind.CONST:
        return [resolved["const"]]
    if kind is SchemaKind.ENUM:
        values = resolved["enum"]
        if values and all(
            isinstance(value, (str, int, float)) and not isinstance(value, bool) for value in values
        ):
            return list(values)
    return None


def _has_distinct_literals(
    branches: list[Optional[JSONObject]],
    property_name: str,
    ctx: ShapeContext,
) -> bool:
    """Return whether every branch pins ``property_name`` to literals no other branch uses."""
    claimed: set[str] = set()
    for branch in branches:
        values = _literal_values(branch, property_name, ctx) if branch is not None else None
        if values is None:
            return False
        keys = {json.dumps(value, sort_keys=True) for value in values}
        if claimed & keys:
            return False
        claimed |= keys
    return True


def _detect_discriminator(branches: list[JSONObject], ctx: ShapeContext) -> Optional[str]:
    first = _resolve_branch(branches[0], ctx)
    if first is None:
        return None
    properties = first.get("properties")
    candidates = list(properties) if isinstance(properties, dict) else []
    resolved_branches = [_resolve_branch(branch, ctx) for branch in branches]
    for candidate in candidates:
        if _has_distinct_literals(resolved_branches, str(candidate), ctx):
            return str(candidate)
    return None


def _ordered_by_mapping(schema: JSONObject, branches: list[JSONObject]) -> list[JSONObject]:
    discriminator = schema.get("discriminator")
    mapping = discriminator.get("mapping") if isinstance(discriminator, dict) else None
    if not isinstance(mapping, dict):
        return branches
    ordered: list[JSONObject] = []
    for ref in mapping.values():
        for branch in branches:
            if branch.get("$ref") == ref and branch not in ordered:
                ordered.append(branch)
    ordered.extend(branch for branch in branches if branch not in ordered)
    return ordered


def _union(schema: JSONObject, kind: SchemaKind, ctx: ShapeContext, state: _ShapeState) -> str:
    key = kind.value
    branches = [item for item in schema[key] if isinstance(item, dict)]
    owner = state.current or "inline schema"
    if not branches:
        state.warnings.append(f"{key} in {owner} has no branches; falling back to z.unknown()")
        return "z.unknown()"
    if len(branches) == 1:
        return _shape(branches[0], ctx, state, property_position=False)

    discriminator = schema.get("discriminator")
    explicit = discriminator.get("propertyName") if isinstance(discriminator, dict) else None
    property_name = explicit if isinstance(explicit, str) else _detect_discriminator(branches, ctx)

    usable = (
        property_name is not None
        and all(_produces_zod_object(branch, ctx, state) for branch in branches)
        and _has_distinct_literals(
            [_resolve_branch(branch, ctx) for branch in branches], property_name, ctx
        )
    )
    if isinstance(explicit, str) and not usable:
        state.warnings.append(
            f'Discriminator "{explicit}" in {owner} is not a required literal with distinct '
            "values on every object branch; falling back to z.union"
        )

    members = [
        _shape(branch, ctx, state, property_position=False)
        for branch in _ordered_by_mapping(schema, branches)
    ]
    if usable:
        state.discriminated_unions += 1
        return f"z.discriminatedUnion({json.dumps(property_name)}, [{', '.join(members)}])"
    return f"z.union([{', '.join(members)}])"
