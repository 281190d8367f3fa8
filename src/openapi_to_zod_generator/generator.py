"""High-level generator orchestration."""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from .config import GeneratorOptions
from .content_types import classify_content_type
from .enums import generate_enum, generate_native_enum
from .errors import (
    ConfigurationError,
    GeneratorStateError,
    SchemaGenerationError,
    SpecValidationError,
)
from .filters import (
    filter_headers,
    format_filter_statistics,
    should_include_operation,
    unmatched_header_patterns,
    validate_filters,
)
from .jsdoc import generate_jsdoc, generate_warning_block
from .json_types import JSONObject, JSONValue
from .loader import load_openapi_document
from .model_types import (
    Declaration,
    DeclarationKind,
    FilterStatistics,
    GenerationResult,
    GenerationStats,
    OperationSpec,
    ResolvedOptions,
    SchemaKind,
    UsageContext,
)
from .native_types import generate_native_type
from .naming import get_operation_name, schema_identifier, type_identifier
from .ordering import order_declarations
from .resolver import Resolver, parameter_schema
from .schema_utils import extract_schema_refs, is_nullable, schema_kind, simple_alias_target
from .shapes import ShapeContext, generate_shape
from .usage import UsageAnalysis, analyze_schema_usage, component_schemas
from .writer import write_output

logger = logging.getLogger(__name__)

_HEADER_LINES: tuple[str, ...] = (
    "// Auto-generated by openapi-to-zod-generator",
    "// Do not edit this file manually",
)
_ZOD_IMPORT = 'import { z } from "zod";'


class GenerationState(Enum):
    """Single-use lifecycle of a :class:`ZodSchemaGenerator`."""

    CONSTRUCTED = "constructed"
    SPEC_LOADED = "spec_loaded"
    USAGE_ANALYZED = "usage_analyzed"
    ENUMS_GENERATED = "enums_generated"
    SCHEMAS_GENERATED = "schemas_generated"
    PARAMETER_SCHEMAS_GENERATED = "parameter_schemas_generated"
    ORDERED = "ordered"
    RENDERED = "rendered"


class ZodSchemaGenerator:
    """Generate a Zod module for one OpenAPI document.

    An instance owns one parsed document and one option set, and runs its
    passes exactly once: usage analysis, enums, component schemas, operation
    parameter schemas, ordering and rendering.
    """

    def __init__(self, options: GeneratorOptions) -> None:
        self._state = GenerationState.CONSTRUCTED
        self._options = options
        self._document: dict[str, Any] = load_openapi_document(options.input)
        self._schemas: dict[str, JSONValue] = component_schemas(self._document)
        self._resolver = Resolver(self._document)
        self._naming = options.naming_options()
        self._request_options = options.resolved_options("request")
        self._response_options = options.resolved_options("response")
        self._filters = options.filters()
        self._filter_stats = FilterStatistics()

        self._operations: list[OperationSpec] = []
        self._usage: Optional[UsageAnalysis] = None
        self._schema_options: dict[str, ResolvedOptions] = {}
        self._enum_blocks: dict[str, str] = {}
        self._declarations: dict[str, Declaration] = {}
        self._parameter_names: list[str] = []
        self._warnings: list[str] = []
        self._state = GenerationState.SPEC_LOADED

    @property
    def state(self) -> GenerationState:
        """Return the current lifecycle state."""
        return self._state

    def generate_string(self) -> str:
        """Run every pass and return the rendered module source."""
        return self.generate_result().output

    def generate(self) -> GenerationResult:
        """Run every pass and write the module to ``options.output``.

        Returns:
            GenerationResult: Rendered output, warnings and statistics.
        """
        if self._options.output is None:
            raise ConfigurationError("An output path is required to write generated schemas")
        result = self.generate_result()
        write_output(self._options.output, result.output)
        return result

    def generate_result(self) -> GenerationResult:
        """Run every pass and return the rendered output with its metadata."""
        if self._state is not GenerationState.SPEC_LOADED:
            raise GeneratorStateError(
                f"Generator already ran (state: {self._state.value}); create a new instance"
            )
        self._analyze_usage()
        self._advance(GenerationState.USAGE_ANALYZED)
        self._generate_enums()
        self._advance(GenerationState.ENUMS_GENERATED)
        self._generate_schemas()
        self._advance(GenerationState.SCHEMAS_GENERATED)
        self._generate_parameter_schemas()
        self._advance(GenerationState.PARAMETER_SCHEMAS_GENERATED)
        order = self._order()
        self._advance(GenerationState.ORDERED)
        stats = self._stats()
        output = self._render(order, stats)
        self._advance(GenerationState.RENDERED)
        return GenerationResult(
            output=output,
            warnings=tuple(self._warnings),
            stats=stats,
            declarations=tuple(self._declarations[name] for name in order),
        )

    def _advance(self, state: GenerationState) -> None:
        logger.debug("%s: %s -> %s", self._options.display_name(), self._state.value, state.value)
        self._state = state

    def _warn(self, message: str) -> None:
        if message in self._warnings:
            return
        self._warnings.append(message)
        logger.warning(message)

    def _analyze_usage(self) -> None:
        self._operations = [
            operation
            for operation in self._resolver.iter_operations()
            if should_include_operation(
                operation.operation,
                operation.path,
                operation.method,
                self._filters,
                self._filter_stats,
            )
        ]
        filter_warning = validate_filters(self._filter_stats, self._filters)
        if filter_warning is not None:
            self._warn(filter_warning)

        self._usage = analyze_schema_usage(self._document, self._operations)
        self._check_content_types()
        self._resolve_schema_options()

    def _check_content_types(self) -> None:
        for operation in self._operations:
            label = f"{operation.method.upper()} {operation.path}"
            media_types = [
                media_type
                for media_type, _ in (
                    *self._resolver.request_body_content(operation.operation),
                    *self._resolver.response_content(operation.operation),
                )
            ]
            for media_type in media_types:
                if not classify_content_type(media_type).is_recognized:
                    self._warn(
                        f'Unrecognized content type "{media_type}" in {label}; '
                        "falling back to json parsing"
                    )

    def _usage_analysis(self) -> UsageAnalysis:
        if self._usage is None:
            raise GeneratorStateError("Usage analysis has not run")
        return self._usage

    def _resolve_schema_options(self) -> None:
        usage = self._usage_analysis()
        inferred_request = dataclasses.replace(self._request_options, type_mode="inferred")
        for name in self._schemas:
            context = usage.context_for(name)
            if context is UsageContext.REQUEST:
                self._schema_options[name] = self._request_options
            elif context is UsageContext.RESPONSE:
                self._schema_options[name] = self._response_options
            else:
                self._schema_options[name] = inferred_request

        pending = [
            name for name, options in self._schema_options.items() if options.type_mode == "inferred"
        ]
        pending.extend(self._query_parameter_refs())
        while pending:
            name = pending.pop()
            options = self._schema_options.get(name)
            if options is None:
                continue
            if options.type_mode != "inferred":
                self._schema_options[name] = dataclasses.replace(options, type_mode="inferred")
            for ref in extract_schema_refs(self._schemas[name]):
                ref_options = self._schema_options.get(ref)
                if ref_options is not None and ref_options.type_mode != "inferred":
                    pending.append(ref)

    def _query_parameter_refs(self) -> list[str]:
        refs: list[str] = []
        for operation in self._operations:
            for parameter in operation.parameters:
                schema = parameter_schema(parameter)
                if parameter.get("in") == "query" and schema is not None:
                    refs.extend(extract_schema_refs(schema))
        return refs

    def _is_skipped(self, name: str) -> bool:
        if self._filters is None or not self._filters.is_active():
            return False
        usage = self._usage_analysis()
        used = usage.request_schemas | usage.response_schemas
        return bool(used) and name not in used

    def _generate_enums(self) -> None:
        for name, schema in self._schemas.items():
            if not isinstance(schema, dict) or schema_kind(schema) is not SchemaKind.ENUM:
                continue
            if self._is_skipped(name):
                continue
            try:
                self._add_enum_declaration(name, schema)
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                raise SchemaGenerationError(f"Failed to generate enum: {exc}", name) from exc

    def _add_enum_declaration(self, name: str, schema: JSONObject) -> None:
        options = self._schema_options[name]
        values = [value for value in schema["enum"] if value is not None]
        nullable = is_nullable(schema) or None in schema["enum"]
        jsdoc = generate_jsdoc(
            schema,
            name=name,
            include_descriptions=options.include_descriptions,
        )

        if options.type_mode == "native":
            native = generate_native_enum(
                name,
                [*values, None] if nullable else values,
                native_enum_type=options.native_enum_type,
                naming=self._naming,
            )
            if native.enum_code is not None:
                self._enum_blocks[name] = jsdoc + native.enum_code
                code = native.type_code
            else:
                code = jsdoc + native.type_code
            self._declarations[name] = Declaration(
                name=name,
                kind=DeclarationKind.NATIVE_TYPE,
                code=code,
            )
            return

        result = generate_enum(
            name,
            values,
            enum_type=options.enum_type,
            naming=self._naming,
            nullable=nullable,
        )
        if result.enum_code is not None:
            self._enum_blocks[name] = result.enum_code
        self._declarations[name] = Declaration(
            name=name,
            kind=DeclarationKind.SCHEMA,
            code=f"{jsdoc}{result.schema_code}\n{result.type_code}",
        )

    def _generate_schemas(self) -> None:
        usage = self._usage_analysis()
        for name, schema in self._schemas.items():
            if name in self._declarations or not isinstance(schema, dict):
                continue
            if self._is_skipped(name):
                continue
            options = self._schema_options[name]
            try:
                if options.type_mode == "native":
                    self._declarations[name] = self._native_declaration(name, schema, options)
                else:
                    self._declarations[name] = self._schema_declaration(
                        name,
                        schema,
                        ShapeContext(
                            schemas=self._schemas,
                            options=options,
                            naming=self._naming,
                            circular=usage.circular,
                        ),
                    )
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                raise SchemaGenerationError(f"Failed to generate schema: {exc}", name) from exc

    def _native_declaration(
        self,
        name: str,
        schema: JSONObject,
        options: ResolvedOptions,
    ) -> Declaration:
        result = generate_native_type(
            schema,
            schemas=self._schemas,
            naming=self._naming,
            include_descriptions=options.include_descriptions,
        )
        jsdoc = generate_jsdoc(schema, name=name, include_descriptions=options.include_descriptions)
        return Declaration(
            name=name,
            kind=DeclarationKind.NATIVE_TYPE,
            code=f"{jsdoc}export type {type_identifier(name, self._naming)} = {result.code};",
            dependencies=tuple(dep for dep in result.dependencies if dep != name),
        )

    def _schema_declaration(
        self,
        name: str,
        schema: JSONObject,
        context: ShapeContext,
        *,
        doc: Optional[str] = None,
        identifiers: Optional[tuple[str, str]] = None,
    ) -> Declaration:
        result = generate_shape(schema, name=name, context=context)
        for warning in result.warnings:
            self._warn(warning)

        schema_name, type_name = identifiers or (
            schema_identifier(name, self._naming),
            type_identifier(name, self._naming),
        )
        if doc is None:
            doc = generate_jsdoc(
                schema,
                name=name,
                include_descriptions=context.options.include_descriptions,
            )
        code = (
            f"{doc}{generate_warning_block(result.conflicts)}"
            f"export const {schema_name} = {result.code};\n"
            f"export type {type_name} = z.infer<typeof {schema_name}>;"
        )
        return Declaration(
            name=name,
            kind=DeclarationKind.SCHEMA,
            code=code,
            dependencies=result.dependencies,
            is_simple_alias=not result.uses_lazy and simple_alias_target(schema) is not None,
            uses_lazy=result.uses_lazy,
            discriminated_unions=result.discriminated_unions,
            has_constraints=result.has_constraints,
            conflicts=result.conflicts,
        )

    def _generate_parameter_schemas(self) -> None:
        parameter_context = ShapeContext(
            schemas=self._schemas,
            options=dataclasses.replace(
                self._request_options,
                default_nullable=False,
                type_mode="inferred",
                schema_type="all",
            ),
            naming=self._naming,
            circular=self._usage_analysis().circular,
        )
        ignore_patterns = self._options.ignore_headers
        seen_headers: list[str] = []

        for operation in self._operations:
            query = [item for item in operation.parameters if item.get("in") == "query"]
            headers = [item for item in operation.parameters if item.get("in") == "header"]
            seen_headers.extend(str(item.get("name")) for item in headers)
            headers = filter_headers(headers, ignore_patterns)
            if not query and not headers:
                continue

            operation_name = get_operation_name(
                operation_id=operation.operation_id,
                method=operation.method,
                path=operation.path,
                use_operation_id=self._options.use_operation_id,
                strip_path_prefix=self._options.strip_path_prefix,
            )
            label = operation.operation_id or f"{operation.method.upper()} {operation.path}"
            if query:
                self._add_parameter_declaration(
                    f"{operation_name}QueryParams",
                    query,
                    header=False,
                    doc=f"/**\n * Query parameters for {label}\n */\n",
                    context=parameter_context,
                )
            if headers:
                self._add_parameter_declaration(
                    f"{operation_name}HeaderParams",
                    headers,
                    header=True,
                    doc=f"/**\n * Header parameters for {label}\n */\n",
                    context=parameter_context,
                )

        for pattern in unmatched_header_patterns(seen_headers, ignore_patterns):
            self._warn(f'Header ignore pattern "{pattern}" did not match any header parameters')

    def _add_parameter_declaration(
        self,
        name: str,
        parameters: list[dict[str, Any]],
        *,
        header: bool,
        doc: str,
        context: ShapeContext,
    ) -> None:
        if name in self._declarations or name in self._schemas:
            self._warn(f"Skipping {name}: a declaration with that name already exists")
            return
        naming = dataclasses.replace(self._naming, strip_schema_prefix=None)
        try:
            declaration = self._schema_declaration(
                name,
                _parameters_object(parameters, header=header),
                context,
                doc=doc,
                identifiers=(schema_identifier(name, naming), type_identifier(name, naming)),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise SchemaGenerationError(f"Failed to generate parameters: {exc}", name) from exc
        self._declarations[name] = declaration
        self._parameter_names.append(name)

    def _order(self) -> list[str]:
        names = [name for name in self._schemas if name in self._declarations]
        names.extend(self._parameter_names)
        return order_declarations(
            names,
            {name: self._declarations[name].dependencies for name in names},
            lambda name: self._declarations[name].is_simple_alias,
        )

    def _stats(self) -> GenerationStats:
        declarations = list(self._declarations.values())
        enum_count = sum(
            1
            for name, schema in self._schemas.items()
            if name in self._declarations
            and isinstance(schema, dict)
            and schema_kind(schema) is SchemaKind.ENUM
        )
        return GenerationStats(
            total_schemas=len(declarations),
            enums=enum_count,
            circular_references=sum(1 for item in declarations if item.uses_lazy),
            discriminated_unions=sum(item.discriminated_unions for item in declarations),
            with_constraints=sum(1 for item in declarations if item.has_constraints),
            all_of_conflicts=sum(len(item.conflicts) for item in declarations),
        )

    def _render(self, order: list[str], stats: GenerationStats) -> str:
        sections = ["\n".join(_HEADER_LINES)]
        if self._options.show_stats:
            sections.append(self._render_stats(stats))
        if any(item.kind is DeclarationKind.SCHEMA for item in self._declarations.values()):
            sections.append(_ZOD_IMPORT)
        if self._enum_blocks:
            blocks = [self._enum_blocks[name] for name in self._schemas if name in self._enum_blocks]
            sections.append("// Enums\n" + "\n\n".join(blocks))
        if order:
            body = "\n\n".join(self._declarations[name].code for name in order)
            sections.append(f"// Schemas and Types\n{body}")
        return "\n\n".join(sections) + "\n"

    def _render_stats(self, stats: GenerationStats) -> str:
        lines = [
            "Generation Statistics:",
            f"  Total schemas: {stats.total_schemas}",
            f"  Enums: {stats.enums}",
            f"  Circular references: {stats.circular_references}",
            f"  Discriminated unions: {stats.discriminated_unions}",
            f"  With constraints: {stats.with_constraints}",
            f"  AllOf conflicts: {stats.all_of_conflicts}",
        ]
        if self._filters is not None and self._filters.is_active():
            lines.extend(f"  {line}" for line in format_filter_statistics(self._filter_stats))
        lines.append(f"  Generated at: {datetime.now(timezone.utc).isoformat()}")
        return "\n".join(f"// {line}" for line in lines)


def _parameters_object(parameters: list[dict[str, Any]], *, header: bool) -> JSONObject:
    properties: dict[str, JSONValue] = {}
    required: list[str] = []
    for parameter in parameters:
        name = str(parameter["name"])
        if header:
            schema: dict[str, Any] = {"type": "string"}
        else:
            schema = dict(parameter_schema(parameter) or {})
        for key in ("description", "deprecated"):
            if key in parameter and key not in schema:
                schema[key] = parameter[key]
        properties[name] = schema
        if parameter.get("required") is True:
            required.append(name)
    return {"type": "object", "properties": properties, "required": required}


def run_generation(*, options: GeneratorOptions) -> GenerationResult:
    """Generate and write a Zod module for one OpenAPI document.

    Args:
        options (GeneratorOptions): Input and output paths plus generation options.

    Returns:
        GenerationResult: Rendered output, warnings and statistics.
    """
    generator = ZodSchemaGenerator(options)
    return generator.generate()


__all__ = [
    "ConfigurationError",
    "GenerationState",
    "SpecValidationError",
    "ZodSchemaGenerator",
    "run_generation",
]
