"""Internal datatypes for schema analysis and code generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class SchemaKind(Enum):
    """Closed set of schema node shapes the generators dispatch on."""

    REF = "ref"
    ENUM = "enum"
    CONST = "const"
    ALL_OF = "allOf"
    ONE_OF = "oneOf"
    ANY_OF = "anyOf"
    NOT = "not"
    MULTI_TYPE = "multiType"
    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    NULL = "null"
    UNKNOWN = "unknown"


class UsageContext(Enum):
    """Where a named schema is used by the document's operations."""

    REQUEST = "request"
    RESPONSE = "response"
    BOTH = "both"


class DeclarationKind(Enum):
    """Kinds of emittable top-level declarations."""

    SCHEMA = "schema"
    NATIVE_TYPE = "native_type"


@dataclass(frozen=True)
class ResolvedOptions:
    """Fully-defaulted generation options for one usage context."""

    mode: str = "normal"
    include_descriptions: bool = True
    use_describe: bool = False
    default_nullable: bool = False
    empty_object_behavior: str = "loose"
    enum_type: str = "zod"
    type_mode: str = "inferred"
    native_enum_type: str = "union"
    schema_type: str = "all"
    custom_date_time_format_regex: Optional[str] = None


@dataclass(frozen=True)
class NamingOptions:
    """Identifier decoration applied to every generated schema name."""

    prefix: Optional[str] = None
    suffix: Optional[str] = None
    strip_schema_prefix: Optional[str] = None


@dataclass(frozen=True)
class Declaration:
    """One rendered top-level declaration plus the metadata used for ordering."""

    name: str
    kind: DeclarationKind
    code: str
    dependencies: tuple[str, ...] = ()
    is_simple_alias: bool = False
    uses_lazy: bool = False
    discriminated_unions: int = 0
    has_constraints: bool = False
    conflicts: tuple[str, ...] = ()


@dataclass
class FilterStatistics:
    """Counters describing how operation filters affected an input document."""

    total_operations: int = 0
    included_operations: int = 0
    filtered_by_tags: int = 0
    filtered_by_paths: int = 0
    filtered_by_methods: int = 0
    filtered_by_operation_ids: int = 0
    filtered_by_deprecated: int = 0


@dataclass(frozen=True)
class GenerationStats:
    """Summary counts for the optional statistics header."""

    total_schemas: int
    enums: int
    circular_references: int
    discriminated_unions: int
    with_constraints: int
    all_of_conflicts: int


@dataclass(frozen=True)
class OperationSpec:
    """Operation metadata extracted from the OpenAPI path table."""

    path: str
    method: str
    operation: dict[str, object]
    path_item: dict[str, object]
    operation_id: Optional[str] = None
    parameters: tuple[dict[str, object], ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class GenerationResult:
    """Generation output metadata."""

    output: str
    warnings: tuple[str, ...]
    stats: GenerationStats
    declarations: tuple[Declaration, ...]
