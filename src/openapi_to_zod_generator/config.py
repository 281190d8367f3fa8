"""Generator options, config-file discovery, validation and merging."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Literal, Optional, TypeAlias

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from .errors import ConfigurationError, FileOperationError
from .filters import OperationFilters
from .model_types import NamingOptions, ResolvedOptions

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES: tuple[str, ...] = (
    "openapi-to-zod.config.yaml",
    "openapi-to-zod.config.yml",
    "openapi-to-zod.config.json",
)

ValidationMode: TypeAlias = Literal["strict", "normal", "loose"]
EmptyObjectBehavior: TypeAlias = Literal["strict", "loose", "record"]
EnumType: TypeAlias = Literal["zod", "typescript"]
TypeMode: TypeAlias = Literal["inferred", "native"]
NativeEnumType: TypeAlias = Literal["union", "enum"]

_CONTEXT_FIELDS: tuple[str, ...] = (
    "mode",
    "include_descriptions",
    "use_describe",
    "default_nullable",
    "empty_object_behavior",
    "enum_type",
    "type_mode",
    "native_enum_type",
)


class _ConfigModel(BaseModel):
    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)


class ContextOptions(_ConfigModel):
    """Per-context overrides for request or response schemas."""

    mode: Optional[ValidationMode] = None
    include_descriptions: Optional[bool] = None
    use_describe: Optional[bool] = None
    default_nullable: Optional[bool] = None
    empty_object_behavior: Optional[EmptyObjectBehavior] = None
    enum_type: Optional[EnumType] = None
    type_mode: Optional[TypeMode] = None
    native_enum_type: Optional[NativeEnumType] = None


class OperationFiltersConfig(_ConfigModel):
    """Config-file form of :class:`OperationFilters`."""

    include_tags: list[str] = Field(default_factory=list)
    include_paths: list[str] = Field(default_factory=list)
    include_methods: list[str] = Field(default_factory=list)
    include_operation_ids: list[str] = Field(default_factory=list)
    exclude_tags: list[str] = Field(default_factory=list)
    exclude_paths: list[str] = Field(default_factory=list)
    exclude_methods: list[str] = Field(default_factory=list)
    exclude_operation_ids: list[str] = Field(default_factory=list)
    exclude_deprecated: bool = False

    def to_filters(self) -> OperationFilters:
        """Return the immutable filter rules."""
        return OperationFilters(
            include_tags=tuple(self.include_tags),
            include_paths=tuple(self.include_paths),
            include_methods=tuple(self.include_methods),
            include_operation_ids=tuple(self.include_operation_ids),
            exclude_tags=tuple(self.exclude_tags),
            exclude_paths=tuple(self.exclude_paths),
            exclude_methods=tuple(self.exclude_methods),
            exclude_operation_ids=tuple(self.exclude_operation_ids),
            exclude_deprecated=self.exclude_deprecated,
        )


class GeneratorOptions(_ConfigModel):
    """Options for one generation run.

    Field names are snake_case in Python and camelCase in config files.
    """

    name: Optional[str] = None
    input: Optional[Path] = None
    output: Optional[Path] = None
    mode: ValidationMode = "normal"
    include_descriptions: bool = True
    use_describe: bool = False
    default_nullable: bool = False
    empty_object_behavior: EmptyObjectBehavior = "loose"
    enum_type: EnumType = "zod"
    type_mode: TypeMode = "inferred"
    native_enum_type: NativeEnumType = "union"
    schema_type: Literal["all", "request", "response"] = "all"
    prefix: Optional[str] = None
    suffix: Optional[str] = None
    strip_schema_prefix: Optional[str] = None
    strip_path_prefix: Optional[str] = None
    use_operation_id: bool = True
    show_stats: bool = False
    request: Optional[ContextOptions] = None
    response: Optional[ContextOptions] = None
    operation_filters: Optional[OperationFiltersConfig] = None
    ignore_headers: list[str] = Field(default_factory=list)
    custom_date_time_format_regex: Optional[str] = None

    def resolved_options(self, context: Literal["request", "response"]) -> ResolvedOptions:
        """Resolve root options plus context overrides into one snapshot.

        The response context always uses inferred validators because
        responses are validated at runtime.
        """
        override = self.request if context == "request" else self.response
        values: dict[str, Any] = {}
        for field_name in _CONTEXT_FIELDS:
            value = getattr(override, field_name) if override is not None else None
            values[field_name] = value if value is not None else getattr(self, field_name)
        if context == "response":
            values["type_mode"] = "inferred"
        return ResolvedOptions(
            schema_type=self.schema_type,
            custom_date_time_format_regex=self.custom_date_time_format_regex,
            **values,
        )

    def naming_options(self) -> NamingOptions:
        """Return identifier decoration options."""
        return NamingOptions(
            prefix=self.prefix,
            suffix=self.suffix,
            strip_schema_prefix=self.strip_schema_prefix,
        )

    def filters(self) -> Optional[OperationFilters]:
        """Return active operation filters, if configured."""
        if self.operation_filters is None:
            return None
        return self.operation_filters.to_filters()

    def display_name(self) -> str:
        """Return a label for logs and batch summaries."""
        return self.name or (str(self.input) if self.input is not None else "<unnamed spec>")


class ConfigFile(_ConfigModel):
    """Top-level config file listing the specs to generate."""

    defaults: Optional[GeneratorOptions] = None
    specs: list[GeneratorOptions] = Field(min_length=1)
    execution_mode: Literal["parallel", "sequential"] = "parallel"
    batch_size: int = Field(default=10, ge=1)

    @model_validator(mode="after")
    def _require_input_and_output(self) -> ConfigFile:
        for index, spec in enumerate(self.specs):
            if spec.input is None or spec.output is None:
                raise ValueError(f"specs[{index}] requires both 'input' and 'output'")
        return self


def format_validation_error(exc: ValidationError) -> str:
    """Render pydantic errors as an indented ``path: message`` list."""
    lines = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "root"
        lines.append(f"  - {location}: {error['msg']}")
    return "Invalid configuration file:\n" + "\n".join(lines)


def find_config_file(start: Path) -> Optional[Path]:
    """Search ``start`` and its parents for a known config file name."""
    for directory in (start, *start.parents):
        for file_name in CONFIG_FILE_NAMES:
            candidate = directory / file_name
            if candidate.is_file():
                return candidate
    return None


def load_config(path: Optional[Path] = None, *, cwd: Optional[Path] = None) -> ConfigFile:
    """Load and validate a config file.

    Args:
        path (Optional[Path]): Explicit config path. When omitted the known
            file names are searched from ``cwd`` upwards.
        cwd (Optional[Path]): Directory to start discovery from.

    Returns:
        ConfigFile: The validated configuration.
    """
    if path is None:
        path = find_config_file(cwd or Path.cwd())
        if path is None:
            raise ConfigurationError(
                "No config file found. Run 'openapi-to-zod-generator init' or pass --config "
                f"(looked for {', '.join(CONFIG_FILE_NAMES)})"
            )
    if not path.is_file():
        raise FileOperationError(f"Config file not found: {path}", path)

    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle) if path.suffix.lower() == ".json" else yaml.safe_load(handle)
    except OSError as exc:
        raise FileOperationError(f"Failed to read config file {path}: {exc}", path) from exc
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Failed to parse config file {path}: {exc}") from exc

    if not isinstance(payload, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    try:
        config = ConfigFile.model_validate(payload)
    except ValidationError as exc:
        raise ConfigurationError(format_validation_error(exc)) from exc
    logger.debug("Loaded %d spec(s) from %s", len(config.specs), path)
    return _resolve_relative_paths(config, path.parent)


def _resolve_relative_paths(config: ConfigFile, base_dir: Path) -> ConfigFile:
    specs = [
        spec.model_copy(
            update={
                "input": _relative_to(spec.input, base_dir),
                "output": _relative_to(spec.output, base_dir),
            }
        )
        for spec in config.specs
    ]
    return config.model_copy(update={"specs": specs})


def _relative_to(path: Optional[Path], base_dir: Path) -> Optional[Path]:
    if path is None or path.is_absolute():
        return path
    return base_dir / path


def merge_config_with_defaults(config: ConfigFile) -> list[GeneratorOptions]:
    """Apply ``defaults`` beneath every spec entry.

    Values set explicitly on a spec win; nested ``request``/``response``
    overrides are merged field by field.
    """
    if config.defaults is None:
        return list(config.specs)
    defaults = config.defaults.model_dump(exclude_unset=True)
    merged: list[GeneratorOptions] = []
    for spec in config.specs:
        values = {**defaults, **spec.model_dump(exclude_unset=True)}
        for context in ("request", "response"):
            if isinstance(defaults.get(context), dict) and context in spec.model_fields_set:
                spec_context = getattr(spec, context)
                if spec_context is not None:
                    values[context] = {
                        **defaults[context],
                        **spec_context.model_dump(exclude_unset=True),
                    }
        merged.append(GeneratorOptions.model_validate(values))
    return merged
