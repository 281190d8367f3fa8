"""OpenAPI document loading and up-front reference validation."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import yaml

from .errors import ConfigurationError, FileOperationError, SpecValidationError
from .json_types import JSONObject
from .naming import resolve_ref
from .schema_utils import iter_child_schemas

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class _DocumentLoader(yaml.SafeLoader):
    """Safe loader that keeps unquoted dates and timestamps as strings."""


_DocumentLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def load_openapi_document(path: Optional[Path]) -> dict[str, Any]:
    """Load an OpenAPI document from YAML or JSON and validate its schemas.

    Args:
        path (Optional[Path]): Location of the document.

    Returns:
        dict[str, Any]: The parsed document.
    """
    if path is None or not str(path).strip():
        raise ConfigurationError("An input OpenAPI document path is required")
    if not path.is_file():
        raise FileOperationError(f"Input file not found: {path}", path)

    try:
        with path.open("r", encoding="utf-8") as handle:
            if path.suffix.lower() == ".json":
                payload = json.load(handle)
            else:
                payload = yaml.load(handle, Loader=_DocumentLoader)
    except OSError as exc:
        raise FileOperationError(f"Failed to read OpenAPI file {path}: {exc}", path) from exc
    except json.JSONDecodeError as exc:
        raise SpecValidationError(
            f"Failed to parse JSON: {exc}",
            {"file": str(path)},
        ) from exc
    except yaml.YAMLError as exc:
        raise SpecValidationError(
            f"Failed to parse YAML: {exc}",
            {"file": str(path)},
        ) from exc

    if not isinstance(payload, dict):
        raise SpecValidationError(
            f"OpenAPI document must deserialize to a mapping, got {type(payload).__name__}",
            {"file": str(path)},
        )
    validate_document(payload)
    return payload


def validate_document(document: JSONObject) -> None:
    """Require non-empty ``components.schemas`` and resolvable schema refs."""
    components = document.get("components")
    schemas = components.get("schemas") if isinstance(components, dict) else None
    if not isinstance(schemas, dict):
        raise SpecValidationError("OpenAPI document has no components.schemas section")
    if not schemas:
        raise SpecValidationError("OpenAPI document declares no schemas in components.schemas")

    for name, schema in schemas.items():
        if isinstance(schema, dict):
            _validate_refs(str(name), schema, str(name), schemas)


def _validate_refs(schema_name: str, node: JSONObject, path: str, schemas: JSONObject) -> None:
    ref = node.get("$ref")
    if isinstance(ref, str):
        target = resolve_ref(ref)
        if target not in schemas:
            raise SpecValidationError(
                f"Invalid schema '{schema_name}': reference '{ref}' points to non-existent "
                f"schema '{target}'",
                {"schema": schema_name, "path": path, "ref": ref},
            )
    for child_path, child in iter_child_schemas(node, path):
        _validate_refs(schema_name, child, child_path, schemas)
