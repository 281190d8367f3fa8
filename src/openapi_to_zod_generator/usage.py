"""Classification of component schemas by request/response usage."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Optional

from .json_types import JSONValue
from .model_types import OperationSpec, UsageContext
from .resolver import Resolver, parameter_schema
from .schema_utils import extract_schema_refs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UsageAnalysis:
    """Per-schema usage contexts plus the reference-cycle membership set."""

    usage: dict[str, UsageContext]
    circular: frozenset[str]
    request_schemas: frozenset[str]
    response_schemas: frozenset[str]

    def context_for(self, name: str) -> Optional[UsageContext]:
        """Return the usage context of ``name``, or ``None`` when unreferenced."""
        return self.usage.get(name)


def analyze_schema_usage(
    document: dict[str, Any],
    operations: Optional[Sequence[OperationSpec]] = None,
) -> UsageAnalysis:
    """Classify every component schema as request, response or both.

    Args:
        document (dict[str, Any]): Parsed OpenAPI document.
        operations (Optional[Sequence[OperationSpec]]): Operations to consider.
            Defaults to every operation in the path table; pass a filtered
            list to restrict the analysis to included operations.

    Returns:
        UsageAnalysis: Usage map, cycle members and the expanded working sets.
    """
    schemas = component_schemas(document)
    resolver = Resolver(document)
    if operations is None:
        operations = resolver.iter_operations()

    request_refs: dict[str, None] = {}
    response_refs: dict[str, None] = {}
    for operation in operations:
        for _, schema in resolver.request_body_content(operation.operation):
            _add_refs(request_refs, schema)
        for _, schema in resolver.response_content(operation.operation):
            _add_refs(response_refs, schema)
        for parameter in operation.parameters:
            _add_refs(request_refs, parameter_schema(parameter))

    request_schemas = expand_transitive_references(request_refs, schemas)
    response_schemas = expand_transitive_references(response_refs, schemas)

    usage: dict[str, UsageContext] = {}
    has_paths = isinstance(document.get("paths"), dict) and bool(document["paths"])
    if not has_paths or (not request_schemas and not response_schemas):
        usage.update(_classify_by_markers(schemas))
    else:
        for name in schemas:
            in_request = name in request_schemas
            in_response = name in response_schemas
            if in_request and in_response:
                usage[name] = UsageContext.BOTH
            elif in_request:
                usage[name] = UsageContext.REQUEST
            elif in_response:
                usage[name] = UsageContext.RESPONSE

    circular = detect_circular_references(schemas)
    for name in schemas:
        if name in circular:
            usage[name] = UsageContext.BOTH

    logger.debug(
        "Usage analysis: %d request, %d response, %d circular schemas",
        len(request_schemas),
        len(response_schemas),
        len(circular),
    )
    return UsageAnalysis(
        usage=usage,
        circular=circular,
        request_schemas=frozenset(request_schemas),
        response_schemas=frozenset(response_schemas),
    )


def component_schemas(document: Mapping[str, Any]) -> dict[str, JSONValue]:
    """Return ``components.schemas`` or an empty mapping."""
    components = document.get("components")
    if not isinstance(components, dict):
        return {}
    schemas = components.get("schemas")
    return schemas if isinstance(schemas, dict) else {}


def _add_refs(target: dict[str, None], schema: Optional[JSONValue]) -> None:
    if schema is None:
        return
    for name in extract_schema_refs(schema):
        target.setdefault(name, None)


def expand_transitive_references(
    names: Iterable[str],
    schemas: Mapping[str, JSONValue],
) -> dict[str, None]:
    """Close a set of schema names over their nested references.

    Returns:
        dict[str, None]: Ordered set of every reachable declared schema name.
    """
    expanded: dict[str, None] = {}
    pending = [name for name in names]
    while pending:
        name = pending.pop(0)
        if name in expanded or name not in schemas:
            continue
        expanded[name] = None
        pending.extend(ref for ref in extract_schema_refs(schemas[name]) if ref not in expanded)
    return expanded


def _classify_by_markers(schemas: Mapping[str, JSONValue]) -> dict[str, UsageContext]:
    usage: dict[str, UsageContext] = {}
    for name, schema in schemas.items():
        has_write_only = _has_marker(schema, "writeOnly")
        has_read_only = _has_marker(schema, "readOnly")
        if has_write_only and not has_read_only:
            usage[name] = UsageContext.REQUEST
        elif has_read_only and not has_write_only:
            usage[name] = UsageContext.RESPONSE
    return usage


def _has_marker(schema: JSONValue, marker: str) -> bool:
    if not isinstance(schema, dict):
        return False
    properties = schema.get("properties")
    if isinstance(properties, dict):
        for property_schema in properties.values():
            if isinstance(property_schema, dict) and property_schema.get(marker) is True:
                return True
            if _has_marker(property_schema, marker):
                return True
    all_of = schema.get("allOf")
    if isinstance(all_of, list) and any(_has_marker(branch, marker) for branch in all_of):
        return True
    return _has_marker(schema.get("items"), marker)


def detect_circular_references(schemas: Mapping[str, JSONValue]) -> frozenset[str]:
    """Return every schema name that can reach itself through ``$ref`` chains.

    Strongly connected components are found with a depth-first search over
    a recursion stack; members of multi-node components and self-referencing
    schemas are reported.
    """
    graph = {
        name: [ref for ref in extract_schema_refs(schema) if ref in schemas]
        for name, schema in schemas.items()
    }
    index_of: dict[str, int] = {}
    low_link: dict[str, int] = {}
    stack: list[str] = []
    on_stack: set[str] = set()
    members: set[str] = set()

    def _visit(node: str) -> None:
        index_of[node] = low_link[node] = len(index_of)
        stack.append(node)
        on_stack.add(node)
        for neighbour in graph[node]:
            if neighbour not in index_of:
                _visit(neighbour)
                low_link[node] = min(low_link[node], low_link[neighbour])
            elif neighbour in on_stack:
                low_link[node] = min(low_link[node], index_of[neighbour])

        if low_link[node] != index_of[node]:
            return
        component: list[str] = []
        while True:
            member = stack.pop()
            on_stack.discard(member)
            component.append(member)
            if member == node:
                break
        if len(component) > 1 or node in graph[node]:
            members.update(component)

    for name in graph:
        if name not in index_of:
            _visit(name)
    return frozenset(members)
