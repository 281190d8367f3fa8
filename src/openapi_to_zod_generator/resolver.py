"""Operation extraction and local reference resolution."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Optional

from .errors import SpecValidationError
from .model_types import OperationSpec

HTTP_METHODS: tuple[str, ...] = (
    "get",
    "post",
    "put",
    "patch",
    "delete",
    "head",
    "options",
)


class Resolver:
    """Resolve local JSON pointers and collect operations from a document."""

    def __init__(self, document: dict[str, Any]) -> None:
        self._document = document

    def resolve_pointer(self, ref: str) -> Any:
        """Return the node a local ``#/...`` pointer addresses."""
        if not ref.startswith("#/"):
            raise SpecValidationError("Only local references are supported", {"ref": ref})

        current: Any = self._document
        for token in ref[2:].split("/"):
            token = token.replace("~1", "/").replace("~0", "~")
            if not isinstance(current, dict) or token not in current:
                raise SpecValidationError("Unresolvable reference", {"ref": ref})
            current = current[token]
        return current

    def dereference(self, node: Any) -> Any:
        """Follow ``$ref`` on a non-schema object such as a parameter or response."""
        seen: set[str] = set()
        while isinstance(node, dict) and isinstance(node.get("$ref"), str):
            ref = node["$ref"]
            if ref.startswith("#/components/schemas/") or ref in seen:
                return node
            seen.add(ref)
            node = self.resolve_pointer(ref)
        return node

    def iter_operations(self) -> list[OperationSpec]:
        """Return every operation in path-table order with merged parameters."""
        raw_paths = self._document.get("paths")
        if not isinstance(raw_paths, dict):
            return []

        operations: list[OperationSpec] = []
        for path, path_item in raw_paths.items():
            if not isinstance(path, str) or not isinstance(path_item, dict):
                continue
            for method in HTTP_METHODS:
                operation = path_item.get(method)
                if not isinstance(operation, dict):
                    continue
                operation_id = operation.get("operationId")
                operations.append(
                    OperationSpec(
                        path=path,
                        method=method,
                        operation=operation,
                        path_item=path_item,
                        operation_id=operation_id if isinstance(operation_id, str) else None,
                        parameters=tuple(self.merge_parameters(path_item, operation)),
                    )
                )
        return operations

    def merge_parameters(
        self,
        path_item: dict[str, Any],
        operation: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """Merge path-level and operation-level parameters.

        Operation parameters replace path parameters with the same
        ``(name, in)`` pair; order of first appearance is kept.
        """
        merged: dict[tuple[str, str], dict[str, Any]] = {}
        for source in (path_item, operation):
            for parameter in self._collect_parameters(source):
                key = (str(parameter.get("name", "")), str(parameter.get("in", "")))
                merged[key] = parameter
        return list(merged.values())

    def _collect_parameters(self, container: dict[str, Any]) -> list[dict[str, Any]]:
        raw = container.get("parameters")
        if not isinstance(raw, list):
            return []
        parameters: list[dict[str, Any]] = []
        for item in raw:
            resolved = self.dereference(item)
            if isinstance(resolved, dict) and isinstance(resolved.get("name"), str):
                parameters.append(resolved)
        return parameters

    def request_body_content(self, operation: dict[str, Any]) -> Iterator[tuple[str, Any]]:
        """Yield ``(media_type, schema)`` pairs of an operation's request body."""
        yield from self._content_schemas(self.dereference(operation.get("requestBody")))

    def response_content(self, operation: dict[str, Any]) -> Iterator[tuple[str, Any]]:
        """Yield ``(media_type, schema)`` pairs across every response status."""
        responses = operation.get("responses")
        if not isinstance(responses, dict):
            return
        for response in responses.values():
            yield from self._content_schemas(self.dereference(response))

    @staticmethod
    def _content_schemas(container: Optional[Any]) -> Iterator[tuple[str, Any]]:
        if not isinstance(container, dict):
            return
        content = container.get("content")
        if not isinstance(content, dict):
            return
        for media_type, media in content.items():
            if isinstance(media, dict) and isinstance(media.get("schema"), dict):
                yield str(media_type), media["schema"]
            elif isinstance(media, dict):
                yield str(media_type), None


def parameter_schema(parameter: dict[str, Any]) -> Optional[dict[str, Any]]:
    """Return a parameter's schema, looking inside ``content`` when needed."""
    schema = parameter.get("schema")
    if isinstance(schema, dict):
        return schema
    content = parameter.get("content")
    if isinstance(content, dict):
        for media in content.values():
            if isinstance(media, dict) and isinstance(media.get("schema"), dict):
                return media["schema"]
    return None
