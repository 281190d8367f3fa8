"""Operation and header filtering applied before schemas are extracted."""

from __future__ import annotations

import fnmatch
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Optional

from .json_types import JSONObject
from .model_types import FilterStatistics


@dataclass(frozen=True)
class OperationFilters:
    """Include and exclude rules for operations.

    Empty sequences impose no constraint. Include rules are evaluated first
    and any exclude match wins over an include match.
    """

    include_tags: tuple[str, ...] = ()
    include_paths: tuple[str, ...] = ()
    include_methods: tuple[str, ...] = ()
    include_operation_ids: tuple[str, ...] = ()
    exclude_tags: tuple[str, ...] = ()
    exclude_paths: tuple[str, ...] = ()
    exclude_methods: tuple[str, ...] = ()
    exclude_operation_ids: tuple[str, ...] = ()
    exclude_deprecated: bool = False

    def is_active(self) -> bool:
        """Return whether any rule is configured."""
        return self.exclude_deprecated or any(
            (
                self.include_tags,
                self.include_paths,
                self.include_methods,
                self.include_operation_ids,
                self.exclude_tags,
                self.exclude_paths,
                self.exclude_methods,
                self.exclude_operation_ids,
            )
        )


def _matches_any(value: str, patterns: Iterable[str]) -> bool:
    return any(fnmatch.fnmatchcase(value, pattern) for pattern in patterns)


def _operation_tags(operation: JSONObject) -> list[str]:
    tags = operation.get("tags")
    if not isinstance(tags, list):
        return []
    return [tag for tag in tags if isinstance(tag, str)]


def should_include_operation(
    operation: JSONObject,
    path: str,
    method: str,
    filters: Optional[OperationFilters],
    stats: Optional[FilterStatistics] = None,
) -> bool:
    """Decide whether an operation participates in generation.

    Args:
        operation (JSONObject): Raw operation object.
        path (str): Path template the operation is declared under.
        method (str): HTTP method name.
        filters (Optional[OperationFilters]): Rules to apply, if any.
        stats (Optional[FilterStatistics]): Counters updated in place.

    Returns:
        bool: ``True`` when the operation should be included.
    """
    if stats is not None:
        stats.total_operations += 1
    if filters is None:
        if stats is not None:
            stats.included_operations += 1
        return True

    reason = _exclusion_reason(operation, path, method.lower(), filters)
    if stats is not None:
        if reason is None:
            stats.included_operations += 1
        else:
            attribute = f"filtered_by_{reason}"
            setattr(stats, attribute, getattr(stats, attribute) + 1)
    return reason is None


def _exclusion_reason(
    operation: JSONObject,
    path: str,
    method: str,
    filters: OperationFilters,
) -> Optional[str]:
    tags = _operation_tags(operation)
    operation_id = operation.get("operationId")
    operation_id_text = operation_id if isinstance(operation_id, str) else ""
    include_methods = {item.lower() for item in filters.include_methods}
    exclude_methods = {item.lower() for item in filters.exclude_methods}

    if filters.include_tags and not set(tags).intersection(filters.include_tags):
        return "tags"
    if filters.include_paths and not _matches_any(path, filters.include_paths):
        return "paths"
    if include_methods and method not in include_methods:
        return "methods"
    if filters.include_operation_ids and not (
        operation_id_text and _matches_any(operation_id_text, filters.include_operation_ids)
    ):
        return "operation_ids"

    if filters.exclude_deprecated and operation.get("deprecated") is True:
        return "deprecated"
    if filters.exclude_tags and set(tags).intersection(filters.exclude_tags):
        return "tags"
    if filters.exclude_paths and _matches_any(path, filters.exclude_paths):
        return "paths"
    if method in exclude_methods:
        return "methods"
    if (
        filters.exclude_operation_ids
        and operation_id_text
        and _matches_any(operation_id_text, filters.exclude_operation_ids)
    ):
        return "operation_ids"
    return None


def validate_filters(stats: FilterStatistics, filters: Optional[OperationFilters]) -> Optional[str]:
    """Return a warning when active filters removed every operation."""
    if filters is None or not filters.is_active():
        return None
    if stats.total_operations == 0 or stats.included_operations > 0:
        return None
    return (
        f"All {stats.total_operations} operations were filtered out; "
        f"check your operationFilters ({format_filter_breakdown(stats)})"
    )


def format_filter_breakdown(stats: FilterStatistics) -> str:
    """Render the non-zero exclusion counters as a comma-separated list."""
    parts = [
        f"{label}: {count}"
        for label, count in (
            ("tags", stats.filtered_by_tags),
            ("paths", stats.filtered_by_paths),
            ("methods", stats.filtered_by_methods),
            ("operationIds", stats.filtered_by_operation_ids),
            ("deprecated", stats.filtered_by_deprecated),
        )
        if count
    ]
    return ", ".join(parts) if parts else "no exclusions recorded"


def format_filter_statistics(stats: FilterStatistics) -> list[str]:
    """Render filter counters as lines for the statistics header."""
    return [
        f"Operations: {stats.included_operations}/{stats.total_operations} included",
        f"Filtered out: {format_filter_breakdown(stats)}",
    ]


def _header_matches(name: str, pattern: str) -> bool:
    return pattern == "*" or fnmatch.fnmatchcase(name.lower(), pattern.lower())


def filter_headers(
    parameters: Sequence[JSONObject],
    ignore_patterns: Sequence[str],
) -> list[JSONObject]:
    """Drop header parameters whose names match any ignore pattern.

    Matching is case-insensitive and ``"*"`` ignores every header.
    """
    if not ignore_patterns:
        return list(parameters)
    kept: list[JSONObject] = []
    for parameter in parameters:
        name = parameter.get("name")
        if isinstance(name, str) and any(_header_matches(name, item) for item in ignore_patterns):
            continue
        kept.append(parameter)
    return kept


def unmatched_header_patterns(
    header_names: Iterable[str],
    ignore_patterns: Sequence[str],
) -> list[str]:
    """Return ignore patterns that matched none of ``header_names``."""
    names = list(header_names)
    return [
        pattern
        for pattern in ignore_patterns
        if pattern != "*" and not any(_header_matches(name, pattern) for name in names)
    ]
