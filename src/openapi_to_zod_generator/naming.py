"""Naming helpers for TypeScript identifiers, references and operations."""

from __future__ import annotations

import fnmatch
import json
import re
from collections.abc import Sequence
from typing import Literal, Optional, TypeAlias

from .model_types import NamingOptions

CaseStyle: TypeAlias = Literal["camel", "pascal"]

_INVALID_CHARS_RE = re.compile(r"[^A-Za-z0-9._\-\s]")
_SEPARATOR_RE = re.compile(r"[.\-_\s]+")
_JS_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_PATH_PARAM_RE = re.compile(r"^\{(?P<name>[^{}]+)\}$")
_GLOB_CHARS = frozenset("*?[")
_FALLBACK_IDENTIFIER = "Value"


def _split_segments(raw: str) -> list[str]:
    sanitized = _INVALID_CHARS_RE.sub("_", raw)
    return [segment for segment in _SEPARATOR_RE.split(sanitized) if segment]


def _upper_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def _lower_first(text: str) -> str:
    return text[:1].lower() + text[1:]


def _join_segments(segments: Sequence[str], style: CaseStyle, *, digit_prefix: str = "_") -> str:
    if style == "camel":
        joined = _lower_first(segments[0]) + "".join(_upper_first(item) for item in segments[1:])
    else:
        joined = "".join(_upper_first(item) for item in segments)
    if joined[0].isdigit():
        joined = f"{digit_prefix}{joined}"
    return joined


def to_identifier(
    raw: str,
    style: CaseStyle = "camel",
    *,
    prefix: Optional[str] = None,
    suffix: Optional[str] = None,
) -> str:
    """Convert arbitrary text into a camelCase or PascalCase identifier.

    Characters outside ``[A-Za-z0-9._- ]`` become separators, separator runs
    collapse, and the prefix and suffix are joined at segment boundaries so
    the casing at each seam follows the requested style.

    Args:
        raw (str): Source text such as a schema name or operationId.
        style (CaseStyle): ``"camel"`` or ``"pascal"``.
        prefix (Optional[str]): Optional leading decoration.
        suffix (Optional[str]): Optional trailing decoration.

    Returns:
        str: A non-empty identifier that never starts with a digit.
    """
    segments = _split_segments(raw) or [_FALLBACK_IDENTIFIER]
    if prefix:
        segments = [*_split_segments(prefix), *segments]
    if suffix:
        segments = [*segments, *_split_segments(suffix)]
    return _join_segments(segments, style)


def to_camel_case(raw: str) -> str:
    """Return the camelCase identifier for ``raw``."""
    return to_identifier(raw, "camel")


def to_pascal_case(raw: str) -> str:
    """Return the PascalCase identifier for ``raw``."""
    return to_identifier(raw, "pascal")


def to_enum_key(raw: str) -> str:
    """Return a PascalCase enum member key, prefixing leading digits with ``N``."""
    segments = _split_segments(raw) or [_FALLBACK_IDENTIFIER]
    return _join_segments(segments, "pascal", digit_prefix="N")


def resolve_ref(ref: str) -> str:
    """Return the bare schema name a local ``$ref`` points to."""
    return ref.split("/")[-1]


def strip_prefix(name: str, pattern: Optional[str]) -> str:
    """Strip a literal or glob prefix from ``name``.

    Glob patterns strip the shortest matching prefix. The original name is
    returned when nothing matches or stripping would leave nothing behind.
    """
    if not pattern:
        return name
    if _GLOB_CHARS.intersection(pattern):
        for index in range(1, len(name)):
            if fnmatch.fnmatchcase(name[:index], pattern):
                return name[index:]
        return name
    if name.startswith(pattern) and len(name) > len(pattern):
        return name[len(pattern) :]
    return name


def schema_identifier(name: str, naming: NamingOptions) -> str:
    """Return the exported validator constant name for a schema."""
    base = strip_prefix(name, naming.strip_schema_prefix)
    return f"{to_identifier(base, 'camel', prefix=naming.prefix, suffix=naming.suffix)}Schema"


def type_identifier(name: str, naming: NamingOptions) -> str:
    """Return the exported TypeScript type name for a schema."""
    return to_pascal_case(strip_prefix(name, naming.strip_schema_prefix))


def quote_property_key(key: str) -> str:
    """Return ``key`` as an object-literal key, quoting it when required."""
    if _JS_IDENTIFIER_RE.match(key):
        return key
    return json.dumps(key)


def get_operation_name(
    *,
    operation_id: Optional[str],
    method: str,
    path: str,
    use_operation_id: bool = True,
    strip_path_prefix: Optional[str] = None,
) -> str:
    """Derive the PascalCase name used for per-operation declarations.

    Args:
        operation_id (Optional[str]): Declared operationId, if any.
        method (str): HTTP method of the operation.
        path (str): Path template such as ``/users/{userId}``.
        use_operation_id (bool): Whether the operationId takes precedence.
        strip_path_prefix (Optional[str]): Prefix removed from the path first.

    Returns:
        str: Name such as ``ListUsers`` or ``GetUsersByUserId``.
    """
    if use_operation_id and operation_id:
        return to_pascal_case(operation_id)

    stripped_path = strip_prefix(path, strip_path_prefix)
    parts: list[str] = []
    for segment in stripped_path.split("/"):
        if not segment:
            continue
        match = _PATH_PARAM_RE.match(segment)
        if match:
            parts.append(f"By{to_pascal_case(match.group('name'))}")
            continue
        parts.append(to_pascal_case(segment))
    return to_pascal_case(method) + ("".join(parts) or "Root")
