"""JSDoc comment rendering for generated declarations and properties."""

from __future__ import annotations

import json
import re
from collections.abc import Sequence
from typing import Optional

from .json_types import JSONObject

_WHITESPACE_RE = re.compile(r"\s+")


def escape_jsdoc(text: str) -> str:
    """Escape text so it cannot terminate a comment or inject tags."""
    collapsed = _WHITESPACE_RE.sub(" ", text).strip()
    return _close_safe(collapsed).replace("@", "\\@")


def _close_safe(text: str) -> str:
    return text.replace("*/", "*\\/")


def generate_jsdoc(
    schema: JSONObject,
    *,
    name: Optional[str] = None,
    include_descriptions: bool = True,
) -> str:
    """Render a single-line JSDoc comment for a schema or property.

    Args:
        schema (JSONObject): Schema node carrying title, description and examples.
        name (Optional[str]): Declaration name; a title equal to it is omitted.
        include_descriptions (bool): When false only ``@deprecated`` is kept.

    Returns:
        str: The comment followed by a newline, or an empty string.
    """
    deprecated = schema.get("deprecated") is True
    if not include_descriptions:
        return "/** @deprecated */\n" if deprecated else ""

    parts: list[str] = []
    title = schema.get("title")
    if isinstance(title, str) and title.strip() and title != name:
        parts.append(escape_jsdoc(title))
    description = schema.get("description")
    if isinstance(description, str) and description.strip():
        parts.append(escape_jsdoc(description))

    examples = schema.get("examples")
    if isinstance(examples, list) and examples:
        rendered = ", ".join(json.dumps(example) for example in examples)
        parts.append("@example " + _close_safe(rendered))
    elif "example" in schema:
        parts.append("@example " + _close_safe(json.dumps(schema["example"])))

    if deprecated:
        parts.append("@deprecated")
    if not parts:
        return ""
    return f"/** {' '.join(parts)} */\n"


def generate_warning_block(conflicts: Sequence[str]) -> str:
    """Render a multi-line ``@warning`` comment listing allOf conflicts."""
    if not conflicts:
        return ""
    lines = ["/**", " * @warning allOf property conflicts detected:"]
    lines.extend(f" * - {escape_jsdoc(conflict)}" for conflict in conflicts)
    lines.append(" */")
    return "\n".join(lines) + "\n"
