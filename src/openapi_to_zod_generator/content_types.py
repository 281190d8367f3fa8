"""Media type classification for request and response bodies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, TypeAlias

ParseStrategy: TypeAlias = Literal["json", "text", "body"]

_JSON_TYPES: frozenset[str] = frozenset({"application/json", "text/json"})
_TEXT_TYPES: frozenset[str] = frozenset(
    {
        "application/xml",
        "application/javascript",
        "application/x-javascript",
        "application/ecmascript",
    }
)
_BINARY_PREFIXES: tuple[str, ...] = ("image/", "audio/", "video/", "font/")
_BINARY_TYPES: frozenset[str] = frozenset(
    {
        "application/octet-stream",
        "application/pdf",
        "application/zip",
        "application/gzip",
        "application/x-tar",
        "application/x-7z-compressed",
        "application/x-rar-compressed",
        "application/wasm",
        "application/x-protobuf",
    }
)


@dataclass(frozen=True)
class ContentTypeClassification:
    """Parse strategy chosen for one media type."""

    strategy: ParseStrategy
    is_recognized: bool


def normalize_media_type(content_type: str) -> str:
    """Drop ``;`` parameters and lower-case a media type."""
    return content_type.split(";", maxsplit=1)[0].strip().lower()


def classify_content_type(
    content_type: Optional[str],
    fallback: ParseStrategy = "json",
) -> ContentTypeClassification:
    """Map a media type onto a response parse strategy.

    Args:
        content_type (Optional[str]): Media type, possibly with parameters.
        fallback (ParseStrategy): Strategy used for unknown media types.

    Returns:
        ContentTypeClassification: Chosen strategy and whether it was recognized.
    """
    if not content_type:
        return ContentTypeClassification(strategy=fallback, is_recognized=False)

    media_type = normalize_media_type(content_type)
    if media_type in _JSON_TYPES or media_type.endswith("+json"):
        return ContentTypeClassification(strategy="json", is_recognized=True)
    if media_type in _BINARY_TYPES or media_type.startswith(_BINARY_PREFIXES):
        return ContentTypeClassification(strategy="body", is_recognized=True)
    if (
        media_type.startswith("text/")
        or media_type in _TEXT_TYPES
        or media_type.endswith("+xml")
    ):
        return ContentTypeClassification(strategy="text", is_recognized=True)
    return ContentTypeClassification(strategy=fallback, is_recognized=False)
