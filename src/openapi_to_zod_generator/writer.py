"""Filesystem writer for generated TypeScript modules."""

from __future__ import annotations

import logging
from pathlib import Path

from .errors import FileOperationError

logger = logging.getLogger(__name__)


def write_output(path: Path, content: str) -> None:
    """Write rendered source to ``path``, creating parent directories.

    Args:
        path (Path): Destination file.
        content (str): Complete rendered module source.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FileOperationError(f"Failed to create directory {path.parent}: {exc}", path) from exc
    _write_file(path, content)
    logger.info("Wrote %s", path)


def _write_file(path: Path, content: str) -> None:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise FileOperationError(f"Failed to write file {path}: {exc}", path) from exc
