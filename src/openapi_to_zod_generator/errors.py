"""Error taxonomy shared by the generator, config loader and CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class GeneratorError(RuntimeError):
    """Base class for all fatal generation errors."""


class ConfigurationError(GeneratorError):
    """Raised when caller-supplied options are structurally insufficient."""


class FileOperationError(GeneratorError):
    """Raised when a file cannot be found, read or written."""

    def __init__(self, message: str, path: Union[str, Path]) -> None:
        self.path = str(path)
        super().__init__(message)


class SpecValidationError(GeneratorError):
    """Raised when the input document is unusable for generation.

    The ``context`` mapping carries the offending schema name, path or ref
    so the message is actionable on its own.
    """

    def __init__(self, message: str, context: Optional[dict[str, str]] = None) -> None:
        self.context = dict(context or {})
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        super().__init__(f"{message} ({details})" if details else message)


class SchemaGenerationError(GeneratorError):
    """Raised when one named schema cannot be turned into code."""

    def __init__(self, message: str, schema_name: str) -> None:
        self.schema_name = schema_name
        super().__init__(f"[{schema_name}] {message}")


class GeneratorStateError(GeneratorError):
    """Raised when a single-use generator is run twice."""


__all__ = [
    "ConfigurationError",
    "FileOperationError",
    "GeneratorError",
    "GeneratorStateError",
    "SchemaGenerationError",
    "SpecValidationError",
]
