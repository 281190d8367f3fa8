"""OpenAPI to Zod generator package."""

from __future__ import annotations

from .cli import main
from .config import GeneratorOptions
from .generator import ZodSchemaGenerator, run_generation

__all__ = ["GeneratorOptions", "ZodSchemaGenerator", "main", "run_generation"]
