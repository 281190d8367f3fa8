"""Batch execution of several generator runs from one config file."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Literal, Optional, TypeAlias

from .config import GeneratorOptions
from .errors import ConfigurationError, GeneratorError
from .generator import ZodSchemaGenerator
from .model_types import GenerationResult

logger = logging.getLogger(__name__)

GeneratorFactory: TypeAlias = Callable[[GeneratorOptions], ZodSchemaGenerator]


@dataclass(frozen=True)
class SpecResult:
    """Outcome of one spec in a batch."""

    options: GeneratorOptions
    result: Optional[GenerationResult] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class BatchSummary:
    """Aggregated outcome of a batch run."""

    results: tuple[SpecResult, ...]

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def successful(self) -> int:
        return sum(1 for item in self.results if item.success)

    @property
    def failed(self) -> int:
        return self.total - self.successful

    @property
    def exit_code(self) -> int:
        """Return 1 when any spec failed, otherwise 0."""
        return 1 if self.failed else 0


def _run_spec(options: GeneratorOptions, factory: GeneratorFactory) -> SpecResult:
    label = options.display_name()
    logger.info("Generating %s -> %s", label, options.output)
    try:
        result = factory(options).generate()
    except GeneratorError as exc:
        logger.error("Failed to generate %s: %s", label, exc)
        return SpecResult(options=options, error=str(exc))
    except Exception as exc:
        logger.debug("Unexpected failure while generating %s", label, exc_info=True)
        logger.error("Failed to generate %s: %s: %s", label, type(exc).__name__, exc)
        return SpecResult(options=options, error=f"{type(exc).__name__}: {exc}")
    return SpecResult(options=options, result=result)


def execute_batch(
    specs: Sequence[GeneratorOptions],
    *,
    execution_mode: Literal["parallel", "sequential"] = "parallel",
    batch_size: int = 10,
    generator_factory: GeneratorFactory = ZodSchemaGenerator,
) -> BatchSummary:
    """Run every spec and collect per-spec outcomes.

    A failing spec never stops the others. In parallel mode specs run in
    fixed-size groups of ``batch_size`` threads; results keep input order.

    Args:
        specs (Sequence[GeneratorOptions]): Merged options per spec.
        execution_mode (Literal["parallel", "sequential"]): Scheduling mode.
        batch_size (int): Maximum specs running at once in parallel mode.
        generator_factory (GeneratorFactory): Builds one generator per spec.

    Returns:
        BatchSummary: Per-spec results and aggregate counts.
    """
    if not specs:
        raise ConfigurationError("No specs to generate")
    if batch_size < 1:
        raise ConfigurationError(f"batch_size must be at least 1, got {batch_size}")

    results: list[SpecResult] = []
    if execution_mode == "sequential":
        for options in specs:
            results.append(_run_spec(options, generator_factory))
    else:
        for start in range(0, len(specs), batch_size):
            group = specs[start : start + batch_size]
            with ThreadPoolExecutor(max_workers=len(group)) as executor:
                futures = [executor.submit(_run_spec, options, generator_factory) for options in group]
                results.extend(future.result() for future in futures)
    return BatchSummary(results=tuple(results))


def format_batch_summary(summary: BatchSummary) -> str:
    """Render the end-of-run summary block."""
    lines = [
        "=" * 50,
        "Batch Execution Summary",
        "=" * 50,
        f"Total specs: {summary.total}",
        f"Successful: {summary.successful}",
        f"Failed: {summary.failed}",
    ]
    failures = [item for item in summary.results if not item.success]
    if failures:
        lines.append("")
        lines.append("Failed specs:")
        lines.extend(f"  - {item.options.display_name()}: {item.error}" for item in failures)
    lines.append("=" * 50)
    return "\n".join(lines)


__all__ = ["BatchSummary", "SpecResult", "execute_batch", "format_batch_summary"]
