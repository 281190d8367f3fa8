"""Command line interface for OpenAPI to Zod generation."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

import yaml

from .batch import execute_batch, format_batch_summary
from .config import GeneratorOptions, load_config, merge_config_with_defaults
from .errors import GeneratorError
from .generator import run_generation
from .writer import write_output

_DIRECT_OPTIONS: tuple[str, ...] = (
    "input",
    "output",
    "mode",
    "enum_type",
    "type_mode",
    "default_nullable",
    "prefix",
    "suffix",
    "show_stats",
)


class CLIError(RuntimeError):
    """Raised when CLI execution fails."""


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    parser = argparse.ArgumentParser(
        prog="openapi-to-zod-generator",
        description="Generate Zod schemas and TypeScript types from OpenAPI documents",
    )
    parser.add_argument("--config", help="Path to a config file (searched upwards by default)")
    parser.add_argument("--input", help="OpenAPI YAML or JSON file (direct mode)")
    parser.add_argument("--output", help="Output TypeScript file (direct mode)")
    parser.add_argument("--mode", choices=("strict", "normal", "loose"))
    parser.add_argument("--enum-type", choices=("zod", "typescript"))
    parser.add_argument("--type-mode", choices=("inferred", "native"))
    parser.add_argument(
        "--default-nullable",
        action="store_true",
        default=None,
        help="Treat properties without an explicit nullable flag as nullable",
    )
    parser.add_argument("--prefix", help="Prefix added to every generated schema name")
    parser.add_argument("--suffix", help="Suffix added to every generated schema name")
    parser.add_argument(
        "--show-stats",
        action="store_true",
        default=None,
        help="Include a generation statistics header",
    )
    parser.add_argument(
        "--no-descriptions",
        action="store_true",
        help="Omit JSDoc descriptions from generated code",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("init", help="Create a config file in the current directory")
    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )


def _direct_options(args: argparse.Namespace) -> GeneratorOptions:
    if not args.input or not args.output:
        raise CLIError("Direct mode requires both --input and --output")
    values: dict[str, Any] = {
        name: getattr(args, name) for name in _DIRECT_OPTIONS if getattr(args, name) is not None
    }
    if args.no_descriptions:
        values["include_descriptions"] = False
    return GeneratorOptions.model_validate(values)


def _prompt(question: str, default: str) -> str:
    answer = input(f"{question} [{default}]: ").strip()
    return answer or default


def run_init(directory: Path) -> Path | None:
    """Interactively scaffold a config file in ``directory``.

    Returns:
        Path | None: The written file, or ``None`` when the user declined to
        overwrite an existing one.
    """
    file_format = _prompt("Config format (yaml/json)", "yaml").lower()
    if file_format not in ("yaml", "json"):
        raise CLIError(f"Unsupported config format: {file_format}")
    input_path = _prompt("Path to OpenAPI document", "openapi.yaml")
    output_path = _prompt("Path to generated TypeScript file", "src/schemas.ts")

    target = directory / f"openapi-to-zod.config.{file_format}"
    if target.exists():
        answer = input(f"{target.name} already exists. Overwrite? (y/N): ").strip().lower()
        if answer not in ("y", "yes"):
            print("Aborted; existing config left unchanged")
            return None

    payload = {"specs": [{"input": input_path, "output": output_path}]}
    if file_format == "json":
        content = json.dumps(payload, indent=2) + "\n"
    else:
        content = yaml.safe_dump(payload, sort_keys=False)
    write_output(target, content)
    print(f"Created {target}")
    return target


def main(argv: list[str] | None = None) -> int:
    """Run CLI and return process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(bool(args.verbose))

    try:
        if args.command == "init":
            run_init(Path.cwd())
            return 0

        if args.input is not None or args.output is not None:
            run_generation(options=_direct_options(args))
            return 0

        config = load_config(Path(args.config) if args.config else None)
        summary = execute_batch(
            merge_config_with_defaults(config),
            execution_mode=config.execution_mode,
            batch_size=config.batch_size,
        )
    except (GeneratorError, CLIError) as exc:
        parser.error(str(exc))
        return 2

    print(format_batch_summary(summary))
    return summary.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
