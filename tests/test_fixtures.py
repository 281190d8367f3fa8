"""Fixture-driven generation tests."""

from __future__ import annotations

import re
from pathlib import Path

from openapi_to_zod_generator.loader import load_openapi_document
from openapi_to_zod_generator.usage import component_schemas, detect_circular_references

from .fixture_helpers import fixture_dir, generate, parametrize_fixtures

_EXPORT_CONST_RE = re.compile(r"^export const (\w+) = ", re.MULTILINE)


def test_fixture_directory_exists() -> None:
    """Ensure the fixtures directory is present."""
    assert fixture_dir().is_dir(), f"Fixture directory not found: {fixture_dir()}"


@parametrize_fixtures()
def test_fixture_loads(fixture_path: Path) -> None:
    """Every fixture passes document validation."""
    document = load_openapi_document(fixture_path)
    assert component_schemas(document)


@parametrize_fixtures()
def test_fixture_output_structure(fixture_path: Path) -> None:
    """Output starts with the banner and pairs each validator with a type alias."""
    output = generate(fixture_path).output

    assert output.startswith(
        "// Auto-generated by openapi-to-zod-generator\n// Do not edit this file manually\n"
    )
    assert 'import { z } from "zod";' in output
    for match in _EXPORT_CONST_RE.finditer(output):
        identifier = match.group(1)
        assert f"z.infer<typeof {identifier}>" in output


@parametrize_fixtures()
def test_fixture_dependencies_precede_dependents(fixture_path: Path) -> None:
    """Non-circular dependencies are emitted before the declarations using them."""
    schemas = component_schemas(load_openapi_document(fixture_path))
    circular = detect_circular_references(schemas)
    declarations = generate(fixture_path).declarations
    position = {declaration.name: index for index, declaration in enumerate(declarations)}

    assert set(position) >= {name for name in schemas}
    for declaration in declarations:
        for dependency in declaration.dependencies:
            if dependency in circular or dependency not in position:
                continue
            assert position[dependency] < position[declaration.name], (
                f"{dependency} must precede {declaration.name}"
            )


@parametrize_fixtures()
def test_fixture_generation_is_idempotent(fixture_path: Path) -> None:
    """Two runs over the same input produce byte-identical output."""
    assert generate(fixture_path).output == generate(fixture_path).output
