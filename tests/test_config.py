"""Tests for config discovery, validation and merging."""

from __future__ import annotations

from pathlib import Path

import pytest

from openapi_to_zod_generator.config import (
    GeneratorOptions,
    find_config_file,
    load_config,
    merge_config_with_defaults,
)
from openapi_to_zod_generator.errors import ConfigurationError, FileOperationError

_CONFIG = """
defaults:
  mode: strict
  request:
    mode: strict
    typeMode: native
specs:
  - name: users
    input: specs/users.yaml
    output: out/users.ts
    mode: loose
    request:
      includeDescriptions: false
  - input: specs/orders.yaml
    output: out/orders.ts
    operationFilters:
      includeTags: [orders]
executionMode: sequential
batchSize: 2
"""


def _write_config(directory: Path, content: str, name: str = "openapi-to-zod.config.yaml") -> Path:
    path = directory / name
    path.write_text(content, encoding="utf-8")
    return path


def test_load_and_merge_config(tmp_path: Path) -> None:
    """Spec values override defaults and nested request options merge per field."""
    config = load_config(_write_config(tmp_path, _CONFIG))
    users, orders = merge_config_with_defaults(config)

    assert config.execution_mode == "sequential"
    assert config.batch_size == 2
    assert users.input == tmp_path / "specs" / "users.yaml"
    assert users.mode == "loose"
    assert orders.mode == "strict"

    request = users.resolved_options("request")
    assert request.mode == "strict"
    assert request.type_mode == "native"
    assert request.include_descriptions is False
    assert users.resolved_options("response").mode == "loose"

    filters = orders.filters()
    assert filters is not None
    assert filters.include_tags == ("orders",)
    assert users.filters() is None


def test_response_context_is_always_inferred() -> None:
    """Responses keep runtime validators even in native type mode."""
    options = GeneratorOptions(type_mode="native")
    assert options.resolved_options("request").type_mode == "native"
    assert options.resolved_options("response").type_mode == "inferred"


def test_json_config(tmp_path: Path) -> None:
    """JSON config files are accepted."""
    path = _write_config(
        tmp_path,
        '{"specs": [{"input": "a.yaml", "output": "a.ts", "showStats": true}]}',
        name="openapi-to-zod.config.json",
    )
    (spec,) = merge_config_with_defaults(load_config(path))
    assert spec.show_stats is True


def test_config_discovery_walks_parents(tmp_path: Path) -> None:
    """Config files are found in ancestor directories."""
    config_path = _write_config(tmp_path, _CONFIG)
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)

    assert find_config_file(nested) == config_path
    assert load_config(cwd=nested).specs[0].name == "users"


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("specs:\n  - input: a.yaml\n    output: a.ts\n    bogus: 1\n", "specs.0.bogus"),
        ("specs:\n  - input: a.yaml\n", "requires both 'input' and 'output'"),
        ("specs: []\n", "specs"),
        ("specs:\n  - input: a\n    output: b\nbatchSize: 0\n", "batchSize"),
        ("specs:\n  - input: a\n    output: b\n    mode: sloppy\n", "specs.0.mode"),
    ],
)
def test_invalid_config(tmp_path: Path, content: str, message: str) -> None:
    """Validation problems are reported with their location."""
    with pytest.raises(ConfigurationError) as exc_info:
        load_config(_write_config(tmp_path, content))

    assert str(exc_info.value).startswith("Invalid configuration file:")
    assert message in str(exc_info.value)


def test_missing_config_file(tmp_path: Path) -> None:
    """An explicit path that does not exist is a file error."""
    with pytest.raises(FileOperationError):
        load_config(tmp_path / "nope.yaml")
