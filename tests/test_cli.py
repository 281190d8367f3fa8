"""Tests for the command line interface."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
import yaml

from openapi_to_zod_generator.cli import main

from .fixture_helpers import fixture_dir


def _answers(monkeypatch: pytest.MonkeyPatch, answers: list[str]) -> None:
    iterator: Iterator[str] = iter(answers)
    monkeypatch.setattr("builtins.input", lambda _prompt: next(iterator))


def test_direct_mode_writes_output(tmp_path: Path) -> None:
    """--input/--output generate a single file."""
    output_path = tmp_path / "schemas.ts"
    exit_code = main(
        [
            "--input",
            str(fixture_dir() / "petstore.yaml"),
            "--output",
            str(output_path),
            "--enum-type",
            "typescript",
        ]
    )

    assert exit_code == 0
    assert "export enum PetStatusEnum {" in output_path.read_text(encoding="utf-8")


def test_direct_mode_requires_both_paths(tmp_path: Path) -> None:
    """Passing only --input is a usage error."""
    with pytest.raises(SystemExit) as exc_info:
        main(["--input", str(tmp_path / "a.yaml")])
    assert exc_info.value.code == 2


def test_config_mode_runs_batch(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """A config file runs every spec and prints the summary."""
    config_path = tmp_path / "openapi-to-zod.config.yaml"
    config_path.write_text(
        yaml.safe_dump(
            {
                "specs": [
                    {"input": str(fixture_dir() / "petstore.yaml"), "output": "out/pets.ts"},
                ]
            }
        ),
        encoding="utf-8",
    )

    assert main(["--config", str(config_path)]) == 0
    assert (tmp_path / "out" / "pets.ts").is_file()
    assert "Batch Execution Summary" in capsys.readouterr().out


def test_config_mode_failure_exit_code(tmp_path: Path) -> None:
    """A failed spec makes the batch exit with 1."""
    config_path = tmp_path / "openapi-to-zod.config.yaml"
    config_path.write_text(
        "specs:\n  - input: missing.yaml\n    output: out.ts\n",
        encoding="utf-8",
    )

    assert main(["--config", str(config_path)]) == 1


def test_invalid_config_is_a_usage_error(tmp_path: Path) -> None:
    """Configuration errors exit with status 2."""
    config_path = tmp_path / "openapi-to-zod.config.yaml"
    config_path.write_text("specs: []\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exc_info:
        main(["--config", str(config_path)])
    assert exc_info.value.code == 2


def test_init_creates_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """init writes a starter config from the answers given."""
    monkeypatch.chdir(tmp_path)
    _answers(monkeypatch, ["yaml", "api.yaml", "out/schemas.ts"])

    assert main(["init"]) == 0
    content = (tmp_path / "openapi-to-zod.config.yaml").read_text(encoding="utf-8")
    assert yaml.safe_load(content) == {"specs": [{"input": "api.yaml", "output": "out/schemas.ts"}]}


def test_init_keeps_existing_config_unless_confirmed(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Declining the overwrite prompt leaves the existing file alone."""
    monkeypatch.chdir(tmp_path)
    existing = tmp_path / "openapi-to-zod.config.json"
    existing.write_text("{}", encoding="utf-8")
    _answers(monkeypatch, ["json", "", "", "n"])

    assert main(["init"]) == 0
    assert existing.read_text(encoding="utf-8") == "{}"
