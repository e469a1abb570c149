"""Tests for CLI commands."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from bridgegen.cli import app
from bridgegen.core.builder import build_component_interface
from bridgegen.core.config import BuildConfig
from bridgegen.core.syntax import load_document

HELLO = {
    "file": "hello.udl",
    "definitions": [
        {
            "kind": "namespace",
            "name": "example",
            "functions": [
                {"name": "hello", "return_type": {"kind": "identifier", "name": "string"}}
            ],
        }
    ],
}


@pytest.fixture
def cli_runner():
    """Return a CLI test runner."""
    return CliRunner()


@pytest.fixture
def hello_file(tmp_path: Path) -> Path:
    path = tmp_path / "hello.json"
    path.write_text(json.dumps(HELLO), encoding="utf-8")
    return path


def test_checksum_command(cli_runner: CliRunner, hello_file: Path):
    result = cli_runner.invoke(app, ["checksum", str(hello_file)])
    assert result.exit_code == 0

    ci = build_component_interface(load_document(hello_file.read_text()))
    assert result.stdout.strip() == f"{ci.checksum():016x} {ci.ffi_namespace()}"


def test_inspect_command(cli_runner: CliRunner, hello_file: Path):
    result = cli_runner.invoke(app, ["inspect", str(hello_file)])
    assert result.exit_code == 0
    assert "Namespace: example" in result.stdout
    assert "1 functions" in result.stdout
    assert "FFI functions" in result.stdout


def test_inspect_with_config(cli_runner: CliRunner, hello_file: Path, tmp_path: Path):
    config = tmp_path / "bridgegen.toml"
    config.write_text('[build]\ngenerator_version = "9.9"\n', encoding="utf-8")
    result = cli_runner.invoke(app, ["inspect", str(hello_file), "--config", str(config)])
    assert result.exit_code == 0

    expected = build_component_interface(
        load_document(hello_file.read_text()), config=BuildConfig(generator_version="9.9")
    )
    assert f"Checksum: {expected.checksum():016x}" in result.stdout


def test_inspect_with_metadata(cli_runner: CliRunner, hello_file: Path, tmp_path: Path):
    metadata = tmp_path / "metadata.json"
    metadata.write_text(
        json.dumps([{"kind": "fn", "module": "example", "name": "goodbye"}]), encoding="utf-8"
    )
    result = cli_runner.invoke(app, ["inspect", str(hello_file), "--metadata", str(metadata)])
    assert result.exit_code == 0
    assert "2 functions" in result.stdout


def test_build_error_exits_nonzero(cli_runner: CliRunner, tmp_path: Path):
    document = {
        "definitions": [
            {
                "kind": "namespace",
                "name": "example",
                "functions": [{"name": "compute"}, {"name": "compute"}],
            }
        ]
    }
    path = tmp_path / "dup.json"
    path.write_text(json.dumps(document), encoding="utf-8")

    result = cli_runner.invoke(app, ["checksum", str(path)])
    assert result.exit_code == 1
    assert "compute" in result.stdout


def test_missing_document(cli_runner: CliRunner, tmp_path: Path):
    result = cli_runner.invoke(app, ["checksum", str(tmp_path / "missing.json")])
    assert result.exit_code == 1


def test_version(cli_runner: CliRunner):
    result = cli_runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.startswith("bridgegen ")
