"""
bridgegen CLI.

Commands:
- inspect: Build an interface and list its declarations and FFI functions
- checksum: Print the interface checksum and FFI namespace
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from bridgegen._version import get_version
from bridgegen.core.builder import build_component_interface
from bridgegen.core.config import BuildConfig, load_config
from bridgegen.core.errors import BridgegenError
from bridgegen.core.interface import ComponentInterface
from bridgegen.core.metadata import Metadata, parse_metadata_records
from bridgegen.core.syntax import load_document

console = Console()

app = typer.Typer(
    help="bridgegen - build checksummed component interfaces",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"bridgegen {get_version()}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """bridgegen CLI main callback for global options."""
    pass


def _load_metadata(paths: list[Path]) -> list[Metadata]:
    records: list[Metadata] = []
    for path in paths:
        payloads = json.loads(path.read_text(encoding="utf-8"))
        records.extend(parse_metadata_records(payloads))
    return records


def _build(
    document: Path, metadata: list[Path] | None = None, config_path: Path | None = None
) -> ComponentInterface:
    config = load_config(config_path) if config_path else BuildConfig()
    doc = load_document(document.read_text(encoding="utf-8"))
    return build_component_interface(doc, _load_metadata(metadata or []), config)


@app.command()
def inspect(
    document: Path = typer.Argument(..., help="Interface document (JSON syntax tree)"),
    metadata: list[Path] | None = typer.Option(
        None, "--metadata", "-m", help="JSON file of metadata records (repeatable)"
    ),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="bridgegen.toml or pyproject.toml"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log each build pass"),
) -> None:
    """
    Build the interface and show its declarations and FFI functions.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        ci = _build(document, metadata, config)
    except (BridgegenError, OSError, ValueError) as e:
        console.print(f"Error: {e}", style="red", markup=False)
        raise typer.Exit(code=1)

    console.print(f"[bold]Namespace:[/bold] {ci.namespace()}")
    console.print(f"[bold]Checksum:[/bold] {ci.checksum():016x}")
    console.print(f"[bold]FFI namespace:[/bold] {ci.ffi_namespace()}")

    counts = [
        ("records", len(ci.record_definitions())),
        ("enums", len(ci.enum_definitions())),
        ("errors", len(ci.error_definitions())),
        ("functions", len(ci.function_definitions())),
        ("objects", len(ci.object_definitions())),
        ("callback interfaces", len(ci.callback_interface_definitions())),
    ]
    console.print(", ".join(f"{count} {label}" for label, count in counts))

    table = Table(title="FFI functions")
    table.add_column("Symbol")
    table.add_column("Arguments")
    table.add_column("Returns", style="dim")
    for func in ci.iter_ffi_function_definitions():
        table.add_row(
            func.name,
            ", ".join(f"{a.name}: {a.type.value}" for a in func.arguments),
            func.return_type.value if func.return_type else "void",
        )
    console.print(table)


@app.command()
def checksum(
    document: Path = typer.Argument(..., help="Interface document (JSON syntax tree)"),
) -> None:
    """
    Print the interface checksum and FFI namespace.
    """
    try:
        ci = _build(document)
    except (BridgegenError, OSError, ValueError) as e:
        console.print(f"Error: {e}", style="red", markup=False)
        raise typer.Exit(code=1)

    typer.echo(f"{ci.checksum():016x} {ci.ffi_namespace()}")


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


if __name__ == "__main__":
    main(sys.argv[1:])
