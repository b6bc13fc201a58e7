"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

import typer

from gattdecl.core.arg_parser import parse_characteristic_args, parse_service_args
from gattdecl.core.capabilities import interface_methods, select_capabilities
from gattdecl.core.declaration_loader import load_declarations
from gattdecl.core.errors import GattdeclError

app = typer.Typer(help="Declarative BlueZ GATT services and characteristics")


class EntityKind(str, Enum):
    service = "service"
    characteristic = "characteristic"


def _fmt_bool(value: bool) -> str:
    return "true" if value else "false"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command("check")
def check(
    file: Path = typer.Argument(..., help="YAML declaration file"),
    base_path: str | None = typer.Option(
        None,
        "--base-path",
        envvar="GATTDECL_BASE_PATH",
        help="Object path the service tree is registered under",
    ),
) -> None:
    """Validate a declaration file and print the resolved object tree."""
    try:
        loaded = load_declarations(file, base_path=base_path)
        typer.echo(f"{loaded.source} (base path {loaded.base_path})")
        for service in loaded.services:
            kind = "primary" if service.args.primary else "secondary"
            typer.echo(f"{service.path}: {service.name} uuid={service.args.uuid} {kind}")
            for chrc in service.characteristics:
                typer.echo(f"  {chrc.path}: {chrc.name} uuid={chrc.args.uuid}")
                typer.echo(f"    flags: {', '.join(chrc.args.flags) or '-'}")
                typer.echo(f"    methods: {', '.join(chrc.methods) or '-'}")
    except GattdeclError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("args")
def show_args(
    kind: EntityKind = typer.Argument(..., help="Declaration kind"),
    text: str = typer.Argument(..., help='Annotation arguments, e.g. \'uuid = "180f"\''),
) -> None:
    """Parse annotation arguments and print the validated declaration."""
    try:
        if kind is EntityKind.service:
            service = parse_service_args(text)
            typer.echo(f"uuid: {service.uuid}")
            typer.echo(f"path: {service.path or '<derived>'}")
            typer.echo(f"primary: {_fmt_bool(service.primary)}")
            return

        chrc = parse_characteristic_args(text)
        methods = interface_methods(select_capabilities(chrc.flags))
        typer.echo(f"uuid: {chrc.uuid}")
        typer.echo(f"path: {chrc.path or '<derived>'}")
        typer.echo(f"service: {chrc.service or '-'}")
        typer.echo(f"flags: {', '.join(chrc.flags) or '-'}")
        typer.echo(f"methods: {', '.join(methods) or '-'}")
    except GattdeclError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
