from __future__ import annotations

import os
from pathlib import Path

import typer

from rdx import __version__
from rdx.cli.commands.build_cmd import archive, binary, container, overlay
from rdx.cli.commands.checksums_cmd import checksums
from rdx.cli.commands.release_cmd import release
from rdx.cli.context import CONFIG_ENV_VAR
from rdx.core.errors import ErrorCode


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Build and release prometheus-rds-exporter.",
)


app.command()(binary)
app.command()(overlay)
app.command()(container)
app.command()(archive)
app.command()(checksums)
app.command()(release)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Path to rdx.toml (default: ./rdx.toml if present)",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if config is not None:
        path = config.expanduser()
        if not path.is_file():
            typer.echo(f"error: --config '{path}' does not exist", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))
        os.environ[CONFIG_ENV_VAR] = str(path.resolve())


def main() -> None:
    app()
