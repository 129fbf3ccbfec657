from __future__ import annotations

from pathlib import Path

import typer

from rdx.cli.commands._helpers import exit_on_error, output_path
from rdx.cli.context import build_context
from rdx.pipeline.checksums import write_checksums


def checksums(
    directory: Path = typer.Argument(Path("dist"), help="Directory holding the archives"),
    pattern: str = typer.Option("*.tar.gz", "--pattern", help="Glob selecting files to hash"),
) -> None:
    """Write a sha256sum-compatible checksums file for release archives."""
    ctx = build_context()
    root = output_path(ctx, directory)
    names_file = ctx.config.release.checksums_name

    names = sorted(p.name for p in root.glob(pattern) if p.is_file() and p.name != names_file)
    if not names:
        ctx.console.warning(f"no files matching {pattern} in {root}")

    out = exit_on_error(write_checksums(root, names, names_file), ctx)
    ctx.console.success(str(out))
