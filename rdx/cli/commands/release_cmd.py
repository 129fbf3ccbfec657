from __future__ import annotations

from pathlib import Path

import typer

from rdx.cli.commands._helpers import exit_on_error, make_pipeline, output_path
from rdx.cli.context import build_context
from rdx.core.secret import Secret
from rdx.output.console import Style


def release(
    tag: str = typer.Option(..., "--tag", help="Release tag (e.g. v0.10.0)"),
    github_token: str = typer.Option(
        "",
        "--github-token",
        envvar="GITHUB_TOKEN",
        show_default=False,
        help="GitHub token (prefer the GITHUB_TOKEN environment variable)",
    ),
    out: Path = typer.Option(Path("dist"), "--out", help="Directory for archives and checksums"),
    work_dir: Path = typer.Option(Path(".rdx"), "--work-dir", help="Checkout and build directory"),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Build everything locally; skip image push and GitHub release"
    ),
) -> None:
    """Build every platform, publish the image manifest list and the GitHub release."""
    ctx = build_context()
    pipeline = make_pipeline(ctx, tag=tag, work_dir=work_dir)
    token = Secret("GITHUB_TOKEN", github_token) if github_token else None

    summary = exit_on_error(
        pipeline.release(out_dir=output_path(ctx, out), token=token, dry_run=dry_run),
        ctx,
    )

    ctx.console.header(f"{summary.tag} ({summary.version})")
    for archive in summary.archives:
        ctx.console.print(f"  {archive}", Style.DIM)
    ctx.console.print(f"  {summary.checksums}", Style.DIM)
    if summary.published:
        ctx.console.success(f"image {summary.image}")
    else:
        ctx.console.print(f"  image not pushed: {summary.image}", Style.DIM)
