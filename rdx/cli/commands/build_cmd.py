from __future__ import annotations

import shutil
from pathlib import Path

import typer

from rdx.cli.commands._helpers import exit_on_error, make_pipeline, output_path, resolve_target
from rdx.cli.context import build_context
from rdx.core.result import Err, Ok
from rdx.pipeline.archive import archive_name
from rdx.pipeline.errors import PipelineError

_TAG = typer.Option(..., "--tag", help="Release tag to build (e.g. v0.10.0)")
_PLATFORM = typer.Option(
    None, "--platform", help="Target os/arch (default: the container engine platform, e.g. linux/amd64)"
)
_WORK_DIR = typer.Option(Path(".rdx"), "--work-dir", help="Checkout and build directory")


def binary(
    tag: str = _TAG,
    platform: str | None = _PLATFORM,
    out: Path = typer.Option(Path("dist"), "--out", help="Output directory"),
    work_dir: Path = _WORK_DIR,
) -> None:
    """Cross-compile the exporter binary."""
    ctx = build_context()
    target = resolve_target(platform, ctx)
    pipeline = make_pipeline(ctx, tag=tag, work_dir=work_dir)

    built = exit_on_error(pipeline.binary(target), ctx)
    dest = output_path(ctx, out) / built.target.slug / built.path.name
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(built.path, dest)
    except OSError as e:
        exit_on_error(Err(PipelineError(kind="io_failed", message=f"failed to copy binary: {e}")), ctx)
    ctx.console.success(str(dest))


def overlay(
    tag: str = _TAG,
    platform: str | None = _PLATFORM,
    prefix: str = typer.Option("", "--prefix", help="Install prefix inside the image (default /usr/local)"),
    out: Path = typer.Option(Path("dist/overlay"), "--out", help="Overlay root directory"),
    work_dir: Path = _WORK_DIR,
) -> None:
    """Lay out the binary as a filesystem overlay (<prefix>/bin/<name>)."""
    ctx = build_context()
    target = resolve_target(platform, ctx)
    pipeline = make_pipeline(ctx, tag=tag, work_dir=work_dir)

    dest = exit_on_error(pipeline.overlay(output_path(ctx, out), target, prefix), ctx)
    ctx.console.success(str(dest))


def container(
    tag: str = _TAG,
    platform: str | None = _PLATFORM,
    work_dir: Path = _WORK_DIR,
) -> None:
    """Build the runtime image for one linux platform into the local engine."""
    ctx = build_context()
    target = resolve_target(platform, ctx)
    pipeline = make_pipeline(ctx, tag=tag, work_dir=work_dir)

    ref = exit_on_error(pipeline.container(target), ctx)
    ctx.console.success(ref)


def archive(
    tag: str = _TAG,
    platform: str | None = _PLATFORM,
    out: Path = typer.Option(Path("dist"), "--out", help="Output directory"),
    work_dir: Path = _WORK_DIR,
) -> None:
    """Package the binary with LICENSE, CHANGELOG.md and README.md as .tar.gz."""
    ctx = build_context()
    target = resolve_target(platform, ctx)
    pipeline = make_pipeline(ctx, tag=tag, work_dir=work_dir)

    dest = output_path(ctx, out) / archive_name(ctx.config.project.binary_name)
    match pipeline.archive(dest, target):
        case Ok(path):
            ctx.console.success(str(path))
        case Err() as err:
            exit_on_error(err, ctx)
