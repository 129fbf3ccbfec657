"""Shared helpers for CLI commands."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

import typer

from rdx.core.errors import ErrorCode
from rdx.core.result import Err, Ok, Result
from rdx.output.console import Style
from rdx.pipeline.errors import PipelineError
from rdx.pipeline.service import ExporterPipeline
from rdx.platform.target import Target, parse_target

if TYPE_CHECKING:
    from rdx.cli.context import CLIContext


def exit_on_error[T](result: Result[T, PipelineError], ctx: CLIContext) -> T:
    """Return the Ok value, or print the error and exit with its code."""
    if isinstance(result, Ok):
        return result.value

    error = result.error
    ctx.console.error(error.message)
    if error.hint:
        ctx.console.print(f"hint: {error.hint}", Style.DIM)
    raise typer.Exit(code=int(error.exit_code))


def exit_with_code(code: ErrorCode) -> NoReturn:
    raise typer.Exit(code=int(code))


def resolve_target(value: str | None, ctx: CLIContext) -> Target | None:
    """Parse --platform; None means the container engine platform."""
    if value is None or not value.strip():
        return None

    result = parse_target(value)
    if isinstance(result, Err):
        ctx.console.error(result.error.message)
        exit_with_code(ErrorCode.USER_ERROR)
    return result.value


def make_pipeline(
    ctx: CLIContext,
    *,
    tag: str,
    work_dir: Path,
    now: datetime | None = None,
) -> ExporterPipeline:
    return ExporterPipeline(
        config=ctx.config,
        engine=ctx.engine,
        console=ctx.console,
        tag=tag,
        work_dir=work_dir if work_dir.is_absolute() else ctx.root / work_dir,
        now=now,
    )


def output_path(ctx: CLIContext, out: Path) -> Path:
    return out if out.is_absolute() else ctx.root / out
