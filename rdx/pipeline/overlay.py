"""Filesystem overlay merged onto the runtime image root."""

from __future__ import annotations

import shutil
import stat
from pathlib import Path, PurePosixPath

from rdx.core.result import Err, Ok, Result
from rdx.pipeline.binary import Binary
from rdx.pipeline.errors import PipelineError

__all__ = ["DEFAULT_PREFIX", "build_overlay"]

DEFAULT_PREFIX = "/usr/local"


def _relative_prefix(prefix: str) -> PurePosixPath | None:
    """``/usr/local`` -> ``usr/local``; None if the prefix escapes the root."""
    rel = PurePosixPath("/", prefix or DEFAULT_PREFIX).relative_to("/")
    if ".." in rel.parts:
        return None
    return rel


def build_overlay(
    binary: Binary,
    dest: Path,
    *,
    binary_name: str,
    prefix: str = DEFAULT_PREFIX,
) -> Result[Path, PipelineError]:
    """Install the binary as ``<dest>/<prefix>/bin/<binary_name>``.

    Only that file is replaced; anything else under ``dest`` is left as is.
    Callers that need a clean tree own the directory and reset it first.
    """
    rel = _relative_prefix(prefix)
    if rel is None:
        return Err(PipelineError(kind="invalid_input", message=f"invalid overlay prefix: {prefix!r}"))

    bin_dir = dest.joinpath(*rel.parts, "bin")
    target = bin_dir / binary_name
    try:
        bin_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(binary.path, target)
        mode = target.stat().st_mode
        target.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except OSError as e:
        return Err(PipelineError(kind="io_failed", message=f"failed to create overlay {dest}: {e}"))

    return Ok(dest)
