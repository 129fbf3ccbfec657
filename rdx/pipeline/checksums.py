"""sha256sum-compatible checksum files."""

from __future__ import annotations

import hashlib
from pathlib import Path

from rdx.core.result import Err, Ok, Result
from rdx.pipeline.errors import PipelineError

__all__ = ["checksums_text", "sha256_file", "write_checksums"]


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def checksums_text(directory: Path, names: list[str]) -> Result[str, PipelineError]:
    """One ``<hex>  <name>`` line per file, sorted by name.

    The two-space separator is what ``sha256sum --check`` expects.
    """
    lines: list[str] = []
    for name in sorted(names):
        try:
            digest = sha256_file(directory / name)
        except OSError as e:
            return Err(PipelineError(kind="io_failed", message=f"cannot read {name}: {e}"))
        lines.append(f"{digest}  {name}\n")
    return Ok("".join(lines))


def write_checksums(directory: Path, names: list[str], out_name: str) -> Result[Path, PipelineError]:
    text = checksums_text(directory, names)
    if isinstance(text, Err):
        return text

    out = directory / out_name
    try:
        out.write_text(text.value, encoding="utf-8")
    except OSError as e:
        return Err(PipelineError(kind="io_failed", message=f"failed to write {out}: {e}"))
    return Ok(out)
