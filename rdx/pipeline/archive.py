"""Release archives: binary plus licence and docs, gzipped tar."""

from __future__ import annotations

import tarfile
from pathlib import Path

from rdx.core.result import Err, Ok, Result
from rdx.git.source import Source
from rdx.pipeline.binary import Binary
from rdx.pipeline.errors import PipelineError

__all__ = ["archive_name", "build_archive", "release_archive_name"]


def archive_name(binary_name: str) -> str:
    return f"{binary_name}.tar.gz"


def release_archive_name(binary_name: str, os_name: str, arch: str) -> str:
    """Asset name on the GitHub release, e.g. ``prometheus-rds-exporter-linux-amd64.tar.gz``."""
    return f"{binary_name}-{os_name}-{arch}.tar.gz"


def _reset_owner(info: tarfile.TarInfo) -> tarfile.TarInfo:
    info.uid = info.gid = 0
    info.uname = info.gname = ""
    return info


def build_archive(
    *,
    source: Source,
    binary: Binary,
    out: Path,
    binary_name: str,
    extra_files: tuple[str, ...],
) -> Result[Path, PipelineError]:
    """Write ``out`` with the binary and ``extra_files`` at the archive root.

    ``extra_files`` are read from the source checkout; a missing one is an
    error rather than a silently thinner archive.
    """
    members: list[tuple[Path, str]] = [(binary.path, binary_name)]
    for name in extra_files:
        path = source.tree / name
        if not path.is_file():
            return Err(
                PipelineError(
                    kind="archive_failed",
                    message=f"{name} not found in {source.tag} checkout",
                    hint=str(path),
                )
            )
        members.append((path, name))

    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        with tarfile.open(out, "w:gz") as tar:
            for path, arcname in members:
                tar.add(path, arcname=arcname, filter=_reset_owner)
    except (OSError, tarfile.TarError) as e:
        return Err(PipelineError(kind="io_failed", message=f"failed to write {out}: {e}"))

    return Ok(out)
