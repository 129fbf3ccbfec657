"""Cross-compile the exporter for one target.

``go build`` runs inside the builder image with the checkout mounted at
``/src`` and the output directory at ``/out``; GOOS/GOARCH come from the
target, so one Linux builder produces every release binary.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from rdx.core.config import Config
from rdx.core.result import Err, Ok, Result
from rdx.git.source import Source
from rdx.pipeline.engine import ContainerEngine, Mount
from rdx.pipeline.errors import PipelineError
from rdx.pipeline.timeouts import GO_BUILD_TIMEOUT_SECONDS
from rdx.pipeline.version import build_date, ldflags, version_from_tag
from rdx.platform.target import Target

__all__ = ["Binary", "build_binary", "go_build_command"]

_SRC = "/src"
_OUT = "/out"


@dataclass(frozen=True, slots=True)
class Binary:
    path: Path
    target: Target
    version: str
    revision: str


def go_build_command(*, binary_name: str, flags: str) -> list[str]:
    return ["go", "build", "-o", f"{_OUT}/{binary_name}", "-ldflags", flags]


def build_binary(
    *,
    engine: ContainerEngine,
    config: Config,
    source: Source,
    out_dir: Path,
    target: Target,
    now: datetime | None = None,
) -> Result[Binary, PipelineError]:
    """Compile the exporter for ``target``.

    The binary lands in ``<out_dir>/<os>-<arch>/<binary_name>``.
    """
    version = version_from_tag(source.tag)
    if isinstance(version, Err):
        return version

    commit = source.commit()
    if isinstance(commit, Err):
        return Err(PipelineError.from_git(commit.error))

    target_dir = out_dir / target.slug
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return Err(PipelineError(kind="io_failed", message=f"cannot create {target_dir}: {e}"))

    flags = ldflags(
        version_package=config.build.version_package,
        version=version.value,
        revision=commit.value,
        date=build_date(now),
    )
    result = engine.run(
        image=config.build.builder_image,
        cmd=go_build_command(binary_name=config.project.binary_name, flags=flags),
        mounts=[Mount(source.tree, _SRC, read_only=True), Mount(target_dir, _OUT)],
        workdir=_SRC,
        # The bind-mounted checkout is owned by another uid; VCS stamping
        # would trip git's safe.directory check.
        env={**target.go_env(), "GOFLAGS": "-buildvcs=false"},
        user=config.build.builder_user,
        timeout=GO_BUILD_TIMEOUT_SECONDS,
    )
    if isinstance(result, Err):
        return Err(
            PipelineError(
                kind="build_failed",
                message=f"failed to build binary for {target}",
                hint=result.error.detail(),
            )
        )

    path = target_dir / config.project.binary_name
    if not path.is_file():
        return Err(
            PipelineError(
                kind="build_failed",
                message=f"go build succeeded but produced no binary at {path}",
            )
        )

    return Ok(Binary(path=path, target=target, version=version.value, revision=commit.value))
