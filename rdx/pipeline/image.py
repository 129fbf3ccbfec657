"""Runtime container image for the exporter.

The build context holds one overlay per platform under its
``TARGETPLATFORM`` path (``linux/amd64/usr/local/bin/...``), so a single
Containerfile serves both local single-platform builds and the
multi-platform manifest list pushed on release.
"""

from __future__ import annotations

import json
from pathlib import Path

from rdx.core.config import Config
from rdx.core.result import Err, Ok, Result
from rdx.pipeline.errors import PipelineError
from rdx.platform.target import Target

__all__ = [
    "CONTAINERFILE_NAME",
    "local_image_ref",
    "overlay_dir",
    "published_image_ref",
    "render_containerfile",
    "write_containerfile",
]

CONTAINERFILE_NAME = "Containerfile"


def overlay_dir(context: Path, target: Target) -> Path:
    return context.joinpath(*str(target).split("/"))


def published_image_ref(config: Config, version: str) -> str:
    """``ghcr.io/<github repository>:<version>``."""
    return f"{config.image.registry}/{config.project.github_repository}:{version}"


def local_image_ref(config: Config, version: str, target: Target) -> str:
    return f"{config.project.binary_name}:{version}-{target.slug}"


def render_containerfile(config: Config) -> str:
    image = config.image
    lines = [
        f"FROM {image.base_image}",
        "ARG TARGETPLATFORM",
        "COPY ${TARGETPLATFORM}/ /",
        f"ENTRYPOINT {json.dumps([config.project.binary_name])}",
    ]
    if image.default_args:
        lines.append(f"CMD {json.dumps(list(image.default_args))}")
    lines.append(f"EXPOSE {image.exposed_port}")
    return "\n".join(lines) + "\n"


def write_containerfile(context: Path, config: Config) -> Result[Path, PipelineError]:
    path = context / CONTAINERFILE_NAME
    try:
        context.mkdir(parents=True, exist_ok=True)
        path.write_text(render_containerfile(config), encoding="utf-8")
    except OSError as e:
        return Err(PipelineError(kind="io_failed", message=f"failed to write {path}: {e}"))
    return Ok(path)
