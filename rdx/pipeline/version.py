"""Version strings stamped into the exporter binary."""

from __future__ import annotations

from datetime import datetime

from rdx.core.result import Err, Ok, Result
from rdx.pipeline.errors import PipelineError

__all__ = ["build_date", "ldflags", "version_from_tag"]


def version_from_tag(tag: str) -> Result[str, PipelineError]:
    """``v1.2.3`` -> ``1.2.3``; tags without the prefix pass through."""
    tag = tag.strip()
    version = tag.removeprefix("v")
    if not version:
        return Err(PipelineError(kind="invalid_tag", message=f"invalid tag: {tag!r}"))
    return Ok(version)


def build_date(now: datetime | None = None) -> str:
    """Local time as ``2024-07-01 14:03:59 +02:00``.

    Same layout the exporter has always printed in ``--version``.
    """
    moment = (now or datetime.now()).astimezone()
    offset = moment.strftime("%z")
    return f"{moment:%Y-%m-%d %H:%M:%S} {offset[:3]}:{offset[3:]}"


def ldflags(*, version_package: str, version: str, revision: str, date: str) -> str:
    """Linker flags: stripped binary plus the prometheus/common version vars."""
    return " ".join(
        [
            "-s -w",
            f"-X '{version_package}.Version={version}'",
            f"-X '{version_package}.Revision={revision}'",
            f"-X '{version_package}.BuildDate={date}'",
        ]
    )
