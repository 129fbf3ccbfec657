"""Build targets in Go naming (``os/arch[/variant]``).

Targets name both the GOOS/GOARCH pair handed to ``go build`` and the
``--platform`` of container images, so they use Go's vocabulary rather than
the host's (``darwin`` not ``macos``, ``amd64`` not ``x86_64``).
"""

from __future__ import annotations

from dataclasses import dataclass

from rdx.core.result import Err, Ok, Result

__all__ = [
    "Target",
    "TargetError",
    "parse_target",
    "release_matrix",
]


@dataclass(frozen=True, slots=True)
class TargetError:
    value: str
    message: str


@dataclass(frozen=True, slots=True, order=True)
class Target:
    """A GOOS/GOARCH pair, optionally with an ARM variant."""

    os: str
    arch: str
    variant: str | None = None

    def __str__(self) -> str:
        if self.variant:
            return f"{self.os}/{self.arch}/{self.variant}"
        return f"{self.os}/{self.arch}"

    @property
    def slug(self) -> str:
        """Filesystem/asset-safe form, e.g. ``linux-arm64``."""
        return str(self).replace("/", "-")

    def go_env(self) -> dict[str, str]:
        env = {"GOOS": self.os, "GOARCH": self.arch}
        if self.variant and self.arch == "arm":
            env["GOARM"] = self.variant.removeprefix("v")
        return env


def parse_target(value: str) -> Result[Target, TargetError]:
    """Parse ``os/arch`` or ``os/arch/variant``."""
    parts = value.strip().split("/")
    if len(parts) not in (2, 3) or any(not p.strip() for p in parts):
        return Err(TargetError(value=value, message=f"invalid platform '{value}' (expected os/arch)"))

    os_name, arch = parts[0].strip(), parts[1].strip()
    variant = parts[2].strip() if len(parts) == 3 else None
    return Ok(Target(os=os_name, arch=arch, variant=variant))


def release_matrix(oses: tuple[str, ...], arches: tuple[str, ...]) -> list[Target]:
    """All os/arch combinations, grouped by os."""
    return [Target(os=o, arch=a) for o in oses for a in arches]
