"""Container engine CLI wrapper.

All container work (running the Go toolchain, building and pushing images,
registry login) is delegated to ``docker`` (with buildx) or ``podman``.
The two differ only in how multi-platform images are pushed:

- docker: ``buildx build --platform a,b --push``
- podman: ``build --platform a,b --manifest ref`` then ``manifest push --all``
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path

from rdx.core.result import Err, Ok, Result
from rdx.core.secret import Secret
from rdx.pipeline.errors import PipelineError, PipelineErrorKind
from rdx.pipeline.timeouts import ENGINE_TIMEOUT_SECONDS, IMAGE_BUILD_TIMEOUT_SECONDS
from rdx.platform.process import ProcessError
from rdx.platform.process import run as run_process
from rdx.platform.target import Target, parse_target

__all__ = ["ContainerEngine", "Mount"]


@dataclass(frozen=True, slots=True)
class Mount:
    host: Path
    container: str
    read_only: bool = False

    def as_arg(self) -> str:
        spec = f"{self.host.resolve()}:{self.container}"
        return f"{spec}:ro" if self.read_only else spec


def _fail(kind: PipelineErrorKind, message: str, error: ProcessError) -> Err[PipelineError]:
    return Err(PipelineError(kind=kind, message=message, hint=error.detail()))


@dataclass(frozen=True, slots=True)
class ContainerEngine:
    """A container engine CLI invoked from ``cwd``.

    Attributes:
        cli: ``docker`` or ``podman``.
        cwd: Directory commands run from.
    """

    cli: str
    cwd: Path

    def ensure_available(self) -> Result[None, PipelineError]:
        if shutil.which(self.cli) is None:
            return Err(
                PipelineError(
                    kind="tool_missing",
                    message=f"{self.cli}: missing",
                    hint="Install docker (with buildx) or podman, or set build.engine in rdx.toml",
                )
            )
        return Ok(None)

    def default_target(self) -> Result[Target, PipelineError]:
        """Platform the engine builds and runs for when none is requested.

        This is the engine server's platform, not the host's: docker and
        podman on macOS run a linux VM.
        """
        if self.cli == "docker":
            cmd = ["docker", "version", "--format", "{{.Server.Os}}/{{.Server.Arch}}"]
        else:
            cmd = [self.cli, "info", "--format", "{{.Version.OsArch}}"]

        result = run_process(cmd, cwd=self.cwd, timeout=ENGINE_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return _fail("tool_missing", f"cannot query {self.cli} platform", result.error)

        value = result.value.strip()
        target = parse_target(value)
        if isinstance(target, Err):
            return Err(
                PipelineError(
                    kind="invalid_platform",
                    message=f"{self.cli} reported an unexpected platform: {value!r}",
                )
            )
        return Ok(target.value)

    def run(
        self,
        *,
        image: str,
        cmd: list[str],
        mounts: list[Mount],
        workdir: str,
        env: dict[str, str] | None = None,
        user: str | None = None,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        """Run ``cmd`` in a throwaway container and return its stdout."""
        args = [self.cli, "run", "--rm"]
        if user:
            args += ["--user", user]
        for key, value in sorted((env or {}).items()):
            args += ["--env", f"{key}={value}"]
        for mount in mounts:
            args += ["--volume", mount.as_arg()]
        args += ["--workdir", workdir, image, *cmd]
        return run_process(args, cwd=self.cwd, timeout=timeout)

    def build_image(
        self,
        *,
        context: Path,
        containerfile: Path,
        target: Target,
        ref: str,
    ) -> Result[str, PipelineError]:
        """Build a single-platform image into the local store."""
        if self.cli == "docker":
            cmd = ["docker", "buildx", "build", "--load"]
        else:
            cmd = [self.cli, "build"]
        cmd += ["--platform", str(target), "--file", str(containerfile), "--tag", ref, str(context)]

        result = run_process(cmd, cwd=self.cwd, timeout=IMAGE_BUILD_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return _fail("image_failed", f"failed to build image {ref} for {target}", result.error)
        return Ok(ref)

    def publish_manifest(
        self,
        *,
        context: Path,
        containerfile: Path,
        targets: list[Target],
        ref: str,
    ) -> Result[str, PipelineError]:
        """Build every target and push them as one manifest list under ``ref``."""
        platforms = ",".join(str(t) for t in targets)

        if self.cli == "docker":
            result = run_process(
                [
                    "docker",
                    "buildx",
                    "build",
                    "--push",
                    "--platform",
                    platforms,
                    "--file",
                    str(containerfile),
                    "--tag",
                    ref,
                    str(context),
                ],
                cwd=self.cwd,
                timeout=IMAGE_BUILD_TIMEOUT_SECONDS,
            )
            if isinstance(result, Err):
                return Err(
                    PipelineError(
                        kind="publish_failed",
                        message="failed to publish container image manifest list",
                        hint=f"{result.error.detail()}; multi-platform pushes need a buildx builder"
                        " with the docker-container driver: docker buildx create --use",
                    )
                )
            return Ok(ref)

        # A stale local manifest with the same name would be appended to.
        run_process([self.cli, "manifest", "rm", ref], cwd=self.cwd, timeout=ENGINE_TIMEOUT_SECONDS)
        built = run_process(
            [
                self.cli,
                "build",
                "--platform",
                platforms,
                "--manifest",
                ref,
                "--file",
                str(containerfile),
                str(context),
            ],
            cwd=self.cwd,
            timeout=IMAGE_BUILD_TIMEOUT_SECONDS,
        )
        if isinstance(built, Err):
            return _fail("image_failed", f"failed to build manifest list {ref}", built.error)

        pushed = run_process(
            [self.cli, "manifest", "push", "--all", ref, f"docker://{ref}"],
            cwd=self.cwd,
            timeout=IMAGE_BUILD_TIMEOUT_SECONDS,
        )
        if isinstance(pushed, Err):
            return _fail("publish_failed", "failed to publish container image manifest list", pushed.error)
        return Ok(ref)

    def login(self, *, registry: str, username: str, password: Secret) -> Result[None, PipelineError]:
        """Log in to ``registry``; the password goes through stdin."""
        result = run_process(
            [self.cli, "login", registry, "--username", username, "--password-stdin"],
            cwd=self.cwd,
            timeout=ENGINE_TIMEOUT_SECONDS,
            input=password.reveal(),
        )
        if isinstance(result, Err):
            return _fail("publish_failed", f"failed to log in to {registry}", result.error)
        return Ok(None)
