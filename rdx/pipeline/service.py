"""Exporter build and release pipeline.

One ``ExporterPipeline`` is bound to a tag. Its steps build on each other:

    binary -> overlay -> container
    binary -> archive
    archive (all targets) + overlay (linux targets) -> release

Binaries are built at most once per target per pipeline, so ``release``
compiles each platform once even though both the archive and the image need
it.

Work directory layout (default ``.rdx``):

    src/<tag>/                  shallow checkout
    build/<tag>/bin/<os>-<arch>/  go build output
    build/<tag>/context/        image build context (overlays + Containerfile)
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from rdx.core.config import Config
from rdx.core.result import Err, Ok, Result
from rdx.core.secret import Secret
from rdx.git.source import Source, checkout
from rdx.output.console import ConsoleProtocol
from rdx.pipeline import github
from rdx.pipeline.archive import build_archive, release_archive_name
from rdx.pipeline.binary import Binary, build_binary
from rdx.pipeline.checksums import write_checksums
from rdx.pipeline.engine import ContainerEngine
from rdx.pipeline.errors import PipelineError
from rdx.pipeline.image import (
    CONTAINERFILE_NAME,
    local_image_ref,
    overlay_dir,
    published_image_ref,
    write_containerfile,
)
from rdx.pipeline.overlay import DEFAULT_PREFIX, build_overlay
from rdx.pipeline.version import version_from_tag
from rdx.platform.target import Target, release_matrix

__all__ = ["ExporterPipeline", "ReleaseSummary"]


@dataclass(frozen=True, slots=True)
class ReleaseSummary:
    tag: str
    version: str
    archives: tuple[Path, ...]
    checksums: Path
    image: str
    published: bool


class ExporterPipeline:
    """Build steps for one release tag."""

    def __init__(
        self,
        *,
        config: Config,
        engine: ContainerEngine,
        console: ConsoleProtocol,
        tag: str,
        work_dir: Path,
        now: datetime | None = None,
    ) -> None:
        self._config = config
        self._engine = engine
        self._console = console
        self._tag = tag.strip()
        self._work_dir = work_dir
        self._now = now
        self._source: Source | None = None
        self._binaries: dict[Target, Binary] = {}
        self._default_target: Target | None = None

    @property
    def tag(self) -> str:
        return self._tag

    @property
    def build_dir(self) -> Path:
        return self._work_dir / "build" / self._tag

    def version(self) -> Result[str, PipelineError]:
        return version_from_tag(self._tag)

    def source(self) -> Result[Source, PipelineError]:
        if self._source is not None:
            return Ok(self._source)

        url = self._config.project.source_url
        self._console.info(f"checking out {self._tag} from {url}")
        result = checkout(url, self._tag, self._work_dir / "src" / self._tag)
        if isinstance(result, Err):
            return Err(PipelineError.from_git(result.error))
        self._source = result.value
        return result

    def default_target(self) -> Result[Target, PipelineError]:
        """The engine's own platform, used when no target is given."""
        if self._default_target is not None:
            return Ok(self._default_target)

        ok = self._engine.ensure_available()
        if isinstance(ok, Err):
            return ok

        result = self._engine.default_target()
        if isinstance(result, Ok):
            self._default_target = result.value
        return result

    def _resolve(self, target: Target | None) -> Result[Target, PipelineError]:
        if target is not None:
            return Ok(target)
        return self.default_target()

    def binary(self, target: Target | None = None) -> Result[Binary, PipelineError]:
        resolved = self._resolve(target)
        if isinstance(resolved, Err):
            return resolved
        target = resolved.value

        cached = self._binaries.get(target)
        if cached is not None:
            return Ok(cached)

        ok = self._engine.ensure_available()
        if isinstance(ok, Err):
            return ok

        source = self.source()
        if isinstance(source, Err):
            return source

        self._console.info(f"building {self._config.project.binary_name} for {target}")
        result = build_binary(
            engine=self._engine,
            config=self._config,
            source=source.value,
            out_dir=self.build_dir / "bin",
            target=target,
            now=self._now,
        )
        if isinstance(result, Ok):
            self._binaries[target] = result.value
        return result

    def overlay(
        self,
        dest: Path,
        target: Target | None = None,
        prefix: str = "",
    ) -> Result[Path, PipelineError]:
        binary = self.binary(target)
        if isinstance(binary, Err):
            return Err(binary.error.within("failed to get binary"))

        return build_overlay(
            binary.value,
            dest,
            binary_name=self._config.project.binary_name,
            prefix=prefix or self._config.image.prefix or DEFAULT_PREFIX,
        )

    def _image_target(self, target: Target | None) -> Result[Target, PipelineError]:
        resolved = self._resolve(target)
        if isinstance(resolved, Err):
            return resolved

        target = resolved.value
        if target.os != self._config.release.image_os:
            return Err(
                PipelineError(
                    kind="invalid_platform",
                    message=f"container images are only built for {self._config.release.image_os}, got {target}",
                )
            )
        return Ok(target)

    def _context_for(self, targets: list[Target]) -> Result[Path, PipelineError]:
        """Recreate the image build context so no stale overlay leaks in."""
        context = self.build_dir / "context"
        try:
            if context.exists():
                shutil.rmtree(context)
        except OSError as e:
            return Err(PipelineError(kind="io_failed", message=f"failed to reset {context}: {e}"))

        for target in targets:
            overlay = self.overlay(overlay_dir(context, target), target)
            if isinstance(overlay, Err):
                return Err(overlay.error.within(f"failed to get overlay for platform {target}"))

        containerfile = write_containerfile(context, self._config)
        if isinstance(containerfile, Err):
            return containerfile
        return Ok(context)

    def container(self, target: Target | None = None) -> Result[str, PipelineError]:
        """Build the runtime image for one linux target into the local store."""
        image_target = self._image_target(target)
        if isinstance(image_target, Err):
            return image_target

        version = self.version()
        if isinstance(version, Err):
            return version

        context = self._context_for([image_target.value])
        if isinstance(context, Err):
            return context

        ref = local_image_ref(self._config, version.value, image_target.value)
        self._console.info(f"building image {ref}")
        return self._engine.build_image(
            context=context.value,
            containerfile=context.value / CONTAINERFILE_NAME,
            target=image_target.value,
            ref=ref,
        )

    def archive(self, out: Path, target: Target | None = None) -> Result[Path, PipelineError]:
        binary = self.binary(target)
        if isinstance(binary, Err):
            return Err(binary.error.within("failed to get binary"))

        source = self.source()
        if isinstance(source, Err):
            return source

        return build_archive(
            source=source.value,
            binary=binary.value,
            out=out,
            binary_name=self._config.project.binary_name,
            extra_files=self._config.release.archive_files,
        )

    def _preflight(self, token: Secret | None, dry_run: bool) -> Result[None, PipelineError]:
        ok = self._engine.ensure_available()
        if isinstance(ok, Err):
            return ok
        if dry_run:
            return Ok(None)

        if token is None or not token:
            return Err(
                PipelineError(
                    kind="invalid_input",
                    message="a GitHub token is required to publish",
                    hint="Set GITHUB_TOKEN or pass --dry-run",
                )
            )
        return github.ensure_gh_available()

    def release(
        self,
        *,
        out_dir: Path,
        token: Secret | None,
        dry_run: bool = False,
    ) -> Result[ReleaseSummary, PipelineError]:
        """Archive every target, build images, checksum, publish.

        With ``dry_run`` the images are built locally per platform and
        nothing is pushed or released.
        """
        version = self.version()
        if isinstance(version, Err):
            return version

        ok = self._preflight(token, dry_run)
        if isinstance(ok, Err):
            return ok

        release = self._config.release
        binary_name = self._config.project.binary_name

        self._console.header(f"Archives ({self._tag})")
        archives: list[Path] = []
        for target in release_matrix(release.oses, release.arches):
            out = out_dir / release_archive_name(binary_name, target.os, target.arch)
            archive = self.archive(out, target)
            if isinstance(archive, Err):
                return Err(archive.error.within(f"failed to get archive for platform {target}"))
            self._console.success(out.name)
            archives.append(archive.value)

        self._console.header("Container images")
        image_targets = release_matrix((release.image_os,), release.arches)
        context = self._context_for(image_targets)
        if isinstance(context, Err):
            return context

        archive_names = sorted(p.name for p in archives)
        checksums = write_checksums(out_dir, archive_names, release.checksums_name)
        if isinstance(checksums, Err):
            return Err(checksums.error.within("failed to compute checksums"))

        image = published_image_ref(self._config, version.value)
        containerfile = context.value / CONTAINERFILE_NAME

        if dry_run or token is None:
            for target in image_targets:
                ref = local_image_ref(self._config, version.value, target)
                built = self._engine.build_image(
                    context=context.value,
                    containerfile=containerfile,
                    target=target,
                    ref=ref,
                )
                if isinstance(built, Err):
                    return Err(built.error.within(f"failed to get container for platform {target}"))
                self._console.success(ref)
            self._console.warning("dry run: skipping image publish and GitHub release")
            return Ok(
                ReleaseSummary(
                    tag=self._tag,
                    version=version.value,
                    archives=tuple(archives),
                    checksums=checksums.value,
                    image=image,
                    published=False,
                )
            )

        login = self._engine.login(
            registry=self._config.image.registry,
            username=self._config.image.registry_username,
            password=token,
        )
        if isinstance(login, Err):
            return login

        published = self._engine.publish_manifest(
            context=context.value,
            containerfile=containerfile,
            targets=image_targets,
            ref=image,
        )
        if isinstance(published, Err):
            return published
        self._console.success(image)

        self._console.header("GitHub release")
        repository = self._config.project.github_repository
        created = github.create_release(cwd=out_dir, repository=repository, token=token, tag=self._tag)
        if isinstance(created, Err):
            return created

        uploaded = github.upload_assets(
            cwd=out_dir,
            repository=repository,
            token=token,
            tag=self._tag,
            assets=[*archive_names, release.checksums_name],
        )
        if isinstance(uploaded, Err):
            return uploaded
        self._console.success(f"released {self._tag} on {repository}")

        return Ok(
            ReleaseSummary(
                tag=self._tag,
                version=version.value,
                archives=tuple(archives),
                checksums=checksums.value,
                image=image,
                published=True,
            )
        )
