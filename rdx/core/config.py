"""Typed configuration loading and access.

All settings have defaults matching the upstream prometheus-rds-exporter
release, so ``rdx.toml`` is optional and usually only overrides a few keys:

    [project]
    github_repository = "my-fork/prometheus-rds-exporter"

    [build]
    engine = "podman"
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_int, get_str, get_str_list, get_table

__all__ = [
    "BuildConfig",
    "Config",
    "ConfigError",
    "ImageConfig",
    "ProjectConfig",
    "ReleaseConfig",
    "CONFIG_FILENAME",
    "ENGINE_ENV_VAR",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILENAME = "rdx.toml"
ENGINE_ENV_VAR = "RDX_ENGINE"

SUPPORTED_ENGINES = ("docker", "podman")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ProjectConfig:
    binary_name: str = "prometheus-rds-exporter"
    source_url: str = "https://github.com/camptocamp/rds_exporter.git"
    github_repository: str = "camptocamp/prometheus-rds-exporter"


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """How binaries are compiled.

    Attributes:
        engine: Container engine CLI (docker or podman).
        builder_image: Image providing the Go toolchain.
        builder_user: User the build container runs as; the source tree is
            bind-mounted, so it must be able to write there.
        version_package: Go package receiving Version/Revision/BuildDate.
    """

    engine: str = "docker"
    builder_image: str = "registry.access.redhat.com/ubi9/go-toolset:latest"
    builder_user: str = "0"
    version_package: str = "github.com/prometheus/common/version"


@dataclass(frozen=True, slots=True)
class ImageConfig:
    base_image: str = "registry.access.redhat.com/ubi9/ubi-micro:latest"
    prefix: str = "/usr/local"
    default_args: tuple[str, ...] = ("--config.file=/etc/rds_exporter/config.yml",)
    exposed_port: int = 9042
    registry: str = "ghcr.io"
    registry_username: str = "dagger"


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    oses: tuple[str, ...] = ("linux", "darwin")
    arches: tuple[str, ...] = ("amd64", "arm64")
    image_os: str = "linux"
    archive_files: tuple[str, ...] = ("LICENSE", "CHANGELOG.md", "README.md")
    checksums_name: str = "checksums.txt"


@dataclass(frozen=True, slots=True)
class Config:
    """Complete rdx configuration."""

    project: ProjectConfig = field(default_factory=ProjectConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    image: ImageConfig = field(default_factory=ImageConfig)
    release: ReleaseConfig = field(default_factory=ReleaseConfig)

    @classmethod
    def from_dict(cls, data: StrDict) -> Config:
        """Build a Config from a parsed TOML table.

        Raises:
            ValueError: If a value is present but invalid.
        """
        project = get_table(data, "project")
        build = get_table(data, "build")
        image = get_table(data, "image")
        release = get_table(data, "release")

        d_project = ProjectConfig()
        d_build = BuildConfig()
        d_image = ImageConfig()
        d_release = ReleaseConfig()

        engine = get_str(build, "engine") or d_build.engine
        if engine not in SUPPORTED_ENGINES:
            raise ValueError(f"build.engine must be one of {', '.join(SUPPORTED_ENGINES)}")

        port = get_int(image, "exposed_port")
        if port is not None and not 0 < port < 65536:
            raise ValueError(f"image.exposed_port out of range: {port}")

        default_args = get_str_list(image, "default_args")
        if default_args is None and "default_args" in image:
            raise ValueError("image.default_args must be a list of strings")

        return cls(
            project=ProjectConfig(
                binary_name=get_str(project, "binary_name") or d_project.binary_name,
                source_url=get_str(project, "source_url") or d_project.source_url,
                github_repository=get_str(project, "github_repository")
                or d_project.github_repository,
            ),
            build=BuildConfig(
                engine=engine,
                builder_image=get_str(build, "builder_image") or d_build.builder_image,
                builder_user=get_str(build, "builder_user") or d_build.builder_user,
                version_package=get_str(build, "version_package") or d_build.version_package,
            ),
            image=ImageConfig(
                base_image=get_str(image, "base_image") or d_image.base_image,
                prefix=get_str(image, "prefix") or d_image.prefix,
                default_args=default_args if default_args is not None else d_image.default_args,
                exposed_port=port if port is not None else d_image.exposed_port,
                registry=get_str(image, "registry") or d_image.registry,
                registry_username=get_str(image, "registry_username")
                or d_image.registry_username,
            ),
            release=ReleaseConfig(
                oses=get_str_list(release, "oses") or d_release.oses,
                arches=get_str_list(release, "arches") or d_release.arches,
                image_os=get_str(release, "image_os") or d_release.image_os,
                archive_files=get_str_list(release, "archive_files") or d_release.archive_files,
                checksums_name=get_str(release, "checksums_name") or d_release.checksums_name,
            ),
        )

    def with_env_overrides(self, environ: dict[str, str] | None = None) -> Config:
        """Apply RDX_ENGINE from the environment, if set and supported."""
        env = os.environ if environ is None else environ
        engine = env.get(ENGINE_ENV_VAR, "").strip()
        if engine in SUPPORTED_ENGINES:
            return replace(self, build=replace(self.build, engine=engine))
        return self


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to rdx.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config if the file exists, otherwise return defaults.

    A file that exists but is invalid is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
