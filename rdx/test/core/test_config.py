"""Tests for rdx.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from rdx.core.config import (
    BuildConfig,
    Config,
    ImageConfig,
    ProjectConfig,
    ReleaseConfig,
    load_config,
    load_config_or_default,
)
from rdx.core.result import Err, Ok


class TestDefaults:
    def test_project(self) -> None:
        project = ProjectConfig()
        assert project.binary_name == "prometheus-rds-exporter"
        assert project.github_repository == "camptocamp/prometheus-rds-exporter"
        assert project.source_url == "https://github.com/camptocamp/rds_exporter.git"

    def test_build(self) -> None:
        build = BuildConfig()
        assert build.engine == "docker"
        assert build.version_package == "github.com/prometheus/common/version"

    def test_image(self) -> None:
        image = ImageConfig()
        assert image.exposed_port == 9042
        assert image.default_args == ("--config.file=/etc/rds_exporter/config.yml",)
        assert image.registry == "ghcr.io"
        assert image.registry_username == "dagger"
        assert image.prefix == "/usr/local"

    def test_release_matrix_is_two_by_two(self) -> None:
        release = ReleaseConfig()
        assert release.oses == ("linux", "darwin")
        assert release.arches == ("amd64", "arm64")
        assert release.archive_files == ("LICENSE", "CHANGELOG.md", "README.md")
        assert release.checksums_name == "checksums.txt"

    def test_frozen(self) -> None:
        config = Config()
        with pytest.raises(AttributeError):
            config.project = ProjectConfig()  # type: ignore[misc]


class TestFromDict:
    def test_empty_uses_defaults(self) -> None:
        assert Config.from_dict({}) == Config()

    def test_overrides(self) -> None:
        config = Config.from_dict(
            {
                "project": {"github_repository": "acme/exporter"},
                "build": {"engine": "podman"},
                "image": {"exposed_port": 9100, "default_args": []},
                "release": {"oses": ["linux"], "arches": ["arm64"]},
            }
        )
        assert config.project.github_repository == "acme/exporter"
        assert config.project.binary_name == "prometheus-rds-exporter"
        assert config.build.engine == "podman"
        assert config.image.exposed_port == 9100
        assert config.image.default_args == ()
        assert config.release.oses == ("linux",)
        assert config.release.arches == ("arm64",)

    def test_unknown_engine_rejected(self) -> None:
        with pytest.raises(ValueError, match="build.engine"):
            Config.from_dict({"build": {"engine": "lxc"}})

    def test_port_out_of_range_rejected(self) -> None:
        with pytest.raises(ValueError, match="exposed_port"):
            Config.from_dict({"image": {"exposed_port": 70000}})

    def test_bad_default_args_rejected(self) -> None:
        with pytest.raises(ValueError, match="default_args"):
            Config.from_dict({"image": {"default_args": [1, 2]}})


class TestEnvOverrides:
    def test_engine_from_env(self) -> None:
        config = Config().with_env_overrides({"RDX_ENGINE": "podman"})
        assert config.build.engine == "podman"

    def test_unsupported_engine_ignored(self) -> None:
        config = Config().with_env_overrides({"RDX_ENGINE": "nerdctl"})
        assert config.build.engine == "docker"


class TestLoadConfig:
    def test_valid_file(self, tmp_path: Path) -> None:
        path = tmp_path / "rdx.toml"
        path.write_text('[project]\nbinary_name = "rds-exporter"\n', encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Ok)
        assert result.value.project.binary_name == "rds-exporter"

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / "missing.toml")

        assert isinstance(result, Err)
        assert "not found" in result.error.message

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "rdx.toml"
        path.write_text("[project\n", encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message
        assert result.error.path == path

    def test_invalid_structure(self, tmp_path: Path) -> None:
        path = tmp_path / "rdx.toml"
        path.write_text('[build]\nengine = "lxc"\n', encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Err)
        assert "Invalid config structure" in result.error.message

    def test_or_default_without_file(self, tmp_path: Path) -> None:
        assert load_config_or_default(tmp_path / "rdx.toml") == Ok(Config())

    def test_or_default_keeps_errors(self, tmp_path: Path) -> None:
        path = tmp_path / "rdx.toml"
        path.write_text("not toml = = =", encoding="utf-8")

        assert isinstance(load_config_or_default(path), Err)
