from __future__ import annotations

from pathlib import Path

import pytest

from rdx.core.result import Err, Ok, Result
from rdx.git import source as source_mod
from rdx.git.source import Source, checkout
from rdx.platform.process import ProcessError
from rdx.test.fakes import FakeRunner, process_error

URL = "https://github.com/camptocamp/rds_exporter.git"
SHA = "0123456789abcdef0123456789abcdef01234567"


@pytest.fixture(autouse=True)
def _git_on_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(source_mod.shutil, "which", lambda name: f"/usr/bin/{name}")


def test_fresh_checkout_clones_tag_shallow(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    runner = FakeRunner()
    monkeypatch.setattr(source_mod, "run_process", runner)
    dest = tmp_path / "src" / "v0.10.0"

    result = checkout(URL, "v0.10.0", dest)

    assert result == Ok(Source(url=URL, tag="v0.10.0", tree=dest))
    clone = runner.commands[0]
    assert clone[:3] == ["git", "-c", "advice.detachedHead=false"]
    assert clone[3:] == ["clone", "--quiet", "--depth", "1", "--branch", "v0.10.0", URL, str(dest)]
    assert runner.calls[0].cwd == dest.parent
    assert dest.parent.is_dir()


def test_existing_checkout_of_same_tag_is_reused(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    dest = tmp_path / "v0.10.0"
    (dest / ".git").mkdir(parents=True)

    def respond(cmd: list[str]) -> Result[str, ProcessError]:
        if "describe" in cmd:
            return Ok("v0.10.0\n")
        return process_error(cmd)

    runner = FakeRunner(respond)
    monkeypatch.setattr(source_mod, "run_process", runner)

    result = checkout(URL, "v0.10.0", dest)

    assert isinstance(result, Ok)
    assert not any("clone" in cmd for cmd in runner.commands)


def test_existing_checkout_of_other_tag_is_replaced(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    dest = tmp_path / "v0.10.0"
    (dest / ".git").mkdir(parents=True)
    (dest / "stale.txt").write_text("old", encoding="utf-8")

    def respond(cmd: list[str]) -> Result[str, ProcessError]:
        if "describe" in cmd:
            return Ok("v0.9.0\n")
        return Ok("")

    runner = FakeRunner(respond)
    monkeypatch.setattr(source_mod, "run_process", runner)

    result = checkout(URL, "v0.10.0", dest)

    assert isinstance(result, Ok)
    assert not (dest / "stale.txt").exists()
    assert any("clone" in cmd for cmd in runner.commands)


def test_non_git_directory_is_left_alone(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    dest = tmp_path / "v0.10.0"
    dest.mkdir()
    (dest / "keep.txt").write_text("mine", encoding="utf-8")
    monkeypatch.setattr(source_mod, "run_process", FakeRunner())

    result = checkout(URL, "v0.10.0", dest)

    assert isinstance(result, Err)
    assert result.error.kind == "io_failed"
    assert (dest / "keep.txt").exists()


def test_unwritable_parent_is_io_error(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    runner = FakeRunner()
    monkeypatch.setattr(source_mod, "run_process", runner)
    blocker = tmp_path / "work"
    blocker.write_text("not a directory", encoding="utf-8")

    result = checkout(URL, "v0.10.0", blocker / "src" / "v0.10.0")

    assert isinstance(result, Err)
    assert result.error.kind == "io_failed"
    assert runner.calls == []


def test_stale_checkout_removal_failure_is_io_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    dest = tmp_path / "v0.10.0"
    (dest / ".git").mkdir(parents=True)

    def respond(cmd: list[str]) -> Result[str, ProcessError]:
        if "describe" in cmd:
            return Ok("v0.9.0\n")
        return Ok("")

    def deny(path: Path) -> None:
        raise PermissionError(13, "Permission denied", str(path))

    runner = FakeRunner(respond)
    monkeypatch.setattr(source_mod, "run_process", runner)
    monkeypatch.setattr(source_mod.shutil, "rmtree", deny)

    result = checkout(URL, "v0.10.0", dest)

    assert isinstance(result, Err)
    assert result.error.kind == "io_failed"
    assert "Permission denied" in result.error.message
    assert not any("clone" in cmd for cmd in runner.commands)


def test_clone_failure(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    runner = FakeRunner(
        lambda cmd: process_error(cmd, stderr="fatal: Remote branch v9.9.9 not found in upstream origin")
    )
    monkeypatch.setattr(source_mod, "run_process", runner)

    result = checkout(URL, "v9.9.9", tmp_path / "v9.9.9")

    assert isinstance(result, Err)
    assert result.error.kind == "checkout_failed"
    assert "v9.9.9" in result.error.message
    assert result.error.hint is not None and "not found" in result.error.hint


def test_empty_tag_rejected(tmp_path: Path) -> None:
    result = checkout(URL, "  ", tmp_path / "x")

    assert isinstance(result, Err)
    assert result.error.kind == "invalid_tag"


def test_git_missing(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(source_mod.shutil, "which", lambda name: None)

    result = checkout(URL, "v0.10.0", tmp_path / "x")

    assert isinstance(result, Err)
    assert result.error.kind == "tool_missing"


class TestCommit:
    def test_returns_hash(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setattr(source_mod, "run_process", FakeRunner(lambda cmd: Ok(SHA + "\n")))

        assert Source(URL, "v1", tmp_path).commit() == Ok(SHA)

    def test_accepts_sha256_hash(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        sha256 = "0123456789abcdef" * 4
        monkeypatch.setattr(source_mod, "run_process", FakeRunner(lambda cmd: Ok(sha256 + "\n")))

        assert Source(URL, "v1", tmp_path).commit() == Ok(sha256)

    def test_rejects_truncated_hash(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setattr(source_mod, "run_process", FakeRunner(lambda cmd: Ok(SHA[:12] + "\n")))

        assert isinstance(Source(URL, "v1", tmp_path).commit(), Err)

    def test_failure(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setattr(source_mod, "run_process", FakeRunner(lambda cmd: process_error(cmd)))

        result = Source(URL, "v1", tmp_path).commit()

        assert isinstance(result, Err)
        assert result.error.message == "failed to get commit hash"

    def test_garbage_output(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setattr(source_mod, "run_process", FakeRunner(lambda cmd: Ok("HEAD\n")))

        assert isinstance(Source(URL, "v1", tmp_path).commit(), Err)
