"""Source checkout of a release tag.

The exporter is always built from a tag, never from a branch: the checkout
is shallow and detached, and reused across commands when it already points
at the requested tag.

Usage:
    match checkout(url, "v0.10.0", work_dir / "src" / "v0.10.0"):
        case Ok(source):
            commit = source.commit()
        case Err(e):
            print(f"checkout failed: {e.message}")
"""

from __future__ import annotations

import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from rdx.core.result import Err, Ok, Result
from rdx.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 5 * 60.0

# SHA-1 or SHA-256 object names
_COMMIT_RE = re.compile(r"[0-9a-f]{40}|[0-9a-f]{64}")

__all__ = ["GitError", "GitErrorKind", "Source", "checkout", "ensure_git_available"]

GitErrorKind = Literal["invalid_tag", "tool_missing", "checkout_failed", "io_failed"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a checkout or git query.

    Attributes:
        kind: What failed
        message: Error message
        hint: Tool output or a suggested fix
    """

    kind: GitErrorKind
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class Source:
    """A checked-out tag.

    Attributes:
        url: Remote the tag was fetched from.
        tag: The git tag (e.g. ``v0.10.0``).
        tree: Directory holding the working tree.
    """

    url: str
    tag: str
    tree: Path

    def commit(self) -> Result[str, GitError]:
        """Full hash of the checked-out commit."""
        result = run_process(["git", "rev-parse", "HEAD"], cwd=self.tree, timeout=_GIT_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(
                GitError(
                    kind="checkout_failed",
                    message="failed to get commit hash",
                    hint=result.error.detail(),
                )
            )

        sha = result.value.strip()
        if not _COMMIT_RE.fullmatch(sha):
            return Err(GitError(kind="checkout_failed", message=f"unexpected commit hash: {sha!r}"))
        return Ok(sha)


def ensure_git_available() -> Result[None, GitError]:
    if shutil.which("git") is None:
        return Err(
            GitError(
                kind="tool_missing",
                message="git: missing",
                hint="Install git: https://git-scm.com/downloads",
            )
        )
    return Ok(None)


def _checked_out_tag(dest: Path) -> str | None:
    result = run_process(
        ["git", "describe", "--tags", "--exact-match", "HEAD"],
        cwd=dest,
        timeout=_GIT_TIMEOUT_SECONDS,
    )
    if isinstance(result, Err):
        return None
    return result.value.strip() or None


def checkout(url: str, tag: str, dest: Path) -> Result[Source, GitError]:
    """Shallow-clone ``tag`` from ``url`` into ``dest``.

    An existing checkout of the same tag is reused. An existing checkout of
    another revision is replaced. Any other existing content is left alone
    and reported as an error.
    """
    tag = tag.strip()
    if not tag:
        return Err(GitError(kind="invalid_tag", message="tag must not be empty"))

    ok = ensure_git_available()
    if isinstance(ok, Err):
        return ok

    if dest.exists():
        if not (dest / ".git").exists():
            return Err(
                GitError(
                    kind="io_failed",
                    message=f"checkout directory is not a git checkout: {dest}",
                    hint="Remove it or choose another --work-dir",
                )
            )
        if _checked_out_tag(dest) == tag:
            return Ok(Source(url=url, tag=tag, tree=dest))

    try:
        if dest.exists():
            shutil.rmtree(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return Err(
            GitError(
                kind="io_failed",
                message=f"cannot prepare checkout directory {dest}: {e}",
                hint="Check permissions or choose another --work-dir",
            )
        )

    result = run_process(
        [
            "git",
            "-c",
            "advice.detachedHead=false",
            "clone",
            "--quiet",
            "--depth",
            "1",
            "--branch",
            tag,
            url,
            str(dest),
        ],
        cwd=dest.parent,
        timeout=_GIT_NETWORK_TIMEOUT_SECONDS,
    )
    if isinstance(result, Err):
        return Err(
            GitError(
                kind="checkout_failed",
                message=f"failed to check out {tag} from {url}",
                hint=result.error.detail(),
            )
        )

    return Ok(Source(url=url, tag=tag, tree=dest))
