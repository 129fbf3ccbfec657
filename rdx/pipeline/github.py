"""GitHub release creation through the gh CLI.

The repository and token are passed as ``GH_REPO``/``GH_TOKEN`` so gh never
depends on the caller's local auth state or on a git remote.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from time import sleep

from rdx.core.result import Err, Ok, Result
from rdx.core.secret import Secret
from rdx.pipeline.errors import PipelineError
from rdx.pipeline.timeouts import (
    GH_RETRY_ATTEMPTS,
    GH_RETRY_DELAY_SECONDS,
    GH_TIMEOUT_SECONDS,
    GH_UPLOAD_TIMEOUT_SECONDS,
)
from rdx.platform.process import ProcessError, merged_env
from rdx.platform.process import run as run_process

__all__ = ["create_release", "ensure_gh_available", "gh_env", "upload_assets"]


def _is_transient_gh_error(error: ProcessError) -> bool:
    text = f"{error.stderr}\n{error.stdout}".lower()
    markers = (
        "timed out",
        "timeout",
        "connection reset",
        "connection refused",
        "temporarily unavailable",
        "service unavailable",
        "bad gateway",
        "gateway timeout",
        "http 429",
        "http 500",
        "http 502",
        "http 503",
        "http 504",
    )
    return any(marker in text for marker in markers)


def ensure_gh_available() -> Result[None, PipelineError]:
    if shutil.which("gh") is None:
        return Err(
            PipelineError(
                kind="tool_missing",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


def gh_env(*, repository: str, token: Secret) -> dict[str, str]:
    return merged_env({"GH_REPO": repository, "GH_TOKEN": token.reveal()})


def create_release(
    *,
    cwd: Path,
    repository: str,
    token: Secret,
    tag: str,
) -> Result[None, PipelineError]:
    """``gh release create --title <tag> <tag>``.

    Not retried: a timeout may still have created the release.
    """
    result = run_process(
        ["gh", "release", "create", "--title", tag, tag],
        cwd=cwd,
        env=gh_env(repository=repository, token=token),
        timeout=GH_TIMEOUT_SECONDS,
    )
    if isinstance(result, Err):
        return Err(
            PipelineError(
                kind="release_failed",
                message=f"failed to create release {tag} on {repository}",
                hint=result.error.detail(),
            )
        )
    return Ok(None)


def upload_assets(
    *,
    cwd: Path,
    repository: str,
    token: Secret,
    tag: str,
    assets: list[str],
    retry_attempts: int = GH_RETRY_ATTEMPTS,
) -> Result[None, PipelineError]:
    """Attach ``assets`` (paths relative to ``cwd``) to the release.

    ``--clobber`` makes a retried upload replace partial assets.
    """
    cmd = ["gh", "release", "upload", tag, *assets, "--clobber"]
    env = gh_env(repository=repository, token=token)

    attempts = max(1, retry_attempts)
    for attempt in range(attempts):
        result = run_process(cmd, cwd=cwd, env=env, timeout=GH_UPLOAD_TIMEOUT_SECONDS)
        if isinstance(result, Ok):
            return Ok(None)

        error = result.error
        if attempt < attempts - 1 and _is_transient_gh_error(error):
            sleep(GH_RETRY_DELAY_SECONDS * (attempt + 1))
            continue

        return Err(
            PipelineError(
                kind="release_failed",
                message=f"failed to upload release assets for {tag}",
                hint=error.detail(),
            )
        )

    return Err(PipelineError(kind="release_failed", message=f"failed to upload release assets for {tag}"))
