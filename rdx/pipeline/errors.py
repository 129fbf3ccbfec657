"""Error payload shared by every pipeline step."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from rdx.core.errors import ErrorCode
from rdx.git.source import GitError

PipelineErrorKind = Literal[
    "invalid_tag",
    "invalid_platform",
    "invalid_input",
    "tool_missing",
    "checkout_failed",
    "build_failed",
    "image_failed",
    "archive_failed",
    "io_failed",
    "publish_failed",
    "release_failed",
]

_EXIT_CODES: dict[str, ErrorCode] = {
    "invalid_tag": ErrorCode.USER_ERROR,
    "invalid_platform": ErrorCode.USER_ERROR,
    "invalid_input": ErrorCode.USER_ERROR,
    "tool_missing": ErrorCode.ENV_ERROR,
    "checkout_failed": ErrorCode.NETWORK_ERROR,
    "build_failed": ErrorCode.BUILD_ERROR,
    "image_failed": ErrorCode.BUILD_ERROR,
    "archive_failed": ErrorCode.BUILD_ERROR,
    "io_failed": ErrorCode.IO_ERROR,
    "publish_failed": ErrorCode.NETWORK_ERROR,
    "release_failed": ErrorCode.NETWORK_ERROR,
}


@dataclass(frozen=True, slots=True)
class PipelineError:
    kind: PipelineErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message

    @classmethod
    def from_git(cls, error: GitError) -> PipelineError:
        return cls(kind=error.kind, message=error.message, hint=error.hint)

    def within(self, context: str) -> PipelineError:
        """Prefix the message with the enclosing step, keeping kind and hint."""
        return PipelineError(kind=self.kind, message=f"{context}: {self.message}", hint=self.hint)

    @property
    def exit_code(self) -> ErrorCode:
        return _EXIT_CODES.get(self.kind, ErrorCode.BUILD_ERROR)
