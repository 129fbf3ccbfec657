"""Git checkout of release sources."""

from .source import GitError, GitErrorKind, Source, checkout, ensure_git_available

__all__ = ["GitError", "GitErrorKind", "Source", "checkout", "ensure_git_available"]
