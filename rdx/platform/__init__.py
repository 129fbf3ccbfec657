"""Host integration: subprocess execution and build targets."""

from .process import ProcessError, run
from .target import Target, TargetError, parse_target, release_matrix

__all__ = [
    "ProcessError",
    "run",
    "Target",
    "TargetError",
    "parse_target",
    "release_matrix",
]
