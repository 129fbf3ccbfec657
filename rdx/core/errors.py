"""Exit codes for the rdx command line.

These values are used as process exit codes and should remain stable so CI
jobs can tell a bad invocation from a broken toolchain or a failed build.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success
    - 1: User error (bad tag, bad platform, invalid config)
    - 2: Environment error (container engine, git or gh missing)
    - 3: Build error (go build, image build, archive failed)
    - 4: Network error (checkout, registry push, release upload)
    - 5: I/O error (cannot write outputs)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")
