"""Process exit codes for the ship CLI.

Each failure class of a release maps to one stable exit code so that CI jobs
wrapping ``ship release`` can tell a broken build from a flaky network.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Release fully published and descriptor written
    - 1: User error (bad options, invalid config)
    - 2: Environment error (docker missing)
    - 3: Build error (image build failed)
    - 4: Network error (push could not reach the registry)
    - 5: I/O error (descriptor could not be read or written)
    - 6: Auth error (login rejected, push unauthorized)
    - 7: Registry error (push rejected, tag failed)
    - 8: Degraded (images published, descriptor missing)
    - 130: Cancelled (interrupted, shell convention for SIGINT)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5
    AUTH_ERROR = 6
    REGISTRY_ERROR = 7
    DEGRADED = 8
    CANCELLED = 130
