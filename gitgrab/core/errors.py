"""Process exit codes for the gitgrab command.

Each code names one class of failure so wrapper scripts can tell a typo in
the flags apart from an unreachable API or a repository that would not pull.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for the CLI.

    - 0: Every repository synced
    - 1: Configuration error (bad flag, missing token, invalid org)
    - 2: Environment error (git missing, target directory unusable)
    - 3: One or more repositories failed to sync
    - 4: Listing the organization failed (HTTP or decode error)
    - 5: I/O error (unreadable config file)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    SYNC_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
