"""Process exit codes for relflow commands."""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    The numeric values are part of the CLI contract and must stay stable:
    - 0: Release finished (or nothing failed)
    - 1: User error (bad config, invalid task definitions)
    - 2: Environment error (dirty tree, missing files or tools)
    - 3: A task failed and its work was rolled back
    - 4: A task failed and at least one undo step failed too
    - 5: Internal error (unexpected exception)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    TASK_FAILED = 3
    ROLLBACK_FAILED = 4
    INTERNAL_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
