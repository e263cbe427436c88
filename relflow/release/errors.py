"""Conversion of service errors into workflow errors."""

from __future__ import annotations

from relflow.services.errors import ServiceError
from relflow.services.git import GitError
from relflow.workflow.errors import WorkflowError, failed, not_found

from .version_file import VersionFileError

__all__ = ["from_git", "from_service", "from_version_file"]


def from_git(error: GitError, *, hint: str | None = None) -> WorkflowError:
    return failed(
        f"git {error.command} failed: {error.message}",
        hint=hint,
        details={"command": error.command, "returncode": error.returncode},
    )


def from_service(error: ServiceError) -> WorkflowError:
    match error.kind:
        case "not_found":
            return not_found(error.message, hint=error.hint)
        case "unavailable":
            return WorkflowError("conflict", error.message, hint=error.hint)
        case "invalid_input":
            return WorkflowError("invalid", error.message, hint=error.hint)
        case _:
            return failed(error.message, hint=error.hint)


def from_version_file(error: VersionFileError) -> WorkflowError:
    return WorkflowError("invalid", error.message, hint="set version_file in the release config")
