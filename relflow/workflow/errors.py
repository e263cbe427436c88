"""Error type shared by the workflow engine and the tasks it runs."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

__all__ = [
    "WorkflowError",
    "WorkflowErrorKind",
    "conflict",
    "failed",
    "from_exception",
    "invalid",
    "not_found",
    "unexpected",
]

WorkflowErrorKind = Literal["not_found", "invalid", "conflict", "failed", "unexpected"]


@dataclass(frozen=True, slots=True)
class WorkflowError:
    """A failure raised by graph construction, a task, or an undo step.

    Attributes:
        kind: Category used for exit-code mapping and reporting.
            ``not_found``: a referenced task, group, key or file does not exist.
            ``invalid``: a definition or input is malformed (cycles, bad builders).
            ``conflict``: a precondition does not hold (dirty tree, tag exists).
            ``failed``: an external operation failed (git, gh, file write).
            ``unexpected``: an exception escaped from task code.
        message: Human-readable description.
        hint: Optional suggestion for fixing the problem.
        source: Where the error originated (task id, module).
        details: Structured extras (cycle path, command, stderr).
    """

    kind: WorkflowErrorKind
    message: str
    hint: str | None = None
    source: str | None = None
    details: Mapping[str, object] | None = None

    def with_source(self, source: str) -> WorkflowError:
        """Return a copy attributed to ``source`` unless one is already set."""
        if self.source is not None:
            return self
        return WorkflowError(
            kind=self.kind,
            message=self.message,
            hint=self.hint,
            source=source,
            details=self.details,
        )

    def pretty(self) -> str:
        prefix = f"[{self.source}] " if self.source else ""
        return f"{prefix}{self.message}"

    def __str__(self) -> str:
        return self.pretty()


def not_found(
    message: str,
    *,
    hint: str | None = None,
    source: str | None = None,
    details: Mapping[str, object] | None = None,
) -> WorkflowError:
    return WorkflowError("not_found", message, hint=hint, source=source, details=details)


def invalid(
    message: str,
    *,
    hint: str | None = None,
    source: str | None = None,
    details: Mapping[str, object] | None = None,
) -> WorkflowError:
    return WorkflowError("invalid", message, hint=hint, source=source, details=details)


def conflict(
    message: str,
    *,
    hint: str | None = None,
    source: str | None = None,
    details: Mapping[str, object] | None = None,
) -> WorkflowError:
    return WorkflowError("conflict", message, hint=hint, source=source, details=details)


def failed(
    message: str,
    *,
    hint: str | None = None,
    source: str | None = None,
    details: Mapping[str, object] | None = None,
) -> WorkflowError:
    return WorkflowError("failed", message, hint=hint, source=source, details=details)


def unexpected(
    message: str,
    *,
    hint: str | None = None,
    source: str | None = None,
    details: Mapping[str, object] | None = None,
) -> WorkflowError:
    return WorkflowError("unexpected", message, hint=hint, source=source, details=details)


def from_exception(exc: BaseException, *, source: str | None = None) -> WorkflowError:
    """Normalize an exception that escaped task code."""
    text = str(exc) or type(exc).__name__
    return unexpected(
        f"{type(exc).__name__}: {text}" if str(exc) else text,
        source=source,
        details={"exception": type(exc).__name__},
    )
