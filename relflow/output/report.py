"""Execution report presentation.

Centralized report formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relflow.core.errors import ErrorCode
from relflow.output.console import Style

if TYPE_CHECKING:
    from relflow.output.console import ConsoleProtocol
    from relflow.workflow.errors import WorkflowError
    from relflow.workflow.executor import ExecutionReport

__all__ = ["error_exit_code", "print_report", "report_exit_code"]


def print_report(report: ExecutionReport, console: ConsoleProtocol) -> None:
    """Print what ran, what was skipped and how a failure was handled."""
    console.header("Summary")

    for task_id in report.executed:
        console.print(f"done     {task_id}", Style.SUCCESS)
    for skipped in report.skipped:
        console.print(f"skipped  {skipped.task_id} ({skipped.reason})", Style.DIM)

    if report.failed_task is not None:
        console.print(f"failed   {report.failed_task}", Style.ERROR)

    if report.rollback is not None:
        console.header("Rollback")
        for outcome in report.rollback.outcomes:
            if outcome.status == "rolled_back":
                console.print(f"undone   {outcome.task_id}", Style.WARNING)
            else:
                message = outcome.error.message if outcome.error else "unknown error"
                console.print(f"FAILED   {outcome.task_id}: {message}", Style.ERROR)

    console.newline()
    if report.success:
        console.success(f"workflow finished in {report.duration_seconds:.1f}s")
        return

    if report.error is not None:
        console.error(report.error.pretty())
        if report.error.hint:
            console.print(f"hint: {report.error.hint}", Style.DIM)
    if report.rollback_failed:
        console.warning("rollback was incomplete; check the repository state by hand")


def error_exit_code(error: WorkflowError, *, during_run: bool = True) -> int:
    """Exit code for a workflow error."""
    match error.kind:
        case "invalid":
            return int(ErrorCode.USER_ERROR)
        case "not_found":
            return int(ErrorCode.ENV_ERROR if during_run else ErrorCode.USER_ERROR)
        case "conflict":
            return int(ErrorCode.ENV_ERROR)
        case "failed":
            return int(ErrorCode.TASK_FAILED)
        case "unexpected":
            return int(ErrorCode.INTERNAL_ERROR)
    # Fallback for exhaustiveness
    return int(ErrorCode.INTERNAL_ERROR)


def report_exit_code(report: ExecutionReport) -> int:
    if report.success:
        return int(ErrorCode.OK)
    if report.rollback_failed:
        return int(ErrorCode.ROLLBACK_FAILED)
    if report.error is None:
        return int(ErrorCode.INTERNAL_ERROR)
    return error_exit_code(report.error, during_run=report.failed_task is not None)
