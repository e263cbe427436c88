"""Shared helpers for CLI commands."""

from __future__ import annotations

import typer

from relflow.core.result import Err, Result
from relflow.output.console import ConsoleProtocol, Style
from relflow.output.report import error_exit_code
from relflow.workflow.errors import WorkflowError


def exit_on_error[T](result: Result[T, WorkflowError], console: ConsoleProtocol) -> T:
    """Return the value of ``result``, or print its error and exit.

    The exit code follows the error kind (see ``error_exit_code``).
    """
    if isinstance(result, Err):
        error = result.error
        console.error(error.pretty())
        if error.hint:
            console.print(f"hint: {error.hint}", Style.DIM)
        raise typer.Exit(code=error_exit_code(error, during_run=False))
    return result.value
