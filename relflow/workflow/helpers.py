"""Shortcuts for the two most common task shapes.

Both build through ``TaskBuilder`` and therefore return a ``Result``.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from relflow.core.result import Err, Ok, Result

from .context import WorkflowContext
from .errors import WorkflowError
from .task import Task, TaskBuilder, UndoFn

__all__ = ["side_effect_task", "validation_task"]

type Context = WorkflowContext[Any, Any]


def side_effect_task(
    task_id: str,
    description: str,
    effect: Callable[[Context], Awaitable[Result[None, WorkflowError]]],
    *,
    depends_on: Sequence[str] = (),
    undo: UndoFn | None = None,
) -> Result[Task, WorkflowError]:
    """Task that performs ``effect`` and passes the context through unchanged."""

    async def execute(ctx: Context) -> Result[Context, WorkflowError]:
        result = await effect(ctx)
        if isinstance(result, Err):
            return result
        return Ok(ctx)

    builder = TaskBuilder(task_id).description(description).depends_on(*depends_on).execute(execute)
    if undo is not None:
        builder = builder.with_undo(undo)
    return builder.build()


def validation_task(
    task_id: str,
    description: str,
    check: Callable[[Context], Result[None, WorkflowError]],
    *,
    depends_on: Sequence[str] = (),
) -> Result[Task, WorkflowError]:
    """Read-only task that fails the run when ``check`` returns an error."""

    async def execute(ctx: Context) -> Result[Context, WorkflowError]:
        result = check(ctx)
        if isinstance(result, Err):
            return result
        return Ok(ctx)

    return (
        TaskBuilder(task_id)
        .description(description)
        .depends_on(*depends_on)
        .kind("validation")
        .phase("setup")
        .execute(execute)
        .build()
    )
