"""Undo stack for completed tasks.

The executor pushes every executed task that has an undo action. When a
later task fails, ``execute`` unwinds the stack newest-first. An undo that
fails is logged and recorded, and the walk continues with the next entry,
so one broken compensation never strands the others.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from relflow.core.result import Err, Ok, Result
from relflow.output.console import ConsoleProtocol

from .context import WorkflowContext
from .errors import WorkflowError, from_exception, invalid
from .task import Task

__all__ = ["RollbackEntry", "RollbackManager", "RollbackOutcome", "RollbackReport"]

type Context = WorkflowContext[Any, Any]


@dataclass(frozen=True, slots=True)
class RollbackEntry:
    """An executed task and the context it started from."""

    task: Task
    context_before: Context


@dataclass(frozen=True, slots=True)
class RollbackOutcome:
    task_id: str
    status: Literal["rolled_back", "failed"]
    error: WorkflowError | None = None


@dataclass(frozen=True, slots=True)
class RollbackReport:
    """Per-entry result of a rollback, in the order undo ran."""

    outcomes: tuple[RollbackOutcome, ...]

    @property
    def rolled_back(self) -> tuple[str, ...]:
        return tuple(o.task_id for o in self.outcomes if o.status == "rolled_back")

    @property
    def failed(self) -> tuple[str, ...]:
        return tuple(o.task_id for o in self.outcomes if o.status == "failed")

    @property
    def success(self) -> bool:
        return not self.failed


class RollbackManager:
    def __init__(self, console: ConsoleProtocol) -> None:
        self._console = console
        self._entries: list[RollbackEntry] = []

    @property
    def entries(self) -> tuple[RollbackEntry, ...]:
        return tuple(self._entries)

    def push(self, task: Task, context_before: Context) -> Result[None, WorkflowError]:
        if not task.can_undo:
            return Err(
                invalid(
                    f"task '{task.id}' has no undo action to record",
                    source=task.id,
                    details={"operation": "InvalidOperation"},
                )
            )
        self._entries.append(RollbackEntry(task=task, context_before=context_before))
        return Ok(None)

    def has_operations(self) -> bool:
        return bool(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    async def execute(self, context: Context) -> RollbackReport:
        """Undo every recorded task, newest first.

        Each undo receives ``context``, the most recent context of the run,
        so it can see everything produced up to the failure. The stack is
        empty afterwards.
        """
        outcomes: list[RollbackOutcome] = []
        self._console.warning(f"rolling back {len(self._entries)} task(s)")

        for entry in reversed(self._entries):
            task_id = entry.task.id
            self._console.debug(f"undo '{task_id}'")
            try:
                result = await entry.task.run_undo(context)
            except Exception as e:  # noqa: BLE001
                result = Err(from_exception(e, source=task_id))

            if isinstance(result, Err):
                error = result.error.with_source(task_id)
                self._console.error(f"undo of '{task_id}' failed: {error.message}")
                outcomes.append(RollbackOutcome(task_id=task_id, status="failed", error=error))
                continue

            self._console.info(f"rolled back '{task_id}'")
            outcomes.append(RollbackOutcome(task_id=task_id, status="rolled_back"))

        self._entries.clear()
        return RollbackReport(outcomes=tuple(outcomes))
