"""Task definitions and the fluent builder that creates them.

Usage:
    result = (
        TaskBuilder("create-tag")
        .description("Tag the release commit")
        .depends_on("commit-changes")
        .skip_when(lambda ctx: ctx.config.skip_git, "skipGit enabled")
        .execute(create_tag)
        .with_undo(delete_tag)
        .build()
    )
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field, replace
from typing import Any, Literal

from relflow.core.result import Err, Ok, Result

from .context import WorkflowContext
from .errors import WorkflowError, invalid
from .skip import (
    RUN,
    Predicate,
    SkipDecision,
    SkipFn,
    first_match,
    skip_and_jump,
    skip_if,
)

__all__ = [
    "ExecuteFn",
    "NextTasksFn",
    "Task",
    "TaskBuilder",
    "TaskKind",
    "TaskMetadata",
    "TaskPhase",
    "UndoFn",
]

TaskKind = Literal["validation", "mutation", "notification", "query"]
TaskPhase = Literal["setup", "main", "cleanup"]

type Context = WorkflowContext[Any, Any]
type ExecuteFn = Callable[[Context], Awaitable[Result[Context, WorkflowError]]]
type UndoFn = Callable[[Context], Awaitable[Result[None, WorkflowError]]]
type NextTasksFn = Callable[[Context], Result[Sequence[str], WorkflowError]]

GROUP_SEPARATOR = ":"


@dataclass(frozen=True, slots=True)
class TaskMetadata:
    """Descriptive attributes of a task.

    Only ``priority`` affects execution (ordering among ready tasks, higher
    first). ``retryable``/``max_retries`` and ``timeout_seconds`` are hints
    for reporting; the engine runs each task once and enforces no timeout.
    """

    kind: TaskKind = "mutation"
    phase: TaskPhase = "main"
    priority: int = 0
    retryable: bool = False
    max_retries: int = 0
    timeout_seconds: float | None = None
    tags: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class Task:
    """A named unit of work in the task graph.

    Attributes:
        id: Unique id within a run.
        description: What the task does, shown in plans and reports.
        execute: Coroutine turning the current context into the next one.
        dependencies: Ids of tasks that must run (or be skipped) first.
        should_skip: Evaluated right before ``execute``; see ``SkipDecision``.
        undo: Compensating action run during rollback.
        next_tasks: Evaluated after a successful ``execute``; a non-empty
            answer redirects the walk to those ids.
        metadata: Kind, phase, priority and other descriptive attributes.
        group_id: Group the task was expanded from, if any.
    """

    id: str
    description: str
    execute: ExecuteFn
    dependencies: tuple[str, ...] = ()
    should_skip: SkipFn | None = None
    undo: UndoFn | None = None
    next_tasks: NextTasksFn | None = None
    metadata: TaskMetadata = field(default_factory=TaskMetadata)
    group_id: str | None = None

    @property
    def can_undo(self) -> bool:
        return self.undo is not None

    @property
    def is_controller(self) -> bool:
        return self.next_tasks is not None

    @property
    def priority(self) -> int:
        return self.metadata.priority

    def evaluate_skip(self, ctx: Context) -> Result[SkipDecision, WorkflowError]:
        if self.should_skip is None:
            return Ok(RUN)
        return self.should_skip(ctx)

    async def run_undo(self, ctx: Context) -> Result[None, WorkflowError]:
        """Run the undo action; tasks without one report an invalid operation."""
        if self.undo is None:
            return Err(
                invalid(
                    f"task '{self.id}' does not support undo",
                    source=self.id,
                    details={"operation": "InvalidOperation"},
                )
            )
        return await self.undo(ctx)


class TaskBuilder:
    """Fluent construction of a ``Task``.

    ``description`` and ``execute`` are required; ``build`` reports what is
    missing instead of raising. Several skip conditions can be added; they
    are checked in the order given and the first one that fires decides.
    """

    def __init__(self, task_id: str) -> None:
        self._id = task_id
        self._description: str | None = None
        self._execute: ExecuteFn | None = None
        self._dependencies: list[str] = []
        self._skips: list[SkipFn] = []
        self._undo: UndoFn | None = None
        self._next_tasks: NextTasksFn | None = None
        self._metadata = TaskMetadata()

    def description(self, text: str) -> TaskBuilder:
        self._description = text
        return self

    def depends_on(self, *task_ids: str) -> TaskBuilder:
        for task_id in task_ids:
            if task_id not in self._dependencies:
                self._dependencies.append(task_id)
        return self

    def skip_when(self, predicate: Predicate, reason: str | None = None) -> TaskBuilder:
        """Skip when ``predicate`` holds; the walk continues in order."""
        self._skips.append(skip_if(predicate, reason))
        return self

    def skip_when_and_jump_to(
        self,
        predicate: Predicate,
        targets: Sequence[str],
        reason: str | None = None,
    ) -> TaskBuilder:
        """Skip when ``predicate`` holds and continue with ``targets``."""
        self._skips.append(skip_and_jump(predicate, targets, reason))
        return self

    def should_skip(self, fn: SkipFn) -> TaskBuilder:
        """Add a full skip function returning a ``SkipDecision``."""
        self._skips.append(fn)
        return self

    def execute(self, fn: ExecuteFn) -> TaskBuilder:
        self._execute = fn
        return self

    def with_undo(self, fn: UndoFn) -> TaskBuilder:
        self._undo = fn
        return self

    def next_tasks(self, fn: NextTasksFn) -> TaskBuilder:
        """Make this a controller: after executing, ``fn`` picks where to go."""
        self._next_tasks = fn
        return self

    def kind(self, kind: TaskKind) -> TaskBuilder:
        self._metadata = replace(self._metadata, kind=kind)
        return self

    def phase(self, phase: TaskPhase) -> TaskBuilder:
        self._metadata = replace(self._metadata, phase=phase)
        return self

    def priority(self, priority: int) -> TaskBuilder:
        self._metadata = replace(self._metadata, priority=priority)
        return self

    def retryable(self, max_retries: int = 3) -> TaskBuilder:
        self._metadata = replace(self._metadata, retryable=True, max_retries=max_retries)
        return self

    def timeout(self, seconds: float) -> TaskBuilder:
        self._metadata = replace(self._metadata, timeout_seconds=seconds)
        return self

    def tags(self, *tags: str) -> TaskBuilder:
        self._metadata = replace(self._metadata, tags=self._metadata.tags | frozenset(tags))
        return self

    def build(self) -> Result[Task, WorkflowError]:
        task_id = self._id.strip()
        if not task_id:
            return Err(invalid("task id must not be empty"))
        if GROUP_SEPARATOR in task_id:
            return Err(
                invalid(
                    f"task id '{task_id}' must not contain '{GROUP_SEPARATOR}'",
                    hint="':' is reserved for group-qualified ids",
                    source=task_id,
                )
            )
        if self._description is None or not self._description.strip():
            return Err(invalid(f"task '{task_id}' has no description", source=task_id))
        if self._execute is None:
            return Err(invalid(f"task '{task_id}' has no execute function", source=task_id))
        if task_id in self._dependencies:
            return Err(invalid(f"task '{task_id}' depends on itself", source=task_id))
        if self._metadata.max_retries < 0:
            return Err(invalid(f"task '{task_id}' has a negative retry count", source=task_id))

        should_skip: SkipFn | None = None
        if len(self._skips) == 1:
            should_skip = self._skips[0]
        elif self._skips:
            should_skip = first_match(*self._skips)

        return Ok(
            Task(
                id=task_id,
                description=self._description.strip(),
                execute=self._execute,
                dependencies=tuple(self._dependencies),
                should_skip=should_skip,
                undo=self._undo,
                next_tasks=self._next_tasks,
                metadata=self._metadata,
            )
        )
