"""Sequential executor for an ordered task list.

For each task in the walk the executor:

1. evaluates ``should_skip``; a skip is recorded with its reason and may
   end the walk (``skip_to=()``) or redirect it (non-empty ``skip_to``);
2. awaits ``execute`` and makes its context the current one, pushing an
   undo entry when the task has one;
3. for controller tasks, evaluates ``next_tasks`` and redirects the walk
   when it names targets.

Any error, returned or raised, from steps 1-3 stops the walk, unwinds the
rollback stack and ends up in the report. The caller always gets an
``ExecutionReport``; ``run`` does not raise for task failures.

Redirecting the walk ("branching") jumps forward to the earliest target in
walk order; the tasks jumped over are skipped, never run later. After the
jump, a task that hangs off the branching task or off a bypassed one, and has
no dependency that is still going to run, is bypassed as well. Both are
recorded with the branching task's reason. Everything else keeps its place,
so no task runs ahead of its dependencies.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from relflow.core.result import Err, Ok, Result
from relflow.output.console import ConsoleProtocol, Style

from .context import WorkflowContext
from .errors import WorkflowError, from_exception, invalid, not_found, unexpected
from .rollback import RollbackManager, RollbackReport
from .skip import SkipDecision
from .task import Task

__all__ = ["ExecutionReport", "SkippedTask", "WorkflowExecutor"]

type Context = WorkflowContext[Any, Any]


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class SkippedTask:
    task_id: str
    reason: str


@dataclass(frozen=True, slots=True)
class ExecutionReport:
    """What happened during a run.

    Attributes:
        success: True when every pending task executed or was skipped.
        executed: Ids of executed tasks, in execution order.
        skipped: Skipped tasks with their reasons, in walk order.
        failed_task: Id of the task that failed, if any.
        error: The failure, normalized to a ``WorkflowError``.
        rollback_executed: Whether undo actions were run.
        rollback: Per-task rollback outcome when a rollback ran.
        started_at: When the run started.
        finished_at: When the run (including rollback) ended.
        context: The final context, or the context at the point of failure.
    """

    success: bool
    executed: tuple[str, ...]
    skipped: tuple[SkippedTask, ...]
    failed_task: str | None
    error: WorkflowError | None
    rollback_executed: bool
    rollback: RollbackReport | None
    started_at: datetime
    finished_at: datetime
    context: Context | None

    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()

    @property
    def skipped_ids(self) -> tuple[str, ...]:
        return tuple(s.task_id for s in self.skipped)

    def skip_reason(self, task_id: str) -> str | None:
        for skipped in self.skipped:
            if skipped.task_id == task_id:
                return skipped.reason
        return None

    @property
    def rollback_failed(self) -> bool:
        return self.rollback is not None and not self.rollback.success

    @classmethod
    def construction_failure(cls, error: WorkflowError) -> ExecutionReport:
        """Report for a run that never started (bad definitions, cycles)."""
        now = _now()
        return cls(
            success=False,
            executed=(),
            skipped=(),
            failed_task=None,
            error=error,
            rollback_executed=False,
            rollback=None,
            started_at=now,
            finished_at=now,
            context=None,
        )


def _empty_strs() -> list[str]:
    return []


def _empty_skips() -> list[SkippedTask]:
    return []


@dataclass
class _RunState:
    context: Context
    rollback: RollbackManager
    walk: list[Task]
    started_at: datetime = field(default_factory=_now)
    executed: list[str] = field(default_factory=_empty_strs)
    skipped: list[SkippedTask] = field(default_factory=_empty_skips)
    bypassed: set[str] = field(default_factory=set)

    def record_skip(self, task_id: str, reason: str) -> None:
        self.skipped.append(SkippedTask(task_id=task_id, reason=reason))


class WorkflowExecutor:
    def __init__(self, console: ConsoleProtocol, *, enable_rollback: bool = True) -> None:
        self._console = console
        self._enable_rollback = enable_rollback

    async def run(self, tasks: Sequence[Task], context: Context) -> ExecutionReport:
        """Execute ``tasks`` (already in execution order) starting from ``context``."""
        by_id = {t.id: t for t in tasks}
        state = _RunState(
            context=context,
            rollback=RollbackManager(self._console),
            walk=list(tasks),
        )

        while state.walk:
            task = state.walk.pop(0)

            decision = self._evaluate_skip(task, state.context)
            if isinstance(decision, Err):
                return await self._fail(state, task, decision.error)

            if decision.value.skip:
                redirected = self._apply_skip(state, task, decision.value, by_id)
                if isinstance(redirected, Err):
                    return await self._fail(state, task, redirected.error)
                continue

            self._console.print(f"> {task.description}", Style.BOLD)
            result = await self._execute(task, state.context)
            if isinstance(result, Err):
                return await self._fail(state, task, result.error)

            before, state.context = state.context, result.value
            state.executed.append(task.id)
            if self._enable_rollback and task.can_undo:
                pushed = state.rollback.push(task, before)
                if isinstance(pushed, Err):
                    return await self._fail(state, task, pushed.error)
            self._console.debug(f"task '{task.id}' completed")

            if task.next_tasks is not None:
                targets = self._evaluate_next(task, state.context)
                if isinstance(targets, Err):
                    return await self._fail(state, task, targets.error)
                if targets.value:
                    branched = self._branch(
                        state, task, targets.value, by_id, f"not selected by '{task.id}'"
                    )
                    if isinstance(branched, Err):
                        return await self._fail(state, task, branched.error)

        state.rollback.clear()
        return self._report(state, success=True)

    def _evaluate_skip(self, task: Task, ctx: Context) -> Result[SkipDecision, WorkflowError]:
        try:
            result = task.evaluate_skip(ctx)
        except Exception as e:  # noqa: BLE001
            return Err(from_exception(e, source=task.id))
        if isinstance(result, Err):
            return Err(result.error.with_source(task.id))
        return result

    async def _execute(self, task: Task, ctx: Context) -> Result[Context, WorkflowError]:
        try:
            result = await task.execute(ctx)
        except Exception as e:  # noqa: BLE001
            return Err(from_exception(e, source=task.id))

        match result:
            case Ok(WorkflowContext() as next_ctx):
                return Ok(next_ctx)
            case Err(WorkflowError() as error):
                return Err(error.with_source(task.id))
            case Err(error):
                return Err(unexpected(str(error), source=task.id))
            case _:
                return Err(
                    unexpected(
                        f"task returned {type(result).__name__} instead of a workflow context",
                        source=task.id,
                    )
                )

    def _evaluate_next(self, task: Task, ctx: Context) -> Result[tuple[str, ...], WorkflowError]:
        assert task.next_tasks is not None
        try:
            result = task.next_tasks(ctx)
        except Exception as e:  # noqa: BLE001
            return Err(from_exception(e, source=task.id))
        if isinstance(result, Err):
            return Err(result.error.with_source(task.id))
        return Ok(tuple(result.value))

    def _apply_skip(
        self,
        state: _RunState,
        task: Task,
        decision: SkipDecision,
        by_id: Mapping[str, Task],
    ) -> Result[None, WorkflowError]:
        reason = decision.effective_reason
        state.record_skip(task.id, reason)
        self._console.print(f"- {task.description} (skipped: {reason})", Style.DIM)

        if decision.skip_to is None:
            return Ok(None)

        if decision.is_terminal:
            for remaining in state.walk:
                state.record_skip(remaining.id, reason)
            self._console.debug(f"task '{task.id}' ended the run; {len(state.walk)} task(s) left")
            state.walk.clear()
            return Ok(None)

        return self._branch(state, task, decision.skip_to, by_id, reason)

    def _branch(
        self,
        state: _RunState,
        source: Task,
        targets: Sequence[str],
        by_id: Mapping[str, Task],
        reason: str,
    ) -> Result[None, WorkflowError]:
        pending = {t.id for t in state.walk}
        resolved: list[Task] = []
        for target_id in targets:
            target = by_id.get(target_id)
            if target is None:
                return Err(
                    not_found(
                        f"task '{source.id}' branches to unknown task '{target_id}'",
                        source=source.id,
                        details={"missing": target_id, "referenced_by": source.id},
                    )
                )
            if target_id in state.executed:
                return Err(
                    invalid(
                        f"task '{source.id}' branches to '{target_id}', which already executed",
                        source=source.id,
                    )
                )
            if target_id not in pending:
                return Err(
                    invalid(
                        f"task '{source.id}' branches to '{target_id}', which was already skipped",
                        source=source.id,
                    )
                )
            if all(r.id != target_id for r in resolved):
                resolved.append(target)

        target_ids = {t.id for t in resolved}
        start = min(i for i, t in enumerate(state.walk) if t.id in target_ids)
        jumped, rest = state.walk[:start], state.walk[start:]
        for task in jumped:
            state.bypassed.add(task.id)
            state.record_skip(task.id, reason)
            self._console.debug(f"task '{task.id}' jumped over ({reason})")

        # Tasks that will still run; bypassed ones are removed as the walk is pruned.
        live = {t.id for t in rest}
        survivors: list[Task] = []
        for task in rest:
            if task.id in target_ids:
                survivors.append(task)
                continue
            deps = set(task.dependencies)
            cut_off = source.id in deps or bool(deps & state.bypassed)
            if cut_off and not deps & live:
                live.discard(task.id)
                state.bypassed.add(task.id)
                state.record_skip(task.id, reason)
                self._console.debug(f"task '{task.id}' bypassed ({reason})")
                continue
            survivors.append(task)

        self._console.debug(f"task '{source.id}' continues with {survivors[0].id}")
        state.walk = survivors
        return Ok(None)

    async def _fail(self, state: _RunState, task: Task, error: WorkflowError) -> ExecutionReport:
        self._console.error(f"task '{task.id}' failed: {error.message}")
        if error.hint:
            self._console.print(f"hint: {error.hint}", Style.DIM)

        rollback: RollbackReport | None = None
        if self._enable_rollback and state.rollback.has_operations():
            rollback = await state.rollback.execute(state.context)

        return self._report(state, success=False, failed_task=task.id, error=error, rollback=rollback)

    def _report(
        self,
        state: _RunState,
        *,
        success: bool,
        failed_task: str | None = None,
        error: WorkflowError | None = None,
        rollback: RollbackReport | None = None,
    ) -> ExecutionReport:
        return ExecutionReport(
            success=success,
            executed=tuple(state.executed),
            skipped=tuple(state.skipped),
            failed_task=failed_task,
            error=error,
            rollback_executed=rollback is not None,
            rollback=rollback,
            started_at=state.started_at,
            finished_at=_now(),
            context=state.context,
        )
