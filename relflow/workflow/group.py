"""Task groups: named bundles of tasks that skip and depend as a unit.

Groups exist only at definition time. Before ordering, each group is
expanded into plain tasks:

- member ids become ``"<group>:<task>"``;
- dependencies on sibling members are rewritten to the qualified ids,
  ids that already contain ``:`` are left alone, and anything else is
  treated as a top-level task id;
- members without a sibling dependency also depend on every member of
  each group listed in ``depends_on_groups``. This covers the first task
  of the group and any other member that starts a chain, so no member can
  be ordered ahead of an upstream group;
- the group's skip condition is checked before the member's own, so a
  skipped group skips every member with the group's reason (by default
  ``group '<id>' skip condition met``);
- ids returned by ``next_tasks`` or ``skip_to`` that name a sibling are
  qualified the same way.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any

from relflow.core.result import Err, Ok, Result

from .context import WorkflowContext
from .errors import WorkflowError, invalid, not_found
from .skip import Predicate, SkipDecision, SkipFn, first_match, skip_if
from .task import GROUP_SEPARATOR, NextTasksFn, Task

__all__ = ["TaskGroup", "TaskGroupBuilder", "expand_group", "qualified_id"]

type Context = WorkflowContext[Any, Any]


def qualified_id(group_id: str, task_id: str) -> str:
    return f"{group_id}{GROUP_SEPARATOR}{task_id}"


@dataclass(frozen=True, slots=True)
class TaskGroup:
    """A named, ordered bundle of tasks."""

    id: str
    description: str
    tasks: tuple[Task, ...]
    depends_on_groups: tuple[str, ...] = ()
    skip_when: Predicate | None = None
    skip_reason: str | None = None

    @property
    def task_ids(self) -> tuple[str, ...]:
        """Qualified ids of the members, in declaration order."""
        return tuple(qualified_id(self.id, t.id) for t in self.tasks)


class TaskGroupBuilder:
    def __init__(self, group_id: str) -> None:
        self._id = group_id
        self._description: str | None = None
        self._tasks: list[Task] = []
        self._depends_on: list[str] = []
        self._skip_when: Predicate | None = None
        self._skip_reason: str | None = None

    def description(self, text: str) -> TaskGroupBuilder:
        self._description = text
        return self

    def depends_on_group(self, *group_ids: str) -> TaskGroupBuilder:
        for group_id in group_ids:
            if group_id not in self._depends_on:
                self._depends_on.append(group_id)
        return self

    def skip_when(self, predicate: Predicate, reason: str | None = None) -> TaskGroupBuilder:
        self._skip_when = predicate
        self._skip_reason = reason
        return self

    def add_task(self, task: Task) -> TaskGroupBuilder:
        self._tasks.append(task)
        return self

    def add_tasks(self, tasks: Sequence[Task]) -> TaskGroupBuilder:
        self._tasks.extend(tasks)
        return self

    def build(self) -> Result[TaskGroup, WorkflowError]:
        group_id = self._id.strip()
        if not group_id or GROUP_SEPARATOR in group_id:
            return Err(invalid(f"invalid group id '{self._id}'", source=self._id))
        if self._description is None or not self._description.strip():
            return Err(invalid(f"group '{group_id}' has no description", source=group_id))
        if not self._tasks:
            return Err(invalid(f"group '{group_id}' has no tasks", source=group_id))
        if group_id in self._depends_on:
            return Err(invalid(f"group '{group_id}' depends on itself", source=group_id))

        seen: set[str] = set()
        for task in self._tasks:
            if task.id in seen:
                return Err(
                    invalid(
                        f"group '{group_id}' contains task '{task.id}' twice",
                        source=group_id,
                    )
                )
            seen.add(task.id)

        return Ok(
            TaskGroup(
                id=group_id,
                description=self._description.strip(),
                tasks=tuple(self._tasks),
                depends_on_groups=tuple(self._depends_on),
                skip_when=self._skip_when,
                skip_reason=self._skip_reason,
            )
        )


def expand_group(
    group: TaskGroup,
    groups: Mapping[str, TaskGroup],
) -> Result[tuple[Task, ...], WorkflowError]:
    """Flatten ``group`` into namespaced tasks.

    Args:
        group: The group to expand.
        groups: Every registered group by id, used to resolve group dependencies.

    Returns:
        The expanded tasks in declaration order, or ``not_found`` when a
        group dependency is unknown.
    """
    upstream: list[str] = []
    for dep_group_id in group.depends_on_groups:
        dep_group = groups.get(dep_group_id)
        if dep_group is None:
            return Err(
                not_found(
                    f"group '{group.id}' depends on unknown group '{dep_group_id}'",
                    source=group.id,
                    details={"missing": dep_group_id, "referenced_by": group.id},
                )
            )
        upstream.extend(dep_group.task_ids)

    local_ids = {t.id for t in group.tasks}

    def qualify(task_id: str) -> str:
        if task_id in local_ids:
            return qualified_id(group.id, task_id)
        return task_id

    group_skip: SkipFn | None = None
    if group.skip_when is not None:
        group_skip = skip_if(group.skip_when, group.skip_reason or f"group '{group.id}' skip condition met")

    expanded: list[Task] = []
    for task in group.tasks:
        has_local_dependency = any(dep in local_ids for dep in task.dependencies)
        dependencies = [qualify(dep) for dep in task.dependencies]
        if not has_local_dependency:
            dependencies = [*upstream, *(d for d in dependencies if d not in upstream)]

        expanded.append(
            replace(
                task,
                id=qualified_id(group.id, task.id),
                dependencies=tuple(dependencies),
                should_skip=_merge_skip(group_skip, task.should_skip, qualify),
                next_tasks=_qualify_next(task.next_tasks, qualify),
                group_id=group.id,
            )
        )
    return Ok(tuple(expanded))


def _merge_skip(
    group_skip: SkipFn | None,
    task_skip: SkipFn | None,
    qualify: Callable[[str], str],
) -> SkipFn | None:
    if task_skip is not None:
        inner = task_skip

        def qualified_task_skip(ctx: Context) -> Result[SkipDecision, WorkflowError]:
            result = inner(ctx)
            if isinstance(result, Err) or not result.value.skip_to:
                return result
            decision = result.value
            return Ok(replace(decision, skip_to=tuple(qualify(t) for t in decision.skip_to or ())))

        task_skip = qualified_task_skip

    if group_skip is None:
        return task_skip
    if task_skip is None:
        return group_skip
    return first_match(group_skip, task_skip)


def _qualify_next(
    next_tasks: NextTasksFn | None,
    qualify: Callable[[str], str],
) -> NextTasksFn | None:
    if next_tasks is None:
        return None
    inner = next_tasks

    def qualified_next(ctx: Context) -> Result[Sequence[str], WorkflowError]:
        result = inner(ctx)
        if isinstance(result, Err):
            return result
        return Ok(tuple(qualify(t) for t in result.value))

    return qualified_next
