"""Collects tasks and groups for one run and hands them to the graph builder.

Registration only rejects duplicates. References to other tasks or groups
are resolved when the execution order is built, so items can be
registered in any order.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from relflow.core.result import Err, Ok, Result

from .errors import WorkflowError, invalid, not_found
from .graph import build_execution_order
from .group import TaskGroup, expand_group
from .task import Task

__all__ = ["TaskRegistry"]


class TaskRegistry:
    """Declaration-ordered store of tasks and groups."""

    def __init__(self) -> None:
        self._items: list[Task | TaskGroup] = []
        self._task_ids: set[str] = set()
        self._groups: dict[str, TaskGroup] = {}
        self._expanded: tuple[Task, ...] | None = None

    def register(self, task: Task) -> Result[None, WorkflowError]:
        if task.id in self._task_ids:
            return Err(invalid(f"task '{task.id}' is already registered", source=task.id))
        self._task_ids.add(task.id)
        self._items.append(task)
        self._expanded = None
        return Ok(None)

    def register_group(self, group: TaskGroup) -> Result[None, WorkflowError]:
        if group.id in self._groups:
            return Err(invalid(f"group '{group.id}' is already registered", source=group.id))
        self._groups[group.id] = group
        self._items.append(group)
        self._expanded = None
        return Ok(None)

    def register_all(self, items: Iterable[Task | TaskGroup]) -> Result[None, WorkflowError]:
        for item in items:
            result = self.register_group(item) if isinstance(item, TaskGroup) else self.register(item)
            if isinstance(result, Err):
                return result
        return Ok(None)

    def tasks(self) -> Result[tuple[Task, ...], WorkflowError]:
        """Every task with groups expanded, in declaration order."""
        if self._expanded is not None:
            return Ok(self._expanded)

        flat: list[Task] = []
        for item in self._items:
            if isinstance(item, TaskGroup):
                expanded = expand_group(item, self._groups)
                if isinstance(expanded, Err):
                    return expanded
                flat.extend(expanded.value)
            else:
                flat.append(item)

        self._expanded = tuple(flat)
        return Ok(self._expanded)

    def get(self, task_id: str) -> Result[Task, WorkflowError]:
        tasks = self.tasks()
        if isinstance(tasks, Err):
            return tasks
        for task in tasks.value:
            if task.id == task_id:
                return Ok(task)
        return Err(not_found(f"task '{task_id}' is not registered", details={"missing": task_id}))

    def has(self, task_id: str) -> bool:
        return isinstance(self.get(task_id), Ok)

    def group_task_ids(self, group_id: str) -> Result[Sequence[str], WorkflowError]:
        group = self._groups.get(group_id)
        if group is None:
            return Err(not_found(f"group '{group_id}' is not registered"))
        return Ok(group.task_ids)

    def build_execution_order(self) -> Result[tuple[Task, ...], WorkflowError]:
        tasks = self.tasks()
        if isinstance(tasks, Err):
            return tasks
        return build_execution_order(tasks.value)

    def __len__(self) -> int:
        tasks = self.tasks()
        return len(tasks.value) if isinstance(tasks, Ok) else 0
