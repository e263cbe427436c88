"""Validation and deterministic ordering of the task graph.

Edges run from a dependency to its dependent. Ordering is a Kahn walk
where, among tasks whose dependencies are all placed, the one with the
highest priority goes first and ties go to the earliest declared task.
The same input always yields the same order.
"""

from __future__ import annotations

import heapq
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from relflow.core.result import Err, Ok, Result

from .errors import WorkflowError, invalid, not_found
from .task import Task

__all__ = [
    "GraphStatistics",
    "GraphValidation",
    "build_execution_order",
    "find_cycle",
    "graph_statistics",
    "validate_graph",
]

_WHITE, _GRAY, _BLACK = 0, 1, 2


@dataclass(frozen=True, slots=True)
class GraphValidation:
    """Every problem found in a task set, plus ordering info when valid."""

    errors: tuple[WorkflowError, ...]
    warnings: tuple[str, ...]
    order: tuple[str, ...]
    depth: Mapping[str, int]

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True, slots=True)
class GraphStatistics:
    total_tasks: int
    root_tasks: tuple[str, ...]
    leaf_tasks: tuple[str, ...]
    max_depth: int
    edge_count: int
    average_dependencies: float
    most_dependencies: tuple[str, int] | None
    most_dependents: tuple[str, int] | None


def _duplicate_errors(tasks: Sequence[Task]) -> list[WorkflowError]:
    seen: set[str] = set()
    errors: list[WorkflowError] = []
    for task in tasks:
        if task.id in seen:
            errors.append(
                invalid(
                    f"duplicate task id '{task.id}'",
                    source=task.id,
                    details={"duplicate": task.id},
                )
            )
        seen.add(task.id)
    return errors


def _missing_dependency_errors(tasks: Sequence[Task]) -> list[WorkflowError]:
    known = {t.id for t in tasks}
    errors: list[WorkflowError] = []
    for task in tasks:
        for dep in task.dependencies:
            if dep not in known:
                errors.append(
                    not_found(
                        f"task '{task.id}' depends on unknown task '{dep}'",
                        source=task.id,
                        details={"missing": dep, "referenced_by": task.id},
                    )
                )
    return errors


def find_cycle(tasks: Sequence[Task]) -> list[str] | None:
    """Return one dependency cycle as a closed path, or None.

    The path follows dependency links: ``["a", "b", "a"]`` means ``a``
    depends on ``b`` which depends on ``a``. Unknown ids are ignored.
    """
    by_id = {t.id: t for t in tasks}
    color = dict.fromkeys(by_id, _WHITE)
    stack: list[str] = []

    def visit(task_id: str) -> list[str] | None:
        color[task_id] = _GRAY
        stack.append(task_id)
        for dep in by_id[task_id].dependencies:
            if dep not in by_id:
                continue
            if color[dep] == _GRAY:
                start = stack.index(dep)
                return [*stack[start:], dep]
            if color[dep] == _WHITE:
                cycle = visit(dep)
                if cycle is not None:
                    return cycle
        stack.pop()
        color[task_id] = _BLACK
        return None

    for task in tasks:
        if color[task.id] == _WHITE:
            cycle = visit(task.id)
            if cycle is not None:
                return cycle
    return None


def _cycle_error(cycle: list[str]) -> WorkflowError:
    path = " -> ".join(cycle)
    return invalid(
        f"dependency cycle detected: {path}",
        hint="remove one of the dependencies on this path",
        source=cycle[0],
        details={"cycle": tuple(cycle)},
    )


def _kahn_order(tasks: Sequence[Task]) -> list[Task]:
    index = {t.id: i for i, t in enumerate(tasks)}
    remaining = {t.id: len(set(t.dependencies)) for t in tasks}
    dependents: dict[str, list[str]] = {t.id: [] for t in tasks}
    for task in tasks:
        for dep in set(task.dependencies):
            dependents[dep].append(task.id)

    ready = [(-t.priority, index[t.id]) for t in tasks if remaining[t.id] == 0]
    heapq.heapify(ready)

    order: list[Task] = []
    while ready:
        _, i = heapq.heappop(ready)
        task = tasks[i]
        order.append(task)
        for dependent_id in dependents[task.id]:
            remaining[dependent_id] -= 1
            if remaining[dependent_id] == 0:
                dependent = tasks[index[dependent_id]]
                heapq.heappush(ready, (-dependent.priority, index[dependent_id]))
    return order


def build_execution_order(tasks: Sequence[Task]) -> Result[tuple[Task, ...], WorkflowError]:
    """Validate ``tasks`` and return them in execution order.

    Returns:
        Ok(ordered tasks), or the first problem found: ``invalid`` for
        duplicate ids and cycles, ``not_found`` for dangling dependencies.
    """
    for errors in (_duplicate_errors(tasks), _missing_dependency_errors(tasks)):
        if errors:
            return Err(errors[0])

    cycle = find_cycle(tasks)
    if cycle is not None:
        return Err(_cycle_error(cycle))

    return Ok(tuple(_kahn_order(tasks)))


def _depths(ordered: Sequence[Task]) -> dict[str, int]:
    depth: dict[str, int] = {}
    for task in ordered:
        depth[task.id] = max((depth[d] + 1 for d in task.dependencies), default=0)
    return depth


def validate_graph(tasks: Sequence[Task]) -> GraphValidation:
    """Collect every error and warning instead of stopping at the first."""
    errors = [*_duplicate_errors(tasks), *_missing_dependency_errors(tasks)]
    warnings = [f"task '{t.id}' has an empty description" for t in tasks if not t.description.strip()]

    if not errors:
        cycle = find_cycle(tasks)
        if cycle is not None:
            errors.append(_cycle_error(cycle))

    if errors:
        return GraphValidation(tuple(errors), tuple(warnings), (), {})

    ordered = _kahn_order(tasks)
    return GraphValidation(
        errors=(),
        warnings=tuple(warnings),
        order=tuple(t.id for t in ordered),
        depth=_depths(ordered),
    )


def graph_statistics(tasks: Sequence[Task]) -> Result[GraphStatistics, WorkflowError]:
    """Summarize the shape of a valid graph."""
    ordered = build_execution_order(tasks)
    if isinstance(ordered, Err):
        return ordered

    depth = _depths(ordered.value)
    dependent_count: dict[str, int] = {t.id: 0 for t in tasks}
    for task in tasks:
        for dep in set(task.dependencies):
            dependent_count[dep] += 1

    edge_count = sum(len(set(t.dependencies)) for t in tasks)
    most_deps = max(tasks, key=lambda t: len(t.dependencies), default=None)
    most_used = max(tasks, key=lambda t: dependent_count[t.id], default=None)

    return Ok(
        GraphStatistics(
            total_tasks=len(tasks),
            root_tasks=tuple(t.id for t in tasks if not t.dependencies),
            leaf_tasks=tuple(t.id for t in tasks if dependent_count[t.id] == 0),
            max_depth=max(depth.values(), default=0),
            edge_count=edge_count,
            average_dependencies=edge_count / len(tasks) if tasks else 0.0,
            most_dependencies=(
                (most_deps.id, len(most_deps.dependencies))
                if most_deps is not None and most_deps.dependencies
                else None
            ),
            most_dependents=(
                (most_used.id, dependent_count[most_used.id])
                if most_used is not None and dependent_count[most_used.id]
                else None
            ),
        )
    )
