"""Tests for graph validation and ordering."""

from __future__ import annotations

from typing import Any

from relflow.core.result import Err, Ok, Result
from relflow.workflow.context import WorkflowContext
from relflow.workflow.errors import WorkflowError
from relflow.workflow.graph import (
    build_execution_order,
    find_cycle,
    graph_statistics,
    validate_graph,
)
from relflow.workflow.task import Task, TaskMetadata

type Ctx = WorkflowContext[Any, Any]


async def _noop(ctx: Ctx) -> Result[Ctx, WorkflowError]:
    return Ok(ctx)


def _task(task_id: str, *deps: str, priority: int = 0) -> Task:
    # Built directly so cycles and dangling references can be constructed.
    return Task(
        id=task_id,
        description=task_id,
        execute=_noop,
        dependencies=deps,
        metadata=TaskMetadata(priority=priority),
    )


def _ids(tasks: tuple[Task, ...]) -> list[str]:
    return [t.id for t in tasks]


class TestBuildExecutionOrder:
    def test_dependencies_come_first(self) -> None:
        tasks = [_task("c", "b"), _task("b", "a"), _task("a")]
        result = build_execution_order(tasks)
        assert isinstance(result, Ok)
        assert _ids(result.value) == ["a", "b", "c"]

    def test_ties_keep_declaration_order(self) -> None:
        tasks = [_task("x"), _task("y"), _task("z")]
        result = build_execution_order(tasks)
        assert isinstance(result, Ok)
        assert _ids(result.value) == ["x", "y", "z"]

    def test_priority_breaks_ties(self) -> None:
        tasks = [_task("x"), _task("y", priority=10), _task("z", priority=5)]
        result = build_execution_order(tasks)
        assert isinstance(result, Ok)
        assert _ids(result.value) == ["y", "z", "x"]

    def test_priority_never_beats_dependencies(self) -> None:
        tasks = [_task("a"), _task("b", "a", priority=100)]
        result = build_execution_order(tasks)
        assert isinstance(result, Ok)
        assert _ids(result.value) == ["a", "b"]

    def test_deterministic(self) -> None:
        tasks = [_task("d", "b", "c"), _task("b", "a"), _task("c", "a"), _task("a"), _task("e")]
        first = build_execution_order(tasks)
        second = build_execution_order(list(tasks))
        assert isinstance(first, Ok) and isinstance(second, Ok)
        assert _ids(first.value) == _ids(second.value)

    def test_every_dependency_precedes_dependent(self) -> None:
        tasks = [_task("d", "b", "c"), _task("b", "a"), _task("c", "a"), _task("a"), _task("e", "d")]
        result = build_execution_order(tasks)
        assert isinstance(result, Ok)
        position = {t.id: i for i, t in enumerate(result.value)}
        for task in tasks:
            for dep in task.dependencies:
                assert position[dep] < position[task.id]

    def test_two_task_cycle(self) -> None:
        result = build_execution_order([_task("a", "b"), _task("b", "a")])
        assert isinstance(result, Err)
        assert result.error.kind == "invalid"
        assert "a -> b -> a" in result.error.message
        assert result.error.details == {"cycle": ("a", "b", "a")}

    def test_dangling_dependency(self) -> None:
        result = build_execution_order([_task("a", "ghost")])
        assert isinstance(result, Err)
        assert result.error.kind == "not_found"
        assert result.error.details == {"missing": "ghost", "referenced_by": "a"}

    def test_duplicate_ids(self) -> None:
        result = build_execution_order([_task("a"), _task("a")])
        assert isinstance(result, Err)
        assert result.error.kind == "invalid"
        assert "duplicate" in result.error.message

    def test_empty(self) -> None:
        assert build_execution_order([]) == Ok(())


class TestFindCycle:
    def test_no_cycle(self) -> None:
        assert find_cycle([_task("a"), _task("b", "a")]) is None

    def test_longer_cycle(self) -> None:
        cycle = find_cycle([_task("a", "c"), _task("b", "a"), _task("c", "b")])
        assert cycle is not None
        assert cycle[0] == cycle[-1]
        assert set(cycle) == {"a", "b", "c"}


class TestValidateGraph:
    def test_collects_all_errors(self) -> None:
        validation = validate_graph([_task("a", "x"), _task("a", "y")])
        assert not validation.is_valid
        kinds = sorted(e.kind for e in validation.errors)
        assert kinds == ["invalid", "not_found", "not_found"]
        assert validation.order == ()

    def test_valid_graph_has_order_and_depth(self) -> None:
        validation = validate_graph([_task("a"), _task("b", "a"), _task("c", "b")])
        assert validation.is_valid
        assert validation.order == ("a", "b", "c")
        assert validation.depth == {"a": 0, "b": 1, "c": 2}


class TestGraphStatistics:
    def test_statistics(self) -> None:
        tasks = [_task("a"), _task("b", "a"), _task("c", "a"), _task("d", "b", "c")]
        result = graph_statistics(tasks)
        assert isinstance(result, Ok)
        stats = result.value
        assert stats.total_tasks == 4
        assert stats.root_tasks == ("a",)
        assert stats.leaf_tasks == ("d",)
        assert stats.max_depth == 2
        assert stats.edge_count == 4
        assert stats.average_dependencies == 1.0
        assert stats.most_dependencies == ("d", 2)
        assert stats.most_dependents == ("a", 2)

    def test_statistics_of_cyclic_graph_fail(self) -> None:
        result = graph_statistics([_task("a", "b"), _task("b", "a")])
        assert isinstance(result, Err)
