"""Tests for relflow.workflow.registry module."""

from __future__ import annotations

from typing import Any

from relflow.core.result import Err, Ok, Result
from relflow.workflow.context import WorkflowContext
from relflow.workflow.errors import WorkflowError
from relflow.workflow.group import TaskGroup, TaskGroupBuilder
from relflow.workflow.registry import TaskRegistry
from relflow.workflow.task import Task, TaskBuilder

type Ctx = WorkflowContext[Any, Any]


async def _noop(ctx: Ctx) -> Result[Ctx, WorkflowError]:
    return Ok(ctx)


def _task(task_id: str, *deps: str) -> Task:
    result = TaskBuilder(task_id).description(task_id).depends_on(*deps).execute(_noop).build()
    assert isinstance(result, Ok)
    return result.value


def _group(group_id: str, *task_ids: str, after: str | None = None) -> TaskGroup:
    builder = TaskGroupBuilder(group_id).description(group_id).add_tasks([_task(t) for t in task_ids])
    if after:
        builder = builder.depends_on_group(after)
    result = builder.build()
    assert isinstance(result, Ok)
    return result.value


class TestRegistration:
    def test_duplicate_task(self) -> None:
        registry = TaskRegistry()
        assert registry.register(_task("a")) == Ok(None)
        result = registry.register(_task("a"))
        assert isinstance(result, Err)
        assert result.error.kind == "invalid"

    def test_duplicate_group(self) -> None:
        registry = TaskRegistry()
        assert registry.register_group(_group("g", "a")) == Ok(None)
        assert isinstance(registry.register_group(_group("g", "b")), Err)

    def test_register_all_stops_at_first_error(self) -> None:
        registry = TaskRegistry()
        result = registry.register_all([_task("a"), _task("a"), _task("b")])
        assert isinstance(result, Err)
        assert len(registry) == 1

    def test_order_of_registration_does_not_matter(self) -> None:
        """A group may be registered before the group it depends on."""
        registry = TaskRegistry()
        registry.register_all([_group("second", "y", after="first"), _group("first", "x")])
        ordered = registry.build_execution_order()
        assert isinstance(ordered, Ok)
        assert [t.id for t in ordered.value] == ["first:x", "second:y"]


class TestLookup:
    def test_get_and_has(self) -> None:
        registry = TaskRegistry()
        registry.register_all([_task("top"), _group("g", "a", "b")])
        assert registry.has("top")
        assert registry.has("g:a")
        assert not registry.has("a")
        result = registry.get("g:b")
        assert isinstance(result, Ok)
        assert result.value.group_id == "g"

    def test_get_missing(self) -> None:
        result = TaskRegistry().get("nope")
        assert isinstance(result, Err)
        assert result.error.kind == "not_found"

    def test_group_task_ids(self) -> None:
        registry = TaskRegistry()
        registry.register_group(_group("g", "a", "b"))
        assert registry.group_task_ids("g") == Ok(("g:a", "g:b"))
        assert isinstance(registry.group_task_ids("h"), Err)

    def test_len_counts_expanded_tasks(self) -> None:
        registry = TaskRegistry()
        registry.register_all([_task("top"), _group("g", "a", "b")])
        assert len(registry) == 3

    def test_unknown_group_dependency_surfaces_on_order(self) -> None:
        registry = TaskRegistry()
        registry.register_group(_group("g", "a", after="ghost"))
        result = registry.build_execution_order()
        assert isinstance(result, Err)
        assert result.error.kind == "not_found"
