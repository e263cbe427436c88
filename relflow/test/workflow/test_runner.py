"""Tests for relflow.workflow.runner module."""

from __future__ import annotations

from typing import Any

import pytest

from relflow.core.result import Ok, Result
from relflow.output.console import MockConsole
from relflow.workflow.context import WorkflowContext
from relflow.workflow.errors import WorkflowError
from relflow.workflow.group import TaskGroup, TaskGroupBuilder
from relflow.workflow.runner import run_workflow
from relflow.workflow.task import Task, TaskBuilder

type Ctx = WorkflowContext[dict[str, bool], None]


def _task(task_id: str, log: list[str], *deps: str) -> Task:
    async def execute(ctx: Ctx) -> Result[Ctx, WorkflowError]:
        log.append(task_id)
        return Ok(ctx)

    result = TaskBuilder(task_id).description(task_id).depends_on(*deps).execute(execute).build()
    assert isinstance(result, Ok)
    return result.value


def _group(group_id: str, tasks: list[Task], after: str | None = None, **skip: Any) -> TaskGroup:
    builder = TaskGroupBuilder(group_id).description(group_id).add_tasks(tasks)
    if after:
        builder = builder.depends_on_group(after)
    if skip:
        builder = builder.skip_when(skip["when"], skip["reason"])
    result = builder.build()
    assert isinstance(result, Ok)
    return result.value


class TestRunWorkflow:
    @pytest.mark.asyncio
    async def test_groups_run_in_dependency_order(self) -> None:
        log: list[str] = []
        items = [
            _group("git", [_task("commit", log), _task("tag", log, "commit")], after="version"),
            _group("version", [_task("bump", log)]),
        ]
        report = await run_workflow(items, WorkflowContext.create({}, None), console=MockConsole())

        assert report.success
        assert log == ["bump", "commit", "tag"]
        assert report.executed == ("version:bump", "git:commit", "git:tag")

    @pytest.mark.asyncio
    async def test_group_skip_skips_all_members(self) -> None:
        log: list[str] = []
        items = [
            _group("version", [_task("bump", log)]),
            _group(
                "git",
                [_task("commit", log), _task("tag", log, "commit")],
                after="version",
                when=lambda ctx: ctx.config["skip_git"],
                reason="skipGit enabled",
            ),
            _group("publish", [_task("release", log)], after="git"),
        ]
        context = WorkflowContext.create({"skip_git": True}, None)
        report = await run_workflow(items, context, console=MockConsole())

        assert report.success
        assert log == ["bump", "release"]
        assert report.skip_reason("git:commit") == "skipGit enabled"
        assert report.skip_reason("git:tag") == "skipGit enabled"

    @pytest.mark.asyncio
    async def test_cycle_is_reported_before_running(self) -> None:
        log: list[str] = []
        console = MockConsole()
        items = [_task("a", log, "b"), _task("b", log, "a")]
        report = await run_workflow(items, WorkflowContext.create({}, None), console=console)

        assert not report.success
        assert log == []
        assert report.failed_task is None
        assert report.error is not None
        assert report.error.kind == "invalid"
        assert console.has_error()

    @pytest.mark.asyncio
    async def test_duplicate_registration(self) -> None:
        log: list[str] = []
        items = [_task("a", log), _task("a", log)]
        report = await run_workflow(items, WorkflowContext.create({}, None), console=MockConsole())
        assert not report.success
        assert report.error is not None
        assert report.error.kind == "invalid"

    @pytest.mark.asyncio
    async def test_dangling_dependency(self) -> None:
        log: list[str] = []
        items = [_task("a", log, "ghost")]
        report = await run_workflow(items, WorkflowContext.create({}, None), console=MockConsole())
        assert report.error is not None
        assert report.error.kind == "not_found"
