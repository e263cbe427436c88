"""The release workflow: five groups run one after another.

    setup -> version -> changelog -> git -> publish

Each group is skipped as a whole by its config flag; individual tasks add
finer conditions (pushing, nothing to commit, no git).
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from relflow.core.config import ReleaseConfig
from relflow.core.result import Err, Ok, Result, collect
from relflow.services.protocols import ReleaseServices
from relflow.workflow.context import WorkflowContext
from relflow.workflow.errors import WorkflowError
from relflow.workflow.executor import ExecutionReport
from relflow.workflow.graph import GraphStatistics, graph_statistics
from relflow.workflow.group import TaskGroup, TaskGroupBuilder
from relflow.workflow.registry import TaskRegistry
from relflow.workflow.runner import run_workflow
from relflow.workflow.task import Task

from . import data
from . import tasks as t

__all__ = ["ReleasePlan", "build_release_workflow", "plan_release", "run_release"]

type TaskFactory = Callable[[], Result[Task, WorkflowError]]
type Predicate = Callable[[WorkflowContext[ReleaseConfig, ReleaseServices]], bool]


def _group(
    group_id: str,
    description: str,
    factories: Sequence[TaskFactory],
    *,
    after: str | None = None,
    skip_when: Predicate | None = None,
    skip_reason: str | None = None,
) -> Result[TaskGroup, WorkflowError]:
    built = collect(factory() for factory in factories)
    if isinstance(built, Err):
        return built

    builder = TaskGroupBuilder(group_id).description(description).add_tasks(built.value)
    if after is not None:
        builder = builder.depends_on_group(after)
    if skip_when is not None:
        builder = builder.skip_when(skip_when, skip_reason)
    return builder.build()


def build_release_workflow() -> Result[list[TaskGroup], WorkflowError]:
    """Build fresh release groups; call once per run since undo state lives in the tasks."""
    return collect(
        [
            _group(
                "setup",
                "Check preconditions and read the current version",
                [t.preflight_task, t.initialize_version_task],
            ),
            _group(
                "version",
                "Determine and write the next version",
                [
                    t.version_flow_task,
                    t.straight_bump_task,
                    t.automatic_bump_task,
                    t.manual_version_task,
                    t.bump_version_task,
                ],
                after="setup",
                skip_when=lambda ctx: ctx.config.skip_bump,
                skip_reason=data.SKIP_BUMP_REASON,
            ),
            _group(
                "changelog",
                "Update the changelog",
                [t.generate_changelog_task],
                after="version",
                skip_when=lambda ctx: ctx.config.skip_changelog,
                skip_reason=data.SKIP_CHANGELOG_REASON,
            ),
            _group(
                "git",
                "Commit, tag and push the release",
                [
                    t.stage_changes_task,
                    t.commit_changes_task,
                    t.create_tag_task,
                    t.push_commit_task,
                    t.push_tag_task,
                ],
                after="changelog",
                skip_when=lambda ctx: ctx.config.skip_git,
                skip_reason=data.SKIP_GIT_REASON,
            ),
            _group(
                "publish",
                "Publish the hosted release",
                [t.publish_github_release_task],
                after="git",
                skip_when=lambda ctx: ctx.config.skip_github_release,
                skip_reason=data.SKIP_GITHUB_RELEASE_REASON,
            ),
        ]
    )


async def run_release(config: ReleaseConfig, services: ReleaseServices) -> ExecutionReport:
    groups = build_release_workflow()
    if isinstance(groups, Err):
        return ExecutionReport.construction_failure(groups.error)

    context = WorkflowContext.create(config, services)
    if config.dry_run:
        services.console.warning("dry run: no files, commits, tags or releases will be changed")
    return await run_workflow(groups.value, context, console=services.console)


@dataclass(frozen=True, slots=True)
class ReleasePlan:
    tasks: tuple[Task, ...]
    statistics: GraphStatistics


def plan_release() -> Result[ReleasePlan, WorkflowError]:
    """Ordered release tasks and graph statistics, without running anything."""
    groups = build_release_workflow()
    if isinstance(groups, Err):
        return groups

    registry = TaskRegistry()
    registered = registry.register_all(groups.value)
    if isinstance(registered, Err):
        return registered
    ordered = registry.build_execution_order()
    if isinstance(ordered, Err):
        return ordered
    stats = graph_statistics(ordered.value)
    if isinstance(stats, Err):
        return stats
    return Ok(ReleasePlan(tasks=ordered.value, statistics=stats.value))
