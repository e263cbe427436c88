"""Version tasks: pick a bump strategy, compute the next version, write it.

``version-flow`` is a controller. After it runs, its ``next_tasks`` sends
the walk to exactly one of ``straight-bump``, ``automatic-bump`` or
``manual-version``; the other two are recorded as skipped.
"""

from __future__ import annotations

from collections.abc import Sequence

from relflow.core.result import Err, Ok, Result
from relflow.services.semver import SemVer, parse_version
from relflow.workflow.errors import WorkflowError, conflict, invalid
from relflow.workflow.task import Task, TaskBuilder

from .. import data
from ..context import (
    FileBackup,
    ReleaseContext,
    get_str_value,
    next_version,
    record_change,
)
from ..errors import from_git, from_service, from_version_file
from ..version_file import write_version

__all__ = [
    "automatic_bump_task",
    "bump_version_task",
    "manual_version_task",
    "straight_bump_task",
    "version_flow_task",
]

BUMP_ALTERNATIVES = ("straight-bump", "automatic-bump", "manual-version")


def _current(ctx: ReleaseContext) -> Result[SemVer, WorkflowError]:
    current = get_str_value(ctx, data.CURRENT_VERSION)
    if isinstance(current, Err):
        return current
    parsed = parse_version(current.value)
    if parsed is None:
        return Err(invalid(f"current version '{current.value}' is not a semantic version"))
    return Ok(parsed)


def choose_bump_task(ctx: ReleaseContext) -> Result[Sequence[str], WorkflowError]:
    config = ctx.config
    if config.version is not None:
        return Ok(("manual-version",))
    if config.bump_strategy == "manual" and config.release_type is not None:
        return Ok(("straight-bump",))
    if config.bump_strategy == "auto":
        return Ok(("automatic-bump",))
    return Err(
        invalid(
            "cannot determine the next version",
            hint="pass --release-type, --set-version or use the auto bump strategy",
        )
    )


async def _announce_strategy(ctx: ReleaseContext) -> Result[ReleaseContext, WorkflowError]:
    ctx.services.console.debug(f"bump strategy: {ctx.config.bump_strategy}")
    return Ok(ctx)


def version_flow_task() -> Result[Task, WorkflowError]:
    return (
        TaskBuilder("version-flow")
        .description("Select how the next version is determined")
        .kind("query")
        .execute(_announce_strategy)
        .next_tasks(choose_bump_task)
        .build()
    )


def _with_next(ctx: ReleaseContext, version: SemVer, level: str | None) -> ReleaseContext:
    ctx.services.console.info(f"next version: {version}")
    return ctx.fork_many({data.NEXT_VERSION: str(version), data.BUMP_LEVEL: level})


async def _straight_bump(ctx: ReleaseContext) -> Result[ReleaseContext, WorkflowError]:
    release_type = ctx.config.release_type
    if release_type is None:
        return Err(invalid("straight bump needs a release type"))
    current = _current(ctx)
    if isinstance(current, Err):
        return current
    bumped = current.value.bump(release_type, ctx.config.pre_release_id)
    return Ok(_with_next(ctx, bumped, release_type))


def straight_bump_task() -> Result[Task, WorkflowError]:
    return (
        TaskBuilder("straight-bump")
        .description("Bump the version by the configured release type")
        .kind("query")
        .depends_on("version-flow")
        .execute(_straight_bump)
        .build()
    )


async def _automatic_bump(ctx: ReleaseContext) -> Result[ReleaseContext, WorkflowError]:
    current = _current(ctx)
    if isinstance(current, Err):
        return current

    git = ctx.services.git
    since = git.latest_tag()
    commits = git.commits_since(since)
    if isinstance(commits, Err):
        return Err(from_git(commits.error))

    level = ctx.services.commits.analyze_for_version(
        (c.message for c in commits.value), current.value
    )
    if level is None:
        return Err(
            conflict(
                f"no releasable commits since {since or 'the first commit'}",
                hint="only feat, fix, perf and breaking changes trigger a release",
            )
        )

    version = current.value
    pre_id = ctx.config.pre_release_id
    if ctx.config.release_type == "prerelease":
        if version.is_prerelease:
            version = version.bump("prerelease", pre_id)
        else:
            bumped = version.bump(level)
            version = SemVer(bumped.major, bumped.minor, bumped.patch, (pre_id, "0"))
    else:
        version = version.bump(level)
    return Ok(_with_next(ctx, version, level))


def automatic_bump_task() -> Result[Task, WorkflowError]:
    return (
        TaskBuilder("automatic-bump")
        .description("Derive the next version from conventional commits")
        .kind("query")
        .depends_on("version-flow")
        .execute(_automatic_bump)
        .build()
    )


async def _manual_version(ctx: ReleaseContext) -> Result[ReleaseContext, WorkflowError]:
    requested = ctx.config.version or ""
    parsed = parse_version(requested)
    if parsed is None:
        return Err(invalid(f"'{requested}' is not a semantic version"))
    current = _current(ctx)
    if isinstance(current, Err):
        return current
    if parsed == current.value:
        return Err(conflict(f"version {parsed} is already the current version"))
    return Ok(_with_next(ctx, parsed, None))


def manual_version_task() -> Result[Task, WorkflowError]:
    return (
        TaskBuilder("manual-version")
        .description("Use the explicitly requested version")
        .kind("query")
        .depends_on("version-flow")
        .execute(_manual_version)
        .build()
    )


def bump_version_task() -> Result[Task, WorkflowError]:
    backup = FileBackup()

    async def bump(ctx: ReleaseContext) -> Result[ReleaseContext, WorkflowError]:
        version = next_version(ctx)
        if isinstance(version, Err):
            return version
        path = ctx.config.version_file
        console = ctx.services.console
        console.info(f"writing version {version.value} to {path}")
        if ctx.config.dry_run:
            console.print(f"[dry-run] would update {path}")
            return Ok(record_change(ctx, path))

        fs = ctx.services.fs
        content = fs.read(path)
        if isinstance(content, Err):
            return Err(from_service(content.error))
        updated = write_version(path, content.value, version.value)
        if isinstance(updated, Err):
            return Err(from_version_file(updated.error))

        backup.path, backup.content = path, content.value
        written = fs.write(path, updated.value)
        if isinstance(written, Err):
            return Err(from_service(written.error))
        return Ok(record_change(ctx, path))

    async def restore(ctx: ReleaseContext) -> Result[None, WorkflowError]:
        if ctx.config.dry_run or backup.path is None or backup.content is None:
            return Ok(None)
        ctx.services.console.info(f"restoring {backup.path}")
        restored = ctx.services.fs.write(backup.path, backup.content)
        if isinstance(restored, Err):
            return Err(from_service(restored.error))
        return Ok(None)

    return (
        TaskBuilder("bump-version")
        .description("Write the next version to the version file")
        .kind("mutation")
        .depends_on(*BUMP_ALTERNATIVES)
        .execute(bump)
        .with_undo(restore)
        .build()
    )
