"""Git tasks: stage, commit, tag and push the release.

Commit and tag are undone locally (soft reset, tag deletion). A pushed
commit is never rewritten; a pushed tag is deleted from the remote.
"""

from __future__ import annotations

from relflow.core.result import Err, Ok, Result
from relflow.workflow.errors import WorkflowError
from relflow.workflow.task import Task, TaskBuilder

from .. import data
from ..context import ReleaseContext, get_str_value, next_version, project_path
from ..errors import from_git
from ..templates import render_template

__all__ = [
    "commit_changes_task",
    "create_tag_task",
    "push_commit_task",
    "push_tag_task",
    "stage_changes_task",
]


def _nothing_changed(ctx: ReleaseContext) -> bool:
    return ctx.config.skip_bump and ctx.config.skip_changelog


def _skip_push(ctx: ReleaseContext) -> bool:
    return ctx.config.skip_push


def _tag_name(ctx: ReleaseContext) -> Result[str, WorkflowError]:
    if ctx.has(data.TAG_NAME):
        return get_str_value(ctx, data.TAG_NAME)
    version = next_version(ctx)
    if isinstance(version, Err):
        return version
    return Ok(render_template(ctx.config.tag_name, ctx.config, version.value))


async def _stage(ctx: ReleaseContext) -> Result[ReleaseContext, WorkflowError]:
    changed = ctx.get_or(data.CHANGED_FILES, ())
    files = [project_path(ctx, p) for p in changed] if isinstance(changed, tuple) else []
    console = ctx.services.console
    if not files:
        console.debug("no files to stage")
        return Ok(ctx)

    console.info(f"staging {', '.join(files)}")
    if ctx.config.dry_run:
        console.print(f"[dry-run] git add -- {' '.join(files)}")
        return Ok(ctx)

    staged = ctx.services.git.stage(files)
    if isinstance(staged, Err):
        return Err(from_git(staged.error))
    return Ok(ctx)


def stage_changes_task() -> Result[Task, WorkflowError]:
    return (
        TaskBuilder("stage-changes")
        .description("Stage the release changes")
        .skip_when(_nothing_changed, data.NO_CHANGES_REASON)
        .execute(_stage)
        .build()
    )


async def _commit(ctx: ReleaseContext) -> Result[ReleaseContext, WorkflowError]:
    version = next_version(ctx)
    if isinstance(version, Err):
        return version
    message = render_template(ctx.config.commit_message, ctx.config, version.value)
    console = ctx.services.console
    console.info(f"committing: {message}")
    if ctx.config.dry_run:
        console.print(f"[dry-run] git commit -m {message!r}")
        return Ok(ctx)

    committed = ctx.services.git.commit(message)
    if isinstance(committed, Err):
        return Err(from_git(committed.error, hint="check git user.name / user.email and hooks"))
    return Ok(ctx.fork(data.COMMIT_SHA, committed.value))


async def _undo_commit(ctx: ReleaseContext) -> Result[None, WorkflowError]:
    if ctx.config.dry_run:
        return Ok(None)
    ctx.services.console.info("undoing release commit (git reset --soft HEAD~1)")
    reset = ctx.services.git.reset_last_commit()
    if isinstance(reset, Err):
        return Err(from_git(reset.error))
    return Ok(None)


def commit_changes_task() -> Result[Task, WorkflowError]:
    return (
        TaskBuilder("commit-changes")
        .description("Commit the release changes")
        .depends_on("stage-changes")
        .skip_when(_nothing_changed, data.NO_CHANGES_REASON)
        .execute(_commit)
        .with_undo(_undo_commit)
        .build()
    )


async def _tag(ctx: ReleaseContext) -> Result[ReleaseContext, WorkflowError]:
    name = _tag_name(ctx)
    if isinstance(name, Err):
        return name
    version = str(ctx.get_or(data.NEXT_VERSION, ""))
    message = render_template(ctx.config.release_title, ctx.config, version)
    console = ctx.services.console
    console.info(f"creating tag {name.value}")
    if ctx.config.dry_run:
        console.print(f"[dry-run] git tag -a {name.value}")
        return Ok(ctx.fork(data.TAG_NAME, name.value))

    tagged = ctx.services.git.tag(name.value, message)
    if isinstance(tagged, Err):
        return Err(from_git(tagged.error, hint=f"does tag {name.value} already exist?"))
    return Ok(ctx.fork(data.TAG_NAME, name.value))


async def _undo_tag(ctx: ReleaseContext) -> Result[None, WorkflowError]:
    if ctx.config.dry_run:
        return Ok(None)
    name = _tag_name(ctx)
    if isinstance(name, Err):
        return name
    ctx.services.console.info(f"deleting tag {name.value}")
    deleted = ctx.services.git.delete_tag(name.value)
    if isinstance(deleted, Err):
        return Err(from_git(deleted.error))
    return Ok(None)


def create_tag_task() -> Result[Task, WorkflowError]:
    return (
        TaskBuilder("create-tag")
        .description("Tag the release")
        .depends_on("commit-changes")
        .execute(_tag)
        .with_undo(_undo_tag)
        .build()
    )


async def _push_commit(ctx: ReleaseContext) -> Result[ReleaseContext, WorkflowError]:
    remote = ctx.config.remote
    branch = ctx.services.git.current_branch()
    console = ctx.services.console
    console.info(f"pushing {branch or 'HEAD'} to {remote}")
    if ctx.config.dry_run:
        console.print(f"[dry-run] git push {remote} {branch or ''}".rstrip())
        return Ok(ctx)

    pushed = ctx.services.git.push(remote, branch)
    if isinstance(pushed, Err):
        return Err(from_git(pushed.error, hint="pull and rebase, then retry the release"))
    return Ok(ctx)


def push_commit_task() -> Result[Task, WorkflowError]:
    return (
        TaskBuilder("push-commit")
        .description("Push the release commit")
        .depends_on("create-tag")
        .skip_when(_skip_push, data.SKIP_PUSH_REASON)
        .skip_when(_nothing_changed, data.NO_CHANGES_REASON)
        .execute(_push_commit)
        .build()
    )


async def _push_tag(ctx: ReleaseContext) -> Result[ReleaseContext, WorkflowError]:
    name = _tag_name(ctx)
    if isinstance(name, Err):
        return name
    remote = ctx.config.remote
    console = ctx.services.console
    console.info(f"pushing tag {name.value} to {remote}")
    if ctx.config.dry_run:
        console.print(f"[dry-run] git push {remote} refs/tags/{name.value}")
        return Ok(ctx)

    pushed = ctx.services.git.push_tag(remote, name.value)
    if isinstance(pushed, Err):
        return Err(from_git(pushed.error))
    return Ok(ctx)


async def _undo_push_tag(ctx: ReleaseContext) -> Result[None, WorkflowError]:
    if ctx.config.dry_run:
        return Ok(None)
    name = _tag_name(ctx)
    if isinstance(name, Err):
        return name
    ctx.services.console.info(f"deleting tag {name.value} from {ctx.config.remote}")
    deleted = ctx.services.git.delete_remote_tag(ctx.config.remote, name.value)
    if isinstance(deleted, Err):
        return Err(from_git(deleted.error))
    return Ok(None)


def push_tag_task() -> Result[Task, WorkflowError]:
    return (
        TaskBuilder("push-tag")
        .description("Push the release tag")
        .depends_on("push-commit")
        .skip_when(_skip_push, data.SKIP_PUSH_REASON)
        .execute(_push_tag)
        .with_undo(_undo_push_tag)
        .build()
    )
