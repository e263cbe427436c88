from __future__ import annotations

from relflow.core.result import Err, Ok, Result
from relflow.services.changelog import extract_release_notes
from relflow.services.github import ReleaseRequest
from relflow.workflow.errors import WorkflowError
from relflow.workflow.task import Task, TaskBuilder

from .. import data
from ..context import ReleaseContext, get_str_value, next_version
from ..errors import from_service
from ..templates import render_template

__all__ = ["publish_github_release_task", "release_request"]


def release_request(ctx: ReleaseContext) -> Result[ReleaseRequest, WorkflowError]:
    """Build the hosted release from the tag and changelog section in ``ctx``."""
    version = next_version(ctx)
    if isinstance(version, Err):
        return version
    tag = get_str_value(ctx, data.TAG_NAME)
    if isinstance(tag, Err):
        return tag

    config = ctx.config
    section = ctx.get_or(data.CHANGELOG_SECTION)
    if isinstance(section, str) and section.strip():
        notes = extract_release_notes(section)
    else:
        notes = config.release_notes or f"Release {tag.value}"

    return Ok(
        ReleaseRequest(
            tag=tag.value,
            title=render_template(config.release_title, config, version.value),
            notes=notes,
            draft=config.release_draft,
            prerelease=config.release_pre_release,
            latest=config.release_latest,
        )
    )


async def _publish(ctx: ReleaseContext) -> Result[ReleaseContext, WorkflowError]:
    request = release_request(ctx)
    if isinstance(request, Err):
        return request
    console = ctx.services.console
    console.info(f"creating GitHub release {request.value.tag}")
    if ctx.config.dry_run:
        console.print(f"[dry-run] gh release create {request.value.tag}")
        return Ok(ctx)

    created = ctx.services.host.create_release(request.value)
    if isinstance(created, Err):
        return Err(from_service(created.error))
    if created.value:
        console.success(f"release published: {created.value}")
    return Ok(ctx.fork(data.RELEASE_URL, created.value))


async def _unpublish(ctx: ReleaseContext) -> Result[None, WorkflowError]:
    if ctx.config.dry_run:
        return Ok(None)
    tag = get_str_value(ctx, data.TAG_NAME)
    if isinstance(tag, Err):
        return tag
    ctx.services.console.info(f"deleting GitHub release {tag.value}")
    deleted = ctx.services.host.delete_release(tag.value)
    if isinstance(deleted, Err):
        return Err(from_service(deleted.error))
    return Ok(None)


def publish_github_release_task() -> Result[Task, WorkflowError]:
    return (
        TaskBuilder("publish-github-release")
        .description("Publish the GitHub release")
        .kind("notification")
        .phase("cleanup")
        .skip_when(lambda ctx: ctx.config.skip_git, data.SKIP_GIT_REASON)
        .execute(_publish)
        .with_undo(_unpublish)
        .build()
    )
