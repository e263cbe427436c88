from __future__ import annotations

from datetime import date

from relflow.core.result import Err, Ok, Result
from relflow.services.changelog import prepend_section, render_section
from relflow.workflow.errors import WorkflowError
from relflow.workflow.task import Task, TaskBuilder

from .. import data
from ..context import FileBackup, ReleaseContext, next_version, record_change
from ..errors import from_git, from_service

__all__ = ["generate_changelog_task"]


def generate_changelog_task() -> Result[Task, WorkflowError]:
    """Prepend a section for the next version to the changelog.

    The file's previous content is kept in memory for undo; a changelog
    that did not exist before is removed again.
    """
    backup = FileBackup()

    async def generate(ctx: ReleaseContext) -> Result[ReleaseContext, WorkflowError]:
        version = next_version(ctx)
        if isinstance(version, Err):
            return version

        git = ctx.services.git
        commits = git.commits_since(git.latest_tag())
        if isinstance(commits, Err):
            return Err(from_git(commits.error))

        section = render_section(
            version.value,
            commits.value,
            release_date=date.today(),
            notes=ctx.config.release_notes,
        )
        path = ctx.config.changelog_path
        console = ctx.services.console
        console.info(f"adding {version.value} to {path}")
        updated = ctx.fork(data.CHANGELOG_SECTION, section)
        if ctx.config.dry_run:
            console.print(f"[dry-run] would update {path}")
            console.debug(section)
            return Ok(record_change(updated, path))

        fs = ctx.services.fs
        existing = ""
        existed = fs.exists(path)
        if existed:
            read = fs.read(path)
            if isinstance(read, Err):
                return Err(from_service(read.error))
            existing = read.value

        backup.path, backup.content, backup.existed = path, existing, existed
        written = fs.write(path, prepend_section(existing, section))
        if isinstance(written, Err):
            return Err(from_service(written.error))
        return Ok(record_change(updated, path))

    async def restore(ctx: ReleaseContext) -> Result[None, WorkflowError]:
        if ctx.config.dry_run or backup.path is None:
            return Ok(None)
        fs = ctx.services.fs
        ctx.services.console.info(f"restoring {backup.path}")
        if not backup.existed:
            result = fs.remove(backup.path)
        else:
            result = fs.write(backup.path, backup.content or "")
        if isinstance(result, Err):
            return Err(from_service(result.error))
        return Ok(None)

    return (
        TaskBuilder("generate-changelog")
        .description("Generate the changelog section for this release")
        .kind("mutation")
        .execute(generate)
        .with_undo(restore)
        .build()
    )
