"""Setup tasks: preflight checks and reading the current version."""

from __future__ import annotations

from relflow.core.result import Err, Ok, Result
from relflow.services.semver import parse_version
from relflow.workflow.errors import WorkflowError, conflict, invalid, not_found
from relflow.workflow.task import Task, TaskBuilder

from .. import data
from ..context import ReleaseContext
from ..errors import from_git, from_service, from_version_file
from ..version_file import read_version

__all__ = ["initialize_version_task", "preflight_task"]

DEFAULT_VERSION = "0.0.0"


def _check_git(ctx: ReleaseContext) -> Result[None, WorkflowError]:
    git = ctx.services.git
    if not git.is_repository():
        return Err(not_found("not inside a git repository", hint="run relflow from your checkout"))

    status = git.status()
    if isinstance(status, Err):
        return Err(from_git(status.error))
    if not status.value.is_clean:
        paths = ", ".join(e.path for e in status.value.entries[:5])
        return Err(
            conflict(
                "working tree has uncommitted changes",
                hint=f"commit or stash: {paths}",
                details={"paths": tuple(e.path for e in status.value.entries)},
            )
        )

    if ctx.config.branch is not None:
        branch = git.current_branch()
        if branch != ctx.config.branch:
            return Err(
                conflict(
                    f"releases run from '{ctx.config.branch}', current branch is '{branch or 'detached HEAD'}'",
                )
            )

    unpushed = git.unpushed_count()
    if isinstance(unpushed, Err):
        return Err(from_git(unpushed.error))
    if unpushed.value > 0:
        return Err(
            conflict(
                f"{unpushed.value} local commit(s) are not pushed",
                hint="push or drop them before releasing",
            )
        )
    return Ok(None)


async def _preflight(ctx: ReleaseContext) -> Result[ReleaseContext, WorkflowError]:
    console = ctx.services.console
    config = ctx.config

    if not config.skip_git:
        console.debug("checking git repository state")
        checked = _check_git(ctx)
        if isinstance(checked, Err):
            return checked

    if not config.skip_bump and not ctx.services.fs.exists(config.version_file):
        return Err(
            not_found(
                f"version file not found: {config.version_file}",
                hint="set version_file in the release config",
            )
        )

    if not config.skip_git and not config.skip_github_release and not ctx.services.host.is_available():
        return Err(
            conflict(
                "gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/ or pass --skip-github-release",
            )
        )

    console.success("preflight checks passed")
    return Ok(ctx)


def preflight_task() -> Result[Task, WorkflowError]:
    return (
        TaskBuilder("preflight")
        .description("Check that the repository is ready for a release")
        .kind("validation")
        .phase("setup")
        .priority(10)
        .skip_when(lambda ctx: ctx.config.skip_preflight_check, data.SKIP_PREFLIGHT_REASON)
        .execute(_preflight)
        .build()
    )


async def _initialize_version(ctx: ReleaseContext) -> Result[ReleaseContext, WorkflowError]:
    path = ctx.config.version_file
    version = DEFAULT_VERSION

    if ctx.services.fs.exists(path):
        content = ctx.services.fs.read(path)
        if isinstance(content, Err):
            return Err(from_service(content.error))
        declared = read_version(path, content.value)
        if isinstance(declared, Err):
            return Err(from_version_file(declared.error))
        version = declared.value or DEFAULT_VERSION

    if parse_version(version) is None:
        return Err(invalid(f"{path} declares '{version}', which is not a semantic version"))

    ctx.services.console.info(f"current version: {version}")
    return Ok(ctx.fork_many({data.CURRENT_VERSION: version, data.NEXT_VERSION: version}))


def initialize_version_task() -> Result[Task, WorkflowError]:
    return (
        TaskBuilder("initialize-version")
        .description("Read the current version")
        .kind("query")
        .phase("setup")
        .depends_on("preflight")
        .execute(_initialize_version)
        .build()
    )
