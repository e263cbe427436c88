"""Typed view of the workflow context used by release tasks."""

from __future__ import annotations

from dataclasses import dataclass

from relflow.core.config import ReleaseConfig
from relflow.core.result import Err, Ok, Result
from relflow.services.protocols import ReleaseServices
from relflow.workflow.context import WorkflowContext
from relflow.workflow.errors import WorkflowError, invalid

from . import data

__all__ = [
    "FileBackup",
    "ReleaseContext",
    "get_str_value",
    "next_version",
    "project_path",
    "record_change",
]

type ReleaseContext = WorkflowContext[ReleaseConfig, ReleaseServices]


def get_str_value(ctx: ReleaseContext, key: str) -> Result[str, WorkflowError]:
    value = ctx.get(key)
    if isinstance(value, Err):
        return value
    if not isinstance(value.value, str):
        return Err(invalid(f"context value '{key}' is not a string"))
    return Ok(value.value)


def next_version(ctx: ReleaseContext) -> Result[str, WorkflowError]:
    return get_str_value(ctx, data.NEXT_VERSION)


def project_path(ctx: ReleaseContext, path: str) -> str:
    """``path`` relative to the repository root, for git commands."""
    base = ctx.config.base.strip("/")
    return f"{base}/{path}" if base else path


def record_change(ctx: ReleaseContext, path: str) -> ReleaseContext:
    """Remember that ``path`` was modified so it gets staged for the release commit."""
    changed = ctx.get_or(data.CHANGED_FILES, ())
    files = tuple(changed) if isinstance(changed, tuple) else ()
    if path in files:
        return ctx
    return ctx.fork(data.CHANGED_FILES, (*files, path))


@dataclass
class FileBackup:
    """File content captured by a task before it overwrites the file."""

    path: str | None = None
    content: str | None = None
    existed: bool = True
