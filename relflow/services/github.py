"""Hosted releases through the GitHub CLI (``gh``)."""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path

from relflow.core.result import Err, Ok, Result
from relflow.platform.process import ProcessError
from relflow.platform.process import run as run_process

from .errors import ServiceError

__all__ = ["GitHubCliHost", "ReleaseRequest"]

GH_TIMEOUT_SECONDS = 2 * 60.0


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    tag: str
    title: str
    notes: str
    draft: bool = False
    prerelease: bool = False
    latest: bool = True


class GitHubCliHost:
    """Creates and deletes releases for the repository at ``root``."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def is_available(self) -> bool:
        return shutil.which("gh") is not None

    def release_command(self, request: ReleaseRequest) -> list[str]:
        cmd = [
            "gh",
            "release",
            "create",
            request.tag,
            "--title",
            request.title,
            "--notes",
            request.notes,
            "--verify-tag",
        ]
        if request.draft:
            cmd.append("--draft")
        if request.prerelease:
            cmd.append("--prerelease")
        if request.latest and not (request.draft or request.prerelease):
            cmd.append("--latest")
        return cmd

    def create_release(self, request: ReleaseRequest) -> Result[str, ServiceError]:
        """Create the release and return its URL."""
        if not self.is_available():
            return Err(
                ServiceError(
                    kind="unavailable",
                    message="gh: missing",
                    hint="Install GitHub CLI: https://cli.github.com/ then run: gh auth login",
                )
            )
        result = run_process(self.release_command(request), cwd=self.root, timeout=GH_TIMEOUT_SECONDS)
        match result:
            case Err(e):
                return Err(_gh_error(f"failed to create release {request.tag}", e))
            case Ok(stdout):
                return Ok(stdout.strip())

    def delete_release(self, tag: str) -> Result[None, ServiceError]:
        cmd = ["gh", "release", "delete", tag, "--yes"]
        result = run_process(cmd, cwd=self.root, timeout=GH_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(_gh_error(f"failed to delete release {tag}", result.error))
        return Ok(None)


def _gh_error(message: str, error: ProcessError) -> ServiceError:
    detail = error.detail
    hint = detail or None
    if "auth" in detail.lower() and "login" in detail.lower():
        hint = "Run: gh auth login"
    return ServiceError(kind="failed", message=message, hint=hint)
