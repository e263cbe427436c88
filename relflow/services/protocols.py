"""Interfaces release tasks depend on, and the bundle that carries them.

Release tasks only see these protocols through ``ctx.services``; tests
swap in fakes without touching git, the filesystem or the network.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from relflow.core.result import Result
from relflow.output.console import ConsoleProtocol

from .errors import ServiceError
from .git import CommitInfo, GitError, GitStatus
from .github import ReleaseRequest
from .semver import BumpLevel, SemVer

__all__ = [
    "CommitAnalyzer",
    "FileSystem",
    "ReleaseHost",
    "ReleaseServices",
    "SourceControl",
]


class FileSystem(Protocol):
    def exists(self, path: str | Path) -> bool: ...

    def read(self, path: str | Path) -> Result[str, ServiceError]: ...

    def write(self, path: str | Path, content: str) -> Result[None, ServiceError]: ...

    def remove(self, path: str | Path) -> Result[None, ServiceError]: ...


class SourceControl(Protocol):
    def is_repository(self) -> bool: ...

    def status(self) -> Result[GitStatus, GitError]: ...

    def current_branch(self) -> str | None: ...

    def unpushed_count(self) -> Result[int, GitError]: ...

    def latest_tag(self) -> str | None: ...

    def commits_since(self, ref: str | None) -> Result[list[CommitInfo], GitError]: ...

    def stage(self, paths: list[str]) -> Result[None, GitError]: ...

    def commit(self, message: str) -> Result[str, GitError]: ...

    def reset_last_commit(self) -> Result[None, GitError]: ...

    def tag(self, name: str, message: str) -> Result[None, GitError]: ...

    def delete_tag(self, name: str) -> Result[None, GitError]: ...

    def push(self, remote: str, branch: str | None = None) -> Result[None, GitError]: ...

    def push_tag(self, remote: str, name: str) -> Result[None, GitError]: ...

    def delete_remote_tag(self, remote: str, name: str) -> Result[None, GitError]: ...


class CommitAnalyzer(Protocol):
    def analyze_for_version(
        self,
        messages: Iterable[str],
        current: SemVer | None = None,
    ) -> BumpLevel | None: ...


class ReleaseHost(Protocol):
    def is_available(self) -> bool: ...

    def create_release(self, request: ReleaseRequest) -> Result[str, ServiceError]: ...

    def delete_release(self, tag: str) -> Result[None, ServiceError]: ...


@dataclass(frozen=True, slots=True)
class ReleaseServices:
    """Collaborators available to release tasks via ``ctx.services``."""

    fs: FileSystem
    git: SourceControl
    commits: CommitAnalyzer
    host: ReleaseHost
    console: ConsoleProtocol
