"""Collaborators used by release tasks: files, git, commits, hosting."""

from pathlib import Path

from relflow.output.console import ConsoleProtocol

from .commits import ConventionalCommitAnalyzer
from .errors import ServiceError
from .filesystem import LocalFileSystem
from .git import GitError, GitRepository
from .github import GitHubCliHost, ReleaseRequest
from .protocols import (
    CommitAnalyzer,
    FileSystem,
    ReleaseHost,
    ReleaseServices,
    SourceControl,
)


def local_services(repo_root: Path, console: ConsoleProtocol, base: str = "") -> ReleaseServices:
    """Real services for a repository at ``repo_root``.

    File access is rooted at the project directory ``repo_root / base``;
    git and gh run at the repository root.
    """
    return ReleaseServices(
        fs=LocalFileSystem(repo_root / base if base else repo_root),
        git=GitRepository(repo_root),
        commits=ConventionalCommitAnalyzer(),
        host=GitHubCliHost(repo_root),
        console=console,
    )


__all__ = [
    "CommitAnalyzer",
    "ConventionalCommitAnalyzer",
    "FileSystem",
    "GitError",
    "GitHubCliHost",
    "GitRepository",
    "LocalFileSystem",
    "ReleaseHost",
    "ReleaseRequest",
    "ReleaseServices",
    "ServiceError",
    "SourceControl",
    "local_services",
]
