"""Git operations needed by a release.

Every method shells out through ``relflow.platform.process.run`` and
returns a Result; a failed command becomes a ``GitError`` carrying git's
own message.

Usage:
    repo = GitRepository(Path("."))
    match repo.status():
        case Ok(status) if status.is_clean:
            ...
        case Ok(status):
            print(f"{len(status.entries)} uncommitted change(s)")
        case Err(e):
            print(e.message)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from relflow.core.result import Err, Ok, Result
from relflow.platform.process import ProcessError
from relflow.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0
_NETWORK_COMMANDS = frozenset({"fetch", "pull", "push", "ls-remote"})

# Field/record separators for `git log --format`, unlikely in commit messages.
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"

__all__ = [
    "CommitInfo",
    "GitError",
    "GitRepository",
    "GitStatus",
    "StatusEntry",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed (e.g. "tag", "push").
        message: git's error output, or a fallback description.
        returncode: Process return code.
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single `git status --porcelain` line."""

    xy: str
    path: str

    @property
    def is_untracked(self) -> bool:
        return self.xy == "??"

    @property
    def is_staged(self) -> bool:
        return not self.is_untracked and self.xy[0] != " "


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Branch tracking info and working tree entries.

    Attributes:
        branch: Current branch name ("" when unknown).
        upstream: Upstream branch (e.g. "origin/main"), None if not set.
        ahead: Commits not yet pushed to upstream.
        behind: Upstream commits not yet pulled.
        entries: Staged, unstaged and untracked paths.
    """

    branch: str
    upstream: str | None = None
    ahead: int = 0
    behind: int = 0
    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def is_clean(self) -> bool:
        return len(self.entries) == 0


@dataclass(frozen=True, slots=True)
class CommitInfo:
    sha: str
    message: str

    @property
    def subject(self) -> str:
        return self.message.splitlines()[0] if self.message else ""


class GitRepository:
    """Git access for the repository containing the project.

    Attributes:
        path: Directory git commands run in.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def is_repository(self) -> bool:
        result = self._run(["rev-parse", "--is-inside-work-tree"])
        return isinstance(result, Ok) and result.value.strip() == "true"

    def status(self) -> Result[GitStatus, GitError]:
        """Run `git status --porcelain=v1 -b` and parse it."""
        result = self._run(["status", "--porcelain=v1", "-b"])
        match result:
            case Err(e):
                return Err(_git_error("status", e))
            case Ok(stdout):
                return Ok(parse_status(stdout))

    def current_branch(self) -> str | None:
        """Current branch name; None on detached HEAD or error."""
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch == "HEAD" else branch
            case Err(_):
                return None

    def unpushed_count(self) -> Result[int, GitError]:
        """Commits on HEAD not on its upstream (0 when there is no upstream)."""
        upstream = self._run(["rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}"])
        if isinstance(upstream, Err):
            return Ok(0)
        result = self._run(["rev-list", "--count", "@{u}..HEAD"])
        match result:
            case Err(e):
                return Err(_git_error("rev-list", e))
            case Ok(stdout):
                return Ok(int(stdout.strip() or "0"))

    def latest_tag(self) -> str | None:
        """Most recent tag reachable from HEAD, or None if there is none."""
        result = self._run(["describe", "--tags", "--abbrev=0"])
        match result:
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def commits_since(self, ref: str | None) -> Result[list[CommitInfo], GitError]:
        """Commits after ``ref`` up to HEAD, newest first (all commits if ref is None)."""
        fmt = f"--format=%H{_FIELD_SEP}%B{_RECORD_SEP}"
        args = ["log", fmt]
        if ref is not None:
            args.append(f"{ref}..HEAD")
        result = self._run(args)
        match result:
            case Err(e):
                return Err(_git_error("log", e))
            case Ok(stdout):
                return Ok(parse_log(stdout))

    def stage(self, paths: list[str]) -> Result[None, GitError]:
        return self._simple("add", ["add", "--", *paths])

    def commit(self, message: str) -> Result[str, GitError]:
        """Commit staged changes and return the new commit sha."""
        committed = self._simple("commit", ["commit", "-m", message])
        if isinstance(committed, Err):
            return committed
        result = self._run(["rev-parse", "HEAD"])
        match result:
            case Err(e):
                return Err(_git_error("rev-parse", e))
            case Ok(stdout):
                return Ok(stdout.strip())

    def reset_last_commit(self) -> Result[None, GitError]:
        """Undo the last commit, keeping its changes staged."""
        return self._simple("reset", ["reset", "--soft", "HEAD~1"])

    def tag(self, name: str, message: str) -> Result[None, GitError]:
        return self._simple("tag", ["tag", "-a", name, "-m", message])

    def delete_tag(self, name: str) -> Result[None, GitError]:
        return self._simple("tag", ["tag", "-d", name])

    def push(self, remote: str, branch: str | None = None) -> Result[None, GitError]:
        args = ["push", remote]
        if branch is not None:
            args.append(branch)
        return self._simple("push", args)

    def push_tag(self, remote: str, name: str) -> Result[None, GitError]:
        return self._simple("push", ["push", remote, f"refs/tags/{name}"])

    def delete_remote_tag(self, remote: str, name: str) -> Result[None, GitError]:
        return self._simple("push", ["push", remote, "--delete", f"refs/tags/{name}"])

    def _simple(self, command: str, args: list[str]) -> Result[None, GitError]:
        result = self._run(args)
        if isinstance(result, Err):
            return Err(_git_error(command, result.error))
        return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS if command in _NETWORK_COMMANDS else _GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)


def _git_error(command: str, error: ProcessError) -> GitError:
    return GitError(
        command=command,
        message=error.detail or f"git {command} failed",
        returncode=error.returncode,
    )


def parse_status(output: str) -> GitStatus:
    """Parse `git status --porcelain=v1 -b` output."""
    lines = [ln for ln in output.splitlines() if ln.strip()]
    if not lines:
        return GitStatus(branch="")

    branch, upstream = _parse_branch_line(lines[0])
    ahead, behind = _parse_ahead_behind(lines[0])
    entries = tuple(StatusEntry(xy=ln[:2], path=ln[3:]) for ln in lines[1:] if len(ln) >= 4)
    return GitStatus(branch=branch, upstream=upstream, ahead=ahead, behind=behind, entries=entries)


def _parse_branch_line(line: str) -> tuple[str, str | None]:
    s = line.strip()
    if s.startswith("##"):
        s = s[2:].lstrip()
    s = s.split(" [", 1)[0].strip()
    if s.startswith("No commits yet on "):
        return (s.removeprefix("No commits yet on ").strip(), None)
    if "..." in s:
        left, right = s.split("...", 1)
        return (left.strip(), right.strip())
    return (s, None)


def _parse_ahead_behind(line: str) -> tuple[int, int]:
    match = re.search(r"\[([^\]]+)\]", line)
    if not match:
        return (0, 0)
    inside = match.group(1)
    ahead = re.search(r"ahead\s+(\d+)", inside)
    behind = re.search(r"behind\s+(\d+)", inside)
    return (
        int(ahead.group(1)) if ahead else 0,
        int(behind.group(1)) if behind else 0,
    )


def parse_log(output: str) -> list[CommitInfo]:
    commits: list[CommitInfo] = []
    for record in output.split(_RECORD_SEP):
        record = record.strip("\n")
        if not record.strip():
            continue
        sha, _, message = record.partition(_FIELD_SEP)
        commits.append(CommitInfo(sha=sha.strip(), message=message.strip()))
    return commits
