"""Tests for relflow.services.git module."""

from __future__ import annotations

from pathlib import Path

import pytest

import relflow.services.git as git_module
from relflow.core.result import Err, Ok, Result
from relflow.platform.process import ProcessError
from relflow.services.git import (
    CommitInfo,
    GitRepository,
    StatusEntry,
    parse_log,
    parse_status,
)


class FakeGit:
    """Stands in for ``run_process``; answers by git subcommand."""

    def __init__(self, responses: dict[str, Result[str, ProcessError]] | None = None) -> None:
        self.responses = responses or {}
        self.calls: list[list[str]] = []

    def __call__(
        self,
        cmd: list[str],
        cwd: Path,
        env: dict[str, str] | None = None,
        *,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        self.calls.append(cmd)
        args = cmd[3:]  # strip "git -C <path>"
        key = " ".join(args[:2])
        if key in self.responses:
            return self.responses[key]
        return self.responses.get(args[0], Ok(""))


def _fail(stderr: str, code: int = 1) -> Err[ProcessError]:
    return Err(ProcessError(command=("git",), returncode=code, stdout="", stderr=stderr))


@pytest.fixture
def fake(monkeypatch: pytest.MonkeyPatch) -> FakeGit:
    runner = FakeGit()
    monkeypatch.setattr(git_module, "run_process", runner)
    return runner


class TestStatusEntry:
    def test_untracked(self) -> None:
        entry = StatusEntry(xy="??", path="new.py")
        assert entry.is_untracked
        assert not entry.is_staged

    def test_staged(self) -> None:
        assert StatusEntry(xy="M ", path="a.py").is_staged
        assert not StatusEntry(xy=" M", path="a.py").is_staged


class TestParseStatus:
    def test_clean_with_upstream(self) -> None:
        status = parse_status("## main...origin/main\n")
        assert status.branch == "main"
        assert status.upstream == "origin/main"
        assert status.is_clean

    def test_ahead_behind_and_entries(self) -> None:
        status = parse_status("## dev...origin/dev [ahead 2, behind 1]\n M src/a.py\n?? b.txt\n")
        assert status.ahead == 2
        assert status.behind == 1
        assert [e.path for e in status.entries] == ["src/a.py", "b.txt"]
        assert not status.is_clean

    def test_no_commits_yet(self) -> None:
        status = parse_status("## No commits yet on main\n")
        assert status.branch == "main"
        assert status.upstream is None

    def test_empty_output(self) -> None:
        assert parse_status("").branch == ""


class TestParseLog:
    def test_records(self) -> None:
        output = "aaa\x1ffeat: one\n\nbody\x1e\nbbb\x1ffix: two\x1e\n"
        commits = parse_log(output)
        assert commits == [
            CommitInfo(sha="aaa", message="feat: one\n\nbody"),
            CommitInfo(sha="bbb", message="fix: two"),
        ]
        assert commits[0].subject == "feat: one"

    def test_empty(self) -> None:
        assert parse_log("") == []


class TestGitRepository:
    def test_commands_run_in_repository(self, fake: FakeGit, tmp_path: Path) -> None:
        GitRepository(tmp_path).tag("v1.0.0", "release v1.0.0")
        assert fake.calls == [
            ["git", "-C", str(tmp_path), "tag", "-a", "v1.0.0", "-m", "release v1.0.0"]
        ]

    def test_is_repository(self, fake: FakeGit, tmp_path: Path) -> None:
        fake.responses["rev-parse --is-inside-work-tree"] = Ok("true\n")
        assert GitRepository(tmp_path).is_repository()
        fake.responses["rev-parse --is-inside-work-tree"] = _fail("fatal: not a git repository", 128)
        assert not GitRepository(tmp_path).is_repository()

    def test_current_branch_detached(self, fake: FakeGit, tmp_path: Path) -> None:
        fake.responses["rev-parse --abbrev-ref"] = Ok("HEAD\n")
        assert GitRepository(tmp_path).current_branch() is None

    def test_unpushed_without_upstream(self, fake: FakeGit, tmp_path: Path) -> None:
        fake.responses["rev-parse --abbrev-ref"] = _fail("fatal: no upstream configured")
        assert GitRepository(tmp_path).unpushed_count() == Ok(0)

    def test_unpushed_count(self, fake: FakeGit, tmp_path: Path) -> None:
        fake.responses["rev-list --count"] = Ok("3\n")
        assert GitRepository(tmp_path).unpushed_count() == Ok(3)

    def test_latest_tag_none(self, fake: FakeGit, tmp_path: Path) -> None:
        fake.responses["describe"] = _fail("fatal: No names found")
        assert GitRepository(tmp_path).latest_tag() is None

    def test_commits_since_ref(self, fake: FakeGit, tmp_path: Path) -> None:
        fake.responses["log"] = Ok("abc\x1ffeat: x\x1e")
        result = GitRepository(tmp_path).commits_since("v1.0.0")
        assert result == Ok([CommitInfo(sha="abc", message="feat: x")])
        assert fake.calls[-1][-1] == "v1.0.0..HEAD"

    def test_commit_returns_sha(self, fake: FakeGit, tmp_path: Path) -> None:
        fake.responses["rev-parse HEAD"] = Ok("deadbeef\n")
        assert GitRepository(tmp_path).commit("chore: release") == Ok("deadbeef")

    def test_failure_carries_git_message(self, fake: FakeGit, tmp_path: Path) -> None:
        fake.responses["tag"] = _fail("fatal: tag 'v1' already exists", 128)
        result = GitRepository(tmp_path).tag("v1", "m")
        assert isinstance(result, Err)
        assert result.error.command == "tag"
        assert result.error.returncode == 128
        assert "already exists" in result.error.message

    def test_push_tag_and_delete_remote(self, fake: FakeGit, tmp_path: Path) -> None:
        repo = GitRepository(tmp_path)
        repo.push_tag("origin", "v1")
        repo.delete_remote_tag("origin", "v1")
        assert fake.calls[0][3:] == ["push", "origin", "refs/tags/v1"]
        assert fake.calls[1][3:] == ["push", "origin", "--delete", "refs/tags/v1"]

    def test_reset_last_commit(self, fake: FakeGit, tmp_path: Path) -> None:
        assert GitRepository(tmp_path).reset_last_commit() == Ok(None)
        assert fake.calls[0][3:] == ["reset", "--soft", "HEAD~1"]
