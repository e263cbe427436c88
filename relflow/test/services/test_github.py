"""Tests for relflow.services.github module."""

from __future__ import annotations

from pathlib import Path

import pytest

import relflow.services.github as github_module
from relflow.core.result import Err, Ok, Result
from relflow.platform.process import ProcessError
from relflow.services.github import GitHubCliHost, ReleaseRequest


def _request(**kw: bool) -> ReleaseRequest:
    return ReleaseRequest(tag="pkg@1.0.0", title="pkg@1.0.0", notes="notes", **kw)


class TestReleaseCommand:
    def test_latest_release(self, tmp_path: Path) -> None:
        cmd = GitHubCliHost(tmp_path).release_command(_request())
        assert cmd[:4] == ["gh", "release", "create", "pkg@1.0.0"]
        assert "--latest" in cmd
        assert "--verify-tag" in cmd

    def test_draft(self, tmp_path: Path) -> None:
        cmd = GitHubCliHost(tmp_path).release_command(_request(draft=True, latest=False))
        assert "--draft" in cmd
        assert "--latest" not in cmd

    def test_prerelease_never_latest(self, tmp_path: Path) -> None:
        cmd = GitHubCliHost(tmp_path).release_command(_request(prerelease=True, latest=True))
        assert "--prerelease" in cmd
        assert "--latest" not in cmd


class TestCreateRelease:
    def test_gh_missing(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setattr(github_module.shutil, "which", lambda name: None)
        result = GitHubCliHost(tmp_path).create_release(_request())
        assert isinstance(result, Err)
        assert result.error.kind == "unavailable"
        assert result.error.hint is not None

    def test_returns_url(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        calls: list[list[str]] = []

        def fake_run(cmd: list[str], cwd: Path, **_: object) -> Result[str, ProcessError]:
            calls.append(cmd)
            return Ok("https://github.com/o/r/releases/tag/pkg%401.0.0\n")

        monkeypatch.setattr(github_module.shutil, "which", lambda name: "/usr/bin/gh")
        monkeypatch.setattr(github_module, "run_process", fake_run)
        result = GitHubCliHost(tmp_path).create_release(_request())
        assert result == Ok("https://github.com/o/r/releases/tag/pkg%401.0.0")
        assert calls[0][0] == "gh"

    def test_auth_failure_hint(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        def fake_run(cmd: list[str], cwd: Path, **_: object) -> Result[str, ProcessError]:
            return Err(
                ProcessError(tuple(cmd), 1, "", "To get started with GitHub CLI, please run: gh auth login")
            )

        monkeypatch.setattr(github_module.shutil, "which", lambda name: "/usr/bin/gh")
        monkeypatch.setattr(github_module, "run_process", fake_run)
        result = GitHubCliHost(tmp_path).create_release(_request())
        assert isinstance(result, Err)
        assert result.error.kind == "failed"
        assert result.error.hint == "Run: gh auth login"


class TestDeleteRelease:
    def test_delete(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        calls: list[list[str]] = []

        def fake_run(cmd: list[str], cwd: Path, **_: object) -> Result[str, ProcessError]:
            calls.append(cmd)
            return Ok("")

        monkeypatch.setattr(github_module, "run_process", fake_run)
        assert GitHubCliHost(tmp_path).delete_release("pkg@1.0.0") == Ok(None)
        assert calls == [["gh", "release", "delete", "pkg@1.0.0", "--yes"]]
