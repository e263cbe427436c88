from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import typer

from relflow.cli.commands import release_cmd
from relflow.cli.context import CLIContext
from relflow.core.config import ReleaseConfig
from relflow.core.errors import ErrorCode
from relflow.output.console import MockConsole
from relflow.test.release._fakes import Harness, harness

DEFAULTS: dict[str, Any] = {
    "cwd": None,
    "config": None,
    "bump_strategy": None,
    "release_type": None,
    "version": None,
    "pre_release_id": None,
    "skip_bump": False,
    "skip_changelog": False,
    "skip_git": False,
    "skip_push": False,
    "skip_github_release": False,
    "skip_preflight_check": False,
    "pre_release": False,
    "draft": False,
    "dry_run": False,
    "verbose": False,
}


def _patch(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    h: Harness,
    config: ReleaseConfig,
) -> dict[str, Any]:
    seen: dict[str, Any] = {}

    def fake_build_context(**kwargs: Any) -> CLIContext:
        seen.update(kwargs)
        return CLIContext(root=tmp_path, config=config, console=h.console)

    monkeypatch.setattr(release_cmd, "build_context", fake_build_context)
    monkeypatch.setattr(release_cmd, "local_services", lambda *_: h.services)
    return seen


def _release(**options: Any) -> None:
    release_cmd.release(**{**DEFAULTS, **options})


def test_release_success(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    h = harness("fix: handle empty log")
    _patch(monkeypatch, tmp_path, h, ReleaseConfig(name="demo"))

    _release()

    assert 'version = "1.2.4"' in h.fs.files["pyproject.toml"]
    assert h.console.find("project: demo")
    assert h.console.find("workflow finished")


def test_release_failure_exits_with_task_code(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    h = harness("fix: x")
    h.git.failures["push"] = "rejected"
    _patch(monkeypatch, tmp_path, h, ReleaseConfig(name="demo"))

    with pytest.raises(typer.Exit) as exc:
        _release()

    assert exc.value.exit_code == int(ErrorCode.TASK_FAILED)
    assert h.console.find("undone   git:create-tag")


def test_release_conflict_exits_with_env_code(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    h = harness("fix: x")
    h.git.dirty = ("README.md",)
    _patch(monkeypatch, tmp_path, h, ReleaseConfig(name="demo"))

    with pytest.raises(typer.Exit) as exc:
        _release()

    assert exc.value.exit_code == int(ErrorCode.ENV_ERROR)
    assert h.console.has_error()


def test_release_passes_options_as_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    h = harness()
    seen = _patch(
        monkeypatch,
        tmp_path,
        h,
        ReleaseConfig(name="demo", bump_strategy="manual", release_type="minor", dry_run=True),
    )

    _release(
        cwd=tmp_path,
        bump_strategy=release_cmd.Strategy.manual,
        release_type=release_cmd.Level.minor,
        draft=True,
        dry_run=True,
    )

    assert seen["root"] == tmp_path
    overrides = seen["overrides"]
    assert overrides["bump_strategy"] == "manual"
    assert overrides["release_type"] == "minor"
    assert overrides["release_draft"] is True
    assert overrides["version"] is None
    assert h.git.calls == []
