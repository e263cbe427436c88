from __future__ import annotations

import pytest
import typer

from relflow.cli.commands import plan_cmd
from relflow.core.errors import ErrorCode
from relflow.core.result import Err
from relflow.workflow.errors import conflict


def test_plan_lists_tasks_in_order(capsys: pytest.CaptureFixture[str]) -> None:
    plan_cmd.plan(verbose=False)

    out = capsys.readouterr().out
    assert " 1. setup:preflight" in out
    assert "14. publish:publish-github-release" in out
    assert "tasks: 14" in out
    assert "after:" not in out


def test_plan_verbose_shows_dependencies(capsys: pytest.CaptureFixture[str]) -> None:
    plan_cmd.plan(verbose=True)

    out = capsys.readouterr().out
    assert "after: setup:preflight" in out


def test_plan_error_exits(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(plan_cmd, "plan_release", lambda: Err(conflict("cycle: a -> b -> a")))

    with pytest.raises(typer.Exit) as exc:
        plan_cmd.plan(verbose=False)

    assert exc.value.exit_code == int(ErrorCode.ENV_ERROR)
