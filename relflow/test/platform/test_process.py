"""Tests for relflow.platform.process module."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from relflow.core.result import Err, Ok
from relflow.platform.process import ProcessError, run

PY = sys.executable


class TestProcessError:
    """Test ProcessError dataclass."""

    def test_str_short_command(self) -> None:
        error = ProcessError(
            command=("git", "status"),
            returncode=1,
            stdout="",
            stderr="fatal: not a git repository",
        )
        assert str(error) == "git status failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("gh", "release", "create", "v1.0.0", "--notes", "x"),
            returncode=1,
            stdout="",
            stderr="error",
        )
        assert str(error) == "gh release create ... failed (exit 1)"

    def test_detail_prefers_stderr(self) -> None:
        assert ProcessError(("x",), 1, "out", "  err\n").detail == "err"
        assert ProcessError(("x",), 1, "out\n", "").detail == "out"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "print('hello')"], cwd=tmp_path)
        assert isinstance(result, Ok)
        assert "hello" in result.value

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "import sys; sys.exit(42)"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == 42

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run(["nonexistent_command_12345"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == -1
        # Error message varies by OS and locale
        assert len(result.error.stderr) > 0

    def test_captures_stderr(self, tmp_path: Path) -> None:
        result = run(
            [PY, "-c", "import sys; sys.stderr.write('error msg'); sys.exit(1)"],
            cwd=tmp_path,
        )
        assert isinstance(result, Err)
        assert "error msg" in result.error.detail

    def test_uses_cwd(self, tmp_path: Path) -> None:
        (tmp_path / "marker.txt").write_text("content")
        result = run([PY, "-c", "import os; print(os.listdir('.'))"], cwd=tmp_path)
        assert isinstance(result, Ok)
        assert "marker.txt" in result.value

    def test_uses_env(self, tmp_path: Path) -> None:
        env = os.environ.copy()
        env["RELFLOW_TEST_VAR"] = "test_value"
        result = run(
            [PY, "-c", "import os; print(os.environ.get('RELFLOW_TEST_VAR', ''))"],
            cwd=tmp_path,
            env=env,
        )
        assert isinstance(result, Ok)
        assert "test_value" in result.value

    def test_timeout(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "import time; time.sleep(10)"], cwd=tmp_path, timeout=0.1)
        assert isinstance(result, Err)
        assert "timed out" in result.error.stderr.lower()
