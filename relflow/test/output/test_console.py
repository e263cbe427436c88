"""Tests for relflow.output.console module."""

from __future__ import annotations

import pytest

from relflow.output.console import (
    ConsoleProtocol,
    MockConsole,
    OutputRecord,
    RichConsole,
    Style,
)


class TestStyle:
    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.DEBUG) == "debug"

    def test_all_styles_exist(self) -> None:
        expected = {"DEFAULT", "SUCCESS", "ERROR", "WARNING", "INFO", "DEBUG", "DIM", "BOLD", "HEADER"}
        assert {s.name for s in Style} == expected


class TestMockConsole:
    """MockConsole records everything for assertions."""

    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("hello", Style.BOLD)
        assert console.outputs == [OutputRecord("hello", Style.BOLD)]

    def test_prefixes(self) -> None:
        console = MockConsole()
        console.success("done")
        console.error("broken")
        console.warning("careful")
        console.info("fyi")
        console.debug("details")
        assert console.messages == [
            "OK done",
            "error: broken",
            "warning: careful",
            "info: fyi",
            "debug: details",
        ]

    def test_header_and_newline(self) -> None:
        console = MockConsole()
        console.header("Summary")
        console.newline()
        assert console.outputs[0].style == Style.HEADER
        assert console.outputs[1].message == ""

    def test_helpers(self) -> None:
        console = MockConsole()
        console.error("a failed")
        console.warning("b")
        console.print("a again")
        assert console.has_error()
        assert console.has_warning()
        assert len(console.find("a ")) == 2
        assert console.count(Style.ERROR) == 1
        assert "a again" in console.text
        console.clear()
        assert console.messages == []


class TestRichConsole:
    def test_implements_protocol(self) -> None:
        console: ConsoleProtocol = RichConsole()
        assert callable(console.debug)

    def test_debug_hidden_unless_verbose(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole(verbose=False).debug("hidden line")
        RichConsole(verbose=True).debug("shown line")
        out = capsys.readouterr().out
        assert "hidden line" not in out
        assert "shown line" in out

    def test_markup_in_messages_is_literal(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.error("bad value [red]x[/red]")
        console.print("[bold]raw[/bold]")
        out = capsys.readouterr().out
        assert "[red]x[/red]" in out
        assert "[bold]raw[/bold]" in out

    def test_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole(stderr=True).print("to stderr")
        captured = capsys.readouterr()
        assert "to stderr" in captured.err
        assert "to stderr" not in captured.out
