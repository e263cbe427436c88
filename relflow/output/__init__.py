"""Console output and execution report rendering."""

from .console import ConsoleProtocol, MockConsole, RichConsole, Style
from .report import error_exit_code, print_report, report_exit_code

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "RichConsole",
    "Style",
    "error_exit_code",
    "print_report",
    "report_exit_code",
]
