"""relflow: release automation on top of a task graph engine."""

__version__ = "0.1.0"
