"""One-call entry point: register, order and execute."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from relflow.core.result import Err
from relflow.output.console import ConsoleProtocol

from .context import WorkflowContext
from .executor import ExecutionReport, WorkflowExecutor
from .group import TaskGroup
from .registry import TaskRegistry
from .task import Task

__all__ = ["run_workflow"]


async def run_workflow(
    items: Iterable[Task | TaskGroup],
    context: WorkflowContext[Any, Any],
    *,
    console: ConsoleProtocol,
    enable_rollback: bool = True,
) -> ExecutionReport:
    """Run tasks and groups as one workflow.

    Definition problems (duplicates, dangling references, cycles) are
    reported before any task runs; nothing is rolled back in that case.
    """
    registry = TaskRegistry()
    registered = registry.register_all(items)
    if isinstance(registered, Err):
        console.error(registered.error.message)
        return ExecutionReport.construction_failure(registered.error)

    ordered = registry.build_execution_order()
    if isinstance(ordered, Err):
        console.error(ordered.error.message)
        return ExecutionReport.construction_failure(ordered.error)

    console.debug(f"execution order: {', '.join(t.id for t in ordered.value)}")
    executor = WorkflowExecutor(console, enable_rollback=enable_rollback)
    return await executor.run(ordered.value, context)
