"""Task graph engine: tasks, groups, ordering, execution and rollback.

This package knows nothing about releases, git or the CLI; it only runs
tasks against an immutable ``WorkflowContext``.
"""

from .context import WorkflowContext
from .errors import WorkflowError
from .executor import ExecutionReport, SkippedTask, WorkflowExecutor
from .graph import (
    GraphStatistics,
    GraphValidation,
    build_execution_order,
    graph_statistics,
    validate_graph,
)
from .group import TaskGroup, TaskGroupBuilder, expand_group
from .helpers import side_effect_task, validation_task
from .registry import TaskRegistry
from .rollback import RollbackManager, RollbackReport
from .runner import run_workflow
from .skip import SkipDecision
from .task import Task, TaskBuilder, TaskMetadata

__all__ = [
    # context
    "WorkflowContext",
    # errors
    "WorkflowError",
    # tasks
    "SkipDecision",
    "Task",
    "TaskBuilder",
    "TaskMetadata",
    "side_effect_task",
    "validation_task",
    # groups
    "TaskGroup",
    "TaskGroupBuilder",
    "expand_group",
    # graph
    "GraphStatistics",
    "GraphValidation",
    "TaskRegistry",
    "build_execution_order",
    "graph_statistics",
    "validate_graph",
    # execution
    "ExecutionReport",
    "RollbackManager",
    "RollbackReport",
    "SkippedTask",
    "WorkflowExecutor",
    "run_workflow",
]
