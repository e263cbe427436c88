from __future__ import annotations

import typer

from relflow.cli.commands._helpers import exit_on_error
from relflow.output.console import RichConsole, Style
from relflow.release.workflow import plan_release


def plan(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show dependencies"),
) -> None:
    """Show the release tasks in execution order."""
    console = RichConsole(verbose=verbose)
    release_plan = exit_on_error(plan_release(), console)

    console.header("Execution order")
    for index, task in enumerate(release_plan.tasks, start=1):
        console.print(f"{index:>2}. {task.id}  {task.description}")
        if task.dependencies:
            console.debug(f"    after: {', '.join(task.dependencies)}")

    stats = release_plan.statistics
    console.newline()
    console.print(f"tasks: {stats.total_tasks}", Style.DIM)
    console.print(f"dependencies: {stats.edge_count}", Style.DIM)
    console.print(f"depth: {stats.max_depth}", Style.DIM)
    console.print(f"roots: {', '.join(stats.root_tasks)}", Style.DIM)
    console.print(f"leaves: {', '.join(stats.leaf_tasks)}", Style.DIM)
