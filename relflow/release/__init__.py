"""Release automation built on the workflow engine."""

from .workflow import ReleasePlan, build_release_workflow, plan_release, run_release

__all__ = ["ReleasePlan", "build_release_workflow", "plan_release", "run_release"]
