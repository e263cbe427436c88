"""Release task constructors, one module per workflow stage."""

from .changelog import generate_changelog_task
from .git import (
    commit_changes_task,
    create_tag_task,
    push_commit_task,
    push_tag_task,
    stage_changes_task,
)
from .publish import publish_github_release_task
from .setup import initialize_version_task, preflight_task
from .version import (
    automatic_bump_task,
    bump_version_task,
    manual_version_task,
    straight_bump_task,
    version_flow_task,
)

__all__ = [
    "automatic_bump_task",
    "bump_version_task",
    "commit_changes_task",
    "create_tag_task",
    "generate_changelog_task",
    "initialize_version_task",
    "manual_version_task",
    "preflight_task",
    "publish_github_release_task",
    "push_commit_task",
    "push_tag_task",
    "stage_changes_task",
    "straight_bump_task",
    "version_flow_task",
]
