"""Changelog rendering from conventional commits."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from .commits import ConventionalCommit, parse_commit
from .git import CommitInfo

__all__ = [
    "CHANGELOG_TITLE",
    "extract_release_notes",
    "prepend_section",
    "render_section",
]

CHANGELOG_TITLE = "# Changelog"

_SECTIONS: tuple[tuple[str, frozenset[str]], ...] = (
    ("Features", frozenset({"feat"})),
    ("Bug Fixes", frozenset({"fix"})),
    ("Performance", frozenset({"perf"})),
)
_OTHER_SECTION = "Other"
_HIDDEN_TYPES = frozenset({"chore", "ci", "style", "test", "build"})


def _entry(commit: ConventionalCommit) -> str:
    scope = f"**{commit.scope}:** " if commit.scope else ""
    breaking = "**BREAKING** " if commit.breaking else ""
    sha = f" ({commit.sha[:7]})" if commit.sha else ""
    return f"- {breaking}{scope}{commit.subject}{sha}"


def render_section(
    version: str,
    commits: Iterable[CommitInfo],
    *,
    release_date: date,
    notes: str = "",
) -> str:
    """Render the changelog section for one release.

    Non-conventional commits and housekeeping types (chore, ci...) are left
    out. Custom ``notes`` go first, under their own heading.
    """
    lines: list[str] = [f"## {version} ({release_date.isoformat()})", ""]

    if notes.strip():
        lines.extend(["### Notes", "", notes.strip(), ""])

    grouped: dict[str, list[str]] = {}
    for info in commits:
        commit = parse_commit(info.message, sha=info.sha)
        if commit is None or (commit.type in _HIDDEN_TYPES and not commit.breaking):
            continue
        title = next((name for name, types in _SECTIONS if commit.type in types), _OTHER_SECTION)
        grouped.setdefault(title, []).append(_entry(commit))

    for title in [name for name, _ in _SECTIONS] + [_OTHER_SECTION]:
        entries = grouped.get(title)
        if not entries:
            continue
        lines.extend([f"### {title}", "", *entries, ""])

    if len(lines) == 2:
        lines.extend(["No notable changes.", ""])

    return "\n".join(lines).rstrip() + "\n"


def prepend_section(existing: str, section: str) -> str:
    """Insert ``section`` after the changelog title, above older releases."""
    body = existing.strip()
    if body.startswith(CHANGELOG_TITLE):
        body = body[len(CHANGELOG_TITLE) :].strip()
    parts = [CHANGELOG_TITLE, "", section.rstrip()]
    if body:
        parts.extend(["", body])
    return "\n".join(parts) + "\n"


def extract_release_notes(section: str) -> str:
    """Release notes for the hosted release: the section from its first ``###`` heading."""
    lines = section.splitlines()
    for i, line in enumerate(lines):
        if line.startswith("### "):
            return "\n".join(lines[i:]).strip()
    return "\n".join(lines[1:]).strip()
