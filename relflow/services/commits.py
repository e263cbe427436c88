"""Conventional-commit parsing and bump-level analysis.

Recognized header: ``type(scope)!: subject``. A ``!`` before the colon or a
``BREAKING CHANGE:`` / ``BREAKING-CHANGE:`` footer marks a breaking change.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from .semver import BumpLevel, SemVer

__all__ = ["ConventionalCommit", "ConventionalCommitAnalyzer", "parse_commit"]

_HEADER_RE = re.compile(r"^(?P<type>[A-Za-z]+)(?:\((?P<scope>[^)]*)\))?(?P<bang>!)?:\s*(?P<subject>.+)$")
_BREAKING_FOOTER_RE = re.compile(r"^BREAKING[ -]CHANGE:", re.MULTILINE)

_MINOR_TYPES = frozenset({"feat"})
_PATCH_TYPES = frozenset({"fix", "perf"})


@dataclass(frozen=True, slots=True)
class ConventionalCommit:
    type: str
    scope: str | None
    subject: str
    breaking: bool
    sha: str = ""


def parse_commit(message: str, sha: str = "") -> ConventionalCommit | None:
    """Parse a commit message; None when the header is not conventional."""
    lines = message.strip().splitlines()
    if not lines:
        return None
    m = _HEADER_RE.match(lines[0].strip())
    if m is None:
        return None
    return ConventionalCommit(
        type=m.group("type").lower(),
        scope=(m.group("scope") or "").strip() or None,
        subject=m.group("subject").strip(),
        breaking=bool(m.group("bang")) or bool(_BREAKING_FOOTER_RE.search(message)),
        sha=sha,
    )


class ConventionalCommitAnalyzer:
    """Derives the bump level a set of commits calls for."""

    def analyze_for_version(
        self,
        messages: Iterable[str],
        current: SemVer | None = None,
    ) -> BumpLevel | None:
        """Highest bump any commit requires, or None when nothing is releasable.

        Before 1.0.0 a breaking change only bumps the minor version.
        """
        level: BumpLevel | None = None
        for message in messages:
            commit = parse_commit(message)
            if commit is None:
                continue
            if commit.breaking:
                return "minor" if current is not None and current.major == 0 else "major"
            if commit.type in _MINOR_TYPES:
                level = "minor"
            elif commit.type in _PATCH_TYPES and level is None:
                level = "patch"
        return level
