"""Tests for conventional commit parsing and analysis."""

from __future__ import annotations

from relflow.services.commits import ConventionalCommitAnalyzer, parse_commit
from relflow.services.semver import SemVer


class TestParseCommit:
    def test_simple(self) -> None:
        commit = parse_commit("feat: add plan command")
        assert commit is not None
        assert commit.type == "feat"
        assert commit.scope is None
        assert commit.subject == "add plan command"
        assert not commit.breaking

    def test_scope_and_bang(self) -> None:
        commit = parse_commit("fix(cli)!: rename flag", sha="abc")
        assert commit is not None
        assert commit.scope == "cli"
        assert commit.breaking
        assert commit.sha == "abc"

    def test_breaking_footer(self) -> None:
        commit = parse_commit("refactor: drop py311\n\nBREAKING CHANGE: needs 3.12")
        assert commit is not None
        assert commit.breaking

    def test_non_conventional(self) -> None:
        assert parse_commit("Merge branch 'main'") is None
        assert parse_commit("") is None


class TestAnalyzer:
    def test_feature_is_minor(self) -> None:
        analyzer = ConventionalCommitAnalyzer()
        assert analyzer.analyze_for_version(["fix: a", "feat: b", "chore: c"]) == "minor"

    def test_fix_is_patch(self) -> None:
        analyzer = ConventionalCommitAnalyzer()
        assert analyzer.analyze_for_version(["perf: faster", "docs: readme"]) == "patch"

    def test_breaking_is_major(self) -> None:
        analyzer = ConventionalCommitAnalyzer()
        assert analyzer.analyze_for_version(["feat!: new api"], SemVer(1, 4, 0)) == "major"

    def test_breaking_before_1_0_is_minor(self) -> None:
        analyzer = ConventionalCommitAnalyzer()
        assert analyzer.analyze_for_version(["feat!: new api"], SemVer(0, 4, 0)) == "minor"

    def test_nothing_releasable(self) -> None:
        analyzer = ConventionalCommitAnalyzer()
        assert analyzer.analyze_for_version(["chore: deps", "not conventional"]) is None
        assert analyzer.analyze_for_version([]) is None
