"""Release command - bump, changelog, commit, tag, push and publish."""

from __future__ import annotations

import asyncio
from enum import StrEnum
from pathlib import Path

import typer

from relflow.cli.context import build_context
from relflow.output.console import Style
from relflow.output.report import print_report, report_exit_code
from relflow.release.workflow import run_release
from relflow.services import local_services


class Strategy(StrEnum):
    auto = "auto"
    manual = "manual"


class Level(StrEnum):
    major = "major"
    minor = "minor"
    patch = "patch"
    prerelease = "prerelease"


def release(
    cwd: Path | None = typer.Option(
        None, "--cwd", help="Repository root (default: current directory)", show_default=False
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Config file (default: relflow.toml, else [tool.relflow] in pyproject.toml)",
        show_default=False,
    ),
    bump_strategy: Strategy | None = typer.Option(
        None, "--bump-strategy", help="auto (from commits) or manual", show_default=False
    ),
    release_type: Level | None = typer.Option(
        None, "--release-type", help="Bump level", show_default=False
    ),
    version: str | None = typer.Option(
        None, "--set-version", help="Release this exact version", show_default=False
    ),
    pre_release_id: str | None = typer.Option(
        None, "--pre-release-id", help="Pre-release identifier (alpha, beta, rc...)", show_default=False
    ),
    skip_bump: bool = typer.Option(False, "--skip-bump", help="Do not change the version"),
    skip_changelog: bool = typer.Option(False, "--skip-changelog", help="Do not touch the changelog"),
    skip_git: bool = typer.Option(False, "--skip-git", help="No commit, tag, push or release"),
    skip_push: bool = typer.Option(False, "--skip-push", help="Commit and tag locally only"),
    skip_github_release: bool = typer.Option(
        False, "--skip-github-release", help="Do not publish a GitHub release"
    ),
    skip_preflight_check: bool = typer.Option(
        False, "--skip-preflight-check", help="Do not check the repository first"
    ),
    pre_release: bool = typer.Option(False, "--pre-release", help="Mark the release as pre-release"),
    draft: bool = typer.Option(False, "--draft", help="Publish the release as a draft"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print actions without modifying"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug output"),
) -> None:
    """Run the release workflow."""
    ctx = build_context(
        root=cwd,
        config_path=config,
        overrides={
            "bump_strategy": bump_strategy.value if bump_strategy else None,
            "release_type": release_type.value if release_type else None,
            "version": version,
            "pre_release_id": pre_release_id,
            "skip_bump": skip_bump,
            "skip_changelog": skip_changelog,
            "skip_git": skip_git,
            "skip_push": skip_push,
            "skip_github_release": skip_github_release,
            "skip_preflight_check": skip_preflight_check,
            "release_pre_release": pre_release,
            "release_draft": draft,
            "dry_run": dry_run,
            "verbose": verbose,
        },
    )

    cfg = ctx.config
    ctx.console.print(f"project: {cfg.name}", Style.DIM)
    ctx.console.print(f"root: {ctx.root}", Style.DIM)

    services = local_services(ctx.root, ctx.console, cfg.base)
    report = asyncio.run(run_release(cfg, services))
    print_report(report, ctx.console)

    code = report_exit_code(report)
    if code != 0:
        raise typer.Exit(code=code)
