"""Typed release configuration.

The configuration lives either in a dedicated ``relflow.toml`` or in the
``[tool.relflow]`` table of ``pyproject.toml``. Both snake_case and
camelCase keys are accepted so existing release configs can be reused.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_str, get_table

__all__ = [
    "BumpStrategy",
    "ReleaseType",
    "ReleaseConfig",
    "ConfigError",
    "find_config",
    "load_config",
    "load_config_or_default",
    "validate_config",
    "COMMIT_MESSAGE_TEMPLATE",
    "TAG_NAME_TEMPLATE",
    "RELEASE_TITLE_TEMPLATE",
    "CONFIG_FILE_NAME",
]

BumpStrategy = Literal["auto", "manual"]
ReleaseType = Literal["major", "minor", "patch", "prerelease"]

BUMP_STRATEGIES: tuple[BumpStrategy, ...] = ("auto", "manual")
RELEASE_TYPES: tuple[ReleaseType, ...] = ("major", "minor", "patch", "prerelease")

COMMIT_MESSAGE_TEMPLATE = "chore(release): release {{name}}@{{version}}"
TAG_NAME_TEMPLATE = "{{name}}@{{version}}"
RELEASE_TITLE_TEMPLATE = "{{name}}@{{version}}"

CONFIG_FILE_NAME = "relflow.toml"
PYPROJECT_FILE_NAME = "pyproject.toml"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded, parsed or validated."""

    message: str
    path: Path | None = None
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Everything a release run needs to know up front.

    Attributes:
        name: Project name used in templates.
        scope: Optional org/user scope used in templates.
        base: Project directory relative to the repository root.
        branch: Branch the release is expected to run on (None: any).
        remote: Git remote to push to.
        version_file: File holding the version (``.json`` or TOML).
        changelog_path: Changelog file relative to the project directory.
        bump_strategy: ``auto`` (from commits) or ``manual``.
        release_type: Explicit bump level.
        version: Explicit next version for the manual strategy.
        pre_release_id: Pre-release identifier (``alpha``, ``beta``...).
        release_notes: Extra notes appended to the changelog section.
        commit_message: Commit message template.
        tag_name: Tag name template.
        release_title: Hosted release title template.
    """

    name: str = "project"
    scope: str | None = None
    base: str = ""
    branch: str | None = None
    remote: str = "origin"
    version_file: str = PYPROJECT_FILE_NAME
    changelog_path: str = "CHANGELOG.md"

    bump_strategy: BumpStrategy = "auto"
    release_type: ReleaseType | None = None
    version: str | None = None
    pre_release_id: str = "alpha"
    release_notes: str = ""

    commit_message: str = COMMIT_MESSAGE_TEMPLATE
    tag_name: str = TAG_NAME_TEMPLATE
    release_title: str = RELEASE_TITLE_TEMPLATE

    skip_bump: bool = False
    skip_changelog: bool = False
    skip_git: bool = False
    skip_push: bool = False
    skip_github_release: bool = False
    skip_preflight_check: bool = False

    release_latest: bool = True
    release_pre_release: bool = False
    release_draft: bool = False

    dry_run: bool = False
    verbose: bool = False

    @property
    def skips_everything(self) -> bool:
        return self.skip_bump and self.skip_changelog and self.skip_git and self.skip_github_release

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseConfig:
        """Create a config from a mapping (parsed TOML).

        Unknown or mistyped values fall back to defaults; enum-like values
        are checked by ``validate_config``.

        Raises:
            ValueError: If ``bumpStrategy`` or ``releaseType`` is not a known value.
        """
        defaults = cls()

        bump_strategy = get_str(data, "bump_strategy", "bumpStrategy") or defaults.bump_strategy
        if bump_strategy not in BUMP_STRATEGIES:
            raise ValueError(f"unknown bump strategy: {bump_strategy}")

        release_type = get_str(data, "release_type", "releaseType")
        if release_type is not None and release_type not in RELEASE_TYPES:
            raise ValueError(f"unknown release type: {release_type}")

        pre_release = _flag(data, defaults.release_pre_release, "release_pre_release", "releasePreRelease")
        draft = _flag(data, defaults.release_draft, "release_draft", "releaseDraft")
        latest = get_bool(data, "release_latest", "releaseLatest")
        if latest is None:
            latest = not (pre_release or draft)

        return cls(
            name=get_str(data, "name") or defaults.name,
            scope=get_str(data, "scope"),
            base=get_str(data, "base") or defaults.base,
            branch=get_str(data, "branch"),
            remote=get_str(data, "remote") or defaults.remote,
            version_file=get_str(data, "version_file", "versionFile") or defaults.version_file,
            changelog_path=get_str(data, "changelog_path", "changelogPath") or defaults.changelog_path,
            bump_strategy=bump_strategy,  # type: ignore[arg-type]
            release_type=release_type,  # type: ignore[arg-type]
            version=get_str(data, "version"),
            pre_release_id=get_str(data, "pre_release_id", "preReleaseId") or defaults.pre_release_id,
            release_notes=get_str(data, "release_notes", "releaseNotes") or "",
            commit_message=get_str(data, "commit_message", "commitMessage") or defaults.commit_message,
            tag_name=get_str(data, "tag_name", "tagName") or defaults.tag_name,
            release_title=get_str(data, "release_title", "releaseTitle") or defaults.release_title,
            skip_bump=_flag(data, False, "skip_bump", "skipBump"),
            skip_changelog=_flag(data, False, "skip_changelog", "skipChangelog"),
            skip_git=_flag(data, False, "skip_git", "skipGit"),
            skip_push=_flag(data, False, "skip_push", "skipPush"),
            skip_github_release=_flag(data, False, "skip_github_release", "skipGitHubRelease"),
            skip_preflight_check=_flag(data, False, "skip_preflight_check", "skipPreflightCheck"),
            release_latest=latest,
            release_pre_release=pre_release,
            release_draft=draft,
            dry_run=_flag(data, False, "dry_run", "dryRun"),
            verbose=_flag(data, False, "verbose"),
        )


def _flag(data: Mapping[str, object], default: bool, *keys: str) -> bool:
    value = get_bool(data, *keys)
    return default if value is None else value


def validate_config(config: ReleaseConfig) -> Result[ReleaseConfig, ConfigError]:
    """Reject option combinations that cannot produce a sensible release."""
    release_flags = [
        name
        for name, value in (
            ("release_latest", config.release_latest),
            ("release_pre_release", config.release_pre_release),
            ("release_draft", config.release_draft),
        )
        if value
    ]
    if len(release_flags) > 1:
        return Err(
            ConfigError(
                f"only one of release_latest, release_pre_release, release_draft can be set "
                f"(got {', '.join(release_flags)})"
            )
        )

    if config.skip_git and config.skip_push:
        return Err(
            ConfigError(
                "skip_push should not be set when skip_git is set",
                hint="skip_git already skips every push",
            )
        )

    if (
        config.bump_strategy == "auto"
        and config.release_type is not None
        and config.release_type != "prerelease"
    ):
        return Err(
            ConfigError(
                "with bump_strategy 'auto', release_type can only be 'prerelease'",
                hint="use bump_strategy = 'manual' to force a bump level",
            )
        )

    if (
        config.bump_strategy == "manual"
        and not config.skip_bump
        and config.release_type is None
        and config.version is None
    ):
        return Err(
            ConfigError(
                "bump_strategy 'manual' needs a release_type or an explicit version",
                hint="pass --release-type or --set-version",
            )
        )

    if config.skips_everything:
        return Err(
            ConfigError(
                "nothing to do: bump, changelog, git and GitHub release are all skipped",
            )
        )

    return Ok(config)


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def _release_table(path: Path, data: StrDict) -> StrDict | None:
    if path.name == PYPROJECT_FILE_NAME:
        tool = get_table(data, "tool") or {}
        return get_table(tool, "relflow")
    return get_table(data, "release") or data


def find_config(root: Path) -> Path | None:
    """Locate the config file for a project directory.

    ``relflow.toml`` wins over ``pyproject.toml``; the latter only counts
    when it has a ``[tool.relflow]`` table.
    """
    dedicated = root / CONFIG_FILE_NAME
    if dedicated.is_file():
        return dedicated

    pyproject = root / PYPROJECT_FILE_NAME
    if pyproject.is_file():
        parsed = _parse_toml(pyproject)
        if isinstance(parsed, Ok) and _release_table(pyproject, parsed.value) is not None:
            return pyproject
    return None


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: ``relflow.toml`` or a ``pyproject.toml`` with ``[tool.relflow]``.

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) on failure.
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    table = _release_table(path, result.value)
    if table is None:
        return Err(ConfigError("No [tool.relflow] table found", path=path))

    try:
        return Ok(ReleaseConfig.from_dict(table))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(root: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load the project config, or defaults when the project has none."""
    path = find_config(root)
    if path is None:
        return Ok(ReleaseConfig())
    return load_config(path)
