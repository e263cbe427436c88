from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import typer

from relflow.core.config import (
    ConfigError,
    ReleaseConfig,
    load_config,
    load_config_or_default,
    validate_config,
)
from relflow.core.errors import ErrorCode
from relflow.core.result import Err, Result
from relflow.output.console import ConsoleProtocol, RichConsole, Style


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: ReleaseConfig
    console: ConsoleProtocol


def apply_overrides(config: ReleaseConfig, overrides: dict[str, Any]) -> ReleaseConfig:
    """Apply CLI values on top of file config.

    ``None`` and ``False`` mean "not given on the command line" and keep the
    file value; flags can only switch behavior on.
    """
    given = {k: v for k, v in overrides.items() if v is not None and v is not False}
    if not given:
        return config
    if given.get("release_pre_release") or given.get("release_draft"):
        given.setdefault("release_latest", False)
    return replace(config, **given)


def resolve_config(
    root: Path,
    config_path: Path | None,
    overrides: dict[str, Any],
) -> Result[ReleaseConfig, ConfigError]:
    loaded = load_config(config_path) if config_path is not None else load_config_or_default(root)
    if isinstance(loaded, Err):
        return loaded
    return validate_config(apply_overrides(loaded.value, overrides))


def build_context(
    *,
    root: Path | None = None,
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> CLIContext:
    try:
        resolved_root = (root or Path.cwd()).expanduser().resolve()
    except OSError as e:
        typer.echo(f"error: invalid --cwd: {e}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if not resolved_root.is_dir():
        typer.echo(f"error: --cwd '{resolved_root}' is not a directory", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    overrides = overrides or {}
    console = RichConsole(verbose=bool(overrides.get("verbose")))

    config = resolve_config(resolved_root, config_path, overrides)
    if isinstance(config, Err):
        error = config.error
        console.error(error.message if error.path is None else f"{error.path}: {error.message}")
        if error.hint:
            console.print(f"hint: {error.hint}", Style.DIM)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(root=resolved_root, config=config.value, console=console)
