"""Reading and rewriting the version string in a project file.

JSON files (``package.json``) keep their top-level ``"version"`` key;
TOML files (``pyproject.toml``, ``Cargo.toml``) keep the first
``version = "..."`` line of the ``[project]``, ``[tool.poetry]`` or
``[package]`` table. Only the version text is replaced so formatting and
comments survive.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass

from relflow.core.result import Err, Ok, Result
from relflow.core.structured import as_str_dict, get_str

__all__ = ["VersionFileError", "read_version", "write_version"]

_JSON_VERSION_RE = re.compile(r'^(\s*"version"\s*:\s*")([^"]*)(")', re.MULTILINE)
_TOML_TABLE_RE = re.compile(r"^\s*\[([^\]]+)\]\s*$")
_TOML_VERSION_RE = re.compile(r'^(\s*version\s*=\s*["\'])([^"\']*)(["\'])')
_TOML_VERSION_TABLES = frozenset({"project", "tool.poetry", "package"})


@dataclass(frozen=True, slots=True)
class VersionFileError:
    """The version cannot be located in the file."""

    message: str


def _is_json(path: str) -> bool:
    return path.lower().endswith(".json")


def read_version(path: str, content: str) -> Result[str | None, VersionFileError]:
    """Return the version declared in ``content``, None when there is none."""
    if _is_json(path):
        try:
            data = as_str_dict(json.loads(content))
        except json.JSONDecodeError as e:
            return Err(VersionFileError(f"{path}: invalid JSON: {e}"))
        if data is None:
            return Err(VersionFileError(f"{path}: expected a JSON object"))
        return Ok(get_str(data, "version"))

    span = _toml_version_span(content)
    if span is None:
        return Ok(None)
    start, end = span
    return Ok(content[start:end] or None)


def write_version(path: str, content: str, version: str) -> Result[str, VersionFileError]:
    """Return ``content`` with its version replaced by ``version``."""
    if _is_json(path):
        new, count = _JSON_VERSION_RE.subn(lambda m: f"{m.group(1)}{version}{m.group(3)}", content, count=1)
        if count == 0:
            return Err(VersionFileError(f'{path}: no "version" key found'))
        return Ok(new)

    span = _toml_version_span(content)
    if span is None:
        return Err(
            VersionFileError(f"{path}: no version entry in [project], [tool.poetry] or [package]")
        )
    start, end = span
    return Ok(content[:start] + version + content[end:])


def _toml_version_span(content: str) -> tuple[int, int] | None:
    table: str | None = None
    offset = 0
    for line in content.splitlines(keepends=True):
        header = _TOML_TABLE_RE.match(line)
        if header:
            table = header.group(1).strip()
        elif table in _TOML_VERSION_TABLES:
            m = _TOML_VERSION_RE.match(line)
            if m:
                return (offset + m.start(2), offset + m.end(2))
        offset += len(line)
    return None
