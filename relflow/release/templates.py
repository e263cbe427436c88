from __future__ import annotations

import re

from relflow.core.config import ReleaseConfig

__all__ = ["render_template"]

_PLACEHOLDER_RE = re.compile(r"\{\{\s*(\w+)\s*\}\}")


def render_template(template: str, config: ReleaseConfig, version: str) -> str:
    """Fill ``{{name}}``, ``{{scope}}`` and ``{{version}}`` placeholders.

    Unknown placeholders are left as written.
    """
    values = {
        "name": config.name,
        "scope": config.scope or "",
        "version": version,
    }

    def substitute(m: re.Match[str]) -> str:
        key = m.group(1)
        return values.get(key, m.group(0))

    return _PLACEHOLDER_RE.sub(substitute, template)
