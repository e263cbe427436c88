"""Typed accessors for untyped TOML/JSON data.

Config files are parsed into plain dicts; these helpers read values out of
them with runtime checks so the rest of the code only sees narrowed types.
Keys may be given in several spellings (``skip_git`` / ``skipGit``); the
first one present wins.
"""

from __future__ import annotations

from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    """Return True if obj is a dict with string keys."""
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    if is_str_dict(obj):
        return obj
    return None


def _lookup(table: Mapping[str, object], keys: tuple[str, ...]) -> object:
    for key in keys:
        if key in table:
            return table[key]
    return None


def get_str(table: Mapping[str, object], *keys: str) -> str | None:
    """Get a string value, stripping whitespace.

    Returns None if missing, not a str, or empty after stripping.
    """
    value = _lookup(table, keys)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_bool(table: Mapping[str, object], *keys: str) -> bool | None:
    """Get a boolean value; None when missing or not a bool."""
    value = _lookup(table, keys)
    if isinstance(value, bool):
        return value
    return None


def get_table(table: Mapping[str, object], *keys: str) -> StrDict | None:
    """Get a nested table (dict with string keys)."""
    return as_str_dict(_lookup(table, keys))
