from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

__all__ = ["BumpLevel", "SemVer", "parse_version"]

BumpLevel = Literal["major", "minor", "patch", "prerelease"]

_VERSION_RE = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+[0-9A-Za-z.-]+)?$"
)


@dataclass(frozen=True, slots=True)
class SemVer:
    """Semantic version with an optional dotted pre-release part."""

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    @property
    def core(self) -> SemVer:
        return SemVer(self.major, self.minor, self.patch)

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            return f"{base}-{'.'.join(self.prerelease)}"
        return base

    def bump(self, kind: BumpLevel, pre_id: str = "alpha") -> SemVer:
        """Next version for ``kind``.

        A pre-release graduates on any standard bump that it already
        anticipates (``1.2.0-alpha.1`` + minor -> ``1.2.0``). ``prerelease``
        increments the trailing counter of a matching identifier, or starts
        ``<next patch>-<pre_id>.0``.
        """
        match kind:
            case "major":
                if self.is_prerelease and self.minor == 0 and self.patch == 0:
                    return self.core
                return SemVer(self.major + 1, 0, 0)
            case "minor":
                if self.is_prerelease and self.patch == 0:
                    return self.core
                return SemVer(self.major, self.minor + 1, 0)
            case "patch":
                if self.is_prerelease:
                    return self.core
                return SemVer(self.major, self.minor, self.patch + 1)
            case "prerelease":
                return self._bump_prerelease(pre_id)
            case _:
                raise AssertionError(f"unexpected bump kind: {kind}")

    def _bump_prerelease(self, pre_id: str) -> SemVer:
        if not self.is_prerelease:
            return SemVer(self.major, self.minor, self.patch + 1, (pre_id, "0"))

        head, last = self.prerelease[:-1], self.prerelease[-1]
        if head == (pre_id,) and last.isdigit():
            return SemVer(self.major, self.minor, self.patch, (pre_id, str(int(last) + 1)))
        return SemVer(self.major, self.minor, self.patch, (pre_id, "0"))


def parse_version(text: str) -> SemVer | None:
    """Parse ``1.2.3``, ``v1.2.3`` or ``1.2.3-beta.1``; build metadata is dropped."""
    m = _VERSION_RE.match(text.strip())
    if m is None:
        return None
    pre = tuple(m.group(4).split(".")) if m.group(4) else ()
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)), pre)
