from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

__all__ = ["ServiceError"]


@dataclass(frozen=True, slots=True)
class ServiceError:
    """Failure reported by a filesystem, hosting or analysis service."""

    kind: Literal["not_found", "unavailable", "invalid_input", "failed"]
    message: str
    hint: str | None = None
