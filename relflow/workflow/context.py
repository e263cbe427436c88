"""Immutable state threaded through a workflow run.

A task receives the current ``WorkflowContext`` and returns the next one.
Contexts are never mutated: ``fork`` and ``fork_many`` build a new instance
that shares config and services with its parent and carries a copied data
map. Earlier contexts (for example the one recorded for rollback) therefore
keep seeing exactly what they saw when they were captured.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import MappingProxyType

from relflow.core.result import Err, Ok, Result

from .errors import WorkflowError, not_found

__all__ = ["WorkflowContext"]


def _now() -> datetime:
    return datetime.now(UTC)


def _freeze(data: Mapping[str, object]) -> Mapping[str, object]:
    return MappingProxyType(dict(data))


@dataclass(frozen=True, slots=True)
class WorkflowContext[C, S]:
    """Snapshot of config, accumulated data and services.

    Attributes:
        config: Resolved configuration (read-only for the whole run).
        services: Collaborators tasks call into (git, filesystem...).
        data: Values produced by earlier tasks, keyed by name.
        started_at: When the run's initial context was created.
    """

    config: C
    services: S
    data: Mapping[str, object] = field(default_factory=lambda: _freeze({}))
    started_at: datetime = field(default_factory=_now)

    @classmethod
    def create(
        cls,
        config: C,
        services: S,
        data: Mapping[str, object] | None = None,
    ) -> WorkflowContext[C, S]:
        """Build the initial context for a run."""
        return cls(config=config, services=services, data=_freeze(data or {}))

    def get(self, key: str) -> Result[object, WorkflowError]:
        """Look up a data value; a missing key is a ``not_found`` error."""
        if key not in self.data:
            return Err(
                not_found(
                    f"context has no value for '{key}'",
                    hint="a task that provides it may have been skipped",
                    details={"key": key},
                )
            )
        return Ok(self.data[key])

    def get_or(self, key: str, default: object = None) -> object:
        return self.data.get(key, default)

    def has(self, key: str) -> bool:
        return key in self.data

    def fork(self, key: str, value: object) -> WorkflowContext[C, S]:
        """Return a context with ``key`` set to ``value``.

        Setting a key to the very object it already holds returns ``self``.
        """
        if key in self.data and self.data[key] is value:
            return self
        return self._with_data({**self.data, key: value})

    def fork_many(self, updates: Mapping[str, object]) -> WorkflowContext[C, S]:
        """Return a context with every key of ``updates`` applied."""
        if all(k in self.data and self.data[k] is v for k, v in updates.items()):
            return self
        return self._with_data({**self.data, **updates})

    def snapshot(self) -> dict[str, object]:
        """Copy of the data map, safe to mutate."""
        return dict(self.data)

    def _with_data(self, data: Mapping[str, object]) -> WorkflowContext[C, S]:
        return WorkflowContext(
            config=self.config,
            services=self.services,
            data=_freeze(data),
            started_at=self.started_at,
        )
