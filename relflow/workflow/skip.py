"""Skip decisions and the predicate helpers used to build them.

A task's skip function looks at the current context and answers with a
``SkipDecision``. Besides "run" or "skip", a skip can redirect the walk:

- ``skip_to=None``: skip this task and continue in declared order.
- ``skip_to=()``: skip this task and everything still ahead of it.
- ``skip_to=("a", "b")``: skip this task and continue with ``a`` then ``b``.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from relflow.core.result import Err, Ok, Result

from .context import WorkflowContext
from .errors import WorkflowError

__all__ = [
    "DEFAULT_SKIP_REASON",
    "Predicate",
    "SkipDecision",
    "SkipFn",
    "all_of",
    "any_of",
    "first_match",
    "negate",
    "skip_if",
    "skip_and_jump",
    "skip_to_end",
]

DEFAULT_SKIP_REASON = "condition not met"

type Context = WorkflowContext[Any, Any]
type Predicate = Callable[[Context], bool]


@dataclass(frozen=True, slots=True)
class SkipDecision:
    """Outcome of evaluating a skip function.

    Attributes:
        skip: Whether the task is skipped.
        reason: Reason recorded in the report (defaults to "condition not met").
        skip_to: Where the walk continues; see module docstring.
    """

    skip: bool
    reason: str | None = None
    skip_to: tuple[str, ...] | None = None

    @property
    def is_terminal(self) -> bool:
        return self.skip and self.skip_to == ()

    @property
    def is_branch(self) -> bool:
        return self.skip and bool(self.skip_to)

    @property
    def effective_reason(self) -> str:
        return self.reason or DEFAULT_SKIP_REASON


RUN = SkipDecision(skip=False)

type SkipFn = Callable[[Context], Result[SkipDecision, WorkflowError]]


def skip_if(predicate: Predicate, reason: str | None = None) -> SkipFn:
    """Skip when ``predicate`` holds, continuing in declared order."""

    def should_skip(ctx: Context) -> Result[SkipDecision, WorkflowError]:
        if predicate(ctx):
            return Ok(SkipDecision(skip=True, reason=reason))
        return Ok(RUN)

    return should_skip


def skip_and_jump(
    predicate: Predicate,
    targets: Sequence[str],
    reason: str | None = None,
) -> SkipFn:
    """Skip when ``predicate`` holds and continue with ``targets``."""
    jump = tuple(targets)

    def should_skip(ctx: Context) -> Result[SkipDecision, WorkflowError]:
        if predicate(ctx):
            return Ok(SkipDecision(skip=True, reason=reason, skip_to=jump))
        return Ok(RUN)

    return should_skip


def skip_to_end(predicate: Predicate, reason: str | None = None) -> SkipFn:
    """Skip when ``predicate`` holds and end the run with nothing else executed."""

    def should_skip(ctx: Context) -> Result[SkipDecision, WorkflowError]:
        if predicate(ctx):
            return Ok(SkipDecision(skip=True, reason=reason, skip_to=()))
        return Ok(RUN)

    return should_skip


def first_match(*fns: SkipFn) -> SkipFn:
    """Evaluate skip functions in order; the first one that skips wins.

    An error from any function stops evaluation and is returned as is.
    """

    def should_skip(ctx: Context) -> Result[SkipDecision, WorkflowError]:
        for fn in fns:
            result = fn(ctx)
            if isinstance(result, Err):
                return result
            if result.value.skip:
                return result
        return Ok(RUN)

    return should_skip


def all_of(*predicates: Predicate) -> Predicate:
    return lambda ctx: all(p(ctx) for p in predicates)


def any_of(*predicates: Predicate) -> Predicate:
    return lambda ctx: any(p(ctx) for p in predicates)


def negate(predicate: Predicate) -> Predicate:
    return lambda ctx: not predicate(ctx)
