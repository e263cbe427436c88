"""Result type used for every fallible operation in relflow.

Tasks, services and the engine never raise for expected failures; they
return ``Ok(value)`` or ``Err(error)`` and callers branch on the variant:

    match registry.get("bump-version"):
        case Ok(task):
            ...
        case Err(error):
            console.error(error.message)

Exceptions are reserved for programming errors. The workflow executor
still catches them at task boundaries and turns them into ``Err``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TypeGuard, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful outcome carrying ``value``."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Return the wrapped value."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Return the wrapped value; ``default`` is ignored."""
        return self.value

    def unwrap_err(self) -> None:
        """Raise, since an Ok has no error.

        Raises:
            ValueError: Always.
        """
        raise ValueError(f"called unwrap_err on Ok: {self.value}")

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        """Transform the wrapped value with ``f``."""
        return Ok(f(self.value))

    def map_err(self, f: Callable[[E], F]) -> Ok[T]:
        return self

    def flat_map(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Chain another fallible step onto this value."""
        return f(self.value)

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed outcome carrying ``error``."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> None:
        """Raise with the wrapped error.

        Raises:
            ValueError: Always.
        """
        raise ValueError(f"called unwrap on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        """Return ``default``."""
        return default

    def unwrap_err(self) -> E:
        """Return the wrapped error."""
        return self.error

    def map(self, f: Callable[[T], U]) -> Err[E]:
        return self

    def map_err(self, f: Callable[[E], F]) -> Err[F]:
        """Transform the wrapped error with ``f``."""
        return Err(f(self.error))

    def flat_map(self, f: Callable[[T], Result[U, E]]) -> Err[E]:
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]


def is_ok[T, E](result: Result[T, E]) -> TypeGuard[Ok[T]]:
    """Narrow ``result`` to ``Ok`` for type checkers."""
    return isinstance(result, Ok)


def is_err[T, E](result: Result[T, E]) -> TypeGuard[Err[E]]:
    """Narrow ``result`` to ``Err`` for type checkers."""
    return isinstance(result, Err)


def collect[T, E](results: Iterable[Result[T, E]]) -> Result[list[T], E]:
    """Gather a sequence of results, stopping at the first error.

    Args:
        results: Results to combine, consumed lazily.

    Returns:
        Ok with every value in order, or the first Err encountered.
    """
    values: list[T] = []
    for result in results:
        if isinstance(result, Err):
            return result
        values.append(result.value)
    return Ok(values)
