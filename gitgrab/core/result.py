"""Ok/Err values for failures that callers are expected to handle.

Fetching, syncing and loading config all fail in ordinary ways (a 404 from
the API, a git exit code, a missing file). Those paths return a Result so the
caller decides whether the failure is fatal to the run or local to one
repository.

    match engine.sync(config):
        case Ok(action):
            console.success(f"{name}: {action}")
        case Err(error):
            console.error(str(error))
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")

__all__ = ["Ok", "Err", "Result"]


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome.

    Attributes:
        value: The success value.
    """

    value: T

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        """Applies a function to the contained value.

        Args:
            f: Function to apply to the value.

        Returns:
            Ok with the transformed value.
        """
        return Ok(f(self.value))

    def map_err(self, f: Callable[[E], F]) -> Ok[T]:
        """Returns self unchanged (no error to map)."""
        return self

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed outcome.

    Attributes:
        error: The error value.
    """

    error: E

    def map(self, f: Callable[[T], U]) -> Err[E]:
        """Returns self unchanged (no value to map)."""
        return self

    def map_err(self, f: Callable[[E], F]) -> Err[F]:
        """Applies a function to the contained error.

        Used to lift a lower-level error into the caller's own type, e.g.
        a `ProcessError` into a `GitError`.

        Args:
            f: Function to apply to the error.

        Returns:
            Err with the transformed error.
        """
        return Err(f(self.error))

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[E]
