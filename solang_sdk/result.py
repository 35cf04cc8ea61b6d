"""
Tagged results for execution outcomes.

The executor reports `Ok(value)` or `Err(error)` instead of raising, so the
success / classified-failure decision is an explicit branch at the call site.
`unwrap()` converts back to the exception style used by the public surfaces.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E", bound=BaseException)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> "Ok[U]":
        return Ok(fn(self.value))


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self):
        raise self.error

    def map(self, fn: Callable) -> "Err[E]":
        return self


Result = Union[Ok[T], Err[E]]

__all__ = ["Ok", "Err", "Result"]
