from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True

    @property
    def is_err(self) -> bool:
        return False

    def fold(self, on_err: Callable[[Exception], R], on_ok: Callable[[T], R]) -> R:
        return on_ok(self.value)

    def __bool__(self) -> bool:
        raise TypeError("Result has no truth value; use is_ok or fold()")


@dataclass(frozen=True)
class Err:
    error: Exception

    @property
    def is_ok(self) -> bool:
        return False

    @property
    def is_err(self) -> bool:
        return True

    def fold(self, on_err: Callable[[Exception], R], on_ok: Callable[[T], R]) -> R:
        return on_err(self.error)

    def __bool__(self) -> bool:
        raise TypeError("Result has no truth value; use is_ok or fold()")


Result = Union[Ok[T], Err]
