"""Ok/Err values for operations that can fail in expected ways.

Registry logins, builds, pushes and descriptor writes all fail for ordinary
reasons (bad credentials, a flaky network, a full disk). Those outcomes are
returned, not raised, and callers branch on them with ``match``:

    match registry.push(reference):
        case Ok(_):
            published.append(reference)
        case Err(NetworkError() as error):
            console.error(error.message)
        case Err(error):
            ...

Exceptions stay reserved for bugs and for Ctrl-C.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import NoReturn, TypeGuard

__all__ = ["Ok", "Err", "Result", "is_ok", "is_err"]


@dataclass(frozen=True, slots=True)
class Ok[T]:
    value: T

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        del default
        return self.value

    def map[U](self, fn: Callable[[T], U]) -> Ok[U]:
        return Ok(fn(self.value))

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    error: E

    def unwrap(self) -> NoReturn:
        raise ValueError(f"unwrap() on Err: {self.error}")

    def unwrap_or[T](self, default: T) -> T:
        return default

    def map(self, fn: Callable[..., object]) -> Err[E]:
        del fn
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]


def is_ok[T, E](result: Result[T, E]) -> TypeGuard[Ok[T]]:
    return isinstance(result, Ok)


def is_err[T, E](result: Result[T, E]) -> TypeGuard[Err[E]]:
    return isinstance(result, Err)
