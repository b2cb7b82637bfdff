"""Ok / Err values returned by every fallible papernet operation.

Wallet lookups, gateway calls and payload decoding return ``Ok[T] | Err[E]``
instead of raising; callers branch with ``match``::

    match await gateway.get_network("mychannel"):
        case Err(error):
            ...
        case Ok(network):
            ...
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, NoReturn, final


@final
@dataclass(frozen=True, slots=True)
class Ok[T]:
    value: T

    def map[U](self, f: Callable[[T], U]) -> Ok[U]:
        return Ok(f(self.value))

    def unwrap(self) -> T:
        return self.value


@final
@dataclass(frozen=True, slots=True)
class Err[E]:
    error: E

    def map(self, f: Callable[[Any], Any]) -> Err[E]:  # noqa: ARG002
        return self

    def unwrap(self) -> NoReturn:
        raise RuntimeError(f"Called unwrap on Err: {self.error}")


type Result[T, E] = Ok[T] | Err[E]


def unwrap[T](result: Ok[T] | Err[Any]) -> T:
    """Value of an Ok, RuntimeError for an Err. For tests and program edges."""
    match result:
        case Ok(value):
            return value
        case Err(error):
            raise RuntimeError(f"unwrap on Err: {error}")
    raise TypeError(f"Expected Ok or Err, got {type(result).__name__}")
