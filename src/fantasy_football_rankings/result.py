"""Tagged success/failure values for source attempts.

Every adapter call made by the orchestrator is folded into a Result before
the fallback loop inspects it, so raw exceptions never travel past the
adapter boundary.

Usage:
    attempt = await attempt_source(source, Category.QB, ScoringFormat.PPR, 10.0)
    match attempt:
        case Ok(players):
            ...
        case Err(error):
            logger.warning("%s failed: %s", source.tag, error)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, final

if TYPE_CHECKING:
    from collections.abc import Callable


class UnwrapError(Exception):
    """Raised when the wrong side of a Result is unwrapped."""


@final
@dataclass(frozen=True, slots=True)
class Ok[T]:
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def unwrap_err(self) -> Exception:
        raise UnwrapError("Called unwrap_err on Ok value")

    def map[U](self, fn: Callable[[T], U]) -> Ok[U]:
        return Ok(fn(self.value))


@final
@dataclass(frozen=True, slots=True)
class Err[E: Exception]:
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> object:
        raise UnwrapError(f"Called unwrap on Err value: {self.error}")

    def unwrap_or[T](self, default: T) -> T:
        return default

    def unwrap_err(self) -> E:
        return self.error

    def map(self, fn: Callable[..., object]) -> Err[E]:
        return self


type Result[T, E: Exception] = Ok[T] | Err[E]
