"""Try: the outcome of a computation that may have raised.

Success wraps a value, Failure wraps the exception. Both are frozen
dataclasses with ``__match_args__``, so they destructure in patterns::

    @xcase("Success(value)")
    def ok(value): ...

    @xcase("Failure(exception)")
    def failed(exception): ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Never

from matchbook._errors import ArgumentError

if TYPE_CHECKING:
    from collections.abc import Callable


class Try[T]:
    """Base class of Success and Failure."""

    __slots__ = ()

    def is_success(self) -> bool:
        raise NotImplementedError

    def is_failure(self) -> bool:
        return not self.is_success()

    def get(self) -> T:
        """Return the value of a Success, or re-raise the exception of a Failure."""
        raise NotImplementedError

    def get_or_else[D](self, default: D) -> T | D:
        if self.is_success():
            return self.get()
        return default

    def or_else[U](self, default: Try[U]) -> Try[T] | Try[U]:
        """Return self if it is a Success, otherwise default.

        Raises:
            ArgumentError: If default is not a Try.
        """
        if not isinstance(default, Try):
            msg = f"default should be a Try, got {type(default).__name__}"
            raise ArgumentError(msg)
        if self.is_success():
            return self
        return default


@dataclass(frozen=True, slots=True)
class Success[T](Try[T]):
    value: T

    def is_success(self) -> bool:
        return True

    def get(self) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class Failure(Try[Never]):
    exception: Exception

    def is_success(self) -> bool:
        return False

    def get(self) -> Never:
        raise self.exception


def attempt[T](function: Callable[..., T], *args: Any, **kwargs: Any) -> Try[T]:
    """Call function, capturing an ``Exception`` it raises as a Failure."""
    try:
        return Success(function(*args, **kwargs))
    except Exception as e:  # noqa: BLE001
        return Failure(e)
