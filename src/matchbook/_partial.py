"""PartialFunction: a function defined only on a guarded part of its domain.

Guarded pairs a guard with a function. OrElse, AndThen and Combined are the
composites returned by or_else() and and_then(); all of them are frozen, and
composition never mutates its operands.

Every composite goes through apply_or_else() with a private sentinel, so each
guard is evaluated once per call no matter how deep the composition is.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from matchbook._errors import ArgumentError, NotAppliedError
from matchbook._guards import KeywordGuard, and_guard, to_guard
from matchbook._pattern import Pattern
from matchbook._types import Guard

if TYPE_CHECKING:
    from collections.abc import Callable

    from matchbook._types import Bindings

_MISS: Any = object()


def _miss(_value: Any) -> Any:
    return _MISS


def _not_applied(value: Any) -> Any:
    raise NotAppliedError(value)


class PartialFunction[A, B]:
    """Base class of all partial functions.

    Subclasses implement defined_at() and apply_or_else(); apply(),
    and_then() and or_else() are derived from those two.
    """

    __slots__ = ()

    def defined_at(self, value: A) -> bool:
        """Return True if the function can be applied to value. Never runs the function."""
        raise NotImplementedError

    def apply_or_else(self, value: A, fallback: Callable[[A], B]) -> B:
        """Apply to value, or return fallback(value) if not defined there."""
        raise NotImplementedError

    def apply(self, value: A) -> B:
        """Apply to value.

        Raises:
            NotAppliedError: If the function is not defined at value.
        """
        return self.apply_or_else(value, _not_applied)

    def __call__(self, value: A) -> B:
        return self.apply(value)

    def and_then[C](self, other: Callable[[B], C] | PartialFunction[B, C]) -> PartialFunction[A, C]:
        """Sequential composition: feed the result of self into other.

        A plain callable is a continuation and is applied unconditionally.
        A PartialFunction also restricts the domain: the composite is
        defined at v only if other is defined at self(v).
        """
        if isinstance(other, PartialFunction):
            return Combined(self, other)
        if not callable(other):
            msg = f"and_then expects a callable, got {type(other).__name__}"
            raise ArgumentError(msg)
        return AndThen(self, other)

    def or_else(self, other: PartialFunction[A, B]) -> PartialFunction[A, B]:
        """Fallback composition: try self, then other. Domain is the union."""
        if not isinstance(other, PartialFunction):
            msg = f"or_else expects a PartialFunction, got {type(other).__name__}"
            raise ArgumentError(msg)
        return OrElse((*self._alternatives(), *other._alternatives()))

    def __or__(self, other: PartialFunction[A, B]) -> PartialFunction[A, B]:
        return self.or_else(other)

    def _alternatives(self) -> tuple[PartialFunction[A, B], ...]:
        return (self,)


@dataclass(frozen=True, slots=True)
class Guarded[A, B](PartialFunction[A, B]):
    """A guard plus the function applied to values the guard accepts."""

    guard: Guard
    function: Callable[[A], B]

    def defined_at(self, value: A) -> bool:
        return self.guard.matches(value)

    def apply_or_else(self, value: A, fallback: Callable[[A], B]) -> B:
        if self.guard.matches(value):
            return self.function(value)
        return fallback(value)


@dataclass(frozen=True, slots=True)
class OrElse[A, B](PartialFunction[A, B]):
    """Ordered alternatives; the first one defined at the value wins.

    Nested or_else() calls flatten into a single tuple, so evaluation is a
    linear scan regardless of how the chain was built.
    """

    alternatives: tuple[PartialFunction[A, B], ...]

    def defined_at(self, value: A) -> bool:
        return any(pf.defined_at(value) for pf in self.alternatives)

    def apply_or_else(self, value: A, fallback: Callable[[A], B]) -> B:
        for pf in self.alternatives:
            result = pf.apply_or_else(value, _miss)
            if result is not _MISS:
                return result
        return fallback(value)

    def _alternatives(self) -> tuple[PartialFunction[A, B], ...]:
        return self.alternatives


@dataclass(frozen=True, slots=True)
class AndThen[A, B, C](PartialFunction[A, C]):
    """A partial function followed by an unconditional continuation."""

    first: PartialFunction[A, B]
    continuation: Callable[[B], C]

    def defined_at(self, value: A) -> bool:
        return self.first.defined_at(value)

    def apply_or_else(self, value: A, fallback: Callable[[A], C]) -> C:
        result = self.first.apply_or_else(value, _miss)
        if result is _MISS:
            return fallback(value)
        return self.continuation(result)


@dataclass(frozen=True, slots=True)
class Combined[A, B, C](PartialFunction[A, C]):
    """Two partial functions in sequence.

    Testing the domain runs the first function, since the second one's
    guard is evaluated against its result.
    """

    first: PartialFunction[A, B]
    second: PartialFunction[B, C]

    def defined_at(self, value: A) -> bool:
        result = self.first.apply_or_else(value, _miss)
        return result is not _MISS and self.second.defined_at(result)

    def apply_or_else(self, value: A, fallback: Callable[[A], C]) -> C:
        result = self.first.apply_or_else(value, _miss)
        if result is _MISS:
            return fallback(value)
        return self.second.apply_or_else(result, lambda _: fallback(value))


EMPTY: PartialFunction[Any, Any] = OrElse(())


def case[A, B](*guards: Any) -> Callable[[Callable[[A], B]], PartialFunction[A, B]]:
    """Decorator factory: a partial function defined where all guards match.

    Guards are coerced with to_guard() and evaluated left to right,
    stopping at the first one that fails::

        half = case(int, named("even"))(lambda n: n // 2)
        half.defined_at(4)  # True
        half.defined_at(3)  # False
    """
    guard = and_guard([to_guard(g) for g in guards])

    def decorate(function: Callable[[A], B]) -> PartialFunction[A, B]:
        return Guarded(guard, function)

    return decorate


def xcase[B](
    pattern: str | Pattern, *guards: Any
) -> Callable[[Callable[..., B]], PartialFunction[Any, B]]:
    """Decorator factory: a partial function defined on values shaped like pattern.

    Extra guards test the extracted bindings, not the raw value. Plain
    callables among them receive the bindings as keyword arguments, as
    does the decorated function::

        @xcase("Success(body)", lambda body: body != "")
        def ok(body):
            return body
    """
    parsed = pattern if isinstance(pattern, Pattern) else Pattern.parse(pattern)
    extractor: PartialFunction[Any, Bindings] = Guarded(parsed.guard(), parsed.extract)
    binding_guard = and_guard([_binding_guard(g) for g in guards])

    def decorate(function: Callable[..., B]) -> PartialFunction[Any, B]:
        def spread(bindings: Bindings) -> B:
            return function(**bindings)

        return extractor.and_then(Guarded(binding_guard, spread))

    return decorate


def _binding_guard(obj: Any) -> Guard:
    if callable(obj) and not isinstance(obj, (type, Guard)):
        return KeywordGuard(obj)
    return to_guard(obj)
