"""Guard variants and composition.

Leaf guards test a value directly (type, equality, membership, range,
predicate). AndGuard, OrGuard and NotGuard compose guards with
short-circuit evaluation, left to right.

The guard union is pattern-matchable via match/case.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from matchbook._errors import GuardError
from matchbook._types import Guard

if TYPE_CHECKING:
    from collections.abc import Callable, Container, Mapping


@dataclass(frozen=True, slots=True)
class AnyGuard:
    """Matches every value. Used for default branches."""

    def matches(self, value: Any, /) -> bool:
        return True


ANY = AnyGuard()


@dataclass(frozen=True, slots=True)
class TypeGuard:
    """``isinstance(value, types)``."""

    types: tuple[type, ...]

    def matches(self, value: Any, /) -> bool:
        return isinstance(value, self.types)


@dataclass(frozen=True, slots=True)
class EqualGuard:
    """Value equality (``value == expected``)."""

    expected: Any

    def matches(self, value: Any, /) -> bool:
        return bool(value == self.expected)


@dataclass(frozen=True, slots=True)
class MemberGuard:
    """Containment (``value in container``).

    Values the container cannot test (an unhashable value against a set)
    are non-matches.
    """

    container: Container[Any]

    def matches(self, value: Any, /) -> bool:
        try:
            return value in self.container
        except TypeError:
            return False


@dataclass(frozen=True, slots=True)
class BetweenGuard:
    """Inclusive range test (``low <= value <= high``).

    Values that do not compare with the bounds are non-matches.
    """

    low: Any
    high: Any

    def matches(self, value: Any, /) -> bool:
        try:
            return bool(self.low <= value <= self.high)
        except TypeError:
            return False


@dataclass(frozen=True, slots=True)
class PredicateGuard:
    """Wraps a one-argument predicate. Its exceptions propagate."""

    function: Callable[[Any], Any]

    def matches(self, value: Any, /) -> bool:
        return bool(self.function(value))


@dataclass(frozen=True, slots=True)
class NamedGuard:
    """A predicate resolved by name through a Registry.

    A value that does not support the predicate raises GuardError instead
    of evaluating to False.
    """

    name: str
    predicate: Callable[[Any], Any]

    def matches(self, value: Any, /) -> bool:
        try:
            return bool(self.predicate(value))
        except (TypeError, AttributeError) as e:
            raise GuardError(self, value, str(e)) from e


@dataclass(frozen=True, slots=True)
class KeywordGuard:
    """Calls the function with a bindings mapping spread as keyword arguments."""

    function: Callable[..., Any]

    def matches(self, value: Mapping[str, Any], /) -> bool:
        return bool(self.function(**value))


@dataclass(frozen=True, slots=True)
class BindingGuard:
    """Tests one entry of a bindings mapping. A missing entry is a non-match."""

    name: str
    guard: Guard

    def matches(self, value: Mapping[str, Any], /) -> bool:
        if self.name not in value:
            return False
        return self.guard.matches(value[self.name])


@dataclass(frozen=True, slots=True)
class AndGuard:
    """All guards must match (logical AND).

    Short-circuits on the first False. Empty AndGuard returns True (vacuous truth).
    """

    guards: tuple[Guard, ...]

    def matches(self, value: Any, /) -> bool:
        return all(g.matches(value) for g in self.guards)


@dataclass(frozen=True, slots=True)
class OrGuard:
    """Any guard must match (logical OR).

    Short-circuits on the first True. Empty OrGuard returns False.
    """

    guards: tuple[Guard, ...]

    def matches(self, value: Any, /) -> bool:
        return any(g.matches(value) for g in self.guards)


@dataclass(frozen=True, slots=True)
class NotGuard:
    """Inverts the result of the inner guard (logical NOT)."""

    guard: Guard

    def matches(self, value: Any, /) -> bool:
        return not self.guard.matches(value)


def to_guard(obj: Any) -> Guard:
    """Coerce a ``case`` argument into a Guard.

    - Guard -> used as-is
    - type or tuple of types -> TypeGuard
    - range -> MemberGuard
    - other callables -> PredicateGuard
    - anything else -> EqualGuard
    """
    if isinstance(obj, type):
        return TypeGuard((obj,))
    if isinstance(obj, Guard):
        return obj
    if isinstance(obj, tuple) and obj and all(isinstance(t, type) for t in obj):
        return TypeGuard(obj)
    if isinstance(obj, range):
        return MemberGuard(obj)
    if callable(obj):
        return PredicateGuard(obj)
    return EqualGuard(obj)


def and_guard(guards: list[Guard]) -> Guard:
    """Compose guards with AND semantics, optimizing for common cases.

    - Empty -> ANY (no conditions = match everything)
    - Single -> unwrapped (no wrapping overhead)
    - Multiple -> AndGuard(guards)
    """
    if not guards:
        return ANY
    if len(guards) == 1:
        return guards[0]
    return AndGuard(tuple(guards))


def or_guard(guards: list[Guard]) -> Guard:
    """Compose guards with OR semantics.

    - Empty -> OrGuard(()) (matches nothing)
    - Single -> unwrapped
    - Multiple -> OrGuard(guards)
    """
    if len(guards) == 1:
        return guards[0]
    return OrGuard(tuple(guards))


def where(**guards: Any) -> Guard:
    """Guard over a bindings mapping, one coerced guard per bound name.

    >>> where(x=int, y=range(0, 10)).matches({"x": 3, "y": 4})
    True
    """
    return and_guard([BindingGuard(name, to_guard(g)) for name, g in guards.items()])


def guard_depth(g: Guard) -> int:
    """Calculate the nesting depth of a guard tree."""
    match g:
        case AndGuard(guards=gs) | OrGuard(guards=gs):
            return 1 + max((guard_depth(sub) for sub in gs), default=0)
        case NotGuard(guard=inner) | BindingGuard(guard=inner):
            return 1 + guard_depth(inner)
        case _:
            return 1
