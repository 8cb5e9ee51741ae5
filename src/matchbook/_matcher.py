"""Matcher: first-match-wins composition of partial functions.

A MatcherBuilder collects branches in declaration order, plus at most one
default, and build() freezes it into a Matcher:

- Branches are tried in declaration order (first-match-wins, no reordering)
- The default is tried last, wherever it was declared
- No match and no default raises MatchError carrying the value
- Once built, the builder rejects further registration

Example::

    @matcher
    def describe(m):
        m.case(int)(lambda n: f"{n} is a number")
        m.case(str)(lambda s: f"{s} is a string")
        m.else_(lambda v: f"{v} is a {type(v).__name__}")

    describe(42)  # "42 is a number"
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from matchbook import _partial
from matchbook._errors import (
    ArgumentError,
    BuilderFrozenError,
    DuplicateDefaultError,
    MatchError,
)
from matchbook._guards import ANY
from matchbook._partial import EMPTY, Guarded, PartialFunction

if TYPE_CHECKING:
    from collections.abc import Callable

    from matchbook._pattern import Pattern

logger = logging.getLogger(__name__)


def _no_match(value: Any) -> Any:
    raise MatchError(value)


@dataclass(frozen=True, slots=True)
class Matcher[A, B](PartialFunction[A, B]):
    """A compiled, immutable matcher.

    The branches are folded with or_else() at construction time, with the
    default appended as an always-true branch. The result is a
    PartialFunction defined on the union of the branch domains.

    INV: First-match-wins. Later branches are never consulted.
    """

    branches: tuple[PartialFunction[A, B], ...]
    default: Callable[[A], B] | None = None
    _body: PartialFunction[A, B] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        for branch in self.branches:
            if not isinstance(branch, PartialFunction):
                msg = f"matcher branch must be a PartialFunction, got {type(branch).__name__}"
                raise ArgumentError(msg)
        alternatives = list(self.branches)
        if self.default is not None:
            alternatives.append(Guarded(ANY, self.default))
        body = functools.reduce(PartialFunction.or_else, alternatives, EMPTY)
        object.__setattr__(self, "_body", body)
        logger.debug(
            "compiled matcher with %d branches (default: %s)",
            len(self.branches),
            self.default is not None,
        )

    def defined_at(self, value: A) -> bool:
        return self._body.defined_at(value)

    def apply_or_else(self, value: A, fallback: Callable[[A], B]) -> B:
        return self._body.apply_or_else(value, fallback)

    def apply(self, value: A) -> B:
        """Apply the first matching branch.

        Raises:
            MatchError: If no branch matches and there is no default.
        """
        return self._body.apply_or_else(value, _no_match)

    def or_else(self, other: PartialFunction[A, B]) -> Matcher[A, B]:
        """Combine with another partial function, keeping MatchError semantics."""
        if not isinstance(other, PartialFunction):
            msg = f"or_else expects a PartialFunction, got {type(other).__name__}"
            raise ArgumentError(msg)
        return Matcher(branches=(*self._alternatives(), *other._alternatives()))

    def _alternatives(self) -> tuple[PartialFunction[A, B], ...]:
        return self._body._alternatives()


class MatcherBuilder[A, B]:
    """Builder for constructing a Matcher.

    Register branches with case(), xcase() and else_(), then call build()
    to produce an immutable Matcher. Constraint: immutability after build.
    Every registration on a built builder raises BuilderFrozenError.
    """

    def __init__(self) -> None:
        self._branches: list[PartialFunction[A, B]] = []
        self._default: Callable[[A], B] | None = None
        self._frozen = False

    def case(self, *guards: Any) -> Callable[[Callable[[A], B]], PartialFunction[A, B]]:
        """Register a branch defined where all guards match.

        Returns a decorator; the decorated function receives the value.
        """
        self._check_open()
        decorate = _partial.case(*guards)

        def register(function: Callable[[A], B]) -> PartialFunction[A, B]:
            return self.add(decorate(function))

        return register

    def xcase(
        self, pattern: str | Pattern, *guards: Any
    ) -> Callable[[Callable[..., B]], PartialFunction[A, B]]:
        """Register a pattern branch.

        The pattern is parsed immediately, so syntax errors surface while
        the matcher is being built. The decorated function receives the
        bindings as keyword arguments.
        """
        self._check_open()
        decorate = _partial.xcase(pattern, *guards)

        def register(function: Callable[..., B]) -> PartialFunction[A, B]:
            return self.add(decorate(function))

        return register

    def else_(self, function: Callable[[A], B]) -> Callable[[A], B]:
        """Register the default branch, matching any value.

        Raises:
            DuplicateDefaultError: If a default is already registered.
        """
        self._check_open()
        if self._default is not None:
            msg = "matcher already has a default branch"
            raise DuplicateDefaultError(msg)
        self._default = function
        return function

    def add(self, branch: PartialFunction[A, B]) -> PartialFunction[A, B]:
        """Register an existing partial function as the next branch."""
        self._check_open()
        if not isinstance(branch, PartialFunction):
            msg = f"matcher branch must be a PartialFunction, got {type(branch).__name__}"
            raise ArgumentError(msg)
        self._branches.append(branch)
        return branch

    def build(self) -> Matcher[A, B]:
        """Freeze the builder. No further registration is possible."""
        self._frozen = True
        return Matcher(branches=tuple(self._branches), default=self._default)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_open(self) -> None:
        if self._frozen:
            msg = "matcher builder is frozen; build() was already called"
            raise BuilderFrozenError(msg)


def matcher[A, B](build: Callable[[MatcherBuilder[A, B]], Any]) -> Matcher[A, B]:
    """Create a Matcher by running build against a fresh MatcherBuilder.

    Works as a decorator on the build function.
    """
    builder: MatcherBuilder[A, B] = MatcherBuilder()
    build(builder)
    return builder.build()


def match[A, B](value: A, build: Callable[[MatcherBuilder[A, B]], Any]) -> B:
    """Build a matcher and apply it to value.

    Raises:
        MatchError: If no branch matches and there is no default.
    """
    return matcher(build).apply(value)
