"""Error taxonomy for matchbook.

Build-time errors (PatternSyntaxError, DuplicateDefaultError,
BuilderFrozenError) are raised while constructing patterns and matchers,
never while matching. At match time MatchError is the one failure a caller
is expected to recover from; the rest signal misuse.
"""

from __future__ import annotations

from typing import Any


class MatcherError(Exception):
    """Base class for matchbook errors."""


class PatternSyntaxError(MatcherError, ValueError):
    """Pattern text does not conform to the pattern grammar.

    Also raised for bound names that occur more than once in one pattern.
    """

    def __init__(self, reason: str, text: str, position: int | None = None) -> None:
        self.reason = reason
        self.text = text
        self.position = position
        if position is None:
            msg = f"{reason} in pattern {text!r}"
        else:
            msg = f"{reason} at position {position} in pattern {text!r}"
        super().__init__(msg)


class GuardError(MatcherError):
    """A named-predicate guard was evaluated against a value that does not support it."""

    def __init__(self, guard: Any, value: Any, reason: str) -> None:
        self.guard = guard
        self.value = value
        super().__init__(f"{guard!r} cannot test {value!r}: {reason}")


class NotAppliedError(MatcherError, LookupError):
    """A partial function was applied to a value outside its domain."""

    def __init__(self, value: Any, msg: str | None = None) -> None:
        self.value = value
        super().__init__(msg or f"partial function is not defined at {value!r}")


class MatchError(NotAppliedError):
    """No branch of a matcher matched the value, and there is no default."""

    def __init__(self, value: Any) -> None:
        super().__init__(value, f"no branch matches {value!r}")


NoSuchElementError = MatchError


class DuplicateDefaultError(MatcherError):
    """A matcher builder received a second default branch."""


class BuilderFrozenError(MatcherError):
    """A matcher builder was modified after build()."""


class ArgumentError(TypeError):
    """An argument does not satisfy the required capability."""
