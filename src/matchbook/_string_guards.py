"""String guards implementing the Guard protocol.

Every string guard returns False for non-string values, so it can sit in
a branch next to guards for other types without a TypeGuard in front::

    case(PrefixGuard("err:"))(lambda s: s[4:])

With ``ignore_case`` the literal is casefolded once at construction and
each tested value is casefolded per call.

Regex uses ``google-re2`` for linear-time matching. RE2 has no
backreferences or lookaround; patterns using them are rejected when the
guard is constructed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import re2

from matchbook._errors import MatcherError


def _fold(text: str, ignore_case: bool) -> str:
    return text.casefold() if ignore_case else text


class _LiteralGuard:
    """matches() shared by the literal guards; subclasses supply _test()."""

    __slots__ = ()

    ignore_case: bool

    def matches(self, value: Any, /) -> bool:
        if not isinstance(value, str):
            return False
        return self._test(_fold(value, self.ignore_case))

    def _test(self, text: str) -> bool:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class ExactGuard(_LiteralGuard):
    value: str
    ignore_case: bool = False
    _needle: str = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_needle", _fold(self.value, self.ignore_case))

    def _test(self, text: str) -> bool:
        return text == self._needle


@dataclass(frozen=True, slots=True)
class PrefixGuard(_LiteralGuard):
    prefix: str
    ignore_case: bool = False
    _needle: str = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_needle", _fold(self.prefix, self.ignore_case))

    def _test(self, text: str) -> bool:
        return text.startswith(self._needle)


@dataclass(frozen=True, slots=True)
class SuffixGuard(_LiteralGuard):
    suffix: str
    ignore_case: bool = False
    _needle: str = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_needle", _fold(self.suffix, self.ignore_case))

    def _test(self, text: str) -> bool:
        return text.endswith(self._needle)


@dataclass(frozen=True, slots=True)
class ContainsGuard(_LiteralGuard):
    """Substring search. The empty substring matches every string."""

    substring: str
    ignore_case: bool = False
    _needle: str = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_needle", _fold(self.substring, self.ignore_case))

    def _test(self, text: str) -> bool:
        return self._needle in text


@dataclass(frozen=True, slots=True)
class RegexGuard:
    """Regular expression search, anywhere in the string unless anchored.

    Raises:
        MatcherError: If the pattern is not valid RE2 syntax.
    """

    pattern: str
    ignore_case: bool = False
    _compiled: re2.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        source = f"(?i){self.pattern}" if self.ignore_case else self.pattern
        try:
            compiled = re2.compile(source)
        except re2.error as e:
            msg = f"invalid regex pattern {self.pattern!r}: {e}"
            raise MatcherError(msg) from e
        object.__setattr__(self, "_compiled", compiled)

    def matches(self, value: Any, /) -> bool:
        if not isinstance(value, str):
            return False
        return self._compiled.search(value) is not None
