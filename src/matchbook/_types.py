"""Core protocols and type aliases for matchbook.

- Guard is the domain test of a partial function ("does this value match?")
- Transform is the function applied once a guard has accepted a value
- Bindings is the name -> sub-value mapping produced by pattern extraction
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

type Transform[A, B] = Callable[[A], B]

# Fresh dict per extraction; keys are the bound names of a pattern.
type Bindings = dict[str, Any]


@runtime_checkable
class Guard(Protocol):
    """Test whether a value belongs to a function's domain.

    Guards are non-generic: the same TypeGuard or RegexGuard
    works for raw values and for extracted bindings alike. Any object with
    a ``matches`` method is a guard, so third-party guards plug in without
    registration.
    """

    def matches(self, value: Any, /) -> bool: ...
