"""Name registry for predicates and types, and config-driven matcher loading.

Named predicates are resolved through an explicit registry rather than
by looking up attributes on the value. The same registry resolves type
names for declarative configs:

- RegistryBuilder → .build() → Registry (immutable)
- Registry.named() returns a NamedGuard for a registered predicate
- Registry.load_matcher() walks a MatcherConfig and constructs a Matcher

Example::

    builder = register_core_predicates(RegistryBuilder())
    builder.predicate("palindrome", lambda s: s == s[::-1])
    registry = builder.build()

    config = parse_matcher_config(yaml.safe_load(text))
    matcher = registry.load_matcher(config)
"""

from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass, field
from types import MappingProxyType, NoneType
from typing import TYPE_CHECKING, Any

from matchbook._config import (
    AndGuardConfig,
    BetweenGuardConfig,
    EqualsGuardConfig,
    InGuardConfig,
    InstanceGuardConfig,
    NamedGuardConfig,
    NotGuardConfig,
    OrGuardConfig,
    StringGuardConfig,
)
from matchbook._errors import MatcherError, PatternSyntaxError
from matchbook._guards import (
    AndGuard,
    BetweenGuard,
    BindingGuard,
    EqualGuard,
    MemberGuard,
    NamedGuard,
    NotGuard,
    OrGuard,
    TypeGuard,
    and_guard,
    guard_depth,
)
from matchbook._matcher import Matcher
from matchbook._partial import Guarded, PartialFunction
from matchbook._pattern import MAX_PATTERN_LENGTH, Pattern
from matchbook._string_guards import (
    ContainsGuard,
    ExactGuard,
    PrefixGuard,
    RegexGuard,
    SuffixGuard,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from matchbook._config import CaseConfig, GuardConfig, MatcherConfig
    from matchbook._types import Guard

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Limits
# ═══════════════════════════════════════════════════════════════════════════════

MAX_CASES = 256
MAX_GUARDS_PER_COMPOUND = 256
MAX_REGEX_PATTERN_LENGTH = 4096
MAX_DEPTH = 32

# ═══════════════════════════════════════════════════════════════════════════════
# Error types
# ═══════════════════════════════════════════════════════════════════════════════


class UnknownNameError(MatcherError):
    """A predicate or type name was not found in the registry."""

    def __init__(self, name: str, kind: str, available: list[str]) -> None:
        self.name = name
        self.kind = kind
        self.available = sorted(available)
        if self.available:
            registered = ", ".join(self.available)
            msg = f"unknown {kind} name: {name!r} (registered: {registered})"
        else:
            msg = f"unknown {kind} name: {name!r} (no {kind} names are registered)"
        super().__init__(msg)


class InvalidConfigError(MatcherError):
    """A config payload was malformed or semantically invalid."""

    def __init__(self, source: str) -> None:
        self.source = source
        super().__init__(f"invalid config: {source}")


class TooManyCasesError(MatcherError):
    """Config has too many cases (width-based limit)."""

    def __init__(self, count: int, max_: int) -> None:
        self.count = count
        self.max = max_
        super().__init__(f"too many cases: {count} exceeds maximum {max_}")


class TooManyGuardsError(MatcherError):
    """Compound guard has too many children (width-based limit)."""

    def __init__(self, count: int, max_: int) -> None:
        self.count = count
        self.max = max_
        super().__init__(f"too many guards in compound: {count} exceeds maximum {max_}")


class PatternTooLongError(MatcherError):
    """A string match or pattern text exceeds the length limit."""

    def __init__(self, length: int, max_: int) -> None:
        self.length = length
        self.max = max_
        super().__init__(f"pattern length {length} exceeds maximum {max_}")


# ═══════════════════════════════════════════════════════════════════════════════
# Builder
# ═══════════════════════════════════════════════════════════════════════════════

type Predicate = Callable[[Any], Any]


class RegistryBuilder:
    """Builder for constructing a Registry.

    Register predicates and types by name, then call build() to produce an
    immutable Registry. Constraint: immutability after build.
    """

    def __init__(self) -> None:
        self._predicates: dict[str, Predicate] = {}
        self._types: dict[str, type] = {}

    def predicate(self, name: str, function: Predicate) -> RegistryBuilder:
        """Register a one-argument predicate under name.

        The predicate should raise TypeError or AttributeError for values
        it does not support; NamedGuard turns those into GuardError.
        """
        self._predicates[name] = function
        return self

    def type(self, name: str, cls: type) -> RegistryBuilder:
        """Register a type under name for ``instance`` guards."""
        self._types[name] = cls
        return self

    def build(self) -> Registry:
        """Freeze the registry. No further registration is possible."""
        logger.debug(
            "built registry with %d predicates and %d types",
            len(self._predicates),
            len(self._types),
        )
        return Registry(
            _predicates=MappingProxyType(dict(self._predicates)),
            _types=MappingProxyType(dict(self._types)),
        )


def _integer(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        msg = f"{type(value).__name__} is not an integer"
        raise TypeError(msg)
    return int(value)


def _real(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        msg = f"{type(value).__name__} is not a real number"
        raise TypeError(msg)
    return float(value)


def register_core_predicates(builder: RegistryBuilder) -> RegistryBuilder:
    """Register the core named predicates.

    even, odd: integers. zero, positive, negative: real numbers.
    empty, nonempty: anything with ``len()``.
    """
    return (
        builder.predicate("even", lambda v: _integer(v) % 2 == 0)
        .predicate("odd", lambda v: _integer(v) % 2 == 1)
        .predicate("zero", lambda v: _real(v) == 0)
        .predicate("positive", lambda v: _real(v) > 0)
        .predicate("negative", lambda v: _real(v) < 0)
        .predicate("empty", lambda v: len(v) == 0)
        .predicate("nonempty", lambda v: len(v) > 0)
    )


def register_builtin_types(builder: RegistryBuilder) -> RegistryBuilder:
    """Register builtin types under their ``__name__``."""
    for cls in (int, float, complex, str, bytes, bool, list, tuple, dict, set, frozenset, NoneType):
        builder.type(cls.__name__, cls)
    return builder


# ═══════════════════════════════════════════════════════════════════════════════
# Registry
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Registry:
    """Immutable registry of named predicates and types.

    Constructed via RegistryBuilder. Use load_matcher() to compile
    config into a runtime Matcher.
    """

    _predicates: MappingProxyType[str, Predicate] = field(
        default_factory=lambda: MappingProxyType({})
    )
    _types: MappingProxyType[str, type] = field(default_factory=lambda: MappingProxyType({}))

    def named(self, name: str) -> NamedGuard:
        """Return a guard evaluating the predicate registered under name.

        Raises:
            UnknownNameError: name is not registered.
        """
        predicate = self._predicates.get(name)
        if predicate is None:
            raise UnknownNameError(name, "predicate", list(self._predicates.keys()))
        return NamedGuard(name, predicate)

    def resolve_type(self, name: str) -> type:
        """Return the type registered under name.

        Raises:
            UnknownNameError: name is not registered.
        """
        cls = self._types.get(name)
        if cls is None:
            raise UnknownNameError(name, "type", list(self._types.keys()))
        return cls

    def load_matcher(self, config: MatcherConfig[Any]) -> Matcher[Any, Any]:
        """Load a Matcher from configuration.

        Each case returns its configured action; the default, if present,
        returns its action for every value no case matched.

        Raises:
            UnknownNameError: predicate or type name not registered
            InvalidConfigError: bad regex, bad pattern text, unbound 'where' name
            TooManyCasesError: too many cases
            TooManyGuardsError: too many compound guard children
            PatternTooLongError: string match or pattern text exceeds length limit
            MatcherError: guard depth exceeded
        """
        if len(config.cases) > MAX_CASES:
            raise TooManyCasesError(len(config.cases), MAX_CASES)

        branches = tuple(self._load_case(c) for c in config.cases)

        default = None
        if config.default is not None:
            default = _constant(config.default.action)

        matcher = Matcher(branches=branches, default=default)
        logger.debug("loaded matcher config with %d cases", len(branches))
        return matcher

    @property
    def predicate_count(self) -> int:
        """Number of registered predicates."""
        return len(self._predicates)

    @property
    def type_count(self) -> int:
        """Number of registered types."""
        return len(self._types)

    def contains_predicate(self, name: str) -> bool:
        return name in self._predicates

    def contains_type(self, name: str) -> bool:
        return name in self._types

    def predicate_names(self) -> list[str]:
        """Return all registered predicate names (sorted)."""
        return sorted(self._predicates.keys())

    def type_names(self) -> list[str]:
        """Return all registered type names (sorted)."""
        return sorted(self._types.keys())

    # ── Private loading methods ────────────────────────────────────────────

    def _load_case(self, config: CaseConfig[Any]) -> PartialFunction[Any, Any]:
        guards = [self._load_top_guard(g) for g in config.guards]
        action = _constant(config.action.action)
        if config.pattern is None:
            return Guarded(and_guard(guards), action)

        if len(config.pattern) > MAX_PATTERN_LENGTH:
            raise PatternTooLongError(len(config.pattern), MAX_PATTERN_LENGTH)
        try:
            pattern = Pattern.parse(config.pattern)
        except PatternSyntaxError as e:
            raise InvalidConfigError(str(e)) from e

        where: list[Guard] = []
        for name, guard_config in config.where:
            if name not in pattern.names:
                msg = f"'where' refers to {name!r}, which pattern {pattern.text!r} does not bind"
                raise InvalidConfigError(msg)
            where.append(BindingGuard(name, self._load_top_guard(guard_config)))

        extractor = Guarded(and_guard([*guards, pattern.guard()]), pattern.extract)
        return extractor.and_then(Guarded(and_guard(where), action))

    def _load_top_guard(self, config: GuardConfig) -> Guard:
        guard = self._load_guard(config)
        depth = guard_depth(guard)
        if depth > MAX_DEPTH:
            msg = f"guard depth {depth} exceeds maximum allowed depth {MAX_DEPTH}"
            raise MatcherError(msg)
        return guard

    def _load_guard(self, config: GuardConfig) -> Guard:
        match config:
            case InstanceGuardConfig(types=names):
                return TypeGuard(tuple(self.resolve_type(n) for n in names))
            case EqualsGuardConfig(value=value):
                return EqualGuard(value)
            case InGuardConfig(values=values):
                return MemberGuard(values)
            case BetweenGuardConfig(low=low, high=high):
                return BetweenGuard(low, high)
            case NamedGuardConfig(name=name):
                return self.named(name)
            case StringGuardConfig(match=built_in, ignore_case=ignore_case):
                return _compile_built_in(built_in.variant, built_in.value, ignore_case)
            case AndGuardConfig(guards=children):
                return AndGuard(self._load_children(children))
            case OrGuardConfig(guards=children):
                return OrGuard(self._load_children(children))
            case NotGuardConfig(guard=inner):
                return NotGuard(self._load_guard(inner))
            case _:  # pragma: no cover
                msg = f"unknown guard config type: {type(config).__name__}"
                raise InvalidConfigError(msg)

    def _load_children(self, children: tuple[GuardConfig, ...]) -> tuple[Guard, ...]:
        if len(children) > MAX_GUARDS_PER_COMPOUND:
            raise TooManyGuardsError(len(children), MAX_GUARDS_PER_COMPOUND)
        return tuple(self._load_guard(c) for c in children)


def _constant(action: Any) -> Callable[[Any], Any]:
    def constant(_value: Any) -> Any:
        return action

    return constant


# ═══════════════════════════════════════════════════════════════════════════════
# Built-in string guard compilation
# ═══════════════════════════════════════════════════════════════════════════════


def _check_pattern_length(variant: str, value: str) -> None:
    """Enforce length limits on built-in string match specs."""
    if variant == "Regex":
        if len(value) > MAX_REGEX_PATTERN_LENGTH:
            raise PatternTooLongError(len(value), MAX_REGEX_PATTERN_LENGTH)
    elif len(value) > MAX_PATTERN_LENGTH:
        raise PatternTooLongError(len(value), MAX_PATTERN_LENGTH)


def _compile_built_in(variant: str, value: str, ignore_case: bool) -> Guard:
    """Compile a built-in string match variant into a Guard."""
    _check_pattern_length(variant, value)

    match variant:
        case "Exact":
            return ExactGuard(value, ignore_case=ignore_case)
        case "Prefix":
            return PrefixGuard(value, ignore_case=ignore_case)
        case "Suffix":
            return SuffixGuard(value, ignore_case=ignore_case)
        case "Contains":
            return ContainsGuard(value, ignore_case=ignore_case)
        case "Regex":
            try:
                return RegexGuard(value, ignore_case=ignore_case)
            except MatcherError as e:
                raise InvalidConfigError(str(e)) from e
        case _:
            msg = f"unknown built-in match variant: {variant!r}"
            raise InvalidConfigError(msg)


DEFAULT_REGISTRY = register_builtin_types(register_core_predicates(RegistryBuilder())).build()


def named(name: str, registry: Registry | None = None) -> NamedGuard:
    """Guard evaluating a registered predicate, from DEFAULT_REGISTRY unless given.

    >>> named("even").matches(4)
    True
    """
    return (registry or DEFAULT_REGISTRY).named(name)
