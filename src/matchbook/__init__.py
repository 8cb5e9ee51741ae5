"""matchbook: partial functions, guards, and structural pattern matching.

All public types are exported from this module for flat imports:

    from matchbook import matcher, case, xcase, named, Success, Failure
"""

__version__ = "0.1.0"

# Config types, see matchbook._config for details
from matchbook._config import (
    ActionConfig,
    AndGuardConfig,
    BetweenGuardConfig,
    BuiltInMatch,
    CaseConfig,
    ConfigParseError,
    EqualsGuardConfig,
    GuardConfig,
    InGuardConfig,
    InstanceGuardConfig,
    MatcherConfig,
    NamedGuardConfig,
    NotGuardConfig,
    OrGuardConfig,
    StringGuardConfig,
    parse_matcher_config,
)

# Errors
from matchbook._errors import (
    ArgumentError,
    BuilderFrozenError,
    DuplicateDefaultError,
    GuardError,
    MatcherError,
    MatchError,
    NoSuchElementError,
    NotAppliedError,
    PatternSyntaxError,
)

# Guards
from matchbook._guards import (
    ANY,
    AndGuard,
    AnyGuard,
    BetweenGuard,
    BindingGuard,
    EqualGuard,
    KeywordGuard,
    MemberGuard,
    NamedGuard,
    NotGuard,
    OrGuard,
    PredicateGuard,
    TypeGuard,
    and_guard,
    guard_depth,
    or_guard,
    to_guard,
    where,
)

# Matcher
from matchbook._matcher import Matcher, MatcherBuilder, match, matcher

# Partial functions
from matchbook._partial import (
    EMPTY,
    AndThen,
    Combined,
    Guarded,
    OrElse,
    PartialFunction,
    case,
    xcase,
)

# Patterns
from matchbook._pattern import (
    MAX_PATTERN_DEPTH,
    MAX_PATTERN_LENGTH,
    Pattern,
    PatternGuard,
)

# Registry, see matchbook._registry for details
from matchbook._registry import (
    DEFAULT_REGISTRY,
    MAX_CASES,
    MAX_DEPTH,
    MAX_GUARDS_PER_COMPOUND,
    MAX_REGEX_PATTERN_LENGTH,
    InvalidConfigError,
    PatternTooLongError,
    Registry,
    RegistryBuilder,
    TooManyCasesError,
    TooManyGuardsError,
    UnknownNameError,
    named,
    register_builtin_types,
    register_core_predicates,
)

# String guards
from matchbook._string_guards import (
    ContainsGuard,
    ExactGuard,
    PrefixGuard,
    RegexGuard,
    SuffixGuard,
)

# Try
from matchbook._try import Failure, Success, Try, attempt
from matchbook._types import Bindings, Guard, Transform

__all__ = [
    # Protocols
    "Guard",
    "Transform",
    "Bindings",
    # Partial functions
    "PartialFunction",
    "Guarded",
    "OrElse",
    "AndThen",
    "Combined",
    "EMPTY",
    "case",
    "xcase",
    # Matcher
    "Matcher",
    "MatcherBuilder",
    "matcher",
    "match",
    # Guards
    "ANY",
    "AnyGuard",
    "TypeGuard",
    "EqualGuard",
    "MemberGuard",
    "BetweenGuard",
    "PredicateGuard",
    "NamedGuard",
    "KeywordGuard",
    "BindingGuard",
    "AndGuard",
    "OrGuard",
    "NotGuard",
    "to_guard",
    "and_guard",
    "or_guard",
    "where",
    "guard_depth",
    # String guards
    "ExactGuard",
    "PrefixGuard",
    "SuffixGuard",
    "ContainsGuard",
    "RegexGuard",
    # Patterns
    "Pattern",
    "PatternGuard",
    "MAX_PATTERN_LENGTH",
    "MAX_PATTERN_DEPTH",
    # Try
    "Try",
    "Success",
    "Failure",
    "attempt",
    # Errors
    "MatcherError",
    "PatternSyntaxError",
    "GuardError",
    "NotAppliedError",
    "MatchError",
    "NoSuchElementError",
    "DuplicateDefaultError",
    "BuilderFrozenError",
    "ArgumentError",
    # Config types
    "BuiltInMatch",
    "InstanceGuardConfig",
    "EqualsGuardConfig",
    "InGuardConfig",
    "BetweenGuardConfig",
    "NamedGuardConfig",
    "StringGuardConfig",
    "AndGuardConfig",
    "OrGuardConfig",
    "NotGuardConfig",
    "GuardConfig",
    "ActionConfig",
    "CaseConfig",
    "MatcherConfig",
    "ConfigParseError",
    "parse_matcher_config",
    # Registry
    "RegistryBuilder",
    "Registry",
    "DEFAULT_REGISTRY",
    "named",
    "register_core_predicates",
    "register_builtin_types",
    "UnknownNameError",
    "InvalidConfigError",
    "TooManyCasesError",
    "TooManyGuardsError",
    "PatternTooLongError",
    "MAX_CASES",
    "MAX_GUARDS_PER_COMPOUND",
    "MAX_REGEX_PATTERN_LENGTH",
    "MAX_DEPTH",
]
