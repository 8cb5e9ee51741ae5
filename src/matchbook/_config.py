"""Config types for declarative matcher construction.

The same JSON/YAML shape builds a matcher without writing Python guards:
  dict → parse_matcher_config() → MatcherConfig → Registry.load_matcher() → Matcher

Relationship to runtime types:

| Config type          | Runtime type                  |
|----------------------|-------------------------------|
| MatcherConfig        | Matcher                       |
| CaseConfig           | Guarded / xcase branch        |
| GuardConfig          | Guard                         |
| BuiltInMatch         | ExactGuard, PrefixGuard, ...  |
| ActionConfig         | constant branch result        |
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# ═══════════════════════════════════════════════════════════════════════════════
# Config types (frozen dataclasses)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class BuiltInMatch:
    """Built-in string matching (Exact, Prefix, Suffix, Contains, Regex).

    Serialized as a single-key dict:
    { "Exact": "hello" }, { "Prefix": "/api" }, { "Regex": "^foo" }
    """

    variant: str
    value: str


@dataclass(frozen=True, slots=True)
class InstanceGuardConfig:
    """isinstance test against one or more registered type names."""

    types: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class EqualsGuardConfig:
    value: Any


@dataclass(frozen=True, slots=True)
class InGuardConfig:
    values: tuple[Any, ...]


@dataclass(frozen=True, slots=True)
class BetweenGuardConfig:
    """Inclusive range."""

    low: Any
    high: Any


@dataclass(frozen=True, slots=True)
class NamedGuardConfig:
    """Predicate looked up by name in the registry."""

    name: str


@dataclass(frozen=True, slots=True)
class StringGuardConfig:
    match: BuiltInMatch
    ignore_case: bool = False


@dataclass(frozen=True, slots=True)
class AndGuardConfig:
    """All child guards must match (logical AND)."""

    guards: tuple[GuardConfig, ...]


@dataclass(frozen=True, slots=True)
class OrGuardConfig:
    """Any child guard must match (logical OR)."""

    guards: tuple[GuardConfig, ...]


@dataclass(frozen=True, slots=True)
class NotGuardConfig:
    """Inverts the inner guard (logical NOT)."""

    guard: GuardConfig


type GuardConfig = (
    InstanceGuardConfig
    | EqualsGuardConfig
    | InGuardConfig
    | BetweenGuardConfig
    | NamedGuardConfig
    | StringGuardConfig
    | AndGuardConfig
    | OrGuardConfig
    | NotGuardConfig
)


@dataclass(frozen=True, slots=True)
class ActionConfig[A]:
    """Return this action when the branch matches."""

    action: A


@dataclass(frozen=True, slots=True)
class CaseConfig[A]:
    """One branch.

    Without a pattern, guards test the raw value. With a pattern, guards
    test the raw value before extraction and ``where`` tests individual
    bindings after it.
    """

    action: ActionConfig[A]
    guards: tuple[GuardConfig, ...] = ()
    pattern: str | None = None
    where: tuple[tuple[str, GuardConfig], ...] = ()


@dataclass(frozen=True, slots=True)
class MatcherConfig[A]:
    """Configuration for a Matcher.

    Deserializes from JSON/YAML dicts and can be loaded into a runtime
    Matcher via Registry.load_matcher().
    """

    cases: tuple[CaseConfig[A], ...]
    default: ActionConfig[A] | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Parsing (dict → config types)
# ═══════════════════════════════════════════════════════════════════════════════

_STRING_MATCH_VARIANTS = frozenset({"Exact", "Prefix", "Suffix", "Contains", "Regex"})


class ConfigParseError(Exception):
    """Error parsing a config dict into config types."""


def parse_matcher_config(data: dict[str, Any]) -> MatcherConfig[Any]:
    """Parse a dict into a MatcherConfig.

    This is the main entry point for config loading.

    Raises:
        ConfigParseError: If the dict is malformed.
    """
    if not isinstance(data, dict):
        msg = f"expected dict, got {type(data).__name__}"
        raise ConfigParseError(msg)

    raw_cases = data.get("cases")
    if raw_cases is None:
        msg = "missing required field 'cases'"
        raise ConfigParseError(msg)
    if not isinstance(raw_cases, list):
        msg = f"'cases' must be a list, got {type(raw_cases).__name__}"
        raise ConfigParseError(msg)

    cases = tuple(_parse_case(c) for c in raw_cases)

    default = None
    if "default" in data:
        default = _parse_action(data["default"], "default")

    return MatcherConfig(cases=cases, default=default)


def _parse_case(data: dict[str, Any]) -> CaseConfig[Any]:
    """Parse a case config dict."""
    if not isinstance(data, dict):
        msg = f"case must be a dict, got {type(data).__name__}"
        raise ConfigParseError(msg)

    if "action" not in data:
        msg = "case missing required field 'action'"
        raise ConfigParseError(msg)

    guards = _parse_guard_list(data.get("guards", []), "case 'guards'")

    pattern = data.get("pattern")
    if pattern is not None and not isinstance(pattern, str):
        msg = f"'pattern' must be a string, got {type(pattern).__name__}"
        raise ConfigParseError(msg)

    raw_where = data.get("where", {})
    if not isinstance(raw_where, dict):
        msg = f"'where' must be a dict, got {type(raw_where).__name__}"
        raise ConfigParseError(msg)
    if raw_where and pattern is None:
        msg = "'where' requires a 'pattern'"
        raise ConfigParseError(msg)
    where = tuple((str(name), _parse_guard(g)) for name, g in raw_where.items())

    return CaseConfig(
        action=ActionConfig(action=data["action"]),
        guards=guards,
        pattern=pattern,
        where=where,
    )


def _parse_action(data: dict[str, Any], where: str) -> ActionConfig[Any]:
    if not isinstance(data, dict):
        msg = f"{where} must be a dict, got {type(data).__name__}"
        raise ConfigParseError(msg)
    if "action" not in data:
        msg = f"{where} missing required field 'action'"
        raise ConfigParseError(msg)
    return ActionConfig(action=data["action"])


def _parse_guard_list(data: Any, where: str) -> tuple[GuardConfig, ...]:
    if not isinstance(data, list):
        msg = f"{where} must be a list, got {type(data).__name__}"
        raise ConfigParseError(msg)
    return tuple(_parse_guard(g) for g in data)


def _parse_guard(data: dict[str, Any]) -> GuardConfig:
    """Parse a guard config dict.

    Uses 'type' discriminant: instance, equals, in, between, named,
    string, and, or, not.
    """
    if not isinstance(data, dict):
        msg = f"guard must be a dict, got {type(data).__name__}"
        raise ConfigParseError(msg)

    guard_type = data.get("type")
    if guard_type is None:
        msg = "guard missing required field 'type'"
        raise ConfigParseError(msg)

    match guard_type:
        case "instance":
            return InstanceGuardConfig(types=_parse_type_names(data))
        case "equals":
            _require(data, "value", guard_type)
            return EqualsGuardConfig(value=data["value"])
        case "in":
            _require(data, "values", guard_type)
            values = data["values"]
            if not isinstance(values, list):
                msg = f"in guard 'values' must be a list, got {type(values).__name__}"
                raise ConfigParseError(msg)
            return InGuardConfig(values=tuple(values))
        case "between":
            _require(data, "low", guard_type)
            _require(data, "high", guard_type)
            return BetweenGuardConfig(low=data["low"], high=data["high"])
        case "named":
            _require(data, "name", guard_type)
            name = data["name"]
            if not isinstance(name, str):
                msg = f"named guard 'name' must be a string, got {type(name).__name__}"
                raise ConfigParseError(msg)
            return NamedGuardConfig(name=name)
        case "string":
            _require(data, "value_match", guard_type)
            return StringGuardConfig(
                match=_parse_value_match(data["value_match"]),
                ignore_case=bool(data.get("ignore_case", False)),
            )
        case "and":
            children = _parse_guard_list(data.get("guards", []), "and guard 'guards'")
            return AndGuardConfig(guards=children)
        case "or":
            children = _parse_guard_list(data.get("guards", []), "or guard 'guards'")
            return OrGuardConfig(guards=children)
        case "not":
            _require(data, "guard", guard_type)
            return NotGuardConfig(guard=_parse_guard(data["guard"]))

    msg = f"unknown guard type: {guard_type!r}"
    raise ConfigParseError(msg)


def _require(data: dict[str, Any], key: str, guard_type: str) -> None:
    if key not in data:
        msg = f"{guard_type} guard missing required field {key!r}"
        raise ConfigParseError(msg)


def _parse_type_names(data: dict[str, Any]) -> tuple[str, ...]:
    _require(data, "of", "instance")
    of = data["of"]
    names = [of] if isinstance(of, str) else of
    if not isinstance(names, list) or not names or not all(isinstance(n, str) for n in names):
        msg = "instance guard 'of' must be a type name or a non-empty list of type names"
        raise ConfigParseError(msg)
    return tuple(names)


def _parse_value_match(data: dict[str, Any]) -> BuiltInMatch:
    """Parse a value_match dict into a BuiltInMatch.

    Expected format: { "Exact": "hello" } or { "Prefix": "/api" } etc.
    """
    if not isinstance(data, dict):
        msg = f"value_match must be a dict, got {type(data).__name__}"
        raise ConfigParseError(msg)

    for variant in _STRING_MATCH_VARIANTS:
        if variant in data:
            value = data[variant]
            if not isinstance(value, str):
                msg = f"value_match {variant} value must be a string, got {type(value).__name__}"
                raise ConfigParseError(msg)
            return BuiltInMatch(variant=variant, value=value)

    expected = sorted(_STRING_MATCH_VARIANTS)
    msg = f"value_match must contain one of {expected}, got keys: {sorted(data.keys())}"
    raise ConfigParseError(msg)
