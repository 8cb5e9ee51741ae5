"""Config conformance tests.

Loads YAML fixtures from tests/fixtures/config/ and runs them through the
registry config loading path. Positive fixtures list values and the action
each must produce (``null`` meaning no case matches); error fixtures must
fail either to parse or to load.

Run with: pytest tests/test_config_conformance.py -v
"""

from __future__ import annotations

from typing import Any

import pytest
from conftest import SAMPLE_TYPES, fixture_cases, fixture_id, load_config_fixtures

from matchbook import (
    ConfigParseError,
    MatcherError,
    Registry,
    RegistryBuilder,
    parse_matcher_config,
    register_builtin_types,
    register_core_predicates,
)


def _make_registry() -> Registry:
    """Build a registry with the core predicates and the sample types."""
    builder = register_builtin_types(register_core_predicates(RegistryBuilder()))
    for name, cls in SAMPLE_TYPES.items():
        builder.type(name, cls)
    return builder.build()


# Separate positive and error fixtures
_all_fixtures = load_config_fixtures()
_positive_fixtures = [f for f in _all_fixtures if not f.get("expect_error", False)]
_error_fixtures = [f for f in _all_fixtures if f.get("expect_error", False)]


@pytest.mark.parametrize(
    "fixture", _positive_fixtures, ids=[fixture_id(f) for f in _positive_fixtures]
)
def test_config_positive(fixture: dict[str, Any]) -> None:
    """Positive config fixture: parse, load, and evaluate must succeed."""
    registry = _make_registry()

    config = parse_matcher_config(fixture["config"])
    matcher = registry.load_matcher(config)

    for case in fixture_cases(fixture):
        actual = matcher.apply_or_else(case.value, lambda _: None)
        assert actual == case.expect, (
            f"Fixture '{fixture['name']}' case '{case.name}': "
            f"expected {case.expect!r}, got {actual!r}"
        )


@pytest.mark.parametrize("fixture", _error_fixtures, ids=[fixture_id(f) for f in _error_fixtures])
def test_config_error(fixture: dict[str, Any]) -> None:
    """Error config fixture: either parse or load must fail."""
    registry = _make_registry()

    try:
        config = parse_matcher_config(fixture["config"])
    except ConfigParseError:
        return

    with pytest.raises(MatcherError):
        registry.load_matcher(config)


def test_fixtures_were_found() -> None:
    assert _positive_fixtures
    assert _error_fixtures
