"""Shared sample types and the YAML conformance fixture loader.

Fixtures live in tests/fixtures/config/. Each YAML document holds a matcher
config plus cases of the form ``{name, value, expect}``; documents with
``expect_error: true`` must fail to parse or to load.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

FIXTURE_DIR = Path(__file__).resolve().parent / "fixtures" / "config"


@dataclass(frozen=True)
class Point:
    x: Any
    y: Any


@dataclass(frozen=True)
class Line:
    start: Point
    end: Point


@dataclass(frozen=True)
class Some:
    value: Any


class Nothing:
    """Empty variant; matchable by discriminator only."""

    __match_args__ = ()

    def __repr__(self) -> str:
        return "Nothing()"


# Tagged YAML values: {"Point": [1, 2]} builds Point(1, 2).
SAMPLE_TYPES: dict[str, type] = {"Point": Point, "Line": Line, "Some": Some}


@dataclass
class ConfigFixtureCase:
    """A single value/expectation pair from a conformance fixture."""

    name: str
    value: Any
    expect: Any


# ─── YAML → Python value conversion ─────────────────────────────────────────


def build_value(spec: Any) -> Any:
    """Turn tagged YAML values into sample type instances, recursively."""
    if isinstance(spec, dict) and len(spec) == 1:
        (tag, args), = spec.items()
        cls = SAMPLE_TYPES.get(tag)
        if cls is not None:
            return cls(*(build_value(a) for a in args))
    if isinstance(spec, list):
        return [build_value(item) for item in spec]
    return spec


# ─── Fixture loading ────────────────────────────────────────────────────────


def load_config_fixtures() -> list[dict[str, Any]]:
    """Load every document of every config fixture file."""
    fixtures: list[dict[str, Any]] = []
    if not FIXTURE_DIR.exists():
        return fixtures
    for yaml_file in sorted(FIXTURE_DIR.glob("*.yaml")):
        with yaml_file.open() as f:
            for doc in yaml.safe_load_all(f):
                if doc is None:
                    continue
                doc["_source"] = yaml_file.name
                fixtures.append(doc)
    return fixtures


def fixture_cases(fixture: dict[str, Any]) -> list[ConfigFixtureCase]:
    return [
        ConfigFixtureCase(name=c["name"], value=build_value(c["value"]), expect=c["expect"])
        for c in fixture.get("cases", [])
    ]


def fixture_id(fixture: dict[str, Any]) -> str:
    """Generate a readable test ID from a fixture."""
    source = fixture.get("_source", "unknown")
    name = fixture.get("name", "unnamed")
    return f"{source}::{name}"
