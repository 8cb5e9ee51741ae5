"""Tests for pattern parsing, shape tests, and extraction."""

from __future__ import annotations

import datetime
from collections import namedtuple

import pytest
from conftest import Line, Nothing, Point, Some

from matchbook import (
    MAX_PATTERN_DEPTH,
    MAX_PATTERN_LENGTH,
    Failure,
    NotAppliedError,
    Pattern,
    PatternGuard,
    PatternSyntaxError,
    Success,
)

Pair = namedtuple("Pair", ["left", "right"])


class Plain:
    """No __match_args__: only discriminator and keyword slots apply."""

    def __init__(self, size: int) -> None:
        self.size = size


class TestParse:
    def test_names_in_source_order(self) -> None:
        assert Pattern.parse("Line(Point(a, b), Point(c, _))").names == ("a", "b", "c")

    def test_parse_is_memoized(self) -> None:
        assert Pattern.parse("Some(x)") is Pattern.parse("Some(x)")

    def test_whitespace_is_ignored(self) -> None:
        assert Pattern.parse("  Point( x ,y )  ").names == ("x", "y")

    def test_trailing_commas(self) -> None:
        assert Pattern.parse("Point(x, y,)").names == ("x", "y")
        assert Pattern.parse("[a, b,]").names == ("a", "b")

    def test_guard(self) -> None:
        p = Pattern.parse("Some(_)")
        assert p.guard() == PatternGuard(p)
        assert p.guard().matches(Some(1)) is True


class TestSyntaxErrors:
    @pytest.mark.parametrize(
        "text",
        [
            "",
            "Point(",
            "Point(x",
            "Point(x,,y)",
            "Point(x) extra",
            "Point(x=1, y)",
            "Point(x=1, x=2)",
            "[*a, *b]",
            "[a",
            "a.b",
            "Some(x) as",
            "Some(x) as 1",
            "True(x)",
            "_(x)",
            "Point(1=x)",
            "Point(x) ^",
            "'unterminated",
            "[*1]",
        ],
    )
    def test_malformed(self, text: str) -> None:
        with pytest.raises(PatternSyntaxError):
            Pattern.parse(text)

    def test_error_carries_text_and_position(self) -> None:
        with pytest.raises(PatternSyntaxError) as exc_info:
            Pattern.parse("Point(x, ?)")
        assert exc_info.value.text == "Point(x, ?)"
        assert exc_info.value.position == 9

    def test_is_a_value_error(self) -> None:
        with pytest.raises(ValueError):
            Pattern.parse("Point(")

    def test_name_bound_at_two_levels(self) -> None:
        with pytest.raises(PatternSyntaxError, match="bound more than once"):
            Pattern.parse("D(a, E(a))")

    def test_name_bound_twice_via_as(self) -> None:
        with pytest.raises(PatternSyntaxError):
            Pattern.parse("Some(x) as x")

    def test_name_bound_twice_via_star(self) -> None:
        with pytest.raises(PatternSyntaxError):
            Pattern.parse("[x, *x]")

    def test_wildcards_may_repeat(self) -> None:
        assert Pattern.parse("Point(_, _)").names == ()

    def test_too_long(self) -> None:
        with pytest.raises(PatternSyntaxError):
            Pattern.parse("[" + "_," * MAX_PATTERN_LENGTH + "]")

    def test_too_deep(self) -> None:
        text = "Some(" * (MAX_PATTERN_DEPTH + 1) + "x" + ")" * (MAX_PATTERN_DEPTH + 1)
        with pytest.raises(PatternSyntaxError, match="depth"):
            Pattern.parse(text)

    def test_max_depth_is_allowed(self) -> None:
        depth = MAX_PATTERN_DEPTH - 1
        text = "Some(" * depth + "x" + ")" * depth
        value: object = 1
        for _ in range(depth):
            value = Some(value)
        assert Pattern.parse(text).extract(value) == {"x": 1}


class TestClassPatterns:
    def test_round_trip(self) -> None:
        p = Pattern.parse("Point(a, b)")
        assert p.matches(Point(1, 2)) is True
        assert p.extract(Point(1, 2)) == {"a": 1, "b": 2}

    def test_wrong_discriminator(self) -> None:
        assert Pattern.parse("Point(a, b)").matches(Some(1)) is False

    def test_arity_mismatch_is_non_match(self) -> None:
        assert Pattern.parse("Point(a)").matches(Point(1, 2)) is False
        assert Pattern.parse("Point(a, b, c)").matches(Point(1, 2)) is False

    def test_empty_parens_test_discriminator_only(self) -> None:
        assert Pattern.parse("Point()").matches(Point(1, 2)) is True
        assert Pattern.parse("Nothing()").matches(Nothing()) is True
        assert Pattern.parse("int()").matches(5) is True

    def test_literal_slots(self) -> None:
        p = Pattern.parse("Point(x, 0)")
        assert p.matches(Point(5, 0)) is True
        assert p.matches(Point(5, 1)) is False

    def test_nested(self) -> None:
        p = Pattern.parse("Line(Point(0, 0), end)")
        line = Line(Point(0, 0), Point(3, 4))
        assert p.extract(line) == {"end": Point(3, 4)}
        assert p.matches(Line(Point(1, 0), Point(3, 4))) is False

    def test_keyword_slots(self) -> None:
        p = Pattern.parse("Point(y=0, x=x)")
        assert p.extract(Point(7, 0)) == {"x": 7}
        assert p.matches(Point(7, 1)) is False

    def test_positional_then_keyword(self) -> None:
        p = Pattern.parse("Point(a, b, y=2)")
        assert p.matches(Point(1, 2)) is True
        assert p.matches(Point(1, 3)) is False

    def test_missing_attribute_is_non_match(self) -> None:
        assert Pattern.parse("Point(z=_)").matches(Point(1, 2)) is False

    def test_keyword_slots_without_match_args(self) -> None:
        assert Pattern.parse("Plain(size=s)").extract(Plain(3)) == {"s": 3}
        assert Pattern.parse("Plain(s)").matches(Plain(3)) is False

    def test_subclass_matches_base_discriminator(self) -> None:
        class Point3(Point):
            pass

        assert Pattern.parse("Point(a, b)").matches(Point3(1, 2)) is True

    def test_builtin_self_match(self) -> None:
        p = Pattern.parse("int(n)")
        assert p.extract(42) == {"n": 42}
        assert p.matches("42") is False
        assert Pattern.parse("str(s)").extract("hi") == {"s": "hi"}

    def test_bool_is_an_int(self) -> None:
        assert Pattern.parse("int(_)").matches(True) is True

    def test_date(self) -> None:
        p = Pattern.parse("date(year, 12, 31)")
        assert p.extract(datetime.date(2024, 12, 31)) == {"year": 2024}
        assert p.matches(datetime.date(2024, 12, 30)) is False

    def test_namedtuple(self) -> None:
        assert Pattern.parse("Pair(l, r)").extract(Pair(1, 2)) == {"l": 1, "r": 2}
        assert Pattern.parse("Pair(right=r)").extract(Pair(1, 2)) == {"r": 2}
        assert Pattern.parse("tuple(t)").extract(Pair(1, 2)) == {"t": Pair(1, 2)}

    def test_dotted_discriminator(self) -> None:
        p = Pattern.parse("datetime.date(y, _, _)")
        assert p.extract(datetime.date(2020, 1, 2)) == {"y": 2020}

    def test_try_variants(self) -> None:
        error = ValueError("boom")
        assert Pattern.parse("Success(v)").extract(Success(1)) == {"v": 1}
        assert Pattern.parse("Failure(e)").extract(Failure(error)) == {"e": error}
        assert Pattern.parse("Success(_)").matches(Failure(error)) is False


class TestLiterals:
    @pytest.mark.parametrize(
        ("text", "value"),
        [
            ("42", 42),
            ("-7", -7),
            ("3.5", 3.5),
            ("1e3", 1000.0),
            ("'ok'", "ok"),
            ('"ok"', "ok"),
            ("'it\\'s'", "it's"),
            ("None", None),
            ("True", True),
            ("False", False),
        ],
    )
    def test_literal_matches(self, text: str, value: object) -> None:
        p = Pattern.parse(text)
        assert p.matches(value) is True
        assert p.names == ()

    def test_singletons_compare_by_identity(self) -> None:
        assert Pattern.parse("True").matches(1) is False
        assert Pattern.parse("False").matches(0) is False
        assert Pattern.parse("None").matches(0) is False

    def test_numbers_compare_by_equality(self) -> None:
        assert Pattern.parse("1").matches(1.0) is True


class TestSequencePatterns:
    def test_exact_length(self) -> None:
        p = Pattern.parse("[a, b]")
        assert p.extract([1, 2]) == {"a": 1, "b": 2}
        assert p.extract((1, 2)) == {"a": 1, "b": 2}
        assert p.matches([1, 2, 3]) is False
        assert p.matches([1]) is False

    def test_strings_are_not_sequences(self) -> None:
        assert Pattern.parse("[a, b]").matches("ab") is False

    def test_star_binds_rest_as_list(self) -> None:
        p = Pattern.parse("[first, *rest]")
        assert p.extract((1, 2, 3)) == {"first": 1, "rest": [2, 3]}
        assert p.extract([1]) == {"first": 1, "rest": []}
        assert p.matches([]) is False

    def test_star_in_middle(self) -> None:
        p = Pattern.parse("[first, *middle, last]")
        assert p.extract([1, 2, 3, 4]) == {"first": 1, "middle": [2, 3], "last": 4}
        assert p.extract([1, 4]) == {"first": 1, "middle": [], "last": 4}

    def test_star_wildcard_binds_nothing(self) -> None:
        p = Pattern.parse("['ok', *_]")
        assert p.names == ()
        assert p.extract(["ok", 1, 2]) == {}

    def test_empty_sequence(self) -> None:
        p = Pattern.parse("[]")
        assert p.matches([]) is True
        assert p.matches([1]) is False

    def test_nested_class_inside_sequence(self) -> None:
        p = Pattern.parse("['ok', Some(body)]")
        assert p.extract(["ok", Some("x")]) == {"body": "x"}
        assert p.matches(["err", Some("x")]) is False


class TestCaptures:
    def test_bare_capture_binds_whole_value(self) -> None:
        assert Pattern.parse("v").extract(Point(1, 2)) == {"v": Point(1, 2)}

    def test_wildcard_matches_anything(self) -> None:
        p = Pattern.parse("_")
        assert p.matches(None) is True
        assert p.extract(1) == {}

    def test_as_binds_matched_value(self) -> None:
        p = Pattern.parse("Point(x, 0) as point")
        assert p.extract(Point(1, 0)) == {"x": 1, "point": Point(1, 0)}
        assert p.matches(Point(1, 1)) is False

    def test_as_inside_slot(self) -> None:
        p = Pattern.parse("Line(Point(0, _) as start, _)")
        line = Line(Point(0, 5), Point(1, 1))
        assert p.extract(line) == {"start": Point(0, 5)}


class TestExtract:
    def test_non_matching_value_raises(self) -> None:
        with pytest.raises(NotAppliedError):
            Pattern.parse("Point(a, b)").extract(Some(1))

    def test_each_extraction_is_fresh(self) -> None:
        p = Pattern.parse("Some(v)")
        first = p.extract(Some(1))
        second = p.extract(Some(1))
        assert first == second
        assert first is not second
        first["v"] = 99
        assert p.extract(Some(1)) == {"v": 1}
