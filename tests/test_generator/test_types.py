"""Unit tests for value classification and duration parsing."""

from __future__ import annotations

import datetime

import pytest

from confgen.generator.types import (
    HOUR,
    MILLISECOND,
    MINUTE,
    SECOND,
    SemanticType,
    classify,
    go_type,
    is_duration,
    parse_duration,
)

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------


class TestClassify:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (True, SemanticType.BOOL),
            (False, SemanticType.BOOL),
            (0, SemanticType.INTEGER),
            (-42, SemanticType.INTEGER),
            (1.5, SemanticType.FLOAT),
            ("hello", SemanticType.STRING),
            ("30s", SemanticType.DURATION),
            ("1h30m", SemanticType.DURATION),
            ("0", SemanticType.DURATION),
            ("file:data.bin", SemanticType.BYTES),
            ({"a": 1}, SemanticType.TABLE),
            ([{"a": 1}], SemanticType.TABLE_ARRAY),
            ([1, 2], SemanticType.ARRAY),
            ([], SemanticType.ARRAY),
            (datetime.date(2024, 1, 1), SemanticType.ANY),
        ],
    )
    def test_kinds(self, value, expected):
        assert classify(value) is expected

    def test_bool_is_not_integer(self):
        assert classify(True) is not SemanticType.INTEGER

    def test_file_prefix_wins_over_duration(self):
        assert classify("file:5s") is SemanticType.BYTES

    def test_numeric_string_is_string(self):
        assert classify("8080") is SemanticType.STRING


class TestGoType:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("x", "string"),
            (1, "int64"),
            (1.0, "float64"),
            (True, "bool"),
            ("5m", "time.Duration"),
            ("file:x", "[]byte"),
            (["a"], "[]string"),
            ([1, 2], "[]int64"),
            (["1s", "2s"], "[]time.Duration"),
            ([], "[]any"),
            (datetime.time(12, 0), "any"),
        ],
    )
    def test_spelling(self, value, expected):
        assert go_type(value) == expected

    def test_array_type_from_first_element(self):
        assert go_type([1, "two"]) == "[]int64"


# ---------------------------------------------------------------------------
# parse_duration
# ---------------------------------------------------------------------------


class TestParseDuration:
    @pytest.mark.parametrize(
        "text, nanos",
        [
            ("0", 0),
            ("-0", 0),
            ("30s", 30 * SECOND),
            ("1h30m", HOUR + 30 * MINUTE),
            ("300ms", 300 * MILLISECOND),
            ("1.5h", HOUR + 30 * MINUTE),
            (".5s", 500 * MILLISECOND),
            ("-2m", -2 * MINUTE),
            ("+10s", 10 * SECOND),
            ("1us", 1000),
            ("1µs", 1000),
            ("1μs", 1000),
            ("7ns", 7),
        ],
    )
    def test_valid(self, text, nanos):
        assert parse_duration(text) == nanos

    @pytest.mark.parametrize(
        "text",
        ["", "s", "10", "1x", "1.s.", "-", "abc", "1h 30m", "3 days", ".s"],
    )
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_duration(text)

    def test_overflow_rejected(self):
        with pytest.raises(ValueError):
            parse_duration("9999999999h")

    def test_is_duration(self):
        assert is_duration("15s")
        assert not is_duration("fifteen")
        assert not is_duration(15)
