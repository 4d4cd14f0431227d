"""Unit tests for Go literal encoding."""

from __future__ import annotations

import re
from pathlib import Path

import pytest

from confgen.generator.files import FileContentLoader
from confgen.generator.literals import (
    BYTES_PER_LINE,
    LiteralWriter,
    bytes_literal,
    duration_literal,
    format_float,
    quote_string,
)
from confgen.generator.types import (
    HOUR,
    MICROSECOND,
    MILLISECOND,
    MINUTE,
    NANOSECOND,
    SECOND,
    parse_duration,
)

pytestmark = pytest.mark.unit

_UNIT_NANOS = {
    "time.Hour": HOUR,
    "time.Minute": MINUTE,
    "time.Second": SECOND,
    "time.Millisecond": MILLISECOND,
    "time.Microsecond": MICROSECOND,
    "time.Nanosecond": NANOSECOND,
}


def _decode_bytes(literal: str) -> bytes:
    assert literal.startswith("[]byte{") and literal.endswith("}")
    return bytes(int(h, 16) for h in re.findall(r"0x([0-9a-f]{2}),", literal))


def _evaluate_duration(literal: str) -> int:
    negative = literal.startswith("-(")
    body = literal[2:-1] if negative else literal
    if body == "0":
        return 0
    total = 0
    for term in body.split(" + "):
        count, unit = term.split("*")
        total += int(count) * _UNIT_NANOS[unit]
    return -total if negative else total


# ---------------------------------------------------------------------------
# Byte literals
# ---------------------------------------------------------------------------


class TestBytesLiteral:
    @pytest.mark.parametrize("length", [0, 1, BYTES_PER_LINE, BYTES_PER_LINE + 1, 100])
    def test_round_trip(self, length):
        data = bytes((i * 37) % 256 for i in range(length))
        assert _decode_bytes(bytes_literal(data)) == data

    def test_empty(self):
        assert bytes_literal(b"") == "[]byte{}"

    def test_single_byte(self):
        assert bytes_literal(b"A") == "[]byte{\n\t0x41,\n}"

    def test_rows_of_twelve(self):
        literal = bytes_literal(bytes(range(13)))
        rows = literal.splitlines()[1:-1]
        assert len(rows) == 2
        assert rows[0].count("0x") == 12
        assert rows[1] == "\t0x0c,"

    def test_indent_levels(self):
        literal = bytes_literal(b"\xff", indent=2)
        assert literal == "[]byte{\n\t\t\t0xff,\n\t\t}"


# ---------------------------------------------------------------------------
# Duration literals
# ---------------------------------------------------------------------------


class TestDurationLiteral:
    @pytest.mark.parametrize(
        "text",
        ["30s", "1h30m", "2h45m30.5s", "1.5ms", "999ns", "25h", "-1m30s", "1h0m0s"],
    )
    def test_round_trip(self, text):
        assert _evaluate_duration(duration_literal(text)) == parse_duration(text)

    def test_zero_is_bare(self):
        assert duration_literal("0") == "0"
        assert duration_literal("0s") == "0"

    def test_greedy_decomposition(self):
        assert duration_literal("30s") == "30*time.Second"
        assert duration_literal("90m") == "1*time.Hour + 30*time.Minute"

    def test_negative(self):
        assert duration_literal("-90s") == "-(1*time.Minute + 30*time.Second)"


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


class TestScalars:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("plain", '"plain"'),
            ('say "hi"', '"say \\"hi\\""'),
            ("a\\b", '"a\\\\b"'),
            ("line\nbreak\ttab", '"line\\nbreak\\ttab"'),
            ("\x00", '"\\x00"'),
            ("héllo", '"héllo"'),
        ],
    )
    def test_quote_string(self, text, expected):
        assert quote_string(text) == expected

    @pytest.mark.parametrize(
        "value, expected",
        [(1.0, "1"), (0.75, "0.75"), (-2.5, "-2.5"), (1e21, "1e+21")],
    )
    def test_format_float(self, value, expected):
        assert format_float(value) == expected


class TestLiteralWriter:
    def test_tracks_time_import(self):
        writer = LiteralWriter()
        assert writer.write("5s") == "5*time.Second"
        assert writer.imports == {"time"}

    def test_no_imports_for_plain_values(self):
        writer = LiteralWriter()
        for value in ("x", 1, 2.5, True, [1, 2]):
            writer.write(value)
        assert writer.imports == set()

    def test_non_finite_floats_use_math(self):
        writer = LiteralWriter()
        assert writer.write(float("inf")) == "math.Inf(1)"
        assert writer.write(float("-inf")) == "math.Inf(-1)"
        assert writer.write(float("nan")) == "math.NaN()"
        assert writer.imports == {"math"}

    def test_arrays(self):
        writer = LiteralWriter()
        assert writer.write(["a", "b"]) == '[]string{"a", "b"}'
        assert writer.write([1, 2]) == "[]int64{1, 2}"
        assert writer.write(["1s", "1m"]) == "[]time.Duration{1*time.Second, 1*time.Minute}"
        assert writer.write([]) == "nil"

    def test_string_array_keeps_duration_like_members_as_strings(self):
        writer = LiteralWriter()
        assert writer.write(["a", "0", "5m", "file:x"]) == '[]string{"a", "0", "5m", "file:x"}'
        assert writer.imports == set()

    def test_booleans(self):
        writer = LiteralWriter()
        assert writer.write(True) == "true"
        assert writer.write(False) == "false"

    def test_file_reference(self, tmp_path: Path):
        (tmp_path / "blob").write_bytes(b"\x01\x02")
        writer = LiteralWriter(FileContentLoader(tmp_path))
        assert writer.write("file:blob") == "[]byte{\n\t0x01, 0x02,\n}"
