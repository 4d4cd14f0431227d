"""Semantic type classification for decoded TOML values.

Maps the plain Python values produced by the TOML decoder to the semantic
tags the emitter works with, and spells those tags as Go types.  The order
of the string checks is fixed: a ``file:`` reference is always a byte blob,
even when the remainder happens to look like a duration.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

FILE_PREFIX = "file:"

# ---------------------------------------------------------------------------
# Semantic tags
# ---------------------------------------------------------------------------


class SemanticType(str, Enum):
    """Semantic kind of a configuration value."""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOL = "bool"
    DURATION = "duration"
    BYTES = "bytes"
    TABLE = "table"
    TABLE_ARRAY = "table_array"
    ARRAY = "array"
    ANY = "any"


_SCALAR_GO_TYPES: dict[SemanticType, str] = {
    SemanticType.STRING: "string",
    SemanticType.INTEGER: "int64",
    SemanticType.FLOAT: "float64",
    SemanticType.BOOL: "bool",
    SemanticType.DURATION: "time.Duration",
    SemanticType.BYTES: "[]byte",
}


def is_file_reference(value: Any) -> bool:
    """Return ``True`` for strings that use the ``file:`` prefix."""
    return isinstance(value, str) and value.startswith(FILE_PREFIX)


def is_duration(value: Any) -> bool:
    """Return ``True`` for strings accepted by :func:`parse_duration`."""
    if not isinstance(value, str):
        return False
    try:
        parse_duration(value)
    except ValueError:
        return False
    return True


def is_table_array(value: Any) -> bool:
    """An array whose first element is a table is an array of tables."""
    return isinstance(value, list) and bool(value) and isinstance(value[0], dict)


def classify(value: Any) -> SemanticType:
    """Classify *value*.  Total: anything unrecognised is ``ANY``."""
    # bool is a subclass of int, so it must be checked first.
    if isinstance(value, bool):
        return SemanticType.BOOL
    if isinstance(value, int):
        return SemanticType.INTEGER
    if isinstance(value, float):
        return SemanticType.FLOAT
    if isinstance(value, str):
        if is_file_reference(value):
            return SemanticType.BYTES
        if is_duration(value):
            return SemanticType.DURATION
        return SemanticType.STRING
    if isinstance(value, dict):
        return SemanticType.TABLE
    if isinstance(value, list):
        if is_table_array(value):
            return SemanticType.TABLE_ARRAY
        return SemanticType.ARRAY
    return SemanticType.ANY


def go_type(value: Any) -> str:
    """Return the Go type spelling for a scalar or array value.

    Tables and arrays of tables have no context-free spelling; they come
    back as ``"struct"`` / ``"[]struct"`` and callers substitute the real
    type name derived from the value's path.
    """
    kind = classify(value)
    if kind in _SCALAR_GO_TYPES:
        return _SCALAR_GO_TYPES[kind]
    if kind is SemanticType.TABLE:
        return "struct"
    if kind is SemanticType.TABLE_ARRAY:
        return "[]struct"
    if kind is SemanticType.ARRAY:
        if not value:
            return "[]any"
        return "[]" + go_type(value[0])
    return "any"


# ---------------------------------------------------------------------------
# Duration grammar (Go ``time.ParseDuration``)
# ---------------------------------------------------------------------------

NANOSECOND = 1
MICROSECOND = 1000 * NANOSECOND
MILLISECOND = 1000 * MICROSECOND
SECOND = 1000 * MILLISECOND
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE

_UNITS: dict[str, int] = {
    "ns": NANOSECOND,
    "us": MICROSECOND,
    "µs": MICROSECOND,  # U+00B5 micro sign
    "μs": MICROSECOND,  # U+03BC greek mu
    "ms": MILLISECOND,
    "s": SECOND,
    "m": MINUTE,
    "h": HOUR,
}

_MAX_DURATION = (1 << 63) - 1


def parse_duration(text: str) -> int:
    """Parse a Go duration string and return it in nanoseconds.

    Accepts an optional sign followed by one or more ``<decimal><unit>``
    groups such as ``"300ms"``, ``"-1.5h"`` or ``"2h45m"``.  The bare
    string ``"0"`` is the zero duration.

    Raises:
        ValueError: If *text* is not a valid duration.
    """
    s = text
    negative = False
    if s and s[0] in "+-":
        negative = s[0] == "-"
        s = s[1:]
    if s == "0":
        return 0
    if not s:
        raise ValueError(f"invalid duration {text!r}")

    total = 0
    while s:
        if not (s[0] == "." or s[0].isascii() and s[0].isdigit()):
            raise ValueError(f"invalid duration {text!r}")

        i = 0
        while i < len(s) and s[i].isascii() and s[i].isdigit():
            i += 1
        integer_digits, s = s[:i], s[i:]

        fraction_digits = ""
        if s.startswith("."):
            s = s[1:]
            i = 0
            while i < len(s) and s[i].isascii() and s[i].isdigit():
                i += 1
            fraction_digits, s = s[:i], s[i:]

        if not integer_digits and not fraction_digits:
            raise ValueError(f"invalid duration {text!r}")

        i = 0
        while i < len(s) and s[i] != "." and not (s[i].isascii() and s[i].isdigit()):
            i += 1
        unit_name, s = s[:i], s[i:]
        if not unit_name:
            raise ValueError(f"missing unit in duration {text!r}")
        unit = _UNITS.get(unit_name)
        if unit is None:
            raise ValueError(f"unknown unit {unit_name!r} in duration {text!r}")

        value = int(integer_digits or "0") * unit
        if fraction_digits:
            value += int(fraction_digits) * unit // 10 ** len(fraction_digits)
        total += value
        if total > _MAX_DURATION + (1 if negative else 0):
            raise ValueError(f"invalid duration {text!r}")

    return -total if negative else total
