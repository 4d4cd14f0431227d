"""Go literal encoders.

Turns decoded TOML values into Go source literals.  Two encodings are a
stable output contract that downstream tooling diffs against:

* durations are decomposed greedily from hours down to nanoseconds,
  e.g. ``"2h30m"`` becomes ``2*time.Hour + 30*time.Minute``;
* embedded files become ``[]byte{...}`` literals with twelve ``0x%02x``
  values per row.
"""

from __future__ import annotations

import math
from typing import Any

from confgen.generator.files import FileContentLoader
from confgen.generator.types import (
    HOUR,
    MICROSECOND,
    MILLISECOND,
    MINUTE,
    NANOSECOND,
    SECOND,
    SemanticType,
    classify,
    go_type,
    parse_duration,
)

BYTES_PER_LINE = 12
INDENT = "\t"

_DURATION_UNITS: tuple[tuple[int, str], ...] = (
    (HOUR, "time.Hour"),
    (MINUTE, "time.Minute"),
    (SECOND, "time.Second"),
    (MILLISECOND, "time.Millisecond"),
    (MICROSECOND, "time.Microsecond"),
    (NANOSECOND, "time.Nanosecond"),
)

_GO_ESCAPES: dict[str, str] = {
    "\a": r"\a",
    "\b": r"\b",
    "\f": r"\f",
    "\n": r"\n",
    "\r": r"\r",
    "\t": r"\t",
    "\v": r"\v",
    "\\": "\\\\",
    '"': '\\"',
}


# ---------------------------------------------------------------------------
# Scalar literals
# ---------------------------------------------------------------------------


def quote_string(text: str) -> str:
    """Quote *text* the way Go's ``strconv.Quote`` does."""
    out: list[str] = ['"']
    for ch in text:
        if ch in _GO_ESCAPES:
            out.append(_GO_ESCAPES[ch])
        elif ch.isprintable():
            out.append(ch)
        elif ord(ch) < 0x80:
            out.append(f"\\x{ord(ch):02x}")
        elif ord(ch) <= 0xFFFF:
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(f"\\U{ord(ch):08x}")
    out.append('"')
    return "".join(out)


def format_float(value: float) -> str:
    """Shortest round-trip spelling of a finite float."""
    text = repr(value)
    if text.endswith(".0"):
        return text[:-2]
    return text


def duration_parts(nanos: int) -> list[tuple[int, str]]:
    """Greedy ``(count, unit)`` decomposition of a non-negative duration."""
    parts: list[tuple[int, str]] = []
    remaining = nanos
    for unit, name in _DURATION_UNITS:
        count, remaining = divmod(remaining, unit)
        if count:
            parts.append((count, name))
    return parts


def duration_literal(text: str) -> str:
    """Encode a duration string as a sum of ``time`` unit constants.

    Zero is written as a bare ``0``; negative values are wrapped as
    ``-(...)`` around the decomposition of their magnitude.
    """
    nanos = parse_duration(text)
    if nanos == 0:
        return "0"
    expr = " + ".join(f"{count}*{name}" for count, name in duration_parts(abs(nanos)))
    if nanos < 0:
        return f"-({expr})"
    return expr


def bytes_literal(data: bytes, indent: int = 0) -> str:
    """Encode *data* as a wrapped ``[]byte{...}`` literal.

    Rows are indented one level deeper than *indent*; the closing brace sits
    at *indent*.  Every value, including the last, is followed by a comma.
    """
    if not data:
        return "[]byte{}"

    row_indent = INDENT * (indent + 1)
    rows = []
    for start in range(0, len(data), BYTES_PER_LINE):
        chunk = data[start:start + BYTES_PER_LINE]
        rows.append(row_indent + ", ".join(f"0x{b:02x}" for b in chunk) + ",")
    return "[]byte{\n" + "\n".join(rows) + "\n" + INDENT * indent + "}"


# ---------------------------------------------------------------------------
# Value writer
# ---------------------------------------------------------------------------


class LiteralWriter:
    """Writes literals for scalar and array values.

    Records the Go packages the written literals depend on in
    :attr:`imports`, so the file header only imports what is used.
    """

    def __init__(self, loader: FileContentLoader | None = None) -> None:
        self.loader = loader or FileContentLoader()
        self.imports: set[str] = set()

    def write(self, value: Any, indent: int = 0) -> str:
        kind = classify(value)
        if kind is SemanticType.BYTES:
            return bytes_literal(self.loader.load(value), indent)
        if kind is SemanticType.DURATION:
            self.imports.add("time")
            return duration_literal(value)
        if kind is SemanticType.STRING:
            return quote_string(value)
        if kind is SemanticType.BOOL:
            return "true" if value else "false"
        if kind is SemanticType.INTEGER:
            return str(value)
        if kind is SemanticType.FLOAT:
            return self._float(value)
        if kind is SemanticType.ARRAY:
            return self._array(value, indent)
        return "nil"

    def _float(self, value: float) -> str:
        if math.isnan(value):
            self.imports.add("math")
            return "math.NaN()"
        if math.isinf(value):
            self.imports.add("math")
            return "math.Inf(1)" if value > 0 else "math.Inf(-1)"
        return format_float(value)

    def _array(self, value: list[Any], indent: int) -> str:
        if not value:
            return "nil"
        element_kind = classify(value[0])
        elements = ", ".join(self._element(item, element_kind, indent) for item in value)
        return f"[]{go_type(value[0])}{{{elements}}}"

    def _element(self, item: Any, element_kind: SemanticType, indent: int) -> str:
        # A plain-string slice keeps duration-like and file: members as strings.
        if element_kind is SemanticType.STRING and isinstance(item, str):
            return quote_string(item)
        return self.write(item, indent)
