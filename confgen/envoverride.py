"""Environment variable overrides for decoded TOML trees.

Before generation the tree can be rewritten from variables named after the
structural path of each value::

    [server]
    addr = ":8080"          ->  CONFIG_SERVER_ADDR=":9090"
    hosts = ["a", "b"]      ->  CONFIG_SERVER_HOSTS="c, d"

    [[servers]]
    host = "a"              ->  CONFIG_SERVERS_0_HOST="b"

Overrides are converted to the type of the value they replace.  A value that
does not convert aborts the whole resolution: baking a wrong default into
generated code is worse than failing the build.
"""

from __future__ import annotations

import logging
import math
import os
import re
from collections.abc import Mapping
from typing import Any

from confgen.errors import OverrideConversionError
from confgen.generator.naming import DEFAULT_ENV_PREFIX, env_var_name
from confgen.generator.types import SemanticType, classify

logger = logging.getLogger(__name__)

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)
_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


def parse_int(text: str) -> int:
    """Parse a base-10 signed 64-bit integer.  No underscores, no spaces."""
    if not _INT_PATTERN.fullmatch(text):
        raise ValueError("expected integer")
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError("integer out of range")
    return value


def parse_float(text: str) -> float:
    """Parse a 64-bit float, rejecting Python-only spellings."""
    if not _FLOAT_PATTERN.fullmatch(text):
        raise ValueError("expected float")
    value = float(text)
    if math.isinf(value) and "inf" not in text.lower():
        raise ValueError("float out of range")
    return value


def parse_bool(text: str) -> bool:
    """Parse the same spellings Go's ``strconv.ParseBool`` accepts."""
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError("expected boolean")


def convert_value(raw: str, original: Any) -> Any:
    """Convert *raw* to the runtime type of *original*.

    Raises:
        ValueError: If *raw* does not parse as that type.
    """
    kind = classify(original)
    if kind is SemanticType.BOOL:
        return parse_bool(raw)
    if kind is SemanticType.INTEGER:
        return parse_int(raw)
    if kind is SemanticType.FLOAT:
        return parse_float(raw)
    return raw


def convert_array(raw: str, sample: Any) -> list[Any]:
    """Convert a comma-separated override against the type of *sample*."""
    return [convert_value(part.strip(), sample) for part in raw.split(",")]


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class EnvOverrideResolver:
    """Applies ``<PREFIX>_<PATH>`` environment variables to a tree in place."""

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        prefix: str = DEFAULT_ENV_PREFIX,
    ) -> None:
        self.environ = os.environ if environ is None else environ
        self.prefix = prefix
        self.applied: list[str] = []

    def apply(self, tree: dict[str, Any]) -> dict[str, Any]:
        """Rewrite *tree* in place and return it.

        Raises:
            OverrideConversionError: An override does not convert; the
                error names the offending variable.
        """
        self._apply_table(tree, ())
        if self.applied:
            logger.info("Applied %d environment override(s): %s",
                        len(self.applied), ", ".join(self.applied))
        return tree

    def _lookup(self, key: str) -> str | None:
        value = self.environ.get(key)
        # An empty variable counts as unset.
        return value or None

    def _apply_table(self, table: dict[str, Any], path: tuple[str | int, ...]) -> None:
        for key, value in table.items():
            child_path = (*path, key)
            kind = classify(value)

            if kind is SemanticType.TABLE:
                self._apply_table(value, child_path)
            elif kind is SemanticType.TABLE_ARRAY:
                for index, item in enumerate(value):
                    if isinstance(item, dict):
                        self._apply_table(item, (*child_path, index))
            elif kind is SemanticType.ARRAY:
                self._apply_array(table, key, value, child_path)
            else:
                self._apply_scalar(table, key, value, child_path)

    def _apply_array(
        self,
        table: dict[str, Any],
        key: str,
        value: list[Any],
        path: tuple[str | int, ...],
    ) -> None:
        env_key = env_var_name(path, self.prefix)
        raw = self._lookup(env_key)
        if raw is None:
            return
        if not value:
            logger.warning("Ignoring %s: empty arrays cannot be overridden", env_key)
            return
        try:
            table[key] = convert_array(raw, value[0])
        except ValueError as exc:
            raise OverrideConversionError(env_key, str(exc)) from exc
        self.applied.append(env_key)

    def _apply_scalar(
        self,
        table: dict[str, Any],
        key: str,
        value: Any,
        path: tuple[str | int, ...],
    ) -> None:
        env_key = env_var_name(path, self.prefix)
        raw = self._lookup(env_key)
        if raw is None:
            return
        try:
            table[key] = convert_value(raw, value)
        except ValueError as exc:
            raise OverrideConversionError(env_key, str(exc)) from exc
        self.applied.append(env_key)


def apply(
    tree: dict[str, Any],
    environ: Mapping[str, str] | None = None,
    prefix: str = DEFAULT_ENV_PREFIX,
) -> dict[str, Any]:
    """Convenience wrapper around :class:`EnvOverrideResolver`."""
    return EnvOverrideResolver(environ, prefix).apply(tree)
