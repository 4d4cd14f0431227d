"""Deterministic names for generated Go identifiers and environment variables.

Everything here is a pure function of the structural path to a value, never
of the value itself, so repeated runs over the same tree always produce the
same type names.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

CONFIG_SUFFIX = "Config"
ITEM_SUFFIX = "Item"

DEFAULT_ENV_PREFIX = "CONFIG"

_WORD_SPLIT = re.compile(r"[^A-Za-z0-9]+")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_ENV_UNSAFE = re.compile(r"[^A-Z0-9]")


def pascal_case(key: str) -> str:
    """Convert a TOML key to an exported Go identifier.

    Examples::

        pascal_case("max_conns")   -> "MaxConns"
        pascal_case("tls-cert")    -> "TlsCert"
        pascal_case("readTimeout") -> "ReadTimeout"
        pascal_case("2fa")         -> "X2fa"
    """
    words: list[str] = []
    for chunk in _WORD_SPLIT.split(key):
        if chunk:
            words.extend(w for w in _CAMEL_BOUNDARY.split(chunk) if w)
    result = "".join(w[0].upper() + w[1:] for w in words)
    if not result:
        return "X"
    if result[0].isdigit():
        # Go identifiers cannot start with a digit.
        return "X" + result
    return result


def strip_suffix(name: str) -> str:
    """Remove one trailing ``Config`` or ``Item`` kind suffix."""
    for suffix in (CONFIG_SUFFIX, ITEM_SUFFIX):
        if name.endswith(suffix) and len(name) > len(suffix):
            return name[: -len(suffix)]
    return name


def top_level_type_name(key: str, suffix: str = CONFIG_SUFFIX) -> str:
    """Type name for a table (or array of tables) directly under the root."""
    return pascal_case(key) + suffix


def child_type_name(parent: str, key: str, suffix: str = CONFIG_SUFFIX) -> str:
    """Type name for a table nested under the type *parent*.

    ``child_type_name("DatabaseConfig", "pool")`` is ``"DatabasePoolConfig"``.
    """
    return strip_suffix(parent) + pascal_case(key) + suffix


def env_segment(key: str | int) -> str:
    """Upper-case a path segment and make it safe for a variable name."""
    return _ENV_UNSAFE.sub("_", str(key).upper())


def env_var_name(path: Iterable[str | int], prefix: str = DEFAULT_ENV_PREFIX) -> str:
    """Build ``<PREFIX>_<SEGMENT>_<SEGMENT>...`` for a structural path."""
    return "_".join([prefix, *(env_segment(p) for p in path)])
