"""Compare two TOML configuration files.

Useful for seeing what differs between environments (dev vs prod) or
between a base file and an override file.  Nested tables are walked and
reported by dotted key; every other value, arrays included, is compared
as a whole.
"""

from __future__ import annotations

import datetime as _dt
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, computed_field

from confgen.errors import ConfigParseError
from confgen.generator import load_toml
from confgen.generator.literals import format_float


class DiffType(str, Enum):
    CHANGED = "changed"
    ADDED = "added"
    REMOVED = "removed"


class DiffEntry(BaseModel):
    """One key that differs between the two files."""

    key: str = Field(..., description="Dotted key path")
    type: DiffType
    value1: Any = Field(default=None, description="Value in the first file")
    value2: Any = Field(default=None, description="Value in the second file")


class DiffReport(BaseModel):
    """All differences between two files, sorted by key."""

    file1: str
    file2: str
    differences: list[DiffEntry] = Field(default_factory=list)

    @computed_field  # type: ignore[misc]
    @property
    def count(self) -> int:
        return len(self.differences)


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------


def compute_diffs(first: dict[str, Any], second: dict[str, Any], prefix: str = "") -> list[DiffEntry]:
    """Recursively compare two decoded TOML tables."""
    diffs: list[DiffEntry] = []

    for key in sorted(set(first) | set(second)):
        full_key = f"{prefix}.{key}" if prefix else key

        if key not in first:
            diffs.append(DiffEntry(key=full_key, type=DiffType.ADDED, value2=second[key]))
            continue
        if key not in second:
            diffs.append(DiffEntry(key=full_key, type=DiffType.REMOVED, value1=first[key]))
            continue

        left, right = first[key], second[key]
        if isinstance(left, dict) and isinstance(right, dict):
            diffs.extend(compute_diffs(left, right, full_key))
        elif not values_equal(left, right):
            diffs.append(DiffEntry(key=full_key, type=DiffType.CHANGED, value1=left, value2=right))

    return diffs


def values_equal(left: Any, right: Any) -> bool:
    """Compare TOML values; ``true`` never equals ``1``."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(values_equal(a, b) for a, b in zip(left, right))
    if isinstance(left, dict) and isinstance(right, dict):
        return left.keys() == right.keys() and all(values_equal(left[k], right[k]) for k in left)
    return left == right


def diff_files(file1: str | Path, file2: str | Path) -> DiffReport:
    """Parse both files and compare them.

    Raises:
        ConfigParseError: Either file is missing or is not valid TOML.
    """
    trees = []
    for path in (Path(file1), Path(file2)):
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise ConfigParseError(path, exc.strerror or str(exc)) from exc
        trees.append(load_toml(data, path))

    return DiffReport(
        file1=str(file1),
        file2=str(file2),
        differences=compute_diffs(trees[0], trees[1]),
    )


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def format_value(value: Any) -> str:
    """Render a TOML value for the text report."""
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_float(value)
    if isinstance(value, list):
        return "[" + ", ".join(format_value(item) for item in value) + "]"
    if isinstance(value, dict):
        return "{...}"
    if isinstance(value, (_dt.datetime, _dt.date, _dt.time)):
        return value.isoformat()
    return str(value)


def format_text(report: DiffReport, keys_only: bool = False) -> str:
    if not report.differences:
        return "No differences found.\n"

    lines = [f"Differences between {report.file1} and {report.file2}:", ""]
    for entry in report.differences:
        if entry.type is DiffType.CHANGED:
            if keys_only:
                lines.append(f"  ~ {entry.key}")
            else:
                lines.append(f"  {entry.key}")
                lines.append(f"    - {format_value(entry.value1)}     ({report.file1})")
                lines.append(f"    + {format_value(entry.value2)}     ({report.file2})")
                lines.append("")
        elif entry.type is DiffType.ADDED:
            if keys_only:
                lines.append(f"  + {entry.key}")
            else:
                lines.append(
                    f"  + {entry.key} = {format_value(entry.value2)}     (only in {report.file2})"
                )
        else:
            if keys_only:
                lines.append(f"  - {entry.key}")
            else:
                lines.append(
                    f"  - {entry.key} = {format_value(entry.value1)}     (only in {report.file1})"
                )
    return "\n".join(lines) + "\n"


def format_json(report: DiffReport) -> str:
    # Omit the side that does not exist for added/removed entries.
    return report.model_dump_json(indent=2, exclude_none=True) + "\n"
