"""Loading of ``file:`` references into embeddable bytes.

A configuration string such as ``"file:certs/server.crt"`` is resolved
against the directory that holds the input TOML file.  The size limit is
checked from file metadata before anything is read, so oversized files are
never buffered.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from confgen.errors import (
    FileReadError,
    FileReferenceNotFoundError,
    FileSizeExceededError,
)
from confgen.generator.types import FILE_PREFIX, is_file_reference

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 1024 * 1024
"""Default ceiling (1 MB) for a single embedded file."""


def resolve_reference_path(reference: str, base_dir: str | Path | None) -> Path:
    """Strip the ``file:`` prefix and join the remainder to *base_dir*.

    Leading separators are dropped, so an absolute-looking reference still
    resolves beneath *base_dir*.
    """
    if not reference.startswith(FILE_PREFIX):
        raise ValueError(f"not a file reference: {reference!r}")
    relative = reference[len(FILE_PREFIX):]
    if base_dir:
        relative = relative.lstrip("/\\")
        return Path(base_dir) / relative
    return Path(relative)


def resolve(reference: str, base_dir: str | Path | None, max_bytes: int) -> bytes:
    """Read the file behind *reference*.

    Raises:
        FileReferenceNotFoundError: The resolved path does not exist.
        FileSizeExceededError: The file is strictly larger than *max_bytes*.
        FileReadError: Any other I/O failure.
    """
    path = resolve_reference_path(reference, base_dir)

    try:
        size = path.stat().st_size
    except FileNotFoundError:
        raise FileReferenceNotFoundError(path) from None
    except OSError as exc:
        raise FileReadError(path, exc.strerror or str(exc)) from exc

    if max_bytes > 0 and size > max_bytes:
        raise FileSizeExceededError(path, max_bytes, size)

    try:
        return path.read_bytes()
    except FileNotFoundError:
        raise FileReferenceNotFoundError(path) from None
    except OSError as exc:
        raise FileReadError(path, exc.strerror or str(exc)) from exc


class FileContentLoader:
    """Resolves ``file:`` references once per generation run.

    Results are cached by resolved path, so the validation pre-pass and the
    emission pass share a single read of every file.
    """

    def __init__(
        self,
        base_dir: str | Path | None = None,
        max_bytes: int = DEFAULT_MAX_FILE_SIZE,
    ) -> None:
        self.base_dir = Path(base_dir) if base_dir else None
        self.max_bytes = max_bytes
        self._cache: dict[Path, bytes] = {}

    def load(self, reference: str) -> bytes:
        """Return the bytes for *reference*, reading the file on first use."""
        path = resolve_reference_path(reference, self.base_dir)
        key = Path(os.path.abspath(path))
        if key not in self._cache:
            self._cache[key] = resolve(reference, self.base_dir, self.max_bytes)
            logger.debug("Loaded %s (%d bytes)", key, len(self._cache[key]))
        return self._cache[key]

    def validate_tree(self, tree: dict[str, Any]) -> int:
        """Resolve every reference in *tree*, failing on the first bad one.

        Returns:
            The number of references found.
        """
        count = 0
        for value in tree.values():
            count += self._validate_value(value)
        return count

    def _validate_value(self, value: Any) -> int:
        if is_file_reference(value):
            self.load(value)
            return 1
        if isinstance(value, dict):
            return self.validate_tree(value)
        if isinstance(value, list):
            return sum(self._validate_value(item) for item in value)
        return 0

