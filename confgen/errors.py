"""Exception hierarchy for confgen.

Every failure that can happen while turning a TOML file into Go source
derives from :class:`ConfgenError`, so callers (the CLI, the watch loop)
can report generation problems without swallowing unrelated bugs.

Generation-time errors are always raised *before* the output file is
touched.  Runtime problems inside getter-mode generated code (bad
environment values, unreadable override paths) are handled by the
generated Go code itself and never surface here.
"""

from __future__ import annotations

from pathlib import Path


class ConfgenError(Exception):
    """Base class for all confgen errors."""


class ConfigParseError(ConfgenError):
    """Raised when the input TOML cannot be decoded."""

    def __init__(self, source: str | Path, message: str) -> None:
        self.source = str(source)
        super().__init__(f"failed to parse TOML {self.source}: {message}")


class OverrideConversionError(ConfgenError):
    """Raised when an environment override does not match the original type."""

    def __init__(self, env_key: str, message: str) -> None:
        self.env_key = env_key
        super().__init__(f"invalid value for {env_key}: {message}")


class FileReferenceError(ConfgenError):
    """Base class for problems with ``file:`` references."""

    def __init__(self, path: str | Path, message: str) -> None:
        self.path = Path(path)
        super().__init__(message)


class FileReferenceNotFoundError(FileReferenceError):
    """The referenced file does not exist."""

    def __init__(self, path: str | Path) -> None:
        super().__init__(path, f"file not found: {path} (referenced in config)")


class FileSizeExceededError(FileReferenceError):
    """The referenced file is larger than the configured maximum."""

    def __init__(self, path: str | Path, max_bytes: int, actual: int) -> None:
        self.max_bytes = max_bytes
        self.actual = actual
        super().__init__(
            path,
            f"file {path} exceeds max size {max_bytes} bytes (actual: {actual} bytes)",
        )


class FileReadError(FileReferenceError):
    """Any other I/O failure while reading a referenced file."""

    def __init__(self, path: str | Path, reason: str) -> None:
        super().__init__(path, f"failed to read file {path}: {reason}")


class GenerationError(ConfgenError):
    """Raised for invalid generation options or unusable output targets."""


class WatchAttachError(ConfgenError):
    """Raised when the input file cannot be watched at startup."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        super().__init__(f"failed to watch {path}: {reason}")
