"""Shared utility functions for confgen.

Provides Rich-based console output, logging setup, size parsing, package
name inference, atomic file writes and the optional ``gofmt`` pass.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
import tempfile
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

console = Console()
err_console = Console(stderr=True)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_LEVEL_ENV = "CONFGEN_LOG_LEVEL"

_NOISY_LOGGERS = ("watchfiles",)


def setup_logging(level: str | None = None) -> None:
    """Configure process-wide logging with a Rich handler on stderr.

    Levels are resolved in precedence order:
        *level* argument  >  ``CONFGEN_LOG_LEVEL``  >  WARNING
    """
    numeric_level = _parse_level(level or os.environ.get(LOG_LEVEL_ENV))

    handler = RichHandler(
        console=err_console,
        show_path=numeric_level <= logging.DEBUG,
        rich_tracebacks=True,
    )
    handler.setLevel(numeric_level)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)

    if numeric_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message to stderr."""
    err_console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message to stderr."""
    err_console.print(f"[bold yellow]{message}[/bold yellow]")


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)


# ---------------------------------------------------------------------------
# Size parsing
# ---------------------------------------------------------------------------

# Longest suffix first so "MB" is not read as "B".
_SIZE_MULTIPLIERS: tuple[tuple[str, int], ...] = (
    ("TB", 1024 ** 4),
    ("GB", 1024 ** 3),
    ("MB", 1024 ** 2),
    ("KB", 1024),
    ("B", 1),
)


def parse_file_size(text: str) -> int:
    """Parse a human-readable size such as ``"10MB"`` or ``"512kb"``.

    Plain numbers are bytes.  An empty string is ``0``.

    Raises:
        ValueError: If the text is not a size.
    """
    size = text.strip().upper()
    if not size:
        return 0

    multiplier = 1
    for suffix, factor in _SIZE_MULTIPLIERS:
        if size.endswith(suffix):
            size = size[: -len(suffix)].strip()
            multiplier = factor
            break

    if not re.fullmatch(r"[0-9]+", size):
        raise ValueError(f"invalid size format: {text}")
    return int(size) * multiplier


# ---------------------------------------------------------------------------
# Package name inference
# ---------------------------------------------------------------------------

_WRAPPER_DIRS = frozenset({"internal", "pkg", "lib"})


def infer_package_name(output_path: str | Path) -> str:
    """Infer a Go package name from the directory of *output_path*.

    Examples::

        infer_package_name("config.go")                 -> "config"
        infer_package_name("app/settings/config.go")    -> "settings"
        infer_package_name("myapp/internal/config.go")  -> "myapp"
    """
    parent = Path(output_path).parent
    if str(parent) in ("", "."):
        return "config"

    base = parent.name
    if base in _WRAPPER_DIRS and str(parent.parent) not in ("", "."):
        base = parent.parent.name

    if not base or base in (".", "/"):
        return "config"
    return base


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def write_atomic(path: str | Path, content: str) -> Path:
    """Write *content* to *path* through a temp file and ``os.replace``.

    Parent directories are created automatically.  Readers never observe a
    partially written file.
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
            handle.write(content)
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return target


# ---------------------------------------------------------------------------
# gofmt
# ---------------------------------------------------------------------------


def format_go_source(source: str, timeout: int = 30) -> str:
    """Run *source* through ``gofmt``.

    Returns the input unchanged when ``gofmt`` is not installed.

    Raises:
        RuntimeError: If ``gofmt`` rejects the source.
    """
    gofmt = shutil.which("gofmt")
    if gofmt is None:
        logging.getLogger(__name__).debug("gofmt not found on PATH, skipping formatting")
        return source

    try:
        result = subprocess.run(
            [gofmt],
            input=source,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        raise RuntimeError(f"gofmt timed out after {timeout}s") from exc
    if result.returncode != 0:
        raise RuntimeError(f"gofmt failed: {result.stderr.strip()}")
    return result.stdout
