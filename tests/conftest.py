"""Shared pytest fixtures for the confgen test suite.

Provides reusable fixtures for:
- A clean process environment (no CONFIG_* / CONFGEN_* leakage)
- Sample TOML documents
- Temporary config directories with ``file:`` reference targets
"""

from __future__ import annotations

import logging
import os
import textwrap
from pathlib import Path
from typing import Callable

import pytest


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove override and tool variables so host settings never leak in."""
    for key in list(os.environ):
        if key.startswith(("CONFIG_", "CONFGEN_")):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo handler and level changes made by setup_logging()."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


# ---------------------------------------------------------------------------
# Sample documents
# ---------------------------------------------------------------------------

@pytest.fixture
def server_toml() -> str:
    """The two-field server table used by the end-to-end scenarios."""
    return textwrap.dedent("""\
        [server]
        addr = ":8080"
        timeout = "30s"
    """)


@pytest.fixture
def full_toml() -> str:
    """A document exercising every value kind."""
    return textwrap.dedent("""\
        name = "myapp"
        version = 3
        ratio = 0.75
        debug = false
        tags = ["api", "web"]
        ports = [80, 443]
        empty = []

        [server]
        addr = ":8080"
        read_timeout = "15s"
        max_conns = 100

        [server.tls]
        enabled = true
        cert = "file:certs/server.crt"

        [[endpoints]]
        path = "/health"
        timeout = "1s"

        [[endpoints]]
        path = "/metrics"
        timeout = "2s"
    """)


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """Temporary directory holding referenced files next to the TOML input."""
    directory = tmp_path / "configs"
    (directory / "data").mkdir(parents=True)
    (directory / "certs").mkdir()
    (directory / "data" / "test.txt").write_text("Hello\nWorld\n", encoding="ascii")
    (directory / "certs" / "server.crt").write_bytes(b"CERT")
    return directory


@pytest.fixture
def write_toml(config_dir: Path) -> Callable[[str, str], Path]:
    """Return a helper that writes TOML text into ``config_dir``."""

    def _write(text: str, name: str = "config.toml") -> Path:
        path = config_dir / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
