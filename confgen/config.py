"""confgen configuration.

Typed options for generation and for the watch loop.  All settings use
Pydantic v2 models so they are validated at construction time and can be
built from CLI flags or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from confgen.generator.emitter import EmissionMode
from confgen.generator.files import DEFAULT_MAX_FILE_SIZE
from confgen.utils import infer_package_name, parse_file_size


class GenerateOptions(BaseModel):
    """Everything needed to turn one TOML file into one Go file."""

    input_file: Path = Field(default=Path("config.toml"))
    output_file: Path = Field(..., description="Destination Go source file")
    package_name: str = Field(
        default="", description="Go package name; inferred from output_file when empty"
    )
    enable_env: bool = Field(
        default=True, description="Apply CONFIG_* environment overrides before generating"
    )
    max_file_size: int = Field(
        default=DEFAULT_MAX_FILE_SIZE, ge=1, description="Size limit for file: references"
    )
    mode: EmissionMode = Field(default=EmissionMode.STATIC)
    format_source: bool = Field(
        default=False, description="Pipe the result through gofmt when available"
    )

    @field_validator("output_file")
    @classmethod
    def _output_required(cls, value: Path) -> Path:
        if not str(value) or str(value) == ".":
            raise ValueError("output file is required")
        return value

    # ------------------------------------------------------------------
    # Derived values (read-only properties)
    # ------------------------------------------------------------------

    @property
    def resolved_package_name(self) -> str:
        """Explicit package name, or one inferred from the output path."""
        return self.package_name or infer_package_name(self.output_file)

    @property
    def input_dir(self) -> Path:
        """Directory that ``file:`` references are resolved against."""
        return self.input_file.parent

    @classmethod
    def from_env(cls, **overrides: Any) -> "GenerateOptions":
        """Build options from ``CONFGEN_*`` environment variables.

        Recognised variables (all optional):
            CONFGEN_INPUT, CONFGEN_OUTPUT, CONFGEN_PACKAGE, CONFGEN_MODE,
            CONFGEN_NO_ENV, CONFGEN_MAX_FILE_SIZE, CONFGEN_GOFMT.

        Keyword arguments take precedence over the environment.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("CONFGEN_INPUT"):
            kwargs["input_file"] = Path(os.environ["CONFGEN_INPUT"])
        if os.environ.get("CONFGEN_OUTPUT"):
            kwargs["output_file"] = Path(os.environ["CONFGEN_OUTPUT"])
        if os.environ.get("CONFGEN_PACKAGE"):
            kwargs["package_name"] = os.environ["CONFGEN_PACKAGE"]
        if os.environ.get("CONFGEN_MODE"):
            kwargs["mode"] = os.environ["CONFGEN_MODE"]
        if os.environ.get("CONFGEN_NO_ENV"):
            kwargs["enable_env"] = os.environ["CONFGEN_NO_ENV"].lower() not in ("1", "true", "yes")
        if os.environ.get("CONFGEN_MAX_FILE_SIZE"):
            kwargs["max_file_size"] = parse_file_size(os.environ["CONFGEN_MAX_FILE_SIZE"])
        if os.environ.get("CONFGEN_GOFMT"):
            kwargs["format_source"] = os.environ["CONFGEN_GOFMT"].lower() in ("1", "true", "yes")
        kwargs.update(overrides)
        return cls(**kwargs)


class WatchOptions(BaseModel):
    """Tuning knobs for the regeneration watch loop."""

    debounce_ms: int = Field(
        default=100, ge=0, description="Quiet period after the last change before regenerating"
    )
    retry_attempts: int = Field(
        default=10, ge=1, description="Re-attach attempts after the input file is removed"
    )
    retry_interval_ms: int = Field(
        default=100, ge=1, description="Delay between re-attach attempts"
    )

    @property
    def debounce(self) -> float:
        """Debounce window in seconds."""
        return self.debounce_ms / 1000

    @property
    def retry_interval(self) -> float:
        """Retry interval in seconds."""
        return self.retry_interval_ms / 1000
