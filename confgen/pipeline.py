"""File-level generation pipeline.

Reads the input TOML file, runs the in-memory generator and writes the Go
source atomically.  Every failure is raised before the output path is
touched, so a broken configuration never leaves a partial or stale-looking
file behind.

Usage::

    from confgen import GenerateOptions, generate_from_file

    generate_from_file(GenerateOptions(
        input_file="config.toml",
        output_file="internal/config/config.go",
        mode="getter",
    ))
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from confgen.config import GenerateOptions
from confgen.errors import ConfigParseError, GenerationError
from confgen.generator import DEFAULT_MAX_FILE_SIZE, EmissionMode, Generator
from confgen.utils import format_go_source, write_atomic

logger = logging.getLogger(__name__)


def generate(data: str | bytes, package_name: str = "config", enable_env: bool = True) -> str:
    """Generate Go source from TOML text held in memory.

    ``file:`` references resolve against the current directory.  Use
    :func:`generate_with_options` to control the base directory and limits.
    """
    return generate_with_options(data, package_name, enable_env)


def generate_with_options(
    data: str | bytes,
    package_name: str = "config",
    enable_env: bool = True,
    input_dir: str | Path | None = None,
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    mode: EmissionMode | str = EmissionMode.STATIC,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Generate Go source from TOML text with full control over options."""
    generator = Generator(
        package_name,
        mode=mode,
        enable_env=enable_env,
        input_dir=input_dir,
        max_file_size=max_file_size,
        environ=environ,
    )
    return generator.generate(data)


def generate_from_file(
    options: GenerateOptions,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Generate the Go file described by *options*.

    Returns:
        The path that was written.

    Raises:
        ConfgenError: Any generation failure; the output file is untouched.
    """
    input_file = Path(options.input_file)
    try:
        data = input_file.read_bytes()
    except FileNotFoundError:
        raise ConfigParseError(input_file, "file does not exist") from None
    except OSError as exc:
        raise ConfigParseError(input_file, exc.strerror or str(exc)) from exc

    generator = Generator(
        options.resolved_package_name,
        mode=options.mode,
        enable_env=options.enable_env,
        input_dir=options.input_dir,
        max_file_size=options.max_file_size,
        environ=environ,
    )
    source = generator.generate(data, source=input_file)

    if options.format_source:
        try:
            source = format_go_source(source)
        except RuntimeError as exc:
            raise GenerationError(str(exc)) from exc

    try:
        written = write_atomic(options.output_file, source)
    except OSError as exc:
        raise GenerationError(
            f"failed to write output file {options.output_file}: {exc}"
        ) from exc

    logger.info("Generated %s from %s (%s mode)", written, input_file, options.mode.value)
    return written
