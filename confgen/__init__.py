"""confgen -- type-safe Go configuration code from TOML files.

Quick usage::

    from confgen import GenerateOptions, generate, generate_from_file

    source = generate(open("config.toml").read(), package_name="config")

    generate_from_file(GenerateOptions(
        input_file="config.toml",
        output_file="internal/config/config.go",
    ))
"""

from confgen.config import GenerateOptions, WatchOptions
from confgen.errors import (
    ConfgenError,
    ConfigParseError,
    FileReadError,
    FileReferenceError,
    FileReferenceNotFoundError,
    FileSizeExceededError,
    GenerationError,
    OverrideConversionError,
    WatchAttachError,
)
from confgen.generator import DEFAULT_MAX_FILE_SIZE, EmissionMode, Generator
from confgen.pipeline import generate, generate_from_file, generate_with_options

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_MAX_FILE_SIZE",
    "ConfgenError",
    "ConfigParseError",
    "EmissionMode",
    "FileReadError",
    "FileReferenceError",
    "FileReferenceNotFoundError",
    "FileSizeExceededError",
    "GenerateOptions",
    "GenerationError",
    "Generator",
    "OverrideConversionError",
    "WatchAttachError",
    "WatchOptions",
    "__version__",
    "generate",
    "generate_from_file",
    "generate_with_options",
]
