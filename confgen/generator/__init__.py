"""confgen code generator -- Go source from decoded TOML trees.

This package classifies configuration values, collects the record types a
tree needs, and emits Go source in one of two modes (``static`` or
``getter``).

Quick usage::

    from confgen.generator import Generator

    generator = Generator("config", mode="static", input_dir="configs")
    source = generator.generate(Path("configs/app.toml").read_text())
"""

from confgen.generator.emitter import CodeEmitter, EmissionMode, contains_duration
from confgen.generator.files import DEFAULT_MAX_FILE_SIZE, FileContentLoader
from confgen.generator.generator import Generator, load_toml
from confgen.generator.schema import SchemaCatalog, StructSchema, StructSchemaCollector
from confgen.generator.templates import TemplateRenderer
from confgen.generator.types import SemanticType, classify

__all__ = [
    "DEFAULT_MAX_FILE_SIZE",
    "CodeEmitter",
    "EmissionMode",
    "FileContentLoader",
    "Generator",
    "SchemaCatalog",
    "SemanticType",
    "StructSchema",
    "StructSchemaCollector",
    "TemplateRenderer",
    "classify",
    "contains_duration",
    "load_toml",
]
