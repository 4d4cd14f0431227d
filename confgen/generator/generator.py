"""In-memory generation: TOML tree in, Go source text out.

Runs the stages in a fixed order so that nothing is emitted for a tree that
is going to fail:

1. environment overrides (may raise ``OverrideConversionError``),
2. validation of every ``file:`` reference (may raise a
   ``FileReferenceError`` subclass),
3. schema collection,
4. emission.
"""

from __future__ import annotations

import copy
import logging
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from confgen.errors import ConfigParseError, GenerationError
from confgen.generator.emitter import CodeEmitter, EmissionMode
from confgen.generator.files import DEFAULT_MAX_FILE_SIZE, FileContentLoader
from confgen.generator.naming import DEFAULT_ENV_PREFIX
from confgen.generator.schema import StructSchemaCollector
from confgen.generator.templates import TemplateRenderer

logger = logging.getLogger(__name__)


def load_toml(data: str | bytes, source: str | Path = "<input>") -> dict[str, Any]:
    """Decode TOML text into a plain dictionary tree.

    Raises:
        ConfigParseError: If the text is not valid TOML.
    """
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ConfigParseError(source, f"not valid UTF-8: {exc}") from exc
    try:
        return tomllib.loads(data)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigParseError(source, str(exc)) from exc


class Generator:
    """Generates Go source from decoded TOML trees.

    Instances hold only options; every call to :meth:`generate_tree` builds
    its own loader, catalog and emitter, so one instance can serve repeated
    or concurrent runs.
    """

    def __init__(
        self,
        package_name: str = "config",
        *,
        mode: EmissionMode | str = EmissionMode.STATIC,
        enable_env: bool = True,
        input_dir: str | Path | None = None,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        environ: Mapping[str, str] | None = None,
        env_prefix: str = DEFAULT_ENV_PREFIX,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        try:
            self.mode = EmissionMode(mode)
        except ValueError:
            raise GenerationError(
                f"invalid mode {mode!r}: must be 'static' or 'getter'"
            ) from None
        self.package_name = package_name or "config"
        self.enable_env = enable_env
        self.input_dir = Path(input_dir) if input_dir else None
        self.max_file_size = max_file_size or DEFAULT_MAX_FILE_SIZE
        self.environ = environ
        self.env_prefix = env_prefix
        self.renderer = renderer or TemplateRenderer()

    def generate(self, data: str | bytes, source: str | Path = "<input>") -> str:
        """Decode TOML *data* and generate Go source for it."""
        return self.generate_tree(load_toml(data, source))

    def generate_tree(self, tree: dict[str, Any]) -> str:
        """Generate Go source for an already decoded tree.

        The caller's tree is not modified; overrides apply to a copy.
        """
        tree = copy.deepcopy(tree)

        if self.enable_env:
            from confgen.envoverride import EnvOverrideResolver

            EnvOverrideResolver(self.environ, self.env_prefix).apply(tree)

        loader = FileContentLoader(self.input_dir, self.max_file_size)
        references = loader.validate_tree(tree)

        catalog = StructSchemaCollector().collect(tree)
        logger.debug(
            "Collected %d type(s), %d file reference(s), mode=%s",
            len(catalog), references, self.mode.value,
        )

        emitter = CodeEmitter(
            self.mode,
            package_name=self.package_name,
            loader=loader,
            renderer=self.renderer,
            env_prefix=self.env_prefix,
        )
        return emitter.emit(tree, catalog)
