"""Jinja2 template rendering for generated Go source.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``confgen/generator/templates/`` directory.  The file skeleton (header,
package clause, imports) and getter-mode accessor bodies are templates;
type and value blocks are assembled in Python and passed in as text.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from confgen.generator.literals import quote_string

# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

FILE_TEMPLATE = "config.go.j2"
ACCESSOR_TEMPLATE = "accessor.go.j2"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders the Go source templates.

    Whitespace control (``trim_blocks``/``lstrip_blocks``) is enabled so the
    templates can be laid out readably while producing gofmt-shaped output.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self.env.filters["go_quote"] = quote_string

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"config.go.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered template content as a string.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)
