"""Go source emission for a collected configuration schema.

Two mutually exclusive strategies share one traversal:

``static``
    One struct per type name with real fields, and a ``var`` block whose
    values are fully populated literals.

``getter``
    Zero-field placeholder structs with one accessor method per field.  Each
    accessor checks an environment variable at run time and falls back to the
    value captured at generation time.  Malformed values fall back silently so
    a misconfigured process keeps running.  Arrays have no override path.

The traversal lives in :class:`CodeEmitter`; what is written for each field
is delegated to a :class:`FieldWriter` implementation chosen by mode.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol

from confgen.generator.files import FileContentLoader
from confgen.generator.literals import INDENT, LiteralWriter, bytes_literal
from confgen.generator.naming import (
    CONFIG_SUFFIX,
    DEFAULT_ENV_PREFIX,
    ITEM_SUFFIX,
    child_type_name,
    env_var_name,
    pascal_case,
    top_level_type_name,
)
from confgen.generator.schema import SchemaCatalog, StructSchema, field_type
from confgen.generator.templates import (
    ACCESSOR_TEMPLATE,
    FILE_TEMPLATE,
    TemplateRenderer,
)
from confgen.generator.types import SemanticType, classify, go_type


class EmissionMode(str, Enum):
    """Generation strategy."""

    STATIC = "static"
    GETTER = "getter"


# ---------------------------------------------------------------------------
# Duration scan
# ---------------------------------------------------------------------------


def contains_duration(tree: Any) -> bool:
    """Return ``True`` if any string anywhere in *tree* is a duration.

    Decides whether the generated file imports ``time``; walks tables,
    arrays and arrays of tables the same way the collector does.
    """
    if isinstance(tree, dict):
        return any(contains_duration(value) for value in tree.values())
    if isinstance(tree, list):
        return any(contains_duration(item) for item in tree)
    return classify(tree) is SemanticType.DURATION


# ---------------------------------------------------------------------------
# Shared literal building
# ---------------------------------------------------------------------------


class _ValueBuilder:
    """Builds populated struct and slice literals (used by both modes)."""

    def __init__(self, literals: LiteralWriter) -> None:
        self.literals = literals

    def struct_init(self, type_name: str, table: dict[str, Any], indent: int) -> str:
        """``{`` + one ``Field: value,`` line per key + ``}``.

        The opening brace is on a line at *indent*; fields sit one level
        deeper and the closing brace returns to *indent*.
        """
        lines = ["{"]
        field_indent = INDENT * (indent + 1)
        for key in sorted(table):
            value = self.field_value(type_name, key, table[key], indent + 1)
            lines.append(f"{field_indent}{pascal_case(key)}: {value},")
        lines.append(INDENT * indent + "}")
        return "\n".join(lines)

    def field_value(self, parent: str, key: str, value: Any, indent: int) -> str:
        """Literal for field *key* of *parent*, written on a line at *indent*."""
        kind = classify(value)
        if kind is SemanticType.TABLE:
            child = child_type_name(parent, key, CONFIG_SUFFIX)
            return child + self.struct_init(child, value, indent)
        if kind is SemanticType.TABLE_ARRAY:
            child = child_type_name(parent, key, ITEM_SUFFIX)
            return self.slice_init(child, value, indent)
        return self.literals.write(value, indent)

    def slice_init(self, item_type: str, items: list[Any], indent: int) -> str:
        """``[]Item{`` + one element literal per line + ``}``.

        Element type names are elided inside the slice, as ``gofmt -s`` does.
        """
        lines = [f"[]{item_type}{{"]
        item_indent = INDENT * (indent + 1)
        for item in items:
            if isinstance(item, dict):
                lines.append(item_indent + self.struct_init(item_type, item, indent + 1) + ",")
        lines.append(INDENT * indent + "}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Field writers
# ---------------------------------------------------------------------------


class FieldWriter(Protocol):
    """Per-mode capability used by :class:`CodeEmitter`."""

    imports: set[str]

    def emit_struct(self, schema: StructSchema) -> str: ...

    def emit_field(self, schema: StructSchema, key: str, value: Any) -> str: ...

    def emit_methods(self, schema: StructSchema) -> list[str]: ...

    def emit_values(self, tree: dict[str, Any]) -> list[str]: ...


class StaticFieldWriter:
    """Record types with fields, populated ``var`` block."""

    def __init__(self, builder: _ValueBuilder) -> None:
        self.builder = builder
        self.imports: set[str] = set()

    def emit_struct(self, schema: StructSchema) -> str:
        lines = [f"type {schema.name} struct {{"]
        for key, value in schema.sorted_fields():
            lines.append(self.emit_field(schema, key, value))
        lines.append("}")
        return "\n".join(lines)

    def emit_field(self, schema: StructSchema, key: str, value: Any) -> str:
        return f"{INDENT}{pascal_case(key)} {field_type(schema.name, key, value)}"

    def emit_methods(self, schema: StructSchema) -> list[str]:
        return []

    def emit_values(self, tree: dict[str, Any]) -> list[str]:
        lines = ["var ("]
        for key in sorted(tree):
            value = tree[key]
            name = pascal_case(key)
            kind = classify(value)
            if kind is SemanticType.TABLE:
                type_name = top_level_type_name(key, CONFIG_SUFFIX)
                init = self.builder.struct_init(type_name, value, 1)
                lines.append(f"{INDENT}{name} = {type_name}{init}")
            elif kind is SemanticType.TABLE_ARRAY:
                type_name = top_level_type_name(key, ITEM_SUFFIX)
                init = self.builder.slice_init(type_name, value, 1)
                lines.append(f"{INDENT}{name} = {init}")
            elif kind is SemanticType.ARRAY and not value:
                lines.append(f"{INDENT}{name} {go_type(value)}")
            else:
                literal = self.builder.literals.write(value, 1)
                lines.append(f"{INDENT}{name} {go_type(value)} = {literal}")
        lines.append(")")
        return ["\n".join(lines)]


class GetterFieldWriter:
    """Placeholder types with environment-aware accessor methods."""

    def __init__(
        self,
        builder: _ValueBuilder,
        renderer: TemplateRenderer,
        env_prefix: str = DEFAULT_ENV_PREFIX,
    ) -> None:
        self.builder = builder
        self.renderer = renderer
        self.env_prefix = env_prefix
        self.static = StaticFieldWriter(builder)
        self.imports: set[str] = set()

    def emit_struct(self, schema: StructSchema) -> str:
        # Elements of arrays of tables keep their fields: each element has
        # its own values, which a type-level accessor cannot express.
        if schema.in_array:
            return self.static.emit_struct(schema)
        return f"type {schema.name} struct{{}}"

    def emit_methods(self, schema: StructSchema) -> list[str]:
        if schema.in_array:
            return []
        return [self.emit_field(schema, key, value) for key, value in schema.sorted_fields()]

    def emit_field(self, schema: StructSchema, key: str, value: Any) -> str:
        return self._accessor(
            receiver=schema.name,
            name=pascal_case(key),
            type_name=field_type(schema.name, key, value),
            env_var=env_var_name((*schema.path, key), self.env_prefix),
            parent=schema.name,
            key=key,
            value=value,
        )

    def emit_values(self, tree: dict[str, Any]) -> list[str]:
        blocks: list[str] = []
        instances: list[str] = []
        for key in sorted(tree):
            value = tree[key]
            kind = classify(value)
            if kind is SemanticType.TABLE:
                type_name = top_level_type_name(key, CONFIG_SUFFIX)
                instances.append(f"{INDENT}{pascal_case(key)} {type_name}")
                continue
            if kind is SemanticType.TABLE_ARRAY:
                type_name = "[]" + top_level_type_name(key, ITEM_SUFFIX)
            else:
                type_name = go_type(value)
            blocks.append(self._accessor(
                receiver=None,
                name=pascal_case(key),
                type_name=type_name,
                env_var=env_var_name((key,), self.env_prefix),
                parent=None,
                key=key,
                value=value,
            ))
        if instances:
            blocks.append("\n".join(["var (", *instances, ")"]))
        return blocks

    def _accessor(
        self,
        *,
        receiver: str | None,
        name: str,
        type_name: str,
        env_var: str,
        parent: str | None,
        key: str,
        value: Any,
    ) -> str:
        kind = classify(value)
        if kind is SemanticType.TABLE:
            default = ""
        elif kind is SemanticType.TABLE_ARRAY:
            item_type = (child_type_name(parent, key, ITEM_SUFFIX) if parent
                         else top_level_type_name(key, ITEM_SUFFIX))
            default = self.builder.slice_init(item_type, value, 1)
        elif kind is SemanticType.BYTES:
            default = bytes_literal(self.builder.literals.loader.load(value), 1)
        else:
            default = self.builder.literals.write(value, 1)

        if kind in (SemanticType.STRING, SemanticType.INTEGER, SemanticType.FLOAT,
                    SemanticType.BOOL, SemanticType.DURATION, SemanticType.BYTES):
            self.imports.add("os")
        if kind in (SemanticType.INTEGER, SemanticType.FLOAT, SemanticType.BOOL):
            self.imports.add("strconv")

        return self.renderer.render(ACCESSOR_TEMPLATE, {
            "receiver": receiver,
            "name": name,
            "go_type": type_name,
            "kind": kind.value,
            "env_var": env_var,
            "default": default,
        }).rstrip("\n")


# ---------------------------------------------------------------------------
# Emitter
# ---------------------------------------------------------------------------


class CodeEmitter:
    """Renders a schema catalog plus its value tree into Go source text."""

    def __init__(
        self,
        mode: EmissionMode | str = EmissionMode.STATIC,
        package_name: str = "config",
        loader: FileContentLoader | None = None,
        renderer: TemplateRenderer | None = None,
        env_prefix: str = DEFAULT_ENV_PREFIX,
    ) -> None:
        self.mode = EmissionMode(mode)
        self.package_name = package_name
        self.loader = loader or FileContentLoader()
        self.renderer = renderer or TemplateRenderer()
        self.env_prefix = env_prefix

    def _writer(self, builder: _ValueBuilder) -> FieldWriter:
        if self.mode is EmissionMode.GETTER:
            return GetterFieldWriter(builder, self.renderer, self.env_prefix)
        return StaticFieldWriter(builder)

    def emit(self, tree: dict[str, Any], catalog: SchemaCatalog) -> str:
        """Return the complete Go source file for *tree*."""
        literals = LiteralWriter(self.loader)
        builder = _ValueBuilder(literals)
        writer = self._writer(builder)

        type_blocks = [writer.emit_struct(schema) for schema in catalog]
        method_blocks = [m for schema in catalog for m in writer.emit_methods(schema)]
        value_blocks = writer.emit_values(tree)

        imports = set(literals.imports)
        imports.update(writer.imports)
        # Getter accessors parse durations without writing a literal.
        if contains_duration(tree):
            imports.add("time")

        return self.renderer.render(FILE_TEMPLATE, {
            "package": self.package_name,
            "imports": sorted(imports),
            "blocks": [*type_blocks, *method_blocks, *value_blocks],
        })
