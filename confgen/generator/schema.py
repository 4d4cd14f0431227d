"""Collection of the record types needed to represent a configuration tree.

One depth-first pass over the (possibly overridden) tree produces a
:class:`SchemaCatalog`: every table becomes a ``...Config`` type and every
array of tables a ``...Item`` type, named after its path.  The catalog is a
plain value returned to the caller, so independent generation runs never
share state.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from confgen.generator.naming import (
    CONFIG_SUFFIX,
    ITEM_SUFFIX,
    child_type_name,
    top_level_type_name,
)
from confgen.generator.types import SemanticType, classify, go_type


@dataclass
class StructSchema:
    """A generated record type.

    Attributes:
        name: Go type name, e.g. ``DatabasePoolConfig``.
        path: Keys from the root to the table, e.g. ``("database", "pool")``.
        fields: The table the field set was taken from.
        in_array: ``True`` when the type is reached through an array of
            tables, where values differ per element.
    """

    name: str
    path: tuple[str, ...]
    fields: dict[str, Any]
    in_array: bool = False

    def sorted_fields(self) -> list[tuple[str, Any]]:
        """Fields in key order, the order they are emitted in."""
        return sorted(self.fields.items())


@dataclass
class SchemaCatalog:
    """Deduplicated mapping of type name to :class:`StructSchema`."""

    structs: dict[str, StructSchema] = field(default_factory=dict)

    def add(self, schema: StructSchema) -> bool:
        """Register *schema* unless its name is taken.  First one wins."""
        if schema.name in self.structs:
            return False
        self.structs[schema.name] = schema
        return True

    def names(self) -> list[str]:
        """Type names in lexicographic order."""
        return sorted(self.structs)

    def __contains__(self, name: object) -> bool:
        return name in self.structs

    def __getitem__(self, name: str) -> StructSchema:
        return self.structs[name]

    def __iter__(self) -> Iterator[StructSchema]:
        for name in self.names():
            yield self.structs[name]

    def __len__(self) -> int:
        return len(self.structs)


class StructSchemaCollector:
    """Walks a tree once and returns its :class:`SchemaCatalog`."""

    def collect(self, tree: dict[str, Any]) -> SchemaCatalog:
        catalog = SchemaCatalog()
        for key in sorted(tree):
            value = tree[key]
            kind = classify(value)
            if kind is SemanticType.TABLE:
                self._collect(catalog, top_level_type_name(key, CONFIG_SUFFIX),
                              (key,), value, in_array=False)
            elif kind is SemanticType.TABLE_ARRAY:
                # The first element defines the schema for the whole array.
                self._collect(catalog, top_level_type_name(key, ITEM_SUFFIX),
                              (key,), value[0], in_array=True)
        return catalog

    def _collect(
        self,
        catalog: SchemaCatalog,
        name: str,
        path: tuple[str, ...],
        table: dict[str, Any],
        *,
        in_array: bool,
    ) -> None:
        if not catalog.add(StructSchema(name, path, table, in_array)):
            return

        for key in sorted(table):
            value = table[key]
            kind = classify(value)
            if kind is SemanticType.TABLE:
                self._collect(catalog, child_type_name(name, key, CONFIG_SUFFIX),
                              (*path, key), value, in_array=in_array)
            elif kind is SemanticType.TABLE_ARRAY:
                self._collect(catalog, child_type_name(name, key, ITEM_SUFFIX),
                              (*path, key), value[0], in_array=True)


def collect(tree: dict[str, Any]) -> SchemaCatalog:
    """Module-level shortcut for ``StructSchemaCollector().collect(tree)``."""
    return StructSchemaCollector().collect(tree)


def field_type(parent: str, key: str, value: Any) -> str:
    """Go type of field *key* of type *parent*, with nested types resolved."""
    kind = classify(value)
    if kind is SemanticType.TABLE:
        return child_type_name(parent, key, CONFIG_SUFFIX)
    if kind is SemanticType.TABLE_ARRAY:
        return "[]" + child_type_name(parent, key, ITEM_SUFFIX)
    return go_type(value)
