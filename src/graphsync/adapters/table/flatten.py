"""Flatten graph nodes into workbook tables.

Layout:
- ``Entities``: one row per (node, type) membership
- ``Metadata``: one row per generated sheet, naming its type and predicate
- one type table per distinct type, with scalar columns and
  ``<predicate>Id`` columns for single references
- one child table per (type, predicate) holding reference arrays as edges
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from graphsync.adapters.table.sheets import (
    ENTITIES_SHEET,
    GRAPH_COLUMN,
    ID_COLUMN,
    KIND_CHILD,
    KIND_TYPE,
    METADATA_COLUMNS,
    METADATA_SHEET,
    NODE_GRAPH_COLUMN,
    PARENT_COLUMN,
    REFERENCE_SUFFIX,
    TYPE_COLUMN,
    UNTYPED_MARKER,
    Cell,
    SheetNameRegistry,
    SheetTable,
    WorkbookData,
    encode_array,
    encode_scalar,
)
from graphsync.core.model import (
    Node,
    ObjectRef,
    RefArray,
    Scalar,
    ScalarArray,
    sort_nodes,
)

logger = logging.getLogger(__name__)


@dataclass
class _TypeRow:
    node: Node
    values: dict[str, Cell]


@dataclass
class _TypeTableBuilder:
    columns: set[str] = field(default_factory=set)
    rows: list[_TypeRow] = field(default_factory=list)

    def to_table(self, sheet_name: str, with_graph: bool) -> SheetTable:
        value_columns = sorted(self.columns)
        columns = [ID_COLUMN]
        if with_graph:
            columns.append(NODE_GRAPH_COLUMN)
        columns.extend(value_columns)

        rows: list[list[Cell]] = []
        for row in self.rows:
            cells: list[Cell] = [row.node.id]
            if with_graph:
                cells.append(row.node.graph)
            cells.extend(row.values.get(column) for column in value_columns)
            rows.append(cells)
        return SheetTable(sheet_name, columns, rows)


@dataclass
class _ChildTableBuilder:
    predicate: str
    edges: list[tuple[Node, str]] = field(default_factory=list)

    def to_table(self, sheet_name: str, with_graph: bool) -> SheetTable:
        columns = [PARENT_COLUMN, f"{self.predicate}{REFERENCE_SUFFIX}"]
        if with_graph:
            columns.append(NODE_GRAPH_COLUMN)

        rows: list[list[Cell]] = []
        for parent, target in self.edges:
            cells: list[Cell] = [parent.id, target]
            if with_graph:
                cells.append(parent.graph)
            rows.append(cells)
        return SheetTable(sheet_name, columns, rows)


def build_workbook(nodes: Iterable[Node]) -> WorkbookData:
    """Flatten nodes into the Entities, Metadata, type and child tables."""
    ordered = sort_nodes(nodes)
    with_graph = any(node.graph is not None for node in ordered)

    type_builders: dict[str, _TypeTableBuilder] = {}
    child_builders: dict[tuple[str, str], _ChildTableBuilder] = {}
    memberships: list[tuple[Node, str]] = []

    for node in ordered:
        type_names = node.sorted_types() or [UNTYPED_MARKER]
        for index, type_name in enumerate(type_names):
            memberships.append((node, type_name))
            builder = type_builders.setdefault(type_name, _TypeTableBuilder())
            values: dict[str, Cell] = {}

            for predicate, value in node.properties.items():
                if isinstance(value, Scalar):
                    builder.columns.add(predicate)
                    values[predicate] = encode_scalar(value.value)
                elif isinstance(value, ObjectRef):
                    column = f"{predicate}{REFERENCE_SUFFIX}"
                    builder.columns.add(column)
                    values[column] = value.target
                elif isinstance(value, ScalarArray):
                    builder.columns.add(predicate)
                    values[predicate] = encode_array(value)
                elif isinstance(value, RefArray):
                    # Edges are contributed once, under the first type only.
                    if index == 0:
                        child = child_builders.setdefault(
                            (type_name, predicate), _ChildTableBuilder(predicate)
                        )
                        child.edges.extend((node, target) for target in value.targets)
                else:
                    raise TypeError(f"unsupported property value: {value!r}")

            builder.rows.append(_TypeRow(node, values))

    registry = SheetNameRegistry(reserved=(ENTITIES_SHEET, METADATA_SHEET))
    generated: list[SheetTable] = []
    metadata_rows: list[list[Cell]] = []

    for type_name in sorted(type_builders):
        sheet_name = registry.assign(type_name)
        metadata_rows.append([KIND_TYPE, sheet_name, type_name, None])
        generated.append(type_builders[type_name].to_table(sheet_name, with_graph))

    for type_name, predicate in sorted(child_builders):
        sheet_name = registry.assign(f"{type_name}__{predicate}")
        metadata_rows.append([KIND_CHILD, sheet_name, type_name, predicate])
        builder = child_builders[(type_name, predicate)]
        generated.append(builder.to_table(sheet_name, with_graph))

    generated.sort(key=lambda table: table.sheet_name)

    tables = [
        _entities_table(memberships, with_graph),
        SheetTable(METADATA_SHEET, list(METADATA_COLUMNS), metadata_rows),
        *generated,
    ]
    logger.debug(
        "Flattened %d nodes into %d type and %d child sheets",
        len(ordered),
        len(type_builders),
        len(child_builders),
    )
    return WorkbookData(tables)


def _entities_table(memberships: list[tuple[Node, str]], with_graph: bool) -> SheetTable:
    columns = [ID_COLUMN, TYPE_COLUMN]
    if with_graph:
        columns.append(GRAPH_COLUMN)

    rows: list[list[Cell]] = []
    ordered = sorted(
        memberships,
        key=lambda item: (item[0].graph is not None, item[0].graph or "", item[0].id, item[1]),
    )
    for node, type_name in ordered:
        row: list[Cell] = [node.id, type_name]
        if with_graph:
            row.append(node.graph)
        rows.append(row)
    return SheetTable(ENTITIES_SHEET, columns, rows)
