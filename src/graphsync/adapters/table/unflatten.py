"""Rebuild graph nodes from workbook tables."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from graphsync.adapters.table.sheets import (
    ENTITIES_SHEET,
    GRAPH_COLUMN,
    ID_COLUMN,
    KIND_CHILD,
    KIND_TYPE,
    METADATA_SHEET,
    NODE_GRAPH_COLUMN,
    REFERENCE_SUFFIX,
    TYPE_COLUMN,
    UNTYPED_MARKER,
    Cell,
    SheetTable,
    WorkbookData,
    cell_text,
    decode_json_cell,
)
from graphsync.core.canonicalize import canonical_bytes
from graphsync.core.model import (
    Node,
    NodeAccumulator,
    NodeDraft,
    ObjectRef,
    PropertyValue,
    RefArray,
    Scalar,
    ScalarArray,
    ScalarValue,
)
from graphsync.errors import MissingMetadataError, WorkbookError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SheetMetadata:
    """One row of the Metadata sheet."""

    kind: str
    sheet: str
    type_name: str
    predicate: str | None = None


def read_workbook_nodes(workbook: WorkbookData) -> list[Node]:
    """Reconstruct nodes from the tables produced by ``build_workbook``.

    Raises:
        WorkbookError: If a required sheet is missing or a sheet is
            inconsistent with the Metadata declarations
        MissingMetadataError: If Metadata names a sheet that does not exist
    """
    metadata = parse_metadata(_required(workbook, METADATA_SHEET))
    entities = _required(workbook, ENTITIES_SHEET)
    accumulator = _load_entities(entities)
    with_graph = GRAPH_COLUMN in entities.columns

    type_entries = [entry for entry in metadata if entry.kind == KIND_TYPE]
    child_entries = [entry for entry in metadata if entry.kind == KIND_CHILD]

    for entry in type_entries:
        _ingest_type_sheet(
            _described(workbook, entry), entry.type_name, accumulator, with_graph
        )
    for entry in child_entries:
        _ingest_child_sheet(_described(workbook, entry), entry, accumulator)

    nodes = accumulator.finalize()
    logger.debug(
        "Read %d nodes from %d type and %d child sheets",
        len(nodes),
        len(type_entries),
        len(child_entries),
    )
    return nodes


def parse_metadata(table: SheetTable) -> list[SheetMetadata]:
    entries: list[SheetMetadata] = []
    for row in table.rows:
        kind = cell_text(row[0]) if row else ""
        if not kind:
            continue
        sheet, type_name, predicate = (
            cell_text(row[index]) if index < len(row) else "" for index in (1, 2, 3)
        )
        if kind == KIND_TYPE:
            entries.append(SheetMetadata(kind, sheet, type_name))
        elif kind == KIND_CHILD:
            if not predicate:
                raise WorkbookError(f"child sheet '{sheet}' has no predicate in {METADATA_SHEET}")
            entries.append(SheetMetadata(kind, sheet, type_name, predicate))
        else:
            raise WorkbookError(f"unknown metadata kind '{kind}'")
    return entries


def _required(workbook: WorkbookData, sheet_name: str) -> SheetTable:
    table = workbook.get(sheet_name)
    if table is None:
        raise WorkbookError(f"missing sheet '{sheet_name}'")
    return table


def _described(workbook: WorkbookData, entry: SheetMetadata) -> SheetTable:
    table = workbook.get(entry.sheet)
    if table is None:
        raise MissingMetadataError(entry.sheet)
    return table


def _load_entities(table: SheetTable) -> NodeAccumulator:
    accumulator = NodeAccumulator()
    for record in table.records():
        node_id = cell_text(record.get(ID_COLUMN))
        if not node_id:
            continue
        draft = accumulator.node(node_id, _graph(record.get(GRAPH_COLUMN)))
        type_name = cell_text(record.get(TYPE_COLUMN))
        if type_name and type_name != UNTYPED_MARKER:
            draft.add_type(type_name)
    return accumulator


def _existing(
    accumulator: NodeAccumulator, node_id: str, graph: str | None, sheet: str
) -> NodeDraft:
    if (graph, node_id) not in accumulator:
        raise WorkbookError(
            f"sheet '{sheet}' refers to node '{node_id}' which is not listed in {ENTITIES_SHEET}"
        )
    return accumulator.node(node_id, graph)


def _ingest_type_sheet(
    table: SheetTable, type_name: str, accumulator: NodeAccumulator, with_graph: bool
) -> None:
    # Key columns are the first "id" and "@graph" headers. Later headers with
    # the same names hold values of predicates called "id" or "@graph".
    id_index = _column_index(table, ID_COLUMN)
    graph_index = _column_index(table, NODE_GRAPH_COLUMN) if with_graph else None
    key_indexes = {id_index, graph_index}
    width = len(table.columns)

    for row in table.rows:
        cells = list(row[:width]) + [None] * (width - len(row))
        node_id = cell_text(cells[id_index]) if id_index is not None else ""
        if not node_id:
            continue
        graph = _graph(cells[graph_index]) if graph_index is not None else None
        draft = _existing(accumulator, node_id, graph, table.sheet_name)
        if type_name and type_name != UNTYPED_MARKER:
            draft.add_type(type_name)

        for index, (column, cell) in enumerate(zip(table.columns, cells)):
            if index in key_indexes or not column:
                continue
            if cell is None or (isinstance(cell, str) and not cell.strip()):
                continue
            if column.endswith(REFERENCE_SUFFIX) and len(column) > len(REFERENCE_SUFFIX):
                predicate = column[: -len(REFERENCE_SUFFIX)]
                draft.insert_property(predicate, ObjectRef(cell_text(cell)))
            else:
                draft.insert_property(column, decode_cell(cell, table.sheet_name, column))


def _column_index(table: SheetTable, column: str) -> int | None:
    try:
        return table.columns.index(column)
    except ValueError:
        return None


def _ingest_child_sheet(
    table: SheetTable, entry: SheetMetadata, accumulator: NodeAccumulator
) -> None:
    predicate = entry.predicate or ""
    target_column = f"{predicate}{REFERENCE_SUFFIX}"
    for row in table.rows:
        parent = cell_text(row[0]) if len(row) > 0 else ""
        target = cell_text(row[1]) if len(row) > 1 else ""
        if not parent or not target:
            continue
        graph_cell = row[2] if len(row) > 2 and NODE_GRAPH_COLUMN in table.columns else None
        draft = _existing(accumulator, parent, _graph(graph_cell), table.sheet_name)

        existing = draft.get_property(predicate)
        if existing is None:
            draft.insert_property(predicate, RefArray((target,)))
        elif isinstance(existing, RefArray):
            draft.insert_property(predicate, existing.append(target))
        else:
            raise WorkbookError(
                f"sheet '{table.sheet_name}' column '{target_column}': predicate "
                f"'{predicate}' is not an object reference array"
            )


def decode_cell(cell: Cell, sheet: str, column: str) -> PropertyValue:
    """Decode a type-sheet value cell into a scalar or scalar array."""
    if isinstance(cell, bool):
        return Scalar(cell)
    if isinstance(cell, (int, float)):
        return Scalar(float(cell))

    text = str(cell)
    ok, decoded = decode_json_cell(text)
    if not ok:
        return Scalar(text)
    if isinstance(decoded, list):
        items: list[ScalarValue] = []
        for member in decoded:
            if isinstance(member, (dict, list)):
                raise WorkbookError(
                    f"sheet '{sheet}' column '{column}': array member is not a scalar "
                    f"in value {text!r}"
                )
            items.append(member)
        return ScalarArray(tuple(items))
    if isinstance(decoded, dict):
        return Scalar(canonical_bytes(decoded).decode("utf-8"))
    return Scalar(decoded)


def _graph(cell: Cell) -> str | None:
    return cell_text(cell) or None
