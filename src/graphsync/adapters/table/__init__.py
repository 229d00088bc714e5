"""Table codec.

Flattens nodes into a normalized set of spreadsheet tables and rebuilds
nodes from them. The ``Metadata`` sheet is the only channel that maps
generated sheet names back to type and predicate names.

Example:
    from graphsync.adapters.table import build_workbook, read_nodes, write_workbook

    write_workbook("graph.xlsx", build_workbook(nodes))
    restored = read_nodes("graph.xlsx")
"""

from graphsync.adapters.table.flatten import build_workbook
from graphsync.adapters.table.sheets import (
    ENTITIES_SHEET,
    METADATA_SHEET,
    UNTYPED_MARKER,
    SheetNameRegistry,
    SheetTable,
    WorkbookData,
    sanitize_sheet_name,
)
from graphsync.adapters.table.unflatten import read_workbook_nodes
from graphsync.adapters.table.workbook import (
    load_workbook_data,
    read_nodes,
    workbook_bytes,
    write_workbook,
)

__all__ = [
    # Sheets
    "ENTITIES_SHEET",
    "METADATA_SHEET",
    "UNTYPED_MARKER",
    "SheetNameRegistry",
    "SheetTable",
    "WorkbookData",
    "sanitize_sheet_name",
    # Flatten / unflatten
    "build_workbook",
    "read_workbook_nodes",
    # Workbook I/O
    "load_workbook_data",
    "read_nodes",
    "workbook_bytes",
    "write_workbook",
]
