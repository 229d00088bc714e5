"""XLSX workbook I/O with openpyxl."""

from __future__ import annotations

import io
import logging
import zipfile
from pathlib import Path

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font
from openpyxl.utils.exceptions import IllegalCharacterError, InvalidFileException

from graphsync.adapters.table.sheets import Cell, SheetTable, WorkbookData
from graphsync.adapters.table.unflatten import read_workbook_nodes
from graphsync.core.model import Node
from graphsync.errors import WorkbookError

logger = logging.getLogger(__name__)

_HEADER_FONT = Font(bold=True)


def workbook_bytes(workbook: WorkbookData) -> bytes:
    """Render tables as an XLSX document, preserving sheet order."""
    book = Workbook()
    book.remove(book.active)

    for table in workbook.tables:
        sheet = book.create_sheet(title=table.sheet_name)
        for column_index, column in enumerate(table.columns, start=1):
            cell = sheet.cell(row=1, column=column_index, value=column)
            cell.font = _HEADER_FONT
        for row_index, row in enumerate(table.rows, start=2):
            for column_index, value in enumerate(row, start=1):
                if value is None:
                    continue
                _write_cell(sheet, table, row_index, column_index, value)
        sheet.freeze_panes = "A2"

    buffer = io.BytesIO()
    book.save(buffer)
    return buffer.getvalue()


def _write_cell(sheet, table: SheetTable, row: int, column: int, value: Cell) -> None:
    try:
        cell = sheet.cell(row=row, column=column, value=value)
    except IllegalCharacterError as e:
        raise WorkbookError(
            f"sheet '{table.sheet_name}' column '{table.columns[column - 1]}': "
            f"value {value!r} contains characters not allowed in a workbook"
        ) from e
    if isinstance(value, str) and value.startswith("="):
        # Keep the text literal instead of letting openpyxl store a formula.
        cell.data_type = "s"


def write_workbook(path: str | Path, workbook: WorkbookData) -> None:
    Path(path).write_bytes(workbook_bytes(workbook))


def load_workbook_data(path: str | Path) -> WorkbookData:
    """Read every sheet of an XLSX file into ``WorkbookData``.

    Raises:
        WorkbookError: If the file is not a readable XLSX workbook
    """
    try:
        book = load_workbook(filename=str(path), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError) as e:
        raise WorkbookError(f"cannot open workbook '{path}': {e}") from e

    try:
        tables = [_read_sheet(book[name], name) for name in book.sheetnames]
    finally:
        book.close()

    logger.debug("Loaded %d sheets from %s", len(tables), path)
    return WorkbookData(tables)


def _read_sheet(sheet, name: str) -> SheetTable:
    rows_iter = sheet.iter_rows(values_only=True)
    header = next(rows_iter, None)
    if header is None:
        return SheetTable(name, [], [])

    columns = ["" if value is None else str(value).strip() for value in header]
    while columns and not columns[-1]:
        columns.pop()

    rows: list[list[Cell]] = []
    for values in rows_iter:
        row = list(values[: len(columns)])
        if all(value is None for value in row):
            continue
        rows.append(row)
    return SheetTable(name, columns, rows)


def read_nodes(path: str | Path) -> list[Node]:
    """Load a workbook file and rebuild its nodes."""
    return read_workbook_nodes(load_workbook_data(path))
