"""In-memory workbook tables, sheet naming and cell encoding.

Cells hold ``str | float | bool | None``; ``None`` is an empty cell. Scalars
are encoded so that the reverse transform can tell them apart:

- ``float`` → numeric cell
- ``bool`` → boolean cell
- ``None`` → the text ``null``
- ``str`` → the raw text, unless the text is blank or would itself decode as
  JSON, in which case its JSON encoding is written (``"42"`` with quotes)
- arrays → compact JSON text
"""

from __future__ import annotations

import unicodedata
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Final, Union

import orjson

from graphsync.core.model import ScalarArray, ScalarValue, scalar_to_json

Cell = Union[str, float, bool, None]

UNTYPED_MARKER: Final[str] = "__untyped__"
ENTITIES_SHEET: Final[str] = "Entities"
METADATA_SHEET: Final[str] = "Metadata"

ID_COLUMN: Final[str] = "id"
TYPE_COLUMN: Final[str] = "type"
GRAPH_COLUMN: Final[str] = "graph"
NODE_GRAPH_COLUMN: Final[str] = "@graph"
PARENT_COLUMN: Final[str] = "ParentId"
REFERENCE_SUFFIX: Final[str] = "Id"

METADATA_COLUMNS: Final[tuple[str, ...]] = ("kind", "sheet", "type", "predicate")
KIND_TYPE: Final[str] = "type"
KIND_CHILD: Final[str] = "child"

MAX_SHEET_NAME: Final[int] = 31
_FORBIDDEN_CHARS = frozenset(":\\/?*[]'\"")


@dataclass
class SheetTable:
    """One worksheet: a header row and data rows of equal width."""

    sheet_name: str
    columns: list[str]
    rows: list[list[Cell]] = field(default_factory=list)

    def records(self) -> Iterable[dict[str, Cell]]:
        """Iterate rows as ``{column: cell}`` mappings."""
        width = len(self.columns)
        for row in self.rows:
            padded = list(row[:width]) + [None] * (width - len(row))
            yield dict(zip(self.columns, padded))


@dataclass
class WorkbookData:
    tables: list[SheetTable] = field(default_factory=list)

    @property
    def sheet_names(self) -> list[str]:
        return [table.sheet_name for table in self.tables]

    def get(self, sheet_name: str) -> SheetTable | None:
        for table in self.tables:
            if table.sheet_name == sheet_name:
                return table
        return None


def sanitize_sheet_name(raw: str) -> str:
    """Make ``raw`` a legal worksheet name.

    Forbidden and control characters become ``_``; the result is trimmed,
    replaced by ``Sheet`` when empty and capped at 31 characters.
    """
    cleaned = "".join(
        "_" if ch in _FORBIDDEN_CHARS or unicodedata.category(ch) == "Cc" else ch for ch in raw
    ).strip()
    if not cleaned:
        cleaned = "Sheet"
    return cleaned[:MAX_SHEET_NAME]


class SheetNameRegistry:
    """Assigns unique sheet names in the order candidates are presented.

    Workbook sheet names compare case-insensitively, so ``Person`` and
    ``person`` collide.
    """

    def __init__(self, reserved: Iterable[str] = ()):
        self._used: set[str] = set()
        for name in reserved:
            self.claim(name)

    def claim(self, name: str) -> None:
        self._used.add(name.casefold())

    def is_used(self, name: str) -> bool:
        return name.casefold() in self._used

    def assign(self, raw: str) -> str:
        base = sanitize_sheet_name(raw)
        if not self.is_used(base):
            self.claim(base)
            return base

        counter = 1
        while True:
            suffix = f"_{counter}"
            candidate = base[: MAX_SHEET_NAME - len(suffix)] + suffix
            if not self.is_used(candidate):
                self.claim(candidate)
                return candidate
            counter += 1


def encode_scalar(value: ScalarValue) -> Cell:
    value = scalar_to_json(value)
    if value is None:
        return "null"
    if isinstance(value, (bool, float)):
        return value
    if _needs_quoting(value):
        return orjson.dumps(value).decode("utf-8")
    return value


def encode_array(value: ScalarArray) -> str:
    return orjson.dumps([scalar_to_json(item) for item in value.items]).decode("utf-8")


def _needs_quoting(text: str) -> bool:
    if not text.strip():
        return True
    try:
        orjson.loads(text)
    except orjson.JSONDecodeError:
        return False
    return True


def decode_json_cell(text: str) -> tuple[bool, Any]:
    """Try to decode ``text`` as JSON; return ``(ok, value)``."""
    try:
        return True, orjson.loads(text)
    except orjson.JSONDecodeError:
        return False, None


def cell_text(cell: Cell) -> str:
    """Render an identifier-like cell as text (empty for blank cells)."""
    if cell is None:
        return ""
    if isinstance(cell, bool):
        return "true" if cell else "false"
    if isinstance(cell, float) and cell.is_integer():
        return str(int(cell))
    return str(cell).strip()
