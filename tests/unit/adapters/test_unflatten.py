"""Tests for rebuilding nodes from workbook tables."""

from typing import Any

import pytest

from graphsync.adapters.table import (
    SheetTable,
    WorkbookData,
    build_workbook,
    read_workbook_nodes,
)
from graphsync.adapters.table.unflatten import decode_cell, parse_metadata
from graphsync.core.model import Node, ObjectRef, RefArray, Scalar, ScalarArray
from graphsync.errors import MissingMetadataError, WorkbookError

METADATA_HEADER = ["kind", "sheet", "type", "predicate"]


def _workbook(
    entities: list[list[Any]], metadata: list[list[Any]], *tables: SheetTable
) -> WorkbookData:
    return WorkbookData(
        [
            SheetTable("Entities", ["id", "type"], entities),
            SheetTable("Metadata", METADATA_HEADER, metadata),
            *tables,
        ]
    )


class TestReadWorkbook:
    """Test reconstruction of flattened graphs."""

    def test_person_example(self, person_nodes: list[Node]) -> None:
        """The flattened example reads back unchanged."""
        assert read_workbook_nodes(build_workbook(person_nodes)) == person_nodes

    def test_every_value_variant(self, iri_nodes: list[Node]) -> None:
        """Scalars, arrays and references survive the tables."""
        assert read_workbook_nodes(build_workbook(iri_nodes)) == iri_nodes

    def test_json_like_strings(self) -> None:
        """Strings that look like JSON stay strings."""
        node = Node(
            id="a",
            types=frozenset({"T"}),
            properties={
                "n": Scalar("42"),
                "b": Scalar("true"),
                "e": Scalar(""),
                "z": Scalar(None),
                "arr": ScalarArray(("1", 1.0, None)),
            },
        )
        assert read_workbook_nodes(build_workbook([node])) == [node]

    def test_predicate_named_like_key_column(self) -> None:
        """A scalar predicate called "id" does not replace the node id."""
        node = Node(id="ex:1", types=frozenset({"T"}), properties={"id": Scalar("foo")})
        assert read_workbook_nodes(build_workbook([node])) == [node]

    def test_predicates_named_like_key_columns_with_graphs(self) -> None:
        """"id" and "@graph" predicates survive next to the graph column."""
        nodes = [
            Node(id="a", types=frozenset({"T"}), properties={"id": Scalar("x")}),
            Node(
                id="b",
                graph="g",
                types=frozenset({"T"}),
                properties={"@graph": Scalar("y"), "id": Scalar("z")},
            ),
        ]
        assert read_workbook_nodes(build_workbook(nodes)) == nodes

    def test_untyped_and_named_graph_nodes(self) -> None:
        """Untyped nodes and graph membership survive."""
        nodes = [
            Node(id="a", properties={"p": Scalar("x"), "k": RefArray(("b",))}),
            Node(id="b", graph="g", types=frozenset({"T"}), properties={"q": ObjectRef("a")}),
        ]
        assert read_workbook_nodes(build_workbook(nodes)) == nodes

    def test_node_only_in_entities(self) -> None:
        """A typed node with no properties still exists."""
        workbook = _workbook([["a", "T"]], [])
        assert read_workbook_nodes(workbook) == [Node(id="a", types=frozenset({"T"}))]

    def test_blank_rows_skipped(self) -> None:
        """Rows without an id are ignored."""
        workbook = _workbook(
            [["a", "T"], [None, None]],
            [["type", "T", "T", None], [None, None, None, None]],
            SheetTable("T", ["id", "p"], [["a", "v"], [None, "orphan"]]),
        )
        assert read_workbook_nodes(workbook) == [
            Node(id="a", types=frozenset({"T"}), properties={"p": Scalar("v")})
        ]

    def test_numeric_ids_from_spreadsheet(self) -> None:
        """Numeric id cells read as integer text."""
        workbook = _workbook(
            [[7.0, "T"]],
            [["type", "T", "T", None]],
            SheetTable("T", ["id", "p"], [[7, "v"]]),
        )
        [node] = read_workbook_nodes(workbook)
        assert node.id == "7"
        assert node.properties == {"p": Scalar("v")}


class TestWorkbookErrors:
    """Test inconsistent workbooks."""

    def test_missing_metadata_sheet(self) -> None:
        """Metadata is required."""
        workbook = WorkbookData([SheetTable("Entities", ["id", "type"], [])])
        with pytest.raises(WorkbookError, match="missing sheet 'Metadata'"):
            read_workbook_nodes(workbook)

    def test_missing_entities_sheet(self) -> None:
        """Entities is required."""
        workbook = WorkbookData([SheetTable("Metadata", METADATA_HEADER, [])])
        with pytest.raises(WorkbookError, match="missing sheet 'Entities'"):
            read_workbook_nodes(workbook)

    def test_metadata_names_absent_sheet(self) -> None:
        """Declared sheets must exist."""
        workbook = _workbook([["a", "T"]], [["type", "Gone", "T", None]])
        with pytest.raises(MissingMetadataError) as exc_info:
            read_workbook_nodes(workbook)
        assert exc_info.value.sheet == "Gone"

    def test_row_for_unknown_node(self) -> None:
        """Type sheet rows must refer to Entities."""
        workbook = _workbook(
            [["a", "T"]],
            [["type", "T", "T", None]],
            SheetTable("T", ["id", "p"], [["b", "v"]]),
        )
        with pytest.raises(WorkbookError, match="node 'b' which is not listed in Entities"):
            read_workbook_nodes(workbook)

    def test_child_edge_for_unknown_parent(self) -> None:
        """Child sheet parents must refer to Entities."""
        workbook = _workbook(
            [["a", "T"]],
            [["child", "T__k", "T", "k"]],
            SheetTable("T__k", ["ParentId", "kId"], [["zz", "a"]]),
        )
        with pytest.raises(WorkbookError, match="node 'zz'"):
            read_workbook_nodes(workbook)

    def test_child_predicate_clashes_with_scalar(self) -> None:
        """A child sheet cannot extend a scalar value."""
        workbook = _workbook(
            [["a", "T"]],
            [["type", "T", "T", None], ["child", "T__k", "T", "k"]],
            SheetTable("T", ["id", "k"], [["a", "text"]]),
            SheetTable("T__k", ["ParentId", "kId"], [["a", "b"]]),
        )
        with pytest.raises(WorkbookError, match="sheet 'T__k' column 'kId'.*predicate 'k'"):
            read_workbook_nodes(workbook)

    def test_nested_array_member(self) -> None:
        """Array cells may only hold scalars."""
        workbook = _workbook(
            [["a", "T"]],
            [["type", "T", "T", None]],
            SheetTable("T", ["id", "tags"], [["a", '[1, [2]]']]),
        )
        with pytest.raises(WorkbookError, match="sheet 'T' column 'tags'"):
            read_workbook_nodes(workbook)


class TestParseMetadata:
    """Test Metadata rows."""

    def test_entries(self) -> None:
        """Type and child rows are parsed."""
        table = SheetTable(
            "Metadata",
            METADATA_HEADER,
            [["type", "T", "T", None], ["child", "T__k", "T", "k"]],
        )
        entries = parse_metadata(table)
        assert [(entry.kind, entry.sheet, entry.predicate) for entry in entries] == [
            ("type", "T", None),
            ("child", "T__k", "k"),
        ]

    def test_unknown_kind(self) -> None:
        """Only type and child rows are known."""
        table = SheetTable("Metadata", METADATA_HEADER, [["index", "X", "T", None]])
        with pytest.raises(WorkbookError, match="unknown metadata kind 'index'"):
            parse_metadata(table)

    def test_child_without_predicate(self) -> None:
        """Child rows need a predicate."""
        table = SheetTable("Metadata", METADATA_HEADER, [["child", "T__k", "T", None]])
        with pytest.raises(WorkbookError, match="child sheet 'T__k' has no predicate"):
            parse_metadata(table)


class TestDecodeCell:
    """Test value cell decoding."""

    def test_native_cells(self) -> None:
        """Numbers and booleans come back typed."""
        assert decode_cell(3, "S", "c") == Scalar(3.0)
        assert decode_cell(2.5, "S", "c") == Scalar(2.5)
        assert decode_cell(False, "S", "c") == Scalar(False)

    def test_text_cells(self) -> None:
        """Raw text stays text and JSON text is decoded."""
        assert decode_cell("Alice", "S", "c") == Scalar("Alice")
        assert decode_cell('"42"', "S", "c") == Scalar("42")
        assert decode_cell("null", "S", "c") == Scalar(None)
        assert decode_cell("42", "S", "c") == Scalar(42.0)

    def test_array_cell(self) -> None:
        """JSON arrays become scalar arrays."""
        assert decode_cell('["a", 1, null]', "S", "c") == ScalarArray(("a", 1.0, None))

    def test_object_cell(self) -> None:
        """JSON objects are kept as canonical JSON text."""
        assert decode_cell('{"b": 1, "a": 2}', "S", "c") == Scalar('{"a":2,"b":1}')
