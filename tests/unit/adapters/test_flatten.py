"""Tests for flattening nodes into workbook tables."""

from graphsync.adapters.table import ENTITIES_SHEET, METADATA_SHEET, UNTYPED_MARKER, build_workbook
from graphsync.core.model import Node, ObjectRef, RefArray, Scalar, ScalarArray


class TestPersonExample:
    """Test the layout produced for the two-person graph."""

    def test_sheet_order(self, person_nodes: list[Node]) -> None:
        """Reserved sheets come first, generated sheets sorted by name."""
        workbook = build_workbook(person_nodes)
        assert workbook.sheet_names == [
            ENTITIES_SHEET,
            METADATA_SHEET,
            "ex_Person",
            "ex_Person__ex_knows",
        ]

    def test_entities(self, person_nodes: list[Node]) -> None:
        """One row per node and type."""
        entities = build_workbook(person_nodes).get(ENTITIES_SHEET)
        assert entities is not None
        assert entities.columns == ["id", "type"]
        assert entities.rows == [["ex:1", "ex:Person"], ["ex:2", "ex:Person"]]

    def test_metadata(self, person_nodes: list[Node]) -> None:
        """Metadata describes the type sheet and the child sheet."""
        metadata = build_workbook(person_nodes).get(METADATA_SHEET)
        assert metadata is not None
        assert metadata.columns == ["kind", "sheet", "type", "predicate"]
        assert metadata.rows == [
            ["type", "ex_Person", "ex:Person", None],
            ["child", "ex_Person__ex_knows", "ex:Person", "ex:knows"],
        ]

    def test_type_sheet(self, person_nodes: list[Node]) -> None:
        """Reference arrays are left out of type sheets."""
        person = build_workbook(person_nodes).get("ex_Person")
        assert person is not None
        assert person.columns == ["id", "ex:name"]
        assert person.rows == [["ex:1", "Alice"], ["ex:2", "Bob"]]

    def test_child_sheet(self, person_nodes: list[Node]) -> None:
        """Each edge of a reference array is one child row."""
        knows = build_workbook(person_nodes).get("ex_Person__ex_knows")
        assert knows is not None
        assert knows.columns == ["ParentId", "ex:knowsId"]
        assert knows.rows == [["ex:1", "ex:2"]]


class TestTypeSheets:
    """Test type sheet columns and cells."""

    def test_columns_are_union_of_predicates(self) -> None:
        """Missing values are empty cells."""
        nodes = [
            Node(id="a", types=frozenset({"T"}), properties={"x": Scalar("1x")}),
            Node(id="b", types=frozenset({"T"}), properties={"y": Scalar(2.0)}),
        ]
        table = build_workbook(nodes).get("T")
        assert table is not None
        assert table.columns == ["id", "x", "y"]
        assert table.rows == [["a", "1x", None], ["b", None, 2.0]]

    def test_single_reference_column(self) -> None:
        """Single references become <predicate>Id columns."""
        nodes = [Node(id="a", types=frozenset({"T"}), properties={"spouse": ObjectRef("b")})]
        table = build_workbook(nodes).get("T")
        assert table is not None
        assert table.columns == ["id", "spouseId"]
        assert table.rows == [["a", "b"]]

    def test_scalar_array_as_json(self) -> None:
        """Scalar arrays are stored as JSON text."""
        nodes = [Node(id="a", types=frozenset({"T"}), properties={"tags": ScalarArray(("x", 1.0))})]
        table = build_workbook(nodes).get("T")
        assert table is not None
        assert table.rows == [["a", '["x",1.0]']]

    def test_untyped_nodes(self) -> None:
        """Nodes without types go to the untyped sheet."""
        workbook = build_workbook([Node(id="a", properties={"p": Scalar("v")})])
        entities = workbook.get(ENTITIES_SHEET)
        assert entities is not None
        assert entities.rows == [["a", UNTYPED_MARKER]]
        assert workbook.get(UNTYPED_MARKER) is not None

    def test_multi_typed_node_in_every_type_sheet(self) -> None:
        """A node appears in each of its type sheets."""
        node = Node(id="a", types=frozenset({"A", "B"}), properties={"p": Scalar("v")})
        workbook = build_workbook([node])
        for sheet in ("A", "B"):
            table = workbook.get(sheet)
            assert table is not None
            assert table.rows == [["a", "v"]]

    def test_type_names_colliding_by_case(self) -> None:
        """Types differing only by case get distinct sheets."""
        nodes = [
            Node(id="a", types=frozenset({"Person"})),
            Node(id="b", types=frozenset({"person"})),
        ]
        metadata = build_workbook(nodes).get(METADATA_SHEET)
        assert metadata is not None
        assert [row[1] for row in metadata.rows] == ["Person", "person_1"]

    def test_type_named_like_reserved_sheet(self) -> None:
        """A type called Entities does not replace the reserved sheet."""
        workbook = build_workbook([Node(id="a", types=frozenset({"Entities"}))])
        assert workbook.sheet_names == [ENTITIES_SHEET, METADATA_SHEET, "Entities_1"]


class TestChildSheets:
    """Test reference array edges."""

    def test_edges_only_under_first_type(self) -> None:
        """Multi-typed nodes contribute edges once."""
        node = Node(id="a", types=frozenset({"B", "A"}), properties={"k": RefArray(("x", "y"))})
        workbook = build_workbook([node])
        metadata = workbook.get(METADATA_SHEET)
        assert metadata is not None
        assert [row for row in metadata.rows if row[0] == "child"] == [["child", "A__k", "A", "k"]]
        child = workbook.get("A__k")
        assert child is not None
        assert child.rows == [["a", "x"], ["a", "y"]]

    def test_edge_order_follows_array_order(self) -> None:
        """Edges keep array order within a parent."""
        node = Node(id="a", types=frozenset({"T"}), properties={"k": RefArray(("z", "b", "m"))})
        child = build_workbook([node]).get("T__k")
        assert child is not None
        assert [row[1] for row in child.rows] == ["z", "b", "m"]


class TestNamedGraphColumns:
    """Test graph columns when named graphs are present."""

    def test_graph_columns_added(self) -> None:
        """Entities gains graph; type and child sheets gain @graph."""
        nodes = [
            Node(id="a", types=frozenset({"T"}), properties={"k": RefArray(("b",))}),
            Node(id="b", graph="g", types=frozenset({"T"}), properties={"p": Scalar("v")}),
        ]
        workbook = build_workbook(nodes)

        entities = workbook.get(ENTITIES_SHEET)
        assert entities is not None
        assert entities.columns == ["id", "type", "graph"]
        assert entities.rows == [["a", "T", None], ["b", "T", "g"]]

        table = workbook.get("T")
        assert table is not None
        assert table.columns == ["id", "@graph", "p"]
        assert table.rows == [["a", None, None], ["b", "g", "v"]]

        child = workbook.get("T__k")
        assert child is not None
        assert child.columns == ["ParentId", "kId", "@graph"]
        assert child.rows == [["a", "b", None]]

    def test_no_graph_columns_without_named_graphs(self, person_nodes: list[Node]) -> None:
        """Default-graph data keeps the plain layout."""
        for table in build_workbook(person_nodes).tables:
            assert "graph" not in table.columns
            assert "@graph" not in table.columns
