"""Tests for JSON-LD serialization and compaction."""

import math

import pytest

from graphsync.adapters.jsonld import (
    dumps_document,
    loads_document,
    nodes_to_document,
    parse_document,
    serialize_nodes,
)
from graphsync.adapters.jsonld.serializer import value_to_json
from graphsync.core.model import Node, ObjectRef, RefArray, Scalar, ScalarArray, sort_nodes
from graphsync.errors import JsonLdError

SCHEMA = "https://schema.org/"


class TestExpandedDocument:
    """Test the expanded form written without a context."""

    def test_person_nodes(self, person_nodes: list[Node]) -> None:
        """Each node becomes one @graph entry."""
        assert nodes_to_document(person_nodes) == {
            "@graph": [
                {
                    "@id": "ex:1",
                    "@type": "ex:Person",
                    "ex:knows": [{"@id": "ex:2"}],
                    "ex:name": "Alice",
                },
                {"@id": "ex:2", "@type": "ex:Person", "ex:name": "Bob"},
            ]
        }

    def test_entries_sorted_by_id(self) -> None:
        """Input order does not affect output order."""
        document = nodes_to_document([Node(id="b"), Node(id="a")])
        assert [entry["@id"] for entry in document["@graph"]] == ["a", "b"]

    def test_multiple_types_sorted(self) -> None:
        """Several types are written as a sorted array."""
        [entry] = nodes_to_document([Node(id="a", types=frozenset({"T", "S"}))])["@graph"]
        assert entry["@type"] == ["S", "T"]

    def test_untyped_node_has_no_type_key(self) -> None:
        """@type is omitted for untyped nodes."""
        [entry] = nodes_to_document([Node(id="a")])["@graph"]
        assert entry == {"@id": "a"}

    def test_empty_graph(self) -> None:
        """No nodes gives an empty @graph."""
        assert nodes_to_document([]) == {"@graph": []}

    def test_named_graph_container(self) -> None:
        """Named-graph nodes are grouped under a container."""
        document = nodes_to_document([Node(id="a", graph="g"), Node(id="b")])
        assert document == {"@graph": [{"@id": "b"}, {"@id": "g", "@graph": [{"@id": "a"}]}]}

    def test_named_graph_merges_with_default_node(self) -> None:
        """A default node named like the graph holds the container."""
        nodes = [Node(id="a", graph="g"), Node(id="g", properties={"label": Scalar("G")})]
        assert nodes_to_document(nodes) == {
            "@graph": [{"@id": "g", "label": "G", "@graph": [{"@id": "a"}]}]
        }

    def test_named_graph_reparses(self) -> None:
        """Containers parse back to the same graph membership."""
        nodes = [Node(id="a", graph="g", properties={"p": Scalar("v")}), Node(id="b")]
        assert parse_document(nodes_to_document(nodes)) == sort_nodes(nodes)


class TestValueToJson:
    """Test property value encoding."""

    def test_variants(self) -> None:
        """Every variant has a JSON form."""
        assert value_to_json(Scalar("x")) == "x"
        assert value_to_json(Scalar(None)) is None
        assert value_to_json(ObjectRef("b")) == {"@id": "b"}
        assert value_to_json(ScalarArray((1.0, True))) == [1.0, True]
        assert value_to_json(RefArray(("b", "c"))) == [{"@id": "b"}, {"@id": "c"}]

    def test_non_finite_number_becomes_null(self) -> None:
        """NaN has no JSON form."""
        assert value_to_json(Scalar(math.nan)) is None

    def test_unknown_variant(self) -> None:
        """Only property values are accepted."""
        with pytest.raises(TypeError):
            value_to_json("x")  # type: ignore[arg-type]


class TestCompaction:
    """Test compaction against a user context."""

    def test_without_context_is_expanded(self, iri_nodes: list[Node]) -> None:
        """No context means no compaction."""
        assert serialize_nodes(iri_nodes) == nodes_to_document(iri_nodes)

    def test_vocab_context(self, iri_nodes: list[Node]) -> None:
        """Predicates and types are compacted through @vocab."""
        context = {"@vocab": SCHEMA, "ex": "https://example.com/"}
        document = serialize_nodes(iri_nodes, context)
        assert document["@context"] == context
        alice = next(entry for entry in document["@graph"] if entry.get("name") == "Alice")
        assert alice["@type"] == "Person"
        assert "https://schema.org/name" not in alice

    def test_prefix_context_with_compact_identifiers(self, person_nodes: list[Node]) -> None:
        """Compact IRIs are expanded through the context before compaction."""
        context = {"ex": "https://example.com/"}
        document = serialize_nodes(person_nodes, context)
        entries = {entry["@id"]: entry for entry in document["@graph"]}
        assert entries["ex:1"]["@type"] == "ex:Person"
        assert entries["ex:1"]["ex:name"] == "Alice"
        assert entries["ex:1"]["ex:knows"] == {"@id": "ex:2"}
        assert entries["ex:2"]["ex:name"] == "Bob"
        reparsed = {node.id: node for node in parse_document(document)}
        assert reparsed["https://example.com/1"].types == {"https://example.com/Person"}

    def test_wrapped_context_unwrapped(self, iri_nodes: list[Node]) -> None:
        """A context file with a top-level @context key is accepted."""
        context = {"@vocab": SCHEMA}
        assert serialize_nodes(iri_nodes, {"@context": context})["@context"] == context

    def test_compacted_output_reparses(self, iri_nodes: list[Node]) -> None:
        """The compacted document carries its context and parses back."""
        document = serialize_nodes(iri_nodes, {"@vocab": SCHEMA})
        assert parse_document(document) == iri_nodes

    def test_remote_context_refused(self, iri_nodes: list[Node]) -> None:
        """Contexts are never fetched."""
        with pytest.raises(JsonLdError):
            serialize_nodes(iri_nodes, "https://example.com/context.jsonld")


class TestDocumentBytes:
    """Test JSON encoding helpers."""

    def test_indented(self) -> None:
        """Default output is indented."""
        assert dumps_document({"a": [1]}) == b'{\n  "a": [\n    1\n  ]\n}'

    def test_compact(self) -> None:
        """indent=0 gives compact output."""
        assert dumps_document({"a": [1]}, indent=0) == b'{"a":[1]}'

    def test_loads_accepts_str(self) -> None:
        """Text input is decoded too."""
        assert loads_document('{"a": 1}') == {"a": 1}
