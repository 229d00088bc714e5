"""Serialize graph nodes as RDF.

Example:
    from graphsync.adapters.rdf import RdfFormat, RdfWriter

    writer = RdfWriter()
    writer.add_nodes(nodes)
    turtle = writer.serialize(RdfFormat.TURTLE)
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable
from pathlib import Path

from rdflib import BNode, Dataset, Graph, Literal, URIRef

from graphsync.adapters.rdf.ontology import BLANK_NODE_PREFIX, RDF, XSD, RdfFormat
from graphsync.core.model import (
    Node,
    ObjectRef,
    PropertyValue,
    RefArray,
    Scalar,
    ScalarArray,
    ScalarValue,
    sort_nodes,
)
from graphsync.errors import RdfError

logger = logging.getLogger(__name__)

_IRI = re.compile(r'^[A-Za-z][A-Za-z0-9+.\-]*:[^\s<>"{}|^`\\]*$')
_BLANK_LABEL = re.compile(r"^[A-Za-z0-9_](?:[A-Za-z0-9_.\-]*[A-Za-z0-9_\-])?$")

Subject = URIRef | BNode


def to_term(identifier: str) -> Subject:
    """Convert a node identifier to an rdflib term.

    Raises:
        RdfError: If the identifier is neither an absolute IRI nor a valid
            ``_:`` blank node label
    """
    if identifier.startswith(BLANK_NODE_PREFIX):
        label = identifier[len(BLANK_NODE_PREFIX) :]
        if not _BLANK_LABEL.match(label):
            raise RdfError(f"invalid blank node identifier '{identifier}'")
        return BNode(label)
    if not _IRI.match(identifier):
        raise RdfError(f"invalid IRI '{identifier}': expected an absolute IRI or blank node")
    return URIRef(identifier)


def to_literal(value: ScalarValue) -> Literal | None:
    """Convert a scalar to an RDF literal; ``None`` has no RDF form."""
    if value is None:
        return None
    if isinstance(value, bool):
        return Literal(value, datatype=XSD.boolean)
    if isinstance(value, float):
        if math.isnan(value):
            return Literal("NaN", datatype=XSD.double, normalize=False)
        if math.isinf(value):
            lexical = "INF" if value > 0 else "-INF"
            return Literal(lexical, datatype=XSD.double, normalize=False)
        return Literal(value, datatype=XSD.double)
    if isinstance(value, str):
        return Literal(value)
    raise TypeError(f"unsupported scalar value: {value!r}")


class RdfWriter:
    """Accumulates nodes into an rdflib ``Dataset``.

    Attributes:
        dataset: The dataset holding every quad added so far
    """

    def __init__(self) -> None:
        self.dataset = Dataset()
        self._has_named_graphs = False

    def add_nodes(self, nodes: Iterable[Node]) -> None:
        for node in sort_nodes(nodes):
            self.add_node(node)

    def add_node(self, node: Node) -> None:
        subject = to_term(node.id)
        graph = self._graph_for(node.graph)

        for type_name in node.sorted_types():
            graph.add((subject, RDF.type, to_term(type_name)))

        for predicate, value in node.properties.items():
            predicate_term = to_term(predicate)
            if isinstance(predicate_term, BNode):
                raise RdfError(f"invalid predicate '{predicate}': blank nodes cannot be predicates")
            for obj in _objects(value):
                graph.add((subject, predicate_term, obj))

    def serialize(self, format: RdfFormat = RdfFormat.TURTLE) -> str:
        """Serialize the accumulated quads.

        Raises:
            RdfError: If named graphs are present and ``format`` only
                carries triples
        """
        if format.supports_graphs:
            return self.dataset.serialize(format=format.value)
        if self._has_named_graphs:
            raise RdfError(
                f"format '{format.value}' cannot represent named graphs; "
                f"use N-Quads, TriG or JSON-LD"
            )
        triples = Graph()
        for triple in self.dataset.default_context:
            triples.add(triple)
        return triples.serialize(format=format.value)

    def _graph_for(self, name: str | None) -> Graph:
        if name is None:
            return self.dataset.default_context
        self._has_named_graphs = True
        return self.dataset.graph(to_term(name))


def _objects(value: PropertyValue) -> list[Subject | Literal]:
    if isinstance(value, Scalar):
        literal = to_literal(value.value)
        return [] if literal is None else [literal]
    if isinstance(value, ObjectRef):
        return [to_term(value.target)]
    if isinstance(value, ScalarArray):
        literals = (to_literal(item) for item in value.items)
        return [literal for literal in literals if literal is not None]
    if isinstance(value, RefArray):
        return [to_term(target) for target in value.targets]
    raise TypeError(f"unsupported property value: {value!r}")


def serialize_rdf(nodes: Iterable[Node], format: RdfFormat = RdfFormat.TURTLE) -> str:
    """Serialize nodes to an RDF string in ``format``."""
    nodes = list(nodes)
    writer = RdfWriter()
    writer.add_nodes(nodes)
    output = writer.serialize(format)
    logger.debug("Serialized %d nodes as %s", len(nodes), format.value)
    return output


def write_rdf(path: str | Path, nodes: Iterable[Node], format: RdfFormat) -> None:
    """Serialize nodes and write the result to ``path`` as UTF-8."""
    Path(path).write_text(serialize_rdf(nodes, format), encoding="utf-8")
