"""Parse RDF into graph nodes.

Each quad ``(subject, predicate, object, graph)`` contributes to the node
``(graph, subject)``. Repeated predicates are promoted to arrays; a value of
the other kind (literal versus reference) replaces what was stored before.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from rdflib import BNode, Dataset, Graph, Literal, URIRef
from rdflib.graph import DATASET_DEFAULT_GRAPH_ID
from rdflib.term import Node as RdfTerm

from graphsync.adapters.rdf.ontology import (
    BLANK_NODE_PREFIX,
    NUMERIC_DATATYPES,
    RDF,
    XSD,
    RdfFormat,
    resolve_format,
)
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
from graphsync.errors import InvalidLiteralError, RdfError

logger = logging.getLogger(__name__)

Quad = tuple[RdfTerm, RdfTerm, RdfTerm, RdfTerm | None]


def parse_rdf(data: str | bytes, format: RdfFormat) -> list[Node]:
    """Parse RDF text into a sorted list of nodes.

    Raises:
        RdfError: If rdflib rejects the input
        InvalidLiteralError: If a numeric literal has an invalid lexical form
    """
    accumulator = NodeAccumulator()
    for subject, predicate, obj, graph in _quads(data, format):
        draft = accumulator.node(term_to_id(subject), graph_name(graph))
        if predicate == RDF.type:
            if isinstance(obj, URIRef):
                draft.add_type(str(obj))
            continue
        merge_value(draft, str(predicate), convert_object(obj))

    nodes = accumulator.finalize()
    logger.debug("Parsed %s input into %d nodes", format.value, len(nodes))
    return nodes


def read_rdf(path: str | Path, format: RdfFormat | None = None) -> list[Node]:
    """Read and parse an RDF file; the format defaults to the file extension."""
    resolved = resolve_format(path, format)
    return parse_rdf(Path(path).read_bytes(), resolved)


def _quads(data: str | bytes, format: RdfFormat) -> Iterator[Quad]:
    target: Graph = Dataset() if format.supports_graphs else Graph()
    try:
        parsed = target.parse(data=data, format=format.value)
    except Exception as e:
        raise RdfError(f"failed to parse {format.value} input: {e}") from e

    if isinstance(target, Dataset):
        # Unlabelled triples land in the graph returned by parse().
        defaults = {
            DATASET_DEFAULT_GRAPH_ID,
            target.default_context.identifier,
            parsed.identifier,
        }
        for context in target.contexts():
            name = None if context.identifier in defaults else context.identifier
            for subject, predicate, obj in sorted(context, key=_triple_key):
                yield subject, predicate, obj, name
    else:
        for subject, predicate, obj in sorted(target, key=_triple_key):
            yield subject, predicate, obj, None


def _triple_key(triple: tuple[RdfTerm, RdfTerm, RdfTerm]) -> tuple[str, ...]:
    return tuple(term.n3() for term in triple)


def term_to_id(term: RdfTerm) -> str:
    """Return the node identifier for a subject or object term."""
    if isinstance(term, BNode):
        return f"{BLANK_NODE_PREFIX}{term}"
    return str(term)


def graph_name(term: RdfTerm | None) -> str | None:
    return None if term is None else term_to_id(term)


def convert_object(obj: RdfTerm) -> PropertyValue:
    if isinstance(obj, Literal):
        return Scalar(literal_value(obj))
    return ObjectRef(term_to_id(obj))


def literal_value(literal: Literal) -> ScalarValue:
    """Map an RDF literal onto a scalar.

    Language-tagged strings become ``"value@lang"``; booleans and the
    integer, decimal and double datatypes become Python values; everything
    else keeps its lexical form.
    """
    lexical = str(literal)
    if literal.language:
        return f"{lexical}@{literal.language}"
    datatype = str(literal.datatype) if literal.datatype is not None else None
    if datatype == str(XSD.boolean):
        return lexical.strip() in ("true", "1")
    if datatype in NUMERIC_DATATYPES:
        try:
            return float(lexical)
        except ValueError as e:
            raise InvalidLiteralError(lexical, datatype) from e
    return lexical


def merge_value(draft: NodeDraft, predicate: str, value: PropertyValue) -> None:
    """Merge a newly observed value with cardinality promotion."""
    existing = draft.get_property(predicate)
    if existing is None:
        draft.insert_property(predicate, value)
        return

    if isinstance(value, Scalar):
        if isinstance(existing, Scalar):
            merged: PropertyValue = ScalarArray((existing.value, value.value))
        elif isinstance(existing, ScalarArray):
            merged = existing.append(value.value)
        else:
            merged = value
    elif isinstance(value, ObjectRef):
        if isinstance(existing, ObjectRef):
            merged = RefArray((existing.target, value.target))
        elif isinstance(existing, RefArray):
            merged = existing.append(value.target)
        else:
            merged = value
    else:
        raise TypeError(f"unsupported property value: {value!r}")
    draft.insert_property(predicate, merged)
