"""JSON-LD codec.

Parses JSON-LD documents into nodes and serializes nodes back, optionally
compacting against a user-supplied context.

Example:
    from graphsync.adapters.jsonld import loads_document, parse_document, serialize_nodes

    nodes = parse_document(loads_document(path.read_bytes()))
    document = serialize_nodes(nodes, context={"@vocab": "https://schema.org/"})
"""

from graphsync.adapters.jsonld.context import EMPTY_CONTEXT, ActiveContext, is_absolute_iri
from graphsync.adapters.jsonld.parser import parse_document
from graphsync.adapters.jsonld.serializer import (
    compact_document,
    dumps_document,
    loads_document,
    nodes_to_document,
    serialize_nodes,
)

__all__ = [
    # Context
    "ActiveContext",
    "EMPTY_CONTEXT",
    "is_absolute_iri",
    # Parser
    "parse_document",
    # Serializer
    "compact_document",
    "dumps_document",
    "loads_document",
    "nodes_to_document",
    "serialize_nodes",
]
