"""RDF codec.

Converts between the node model and RDF quad streams using rdflib.

Supported formats:
- Turtle (text/turtle)
- N-Triples (application/n-triples)
- N-Quads (application/n-quads)
- TriG (application/trig)
- JSON-LD (application/ld+json)

Example:
    from graphsync.adapters.rdf import RdfFormat, parse_rdf, serialize_rdf

    nodes = parse_rdf(path.read_text(), RdfFormat.TURTLE)
    nquads = serialize_rdf(nodes, RdfFormat.N_QUADS)
"""

from graphsync.adapters.rdf.ontology import (
    RDF_NAMESPACE,
    XSD_NAMESPACE,
    RdfFormat,
    resolve_format,
)
from graphsync.adapters.rdf.reader import parse_rdf, read_rdf
from graphsync.adapters.rdf.writer import RdfWriter, serialize_rdf, write_rdf

__all__ = [
    # Ontology
    "RDF_NAMESPACE",
    "XSD_NAMESPACE",
    "RdfFormat",
    "resolve_format",
    # Reader
    "parse_rdf",
    "read_rdf",
    # Writer
    "RdfWriter",
    "serialize_rdf",
    "write_rdf",
]
