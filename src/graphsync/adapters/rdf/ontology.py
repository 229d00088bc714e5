"""RDF vocabulary constants and supported serialization formats.

The node model maps onto RDF as follows:
- Node type → rdf:type (object property)
- Scalar string → plain literal
- Scalar number → xsd:double literal
- Scalar boolean → xsd:boolean literal
- Object reference → IRI or blank node
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Final

from rdflib import Namespace

from graphsync.errors import RdfError

# Standard namespaces
XSD_NAMESPACE: Final[str] = "http://www.w3.org/2001/XMLSchema#"
RDF_NAMESPACE: Final[str] = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"

# RDFLib namespace objects
XSD = Namespace(XSD_NAMESPACE)
RDF = Namespace(RDF_NAMESPACE)

# Prefix used for blank node identifiers in the node model
BLANK_NODE_PREFIX: Final[str] = "_:"

# Datatypes read back as numbers
NUMERIC_DATATYPES: Final[frozenset[str]] = frozenset(
    {str(XSD.integer), str(XSD.decimal), str(XSD.double)}
)


class RdfFormat(str, Enum):
    """Supported RDF serialization formats (values are rdflib plugin names)."""

    TURTLE = "turtle"
    N_TRIPLES = "nt"
    N_QUADS = "nquads"
    TRIG = "trig"
    JSON_LD = "json-ld"

    @property
    def supports_graphs(self) -> bool:
        """Whether the format can carry named graphs."""
        return self in (RdfFormat.N_QUADS, RdfFormat.TRIG, RdfFormat.JSON_LD)

    @classmethod
    def from_extension(cls, path: str | Path) -> RdfFormat:
        """Infer the format from a file extension.

        Raises:
            RdfError: If the extension is not a known RDF extension
        """
        suffix = Path(path).suffix.lower().lstrip(".")
        mapping = {
            "ttl": cls.TURTLE,
            "turtle": cls.TURTLE,
            "nt": cls.N_TRIPLES,
            "nq": cls.N_QUADS,
            "trig": cls.TRIG,
            "jsonld": cls.JSON_LD,
        }
        if suffix not in mapping:
            raise RdfError(f"cannot infer RDF format from extension of '{path}'")
        return mapping[suffix]

    @classmethod
    def from_name(cls, name: str) -> RdfFormat:
        """Get format from a command-line name (``turtle``, ``ntriples``...).

        Raises:
            RdfError: If the name is not supported
        """
        mapping = {
            "turtle": cls.TURTLE,
            "ntriples": cls.N_TRIPLES,
            "nquads": cls.N_QUADS,
            "trig": cls.TRIG,
            "jsonld": cls.JSON_LD,
        }
        key = name.strip().lower()
        if key not in mapping:
            raise RdfError(f"unsupported RDF format: {name}")
        return mapping[key]


def resolve_format(path: str | Path, explicit: RdfFormat | None = None) -> RdfFormat:
    """Return ``explicit`` when given, otherwise infer from ``path``."""
    if explicit is not None:
        return explicit
    return RdfFormat.from_extension(path)
