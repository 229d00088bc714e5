"""Graph nodes and the accumulator codecs use while parsing."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from graphsync.core.model.values import NodeId, PropertyValue

NodeKey = tuple[str | None, NodeId]


@dataclass(frozen=True)
class Node:
    """An entity of the property graph.

    Identity is the pair ``(graph, id)``: the same identifier in two named
    graphs denotes two distinct nodes. Properties are stored sorted by
    predicate so that equal nodes also iterate identically.

    Attributes:
        id: Node identifier (IRI-shaped, URN-shaped or ``_:`` blank label)
        graph: Name of the owning graph, ``None`` for the default graph
        types: Type identifiers, without duplicates
        properties: Read-only predicate to value mapping
    """

    id: NodeId
    graph: str | None = None
    types: frozenset[str] = field(default_factory=frozenset)
    properties: Mapping[str, PropertyValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "types", frozenset(self.types))
        properties = MappingProxyType(dict(sorted(self.properties.items())))
        object.__setattr__(self, "properties", properties)

    @property
    def key(self) -> NodeKey:
        return (self.graph, self.id)

    def sorted_types(self) -> list[str]:
        return sorted(self.types)

    def with_graph(self, graph: str | None) -> Node:
        """Return a copy of this node owned by ``graph``."""
        return replace(self, graph=graph)

    def with_property(self, predicate: str, value: PropertyValue) -> Node:
        """Return a copy with ``predicate`` set to ``value`` (last write wins)."""
        properties = dict(self.properties)
        properties[predicate] = value
        return replace(self, properties=properties)


def node_sort_key(node: Node) -> tuple[bool, str, str]:
    """Sort key placing the default graph first, then graph name, then id."""
    return (node.graph is not None, node.graph or "", node.id)


def sort_nodes(nodes: Iterable[Node]) -> list[Node]:
    return sorted(nodes, key=node_sort_key)


class NodeDraft:
    """Mutable node under construction inside a ``NodeAccumulator``."""

    __slots__ = ("id", "graph", "types", "properties")

    def __init__(self, node_id: NodeId, graph: str | None = None):
        self.id = node_id
        self.graph = graph
        self.types: set[str] = set()
        self.properties: dict[str, PropertyValue] = {}

    def add_type(self, type_name: str) -> None:
        self.types.add(type_name)

    def set_graph(self, graph: str | None) -> None:
        self.graph = graph

    def insert_property(self, predicate: str, value: PropertyValue) -> None:
        self.properties[predicate] = value

    def get_property(self, predicate: str) -> PropertyValue | None:
        return self.properties.get(predicate)

    def freeze(self) -> Node:
        return Node(
            id=self.id,
            graph=self.graph,
            types=frozenset(self.types),
            properties=self.properties,
        )


class NodeAccumulator:
    """Collects nodes keyed by ``(graph, id)`` during a single parse pass.

    A later observation of an existing key enriches the same draft. The
    accumulator never leaves the codec that owns it: ``finalize`` hands out
    an immutable, sorted list instead.
    """

    def __init__(self) -> None:
        self._drafts: dict[NodeKey, NodeDraft] = {}

    def node(self, node_id: NodeId, graph: str | None = None) -> NodeDraft:
        """Return the draft for ``(graph, node_id)``, creating it if needed."""
        key = (graph, node_id)
        draft = self._drafts.get(key)
        if draft is None:
            draft = NodeDraft(node_id, graph)
            self._drafts[key] = draft
        return draft

    def __contains__(self, key: object) -> bool:
        return key in self._drafts

    def __len__(self) -> int:
        return len(self._drafts)

    def finalize(self) -> list[Node]:
        return sort_nodes(draft.freeze() for draft in self._drafts.values())
