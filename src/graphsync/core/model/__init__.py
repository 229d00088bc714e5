"""Property-graph node model shared by every codec.

Nodes are immutable values; codecs build them through ``NodeAccumulator``
and hand sorted ``list[Node]`` results to each other.
"""

from graphsync.core.model.node import (
    Node,
    NodeAccumulator,
    NodeDraft,
    NodeKey,
    node_sort_key,
    sort_nodes,
)
from graphsync.core.model.values import (
    ArrayValue,
    NodeId,
    ObjectRef,
    PropertyValue,
    RefArray,
    Scalar,
    ScalarArray,
    ScalarValue,
    normalize_scalar,
    scalar_kind,
    scalar_to_json,
)

__all__ = [
    # Nodes
    "Node",
    "NodeAccumulator",
    "NodeDraft",
    "NodeKey",
    "node_sort_key",
    "sort_nodes",
    # Values
    "ArrayValue",
    "NodeId",
    "ObjectRef",
    "PropertyValue",
    "RefArray",
    "Scalar",
    "ScalarArray",
    "ScalarValue",
    "normalize_scalar",
    "scalar_kind",
    "scalar_to_json",
]
