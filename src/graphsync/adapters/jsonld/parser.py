"""Parse JSON-LD documents into graph nodes.

The parser walks the document recursively, threading the active context
through every object. Node identity is merged in a ``NodeAccumulator`` so
that a node described in several places ends up as a single ``Node``.
"""

from __future__ import annotations

import logging
from typing import Any

import orjson

from graphsync.adapters.jsonld.context import (
    EMPTY_CONTEXT,
    ActiveContext,
    is_absolute_iri,
    json_kind,
)
from graphsync.core.canonicalize import canonical_bytes, surrogate_id
from graphsync.core.model import (
    Node,
    NodeAccumulator,
    NodeDraft,
    NodeId,
    ObjectRef,
    PropertyValue,
    RefArray,
    Scalar,
    ScalarArray,
    ScalarValue,
)
from graphsync.errors import JsonLdError

logger = logging.getLogger(__name__)

# Keys of a graph container that do not make it a node of its own.
_CONTAINER_KEYS = frozenset({"@id", "@graph", "@context"})


def parse_document(document: Any) -> list[Node]:
    """Parse a decoded JSON-LD document into a sorted list of nodes.

    Args:
        document: A JSON object or array, as returned by ``loads_document``

    Returns:
        Nodes sorted by ``(graph, id)``

    Raises:
        JsonLdError: If the document is not a JSON-LD object/array or any
            part of it is malformed
    """
    parser = _DocumentParser()
    if isinstance(document, list):
        parser.parse_entries(document, EMPTY_CONTEXT, None)
    elif isinstance(document, dict):
        parser.parse_object(document, EMPTY_CONTEXT, None)
    else:
        raise JsonLdError(f"expected JSON-LD object or array, found {json_kind(document)}")

    nodes = parser.accumulator.finalize()
    logger.debug("Parsed JSON-LD document into %d nodes", len(nodes))
    return nodes


class _DocumentParser:
    def __init__(self) -> None:
        self.accumulator = NodeAccumulator()

    def parse_entries(self, entries: list[Any], context: ActiveContext, graph: str | None) -> None:
        for entry in entries:
            if not isinstance(entry, dict):
                raise JsonLdError(f"expected JSON object for node, found {json_kind(entry)}")
            self.parse_object(entry, context, graph)

    def parse_object(
        self, obj: dict[str, Any], context: ActiveContext, graph: str | None
    ) -> NodeId | None:
        """Parse one object; return the id of the node it registers, if any."""
        if "@context" in obj:
            context = context.derive(obj["@context"])

        if "@graph" in obj:
            graph_name = graph
            raw_id = obj.get("@id")
            if raw_id is not None:
                if not isinstance(raw_id, str):
                    raise JsonLdError(f"invalid @id: expected string, found {json_kind(raw_id)}")
                if raw_id:
                    graph_name = context.expand_id(raw_id)

            entries = obj["@graph"]
            if isinstance(entries, dict):
                entries = [entries]
            elif not isinstance(entries, list):
                raise JsonLdError(
                    f"invalid @graph: expected array or object, found {json_kind(entries)}"
                )
            self.parse_entries(entries, context, graph_name)

            if set(obj) - _CONTAINER_KEYS:
                return self._parse_node(obj, context, graph)
            return None

        if not set(obj) - {"@context"}:
            return None
        return self._parse_node(obj, context, graph)

    def _parse_node(self, obj: dict[str, Any], context: ActiveContext, graph: str | None) -> NodeId:
        node_id = self._node_id(obj, context)
        draft = self.accumulator.node(node_id, graph)

        if "@type" in obj:
            _apply_types(draft, obj["@type"], context)

        for key, value in obj.items():
            if key.startswith("@"):
                continue
            predicate = context.expand(key)
            if predicate.startswith("@"):
                continue
            draft.insert_property(predicate, self._property_value(value, predicate, context, graph))
        return node_id

    def _node_id(self, obj: dict[str, Any], context: ActiveContext) -> NodeId:
        raw_id = obj.get("@id")
        if raw_id is None or raw_id == "":
            try:
                return surrogate_id(obj)
            except orjson.JSONEncodeError as e:
                raise JsonLdError(f"cannot derive identifier for anonymous object: {e}") from e
        if not isinstance(raw_id, str):
            raise JsonLdError(f"invalid @id: expected string, found {json_kind(raw_id)}")
        return context.expand_id(raw_id)

    def _property_value(
        self, value: Any, predicate: str, context: ActiveContext, graph: str | None
    ) -> PropertyValue:
        if isinstance(value, list):
            return self._array_value(value, predicate, context, graph)

        if isinstance(value, dict):
            for wrapper in ("@list", "@set"):
                if wrapper in value:
                    inner = value[wrapper]
                    if isinstance(inner, list):
                        return self._array_value(inner, predicate, context, graph)
                    return self._property_value(inner, predicate, context, graph)
            if "@value" in value:
                return Scalar(_value_object(value))
            if not value:
                return Scalar("{}")
            return ObjectRef(self._reference(value, context, graph))

        if isinstance(value, str) and (
            context.is_id_coerced(predicate) or is_absolute_iri(value)
        ):
            return ObjectRef(context.expand_id(value))

        return Scalar(_literal(value))

    def _reference(self, obj: dict[str, Any], context: ActiveContext, graph: str | None) -> NodeId:
        if "@id" in obj:
            raw_id = obj["@id"]
            if not isinstance(raw_id, str):
                raise JsonLdError("object reference missing @id")
            if set(obj) - {"@id", "@context"}:
                return self._embedded(obj, context, graph)
            if "@context" in obj:
                context = context.derive(obj["@context"])
            return context.expand_id(raw_id)
        return self._embedded(obj, context, graph)

    def _embedded(self, obj: dict[str, Any], context: ActiveContext, graph: str | None) -> NodeId:
        node_id = self.parse_object(obj, context, graph)
        if node_id is None:
            if "@graph" in obj and isinstance(obj.get("@id"), str) and obj["@id"]:
                local = context.derive(obj["@context"]) if "@context" in obj else context
                return local.expand_id(obj["@id"])
            raise JsonLdError("an anonymous @graph object cannot be used as a property value")
        return node_id

    def _array_value(
        self, values: list[Any], predicate: str, context: ActiveContext, graph: str | None
    ) -> PropertyValue:
        scalars: list[ScalarValue] = []
        targets: list[NodeId] = []

        for entry in values:
            if isinstance(entry, list):
                scalars.append(_json_text(entry))
                continue
            item = self._property_value(entry, predicate, context, graph)
            if isinstance(item, Scalar):
                scalars.append(item.value)
            elif isinstance(item, ObjectRef):
                targets.append(item.target)
            elif isinstance(item, ScalarArray):
                scalars.extend(item.items)
            elif isinstance(item, RefArray):
                targets.extend(item.targets)
            else:
                raise TypeError(f"unsupported property value: {item!r}")

        if scalars and targets:
            raise JsonLdError(
                f"mixed arrays of literals and object references are not supported "
                f"(predicate '{predicate}')"
            )
        if targets:
            return RefArray(tuple(targets))
        return ScalarArray(tuple(scalars))


def _apply_types(draft: NodeDraft, raw: Any, context: ActiveContext) -> None:
    if isinstance(raw, str):
        entries = [raw]
    elif isinstance(raw, list):
        entries = raw
    else:
        raise JsonLdError(f"invalid @type entry: expected string or array, found {json_kind(raw)}")

    for entry in entries:
        if not isinstance(entry, str):
            raise JsonLdError(f"invalid @type entry: expected string, found {json_kind(entry)}")
        draft.add_type(context.expand(entry))


def _value_object(obj: dict[str, Any]) -> ScalarValue:
    value = obj["@value"]
    language = obj.get("@language")
    if isinstance(value, str) and isinstance(language, str) and language:
        return f"{value}@{language}"
    return _literal(value)


def _literal(value: Any) -> ScalarValue:
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, (int, float)):
        return float(value)
    return _json_text(value)


def _json_text(value: Any) -> str:
    try:
        return canonical_bytes(value).decode("utf-8")
    except orjson.JSONEncodeError as e:
        raise JsonLdError(f"cannot encode value as JSON: {e}") from e

