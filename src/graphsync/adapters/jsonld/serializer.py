"""Serialize graph nodes as JSON-LD documents.

Nodes are first written in expanded form (full IRIs, one ``@graph`` entry per
node). When a context is supplied the expanded document is compacted with
``pyld``; otherwise it is returned as is.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import orjson
from pyld import jsonld

from graphsync.adapters.jsonld.context import EMPTY_CONTEXT, ActiveContext
from graphsync.core.model import (
    Node,
    ObjectRef,
    PropertyValue,
    RefArray,
    Scalar,
    ScalarArray,
    scalar_to_json,
    sort_nodes,
)
from graphsync.errors import JsonLdError

logger = logging.getLogger(__name__)


def serialize_nodes(nodes: Iterable[Node], context: Any = None) -> dict[str, Any]:
    """Serialize nodes to a JSON-LD document.

    Args:
        nodes: Nodes to serialize, in any order
        context: Optional user context (an object, with or without a wrapping
            ``@context`` key, or an array of objects)

    Returns:
        The expanded document, or its compaction against ``context``
    """
    document = nodes_to_document(nodes)
    if context is None:
        return document
    return compact_document(document, context)


def nodes_to_document(nodes: Iterable[Node]) -> dict[str, Any]:
    """Build the expanded JSON-LD document for ``nodes``."""
    default_entries: list[dict[str, Any]] = []
    graphs: dict[str, list[dict[str, Any]]] = {}

    for node in sort_nodes(nodes):
        entry = node_to_json(node)
        if node.graph is None:
            default_entries.append(entry)
        else:
            graphs.setdefault(node.graph, []).append(entry)

    by_id = {entry["@id"]: entry for entry in default_entries}
    for name in sorted(graphs):
        container = by_id.get(name)
        if container is None:
            container = {"@id": name}
            default_entries.append(container)
        container["@graph"] = graphs[name]

    return {"@graph": default_entries}


def node_to_json(node: Node) -> dict[str, Any]:
    entry: dict[str, Any] = {"@id": node.id}
    types = node.sorted_types()
    if len(types) == 1:
        entry["@type"] = types[0]
    elif types:
        entry["@type"] = types
    for predicate, value in node.properties.items():
        entry[predicate] = value_to_json(value)
    return entry


def value_to_json(value: PropertyValue) -> Any:
    if isinstance(value, Scalar):
        return scalar_to_json(value.value)
    if isinstance(value, ObjectRef):
        return {"@id": value.target}
    if isinstance(value, ScalarArray):
        return [scalar_to_json(item) for item in value.items]
    if isinstance(value, RefArray):
        return [{"@id": target} for target in value.targets]
    raise TypeError(f"unsupported property value: {value!r}")


def compact_document(document: dict[str, Any], context: Any) -> dict[str, Any]:
    """Compact an expanded document against a user context with ``pyld``."""
    if isinstance(context, dict) and "@context" in context:
        context = context["@context"]
    # pyld rejects compact IRIs whose prefix the context defines.
    expanded = _expand_entries(document["@graph"], EMPTY_CONTEXT.derive(context))
    try:
        compacted = jsonld.compact(
            {"@graph": expanded}, context, {"documentLoader": _refuse_remote}
        )
    except jsonld.JsonLdError as e:
        raise JsonLdError(f"JSON-LD compaction failed: {e}") from e
    logger.debug("Compacted JSON-LD document against user context")
    return compacted


def _expand_entries(entries: list[dict[str, Any]], ctx: ActiveContext) -> list[dict[str, Any]]:
    return [_expand_entry(entry, ctx) for entry in entries]


def _expand_entry(entry: dict[str, Any], ctx: ActiveContext) -> dict[str, Any]:
    expanded: dict[str, Any] = {}
    for key, value in entry.items():
        if key == "@id":
            expanded[key] = ctx.expand_id(value)
        elif key == "@type":
            expanded[key] = (
                [ctx.expand(t) for t in value] if isinstance(value, list) else ctx.expand(value)
            )
        elif key == "@graph":
            expanded[key] = _expand_entries(value, ctx)
        else:
            expanded[ctx.expand(key)] = _expand_value(value, ctx)
    return expanded


def _expand_value(value: Any, ctx: ActiveContext) -> Any:
    if isinstance(value, list):
        return [_expand_value(item, ctx) for item in value]
    if isinstance(value, dict) and "@id" in value:
        return {"@id": ctx.expand_id(value["@id"])}
    return value


def _refuse_remote(url: str, options: dict[str, Any] | None = None) -> Any:
    raise JsonLdError(f"remote context '{url}' is not supported")


def dumps_document(document: Any, indent: int = 2) -> bytes:
    """Encode a JSON-LD document; ``indent=0`` gives compact output."""
    option = orjson.OPT_INDENT_2 if indent else 0
    return orjson.dumps(document, option=option)


def loads_document(data: bytes | str) -> Any:
    """Decode JSON text, raising ``JsonLdError`` for malformed input."""
    try:
        return orjson.loads(data)
    except orjson.JSONDecodeError as e:
        raise JsonLdError(f"invalid JSON: {e}") from e
