from __future__ import annotations

import uuid
from typing import Any

import orjson

ORJSON_OPTIONS = orjson.OPT_SORT_KEYS | orjson.OPT_NON_STR_KEYS

SURROGATE_NAMESPACE = uuid.NAMESPACE_OID

# Keys that do not contribute to the identity of a JSON-LD object.
_IGNORED_KEYS = frozenset({"@context", "@graph"})


def canonical_bytes(data: Any) -> bytes:
    """Return canonical JSON bytes (sorted keys, compact separators)."""
    return orjson.dumps(data, option=ORJSON_OPTIONS)


def surrogate_id(obj: dict[str, Any]) -> str:
    """Derive a deterministic ``urn:uuid`` identifier from an object's own content.

    ``@context`` and ``@graph`` are ignored, so two anonymous objects with the
    same properties receive the same identifier.
    """
    own = {key: value for key, value in obj.items() if key not in _IGNORED_KEYS}
    name = canonical_bytes(own).decode("utf-8")
    return f"urn:uuid:{uuid.uuid5(SURROGATE_NAMESPACE, name)}"
