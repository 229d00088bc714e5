"""Active context for JSON-LD term resolution.

The active context holds the vocabulary mapping (``@vocab``), the explicit
term map and the set of predicates declared with ``"@type": "@id"``. It is an
immutable value: each nested ``@context`` derives a new context from its
lexical parent, so changes never leak into sibling or ancestor objects.

Example:
    ctx = EMPTY_CONTEXT.derive({
        "@vocab": "https://schema.org/",
        "ex": "https://example.com/",
        "knows": {"@id": "https://schema.org/knows", "@type": "@id"},
    })

    ctx.expand("name")        # https://schema.org/name
    ctx.expand("ex:Person")   # https://example.com/Person
    ctx.is_id_coerced(ctx.expand("knows"))  # True
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from graphsync.errors import JsonLdError

_SCHEME_WITH_AUTHORITY = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")

# Keywords accepted inside a local context that carry no meaning here.
_IGNORED_CONTEXT_KEYWORDS = frozenset(
    {"@base", "@language", "@version", "@protected", "@propagate", "@direction"}
)


def is_absolute_iri(value: str) -> bool:
    """Return True when ``value`` already looks like an absolute identifier.

    Accepted shapes are blank node labels (``_:b0``), URNs (``urn:isbn:1``)
    and IRIs with an authority (``https://example.com/a``). Whitespace
    anywhere disqualifies the string. Compact IRIs such as ``ex:1`` and
    authority-less schemes such as ``mailto:`` are not absolute.
    """
    if not value or any(ch.isspace() for ch in value):
        return False
    if value.startswith("_:"):
        return len(value) > 2
    if value[:4].lower() == "urn:":
        return len(value) > 4
    return bool(_SCHEME_WITH_AUTHORITY.match(value))


@dataclass(frozen=True)
class ActiveContext:
    """Term-resolution state in force at one point of a JSON-LD document.

    Attributes:
        vocab: Vocabulary IRI prepended to bare terms, if any
        terms: Term to IRI mapping
        coerced_terms: Terms declared with ``"@type": "@id"``
    """

    vocab: str | None = None
    terms: Mapping[str, str] = field(default_factory=dict)
    coerced_terms: frozenset[str] = field(default_factory=frozenset)

    @property
    def id_coerced(self) -> frozenset[str]:
        """Expanded predicate IRIs whose string values are references."""
        return frozenset(self.terms[term] for term in self.coerced_terms)

    def derive(self, local: Any) -> ActiveContext:
        """Return a new context with ``local`` applied on top of this one.

        Args:
            local: The value of an ``@context`` key: an object, an array of
                objects, or ``null`` to reset to the empty context

        Raises:
            JsonLdError: If the local context is remote or malformed
        """
        if isinstance(local, list):
            derived = self
            for entry in local:
                derived = derived.derive(entry)
            return derived
        if local is None:
            return EMPTY_CONTEXT
        if isinstance(local, str):
            raise JsonLdError(f"remote context '{local}' is not supported")
        if not isinstance(local, dict):
            raise JsonLdError(
                f"invalid @context entry: expected object, array or null, found {json_kind(local)}"
            )
        return _apply_local_context(self, local)

    def expand(self, term: str) -> str:
        """Expand a property or type term to an IRI.

        Keywords and absolute identifiers are returned unchanged; then the
        explicit term map, a ``prefix:suffix`` compact IRI and ``@vocab`` are
        tried in that order. Unresolvable terms are returned as they are.
        """
        if term.startswith("@") or is_absolute_iri(term):
            return term
        if term in self.terms:
            return self.terms[term]
        prefix, sep, suffix = term.partition(":")
        if sep:
            if prefix in self.terms:
                return self.terms[prefix] + suffix
            return term
        if self.vocab is not None:
            return self.vocab + term
        return term

    def expand_id(self, value: str) -> str:
        """Expand a node identifier; only compact IRIs are rewritten."""
        if value.startswith("@") or is_absolute_iri(value):
            return value
        prefix, sep, suffix = value.partition(":")
        if sep and prefix in self.terms:
            return self.terms[prefix] + suffix
        return value

    def is_id_coerced(self, predicate: str) -> bool:
        """Report whether ``predicate`` was declared with ``"@type": "@id"``."""
        return predicate in self.id_coerced


EMPTY_CONTEXT = ActiveContext()


def _apply_local_context(parent: ActiveContext, local: dict[str, Any]) -> ActiveContext:
    raw_terms: dict[str, str] = {}
    removed: set[str] = set()
    coerced_terms: set[str] = set()

    for key, definition in local.items():
        if key == "@vocab" or key in _IGNORED_CONTEXT_KEYWORDS:
            continue
        if key.startswith("@"):
            raise JsonLdError(f"invalid keyword '{key}' in @context")
        if definition is None:
            removed.add(key)
        elif isinstance(definition, str):
            raw_terms[key] = definition
        elif isinstance(definition, dict):
            raw_id = definition.get("@id", key)
            if not isinstance(raw_id, str):
                raise JsonLdError(f"invalid @id in term definition '{key}': expected string")
            raw_terms[key] = raw_id
            term_type = definition.get("@type")
            if term_type == "@id":
                coerced_terms.add(key)
            elif term_type is not None and not isinstance(term_type, str):
                raise JsonLdError(f"invalid @type in term definition '{key}': expected string")
        else:
            raise JsonLdError(
                f"invalid term definition for '{key}': expected string, object or null, "
                f"found {json_kind(definition)}"
            )

    terms = {key: value for key, value in parent.terms.items() if key not in removed}
    # Definitions may refer to each other within one local context.
    pending = {**terms, **raw_terms}

    vocab = parent.vocab
    if "@vocab" in local:
        raw_vocab = local["@vocab"]
        if raw_vocab is None:
            vocab = None
        elif isinstance(raw_vocab, str):
            vocab = _resolve(raw_vocab, pending, None, set())
        else:
            raise JsonLdError(
                f"invalid @vocab: expected string or null, found {json_kind(raw_vocab)}"
            )

    for key in raw_terms:
        terms[key] = _resolve(raw_terms[key], pending, vocab, {key})

    # A redefinition or removal drops the previous coercion of that term.
    inherited = {key for key in parent.coerced_terms if key in terms and key not in raw_terms}
    return ActiveContext(
        vocab=vocab, terms=terms, coerced_terms=frozenset(inherited | coerced_terms)
    )


def _resolve(value: str, terms: Mapping[str, str], vocab: str | None, seen: set[str]) -> str:
    """Expand a term definition value against the context being built."""
    if value.startswith("@") or is_absolute_iri(value):
        return value
    prefix, sep, suffix = value.partition(":")
    if sep:
        if prefix in terms and prefix not in seen:
            return _resolve(terms[prefix], terms, vocab, seen | {prefix}) + suffix
        return value
    if value in terms:
        if value in seen:
            if terms[value] == value:
                return vocab + value if vocab is not None else value
            raise JsonLdError(f"cyclic term definition for '{value}'")
        return _resolve(terms[value], terms, vocab, seen | {value})
    if vocab is not None:
        return vocab + value
    return value


def json_kind(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return "null" if value is None else type(value).__name__
