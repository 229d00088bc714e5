"""Global pytest configuration and fixtures.

Provides the small sample graphs shared by codec and conversion tests.
"""

from __future__ import annotations

from typing import Any

import pytest

from graphsync.core.model import Node, ObjectRef, RefArray, Scalar, ScalarArray


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "roundtrip: test converts data through several codecs")


@pytest.fixture
def person_document() -> dict[str, Any]:
    """Two people, one knowing the other, with compact identifiers."""
    return {
        "@graph": [
            {
                "@id": "ex:1",
                "@type": "ex:Person",
                "ex:name": "Alice",
                "ex:knows": [{"@id": "ex:2"}],
            },
            {"@id": "ex:2", "@type": "ex:Person", "ex:name": "Bob"},
        ]
    }


@pytest.fixture
def person_nodes() -> list[Node]:
    return [
        Node(
            id="ex:1",
            types=frozenset({"ex:Person"}),
            properties={"ex:name": Scalar("Alice"), "ex:knows": RefArray(("ex:2",))},
        ),
        Node(id="ex:2", types=frozenset({"ex:Person"}), properties={"ex:name": Scalar("Bob")}),
    ]


@pytest.fixture
def iri_nodes() -> list[Node]:
    """Nodes with absolute identifiers covering every property value variant."""
    return [
        Node(
            id="https://example.com/alice",
            types=frozenset({"https://schema.org/Person"}),
            properties={
                "https://schema.org/name": Scalar("Alice"),
                "https://schema.org/age": Scalar(30.0),
                "https://schema.org/active": Scalar(True),
                "https://schema.org/nickname": ScalarArray(("Al", "Ally")),
                "https://schema.org/spouse": ObjectRef("https://example.com/bob"),
                "https://schema.org/knows": RefArray(
                    ("https://example.com/bob", "https://example.com/carol")
                ),
            },
        ),
        Node(
            id="https://example.com/bob",
            types=frozenset({"https://schema.org/Person"}),
            properties={"https://schema.org/name": Scalar("Bob")},
        ),
        Node(
            id="https://example.com/carol",
            types=frozenset({"https://schema.org/Person", "https://schema.org/Author"}),
            properties={"https://schema.org/name": Scalar("Carol")},
        ),
    ]
