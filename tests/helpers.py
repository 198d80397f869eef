"""Test helpers for catalog tests.

Factories build chains, folders and elements through the public services
so every test exercises the same code paths as the HTTP surface.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from chaincatalog.factory import Catalog
from chaincatalog.graph.model import Chain, ChainElement, ChainLabel, Dependency, Folder
from chaincatalog.graph.relations import connect, new_id
from chaincatalog.persistence.memory import MemoryDependencyRepository

# === Descriptor library used by the tests ===

TEST_LIBRARY = """
[elements.test-sender]
title = "Test Sender"

[[elements.test-sender.properties]]
name = "uri"
default = "http://example.org"

[[elements.test-sender.properties]]
name = "method"
default = "POST"

[elements.test-trigger]
title = "Test Trigger"
input_enabled = false

[[elements.test-trigger.properties]]
name = "contextPath"
default = "/orders"

[elements.test-chain-trigger]
title = "Test Chain Trigger"
input_enabled = false

[[elements.test-chain-trigger.properties]]
name = "elementId"
reset_on_copy = true

[elements.test-switch]
title = "Test Switch"
container = true
allowed_children = { test-case = "one-or-many", test-default = "one" }

[elements.test-case]
title = "Test Case"
container = true
ordered = true
priority_property = "priority"

[elements.test-default]
title = "Test Default"
container = true

[elements.test-container]
title = "Test Container"
container = true
allowed_children = { test-case = "two-or-many", test-default = "one-or-many", test-sender = "one" }

[elements.container]
title = "Container"
container = true
"""


# === Deterministic clock ===


class TickingClock:
    """Clock that moves one second forward on every call."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now = self.now + timedelta(seconds=1)
        return self.now


# === Entity factories ===


def make_folder(catalog: Catalog, name: str, parent_id: str | None = None) -> Folder:
    return catalog.folders.save(Folder(id=new_id(), name=name), parent_id)


def make_chain(
    catalog: Catalog,
    name: str = "Chain",
    folder_id: str | None = None,
    labels: list[str] | None = None,
) -> Chain:
    chain = Chain(
        id=new_id(),
        name=name,
        labels=[ChainLabel(name=label) for label in labels or []],
    )
    return catalog.chains.save(chain, folder_id)


def add_element(
    catalog: Catalog,
    chain_id: str,
    element_type: str,
    parent_id: str | None = None,
) -> ChainElement:
    """Create an element and return it (first entry of the created list)."""
    return catalog.elements.create(chain_id, element_type, parent_id).created_elements[0]


def link(
    catalog: Catalog, chain_id: str, source: ChainElement, target: ChainElement
) -> Dependency:
    """Connect two elements of a chain and persist the edge."""
    chain = catalog.chains.find_by_id(chain_id)
    dependency = connect(chain, source.id, target.id)
    MemoryDependencyRepository(catalog.store).save(dependency)
    return dependency


def children_of_type(catalog: Catalog, parent: ChainElement, element_type: str):
    chain = catalog.chains.find_by_id(parent.chain_id)
    return [child for child in chain.children_of(parent) if child.type == element_type]


def priorities(elements: list[ChainElement]) -> list[int]:
    return [element.get_property("priority") for element in elements]
