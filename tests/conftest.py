"""Pytest fixtures shared by all catalog tests."""

from unittest.mock import MagicMock

import pytest

from chaincatalog.factory import build_catalog
from chaincatalog.graph.descriptors import DescriptorRegistry
from chaincatalog.persistence.auditing import AuditingHandler
from chaincatalog.persistence.memory import CatalogStore
from chaincatalog.services.actionlog import InMemoryActionLogSink
from chaincatalog.services.deployments import DeploymentService
from tests.helpers import TEST_LIBRARY, TickingClock


@pytest.fixture
def registry():
    """Descriptor registry built from the test library."""
    return DescriptorRegistry.from_toml(TEST_LIBRARY)


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def deployments():
    """Runtime catalog client double without any deployments."""
    client = MagicMock(spec=DeploymentService)
    client.get_all_runtime_deployments.return_value = {}
    return client


@pytest.fixture
def action_sink():
    return InMemoryActionLogSink()


@pytest.fixture
def catalog(registry, clock, deployments, action_sink):
    """Catalog over a fresh in-memory store with a deterministic clock."""
    store = CatalogStore(AuditingHandler(clock=clock))
    return build_catalog(
        registry=registry,
        store=store,
        deployments=deployments,
        action_sink=action_sink,
    )


@pytest.fixture
def chain(catalog):
    """An empty chain in the root folder."""
    from tests.helpers import make_chain

    return make_chain(catalog, "Orders")
