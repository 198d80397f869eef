"""Tests for catalog wiring and the action log sinks."""

import logging

from chaincatalog.factory import build_catalog, load_registry
from chaincatalog.graph.model import Chain
from chaincatalog.services.actionlog import (
    ActionLog,
    ActionsLogService,
    EntityType,
    LoggingActionLogSink,
    LogOperation,
)
from tests.helpers import TEST_LIBRARY


class TestBuildCatalog:
    def test_uses_configured_library_and_runtime(self, tmp_path):
        library = tmp_path / "library.toml"
        library.write_text(TEST_LIBRARY)

        catalog = build_catalog(
            {
                "library": {"path": str(library)},
                "runtime_catalog": {"url": "rc.internal:9000", "timeout": 2},
            }
        )

        assert "test-switch" in catalog.registry
        assert catalog.deployments.base_url == "http://rc.internal:9000"
        assert catalog.deployments.timeout == 2.0
        assert isinstance(catalog.action_log.sink, LoggingActionLogSink)

    def test_defaults_use_bundled_library(self):
        catalog = build_catalog({"action_log": {"enabled": False}})

        assert "switch" in catalog.registry
        assert catalog.action_log.sink is None
        assert load_registry({}).get("container").container

    def test_services_share_one_store(self):
        catalog = build_catalog({"runtime_catalog": {"url": ""}})

        chain = catalog.chains.save(Chain(id="c1", name="c"))
        catalog.elements.create(chain.id, "container")

        assert len(catalog.store.elements) == 1
        catalog.chains.delete_by_id(chain.id)
        assert catalog.store.elements == {}


class TestActionLogSinks:
    def test_logging_sink_writes_info(self, caplog):
        service = ActionsLogService(LoggingActionLogSink())

        with caplog.at_level(logging.INFO, logger="chaincatalog.actions"):
            service.log_action(
                ActionLog(EntityType.FOLDER, "f1", "Inbox", LogOperation.MOVE)
            )

        assert "MOVE FOLDER 'Inbox' (f1)" in caplog.text

    def test_disabled_log_is_a_no_op(self):
        ActionsLogService(None).log_action(
            ActionLog(EntityType.CHAIN, "c1", "c", LogOperation.CREATE)
        )
