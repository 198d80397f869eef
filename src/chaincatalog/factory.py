"""Catalog Factory - wires the store, engines and services from configuration.

This module provides the single entry point the CLI, the HTTP server and
the tests use to obtain a ready catalog.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from chaincatalog.config import DEFAULT_CONFIG, merge_configs
from chaincatalog.graph.copier import ChainCopier
from chaincatalog.graph.descriptors import DescriptorRegistry
from chaincatalog.graph.elements import ElementEngine
from chaincatalog.persistence.memory import (
    CatalogStore,
    MemoryChainRepository,
    MemoryDependencyRepository,
    MemoryElementRepository,
    MemoryFolderRepository,
    MemorySpecificationGroupRepository,
    MemorySystemModelRepository,
)
from chaincatalog.services.actionlog import (
    ActionLogSink,
    ActionsLogService,
    LoggingActionLogSink,
)
from chaincatalog.services.chains import ChainService
from chaincatalog.services.deployments import DeploymentService
from chaincatalog.services.elements import ElementService
from chaincatalog.services.folders import FolderService
from chaincatalog.services.specifications import SpecificationGroupService, SystemModelService


@dataclass
class Catalog:
    """Every service of one catalog instance, sharing one store."""

    store: CatalogStore
    registry: DescriptorRegistry
    chains: ChainService
    elements: ElementService
    folders: FolderService
    specification_groups: SpecificationGroupService
    system_models: SystemModelService
    deployments: DeploymentService
    action_log: ActionsLogService


def load_registry(config: dict[str, Any]) -> DescriptorRegistry:
    """Load the descriptor library named by ``[library] path``, or the bundled one."""
    path = config.get("library", {}).get("path") or None
    return DescriptorRegistry.load(Path(path) if path else None)


def build_catalog(
    config: dict[str, Any] | None = None,
    registry: DescriptorRegistry | None = None,
    store: CatalogStore | None = None,
    deployments: DeploymentService | None = None,
    action_sink: ActionLogSink | None = None,
) -> Catalog:
    """Build a catalog.

    Args:
        config: Configuration dict, merged over the defaults.
        registry: Descriptor registry (optional, loaded from config).
        store: Backing store (optional, a fresh in-memory store).
        deployments: Runtime catalog client (optional, built from config).
        action_sink: Action log destination (optional, logging sink when
            ``[action_log] enabled``).

    Returns:
        Catalog with all services wired.
    """
    config = merge_configs(DEFAULT_CONFIG, config or {})
    registry = registry or load_registry(config)
    store = store or CatalogStore()

    if deployments is None:
        runtime = config.get("runtime_catalog", {})
        deployments = DeploymentService(
            runtime.get("url", ""), timeout=float(runtime.get("timeout", 10))
        )
    if action_sink is None and config.get("action_log", {}).get("enabled", True):
        action_sink = LoggingActionLogSink()
    action_log = ActionsLogService(action_sink)

    chains = MemoryChainRepository(store)
    folders = MemoryFolderRepository(store, chains)
    elements = MemoryElementRepository(store)
    dependencies = MemoryDependencyRepository(store)

    folder_service = FolderService(store, folders, chains, deployments, action_log)
    engine = ElementEngine(registry, chains, elements, dependencies, store.auditing)
    copier = ChainCopier(registry, chains, elements, dependencies, store.auditing)

    return Catalog(
        store=store,
        registry=registry,
        chains=ChainService(store, chains, folder_service, copier, deployments, action_log),
        elements=ElementService(store, engine),
        folders=folder_service,
        specification_groups=SpecificationGroupService(
            store, MemorySpecificationGroupRepository(store)
        ),
        system_models=SystemModelService(store, MemorySystemModelRepository(store)),
        deployments=deployments,
        action_log=action_log,
    )


__all__ = ["Catalog", "build_catalog", "load_registry"]
