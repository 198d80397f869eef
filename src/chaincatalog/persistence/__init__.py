"""Persistence - repository interfaces and the in-memory catalog store."""

from chaincatalog.persistence.auditing import AuditingHandler, utc_now
from chaincatalog.persistence.memory import (
    CatalogStore,
    MemoryChainRepository,
    MemoryDependencyRepository,
    MemoryElementRepository,
    MemoryFolderRepository,
    MemorySpecificationGroupRepository,
    MemorySystemModelRepository,
)
from chaincatalog.persistence.repositories import (
    ChainRepository,
    DependencyRepository,
    ElementRepository,
    FolderRepository,
    Repository,
    SpecificationGroupRepository,
    SystemModelRepository,
)

__all__ = [
    "AuditingHandler",
    "CatalogStore",
    "ChainRepository",
    "DependencyRepository",
    "ElementRepository",
    "FolderRepository",
    "MemoryChainRepository",
    "MemoryDependencyRepository",
    "MemoryElementRepository",
    "MemoryFolderRepository",
    "MemorySpecificationGroupRepository",
    "MemorySystemModelRepository",
    "Repository",
    "SpecificationGroupRepository",
    "SystemModelRepository",
    "utc_now",
]
