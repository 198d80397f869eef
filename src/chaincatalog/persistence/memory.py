"""
In-memory catalog store.

Keeps every entity in id-keyed tables. Elements and dependencies are the
same objects that sit in their chain's arena, so saving through a
repository and mutating through a chain stay in sync.

Use cases:
- Unit tests
- Local development server

Limitations:
- Data lost on restart
- No cross-process sharing
"""

from __future__ import annotations

import copy
import logging
from collections import deque
from contextlib import contextmanager
from typing import Iterable, Iterator

from chaincatalog.graph.model import (
    Chain,
    ChainElement,
    Dependency,
    Folder,
    SpecificationGroup,
    SystemModel,
)
from chaincatalog.persistence.auditing import AuditingHandler
from chaincatalog.persistence.repositories import (
    ChainRepository,
    DependencyRepository,
    ElementRepository,
    FolderRepository,
    SpecificationGroupRepository,
    SystemModelRepository,
)

logger = logging.getLogger(__name__)


class CatalogStore:
    """Tables for all entity kinds plus a transaction boundary."""

    def __init__(self, auditing: AuditingHandler | None = None) -> None:
        self.auditing = auditing or AuditingHandler()
        self.chains: dict[str, Chain] = {}
        self.folders: dict[str, Folder] = {}
        self.elements: dict[str, ChainElement] = {}
        self.dependencies: dict[str, Dependency] = {}
        self.specification_groups: dict[str, SpecificationGroup] = {}
        self.system_models: dict[str, SystemModel] = {}
        self._depth = 0

    _TABLES = (
        "chains",
        "folders",
        "elements",
        "dependencies",
        "specification_groups",
        "system_models",
    )

    @contextmanager
    def transaction(self) -> Iterator[CatalogStore]:
        """Run a unit of work; restore every table if it raises.

        Nested transactions join the outermost one.
        """
        outermost = self._depth == 0
        # One deepcopy call keeps chain arenas and tables sharing objects
        snapshot = copy.deepcopy({t: getattr(self, t) for t in self._TABLES}) if outermost else None
        self._depth += 1
        try:
            yield self
        except Exception:
            if snapshot is not None:
                for table, rows in snapshot.items():
                    setattr(self, table, rows)
                logger.debug("Transaction rolled back")
            raise
        finally:
            self._depth -= 1

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0


class _MemoryRepository:
    """Shared lookups over one table of the store."""

    table: str

    def __init__(self, store: CatalogStore) -> None:
        self.store = store

    @property
    def _rows(self) -> dict:
        return getattr(self.store, self.table)

    def find_by_id(self, entity_id: str):
        return self._rows.get(entity_id)

    def find_all_by_id(self, entity_ids: Iterable[str]) -> list:
        rows = self._rows
        return [rows[entity_id] for entity_id in entity_ids if entity_id in rows]


class MemoryChainRepository(_MemoryRepository, ChainRepository):
    table = "chains"

    def find_all(self) -> list[Chain]:
        return list(self.store.chains.values())

    def find_all_by_parent_folder_id(self, folder_id: str | None) -> list[Chain]:
        return [c for c in self.store.chains.values() if c.parent_folder_id == folder_id]

    def exists_by_name_and_parent_folder_id(self, name: str, folder_id: str | None) -> bool:
        return any(
            c.name == name and c.parent_folder_id == folder_id for c in self.store.chains.values()
        )

    def save(self, entity: Chain) -> Chain:
        self.store.auditing.mark_created(entity)
        self.store.chains[entity.id] = entity
        for element in entity.iter_elements():
            element.chain_id = entity.id
            self.store.elements[element.id] = element
        for dependency in entity.iter_dependencies():
            self.store.dependencies[dependency.id] = dependency
        return entity

    def delete(self, entity: Chain) -> None:
        self.store.chains.pop(entity.id, None)
        for element_id in entity.elements:
            self.store.elements.pop(element_id, None)
        for dependency_id in entity.dependencies:
            self.store.dependencies.pop(dependency_id, None)


class MemoryFolderRepository(_MemoryRepository, FolderRepository):
    table = "folders"

    def __init__(self, store: CatalogStore, chains: MemoryChainRepository) -> None:
        super().__init__(store)
        self.chains = chains

    def find_all_by_parent_folder_id(self, folder_id: str | None) -> list[Folder]:
        return [f for f in self.store.folders.values() if f.parent_folder_id == folder_id]

    def exists_by_name_and_parent_folder_id(self, name: str, folder_id: str | None) -> bool:
        return any(
            f.name == name and f.parent_folder_id == folder_id
            for f in self.store.folders.values()
        )

    def save(self, entity: Folder) -> Folder:
        self.store.auditing.mark_created(entity)
        self.store.folders[entity.id] = entity
        return entity

    def delete(self, entity: Folder) -> None:
        self.delete_by_id(entity.id)

    def delete_by_id(self, folder_id: str) -> None:
        queue: deque[str] = deque([folder_id])
        doomed: list[str] = []
        while queue:
            current = queue.popleft()
            doomed.append(current)
            queue.extend(f.id for f in self.find_all_by_parent_folder_id(current))
        for current in doomed:
            for chain in self.chains.find_all_by_parent_folder_id(current):
                self.chains.delete(chain)
            self.store.folders.pop(current, None)


class MemoryElementRepository(_MemoryRepository, ElementRepository):
    table = "elements"

    def find_by_id_and_chain_id(self, element_id: str, chain_id: str) -> ChainElement | None:
        element = self.store.elements.get(element_id)
        if element is None or element.chain_id != chain_id:
            return None
        return element

    def find_all_by_chain_id(self, chain_id: str) -> list[ChainElement]:
        chain = self.store.chains.get(chain_id)
        return list(chain.iter_elements()) if chain is not None else []

    def save(self, entity: ChainElement) -> ChainElement:
        self.store.auditing.mark_created(entity)
        self.store.elements[entity.id] = entity
        chain = self.store.chains.get(entity.chain_id) if entity.chain_id else None
        if chain is not None:
            chain.elements[entity.id] = entity
        return entity

    def delete(self, entity: ChainElement) -> None:
        self.store.elements.pop(entity.id, None)
        chain = self.store.chains.get(entity.chain_id) if entity.chain_id else None
        if chain is not None:
            chain.elements.pop(entity.id, None)


class MemoryDependencyRepository(_MemoryRepository, DependencyRepository):
    table = "dependencies"

    def _owning_chain(self, entity: Dependency) -> Chain | None:
        for endpoint in (entity.element_from, entity.element_to):
            element = self.store.elements.get(endpoint)
            if element is not None and element.chain_id in self.store.chains:
                return self.store.chains[element.chain_id]
        return None

    def save(self, entity: Dependency) -> Dependency:
        self.store.dependencies[entity.id] = entity
        chain = self._owning_chain(entity)
        if chain is not None:
            chain.dependencies[entity.id] = entity
        return entity

    def delete(self, entity: Dependency) -> None:
        chain = self._owning_chain(entity)
        self.store.dependencies.pop(entity.id, None)
        if chain is not None:
            chain.dependencies.pop(entity.id, None)


class MemorySpecificationGroupRepository(_MemoryRepository, SpecificationGroupRepository):
    table = "specification_groups"

    def save(self, entity: SpecificationGroup) -> SpecificationGroup:
        self.store.specification_groups[entity.id] = entity
        return entity

    def delete(self, entity: SpecificationGroup) -> None:
        self.store.specification_groups.pop(entity.id, None)


class MemorySystemModelRepository(_MemoryRepository, SystemModelRepository):
    table = "system_models"

    def save(self, entity: SystemModel) -> SystemModel:
        self.store.system_models[entity.id] = entity
        return entity

    def delete(self, entity: SystemModel) -> None:
        self.store.system_models.pop(entity.id, None)


__all__ = [
    "CatalogStore",
    "MemoryChainRepository",
    "MemoryDependencyRepository",
    "MemoryElementRepository",
    "MemoryFolderRepository",
    "MemorySpecificationGroupRepository",
    "MemorySystemModelRepository",
]
