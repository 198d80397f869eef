"""
Repository interfaces per entity kind.

Engines and services only talk to these interfaces. Implementations:
- chaincatalog.persistence.memory: in-memory store (tests, local server)

Within one transaction an implementation must return what was saved
earlier in the same transaction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, Iterable, TypeVar

from chaincatalog.graph.model import (
    Chain,
    ChainElement,
    Dependency,
    Folder,
    SpecificationGroup,
    SystemModel,
)

T = TypeVar("T")


class Repository(ABC, Generic[T]):
    """Basic id-keyed access shared by all entity kinds."""

    @abstractmethod
    def find_by_id(self, entity_id: str) -> T | None:
        """Get an entity by id, or None"""
        pass

    @abstractmethod
    def find_all_by_id(self, entity_ids: Iterable[str]) -> list[T]:
        """Get the existing entities among ``entity_ids``, in request order"""
        pass

    @abstractmethod
    def save(self, entity: T) -> T:
        """Insert or update an entity"""
        pass

    def save_all(self, entities: Iterable[T]) -> list[T]:
        return [self.save(entity) for entity in entities]

    @abstractmethod
    def delete(self, entity: T) -> None:
        """Delete an entity"""
        pass

    def delete_all(self, entities: Iterable[T]) -> None:
        for entity in list(entities):
            self.delete(entity)

    def exists_by_id(self, entity_id: str) -> bool:
        return self.find_by_id(entity_id) is not None


class ChainRepository(Repository[Chain]):
    @abstractmethod
    def find_all(self) -> list[Chain]:
        pass

    @abstractmethod
    def find_all_by_parent_folder_id(self, folder_id: str | None) -> list[Chain]:
        """Chains directly inside a folder (None = root)"""
        pass

    @abstractmethod
    def exists_by_name_and_parent_folder_id(self, name: str, folder_id: str | None) -> bool:
        pass

    def count(self) -> int:
        return len(self.find_all())


class FolderRepository(Repository[Folder]):
    @abstractmethod
    def find_all_by_parent_folder_id(self, folder_id: str | None) -> list[Folder]:
        """Folders directly inside a folder (None = root)"""
        pass

    @abstractmethod
    def exists_by_name_and_parent_folder_id(self, name: str, folder_id: str | None) -> bool:
        pass

    @abstractmethod
    def delete_by_id(self, folder_id: str) -> None:
        """Delete a folder with every nested folder and chain"""
        pass


class ElementRepository(Repository[ChainElement]):
    @abstractmethod
    def find_by_id_and_chain_id(self, element_id: str, chain_id: str) -> ChainElement | None:
        pass

    @abstractmethod
    def find_all_by_chain_id(self, chain_id: str) -> list[ChainElement]:
        pass


class DependencyRepository(Repository[Dependency]):
    pass


class SpecificationGroupRepository(Repository[SpecificationGroup]):
    pass


class SystemModelRepository(Repository[SystemModel]):
    pass
