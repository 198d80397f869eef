"""Element service - transactional façade over the element engine."""

from __future__ import annotations

from chaincatalog.exceptions import NotFoundError
from chaincatalog.graph.diff import ChainDiff
from chaincatalog.graph.elements import ElementEngine
from chaincatalog.graph.model import ChainElement
from chaincatalog.persistence.memory import CatalogStore


class ElementService:
    def __init__(self, store: CatalogStore, engine: ElementEngine) -> None:
        self.store = store
        self.engine = engine

    def find_by_id(self, element_id: str) -> ChainElement:
        element = self.engine.elements.find_by_id(element_id)
        if element is None:
            raise NotFoundError(f"Can't find element with id: {element_id}")
        return element

    def find_all_by_chain_id(self, chain_id: str) -> list[ChainElement]:
        return self.engine.elements.find_all_by_chain_id(chain_id)

    def create(
        self,
        chain_id: str,
        element_type: str,
        parent_element_id: str | None = None,
    ) -> ChainDiff:
        with self.store.transaction():
            return self.engine.create(chain_id, element_type, parent_element_id)

    def delete_by_id_and_update_unsaved(self, element_id: str) -> ChainDiff:
        with self.store.transaction():
            return self.engine.delete_by_id_and_update_unsaved(element_id)

    def change_parent(self, element_id: str, new_parent_id: str | None) -> ChainElement:
        with self.store.transaction():
            element = self.find_by_id(element_id)
            return self.engine.change_parent(element, new_parent_id)

    def group(self, chain_id: str, element_ids: list[str]) -> ChainElement:
        with self.store.transaction():
            return self.engine.group(chain_id, element_ids)

    def ungroup(self, group_id: str) -> list[ChainElement]:
        with self.store.transaction():
            return self.engine.ungroup(group_id)


__all__ = ["ElementService"]
