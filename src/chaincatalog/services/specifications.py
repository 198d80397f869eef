"""Specification group and system model services.

Both only manage names, descriptions and user labels here; parsing of the
specifications themselves is handled elsewhere.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Generic, TypeVar

from chaincatalog.exceptions import NotFoundError
from chaincatalog.graph.labels import reconcile_labels
from chaincatalog.graph.model import (
    SpecificationGroup,
    SpecificationGroupLabel,
    SystemModel,
    SystemModelLabel,
)
from chaincatalog.persistence.memory import CatalogStore
from chaincatalog.persistence.repositories import (
    Repository,
    SpecificationGroupRepository,
    SystemModelRepository,
)

E = TypeVar("E", SpecificationGroup, SystemModel)


class _LabeledEntityService(Generic[E]):
    kind = "entity"
    owner_field = ""

    def __init__(self, store: CatalogStore, repository: Repository[E]) -> None:
        self.store = store
        self.repository = repository

    def find_by_id(self, entity_id: str) -> E:
        entity = self.repository.find_by_id(entity_id)
        if entity is None:
            raise NotFoundError(f"Can't find {self.kind} with id: {entity_id}")
        return entity

    def save(self, entity: E) -> E:
        with self.store.transaction():
            for label in entity.labels:
                setattr(label, self.owner_field, entity.id)
            return self.repository.save(entity)

    def update(
        self,
        entity_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
        labels: list | None = None,
    ) -> E:
        """Change the name, description or user labels of an entity."""
        with self.store.transaction():
            entity = self.find_by_id(entity_id)
            if name is not None:
                entity.name = name
            if description is not None:
                entity.description = description
            if labels is not None:
                reconcile_labels(
                    entity.labels,
                    labels,
                    bind=lambda label: replace(label, **{self.owner_field: entity.id}),
                )
            return self.repository.save(entity)


class SpecificationGroupService(_LabeledEntityService[SpecificationGroup]):
    kind = "specification group"
    owner_field = "specification_group_id"
    label_type = SpecificationGroupLabel

    def __init__(self, store: CatalogStore, repository: SpecificationGroupRepository) -> None:
        super().__init__(store, repository)


class SystemModelService(_LabeledEntityService[SystemModel]):
    kind = "system model"
    owner_field = "system_model_id"
    label_type = SystemModelLabel

    def __init__(self, store: CatalogStore, repository: SystemModelRepository) -> None:
        super().__init__(store, repository)


__all__ = ["SpecificationGroupService", "SystemModelService"]
