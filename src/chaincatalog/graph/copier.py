"""Chain copy engine.

Deep-clones a chain into a target folder: fresh ids for the chain and
every element, remapped parent links and dependencies, reset-on-copy
properties, a collision-free name and no runtime state.
"""

from __future__ import annotations

import copy
import logging
from typing import Iterable

from chaincatalog.graph.descriptors import ELEMENT_ID_PROPERTY, DescriptorRegistry
from chaincatalog.graph.model import Chain, ChainElement, ChainLabel
from chaincatalog.graph.relations import new_id, remap_dependencies
from chaincatalog.persistence.auditing import AuditingHandler
from chaincatalog.persistence.repositories import (
    ChainRepository,
    DependencyRepository,
    ElementRepository,
)

logger = logging.getLogger(__name__)


class ChainCopier:
    """Copies chains and element sets between chains."""

    def __init__(
        self,
        registry: DescriptorRegistry,
        chains: ChainRepository,
        elements: ElementRepository,
        dependencies: DependencyRepository,
        auditing: AuditingHandler,
    ) -> None:
        self.registry = registry
        self.chains = chains
        self.elements = elements
        self.dependencies = dependencies
        self.auditing = auditing

    def copy(self, chain: Chain, target_folder_id: str | None) -> Chain:
        """Copy a chain into a folder (None = root).

        The copy gets a unique name among the folder's chains, no
        snapshots, deployments or override links, and only the
        non-technical labels of the original.

        Returns:
            The persisted copy.
        """
        chain_id = new_id()
        while self.chains.exists_by_id(chain_id):
            chain_id = new_id()

        chain_copy = Chain(
            id=chain_id,
            name=self.generate_copy_name(chain.name, target_folder_id),
            description=chain.description,
            parent_folder_id=target_folder_id,
        )
        self.copy_elements(chain, chain_copy)
        chain_copy.labels = [
            ChainLabel(name=label.name, chain_id=chain_copy.id)
            for label in chain.labels
            if not label.technical
        ]

        # Edges first, then the elements they point at, then the owner
        self.dependencies.save_all(chain_copy.iter_dependencies())
        self.elements.save_all(chain_copy.iter_elements())
        self.chains.save(chain_copy)

        logger.debug(
            "Copied chain %s to %s as '%s' (%d elements, %d dependencies)",
            chain.id,
            chain_copy.id,
            chain_copy.name,
            len(chain_copy.elements),
            len(chain_copy.dependencies),
        )
        return chain_copy

    def generate_copy_name(self, name: str, folder_id: str | None) -> str:
        """Return ``name``, or ``name (n)`` with the smallest free n >= 1."""
        if not self.chains.exists_by_name_and_parent_folder_id(name, folder_id):
            return name
        number = 1
        while self.chains.exists_by_name_and_parent_folder_id(f"{name} ({number})", folder_id):
            number += 1
        return f"{name} ({number})"

    def copy_elements(
        self,
        original: Chain,
        target: Chain,
        elements: Iterable[ChainElement] | None = None,
    ) -> list[ChainElement]:
        """Clone elements of ``original`` into the arena of ``target``.

        Parent links and dependencies are remapped through the clones;
        links to elements outside the copied set are dropped.

        Args:
            original: Chain the elements come from.
            target: Chain receiving the clones.
            elements: Elements to copy, all of ``original`` when None.

        Returns:
            The clones, in the order of the originals.
        """
        originals = list(elements) if elements is not None else list(original.iter_elements())

        clones: dict[str, ChainElement] = {}
        for element in originals:
            clone = ChainElement(
                id=self._new_element_id(target),
                type=element.type,
                kind=element.kind,
                name=element.name,
                description=element.description,
                properties=copy.deepcopy(element.properties),
                chain_id=target.id,
            )
            self._reset_on_copy(clone)
            target.elements[clone.id] = clone
            clones[element.id] = clone

        for element in originals:
            clone = clones[element.id]
            parent = clones.get(element.parent_id) if element.parent_id else None
            clone.parent_id = parent.id if parent is not None else None
            clone.children = [clones[cid].id for cid in element.children if cid in clones]

        remap_dependencies(original, target, originals, clones)

        now = self.auditing.clock()
        for element in originals:
            clone = clones[element.id]
            if element.created_when == element.modified_when:
                # Never edited: stamped fresh when persisted
                clone.created_when = None
                clone.modified_when = None
            else:
                clone.created_when = element.created_when
                clone.modified_when = now

        return [clones[element.id] for element in originals]

    def _new_element_id(self, target: Chain) -> str:
        element_id = new_id()
        while element_id in target.elements or self.elements.exists_by_id(element_id):
            element_id = new_id()
        return element_id

    def _reset_on_copy(self, clone: ChainElement) -> None:
        descriptor = self.registry.find(clone.type)
        if descriptor is None:
            return
        for prop in descriptor.reset_on_copy_properties():
            if prop.name == ELEMENT_ID_PROPERTY:
                clone.set_property(prop.name, clone.id)
            elif prop.default is not None:
                clone.set_property(prop.name, copy.deepcopy(prop.default))
            else:
                clone.properties.pop(prop.name, None)


__all__ = ["ChainCopier"]
