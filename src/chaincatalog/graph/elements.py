"""Element lifecycle engine - create, delete, re-parent, group and ungroup.

Every structural mutation consults the descriptor registry it was built
with. Operations validate first and only then touch the chain arena and
the repositories, so a failed call leaves no partial change behind.
"""

from __future__ import annotations

import logging
from typing import Iterable

from chaincatalog.exceptions import NotFoundError, ValidationError
from chaincatalog.graph.descriptors import DescriptorRegistry, ElementDescriptor
from chaincatalog.graph.diff import ChainDiff
from chaincatalog.graph.model import Chain, ChainElement, ElementKind
from chaincatalog.graph.relations import (
    detach_dangling,
    disconnect,
    incident_dependencies,
    new_id,
)
from chaincatalog.persistence.auditing import AuditingHandler
from chaincatalog.persistence.repositories import (
    ChainRepository,
    DependencyRepository,
    ElementRepository,
)

logger = logging.getLogger(__name__)

CONTAINER_TYPE_NAME = "container"
CONTAINER_DEFAULT_NAME = "Container"


def get_priority(element: ChainElement, descriptor: ElementDescriptor) -> int | None:
    """Read the sibling priority of an ordered element as an int."""
    if not descriptor.priority_property:
        return None
    value = element.get_property(descriptor.priority_property)
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class ElementEngine:
    """Structural mutations of chain elements.

    Args:
        registry: Element descriptors consulted for every mutation.
        chains: Chain repository.
        elements: Element repository.
        dependencies: Dependency repository.
        auditing: Timestamp handler used to mark touched elements.
    """

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

    # ─────────────────────────────────────────────────────────────────────
    # Lookups
    # ─────────────────────────────────────────────────────────────────────

    def _get_chain(self, chain_id: str | None) -> Chain:
        chain = self.chains.find_by_id(chain_id) if chain_id else None
        if chain is None:
            raise NotFoundError(f"Can't find chain with id: {chain_id}")
        return chain

    def _get_element(self, element_id: str) -> ChainElement:
        element = self.elements.find_by_id(element_id)
        if element is None:
            raise NotFoundError(f"Can't find element with id: {element_id}")
        return element

    def generate_id(self) -> str:
        """Generate an element id not used by any persisted element."""
        element_id = new_id()
        while self.elements.exists_by_id(element_id):
            element_id = new_id()
        return element_id

    # ─────────────────────────────────────────────────────────────────────
    # Create
    # ─────────────────────────────────────────────────────────────────────

    def create(
        self,
        chain_id: str,
        element_type: str,
        parent_element_id: str | None = None,
    ) -> ChainDiff:
        """Create an element, together with its mandatory children.

        Args:
            chain_id: Chain receiving the element.
            element_type: Descriptor type of the new element.
            parent_element_id: Optional container inside the same chain.

        Returns:
            ChainDiff with one created entry per new element and the
            parent, if any, as the only updated element.

        Raises:
            NotFoundError: If the chain or the parent does not exist.
            ValidationError: If the type is unknown or the parent does not
                accept another child of this type.
        """
        chain = self._get_chain(chain_id)
        descriptor = self.registry.get(element_type)

        parent = None
        if parent_element_id is not None:
            parent = self.elements.find_by_id_and_chain_id(parent_element_id, chain.id)
            if parent is None:
                raise NotFoundError(
                    f"Can't find element with id {parent_element_id} in chain {chain.id}"
                )

        diff = ChainDiff()
        element = self._instantiate(chain, descriptor, parent, diff)
        if parent is not None:
            self.auditing.mark_modified(parent)
            self.elements.save(parent)
            diff.add_updated(parent)

        logger.debug(
            "Created %s element %s in chain %s (%d total)",
            element.type,
            element.id,
            chain.id,
            len(diff.created_elements),
        )
        return diff

    def _instantiate(
        self,
        chain: Chain,
        descriptor: ElementDescriptor,
        parent: ChainElement | None,
        diff: ChainDiff,
    ) -> ChainElement:
        if parent is not None:
            self.check_child_allowed(chain, parent, descriptor)

        element = ChainElement(
            id=self.generate_id(),
            type=descriptor.name,
            kind=ElementKind.CONTAINER if descriptor.container else ElementKind.LEAF,
            name=descriptor.title,
            properties=descriptor.default_properties(),
            chain_id=chain.id,
        )
        if descriptor.ordered:
            siblings = chain.children_of(parent) if parent is not None else chain.root_elements()
            element.set_property(
                descriptor.priority_property, self._next_priority(siblings, descriptor)
            )

        chain.elements[element.id] = element
        if parent is not None:
            element.parent_id = parent.id
            parent.children.append(element.id)
        self.elements.save(element)
        diff.add_created(element)

        if descriptor.container:
            for child_type, count in descriptor.mandatory_children():
                child_descriptor = self.registry.get(child_type)
                for _ in range(count):
                    self._instantiate(chain, child_descriptor, element, diff)
        return element

    def check_child_allowed(
        self,
        chain: Chain,
        parent: ChainElement,
        child: ElementDescriptor,
    ) -> None:
        """Check that ``parent`` accepts one more child of type ``child``.

        Raises:
            ValidationError: If the parent type is unknown, the parent is
                not a container, the child type is not allowed, its input
                is disabled where that matters, or the count is exhausted.
        """
        parent_descriptor = self.registry.get(parent.type)
        if not parent.is_container or not parent_descriptor.container:
            raise ValidationError(f"Parent element of type '{parent.type}' is not a container")

        if parent_descriptor.accepts_any_child:
            if not child.input_enabled and parent.type != CONTAINER_TYPE_NAME:
                raise ValidationError(
                    f"Child element with disabled input is not allowed in '{parent.type}'"
                )
            return

        occurrence = parent_descriptor.allowed_children.get(child.name)
        if occurrence is None:
            raise ValidationError(
                f"Element of type '{child.name}' is not allowed in '{parent.type}'"
            )
        count = sum(1 for sibling in chain.children_of(parent) if sibling.type == child.name)
        if not occurrence.allows_another(count):
            raise ValidationError(
                f"Exceeded the number of elements of type '{child.name}' in '{parent.type}'"
            )

    @staticmethod
    def _next_priority(siblings: Iterable[ChainElement], descriptor: ElementDescriptor) -> int:
        priorities = []
        for sibling in siblings:
            if sibling.type != descriptor.name:
                continue
            priority = get_priority(sibling, descriptor)
            if priority is not None:
                priorities.append(priority)
        return max(priorities) + 1 if priorities else 0

    # ─────────────────────────────────────────────────────────────────────
    # Delete
    # ─────────────────────────────────────────────────────────────────────

    def delete_by_id_and_update_unsaved(self, element_id: str) -> ChainDiff:
        """Delete an element with its descendants and incident edges.

        Ordered siblings of the same type that sat after the element move
        one priority down. The parent is saved with the child removed.

        Raises:
            NotFoundError: If the element does not exist.
            ValidationError: If the element is the last child of its type
                that the parent must keep.
        """
        element = self._get_element(element_id)
        chain = self._get_chain(element.chain_id)
        parent = chain.parent_of(element)
        descriptor = self.registry.find(element.type)

        if parent is not None:
            self._check_removal_allowed(chain, parent, element)

        removal = list(chain.walk(element))
        removed_ids = {e.id for e in removal}
        removed_dependencies = incident_dependencies(chain, removal)

        diff = ChainDiff()
        diff.add_removed(*removal)
        diff.add_removed_dependencies(*removed_dependencies)

        for dependency in removed_dependencies:
            detach_dangling(chain, dependency, removed_ids)
            chain.dependencies.pop(dependency.id, None)

        reindexed: list[ChainElement] = []
        if parent is not None:
            if descriptor is not None and descriptor.ordered:
                reindexed = self._shift_priorities(chain, parent, element, descriptor)
            parent.children.remove(element.id)
            self.auditing.mark_modified(parent)

        self.dependencies.delete_all(removed_dependencies)
        self.elements.delete_all(removal)
        for removed in removal:
            chain.elements.pop(removed.id, None)
        self.elements.save_all(reindexed)
        diff.add_updated(*reindexed)
        if parent is not None:
            self.elements.save(parent)
            diff.add_updated(parent)

        logger.debug(
            "Deleted element %s with %d descendants and %d dependencies",
            element.id,
            len(removal) - 1,
            len(removed_dependencies),
        )
        return diff

    def _check_removal_allowed(
        self,
        chain: Chain,
        parent: ChainElement,
        element: ChainElement,
    ) -> None:
        parent_descriptor = self.registry.find(parent.type)
        if parent_descriptor is None:
            return
        occurrence = parent_descriptor.allowed_children.get(element.type)
        if occurrence is None:
            return
        count = sum(1 for sibling in chain.children_of(parent) if sibling.type == element.type)
        if not occurrence.allows_removal(count):
            raise ValidationError(
                f"Cannot remove the last allowed child element of type '{element.type}'"
            )

    def _shift_priorities(
        self,
        chain: Chain,
        parent: ChainElement,
        element: ChainElement,
        descriptor: ElementDescriptor,
    ) -> list[ChainElement]:
        removed_priority = get_priority(element, descriptor)
        if removed_priority is None:
            return []
        shifted = []
        for sibling in chain.children_of(parent):
            if sibling is element or sibling.type != element.type:
                continue
            priority = get_priority(sibling, descriptor)
            if priority is not None and priority > removed_priority:
                sibling.set_property(descriptor.priority_property, priority - 1)
                self.auditing.mark_modified(sibling)
                shifted.append(sibling)
        return shifted

    # ─────────────────────────────────────────────────────────────────────
    # Re-parent, group, ungroup
    # ─────────────────────────────────────────────────────────────────────

    def change_parent(self, element: ChainElement, new_parent_id: str | None) -> ChainElement:
        """Move an element under another container, or to the top level.

        Both the old and the new parent are marked modified, even when
        they are the same element. The new parent must accept one more
        child of the element's type, and the old parent must keep its
        required children.

        Raises:
            NotFoundError: If the new parent does not exist in the chain.
            ValidationError: If the new parent is not a container, lies
                inside the moved element or does not accept it, or if the
                element is the last required child of its old parent.
        """
        chain = self._get_chain(element.chain_id)
        old_parent = chain.parent_of(element)

        new_parent = None
        if new_parent_id is not None:
            new_parent = self.elements.find_by_id_and_chain_id(new_parent_id, chain.id)
            if new_parent is None:
                raise NotFoundError(f"Can't find element with id: {new_parent_id}")
            descriptor = self.registry.get(new_parent.type)
            if not new_parent.is_container or not descriptor.container:
                raise ValidationError(
                    f"Element of type '{new_parent.type}' can't contain other elements"
                )
            if new_parent is element or any(a is element for a in chain.ancestors(new_parent)):
                raise ValidationError("Element can't be moved inside itself")

        if new_parent is not old_parent:
            if new_parent is not None:
                self.check_child_allowed(chain, new_parent, self.registry.get(element.type))
            if old_parent is not None:
                self._check_removal_allowed(chain, old_parent, element)

        touched: list[ChainElement] = [element]
        if old_parent is not None:
            if element.id in old_parent.children:
                old_parent.children.remove(element.id)
            self.auditing.mark_modified(old_parent)
            touched.append(old_parent)

        element.parent_id = None
        if new_parent is not None:
            element.parent_id = new_parent.id
            new_parent.children.append(element.id)
            self.auditing.mark_modified(new_parent)
            touched.append(new_parent)

        self.elements.save_all(touched)
        logger.debug("Moved element %s under %s", element.id, new_parent_id)
        return element

    def group(self, chain_id: str, element_ids: list[str]) -> ChainElement:
        """Wrap top-level elements into a new grouping container.

        Raises:
            NotFoundError: If the chain or any element does not exist.
            ValidationError: If any element already has a parent.
        """
        chain = self._get_chain(chain_id)
        element_ids = list(dict.fromkeys(element_ids))
        members = [
            element
            for element in self.elements.find_all_by_id(element_ids)
            if element.chain_id == chain.id
        ]
        found = {element.id for element in members}
        missing = [element_id for element_id in element_ids if element_id not in found]
        if missing:
            raise NotFoundError(f"Can't find elements with ids: {', '.join(missing)}")
        if any(element.parent_id is not None for element in members):
            raise ValidationError("Only top-level elements can be grouped")

        group = ChainElement(
            id=self.generate_id(),
            type=CONTAINER_TYPE_NAME,
            kind=ElementKind.CONTAINER,
            name=CONTAINER_DEFAULT_NAME,
            chain_id=chain.id,
        )
        chain.elements[group.id] = group
        for element in members:
            element.parent_id = group.id
            group.children.append(element.id)

        self.elements.save(group)
        self.elements.save_all(members)
        logger.debug("Grouped %d elements into %s", len(members), group.id)
        return group

    def ungroup(self, group_id: str) -> list[ChainElement]:
        """Dissolve a grouping container, freeing its children.

        Raises:
            NotFoundError: If the element does not exist.
            ValidationError: If it is not a grouping container.
        """
        group = self._get_element(group_id)
        if group.type != CONTAINER_TYPE_NAME:
            raise ValidationError(f"Element of type '{group.type}' is not a group")
        chain = self._get_chain(group.chain_id)

        children = chain.children_of(group)
        for child in children:
            child.parent_id = None
        group.children.clear()

        holder = chain.parent_of(group)
        if holder is not None:
            if group.id in holder.children:
                holder.children.remove(group.id)
            self.auditing.mark_modified(holder)

        dependencies = incident_dependencies(chain, [group])
        for dependency in dependencies:
            disconnect(chain, dependency.id)

        self.elements.save_all(children)
        if holder is not None:
            self.elements.save(holder)
        self.dependencies.delete_all(dependencies)
        self.elements.delete(group)
        chain.elements.pop(group.id, None)
        logger.debug("Ungrouped %s, freed %d elements", group.id, len(children))
        return children


__all__ = [
    "CONTAINER_DEFAULT_NAME",
    "CONTAINER_TYPE_NAME",
    "ElementEngine",
    "get_priority",
]
