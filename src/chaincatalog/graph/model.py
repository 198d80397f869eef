"""Graph entity model - chains, folders, elements, dependencies and labels.

Elements and dependencies of a chain live in two id-keyed arenas owned by
the ``Chain``. Parent/child links and edge endpoints are plain ids resolved
through those arenas, so the object graph never holds native cycles:

- ElementKind: tag distinguishing leaf elements from containers
- ChainElement: a node of a chain graph
- Dependency: a directed edge between two elements of one chain
- Chain / Folder: the catalog hierarchy
- Label and its owner-specific variants
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterator


class ElementKind(Enum):
    """Structural variant of a chain element."""

    LEAF = "leaf"
    CONTAINER = "container"


@dataclass(eq=False)
class ChainElement:
    """A node in a chain graph.

    Only ``CONTAINER`` elements may have children. ``children`` keeps the
    child ids in insertion order; a child belongs to exactly one parent.

    Attributes:
        id: Unique identifier of the element.
        type: Key into the element descriptor registry.
        kind: Leaf or container variant.
        name: Display name.
        properties: Open property map, meaning defined by the descriptor.
        chain_id: Owning chain.
        parent_id: Id of the parent container, if any.
    """

    id: str
    type: str
    kind: ElementKind = ElementKind.LEAF
    name: str = ""
    description: str = ""
    properties: dict[str, Any] = field(default_factory=dict)
    chain_id: str | None = None
    parent_id: str | None = None
    children: list[str] = field(default_factory=list)
    input_dependencies: list[str] = field(default_factory=list, repr=False)
    output_dependencies: list[str] = field(default_factory=list, repr=False)
    created_when: datetime | None = None
    modified_when: datetime | None = None
    original_id: str | None = None

    @property
    def is_container(self) -> bool:
        """True if this element can hold children."""
        return self.kind is ElementKind.CONTAINER

    @property
    def is_modified(self) -> bool:
        """True if the element was edited after it was created."""
        return self.created_when != self.modified_when

    def get_property(self, key: str, default: Any = None) -> Any:
        """Get a property value."""
        return self.properties.get(key, default)

    def set_property(self, key: str, value: Any) -> None:
        """Set a property value."""
        self.properties[key] = value


@dataclass(eq=False)
class Dependency:
    """A directed edge ``element_from -> element_to`` inside one chain."""

    id: str
    element_from: str
    element_to: str

    def touches(self, element_id: str) -> bool:
        """Check whether the element is one of the endpoints."""
        return element_id in (self.element_from, self.element_to)

    def other_end(self, element_id: str) -> str:
        """Return the endpoint opposite to ``element_id``."""
        return self.element_to if self.element_from == element_id else self.element_from


@dataclass(eq=False)
class Label:
    """A named tag. Technical labels are managed by the system only."""

    name: str
    technical: bool = False


@dataclass(eq=False)
class ChainLabel(Label):
    chain_id: str | None = None


@dataclass(eq=False)
class SpecificationGroupLabel(Label):
    specification_group_id: str | None = None


@dataclass(eq=False)
class SystemModelLabel(Label):
    system_model_id: str | None = None


@dataclass(eq=False)
class Chain:
    """A named flow graph of elements and dependencies.

    The override relationship is symmetric: if this chain overrides B,
    B.overridden_by_chain_id is this chain's id.
    """

    id: str
    name: str
    description: str = ""
    parent_folder_id: str | None = None
    elements: dict[str, ChainElement] = field(default_factory=dict, repr=False)
    dependencies: dict[str, Dependency] = field(default_factory=dict, repr=False)
    labels: list[ChainLabel] = field(default_factory=list)
    snapshots: list[str] = field(default_factory=list, repr=False)
    current_snapshot_id: str | None = None
    deployments: list[str] = field(default_factory=list, repr=False)
    overrides_chain_id: str | None = None
    overridden_by_chain_id: str | None = None
    created_when: datetime | None = None
    modified_when: datetime | None = None

    def iter_elements(self) -> Iterator[ChainElement]:
        """Iterate elements in insertion order."""
        yield from self.elements.values()

    def iter_dependencies(self) -> Iterator[Dependency]:
        """Iterate dependencies in insertion order."""
        yield from self.dependencies.values()

    def find_element(self, element_id: str | None) -> ChainElement | None:
        """Find an element of this chain by id."""
        if element_id is None:
            return None
        return self.elements.get(element_id)

    def root_elements(self) -> list[ChainElement]:
        """Elements without a parent."""
        return [e for e in self.elements.values() if e.parent_id is None]

    def children_of(self, element: ChainElement) -> list[ChainElement]:
        """Resolve the children of a container through the arena."""
        return [self.elements[cid] for cid in element.children if cid in self.elements]

    def parent_of(self, element: ChainElement) -> ChainElement | None:
        """Resolve the parent of an element through the arena."""
        return self.find_element(element.parent_id)

    def walk(self, element: ChainElement) -> Iterator[ChainElement]:
        """Iterate ``element`` and all of its descendants in pre-order.

        Uses an explicit stack so nesting depth is not bounded by the
        interpreter recursion limit.
        """
        stack: list[ChainElement] = [element]
        while stack:
            current = stack.pop()
            yield current
            if current.is_container:
                stack.extend(reversed(self.children_of(current)))

    def ancestors(self, element: ChainElement) -> Iterator[ChainElement]:
        """Iterate the parent chain of an element up to the root."""
        parent = self.parent_of(element)
        while parent is not None:
            yield parent
            parent = self.parent_of(parent)

    def label_names(self) -> set[str]:
        """Names of all labels attached to the chain."""
        return {label.name for label in self.labels}


@dataclass(eq=False)
class Folder:
    """A folder of chains and sub-folders.

    The parent relation must stay acyclic.
    """

    id: str
    name: str
    description: str = ""
    parent_folder_id: str | None = None
    created_when: datetime | None = None
    modified_when: datetime | None = None


@dataclass(eq=False)
class SpecificationGroup:
    id: str
    name: str
    description: str = ""
    labels: list[SpecificationGroupLabel] = field(default_factory=list)


@dataclass(eq=False)
class SystemModel:
    id: str
    name: str
    description: str = ""
    labels: list[SystemModelLabel] = field(default_factory=list)


__all__ = [
    "Chain",
    "ChainElement",
    "ChainLabel",
    "Dependency",
    "ElementKind",
    "Folder",
    "Label",
    "SpecificationGroup",
    "SpecificationGroupLabel",
    "SystemModel",
    "SystemModelLabel",
]
