"""ChainDiff - the structural changes produced by one engine operation.

Downstream consumers (for example a live editor) apply a diff to their own
copy of the chain instead of reloading it. Each collection holds an entity
at most once; membership is by identity.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TypeVar

from chaincatalog.graph.model import ChainElement, Dependency

T = TypeVar("T")


def _append_unique(target: list[T], items: Iterable[T]) -> None:
    for item in items:
        if not any(existing is item for existing in target):
            target.append(item)


@dataclass
class ChainDiff:
    """Created, updated and removed elements and dependencies.

    Attributes:
        created_elements: Newly instantiated elements, including
            auto-generated children.
        updated_elements: Elements whose persisted state changed.
        removed_elements: Deleted elements.
        created_dependencies: New edges.
        removed_dependencies: Deleted edges.
    """

    created_elements: list[ChainElement] = field(default_factory=list)
    updated_elements: list[ChainElement] = field(default_factory=list)
    removed_elements: list[ChainElement] = field(default_factory=list)
    created_dependencies: list[Dependency] = field(default_factory=list)
    removed_dependencies: list[Dependency] = field(default_factory=list)

    def add_created(self, *elements: ChainElement) -> None:
        _append_unique(self.created_elements, elements)

    def add_updated(self, *elements: ChainElement) -> None:
        _append_unique(self.updated_elements, elements)

    def add_removed(self, *elements: ChainElement) -> None:
        _append_unique(self.removed_elements, elements)

    def add_removed_dependencies(self, *dependencies: Dependency) -> None:
        _append_unique(self.removed_dependencies, dependencies)

    def is_empty(self) -> bool:
        """True if the diff reports no change."""
        return not (
            self.created_elements
            or self.updated_elements
            or self.removed_elements
            or self.created_dependencies
            or self.removed_dependencies
        )


__all__ = ["ChainDiff"]
