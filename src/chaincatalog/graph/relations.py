"""Relations - dependency edge maintenance inside a chain.

A ``Dependency`` is stored once in the chain arena and referenced by id from
the output list of its source and the input list of its target. These
functions keep the three places consistent.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Iterator
from typing import Mapping

from chaincatalog.exceptions import NotFoundError
from chaincatalog.graph.model import Chain, ChainElement, Dependency


def new_id() -> str:
    """Generate a fresh entity id."""
    return str(uuid.uuid4())


def connect(chain: Chain, element_from: str, element_to: str) -> Dependency:
    """Create an edge between two elements of ``chain``.

    Args:
        chain: Chain owning both endpoints.
        element_from: Source element id.
        element_to: Target element id.

    Returns:
        The new Dependency, registered on both endpoints and in the arena.

    Raises:
        NotFoundError: If an endpoint is not an element of the chain.
    """
    source = chain.find_element(element_from)
    target = chain.find_element(element_to)
    if source is None or target is None:
        missing = element_from if source is None else element_to
        raise NotFoundError(f"Element '{missing}' not found in chain '{chain.id}'")
    dependency = Dependency(id=new_id(), element_from=element_from, element_to=element_to)
    attach(chain, dependency)
    return dependency


def attach(chain: Chain, dependency: Dependency) -> None:
    """Register an existing edge in the arena and on its endpoints."""
    chain.dependencies[dependency.id] = dependency
    source = chain.elements[dependency.element_from]
    target = chain.elements[dependency.element_to]
    if dependency.id not in source.output_dependencies:
        source.output_dependencies.append(dependency.id)
    if dependency.id not in target.input_dependencies:
        target.input_dependencies.append(dependency.id)


def disconnect(chain: Chain, dependency_id: str) -> Dependency:
    """Remove an edge from the arena and from both endpoints.

    Raises:
        NotFoundError: If the chain has no such dependency.
    """
    dependency = chain.dependencies.pop(dependency_id, None)
    if dependency is None:
        raise NotFoundError(f"Dependency '{dependency_id}' not found in chain '{chain.id}'")
    source = chain.find_element(dependency.element_from)
    target = chain.find_element(dependency.element_to)
    if source is not None and dependency_id in source.output_dependencies:
        source.output_dependencies.remove(dependency_id)
    if target is not None and dependency_id in target.input_dependencies:
        target.input_dependencies.remove(dependency_id)
    return dependency


def iter_incident(chain: Chain, element: ChainElement) -> Iterator[Dependency]:
    """Iterate the input then output edges of an element."""
    for dependency_id in [*element.input_dependencies, *element.output_dependencies]:
        dependency = chain.dependencies.get(dependency_id)
        if dependency is not None:
            yield dependency


def incident_dependencies(chain: Chain, elements: Iterable[ChainElement]) -> list[Dependency]:
    """Collect every edge with an endpoint among ``elements``, once each."""
    seen: set[str] = set()
    result: list[Dependency] = []
    for element in elements:
        for dependency in iter_incident(chain, element):
            if dependency.id not in seen:
                seen.add(dependency.id)
                result.append(dependency)
    return result


def detach_dangling(chain: Chain, dependency: Dependency, removed_ids: set[str]) -> None:
    """Clear the pointer to ``dependency`` on an endpoint that survives.

    Endpoints inside ``removed_ids`` are left alone; they are deleted with
    their stale lists.
    """
    if dependency.element_from not in removed_ids:
        source = chain.find_element(dependency.element_from)
        if source is not None and dependency.id in source.output_dependencies:
            source.output_dependencies.remove(dependency.id)
    if dependency.element_to not in removed_ids:
        target = chain.find_element(dependency.element_to)
        if target is not None and dependency.id in target.input_dependencies:
            target.input_dependencies.remove(dependency.id)


def remap_dependencies(
    original: Chain,
    copy: Chain,
    originals: Iterable[ChainElement],
    copies: Mapping[str, ChainElement],
) -> list[Dependency]:
    """Rebuild the edges of copied elements.

    ``copies`` maps original element ids to their copies. Originals are
    visited in order. An input edge ``X -> E`` is recreated only while the
    copy of ``X`` has no output edges yet; an output edge ``E -> Y`` only
    while the copy of ``Y`` has no input edges yet. Each edge is therefore
    created at most once, by whichever endpoint is visited first. An edge
    whose endpoints were both linked elsewhere before either is visited is
    not recreated. Edges to elements outside ``copies`` are dropped.

    Returns:
        The dependencies created in ``copy``.
    """
    created: list[Dependency] = []
    for element in originals:
        copied = copies[element.id]
        for dependency_id in element.input_dependencies:
            dependency = original.dependencies.get(dependency_id)
            if dependency is None:
                continue
            far = copies.get(dependency.element_from)
            if far is not None and not far.output_dependencies:
                created.append(connect(copy, far.id, copied.id))
        for dependency_id in element.output_dependencies:
            dependency = original.dependencies.get(dependency_id)
            if dependency is None:
                continue
            far = copies.get(dependency.element_to)
            if far is not None and not far.input_dependencies:
                created.append(connect(copy, copied.id, far.id))
    return created


__all__ = [
    "attach",
    "connect",
    "detach_dangling",
    "disconnect",
    "incident_dependencies",
    "iter_incident",
    "new_id",
    "remap_dependencies",
]
