"""Graph serialization - JSON-compatible dicts for the HTTP surface.

Keys use the camelCase names of the catalog's REST API.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from chaincatalog.graph.diff import ChainDiff
    from chaincatalog.graph.model import (
        Chain,
        ChainElement,
        Dependency,
        Folder,
        Label,
        SpecificationGroup,
        SystemModel,
    )


def _timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def serialize_label(label: Label) -> dict[str, Any]:
    return {"name": label.name, "technical": label.technical}


def serialize_element(element: ChainElement) -> dict[str, Any]:
    """Serialize a ChainElement; children and edges are given by id."""
    result: dict[str, Any] = {
        "id": element.id,
        "type": element.type,
        "name": element.name,
        "description": element.description,
        "chainId": element.chain_id,
        "parentElementId": element.parent_id,
        "properties": dict(element.properties),
        "inputDependencies": list(element.input_dependencies),
        "outputDependencies": list(element.output_dependencies),
        "createdWhen": _timestamp(element.created_when),
        "modifiedWhen": _timestamp(element.modified_when),
    }
    if element.is_container:
        result["children"] = list(element.children)
    return result


def serialize_dependency(dependency: Dependency) -> dict[str, Any]:
    return {
        "id": dependency.id,
        "from": dependency.element_from,
        "to": dependency.element_to,
    }


def serialize_diff(diff: ChainDiff) -> dict[str, Any]:
    """Serialize a ChainDiff.

    Args:
        diff: The diff to serialize.

    Returns:
        Dict with one list per change set.
    """
    return {
        "createdElements": [serialize_element(e) for e in diff.created_elements],
        "updatedElements": [serialize_element(e) for e in diff.updated_elements],
        "removedElements": [serialize_element(e) for e in diff.removed_elements],
        "createdDependencies": [serialize_dependency(d) for d in diff.created_dependencies],
        "removedDependencies": [serialize_dependency(d) for d in diff.removed_dependencies],
    }


def serialize_chain(chain: Chain, *, include_graph: bool = True) -> dict[str, Any]:
    """Serialize a Chain.

    Args:
        chain: The chain to serialize.
        include_graph: Whether to embed elements and dependencies.
    """
    result: dict[str, Any] = {
        "id": chain.id,
        "name": chain.name,
        "description": chain.description,
        "parentFolderId": chain.parent_folder_id,
        "labels": [serialize_label(label) for label in chain.labels],
        "currentSnapshotId": chain.current_snapshot_id,
        "overridesChainId": chain.overrides_chain_id,
        "overriddenByChainId": chain.overridden_by_chain_id,
        "createdWhen": _timestamp(chain.created_when),
        "modifiedWhen": _timestamp(chain.modified_when),
    }
    if include_graph:
        result["elements"] = [serialize_element(e) for e in chain.iter_elements()]
        result["dependencies"] = [serialize_dependency(d) for d in chain.iter_dependencies()]
    return result


def serialize_folder(folder: Folder) -> dict[str, Any]:
    return {
        "id": folder.id,
        "name": folder.name,
        "description": folder.description,
        "parentFolderId": folder.parent_folder_id,
        "createdWhen": _timestamp(folder.created_when),
        "modifiedWhen": _timestamp(folder.modified_when),
    }


def serialize_labeled(entity: SpecificationGroup | SystemModel) -> dict[str, Any]:
    """Serialize a specification group or system model."""
    return {
        "id": entity.id,
        "name": entity.name,
        "description": entity.description,
        "labels": [serialize_label(label) for label in entity.labels],
    }


__all__ = [
    "serialize_chain",
    "serialize_dependency",
    "serialize_diff",
    "serialize_element",
    "serialize_folder",
    "serialize_label",
    "serialize_labeled",
]
