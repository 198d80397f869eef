"""Graph module - chain graph data structures and structural engines.

Exports:
- ElementKind, ChainElement, Dependency: nodes and edges of a chain graph
- Chain, Folder: the catalog hierarchy
- Label variants for chains, specification groups and system models
- ChainDiff: the changes produced by one engine operation
- DescriptorRegistry: element type metadata consulted by the engines

Note: ElementEngine and ChainCopier live in chaincatalog.graph.elements and
chaincatalog.graph.copier (use chaincatalog.factory.build_catalog() to wire them)
"""

from chaincatalog.graph.descriptors import (
    ChildOccurrence,
    DescriptorRegistry,
    ElementDescriptor,
    PropertyDescriptor,
)
from chaincatalog.graph.diff import ChainDiff
from chaincatalog.graph.model import (
    Chain,
    ChainElement,
    ChainLabel,
    Dependency,
    ElementKind,
    Folder,
    Label,
    SpecificationGroup,
    SpecificationGroupLabel,
    SystemModel,
    SystemModelLabel,
)

__all__ = [
    "Chain",
    "ChainDiff",
    "ChainElement",
    "ChainLabel",
    "ChildOccurrence",
    "Dependency",
    "DescriptorRegistry",
    "ElementDescriptor",
    "ElementKind",
    "Folder",
    "Label",
    "PropertyDescriptor",
    "SpecificationGroup",
    "SpecificationGroupLabel",
    "SystemModel",
    "SystemModelLabel",
]
