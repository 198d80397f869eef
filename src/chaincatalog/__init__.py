"""
chaincatalog - Design-time catalog of integration chains

Keeps chains, folders and chain elements of an integration platform and
provides the structural mutations an editor needs: element creation with
descriptor-driven defaults, cascading deletion, regrouping, re-parenting,
chain copy and folder moves.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("chaincatalog")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed
__license__ = "MIT"

from chaincatalog.exceptions import (
    CatalogError,
    ConnectivityError,
    NotFoundError,
    StructuralConflictError,
    ValidationError,
)
from chaincatalog.graph.diff import ChainDiff

__all__ = [
    "__version__",
    "CatalogError",
    "ChainDiff",
    "ConnectivityError",
    "NotFoundError",
    "StructuralConflictError",
    "ValidationError",
]
