"""Exception classes for the catalog.

Every error raised by the engines and services derives from
``CatalogError`` so callers at a protocol boundary can translate the
kind into a response without knowing the concrete operation.
"""


class CatalogError(Exception):
    """Base exception for all catalog errors"""

    pass


class NotFoundError(CatalogError):
    """Raised when a chain, folder or element id does not exist"""

    pass


class ValidationError(CatalogError):
    """Raised when a descriptor constraint is violated"""

    pass


class StructuralConflictError(CatalogError):
    """Raised when a mutation would break the folder hierarchy"""

    pass


class FolderMoveError(StructuralConflictError):
    """Raised when a folder is moved under one of its own descendants"""

    def __init__(self, folder_name: str, target_name: str) -> None:
        super().__init__(
            f"Folder '{folder_name}' cannot be moved to its descendant folder '{target_name}'"
        )
        self.folder_name = folder_name
        self.target_name = target_name


class ConnectivityError(CatalogError):
    """Raised when a downstream microservice cannot be reached"""

    pass


__all__ = [
    "CatalogError",
    "ConnectivityError",
    "FolderMoveError",
    "NotFoundError",
    "StructuralConflictError",
    "ValidationError",
]
