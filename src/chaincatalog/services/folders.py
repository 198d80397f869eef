"""Folder hierarchy service - CRUD, acyclic moves and cascading delete."""

from __future__ import annotations

import logging
from collections import deque

from chaincatalog.exceptions import FolderMoveError, NotFoundError
from chaincatalog.graph.model import Chain, Folder
from chaincatalog.persistence.memory import CatalogStore
from chaincatalog.persistence.repositories import ChainRepository, FolderRepository
from chaincatalog.services.actionlog import ActionsLogService, LogOperation
from chaincatalog.services.deployments import DeploymentService
from chaincatalog.services.filters import FilterRequest, apply_query_filters
from chaincatalog.services.overrides import unlink_overrides

logger = logging.getLogger(__name__)


class FolderService:
    def __init__(
        self,
        store: CatalogStore,
        folders: FolderRepository,
        chains: ChainRepository,
        deployments: DeploymentService,
        action_log: ActionsLogService,
    ) -> None:
        self.store = store
        self.folders = folders
        self.chains = chains
        self.deployments = deployments
        self.action_log = action_log

    # ─────────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────────

    def find_all_in_root(self) -> list[Folder]:
        return self.folders.find_all_by_parent_folder_id(None)

    def find_by_id(self, folder_id: str) -> Folder:
        folder = self.folders.find_by_id(folder_id)
        if folder is None:
            raise NotFoundError(f"Can't find folder with id: {folder_id}")
        return folder

    def find_entity_by_id_or_none(self, folder_id: str | None) -> Folder | None:
        return self.folders.find_by_id(folder_id) if folder_id is not None else None

    def ancestors(self, folder: Folder | None) -> list[Folder]:
        """Return ``folder`` and its parents up to the root, nearest first."""
        path: list[Folder] = []
        seen: set[str] = set()
        while folder is not None and folder.id not in seen:
            seen.add(folder.id)
            path.append(folder)
            folder = self.find_entity_by_id_or_none(folder.parent_folder_id)
        return path

    def provide_navigation_path(self, folder_id: str) -> dict[str, str]:
        """Map of folder id to name from the folder up to the root."""
        return {f.id: f.name for f in self.ancestors(self.find_by_id(folder_id))}

    def find_nested_folders(self, folder_id: str) -> list[Folder]:
        """Every folder below ``folder_id``, breadth first."""
        nested: list[Folder] = []
        queue: deque[str] = deque([folder_id])
        while queue:
            for child in self.folders.find_all_by_parent_folder_id(queue.popleft()):
                nested.append(child)
                queue.append(child.id)
        return nested

    def find_nested_chains(
        self,
        folder_id: str,
        filters: list[FilterRequest] | None = None,
    ) -> list[Chain]:
        """Chains in the folder and in every nested folder."""
        folder_ids = [folder_id, *(f.id for f in self.find_nested_folders(folder_id))]
        chains = [c for fid in folder_ids for c in self.chains.find_all_by_parent_folder_id(fid)]
        return apply_query_filters(chains, filters) if filters else chains

    def collect_nested_entities(self, folder: Folder) -> list[Folder | Chain]:
        """Pre-order list of the folder, its chains and everything below."""
        entities: list[Folder | Chain] = []
        stack: list[Folder] = [folder]
        while stack:
            current = stack.pop()
            entities.append(current)
            entities.extend(self.chains.find_all_by_parent_folder_id(current.id))
            stack.extend(reversed(self.folders.find_all_by_parent_folder_id(current.id)))
        return entities

    # ─────────────────────────────────────────────────────────────────────
    # Mutations
    # ─────────────────────────────────────────────────────────────────────

    def _resolve_parent(self, parent_folder_id: str | None) -> Folder | None:
        if parent_folder_id is None:
            return None
        return self.find_by_id(parent_folder_id)

    def _check_not_moving_to_child(self, folder: Folder, target: Folder | None) -> None:
        if target is None:
            return
        if any(ancestor.id == folder.id for ancestor in self.ancestors(target)):
            raise FolderMoveError(folder.name, target.name)

    def save(self, folder: Folder, parent_folder_id: str | None = None) -> Folder:
        """Persist a new or changed folder under a parent (None = root)."""
        with self.store.transaction():
            parent = self._resolve_parent(parent_folder_id)
            folder.parent_folder_id = parent.id if parent is not None else None
            if folder.created_when is not None:
                self.store.auditing.mark_modified(folder)
            return self.folders.save(folder)

    def update(
        self,
        folder_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
        parent_folder_id: str | None = None,
    ) -> Folder:
        """Change the name, description or parent of a folder.

        Raises:
            NotFoundError: If the folder or the new parent does not exist.
            FolderMoveError: If the new parent lies below the folder.
        """
        with self.store.transaction():
            folder = self.find_by_id(folder_id)
            if name is not None:
                folder.name = name
            if description is not None:
                folder.description = description
            if parent_folder_id is not None:
                target = self._resolve_parent(parent_folder_id)
                self._check_not_moving_to_child(folder, target)
                folder.parent_folder_id = target.id
            self.store.auditing.mark_modified(folder)
            return self.folders.save(folder)

    def move(self, folder_id: str, target_folder_id: str | None) -> Folder:
        """Move a folder under another folder, or to the root.

        Raises:
            NotFoundError: If either folder does not exist.
            FolderMoveError: If the target is the folder or lies below it.
        """
        with self.store.transaction():
            folder = self.find_by_id(folder_id)
            target = self._resolve_parent(target_folder_id)
            self._check_not_moving_to_child(folder, target)
            folder.parent_folder_id = target.id if target is not None else None
            self.store.auditing.mark_modified(folder)
            self.folders.save(folder)
            logger.debug("Moved folder %s to %s", folder.id, target_folder_id)
            return folder

    def delete_by_id(self, folder_id: str) -> None:
        """Delete a folder with all nested folders and chains.

        Runtime deployments of every nested chain are removed first; a
        failure there aborts the delete.

        Raises:
            NotFoundError: If the folder does not exist.
            ConnectivityError: If the runtime catalog cannot be reached.
        """
        with self.store.transaction():
            folder = self.find_by_id(folder_id)
            entities = self.collect_nested_entities(folder)
            folders_by_id = {e.id: e for e in entities if isinstance(e, Folder)}
            chains = [e for e in entities if isinstance(e, Chain)]

            for chain in chains:
                self.deployments.delete_all_by_chain_id(chain.id)
            for chain in chains:
                unlink_overrides(self.chains, chain)

            self.folders.delete_by_id(folder_id)
            logger.debug(
                "Deleted folder %s with %d folders and %d chains",
                folder_id,
                len(folders_by_id) - 1,
                len(chains),
            )

        for chain in chains:
            self.action_log.log_chain_action(
                chain, LogOperation.DELETE, parent=folders_by_id.get(chain.parent_folder_id)
            )


__all__ = ["FolderService"]
