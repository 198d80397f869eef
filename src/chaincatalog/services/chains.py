"""Chain service - CRUD, copy, moves, override links and chain queries."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable

from chaincatalog.exceptions import NotFoundError
from chaincatalog.graph.copier import ChainCopier
from chaincatalog.graph.labels import reconcile_labels
from chaincatalog.graph.model import Chain, ChainLabel
from chaincatalog.persistence.memory import CatalogStore
from chaincatalog.persistence.repositories import ChainRepository
from chaincatalog.services.actionlog import ActionsLogService, LogOperation
from chaincatalog.services.deployments import DeploymentService
from chaincatalog.services.filters import (
    ChainStatusFilter,
    ElementFilter,
    FilterRequest,
    apply_query_filters,
    feature_values,
    matches,
    search_filters,
)
from chaincatalog.services.folders import FolderService
from chaincatalog.services.overrides import link_override, unlink_overrides

logger = logging.getLogger(__name__)


class ChainService:
    """Operations on chains as a whole.

    Every mutation runs in one store transaction; the action log is
    written after it commits.
    """

    def __init__(
        self,
        store: CatalogStore,
        chains: ChainRepository,
        folders: FolderService,
        copier: ChainCopier,
        deployments: DeploymentService,
        action_log: ActionsLogService,
    ) -> None:
        self.store = store
        self.chains = chains
        self.folders = folders
        self.copier = copier
        self.deployments = deployments
        self.action_log = action_log

    def _log(self, chain: Chain, operation: LogOperation) -> None:
        parent = self.folders.find_entity_by_id_or_none(chain.parent_folder_id)
        self.action_log.log_chain_action(chain, operation, parent=parent)

    # ─────────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────────

    def find_all(self) -> list[Chain]:
        return self.chains.find_all()

    def find_by_id(self, chain_id: str) -> Chain:
        chain = self.chains.find_by_id(chain_id)
        if chain is None:
            raise NotFoundError(f"Can't find chain with id: {chain_id}")
        return chain

    def find_in_folder(
        self, folder_id: str, filters: list[FilterRequest] | None = None
    ) -> list[Chain]:
        chains = self.chains.find_all_by_parent_folder_id(folder_id)
        return apply_query_filters(chains, filters) if filters else chains

    def find_in_root(self, filters: list[FilterRequest] | None = None) -> list[Chain]:
        chains = self.chains.find_all_by_parent_folder_id(None)
        return apply_query_filters(chains, filters) if filters else chains

    def get_names_map_by_chain_ids(self, chain_ids: Iterable[str]) -> dict[str, str]:
        return {chain.id: chain.name for chain in self.chains.find_all_by_id(chain_ids)}

    def get_chains_count(self) -> int:
        return self.chains.count()

    def provide_navigation_path(self, chain_id: str) -> dict[str, str]:
        """Map of id to name from the chain up through its folders to the root."""
        chain = self.find_by_id(chain_id)
        path = {chain.id: chain.name}
        parent = self.folders.find_entity_by_id_or_none(chain.parent_folder_id)
        for folder in self.folders.ancestors(parent):
            path[folder.id] = folder.name
        return path

    def search(self, condition: str) -> list[Chain]:
        """Chains where any searchable feature contains ``condition``."""
        clauses = search_filters(condition)
        return [
            chain
            for chain in self.chains.find_all()
            if any(matches(feature_values(chain, c.feature), c) for c in clauses)
        ]

    def find_by_filter_request(self, filters: list[FilterRequest]) -> list[Chain]:
        """Chains matching every clause, simple ones first."""
        chains = apply_query_filters(self.chains.find_all(), filters)
        return self.apply_complex_filters(chains, filters)

    def apply_complex_filters(
        self, chains: list[Chain], filters: list[FilterRequest]
    ) -> list[Chain]:
        chains = ChainStatusFilter(self.deployments).apply(chains, filters)
        chains = ElementFilter().apply(chains, filters)
        return chains

    # ─────────────────────────────────────────────────────────────────────
    # Mutations
    # ─────────────────────────────────────────────────────────────────────

    def save(self, chain: Chain, parent_folder_id: str | None = None) -> Chain:
        """Persist a new chain into a folder (None = root)."""
        with self.store.transaction():
            parent = self.folders.find_by_id(parent_folder_id) if parent_folder_id else None
            chain.parent_folder_id = parent.id if parent is not None else None
            for label in chain.labels:
                label.chain_id = chain.id
            if chain.created_when is not None:
                self.store.auditing.mark_modified(chain)
            saved = self.chains.save(chain)
        self._log(saved, LogOperation.CREATE)
        return saved

    def update(
        self,
        chain_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
        labels: list[ChainLabel] | None = None,
        parent_folder_id: str | None = None,
    ) -> Chain:
        """Change scalar fields, user labels or the folder of a chain.

        Labels are reconciled by name; technical labels are left alone.
        """
        with self.store.transaction():
            chain = self.find_by_id(chain_id)
            if name is not None:
                chain.name = name
            if description is not None:
                chain.description = description
            if parent_folder_id is not None:
                chain.parent_folder_id = self.folders.find_by_id(parent_folder_id).id
            if labels is not None:
                reconcile_labels(
                    chain.labels,
                    labels,
                    bind=lambda label: replace(label, chain_id=chain.id),
                )
            self.store.auditing.mark_modified(chain)
            self.chains.save(chain)
        self._log(chain, LogOperation.UPDATE)
        return chain

    def delete_by_id(self, chain_id: str) -> None:
        """Delete a chain after removing its runtime deployments.

        Override links on both sides are broken.

        Raises:
            NotFoundError: If the chain does not exist.
            ConnectivityError: If the runtime catalog cannot be reached.
        """
        with self.store.transaction():
            chain = self.find_by_id(chain_id)
            self.deployments.delete_all_by_chain_id(chain_id)
            unlink_overrides(self.chains, chain)
            self.chains.delete(chain)
        logger.debug("Deleted chain %s", chain_id)
        self._log(chain, LogOperation.DELETE)

    def move(self, chain_id: str, target_folder_id: str | None) -> Chain:
        with self.store.transaction():
            chain = self.find_by_id(chain_id)
            target = self.folders.find_by_id(target_folder_id) if target_folder_id else None
            chain.parent_folder_id = target.id if target is not None else None
            self.store.auditing.mark_modified(chain)
            self.chains.save(chain)
        self._log(chain, LogOperation.MOVE)
        return chain

    def copy(self, chain_id: str, target_folder_id: str | None) -> Chain:
        """Copy a chain into a folder (None = root)."""
        with self.store.transaction():
            chain = self.find_by_id(chain_id)
            target = self.folders.find_by_id(target_folder_id) if target_folder_id else None
            chain_copy = self.copier.copy(chain, target.id if target is not None else None)
        self._log(chain_copy, LogOperation.COPY)
        return chain_copy

    def duplicate(self, chain_id: str) -> Chain:
        """Copy a chain next to itself."""
        with self.store.transaction():
            chain = self.find_by_id(chain_id)
            chain_copy = self.copier.copy(chain, chain.parent_folder_id)
        self._log(chain_copy, LogOperation.COPY)
        return chain_copy

    def link_override(self, chain_id: str, overridden_chain_id: str) -> Chain:
        """Make one chain override another.

        Raises:
            NotFoundError: If either chain does not exist.
            ValidationError: If both ids are the same.
        """
        with self.store.transaction():
            chain = self.find_by_id(chain_id)
            overridden = self.find_by_id(overridden_chain_id)
            link_override(self.chains, chain, overridden)
        self._log(chain, LogOperation.UPDATE)
        return chain

    def unlink_overrides(self, chain_id: str) -> Chain:
        with self.store.transaction():
            chain = self.find_by_id(chain_id)
            unlink_overrides(self.chains, chain)
            self.chains.save(chain)
        self._log(chain, LogOperation.UPDATE)
        return chain


__all__ = ["ChainService"]
