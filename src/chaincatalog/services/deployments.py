"""
chaincatalog.services.deployments - Runtime catalog client.

Removes runtime deployments of chains that are about to be deleted and
reads the deployment state used by the status filters.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from typing import Any

from chaincatalog.exceptions import ConnectivityError

logger = logging.getLogger(__name__)

TIMEOUT_SECONDS = 10


def normalize_base_url(url: str) -> str:
    """Prefix a bare ``host:port`` with ``http://`` and drop trailing slashes."""
    if "://" not in url:
        url = f"http://{url}"
    return url.rstrip("/")


class DeploymentService:
    """HTTP client of the runtime catalog.

    Args:
        base_url: Runtime catalog address, ``host:port`` or a full URL.
            Empty disables the calls.
        timeout: Socket timeout in seconds.
    """

    def __init__(self, base_url: str, timeout: float = TIMEOUT_SECONDS) -> None:
        self.base_url = normalize_base_url(base_url) if base_url else None
        self.timeout = timeout

    def _request(self, method: str, path: str) -> Any:
        url = f"{self.base_url}{path}"
        req = urllib.request.Request(url, method=method, headers={"Accept": "application/json"})
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                body = resp.read()
        except (urllib.error.URLError, OSError) as e:
            raise ConnectivityError(f"Runtime catalog request {method} {url} failed: {e}") from e
        if not body:
            return None
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise ConnectivityError(f"Runtime catalog returned invalid JSON for {url}") from e

    def delete_all_by_chain_id(self, chain_id: str) -> None:
        """Remove every runtime deployment of a chain.

        Raises:
            ConnectivityError: If the runtime catalog cannot be reached.
        """
        if self.base_url is None:
            return
        logger.debug("Deleting runtime deployments of chain %s", chain_id)
        self._request("DELETE", f"/v1/catalog/chains/{chain_id}/deployments")

    def get_all_runtime_deployments(self) -> dict[str, list[dict[str, Any]]]:
        """Get runtime deployments keyed by chain id.

        Raises:
            ConnectivityError: If the runtime catalog cannot be reached.
        """
        if self.base_url is None:
            return {}
        data = self._request("GET", "/v1/catalog/runtime-deployments")
        return data or {}


__all__ = ["DeploymentService", "normalize_base_url"]
