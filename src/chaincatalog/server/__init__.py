"""chaincatalog.server - Flask REST API server for the catalog.

Provides a thin REST wrapper over the catalog services.
"""

from chaincatalog.server.app import create_app

__all__ = ["create_app"]
