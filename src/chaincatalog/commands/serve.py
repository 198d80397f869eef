"""
chaincatalog.commands.serve - Run the catalog REST server.
"""

from __future__ import annotations

import argparse
import logging

from chaincatalog.config import get_config
from chaincatalog.factory import build_catalog
from chaincatalog.server import create_app

logger = logging.getLogger(__name__)


def run(args: argparse.Namespace) -> int:
    """Build a catalog from configuration and serve it over HTTP.

    Args:
        args: Parsed arguments (``host``/``port`` override ``[server]``).

    Returns:
        Exit code.
    """
    config = get_config(args.config)
    server = config.get("server", {})
    host = args.host or server.get("host", "127.0.0.1")
    port = int(args.port or server.get("port", 8080))

    catalog = build_catalog(config)
    logger.info("Loaded %d element descriptors", len(catalog.registry))

    if not args.quiet:
        print(f"chaincatalog server on http://{host}:{port}\n\nPress Ctrl+C to stop")

    app = create_app(catalog, config)
    try:
        app.run(host=host, port=port, debug=False)
    except KeyboardInterrupt:
        print("\nServer stopped.")

    return 0
