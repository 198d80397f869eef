"""
chaincatalog.cli - Command-line interface.

Main entry point for the chaincatalog CLI tool.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from chaincatalog import __version__
from chaincatalog.commands import config_cmd, descriptors_cmd, serve
from chaincatalog.config import get_config


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="chaincatalog",
        description="Design-time catalog of integration chains",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  chaincatalog serve                 # Run the REST server from .chaincatalog.toml
  chaincatalog serve --port 9000     # Override the configured port
  chaincatalog descriptors           # List element types of the library
  chaincatalog descriptors -j        # Same, as JSON

Configuration:
  chaincatalog config init           # Create .chaincatalog.toml in current directory
  chaincatalog config path           # Show config file location
  chaincatalog config show           # View all settings

For detailed command help: chaincatalog <command> --help
        """,
    )

    # Global options
    parser.add_argument(
        "--version",
        action="version",
        version=f"chaincatalog {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
        metavar="PATH",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-error output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the catalog REST server",
    )
    serve_parser.add_argument(
        "--host",
        help="Interface to bind (default: [server] host)",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        help="Port to listen on (default: [server] port)",
    )

    # descriptors command
    descriptors_parser = subparsers.add_parser(
        "descriptors",
        help="List the element descriptor library",
    )
    descriptors_parser.add_argument(
        "type",
        nargs="?",
        help="Show a single element type",
    )
    descriptors_parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Output as JSON",
    )

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="View and create configuration",
    )
    config_subparsers = config_parser.add_subparsers(dest="config_action")

    config_show = config_subparsers.add_parser("show", help="Show effective configuration")
    config_show.add_argument(
        "--section",
        help="Show only one section",
        metavar="NAME",
    )
    config_show.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    config_subparsers.add_parser("path", help="Show config file location")
    config_init = config_subparsers.add_parser("init", help="Create .chaincatalog.toml")
    config_init.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing file",
    )

    return parser


def configure_logging(args: argparse.Namespace) -> None:
    """Set the root log level from ``-v``/``-q`` or ``[logging] level``."""
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        name = str(get_config(args.config).get("logging", {}).get("level", "WARNING"))
        level = getattr(logging, name.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        configure_logging(args)
        if args.command == "serve":
            return serve.run(args)
        elif args.command == "descriptors":
            return descriptors_cmd.run(args)
        elif args.command == "config":
            return config_cmd.run(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled.", file=sys.stderr)
        return 130
    except Exception as e:
        if args.verbose:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
