"""
chaincatalog.commands.config_cmd - Inspect and create configuration.

Subcommands:
- show: print the effective configuration (TOML or JSON)
- path: print the location of the config file in use
- init: write a ``.chaincatalog.toml`` with the default values
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

import tomlkit

from chaincatalog.config import DEFAULT_CONFIG, find_config_file, get_config
from chaincatalog.config.loader import CONFIG_FILE_NAME


def run(args: argparse.Namespace) -> int:
    """Dispatch ``config`` subcommands."""
    action = getattr(args, "config_action", None)
    if action == "show":
        return cmd_show(args)
    if action == "path":
        return cmd_path(args)
    if action == "init":
        return cmd_init(args)
    print("Usage: chaincatalog config {show,path,init}")
    return 1


def cmd_show(args: argparse.Namespace) -> int:
    config: dict[str, Any] = get_config(args.config)
    if args.section:
        if args.section not in config:
            print(f"Unknown section: {args.section}")
            return 1
        config = {args.section: config[args.section]}

    if args.json:
        print(json.dumps(config, indent=2))
    else:
        print(tomlkit.dumps(config), end="")
    return 0


def cmd_path(args: argparse.Namespace) -> int:
    path = args.config or find_config_file()
    if path is None:
        print("No configuration file found, using defaults")
        return 1
    print(Path(path).resolve())
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    """Write the default configuration to the working directory."""
    target = Path.cwd() / CONFIG_FILE_NAME
    if target.exists() and not args.force:
        print(f"{target} already exists (use --force to overwrite)")
        return 1

    doc = tomlkit.document()
    doc.add(tomlkit.comment("chaincatalog configuration"))
    for section, values in DEFAULT_CONFIG.items():
        table = tomlkit.table()
        for key, value in values.items():
            table.add(key, value)
        doc.add(section, table)
    target.write_text(tomlkit.dumps(doc), encoding="utf-8")
    if not args.quiet:
        print(f"Created {target}")
    return 0
