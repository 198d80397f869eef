"""
chaincatalog.commands.descriptors_cmd - List the element descriptor library.
"""

from __future__ import annotations

import argparse
import json

from chaincatalog.config import get_config
from chaincatalog.factory import load_registry
from chaincatalog.graph.descriptors import ElementDescriptor


def _describe(descriptor: ElementDescriptor) -> dict:
    children = {}
    for name, occurrence in descriptor.allowed_children.items():
        children[name] = {"min": occurrence.min, "max": occurrence.max}
    return {
        "name": descriptor.name,
        "title": descriptor.title,
        "container": descriptor.container,
        "ordered": descriptor.ordered,
        "inputEnabled": descriptor.input_enabled,
        "deprecated": descriptor.deprecated,
        "allowedChildren": children,
    }


def _format_occurrence(minimum: int, maximum: int | None) -> str:
    return f"{minimum}..{'*' if maximum is None else maximum}"


def run(args: argparse.Namespace) -> int:
    """Print the descriptors of the configured library.

    Args:
        args: Parsed arguments (``json``, ``type``).

    Returns:
        Exit code (1 if the requested type is unknown).
    """
    registry = load_registry(get_config(args.config))
    descriptors = sorted(registry, key=lambda d: d.name)
    if args.type:
        descriptors = [d for d in descriptors if d.name == args.type]
        if not descriptors:
            print(f"Unknown element type: {args.type}")
            return 1

    if args.json:
        print(json.dumps([_describe(d) for d in descriptors], indent=2))
        return 0

    for descriptor in descriptors:
        flags = []
        if descriptor.container:
            flags.append("container")
        if descriptor.ordered:
            flags.append("ordered")
        if not descriptor.input_enabled:
            flags.append("no-input")
        if descriptor.deprecated:
            flags.append("deprecated")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        print(f"{descriptor.name} - {descriptor.title}{suffix}")
        for name, occurrence in sorted(descriptor.allowed_children.items()):
            print(f"    {name} {_format_occurrence(occurrence.min, occurrence.max)}")
    return 0
