"""
chaincatalog.config.loader - Configuration file discovery and loading.

Configuration lives in ``.chaincatalog.toml``. Values are resolved in this
order (later wins): built-in defaults, the TOML file, environment variables
named ``CHAINCATALOG_<SECTION>_<KEY>``.
"""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit import TOMLDocument

from chaincatalog.config.defaults import DEFAULT_CONFIG

CONFIG_FILE_NAME = ".chaincatalog.toml"
ENV_PREFIX = "CHAINCATALOG_"


def parse_toml(content: str) -> dict[str, Any]:
    """Parse TOML text into plain Python containers.

    Args:
        content: TOML source text.

    Returns:
        Nested dict with plain ``dict``/``list``/scalar values.
    """
    return parse_toml_document(content).unwrap()


def parse_toml_document(content: str) -> TOMLDocument:
    """Parse TOML text into a document that preserves comments and layout."""
    return tomlkit.parse(content)


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find ``.chaincatalog.toml`` in ``start_dir`` or one of its parents.

    Args:
        start_dir: Directory to start from (defaults to the working directory).

    Returns:
        Path to the config file, or None if there is none.
    """
    current = (start_dir or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
        if current == current.parent:
            return None
        current = current.parent


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge ``override`` into a copy of ``base``.

    Nested dicts are merged key by key; any other value in ``override``
    replaces the one in ``base``.
    """
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def _try_parse_env_value(raw: str) -> Any:
    """Interpret an environment variable value.

    JSON arrays and objects are decoded, ``true``/``false`` become booleans,
    everything else (including malformed JSON) is returned unchanged.
    """
    stripped = raw.strip()
    if stripped.lower() == "true":
        return True
    if stripped.lower() == "false":
        return False
    if stripped.startswith(("[", "{")):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            return raw
    return raw


def _split_env_key(key: str, sections: set[str]) -> tuple[str, str]:
    """Split ``runtime_catalog_url`` into (``runtime_catalog``, ``url``).

    Known section names win over the first-underscore split, so sections
    that contain underscores themselves resolve correctly.
    """
    matches = [s for s in sections if key.startswith(s + "_") and len(key) > len(s) + 1]
    if matches:
        section = max(matches, key=len)
        return section, key[len(section) + 1 :]
    section, _, option = key.partition("_")
    return section, option


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply ``CHAINCATALOG_<SECTION>_<KEY>`` environment overrides in place.

    Missing sections are created.

    Returns:
        The same config dict, for chaining.
    """
    sections = set(config) | set(DEFAULT_CONFIG)
    for name, raw in os.environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        section, option = _split_env_key(name[len(ENV_PREFIX) :].lower(), sections)
        if not section or not option:
            continue
        target = config.setdefault(section, {})
        if isinstance(target, dict):
            target[option] = _try_parse_env_value(raw)
    return config


def load_config(config_path: Path) -> dict[str, Any]:
    """Load a config file merged over the defaults, with env overrides.

    Args:
        config_path: Path to a ``.chaincatalog.toml`` file.

    Returns:
        The effective configuration dict.
    """
    user_config = parse_toml(config_path.read_text(encoding="utf-8"))
    return _apply_env_overrides(merge_configs(DEFAULT_CONFIG, user_config))


def get_config(config_path: Path | None = None, start_dir: Path | None = None) -> dict[str, Any]:
    """Resolve the effective configuration.

    Uses ``config_path`` when given, otherwise searches upward from
    ``start_dir``. Without any file the defaults (plus env overrides) apply.
    """
    path = config_path or find_config_file(start_dir)
    if path is not None and path.exists():
        return load_config(path)
    return _apply_env_overrides(copy.deepcopy(DEFAULT_CONFIG))
