"""
chaincatalog.config - Configuration loading and defaults
"""

from chaincatalog.config.defaults import DEFAULT_CONFIG
from chaincatalog.config.loader import (
    _apply_env_overrides,
    _try_parse_env_value,
    find_config_file,
    get_config,
    load_config,
    merge_configs,
    parse_toml,
    parse_toml_document,
)

__all__ = [
    "load_config",
    "get_config",
    "find_config_file",
    "merge_configs",
    "parse_toml",
    "parse_toml_document",
    "DEFAULT_CONFIG",
]
