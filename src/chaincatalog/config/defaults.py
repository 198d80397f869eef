"""
chaincatalog.config.defaults - Default configuration values.
"""

DEFAULT_CONFIG = {
    "project": {
        "name": "chaincatalog",
    },
    "server": {
        "host": "127.0.0.1",
        "port": 8080,
    },
    "runtime_catalog": {
        # host[:port] of the runtime catalog; empty disables deployment calls
        "url": "runtime-catalog:8080",
        "timeout": 10,
    },
    "library": {
        # Path to an element descriptor library; empty uses the bundled one
        "path": "",
    },
    "logging": {
        "level": "WARNING",
    },
    "action_log": {
        "enabled": True,
    },
}
