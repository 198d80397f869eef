"""
chaincatalog.commands - CLI command implementations
"""
