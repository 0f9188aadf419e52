"""
skillgraph.commands - CLI command implementations
"""

__all__ = [
    "analyze",
    "build",
    "inspect_cmd",
    "lifecycle",
    "report",
    "serve",
]
