"""skillgraph.server - Flask REST API server.

Provides a thin REST wrapper over the MCP server pure functions,
exposing the skill knowledge graph via HTTP endpoints.
"""

from skillgraph.server.app import create_app

__all__ = ["create_app"]
