"""Serve the skill graph tools over stdio.

The graph comes from the ``.skillgraph.toml`` found from the current
directory; ``skillgraph mcp serve`` offers the same with more options.

Usage:
    python -m skillgraph.mcp
"""

from skillgraph.mcp import run_server

if __name__ == "__main__":
    run_server()
