"""
skillgraph.commands.serve - Run the REST API server.
"""

from __future__ import annotations

import argparse
import sys

from skillgraph.commands.common import load_config_for
from skillgraph.service import KnowledgeGraphService


def run(args: argparse.Namespace) -> int:
    """Start the Flask development server over the configured graph."""
    try:
        from skillgraph.server import create_app
    except ImportError:
        print("Error: server dependencies not installed.", file=sys.stderr)
        print("Install with: pip install skillgraph[server]", file=sys.stderr)
        return 1

    config = load_config_for(args)
    service = KnowledgeGraphService.from_config(config)
    service.ensure_graph()

    host = args.host or config.get("server.host", "127.0.0.1")
    port = args.port or int(config.get("server.port", 5050))
    app = create_app(service)

    print(f"Serving skill graph on http://{host}:{port}/api/stats")
    app.run(host=host, port=port, debug=False)
    return 0
