"""
skillgraph.commands.report - Render the graph as markdown or CSV.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from skillgraph.commands.common import open_service
from skillgraph.graph.serialize import to_csv, to_markdown


def run(args: argparse.Namespace) -> int:
    """Write a markdown summary or a per-skill CSV to stdout or ``--output``."""
    store = open_service(args).get_graph()
    if args.format == "csv":
        content = to_csv(store)
    else:
        content = to_markdown(store, top=args.top)

    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(content, encoding="utf-8")
        if not args.quiet:
            print(f"Wrote {args.format} report to {output}")
    else:
        print(content, end="")
    return 0
