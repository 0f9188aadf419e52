"""
skillgraph.cli - Command-line interface.

Main entry point for the skillgraph CLI tool.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from skillgraph import __version__
from skillgraph.commands import analyze, build, inspect_cmd, lifecycle, report, serve
from skillgraph.graph.relations import EdgeKind


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="skillgraph",
        description="Knowledge graph over a library of reusable skills",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  skillgraph build                     # Build from skills, runs and improvements
  skillgraph stats                     # Node/edge counts and density
  skillgraph leverage -n 5             # Top five skills by leverage
  skillgraph node code-review          # One skill with its edges
  skillgraph neighbors code-review --type sequence --direction out
  skillgraph path scaffold ship        # Shortest structural path
  skillgraph gaps --days 14            # Missing deps, isolated/unused skills, ...
  skillgraph report --format markdown  # Summary report

Configuration:
  .skillgraph.toml in the project (or a parent directory), with
  .skillgraph.local.toml merged on top and SKILLGRAPH_<SECTION>_<KEY>
  environment overrides.

For detailed command help: skillgraph <command> --help
        """,
    )

    # Global options
    parser.add_argument(
        "--version",
        action="version",
        version=f"skillgraph {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
        metavar="PATH",
    )
    parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Print JSON instead of text",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-error output",
    )

    # Subcommands
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "build",
        help="Build the graph from the sources and save the snapshot",
    )
    subparsers.add_parser(
        "stats",
        help="Show node/edge/cluster counts, average degree and density",
    )

    node_parser = subparsers.add_parser("node", help="Show one skill with its edges")
    node_parser.add_argument("skill_id", help="Skill id")

    neighbors_parser = subparsers.add_parser("neighbors", help="List skills one hop away")
    neighbors_parser.add_argument("skill_id", help="Skill id")
    neighbors_parser.add_argument(
        "--type",
        choices=[k.value for k in EdgeKind],
        help="Only follow edges of this type",
    )
    neighbors_parser.add_argument(
        "--direction",
        choices=["out", "in", "both"],
        default="both",
        help="Edge direction to follow (default: both)",
    )

    path_parser = subparsers.add_parser("path", help="Shortest structural path between skills")
    path_parser.add_argument("from_id", help="Starting skill id")
    path_parser.add_argument("to_id", help="Target skill id")

    leverage_parser = subparsers.add_parser("leverage", help="Top skills by leverage score")
    leverage_parser.add_argument(
        "-n",
        "--limit",
        type=int,
        default=10,
        help="Number of skills to show (default: 10)",
    )

    gaps_parser = subparsers.add_parser("gaps", help="Report structural gaps")
    gaps_parser.add_argument(
        "--days",
        type=int,
        help="Unused-skill threshold in days (default: from config)",
    )

    clusters_parser = subparsers.add_parser("clusters", help="List tag clusters")
    clusters_parser.add_argument("--tag", help="Show one cluster with its members")

    refresh_parser = subparsers.add_parser(
        "refresh",
        help="Re-read one skill from the registry and rescore",
    )
    refresh_parser.add_argument("skill_id", help="Skill id")

    remove_parser = subparsers.add_parser("remove", help="Remove a skill and its edges")
    remove_parser.add_argument("skill_id", help="Skill id")

    report_parser = subparsers.add_parser("report", help="Render a markdown or CSV report")
    report_parser.add_argument(
        "--format",
        choices=["markdown", "csv"],
        default="markdown",
        help="Output format (default: markdown)",
    )
    report_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Write to file instead of stdout",
        metavar="PATH",
    )
    report_parser.add_argument(
        "--top",
        type=int,
        default=10,
        help="Number of high-leverage skills in the markdown report",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Start the REST API server (requires skillgraph[server])",
    )
    serve_parser.add_argument("--host", help="Bind address (default: from config)")
    serve_parser.add_argument("--port", type=int, help="Port (default: from config)")

    # mcp command
    mcp_parser = subparsers.add_parser(
        "mcp",
        help="MCP server commands (requires skillgraph[mcp])",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Claude Code Configuration:
  Add to your MCP client configuration:

    {
      "mcpServers": {
        "skillgraph": {
          "command": "skillgraph",
          "args": ["mcp", "serve"],
          "cwd": "/path/to/your/project"
        }
      }
    }

  Set "cwd" to the directory containing your .skillgraph.toml config.
""",
    )
    mcp_subparsers = mcp_parser.add_subparsers(dest="mcp_action")

    mcp_serve = mcp_subparsers.add_parser(
        "serve",
        help="Start MCP server",
    )
    mcp_serve.add_argument(
        "--transport",
        choices=["stdio", "sse", "streamable-http"],
        default="stdio",
        help="Transport type (default: stdio)",
    )

    return parser


def configure_logging(args: argparse.Namespace) -> None:
    """Route library logging to stderr at a level set by -v / -q."""
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Handle no command
    if not args.command:
        parser.print_help()
        return 0

    configure_logging(args)

    try:
        # Dispatch to command handlers
        if args.command == "build":
            return build.run(args)
        elif args.command == "stats":
            return analyze.run_stats(args)
        elif args.command == "node":
            return inspect_cmd.run_node(args)
        elif args.command == "neighbors":
            return inspect_cmd.run_neighbors(args)
        elif args.command == "path":
            return inspect_cmd.run_path(args)
        elif args.command == "leverage":
            return analyze.run_leverage(args)
        elif args.command == "gaps":
            return analyze.run_gaps(args)
        elif args.command == "clusters":
            return analyze.run_clusters(args)
        elif args.command == "refresh":
            return lifecycle.run_refresh(args)
        elif args.command == "remove":
            return lifecycle.run_remove(args)
        elif args.command == "report":
            return report.run(args)
        elif args.command == "serve":
            return serve.run(args)
        elif args.command == "mcp":
            return mcp_command(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled.", file=sys.stderr)
        return 130
    except Exception as e:
        if args.verbose:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


def mcp_command(args: argparse.Namespace) -> int:
    """Handle MCP server commands."""
    from skillgraph.mcp import MCP_AVAILABLE

    if not MCP_AVAILABLE:
        print("Error: MCP dependencies not installed.", file=sys.stderr)
        print("Install with: pip install skillgraph[mcp]", file=sys.stderr)
        return 1

    from skillgraph.mcp.server import run_server

    if args.mcp_action == "serve":
        working_dir = args.config.parent if args.config else Path.cwd()

        # stdout carries the protocol on stdio; status goes to stderr
        print("Starting skillgraph MCP server...", file=sys.stderr)
        print(f"Working directory: {working_dir}", file=sys.stderr)
        print(f"Transport: {args.transport}", file=sys.stderr)

        try:
            run_server(working_dir=working_dir, transport=args.transport)
        except KeyboardInterrupt:
            print("\nServer stopped.", file=sys.stderr)
        return 0
    else:
        print("Usage: skillgraph mcp serve")
        return 1


if __name__ == "__main__":
    sys.exit(main())
