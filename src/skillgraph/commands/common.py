"""
skillgraph.commands.common - Helpers shared by the CLI commands.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from skillgraph.config import ConfigLoader, get_config
from skillgraph.service import KnowledgeGraphService


def load_config_for(args: argparse.Namespace) -> ConfigLoader:
    """Resolve config from ``--config`` or by discovery from the cwd."""
    return get_config(getattr(args, "config", None))


def open_service(args: argparse.Namespace, ensure: bool = True) -> KnowledgeGraphService:
    """Create the configured service.

    With ``ensure`` the saved snapshot is loaded (or a first build is run
    when none exists yet), so query commands work straight away.
    """
    service = KnowledgeGraphService.from_config(load_config_for(args))
    if ensure:
        service.ensure_graph()
    return service


def wants_json(args: argparse.Namespace) -> bool:
    return bool(getattr(args, "json", False))


def print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def emit_result(args: argparse.Namespace, result: dict[str, Any]) -> int | None:
    """Print a tool result as JSON when requested.

    Returns:
        The exit code if the result was handled (JSON mode or failure),
        None if the caller should print human output.
    """
    if wants_json(args):
        print_json(result)
        return 0 if result.get("success", True) else 1
    if not result.get("success", True):
        print(f"Error: {result.get('error')}", file=sys.stderr)
        return 1
    return None
