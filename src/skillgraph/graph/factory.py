"""Graph Factory - Shared utility for building a GraphStore from configuration.

This module provides a single entry point for all commands to obtain the
configured sources and a built graph. Commands should use this instead
of constructing registries and archives themselves.
"""

from __future__ import annotations

from pathlib import Path

from skillgraph.config import ConfigLoader, get_config
from skillgraph.graph.builder import GraphBuilder
from skillgraph.graph.settings import GraphSettings
from skillgraph.graph.store import GraphStore
from skillgraph.sources import JsonlImprovementLog, JsonRunArchive, SkillMdRegistry


def build_sources(
    config: ConfigLoader,
) -> tuple[SkillMdRegistry, JsonRunArchive, JsonlImprovementLog]:
    """Create the file-backed sources named in the ``[sources]`` section.

    Returns:
        (registry, run_archive, improvement_log)

    Raises:
        ValueError: If a source path is configured as an empty value.
    """
    skills_dir = config.get_path("sources.skills_dir", "skills")
    runs_dir = config.get_path("sources.runs_dir", "~/.claude/runs")
    log_path = config.get_path("sources.improvement_log", ".skillgraph/improvements.jsonl")
    months = int(config.get("sources.run_archive_months", 3) or 0)

    for key, value in (
        ("sources.skills_dir", skills_dir),
        ("sources.runs_dir", runs_dir),
        ("sources.improvement_log", log_path),
    ):
        if value is None:
            raise ValueError(f"Config key '{key}' must name a path")
    return (
        SkillMdRegistry(skills_dir),
        JsonRunArchive(runs_dir, months=months or None),
        JsonlImprovementLog(log_path),
    )


def build_graph(
    config: ConfigLoader | None = None,
    config_path: Path | None = None,
    start_dir: Path | None = None,
) -> GraphStore:
    """Build a GraphStore from the configured sources.

    This is the standard way for commands to obtain a fresh graph without
    a long-lived service.

    Args:
        config: Pre-loaded config (optional).
        config_path: Path to config file (optional).
        start_dir: Directory to discover the config from (defaults to cwd).

    Priority:
        config > config_path > discovery > defaults
    """
    if config is None:
        config = get_config(config_path, start_dir)

    registry, run_archive, improvement_log = build_sources(config)
    builder = GraphBuilder(GraphSettings.from_config(config.get_raw()))
    return builder.build(
        registry.list_skills(),
        run_archive.iter_runs(),
        improvement_log.iter_events(),
    )


__all__ = ["build_sources", "build_graph"]
