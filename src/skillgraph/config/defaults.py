"""Default configuration values."""

from __future__ import annotations

from typing import Any

CONFIG_FILENAME = ".skillgraph.toml"
LOCAL_CONFIG_FILENAME = ".skillgraph.local.toml"
ENV_PREFIX = "SKILLGRAPH_"

DEFAULT_CONFIG: dict[str, Any] = {
    "sources": {
        "skills_dir": "skills",
        "runs_dir": "~/.claude/runs",
        # 0 = scan every month directory
        "run_archive_months": 3,
        "improvement_log": ".skillgraph/improvements.jsonl",
    },
    "snapshot": {
        "path": ".skillgraph/knowledge-graph.json",
    },
    "leverage": {
        "damping": 0.85,
        "tolerance": 1e-6,
        "max_iterations": 100,
    },
    "gaps": {
        "weak_cluster_threshold": 0.3,
        "unused_after_days": 30,
        "min_skills_per_phase": 1,
    },
    "server": {
        "host": "127.0.0.1",
        "port": 5050,
    },
}

__all__ = ["DEFAULT_CONFIG", "CONFIG_FILENAME", "LOCAL_CONFIG_FILENAME", "ENV_PREFIX"]
