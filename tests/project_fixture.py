"""On-disk sample project used by the CLI, MCP and REST tests."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

SKILLS = {
    "plan": "name: Plan\nphase: INIT\ntags: [core, planning]",
    "build": "name: Build\nphase: IMPLEMENT\ntags: [core]\ndepends_on: [plan]",
    "verify": "name: Verify\nphase: VERIFY\ntags: [core, quality]",
    "docs": "name: Docs\nphase: DOCUMENT\ndepends_on: [ghost]",
}


def write_project(root: Path) -> Path:
    """Create skills, one recent run, an improvement log and a config file.

    Returns:
        Path to the ``.skillgraph.toml`` file.
    """
    (root / ".git").mkdir(parents=True, exist_ok=True)
    for skill_id, frontmatter in SKILLS.items():
        skill_dir = root / "skills" / skill_id
        skill_dir.mkdir(parents=True, exist_ok=True)
        (skill_dir / "SKILL.md").write_text(f"---\n{frontmatter}\n---\n# {skill_id}\n", encoding="utf-8")

    # recent enough to stay inside the default 30-day window
    stamp = datetime.now(timezone.utc) - timedelta(days=1)
    month_dir = root / "runs" / stamp.strftime("%Y-%m")
    month_dir.mkdir(parents=True, exist_ok=True)
    (month_dir / "r1.json").write_text(
        json.dumps({"run_id": "r1", "skills": ["plan", "build", "verify"], "timestamp": stamp.isoformat()}),
        encoding="utf-8",
    )

    (root / "improvements.jsonl").write_text(
        json.dumps({"improved_skill_id": "build", "triggering_skill_id": "verify"}) + "\n",
        encoding="utf-8",
    )

    config_path = root / ".skillgraph.toml"
    config_path.write_text(
        "[sources]\n"
        'skills_dir = "skills"\n'
        'runs_dir = "runs"\n'
        "run_archive_months = 0\n"
        'improvement_log = "improvements.jsonl"\n'
        "\n"
        "[snapshot]\n"
        'path = "out/graph.json"\n',
        encoding="utf-8",
    )
    return config_path


def sample_service():
    """An in-memory service over the mixed scenario, already built."""
    from skillgraph.service import KnowledgeGraphService
    from skillgraph.sources.models import (
        RunRecord,
        StaticImprovementLog,
        StaticRunArchive,
        StaticSkillRegistry,
    )
    from tests.core.graph_test_helpers import make_improvement, make_skill

    registry = StaticSkillRegistry(
        [
            make_skill("plan", phase="init", tags=["planning", "core"]),
            make_skill("build", phase="implement", tags=["core"], depends_on=["plan"]),
            make_skill("verify", phase="verify", tags=["core", "quality"]),
            make_skill("review", phase="review", tags=["quality"]),
            make_skill("docs", phase="document", depends_on=["ghost"]),
        ]
    )
    service = KnowledgeGraphService(
        registry,
        run_archive=StaticRunArchive(
            [RunRecord("r1", ("plan", "build", "verify"), datetime.now(timezone.utc) - timedelta(days=1))]
        ),
        improvement_log=StaticImprovementLog([make_improvement("build", "review")]),
    )
    service.build()
    return service
