"""Tests for the file-backed sources: SKILL.md registry, run archive, improvement log."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from skillgraph.errors import SourceReadError
from skillgraph.graph.SkillNode import Phase
from skillgraph.sources import JsonlImprovementLog, JsonRunArchive, SkillMdRegistry
from skillgraph.sources.models import ImprovementEvent, parse_timestamp
from skillgraph.sources.registry import parse_frontmatter


def write_skill(root: Path, skill_id: str, frontmatter: str, body: str = "# Skill\n") -> Path:
    skill_dir = root / skill_id
    skill_dir.mkdir(parents=True, exist_ok=True)
    path = skill_dir / "SKILL.md"
    path.write_text(f"---\n{frontmatter}\n---\n{body}", encoding="utf-8")
    return path


def write_run(root: Path, month: str, name: str, data: object) -> Path:
    month_dir = root / month
    month_dir.mkdir(parents=True, exist_ok=True)
    path = month_dir / f"{name}.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


# ─────────────────────────────────────────────────────────────────────────────
# SKILL.md registry
# ─────────────────────────────────────────────────────────────────────────────


class TestSkillMdRegistry:
    def test_reads_frontmatter(self, tmp_path):
        write_skill(
            tmp_path,
            "test-generation",
            "name: Test Generation\n"
            "description: Generate unit tests\n"
            "version: 1.2.0\n"
            "phase: test\n"
            "tags: [testing, quality]\n"
            "depends_on: [code-analysis]\n"
            "category: engineering",
        )

        (skill,) = SkillMdRegistry(tmp_path).list_skills()

        assert skill.id == "test-generation"
        assert skill.name == "Test Generation"
        assert skill.phase is Phase.TEST
        assert skill.tags == ("testing", "quality")
        assert skill.depends_on == ("code-analysis",)
        assert skill.version == "1.2.0"
        assert skill.category == "engineering"

    def test_defaults_for_sparse_frontmatter(self, tmp_path):
        write_skill(tmp_path, "bare", "description: nothing else")

        skill = SkillMdRegistry(tmp_path).get_skill("bare")

        assert skill.name == "bare"
        assert skill.phase is None
        assert skill.tags == ()
        assert skill.version == "1.0.0"

    def test_unknown_phase_is_dropped(self, tmp_path, caplog):
        write_skill(tmp_path, "odd", "phase: LAUNCH")

        (skill,) = SkillMdRegistry(tmp_path).list_skills()

        assert skill.phase is None
        assert "unknown phase" in caplog.text

    def test_malformed_skill_is_skipped(self, tmp_path):
        write_skill(tmp_path, "good", "name: Good")
        write_skill(tmp_path, "broken", "tags: [unclosed")

        ids = [s.id for s in SkillMdRegistry(tmp_path).list_skills()]

        assert ids == ["good"]

    def test_sorted_and_ignores_loose_files(self, tmp_path):
        write_skill(tmp_path, "zeta", "name: Z")
        write_skill(tmp_path, "alpha", "name: A")
        (tmp_path / "README.md").write_text("not a skill", encoding="utf-8")

        assert [s.id for s in SkillMdRegistry(tmp_path).list_skills()] == ["alpha", "zeta"]

    def test_get_unknown_skill(self, tmp_path):
        assert SkillMdRegistry(tmp_path).get_skill("nope") is None

    def test_missing_directory_raises(self, tmp_path):
        registry = SkillMdRegistry(tmp_path / "absent")

        with pytest.raises(SourceReadError) as exc_info:
            registry.list_skills()

        assert exc_info.value.source == "registry"

    def test_frontmatter_must_be_mapping(self):
        with pytest.raises(ValueError):
            parse_frontmatter("---\n- a\n- b\n---\n")
        assert parse_frontmatter("# No frontmatter\n") == {}


# ─────────────────────────────────────────────────────────────────────────────
# Run archive
# ─────────────────────────────────────────────────────────────────────────────


class TestJsonRunArchive:
    def test_flat_layout(self, tmp_path):
        write_run(
            tmp_path,
            "2026-10",
            "r1",
            {"run_id": "r1", "skills": ["a", "b"], "timestamp": "2026-10-01T12:00:00Z"},
        )

        (run,) = JsonRunArchive(tmp_path).iter_runs()

        assert run.run_id == "r1"
        assert run.skill_ids == ("a", "b")
        assert run.timestamp == datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)

    def test_phase_layout_counts_completed_skills(self, tmp_path):
        write_run(
            tmp_path,
            "2026-10",
            "2026-10-02T10-00-00-loop",
            {
                "completed_at": "2026-10-02T10:30:00+00:00",
                "phases": [
                    {"name": "INIT", "skills": [{"id": "plan", "status": "completed"}]},
                    {
                        "name": "IMPLEMENT",
                        "skills": [
                            {"id": "build", "status": "completed"},
                            {"id": "lint", "status": "skipped"},
                        ],
                    },
                ],
            },
        )

        (run,) = JsonRunArchive(tmp_path).iter_runs()

        assert run.run_id == "2026-10-02T10-00-00-loop"
        assert run.skill_ids == ("plan", "build")

    def test_month_limit(self, tmp_path):
        for month in ("2026-07", "2026-08", "2026-09", "2026-10"):
            write_run(tmp_path, month, f"run-{month}", {"skills": ["a"]})

        runs = list(JsonRunArchive(tmp_path, months=2).iter_runs())

        assert [r.run_id for r in runs] == ["run-2026-09", "run-2026-10"]
        assert len(list(JsonRunArchive(tmp_path).iter_runs())) == 4

    def test_malformed_files_skipped(self, tmp_path):
        write_run(tmp_path, "2026-10", "good", {"skills": ["a"]})
        write_run(tmp_path, "2026-10", "no-skills", {"hello": "world"})
        (tmp_path / "2026-10" / "garbage.json").write_text("{", encoding="utf-8")

        assert [r.run_id for r in JsonRunArchive(tmp_path).iter_runs()] == ["good"]

    def test_missing_archive_yields_nothing(self, tmp_path):
        assert list(JsonRunArchive(tmp_path / "absent").iter_runs()) == []

    def test_non_month_directories_ignored(self, tmp_path):
        write_run(tmp_path, "scratch", "r1", {"skills": ["a"]})

        assert list(JsonRunArchive(tmp_path).iter_runs()) == []


# ─────────────────────────────────────────────────────────────────────────────
# Improvement log
# ─────────────────────────────────────────────────────────────────────────────


class TestJsonlImprovementLog:
    def test_append_then_read(self, tmp_path):
        log = JsonlImprovementLog(tmp_path / "nested" / "improvements.jsonl")
        stamp = datetime(2026, 10, 2, 9, 15, tzinfo=timezone.utc)

        log.append(ImprovementEvent("test-generation", "code-review", stamp))
        log.append(ImprovementEvent("docs", "code-review", None))

        events = list(log.iter_events())
        assert [(e.improved_skill_id, e.triggering_skill_id) for e in events] == [
            ("test-generation", "code-review"),
            ("docs", "code-review"),
        ]
        assert events[0].timestamp == stamp
        assert events[1].timestamp is None

    def test_malformed_lines_skipped(self, tmp_path):
        path = tmp_path / "improvements.jsonl"
        path.write_text(
            '{"improved_skill_id": "a", "triggering_skill_id": "b"}\n'
            "\n"
            "not json\n"
            '{"improved_skill_id": "a"}\n',
            encoding="utf-8",
        )

        events = list(JsonlImprovementLog(path).iter_events())

        assert len(events) == 1

    def test_missing_file_is_empty(self, tmp_path):
        assert list(JsonlImprovementLog(tmp_path / "none.jsonl").iter_events()) == []


class TestParseTimestamp:
    def test_z_suffix_and_naive(self):
        assert parse_timestamp("2026-10-01T12:00:00Z") == datetime(
            2026, 10, 1, 12, tzinfo=timezone.utc
        )
        assert parse_timestamp("2026-10-01T12:00:00").tzinfo is not None
        assert parse_timestamp(None) is None
