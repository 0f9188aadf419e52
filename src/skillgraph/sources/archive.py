"""JSON run archive.

Runs are archived one file per run, grouped in month directories::

    runs/
      2026-09/
        2026-09-14T10-22-01-engineering-loop.json
      2026-10/
        ...

Two record layouts are understood. The flat layout::

    {"run_id": "r1", "skills": ["a", "b", "c"], "timestamp": "2026-10-01T12:00:00Z"}

and the phase-structured layout written by the loop runner, where only
skills with status ``completed`` count::

    {"id": "r1", "completed_at": "...",
     "phases": [{"name": "INIT", "skills": [{"id": "a", "status": "completed"}]}]}
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from skillgraph.errors import SourceReadError
from skillgraph.sources.models import RunRecord, parse_timestamp

logger = logging.getLogger(__name__)

MONTH_DIR_PATTERN = re.compile(r"^\d{4}-\d{2}$")


def _skills_from_phases(phases: list[Any]) -> list[str]:
    skills: list[str] = []
    for phase in phases:
        if not isinstance(phase, dict):
            continue
        for skill in phase.get("skills") or []:
            if isinstance(skill, dict):
                if skill.get("status", "completed") != "completed":
                    continue
                skill_id = skill.get("id") or skill.get("name")
            else:
                skill_id = skill
            if skill_id:
                skills.append(str(skill_id))
    return skills


def record_from_json(data: dict[str, Any], default_id: str) -> RunRecord:
    """Build a RunRecord from one archived run document.

    Raises:
        ValueError: If the document has neither a skill list nor phases,
            or carries an unparseable timestamp.
    """
    if "skills" in data and isinstance(data["skills"], list):
        skill_ids = [str(s) for s in data["skills"] if s]
    elif "phases" in data and isinstance(data["phases"], list):
        skill_ids = _skills_from_phases(data["phases"])
    else:
        raise ValueError("run record has neither 'skills' nor 'phases'")

    run_id = str(data.get("run_id") or data.get("id") or default_id)
    raw_time = data.get("timestamp") or data.get("completed_at") or data.get("started_at")
    summary = data.get("summary")
    if raw_time is None and isinstance(summary, dict):
        raw_time = summary.get("completed_at") or summary.get("started_at")
    return RunRecord(run_id=run_id, skill_ids=tuple(skill_ids), timestamp=parse_timestamp(raw_time))


class JsonRunArchive:
    """Run archive reading ``<runs_dir>/<YYYY-MM>/*.json``.

    Args:
        runs_dir: Root of the archive.
        months: Only read the most recent N month directories (None = all).
    """

    def __init__(self, runs_dir: Path, months: int | None = None) -> None:
        self.runs_dir = Path(runs_dir).expanduser()
        self.months = months or None

    def _month_dirs(self) -> list[Path]:
        try:
            dirs = sorted(
                p for p in self.runs_dir.iterdir() if p.is_dir() and MONTH_DIR_PATTERN.match(p.name)
            )
        except OSError as e:
            raise SourceReadError("run_archive", str(e), path=self.runs_dir) from e
        if self.months:
            dirs = dirs[-self.months :]
        return dirs

    def iter_runs(self) -> Iterator[RunRecord]:
        """Yield runs in month order, then file-name order.

        A missing archive directory yields nothing. Malformed run files
        are skipped with a warning.

        Raises:
            SourceReadError: If the archive directory cannot be listed.
        """
        if not self.runs_dir.exists():
            logger.debug("Run archive %s does not exist; no runs", self.runs_dir)
            return

        count = 0
        for month_dir in self._month_dirs():
            try:
                files = sorted(month_dir.glob("*.json"))
            except OSError as e:
                raise SourceReadError("run_archive", str(e), path=month_dir) from e
            for run_file in files:
                try:
                    data = json.loads(run_file.read_text(encoding="utf-8"))
                    if not isinstance(data, dict):
                        raise ValueError("run record must be a JSON object")
                    record = record_from_json(data, default_id=run_file.stem)
                except (OSError, UnicodeDecodeError, ValueError) as e:
                    logger.warning("Skipping malformed run file %s: %s", run_file, e)
                    continue
                count += 1
                yield record
        logger.debug("Read %d runs from %s", count, self.runs_dir)


__all__ = ["JsonRunArchive", "record_from_json"]
