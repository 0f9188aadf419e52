"""JSON-lines improvement log.

One event per line::

    {"improved_skill_id": "test-generation", "triggering_skill_id": "code-review",
     "timestamp": "2026-10-02T09:15:00Z"}
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

from skillgraph.errors import SourceReadError
from skillgraph.sources.models import ImprovementEvent, parse_timestamp

logger = logging.getLogger(__name__)


class JsonlImprovementLog:
    """Improvement log stored as a JSON-lines file.

    A missing file means no improvements have been recorded yet.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()

    def iter_events(self) -> Iterator[ImprovementEvent]:
        """Yield events in file order, skipping malformed lines.

        Raises:
            SourceReadError: If the file exists but cannot be read.
        """
        if not self.path.exists():
            return
        try:
            lines = self.path.read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as e:
            raise SourceReadError("improvement_log", str(e), path=self.path) from e

        for lineno, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                data = json.loads(line)
                event = ImprovementEvent(
                    improved_skill_id=str(data["improved_skill_id"]),
                    triggering_skill_id=str(data["triggering_skill_id"]),
                    timestamp=parse_timestamp(data.get("timestamp")),
                )
            except (ValueError, KeyError, TypeError) as e:
                logger.warning("Skipping malformed improvement at %s:%d: %s", self.path, lineno, e)
                continue
            yield event

    def append(self, event: ImprovementEvent) -> None:
        """Record a new improvement event."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        record = {
            "improved_skill_id": event.improved_skill_id,
            "triggering_skill_id": event.triggering_skill_id,
            "timestamp": event.timestamp.isoformat() if event.timestamp else None,
        }
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record) + "\n")


__all__ = ["JsonlImprovementLog"]
