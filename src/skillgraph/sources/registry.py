"""SKILL.md-backed skill registry.

Each skill lives in its own directory under the skills root::

    skills/
      test-generation/
        SKILL.md

and ``SKILL.md`` starts with YAML frontmatter::

    ---
    name: Test Generation
    description: Generate unit tests for a module
    version: 1.2.0
    phase: TEST
    tags: [testing, quality]
    depends_on: [code-analysis]
    ---

The directory name is the skill id.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

import yaml

from skillgraph.errors import SourceReadError
from skillgraph.graph.SkillNode import Phase
from skillgraph.sources.models import SkillDefinition

logger = logging.getLogger(__name__)

SKILL_FILE = "SKILL.md"

FRONTMATTER_PATTERN = re.compile(r"\A---\s*\n(.*?)\n---\s*(?:\n|\Z)", re.DOTALL)


def parse_frontmatter(content: str) -> dict[str, Any]:
    """Extract the YAML frontmatter mapping from a SKILL.md document.

    Returns:
        The frontmatter mapping; empty when the file has no frontmatter.

    Raises:
        ValueError: If the frontmatter is not valid YAML or not a mapping.
    """
    match = FRONTMATTER_PATTERN.match(content)
    if not match:
        return {}
    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML frontmatter: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("Frontmatter must be a mapping")
    return data


def _string_list(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value if v is not None and str(v).strip())
    return ()


def definition_from_frontmatter(skill_id: str, data: dict[str, Any]) -> SkillDefinition:
    """Build a SkillDefinition from parsed frontmatter.

    Unknown phases are dropped with a warning rather than failing the skill.
    """
    phase: Phase | None = None
    if data.get("phase"):
        try:
            phase = Phase.parse(str(data["phase"]))
        except ValueError:
            logger.warning("Skill '%s' declares unknown phase '%s'", skill_id, data["phase"])

    depends_on = data.get("depends_on", data.get("dependsOn"))
    return SkillDefinition(
        id=skill_id,
        name=str(data.get("name") or skill_id),
        description=str(data.get("description") or ""),
        phase=phase,
        tags=_string_list(data.get("tags")),
        version=str(data.get("version") or "1.0.0"),
        depends_on=_string_list(depends_on),
        category=str(data["category"]) if data.get("category") else None,
    )


class SkillMdRegistry:
    """Registry that scans ``<skills_dir>/*/SKILL.md``.

    The directory is re-scanned on every ``list_skills()`` call so a build
    always sees the current files; ``get_skill()`` reads a single file.
    """

    def __init__(self, skills_dir: Path) -> None:
        self.skills_dir = Path(skills_dir).expanduser()

    def _require_dir(self) -> None:
        if not self.skills_dir.is_dir():
            raise SourceReadError(
                "registry", "skills directory does not exist", path=self.skills_dir
            )

    def _load(self, skill_file: Path) -> SkillDefinition | None:
        skill_id = skill_file.parent.name
        try:
            content = skill_file.read_text(encoding="utf-8")
            data = parse_frontmatter(content)
        except (OSError, UnicodeDecodeError, ValueError) as e:
            logger.warning("Skipping %s: %s", skill_file, e)
            return None
        return definition_from_frontmatter(skill_id, data)

    def list_skills(self) -> list[SkillDefinition]:
        """Return all skills, sorted by id.

        Raises:
            SourceReadError: If the skills directory is missing or unreadable.
        """
        self._require_dir()
        try:
            skill_files = sorted(self.skills_dir.glob(f"*/{SKILL_FILE}"))
        except OSError as e:
            raise SourceReadError("registry", str(e), path=self.skills_dir) from e

        skills = []
        for skill_file in skill_files:
            definition = self._load(skill_file)
            if definition is not None:
                skills.append(definition)
        logger.debug("Loaded %d skills from %s", len(skills), self.skills_dir)
        return skills

    def get_skill(self, skill_id: str) -> SkillDefinition | None:
        """Read one skill, or None if it has no SKILL.md."""
        self._require_dir()
        skill_file = self.skills_dir / skill_id / SKILL_FILE
        if not skill_file.is_file():
            return None
        return self._load(skill_file)


__all__ = [
    "SkillMdRegistry",
    "parse_frontmatter",
    "definition_from_frontmatter",
    "SKILL_FILE",
]
