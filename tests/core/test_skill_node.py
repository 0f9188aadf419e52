"""Tests for SkillNode and Phase."""

import pytest

from skillgraph.graph.SkillNode import Phase, SkillNode


class TestPhase:
    def test_parse_is_case_insensitive(self):
        assert Phase.parse("implement") is Phase.IMPLEMENT
        assert Phase.parse("  Review ") is Phase.REVIEW

    def test_parse_empty_returns_none(self):
        assert Phase.parse(None) is None
        assert Phase.parse("") is None

    def test_parse_passes_through_phase(self):
        assert Phase.parse(Phase.SHIP) is Phase.SHIP

    def test_parse_unknown_lists_valid_phases(self):
        with pytest.raises(ValueError, match="Must be one of: INIT"):
            Phase.parse("deploy")

    def test_all_ten_phases(self):
        assert [p.value for p in Phase] == [
            "INIT",
            "SCAFFOLD",
            "IMPLEMENT",
            "TEST",
            "VERIFY",
            "VALIDATE",
            "DOCUMENT",
            "REVIEW",
            "SHIP",
            "COMPLETE",
        ]


class TestSkillNode:
    def test_name_defaults_to_id(self):
        node = SkillNode(id="code-review")

        assert node.name == "code-review"

    def test_tags_are_sorted_and_deduplicated(self):
        node = SkillNode(id="a", tags=["web", "api", "web"])

        assert node.tags == ["api", "web"]

    def test_negative_usage_rejected(self):
        with pytest.raises(ValueError):
            SkillNode(id="a", usage_count=-1)

    def test_defaults(self):
        node = SkillNode(id="a")

        assert node.version == "1.0.0"
        assert node.leverage_score == 1.0
        assert node.degree == 0
        assert node.phase is None

    def test_shared_tags(self):
        a = SkillNode(id="a", tags=["ops", "web", "api"])
        b = SkillNode(id="b", tags=["web", "ops", "db"])

        assert a.shared_tags(b) == ["ops", "web"]
        assert a.has_tag("api")
        assert not b.has_tag("api")
