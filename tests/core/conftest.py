"""Pytest fixtures for core tests."""

import pytest


@pytest.fixture
def chain_store():
    """A -> B -> C dependency chain with two full runs."""
    from tests.core.graph_test_helpers import build_store, chain_scenario

    skills, runs = chain_scenario()
    return build_store(skills, runs)


@pytest.fixture
def mixed_store():
    """Skills with tags, runs, an improvement and a missing dependency.

    - plan -> build -> verify ran together twice
    - review was triggered to improve build
    - docs depends on a skill that does not exist
    - lonely has no edges at all
    """
    from tests.core.graph_test_helpers import (
        build_store,
        make_improvement,
        make_run,
        make_skill,
    )

    skills = [
        make_skill("plan", phase="init", tags=["planning", "core"]),
        make_skill("build", phase="implement", tags=["core"], depends_on=["plan"]),
        make_skill("verify", phase="verify", tags=["core", "quality"]),
        make_skill("review", phase="review", tags=["quality"]),
        make_skill("docs", phase="document", depends_on=["ghost"]),
        make_skill("lonely"),
    ]
    runs = [
        make_run("r1", "plan", "build", "verify", days_ago=2),
        make_run("r2", "plan", "build", "verify", days_ago=40),
        make_run("r3", "review", days_ago=90),
    ]
    improvements = [make_improvement("build", "review")]
    return build_store(skills, runs, improvements)


@pytest.fixture
def builder():
    """Fresh GraphBuilder instance."""
    from skillgraph.graph.builder import GraphBuilder

    return GraphBuilder()
