"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest

from storylogic.graph.models import LogicGraph
from tests.fixtures.graph_fixtures import make_story_graph


@pytest.fixture(autouse=True)
def clear_threshold_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep threshold overrides from the developer's shell out of tests."""
    for var in (
        "STORYLOGIC_MAX_NODE_COUNT",
        "STORYLOGIC_MAX_CONNECTION_COUNT",
        "STORYLOGIC_MAX_DEPTH",
        "STORYLOGIC_CONFIG",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def story_graph() -> LogicGraph:
    """A small, fully valid branching logic graph."""
    return make_story_graph()
