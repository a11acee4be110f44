"""Shared fixtures: small planar networks with known shortest paths."""

from __future__ import annotations

import pytest

from helpers import line, planar
from streetflow.config import reset_config


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    for name in (
        "SF_GRAPH_REFERENCE",
        "SF_GRAPH_SNAP_TOLERANCE",
        "SF_GRAPH_BIDIRECTIONAL",
        "SF_ROUTING_DEFAULT_PROFILE",
        "SF_ROUTING_MAX_WORKERS",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def square():
    """4-vertex square with unit edges; vertex ids 0..3 counter-clockwise."""
    return planar(
        [
            line((0, 0), (1, 0)),
            line((1, 0), (1, 1)),
            line((1, 1), (0, 1)),
            line((0, 1), (0, 0)),
        ]
    ).graph


@pytest.fixture
def grid():
    """5x5 lattice of unit streets."""
    features = []
    for i in range(5):
        features.append(line(*[(i, j) for j in range(5)]))
        features.append(line(*[(j, i) for j in range(5)]))
    return planar(features).graph
