"""Tests for the Dijkstra route solver adapter."""

import pytest

from helpers import line, planar
from streetflow.adapters.graph import DijkstraRouteSolver
from streetflow.domain.errors import NoRouteFoundError, UnknownVertexError


class TestDijkstraRouteSolver:
    @pytest.fixture
    def islands(self):
        return planar([line((0, 0), (1, 0)), line((5, 5), (6, 5))]).graph

    def test_solve_returns_path(self, square):
        result = DijkstraRouteSolver().solve(square, 0, 2)
        assert result.cost == pytest.approx(2.0)

    def test_solve_raises_when_unreachable(self, islands):
        with pytest.raises(NoRouteFoundError) as exc:
            DijkstraRouteSolver().solve(islands, 0, 2)
        assert (exc.value.source, exc.value.target) == (0, 2)

    def test_solve_safe_returns_no_path_marker(self, islands):
        result = DijkstraRouteSolver().solve_safe(islands, 0, 2)
        assert not result.reachable

    def test_unknown_vertex_is_not_swallowed(self, square):
        with pytest.raises(UnknownVertexError):
            DijkstraRouteSolver().solve_safe(square, 0, 10)

    def test_solve_many(self, islands):
        results = DijkstraRouteSolver().solve_many(islands, 0, [1, 2, 3])
        assert results[1].reachable
        assert not results[2].reachable
        assert not results[3].reachable
