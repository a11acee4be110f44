"""Graph ports - Abstractions for route computation.

These protocols define the contracts for routing on a built
StreetGraph, so services can be given any solver implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterable, Protocol

if TYPE_CHECKING:
    from ..domain.models import PathResult
    from ..graph.builder import StreetGraph


class RouteSolverPort(Protocol):
    """Port for route computation.

    Implementation: adapters/graph/dijkstra_solver.py

    The solver computes minimum-weight paths through the street graph.
    """

    def solve(self, graph: StreetGraph, source: int, target: int) -> PathResult:
        """Find the shortest path between two vertices.

        Args:
            graph: The built street graph.
            source: Source vertex id.
            target: Target vertex id.

        Returns:
            PathResult with vertices, edges and total cost.
        """
        ...

    def solve_many(
        self, graph: StreetGraph, source: int, targets: Iterable[int]
    ) -> Dict[int, PathResult]:
        """Find shortest paths from one source to several targets.

        Args:
            graph: The built street graph.
            source: Source vertex id.
            targets: Target vertex ids.

        Returns:
            One PathResult per target, unreachable ones marked as such.
        """
        ...
