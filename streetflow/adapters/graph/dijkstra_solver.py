"""Dijkstra Route Solver adapter.

This adapter wraps the functional Dijkstra implementation and adds:
- Raising on unreachable targets for single queries
- Vertex validation errors surfaced immediately
- Logging
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable

from ...domain.errors import NoRouteFoundError
from ...domain.models import PathResult
from ...graph.builder import StreetGraph
from ...graph.dijkstra import shortest_paths


@dataclass
class DijkstraRouteSolver:
    """Route solver using Dijkstra's shortest path algorithm.

    Implements RouteSolverPort.
    """

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def solve(self, graph: StreetGraph, source: int, target: int) -> PathResult:
        """Find the shortest path between two vertices.

        Raises:
            UnknownVertexError: If source or target is not in the graph.
            NoRouteFoundError: If no path exists.
        """
        self._logger.debug(
            "Solving route",
            extra={"source": source, "target": target, "profile": graph.profile},
        )

        result = shortest_paths(graph, source, [target])[graph.check_vertex(target)]

        if not result.reachable:
            self._logger.warning(
                "No route found",
                extra={"source": source, "target": target},
            )
            raise NoRouteFoundError(
                f"No path from {source} to {target}",
                source=int(source),
                target=int(target),
            )

        self._logger.info(
            "Route found",
            extra={
                "source": source,
                "target": target,
                "edges": result.num_edges,
                "cost": result.cost,
            },
        )
        return result

    def solve_safe(self, graph: StreetGraph, source: int, target: int) -> PathResult:
        """Like solve(), but returns the no-path result instead of raising
        when the target is unreachable."""
        return shortest_paths(graph, source, [target])[graph.check_vertex(target)]

    def solve_many(
        self, graph: StreetGraph, source: int, targets: Iterable[int]
    ) -> Dict[int, PathResult]:
        """Find shortest paths from one source to many targets in one search."""
        results = shortest_paths(graph, source, targets)
        unreachable = sum(1 for r in results.values() if not r.reachable)
        self._logger.debug(
            "Multi-target search done",
            extra={
                "source": source,
                "targets": len(results),
                "unreachable": unreachable,
            },
        )
        return results
