"""Shortest-path computation using Dijkstra's algorithm.

A single search from one source settles every requested target, then
stops. Heap entries are ``(cost, vertex_id)`` so that ties are broken
by vertex id and results are deterministic for a given graph.
"""

from __future__ import annotations

import heapq
import math
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..domain.models import PathResult
from .builder import StreetGraph


def _search(
    graph: StreetGraph, source: int, targets: Optional[Iterable[int]]
) -> Tuple[Dict[int, float], Dict[int, int]]:
    """Run Dijkstra from ``source``.

    Returns the settled distances and, for each reached vertex, the id
    of the edge it was reached through. With ``targets`` given the
    search stops once all of them are settled.
    """
    remaining = None if targets is None else set(targets)
    distances: Dict[int, float] = {source: 0.0}
    previous_edge: Dict[int, int] = {}
    settled: Dict[int, float] = {}

    heap: List[Tuple[float, int]] = [(0.0, source)]

    while heap:
        current_distance, u = heapq.heappop(heap)

        if u in settled:
            continue

        settled[u] = current_distance

        if remaining is not None:
            remaining.discard(u)
            if not remaining:
                break

        for v, weight, eid in graph.adjacency[u]:
            if v in settled:
                continue
            new_distance = current_distance + weight
            if new_distance < distances.get(v, math.inf):
                distances[v] = new_distance
                previous_edge[v] = eid
                heapq.heappush(heap, (new_distance, v))

    return settled, previous_edge


def _trace(
    graph: StreetGraph,
    source: int,
    target: int,
    settled: Dict[int, float],
    previous_edge: Dict[int, int],
) -> PathResult:
    if target not in settled:
        return PathResult.unreachable(source, target)

    edges: List[int] = []
    vertices: List[int] = [target]
    current = target
    while current != source:
        eid = previous_edge[current]
        edges.append(eid)
        current = graph.edges[eid].source
        vertices.append(current)

    edges.reverse()
    vertices.reverse()
    return PathResult(
        source=source,
        target=target,
        vertices=tuple(vertices),
        edges=tuple(edges),
        cost=settled[target],
        length=math.fsum(graph.edges[eid].length for eid in edges),
    )


def shortest_paths(
    graph: StreetGraph, source: int, targets: Iterable[int]
) -> Dict[int, PathResult]:
    """Compute shortest paths from one source to several targets in one search.

    Parameters
    ----------
    graph:
        Built street graph.
    source:
        Source vertex id.
    targets:
        Target vertex ids.

    Returns
    -------
    dict[int, PathResult]
        One result per distinct target; unreachable targets map to an
        explicit no-path result (``reachable`` is False).

    Raises
    ------
    UnknownVertexError
        If the source or any target is not in the graph.
    """
    source = graph.check_vertex(source)
    wanted = [graph.check_vertex(t) for t in targets]
    if not wanted:
        return {}

    settled, previous_edge = _search(graph, source, wanted)
    return {t: _trace(graph, source, t, settled, previous_edge) for t in wanted}


def shortest_path(graph: StreetGraph, source: int, target: int) -> PathResult:
    """Compute the shortest path between two vertices."""
    return shortest_paths(graph, source, [target])[graph.check_vertex(target)]


def shortest_path_tree(graph: StreetGraph, source: int) -> Dict[int, float]:
    """Cost from ``source`` to every reachable vertex."""
    settled, _ = _search(graph, graph.check_vertex(source), None)
    return settled


def distance_matrix(
    graph: StreetGraph, origins: Sequence[int], destinations: Sequence[int]
) -> List[List[float]]:
    """Pairwise shortest-path costs, ``inf`` where unreachable.

    Runs one multi-target search per distinct origin.
    """
    dests = [graph.check_vertex(d) for d in destinations]
    rows: Dict[int, List[float]] = {}
    matrix: List[List[float]] = []
    for origin in origins:
        origin = graph.check_vertex(origin)
        if origin not in rows:
            results = shortest_paths(graph, origin, dests)
            rows[origin] = [results[d].cost for d in dests]
        matrix.append(list(rows[origin]))
    return matrix
