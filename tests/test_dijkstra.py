import math

import pytest

from helpers import line, planar
from streetflow.domain.errors import UnknownVertexError
from streetflow.graph.dijkstra import (
    distance_matrix,
    shortest_path,
    shortest_path_tree,
    shortest_paths,
)


def test_square_opposite_corner_costs_two(square):
    result = shortest_path(square, 0, 2)

    assert result.reachable
    assert result.cost == pytest.approx(2.0)
    assert result.num_edges == 2
    assert result.vertices[0] == 0 and result.vertices[-1] == 2
    assert result.vertices in {(0, 1, 2), (0, 3, 2)}


def test_path_edges_chain_from_source_to_target(grid):
    result = shortest_path(grid, 0, grid.num_vertices - 1)
    edges = [grid.edge(eid) for eid in result.edges]

    assert edges[0].source == result.source
    assert edges[-1].target == result.target
    for a, b in zip(edges, edges[1:]):
        assert a.target == b.source
    assert result.length == pytest.approx(8.0)


def test_prefers_cheaper_of_two_routes():
    graph = planar(
        [
            line((0, 0), (10, 0)),
            line((0, 0), (1, 1), (10, 0.5)),
            line((10, 0.5), (10, 0)),
        ],
        bidirectional=False,
    ).graph
    direct = graph.nearest_vertex((10, 0))
    result = shortest_path(graph, 0, direct)
    assert result.cost == pytest.approx(10.0)
    assert result.num_edges == 1


def test_source_equals_target(square):
    result = shortest_path(square, 3, 3)
    assert result.reachable
    assert result.cost == 0.0
    assert result.vertices == (3,)
    assert result.edges == ()


def test_unreachable_target_is_explicit():
    graph = planar([line((0, 0), (1, 0)), line((5, 5), (6, 5))]).graph
    result = shortest_path(graph, 0, 3)

    assert not result.reachable
    assert math.isinf(result.cost)
    assert result.vertices == ()
    assert result.edges == ()


def test_one_way_street_blocks_return_trip():
    graph = planar([line((0, 0), (1, 0))], bidirectional=False).graph
    assert shortest_path(graph, 0, 1).reachable
    assert not shortest_path(graph, 1, 0).reachable


def test_unknown_source_or_target_raises(square):
    with pytest.raises(UnknownVertexError):
        shortest_paths(square, 99, [0])
    with pytest.raises(UnknownVertexError):
        shortest_paths(square, 0, [1, 99])


def test_batched_search_matches_single_searches(grid):
    targets = [3, 7, 12, 18, 24, 0]
    batched = shortest_paths(grid, 6, targets)

    assert set(batched) == set(targets)
    for target in targets:
        single = shortest_path(grid, 6, target)
        assert batched[target].cost == pytest.approx(single.cost)
        assert batched[target].vertices == single.vertices


def test_repeated_queries_are_deterministic(grid):
    first = shortest_path(grid, 0, 24)
    for _ in range(5):
        again = shortest_path(grid, 0, 24)
        assert again.cost == first.cost
        assert again.edges == first.edges


def test_empty_target_set(square):
    assert shortest_paths(square, 0, []) == {}


def test_shortest_path_tree_covers_component(square):
    tree = shortest_path_tree(square, 0)
    assert tree == {0: 0.0, 1: 1.0, 3: 1.0, 2: 2.0}


def test_distance_matrix():
    graph = planar([line((0, 0), (1, 0), (2, 0)), line((9, 9), (10, 9))]).graph
    matrix = distance_matrix(graph, [0, 2, 0], [1, 3])

    assert matrix[0][0] == pytest.approx(1.0)
    assert matrix[1][0] == pytest.approx(1.0)
    assert math.isinf(matrix[0][1])
    assert matrix[2] == matrix[0]
