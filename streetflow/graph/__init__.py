"""Graph-related building blocks for local routing.

This subpackage turns parsed line geometries into an immutable weighted
street graph and runs path-finding on top of that graph.
"""

from .builder import BuildResult, GraphBuilder, StreetGraph, build_graph
from .dijkstra import distance_matrix, shortest_path, shortest_path_tree, shortest_paths
from .ingest import ingest_feature, ingest_features
from .profiles import DEFAULT_PROFILES, ProfileRegistry, WeightProfile

__all__ = [
    "ingest_feature",
    "ingest_features",
    "WeightProfile",
    "ProfileRegistry",
    "DEFAULT_PROFILES",
    "GraphBuilder",
    "BuildResult",
    "StreetGraph",
    "build_graph",
    "shortest_path",
    "shortest_paths",
    "shortest_path_tree",
    "distance_matrix",
]
