"""Top-level package for streetflow.

Local routing over street networks: parsed line geometries become an
immutable weighted graph, shortest paths are computed on it, and many
origin-destination flows are aggregated into per-edge totals ready for
an external renderer.
"""

from .domain import (
    LineFeature,
    PathResult,
    StreetFlowError,
)
from .flows import aggregate_flows, export_network, merge_directed
from .graph import (
    GraphBuilder,
    StreetGraph,
    build_graph,
    ingest_features,
    shortest_path,
    shortest_paths,
)

__version__ = "0.1.0"

__all__ = [
    "LineFeature",
    "PathResult",
    "StreetFlowError",
    "ingest_features",
    "GraphBuilder",
    "StreetGraph",
    "build_graph",
    "shortest_path",
    "shortest_paths",
    "aggregate_flows",
    "merge_directed",
    "export_network",
    "__version__",
]
