"""Domain layer - Core models and errors.

This module contains immutable domain models and typed errors
used throughout the package. No external dependencies.
"""

from .errors import (
    ConfigurationError,
    DegenerateEdgeError,
    MalformedGeometryError,
    MissingCoordinateError,
    NoRouteFoundError,
    RenderingError,
    StreetFlowError,
    UnknownProfileError,
    UnknownVertexError,
)
from .models import (
    BuildReport,
    Coordinate,
    DroppedEdge,
    Edge,
    EdgeCandidate,
    ExportedEdge,
    FlowRecord,
    FlowResult,
    IngestReport,
    LineFeature,
    MergedFlowRecord,
    PathResult,
    SkippedFeature,
    Vertex,
)

__all__ = [
    # Models
    "Coordinate",
    "LineFeature",
    "EdgeCandidate",
    "Vertex",
    "Edge",
    "PathResult",
    "SkippedFeature",
    "IngestReport",
    "DroppedEdge",
    "BuildReport",
    "FlowRecord",
    "FlowResult",
    "MergedFlowRecord",
    "ExportedEdge",
    # Errors
    "StreetFlowError",
    "MalformedGeometryError",
    "DegenerateEdgeError",
    "UnknownProfileError",
    "UnknownVertexError",
    "MissingCoordinateError",
    "NoRouteFoundError",
    "ConfigurationError",
    "RenderingError",
]
