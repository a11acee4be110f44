"""Typed domain errors for streetflow.

Ingest and build errors are raised per feature or per edge and collected
into diagnostics reports by the caller; query-time errors propagate to
the caller immediately.

All errors inherit from StreetFlowError and can optionally wrap a root
cause exception for debugging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass
class StreetFlowError(Exception):
    """Base error for the streetflow domain.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class MalformedGeometryError(StreetFlowError):
    """A line feature has the wrong shape (fewer than 2 points, bad coordinates).

    Fatal to that feature only; ingest skips it and carries on.

    Attributes:
        feature_id: Identifier of the offending feature
        reason: Short machine-friendly reason ("too_few_points", ...)
    """

    feature_id: str = ""
    reason: str = ""


@dataclass
class DegenerateEdgeError(StreetFlowError):
    """Edge with zero, negative or non-finite length.

    Attributes:
        feature_id: Feature the segment came from
        segment_index: Position of the segment within its feature
        length: The offending length
    """

    feature_id: str = ""
    segment_index: int = -1
    length: float = 0.0


@dataclass
class UnknownProfileError(StreetFlowError):
    """Requested weighting profile does not exist.

    Attributes:
        profile: The requested profile name
        available: Names of the registered profiles
    """

    profile: str = ""
    available: Tuple[str, ...] = ()


@dataclass
class UnknownVertexError(StreetFlowError):
    """Vertex id not present in the graph.

    Attributes:
        vertex_id: The id that could not be resolved
    """

    vertex_id: int = -1


@dataclass
class MissingCoordinateError(StreetFlowError):
    """A flow record references a vertex with no coordinate.

    Signals a broken graph invariant upstream, not bad user input.

    Attributes:
        vertex_id: The id that could not be resolved
    """

    vertex_id: int = -1


@dataclass
class NoRouteFoundError(StreetFlowError):
    """No path exists between the requested vertices.

    Attributes:
        source: Source vertex id
        target: Target vertex id
    """

    source: int = -1
    target: int = -1


@dataclass
class ConfigurationError(StreetFlowError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: Name of the problematic setting
        expected_type: Expected type or format
    """

    setting_name: str = ""
    expected_type: Optional[str] = None


@dataclass
class RenderingError(StreetFlowError):
    """Map rendering of an exported flow network failed.

    Attributes:
        output_path: Path where rendering was attempted
        renderer_type: Type of renderer that failed
    """

    output_path: Optional[str] = None
    renderer_type: str = ""
