"""Immutable domain models for streetflow.

All models are frozen dataclasses with slots. They carry no behaviour
beyond small derived properties and have no external dependencies.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple

# (x, y); longitude/latitude in the geographic reference
Coordinate = Tuple[float, float]


@dataclass(frozen=True, slots=True)
class LineFeature:
    """An already-parsed line geometry with its attribute tags.

    Attributes:
        coordinates: Ordered points of the line
        tags: Attribute tags (e.g. ``{"highway": "residential"}``)
        feature_id: Identifier carried through to edges for back-reference
    """

    coordinates: Tuple[Coordinate, ...]
    tags: Mapping[str, str] = field(default_factory=dict)
    feature_id: str = ""


@dataclass(frozen=True, slots=True)
class EdgeCandidate:
    """One directed segment between two consecutive points of a feature."""

    start: Coordinate
    end: Coordinate
    feature_id: str
    segment_index: int
    tags: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Vertex:
    """A graph vertex.

    Attributes:
        id: Dense integer id, stable for the lifetime of the graph
        coordinate: Snapped location of the vertex
        edge_ids: Ids of all incident edges, outgoing and incoming
    """

    id: int
    coordinate: Coordinate
    edge_ids: Tuple[int, ...] = ()


@dataclass(frozen=True, slots=True)
class Edge:
    """A directed, weighted edge.

    Attributes:
        id: Dense integer id
        source: Source vertex id
        target: Target vertex id
        length: Geometric length (metres in the geographic reference)
        weight: Profile-dependent cost, strictly positive
        feature_id: Originating feature
        segment_index: Position of the segment within its feature
        tags: Attribute tags of the originating feature
    """

    id: int
    source: int
    target: int
    length: float
    weight: float
    feature_id: str = ""
    segment_index: int = -1
    tags: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class PathResult:
    """Result of a shortest-path query.

    An unreachable target is represented explicitly: ``reachable`` is
    False, ``cost`` is infinite and both sequences are empty.

    Attributes:
        source: Source vertex id
        target: Target vertex id
        vertices: Vertex ids from source to target (inclusive)
        edges: Edge ids traversed, in order
        cost: Total weight
        length: Total geometric length
    """

    source: int
    target: int
    vertices: Tuple[int, ...] = ()
    edges: Tuple[int, ...] = ()
    cost: float = math.inf
    length: float = math.inf

    @classmethod
    def unreachable(cls, source: int, target: int) -> PathResult:
        return cls(source=source, target=target)

    @property
    def reachable(self) -> bool:
        return math.isfinite(self.cost)

    @property
    def num_edges(self) -> int:
        return len(self.edges)


@dataclass(frozen=True, slots=True)
class SkippedFeature:
    """Diagnostic entry for a feature dropped at ingest."""

    feature_id: str
    reason: str


@dataclass(frozen=True, slots=True)
class IngestReport:
    """Diagnostics summary of an ingest run."""

    features_seen: int = 0
    candidates: int = 0
    skipped: Tuple[SkippedFeature, ...] = ()

    @property
    def features_skipped(self) -> int:
        return len(self.skipped)


@dataclass(frozen=True, slots=True)
class DroppedEdge:
    """Diagnostic entry for an edge candidate dropped at build time."""

    feature_id: str
    segment_index: int
    reason: str


@dataclass(frozen=True, slots=True)
class BuildReport:
    """Diagnostics summary of a graph build.

    Attributes:
        profile: Name of the weighting profile used
        candidates_seen: Number of edge candidates consumed
        vertices: Number of vertices in the built graph
        edges: Number of directed edges in the built graph
        dropped: Every candidate that produced no edge, with its reason
    """

    profile: str
    candidates_seen: int = 0
    vertices: int = 0
    edges: int = 0
    dropped: Tuple[DroppedEdge, ...] = ()

    def count(self, reason: str) -> int:
        return sum(1 for d in self.dropped if d.reason == reason)

    @property
    def degenerate_dropped(self) -> int:
        return self.count("degenerate")

    @property
    def profile_excluded(self) -> int:
        return self.count("excluded")


@dataclass(frozen=True, slots=True)
class FlowRecord:
    """Accumulated flow on one directed edge."""

    edge_id: int
    source: int
    target: int
    length: float
    flow: float = 0.0


@dataclass(frozen=True, slots=True)
class FlowResult:
    """Output of an aggregation run.

    Attributes:
        records: One record per directed edge of the graph
        od_pairs: Number of OD pairs with a positive flow
        unreachable_pairs: Pairs with no connecting path (zero flow assigned)
        origins_total: Distinct origins with at least one positive flow
        origins_processed: Origins whose search completed
        cancelled: True when the run stopped early on request
    """

    records: Tuple[FlowRecord, ...] = ()
    od_pairs: int = 0
    unreachable_pairs: int = 0
    origins_total: int = 0
    origins_processed: int = 0
    cancelled: bool = False

    @property
    def total_flow(self) -> float:
        return math.fsum(r.flow for r in self.records)

    def flow_on(self, edge_id: int) -> float:
        """Return the flow carried by a directed edge."""
        return self.records[edge_id].flow


@dataclass(frozen=True, slots=True)
class MergedFlowRecord:
    """Flow on an undirected vertex pair, with ``u < v``."""

    u: int
    v: int
    flow: float
    length: float
    edge_id: int
    tags: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ExportedEdge:
    """A flow-carrying line ready for an external renderer."""

    geometry: Tuple[Coordinate, ...]
    flow: float
    attributes: Mapping[str, Any] = field(default_factory=dict)

    @property
    def midpoint(self) -> Optional[Coordinate]:
        if not self.geometry:
            return None
        xs = [p[0] for p in self.geometry]
        ys = [p[1] for p in self.geometry]
        return (sum(xs) / len(xs), sum(ys) / len(ys))
