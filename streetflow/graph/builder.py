"""Graph building: edge candidates to an immutable weighted street graph.

Endpoints are snapped to vertices through a grid of cell size equal to
the snapping tolerance; a point within tolerance of an existing vertex
in its own or a neighbouring cell reuses that vertex. Edge weight is
``length * cost_factor`` under the selected profile.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from numbers import Integral
from typing import Dict, Iterable, List, Literal, Optional, Tuple, Union

from geopy.distance import great_circle
from pydantic import ValidationError

from ..config import GraphConfig, get_config
from ..domain.errors import ConfigurationError, DegenerateEdgeError, UnknownVertexError
from ..domain.models import (
    BuildReport,
    Coordinate,
    DroppedEdge,
    Edge,
    EdgeCandidate,
    Vertex,
)
from .profiles import ProfileRegistry, WeightProfile

Reference = Literal["geographic", "planar"]

# (target vertex id, edge weight, edge id)
Neighbor = Tuple[int, float, int]


def segment_length(start: Coordinate, end: Coordinate, reference: Reference) -> float:
    """Geometric length of a segment.

    Planar coordinates use the Euclidean distance in coordinate units;
    geographic coordinates (lon, lat in degrees) use the great-circle
    distance in metres.
    """
    if reference == "planar":
        return math.hypot(end[0] - start[0], end[1] - start[1])
    return great_circle((start[1], start[0]), (end[1], end[0])).meters


@dataclass(frozen=True)
class StreetGraph:
    """Immutable routable graph.

    Vertex and edge ids are dense indices into ``vertices`` and
    ``edges``. ``adjacency[v]`` lists the outgoing neighbours of ``v``.
    """

    vertices: Tuple[Vertex, ...]
    edges: Tuple[Edge, ...]
    adjacency: Tuple[Tuple[Neighbor, ...], ...]
    components: Tuple[int, ...]
    profile: str = ""
    reference: Reference = "geographic"

    @property
    def num_vertices(self) -> int:
        return len(self.vertices)

    @property
    def num_edges(self) -> int:
        return len(self.edges)

    @property
    def num_components(self) -> int:
        return len(set(self.components))

    def has_vertex(self, vertex_id: object) -> bool:
        return (
            isinstance(vertex_id, Integral)
            and not isinstance(vertex_id, bool)
            and 0 <= int(vertex_id) < len(self.vertices)
        )

    def check_vertex(self, vertex_id: object) -> int:
        """Return the vertex id as a plain int.

        Raises:
            UnknownVertexError: If the id is not in the graph.
        """
        if not self.has_vertex(vertex_id):
            raise UnknownVertexError(
                f"Vertex not in graph: {vertex_id!r}",
                vertex_id=int(vertex_id) if isinstance(vertex_id, Integral) else -1,
            )
        return int(vertex_id)  # type: ignore[call-overload]

    def vertex(self, vertex_id: int) -> Vertex:
        return self.vertices[self.check_vertex(vertex_id)]

    def coordinate(self, vertex_id: int) -> Coordinate:
        return self.vertex(vertex_id).coordinate

    def edge(self, edge_id: int) -> Edge:
        return self.edges[edge_id]

    def neighbors(self, vertex_id: int) -> Tuple[Neighbor, ...]:
        return self.adjacency[self.check_vertex(vertex_id)]

    def out_edges(self, vertex_id: int) -> Tuple[Edge, ...]:
        return tuple(self.edges[eid] for _, _, eid in self.neighbors(vertex_id))

    def edges_between(self, u: int, v: int) -> Tuple[Edge, ...]:
        """Directed edges from ``u`` to ``v`` (parallel edges included)."""
        return tuple(e for e in self.out_edges(u) if e.target == v)

    def nearest_vertex(self, coordinate: Coordinate) -> int:
        """Snap an external coordinate (e.g. a geocoded place) to a vertex id.

        Raises:
            ValueError: If the graph has no vertices.
        """
        if not self.vertices:
            raise ValueError("Cannot snap a coordinate on an empty graph")
        x, y = float(coordinate[0]), float(coordinate[1])
        # equirectangular approximation is enough to rank candidates
        scale = math.cos(math.radians(y)) if self.reference == "geographic" else 1.0

        def _dist2(v: Vertex) -> float:
            dx = (v.coordinate[0] - x) * scale
            dy = v.coordinate[1] - y
            return dx * dx + dy * dy

        return min(self.vertices, key=_dist2).id


@dataclass(frozen=True)
class BuildResult:
    """A built graph and the diagnostics of its build."""

    graph: StreetGraph
    report: BuildReport


class _VertexIndex:
    """Grid hash of snapped vertex coordinates."""

    def __init__(self, tolerance: float) -> None:
        if not (math.isfinite(tolerance) and tolerance > 0):
            raise ConfigurationError(
                f"Snapping tolerance must be finite and positive, got {tolerance}",
                setting_name="snap_tolerance",
                expected_type="float > 0",
            )
        self.tolerance = tolerance
        self.coordinates: List[Coordinate] = []
        self._grid: Dict[Tuple[int, int], List[int]] = {}

    def _cell(self, point: Coordinate) -> Tuple[int, int]:
        return (
            math.floor(point[0] / self.tolerance),
            math.floor(point[1] / self.tolerance),
        )

    def snap(self, point: Coordinate) -> int:
        """Id of the nearest vertex within tolerance (lowest id on ties), or a new one."""
        cx, cy = self._cell(point)
        best: Optional[Tuple[float, int]] = None
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for vid in self._grid.get((cx + dx, cy + dy), ()):
                    other = self.coordinates[vid]
                    d = math.hypot(other[0] - point[0], other[1] - point[1])
                    if d <= self.tolerance and (best is None or (d, vid) < best):
                        best = (d, vid)
        if best is not None:
            return best[1]
        vid = len(self.coordinates)
        self.coordinates.append(point)
        self._grid.setdefault((cx, cy), []).append(vid)
        return vid


def _components(num_vertices: int, edges: Iterable[Edge]) -> Tuple[int, ...]:
    """Label weakly connected components, largest first."""
    parent = list(range(num_vertices))

    def find(a: int) -> int:
        while parent[a] != a:
            parent[a] = parent[parent[a]]
            a = parent[a]
        return a

    for e in edges:
        ra, rb = find(e.source), find(e.target)
        if ra != rb:
            parent[max(ra, rb)] = min(ra, rb)

    roots = [find(v) for v in range(num_vertices)]
    sizes: Dict[int, int] = {}
    for r in roots:
        sizes[r] = sizes.get(r, 0) + 1
    order = sorted(sizes, key=lambda r: (-sizes[r], r))
    label = {r: i for i, r in enumerate(order)}
    return tuple(label[r] for r in roots)


@dataclass
class GraphBuilder:
    """Builds a StreetGraph from edge candidates under a weighting profile.

    Attributes:
        config: Graph configuration (tolerance, coordinate reference, direction)
        profiles: Registry used to resolve profile names
    """

    config: GraphConfig = field(default_factory=lambda: get_config().graph)
    profiles: ProfileRegistry = field(default_factory=ProfileRegistry)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def measure(self, start: Coordinate, end: Coordinate, candidate: EdgeCandidate) -> float:
        """Length of a snapped segment.

        Raises:
            DegenerateEdgeError: If the length is not finite and positive.
        """
        try:
            length = segment_length(start, end, self.config.reference)
        except ValueError as e:
            raise DegenerateEdgeError(
                f"Cannot measure segment {candidate.segment_index} "
                f"of feature {candidate.feature_id}",
                feature_id=candidate.feature_id,
                segment_index=candidate.segment_index,
                length=math.nan,
                cause=e,
            )
        if not math.isfinite(length) or length <= 0:
            raise DegenerateEdgeError(
                f"Degenerate segment {candidate.segment_index} of feature "
                f"{candidate.feature_id}: length {length}",
                feature_id=candidate.feature_id,
                segment_index=candidate.segment_index,
                length=length,
            )
        return length

    def build(
        self,
        candidates: Iterable[EdgeCandidate],
        profile: Union[str, WeightProfile, None] = None,
    ) -> BuildResult:
        """Build an immutable graph.

        Args:
            candidates: Directed edge candidates from ingest.
            profile: Profile name or instance; defaults to the configured one.

        Returns:
            The graph and a report counting every dropped candidate.

        Raises:
            UnknownProfileError: If the profile name is not registered.
        """
        weights = self.profiles.resolve(
            profile if profile is not None else get_config().routing.default_profile
        )
        index = _VertexIndex(self.config.snap_tolerance)
        dropped: List[DroppedEdge] = []
        # (source, target, length, weight, candidate) on provisional vertex ids
        kept: List[Tuple[int, int, float, float, EdgeCandidate]] = []
        seen = 0

        for candidate in candidates:
            seen += 1
            factor = weights.cost_factor(candidate.tags)
            if factor is None:
                dropped.append(
                    DroppedEdge(candidate.feature_id, candidate.segment_index, "excluded")
                )
                continue

            u = index.snap(candidate.start)
            v = index.snap(candidate.end)
            try:
                length = self.measure(index.coordinates[u], index.coordinates[v], candidate)
            except DegenerateEdgeError as e:
                self._logger.debug(
                    "Dropping degenerate edge",
                    extra={
                        "feature_id": e.feature_id,
                        "segment_index": e.segment_index,
                        "length": e.length,
                    },
                )
                dropped.append(
                    DroppedEdge(candidate.feature_id, candidate.segment_index, "degenerate")
                )
                continue

            if self.config.bidirectional:
                forward, reverse = weights.directions(candidate.tags)
            else:
                forward, reverse = True, False
            weight = length * factor
            if forward:
                kept.append((u, v, length, weight, candidate))
            if reverse:
                kept.append((v, u, length, weight, candidate))

        graph = self._assemble(index, kept, weights.name)

        report = BuildReport(
            profile=weights.name,
            candidates_seen=seen,
            vertices=graph.num_vertices,
            edges=graph.num_edges,
            dropped=tuple(dropped),
        )
        if report.degenerate_dropped:
            self._logger.warning(
                "Dropped %d degenerate edge(s)",
                report.degenerate_dropped,
                extra={"profile": weights.name},
            )
        self._logger.info(
            "Graph built",
            extra={
                "profile": weights.name,
                "vertices": graph.num_vertices,
                "edges": graph.num_edges,
                "excluded": report.profile_excluded,
                "degenerate": report.degenerate_dropped,
            },
        )
        return BuildResult(graph=graph, report=report)

    def _assemble(
        self,
        index: _VertexIndex,
        kept: List[Tuple[int, int, float, float, EdgeCandidate]],
        profile_name: str,
    ) -> StreetGraph:
        # Only vertices touched by a kept edge survive; first-seen order is kept.
        used = sorted({u for u, *_ in kept} | {v for _, v, *_ in kept})
        remap = {old: new for new, old in enumerate(used)}

        edges: List[Edge] = []
        incident: List[List[int]] = [[] for _ in used]
        adjacency: List[List[Neighbor]] = [[] for _ in used]
        for u_old, v_old, length, weight, candidate in kept:
            eid = len(edges)
            u, v = remap[u_old], remap[v_old]
            edges.append(
                Edge(
                    id=eid,
                    source=u,
                    target=v,
                    length=length,
                    weight=weight,
                    feature_id=candidate.feature_id,
                    segment_index=candidate.segment_index,
                    tags=candidate.tags,
                )
            )
            incident[u].append(eid)
            incident[v].append(eid)
            adjacency[u].append((v, weight, eid))

        vertices = tuple(
            Vertex(id=new, coordinate=index.coordinates[old], edge_ids=tuple(incident[new]))
            for new, old in enumerate(used)
        )
        return StreetGraph(
            vertices=vertices,
            edges=tuple(edges),
            adjacency=tuple(tuple(a) for a in adjacency),
            components=_components(len(vertices), edges),
            profile=profile_name,
            reference=self.config.reference,
        )


def build_graph(
    candidates: Iterable[EdgeCandidate],
    profile: Union[str, WeightProfile, None] = None,
    *,
    snap_tolerance: Optional[float] = None,
    reference: Optional[Reference] = None,
    bidirectional: Optional[bool] = None,
    profiles: Optional[ProfileRegistry] = None,
) -> BuildResult:
    """Functional shortcut around GraphBuilder with per-call overrides."""
    overrides = {
        key: value
        for key, value in (
            ("snap_tolerance", snap_tolerance),
            ("reference", reference),
            ("bidirectional", bidirectional),
        )
        if value is not None
    }
    try:
        config = GraphConfig.model_validate({**get_config().graph.model_dump(), **overrides})
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid graph override: {sorted(overrides)}",
            setting_name=",".join(str(err["loc"][0]) for err in e.errors()),
            cause=e,
        )
    builder = GraphBuilder(config=config, profiles=profiles or ProfileRegistry())
    return builder.build(candidates, profile)
