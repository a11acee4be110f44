"""Network flow service - Main orchestrator.

Wires the stages together without implementing any of them:

1. Ingest of parsed line features
2. Graph building (one graph per profile, cached)
3. Routing, or OD flow aggregation
4. Merging of directed flows and spatial export
5. Optional map rendering
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from ..config import get_config
from ..domain.errors import RenderingError, StreetFlowError
from ..domain.models import (
    BuildReport,
    Coordinate,
    EdgeCandidate,
    ExportedEdge,
    FlowResult,
    IngestReport,
    MergedFlowRecord,
    PathResult,
)
from ..flows.aggregate import FlowAggregator
from ..flows.export import export_network, to_geojson
from ..flows.merge import merge_directed
from ..graph.builder import BuildResult, GraphBuilder, StreetGraph
from ..graph.ingest import FeatureLike, ingest_features
from ..ports.graph import RouteSolverPort
from ..ports.rendering import FlowRendererPort


@dataclass(frozen=True)
class FlowNetwork:
    """Aggregated, merged and exported flows of one run."""

    result: FlowResult
    merged: Tuple[MergedFlowRecord, ...]
    exported: Tuple[ExportedEdge, ...]

    @property
    def total_flow(self) -> float:
        return self.result.total_flow

    def to_geojson(self) -> Dict[str, Any]:
        return to_geojson(self.exported)


@dataclass
class NetworkFlowService:
    """Main service for local routing and flow aggregation.

    Attributes:
        builder: Builds weighted graphs from edge candidates
        route_solver: Computes shortest paths
        aggregator: Assigns OD flows to edges
        renderer: Optional flow map renderer
    """

    builder: GraphBuilder
    route_solver: RouteSolverPort
    aggregator: FlowAggregator
    renderer: Optional[FlowRendererPort] = None

    _candidates: Tuple[EdgeCandidate, ...] = field(default=(), init=False, repr=False)
    _ingest_report: Optional[IngestReport] = field(default=None, init=False, repr=False)
    _graphs: Dict[str, BuildResult] = field(default_factory=dict, init=False, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def load_features(self, features: Iterable[FeatureLike]) -> IngestReport:
        """Ingest line features, replacing any previously loaded network."""
        candidates, report = ingest_features(features)
        with self._lock:
            self._candidates = candidates
            self._ingest_report = report
            self._graphs.clear()
        self._logger.info(
            "Features loaded",
            extra={
                "features": report.features_seen,
                "skipped": report.features_skipped,
                "candidates": report.candidates,
            },
        )
        return report

    @property
    def ingest_report(self) -> Optional[IngestReport]:
        return self._ingest_report

    def _default_profile(self) -> str:
        return get_config().routing.default_profile

    def _build(self, profile: Optional[str]) -> BuildResult:
        name = profile or self._default_profile()
        with self._lock:
            if not self._candidates:
                raise StreetFlowError("No features loaded; call load_features first")
            cached = self._graphs.get(name)
            if cached is None:
                cached = self.builder.build(self._candidates, name)
                self._graphs[name] = cached
            return cached

    def graph(self, profile: Optional[str] = None) -> StreetGraph:
        """Return the graph for a profile, building it on first use.

        Raises:
            UnknownProfileError: If the profile is not registered.
        """
        return self._build(profile).graph

    def build_report(self, profile: Optional[str] = None) -> BuildReport:
        return self._build(profile).report

    def route(self, source: int, target: int, profile: Optional[str] = None) -> PathResult:
        """Shortest path between two vertex ids.

        Raises:
            UnknownVertexError: If a vertex is not in the graph.
            NoRouteFoundError: If the target is unreachable.
        """
        return self.route_solver.solve(self.graph(profile), source, target)

    def route_coordinates(
        self, start: Coordinate, end: Coordinate, profile: Optional[str] = None
    ) -> PathResult:
        """Shortest path between two geocoded coordinates, snapped to vertices."""
        graph = self.graph(profile)
        source = graph.nearest_vertex(start)
        target = graph.nearest_vertex(end)
        self._logger.debug(
            "Coordinates snapped",
            extra={"source": source, "target": target},
        )
        return self.route_solver.solve(graph, source, target)

    def flows(
        self,
        origins: Sequence[int],
        destinations: Sequence[int],
        flows: Any,
        profile: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None,
        include_zero: bool = True,
    ) -> FlowNetwork:
        """Aggregate OD flows, merge directions and export the network."""
        graph = self.graph(profile)
        result = self.aggregator.aggregate(graph, origins, destinations, flows, cancel_event)
        merged = merge_directed(
            result.records,
            tags={e.id: e.tags for e in graph.edges},
            include_zero=include_zero,
        )
        exported = export_network(graph, merged)
        self._logger.info(
            "Flow network ready",
            extra={
                "profile": graph.profile,
                "edges": len(merged),
                "total_flow": result.total_flow,
                "unreachable_pairs": result.unreachable_pairs,
                "cancelled": result.cancelled,
            },
        )
        return FlowNetwork(result=result, merged=merged, exported=exported)

    def render(self, network: FlowNetwork, output_path: Path) -> Path:
        """Render a flow network with the configured renderer.

        Raises:
            RenderingError: If no renderer is configured or rendering fails.
        """
        if self.renderer is None:
            raise RenderingError(
                "No renderer configured",
                output_path=str(output_path),
            )
        return self.renderer.render(network.exported, output_path)
