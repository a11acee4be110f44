"""Origin-destination flow aggregation.

Every OD pair with a positive flow ``f`` adds ``f`` to each edge of its
shortest path. Pairs are grouped by origin so that one multi-target
search serves all destinations of that origin. Origin batches run on a
thread pool; each batch accumulates into its own array and the partial
arrays are summed in submission order, which keeps totals deterministic.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..config import get_config
from ..domain.models import FlowRecord, FlowResult
from ..graph.builder import StreetGraph
from ..graph.dijkstra import shortest_paths

# origin -> {destination: flow}
ODTable = Dict[int, Dict[int, float]]


@dataclass(frozen=True)
class _BatchOutcome:
    flows: Optional[np.ndarray]
    origins: int
    unreachable: int


def od_table(
    graph: StreetGraph,
    origins: Sequence[int],
    destinations: Sequence[int],
    flows: Any,
) -> ODTable:
    """Normalize OD input into a per-origin table of positive flows.

    ``flows`` is either an ``len(origins) x len(destinations)`` matrix,
    or a flat sequence paired element-wise with ``origins`` and
    ``destinations`` (which must then have the same length). Repeated
    pairs in the flat form are summed.

    Raises:
        ValueError: On inconsistent dimensions, negative or non-finite flow.
        UnknownVertexError: If an origin or destination is not in the graph.
    """
    values = np.asarray(flows, dtype=float)
    if not np.all(np.isfinite(values)):
        raise ValueError("Flows must be finite")
    if np.any(values < 0):
        raise ValueError("Flows must be non-negative")

    origin_ids = [graph.check_vertex(o) for o in origins]
    dest_ids = [graph.check_vertex(d) for d in destinations]
    table: ODTable = {}

    if values.ndim == 2:
        if values.shape != (len(origin_ids), len(dest_ids)):
            raise ValueError(
                f"Flow matrix shape {values.shape} does not match "
                f"{len(origin_ids)} origins x {len(dest_ids)} destinations"
            )
        for i, o in enumerate(origin_ids):
            for j, d in enumerate(dest_ids):
                f = float(values[i, j])
                if f > 0:
                    row = table.setdefault(o, {})
                    row[d] = row.get(d, 0.0) + f
    elif values.ndim == 1:
        if not len(origin_ids) == len(dest_ids) == len(values):
            raise ValueError(
                "Flat flows need origins, destinations and flows of equal length, "
                f"got {len(origin_ids)}, {len(dest_ids)}, {len(values)}"
            )
        for o, d, f in zip(origin_ids, dest_ids, values.tolist()):
            if f > 0:
                row = table.setdefault(o, {})
                row[d] = row.get(d, 0.0) + f
    else:
        raise ValueError(f"Flows must be 1- or 2-dimensional, got {values.ndim}")

    return table


@dataclass
class FlowAggregator:
    """Assigns OD flows onto the edges of their shortest paths.

    Attributes:
        max_workers: Thread pool size
        batch_size: Origins per unit of work; cancellation is checked
            before each batch starts
    """

    max_workers: int = field(default_factory=lambda: get_config().routing.max_workers)
    batch_size: int = field(default_factory=lambda: get_config().routing.batch_size)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        if self.max_workers < 1 or self.batch_size < 1:
            raise ValueError("max_workers and batch_size must be >= 1")

    def aggregate(
        self,
        graph: StreetGraph,
        origins: Sequence[int],
        destinations: Sequence[int],
        flows: Any,
        cancel_event: Optional[threading.Event] = None,
    ) -> FlowResult:
        """Aggregate OD flows onto directed edges.

        Args:
            graph: Built street graph, shared read-only by the workers.
            origins: Origin vertex ids.
            destinations: Destination vertex ids.
            flows: Flow matrix or flat flow sequence (see ``od_table``).
            cancel_event: Set it to stop before the next origin batch.

        Returns:
            FlowResult with one record per directed edge. Unreachable pairs
            contribute nothing and are counted in ``unreachable_pairs``.
        """
        table = od_table(graph, origins, destinations, flows)
        od_pairs = sum(len(row) for row in table.values())
        ordered = list(table.items())
        batches = [
            ordered[i : i + self.batch_size]
            for i in range(0, len(ordered), self.batch_size)
        ]

        self._logger.info(
            "Aggregating flows",
            extra={
                "origins": len(ordered),
                "od_pairs": od_pairs,
                "batches": len(batches),
                "profile": graph.profile,
            },
        )

        total = np.zeros(graph.num_edges, dtype=float)
        processed = 0
        unreachable = 0
        cancelled = False

        if batches:
            workers = min(self.max_workers, len(batches))
            with ThreadPoolExecutor(
                max_workers=workers, thread_name_prefix="flow-aggregate"
            ) as pool:
                futures = [
                    pool.submit(self._route_batch, graph, batch, cancel_event)
                    for batch in batches
                ]
                for future in futures:
                    outcome = future.result()
                    if outcome.flows is None:
                        cancelled = True
                        continue
                    total += outcome.flows
                    processed += outcome.origins
                    unreachable += outcome.unreachable

        if cancelled:
            self._logger.warning(
                "Flow aggregation cancelled",
                extra={"origins_processed": processed, "origins": len(ordered)},
            )
        if unreachable:
            self._logger.info(
                "Unreachable OD pairs",
                extra={"unreachable_pairs": unreachable, "od_pairs": od_pairs},
            )

        records = tuple(
            FlowRecord(
                edge_id=e.id,
                source=e.source,
                target=e.target,
                length=e.length,
                flow=float(total[e.id]),
            )
            for e in graph.edges
        )
        return FlowResult(
            records=records,
            od_pairs=od_pairs,
            unreachable_pairs=unreachable,
            origins_total=len(ordered),
            origins_processed=processed,
            cancelled=cancelled,
        )

    def _route_batch(
        self,
        graph: StreetGraph,
        batch: List[Tuple[int, Dict[int, float]]],
        cancel_event: Optional[threading.Event],
    ) -> _BatchOutcome:
        if cancel_event is not None and cancel_event.is_set():
            return _BatchOutcome(flows=None, origins=0, unreachable=0)

        partial = np.zeros(graph.num_edges, dtype=float)
        unreachable = 0
        for origin, row in batch:
            results = shortest_paths(graph, origin, row.keys())
            for destination, f in row.items():
                path = results[destination]
                if not path.reachable:
                    unreachable += 1
                    continue
                if path.edges:
                    np.add.at(partial, list(path.edges), f)
        return _BatchOutcome(flows=partial, origins=len(batch), unreachable=unreachable)


def aggregate_flows(
    graph: StreetGraph,
    origins: Sequence[int],
    destinations: Sequence[int],
    flows: Any,
    *,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> FlowResult:
    """Functional shortcut around FlowAggregator."""
    aggregator = (
        FlowAggregator() if max_workers is None else FlowAggregator(max_workers=max_workers)
    )
    return aggregator.aggregate(graph, origins, destinations, flows, cancel_event)
