"""Collapse directed flow records into undirected ones.

Both directions between a vertex pair, and any parallel edges, end up
in a single record whose flow is their sum. Length and tags come from
the edge with the lowest id in the group.
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..domain.models import FlowRecord, MergedFlowRecord


def merge_directed(
    records: Iterable[FlowRecord],
    tags: Optional[Mapping[int, Mapping[str, str]]] = None,
    include_zero: bool = True,
) -> Tuple[MergedFlowRecord, ...]:
    """Merge opposite-direction flow records per unordered vertex pair.

    Args:
        records: Directed flow records (usually ``FlowResult.records``).
        tags: Optional edge id to tag mapping attached to the merged records.
        include_zero: Keep pairs whose summed flow is zero.

    Returns:
        Merged records sorted by ``(u, v)`` with ``u < v``. The sum of
        their flow equals the sum of the input flow.
    """
    groups: Dict[Tuple[int, int], List[FlowRecord]] = {}
    for record in records:
        key = (min(record.source, record.target), max(record.source, record.target))
        groups.setdefault(key, []).append(record)

    merged: List[MergedFlowRecord] = []
    for (u, v), group in sorted(groups.items()):
        flow = math.fsum(r.flow for r in group)
        if not include_zero and flow == 0:
            continue
        first = min(group, key=lambda r: r.edge_id)
        merged.append(
            MergedFlowRecord(
                u=u,
                v=v,
                flow=flow,
                length=first.length,
                edge_id=first.edge_id,
                tags=dict(tags.get(first.edge_id, {})) if tags else {},
            )
        )
    return tuple(merged)
