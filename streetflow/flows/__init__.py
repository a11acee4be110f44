"""Flow aggregation, merging and export on top of a built street graph."""

from .aggregate import FlowAggregator, aggregate_flows, od_table
from .export import export_network, features_from_geojson, to_geojson
from .merge import merge_directed

__all__ = [
    "FlowAggregator",
    "aggregate_flows",
    "od_table",
    "merge_directed",
    "export_network",
    "to_geojson",
    "features_from_geojson",
]
