"""Spatial export of aggregated flow networks.

Merged flow records are joined back to vertex coordinates, producing
``(geometry, flow, attributes)`` items for an external renderer. A
GeoJSON FeatureCollection view is provided for tools that take one, and
can be read back into line features for re-ingest.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from ..domain.errors import MalformedGeometryError, MissingCoordinateError, UnknownVertexError
from ..domain.models import Coordinate, ExportedEdge, LineFeature, MergedFlowRecord
from ..graph.builder import StreetGraph


def _resolve(graph: StreetGraph, vertex_id: int) -> Coordinate:
    try:
        return graph.coordinate(vertex_id)
    except UnknownVertexError as e:
        raise MissingCoordinateError(
            f"No coordinate for vertex {vertex_id!r}; the flow records do not "
            "belong to this graph",
            vertex_id=e.vertex_id,
            cause=e,
        )


def export_network(
    graph: StreetGraph, merged: Iterable[MergedFlowRecord]
) -> Tuple[ExportedEdge, ...]:
    """Attach vertex coordinates to merged flow records.

    Raises:
        MissingCoordinateError: If a record references a vertex the graph
            does not have.
    """
    exported: List[ExportedEdge] = []
    for record in merged:
        start = _resolve(graph, record.u)
        end = _resolve(graph, record.v)
        attributes: Dict[str, Any] = dict(record.tags)
        attributes.update(
            {
                "edge_id": record.edge_id,
                "from": record.u,
                "to": record.v,
                "length": record.length,
            }
        )
        exported.append(
            ExportedEdge(geometry=(start, end), flow=record.flow, attributes=attributes)
        )
    return tuple(exported)


def to_geojson(exported: Iterable[ExportedEdge]) -> Dict[str, Any]:
    """Build a GeoJSON FeatureCollection of LineStrings with a ``flow`` property."""
    features = []
    for item in exported:
        properties = dict(item.attributes)
        properties["flow"] = item.flow
        features.append(
            {
                "type": "Feature",
                "id": properties.get("edge_id"),
                "geometry": {
                    "type": "LineString",
                    "coordinates": [list(p) for p in item.geometry],
                },
                "properties": properties,
            }
        )
    return {"type": "FeatureCollection", "features": features}


def features_from_geojson(collection: Mapping[str, Any]) -> List[LineFeature]:
    """Read LineString features of a FeatureCollection back as LineFeatures.

    Properties become string tags. MultiLineStrings are split into one
    feature per part.

    Raises:
        MalformedGeometryError: If a feature has no supported geometry.
    """
    features: List[LineFeature] = []
    for index, feature in enumerate(collection.get("features", [])):
        feature_id = str(feature.get("id", index))
        geometry = feature.get("geometry") or {}
        tags = {
            str(k): str(v)
            for k, v in (feature.get("properties") or {}).items()
            if v is not None
        }
        kind = geometry.get("type")
        if kind == "LineString":
            parts: Sequence[Any] = [geometry.get("coordinates", [])]
        elif kind == "MultiLineString":
            parts = geometry.get("coordinates", [])
        else:
            raise MalformedGeometryError(
                f"Feature {feature_id}: unsupported geometry {kind!r}",
                feature_id=feature_id,
                reason="bad_geometry",
            )
        for part_index, coords in enumerate(parts):
            part_id = feature_id if len(parts) == 1 else f"{feature_id}.{part_index}"
            features.append(
                LineFeature(
                    coordinates=tuple(tuple(p) for p in coords),
                    tags=tags,
                    feature_id=part_id,
                )
            )
    return features
