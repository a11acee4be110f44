"""Builders for small planar test networks."""

from __future__ import annotations

from streetflow.domain.models import LineFeature
from streetflow.graph.builder import BuildResult, build_graph
from streetflow.graph.ingest import ingest_features
from streetflow.graph.profiles import ProfileRegistry, WeightProfile

UNIT = WeightProfile(name="unit", default_factor=1.0, respect_oneway=False)


def line(*points, **tags) -> LineFeature:
    return LineFeature(coordinates=tuple(points), tags=tags)


def planar(features, profile=UNIT, **kwargs) -> BuildResult:
    candidates, _ = ingest_features(features)
    registry = ProfileRegistry()
    registry.register(UNIT)
    return build_graph(candidates, profile, reference="planar", profiles=registry, **kwargs)
