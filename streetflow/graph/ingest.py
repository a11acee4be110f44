"""Geometry ingest: line features to directed edge candidates.

Each feature contributes one candidate per consecutive pair of points.
Malformed features are skipped and reported instead of aborting the run,
since real-world geometry data is rarely clean.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, List, Mapping, Tuple, Union

import numpy as np

from ..domain.errors import MalformedGeometryError
from ..domain.models import (
    Coordinate,
    EdgeCandidate,
    IngestReport,
    LineFeature,
    SkippedFeature,
)

logger = logging.getLogger(__name__)

FeatureLike = Union[LineFeature, Mapping[str, Any]]


def _bad_point(feature_id: str, point: Any, detail: str) -> MalformedGeometryError:
    return MalformedGeometryError(
        f"Feature {feature_id}: point {point!r} {detail}",
        feature_id=feature_id,
        reason="bad_point",
    )


def _coerce_point(feature_id: str, point: Any) -> Coordinate:
    # string and object components fail the dtype kind check
    if isinstance(point, (str, bytes)):
        raise _bad_point(feature_id, point, "is not a coordinate pair")
    try:
        values = np.asarray(point)
    except (TypeError, ValueError):
        raise _bad_point(feature_id, point, "is not a coordinate pair")
    if values.ndim != 1 or values.shape[0] < 2:
        raise _bad_point(feature_id, point, "is not a coordinate pair")
    if values.dtype.kind not in "iuf":
        raise _bad_point(feature_id, point, "is not numeric")
    x, y = float(values[0]), float(values[1])
    if not (math.isfinite(x) and math.isfinite(y)):
        raise MalformedGeometryError(
            f"Feature {feature_id}: point {point!r} is not finite",
            feature_id=feature_id,
            reason="non_finite",
        )
    return (x, y)


def _bad_feature(feature_id: str, detail: str) -> MalformedGeometryError:
    return MalformedGeometryError(
        f"Feature {feature_id}: {detail}",
        feature_id=feature_id,
        reason="bad_feature",
    )


def as_line_feature(raw: FeatureLike, index: int = 0) -> LineFeature:
    """Normalize a mapping with ``coordinates``/``tags`` keys into a LineFeature.

    The feature id defaults to the feature's position in the input.
    """
    if isinstance(raw, LineFeature):
        if raw.feature_id:
            return raw
        return LineFeature(raw.coordinates, raw.tags, str(index))

    if not isinstance(raw, Mapping):
        raise _bad_feature(
            str(index), f"expected a LineFeature or mapping, got {type(raw).__name__}"
        )

    feature_id = raw.get("id")
    feature_id = str(index) if feature_id is None else str(feature_id)
    coordinates = raw.get("coordinates")
    if coordinates is None:
        raise MalformedGeometryError(
            f"Feature {feature_id}: missing coordinates",
            feature_id=feature_id,
            reason="too_few_points",
        )
    if isinstance(coordinates, (str, bytes)) or not isinstance(coordinates, Iterable):
        raise _bad_feature(feature_id, f"coordinates {coordinates!r} are not a point list")
    tags = raw.get("tags") or {}
    if not isinstance(tags, Mapping):
        raise _bad_feature(feature_id, f"tags {tags!r} are not a mapping")
    return LineFeature(
        coordinates=tuple(coordinates),
        tags={str(k): str(v) for k, v in tags.items()},
        feature_id=feature_id,
    )


def ingest_feature(feature: LineFeature) -> List[EdgeCandidate]:
    """Split one feature into directed edge candidates.

    Raises:
        MalformedGeometryError: If the feature has fewer than 2 points or
            contains a point that is not a finite numeric pair.
    """
    coordinates = feature.coordinates
    if isinstance(coordinates, (str, bytes)) or not isinstance(coordinates, Iterable):
        raise _bad_feature(feature.feature_id, "coordinates are not a point list")
    raw_points = list(coordinates)
    if len(raw_points) < 2:
        raise MalformedGeometryError(
            f"Feature {feature.feature_id}: needs at least 2 points, got {len(raw_points)}",
            feature_id=feature.feature_id,
            reason="too_few_points",
        )

    points = [_coerce_point(feature.feature_id, p) for p in raw_points]
    return [
        EdgeCandidate(
            start=start,
            end=end,
            feature_id=feature.feature_id,
            segment_index=i,
            tags=feature.tags,
        )
        for i, (start, end) in enumerate(zip(points, points[1:]))
    ]


def ingest_features(
    features: Iterable[FeatureLike],
) -> Tuple[Tuple[EdgeCandidate, ...], IngestReport]:
    """Normalize a collection of line features into edge candidates.

    Returns:
        The candidates of every well-formed feature, and a report listing
        each skipped feature with its reason.
    """
    candidates: List[EdgeCandidate] = []
    skipped: List[SkippedFeature] = []
    seen = 0

    for index, raw in enumerate(features):
        seen += 1
        try:
            feature = as_line_feature(raw, index)
            candidates.extend(ingest_feature(feature))
        except MalformedGeometryError as e:
            logger.debug(
                "Skipping malformed feature",
                extra={"feature_id": e.feature_id, "reason": e.reason},
            )
            skipped.append(SkippedFeature(feature_id=e.feature_id, reason=e.reason))

    if skipped:
        logger.warning(
            "Skipped %d malformed feature(s) of %d",
            len(skipped),
            seen,
            extra={"skipped": len(skipped), "features": seen},
        )

    report = IngestReport(
        features_seen=seen,
        candidates=len(candidates),
        skipped=tuple(skipped),
    )
    return tuple(candidates), report
