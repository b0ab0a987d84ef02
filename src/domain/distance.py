"""
Distance metrics between two coordinate pairs.

Both metrics are pure functions of ``(lat1, lng1, lat2, lng2)`` so either
can be plugged into ``Location.distance_to``, the ride factory and the
nearest-driver strategy without touching anything else.

* ``euclidean``    -- straight-line distance on the raw coordinates (the
  default, matching the fare rates configured per "distance unit").
* ``haversine_km`` -- great-circle distance in km, for fleets whose rates
  are quoted per km.

Complexity: O(1) per call.
"""

from __future__ import annotations

import math
from typing import Callable

EARTH_RADIUS_KM = 6_371.0

DistanceMetric = Callable[[float, float, float, float], float]


def euclidean(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Return the straight-line distance between two coordinate pairs."""
    return math.hypot(lat1 - lat2, lng1 - lng2)


def haversine_km(
    lat1: float, lng1: float, lat2: float, lng2: float
) -> float:
    """Great-circle distance in km between two coordinate pairs.

    Selected with ``DISPATCH_DISTANCE_METRIC=haversine``; ride distances and
    nearest-driver ranking are then in km, and vehicle rates are per km.
    """
    lat1_r, lat2_r = math.radians(lat1), math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


DISTANCE_METRICS: dict[str, DistanceMetric] = {
    "euclidean": euclidean,
    "haversine": haversine_km,
}


def metric_from_name(name: str) -> DistanceMetric:
    try:
        return DISTANCE_METRICS[name]
    except KeyError:
        raise ValueError(
            f"Unknown distance metric {name!r}; "
            f"expected one of {sorted(DISTANCE_METRICS)}"
        ) from None
