"""
Driver Matching Strategies  (Strategy Pattern)
==============================================

A strategy picks one driver out of a point-in-time candidate set for a
ride request, or reports no match with ``None``.

Contract shared by every strategy
---------------------------------
* Candidates whose vehicle type differs from the request are never chosen.
* Neither the request nor the candidates are mutated.
* Deterministic: identical inputs give the identical choice; ties keep the
  first candidate encountered.

Complexity: O(n) per decision, n = number of candidates.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Iterator, Optional

from .distance import DistanceMetric, euclidean
from .entities import DriverSnapshot, RideRequest


class MatchingStrategy(ABC):
    name: str = "abstract"

    @abstractmethod
    def choose_driver(
        self, request: RideRequest, candidates: Iterable[DriverSnapshot]
    ) -> Optional[DriverSnapshot]: ...

    @staticmethod
    def eligible(
        request: RideRequest, candidates: Iterable[DriverSnapshot]
    ) -> Iterator[DriverSnapshot]:
        """Yield the candidates whose vehicle type matches the request."""
        return (c for c in candidates if c.vehicle_type == request.vehicle_type)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class NearestDriverStrategy(MatchingStrategy):
    name = "nearest"

    def __init__(self, metric: DistanceMetric = euclidean):
        self.metric = metric

    def choose_driver(
        self, request: RideRequest, candidates: Iterable[DriverSnapshot]
    ) -> Optional[DriverSnapshot]:
        nearest: Optional[DriverSnapshot] = None
        min_distance = float("inf")
        for candidate in self.eligible(request, candidates):
            dist = candidate.location.distance_to(request.pickup, self.metric)
            # strict comparison keeps the first of equally near drivers
            if dist < min_distance:
                min_distance = dist
                nearest = candidate
        return nearest


class BestRatedDriverStrategy(MatchingStrategy):
    name = "best_rated"

    def choose_driver(
        self, request: RideRequest, candidates: Iterable[DriverSnapshot]
    ) -> Optional[DriverSnapshot]:
        best: Optional[DriverSnapshot] = None
        for candidate in self.eligible(request, candidates):
            if best is None or candidate.rating > best.rating:
                best = candidate
        return best


def strategy_from_name(
    name: str, metric: DistanceMetric = euclidean
) -> MatchingStrategy:
    """Build a strategy from its configuration name."""
    if name == NearestDriverStrategy.name:
        return NearestDriverStrategy(metric)
    if name == BestRatedDriverStrategy.name:
        return BestRatedDriverStrategy()
    raise ValueError(f"Unknown matching strategy {name!r}")
