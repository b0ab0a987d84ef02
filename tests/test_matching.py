"""Unit tests for distance metrics and driver matching strategies."""

import math

import pytest

from src.domain.distance import euclidean, haversine_km, metric_from_name
from src.domain.entities import DriverSnapshot, Location, RideRequest
from src.domain.enums import VehicleType
from src.domain.matching import (
    BestRatedDriverStrategy,
    NearestDriverStrategy,
    strategy_from_name,
)

PICKUP = Location(12.97, 77.59)
DROP = Location(12.98, 77.60)


def _request(vehicle_type=VehicleType.SEDAN) -> RideRequest:
    return RideRequest(rider_id=1, pickup=PICKUP, drop=DROP, vehicle_type=vehicle_type)


def _candidate(driver_id, lat, lng, rating=4.5, vehicle_type=VehicleType.SEDAN):
    return DriverSnapshot(driver_id, vehicle_type, Location(lat, lng), rating)


class TestHaversine:
    def test_same_point_is_zero(self):
        assert haversine_km(19.0, 72.0, 19.0, 72.0) == 0.0

    def test_known_distance(self):
        # Mumbai airport → Andheri ~3.6 km (approx)
        d = haversine_km(19.0896, 72.8656, 19.1176, 72.8490)
        assert 3.0 < d < 5.0

    def test_symmetric(self):
        d1 = haversine_km(19.0, 72.0, 20.0, 73.0)
        d2 = haversine_km(20.0, 73.0, 19.0, 72.0)
        assert abs(d1 - d2) < 1e-6


class TestEuclidean:
    def test_same_point_is_zero(self):
        assert PICKUP.distance_to(PICKUP) == 0.0

    def test_pythagorean(self):
        assert euclidean(0.0, 0.0, 3.0, 4.0) == pytest.approx(5.0)

    def test_symmetric_and_non_negative(self):
        assert PICKUP.distance_to(DROP) == DROP.distance_to(PICKUP)
        assert PICKUP.distance_to(DROP) == pytest.approx(math.hypot(0.01, 0.01))

    def test_metric_is_pluggable(self):
        d = PICKUP.distance_to(DROP, metric=haversine_km)
        assert 1.0 < d < 2.0

    def test_metric_from_name(self):
        assert metric_from_name("haversine") is haversine_km
        with pytest.raises(ValueError, match="Unknown distance metric"):
            metric_from_name("manhattan")


class TestNearestDriverStrategy:
    def test_picks_closest_same_category(self):
        far = _candidate(1, 13.50, 77.90)
        near = _candidate(2, 12.971, 77.591)
        assert NearestDriverStrategy().choose_driver(_request(), [far, near]) is near

    def test_never_returns_other_category(self):
        suv_on_pickup = _candidate(1, 12.97, 77.59, vehicle_type=VehicleType.SUV)
        far_sedan = _candidate(2, 13.50, 77.90)
        chosen = NearestDriverStrategy().choose_driver(
            _request(), [suv_on_pickup, far_sedan]
        )
        assert chosen is far_sedan

    def test_no_matching_category_returns_none(self):
        autos = [_candidate(1, 12.97, 77.59, vehicle_type=VehicleType.AUTO)]
        assert NearestDriverStrategy().choose_driver(_request(), autos) is None

    def test_empty_candidates(self):
        assert NearestDriverStrategy().choose_driver(_request(), []) is None

    def test_tie_resolves_to_first_listed(self):
        first = _candidate(1, 12.98, 77.59)
        second = _candidate(2, 12.98, 77.59)
        strategy = NearestDriverStrategy()
        assert strategy.choose_driver(_request(), [first, second]) is first
        assert strategy.choose_driver(_request(), [second, first]) is second

    def test_does_not_mutate_candidates(self):
        candidates = [_candidate(1, 12.99, 77.59), _candidate(2, 12.97, 77.59)]
        before = list(candidates)
        NearestDriverStrategy().choose_driver(_request(), candidates)
        assert candidates == before

    def test_deterministic(self):
        candidates = [_candidate(i, 12.97 + i / 100, 77.59) for i in range(5)]
        strategy = NearestDriverStrategy()
        picks = {strategy.choose_driver(_request(), candidates).id for _ in range(10)}
        assert picks == {0}


class TestBestRatedDriverStrategy:
    def test_picks_highest_rating(self):
        candidates = [
            _candidate(1, 12.97, 77.59, rating=4.2),
            _candidate(2, 13.50, 77.90, rating=4.9),
            _candidate(3, 12.97, 77.59, rating=4.5),
        ]
        assert BestRatedDriverStrategy().choose_driver(_request(), candidates).id == 2

    def test_ignores_better_rated_other_category(self):
        candidates = [
            _candidate(1, 12.97, 77.59, rating=5.0, vehicle_type=VehicleType.SUV),
            _candidate(2, 12.97, 77.59, rating=3.0),
        ]
        assert BestRatedDriverStrategy().choose_driver(_request(), candidates).id == 2

    def test_tie_resolves_to_first_listed(self):
        candidates = [
            _candidate(7, 13.0, 77.0, rating=4.8),
            _candidate(8, 12.97, 77.59, rating=4.8),
        ]
        assert BestRatedDriverStrategy().choose_driver(_request(), candidates).id == 7

    def test_zero_rating_is_still_a_match(self):
        candidates = [_candidate(1, 12.97, 77.59, rating=0.0)]
        assert BestRatedDriverStrategy().choose_driver(_request(), candidates).id == 1


class TestStrategyFromName:
    def test_known_names(self):
        assert isinstance(strategy_from_name("nearest"), NearestDriverStrategy)
        assert isinstance(strategy_from_name("best_rated"), BestRatedDriverStrategy)

    def test_nearest_uses_given_metric(self):
        assert strategy_from_name("nearest", haversine_km).metric is haversine_km

    def test_unknown_name(self):
        with pytest.raises(ValueError):
            strategy_from_name("random")
