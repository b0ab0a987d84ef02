"""
Repository Pattern -- in-memory registries owned by the orchestrator.

``RideRepository`` keeps the ongoing-ride registry (ride id -> Ride) and
the archive of completed rides. ``RiderRepository`` resolves the rider ids
that rides carry. Neither survives a restart.

Callers serialise mutations of one ride id through ``KeyedLock``; the
repositories themselves never await, so each call is atomic on the event
loop.
"""

from __future__ import annotations

from typing import Optional

from src.domain.entities import Ride, Rider
from src.domain.errors import RideNotFoundError


class RideRepository:
    def __init__(self) -> None:
        self._ongoing: dict[str, Ride] = {}
        self._completed: dict[str, Ride] = {}

    def add_ongoing(self, ride: Ride) -> None:
        if ride.id in self._ongoing or ride.id in self._completed:
            # ids come from RideFactory; a collision means two factories
            raise RuntimeError(f"Ride id collision: {ride.id}")
        self._ongoing[ride.id] = ride

    def get_ongoing(self, ride_id: str) -> Ride:
        ride = self._ongoing.get(ride_id)
        if ride is None:
            raise RideNotFoundError(ride_id)
        return ride

    def discard(self, ride_id: str) -> Ride:
        ride = self._ongoing.pop(ride_id, None)
        if ride is None:
            raise RideNotFoundError(ride_id)
        return ride

    def archive(self, ride_id: str) -> Ride:
        """Move a ride from the ongoing registry to the completed archive."""
        ride = self.discard(ride_id)
        self._completed[ride.id] = ride
        return ride

    def get(self, ride_id: str) -> Optional[Ride]:
        ride = self._ongoing.get(ride_id)
        if ride is None:
            ride = self._completed.get(ride_id)
        return ride

    def ongoing(self) -> list[Ride]:
        return list(self._ongoing.values())

    def completed(self) -> list[Ride]:
        return list(self._completed.values())

    def count_ongoing(self) -> int:
        return len(self._ongoing)


class RiderRepository:
    def __init__(self) -> None:
        self._riders: dict[int, Rider] = {}

    def add(self, rider: Rider) -> None:
        self._riders.setdefault(rider.id, rider)

    def get_by_id(self, rider_id: int) -> Optional[Rider]:
        return self._riders.get(rider_id)
