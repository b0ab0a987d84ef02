"""
Domain entities with business logic.

Patterns used
-------------
- **State Pattern** on ``Ride``: enforces valid lifecycle transitions
  (REQUESTED -> DRIVER_ASSIGNED -> EN_ROUTE_TO_PICKUP -> IN_PROGRESS ->
  COMPLETED, with CANCELLED reachable from every non-terminal state).
- **Observer Pattern** on ``Ride``: every committed status change is pushed
  to the attached ``RideObserver``s in attachment order.
- **Factory** ``RideFactory``: the only place ride ids are allocated and
  ride distance is computed.

Rides refer to riders and drivers by identifier only; the owning
registries (``DriverPool``, the orchestrator's rider directory) resolve
them.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from .distance import DistanceMetric, euclidean
from .enums import (
    RIDE_TRANSITIONS,
    TERMINAL_STATUSES,
    DriverStatus,
    RideStatus,
    VehicleType,
)
from .errors import DriverAlreadyAssignedError, InvalidTransitionError

if TYPE_CHECKING:
    from .notifications import RideObserver

logger = logging.getLogger(__name__)

MAX_RATING = 5.0

# Riders and drivers share one identifier space.
_user_ids = itertools.count(1)


def _next_user_id() -> int:
    return next(_user_ids)


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float

    def distance_to(
        self, other: Location, metric: DistanceMetric = euclidean
    ) -> float:
        return metric(
            self.latitude, self.longitude, other.latitude, other.longitude
        )


@dataclass(frozen=True)
class Vehicle:
    plate_number: str
    vehicle_type: VehicleType
    capacity: int
    fare_per_unit: float

    def __post_init__(self) -> None:
        if self.capacity <= 0:
            raise ValueError(f"Vehicle capacity must be positive, got {self.capacity}")
        if self.fare_per_unit <= 0:
            raise ValueError(
                f"Vehicle fare rate must be positive, got {self.fare_per_unit}"
            )


@dataclass(frozen=True)
class DriverSnapshot:
    """Point-in-time view of an available driver, used for matching."""

    id: int
    vehicle_type: VehicleType
    location: Location
    rating: float


@dataclass(frozen=True)
class RideRequest:
    rider_id: int
    pickup: Location
    drop: Location
    vehicle_type: VehicleType


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class Driver:
    name: str
    phone: str
    vehicle: Vehicle
    location: Location
    rating: float = MAX_RATING
    status: DriverStatus = DriverStatus.OFFLINE
    id: int = field(default_factory=_next_user_id)

    def __post_init__(self) -> None:
        self.set_rating(self.rating)

    @property
    def vehicle_type(self) -> VehicleType:
        return self.vehicle.vehicle_type

    def set_rating(self, rating: float) -> None:
        if not 0.0 <= rating <= MAX_RATING:
            raise ValueError(f"Rating must be within [0, {MAX_RATING}], got {rating}")
        self.rating = rating

    def snapshot(self) -> DriverSnapshot:
        return DriverSnapshot(
            id=self.id,
            vehicle_type=self.vehicle_type,
            location=self.location,
            rating=self.rating,
        )

    def __str__(self) -> str:
        return (
            f"Driver{{name='{self.name}', vehicle={self.vehicle_type.value}, "
            f"loc=({self.location.latitude}, {self.location.longitude}), "
            f"rating={self.rating}}}"
        )


@dataclass
class Rider:
    name: str
    phone: str
    location: Location
    discount_amount: float = 0.0
    ride_history: list[str] = field(default_factory=list)
    id: int = field(default_factory=_next_user_id)

    @property
    def has_discount(self) -> bool:
        return self.discount_amount > 0.0

    def add_ride_to_history(self, ride_id: str) -> None:
        self.ride_history.append(ride_id)


class Ride:
    """A single trip and its lifecycle.

    Identity, endpoints, requested vehicle type and distance are fixed at
    creation. ``status`` and ``fare`` only change through the transition
    methods; the driver is assigned at most once.
    """

    def __init__(
        self,
        ride_id: str,
        rider_id: int,
        pickup: Location,
        drop: Location,
        vehicle_type: VehicleType,
        distance: float,
    ):
        self._id = ride_id
        self._rider_id = rider_id
        self._pickup = pickup
        self._drop = drop
        self._vehicle_type = vehicle_type
        self._distance = distance
        self._status = RideStatus.REQUESTED
        self._driver_id: Optional[int] = None
        self._fare_per_unit: Optional[float] = None
        self._fare: Optional[float] = None
        self.paid = False
        self._observers: list[RideObserver] = []

    # ── read-only facts ───────────────────────────────────────────────

    @property
    def id(self) -> str:
        return self._id

    @property
    def rider_id(self) -> int:
        return self._rider_id

    @property
    def pickup(self) -> Location:
        return self._pickup

    @property
    def drop(self) -> Location:
        return self._drop

    @property
    def vehicle_type(self) -> VehicleType:
        return self._vehicle_type

    @property
    def distance(self) -> float:
        return self._distance

    @property
    def status(self) -> RideStatus:
        return self._status

    @property
    def driver_id(self) -> Optional[int]:
        return self._driver_id

    @property
    def fare_per_unit(self) -> Optional[float]:
        """Rate of the assigned driver's vehicle, captured at assignment."""
        return self._fare_per_unit

    @property
    def fare(self) -> Optional[float]:
        return self._fare

    @property
    def is_terminal(self) -> bool:
        return self._status in TERMINAL_STATUSES

    @property
    def observers(self) -> tuple[RideObserver, ...]:
        return tuple(self._observers)

    # ── observers ─────────────────────────────────────────────────────

    def attach_observer(self, observer: RideObserver) -> None:
        self._observers.append(observer)

    def detach_observer(self, observer: RideObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    # ── transitions ───────────────────────────────────────────────────

    def can_transition_to(self, new_status: RideStatus) -> bool:
        return new_status in RIDE_TRANSITIONS.get(self._status, set())

    def assign_driver(self, driver: Driver) -> None:
        """Bind *driver* to this ride and move to DRIVER_ASSIGNED."""
        if self._driver_id is not None:
            raise DriverAlreadyAssignedError(
                f"Ride {self._id} already has driver {self._driver_id}"
            )
        self._check_transition(RideStatus.DRIVER_ASSIGNED)
        self._driver_id = driver.id
        self._fare_per_unit = driver.vehicle.fare_per_unit
        self._commit(RideStatus.DRIVER_ASSIGNED)

    def update_status(self, new_status: RideStatus) -> None:
        """Move to *new_status* if the transition is legal, else raise."""
        self._check_transition(new_status)
        self._commit(new_status)

    def complete(self, fare: float) -> None:
        """Move to COMPLETED and record the fare in one step."""
        self._check_transition(RideStatus.COMPLETED)
        self._fare = fare
        self._commit(RideStatus.COMPLETED)

    def _check_transition(self, new_status: RideStatus) -> None:
        if not self.can_transition_to(new_status):
            raise InvalidTransitionError(
                f"Ride {self._id}: cannot transition from "
                f"{self._status.value} to {new_status.value}"
            )

    def _commit(self, new_status: RideStatus) -> None:
        self._status = new_status
        logger.debug("Ride %s -> %s", self._id, new_status.value)
        for observer in list(self._observers):
            try:
                observer.on_ride_status_changed(self, new_status)
            except Exception:
                logger.exception(
                    "Observer %r failed on ride %s (%s)",
                    observer,
                    self._id,
                    new_status.value,
                )

    def __repr__(self) -> str:
        return (
            f"Ride(id={self._id!r}, status={self._status.value}, "
            f"driver_id={self._driver_id}, fare={self._fare})"
        )


class RideFactory:
    """Creates rides with monotonically increasing identifiers."""

    def __init__(self, metric: DistanceMetric = euclidean):
        self._ids = itertools.count(1)
        self._metric = metric

    def create(self, request: RideRequest) -> Ride:
        return Ride(
            ride_id=str(next(self._ids)),
            rider_id=request.rider_id,
            pickup=request.pickup,
            drop=request.drop,
            vehicle_type=request.vehicle_type,
            distance=request.pickup.distance_to(request.drop, self._metric),
        )
