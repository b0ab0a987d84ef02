"""
Ride status notifications  (Observer Pattern)
=============================================

Each observer turns a committed status change into a human-readable
announcement and hands it to a *sink* (the module logger by default; a
push or SMS gateway in production). New channels implement
``on_ride_status_changed`` and are attached to a ride; neither ``Ride``
nor the orchestrator change.

Observers run synchronously on the caller's path and must not block.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

from .entities import Driver, Ride, Rider
from .enums import RideStatus

logger = logging.getLogger(__name__)

Sink = Callable[[str], None]


class RideObserver(ABC):
    @abstractmethod
    def on_ride_status_changed(self, ride: Ride, new_status: RideStatus) -> None: ...


class RiderNotificationService(RideObserver):
    def __init__(
        self,
        lookup_rider: Callable[[int], Optional[Rider]],
        sink: Sink = logger.info,
    ):
        self._lookup_rider = lookup_rider
        self._sink = sink

    def format_message(self, ride: Ride, new_status: RideStatus) -> str:
        rider = self._lookup_rider(ride.rider_id)
        name = rider.name if rider else f"#{ride.rider_id}"
        message = f"[Notification to Rider {name}]: Ride {ride.id} is now {new_status.value}"
        if new_status is RideStatus.COMPLETED and ride.fare is not None:
            message += f" (fare {ride.fare:.2f})"
        return message

    def on_ride_status_changed(self, ride: Ride, new_status: RideStatus) -> None:
        self._sink(self.format_message(ride, new_status))


class DriverNotificationService(RideObserver):
    def __init__(
        self,
        lookup_driver: Callable[[int], Optional[Driver]],
        sink: Sink = logger.info,
    ):
        self._lookup_driver = lookup_driver
        self._sink = sink

    def format_message(self, ride: Ride, new_status: RideStatus) -> Optional[str]:
        if ride.driver_id is None:
            return None
        driver = self._lookup_driver(ride.driver_id)
        name = driver.name if driver else f"#{ride.driver_id}"
        return f"[Notification to Driver {name}]: Ride {ride.id} is now {new_status.value}"

    def on_ride_status_changed(self, ride: Ride, new_status: RideStatus) -> None:
        message = self.format_message(ride, new_status)
        if message is not None:
            self._sink(message)
