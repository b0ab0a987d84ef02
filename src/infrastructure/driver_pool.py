"""
Concurrency-safe driver registry.

Concurrency safety
------------------
Every mutation runs under one ``asyncio.Lock``. Matching is a
snapshot-then-withdraw sequence: ``snapshot_available`` hands out an
immutable view, and ``withdraw`` re-checks availability under the lock, so
two requests that picked the same driver from their snapshots cannot both
win it; the loser gets ``DriverNotAvailableError`` and re-matches.

Invariant: a driver id is in ``_available`` iff that driver's status is
AVAILABLE.

A driver deregistered while ON_TRIP stays registered as OFFLINE until its
ride releases it, so it cannot be registered again and matched to a second
ride in the meantime.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from src.domain.entities import Driver, DriverSnapshot, Location
from src.domain.enums import DriverStatus, VehicleType
from src.domain.errors import (
    DriverNotAvailableError,
    DriverNotFoundError,
    DriverStateError,
    DuplicateDriverError,
)

logger = logging.getLogger(__name__)


class DriverPool:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._drivers: dict[int, Driver] = {}
        # dict preserves availability order for first-encountered tie-breaks
        self._available: dict[int, None] = {}
        # deregistered while on a trip; dropped on release
        self._retiring: set[int] = set()

    # ── lookups ───────────────────────────────────────────────────────

    def get(self, driver_id: int) -> Optional[Driver]:
        return self._drivers.get(driver_id)

    def __contains__(self, driver_id: object) -> bool:
        return driver_id in self._drivers

    def __len__(self) -> int:
        return len(self._drivers)

    def is_available(self, driver_id: int) -> bool:
        return driver_id in self._available

    def available_drivers(self) -> list[Driver]:
        return [self._drivers[driver_id] for driver_id in self._available]

    # ── mutations ─────────────────────────────────────────────────────

    async def register(self, driver: Driver) -> None:
        async with self._lock:
            if driver.id in self._drivers:
                raise DuplicateDriverError(driver.id)
            driver.status = DriverStatus.AVAILABLE
            self._drivers[driver.id] = driver
            self._available[driver.id] = None
        logger.info("Driver registered: %s", driver)

    async def deregister(self, driver_id: int) -> None:
        async with self._lock:
            driver = self._drivers.get(driver_id)
            if driver is None or driver_id in self._retiring:
                return
            if driver.status is DriverStatus.ON_TRIP:
                self._retiring.add(driver_id)
            else:
                del self._drivers[driver_id]
                self._available.pop(driver_id, None)
            driver.status = DriverStatus.OFFLINE
        logger.info("Driver deregistered: %s", driver)

    async def snapshot_available(
        self, vehicle_type: VehicleType
    ) -> tuple[DriverSnapshot, ...]:
        async with self._lock:
            return tuple(
                self._drivers[driver_id].snapshot()
                for driver_id in self._available
                if self._drivers[driver_id].vehicle_type == vehicle_type
            )

    async def withdraw(self, driver_id: int) -> Driver:
        """Take an available driver out of matching and mark it on-trip."""
        async with self._lock:
            if driver_id not in self._available:
                raise DriverNotAvailableError(driver_id)
            del self._available[driver_id]
            driver = self._drivers[driver_id]
            driver.status = DriverStatus.ON_TRIP
        logger.debug("Driver %s withdrawn from pool", driver_id)
        return driver

    async def release(self, driver_id: int) -> Optional[Driver]:
        """Return an on-trip driver to the available set.

        Returns ``None`` for a driver deregistered during its trip; it is
        dropped from the pool instead and stays OFFLINE.
        """
        async with self._lock:
            driver = self._drivers.get(driver_id)
            if driver is None:
                raise DriverNotFoundError(driver_id)
            if driver_id in self._retiring:
                self._retiring.discard(driver_id)
                del self._drivers[driver_id]
                logger.info("Driver %s left the pool after their trip", driver.name)
                return None
            if driver.status is not DriverStatus.ON_TRIP:
                raise DriverStateError(
                    f"Driver {driver_id} is {driver.status.value}, not ON_TRIP"
                )
            driver.status = DriverStatus.AVAILABLE
            self._available[driver_id] = None
        logger.info("Driver %s is now AVAILABLE", driver.name)
        return driver

    async def update_location(self, driver_id: int, location: Location) -> None:
        async with self._lock:
            driver = self._drivers.get(driver_id)
            if driver is None:
                raise DriverNotFoundError(driver_id)
            driver.location = location

    async def update_rating(self, driver_id: int, rating: float) -> None:
        async with self._lock:
            driver = self._drivers.get(driver_id)
            if driver is None:
                raise DriverNotFoundError(driver_id)
            driver.set_rating(rating)
