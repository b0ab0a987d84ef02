"""
Dispatch Orchestrator
=====================

Root coordinator: owns the driver pool, the ongoing-ride registry, the
completed-ride archive, the active matching strategy, the surge setting and
the payment collaborator. One instance is constructed by the entry point
and passed to every caller; nothing here is a module-level singleton.

Concurrency safety
------------------
* **DriverPool lock** -- snapshot and withdraw are atomic individually;
  a withdraw that loses to a concurrent request raises ``RaceLostError``
  and matching is retried against a fresh snapshot, at most
  ``max_match_attempts`` times, before the ride is cancelled as no-match.
* **Per-ride KeyedLock** -- status updates, cancellations and completions
  of the same ride are serialised; different rides run in parallel.

Flow per request
----------------
1. Create the ride (id + distance) and record it in the rider's history.
2. Snapshot available drivers of the requested vehicle type.
3. Ask the active strategy for a driver; none -> CANCELLED.
4. Withdraw the driver, attach observers, assign, register as ongoing.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from src.config import Settings, settings as default_settings
from src.domain.distance import metric_from_name
from src.domain.entities import (
    Driver,
    Location,
    Ride,
    RideFactory,
    RideRequest,
    Rider,
)
from src.domain.enums import RideStatus, VehicleType
from src.domain.errors import DriverNotAvailableError, RaceLostError
from src.domain.matching import MatchingStrategy, strategy_from_name
from src.domain.notifications import (
    DriverNotificationService,
    RideObserver,
    RiderNotificationService,
)
from src.domain.pricing import PricingEngine
from src.infrastructure.driver_pool import DriverPool
from src.infrastructure.locks import KeyedLock
from src.infrastructure.payment import DummyPaymentProcessor, PaymentProcessor
from src.infrastructure.repositories import RideRepository, RiderRepository

logger = logging.getLogger(__name__)


class DispatchOrchestrator:
    def __init__(
        self,
        *,
        settings: Settings = default_settings,
        pool: Optional[DriverPool] = None,
        payment: Optional[PaymentProcessor] = None,
        strategy: Optional[MatchingStrategy] = None,
        observers: Sequence[RideObserver] = (),
    ):
        self._settings = settings
        metric = metric_from_name(settings.distance_metric)

        self._pool = pool if pool is not None else DriverPool()
        self._payment = payment if payment is not None else DummyPaymentProcessor()
        self._strategy = (
            strategy
            if strategy is not None
            else strategy_from_name(settings.matching_strategy, metric)
        )
        self._extra_observers = tuple(observers)

        self._rides = RideRepository()
        self._riders = RiderRepository()
        self._factory = RideFactory(metric)
        self._pricing = PricingEngine(settings.base_fare)
        self._locks = KeyedLock(settings.lock_timeout_seconds)

        self._surge_active = False
        self._surge_multiplier = 1.0

    # ── Configuration ─────────────────────────────────────────────────

    @property
    def pool(self) -> DriverPool:
        return self._pool

    @property
    def strategy(self) -> MatchingStrategy:
        return self._strategy

    def set_matching_strategy(self, strategy: MatchingStrategy) -> None:
        logger.info("Matching strategy switched to %r", strategy)
        self._strategy = strategy

    def activate_surge(self, multiplier: float) -> None:
        if multiplier < 1.0:
            raise ValueError(f"Surge multiplier must be >= 1, got {multiplier}")
        self._surge_active = True
        self._surge_multiplier = multiplier
        logger.info("Surge pricing activated (%.2fx)", multiplier)

    def deactivate_surge(self) -> None:
        self._surge_active = False
        self._surge_multiplier = 1.0
        logger.info("Surge pricing deactivated")

    @property
    def is_surge(self) -> bool:
        return self._surge_active

    @property
    def surge_multiplier(self) -> float:
        return self._surge_multiplier

    # ── Drivers ───────────────────────────────────────────────────────

    async def register_driver(self, driver: Driver) -> None:
        await self._pool.register(driver)

    async def deregister_driver(self, driver: Driver) -> None:
        await self._pool.deregister(driver.id)

    def available_drivers(self) -> list[Driver]:
        return self._pool.available_drivers()

    # ── Rides ─────────────────────────────────────────────────────────

    async def request_ride(
        self,
        rider: Rider,
        pickup: Location,
        drop: Location,
        vehicle_type: VehicleType,
    ) -> Ride:
        """Create a ride and match it, or return it CANCELLED on no match."""
        logger.info("Rider %s requests a %s ride", rider.name, vehicle_type.value)
        request = RideRequest(rider.id, pickup, drop, vehicle_type)
        ride = self._factory.create(request)
        self._riders.add(rider)
        rider.add_ride_to_history(ride.id)

        # later strategy swaps do not affect a request already in flight
        strategy = self._strategy
        attempts = self._settings.max_match_attempts
        for attempt in range(1, attempts + 1):
            try:
                if await self._try_match(ride, request, strategy):
                    return ride
                break
            except RaceLostError as exc:
                logger.info("%s (attempt %d/%d)", exc, attempt, attempts)

        logger.info("No available drivers for Ride %s. Cancelling ride.", ride.id)
        ride.update_status(RideStatus.CANCELLED)
        return ride

    async def _try_match(
        self, ride: Ride, request: RideRequest, strategy: MatchingStrategy
    ) -> bool:
        candidates = await self._pool.snapshot_available(request.vehicle_type)
        choice = strategy.choose_driver(request, candidates)
        if choice is None:
            return False

        try:
            driver = await self._pool.withdraw(choice.id)
        except DriverNotAvailableError:
            raise RaceLostError(ride.id, choice.id) from None

        ride.attach_observer(RiderNotificationService(self._riders.get_by_id))
        ride.attach_observer(DriverNotificationService(self._pool.get))
        for observer in self._extra_observers:
            ride.attach_observer(observer)
        ride.assign_driver(driver)
        self._rides.add_ongoing(ride)
        logger.info("Ride %s matched to driver %s", ride.id, driver.name)
        return True

    async def update_ride_status(self, ride_id: str, new_status: RideStatus) -> Ride:
        async with self._locks.hold(ride_id):
            ride = self._rides.get_ongoing(ride_id)
            if new_status is RideStatus.COMPLETED:
                await self._complete(ride)
            elif new_status is RideStatus.CANCELLED:
                await self._cancel(ride)
            else:
                ride.update_status(new_status)
            return ride

    async def cancel_ride(self, ride_id: str) -> Ride:
        return await self.update_ride_status(ride_id, RideStatus.CANCELLED)

    async def complete_ride(self, ride_id: str) -> Ride:
        async with self._locks.hold(ride_id):
            ride = self._rides.get_ongoing(ride_id)
            await self._complete(ride)
            return ride

    async def _cancel(self, ride: Ride) -> None:
        ride.update_status(RideStatus.CANCELLED)
        self._rides.discard(ride.id)
        await self._release_driver(ride)
        logger.info("Ride %s cancelled", ride.id)

    async def _complete(self, ride: Ride) -> None:
        rider = self._riders.get_by_id(ride.rider_id)
        fare = self._pricing.calculate_fare(
            ride,
            surge_multiplier=self._surge_multiplier if self._surge_active else None,
            discount_amount=(
                rider.discount_amount if rider and rider.has_discount else None
            ),
        )
        ride.complete(fare)
        try:
            ride.paid = await self._collect_payment(ride, fare)
        finally:
            # COMPLETED is committed; a cancelled caller still frees the driver
            self._rides.archive(ride.id)
            await self._release_driver(ride)
        logger.info("Ride %s completed and archived", ride.id)

    async def _collect_payment(self, ride: Ride, amount: float) -> bool:
        try:
            paid = await asyncio.wait_for(
                self._payment.process_payment(ride, amount),
                timeout=self._settings.payment_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error("Payment for Ride %s timed out", ride.id)
            return False
        except Exception:
            logger.exception("Payment for Ride %s raised", ride.id)
            return False

        if paid:
            logger.info("Payment of %.2f for Ride %s successful", amount, ride.id)
        else:
            logger.warning("Payment failed for Ride %s", ride.id)
        return bool(paid)

    async def _release_driver(self, ride: Ride) -> None:
        if ride.driver_id is None:
            return
        if await self._pool.release(ride.driver_id) is None:
            logger.warning(
                "Driver %s went offline during Ride %s; not returned to pool",
                ride.driver_id,
                ride.id,
            )

    # ── Queries ───────────────────────────────────────────────────────

    def get_ride(self, ride_id: str) -> Optional[Ride]:
        return self._rides.get(ride_id)

    def ongoing_rides(self) -> list[Ride]:
        return self._rides.ongoing()

    def completed_rides(self) -> list[Ride]:
        return self._rides.completed()

    def ride_history(self, rider: Rider) -> list[Ride]:
        """Rides of *rider* still held by the engine, oldest first."""
        rides = []
        for ride_id in rider.ride_history:
            ride = self._rides.get(ride_id)
            if ride is not None:
                rides.append(ride)
        return rides
