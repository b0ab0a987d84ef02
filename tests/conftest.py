"""
Shared test fixtures.

Everything runs in memory on the test's event loop; the payment gateway is
replaced by ``AsyncMock`` so tests can script approvals and failures.
"""

from __future__ import annotations

from typing import Callable
from unittest.mock import AsyncMock

import pytest

from src.config import Settings
from src.domain.entities import Driver, Location, Rider, Vehicle
from src.domain.enums import VehicleType
from src.infrastructure.driver_pool import DriverPool
from src.services.orchestrator import DispatchOrchestrator

# Bengaluru MG Road area
PICKUP = Location(12.97, 77.59)
DROP = Location(12.98, 77.60)


@pytest.fixture
def make_driver() -> Callable[..., Driver]:
    def _make(
        name: str = "Alice",
        vehicle_type: VehicleType = VehicleType.SEDAN,
        location: Location = PICKUP,
        rating: float = 4.8,
        rate: float = 15.0,
    ) -> Driver:
        return Driver(
            name=name,
            phone="9999990001",
            vehicle=Vehicle(f"KA-{name}", vehicle_type, 4, rate),
            location=location,
            rating=rating,
        )

    return _make


@pytest.fixture
def rider() -> Rider:
    return Rider(name="Eve", phone="8888880001", location=PICKUP)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        max_match_attempts=3,
        lock_timeout_seconds=1.0,
        payment_timeout_seconds=1.0,
    )


@pytest.fixture
def payment() -> AsyncMock:
    gateway = AsyncMock()
    gateway.process_payment = AsyncMock(return_value=True)
    return gateway


@pytest.fixture
def pool() -> DriverPool:
    return DriverPool()


@pytest.fixture
def dispatch(test_settings, pool, payment) -> DispatchOrchestrator:
    return DispatchOrchestrator(settings=test_settings, pool=pool, payment=payment)
