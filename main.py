"""
Ride Dispatch Engine
====================
Entry point. Runs the demo dispatch session: python main.py
"""

import asyncio
import logging

from seed import build_drivers, build_riders
from src.config import settings
from src.domain.entities import Location
from src.domain.enums import RideStatus, VehicleType
from src.domain.matching import BestRatedDriverStrategy
from src.logging_setup import setup_logging
from src.services.orchestrator import DispatchOrchestrator

logger = logging.getLogger("dispatch.demo")


async def run_demo(dispatch: DispatchOrchestrator) -> None:
    for driver in build_drivers():
        await dispatch.register_driver(driver)

    eve, frank = build_riders()

    ride1 = await dispatch.request_ride(
        eve, Location(12.9725, 77.5930), Location(12.9850, 77.5950), VehicleType.SEDAN
    )
    await dispatch.update_ride_status(ride1.id, RideStatus.EN_ROUTE_TO_PICKUP)
    await dispatch.update_ride_status(ride1.id, RideStatus.IN_PROGRESS)

    dispatch.activate_surge(1.5)
    await dispatch.complete_ride(ride1.id)

    dispatch.set_matching_strategy(BestRatedDriverStrategy())

    ride2 = await dispatch.request_ride(
        frank, Location(12.9740, 77.5960), Location(12.9800, 77.6000), VehicleType.SUV
    )
    await dispatch.update_ride_status(ride2.id, RideStatus.EN_ROUTE_TO_PICKUP)
    await dispatch.update_ride_status(ride2.id, RideStatus.IN_PROGRESS)
    await dispatch.complete_ride(ride2.id)

    for driver in dispatch.available_drivers():
        logger.info("Available: %s", driver)


def main() -> None:
    setup_logging(settings.log_level, settings.log_json)
    asyncio.run(run_demo(DispatchOrchestrator(settings=settings)))


if __name__ == "__main__":
    main()
