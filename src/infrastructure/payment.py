"""
Payment collaborator boundary.

The orchestrator only needs ``process_payment(ride, amount) -> bool``.
A ``False`` result, an exception or a timeout all leave the ride
COMPLETED but unpaid; nothing is retried automatically.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from src.domain.entities import Ride

logger = logging.getLogger(__name__)


class PaymentProcessor(ABC):
    @abstractmethod
    async def process_payment(self, ride: Ride, amount: float) -> bool: ...


class DummyPaymentProcessor(PaymentProcessor):
    """Approves every charge; stands in for a real payment gateway."""

    async def process_payment(self, ride: Ride, amount: float) -> bool:
        logger.info("Processing payment of %.2f for Ride %s", amount, ride.id)
        return True
