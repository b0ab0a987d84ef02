"""
Fare Pipeline  (Strategy + Chain)
=================================

Formula
-------
Fare = max(0, (Base_Fare + Distance x Fare_Per_Unit) x Surge_Multiplier - Discount)

The base value is computed once from the ride facts, then an ordered list
of ``FareStage``s transforms it left to right in a single pass:

* ``SurgePricing``  -- multiplies by the active surge multiplier (>= 1).
* ``FlatDiscount``  -- subtracts the rider's discount, clamped at zero.

New stages (promotions, tolls, ...) subclass ``FareStage`` and are added
with ``FarePipeline.then`` / ``FarePipeline.first`` without touching the
existing ones.

Complexity: O(k) per fare, k = number of stages.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from .entities import Ride

BASE_FARE = 50.0


# ── Stage hierarchy ───────────────────────────────────────────────────


class FareStage(ABC):
    @abstractmethod
    def apply(self, fare: float, ride: Ride) -> float: ...


class SurgePricing(FareStage):
    def __init__(self, surge_multiplier: float = 1.0):
        if surge_multiplier < 1.0:
            raise ValueError(
                f"Surge multiplier must be >= 1, got {surge_multiplier}"
            )
        self.surge_multiplier = surge_multiplier

    def apply(self, fare: float, ride: Ride) -> float:
        return fare * self.surge_multiplier

    def __repr__(self) -> str:
        return f"SurgePricing({self.surge_multiplier})"


class FlatDiscount(FareStage):
    def __init__(self, discount_amount: float):
        if discount_amount < 0:
            raise ValueError(f"Discount must be >= 0, got {discount_amount}")
        self.discount_amount = discount_amount

    def apply(self, fare: float, ride: Ride) -> float:
        return max(0.0, fare - self.discount_amount)

    def __repr__(self) -> str:
        return f"FlatDiscount({self.discount_amount})"


# ── Pipeline ──────────────────────────────────────────────────────────


class FarePipeline:
    """Immutable ordered chain: base fare followed by transform stages."""

    def __init__(
        self, base_fare: float = BASE_FARE, stages: Iterable[FareStage] = ()
    ):
        if base_fare < 0:
            raise ValueError(f"Base fare must be >= 0, got {base_fare}")
        stages = tuple(stages)
        if len({id(stage) for stage in stages}) != len(stages):
            raise ValueError("A fare stage cannot appear twice in a pipeline")
        self.base_fare = base_fare
        self.stages = stages

    def then(self, stage: FareStage) -> FarePipeline:
        """Return a new pipeline with *stage* applied last."""
        return FarePipeline(self.base_fare, self.stages + (stage,))

    def first(self, stage: FareStage) -> FarePipeline:
        """Return a new pipeline with *stage* applied right after the base."""
        return FarePipeline(self.base_fare, (stage,) + self.stages)

    def base(self, ride: Ride) -> float:
        if ride.fare_per_unit is None:
            raise ValueError(f"Ride {ride.id} has no driver rate to price with")
        return self.base_fare + ride.distance * ride.fare_per_unit

    def calculate(self, ride: Ride) -> float:
        fare = self.base(ride)
        for stage in self.stages:
            fare = stage.apply(fare, ride)
        return fare

    def __repr__(self) -> str:
        return f"FarePipeline(base_fare={self.base_fare}, stages={list(self.stages)})"


# ── Engine facade ─────────────────────────────────────────────────────


class PricingEngine:
    """Builds the completion-time pipeline for the orchestrator."""

    def __init__(self, base_fare: float = BASE_FARE):
        self.base_fare = base_fare

    def pipeline_for(
        self,
        surge_multiplier: Optional[float] = None,
        discount_amount: Optional[float] = None,
    ) -> FarePipeline:
        """Base, then surge if active, then discount if the rider has one."""
        pipeline = FarePipeline(self.base_fare)
        if surge_multiplier is not None:
            pipeline = pipeline.then(SurgePricing(surge_multiplier))
        if discount_amount:
            pipeline = pipeline.then(FlatDiscount(discount_amount))
        return pipeline

    def calculate_fare(
        self,
        ride: Ride,
        surge_multiplier: Optional[float] = None,
        discount_amount: Optional[float] = None,
    ) -> float:
        return self.pipeline_for(surge_multiplier, discount_amount).calculate(ride)
