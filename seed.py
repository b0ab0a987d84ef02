"""
Seed data -- a small Bengaluru fleet and riders for the demo run.

Creates:
  - 4 drivers (2 sedans, 1 SUV, 1 auto) around MG Road
  - 2 riders
"""

from __future__ import annotations

from src.domain.entities import Driver, Location, Rider, Vehicle
from src.domain.enums import VehicleType

DRIVERS = [
    {"name": "Alice", "phone": "9999990001", "plate": "KA-01-1234", "type": VehicleType.SEDAN,
     "capacity": 4, "rate": 15.0, "lat": 12.9716, "lng": 77.5946, "rating": 4.8},
    {"name": "Bob", "phone": "9999990002", "plate": "KA-01-5678", "type": VehicleType.SEDAN,
     "capacity": 4, "rate": 15.0, "lat": 12.9750, "lng": 77.5900, "rating": 4.9},
    {"name": "Charlie", "phone": "9999990003", "plate": "KA-02-1122", "type": VehicleType.SUV,
     "capacity": 6, "rate": 20.0, "lat": 12.9700, "lng": 77.6000, "rating": 4.7},
    {"name": "Dave", "phone": "9999990004", "plate": "KA-02-3344", "type": VehicleType.AUTO,
     "capacity": 3, "rate": 10.0, "lat": 12.9720, "lng": 77.5950, "rating": 4.5},
]

RIDERS = [
    {"name": "Eve", "phone": "8888880001", "lat": 12.9725, "lng": 77.5930},
    {"name": "Frank", "phone": "8888880002", "lat": 12.9740, "lng": 77.5960},
]


def build_drivers() -> list[Driver]:
    return [
        Driver(
            name=d["name"],
            phone=d["phone"],
            vehicle=Vehicle(d["plate"], d["type"], d["capacity"], d["rate"]),
            location=Location(d["lat"], d["lng"]),
            rating=d["rating"],
        )
        for d in DRIVERS
    ]


def build_riders() -> list[Rider]:
    return [
        Rider(name=r["name"], phone=r["phone"], location=Location(r["lat"], r["lng"]))
        for r in RIDERS
    ]
