"""Unit tests for ride status notification fan-out (Observer Pattern)."""

import logging

import pytest

from src.domain.entities import Driver, Location, Ride, Rider, Vehicle
from src.domain.enums import RideStatus, VehicleType
from src.domain.errors import InvalidTransitionError
from src.domain.notifications import (
    DriverNotificationService,
    RideObserver,
    RiderNotificationService,
)


class Recorder(RideObserver):
    def __init__(self, name, log):
        self.name = name
        self.log = log

    def on_ride_status_changed(self, ride, new_status):
        self.log.append((self.name, new_status))


class Exploding(RideObserver):
    def on_ride_status_changed(self, ride, new_status):
        raise RuntimeError("SMS gateway down")


def _setup():
    rider = Rider("Eve", "888", Location(12.97, 77.59))
    driver = Driver("Alice", "999", Vehicle("KA-1", VehicleType.SEDAN, 4, 15.0), Location(12.97, 77.59))
    ride = Ride("7", rider.id, Location(12.97, 77.59), Location(12.98, 77.60), VehicleType.SEDAN, 0.01)
    riders = {rider.id: rider}
    drivers = {driver.id: driver}
    return ride, driver, riders.get, drivers.get


class TestFanOut:
    def test_observers_called_in_attachment_order(self):
        ride, driver, _, _ = _setup()
        log = []
        ride.attach_observer(Recorder("a", log))
        ride.attach_observer(Recorder("b", log))
        ride.assign_driver(driver)
        assert log == [
            ("a", RideStatus.DRIVER_ASSIGNED),
            ("b", RideStatus.DRIVER_ASSIGNED),
        ]

    def test_failing_observer_is_isolated(self, caplog):
        ride, _, _, _ = _setup()
        log = []
        ride.attach_observer(Exploding())
        ride.attach_observer(Recorder("after", log))
        with caplog.at_level(logging.ERROR):
            ride.update_status(RideStatus.CANCELLED)
        assert ride.status == RideStatus.CANCELLED
        assert log == [("after", RideStatus.CANCELLED)]
        assert "failed on ride 7" in caplog.text

    def test_detach(self):
        ride, _, _, _ = _setup()
        log = []
        observer = Recorder("a", log)
        ride.attach_observer(observer)
        ride.detach_observer(observer)
        ride.detach_observer(observer)  # absent: no-op
        ride.update_status(RideStatus.CANCELLED)
        assert log == []
        assert ride.observers == ()

    def test_rejected_transition_notifies_nobody(self):
        ride, _, _, _ = _setup()
        log = []
        ride.attach_observer(Recorder("a", log))
        with pytest.raises(InvalidTransitionError):
            ride.update_status(RideStatus.IN_PROGRESS)
        assert log == []


class TestRiderNotificationService:
    def test_message(self):
        ride, _, lookup_rider, _ = _setup()
        messages = []
        ride.attach_observer(RiderNotificationService(lookup_rider, sink=messages.append))
        ride.update_status(RideStatus.CANCELLED)
        assert messages == ["[Notification to Rider Eve]: Ride 7 is now CANCELLED"]

    def test_completion_message_carries_fare(self):
        ride, driver, lookup_rider, _ = _setup()
        ride.assign_driver(driver)
        ride.update_status(RideStatus.EN_ROUTE_TO_PICKUP)
        ride.update_status(RideStatus.IN_PROGRESS)
        messages = []
        ride.attach_observer(RiderNotificationService(lookup_rider, sink=messages.append))
        ride.complete(250.0)
        assert messages == [
            "[Notification to Rider Eve]: Ride 7 is now COMPLETED (fare 250.00)"
        ]

    def test_defaults_to_logger(self, caplog):
        ride, _, lookup_rider, _ = _setup()
        ride.attach_observer(RiderNotificationService(lookup_rider))
        with caplog.at_level(logging.INFO, logger="src.domain.notifications"):
            ride.update_status(RideStatus.CANCELLED)
        assert "[Notification to Rider Eve]" in caplog.text


class TestDriverNotificationService:
    def test_no_op_without_driver(self):
        ride, _, _, lookup_driver = _setup()
        messages = []
        ride.attach_observer(DriverNotificationService(lookup_driver, sink=messages.append))
        ride.update_status(RideStatus.CANCELLED)
        assert messages == []

    def test_message_after_assignment(self):
        ride, driver, _, lookup_driver = _setup()
        messages = []
        ride.attach_observer(DriverNotificationService(lookup_driver, sink=messages.append))
        ride.assign_driver(driver)
        ride.update_status(RideStatus.EN_ROUTE_TO_PICKUP)
        assert messages == [
            "[Notification to Driver Alice]: Ride 7 is now DRIVER_ASSIGNED",
            "[Notification to Driver Alice]: Ride 7 is now EN_ROUTE_TO_PICKUP",
        ]
