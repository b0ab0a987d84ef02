"""
Dispatch error taxonomy.

* **not-found**      -- unknown ride / driver identifier; report, never retry.
* **state-conflict** -- illegal transition, double assignment, driver in the
  wrong state; the caller decides whether to retry.
* **race-lost**      -- a competing request withdrew the chosen driver
  first; matching is retried against a fresh snapshot.
* **timeout**        -- a bounded wait on a contended resource expired.

Payment failures are not exceptions: they are recorded on the ride.
"""


class DispatchError(Exception):
    """Root of every error raised by the dispatch engine."""


# ── not-found ─────────────────────────────────────────────────────────


class NotFoundError(DispatchError):
    pass


class RideNotFoundError(NotFoundError):
    def __init__(self, ride_id: str):
        super().__init__(f"Ride {ride_id} not found or already completed")
        self.ride_id = ride_id


class DriverNotFoundError(NotFoundError):
    def __init__(self, driver_id: int):
        super().__init__(f"Driver {driver_id} is not registered")
        self.driver_id = driver_id


# ── state-conflict ────────────────────────────────────────────────────


class StateConflictError(DispatchError):
    pass


class InvalidTransitionError(StateConflictError):
    """Raised when a ride status change violates the state machine."""


class DriverAlreadyAssignedError(StateConflictError):
    pass


class DriverNotAvailableError(StateConflictError):
    def __init__(self, driver_id: int):
        super().__init__(f"Driver {driver_id} is not available")
        self.driver_id = driver_id


class DriverStateError(StateConflictError):
    pass


class DuplicateDriverError(StateConflictError):
    def __init__(self, driver_id: int):
        super().__init__(f"Driver {driver_id} is already registered")
        self.driver_id = driver_id


# ── race-lost / timeout ───────────────────────────────────────────────


class RaceLostError(DispatchError):
    """The chosen driver was withdrawn by a concurrent request."""

    def __init__(self, ride_id: str, driver_id: int):
        super().__init__(
            f"Ride {ride_id} lost driver {driver_id} to a concurrent request"
        )
        self.ride_id = ride_id
        self.driver_id = driver_id


class LockTimeoutError(DispatchError):
    pass
