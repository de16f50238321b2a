from __future__ import annotations


class SchedulerError(Exception):
    """Base class for every error raised by the simulation core."""


class InvalidProcessSpec(SchedulerError, ValueError):
    def __init__(self, pid: str, reason: str):
        super().__init__(f"Invalid process {pid}: {reason}")
        self.pid = pid
        self.reason = reason


class CapacityExceeded(SchedulerError, ValueError):
    def __init__(self, count: int, limit: int):
        super().__init__(f"{count} processes exceed the configured maximum of {limit}")
        self.count = count
        self.limit = limit


class EmptyInputError(SchedulerError, ValueError):
    """Raised when a metric is requested over zero processes."""


class SimulationInvariantViolation(SchedulerError, RuntimeError):
    """
    A run reached a state that correct admission/readiness bookkeeping can
    never produce (double scheduling, a lost process, an illegal transition).
    The run is aborted instead of reporting numbers.
    """
