from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .config import DEFAULT_MAX_PROCESSES, check_positive_int
from .errors import CapacityExceeded, InvalidProcessSpec, SimulationInvariantViolation


@dataclass(frozen=True)
class Process:
    pid: str
    arrival_time: int
    burst_time: int


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_process(process: Process) -> None:
    if not _is_int(process.arrival_time) or not _is_int(process.burst_time):
        raise InvalidProcessSpec(process.pid, "arrival and burst times must be integers")
    if process.arrival_time < 0:
        raise InvalidProcessSpec(process.pid, f"arrival time {process.arrival_time} is negative")
    if process.burst_time <= 0:
        raise InvalidProcessSpec(process.pid, f"burst time {process.burst_time} must be positive")


@dataclass(frozen=True)
class ProcessTable:
    """
    The validated, read-only input of one comparison.

    Algorithms never touch these objects; they call :meth:`working_copy` and
    mutate the copies instead.
    """

    processes: Tuple[Process, ...] = ()
    max_processes: int = DEFAULT_MAX_PROCESSES

    def __post_init__(self) -> None:
        # Accept any sequence but store a tuple.
        object.__setattr__(self, "processes", tuple(self.processes))
        check_positive_int("max_processes", self.max_processes)

        if len(self.processes) > self.max_processes:
            raise CapacityExceeded(len(self.processes), self.max_processes)

        seen = set()
        for p in self.processes:
            validate_process(p)
            if p.pid in seen:
                raise InvalidProcessSpec(p.pid, "duplicate pid")
            seen.add(p.pid)

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[Sequence[int]],
        max_processes: int = DEFAULT_MAX_PROCESSES,
    ) -> "ProcessTable":
        processes = [
            Process(pid=f"P{i}", arrival_time=arrival, burst_time=burst)
            for i, (arrival, burst) in enumerate(pairs, start=1)
        ]
        return cls(tuple(processes), max_processes=max_processes)

    @classmethod
    def from_processes(
        cls,
        processes: Iterable[Process],
        max_processes: int = DEFAULT_MAX_PROCESSES,
    ) -> "ProcessTable":
        return cls(tuple(processes), max_processes=max_processes)

    def __len__(self) -> int:
        return len(self.processes)

    def __iter__(self) -> Iterator[Process]:
        return iter(self.processes)

    def working_copy(self) -> List["SimProcess"]:
        return [
            SimProcess(index=i, pid=p.pid, arrival_time=p.arrival_time, burst_time=p.burst_time)
            for i, p in enumerate(self.processes)
        ]


class ProcessState(Enum):
    NOT_ARRIVED = "not_arrived"
    READY = "ready"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass
class SimProcess:
    """
    Mutable per-run state of one process.

    Every state change goes through a method so an illegal transition (a
    second admission, running a finished process, finishing twice) raises
    :class:`SimulationInvariantViolation` on the spot.
    """

    index: int
    pid: str
    arrival_time: int
    burst_time: int
    remaining_time: int = field(init=False)
    start_time: Optional[int] = None
    completion_time: Optional[int] = None
    state: ProcessState = ProcessState.NOT_ARRIVED

    def __post_init__(self) -> None:
        self.remaining_time = self.burst_time

    def _expect(self, *states: ProcessState) -> None:
        if self.state not in states:
            expected = " or ".join(s.value for s in states)
            raise SimulationInvariantViolation(
                f"{self.pid} is {self.state.value}, expected {expected}"
            )

    @property
    def completed(self) -> bool:
        return self.state is ProcessState.COMPLETED

    def admit(self) -> None:
        self._expect(ProcessState.NOT_ARRIVED)
        self.state = ProcessState.READY

    def dispatch(self, now: int) -> None:
        self._expect(ProcessState.READY)
        if now < self.arrival_time:
            raise SimulationInvariantViolation(
                f"{self.pid} dispatched at {now} before arriving at {self.arrival_time}"
            )
        if self.start_time is None:
            self.start_time = now
        self.state = ProcessState.RUNNING

    def preempt(self) -> None:
        self._expect(ProcessState.RUNNING)
        self.state = ProcessState.READY

    def run_for(self, units: int) -> None:
        self._expect(ProcessState.RUNNING)
        if units <= 0 or units > self.remaining_time:
            raise SimulationInvariantViolation(
                f"{self.pid} cannot run {units} units with {self.remaining_time} remaining"
            )
        self.remaining_time -= units

    def finish(self, now: int) -> None:
        self._expect(ProcessState.RUNNING)
        if self.remaining_time != 0:
            raise SimulationInvariantViolation(
                f"{self.pid} finished with {self.remaining_time} units remaining"
            )
        self.completion_time = now
        self.state = ProcessState.COMPLETED


@dataclass
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: str
    start_time: int
    end_time: int


@dataclass
class ProcessMetrics:
    pid: str
    arrival_time: int
    burst_time: int
    start_time: int
    completion_time: int
    waiting_time: int
    turnaround_time: int
    response_time: int


@dataclass
class SystemMetrics:
    cpu_busy_time: int
    makespan: int
    throughput: float
    cpu_utilization: float
    starvation_count: int = 0


@dataclass
class ScheduleResult:
    algorithm: str
    quantum: Optional[int]
    mean_turnaround: float = 0.0
    processes: List[ProcessMetrics] = field(default_factory=list)
    timeline: List[ScheduledSlice] = field(default_factory=list)
    system: Optional[SystemMetrics] = None
