from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Deque, Dict, Iterable, List, Optional, Union

from .config import DEFAULT_QUANTUM, SimulationConfig, check_positive_int
from .errors import CapacityExceeded, SimulationInvariantViolation
from .metrics import build_process_metrics, compute_system_metrics, mean_turnaround
from .models import Process, ProcessTable, ScheduleResult, ScheduledSlice, SimProcess
from .ordering import SortKey, sort_processes

logger = logging.getLogger(__name__)

Workload = Union[ProcessTable, Iterable[Process]]


class ArrivalFeed:
    """
    Hands out processes in arrival order, each exactly once.

    A cursor walks the arrival-sorted working copy, so a process that has been
    admitted to a ready structure can never be admitted again no matter how
    often the feed is polled.
    """

    def __init__(self, processes: List[SimProcess]):
        self._pending = sort_processes(processes, SortKey.ARRIVAL)
        self._cursor = 0

    def admit_due(self, now: int) -> List[SimProcess]:
        admitted = []
        while self._cursor < len(self._pending) and self._pending[self._cursor].arrival_time <= now:
            p = self._pending[self._cursor]
            p.admit()
            admitted.append(p)
            self._cursor += 1
        return admitted

    def next_arrival(self) -> Optional[int]:
        if self._cursor < len(self._pending):
            return self._pending[self._cursor].arrival_time
        return None


def _working_copy(processes: Workload) -> List[SimProcess]:
    if not isinstance(processes, ProcessTable):
        processes = ProcessTable.from_processes(processes)
    return processes.working_copy()


def _advance_idle(feed: ArrivalFeed, now: int, completed: int, total: int) -> int:
    """
    Jump the clock to the next arrival when nothing is ready.
    """
    nxt = feed.next_arrival()
    if nxt is None or nxt <= now:
        raise SimulationInvariantViolation(
            f"idle at t={now} with {total - completed} unfinished processes and no pending arrival"
        )
    logger.debug("CPU idle from t=%d to t=%d", now, nxt)
    return nxt


def _record(timeline: List[ScheduledSlice], pid: str, start: int, end: int) -> None:
    # Merge back-to-back slices of the same process.
    if timeline and timeline[-1].pid == pid and timeline[-1].end_time == start:
        timeline[-1].end_time = end
    else:
        timeline.append(ScheduledSlice(pid=pid, start_time=start, end_time=end))


def _run_to_completion(p: SimProcess, time: int, timeline: List[ScheduledSlice]) -> int:
    p.dispatch(time)
    end = time + p.remaining_time
    p.run_for(p.remaining_time)
    p.finish(end)
    _record(timeline, p.pid, time, end)
    logger.debug("t=%d: %s runs to completion at t=%d", time, p.pid, end)
    return end


def _finalize(
    algorithm: str,
    procs: List[SimProcess],
    timeline: List[ScheduledSlice],
    quantum: Optional[int] = None,
) -> ScheduleResult:
    unfinished = [p.pid for p in procs if not p.completed]
    if unfinished:
        raise SimulationInvariantViolation(f"{algorithm} left processes unfinished: {unfinished}")

    mean = mean_turnaround(procs)

    result = ScheduleResult(
        algorithm=algorithm,
        quantum=quantum,
        mean_turnaround=mean,
        processes=build_process_metrics(procs),
        timeline=timeline,
    )
    compute_system_metrics(result)
    logger.debug("%s finished %d processes, mean turnaround %.2f", algorithm, len(procs), mean)
    return result


def schedule_fcfs(processes: Workload, quantum: Optional[int] = None) -> ScheduleResult:
    """
    First-Come First-Serve (non-preemptive) scheduling.
    """
    procs = _working_copy(processes)
    timeline: List[ScheduledSlice] = []

    time = 0
    for p in sort_processes(procs, SortKey.ARRIVAL):
        if time < p.arrival_time:
            time = p.arrival_time
        p.admit()
        time = _run_to_completion(p, time, timeline)

    return _finalize("FCFS", procs, timeline)


def schedule_lcfs_np(processes: Workload, quantum: Optional[int] = None) -> ScheduleResult:
    """
    Last-Come First-Serve, non-preemptive.

    Arrivals are pushed on a stack in arrival order. Whenever the CPU frees up
    the top of the stack (the most recent arrival) runs to completion.
    """
    procs = _working_copy(processes)
    feed = ArrivalFeed(procs)
    stack: List[SimProcess] = []
    timeline: List[ScheduledSlice] = []

    time = 0
    completed = 0
    while completed < len(procs):
        stack.extend(feed.admit_due(time))

        if not stack:
            time = _advance_idle(feed, time, completed, len(procs))
            continue

        time = _run_to_completion(stack.pop(), time, timeline)
        completed += 1

    return _finalize("LCFS (NP)", procs, timeline)


def schedule_lcfs_p(processes: Workload, quantum: Optional[int] = None) -> ScheduleResult:
    """
    Last-Come First-Serve, preemptive.

    The top of the stack always holds the CPU. Every new arrival is pushed on
    top and preempts whatever was running; a preempted process resumes once
    everything above it has finished.
    """
    procs = _working_copy(processes)
    feed = ArrivalFeed(procs)
    stack: List[SimProcess] = []
    timeline: List[ScheduledSlice] = []
    running: Optional[SimProcess] = None

    time = 0
    completed = 0
    while completed < len(procs):
        stack.extend(feed.admit_due(time))

        if not stack:
            time = _advance_idle(feed, time, completed, len(procs))
            continue

        top = stack[-1]
        if top is not running:
            if running is not None:
                running.preempt()
                logger.debug("t=%d: %s preempts %s", time, top.pid, running.pid)
            top.dispatch(time)
            running = top

        # Nothing can change on the stack before the next arrival.
        nxt = feed.next_arrival()
        run_time = top.remaining_time if nxt is None else min(top.remaining_time, nxt - time)

        top.run_for(run_time)
        _record(timeline, top.pid, time, time + run_time)
        time += run_time

        if top.remaining_time == 0:
            stack.pop()
            top.finish(time)
            running = None
            completed += 1
            logger.debug("t=%d: %s completes", time, top.pid)

    return _finalize("LCFS (P)", procs, timeline)


def schedule_rr(processes: Workload, quantum: Optional[int] = None) -> ScheduleResult:
    """
    Round Robin scheduling with a fixed time quantum.

    Processes that arrive while a quantum is running join the queue before
    the preempted process is put back, so a process preempted at ``t`` never
    overtakes one that arrived at or before ``t``.
    """
    if quantum is None:
        quantum = DEFAULT_QUANTUM
    check_positive_int("Round Robin quantum", quantum)

    procs = _working_copy(processes)
    feed = ArrivalFeed(procs)
    ready: Deque[SimProcess] = deque()
    timeline: List[ScheduledSlice] = []

    time = 0
    completed = 0
    while completed < len(procs):
        ready.extend(feed.admit_due(time))

        if not ready:
            time = _advance_idle(feed, time, completed, len(procs))
            continue

        p = ready.popleft()

        if p.remaining_time <= quantum:
            time = _run_to_completion(p, time, timeline)
            completed += 1
            continue

        p.dispatch(time)
        p.run_for(quantum)
        _record(timeline, p.pid, time, time + quantum)
        time += quantum
        logger.debug("t=%d: %s preempted with %d remaining", time, p.pid, p.remaining_time)

        # Arrivals during the slice go first, then the preempted process.
        ready.extend(feed.admit_due(time))
        p.preempt()
        ready.append(p)

    return _finalize("RR", procs, timeline, quantum=quantum)


def schedule_sjf(processes: Workload, quantum: Optional[int] = None) -> ScheduleResult:
    """
    Shortest Job First (non-preemptive).

    At each decision point, among processes that have arrived and are not yet
    completed, choose the one with the least remaining time.
    """
    procs = _working_copy(processes)
    feed = ArrivalFeed(procs)
    ready: List[SimProcess] = []
    timeline: List[ScheduledSlice] = []

    time = 0
    completed = 0
    while completed < len(procs):
        ready.extend(feed.admit_due(time))

        if not ready:
            time = _advance_idle(feed, time, completed, len(procs))
            continue

        # Tie-breaker: earlier arrival, then input order.
        p = min(ready, key=lambda x: (x.remaining_time, x.arrival_time, x.index))
        ready.remove(p)

        time = _run_to_completion(p, time, timeline)
        completed += 1

    return _finalize("SJF", procs, timeline)


ALGORITHMS: Dict[str, Callable[..., ScheduleResult]] = {
    "fcfs": schedule_fcfs,
    "lcfs-np": schedule_lcfs_np,
    "lcfs-p": schedule_lcfs_p,
    "rr": schedule_rr,
    "sjf": schedule_sjf,
}

QUANTUM_ALGORITHMS = {"rr"}


def run_algorithm(name: str, processes: Workload, quantum: Optional[int] = None) -> ScheduleResult:
    """
    Dispatch to the requested algorithm. Quantum only matters for round-robin.
    """
    name = name.lower()
    if name not in ALGORITHMS:
        raise ValueError(f"Unknown algorithm '{name}' (choose from {', '.join(ALGORITHMS)})")

    if not isinstance(processes, ProcessTable):
        processes = ProcessTable.from_processes(processes)

    func = ALGORITHMS[name]
    logger.debug("Running %s on %d processes", name, len(processes))
    return func(processes, quantum=quantum if name in QUANTUM_ALGORITHMS else None)


def run_all(
    processes: Workload,
    config: Optional[SimulationConfig] = None,
    algorithms: Optional[Iterable[str]] = None,
) -> Dict[str, ScheduleResult]:
    """
    Run each algorithm on its own copy of ``processes``.

    Returns results keyed by algorithm display name, in the order requested.
    """
    config = config or SimulationConfig()
    if not isinstance(processes, ProcessTable):
        processes = ProcessTable.from_processes(processes, max_processes=config.max_processes)
    elif len(processes) > config.max_processes:
        raise CapacityExceeded(len(processes), config.max_processes)

    results: Dict[str, ScheduleResult] = {}
    for name in algorithms or ALGORITHMS:
        result = run_algorithm(name, processes, quantum=config.quantum)
        results[result.algorithm] = result
    return results


def mean_turnarounds(
    processes: Workload,
    config: Optional[SimulationConfig] = None,
    algorithms: Optional[Iterable[str]] = None,
) -> Dict[str, float]:
    """
    Mean turnaround time per algorithm name.
    """
    return {name: r.mean_turnaround for name, r in run_all(processes, config, algorithms).items()}
