from __future__ import annotations

from typing import Dict, List, Sequence

from .errors import EmptyInputError, SimulationInvariantViolation
from .models import ProcessMetrics, ScheduleResult, SimProcess, SystemMetrics


def mean_turnaround(processes: Sequence[SimProcess]) -> float:
    """
    Arithmetic mean of ``completion_time - arrival_time``.

    Every process must already carry a completion time. An empty sequence has
    no mean and raises :class:`EmptyInputError`.
    """
    if not processes:
        raise EmptyInputError("mean turnaround is undefined for zero processes")

    total = 0
    for p in processes:
        if p.completion_time is None:
            raise SimulationInvariantViolation(f"{p.pid} has no completion time")
        total += p.completion_time - p.arrival_time
    return total / len(processes)


def build_process_metrics(processes: Sequence[SimProcess]) -> List[ProcessMetrics]:
    """
    Per-process metrics, in input order, from a finished working copy.
    """
    metrics: List[ProcessMetrics] = []
    for p in sorted(processes, key=lambda x: x.index):
        turnaround_time = p.completion_time - p.arrival_time
        metrics.append(
            ProcessMetrics(
                pid=p.pid,
                arrival_time=p.arrival_time,
                burst_time=p.burst_time,
                start_time=p.start_time,
                completion_time=p.completion_time,
                # Total waiting = turnaround - burst, also for preemptive runs
                waiting_time=turnaround_time - p.burst_time,
                turnaround_time=turnaround_time,
                response_time=p.start_time - p.arrival_time,
            )
        )
    return metrics


def compute_system_metrics(result: ScheduleResult) -> SystemMetrics:
    """
    Compute throughput and CPU utilization given populated per-process metrics
    and timeline slices.
    """
    if not result.processes:
        raise EmptyInputError("system metrics are undefined for zero processes")

    first_arrival = min(p.arrival_time for p in result.processes)
    makespan = max(p.completion_time for p in result.processes)
    cpu_busy_time = sum(slice_.end_time - slice_.start_time for slice_ in result.timeline)

    throughput = len(result.processes) / makespan
    # Leading idle time before the first arrival is not held against the CPU.
    active_span = makespan - first_arrival
    cpu_utilization = cpu_busy_time / active_span

    # Starvation: waiting time above twice the average.
    avg_wait = sum(p.waiting_time for p in result.processes) / len(result.processes)
    starvation_count = sum(1 for p in result.processes if p.waiting_time > 2 * avg_wait)

    system = SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        makespan=makespan,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
        starvation_count=starvation_count,
    )
    result.system = system
    return system


def summarize_process_metrics(processes: List[ProcessMetrics]) -> Dict[str, float]:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    if not processes:
        raise EmptyInputError("cannot summarize zero processes")

    n = len(processes)
    return {
        "avg_waiting": sum(p.waiting_time for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time for p in processes) / n,
        "avg_response": sum(p.response_time for p in processes) / n,
    }
