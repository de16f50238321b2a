import pytest

from sched_compare.algorithms import ArrivalFeed, _advance_idle, _finalize, schedule_fcfs
from sched_compare.errors import EmptyInputError, SimulationInvariantViolation
from sched_compare.metrics import mean_turnaround, summarize_process_metrics
from sched_compare.models import ProcessTable


def _finished(pairs_and_completions):
    table = ProcessTable.from_pairs([pair for pair, _ in pairs_and_completions])
    procs = table.working_copy()
    for p, (_, completion) in zip(procs, pairs_and_completions):
        p.completion_time = completion
    return procs


def test_mean_turnaround():
    procs = _finished([((0, 3), 3), ((1, 5), 8), ((2, 2), 10)])
    assert mean_turnaround(procs) == (3 + 7 + 8) / 3


def test_mean_turnaround_empty():
    with pytest.raises(EmptyInputError):
        mean_turnaround([])


def test_mean_turnaround_requires_completion():
    procs = ProcessTable.from_pairs([(0, 3)]).working_copy()
    with pytest.raises(SimulationInvariantViolation):
        mean_turnaround(procs)


def test_summary_and_system_metrics():
    # P1 0-10, P2 10-11, P3 11-12
    res = schedule_fcfs(ProcessTable.from_pairs([(0, 10), (1, 1), (2, 1)]))
    summary = summarize_process_metrics(res.processes)
    assert summary["avg_turnaround"] == 10.0
    assert summary["avg_waiting"] == (0 + 9 + 9) / 3
    assert summary["avg_response"] == summary["avg_waiting"]

    assert res.system.makespan == 12
    assert res.system.cpu_busy_time == 12
    assert res.system.cpu_utilization == 1.0
    assert res.system.throughput == 3 / 12
    assert res.system.starvation_count == 0


def test_summary_empty():
    with pytest.raises(EmptyInputError):
        summarize_process_metrics([])


def test_idle_advance_without_pending_arrival_is_a_violation():
    procs = ProcessTable.from_pairs([(0, 1)]).working_copy()
    feed = ArrivalFeed(procs)
    feed.admit_due(0)
    with pytest.raises(SimulationInvariantViolation):
        _advance_idle(feed, now=0, completed=0, total=1)


def test_arrival_feed_admits_once():
    procs = ProcessTable.from_pairs([(2, 1), (0, 1), (2, 1)]).working_copy()
    feed = ArrivalFeed(procs)
    assert [p.pid for p in feed.admit_due(0)] == ["P2"]
    assert feed.admit_due(1) == []
    assert feed.next_arrival() == 2
    assert [p.pid for p in feed.admit_due(5)] == ["P1", "P3"]
    assert feed.admit_due(5) == []
    assert feed.next_arrival() is None


def test_finalize_rejects_unfinished_processes():
    procs = ProcessTable.from_pairs([(0, 2), (1, 1)]).working_copy()
    procs[0].admit()
    procs[0].dispatch(0)
    procs[0].run_for(2)
    procs[0].finish(2)
    with pytest.raises(SimulationInvariantViolation, match="unfinished"):
        _finalize("FCFS", procs, [])
