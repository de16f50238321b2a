import pytest

from sched_compare.errors import CapacityExceeded, InvalidProcessSpec, SimulationInvariantViolation
from sched_compare.models import Process, ProcessState, ProcessTable


def test_from_pairs_assigns_positional_pids():
    table = ProcessTable.from_pairs([(0, 3), (2, 1)])
    assert [p.pid for p in table] == ["P1", "P2"]
    assert len(table) == 2


@pytest.mark.parametrize(
    "pair",
    [(-1, 3), (0, 0), (0, -2), (0.5, 3), (0, "3"), (True, 3)],
)
def test_invalid_process_rejected(pair):
    with pytest.raises(InvalidProcessSpec):
        ProcessTable.from_pairs([(0, 1), pair])


def test_duplicate_pid_rejected():
    with pytest.raises(InvalidProcessSpec):
        ProcessTable.from_processes([Process("A", 0, 1), Process("A", 1, 1)])


def test_capacity_exceeded():
    with pytest.raises(CapacityExceeded) as info:
        ProcessTable.from_pairs([(0, 1)] * 4, max_processes=3)
    assert info.value.count == 4
    assert info.value.limit == 3


def test_working_copy_is_fresh_each_time():
    table = ProcessTable.from_pairs([(0, 3)])
    first = table.working_copy()
    first[0].admit()
    second = table.working_copy()
    assert second[0].state is ProcessState.NOT_ARRIVED
    assert second[0].remaining_time == 3
    assert second[0].completion_time is None


def test_process_lifecycle():
    p = ProcessTable.from_pairs([(1, 3)]).working_copy()[0]
    p.admit()
    p.dispatch(2)
    p.run_for(1)
    p.preempt()
    p.dispatch(4)
    p.run_for(2)
    p.finish(6)
    assert p.completed
    assert p.start_time == 2
    assert p.completion_time == 6
    assert p.remaining_time == 0


def test_double_admission_is_a_violation():
    p = ProcessTable.from_pairs([(0, 3)]).working_copy()[0]
    p.admit()
    with pytest.raises(SimulationInvariantViolation):
        p.admit()


def test_finished_process_cannot_run_again():
    p = ProcessTable.from_pairs([(0, 2)]).working_copy()[0]
    p.admit()
    p.dispatch(0)
    p.run_for(2)
    p.finish(2)
    with pytest.raises(SimulationInvariantViolation):
        p.dispatch(2)
    with pytest.raises(SimulationInvariantViolation):
        p.finish(3)


def test_cannot_overrun_or_finish_early():
    p = ProcessTable.from_pairs([(0, 2)]).working_copy()[0]
    p.admit()
    p.dispatch(0)
    with pytest.raises(SimulationInvariantViolation):
        p.run_for(3)
    p.run_for(1)
    with pytest.raises(SimulationInvariantViolation):
        p.finish(1)


def test_dispatch_before_arrival_is_a_violation():
    p = ProcessTable.from_pairs([(5, 2)]).working_copy()[0]
    p.admit()
    with pytest.raises(SimulationInvariantViolation):
        p.dispatch(3)


@pytest.mark.parametrize("limit", [0, -3])
def test_non_positive_capacity_rejected(limit):
    with pytest.raises(ValueError) as info:
        ProcessTable.from_pairs([], max_processes=limit)
    assert not isinstance(info.value, CapacityExceeded)
