"""
CPU Scheduling Tests

Covers FCFS, SJF, Priority and Round Robin traces, tie-break rules,
validation and the scheduling session.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from algorithms.scheduling import schedule, schedule_round_robin, schedule_sjf, total_execution_time
from models.process import ExecutionStep, Process, SchedulingAlgorithm
from models.schedule_state import ScheduleState
from utils.errors import ValidationError


def _trace(steps):
    return [(s.process_id, s.start_time, s.duration) for s in steps]


def _three_processes():
    return [
        Process("P1", 0, 5),
        Process("P2", 1, 3),
        Process("P3", 2, 8),
    ]


def test_fcfs_example():
    steps = schedule([Process("P0", 0, 5), Process("P1", 1, 3)], "fcfs")
    assert steps == [ExecutionStep("P0", 0, 5), ExecutionStep("P1", 5, 3)]


def test_fcfs_equal_arrivals_keep_input_order():
    processes = [Process("A", 2, 1), Process("B", 0, 2), Process("C", 2, 3)]
    assert _trace(schedule(processes, "fcfs")) == [("B", 0, 2), ("A", 2, 1), ("C", 3, 3)]


def test_fcfs_idle_gap_jumps_to_arrival():
    assert _trace(schedule([Process("A", 3, 2)], "fcfs")) == [("A", 3, 2)]


def test_sjf_example_is_non_preemptive():
    steps = schedule(_three_processes(), "sjf")
    assert _trace(steps) == [("P1", 0, 5), ("P2", 5, 3), ("P3", 8, 8)]
    assert total_execution_time(steps) == 16


def test_sjf_does_not_preempt_long_running_job():
    processes = [Process("A", 0, 10), Process("B", 1, 1)]
    assert _trace(schedule(processes, "sjf")) == [("A", 0, 10), ("B", 10, 1)]


def test_sjf_tie_break_is_list_order_not_arrival():
    # X and Z tie on burst at t=4; X is listed first even though Z arrived earlier
    processes = [Process("X", 2, 3), Process("Y", 0, 4), Process("Z", 1, 3)]
    assert _trace(schedule(processes, "sjf")) == [("Y", 0, 4), ("X", 4, 3), ("Z", 7, 3)]


def test_sjf_jumps_to_next_arrival_when_idle():
    processes = [Process("A", 5, 2), Process("B", 10, 1)]
    assert _trace(schedule(processes, "sjf")) == [("A", 5, 2), ("B", 10, 1)]


def test_priority_lower_value_runs_first():
    processes = [Process("A", 0, 3, 3), Process("B", 1, 2, 1), Process("C", 1, 1, 2)]
    assert _trace(schedule(processes, "priority")) == [("A", 0, 3), ("B", 3, 2), ("C", 5, 1)]


def test_priority_ties_and_negative_values():
    processes = [Process("A", 0, 1, 1), Process("B", 0, 1, -2), Process("C", 0, 1, 1)]
    assert _trace(schedule(processes, "priority")) == [("B", 0, 1), ("A", 1, 1), ("C", 2, 1)]


def test_round_robin_golden_trace():
    steps = schedule(_three_processes(), "rr", quantum=3)
    assert _trace(steps) == [
        ("P1", 0, 3),
        ("P2", 3, 3),
        ("P3", 6, 3),
        ("P1", 9, 2),
        ("P3", 11, 3),
        ("P3", 14, 2),
    ]
    assert total_execution_time(steps) == 16


def test_round_robin_new_arrivals_before_requeued_process():
    processes = [Process("A", 0, 4), Process("B", 2, 2)]
    assert _trace(schedule_round_robin(processes, 2)) == [("A", 0, 2), ("B", 2, 2), ("A", 4, 2)]


def test_round_robin_idle_cpu_and_late_start():
    processes = [Process("A", 0, 1), Process("B", 5, 2)]
    assert _trace(schedule(processes, "robin", quantum=3)) == [("A", 0, 1), ("B", 5, 2)]

    processes = [Process("A", 2, 2), Process("B", 2, 1)]
    assert _trace(schedule(processes, "rr", quantum=1)) == [("A", 2, 1), ("B", 3, 1), ("A", 4, 1)]


def test_round_robin_requires_positive_quantum():
    with pytest.raises(ValidationError):
        schedule(_three_processes(), "rr")
    with pytest.raises(ValidationError):
        schedule(_three_processes(), "rr", quantum=0)


@pytest.mark.parametrize("algorithm", ["fcfs", "sjf", "priority", "rr"])
def test_empty_process_list(algorithm):
    assert schedule([], algorithm, quantum=2) == []


@pytest.mark.parametrize("algorithm", list(SchedulingAlgorithm))
def test_schedule_is_deterministic(algorithm):
    processes = _three_processes() + [Process("P4", 2, 2, 1), Process("P5", 20, 4)]
    first = schedule(processes, algorithm, quantum=2)
    second = schedule(processes, algorithm, quantum=2)
    assert first == second
    assert sum(s.duration for s in first) == sum(p.burst_time for p in processes)


def test_schedule_rejects_bad_input():
    with pytest.raises(ValidationError):
        schedule(_three_processes(), "lottery")
    with pytest.raises(ValidationError):
        schedule([Process("A", 0, 1), Process("A", 1, 1)], "fcfs")
    with pytest.raises(ValidationError):
        Process("A", 0, 0)
    with pytest.raises(ValidationError):
        Process("A", -1, 3)
    with pytest.raises(ValidationError):
        Process("A", "soon", 3)


def test_algorithm_aliases():
    assert SchedulingAlgorithm.parse("Robin") == SchedulingAlgorithm.ROUND_ROBIN
    assert SchedulingAlgorithm.parse("round-robin") == SchedulingAlgorithm.ROUND_ROBIN
    assert SchedulingAlgorithm.parse("SJF") == SchedulingAlgorithm.SJF


def test_schedule_state_session():
    state = ScheduleState(algorithm="rr", quantum=3)
    assert state.add_process(0, 5).value.pid == "P0"
    assert state.add_process(1, 3).value.pid == "P1"
    assert not state.add_process(0, 0), "Zero burst must be rejected"
    assert len(state.processes) == 2

    result = state.run()
    assert result.success
    assert _trace(state.steps) == [("P0", 0, 3), ("P1", 3, 3), ("P0", 6, 2)]
    assert state.total_time == 8

    assert not state.set_quantum(-1)
    assert state.quantum == 3
    assert state.remove_process("P9").error_kind == "not_found"
    assert state.remove_process("P0").success
    assert state.next_pid() == "P2"


def test_algorithm_functions_reject_duplicate_ids():
    processes = [Process("A", 0, 4), Process("A", 1, 2)]
    with pytest.raises(ValidationError):
        schedule_round_robin(processes, 2)
    with pytest.raises(ValidationError):
        schedule_sjf(processes)
