"""
CPU Scheduling Algorithms for the OS Concepts Simulator.

Implements FCFS, non-preemptive SJF, non-preemptive Priority and Round Robin
as pure functions from a process list to an ordered list of execution steps.
"""

from collections import deque
from typing import Callable, Deque, Dict, List, Optional, Sequence

from models.process import ExecutionStep, Process, SchedulingAlgorithm
from utils.errors import ValidationError
from utils.validation import validate_int


def schedule(
    processes: Sequence[Process],
    algorithm,
    quantum: Optional[int] = None
) -> List[ExecutionStep]:
    """
    Compute the execution schedule for a set of processes.

    Args:
        processes: Processes to schedule (input order is the tie-break)
        algorithm: SchedulingAlgorithm or its name ("fcfs", "sjf", "priority", "rr")
        quantum: Time slice, required for Round Robin

    Returns:
        Ordered list of ExecutionStep

    Raises:
        ValidationError: On unknown algorithm, duplicate ids or bad quantum
    """
    algorithm = SchedulingAlgorithm.parse(algorithm)
    processes = list(processes)
    _check_unique_ids(processes)

    if algorithm == SchedulingAlgorithm.FCFS:
        return schedule_fcfs(processes)
    elif algorithm == SchedulingAlgorithm.SJF:
        return schedule_sjf(processes)
    elif algorithm == SchedulingAlgorithm.PRIORITY:
        return schedule_priority(processes)
    else:
        if quantum is None:
            raise ValidationError("Round Robin requires a time quantum")
        return schedule_round_robin(processes, quantum)


def schedule_fcfs(processes: Sequence[Process]) -> List[ExecutionStep]:
    """
    First-Come First-Served.

    Processes run to completion in arrival order; sorted() is stable so equal
    arrival times keep their input order.
    """
    steps = []
    current_time = 0

    for process in sorted(processes, key=lambda p: p.arrival_time):
        if current_time < process.arrival_time:
            current_time = process.arrival_time
        steps.append(ExecutionStep(process.pid, current_time, process.burst_time))
        current_time += process.burst_time

    return steps


def schedule_sjf(processes: Sequence[Process]) -> List[ExecutionStep]:
    """Shortest Job First (non-preemptive)."""
    return _schedule_by_metric(processes, lambda p: p.burst_time)


def schedule_priority(processes: Sequence[Process]) -> List[ExecutionStep]:
    """Priority scheduling (non-preemptive, lower value = more urgent)."""
    return _schedule_by_metric(processes, lambda p: p.priority)


def _schedule_by_metric(
    processes: Sequence[Process],
    metric: Callable[[Process], int]
) -> List[ExecutionStep]:
    """
    Non-preemptive selection loop shared by SJF and Priority.

    At each decision point pick the arrived process with the smallest metric.
    A later candidate only replaces the current choice when strictly smaller,
    so the first one encountered in list order wins ties. Selection happens
    only when the CPU becomes free; a process never gets preempted mid-burst.
    """
    _check_unique_ids(processes)
    steps = []
    current_time = 0
    remaining = list(processes)

    while remaining:
        available = [p for p in remaining if p.arrival_time <= current_time]

        if not available:
            # Idle CPU: jump to the next arrival
            current_time = min(p.arrival_time for p in remaining)
            continue

        selected = available[0]
        for candidate in available[1:]:
            if metric(candidate) < metric(selected):
                selected = candidate

        steps.append(ExecutionStep(selected.pid, current_time, selected.burst_time))
        current_time += selected.burst_time
        remaining = [p for p in remaining if p.pid != selected.pid]

    return steps


def schedule_round_robin(processes: Sequence[Process], quantum: int) -> List[ExecutionStep]:
    """
    Round Robin with a fixed time quantum.

    Queue ordering rule: after a slice, processes that arrived during the slice
    are enqueued (input order) before the preempted process is requeued.

    Args:
        processes: Processes to schedule
        quantum: Time slice (> 0)

    Returns:
        Ordered list of ExecutionStep
    """
    quantum = validate_int(quantum, "quantum", minimum=1)
    _check_unique_ids(processes)

    steps = []
    current_time = 0
    remaining_time: Dict[str, int] = {p.pid: p.burst_time for p in processes}

    ready_queue: Deque[Process] = deque(p for p in processes if p.arrival_time == 0)

    while any(t > 0 for t in remaining_time.values()):
        if not ready_queue:
            next_arrival = min(
                p.arrival_time for p in processes
                if remaining_time[p.pid] > 0 and p.arrival_time > current_time
            )
            ready_queue.extend(
                p for p in processes
                if remaining_time[p.pid] > 0 and p.arrival_time == next_arrival
            )
            current_time = next_arrival
            continue

        current = ready_queue.popleft()
        executed = min(quantum, remaining_time[current.pid])

        steps.append(ExecutionStep(current.pid, current_time, executed))
        remaining_time[current.pid] -= executed
        current_time += executed

        # New arrivals during this slice go ahead of the requeued process
        ready_queue.extend(
            p for p in processes
            if remaining_time[p.pid] > 0
            and current_time - executed < p.arrival_time <= current_time
            and p.pid != current.pid
        )

        if remaining_time[current.pid] > 0:
            ready_queue.append(current)

    return steps


def total_execution_time(steps: Sequence[ExecutionStep]) -> int:
    """Latest end time over all steps (0 for an empty schedule)."""
    return max((step.end_time for step in steps), default=0)


def _check_unique_ids(processes: Sequence[Process]) -> None:
    seen = set()
    for process in processes:
        if process.pid in seen:
            raise ValidationError(f"Duplicate process id: {process.pid}")
        seen.add(process.pid)
