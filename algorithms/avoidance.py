"""
Deadlock Avoidance Algorithm (Banker's safety check) for the OS Concepts Simulator.

Decides whether a resource-allocation state is safe and reports the
completion order found.
"""

from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np

from models.resource import ResourceAllocation
from utils.errors import ValidationError
from utils.validation import validate_vector


@dataclass(frozen=True)
class SafetyResult:
    """
    Verdict of a safety check.

    Attributes:
        safe: True if every process can run to completion
        sequence: Completion order of process names (empty when unsafe)
        finished: Names of the processes that could finish (kept when unsafe,
            useful to show which processes are stuck)
    """
    safe: bool
    sequence: List[str] = field(default_factory=list)
    finished: List[str] = field(default_factory=list)


def check_safety(available: Sequence[int], processes: Sequence[ResourceAllocation]) -> SafetyResult:
    """
    Check if the system is in a safe state.

    Priority-ordered variant of Banker's safety algorithm:
    1. Sort processes by ascending priority (stable, input order breaks ties)
    2. Initialize Work = Available, Finish = [False] * num_processes
    3. Scan the sorted list; every unfinished process i with Need[i] <= Work
       finishes: Work += Allocation[i], append to the sequence. The scan
       continues with the next process after each success.
    4. Repeat full scans until one makes no progress
    5. SAFE iff all processes finished

    Time Complexity: O(P²×R)

    Args:
        available: Free instances per resource type [R]
        processes: Resource state of each process

    Returns:
        SafetyResult

    Raises:
        ValidationError: If vector lengths do not match
    """
    available = validate_vector(available, "available")
    num_resources = len(available)
    for process in processes:
        if process.num_resources != num_resources or len(process.need) != num_resources:
            raise ValidationError(
                f"{process.process_id} has {process.num_resources} resource types, "
                f"available has {num_resources}"
            )

    ordered = sorted(processes, key=lambda p: p.priority)

    work = np.array(available, dtype=int)
    finish = np.zeros(len(ordered), dtype=bool)
    sequence = []

    made_progress = True
    while made_progress:
        made_progress = False

        for i, process in enumerate(ordered):
            if finish[i]:
                continue

            need = np.array(process.need, dtype=int)

            if np.all(need <= work):
                work += np.array(process.allocation, dtype=int)
                finish[i] = True
                sequence.append(process.process_id)
                made_progress = True

    if np.all(finish):
        return SafetyResult(True, sequence, list(sequence))
    else:
        return SafetyResult(False, [], sequence)
