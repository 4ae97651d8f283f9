"""
Sorting trace generators for the OS Concepts Simulator.

The "parallel" quick, merge and bucket sorts are simulated sequentially:
each recursive branch runs to completion before the next one starts. Instead
of pacing the work with delays, every algorithm returns the full ordered list
of events with a snapshot of the array after each one; a front end replays the
list at whatever speed it likes.
"""

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from utils.errors import ValidationError
from utils.validation import validate_int, validate_vector

BUCKET_COUNT = 5
MAX_VALUE = 100


class SortAlgorithm(Enum):
    QUICK = "quick"
    MERGE = "merge"
    BUCKET = "bucket"

    @classmethod
    def parse(cls, name) -> "SortAlgorithm":
        """Accepts "quick", "parallel-quick", "parallel_merge", etc."""
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower().replace("_", "-")
        if key.startswith("parallel-"):
            key = key[len("parallel-"):]
        for algorithm in cls:
            if algorithm.value == key:
                return algorithm
        raise ValidationError(f"Unknown sort algorithm: {name!r}")


class SortEventKind(Enum):
    COMPARE = "compare"
    SWAP = "swap"
    WRITE = "write"
    BUCKET = "bucket"


@dataclass(frozen=True)
class SortEvent:
    """
    One step of a sort.

    Attributes:
        kind: What happened
        indices: Array positions involved (bucket number for BUCKET events)
        snapshot: Array contents after the event
    """
    kind: SortEventKind
    indices: Tuple[int, ...]
    snapshot: Tuple[int, ...]


@dataclass
class SortTrace:
    """
    Full trace of a sort.

    comparisons and swaps follow the counters shown by the visualizer: the
    final pivot swap of a partition and the tail copies of a merge are not
    counted.
    """
    algorithm: SortAlgorithm
    initial: List[int]
    events: List[SortEvent] = field(default_factory=list)
    comparisons: int = 0
    swaps: int = 0

    @property
    def result(self) -> List[int]:
        if not self.events:
            return list(self.initial)
        return list(self.events[-1].snapshot)

    def emit(self, kind: SortEventKind, indices: Tuple[int, ...], arr: Sequence[int]) -> None:
        self.events.append(SortEvent(kind, tuple(indices), tuple(arr)))


def trace_sort(values: Sequence[int], algorithm) -> SortTrace:
    """
    Sort a copy of values and record every step.

    Args:
        values: Integers to sort (0..100 for bucket sort)
        algorithm: SortAlgorithm or its name

    Returns:
        SortTrace; the input sequence is never modified
    """
    algorithm = SortAlgorithm.parse(algorithm)
    arr = validate_vector(values, "values") if algorithm == SortAlgorithm.BUCKET else _as_ints(values)
    trace = SortTrace(algorithm, list(arr))

    if algorithm == SortAlgorithm.QUICK:
        _quick_sort(arr, 0, len(arr) - 1, trace)
    elif algorithm == SortAlgorithm.MERGE:
        _merge_sort(arr, 0, len(arr) - 1, trace)
    else:
        _bucket_sort(arr, trace)

    return trace


def _quick_sort(arr: List[int], start: int, end: int, trace: SortTrace) -> None:
    """Lomuto partition around the last element, then left and right halves."""
    if start >= end:
        return

    pivot = arr[end]
    i = start - 1

    for j in range(start, end):
        trace.comparisons += 1
        trace.emit(SortEventKind.COMPARE, (j, end), arr)

        if arr[j] < pivot:
            i += 1
            trace.swaps += 1
            arr[i], arr[j] = arr[j], arr[i]
            trace.emit(SortEventKind.SWAP, (i, j), arr)

    arr[i + 1], arr[end] = arr[end], arr[i + 1]
    trace.emit(SortEventKind.SWAP, (i + 1, end), arr)

    _quick_sort(arr, start, i, trace)
    _quick_sort(arr, i + 2, end, trace)


def _merge_sort(arr: List[int], start: int, end: int, trace: SortTrace) -> None:
    if start >= end:
        return

    mid = (start + end) // 2
    _merge_sort(arr, start, mid, trace)
    _merge_sort(arr, mid + 1, end, trace)
    _merge(arr, start, mid, end, trace)


def _merge(arr: List[int], start: int, mid: int, end: int, trace: SortTrace) -> None:
    left = arr[start:mid + 1]
    right = arr[mid + 1:end + 1]
    i = j = 0
    k = start

    while i < len(left) and j < len(right):
        trace.comparisons += 1
        trace.emit(SortEventKind.COMPARE, (start + i, mid + 1 + j), arr)

        # <= keeps the merge stable
        if left[i] <= right[j]:
            arr[k] = left[i]
            i += 1
        else:
            arr[k] = right[j]
            j += 1
        trace.swaps += 1
        trace.emit(SortEventKind.WRITE, (k,), arr)
        k += 1

    while i < len(left):
        arr[k] = left[i]
        trace.emit(SortEventKind.WRITE, (k,), arr)
        i += 1
        k += 1

    while j < len(right):
        arr[k] = right[j]
        trace.emit(SortEventKind.WRITE, (k,), arr)
        j += 1
        k += 1


def _bucket_sort(arr: List[int], trace: SortTrace) -> None:
    """
    Distribute into BUCKET_COUNT buckets by value * BUCKET_COUNT // 101,
    sort each bucket, then copy the buckets back in order.
    """
    for value in arr:
        if value > MAX_VALUE:
            raise ValidationError(f"Bucket sort values must be between 0 and {MAX_VALUE}, got {value}")

    buckets: List[List[int]] = [[] for _ in range(BUCKET_COUNT)]
    for value in arr:
        buckets[value * BUCKET_COUNT // (MAX_VALUE + 1)].append(value)

    for index, bucket in enumerate(buckets):
        bucket.sort()
        trace.emit(SortEventKind.BUCKET, (index,), arr)

    position = 0
    for bucket in buckets:
        for value in bucket:
            arr[position] = value
            trace.swaps += 1
            trace.emit(SortEventKind.WRITE, (position,), arr)
            position += 1


def _as_ints(values: Sequence[int]) -> List[int]:
    """Integers of any sign are fine for quick and merge sort."""
    if isinstance(values, (str, bytes)):
        raise ValidationError("values must be a sequence of integers")
    return [validate_int(v, f"values[{i}]", minimum=None) for i, v in enumerate(values)]


def random_values(size: int, seed: Optional[int] = None) -> List[int]:
    """Reproducible array of size integers in [1, MAX_VALUE]."""
    size = validate_int(size, "size", minimum=0)
    rng = random.Random(seed)
    return [rng.randint(1, MAX_VALUE) for _ in range(size)]
