"""
Memory Allocation Algorithms for the OS Concepts Simulator.

Implements First/Best/Worst/Next Fit placement over a list of contiguous
memory blocks, with block splitting on allocation and coalescing of free
blocks on deallocation.

All functions are pure: they never mutate the block list they are given and
return a new list instead.
"""

from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

from models.memory import FitStrategy, MemoryBlock, MemoryProcess
from utils.errors import NoFitError, NotFoundError, ValidationError
from utils.validation import validate_int


@dataclass(frozen=True)
class MemoryStats:
    """
    Memory usage summary.

    Attributes:
        used: Units held by processes
        free: Units not held by any process
        fragmented: Free units outside the largest free block
        largest_free_block: Size of the largest free block
        used_pct / free_pct / fragmented_pct: Same values as % of total memory
    """
    used: int
    free: int
    fragmented: int
    largest_free_block: int
    used_pct: float
    free_pct: float
    fragmented_pct: float


def initialize(total_memory: int, id_generator: Callable[[], str]) -> List[MemoryBlock]:
    """
    Create the initial layout: a single free block covering all memory.

    Raises:
        ValidationError: If total_memory is not a positive integer
    """
    total_memory = validate_int(total_memory, "total_memory", minimum=1)
    return [MemoryBlock(id_generator(), 0, total_memory)]


def find_fit(
    blocks: Sequence[MemoryBlock],
    size: int,
    strategy,
    next_fit_cursor: int = 0
) -> Tuple[int, int]:
    """
    Choose a free block able to hold size units.

    Only free blocks with block.size >= size are candidates.
    - First Fit: lowest address
    - Best Fit: smallest leftover (first encountered wins ties)
    - Worst Fit: largest leftover (first encountered wins ties)
    - Next Fit: first candidate scanning circularly from the cursor

    Args:
        blocks: Current block list
        size: Requested size
        strategy: FitStrategy or its name
        next_fit_cursor: Scan start for Next Fit

    Returns:
        Tuple of (block index or -1, updated next-fit cursor)
    """
    strategy = FitStrategy.parse(strategy)

    def fits(block: MemoryBlock) -> bool:
        return block.is_free and block.size >= size

    selected = -1

    if strategy == FitStrategy.FIRST_FIT:
        selected = next((i for i, b in enumerate(blocks) if fits(b)), -1)

    elif strategy == FitStrategy.BEST_FIT:
        min_diff = None
        for i, block in enumerate(blocks):
            if fits(block):
                diff = block.size - size
                if min_diff is None or diff < min_diff:
                    min_diff = diff
                    selected = i

    elif strategy == FitStrategy.WORST_FIT:
        max_diff = -1
        for i, block in enumerate(blocks):
            if fits(block):
                diff = block.size - size
                if diff > max_diff:
                    max_diff = diff
                    selected = i

    else:
        block_count = len(blocks)
        for offset in range(block_count):
            index = (next_fit_cursor + offset) % block_count
            if fits(blocks[index]):
                selected = index
                # Cursor only moves on success
                next_fit_cursor = (index + 1) % block_count
                break

    return selected, next_fit_cursor


def allocate(
    blocks: Sequence[MemoryBlock],
    process: MemoryProcess,
    strategy,
    next_fit_cursor: int,
    id_generator: Callable[[], str]
) -> Tuple[List[MemoryBlock], int, int]:
    """
    Place a process in memory.

    If the chosen block is larger than the request it is split into an
    occupied prefix and a free remainder inserted right after it; on an
    exact fit the block is occupied in place.

    Args:
        blocks: Current block list
        process: Process to place (process.size units)
        strategy: FitStrategy or its name
        next_fit_cursor: Next Fit scan start
        id_generator: Produces ids for split-off blocks

    Returns:
        Tuple of (new block list, new next-fit cursor, index of the occupied block)

    Raises:
        ValidationError: If the size is not a positive integer
        NoFitError: If no free block is large enough
    """
    size = validate_int(process.size, f"{process.name}.size", minimum=1)
    index, cursor = find_fit(blocks, size, strategy, next_fit_cursor)

    if index == -1:
        raise NoFitError(f"No suitable memory block found for {process.name} ({size} units)")

    updated = list(blocks)
    chosen = updated[index]

    if chosen.size > size:
        remainder = MemoryBlock(id_generator(), chosen.start + size, chosen.end)
        updated[index] = chosen.occupy(process, size)
        updated.insert(index + 1, remainder)
    else:
        updated[index] = chosen.occupy(process)

    return updated, cursor, index


def deallocate(blocks: Sequence[MemoryBlock], process_id: str) -> List[MemoryBlock]:
    """
    Free the block held by a process and coalesce free neighbours.

    Raises:
        NotFoundError: If no block is held by process_id
    """
    index = find_block(blocks, process_id)
    if index == -1:
        raise NotFoundError(f"No memory block is held by process {process_id}")

    updated = list(blocks)
    updated[index] = updated[index].release()
    return merge_free_blocks(updated)


def merge_free_blocks(blocks: Sequence[MemoryBlock]) -> List[MemoryBlock]:
    """
    Coalesce every run of consecutive free blocks in one left-to-right pass.

    A merged run keeps the id and start of its first block and the end of its
    last block.
    """
    merged: List[MemoryBlock] = []
    for block in blocks:
        if merged and merged[-1].is_free and block.is_free:
            last = merged[-1]
            merged[-1] = MemoryBlock(last.block_id, last.start, block.end)
        else:
            merged.append(block)
    return merged


def find_block(blocks: Sequence[MemoryBlock], process_id: str) -> int:
    """Index of the block occupied by process_id, or -1."""
    for i, block in enumerate(blocks):
        if not block.is_free and block.occupant.process_id == process_id:
            return i
    return -1


def compute_stats(blocks: Sequence[MemoryBlock], total_memory: int) -> MemoryStats:
    """
    Compute usage and external fragmentation.

    Fragmented memory is the free space that is NOT part of the single
    largest free block.
    """
    if total_memory <= 0:
        raise ValidationError("total_memory must be positive")

    used = sum(b.size for b in blocks if not b.is_free)
    free = total_memory - used
    free_sizes = [b.size for b in blocks if b.is_free]
    largest = max(free_sizes, default=0)
    fragmented = sum(free_sizes) - largest

    return MemoryStats(
        used=used,
        free=free,
        fragmented=fragmented,
        largest_free_block=largest,
        used_pct=used / total_memory * 100,
        free_pct=free / total_memory * 100,
        fragmented_pct=fragmented / total_memory * 100,
    )


def check_partition(blocks: Sequence[MemoryBlock], total_memory: int, context: str = "") -> None:
    """
    Verify the layout invariant.

    Blocks must partition [0, total_memory) contiguously in address order and
    no two adjacent blocks may both be free.

    Raises:
        AssertionError: If the invariant is violated
    """
    assert blocks, f"Empty block list {context}"
    assert blocks[0].start == 0, f"First block starts at {blocks[0].start} {context}"
    assert blocks[-1].end == total_memory, (
        f"Last block ends at {blocks[-1].end}, expected {total_memory} {context}"
    )
    for left, right in zip(blocks, blocks[1:]):
        assert left.end == right.start, (
            f"Gap or overlap between {left.block_id} [{left.start}-{left.end}) "
            f"and {right.block_id} [{right.start}-{right.end}) {context}"
        )
        assert not (left.is_free and right.is_free), (
            f"Adjacent free blocks {left.block_id} and {right.block_id} left unmerged {context}"
        )
