"""
Memory session state for the memory allocation simulator.

Holds the block layout, next-fit cursor, process history and session clock
between calls. Every operation computes a new layout with the pure functions
in algorithms.allocation and swaps it in only when the call succeeds.
"""

from dataclasses import replace
from typing import Callable, List, Optional

from algorithms.allocation import (
    MemoryStats,
    allocate,
    check_partition,
    compute_stats,
    deallocate,
    find_block,
    find_fit,
    initialize,
)
from analysis.events import EventLog, EventType, SimulationEvent
from models.memory import FitStrategy, MemoryBlock, MemoryProcess
from models.result import OperationResult
from utils.errors import NotFoundError, SimulatorError, ValidationError
from utils.ids import SequentialIdGenerator
from utils.logger import SimulatorLogger
from utils.validation import validate_int

DEFAULT_TOTAL_MEMORY = 2048
DEFAULT_STRATEGY = FitStrategy.BEST_FIT


class MemoryState:
    """
    Allocator session.

    Attributes:
        total_memory: Size of the simulated memory
        strategy: Active placement strategy
        blocks: Current block layout (replaced atomically by each operation)
        next_fit_cursor: Next Fit scan start, persists across calls
        history: Every process ever allocated, including released ones
        current_time: Session clock
        event_log: Record of every operation outcome
    """

    def __init__(
        self,
        total_memory: int = DEFAULT_TOTAL_MEMORY,
        strategy=DEFAULT_STRATEGY,
        block_ids: Optional[Callable[[], str]] = None,
        process_ids: Optional[Callable[[], str]] = None,
        logger: Optional[SimulatorLogger] = None
    ):
        self.block_ids = block_ids or SequentialIdGenerator("block")
        self.process_ids = process_ids or SequentialIdGenerator("process")
        self.logger = logger
        self.strategy = FitStrategy.parse(strategy)
        self.current_time = 0
        self.event_log = EventLog()
        self.total_memory = validate_int(total_memory, "total_memory", minimum=1)
        self.blocks: List[MemoryBlock] = initialize(self.total_memory, self.block_ids)
        self.next_fit_cursor = 0
        self.history: List[MemoryProcess] = []

    def reconfigure(self, total_memory) -> OperationResult:
        """Reset memory to a single free block of a new size; history is cleared."""
        try:
            total_memory = validate_int(total_memory, "total_memory", minimum=1)
        except ValidationError as e:
            return self._reject("reconfigure", e)

        self.total_memory = total_memory
        self.blocks = initialize(total_memory, self.block_ids)
        self.next_fit_cursor = 0
        self.history = []
        self._record(EventType.RECONFIGURE, None, total_memory, f"total memory set to {total_memory}")
        return OperationResult.ok(f"Memory reconfigured to {total_memory} units")

    def set_strategy(self, name) -> OperationResult:
        try:
            self.strategy = FitStrategy.parse(name)
        except ValidationError as e:
            return self._reject("set_strategy", e)
        return OperationResult.ok(f"Strategy set to {self.strategy.value}")

    def tick(self, amount: int = 1) -> int:
        """Advance the session clock."""
        self.current_time += validate_int(amount, "tick", minimum=0)
        return self.current_time

    def candidate_index(self, size: int) -> int:
        """Block the active strategy would choose for size, without allocating."""
        index, _ = find_fit(self.blocks, size, self.strategy, self.next_fit_cursor)
        return index

    def allocate(self, name: str, size) -> OperationResult:
        """
        Create a process and place it in memory.

        Returns:
            OperationResult whose value is the new MemoryProcess on success
        """
        try:
            if not isinstance(name, str) or not name.strip():
                raise ValidationError("Process name is required")
            size = validate_int(size, f"{name}.size", minimum=1)
            if size > self.total_memory:
                raise ValidationError(
                    f"Process size must be between 1 and {self.total_memory}"
                )

            process = MemoryProcess(
                process_id=self.process_ids(),
                name=name.strip(),
                size=size,
                start_time=self.current_time,
                allocated_at=self.current_time,
            )
            blocks, cursor, index = allocate(
                self.blocks, process, self.strategy, self.next_fit_cursor, self.block_ids
            )
        except SimulatorError as e:
            if self.logger:
                self.logger.log_allocation(self.current_time, str(name), size, False, str(e))
            return self._reject(name, e)

        check_partition(blocks, self.total_memory, f"after allocating {process.name}")
        self.blocks = blocks
        self.next_fit_cursor = cursor
        self.history.append(process)

        block = blocks[index]
        reason = f"{self.strategy.value}: [{block.start}-{block.end})"
        if self.logger:
            self.logger.log_allocation(self.current_time, process.name, size, True, reason)
        self._record(EventType.ALLOCATION, process.process_id, size, reason)
        return OperationResult.ok(f"{process.name} allocated at {block.start}", process)

    def deallocate(self, process_id: str) -> OperationResult:
        """Release the memory held by a process and merge free neighbours."""
        try:
            blocks = deallocate(self.blocks, process_id)
        except NotFoundError as e:
            return self._reject(process_id, e)

        check_partition(blocks, self.total_memory, f"after deallocating {process_id}")
        self.blocks = blocks
        self.history = [
            p if p.process_id != process_id or p.deallocated_at is not None
            else replace(p, deallocated_at=self.current_time)
            for p in self.history
        ]

        if self.logger:
            self.logger.log_step(self.current_time, f"{process_id} deallocated")
        self._record(EventType.DEALLOCATION, process_id, None, "memory released")
        return OperationResult.ok(f"{process_id} deallocated")

    def stats(self) -> MemoryStats:
        return compute_stats(self.blocks, self.total_memory)

    def active_processes(self) -> List[MemoryProcess]:
        return [b.occupant for b in self.blocks if not b.is_free]

    def is_allocated(self, process_id: str) -> bool:
        return find_block(self.blocks, process_id) != -1

    def display(self) -> str:
        """
        Generate readable string representation of the memory layout.

        Returns:
            Formatted string with blocks, statistics and history
        """
        stats = self.stats()
        output = []
        output.append("\n" + "="*60)
        output.append(f"MEMORY STATE (Total: {self.total_memory}, Strategy: {self.strategy.value})")
        output.append("="*60)

        output.append("\nBlocks:")
        for i, block in enumerate(self.blocks):
            owner = "FREE" if block.is_free else f"{block.occupant.name} ({block.occupant.process_id})"
            output.append(f"  Block {i}: [{block.start:5}-{block.end:5}) {block.size:5} - {owner}")

        output.append("\nStatistics:")
        output.append(f"  Used:       {stats.used_pct:6.2f}%")
        output.append(f"  Free:       {stats.free_pct:6.2f}%")
        output.append(f"  Fragmented: {stats.fragmented_pct:6.2f}%")

        output.append("\nHistory:")
        for p in self.history:
            released = "-" if p.deallocated_at is None else p.deallocated_at
            output.append(
                f"  {p.name:10} size={p.size:5} allocated_at={p.allocated_at} deallocated_at={released}"
            )

        output.append("\n" + "="*60)
        return "\n".join(output)

    def _record(self, event_type: EventType, subject, amount, message: str) -> None:
        self.event_log.add(SimulationEvent(
            time=self.current_time,
            event_type=event_type,
            subject=subject,
            amount=amount,
            message=message
        ))

    def _reject(self, subject, error: SimulatorError) -> OperationResult:
        self.event_log.add(SimulationEvent(
            time=self.current_time,
            event_type=EventType.REJECTION,
            subject=str(subject),
            reason=str(error)
        ))
        return OperationResult.failed(error)
