"""
Memory model for the memory allocation simulator.

Represents memory blocks, the processes occupying them and the placement
strategies used to choose a block.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from utils.errors import ValidationError


class FitStrategy(Enum):
    """Placement strategies for choosing a free block."""
    FIRST_FIT = "First Fit"
    BEST_FIT = "Best Fit"
    WORST_FIT = "Worst Fit"
    NEXT_FIT = "Next Fit"

    @classmethod
    def parse(cls, name) -> "FitStrategy":
        """
        Resolve a strategy from names like "Best Fit", "best_fit" or "best".

        Raises:
            ValidationError: If the name is not a known strategy
        """
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower().replace("_", " ").replace("-", " ")
        if not key.endswith(" fit"):
            key += " fit"
        for strategy in cls:
            if strategy.value.lower() == key:
                return strategy
        raise ValidationError(f"Unknown fit strategy: {name!r}")


@dataclass(frozen=True)
class MemoryProcess:
    """
    A process holding (or having held) a region of memory.

    Attributes:
        process_id: Unique process identifier
        name: Display name entered by the user
        size: Requested size in memory units
        start_time: Session clock when the process was created
        allocated_at: Session clock when it was placed in memory
        deallocated_at: Session clock when its memory was released
    """
    process_id: str
    name: str
    size: int
    start_time: int = 0
    allocated_at: Optional[int] = None
    deallocated_at: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.allocated_at is not None and self.deallocated_at is None


@dataclass(frozen=True)
class MemoryBlock:
    """
    A contiguous region [start, end) of memory.

    Attributes:
        block_id: Block identifier
        start: First address of the block
        end: One past the last address of the block
        is_free: Whether the block is unoccupied
        occupant: Process holding the block (None when free)

    Invariant:
        size == end - start > 0
    """
    block_id: str
    start: int
    end: int
    is_free: bool = True
    occupant: Optional[MemoryProcess] = None

    def __post_init__(self):
        """Validate block geometry."""
        if self.start < 0:
            raise ValidationError(f"Block {self.block_id}: start cannot be negative")
        if self.end <= self.start:
            raise ValidationError(
                f"Block {self.block_id}: end ({self.end}) must exceed start ({self.start})"
            )
        if self.is_free and self.occupant is not None:
            raise ValidationError(f"Block {self.block_id}: free block cannot have an occupant")

    @property
    def size(self) -> int:
        return self.end - self.start

    def occupy(self, process: MemoryProcess, size: Optional[int] = None) -> "MemoryBlock":
        """Return a copy of this block holding process, optionally shrunk to size."""
        end = self.end if size is None else self.start + size
        return replace(self, end=end, is_free=False, occupant=process)

    def release(self) -> "MemoryBlock":
        """Return a free copy of this block."""
        return replace(self, is_free=True, occupant=None)
