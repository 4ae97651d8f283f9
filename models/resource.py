"""
Resource allocation model for the deadlock safety simulator.

Represents one process's holdings and declared maximum over n resource types.
"""

from dataclasses import dataclass, field
from typing import List

from utils.errors import ValidationError
from utils.validation import validate_int, validate_vector


@dataclass
class ResourceAllocation:
    """
    Resource state of a single process.

    Attributes:
        process_id: Process name (unique within a session)
        allocation: Instances currently held [R]
        max_demand: Maximum instances the process may ever hold [R]
        priority: Scan order for the safety check (lower value = checked first)
        need: Remaining demand [R], computed as max_demand - allocation

    Invariant:
        need[i] == max_demand[i] - allocation[i] for all i
        0 <= allocation[i] <= max_demand[i]
    """
    process_id: str
    allocation: List[int]
    max_demand: List[int]
    priority: int = 0
    need: List[int] = field(init=False)

    def __post_init__(self):
        """Validate vectors and compute the need vector."""
        if not isinstance(self.process_id, str) or not self.process_id.strip():
            raise ValidationError(f"Process name must be a non-empty string, got {self.process_id!r}")
        self.process_id = self.process_id.strip()

        self.allocation = validate_vector(self.allocation, f"{self.process_id}.allocation")
        self.max_demand = validate_vector(
            self.max_demand, f"{self.process_id}.max", length=len(self.allocation)
        )
        self.priority = validate_int(self.priority, f"{self.process_id}.priority", minimum=None)

        for i, (alloc, max_d) in enumerate(zip(self.allocation, self.max_demand)):
            if alloc > max_d:
                raise ValidationError(
                    f"{self.process_id}: allocation[{i}] ({alloc}) "
                    f"exceeds max[{i}] ({max_d})"
                )

        self.need = [m - a for m, a in zip(self.max_demand, self.allocation)]

    @property
    def num_resources(self) -> int:
        return len(self.allocation)

    def __repr__(self) -> str:
        return (
            f"ResourceAllocation({self.process_id}, priority={self.priority}, "
            f"alloc={self.allocation}, max={self.max_demand}, need={self.need})"
        )
