"""
Process model for the CPU scheduling simulator.

Represents a schedulable process and the execution intervals a scheduler
produces for it.
"""

from dataclasses import dataclass
from enum import Enum

from utils.errors import ValidationError
from utils.validation import validate_int


class SchedulingAlgorithm(Enum):
    """Scheduling algorithms supported by the scheduler engine."""
    FCFS = "fcfs"
    SJF = "sjf"
    PRIORITY = "priority"
    ROUND_ROBIN = "rr"

    @classmethod
    def parse(cls, name) -> "SchedulingAlgorithm":
        """
        Resolve an algorithm from its name.

        Accepts enum members, the canonical values above and the aliases
        "robin" and "round_robin".

        Raises:
            ValidationError: If the name is not a known algorithm
        """
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower().replace("-", "_")
        aliases = {"robin": "rr", "round_robin": "rr"}
        key = aliases.get(key, key)
        for algorithm in cls:
            if algorithm.value == key:
                return algorithm
        raise ValidationError(f"Unknown scheduling algorithm: {name!r}")


@dataclass(frozen=True)
class Process:
    """
    A process submitted to the scheduler.

    Attributes:
        pid: Process identifier (unique within a schedule call)
        arrival_time: Time the process enters the ready queue (>= 0)
        burst_time: CPU time required to complete (> 0)
        priority: Priority level (lower value = more urgent)
    """
    pid: str
    arrival_time: int
    burst_time: int
    priority: int = 0

    def __post_init__(self):
        """Validate process fields."""
        if not isinstance(self.pid, str) or not self.pid.strip():
            raise ValidationError(f"Process id must be a non-empty string, got {self.pid!r}")
        object.__setattr__(self, "arrival_time", validate_int(self.arrival_time, f"{self.pid}.arrival_time"))
        object.__setattr__(self, "burst_time", validate_int(self.burst_time, f"{self.pid}.burst_time", minimum=1))
        object.__setattr__(self, "priority", validate_int(self.priority, f"{self.pid}.priority", minimum=None))


@dataclass(frozen=True)
class ExecutionStep:
    """
    One contiguous interval of CPU time given to a process.

    Attributes:
        process_id: Process that ran
        start_time: Time the interval starts
        duration: Length of the interval
    """
    process_id: str
    start_time: int
    duration: int

    @property
    def end_time(self) -> int:
        return self.start_time + self.duration
