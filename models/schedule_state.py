"""
Scheduling session state for the CPU scheduling simulator.

Holds the editable process table, the selected algorithm and the quantum,
and keeps the last computed schedule as a display snapshot.
"""

from typing import List, Optional

from algorithms.scheduling import schedule, total_execution_time
from analysis.events import EventLog, EventType, SimulationEvent
from analysis.metrics import ScheduleMetrics, compute_schedule_metrics
from models.process import ExecutionStep, Process, SchedulingAlgorithm
from models.result import OperationResult
from utils.errors import NotFoundError, SimulatorError, ValidationError
from utils.logger import SimulatorLogger
from utils.validation import validate_int

DEFAULT_QUANTUM = 3


class ScheduleState:
    """
    Scheduler session.

    Attributes:
        processes: Process table in row order (row order is the tie-break)
        algorithm: Selected scheduling algorithm
        quantum: Round Robin time slice
        steps: Last computed schedule
    """

    def __init__(
        self,
        algorithm=SchedulingAlgorithm.FCFS,
        quantum: int = DEFAULT_QUANTUM,
        logger: Optional[SimulatorLogger] = None
    ):
        self.logger = logger
        self.processes: List[Process] = []
        self.algorithm = SchedulingAlgorithm.parse(algorithm)
        self.quantum = validate_int(quantum, "quantum", minimum=1)
        self.steps: List[ExecutionStep] = []
        self.event_log = EventLog()

    @property
    def total_time(self) -> int:
        return total_execution_time(self.steps)

    def next_pid(self) -> str:
        """Default name for a new row: P0, P1, ..."""
        taken = {p.pid for p in self.processes}
        index = len(self.processes)
        while f"P{index}" in taken:
            index += 1
        return f"P{index}"

    def add_process(
        self,
        arrival_time,
        burst_time,
        priority=0,
        pid: Optional[str] = None
    ) -> OperationResult:
        """Append a row to the process table."""
        try:
            process = Process(pid or self.next_pid(), arrival_time, burst_time, priority)
            if any(p.pid == process.pid for p in self.processes):
                raise ValidationError(f"Duplicate process id: {process.pid}")
        except SimulatorError as e:
            return OperationResult.failed(e)

        self.processes.append(process)
        return OperationResult.ok(f"{process.pid} added", process)

    def remove_process(self, pid: str) -> OperationResult:
        process = next((p for p in self.processes if p.pid == pid), None)
        if process is None:
            return OperationResult.failed(NotFoundError(f"Process {pid} not found"))
        self.processes.remove(process)
        return OperationResult.ok(f"{pid} removed", process)

    def set_algorithm(self, name) -> OperationResult:
        try:
            self.algorithm = SchedulingAlgorithm.parse(name)
        except ValidationError as e:
            return OperationResult.failed(e)
        return OperationResult.ok(f"Algorithm set to {self.algorithm.value}")

    def set_quantum(self, quantum) -> OperationResult:
        try:
            self.quantum = validate_int(quantum, "quantum", minimum=1)
        except ValidationError as e:
            return OperationResult.failed(e)
        return OperationResult.ok(f"Quantum set to {self.quantum}")

    def run(self) -> OperationResult:
        """
        Compute the schedule for the current table.

        Returns:
            OperationResult whose value is the list of ExecutionStep
        """
        try:
            steps = schedule(self.processes, self.algorithm, self.quantum)
        except ValidationError as e:
            return OperationResult.failed(e)

        self.steps = steps
        if self.logger:
            self.logger.log_schedule(self.algorithm.value, steps)
        self.event_log.add(SimulationEvent(
            time=self.total_time,
            event_type=EventType.SCHEDULED,
            message=f"{self.algorithm.value}: {len(steps)} steps, total time {self.total_time}"
        ))
        return OperationResult.ok(f"{len(steps)} execution steps", steps)

    def metrics(self) -> ScheduleMetrics:
        return compute_schedule_metrics(self.processes, self.steps)
