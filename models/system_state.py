"""
System State model for the deadlock safety simulator.

Maintains the available vector and the processes' resource state, and exposes
the matrices used by the safety check and the resource-allocation graph.
"""

import numpy as np
from typing import List, Optional

from algorithms.avoidance import SafetyResult, check_safety
from algorithms.graph import ResourceGraph, build_resource_graph
from analysis.events import EventLog, EventType, SimulationEvent
from models.resource import ResourceAllocation
from models.result import OperationResult
from utils.errors import NotFoundError, SimulatorError, ValidationError
from utils.logger import SimulatorLogger
from utils.validation import parse_vector, validate_vector


class SystemState:
    """
    Deadlock session state.

    Processes are added and removed only by explicit calls; removing one
    returns its allocation to the available vector. No safety check runs
    automatically.

    Attributes:
        available: Free instances per resource type [R]
        processes: Active processes in insertion order
        last_result: Verdict of the most recent safety check (None if stale)
        event_log: Record of every operation outcome
    """

    def __init__(self, available: Optional[List[int]] = None, logger: Optional[SimulatorLogger] = None):
        self.logger = logger
        self.available: List[int] = validate_vector(available if available is not None else [], "available")
        self.processes: List[ResourceAllocation] = []
        self.last_result: Optional[SafetyResult] = None
        self.event_log = EventLog()

    @property
    def num_processes(self) -> int:
        """Number of processes in the system."""
        return len(self.processes)

    @property
    def num_resources(self) -> int:
        """Number of resource types in the system."""
        return len(self.available)

    @property
    def available_vector(self) -> np.ndarray:
        """Get available resources vector [R]."""
        return np.array(self.available, dtype=int)

    @property
    def allocation_matrix(self) -> np.ndarray:
        """Get allocation matrix [P][R]."""
        return self._matrix(lambda p: p.allocation)

    @property
    def max_demand_matrix(self) -> np.ndarray:
        """Get max demand matrix [P][R]."""
        return self._matrix(lambda p: p.max_demand)

    @property
    def need_matrix(self) -> np.ndarray:
        """
        Get need matrix [P][R].
        Each row is the need vector stored at process creation (Max - Allocation).
        """
        return self._matrix(lambda p: p.need)

    def _matrix(self, row) -> np.ndarray:
        matrix = np.zeros((self.num_processes, self.num_resources), dtype=int)
        for i, process in enumerate(self.processes):
            matrix[i] = row(process)
        return matrix

    def set_available(self, vector) -> OperationResult:
        """
        Replace the available vector.

        Accepts a sequence of integers or comma-separated text ("3, 3, 2").
        The length must match the existing processes' vectors.
        """
        try:
            if isinstance(vector, str):
                values = parse_vector(vector, "available")
            else:
                values = validate_vector(vector, "available")
            for process in self.processes:
                if process.num_resources != len(values):
                    raise ValidationError(
                        f"available has length {len(values)}, but {process.process_id} "
                        f"uses {process.num_resources} resource types"
                    )
        except ValidationError as e:
            return self._reject("available", e)

        self.available = values
        self.last_result = None
        return OperationResult.ok(f"Available set to {values}")

    def add_process(self, name: str, allocation, max_demand, priority=0) -> OperationResult:
        """
        Add a process.

        Args:
            name: Unique process name
            allocation: Held instances [R] (sequence or comma-separated text)
            max_demand: Declared maximum [R] (sequence or comma-separated text)
            priority: Safety-check scan order (lower first)

        Returns:
            OperationResult whose value is the new ResourceAllocation
        """
        try:
            if isinstance(allocation, str):
                allocation = parse_vector(allocation, "allocation")
            if isinstance(max_demand, str):
                max_demand = parse_vector(max_demand, "max")
            if isinstance(priority, str):
                priority = priority.strip()

            process = ResourceAllocation(name, allocation, max_demand, priority)

            if self.num_resources == 0:
                raise ValidationError("Set the available vector before adding processes")
            if process.num_resources != self.num_resources:
                raise ValidationError(
                    f"{process.process_id}: vectors have length {process.num_resources}, "
                    f"expected {self.num_resources} resource types"
                )
            if self._find(process.process_id) is not None:
                raise ValidationError(f"Process {process.process_id} already exists")
        except SimulatorError as e:
            return self._reject(name, e)

        self.processes.append(process)
        self.last_result = None
        message = (
            f"Process {process.process_id} added with allocation {process.allocation}, "
            f"max {process.max_demand}, and priority {process.priority}"
        )
        if self.logger:
            self.logger.log(message)
        self._record(EventType.PROCESS_ADDED, process.process_id, message)
        return OperationResult.ok(message, process)

    def remove_process(self, name: str) -> OperationResult:
        """Remove a process and return its full allocation to available."""
        try:
            process = self._find(name)
            if process is None:
                raise NotFoundError(f"Process {name} not found")
        except NotFoundError as e:
            return self._reject(name, e)

        self.available = [a + held for a, held in zip(self.available, process.allocation)]
        self.processes.remove(process)
        self.last_result = None

        message = f"Resources released from process {process.process_id}"
        if self.logger:
            self.logger.log(message)
        self._record(EventType.PROCESS_REMOVED, process.process_id, message)
        return OperationResult.ok(message, process)

    def check_safety(self) -> OperationResult:
        """
        Run the safety check on the current state.

        An unsafe verdict is still a successful operation; the SafetyResult
        is in the result's value.
        """
        try:
            result = check_safety(self.available, self.processes)
        except ValidationError as e:
            return self._reject("safety_check", e)

        self.last_result = result
        if self.logger:
            for name in result.finished:
                self.logger.log(f"Process {name} executed successfully", "debug")
            self.logger.log_safety(result.safe, result.sequence)

        if result.safe:
            message = f"safe, sequence: {' -> '.join(result.sequence)}"
        else:
            message = "unsafe, deadlock possible"
        self._record(EventType.SAFETY_CHECK, None, message)
        return OperationResult.ok(message, result)

    def resource_graph(self) -> ResourceGraph:
        return build_resource_graph(self.num_resources, self.processes)

    def _find(self, name) -> Optional[ResourceAllocation]:
        key = name.strip() if isinstance(name, str) else name
        return next((p for p in self.processes if p.process_id == key), None)

    def _record(self, event_type: EventType, subject, message: str) -> None:
        self.event_log.add(SimulationEvent(
            time=len(self.event_log.events),
            event_type=event_type,
            subject=subject,
            message=message
        ))

    def _reject(self, subject, error: SimulatorError) -> OperationResult:
        if self.logger:
            self.logger.log(str(error), "error")
        self.event_log.add(SimulationEvent(
            time=len(self.event_log.events),
            event_type=EventType.REJECTION,
            subject=str(subject),
            reason=str(error)
        ))
        return OperationResult.failed(error)

    def display(self) -> str:
        """
        Generate readable string representation of system state.

        Returns:
            Formatted string showing all matrices and vectors
        """
        output = []
        output.append("\n" + "="*60)
        output.append("SYSTEM STATE")
        output.append("="*60)

        output.append("\nAvailable Resources:")
        avail_str = "  ["
        for i in range(self.num_resources):
            avail_str += f"R{i}:{self.available[i]:2}"
            if i < self.num_resources - 1:
                avail_str += ", "
        avail_str += "]"
        output.append(avail_str)

        header = "        " + " ".join([f"R{i:<2}" for i in range(self.num_resources)])
        for title, matrix in (
            ("Allocation Matrix:", self.allocation_matrix),
            ("Max Demand Matrix:", self.max_demand_matrix),
            ("Need Matrix (Max - Allocation):", self.need_matrix),
        ):
            output.append(f"\n{title}")
            output.append(header)
            for i, process in enumerate(self.processes):
                row = f"  {process.process_id:>4}: "
                row += " ".join([f"{matrix[i][j]:3}" for j in range(self.num_resources)])
                output.append(row)

        output.append("\nPriorities:")
        for process in self.processes:
            output.append(f"  {process.process_id}: {process.priority}")

        output.append("\n" + "="*60)
        return "\n".join(output)
