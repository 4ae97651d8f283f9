"""
Metrics for the OS Concepts Simulator.

Derives per-process scheduling metrics and chart geometry from an execution
schedule.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence
import statistics

from models.process import ExecutionStep, Process
from utils.errors import ValidationError
from utils.validation import validate_int


@dataclass(frozen=True)
class ProcessMetrics:
    """
    Timing metrics of a single scheduled process.

    Attributes:
        pid: Process identifier
        arrival_time: Arrival time
        burst_time: Total CPU time required
        first_start: Start of the first execution step
        completion_time: End of the last execution step
    """
    pid: str
    arrival_time: int
    burst_time: int
    first_start: int
    completion_time: int

    @property
    def turnaround_time(self) -> int:
        """Completion - Arrival"""
        return self.completion_time - self.arrival_time

    @property
    def waiting_time(self) -> int:
        """Turnaround - Burst"""
        return self.turnaround_time - self.burst_time

    @property
    def response_time(self) -> int:
        """First Start - Arrival"""
        return self.first_start - self.arrival_time


@dataclass
class ScheduleMetrics:
    """
    Aggregate metrics for a schedule.

    Tracks:
    1. Per-process completion, turnaround, waiting and response times
    2. Averages over all scheduled processes
    3. CPU utilization: busy time / total execution time × 100
    """
    processes: List[ProcessMetrics] = field(default_factory=list)
    total_time: int = 0
    busy_time: int = 0

    def get(self, pid: str) -> ProcessMetrics:
        return next(m for m in self.processes if m.pid == pid)

    def get_avg_turnaround_time(self) -> float:
        if not self.processes:
            return 0.0
        return statistics.mean(m.turnaround_time for m in self.processes)

    def get_avg_waiting_time(self) -> float:
        if not self.processes:
            return 0.0
        return statistics.mean(m.waiting_time for m in self.processes)

    def get_avg_response_time(self) -> float:
        if not self.processes:
            return 0.0
        return statistics.mean(m.response_time for m in self.processes)

    def get_cpu_utilization(self) -> float:
        """Idle gaps (no process arrived yet) lower utilization."""
        if self.total_time == 0:
            return 0.0
        return self.busy_time / self.total_time * 100

    def display(self) -> str:
        """Format metrics as a table."""
        lines = [
            f"{'Process':>8} {'Arrival':>8} {'Burst':>6} {'Completion':>11} "
            f"{'Turnaround':>11} {'Waiting':>8} {'Response':>9}"
        ]
        for m in self.processes:
            lines.append(
                f"{m.pid:>8} {m.arrival_time:>8} {m.burst_time:>6} {m.completion_time:>11} "
                f"{m.turnaround_time:>11} {m.waiting_time:>8} {m.response_time:>9}"
            )
        lines.append("")
        lines.append(f"Average turnaround time: {self.get_avg_turnaround_time():.2f}")
        lines.append(f"Average waiting time:    {self.get_avg_waiting_time():.2f}")
        lines.append(f"Average response time:   {self.get_avg_response_time():.2f}")
        lines.append(f"CPU utilization:         {self.get_cpu_utilization():.2f}%")
        return "\n".join(lines)


def compute_schedule_metrics(
    processes: Sequence[Process],
    steps: Sequence[ExecutionStep]
) -> ScheduleMetrics:
    """
    Compute metrics for a schedule.

    Processes that do not appear in the schedule are skipped.

    Args:
        processes: Scheduled processes
        steps: Execution steps produced for them

    Returns:
        ScheduleMetrics in process input order
    """
    first_start: Dict[str, int] = {}
    completion: Dict[str, int] = {}
    for step in steps:
        first_start.setdefault(step.process_id, step.start_time)
        completion[step.process_id] = max(completion.get(step.process_id, 0), step.end_time)

    metrics = ScheduleMetrics(
        total_time=max(completion.values(), default=0),
        busy_time=sum(step.duration for step in steps),
    )
    for process in processes:
        if process.pid not in completion:
            continue
        metrics.processes.append(ProcessMetrics(
            pid=process.pid,
            arrival_time=process.arrival_time,
            burst_time=process.burst_time,
            first_start=first_start[process.pid],
            completion_time=completion[process.pid],
        ))
    return metrics


@dataclass(frozen=True)
class GanttBar:
    """Horizontal placement of one execution step on a chart of fixed width."""
    process_id: str
    left: float
    width: float
    start_time: int
    end_time: int
    color_index: int


def gantt_layout(steps: Sequence[ExecutionStep], width: float = 600) -> List[GanttBar]:
    """
    Lay out execution steps as proportional bars.

    Bar width is duration / total time × width and its offset is
    start / total time × width. color_index is the step index.
    """
    if width <= 0:
        raise ValidationError(f"Chart width must be positive, got {width}")
    total = max((step.end_time for step in steps), default=0)
    if total == 0:
        return []
    return [
        GanttBar(
            process_id=step.process_id,
            left=step.start_time / total * width,
            width=step.duration / total * width,
            start_time=step.start_time,
            end_time=step.end_time,
            color_index=index,
        )
        for index, step in enumerate(steps)
    ]


def render_gantt(steps: Sequence[ExecutionStep], width: int = 60) -> str:
    """
    Render a text Gantt chart.

    Each time unit maps to width / total columns; labels are truncated to fit.
    """
    width = validate_int(width, "width", minimum=1)
    bars = gantt_layout(steps, width)
    if not bars:
        return "(empty schedule)"

    row = [" "] * width
    for bar in bars:
        begin = min(int(round(bar.left)), width - 1)
        end = max(begin + 1, int(round(bar.left + bar.width)))
        for col in range(begin, min(end, width)):
            row[col] = "="
        row[begin] = "|"
        label = bar.process_id[: max(0, end - begin - 1)]
        for offset, char in enumerate(label):
            if begin + 1 + offset < width:
                row[begin + 1 + offset] = char

    total = max(bar.end_time for bar in bars)
    axis = "0" + str(total).rjust(width - 1)
    return "".join(row) + "|\n" + axis
