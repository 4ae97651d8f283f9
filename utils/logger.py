"""
Logger utility for the OS Concepts Simulator.

Provides step-by-step logging with verbosity levels.
"""

from typing import List, Optional
from datetime import datetime


class SimulatorLogger:
    """
    Logger for simulation events and decisions.

    Format: "[t=X] message" for timestamped session events, plain text otherwise.
    """

    def __init__(self, verbose: bool = False, log_file: Optional[str] = None, quiet: bool = False):
        """
        Initialize logger.

        Args:
            verbose: Enable debug output
            log_file: Optional file path for logging
            quiet: Suppress console output (file output is unaffected)
        """
        self.verbose = verbose
        self.quiet = quiet
        self.log_file = log_file
        self.file_handle = None

        if self.log_file:
            self.file_handle = open(self.log_file, 'w', encoding='utf-8')
            self._write_header()

    def _write_header(self) -> None:
        """Write log file header."""
        if self.file_handle:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            self.file_handle.write(f"Simulation Log - {timestamp}\n")
            self.file_handle.write("="*60 + "\n\n")

    def log(self, message: str, level: str = "info") -> None:
        """
        Log a message.

        Args:
            message: Message to log
            level: Log level (info, debug, warning, error)
        """
        if level == "debug" and not self.verbose:
            return

        formatted = self._format_message(message, level)

        if not self.quiet:
            print(formatted)

        if self.file_handle:
            self.file_handle.write(formatted + "\n")
            self.file_handle.flush()

    def _format_message(self, message: str, level: str) -> str:
        """Format message with level prefix."""
        if level == "error":
            return f"[ERROR] {message}"
        elif level == "warning":
            return f"[WARNING] {message}"
        elif level == "debug":
            return f"[DEBUG] {message}"
        else:
            return message

    def log_step(self, time: int, message: str) -> None:
        """Log a message stamped with the session clock."""
        self.log(f"[t={time}] {message}")

    def log_schedule(self, algorithm: str, steps: list) -> None:
        """
        Log an execution schedule, one line per step.

        Args:
            algorithm: Scheduling algorithm name
            steps: List of ExecutionStep
        """
        self.log(f"Schedule ({algorithm.upper()}): {len(steps)} steps")
        for step in steps:
            self.log(
                f"  {step.process_id}: start={step.start_time}, "
                f"duration={step.duration}, end={step.end_time}",
                "debug"
            )

    def log_allocation(
        self,
        time: int,
        name: str,
        size: int,
        success: bool,
        reason: str
    ) -> None:
        """
        Log a memory allocation request.

        Args:
            time: Session clock
            name: Process name
            size: Requested size
            success: Whether the request was satisfied
            reason: Reason for decision
        """
        status = "ALLOCATED" if success else "REJECTED"
        self.log_step(time, f"{name} requests {size} - {status} ({reason})")

    def log_safety(self, safe: bool, sequence: List[str]) -> None:
        """
        Log the verdict of a safety check.

        Args:
            safe: Whether the system is in a safe state
            sequence: Safe completion order (empty when unsafe)
        """
        if safe:
            self.log(f"System is in a safe state with sequence: {' -> '.join(sequence)}")
        else:
            self.log("System is in a deadlock state.", "warning")

    def close(self) -> None:
        """Close log file if open."""
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None

    def __del__(self):
        """Cleanup on destruction."""
        self.close()
