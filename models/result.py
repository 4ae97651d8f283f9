"""
Operation result returned by simulator sessions.
"""

from dataclasses import dataclass
from typing import Any, Optional

from utils.errors import SimulatorError


@dataclass
class OperationResult:
    """
    Outcome of a session operation.

    Attributes:
        success: Whether the operation was applied
        message: Human-readable description of the outcome
        error: The recoverable error that caused a failure (None on success)
        value: Operation payload (e.g. the created process or a safety verdict)
    """
    success: bool
    message: str = ""
    error: Optional[SimulatorError] = None
    value: Any = None

    @classmethod
    def ok(cls, message: str = "", value: Any = None) -> "OperationResult":
        return cls(True, message, None, value)

    @classmethod
    def failed(cls, error: SimulatorError) -> "OperationResult":
        return cls(False, str(error), error, None)

    @property
    def error_kind(self) -> Optional[str]:
        return self.error.kind if self.error else None

    def __bool__(self) -> bool:
        return self.success
