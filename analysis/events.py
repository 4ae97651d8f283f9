"""
Event Model for the OS Concepts Simulator.

Defines event types for tracking session actions. Sessions append one event
per operation so the front end can render a history/log panel.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class EventType(Enum):
    """Types of events in a simulation session."""
    SCHEDULED = "scheduled"
    ALLOCATION = "allocation"
    DEALLOCATION = "deallocation"
    REJECTION = "rejection"
    RECONFIGURE = "reconfigure"
    PROCESS_ADDED = "process_added"
    PROCESS_REMOVED = "process_removed"
    SAFETY_CHECK = "safety_check"


@dataclass
class SimulationEvent:
    """
    Represents a single event in a session.

    Attributes:
        time: Session clock when the event occurred
        event_type: Type of event
        subject: Process name or id involved (if applicable)
        amount: Size or vector involved (if applicable)
        message: Human-readable description
        reason: Reason for rejection (if applicable)
    """
    time: int
    event_type: EventType
    subject: Optional[str] = None
    amount: Optional[object] = None
    message: str = ""
    reason: str = ""

    def __str__(self) -> str:
        """Format event for logging."""
        base = f"[t={self.time}]"
        if self.subject is not None:
            base += f" {self.subject}"

        if self.event_type == EventType.ALLOCATION:
            return f"{base} allocated {self.amount} ({self.message})"
        elif self.event_type == EventType.DEALLOCATION:
            return f"{base} deallocated ({self.message})"
        elif self.event_type == EventType.REJECTION:
            return f"{base} - REJECTED ({self.reason})"
        elif self.event_type == EventType.SAFETY_CHECK:
            return f"{base} - SAFETY CHECK ({self.message})"
        else:
            return f"{base} - {self.event_type.value}: {self.message}"


@dataclass
class EventLog:
    """Collection of session events."""
    events: list = None

    def __post_init__(self):
        if self.events is None:
            self.events = []

    def add(self, event: SimulationEvent) -> None:
        """Add an event to the log."""
        self.events.append(event)

    def get_events_by_type(self, event_type: EventType) -> list:
        """Get all events of a specific type."""
        return [e for e in self.events if e.event_type == event_type]

    def get_events_for(self, subject: str) -> list:
        """Get all events involving a specific process."""
        return [e for e in self.events if e.subject == subject]

    def clear(self) -> None:
        self.events = []

    def display(self) -> str:
        """Format all events for display."""
        return "\n".join(str(event) for event in self.events)
