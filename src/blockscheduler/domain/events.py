"""Structured events emitted while building datasets and assigning blocks.

Formatting is left to whoever observes the events (the CLI, a report, a
test). Every event is also forwarded to the emitting module's logger.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional


class EventType(Enum):
    """Kinds of events produced by the loader and the assignment engine."""

    # Configuration gaps
    UNREGISTERED_QUALIFICATION = "unregistered_qualification"
    UNKNOWN_EMPLOYEE = "unknown_employee"
    UNKNOWN_PAIRED_BLOCK = "unknown_paired_block"
    DUPLICATE_RECORD = "duplicate_record"
    MALFORMED_RECORD = "malformed_record"

    # Assignment trace
    QUALIFICATION_STARTED = "qualification_started"
    NO_QUALIFIED_EMPLOYEES = "no_qualified_employees"
    BLOCK_EXCLUDED = "block_excluded"
    BLOCK_ALREADY_ASSIGNED = "block_already_assigned"
    NO_CANDIDATES = "no_candidates"
    BUDGET_EXHAUSTED = "budget_exhausted"
    CONFLICT_SKIPPED = "conflict_skipped"
    GROUP_REJECTED = "group_rejected"
    BLOCK_ASSIGNED = "block_assigned"
    BLOCK_UNASSIGNED = "block_unassigned"


# Level each event is logged at
EVENT_LEVELS = {
    EventType.UNREGISTERED_QUALIFICATION: logging.WARNING,
    EventType.UNKNOWN_EMPLOYEE: logging.ERROR,
    EventType.UNKNOWN_PAIRED_BLOCK: logging.WARNING,
    EventType.DUPLICATE_RECORD: logging.WARNING,
    EventType.MALFORMED_RECORD: logging.ERROR,
    EventType.QUALIFICATION_STARTED: logging.INFO,
    EventType.NO_QUALIFIED_EMPLOYEES: logging.WARNING,
    EventType.BLOCK_EXCLUDED: logging.DEBUG,
    EventType.BLOCK_ALREADY_ASSIGNED: logging.DEBUG,
    EventType.NO_CANDIDATES: logging.WARNING,
    EventType.BUDGET_EXHAUSTED: logging.DEBUG,
    EventType.CONFLICT_SKIPPED: logging.DEBUG,
    EventType.GROUP_REJECTED: logging.DEBUG,
    EventType.BLOCK_ASSIGNED: logging.INFO,
    EventType.BLOCK_UNASSIGNED: logging.WARNING,
}


@dataclass
class AssignmentEvent:
    """A single diagnostic or trace event."""

    event_type: EventType
    message: str
    block_id: Optional[int] = None
    employee_id: Optional[int] = None
    qualification: Optional[str] = None
    details: dict = field(default_factory=dict)

    @property
    def level(self) -> int:
        """Logging level for this event."""
        return EVENT_LEVELS.get(self.event_type, logging.INFO)

    @property
    def is_diagnostic(self) -> bool:
        """True for events worth surfacing to a user (warnings and above)."""
        return self.level >= logging.WARNING

    def __str__(self) -> str:
        return f"[{self.event_type.value}] {self.message}"


EventListener = Callable[[AssignmentEvent], None]


class EventLog:
    """Collects events, logs them and forwards them to an optional listener.

    Args:
        logger: Logger the events are written to.
        listener: Callback invoked with every event.
        collect: If False, events are logged and forwarded but not stored.
    """

    def __init__(
        self,
        logger: logging.Logger,
        listener: Optional[EventListener] = None,
        collect: bool = True,
    ):
        self.logger = logger
        self.listener = listener
        self.collect = collect
        self.events: list[AssignmentEvent] = []

    def emit(self, event_type: EventType, message: str, **kwargs) -> AssignmentEvent:
        """Record an event and return it."""
        event = AssignmentEvent(event_type=event_type, message=message, **kwargs)
        self.logger.log(event.level, "%s", message)
        if self.collect:
            self.events.append(event)
        if self.listener is not None:
            self.listener(event)
        return event

    def of_type(self, event_type: EventType) -> list[AssignmentEvent]:
        """Get collected events of one type."""
        return [e for e in self.events if e.event_type == event_type]

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self):
        return iter(self.events)
