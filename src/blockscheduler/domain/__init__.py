"""Domain models and dataset construction for scheduling."""

from blockscheduler.domain.dataset import DatasetBuilder, SchedulingDataset
from blockscheduler.domain.events import AssignmentEvent, EventLog, EventType
from blockscheduler.domain.models import (
    UNASSIGNED_SENTINEL,
    Employee,
    Interval,
    TimeBlock,
    Weekday,
    format_time,
)

__all__ = [
    # Models
    "Employee",
    "Interval",
    "TimeBlock",
    "Weekday",
    "UNASSIGNED_SENTINEL",
    "format_time",
    # Dataset
    "DatasetBuilder",
    "SchedulingDataset",
    # Events
    "AssignmentEvent",
    "EventLog",
    "EventType",
]
