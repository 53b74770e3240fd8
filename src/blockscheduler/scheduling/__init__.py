"""Assignment engine and the interval indexes it queries."""

from blockscheduler.scheduling.assigner import (
    AssignmentConfig,
    AssignmentMode,
    AssignmentResult,
    MultiAssigner,
    QuickAssigner,
    create_assigner,
)
from blockscheduler.scheduling.index import ScheduleIndex
from blockscheduler.scheduling.scheduler import Scheduler

__all__ = [
    # Core scheduler
    "Scheduler",
    # Assigners
    "QuickAssigner",
    "MultiAssigner",
    "create_assigner",
    # Configuration and results
    "AssignmentConfig",
    "AssignmentMode",
    "AssignmentResult",
    # Indexes
    "ScheduleIndex",
]
