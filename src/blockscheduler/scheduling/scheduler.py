"""Main scheduler interface.

This module provides the high-level Scheduler class that builds the
interval indexes for a dataset and runs the configured assigner over it.
"""

from typing import Optional

from blockscheduler.domain.dataset import SchedulingDataset
from blockscheduler.domain.events import EventListener
from blockscheduler.scheduling.assigner import (
    AssignmentConfig,
    AssignmentResult,
    create_assigner,
)
from blockscheduler.scheduling.index import ScheduleIndex


class Scheduler:
    """High-level scheduler for assigning time blocks.

    Example:
        >>> scheduler = Scheduler()
        >>> dataset = load_dataset("blocks.json")
        >>> result = scheduler.run(dataset)
    """

    def __init__(
        self,
        config: Optional[AssignmentConfig] = None,
        listener: Optional[EventListener] = None,
    ):
        """Initialize scheduler.

        Args:
            config: Assignment configuration (mode, event collection).
            listener: Callback receiving every assignment event.
        """
        self.config = config or AssignmentConfig()
        self.listener = listener
        self.assigner = create_assigner(self.config, listener)

    def build_index(self, dataset: SchedulingDataset) -> ScheduleIndex:
        """Build the interval indexes for a dataset."""
        return ScheduleIndex.build(dataset)

    def run(
        self,
        dataset: SchedulingDataset,
        index: Optional[ScheduleIndex] = None,
    ) -> AssignmentResult:
        """Assign the dataset's open blocks.

        Args:
            dataset: Dataset to assign; its entities are mutated in place.
            index: Prebuilt indexes. Built from the dataset if omitted.

        Returns:
            AssignmentResult for the run.

        Raises:
            NotImplementedError: If the configured mode has no algorithm.
        """
        if index is None:
            index = self.build_index(dataset)
        return self.assigner.assign(dataset, index)

    def rerun(self, dataset: SchedulingDataset) -> AssignmentResult:
        """Clear previous automatic assignments and run again."""
        dataset.reset()
        return self.run(dataset)

    def run_with_stats(
        self,
        dataset: SchedulingDataset,
    ) -> tuple[AssignmentResult, dict]:
        """Run and return statistics.

        Returns:
            Tuple of (result, stats_dict).
        """
        index = self.build_index(dataset)
        result = self.run(dataset, index)
        stats = self._calculate_stats(dataset, result, index)
        return result, stats

    def _calculate_stats(
        self,
        dataset: SchedulingDataset,
        result: AssignmentResult,
        index: ScheduleIndex,
    ) -> dict:
        """Calculate run statistics."""
        blocks = list(dataset.time_blocks.values())
        employees = list(dataset.employees.values())

        total_metric = sum(b.time_metric for b in blocks if not b.is_excluded)
        assigned_metric = sum(e.assigned_time_metric for e in employees)
        requested_metric = sum(e.requested_time_metric for e in employees)

        eligible_blocks = {}
        for employee in employees:
            fitting = set()
            for weekday, windows in employee.availability.items():
                for window in windows:
                    for code in employee.qualifications:
                        fitting.update(
                            b.id for b in index.blocks_within(weekday, code, window)
                        )
            eligible_blocks[employee.id] = len(fitting)

        return {
            "total_blocks": len(blocks),
            "assigned_blocks": sum(1 for b in blocks if b.is_assigned and not b.is_excluded),
            "unassigned_blocks": result.unassigned_count,
            "excluded_blocks": result.excluded_count,
            "total_employees": len(employees),
            "employees_with_assignments": sum(1 for e in employees if e.assigned_blocks),
            "total_time_metric": total_metric,
            "assigned_time_metric": assigned_metric,
            "requested_time_metric": requested_metric,
            "fill_rate": (assigned_metric / total_metric * 100) if total_metric else 0.0,
            "qualification_order": list(result.qualification_order),
            "by_qualification": dataset.qualification_tally(),
            "eligible_blocks": eligible_blocks,
            "diagnostics": len(dataset.diagnostics),
        }
