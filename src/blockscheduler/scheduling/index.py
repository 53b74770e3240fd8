"""Per-weekday, per-qualification interval indexes over a dataset."""

from dataclasses import dataclass, field
from typing import Optional

from blockscheduler.domain.dataset import SchedulingDataset
from blockscheduler.domain.models import Employee, Interval, TimeBlock, Weekday
from blockscheduler.structures.interval_tree import IntervalTree


@dataclass
class ScheduleIndex:
    """Interval indexes keyed by weekday, then qualification code.

    Built once before matching and treated as read-only while the engine
    runs.

    Attributes:
        employees: Availability trees with Employee payloads.
        blocks: Time block trees with TimeBlock payloads.
    """

    employees: dict[Weekday, dict[str, IntervalTree[Employee]]] = field(
        default_factory=lambda: {day: {} for day in Weekday}
    )
    blocks: dict[Weekday, dict[str, IntervalTree[TimeBlock]]] = field(
        default_factory=lambda: {day: {} for day in Weekday}
    )

    @classmethod
    def build(cls, dataset: SchedulingDataset) -> "ScheduleIndex":
        """Build both index families from a dataset.

        Every availability window is indexed once under each qualification
        its employee holds.
        """
        index = cls()

        for employee in dataset.employees.values():
            for weekday, windows in employee.availability.items():
                for window in windows:
                    for code in employee.qualifications:
                        index.add_availability(weekday, code, window, employee)

        for block in dataset.time_blocks.values():
            index.add_block(block)

        return index

    def add_availability(
        self,
        weekday: Weekday,
        qualification: str,
        interval: Interval,
        employee: Employee,
    ) -> None:
        """Index an availability window for one qualification."""
        bucket = self.employees[weekday].setdefault(qualification, IntervalTree())
        bucket.insert(interval, employee)

    def add_block(self, block: TimeBlock) -> None:
        """Index a time block under its weekday and qualification."""
        bucket = self.blocks[block.weekday].setdefault(block.qualification, IntervalTree())
        bucket.insert(block.interval, block)

    def employee_tree(
        self, weekday: Weekday, qualification: str
    ) -> Optional[IntervalTree[Employee]]:
        """Get the availability tree for a bucket, or None if absent."""
        return self.employees.get(weekday, {}).get(qualification)

    def block_tree(
        self, weekday: Weekday, qualification: str
    ) -> Optional[IntervalTree[TimeBlock]]:
        """Get the time block tree for a bucket, or None if absent."""
        return self.blocks.get(weekday, {}).get(qualification)

    def candidates_for(self, block: TimeBlock) -> Optional[list[Employee]]:
        """Get employees whose availability contains a block.

        Candidates are ordered by descending priority.

        Returns:
            Candidate list, or None if no one holding the block's
            qualification has any availability on its weekday.
        """
        tree = self.employee_tree(block.weekday, block.qualification)
        if tree is None:
            return None
        return tree.query(block.interval, reverse=True)

    def blocks_within(
        self, weekday: Weekday, qualification: str, window: Interval
    ) -> list[TimeBlock]:
        """Get blocks of a qualification that fit inside a window.

        Walks the block tree's nodes, so it returns blocks contained by
        the window rather than blocks containing it.
        """
        tree = self.block_tree(weekday, qualification)
        if tree is None:
            return []
        result = []
        for node in tree.nodes():
            if window.contains(node.interval):
                result.extend(node.payloads)
        return result
