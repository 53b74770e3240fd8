"""Domain models for the block scheduling system.

This module contains the core records the assignment engine works on:
weekdays, time intervals, employees and the time blocks they can be
assigned to.
"""

from dataclasses import dataclass, field
from datetime import time
from enum import Enum
from typing import Iterable, Optional, Union


UNASSIGNED_SENTINEL = "--"


class Weekday(Enum):
    """Day of the week a time block or availability window falls on.

    Values are the single-letter codes used by the input workbooks.
    """

    SUNDAY = "U"
    MONDAY = "M"
    TUESDAY = "T"
    WEDNESDAY = "W"
    THURSDAY = "R"
    FRIDAY = "F"
    SATURDAY = "S"

    @classmethod
    def parse(cls, value: Union[str, "Weekday"]) -> "Weekday":
        """Parse a weekday from a code, a full name or a three-letter name.

        Args:
            value: e.g. "M", "monday", "Mon" or an existing Weekday.

        Raises:
            ValueError: If the value names no weekday.
        """
        if isinstance(value, Weekday):
            return value

        text = str(value).strip().upper()
        for day in cls:
            if text == day.value or text == day.name or (
                len(text) == 3 and day.name.startswith(text)
            ):
                return day

        raise ValueError(f"Unknown weekday: {value!r}")

    @property
    def label(self) -> str:
        """Human-readable day name."""
        return self.name.capitalize()


def format_time(t: time) -> str:
    """Format a time of day as e.g. '9:05 AM'."""
    hour = t.hour % 12 or 12
    suffix = "AM" if t.hour < 12 else "PM"
    return f"{hour}:{t.minute:02d} {suffix}"


@dataclass(frozen=True, order=True)
class Interval:
    """A closed range of time within a single day.

    Intervals order by start time, then by end time.

    Attributes:
        start: Time the interval begins.
        end: Time the interval ends (inclusive).
    """

    start: time
    end: time

    def __post_init__(self):
        if not isinstance(self.start, time) or not isinstance(self.end, time):
            raise TypeError("Interval bounds must be datetime.time values")
        if self.start > self.end:
            raise ValueError(
                f"Interval start {format_time(self.start)} is after "
                f"end {format_time(self.end)}"
            )

    @classmethod
    def from_minutes(cls, start_minutes: int, end_minutes: int) -> "Interval":
        """Create an interval from minutes past midnight."""
        return cls(
            start=time(*divmod(start_minutes, 60)),
            end=time(*divmod(end_minutes, 60)),
        )

    def contains(self, other: "Interval") -> bool:
        """Check if this interval fully contains another."""
        return self.start <= other.start and other.end <= self.end

    @property
    def duration_minutes(self) -> int:
        """Length of the interval in minutes."""
        return (self.end.hour * 60 + self.end.minute) - (
            self.start.hour * 60 + self.start.minute
        )

    def __str__(self) -> str:
        return f"[{format_time(self.start)} - {format_time(self.end)}]"


@dataclass(eq=False)
class TimeBlock:
    """A fixed-weekday, fixed-interval unit of work requiring a qualification.

    Attributes:
        id: Unique identifier for the block.
        label: Display label (e.g. course or session name).
        weekday: Day the block takes place.
        interval: Time range of the block.
        time_metric: Weight consumed against an employee's budget.
        qualification: Qualification code required to work the block.
        location: Where the block takes place.
        status: 0 if open for automatic assignment; non-zero if the block was
            assigned manually and must not be touched.
        paired_block_ids: Blocks that must be assigned to the same employee
            together with this one.
        assigned_employee: Employee currently holding the block, if any.
            For an open block this is set if and only if the block is in
            that employee's ``assigned_blocks``. An excluded block may name
            a manual holder whose ``assigned_blocks`` does not list it; the
            engine, ``SchedulingDataset.reset()`` and the validator leave
            such holders as they are.
    """

    id: int
    label: str
    weekday: Weekday
    interval: Interval
    time_metric: float
    qualification: str = ""
    location: str = ""
    status: int = 0
    paired_block_ids: list[int] = field(default_factory=list)
    assigned_employee: Optional["Employee"] = field(default=None, repr=False)

    def __post_init__(self):
        if self.time_metric <= 0:
            raise ValueError(
                f"Time block {self.id} has non-positive time metric {self.time_metric}"
            )
        self.qualification = self.qualification.strip().upper()

    @property
    def is_excluded(self) -> bool:
        """True if the block was pre-assigned and is skipped by the engine."""
        return self.status != 0

    @property
    def is_assigned(self) -> bool:
        """True if an employee holds this block."""
        return self.assigned_employee is not None

    @property
    def is_paired(self) -> bool:
        """True if the block is coupled to sibling blocks."""
        return bool(self.paired_block_ids)

    @property
    def assignee_name(self) -> str:
        """Assigned employee's name, or the unassigned sentinel."""
        if self.assigned_employee is None:
            return UNASSIGNED_SENTINEL
        return self.assigned_employee.full_name

    def clear_assignment(self) -> None:
        """Drop the back-reference to the assigned employee."""
        self.assigned_employee = None

    def __lt__(self, other: "TimeBlock") -> bool:
        if not isinstance(other, TimeBlock):
            return NotImplemented
        return (self.interval, self.id) < (other.interval, other.id)

    def __str__(self) -> str:
        return (
            f"[@id = {self.id}; @label = {self.label}; "
            f"@time_metric = {self.time_metric}; @day = {self.weekday.value}]"
        )


@dataclass(eq=False)
class Employee:
    """Represents a person who can be assigned time blocks.

    Employees compare, hash and sort by ``priority`` alone. Two distinct
    employees sharing a priority are equal, so sorted or hashed collections
    keep only one of them.

    Attributes:
        id: Unique identifier for the employee.
        priority: Ordering key; the engine tries larger values first.
        first_name: Given name.
        last_name: Family name.
        requested_time_metric: Workload budget.
        qualifications: Qualification codes the employee holds.
        availability: Availability windows per weekday (unsorted).
        assigned_time_metric: Running total of assigned time metric.
        assigned_blocks: Assigned blocks in assignment order.
    """

    id: int
    priority: int
    first_name: str = ""
    last_name: str = ""
    requested_time_metric: float = 0.0
    qualifications: set[str] = field(default_factory=set)
    availability: dict[Weekday, list[Interval]] = field(
        default_factory=lambda: {day: [] for day in Weekday}
    )
    assigned_time_metric: float = 0.0
    assigned_blocks: list[TimeBlock] = field(default_factory=list, repr=False)

    @property
    def full_name(self) -> str:
        """Name in 'Last, First' form."""
        return f"{self.last_name}, {self.first_name}"

    @property
    def remaining_time_metric(self) -> float:
        """Budget left before the requested time metric is reached."""
        return self.requested_time_metric - self.assigned_time_metric

    def add_qualification(self, code: str) -> None:
        """Register a qualification code (normalized to uppercase)."""
        self.qualifications.add(code.strip().upper())

    def add_availability(self, weekday: Weekday, interval: Interval) -> None:
        """Add an availability window on a weekday."""
        self.availability.setdefault(weekday, []).append(interval)

    def get_availability(self, weekday: Weekday) -> list[Interval]:
        """Get availability windows for a weekday."""
        return self.availability.get(weekday, [])

    def assign(self, block: TimeBlock) -> None:
        """Assign a single block to this employee."""
        block.assigned_employee = self
        self.assigned_blocks.append(block)
        self.assigned_time_metric += block.time_metric

    def assign_all(self, blocks: Iterable[TimeBlock]) -> None:
        """Assign a validated group of blocks in one step."""
        for block in blocks:
            self.assign(block)

    def has_remaining_budget(self, block: TimeBlock) -> bool:
        """Check if the block fits within the requested time metric."""
        return self.assigned_time_metric + block.time_metric <= self.requested_time_metric

    def is_available_for(self, block: TimeBlock) -> bool:
        """Check if an availability window on the block's day contains it."""
        return any(
            window.contains(block.interval)
            for window in self.get_availability(block.weekday)
        )

    def has_conflict(
        self,
        block: TimeBlock,
        pending: Iterable[TimeBlock] = (),
    ) -> bool:
        """Check if an assigned block on the same day contains the block.

        Args:
            block: Block being considered.
            pending: Blocks selected for this employee but not yet committed.
        """
        for assigned in [*self.assigned_blocks, *pending]:
            if assigned is block:
                continue
            if assigned.weekday == block.weekday and assigned.interval.contains(
                block.interval
            ):
                return True
        return False

    def reset(self) -> None:
        """Clear all assignments and the running time metric."""
        self.assigned_blocks.clear()
        self.assigned_time_metric = 0.0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Employee):
            return NotImplemented
        return self.priority == other.priority

    def __hash__(self) -> int:
        return hash(self.priority)

    def __lt__(self, other: "Employee") -> bool:
        if not isinstance(other, Employee):
            return NotImplemented
        return self.priority < other.priority

    def __str__(self) -> str:
        quals = ",".join(sorted(self.qualifications))
        return (
            f"{self.full_name} [@id = {self.id}; @priority = {self.priority}; "
            f"@requested_time_metric = {self.requested_time_metric:.2f}; "
            f"@assigned_time_metric = {self.assigned_time_metric:.2f}; "
            f"@qualifications = {{{quals}}}]"
        )
