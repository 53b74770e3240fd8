"""Normalized scheduling dataset and the builder that produces it.

The builder is where configuration gaps are caught: unregistered
qualification codes, availability for unknown employees, pairings that
name missing blocks and duplicate ids. None of these are fatal; the
offending record or reference is dropped and a diagnostic event is
recorded on the dataset.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from blockscheduler.domain.events import (
    AssignmentEvent,
    EventListener,
    EventLog,
    EventType,
)
from blockscheduler.domain.models import Employee, Interval, TimeBlock, Weekday

logger = logging.getLogger(__name__)


@dataclass
class SchedulingDataset:
    """Everything the assignment engine needs for one run.

    Attributes:
        qualifications: Registered qualification codes in registration order.
        employees: Employees keyed by id.
        time_blocks: Time blocks keyed by id, in load order.
        diagnostics: Configuration-gap events raised while building.
    """

    qualifications: list[str] = field(default_factory=list)
    employees: dict[int, Employee] = field(default_factory=dict)
    time_blocks: dict[int, TimeBlock] = field(default_factory=dict)
    diagnostics: list[AssignmentEvent] = field(default_factory=list)

    @property
    def qualification_counts(self) -> dict[str, int]:
        """Number of employees holding each registered qualification."""
        counts = {code: 0 for code in self.qualifications}
        for employee in self.employees.values():
            for code in employee.qualifications:
                if code in counts:
                    counts[code] += 1
        return counts

    def blocks_for_qualification(self, code: str) -> list[TimeBlock]:
        """Get blocks requiring a qualification, in load order."""
        return [b for b in self.time_blocks.values() if b.qualification == code]

    def qualification_tally(self) -> dict[str, dict[str, int]]:
        """Per-qualification counts of holders, open blocks and assigned blocks.

        Excluded blocks are left out of both block counts.

        Returns:
            Dict keyed by qualification code, in registration order, with
            ``qualified_employees``, ``blocks`` and ``assigned`` counts.
        """
        counts = self.qualification_counts
        tally = {}
        for code in self.qualifications:
            blocks = [b for b in self.blocks_for_qualification(code) if not b.is_excluded]
            tally[code] = {
                "qualified_employees": counts[code],
                "blocks": len(blocks),
                "assigned": sum(1 for b in blocks if b.is_assigned),
            }
        return tally

    def paired_group(self, block: TimeBlock) -> list[TimeBlock]:
        """Get the block followed by its paired siblings in declared order.

        Self references and repeated ids are dropped.
        """
        group = [block]
        seen = {block.id}
        for block_id in block.paired_block_ids:
            if block_id in seen or block_id not in self.time_blocks:
                continue
            seen.add(block_id)
            group.append(self.time_blocks[block_id])
        return group

    def reset(self) -> None:
        """Clear automatic assignment state on every employee and open block.

        Excluded blocks keep whatever employee was attached to them, even
        though that employee's ``assigned_blocks`` is cleared.
        """
        for employee in self.employees.values():
            employee.reset()
        for block in self.time_blocks.values():
            if not block.is_excluded:
                block.clear_assignment()

    @property
    def assigned_blocks(self) -> list[TimeBlock]:
        """Blocks that currently hold an employee."""
        return [b for b in self.time_blocks.values() if b.is_assigned]

    @property
    def unassigned_blocks(self) -> list[TimeBlock]:
        """Open blocks that no employee holds."""
        return [
            b for b in self.time_blocks.values()
            if not b.is_assigned and not b.is_excluded
        ]


class DatasetBuilder:
    """Incrementally builds a SchedulingDataset.

    Records should be added in dependency order: qualifications, then
    employees, then availability, then time blocks. Pairings are resolved
    in ``build()`` once every block is known.

    Example:
        >>> builder = DatasetBuilder()
        >>> builder.add_qualification("RN")
        >>> builder.add_employee(Employee(id=1, priority=5), ["RN"])
        >>> dataset = builder.build()
    """

    def __init__(self, listener: Optional[EventListener] = None):
        self._dataset = SchedulingDataset()
        self._log = EventLog(logger, listener)

    @property
    def diagnostics(self) -> list[AssignmentEvent]:
        """Diagnostics recorded so far."""
        return self._log.events

    def add_qualification(self, code: str) -> str:
        """Register a qualification code.

        Returns:
            The normalized code.
        """
        normalized = code.strip().upper()
        if normalized and normalized not in self._dataset.qualifications:
            self._dataset.qualifications.append(normalized)
        return normalized

    def add_employee(
        self,
        employee: Employee,
        qualifications: Iterable[str] = (),
    ) -> bool:
        """Add an employee and the qualifications they hold.

        Unregistered qualification codes are dropped with a diagnostic.

        Returns:
            True if the employee was added, False for a duplicate id.
        """
        if employee.id in self._dataset.employees:
            self._log.emit(
                EventType.DUPLICATE_RECORD,
                f"Employee [@id = {employee.id}] is already registered",
                employee_id=employee.id,
            )
            return False

        codes = list(employee.qualifications) + list(qualifications)
        employee.qualifications = set()
        for code in codes:
            normalized = code.strip().upper()
            if not normalized:
                continue
            if normalized in self._dataset.qualifications:
                employee.qualifications.add(normalized)
            else:
                self._log.emit(
                    EventType.UNREGISTERED_QUALIFICATION,
                    f"Employee [@id = {employee.id}] contains unregistered "
                    f"qualification [ {normalized} ]",
                    employee_id=employee.id,
                    qualification=normalized,
                )

        self._dataset.employees[employee.id] = employee
        return True

    def add_availability(
        self,
        employee_id: int,
        weekday: Union[Weekday, str],
        interval: Interval,
        record_id: Optional[int] = None,
    ) -> bool:
        """Attach an availability window to an employee.

        Returns:
            True if the window was attached, False for an unknown employee.
        """
        employee = self._dataset.employees.get(employee_id)
        if employee is None:
            label = "" if record_id is None else f" [ @id = {record_id} ]"
            self._log.emit(
                EventType.UNKNOWN_EMPLOYEE,
                f"Availability entry{label} contains unregistered EID "
                f"[ @eid = {employee_id} ]",
                employee_id=employee_id,
                details={"record_id": record_id},
            )
            return False

        employee.add_availability(Weekday.parse(weekday), interval)
        return True

    def add_time_block(self, block: TimeBlock) -> bool:
        """Add a time block.

        Blocks requiring an unregistered qualification are kept (so they
        appear in reports) but no employee can ever match them.

        Returns:
            True if the block was added, False for a duplicate id.
        """
        if block.id in self._dataset.time_blocks:
            self._log.emit(
                EventType.DUPLICATE_RECORD,
                f"Time block [@id = {block.id}] is already registered",
                block_id=block.id,
            )
            return False

        if block.qualification not in self._dataset.qualifications:
            self._log.emit(
                EventType.UNREGISTERED_QUALIFICATION,
                f"Time block {block} requires unregistered qualification "
                f"[ {block.qualification} ]",
                block_id=block.id,
                qualification=block.qualification,
            )

        self._dataset.time_blocks[block.id] = block
        return True

    def record_malformed(self, table: str, row: object, reason: str) -> None:
        """Record an input row that could not be parsed."""
        self._log.emit(
            EventType.MALFORMED_RECORD,
            f"Skipping malformed {table} row {row!r}: {reason}",
            details={"table": table, "reason": reason},
        )

    def build(self) -> SchedulingDataset:
        """Resolve pairings and return the dataset."""
        for block in self._dataset.time_blocks.values():
            resolved = []
            for block_id in block.paired_block_ids:
                if block_id in self._dataset.time_blocks:
                    resolved.append(block_id)
                else:
                    self._log.emit(
                        EventType.UNKNOWN_PAIRED_BLOCK,
                        f"Time block {block} is paired with unknown block "
                        f"[@id = {block_id}]",
                        block_id=block.id,
                        details={"paired_block_id": block_id},
                    )
            block.paired_block_ids = resolved

        self._dataset.diagnostics = list(self._log.events)
        return self._dataset
