"""Greedy assignment of time blocks to employees.

The quick assigner makes a single deterministic pass:
1. Qualifications are visited from fewest to most qualified employees
2. Within a qualification, blocks with the largest time metric go first
3. Candidates for a block are the employees whose availability contains
   it, tried from the highest priority value down
4. The first candidate with budget and no conflict gets the block; paired
   blocks are committed together or not at all

The pass is strictly sequential. Each commit is final before the next
block is looked at.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from blockscheduler.domain.dataset import SchedulingDataset
from blockscheduler.domain.events import (
    AssignmentEvent,
    EventListener,
    EventLog,
    EventType,
)
from blockscheduler.domain.models import Employee, TimeBlock
from blockscheduler.scheduling.index import ScheduleIndex

logger = logging.getLogger(__name__)


class AssignmentMode(Enum):
    """How the engine searches for assignments."""

    QUICK = "quick"  # Single greedy pass
    MULTI = "multi"  # Enumerate all feasible schedules (not implemented)


@dataclass
class AssignmentConfig:
    """Configuration for an assignment run.

    Attributes:
        mode: Search mode.
        collect_events: Keep every event on the result. When False events
            are still logged and passed to the listener.
    """

    mode: AssignmentMode = AssignmentMode.QUICK
    collect_events: bool = True


@dataclass
class AssignmentResult:
    """Outcome of an assignment run.

    The dataset's entities carry the actual assignments; the result holds
    counters and the event trace.
    """

    mode: AssignmentMode
    qualification_order: list[str] = field(default_factory=list)
    assigned_count: int = 0
    unassigned_count: int = 0
    excluded_count: int = 0
    events: list[AssignmentEvent] = field(default_factory=list)

    def events_of_type(self, event_type: EventType) -> list[AssignmentEvent]:
        """Get events of one type."""
        return [e for e in self.events if e.event_type == event_type]

    @property
    def assignments(self) -> list[tuple[int, int]]:
        """(block id, employee id) pairs in commit order."""
        return [
            (e.block_id, e.employee_id)
            for e in self.events_of_type(EventType.BLOCK_ASSIGNED)
        ]


class QuickAssigner:
    """Greedy, scarcity-first assignment engine.

    Example:
        >>> index = ScheduleIndex.build(dataset)
        >>> result = QuickAssigner().assign(dataset, index)
        >>> result.assigned_count
        42
    """

    def __init__(
        self,
        config: Optional[AssignmentConfig] = None,
        listener: Optional[EventListener] = None,
    ):
        self.config = config or AssignmentConfig()
        self.listener = listener

    def assign(self, dataset: SchedulingDataset, index: ScheduleIndex) -> AssignmentResult:
        """Run one assignment pass over the dataset.

        Args:
            dataset: Dataset whose employees and blocks are mutated.
            index: Indexes built from the same dataset.

        Returns:
            AssignmentResult with counters and the event trace.
        """
        log = EventLog(logger, self.listener, collect=self.config.collect_events)
        result = AssignmentResult(mode=AssignmentMode.QUICK)

        logger.info("Making quick assignments...")

        for code, count in self._qualifications_by_scarcity(dataset):
            result.qualification_order.append(code)

            if count == 0:
                log.emit(
                    EventType.NO_QUALIFIED_EMPLOYEES,
                    f"{code} has no qualified employees",
                    qualification=code,
                )
                continue

            log.emit(
                EventType.QUALIFICATION_STARTED,
                f"{code} has {count} qualified employees",
                qualification=code,
                details={"qualified_employees": count},
            )

            for block in self._blocks_by_time_metric(dataset, code):
                self._assign_block(block, dataset, index, log, result)

        result.excluded_count = sum(1 for b in dataset.time_blocks.values() if b.is_excluded)
        result.unassigned_count = len(dataset.unassigned_blocks)

        logger.info(
            "Finished making quick assignments: %d assigned, %d unassigned, %d excluded",
            result.assigned_count,
            result.unassigned_count,
            result.excluded_count,
        )
        result.events = log.events
        return result

    def _qualifications_by_scarcity(self, dataset: SchedulingDataset) -> list[tuple[str, int]]:
        """Order qualifications by qualified-employee count, fewest first."""
        counts = dataset.qualification_counts
        return sorted(counts.items(), key=lambda item: item[1])

    def _blocks_by_time_metric(self, dataset: SchedulingDataset, code: str) -> list[TimeBlock]:
        """Blocks requiring a qualification, largest time metric first."""
        return sorted(
            dataset.blocks_for_qualification(code),
            key=lambda b: b.time_metric,
            reverse=True,
        )

    def _assign_block(
        self,
        block: TimeBlock,
        dataset: SchedulingDataset,
        index: ScheduleIndex,
        log: EventLog,
        result: AssignmentResult,
    ) -> None:
        """Try to place one block with the first eligible candidate."""
        if block.is_excluded:
            log.emit(
                EventType.BLOCK_EXCLUDED,
                f"Time block marked as manually assigned {block}",
                block_id=block.id,
                qualification=block.qualification,
            )
            return

        if block.is_assigned:
            log.emit(
                EventType.BLOCK_ALREADY_ASSIGNED,
                f"Time block already assigned {block}",
                block_id=block.id,
                employee_id=block.assigned_employee.id,
                qualification=block.qualification,
            )
            return

        candidates = index.candidates_for(block)
        if candidates is None:
            log.emit(
                EventType.NO_CANDIDATES,
                f"No qualified employees for time block {block}",
                block_id=block.id,
                qualification=block.qualification,
            )
            return

        logger.debug("Found %d available employee(s) for %s", len(candidates), block)

        for candidate in candidates:
            if not candidate.has_remaining_budget(block):
                log.emit(
                    EventType.BUDGET_EXHAUSTED,
                    f"{candidate.full_name} [@priority = {candidate.priority}] "
                    f"has a full schedule",
                    block_id=block.id,
                    employee_id=candidate.id,
                    qualification=block.qualification,
                )
                continue

            if block.is_paired:
                group = self._validate_group(candidate, block, dataset)
                if group is None:
                    log.emit(
                        EventType.GROUP_REJECTED,
                        f"{candidate.full_name} cannot take every session paired "
                        f"with {block.label}",
                        block_id=block.id,
                        employee_id=candidate.id,
                        qualification=block.qualification,
                    )
                    continue
                self._commit(candidate, group, log, result)
                return

            if candidate.has_conflict(block):
                log.emit(
                    EventType.CONFLICT_SKIPPED,
                    f"{candidate.full_name} has conflict with {block.label}",
                    block_id=block.id,
                    employee_id=candidate.id,
                    qualification=block.qualification,
                )
                continue

            self._commit(candidate, [block], log, result)
            return

        log.emit(
            EventType.BLOCK_UNASSIGNED,
            f"No eligible employee for time block {block}",
            block_id=block.id,
            qualification=block.qualification,
            details={"candidates": len(candidates)},
        )

    def _validate_group(
        self,
        candidate: Employee,
        block: TimeBlock,
        dataset: SchedulingDataset,
    ) -> Optional[list[TimeBlock]]:
        """Check a paired group against one candidate without committing.

        Members are walked in declared order against a running projected
        time metric. Each must fit the budget, lie inside the candidate's
        availability and not conflict with committed or already selected
        blocks. A sibling that is excluded or held by anyone fails the group.

        Returns:
            The group to commit, or None if any member fails.
        """
        projected = candidate.assigned_time_metric
        selected: list[TimeBlock] = []

        for member in dataset.paired_group(block):
            if member is not block and (member.is_excluded or member.is_assigned):
                return None

            projected += member.time_metric
            if projected > candidate.requested_time_metric:
                return None
            if not candidate.is_available_for(member):
                return None
            if candidate.has_conflict(member, pending=selected):
                return None

            selected.append(member)

        return selected

    def _commit(
        self,
        employee: Employee,
        blocks: list[TimeBlock],
        log: EventLog,
        result: AssignmentResult,
    ) -> None:
        """Assign blocks to an employee and record the events."""
        employee.assign_all(blocks)
        for block in blocks:
            log.emit(
                EventType.BLOCK_ASSIGNED,
                f"{employee.full_name} [@id = {employee.id}; @assigned = "
                f"{employee.assigned_time_metric} / {employee.requested_time_metric}] "
                f"has been assigned {block.label} on {block.weekday.value} {block.interval}",
                block_id=block.id,
                employee_id=employee.id,
                qualification=block.qualification,
            )
        result.assigned_count += len(blocks)


class MultiAssigner:
    """Placeholder for enumerating every feasible schedule.

    The search contract for this mode is not defined yet.
    """

    def __init__(
        self,
        config: Optional[AssignmentConfig] = None,
        listener: Optional[EventListener] = None,
    ):
        self.config = config or AssignmentConfig(mode=AssignmentMode.MULTI)
        self.listener = listener

    def assign(self, dataset: SchedulingDataset, index: ScheduleIndex) -> AssignmentResult:
        raise NotImplementedError("Multi-assign mode is not yet implemented")


def create_assigner(
    config: Optional[AssignmentConfig] = None,
    listener: Optional[EventListener] = None,
):
    """Create the assigner matching a config's mode."""
    config = config or AssignmentConfig()
    if config.mode == AssignmentMode.MULTI:
        return MultiAssigner(config, listener)
    return QuickAssigner(config, listener)
