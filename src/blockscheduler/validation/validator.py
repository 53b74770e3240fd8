"""Validation module for verifying assignment correctness.

This module re-checks every constraint the assignment engine is meant to
uphold, directly against the final entity state. A dataset produced by the
engine should always pass.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from blockscheduler.domain.dataset import SchedulingDataset
from blockscheduler.domain.models import Employee, TimeBlock

# Tolerance for floating point time metric sums
METRIC_EPSILON = 1e-9


class ValidationErrorType(Enum):
    """Types of validation errors."""

    BUDGET_EXCEEDED = "budget_exceeded"
    METRIC_MISMATCH = "metric_mismatch"
    BROKEN_BACK_REFERENCE = "broken_back_reference"
    DUPLICATE_ASSIGNMENT = "duplicate_assignment"
    OUTSIDE_AVAILABILITY = "outside_availability"
    TIME_CONFLICT = "time_conflict"
    EXCLUDED_BLOCK_ASSIGNED = "excluded_block_assigned"


@dataclass
class ValidationError:
    """A single validation error."""

    error_type: ValidationErrorType
    message: str
    employee_id: Optional[int] = None
    block_id: Optional[int] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.employee_id is not None:
            parts.append(f"Employee {self.employee_id}:")
        parts.append(self.message)
        if self.block_id is not None:
            parts.append(f"(block {self.block_id})")
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of validating a dataset's assignments."""

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)

    def errors_of_type(self, error_type: ValidationErrorType) -> list[ValidationError]:
        """Get errors of one type."""
        return [e for e in self.errors if e.error_type == error_type]


class AssignmentValidator:
    """Validates assignments against all engine constraints.

    Example:
        >>> validator = AssignmentValidator()
        >>> result = validator.validate(dataset)
        >>> if not result.is_valid:
        ...     for error in result.errors:
        ...         print(error)
    """

    def validate(self, dataset: SchedulingDataset) -> ValidationResult:
        """Validate every employee and block in a dataset.

        Args:
            dataset: Dataset after an assignment run.

        Returns:
            ValidationResult with is_valid flag and any errors.
        """
        result = ValidationResult(is_valid=True)

        holders: dict[int, list[Employee]] = {}
        for employee in dataset.employees.values():
            self._validate_employee(employee, result)
            for block in employee.assigned_blocks:
                holders.setdefault(id(block), []).append(employee)

        for block in dataset.time_blocks.values():
            self._validate_block(block, holders.get(id(block), []), result)

        self._validate_pairings(dataset, result)

        return result

    def _validate_employee(self, employee: Employee, result: ValidationResult) -> None:
        """Validate one employee's budget, availability and conflicts."""
        total = sum(b.time_metric for b in employee.assigned_blocks)

        if abs(total - employee.assigned_time_metric) > METRIC_EPSILON:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.METRIC_MISMATCH,
                    message=(
                        f"Assigned time metric {employee.assigned_time_metric} "
                        f"does not match block total {total}"
                    ),
                    employee_id=employee.id,
                )
            )

        if total > employee.requested_time_metric + METRIC_EPSILON:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.BUDGET_EXCEEDED,
                    message=(
                        f"Assigned {total} exceeds requested "
                        f"{employee.requested_time_metric}"
                    ),
                    employee_id=employee.id,
                )
            )

        for i, block in enumerate(employee.assigned_blocks):
            if block.assigned_employee is not employee:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.BROKEN_BACK_REFERENCE,
                        message="Assigned block points at a different employee",
                        employee_id=employee.id,
                        block_id=block.id,
                    )
                )

            if block.is_excluded:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.EXCLUDED_BLOCK_ASSIGNED,
                        message="Manually assigned block was assigned automatically",
                        employee_id=employee.id,
                        block_id=block.id,
                    )
                )

            if not employee.is_available_for(block):
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.OUTSIDE_AVAILABILITY,
                        message=(
                            f"{block.label} on {block.weekday.label} {block.interval} "
                            f"is outside availability"
                        ),
                        employee_id=employee.id,
                        block_id=block.id,
                    )
                )

            if block.qualification not in employee.qualifications:
                result.add_warning(
                    f"Employee {employee.id} holds block {block.id} without "
                    f"qualification {block.qualification}"
                )

            for other in employee.assigned_blocks[:i]:
                if other.weekday != block.weekday:
                    continue
                if other.interval.contains(block.interval):
                    result.add_error(
                        ValidationError(
                            error_type=ValidationErrorType.TIME_CONFLICT,
                            message=(
                                f"{block.label} {block.interval} conflicts with "
                                f"{other.label} {other.interval}"
                            ),
                            employee_id=employee.id,
                            block_id=block.id,
                            details={"other_block_id": other.id},
                        )
                    )

    def _validate_block(
        self,
        block: TimeBlock,
        holders: list[Employee],
        result: ValidationResult,
    ) -> None:
        """Validate that a block's back-reference matches who holds it."""
        if len(holders) > 1:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.DUPLICATE_ASSIGNMENT,
                    message=f"Block held by {len(holders)} employees",
                    block_id=block.id,
                    details={"employee_ids": [e.id for e in holders]},
                )
            )

        if block.is_assigned and not holders and not block.is_excluded:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.BROKEN_BACK_REFERENCE,
                    message="Block references an employee that does not list it",
                    employee_id=block.assigned_employee.id,
                    block_id=block.id,
                )
            )

    def _validate_pairings(self, dataset: SchedulingDataset, result: ValidationResult) -> None:
        """Warn when a paired group ended up with different holders."""
        for block in dataset.time_blocks.values():
            if not block.is_paired or not block.is_assigned:
                continue
            for sibling in dataset.paired_group(block)[1:]:
                if sibling.is_excluded:
                    continue
                if sibling.assigned_employee is not block.assigned_employee:
                    result.add_warning(
                        f"Paired blocks {block.id} and {sibling.id} are not held "
                        f"by the same employee"
                    )
