"""Validation module for verifying assignment correctness."""

from blockscheduler.validation.validator import (
    AssignmentValidator,
    ValidationError,
    ValidationErrorType,
    ValidationResult,
)

__all__ = [
    "AssignmentValidator",
    "ValidationError",
    "ValidationErrorType",
    "ValidationResult",
]
