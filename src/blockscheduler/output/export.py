"""JSON-serializable exports of assignment results."""

import json
from pathlib import Path
from typing import Optional, Union

from blockscheduler.domain.dataset import SchedulingDataset
from blockscheduler.domain.models import UNASSIGNED_SENTINEL, format_time
from blockscheduler.scheduling.assigner import AssignmentResult


def export_assignments(
    dataset: SchedulingDataset,
    result: Optional[AssignmentResult] = None,
) -> dict:
    """Export block and employee state as plain data.

    Returns:
        Dict with "assignments" and "employees" rows, plus a "summary" when
        a result is given.
    """
    assignments = []
    for block in dataset.time_blocks.values():
        employee = block.assigned_employee
        assignments.append({
            "id": block.id,
            "label": block.label,
            "qualification": block.qualification,
            "location": block.location,
            "employee_id": employee.id if employee else None,
            "last_name": employee.last_name if employee else UNASSIGNED_SENTINEL,
            "first_name": employee.first_name if employee else UNASSIGNED_SENTINEL,
            "manually_assigned": block.is_excluded,
            "time_metric": block.time_metric,
            "day": block.weekday.value,
            "start": format_time(block.interval.start),
            "end": format_time(block.interval.end),
        })

    employees = [
        {
            "id": employee.id,
            "last_name": employee.last_name,
            "first_name": employee.first_name,
            "priority": employee.priority,
            "assigned_time": employee.assigned_time_metric,
            "requested_time": employee.requested_time_metric,
            "blocks": [b.id for b in employee.assigned_blocks],
        }
        for employee in dataset.employees.values()
    ]

    exported = {"assignments": assignments, "employees": employees}

    if result is not None:
        exported["summary"] = {
            "mode": result.mode.value,
            "qualification_order": list(result.qualification_order),
            "assigned": result.assigned_count,
            "unassigned": result.unassigned_count,
            "excluded": result.excluded_count,
            "diagnostics": [str(e) for e in dataset.diagnostics],
        }

    return exported


def write_assignments_json(
    dataset: SchedulingDataset,
    output_path: Union[str, Path],
    result: Optional[AssignmentResult] = None,
) -> None:
    """Write the export to a JSON file."""
    Path(output_path).write_text(json.dumps(export_assignments(dataset, result), indent=2))
