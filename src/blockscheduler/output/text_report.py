"""Plain-text assignment reports.

This module renders the same three sections as the assignment workbook:
- Assignments: one row per time block with its holder or "--"
- Employees: assigned vs requested time metric per employee
- Qualification tally: qualified employees and fill per qualification
"""

from pathlib import Path
from typing import Optional, Union

from blockscheduler.domain.dataset import SchedulingDataset
from blockscheduler.domain.models import UNASSIGNED_SENTINEL, format_time
from blockscheduler.scheduling.assigner import AssignmentResult


class TextReportGenerator:
    """Generates human-readable text reports for an assignment run.

    Args:
        include_metric_summary: Include the per-employee section.
        include_qualification_tally: Include the per-qualification section.
    """

    def __init__(
        self,
        include_metric_summary: bool = True,
        include_qualification_tally: bool = True,
    ):
        self.include_metric_summary = include_metric_summary
        self.include_qualification_tally = include_qualification_tally

    def generate(
        self,
        dataset: SchedulingDataset,
        output_path: Union[str, Path],
        result: Optional[AssignmentResult] = None,
    ) -> str:
        """Generate the report and save it to a file.

        Returns:
            The generated text content.
        """
        content = self.generate_to_string(dataset, result)
        Path(output_path).write_text(content)
        return content

    def generate_to_string(
        self,
        dataset: SchedulingDataset,
        result: Optional[AssignmentResult] = None,
    ) -> str:
        """Generate the report and return it as a string."""
        lines = []

        lines.append("=" * 80)
        lines.append("TIME BLOCK ASSIGNMENTS")
        lines.append("=" * 80)
        lines.append("")

        blocks = list(dataset.time_blocks.values())
        assigned = sum(1 for b in blocks if b.is_assigned and not b.is_excluded)
        excluded = sum(1 for b in blocks if b.is_excluded)
        lines.append(f"Time Blocks: {len(blocks)}")
        lines.append(f"Assigned: {assigned}")
        lines.append(f"Unassigned: {len(blocks) - assigned - excluded}")
        lines.append(f"Manually Assigned: {excluded}")
        if result is not None:
            lines.append(f"Qualification Order: {', '.join(result.qualification_order)}")
        lines.append("")

        lines.extend(self._assignment_section(dataset))

        if self.include_metric_summary:
            lines.extend(self._employee_section(dataset))

        if self.include_qualification_tally:
            lines.extend(self._qualification_section(dataset))

        if dataset.diagnostics:
            lines.append("-" * 80)
            lines.append("DIAGNOSTICS")
            lines.append("-" * 80)
            for event in dataset.diagnostics:
                lines.append(str(event))
            lines.append("")

        lines.append("=" * 80)
        lines.append("END OF REPORT")
        lines.append("=" * 80)

        return "\n".join(lines)

    def _assignment_section(self, dataset: SchedulingDataset) -> list[str]:
        lines = [
            "-" * 80,
            "ASSIGNMENTS",
            "-" * 80,
            f"{'TID':>5} {'Label':<16} {'Last':<12} {'First':<10} {'M':^3} "
            f"{'Metric':>6} {'Day':^4} {'Start':>8} {'End':>8}",
            "-" * 80,
        ]

        for block in dataset.time_blocks.values():
            employee = block.assigned_employee
            last = employee.last_name if employee else UNASSIGNED_SENTINEL
            first = employee.first_name if employee else UNASSIGNED_SENTINEL
            manual = "Y" if block.is_excluded else "N"
            lines.append(
                f"{block.id:>5} {block.label[:16]:<16} {last[:12]:<12} {first[:10]:<10} "
                f"{manual:^3} {block.time_metric:>6.2f} {block.weekday.value:^4} "
                f"{format_time(block.interval.start):>8} {format_time(block.interval.end):>8}"
            )

        lines.append("")
        return lines

    def _employee_section(self, dataset: SchedulingDataset) -> list[str]:
        lines = [
            "-" * 80,
            "EMPLOYEES",
            "-" * 80,
            f"{'EID':>5} {'Last':<14} {'First':<12} {'Priority':>8} "
            f"{'Assigned':>9} {'Requested':>10} {'Blocks':>7}",
            "-" * 80,
        ]

        for employee in dataset.employees.values():
            lines.append(
                f"{employee.id:>5} {employee.last_name[:14]:<14} "
                f"{employee.first_name[:12]:<12} {employee.priority:>8} "
                f"{employee.assigned_time_metric:>9.2f} "
                f"{employee.requested_time_metric:>10.2f} "
                f"{len(employee.assigned_blocks):>7}"
            )

        lines.append("")
        return lines

    def _qualification_section(self, dataset: SchedulingDataset) -> list[str]:
        lines = [
            "-" * 80,
            "QUALIFICATION TALLY",
            "-" * 80,
            f"{'Qualification':<16} {'Employees':>9} {'Blocks':>7} {'Assigned':>9}",
            "-" * 80,
        ]

        for code, row in dataset.qualification_tally().items():
            lines.append(
                f"{code[:16]:<16} {row['qualified_employees']:>9} "
                f"{row['blocks']:>7} {row['assigned']:>9}"
            )

        lines.append("")
        return lines
