"""PDF generation for assignment output.

This module creates printable PDF reports showing:
- Per-weekday timelines of each employee's assigned blocks
- Unassigned blocks for each weekday
- An employee time metric summary
"""

from io import BytesIO
from pathlib import Path
from typing import Union

from blockscheduler.domain.dataset import SchedulingDataset
from blockscheduler.domain.models import Employee, TimeBlock, Weekday

# Color palette cycled across qualifications (RGB tuples, 0-1 scale)
PALETTE = [
    (0.4, 0.7, 0.4),  # Green
    (0.4, 0.4, 0.8),  # Blue
    (0.8, 0.6, 0.2),  # Orange
    (0.7, 0.4, 0.7),  # Purple
    (0.3, 0.7, 0.7),  # Teal
    (0.8, 0.4, 0.4),  # Red
]

COLORS = {
    "unassigned": (0.85, 0.85, 0.85),
    "manual": (0.6, 0.6, 0.6),
    "background": (0.95, 0.95, 0.95),
}

# Timeline spans 6AM to 10PM unless blocks fall outside it
DEFAULT_DAY_START = 6 * 60
DEFAULT_DAY_END = 22 * 60


def _minutes(t) -> int:
    return t.hour * 60 + t.minute


class PDFGenerator:
    """Generates printable PDF assignment reports.

    Example:
        >>> generator = PDFGenerator()
        >>> generator.generate(dataset, "assignments.pdf")
    """

    def __init__(
        self,
        page_width: float = 792,  # Letter landscape width (11")
        page_height: float = 612,  # Letter landscape height (8.5")
        margin: float = 36,  # 0.5 inch margins
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin

    def generate(
        self,
        dataset: SchedulingDataset,
        output_path: Union[str, Path],
        include_summary: bool = True,
    ) -> None:
        """Generate PDF report and save to file.

        Args:
            dataset: Dataset after an assignment run.
            output_path: Path to save the PDF.
            include_summary: Whether to include the employee summary page.
        """
        try:
            from reportlab.lib.pagesizes import letter, landscape
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        c = canvas.Canvas(str(output_path), pagesize=landscape(letter))
        self._draw(c, dataset, include_summary)
        c.save()

    def generate_to_buffer(
        self,
        dataset: SchedulingDataset,
        include_summary: bool = True,
    ) -> BytesIO:
        """Generate PDF and return as bytes buffer."""
        try:
            from reportlab.lib.pagesizes import letter, landscape
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=landscape(letter))
        self._draw(c, dataset, include_summary)
        c.save()
        buffer.seek(0)
        return buffer

    def _draw(self, c, dataset: SchedulingDataset, include_summary: bool) -> None:
        colors = {
            code: PALETTE[i % len(PALETTE)]
            for i, code in enumerate(dataset.qualifications)
        }
        day_start, day_end = self._day_bounds(dataset)

        drew_page = False
        for weekday in Weekday:
            blocks = [b for b in dataset.time_blocks.values() if b.weekday == weekday]
            if not blocks:
                continue
            self._draw_weekday_pages(c, dataset, weekday, blocks, colors, day_start, day_end)
            drew_page = True

        if include_summary or not drew_page:
            self._draw_summary_page(c, dataset)

    def _day_bounds(self, dataset: SchedulingDataset) -> tuple[int, int]:
        """Get the timeline range in minutes, rounded out to whole hours."""
        start, end = DEFAULT_DAY_START, DEFAULT_DAY_END
        for block in dataset.time_blocks.values():
            start = min(start, _minutes(block.interval.start))
            end = max(end, _minutes(block.interval.end))
        start = (start // 60) * 60
        end = min(24 * 60, ((end + 59) // 60) * 60)
        return start, max(end, start + 60)

    def _draw_weekday_pages(
        self,
        c,
        dataset: SchedulingDataset,
        weekday: Weekday,
        blocks: list[TimeBlock],
        colors: dict,
        day_start: int,
        day_end: int,
    ) -> None:
        """Draw timeline pages for one weekday."""
        rows: list[tuple[str, list[TimeBlock]]] = []
        for employee in sorted(dataset.employees.values(), key=lambda e: e.full_name):
            held = [b for b in employee.assigned_blocks if b.weekday == weekday]
            if held:
                rows.append((employee.full_name, held))

        manual = [b for b in blocks if b.is_excluded]
        if manual:
            rows.append(("Manually assigned", manual))

        open_blocks = [b for b in blocks if not b.is_assigned and not b.is_excluded]
        if open_blocks:
            rows.append(("Unassigned", open_blocks))

        row_height = 24
        header_height = 60
        footer_height = 40
        usable_height = self.page_height - 2 * self.margin - header_height - footer_height
        rows_per_page = max(1, int(usable_height / row_height))

        timeline_left = self.margin + 120  # Space for names
        timeline_right = self.page_width - self.margin - 20
        timeline_width = timeline_right - timeline_left

        total_pages = (len(rows) + rows_per_page - 1) // rows_per_page
        for page_start in range(0, len(rows), rows_per_page):
            page_rows = rows[page_start : page_start + rows_per_page]

            self._draw_header(c, weekday, blocks)
            self._draw_time_axis(
                c,
                timeline_left,
                self.page_height - self.margin - header_height - 20,
                timeline_width,
                day_start,
                day_end,
            )

            y = self.page_height - self.margin - header_height - 30
            for name, row_blocks in page_rows:
                y -= row_height
                self._draw_row(
                    c, name, row_blocks, colors,
                    timeline_left, timeline_width, y, row_height - 4,
                    day_start, day_end,
                )

            self._draw_legend(c, dataset, colors, self.margin, self.margin + 10)

            page_num = (page_start // rows_per_page) + 1
            c.setFont("Helvetica", 9)
            c.drawCentredString(
                self.page_width / 2,
                self.margin - 10,
                f"{weekday.label} - Page {page_num} of {total_pages}",
            )

            c.showPage()

    def _draw_header(self, c, weekday: Weekday, blocks: list[TimeBlock]) -> None:
        """Draw page header with weekday and counts."""
        assigned = sum(1 for b in blocks if b.is_assigned)
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            f"Time Block Assignments - {weekday.label}",
        )

        c.setFont("Helvetica", 10)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 35,
            f"Blocks: {len(blocks)}   Assigned: {assigned}   Open: {len(blocks) - assigned}",
        )

    def _draw_time_axis(
        self,
        c,
        x: float,
        y: float,
        width: float,
        day_start: int,
        day_end: int,
    ) -> None:
        """Draw time axis with hour markers."""
        scale = width / (day_end - day_start)

        c.setFont("Helvetica", 8)
        c.setStrokeColorRGB(0.7, 0.7, 0.7)

        for minute in range(day_start, day_end + 1, 60):
            tick_x = x + (minute - day_start) * scale
            c.line(tick_x, y, tick_x, y - 5)
            if minute < day_end:
                hour = (minute // 60) % 24
                label = f"{hour % 12 or 12}{'am' if hour < 12 else 'pm'}"
                c.drawCentredString(tick_x, y + 5, label)

    def _draw_row(
        self,
        c,
        name: str,
        blocks: list[TimeBlock],
        colors: dict,
        timeline_x: float,
        timeline_width: float,
        y: float,
        height: float,
        day_start: int,
        day_end: int,
    ) -> None:
        """Draw a single timeline row."""
        scale = timeline_width / (day_end - day_start)

        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica", 9)
        c.drawString(self.margin, y + height / 2 - 3, name[:22])

        c.setFillColorRGB(*COLORS["background"])
        c.rect(timeline_x, y, timeline_width, height, fill=1, stroke=0)

        for block in blocks:
            bx = timeline_x + (_minutes(block.interval.start) - day_start) * scale
            bw = max(1.0, block.interval.duration_minutes * scale)

            if block.is_excluded:
                color = COLORS["manual"]
            elif not block.is_assigned:
                color = COLORS["unassigned"]
            else:
                color = colors.get(block.qualification, (0.5, 0.5, 0.5))
            c.setFillColorRGB(*color)
            c.rect(bx, y, bw, height, fill=1, stroke=0)

            c.setStrokeColorRGB(0.3, 0.3, 0.3)
            c.setLineWidth(0.5)
            c.rect(bx, y, bw, height, fill=0, stroke=1)

            c.setFillColorRGB(0, 0, 0)
            c.setFont("Helvetica", 6)
            c.drawCentredString(bx + bw / 2, y + height / 2 - 2, block.label[:12])

    def _draw_legend(self, c, dataset: SchedulingDataset, colors: dict, x: float, y: float) -> None:
        """Draw legend for qualification colors."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 8)
        c.drawString(x, y, "Legend:")

        items = [(code, colors[code]) for code in dataset.qualifications]
        items.append(("Manual", COLORS["manual"]))
        items.append(("Open", COLORS["unassigned"]))

        c.setFont("Helvetica", 7)
        item_x = x + 45
        for label, color in items:
            c.setFillColorRGB(*color)
            c.rect(item_x, y - 2, 10, 8, fill=1, stroke=0)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(item_x + 13, y, label[:10])
            item_x += 65

    def _draw_summary_page(self, c, dataset: SchedulingDataset) -> None:
        """Draw the employee time metric summary."""
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            "Employee Time Metric Summary",
        )

        columns = [
            ("EID", 0),
            ("Name", 50),
            ("Priority", 250),
            ("Assigned", 320),
            ("Requested", 400),
            ("Blocks", 480),
        ]

        y = self.page_height - self.margin - 50
        c.setFont("Helvetica-Bold", 9)
        for title, offset in columns:
            c.drawString(self.margin + offset, y, title)

        c.setFont("Helvetica", 9)
        for employee in dataset.employees.values():
            y -= 14
            if y < self.margin + 20:
                c.showPage()
                y = self.page_height - self.margin - 20
                c.setFont("Helvetica", 9)
            self._draw_summary_row(c, employee, columns, y)

        c.showPage()

    def _draw_summary_row(self, c, employee: Employee, columns: list, y: float) -> None:
        values = [
            str(employee.id),
            employee.full_name[:34],
            str(employee.priority),
            f"{employee.assigned_time_metric:.2f}",
            f"{employee.requested_time_metric:.2f}",
            str(len(employee.assigned_blocks)),
        ]
        for (_, offset), value in zip(columns, values):
            c.drawString(self.margin + offset, y, value)

