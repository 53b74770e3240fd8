"""Output generation for assignments (text, PDF, JSON)."""

from blockscheduler.output.export import export_assignments, write_assignments_json
from blockscheduler.output.pdf_generator import PDFGenerator
from blockscheduler.output.text_report import TextReportGenerator

__all__ = [
    "PDFGenerator",
    "TextReportGenerator",
    "export_assignments",
    "write_assignments_json",
]
