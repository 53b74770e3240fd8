"""Tests for text, JSON and PDF output."""

import json

import pytest

from blockscheduler.loader import create_sample_dataset
from blockscheduler.output.export import export_assignments, write_assignments_json
from blockscheduler.output.pdf_generator import PDFGenerator
from blockscheduler.output.text_report import TextReportGenerator
from blockscheduler.scheduling.scheduler import Scheduler


@pytest.fixture
def assigned():
    """Run the scheduler over a sample dataset."""
    dataset = create_sample_dataset(count=8, blocks_per_day=6)
    result = Scheduler().run(dataset)
    return dataset, result


class TestTextReportGenerator:
    """Tests for TextReportGenerator."""

    def test_sections(self, assigned):
        """Test every section is rendered by default."""
        dataset, result = assigned
        text = TextReportGenerator().generate_to_string(dataset, result)

        assert "TIME BLOCK ASSIGNMENTS" in text
        assert "ASSIGNMENTS" in text
        assert "EMPLOYEES" in text
        assert "QUALIFICATION TALLY" in text
        assert "Qualification Order:" in text
        assert text.rstrip().endswith("=" * 80)

    def test_optional_sections(self, assigned):
        """Test the summary and tally can be left out."""
        dataset, result = assigned
        generator = TextReportGenerator(
            include_metric_summary=False,
            include_qualification_tally=False,
        )
        text = generator.generate_to_string(dataset, result)

        assert "EMPLOYEES" not in text
        assert "QUALIFICATION TALLY" not in text

    def test_tally_matches_stats(self):
        """Test the report tally agrees with run stats when a block is held manually."""
        dataset = create_sample_dataset(count=8, blocks_per_day=6)
        manual = dataset.time_blocks[3]
        manual.status = 1
        manual.assigned_employee = dataset.employees[1]
        result, stats = Scheduler().run_with_stats(dataset)

        text = TextReportGenerator().generate_to_string(dataset, result)
        tally_text = text.split("QUALIFICATION TALLY", 1)[1]
        for code, row in stats["by_qualification"].items():
            line = next(
                line for line in tally_text.splitlines()
                if line.split() and line.split()[0] == code
            )
            assert line.split()[1:] == [
                str(row["qualified_employees"]),
                str(row["blocks"]),
                str(row["assigned"]),
            ]

        code = manual.qualification
        total = len(dataset.blocks_for_qualification(code))
        assert stats["by_qualification"][code]["blocks"] == total - 1

    def test_unassigned_sentinel(self):
        """Test open blocks show the unassigned marker."""
        dataset = create_sample_dataset(count=4, blocks_per_day=2)
        text = TextReportGenerator().generate_to_string(dataset)

        row = next(line for line in text.splitlines() if line.lstrip().startswith("1 "))
        assert "--" in row
        assert "Unassigned: 10" in text

    def test_write_file(self, assigned, tmp_path):
        """Test the report is written to disk."""
        dataset, result = assigned
        path = tmp_path / "report.txt"
        content = TextReportGenerator().generate(dataset, path, result)
        assert path.read_text() == content


class TestExport:
    """Tests for JSON export."""

    def test_rows(self, assigned):
        """Test one row per block and employee."""
        dataset, result = assigned
        exported = export_assignments(dataset, result)

        assert len(exported["assignments"]) == len(dataset.time_blocks)
        assert len(exported["employees"]) == len(dataset.employees)
        assert exported["summary"]["assigned"] == result.assigned_count
        assert exported["summary"]["mode"] == "quick"

    def test_rows_match_entities(self, assigned):
        """Test exported holders match the dataset."""
        dataset, _ = assigned
        for row in export_assignments(dataset)["assignments"]:
            held_by = dataset.time_blocks[row["id"]].assigned_employee
            if held_by is None:
                assert row["employee_id"] is None
                assert row["last_name"] == "--"
            else:
                assert row["employee_id"] == held_by.id

    def test_no_summary_without_result(self, assigned):
        """Test the summary is only included with a result."""
        dataset, _ = assigned
        assert "summary" not in export_assignments(dataset)

    def test_write_json(self, assigned, tmp_path):
        """Test the export round-trips through a file."""
        dataset, result = assigned
        path = tmp_path / "out.json"
        write_assignments_json(dataset, path, result)
        assert json.loads(path.read_text()) == export_assignments(dataset, result)


class TestPDFGenerator:
    """Tests for PDFGenerator."""

    @pytest.fixture(autouse=True)
    def require_reportlab(self):
        pytest.importorskip("reportlab")

    def test_generate_to_buffer(self, assigned):
        """Test a PDF document is produced."""
        dataset, _ = assigned
        buffer = PDFGenerator().generate_to_buffer(dataset)
        assert buffer.getvalue().startswith(b"%PDF")

    def test_generate_file(self, assigned, tmp_path):
        """Test the PDF is written to disk."""
        dataset, _ = assigned
        path = tmp_path / "assignments.pdf"
        PDFGenerator().generate(dataset, path, include_summary=False)
        assert path.stat().st_size > 0

    def test_empty_dataset(self, tmp_path):
        """Test a dataset without blocks still renders a page."""
        dataset = create_sample_dataset(count=2, blocks_per_day=0)
        buffer = PDFGenerator().generate_to_buffer(dataset, include_summary=False)
        assert buffer.getvalue().startswith(b"%PDF")
