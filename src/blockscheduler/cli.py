"""Command-line interface for the time block scheduler."""

import argparse
import logging
import sys
from typing import Optional

from blockscheduler.domain.dataset import SchedulingDataset
from blockscheduler.loader import DatasetError, create_sample_dataset, load_dataset
from blockscheduler.output.export import write_assignments_json
from blockscheduler.output.pdf_generator import PDFGenerator
from blockscheduler.output.text_report import TextReportGenerator
from blockscheduler.scheduling.assigner import AssignmentConfig, AssignmentMode
from blockscheduler.scheduling.scheduler import Scheduler
from blockscheduler.validation.validator import AssignmentValidator

logger = logging.getLogger(__name__)


def configure_logging(verbosity: int) -> None:
    """Configure root logging from a -v count."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
    )


def print_run_summary(dataset: SchedulingDataset, stats: dict) -> None:
    """Print the run statistics and validation outcome."""
    print(f"\n{'=' * 60}")
    print("Assignment Summary")
    print(f"{'=' * 60}")
    print(f"  Employees: {stats['total_employees']} "
          f"({stats['employees_with_assignments']} with assignments)")
    print(f"  Time Blocks: {stats['total_blocks']}")
    print(f"  Assigned: {stats['assigned_blocks']}")
    print(f"  Unassigned: {stats['unassigned_blocks']}")
    print(f"  Manually Assigned: {stats['excluded_blocks']}")
    print(f"  Time Metric Filled: {stats['assigned_time_metric']:.1f}/"
          f"{stats['total_time_metric']:.1f} ({stats['fill_rate']:.1f}%)")
    print(f"  Qualification Order: {', '.join(stats['qualification_order'])}")

    if dataset.diagnostics:
        print(f"\nDiagnostics ({len(dataset.diagnostics)}):")
        for event in dataset.diagnostics[:5]:
            print(f"    - {event}")
        if len(dataset.diagnostics) > 5:
            print(f"    ... and {len(dataset.diagnostics) - 5} more")

    result = AssignmentValidator().validate(dataset)
    if result.is_valid:
        print("\nValidation: PASSED")
    else:
        print(f"\nValidation: FAILED ({len(result.errors)} errors)")
        for error in result.errors[:5]:
            print(f"    - {error}")
        if len(result.errors) > 5:
            print(f"    ... and {len(result.errors) - 5} more errors")

    if result.warnings:
        print(f"\nWarnings ({len(result.warnings)}):")
        for warning in result.warnings[:3]:
            print(f"    - {warning}")
        if len(result.warnings) > 3:
            print(f"    ... and {len(result.warnings) - 3} more warnings")


def print_metric_summary(dataset: SchedulingDataset) -> None:
    """Print assigned vs requested time metric per employee."""
    print("\nEmployee Time Metric:")
    for employee in dataset.employees.values():
        print(f"  {employee.full_name} ({employee.id}): "
              f"{employee.assigned_time_metric:.1f}/{employee.requested_time_metric:.1f}, "
              f"{len(employee.assigned_blocks)} blocks")


def print_qualification_tally(stats: dict) -> None:
    """Print qualified employees and fill per qualification."""
    print("\nQualification Tally:")
    for code, tally in stats["by_qualification"].items():
        print(f"  {code}: {tally['qualified_employees']} employees, "
              f"{tally['assigned']}/{tally['blocks']} blocks assigned")


def run_assign(
    input_path: str,
    mode: str = "quick",
    pdf_path: Optional[str] = None,
    text_path: Optional[str] = None,
    json_path: Optional[str] = None,
    metric_summary: bool = False,
    qual_tally: bool = False,
) -> int:
    """Load a dataset, assign it and write the requested outputs."""
    try:
        dataset = load_dataset(input_path)
    except DatasetError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Loaded {len(dataset.employees)} employees and "
          f"{len(dataset.time_blocks)} time blocks from {input_path}")

    scheduler = Scheduler(AssignmentConfig(mode=AssignmentMode(mode)))
    try:
        result, stats = scheduler.run_with_stats(dataset)
    except NotImplementedError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_run_summary(dataset, stats)
    if metric_summary:
        print_metric_summary(dataset)
    if qual_tally:
        print_qualification_tally(stats)

    if text_path:
        generator = TextReportGenerator(
            include_metric_summary=metric_summary,
            include_qualification_tally=qual_tally,
        )
        generator.generate(dataset, text_path, result)
        print(f"\nText report written to {text_path}")

    if json_path:
        write_assignments_json(dataset, json_path, result)
        print(f"\nJSON export written to {json_path}")

    if pdf_path:
        print(f"\nGenerating PDF: {pdf_path}")
        PDFGenerator().generate(dataset, pdf_path, include_summary=metric_summary)
        print("  PDF created successfully!")

    return 0


def run_demo(count: int = 10, pdf_path: Optional[str] = None) -> int:
    """Assign a synthetic dataset and print the outcome."""
    print(f"Generating demo assignment for {count} employees...")

    dataset = create_sample_dataset(count)
    result, stats = Scheduler().run_with_stats(dataset)

    print_run_summary(dataset, stats)
    print_metric_summary(dataset)
    print_qualification_tally(stats)
    logger.info("Demo produced %d events", len(result.events))

    if pdf_path:
        print(f"\nGenerating PDF: {pdf_path}")
        PDFGenerator().generate(dataset, pdf_path)
        print("  PDF created successfully!")

    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="blockscheduler - Time Block Assignment Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s assign blocks.json                      Assign and print a summary
  %(prog)s assign blocks.json --text report.txt    Write a text report
  %(prog)s assign blocks.json --pdf out.pdf --metric-summary
  %(prog)s demo --count 20                         Run demo with 20 employees
        """,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Increase log output (-v for info, -vv for debug)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    assign_parser = subparsers.add_parser(
        "assign", parents=[common], help="Assign time blocks from a JSON file")
    assign_parser.add_argument("input", help="Path to the scheduling JSON document")
    assign_parser.add_argument(
        "--mode", "-m",
        type=str,
        default="quick",
        choices=[m.value for m in AssignmentMode],
        help="Assignment mode (default: quick)",
    )
    assign_parser.add_argument("--pdf", type=str, help="Output PDF file path")
    assign_parser.add_argument("--text", type=str, help="Output text report path")
    assign_parser.add_argument("--json", type=str, help="Output JSON export path")
    assign_parser.add_argument(
        "--metric-summary",
        action="store_true",
        help="Include the employee time metric summary",
    )
    assign_parser.add_argument(
        "--qual-tally",
        action="store_true",
        help="Include the qualification tally",
    )

    demo_parser = subparsers.add_parser(
        "demo", parents=[common], help="Run demo assignment on sample data")
    demo_parser.add_argument(
        "--count", "-c",
        type=int,
        default=10,
        help="Number of employees to generate (default: 10)",
    )
    demo_parser.add_argument("--pdf", type=str, help="Output PDF file path")

    args = parser.parse_args(argv)
    configure_logging(getattr(args, "verbose", 0))

    if args.command == "assign":
        return run_assign(
            args.input,
            args.mode,
            args.pdf,
            args.text,
            args.json,
            args.metric_summary,
            args.qual_tally,
        )
    elif args.command == "demo":
        return run_demo(args.count, args.pdf)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
