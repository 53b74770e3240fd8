"""Load scheduling datasets from JSON documents.

The document mirrors the four tables of the scheduling workbook:

    {
        "qualifications": ["RN", "LPN"],
        "workforce": [
            {"id": 1, "priority": 5, "requested_time": 20,
             "first_name": "Ada", "last_name": "Byron", "qualifications": "RN, LPN"}
        ],
        "availability": [
            {"id": 1, "employee_id": 1, "day": "M", "start": "8:00AM", "end": "5:00PM"}
        ],
        "time_blocks": [
            {"id": 10, "label": "Clinic A", "qualification": "RN", "location": "Room 1",
             "day": "M", "start": "9:00AM", "end": "11:00AM", "time_metric": 2,
             "paired_blocks": "11", "status": 0}
        ]
    }

Rows that cannot be parsed are skipped and recorded as diagnostics on the
returned dataset; only a document that is unusable as a whole raises.
"""

import json
import re
from datetime import time
from pathlib import Path
from typing import Optional, Union

from blockscheduler.domain.dataset import DatasetBuilder, SchedulingDataset
from blockscheduler.domain.events import EventListener
from blockscheduler.domain.models import Employee, Interval, TimeBlock, Weekday

TABLES = ("qualifications", "workforce", "availability", "time_blocks")

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{1,2})\s*([AaPp][Mm])?$")


class DatasetError(ValueError):
    """Raised when an input document cannot be loaded at all."""


def parse_time(value: Union[str, time]) -> time:
    """Parse a time of day.

    Accepts "9:00AM", "9:00 pm" and 24-hour "13:30".

    Raises:
        ValueError: If the value is not a recognizable time.
    """
    if isinstance(value, time):
        return value

    match = _TIME_PATTERN.match(str(value).strip())
    if match is None:
        raise ValueError(f"Unrecognized time format: {value!r}")

    hour = int(match.group(1))
    minute = int(match.group(2))
    suffix = (match.group(3) or "").upper()

    if suffix == "PM" and hour < 12:
        hour += 12
    elif suffix == "AM" and hour == 12:
        hour = 0

    return time(hour=hour, minute=minute)


def _split_list(value) -> list[str]:
    """Split a comma-separated string or pass a list through."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if str(v).strip()]
    return [part.strip() for part in str(value).split(",") if part.strip()]


def dataset_from_dict(
    data: dict,
    listener: Optional[EventListener] = None,
) -> SchedulingDataset:
    """Build a dataset from a parsed JSON document.

    Args:
        data: Document with the four scheduling tables.
        listener: Callback receiving diagnostics as they are raised.

    Raises:
        DatasetError: If the document is not an object or lacks a table.
    """
    if not isinstance(data, dict):
        raise DatasetError("Scheduling document must be a JSON object")

    missing = [table for table in TABLES if table not in data]
    if missing:
        raise DatasetError(f"Missing tables: {', '.join(missing)}")

    builder = DatasetBuilder(listener)

    for code in data["qualifications"]:
        builder.add_qualification(str(code))

    for row in data["workforce"]:
        try:
            employee = Employee(
                id=int(row["id"]),
                priority=int(row["priority"]),
                requested_time_metric=float(row["requested_time"]),
                first_name=str(row.get("first_name", "")),
                last_name=str(row.get("last_name", "")),
            )
        except (KeyError, TypeError, ValueError) as e:
            builder.record_malformed("workforce", row, str(e))
            continue
        builder.add_employee(employee, _split_list(row.get("qualifications")))

    for row in data["availability"]:
        try:
            employee_id = int(row["employee_id"])
            weekday = Weekday.parse(row["day"])
            interval = Interval(parse_time(row["start"]), parse_time(row["end"]))
            record_id = row.get("id")
            if record_id is not None:
                record_id = int(record_id)
        except (KeyError, TypeError, ValueError) as e:
            builder.record_malformed("availability", row, str(e))
            continue
        builder.add_availability(employee_id, weekday, interval, record_id=record_id)

    for row in data["time_blocks"]:
        try:
            block = TimeBlock(
                id=int(row["id"]),
                label=str(row.get("label", "")),
                weekday=Weekday.parse(row["day"]),
                interval=Interval(parse_time(row["start"]), parse_time(row["end"])),
                time_metric=float(row["time_metric"]),
                qualification=str(row["qualification"]),
                location=str(row.get("location", "")),
                status=int(row.get("status", 0)),
                paired_block_ids=[int(v) for v in _split_list(row.get("paired_blocks"))],
            )
        except (KeyError, TypeError, ValueError) as e:
            builder.record_malformed("time_blocks", row, str(e))
            continue
        builder.add_time_block(block)

    return builder.build()


def load_dataset(
    path: Union[str, Path],
    listener: Optional[EventListener] = None,
) -> SchedulingDataset:
    """Load a dataset from a JSON file.

    Raises:
        DatasetError: If the file is missing, not JSON, or lacks a table.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text())
    except FileNotFoundError:
        raise DatasetError(f"Input file not found: {path}")
    except json.JSONDecodeError as e:
        raise DatasetError(f"Input file is not valid JSON: {path} ({e})")

    return dataset_from_dict(data, listener)


def create_sample_dataset(
    count: int = 10,
    blocks_per_day: int = 6,
) -> SchedulingDataset:
    """Create a synthetic dataset for demos and testing.

    Args:
        count: Number of employees to create.
        blocks_per_day: Time blocks generated per weekday (Monday-Friday).
    """
    builder = DatasetBuilder()
    qualifications = ["ANAT", "CHEM", "PHYS", "STAT"]
    for code in qualifications:
        builder.add_qualification(code)

    names = [
        ("Alice", "Adams"), ("Bob", "Baker"), ("Carol", "Clark"), ("David", "Davis"),
        ("Eve", "Evans"), ("Frank", "Fisher"), ("Grace", "Green"), ("Henry", "Hall"),
        ("Ivy", "Irwin"), ("Jack", "Jones"), ("Kate", "King"), ("Leo", "Lewis"),
    ]
    weekdays = [
        Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY,
        Weekday.THURSDAY, Weekday.FRIDAY,
    ]

    for i in range(count):
        first, last = names[i % len(names)]
        if i >= len(names):
            last = f"{last}{i // len(names) + 1}"

        employee = Employee(
            id=i + 1,
            priority=count - i,
            first_name=first,
            last_name=last,
            requested_time_metric=6 + (i % 4) * 2,
        )
        # Scarcity varies: STAT is rare, ANAT is common
        quals = ["ANAT"]
        if i % 2 == 0:
            quals.append("CHEM")
        if i % 3 == 0:
            quals.append("PHYS")
        if i % 5 == 0:
            quals.append("STAT")
        builder.add_employee(employee, quals)

        for day_index, weekday in enumerate(weekdays):
            if (i + day_index) % 4 == 3:
                continue  # Day off
            if i % 3 == 0:
                window = Interval(time(8), time(13))
            elif i % 3 == 1:
                window = Interval(time(12), time(18))
            else:
                window = Interval(time(8), time(18))
            builder.add_availability(employee.id, weekday, window)

    block_id = 1
    for weekday in weekdays:
        for j in range(blocks_per_day):
            start_hour = 8 + (j * 2) % 10
            length = 1 + j % 2
            # Pair each early session with the later one sharing its qualification
            paired = [block_id + 4] if j < 2 and j + 4 < blocks_per_day else []
            builder.add_time_block(
                TimeBlock(
                    id=block_id,
                    label=f"{qualifications[j % len(qualifications)]}-{weekday.value}{j + 1}",
                    weekday=weekday,
                    interval=Interval(time(start_hour), time(start_hour + length)),
                    time_metric=float(length),
                    qualification=qualifications[j % len(qualifications)],
                    location=f"Room {100 + j}",
                    paired_block_ids=paired,
                )
            )
            block_id += 1

    return builder.build()
