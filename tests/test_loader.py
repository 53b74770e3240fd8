"""Tests for the dataset builder and JSON loader."""

import json
from datetime import time

import pytest

from blockscheduler.domain.dataset import DatasetBuilder
from blockscheduler.domain.events import EventType
from blockscheduler.domain.models import Employee, Interval, TimeBlock, Weekday
from blockscheduler.loader import (
    DatasetError,
    create_sample_dataset,
    dataset_from_dict,
    load_dataset,
    parse_time,
)


def sample_document():
    """A small but complete scheduling document."""
    return {
        "qualifications": ["RN", "lpn"],
        "workforce": [
            {"id": 1, "priority": 5, "requested_time": 10, "first_name": "Ada",
             "last_name": "Byron", "qualifications": "RN, LPN"},
            {"id": 2, "priority": 3, "requested_time": 6, "first_name": "Grace",
             "last_name": "Hopper", "qualifications": ["LPN", "XRAY"]},
        ],
        "availability": [
            {"id": 1, "employee_id": 1, "day": "M", "start": "8:00AM", "end": "5:00PM"},
            {"id": 2, "employee_id": 2, "day": "monday", "start": "09:00", "end": "13:00"},
            {"id": 3, "employee_id": 99, "day": "T", "start": "9:00AM", "end": "10:00AM"},
        ],
        "time_blocks": [
            {"id": 10, "label": "Clinic A", "qualification": "RN", "day": "M",
             "start": "9:00AM", "end": "11:00AM", "time_metric": 2, "paired_blocks": "11, 404"},
            {"id": 11, "label": "Clinic B", "qualification": "RN", "day": "M",
             "start": "1:00 pm", "end": "3:00 pm", "time_metric": 2},
            {"id": 12, "label": "Ward", "qualification": "LPN", "day": "M",
             "start": "10:00AM", "end": "12:00PM", "time_metric": 2, "status": 1},
        ],
    }


class TestParseTime:
    """Tests for time parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("9:00AM", time(9, 0)),
            ("9:00 am", time(9, 0)),
            ("1:30PM", time(13, 30)),
            ("12:00PM", time(12, 0)),
            ("12:15AM", time(0, 15)),
            ("13:45", time(13, 45)),
            (time(7, 5), time(7, 5)),
        ],
    )
    def test_valid(self, value, expected):
        """Test 12-hour and 24-hour forms."""
        assert parse_time(value) == expected

    @pytest.mark.parametrize("value", ["9AM", "noon", "25:00", "9:00XM"])
    def test_invalid(self, value):
        """Test unrecognizable times raise ValueError."""
        with pytest.raises(ValueError):
            parse_time(value)


class TestDatasetBuilder:
    """Tests for DatasetBuilder diagnostics."""

    @pytest.fixture
    def builder(self):
        """Create a builder with RN registered."""
        builder = DatasetBuilder()
        builder.add_qualification("rn")
        return builder

    def test_qualification_normalized(self, builder):
        """Test codes are uppercased and deduplicated."""
        assert builder.add_qualification(" RN ") == "RN"
        assert builder.build().qualifications == ["RN"]

    def test_unregistered_employee_qualification_dropped(self, builder):
        """Test unknown codes are dropped with a diagnostic."""
        employee = Employee(id=1, priority=1)
        builder.add_employee(employee, ["RN", "XRAY"])

        assert employee.qualifications == {"RN"}
        events = [e for e in builder.diagnostics
                  if e.event_type == EventType.UNREGISTERED_QUALIFICATION]
        assert len(events) == 1
        assert events[0].qualification == "XRAY"

    def test_duplicate_employee(self, builder):
        """Test a repeated employee id is rejected."""
        assert builder.add_employee(Employee(id=1, priority=1))
        assert not builder.add_employee(Employee(id=1, priority=2))
        assert builder.diagnostics[-1].event_type == EventType.DUPLICATE_RECORD

    def test_availability_for_unknown_employee(self, builder):
        """Test availability naming an unknown employee is dropped."""
        added = builder.add_availability(42, "M", Interval(time(9), time(10)), record_id=7)
        assert not added
        event = builder.diagnostics[-1]
        assert event.event_type == EventType.UNKNOWN_EMPLOYEE
        assert event.details["record_id"] == 7

    def test_block_with_unregistered_qualification_kept(self, builder):
        """Test such blocks stay in the dataset with a diagnostic."""
        block = TimeBlock(
            id=1, label="X", weekday=Weekday.MONDAY,
            interval=Interval(time(9), time(10)), time_metric=1, qualification="XRAY",
        )
        builder.add_time_block(block)
        dataset = builder.build()

        assert 1 in dataset.time_blocks
        assert dataset.diagnostics[0].event_type == EventType.UNREGISTERED_QUALIFICATION

    def test_unknown_pairing_removed(self, builder):
        """Test pairings naming unknown blocks are dropped on build."""
        block = TimeBlock(
            id=1, label="A", weekday=Weekday.MONDAY,
            interval=Interval(time(9), time(10)), time_metric=1,
            qualification="RN", paired_block_ids=[2, 3],
        )
        other = TimeBlock(
            id=2, label="B", weekday=Weekday.MONDAY,
            interval=Interval(time(11), time(12)), time_metric=1, qualification="RN",
        )
        builder.add_time_block(block)
        builder.add_time_block(other)
        dataset = builder.build()

        assert block.paired_block_ids == [2]
        assert [e.event_type for e in dataset.diagnostics] == [EventType.UNKNOWN_PAIRED_BLOCK]

    def test_listener_receives_diagnostics(self):
        """Test the listener sees each diagnostic as it is raised."""
        seen = []
        builder = DatasetBuilder(listener=seen.append)
        builder.add_employee(Employee(id=1, priority=1), ["NOPE"])
        assert len(seen) == 1
        assert seen[0].is_diagnostic


class TestDatasetFromDict:
    """Tests for loading JSON documents."""

    @pytest.fixture
    def dataset(self):
        """Load the sample document."""
        return dataset_from_dict(sample_document())

    def test_tables_loaded(self, dataset):
        """Test every table is read."""
        assert dataset.qualifications == ["RN", "LPN"]
        assert set(dataset.employees) == {1, 2}
        assert list(dataset.time_blocks) == [10, 11, 12]

    def test_employee_fields(self, dataset):
        """Test workforce rows map onto employees."""
        ada = dataset.employees[1]
        assert ada.priority == 5
        assert ada.requested_time_metric == 10
        assert ada.qualifications == {"RN", "LPN"}
        assert ada.get_availability(Weekday.MONDAY) == [Interval(time(8), time(17))]

    def test_block_fields(self, dataset):
        """Test time block rows map onto blocks."""
        block = dataset.time_blocks[11]
        assert block.interval == Interval(time(13), time(15))
        assert block.time_metric == 2
        assert not block.is_excluded
        assert dataset.time_blocks[12].is_excluded

    def test_diagnostics(self, dataset):
        """Test each configuration gap is reported."""
        types = [e.event_type for e in dataset.diagnostics]
        assert EventType.UNREGISTERED_QUALIFICATION in types  # XRAY on Grace
        assert EventType.UNKNOWN_EMPLOYEE in types  # availability for 99
        assert EventType.UNKNOWN_PAIRED_BLOCK in types  # block 404
        assert dataset.time_blocks[10].paired_block_ids == [11]

    def test_malformed_row_skipped(self):
        """Test a row that cannot be parsed is skipped and reported."""
        document = sample_document()
        document["time_blocks"].append(
            {"id": 13, "label": "Bad", "qualification": "RN", "day": "M",
             "start": "late", "end": "later", "time_metric": 1}
        )
        dataset = dataset_from_dict(document)

        assert 13 not in dataset.time_blocks
        malformed = [e for e in dataset.diagnostics
                     if e.event_type == EventType.MALFORMED_RECORD]
        assert len(malformed) == 1
        assert malformed[0].details["table"] == "time_blocks"

    def test_non_integer_availability_id_skipped(self):
        """Test an availability row with a non-numeric id is skipped and reported."""
        document = sample_document()
        document["availability"].append(
            {"id": "A1", "employee_id": 1, "day": "W", "start": "8:00AM", "end": "5:00PM"}
        )
        dataset = dataset_from_dict(document)

        ada = dataset.employees[1]
        assert ada.get_availability(Weekday.WEDNESDAY) == []
        assert ada.get_availability(Weekday.MONDAY) == [Interval(time(8), time(17))]
        malformed = [e for e in dataset.diagnostics
                     if e.event_type == EventType.MALFORMED_RECORD]
        assert len(malformed) == 1
        assert malformed[0].details["table"] == "availability"

    def test_missing_table(self):
        """Test a document without a table is rejected."""
        document = sample_document()
        del document["availability"]
        with pytest.raises(DatasetError, match="availability"):
            dataset_from_dict(document)

    def test_not_an_object(self):
        """Test a non-object document is rejected."""
        with pytest.raises(DatasetError):
            dataset_from_dict([])


class TestLoadDataset:
    """Tests for loading from files."""

    def test_load_file(self, tmp_path):
        """Test loading a JSON file."""
        path = tmp_path / "blocks.json"
        path.write_text(json.dumps(sample_document()))
        dataset = load_dataset(path)
        assert len(dataset.time_blocks) == 3

    def test_missing_file(self, tmp_path):
        """Test a missing file raises DatasetError."""
        with pytest.raises(DatasetError, match="not found"):
            load_dataset(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        """Test a file that is not JSON raises DatasetError."""
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(DatasetError, match="not valid JSON"):
            load_dataset(path)


class TestSampleDataset:
    """Tests for the synthetic dataset."""

    def test_shape(self):
        """Test sizes and registered qualifications."""
        dataset = create_sample_dataset(count=8, blocks_per_day=6)
        assert len(dataset.employees) == 8
        assert len(dataset.time_blocks) == 30
        assert dataset.qualifications == ["ANAT", "CHEM", "PHYS", "STAT"]
        assert dataset.diagnostics == []

    def test_pairs_share_qualification(self):
        """Test paired sample blocks require the same qualification."""
        dataset = create_sample_dataset()
        paired = [b for b in dataset.time_blocks.values() if b.is_paired]
        assert paired
        for block in paired:
            for sibling in dataset.paired_group(block)[1:]:
                assert sibling.qualification == block.qualification
