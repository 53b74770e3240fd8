"""Tests for the dataset container and its interval indexes."""

from datetime import time

import pytest

from blockscheduler.domain.dataset import DatasetBuilder
from blockscheduler.domain.models import Employee, Interval, TimeBlock, Weekday
from blockscheduler.scheduling.index import ScheduleIndex


@pytest.fixture
def dataset():
    """Two RN/LPN employees and four blocks."""
    builder = DatasetBuilder()
    builder.add_qualification("RN")
    builder.add_qualification("LPN")
    builder.add_qualification("XRAY")

    ada = Employee(id=1, priority=9, requested_time_metric=10)
    bea = Employee(id=2, priority=4, requested_time_metric=10)
    builder.add_employee(ada, ["RN", "LPN"])
    builder.add_employee(bea, ["RN"])
    builder.add_availability(1, Weekday.MONDAY, Interval(time(8), time(12)))
    builder.add_availability(1, Weekday.MONDAY, Interval(time(13), time(17)))
    builder.add_availability(2, Weekday.MONDAY, Interval(time(8), time(17)))

    blocks = [
        TimeBlock(1, "A", Weekday.MONDAY, Interval(time(9), time(10)), 1, "RN",
                  paired_block_ids=[2, 1, 2]),
        TimeBlock(2, "B", Weekday.MONDAY, Interval(time(12), time(14)), 2, "RN"),
        TimeBlock(3, "C", Weekday.MONDAY, Interval(time(9), time(11)), 2, "LPN"),
        TimeBlock(4, "D", Weekday.TUESDAY, Interval(time(9), time(11)), 2, "RN", status=1),
    ]
    for block in blocks:
        builder.add_time_block(block)
    return builder.build()


class TestSchedulingDataset:
    """Tests for SchedulingDataset helpers."""

    def test_qualification_counts(self, dataset):
        """Test counts follow registration order and include zeroes."""
        assert dataset.qualification_counts == {"RN": 2, "LPN": 1, "XRAY": 0}

    def test_blocks_for_qualification(self, dataset):
        """Test blocks are filtered in load order."""
        assert [b.id for b in dataset.blocks_for_qualification("RN")] == [1, 2, 4]

    def test_qualification_tally_skips_excluded(self, dataset):
        """Test the tally leaves manually held blocks out of both block counts."""
        dataset.time_blocks[4].assigned_employee = dataset.employees[2]
        dataset.employees[1].assign(dataset.time_blocks[1])

        tally = dataset.qualification_tally()

        assert list(tally) == ["RN", "LPN", "XRAY"]
        assert tally["RN"] == {"qualified_employees": 2, "blocks": 2, "assigned": 1}
        assert tally["LPN"] == {"qualified_employees": 1, "blocks": 1, "assigned": 0}
        assert tally["XRAY"] == {"qualified_employees": 0, "blocks": 0, "assigned": 0}

    def test_paired_group_drops_repeats(self, dataset):
        """Test self references and repeated ids are removed."""
        group = dataset.paired_group(dataset.time_blocks[1])
        assert [b.id for b in group] == [1, 2]

    def test_reset_keeps_excluded_holder(self, dataset):
        """Test reset clears automatic state but not manual assignments."""
        ada = dataset.employees[1]
        manual = dataset.time_blocks[4]
        manual.assigned_employee = ada
        ada.assign(dataset.time_blocks[1])

        dataset.reset()

        assert ada.assigned_blocks == []
        assert not dataset.time_blocks[1].is_assigned
        assert manual.assigned_employee is ada
        assert [b.id for b in dataset.unassigned_blocks] == [1, 2, 3]


class TestScheduleIndex:
    """Tests for ScheduleIndex."""

    @pytest.fixture
    def index(self, dataset):
        """Build the indexes."""
        return ScheduleIndex.build(dataset)

    def test_availability_indexed_per_qualification(self, index):
        """Test each window is indexed under every qualification held."""
        rn = index.employee_tree(Weekday.MONDAY, "RN")
        lpn = index.employee_tree(Weekday.MONDAY, "LPN")
        assert rn.count() == 3
        assert lpn.count() == 2
        assert index.employee_tree(Weekday.MONDAY, "XRAY") is None

    def test_candidates_by_descending_priority(self, dataset, index):
        """Test candidates contain the block and are ordered high to low."""
        candidates = index.candidates_for(dataset.time_blocks[1])
        assert [e.id for e in candidates] == [1, 2]

    def test_candidates_need_containment(self, dataset, index):
        """Test a block spanning two windows matches neither."""
        candidates = index.candidates_for(dataset.time_blocks[2])
        assert [e.id for e in candidates] == [2]

    def test_candidates_absent_bucket(self, dataset, index):
        """Test None is returned when no tree exists for the bucket."""
        assert index.candidates_for(dataset.time_blocks[4]) is None

    def test_blocks_indexed(self, index):
        """Test blocks land in weekday and qualification buckets."""
        assert index.block_tree(Weekday.MONDAY, "RN").count() == 2
        assert index.block_tree(Weekday.TUESDAY, "RN").count() == 1

    def test_blocks_within(self, index):
        """Test blocks contained by a window are found."""
        found = index.blocks_within(Weekday.MONDAY, "RN", Interval(time(8), time(12)))
        assert [b.id for b in found] == [1]
        assert index.blocks_within(Weekday.FRIDAY, "RN", Interval(time(8), time(12))) == []
