"""Data structures backing the assignment engine."""

from blockscheduler.structures.interval_tree import IntervalNode, IntervalTree

__all__ = [
    "IntervalNode",
    "IntervalTree",
]
