"""
Overlap detection between appointments.

Date ranges are closed: two ranges sharing any calendar date overlap, so
touching endpoints count. Clock ranges are half-open: ``08:00-10:00`` and
``10:00-12:00`` only touch, while ``08:00-10:10`` and ``10:00-12:00`` share
ten minutes and overlap.
"""

from enum import Enum

from .models import Appointment, TimeRange


class Relation(Enum):
    """How a reservation's clock window sits against a free one."""
    DISJOINT = "disjoint"
    IDENTICAL = "identical"
    SAME_START = "same start"
    SAME_END = "same end"
    INSIDE = "inside"
    CLIPPED = "clipped"


def dates_overlap(a: TimeRange, b: TimeRange) -> bool:
    """Check if two date ranges share at least one date."""
    return a.start_date <= b.end_date and b.start_date <= a.end_date


def clocks_overlap(a: TimeRange, b: TimeRange) -> bool:
    """Check if two clock windows share at least one minute."""
    return a.start < b.end and b.start < a.end


def clock_contains(outer: TimeRange, start: int, end: int) -> bool:
    """Check if the window ``start``-``end`` lies within ``outer``'s clock window."""
    return outer.start <= start and end <= outer.end


def overlaps(a: Appointment, b: Appointment) -> bool:
    """
    Check if two appointments collide.

    They collide when they are in the same room, carry the same day tag, are
    not the same appointment, and both their date ranges and their clock
    windows overlap.
    """
    return (
        a.room == b.room
        and a.time.day == b.time.day
        and a != b
        and dates_overlap(a.time, b.time)
        and clocks_overlap(a.time, b.time)
    )


def classify(free: TimeRange, reserved: TimeRange) -> Relation:
    """
    Classify a reservation's clock window against a free window.

    The checks run in precedence order; ``CLIPPED`` covers every remaining
    overlap, i.e. the reservation swallows the free window entirely or
    crosses only one of its edges.
    """
    if not clocks_overlap(free, reserved):
        return Relation.DISJOINT
    if free.start == reserved.start and free.end == reserved.end:
        return Relation.IDENTICAL
    if free.start == reserved.start and reserved.end < free.end:
        return Relation.SAME_START
    if free.end == reserved.end and free.start < reserved.start:
        return Relation.SAME_END
    if free.start < reserved.start and reserved.end < free.end:
        return Relation.INSIDE
    return Relation.CLIPPED
