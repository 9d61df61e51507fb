"""
Domain models for rooms, time ranges and appointments.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from enum import IntEnum
from typing import Any, Dict, FrozenSet, Iterator, List

import pendulum
from pendulum import Date

from .clock import ClockLike, format_clock, to_minutes


def as_date(value: date) -> Date:
    """Normalise any ``date`` (or ``datetime``) to a ``pendulum.Date``."""
    if isinstance(value, Date):
        return value
    return pendulum.date(value.year, value.month, value.day)


class Day(IntEnum):
    """Week days, numbered like ``date.weekday()``."""
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def from_date(cls, value: date) -> "Day":
        """Return the week day a calendar date falls on."""
        return cls(value.weekday())

    @classmethod
    def from_name(cls, name: str) -> "Day":
        """Look up a day by its (case-insensitive) name."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown day name: '{name}'") from None


@dataclass(frozen=True)
class TimeRange:
    """
    A clock window repeated on one week day across a range of dates.

    ``start``/``end`` are minutes since midnight. The ``day`` tag is set at
    creation and is not recomputed from the dates.

    Invariant: start clock before end clock, start date not after end date.
    """
    day: Day
    start: int
    end: int
    start_date: Date
    end_date: Date

    def __post_init__(self):
        object.__setattr__(self, "day", Day(self.day))
        object.__setattr__(self, "start", to_minutes(self.start))
        object.__setattr__(self, "end", to_minutes(self.end))
        object.__setattr__(self, "start_date", as_date(self.start_date))
        object.__setattr__(self, "end_date", as_date(self.end_date))

        if self.start >= self.end:
            raise ValueError(
                f"Start time {format_clock(self.start)} must be before end time {format_clock(self.end)}"
            )
        if self.start_date > self.end_date:
            raise ValueError(
                f"Start date {self.start_date} must not be after end date {self.end_date}"
            )

    @classmethod
    def on(cls, on_date: date, start: ClockLike, end: ClockLike) -> "TimeRange":
        """Build a single-day range; the day tag is taken from the date."""
        return cls(
            day=Day.from_date(on_date),
            start=start,
            end=end,
            start_date=on_date,
            end_date=on_date,
        )

    @property
    def date(self) -> Date:
        """The date of a single-day range."""
        return self.start_date

    def is_single_day(self) -> bool:
        return self.start_date == self.end_date

    def duration_minutes(self) -> int:
        """Return the clock window length in minutes."""
        return self.end - self.start

    def with_clock(self, start: int, end: int) -> "TimeRange":
        """Copy of this range with another clock window."""
        return replace(self, start=start, end=end)

    def on_date(self, value: date) -> "TimeRange":
        """Copy of this range narrowed to a single date, keeping the day tag."""
        return replace(self, start_date=value, end_date=value)

    def __str__(self) -> str:
        dates = (
            self.start_date.format("YYYY-MM-DD")
            if self.is_single_day()
            else f"{self.start_date.format('YYYY-MM-DD')}..{self.end_date.format('YYYY-MM-DD')}"
        )
        return f"{self.day.name} {dates} {format_clock(self.start)}-{format_clock(self.end)}"


@dataclass(frozen=True)
class Equipment:
    """A named piece of room equipment."""
    name: str
    amount: int = 1


@dataclass(eq=False)
class Room:
    """
    A bookable room.

    Rooms are identified by name alone: two ``Room`` objects with the same
    name are the same room, whatever their capacity or equipment says.
    """
    name: str
    capacity: int = 0
    equipment: List[Equipment] = field(default_factory=list)
    data: Dict[str, Any] = field(default_factory=dict)

    def add_equipment(self, equipment: Equipment) -> None:
        self.equipment.append(equipment)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Room):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)


@dataclass(frozen=True)
class Appointment:
    """
    A time range in a room with an arbitrary data payload.

    Equality and hashing use ``(time, room)`` only; ``data`` never takes part.
    The same slot with a different payload is the same appointment, which is
    what lets reserved and free appointments be found and replaced in their
    collections independently of what they carry.
    """
    time: TimeRange
    room: Room
    data: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def put_data(self, key: str, value: Any) -> None:
        self.data[key] = value

    def get_data(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def with_time(self, time: TimeRange) -> "Appointment":
        """Copy of this appointment in another time range, sharing the room."""
        return Appointment(time=time, room=self.room, data=dict(self.data))

    def __str__(self) -> str:
        return f"{self.room.name} {self.time}"


@dataclass
class Availability:
    """
    The calendar window in which rooms can be booked.

    Free appointments are seeded for every date between ``start_date`` and
    ``end_date`` that is neither a free week day nor a holiday, spanning the
    working-hours clock window.
    """
    start: int
    end: int
    start_date: Date
    end_date: Date
    free_days: List[Day] = field(default_factory=list)
    holidays: FrozenSet[Date] = frozenset()

    def __post_init__(self):
        self.start = to_minutes(self.start)
        self.end = to_minutes(self.end)
        self.start_date = as_date(self.start_date)
        self.end_date = as_date(self.end_date)
        self.free_days = [Day(day) for day in self.free_days]
        self.holidays = frozenset(as_date(holiday) for holiday in self.holidays)

        if self.start >= self.end:
            raise ValueError(
                f"Working hours must open before they close, got "
                f"{format_clock(self.start)}-{format_clock(self.end)}"
            )
        if self.start_date > self.end_date:
            raise ValueError(
                f"Start date {self.start_date} must not be after end date {self.end_date}"
            )

    def is_working_day(self, value: date) -> bool:
        """Check if a given date is bookable."""
        return Day.from_date(value) not in self.free_days and as_date(value) not in self.holidays

    def dates(self) -> Iterator[Date]:
        """Yield every bookable date in the calendar window."""
        current = self.start_date
        while current <= self.end_date:
            if self.is_working_day(current):
                yield current
            current = current.add(days=1)

    def free_slot_for(self, value: date) -> TimeRange | None:
        """
        Get the working-hours range for a specific date.
        Returns None if it's not a working day or lies outside the window.
        """
        if not self.start_date <= as_date(value) <= self.end_date:
            return None
        if not self.is_working_day(value):
            return None
        return TimeRange.on(value, self.start, self.end)
