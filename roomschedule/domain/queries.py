"""
Read-only filters over appointment collections.

Every function takes the collection to search and returns a new list; none
of them mutate what they are given. Clock windows are matched by
containment: the requested window must fit inside the appointment's.
"""

from datetime import date
from typing import Any, Callable, Iterable, List, Mapping, Union

from .clock import ClockLike, add_duration, to_minutes
from .exceptions import InvalidQueryError
from .models import Appointment, Day, Room, as_date
from .overlap import clock_contains

Predicate = Callable[[Appointment], bool]


def find_by_criteria(appointments: Iterable[Appointment], predicate: Predicate) -> List[Appointment]:
    """Return the appointments matching an arbitrary predicate."""
    return [appointment for appointment in appointments if predicate(appointment)]


def _in_window(appointment: Appointment, start_date: date, end_date: date) -> bool:
    # Inclusive on both ends
    return (
        appointment.time.start_date <= as_date(end_date)
        and as_date(start_date) <= appointment.time.end_date
    )


def find_by_date(appointments: Iterable[Appointment], on_date: date) -> List[Appointment]:
    """Appointments starting on exactly ``on_date``."""
    wanted = as_date(on_date)
    return find_by_criteria(appointments, lambda a: a.time.start_date == wanted)


def find_by_day_and_period(
    appointments: Iterable[Appointment],
    day: Day,
    start_date: date,
    end_date: date,
    start: ClockLike,
    end: ClockLike,
) -> List[Appointment]:
    """
    Appointments tagged ``day``, dated within the window, whose clock window
    contains ``start``-``end``.
    """
    start_minutes, end_minutes = to_minutes(start), to_minutes(end)
    return find_by_criteria(
        appointments,
        lambda a: a.time.day == day
        and _in_window(a, start_date, end_date)
        and clock_contains(a.time, start_minutes, end_minutes),
    )


def find_by_date_time(
    appointments: Iterable[Appointment],
    start_date: date,
    end_date: date,
    start: ClockLike,
    end: ClockLike,
) -> List[Appointment]:
    """Appointments dated within the window whose clock window contains ``start``-``end``."""
    start_minutes, end_minutes = to_minutes(start), to_minutes(end)
    return find_by_criteria(
        appointments,
        lambda a: _in_window(a, start_date, end_date)
        and clock_contains(a.time, start_minutes, end_minutes),
    )


def find_by_date_time_duration(
    appointments: Iterable[Appointment],
    start_date: date,
    end_date: date,
    start: ClockLike,
    duration: Union[int, str],
) -> List[Appointment]:
    """Like ``find_by_date_time`` with the end clock given as a duration after ``start``."""
    return find_by_date_time(
        appointments, start_date, end_date, start, add_duration(start, duration)
    )


def find_by_room(appointments: Iterable[Appointment], room: Room) -> List[Appointment]:
    return find_by_criteria(appointments, lambda a: a.room == room)


def find_by_data(appointments: Iterable[Appointment], data: Mapping[str, Any]) -> List[Appointment]:
    """Appointments carrying every key of ``data`` with an equal value."""
    return find_by_criteria(
        appointments,
        lambda a: all(key in a.data and a.data[key] == value for key, value in data.items()),
    )


def find_with_data_keys(appointments: Iterable[Appointment], *keys: str) -> List[Appointment]:
    """
    Appointments carrying every one of ``keys`` in their data.

    Raises:
        InvalidQueryError: If no key is given
    """
    if not keys:
        raise InvalidQueryError("At least one key must be provided for the search.")
    return find_by_criteria(appointments, lambda a: all(key in a.data for key in keys))
