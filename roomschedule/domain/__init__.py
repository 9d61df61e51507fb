"""
Domain layer - Pure scheduling logic without I/O.
"""

from .exceptions import (
    AppointmentFormatError,
    AppointmentNotFoundError,
    AppointmentOverlapError,
    DifferentDataError,
    InvalidQueryError,
    RoomAlreadyExistsError,
    RoomNotFoundError,
    ScheduleError,
)
from .free_set import FreeSetMaintainer
from .models import Appointment, Availability, Day, Equipment, Room, TimeRange
from .overlap import overlaps
from .schedule import Schedule

__all__ = [
    "Appointment",
    "AppointmentFormatError",
    "AppointmentNotFoundError",
    "AppointmentOverlapError",
    "Availability",
    "Day",
    "DifferentDataError",
    "Equipment",
    "FreeSetMaintainer",
    "InvalidQueryError",
    "Room",
    "RoomAlreadyExistsError",
    "RoomNotFoundError",
    "Schedule",
    "ScheduleError",
    "TimeRange",
    "overlaps",
]
