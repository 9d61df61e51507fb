"""
Domain-specific exception hierarchy for the room schedule.
"""


class ScheduleError(Exception):
    """Base class for all schedule-level errors."""


class RoomAlreadyExistsError(ScheduleError):
    """Raised when a room with the same name is already registered."""


class RoomNotFoundError(ScheduleError):
    """Raised when a room lookup or room query names an unregistered room."""


class AppointmentOverlapError(ScheduleError):
    """Raised when a reservation collides with an existing one."""


class AppointmentNotFoundError(ScheduleError):
    """Raised when the appointment to move is not currently reserved."""


class DifferentDataError(ScheduleError):
    """Raised when a move would change the appointment's data payload."""


class InvalidQueryError(ScheduleError, ValueError):
    """Raised when a query is called without the selectors it needs."""


class AppointmentFormatError(ScheduleError):
    """Raised when persisted appointment data cannot be parsed."""
