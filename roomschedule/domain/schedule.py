"""
The schedule aggregate: rooms, reserved appointments and free appointments.

All mutations go through this class. Collisions are detected before anything
is changed, so a failed operation leaves the schedule exactly as it was.
"""

import logging
from datetime import date
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from . import queries
from .clock import ClockLike
from .exceptions import (
    AppointmentNotFoundError,
    AppointmentOverlapError,
    DifferentDataError,
    RoomAlreadyExistsError,
    RoomNotFoundError,
)
from .free_set import FreeSetMaintainer
from .models import Appointment, Availability, Day, Room, TimeRange
from .overlap import overlaps

logger = logging.getLogger(__name__)


class Schedule:
    """
    Keeps reserved and free appointments for a set of rooms mutually consistent.

    For every room and day the reserved and free appointments never overlap,
    and together they tile the room's availability window. Rooms registered
    while an ``Availability`` is set get one free appointment per bookable
    date, spanning the working hours.

    Not thread-safe: one owner mutates a schedule at a time.
    """

    def __init__(
        self,
        availability: Optional[Availability] = None,
        rooms: Iterable[Room] = (),
    ) -> None:
        self._availability = availability
        self._reserved: List[Appointment] = []
        self._free: List[Appointment] = []
        self._rooms: List[Room] = []
        self._maintainer = FreeSetMaintainer(self._free)

        for room in rooms:
            self.add_room(room)

    @property
    def availability(self) -> Optional[Availability]:
        return self._availability

    @property
    def rooms(self) -> Tuple[Room, ...]:
        return tuple(self._rooms)

    @property
    def free_appointments(self) -> Tuple[Appointment, ...]:
        return tuple(self._free)

    @property
    def reserved_appointments(self) -> Tuple[Appointment, ...]:
        return tuple(self._reserved)

    # Rooms

    def add_room(self, room: Room) -> None:
        """
        Register a room and seed its free appointments.

        Raises:
            RoomAlreadyExistsError: If a room with the same name is registered
        """
        if room in self._rooms:
            raise RoomAlreadyExistsError(f"Room already exists: '{room.name}'")

        self._rooms.append(room)
        seeded = self._seed_free_appointments(room)
        logger.debug("Added room %s with %d free appointment(s)", room.name, seeded)

    def _seed_free_appointments(self, room: Room) -> int:
        if self._availability is None:
            return 0

        seeded = 0
        for bookable in self._availability.dates():
            time = TimeRange.on(bookable, self._availability.start, self._availability.end)
            self._free.append(Appointment(time=time, room=room))
            seeded += 1
        return seeded

    def delete_room(self, room: Room) -> None:
        """
        Remove a room together with all of its appointments.

        Raises:
            RoomNotFoundError: If the room is not registered
        """
        self._require_room(room)

        self._rooms.remove(room)
        self._reserved[:] = [a for a in self._reserved if a.room != room]
        self._free[:] = [a for a in self._free if a.room != room]
        self._maintainer.forget_room(room)
        logger.debug("Deleted room %s", room.name)

    def get_room_by_name(self, name: str) -> Room:
        """
        Find a registered room by name.

        Raises:
            RoomNotFoundError: If no room has that name
        """
        for room in self._rooms:
            if room.name == name:
                return room
        raise RoomNotFoundError(f"Room not found: '{name}'")

    def _require_room(self, room: Room) -> None:
        if room not in self._rooms:
            raise RoomNotFoundError(f"Room not found: '{room.name}'")

    # Appointments

    def is_appointment_free(self, appointment: Appointment) -> bool:
        """Check that no reserved appointment collides with ``appointment``."""
        return not any(overlaps(reserved, appointment) for reserved in self._reserved)

    def add_appointment(self, appointment: Appointment) -> None:
        """
        Reserve an appointment and carve it out of the free appointments.

        Raises:
            RoomNotFoundError: If the appointment's room is not registered
            AppointmentOverlapError: If it collides with a reserved appointment
                or is already reserved
        """
        self._require_room(appointment.room)
        if appointment in self._reserved or not self.is_appointment_free(appointment):
            raise AppointmentOverlapError(
                f"Appointment {appointment} overlaps with another appointment"
            )

        self._reserved.append(appointment)
        consumed = self._maintainer.apply_reservation(appointment)
        logger.debug("Reserved %s, consuming %d free piece(s)", appointment, len(consumed))

    def delete_appointment(self, appointment: Appointment) -> None:
        """Cancel a reservation and give its time back. Does nothing if it is not reserved."""
        if appointment not in self._reserved:
            logger.debug("Nothing to delete for %s", appointment)
            return

        self._reserved.remove(appointment)
        self._maintainer.retract_reservation(appointment)
        logger.debug("Deleted %s", appointment)

    def change_appointment(self, old: Appointment, new: Appointment) -> None:
        """
        Move a reservation to another slot, keeping its data.

        Either the move happens completely or the schedule is left untouched.

        Raises:
            AppointmentNotFoundError: If ``old`` is not reserved
            RoomNotFoundError: If ``new`` is in an unregistered room
            DifferentDataError: If the reserved appointment and ``new`` carry different data
            AppointmentOverlapError: If ``new`` collides with any other reservation
        """
        if old not in self._reserved:
            raise AppointmentNotFoundError(f"Appointment not found: {old}")
        self._require_room(new.room)

        # Compare against the stored payload, not the one the caller passed in
        stored = self._reserved[self._reserved.index(old)]
        if not self._same_data(stored, new):
            raise DifferentDataError(f"Appointments {stored} and {new} have different data")

        others = [reserved for reserved in self._reserved if reserved != old]
        if new in others or any(overlaps(reserved, new) for reserved in others):
            raise AppointmentOverlapError(
                f"Appointment {old} cannot be moved to {new} due to overlapping with another appointment"
            )

        self.delete_appointment(old)
        self.add_appointment(new)
        logger.debug("Moved %s to %s", old, new)

    @staticmethod
    def _same_data(a: Appointment, b: Appointment) -> bool:
        # Same size, same keys, equal values
        return len(a.data) == len(b.data) and all(
            key in b.data and b.data[key] == value for key, value in a.data.items()
        )

    def footprint(self, appointment: Appointment) -> List[TimeRange]:
        """Free time consumed by a reserved appointment, one piece per date."""
        return self._maintainer.footprint(appointment)

    # Queries

    def find_free_by_date(self, on_date: date) -> List[Appointment]:
        return queries.find_by_date(self._free, on_date)

    def find_reserved_by_date(self, on_date: date) -> List[Appointment]:
        return queries.find_by_date(self._reserved, on_date)

    def find_free_by_day_and_period(
        self, day: Day, start_date: date, end_date: date, start: ClockLike, end: ClockLike
    ) -> List[Appointment]:
        return queries.find_by_day_and_period(self._free, day, start_date, end_date, start, end)

    def find_reserved_by_day_and_period(
        self, day: Day, start_date: date, end_date: date, start: ClockLike, end: ClockLike
    ) -> List[Appointment]:
        return queries.find_by_day_and_period(self._reserved, day, start_date, end_date, start, end)

    def find_free_by_date_time(
        self, start_date: date, end_date: date, start: ClockLike, end: ClockLike
    ) -> List[Appointment]:
        return queries.find_by_date_time(self._free, start_date, end_date, start, end)

    def find_reserved_by_date_time(
        self, start_date: date, end_date: date, start: ClockLike, end: ClockLike
    ) -> List[Appointment]:
        return queries.find_by_date_time(self._reserved, start_date, end_date, start, end)

    def find_free_by_date_time_duration(
        self, start_date: date, end_date: date, start: ClockLike, duration: Union[int, str]
    ) -> List[Appointment]:
        """Free appointments with room for ``duration`` starting at ``start``."""
        return queries.find_by_date_time_duration(self._free, start_date, end_date, start, duration)

    def find_reserved_by_date_time_duration(
        self, start_date: date, end_date: date, start: ClockLike, duration: Union[int, str]
    ) -> List[Appointment]:
        return queries.find_by_date_time_duration(self._reserved, start_date, end_date, start, duration)

    def find_free_by_room(self, room: Room) -> List[Appointment]:
        """
        Raises:
            RoomNotFoundError: If the room is not registered
        """
        self._require_room(room)
        return queries.find_by_room(self._free, room)

    def find_reserved_by_room(self, room: Room) -> List[Appointment]:
        """
        Raises:
            RoomNotFoundError: If the room is not registered
        """
        self._require_room(room)
        return queries.find_by_room(self._reserved, room)

    def find_free_by_data(self, data: Mapping[str, Any]) -> List[Appointment]:
        return queries.find_by_data(self._free, data)

    def find_reserved_by_data(self, data: Mapping[str, Any]) -> List[Appointment]:
        return queries.find_by_data(self._reserved, data)

    def find_free_with_data_keys(self, *keys: str) -> List[Appointment]:
        return queries.find_with_data_keys(self._free, *keys)

    def find_reserved_with_data_keys(self, *keys: str) -> List[Appointment]:
        return queries.find_with_data_keys(self._reserved, *keys)
