"""
JSON persistence for reserved appointments.
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..domain.clock import format_clock
from ..domain.exceptions import AppointmentFormatError
from ..domain.models import Appointment, Day, Room, TimeRange

logger = logging.getLogger(__name__)


class AppointmentRecord(BaseModel):
    """One appointment as stored on disk."""
    day: str
    start: str
    end: str
    start_date: date
    end_date: date
    room: str
    data: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("day")
    @classmethod
    def validate_day(cls, value: str) -> str:
        return Day.from_name(value).name

    @classmethod
    def from_appointment(cls, appointment: Appointment) -> "AppointmentRecord":
        time = appointment.time
        return cls(
            day=time.day.name,
            start=format_clock(time.start),
            end=format_clock(time.end),
            start_date=time.start_date,
            end_date=time.end_date,
            room=appointment.room.name,
            data=dict(appointment.data),
        )

    def to_appointment(self, resolve_room: Callable[[str], Room]) -> Appointment:
        time = TimeRange(
            day=Day[self.day],
            start=self.start,
            end=self.end,
            start_date=self.start_date,
            end_date=self.end_date,
        )
        return Appointment(time=time, room=resolve_room(self.room), data=dict(self.data))


class JsonAppointmentStore:
    """Reads and writes appointments as a JSON list of records."""

    def load(self, path: Path, resolve_room: Callable[[str], Room]) -> List[Appointment]:
        """
        Load appointments from a JSON file.

        Args:
            path: File to read
            resolve_room: Maps a room name to the registered room

        Raises:
            AppointmentFormatError: If the file is not a list of valid records
            RoomNotFoundError: If a record names an unknown room
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise AppointmentFormatError(f"Invalid JSON in {path}: {exc}") from exc

        if not isinstance(raw, list):
            raise AppointmentFormatError(f"{path} must contain a list of appointments.")

        appointments: List[Appointment] = []
        for index, item in enumerate(raw):
            try:
                record = AppointmentRecord.model_validate(item)
                appointments.append(record.to_appointment(resolve_room))
            except (ValidationError, ValueError) as exc:
                raise AppointmentFormatError(f"Invalid appointment #{index} in {path}: {exc}") from exc

        logger.debug("Read %d appointment(s) from %s", len(appointments), path)
        return appointments

    def save(self, path: Path, appointments: Iterable[Appointment]) -> None:
        """Write appointments to a JSON file, replacing its contents."""
        records = [
            AppointmentRecord.from_appointment(appointment).model_dump(mode="json")
            for appointment in appointments
        ]
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(records, f, indent=2, ensure_ascii=False)
        logger.debug("Wrote %d appointment(s) to %s", len(records), path)
