"""
CSV persistence for reserved appointments.

Rows hold the configured data columns followed by ``DAY``, ``TIME``
(``HH:MM-HH:MM``) and ``ROOM``. ``START_DATE`` and ``END_DATE`` are optional
columns; rows without them span the whole calendar window.
"""

import csv
import logging
from datetime import date
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence

import pendulum

from ..domain.clock import format_clock
from ..domain.exceptions import AppointmentFormatError
from ..domain.models import Appointment, Day, Room, TimeRange

logger = logging.getLogger(__name__)

START_DATE = "START_DATE"
END_DATE = "END_DATE"
DAY = "DAY"
TIME = "TIME"
ROOM = "ROOM"

DATE_COLUMNS = (START_DATE, END_DATE)
FIXED_COLUMNS = (DAY, TIME, ROOM)

BOM = "\ufeff"


class CsvAppointmentStore:
    """
    Reads and writes appointments as CSV rows.

    Args:
        columns: Data (and optional date) columns, in file order
        header: Whether files carry a header row
        default_start_date: Start date for rows without ``START_DATE``
        default_end_date: End date for rows without ``END_DATE``
    """

    def __init__(
        self,
        columns: Sequence[str] = (),
        header: bool = True,
        default_start_date: Optional[date] = None,
        default_end_date: Optional[date] = None,
    ):
        self.columns = [column.strip() for column in columns]
        self.header = header
        self.default_start_date = default_start_date
        self.default_end_date = default_end_date

    def load(self, path: Path, resolve_room: Callable[[str], Room]) -> List[Appointment]:
        """
        Load appointments from a CSV file.

        Raises:
            AppointmentFormatError: If a row cannot be parsed
            RoomNotFoundError: If a row names an unknown room
        """
        with open(path, "r", encoding="utf-8", newline="") as f:
            rows = [row for row in csv.reader(f) if row]

        if not rows:
            return []

        if self.header:
            header = [name.replace(BOM, "").strip() for name in rows[0]]
            rows = rows[1:]
        else:
            header = self.columns + list(FIXED_COLUMNS)

        missing = [column for column in FIXED_COLUMNS if column not in header]
        if missing:
            raise AppointmentFormatError(f"{path} is missing column(s): {', '.join(missing)}")

        appointments: List[Appointment] = []
        for line, row in enumerate(rows, start=2 if self.header else 1):
            if len(row) != len(header):
                raise AppointmentFormatError(
                    f"{path}:{line}: expected {len(header)} values, got {len(row)}"
                )
            values = dict(zip(header, row))
            try:
                appointments.append(self._to_appointment(values, resolve_room))
            except ValueError as exc:
                raise AppointmentFormatError(f"{path}:{line}: {exc}") from exc

        logger.debug("Read %d appointment(s) from %s", len(appointments), path)
        return appointments

    def _to_appointment(self, values: Dict[str, str], resolve_room: Callable[[str], Room]) -> Appointment:
        start, separator, end = values[TIME].partition("-")
        if not separator:
            raise ValueError(f"TIME must look like HH:MM-HH:MM, got '{values[TIME]}'")

        start_date = self._parse_date(values.get(START_DATE), self.default_start_date, START_DATE)
        end_date = self._parse_date(values.get(END_DATE), self.default_end_date, END_DATE)

        time = TimeRange(
            day=Day.from_name(values[DAY]),
            start=start.strip(),
            end=end.strip(),
            start_date=start_date,
            end_date=end_date,
        )

        data = {
            column: value
            for column, value in values.items()
            if column not in DATE_COLUMNS + FIXED_COLUMNS
            and (not self.columns or column in self.columns)
        }
        return Appointment(time=time, room=resolve_room(values[ROOM].strip()), data=data)

    @staticmethod
    def _parse_date(text: Optional[str], default: Optional[date], column: str) -> date:
        if text:
            return pendulum.from_format(text.strip(), "YYYY-MM-DD").date()
        if default is None:
            raise ValueError(f"No {column} in row and no calendar default configured")
        return default

    def save(self, path: Path, appointments: Iterable[Appointment]) -> None:
        """Write appointments to a CSV file, replacing its contents."""
        appointments = list(appointments)
        columns = self.columns or self._columns_from_data(appointments)

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            if self.header:
                writer.writerow(columns + list(FIXED_COLUMNS))
            for appointment in appointments:
                writer.writerow(self._to_row(appointment, columns))

        logger.debug("Wrote %d appointment(s) to %s", len(appointments), path)

    @staticmethod
    def _columns_from_data(appointments: List[Appointment]) -> List[str]:
        columns: List[str] = list(DATE_COLUMNS)
        for appointment in appointments:
            for key in appointment.data:
                if key not in columns:
                    columns.append(key)
        return columns

    @staticmethod
    def _to_row(appointment: Appointment, columns: List[str]) -> List[str]:
        time = appointment.time
        row: List[str] = []
        for column in columns:
            if column == START_DATE:
                row.append(time.start_date.format("YYYY-MM-DD"))
            elif column == END_DATE:
                row.append(time.end_date.format("YYYY-MM-DD"))
            else:
                value = appointment.data.get(column)
                row.append("" if value is None else str(value))

        row.extend([
            time.day.name,
            f"{format_clock(time.start)}-{format_clock(time.end)}",
            appointment.room.name,
        ])
        return row
