"""
Application services for loading, mutating and saving a schedule.

The service coordinates reading and writing appointments via a store
adapter and delegates every booking decision to the domain-level
``Schedule``. This keeps the CLI thin and improves testability by allowing
the store dependency to be replaced via a simple protocol.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Protocol

from ..adapters.csv_store import CsvAppointmentStore
from ..adapters.json_store import JsonAppointmentStore
from ..config import ScheduleConfig
from ..domain.exceptions import ScheduleError
from ..domain.models import Appointment, Room
from ..domain.schedule import Schedule

logger = logging.getLogger(__name__)


class AppointmentStoreProtocol(Protocol):
    """Protocol describing the persistence behaviour needed by the service."""

    def load(self, path: Path, resolve_room: Callable[[str], Room]) -> List[Appointment]:
        """Return the appointments stored at ``path``."""

    def save(self, path: Path, appointments: Iterable[Appointment]) -> None:
        """Replace the appointments stored at ``path``."""


def build_schedule(config: ScheduleConfig) -> Schedule:
    """Create a schedule with the configured rooms and their free appointments."""
    schedule = Schedule(availability=config.build_availability(), rooms=config.build_rooms())
    logger.info(
        "Built schedule with %d room(s) and %d free appointment(s)",
        len(schedule.rooms),
        len(schedule.free_appointments),
    )
    return schedule


def store_for_path(path: Path, config: ScheduleConfig) -> AppointmentStoreProtocol:
    """
    Pick the store matching a file suffix.

    Raises:
        ValueError: If the suffix is neither ``.json`` nor ``.csv``
    """
    suffix = path.suffix.lower()
    if suffix == ".json":
        return JsonAppointmentStore()
    if suffix == ".csv":
        return CsvAppointmentStore(
            columns=config.csv.columns,
            header=config.csv.header,
            default_start_date=config.start_date,
            default_end_date=config.end_date,
        )
    raise ValueError(f"Unsupported appointment file type: '{path.suffix}' (use .json or .csv)")


class ScheduleService:
    """
    Orchestrates appointment persistence around a schedule.

    Dependency inversion toward a protocol makes it easy to plug in the JSON
    or CSV store, or a stub in tests.
    """

    def __init__(self, schedule: Schedule, store: AppointmentStoreProtocol) -> None:
        self._schedule = schedule
        self._store = store

    @property
    def schedule(self) -> Schedule:
        return self._schedule

    def load(self, path: Path) -> int:
        """
        Feed every stored appointment through the schedule.

        Either every stored appointment is reserved or none is.

        Returns:
            Number of appointments reserved

        Raises:
            AppointmentOverlapError: If stored appointments collide
        """
        if not path.exists():
            logger.warning("Appointment file %s does not exist, starting empty", path)
            return 0

        appointments = self._store.load(path, self._schedule.get_room_by_name)
        added: List[Appointment] = []
        try:
            for appointment in appointments:
                self._schedule.add_appointment(appointment)
                added.append(appointment)
        except ScheduleError:
            for appointment in reversed(added):
                self._schedule.delete_appointment(appointment)
            logger.warning("Rolled back %d appointment(s) from %s", len(added), path)
            raise

        logger.info("Loaded %d appointment(s) from %s", len(appointments), path)
        return len(appointments)

    def save(self, path: Path) -> int:
        """Write the reserved appointments; returns how many were written."""
        reserved = self._schedule.reserved_appointments
        self._store.save(path, reserved)
        logger.info("Saved %d appointment(s) to %s", len(reserved), path)
        return len(reserved)
