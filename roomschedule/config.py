"""
Configuration management using Pydantic models loaded from YAML.
"""

import re
from datetime import date
from pathlib import Path
from typing import Any, Dict, List

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.clock import MINUTES_PER_HOUR, format_clock, to_minutes
from .domain.models import Availability, Day, Equipment, Room

INT_TAG = "tag:yaml.org,2002:int"


class ConfigLoader(yaml.SafeLoader):
    """SafeLoader that keeps unquoted clocks like ``8:30`` as text."""


# YAML 1.1 reads 8:30 as the base-60 integer 510; drop that form of int
ConfigLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != INT_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
ConfigLoader.add_implicit_resolver(
    INT_TAG,
    re.compile(
        r"""^(?:[-+]?0b[0-1_]+
        |[-+]?0[0-7_]+
        |[-+]?(?:0|[1-9][0-9_]*)
        |[-+]?0x[0-9a-fA-F_]+)$""",
        re.X,
    ),
    list("-+0123456789"),
)


class WorkingHoursConfig(BaseModel):
    """Daily opening hours of every room."""
    start: str = "08:00"
    end: str = "20:00"

    @field_validator("start", "end", mode="before")
    @classmethod
    def validate_clock(cls, value: Any) -> str:
        """Accept ``8`` (whole hours), ``"8"`` or ``"8:00"`` and normalise to ``HH:MM``."""
        try:
            if isinstance(value, int) and not isinstance(value, bool):
                return format_clock(to_minutes(value * MINUTES_PER_HOUR))
            return format_clock(to_minutes(value))
        except ValueError as exc:
            raise ValueError(f"Invalid working hours clock: {value!r}") from exc

    @model_validator(mode="after")
    def validate_hours_order(self) -> "WorkingHoursConfig":
        """Ensure the configured window opens before it closes."""
        if to_minutes(self.end) <= to_minutes(self.start):
            raise ValueError("working_hours.end must be later than working_hours.start")
        return self


class RoomConfig(BaseModel):
    """Room configuration."""
    name: str
    capacity: int = 0
    data: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("capacity")
    @classmethod
    def validate_capacity(cls, value: int) -> int:
        if value < 0:
            raise ValueError(f"capacity must not be negative, got {value}")
        return value


class EquipmentConfig(BaseModel):
    """Equipment entry, keyed by the room it belongs to."""
    room: str
    name: str
    amount: int = 1


class CsvConfig(BaseModel):
    """Layout of CSV appointment files."""
    header: bool = True
    columns: List[str] = Field(default_factory=list)


class ScheduleConfig(BaseModel):
    """Application configuration."""
    working_hours: WorkingHoursConfig = Field(default_factory=WorkingHoursConfig)
    start_date: date
    end_date: date
    free_days: List[Day] = Field(default_factory=lambda: [Day.SATURDAY, Day.SUNDAY])
    holidays: List[str] = Field(default_factory=list)  # "MM-DD" repeats every year
    rooms: List[RoomConfig] = Field(default_factory=list)
    equipment: List[EquipmentConfig] = Field(default_factory=list)
    csv: CsvConfig = Field(default_factory=CsvConfig)

    @field_validator("free_days", mode="before")
    @classmethod
    def validate_free_days(cls, value: Any) -> List[Day]:
        """Accept day names or numbers (0=Monday) and drop duplicates."""
        if value is None:
            return []

        days: List[Day] = []
        for item in value:
            if isinstance(item, str):
                day = Day.from_name(item)
            elif isinstance(item, int) and item in range(7):
                day = Day(item)
            else:
                raise ValueError(f"free_days must be day names or 0-6, got {item!r}")
            if day not in days:
                days.append(day)
        return days

    @field_validator("holidays", mode="before")
    @classmethod
    def validate_holidays(cls, value: Any) -> List[str]:
        """Holidays are ``MM-DD`` (or ``MM.DD``) or full ``YYYY-MM-DD`` dates."""
        if value is None:
            return []

        holidays: List[str] = []
        for item in value:
            text = item.isoformat() if isinstance(item, date) else str(item).strip().replace(".", "-")
            fmt = "YYYY-MM-DD" if text.count("-") == 2 else "MM-DD"
            try:
                pendulum.from_format(text if fmt == "YYYY-MM-DD" else f"2000-{text}", "YYYY-MM-DD")
            except ValueError as exc:
                raise ValueError(f"Invalid holiday: {item!r}") from exc
            holidays.append(text)
        return holidays

    @field_validator("rooms")
    @classmethod
    def validate_rooms(cls, value: List[RoomConfig]) -> List[RoomConfig]:
        """Ensure room names are unique."""
        seen: set[str] = set()
        for room in value:
            if room.name in seen:
                raise ValueError(f"Duplicate room name detected: {room.name}")
            seen.add(room.name)
        return value

    @model_validator(mode="after")
    def validate_calendar(self) -> "ScheduleConfig":
        """Ensure the calendar window is ordered and equipment names known rooms."""
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")

        room_names = {room.name for room in self.rooms}
        unknown = sorted({item.room for item in self.equipment if item.room not in room_names})
        if unknown:
            raise ValueError(f"Equipment configured for unknown room(s): {', '.join(unknown)}")
        return self

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "ScheduleConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            ScheduleConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a schedule.yaml file. See schedule.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.load(f, Loader=ConfigLoader) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    def holiday_dates(self) -> List[date]:
        """Expand the configured holidays to concrete dates within the calendar window."""
        dates: List[date] = []
        for holiday in self.holidays:
            if holiday.count("-") == 2:
                dates.append(pendulum.from_format(holiday, "YYYY-MM-DD").date())
                continue
            for year in range(self.start_date.year, self.end_date.year + 1):
                try:
                    dates.append(pendulum.from_format(f"{year}-{holiday}", "YYYY-MM-DD").date())
                except ValueError:
                    # 02-29 outside leap years
                    continue
        return dates

    def build_availability(self) -> Availability:
        """Build the domain availability calendar."""
        return Availability(
            start=to_minutes(self.working_hours.start),
            end=to_minutes(self.working_hours.end),
            start_date=self.start_date,
            end_date=self.end_date,
            free_days=list(self.free_days),
            holidays=frozenset(self.holiday_dates()),
        )

    def build_rooms(self) -> List[Room]:
        """Build domain rooms with their equipment attached."""
        rooms: List[Room] = []
        for room_config in self.rooms:
            room = Room(
                name=room_config.name,
                capacity=room_config.capacity,
                data=dict(room_config.data),
            )
            for item in self.equipment:
                if item.room == room.name:
                    room.add_equipment(Equipment(name=item.name, amount=item.amount))
            rooms.append(room)
        return rooms


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for schedule.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "schedule.yaml"

    if not config_path.exists():
        # Try in the project root (parent of roomschedule/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "schedule.yaml"

    return config_path
