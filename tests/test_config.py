"""
Tests for YAML configuration loading.
"""

from datetime import date
from pathlib import Path

import pytest
from pydantic import ValidationError

from roomschedule.config import ScheduleConfig, WorkingHoursConfig
from roomschedule.domain.clock import to_minutes
from roomschedule.domain.models import Day


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "schedule.yaml"
    path.write_text(text, encoding="utf-8")
    return path


BASIC_CONFIG = """
working_hours:
  start: "08:00"
  end: "16:00"
start_date: 2023-01-02
end_date: 2023-01-15
holidays: ["01-06"]
rooms:
  - name: Raf01
    capacity: 30
  - name: Raf02
    capacity: 60
    data:
      floor: 2
equipment:
  - {room: Raf01, name: projector}
  - {room: Raf02, name: computers, amount: 30}
csv:
  header: false
  columns: [SUBJECT, TEACHER]
"""


class TestLoadFromYaml:
    """Tests for reading config files."""

    def test_load_basic_config(self, tmp_path):
        config = ScheduleConfig.load_from_yaml(_write(tmp_path, BASIC_CONFIG))

        assert config.working_hours.start == "08:00"
        assert config.working_hours.end == "16:00"
        assert config.start_date == date(2023, 1, 2)
        assert config.end_date == date(2023, 1, 15)
        assert config.free_days == [Day.SATURDAY, Day.SUNDAY]
        assert [room.name for room in config.rooms] == ["Raf01", "Raf02"]
        assert config.csv.header is False
        assert config.csv.columns == ["SUBJECT", "TEACHER"]

    def test_missing_file_raises_error(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ScheduleConfig.load_from_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml_raises_error(self, tmp_path):
        with pytest.raises(ValueError, match="Invalid YAML"):
            ScheduleConfig.load_from_yaml(_write(tmp_path, "rooms: [unclosed"))

    def test_non_mapping_root_raises_error(self, tmp_path):
        with pytest.raises(ValueError, match="mapping at the root"):
            ScheduleConfig.load_from_yaml(_write(tmp_path, "- just\n- a list\n"))

    def test_missing_dates_raise_validation_error(self, tmp_path):
        with pytest.raises(ValidationError):
            ScheduleConfig.load_from_yaml(_write(tmp_path, "rooms: []\n"))


class TestValidation:
    """Tests for config validators."""

    def test_unquoted_clock_is_read_as_hours_and_minutes(self, tmp_path):
        config = ScheduleConfig.load_from_yaml(_write(tmp_path, (
            "working_hours: {start: 8:30, end: 16}\n"
            "start_date: 2023-01-02\n"
            "end_date: 2023-01-03\n"
        )))

        assert config.working_hours.start == "08:30"
        assert config.working_hours.end == "16:00"

    def test_unquoted_clock_below_one_hour(self, tmp_path):
        """0:30 is half past midnight, not thirty hours."""
        config = ScheduleConfig.load_from_yaml(_write(tmp_path, (
            "working_hours: {start: 0:30, end: 0:45}\n"
            "start_date: 2023-01-02\n"
            "end_date: 2023-01-03\n"
        )))

        assert config.working_hours.start == "00:30"
        assert config.working_hours.end == "00:45"

    def test_plain_integers_still_load_as_numbers(self, tmp_path):
        config = ScheduleConfig.load_from_yaml(_write(tmp_path, BASIC_CONFIG))

        assert config.rooms[0].capacity == 30
        assert config.rooms[1].data == {"floor": 2}

    def test_integer_clock_is_whole_hours(self):
        hours = WorkingHoursConfig(start=7, end=24)

        assert (hours.start, hours.end) == ("07:00", "24:00")

    def test_integer_clock_past_midnight_is_rejected(self):
        with pytest.raises(ValidationError):
            WorkingHoursConfig(start=8, end=25)

    def test_working_hours_must_be_ordered(self):
        with pytest.raises(ValidationError):
            WorkingHoursConfig(start="16:00", end="08:00")

    def test_invalid_clock_is_rejected(self):
        with pytest.raises(ValidationError):
            WorkingHoursConfig(start="8:75", end="16:00")

    def test_dates_must_be_ordered(self):
        with pytest.raises(ValidationError, match="end_date"):
            ScheduleConfig(start_date=date(2023, 2, 1), end_date=date(2023, 1, 1))

    def test_free_days_accept_names_and_numbers(self):
        config = ScheduleConfig(
            start_date=date(2023, 1, 1),
            end_date=date(2023, 1, 31),
            free_days=["sunday", 5, "SUNDAY"],
        )

        assert config.free_days == [Day.SUNDAY, Day.SATURDAY]

    def test_unknown_free_day_is_rejected(self):
        with pytest.raises(ValidationError):
            ScheduleConfig(start_date=date(2023, 1, 1), end_date=date(2023, 1, 31), free_days=["FUNDAY"])

    def test_duplicate_room_names_are_rejected(self):
        with pytest.raises(ValidationError, match="Duplicate room name"):
            ScheduleConfig(
                start_date=date(2023, 1, 1),
                end_date=date(2023, 1, 31),
                rooms=[{"name": "Raf01"}, {"name": "Raf01"}],
            )

    def test_negative_capacity_is_rejected(self):
        with pytest.raises(ValidationError):
            ScheduleConfig(
                start_date=date(2023, 1, 1),
                end_date=date(2023, 1, 31),
                rooms=[{"name": "Raf01", "capacity": -1}],
            )

    def test_equipment_for_unknown_room_is_rejected(self):
        with pytest.raises(ValidationError, match="unknown room"):
            ScheduleConfig(
                start_date=date(2023, 1, 1),
                end_date=date(2023, 1, 31),
                rooms=[{"name": "Raf01"}],
                equipment=[{"room": "Raf99", "name": "projector"}],
            )

    def test_invalid_holiday_is_rejected(self):
        with pytest.raises(ValidationError):
            ScheduleConfig(start_date=date(2023, 1, 1), end_date=date(2023, 1, 31), holidays=["13-45"])


class TestHolidays:
    """Tests for holiday expansion."""

    def test_month_day_holidays_repeat_every_year(self):
        config = ScheduleConfig(
            start_date=date(2022, 12, 1),
            end_date=date(2023, 1, 31),
            holidays=["01-01", "12.25"],
        )

        assert sorted(config.holiday_dates()) == [
            date(2022, 1, 1),
            date(2022, 12, 25),
            date(2023, 1, 1),
            date(2023, 12, 25),
        ]

    def test_full_date_holiday(self):
        config = ScheduleConfig(
            start_date=date(2023, 1, 1),
            end_date=date(2023, 12, 31),
            holidays=["2023-04-14"],
        )

        assert config.holiday_dates() == [date(2023, 4, 14)]

    def test_leap_day_skipped_in_other_years(self):
        config = ScheduleConfig(
            start_date=date(2023, 1, 1),
            end_date=date(2024, 12, 31),
            holidays=["02-29"],
        )

        assert config.holiday_dates() == [date(2024, 2, 29)]


class TestBuild:
    """Tests for building domain objects from config."""

    def test_build_availability(self, tmp_path):
        availability = ScheduleConfig.load_from_yaml(_write(tmp_path, BASIC_CONFIG)).build_availability()

        assert availability.start == to_minutes("08:00")
        assert availability.end == to_minutes("16:00")
        assert not availability.is_working_day(date(2023, 1, 6))
        assert len(list(availability.dates())) == 9

    def test_build_rooms_attaches_equipment(self, tmp_path):
        rooms = ScheduleConfig.load_from_yaml(_write(tmp_path, BASIC_CONFIG)).build_rooms()

        assert [room.name for room in rooms] == ["Raf01", "Raf02"]
        assert [(item.name, item.amount) for item in rooms[0].equipment] == [("projector", 1)]
        assert [(item.name, item.amount) for item in rooms[1].equipment] == [("computers", 30)]
        assert rooms[1].data == {"floor": 2}
        assert rooms[1].capacity == 60
