"""
Tests for appointment queries.
"""

from datetime import date

import pytest

from roomschedule.domain.exceptions import InvalidQueryError, RoomNotFoundError
from roomschedule.domain.models import Appointment, Availability, Day, Room, TimeRange
from roomschedule.domain import queries
from roomschedule.domain.schedule import Schedule


def _schedule() -> Schedule:
    """Raf01/Raf02 bookable 08:00-16:00 on weekdays of 2023-01-02..2023-01-13."""
    schedule = Schedule(
        availability=Availability(
            start="08:00",
            end="16:00",
            start_date=date(2023, 1, 2),
            end_date=date(2023, 1, 13),
            free_days=[Day.SATURDAY, Day.SUNDAY],
        ),
        rooms=[Room("Raf01", 30), Room("Raf02", 60)],
    )
    raf01 = schedule.get_room_by_name("Raf01")
    raf02 = schedule.get_room_by_name("Raf02")

    schedule.add_appointment(
        Appointment(TimeRange.on(date(2023, 1, 2), "10:00", "12:00"), raf01, {"subject": "Math", "group": 101})
    )
    schedule.add_appointment(
        Appointment(TimeRange.on(date(2023, 1, 3), "08:00", "09:00"), raf02, {"subject": "Art"})
    )
    schedule.add_appointment(
        Appointment(
            TimeRange(Day.WEDNESDAY, "13:00", "15:00", date(2023, 1, 4), date(2023, 1, 11)),
            raf01,
            {"subject": "Math", "group": 102},
        )
    )
    return schedule


class TestFindByDate:
    """Tests for date lookups."""

    def test_reserved_on_date(self):
        found = _schedule().find_reserved_by_date(date(2023, 1, 2))

        assert len(found) == 1
        assert found[0].get_data("subject") == "Math"

    def test_free_on_date(self):
        found = _schedule().find_free_by_date(date(2023, 1, 2))

        # Raf01 split around 10-12, Raf02 untouched
        assert len(found) == 3

    def test_weekly_reservation_matches_only_its_first_date(self):
        schedule = _schedule()

        assert len(schedule.find_reserved_by_date(date(2023, 1, 4))) == 1
        assert schedule.find_reserved_by_date(date(2023, 1, 11)) == []

    def test_date_without_appointments(self):
        schedule = _schedule()

        assert schedule.find_free_by_date(date(2023, 1, 7)) == []
        assert schedule.find_reserved_by_date(date(2023, 1, 7)) == []


class TestFindByDayAndPeriod:
    """Tests for week-day lookups."""

    def test_window_contained_in_reservation(self):
        found = _schedule().find_reserved_by_day_and_period(
            Day.WEDNESDAY, date(2023, 1, 1), date(2023, 1, 31), "13:30", "14:30"
        )

        assert len(found) == 1
        assert found[0].get_data("group") == 102

    def test_window_sticking_out_is_not_matched(self):
        found = _schedule().find_reserved_by_day_and_period(
            Day.WEDNESDAY, date(2023, 1, 1), date(2023, 1, 31), "12:00", "14:00"
        )

        assert found == []

    def test_date_window_is_inclusive(self):
        schedule = _schedule()

        assert len(schedule.find_reserved_by_day_and_period(
            Day.WEDNESDAY, date(2023, 1, 11), date(2023, 1, 20), "13:00", "15:00"
        )) == 1
        assert schedule.find_reserved_by_day_and_period(
            Day.WEDNESDAY, date(2023, 1, 12), date(2023, 1, 20), "13:00", "15:00"
        ) == []

    def test_free_wednesday_mornings(self):
        found = _schedule().find_free_by_day_and_period(
            Day.WEDNESDAY, date(2023, 1, 2), date(2023, 1, 13), "08:00", "12:00"
        )

        # Two Wednesdays, two rooms
        assert len(found) == 4
        assert all(a.time.day == Day.WEDNESDAY for a in found)


class TestFindByDateTime:
    """Tests for date and clock window lookups."""

    def test_free_slot_containing_window(self):
        found = _schedule().find_free_by_date_time(date(2023, 1, 2), date(2023, 1, 2), "12:00", "16:00")

        assert sorted(a.room.name for a in found) == ["Raf01", "Raf02"]

    def test_reserved_in_range(self):
        found = _schedule().find_reserved_by_date_time(date(2023, 1, 2), date(2023, 1, 13), "08:00", "09:00")

        assert [a.room.name for a in found] == ["Raf02"]

    def test_duration_query(self):
        schedule = _schedule()

        found = schedule.find_free_by_date_time_duration(date(2023, 1, 2), date(2023, 1, 2), "08:00", 120)
        assert sorted(a.room.name for a in found) == ["Raf01", "Raf02"]

        found = schedule.find_free_by_date_time_duration(date(2023, 1, 2), date(2023, 1, 2), "08:00", "2:30")
        assert [a.room.name for a in found] == ["Raf02"]

    def test_reserved_duration_query(self):
        found = _schedule().find_reserved_by_date_time_duration(
            date(2023, 1, 2), date(2023, 1, 2), "10:00", 90
        )

        assert len(found) == 1

    def test_duration_past_midnight_is_rejected(self):
        with pytest.raises(ValueError):
            _schedule().find_free_by_date_time_duration(date(2023, 1, 2), date(2023, 1, 2), "23:00", 120)


class TestFindByRoom:
    """Tests for room lookups."""

    def test_reserved_by_room(self):
        schedule = _schedule()

        assert len(schedule.find_reserved_by_room(schedule.get_room_by_name("Raf01"))) == 2
        assert len(schedule.find_reserved_by_room(Room("Raf02"))) == 1

    def test_free_by_room(self):
        schedule = _schedule()

        found = schedule.find_free_by_room(Room("Raf02"))
        # 10 weekdays, the Jan 3 slot shrunk but still there
        assert len(found) == 10

    def test_unknown_room_raises_error(self):
        schedule = _schedule()

        with pytest.raises(RoomNotFoundError):
            schedule.find_free_by_room(Room("Raf99"))
        with pytest.raises(RoomNotFoundError):
            schedule.find_reserved_by_room(Room("Raf99"))


class TestFindByData:
    """Tests for payload lookups."""

    def test_all_pairs_must_match(self):
        schedule = _schedule()

        assert len(schedule.find_reserved_by_data({"subject": "Math"})) == 2
        assert len(schedule.find_reserved_by_data({"subject": "Math", "group": 102})) == 1
        assert schedule.find_reserved_by_data({"subject": "Math", "group": 103}) == []

    def test_empty_mapping_matches_everything(self):
        assert len(_schedule().find_reserved_by_data({})) == 3

    def test_free_appointments_carry_no_data(self):
        assert _schedule().find_free_by_data({"subject": "Math"}) == []

    def test_with_data_keys(self):
        schedule = _schedule()

        assert len(schedule.find_reserved_with_data_keys("subject")) == 3
        assert len(schedule.find_reserved_with_data_keys("subject", "group")) == 2
        assert schedule.find_free_with_data_keys("subject") == []

    def test_with_no_keys_raises_error(self):
        schedule = _schedule()

        with pytest.raises(InvalidQueryError, match="At least one key"):
            schedule.find_reserved_with_data_keys()
        with pytest.raises(ValueError):
            schedule.find_free_with_data_keys()


def test_find_by_criteria_does_not_mutate_input():
    appointments = list(_schedule().reserved_appointments)
    snapshot = list(appointments)

    found = queries.find_by_criteria(appointments, lambda a: a.room.name == "Raf01")

    assert len(found) == 2
    assert appointments == snapshot
