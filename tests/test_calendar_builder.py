"""
Tests for expanding calendars into period slots.
"""
import pytest
from models.schemas import BreakWindow, CalendarConfig
from service.calendar_builder import build_slots
from service.errors import InvalidCalendarError
from service.presets import get_preset, preset_names


def get_calendar(**overrides):
    """Five days, 08:00-15:00, 60 minute periods, lunch 11:00-12:00."""
    data = {
        "working_days": ["MON", "TUE", "WED", "THU", "FRI"],
        "start_time": "08:00",
        "end_time": "15:00",
        "period_duration": 60,
        "breaks": [BreakWindow(name="Lunch", start_time="11:00", end_time="12:00")]
    }
    data.update(overrides)
    return CalendarConfig(**data)


def test_slots_numbered_from_one_around_break():
    table = build_slots(get_calendar())

    assert table.days == ("MON", "TUE", "WED", "THU", "FRI")
    monday = table.slots("MON")
    assert [s.period_index for s in monday] == [1, 2, 3, 4, 5, 6]
    assert [(s.start_time, s.end_time) for s in monday] == [
        ("08:00", "09:00"), ("09:00", "10:00"), ("10:00", "11:00"),
        ("12:00", "13:00"), ("13:00", "14:00"), ("14:00", "15:00"),
    ]
    assert table.max_period_index == 6
    assert len(table.all_slots()) == 30


def test_every_day_has_same_geometry():
    table = build_slots(get_calendar())
    reference = [(s.start_time, s.end_time) for s in table.slots("MON")]
    for day in table.days:
        assert [(s.start_time, s.end_time) for s in table.slots(day)] == reference
        assert all(s.day == day for s in table.slots(day))


def test_adjacent_pairs_do_not_span_break():
    table = build_slots(get_calendar())
    pairs = [(a.period_index, b.period_index) for a, b in table.adjacent_pairs("TUE")]

    # 3 ends at 11:00 and 4 starts at 12:00
    assert pairs == [(1, 2), (2, 3), (4, 5), (5, 6)]
    assert not table.is_adjacent(table.slot("TUE", 3), table.slot("TUE", 4))
    assert not table.is_adjacent(table.slot("MON", 1), table.slot("TUE", 2))


def test_slot_lookup_is_one_based():
    table = build_slots(get_calendar())

    assert table.slot("MON", 1).start_time == "08:00"
    assert table.slot("MON", 6).start_time == "14:00"
    with pytest.raises(IndexError):
        table.slot("MON", 0)
    with pytest.raises(IndexError):
        table.slot("MON", 7)


def test_partial_trailing_period_dropped():
    table = build_slots(get_calendar(end_time="15:30", breaks=[]))
    assert table.max_period_index == 7
    assert table.slots("MON")[-1].end_time == "15:00"


def test_school_preset_slots():
    table = build_slots(get_preset("SCHOOL"))
    monday = table.slots("MON")

    assert len(monday) == 6
    assert monday[3].end_time == "12:30"
    assert monday[4].start_time == "13:30"
    assert [(a.period_index, b.period_index) for a, b in table.adjacent_pairs("MON")] == [
        (1, 2), (2, 3), (3, 4), (5, 6)
    ]


def test_all_presets_are_valid():
    assert set(preset_names()) == {"SCHOOL", "MADRASSA", "TUITION"}
    assert build_slots(get_preset("madrassa")).max_period_index == 3
    tuition = build_slots(get_preset("TUITION"))
    assert tuition.days == ("SAT", "SUN")
    assert [s.start_time for s in tuition.slots("SAT")] == ["09:00", "10:00", "11:15"]


def test_unknown_preset():
    with pytest.raises(KeyError):
        get_preset("UNIVERSITY")


@pytest.mark.parametrize("overrides", [
    {"period_duration": 0},
    {"period_duration": -45},
    {"start_time": "15:00", "end_time": "08:00"},
    {"start_time": "08:00", "end_time": "08:00"},
    {"start_time": "8am"},
    {"working_days": []},
    {"working_days": ["MON", "TUE", "MON"]},
    {"breaks": [BreakWindow(name="Early", start_time="07:00", end_time="08:30")]},
    {"breaks": [BreakWindow(name="Late", start_time="14:30", end_time="15:30")]},
    {"breaks": [BreakWindow(name="Backwards", start_time="12:00", end_time="11:00")]},
    {"breaks": [
        BreakWindow(name="Lunch", start_time="11:00", end_time="12:00"),
        BreakWindow(name="Prayer", start_time="11:30", end_time="12:15"),
    ]},
])
def test_invalid_calendar_rejected(overrides):
    with pytest.raises(InvalidCalendarError):
        build_slots(get_calendar(**overrides))


def test_touching_breaks_allowed():
    table = build_slots(get_calendar(breaks=[
        BreakWindow(name="Short", start_time="10:00", end_time="10:30"),
        BreakWindow(name="Lunch", start_time="10:30", end_time="11:00"),
    ]))
    assert [s.start_time for s in table.slots("MON")] == [
        "08:00", "09:00", "11:00", "12:00", "13:00", "14:00"
    ]


def test_calendar_with_no_room_for_a_period():
    table = build_slots(get_calendar(start_time="08:00", end_time="08:30", breaks=[]))
    assert table.max_period_index == 0
    assert table.all_slots() == []
