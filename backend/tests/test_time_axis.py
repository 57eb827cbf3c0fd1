import pytest

from acadsched.core.exceptions import TimeAxisError
from acadsched.services.time_axis import (
    DEFAULT_AXIS,
    NON_TEACHING_START_LABELS,
    TIME_LABELS,
    Day,
    SlotKey,
    make_key,
    parse_day,
    parse_key,
)


def test_axis_covers_seven_am_to_eight_thirty_pm():
    assert TIME_LABELS[0] == "7:00AM"
    assert TIME_LABELS[-1] == "8:30PM"
    assert len(DEFAULT_AXIS) == 28
    assert NON_TEACHING_START_LABELS[-1] == "6:00PM"


def test_index_and_label_lookup():
    assert DEFAULT_AXIS.index_of("9:00AM") == 4
    assert DEFAULT_AXIS.index_of("9:15AM") is None
    assert DEFAULT_AXIS.label_at(4) == "9:00AM"
    assert DEFAULT_AXIS.label_at(28) is None
    assert DEFAULT_AXIS.label_at(-1) is None


def test_end_label_clamps_to_last_slot():
    assert DEFAULT_AXIS.end_label("9:00AM", 4) == "11:00AM"
    assert DEFAULT_AXIS.end_label("8:00PM", 6) == "8:30PM"
    assert DEFAULT_AXIS.end_label("25:00", 2) == ""


@pytest.mark.parametrize("start,duration", [(0, 1), (4, 4), (12, 6), (20, 7)])
def test_end_label_round_trip_recovers_duration(start, duration):
    start_label = DEFAULT_AXIS.label_at(start)
    end_label = DEFAULT_AXIS.end_label(start_label, duration)
    assert DEFAULT_AXIS.duration_between(start_label, end_label) == duration


def test_clamp_run_never_crosses_the_day():
    assert DEFAULT_AXIS.clamp_run(26, 4) == 2
    assert DEFAULT_AXIS.clamp_run(0, 4) == 4


def test_keys_parse_and_format():
    key = parse_key("Tuesday_1:00PM")
    assert key == SlotKey(Day.tuesday, 12)
    assert key.as_text() == "Tuesday_1:00PM"
    assert make_key("Mon", "7:00AM") == SlotKey(Day.monday, 0)


def test_unknown_day_or_label_is_a_hard_error():
    with pytest.raises(TimeAxisError):
        parse_day("Sunday")
    with pytest.raises(TimeAxisError):
        parse_key("Monday_9:15AM")
    with pytest.raises(TimeAxisError):
        parse_key("Monday9:00AM")
    with pytest.raises(ValueError):
        DEFAULT_AXIS.require_label(40)
