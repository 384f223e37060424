import pytest

from errors import ValidationError
from hours import compute_hours, format_hours


@pytest.mark.parametrize(
    "start, end, expected",
    [
        ("09:00", "17:00", 8.0),
        ("23:00", "02:00", 3.0),
        ("10:00", "10:00", 0.0),
        ("09:00", "14:30", 5.5),
        ("9:15", "12:00", 2.75),
        ("00:00", "23:59", 23.98),
    ],
)
def test_compute_hours(start, end, expected):
    assert compute_hours(start, end) == expected


def test_end_before_start_wraps_to_next_day():
    # One minute short of a full day, not rejected
    assert compute_hours("23:00", "22:59") == 23.98
    assert compute_hours("12:00", "11:59") == 23.98


@pytest.mark.parametrize(
    "start, end",
    [
        ("", "17:00"),
        ("09:00", ""),
        (None, "17:00"),
        ("9am", "17:00"),
        ("25:00", "17:00"),
        ("09:60", "17:00"),
        ("09:00:00", "17:00"),
    ],
)
def test_malformed_times_rejected(start, end):
    with pytest.raises(ValidationError):
        compute_hours(start, end)


def test_result_always_within_a_day():
    for h in range(24):
        for m in (0, 29, 59):
            start = f"{h:02d}:{m:02d}"
            for end in ("00:00", "06:30", "12:00", "23:59"):
                assert 0 <= compute_hours(start, end) <= 24


def test_format_hours():
    assert format_hours(8.5) == "8.5"
    assert format_hours(23.98, 2) == "23.98"
    assert format_hours(None) == "0.0"
    assert format_hours("bad") == "0.0"
