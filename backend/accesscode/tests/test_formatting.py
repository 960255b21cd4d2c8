from datetime import timedelta

import pytest

from backend.accesscode.app import formatting
from backend.accesscode.app.models import AbsolutePeriod, DurationLimited, Temporary, UseCountLimited


def test_format_timestamp_ms_renders_utc8():
    assert formatting.format_timestamp_ms(0) == "1970-01-01 08:00:00"
    assert formatting.format_timestamp_ms(1_748_750_400_000) == "2025-06-01 12:00:00"


@pytest.mark.parametrize(
    "value,expected",
    [
        (timedelta(days=2, hours=3, minutes=4, seconds=5), "2d 3h 4m"),
        (timedelta(hours=1, minutes=30), "1h 30m"),
        (timedelta(minutes=9, seconds=59), "9m 59s"),
        (timedelta(seconds=42), "42s"),
        (timedelta(seconds=-3), "0s"),
    ],
)
def test_format_duration(value, expected):
    assert formatting.format_duration(value) == expected


@pytest.mark.parametrize(
    "hours,minutes,expected",
    [
        (0, 30, "30 minutes"),
        (1, 0, "1 hour"),
        (5, 0, "5 hours"),
        (1, 30, "1 hour 30 minutes"),
    ],
)
def test_format_hours_minutes(hours, minutes, expected):
    assert formatting.format_hours_minutes(hours, minutes) == expected


@pytest.mark.parametrize(
    "scheme,expected",
    [
        (Temporary(), "Temporary code"),
        (UseCountLimited(5), "Use-count code (5 uses)"),
        (DurationLimited(2, 30), "Duration code (2 hours 30 minutes)"),
        (AbsolutePeriod(2025, 7, 4, 9), "Period code (until 2025-07-04 09:00)"),
    ],
)
def test_describe_scheme(scheme, expected):
    assert formatting.describe_scheme(scheme) == expected


def test_describe_scheme_rejects_unknown_values():
    with pytest.raises(TypeError):
        formatting.describe_scheme("temporary")  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "code,prefix,suffix,expected",
    [
        ("5123456789", 2, 2, "51…89"),
        ("5123", 2, 2, "****"),
        ("  ", 2, 2, ""),
    ],
)
def test_mask_code(code, prefix, suffix, expected):
    assert formatting.mask_code(code, prefix=prefix, suffix=suffix) == expected
