from datetime import datetime, timedelta, timezone

import pytest

from backend.accesscode.app.errors import InvalidCalendarDate
from backend.accesscode.app.models import (
    AbsolutePeriod,
    DurationLimited,
    SchemeTag,
    VerificationMatch,
    from_half_hours,
    month_days,
)
from backend.accesscode.app.windows import UTC8


def test_only_long_temporary_is_repeatable():
    assert SchemeTag.LONG_TEMPORARY.repeatable
    assert not any(tag.repeatable for tag in SchemeTag if tag is not SchemeTag.LONG_TEMPORARY)


def test_duration_from_span_truncates_to_minutes():
    start = datetime(2025, 6, 1, 8, 0, tzinfo=timezone.utc)
    end = start + timedelta(hours=2, minutes=30, seconds=59)

    assert DurationLimited.from_span(start, end) == DurationLimited(hours=2, minutes=30)
    assert DurationLimited(hours=2, minutes=30).half_hours == 5


@pytest.mark.parametrize("half_hours,expected", [(0, (0, 0)), (1, (0, 30)), (255, (127, 30))])
def test_from_half_hours(half_hours, expected):
    scheme = from_half_hours(half_hours)

    assert (scheme.hours, scheme.minutes) == expected


def test_period_end_datetime_is_utc8():
    end = AbsolutePeriod(2025, 6, 2, 18).end_datetime()

    assert end.utcoffset() == timedelta(hours=8)
    assert end.astimezone(timezone.utc) == datetime(2025, 6, 2, 10, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "year,month,day,hour",
    [(2025, 2, 29, 0), (2025, 13, 1, 0), (2025, 4, 31, 0), (2025, 1, 1, 24), (2025, 1, 0, 0)],
)
def test_period_rejects_impossible_dates(year, month, day, hour):
    with pytest.raises(InvalidCalendarDate):
        AbsolutePeriod(year, month, day, hour).end_datetime()


def test_period_from_naive_datetime_is_read_as_utc():
    assert AbsolutePeriod.from_datetime(datetime(2025, 6, 1, 20, 15)) == AbsolutePeriod(2025, 6, 2, 4)
    aware = datetime(2025, 6, 2, 4, 59, tzinfo=UTC8)
    assert AbsolutePeriod.from_datetime(aware) == AbsolutePeriod(2025, 6, 2, 4)


def test_period_parse():
    assert AbsolutePeriod.parse("2025-12-31 23:45:10") == AbsolutePeriod(2025, 12, 31, 23)
    with pytest.raises(InvalidCalendarDate):
        AbsolutePeriod.parse("2025/12/31 23:00")


@pytest.mark.parametrize(
    "year,month,expected",
    [(2024, 2, 29), (2025, 2, 28), (1900, 2, 28), (2000, 2, 29), (2025, 4, 30), (2025, 12, 31)],
)
def test_month_days(year, month, expected):
    assert month_days(year, month) == expected


def test_month_days_rejects_bad_month():
    with pytest.raises(InvalidCalendarDate):
        month_days(2025, 0)


def test_verification_match_expires_at():
    match = VerificationMatch(
        scheme=DurationLimited(1),
        expires_at_ms=1_748_750_400_000,
        remaining=timedelta(minutes=5),
    )

    assert match.expires_at == datetime(2025, 6, 1, 12, tzinfo=UTC8)
