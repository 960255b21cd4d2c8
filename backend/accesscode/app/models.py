"""Value types shared by the schemes, the engine facade and the service layer."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import ClassVar, Union

from .errors import InvalidCalendarDate
from .windows import UTC8

__all__ = [
    "AbsolutePeriod",
    "DurationLimited",
    "GeneratedCredential",
    "Scheme",
    "SchemeTag",
    "Temporary",
    "UseCountLimited",
    "VerificationMatch",
    "from_half_hours",
    "month_days",
]


_PERIOD_FORMAT = "%Y-%m-%d %H:%M:%S"


class SchemeTag(str, Enum):
    """Identifiers for the credential schemes."""

    TEMPORARY = "temporary"
    USE_COUNT = "use_count"
    DURATION = "duration"
    PERIOD = "period"
    LONG_TEMPORARY = "long_temporary"

    @property
    def repeatable(self) -> bool:
        """``True`` for schemes that may be reissued to the same subject."""

        return self is SchemeTag.LONG_TEMPORARY


@dataclass(frozen=True, slots=True)
class Temporary:
    """Ten minute code derived from a four second window."""

    tag: ClassVar[SchemeTag] = SchemeTag.TEMPORARY


@dataclass(frozen=True, slots=True)
class UseCountLimited:
    """Code carrying a use count, valid for roughly twenty hours."""

    count: int

    tag: ClassVar[SchemeTag] = SchemeTag.USE_COUNT


@dataclass(frozen=True, slots=True)
class DurationLimited:
    """Code valid for ``hours`` plus ``minutes`` from generation."""

    hours: int
    minutes: int = 0

    tag: ClassVar[SchemeTag] = SchemeTag.DURATION

    @property
    def half_hours(self) -> int:
        return self.hours * 2 + self.minutes // 30

    @classmethod
    def from_span(cls, start: datetime, end: datetime) -> "DurationLimited":
        """Build the duration between two instants, truncated to whole minutes."""

        total_minutes = int((end - start).total_seconds() // 60)
        return cls(hours=total_minutes // 60, minutes=total_minutes % 60)


@dataclass(frozen=True, slots=True)
class AbsolutePeriod:
    """Code valid until a UTC+8 calendar hour."""

    year: int
    month: int
    day: int
    hour: int

    tag: ClassVar[SchemeTag] = SchemeTag.PERIOD

    def end_datetime(self) -> datetime:
        """Return the end instant, raising :class:`InvalidCalendarDate` when impossible."""

        if not 1 <= self.month <= 12:
            raise InvalidCalendarDate("Month must be between 1 and 12")
        if not 1 <= self.day <= 31:
            raise InvalidCalendarDate("Day must be between 1 and 31")
        if not 0 <= self.hour <= 23:
            raise InvalidCalendarDate("Hour must be between 0 and 23")
        try:
            return datetime(self.year, self.month, self.day, self.hour, tzinfo=UTC8)
        except ValueError as exc:
            raise InvalidCalendarDate(f"Invalid date: {exc}") from exc

    @classmethod
    def from_datetime(cls, moment: datetime) -> "AbsolutePeriod":
        """Project ``moment`` onto the UTC+8 calendar; naive values are taken as UTC."""

        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        local = moment.astimezone(UTC8)
        return cls(year=local.year, month=local.month, day=local.day, hour=local.hour)

    @classmethod
    def parse(cls, text: str) -> "AbsolutePeriod":
        """Parse ``YYYY-MM-DD HH:MM:SS``; minutes and seconds are ignored."""

        try:
            parsed = datetime.strptime(text.strip(), _PERIOD_FORMAT)
        except (AttributeError, ValueError) as exc:
            raise InvalidCalendarDate(
                "Date time must look like YYYY-MM-DD HH:MM:SS"
            ) from exc
        return cls(year=parsed.year, month=parsed.month, day=parsed.day, hour=parsed.hour)


Scheme = Union[Temporary, UseCountLimited, DurationLimited, AbsolutePeriod]


@dataclass(frozen=True, slots=True)
class GeneratedCredential:
    """A freshly minted code and its human-facing description."""

    code: str
    expires_at: str
    message: str
    scheme: Scheme


@dataclass(frozen=True, slots=True)
class VerificationMatch:
    """Scheme parameters recovered from a code that is still valid."""

    scheme: Scheme
    expires_at_ms: int
    remaining: timedelta

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(self.expires_at_ms / 1000, tz=UTC8)


def from_half_hours(half_hours: int) -> DurationLimited:
    """Convert half-hour units back into a duration."""

    return DurationLimited(hours=half_hours // 2, minutes=(half_hours % 2) * 30)


def month_days(year: int, month: int) -> int:
    """Number of days in ``month`` of ``year``."""

    if not 1 <= month <= 12:
        raise InvalidCalendarDate("Month must be between 1 and 12")
    if month == 2:
        leap = year % 400 == 0 or (year % 4 == 0 and year % 100 != 0)
        return 29 if leap else 28
    return 30 if month in (4, 6, 9, 11) else 31
