"""Human readable renderings of expiries, durations and schemes."""
from __future__ import annotations

from datetime import datetime, timedelta

from .models import (
    AbsolutePeriod,
    DurationLimited,
    Scheme,
    Temporary,
    UseCountLimited,
)
from .windows import UTC8

__all__ = [
    "describe_scheme",
    "format_duration",
    "format_hours_minutes",
    "format_timestamp_ms",
    "mask_code",
]


TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_timestamp_ms(timestamp_ms: int) -> str:
    """Render epoch milliseconds as UTC+8 wall clock time."""

    return datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC8).strftime(TIMESTAMP_FORMAT)


def format_duration(value: timedelta) -> str:
    total_seconds = max(int(value.total_seconds()), 0)
    days, rest = divmod(total_seconds, 86_400)
    hours, rest = divmod(rest, 3_600)
    minutes, seconds = divmod(rest, 60)
    if days:
        return f"{days}d {hours}h {minutes}m"
    if hours:
        return f"{hours}h {minutes}m"
    if minutes:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def format_hours_minutes(hours: int, minutes: int) -> str:
    """Describe a duration scheme's length, e.g. ``1 hour 30 minutes``."""

    if hours == 0:
        return f"{minutes} minutes"
    hour_text = "1 hour" if hours == 1 else f"{hours} hours"
    if minutes == 0:
        return hour_text
    return f"{hour_text} {minutes} minutes"


def describe_scheme(scheme: Scheme) -> str:
    """Short label for display next to a code."""

    if isinstance(scheme, Temporary):
        return "Temporary code"
    if isinstance(scheme, UseCountLimited):
        return f"Use-count code ({scheme.count} uses)"
    if isinstance(scheme, DurationLimited):
        return f"Duration code ({format_hours_minutes(scheme.hours, scheme.minutes)})"
    if isinstance(scheme, AbsolutePeriod):
        return (
            f"Period code (until {scheme.year:04d}-{scheme.month:02d}-{scheme.day:02d} "
            f"{scheme.hour:02d}:00)"
        )
    raise TypeError(f"Unsupported scheme: {scheme!r}")


def mask_code(code: str, *, prefix: int = 2, suffix: int = 2) -> str:
    """Return a masked representation of a code suitable for logs."""

    token = (code or "").strip()
    if not token:
        return ""
    if len(token) <= prefix + suffix:
        return "*" * len(token)
    return f"{token[:prefix]}…{token[-suffix:]}"
