"""Offset-aware clock and the per-scheme time window functions."""
from __future__ import annotations

import time
from datetime import timedelta, timezone
from typing import Callable, Final

__all__ = [
    "DURATION_WINDOW_MS",
    "OffsetClock",
    "SECONDS_PER_DAY",
    "SECONDS_PER_HOUR",
    "TEMPORARY_WINDOW_MS",
    "TimeSource",
    "USE_COUNT_ALIGNMENT",
    "USE_COUNT_WINDOW_MASK",
    "UTC8",
    "UTC8_OFFSET_SECONDS",
    "duration_window",
    "period_day",
    "temporary_window",
    "use_count_window",
]


TEMPORARY_WINDOW_MS: Final[int] = 4_000
USE_COUNT_ALIGNMENT: Final[int] = 32
USE_COUNT_WINDOW_MASK: Final[int] = 0xFFFFFFE0
DURATION_WINDOW_MS: Final[int] = 1_800_000
UTC8_OFFSET_SECONDS: Final[int] = 28_800
SECONDS_PER_DAY: Final[int] = 86_400
SECONDS_PER_HOUR: Final[int] = 3_600

UTC8: Final[timezone] = timezone(timedelta(seconds=UTC8_OFFSET_SECONDS), name="UTC+08:00")

TimeSource = Callable[[], float]


class OffsetClock:
    """Wall clock shifted by a fixed number of seconds.

    Generation and verification only agree when they read the same offset,
    so every scheme takes its notion of "now" from one of these.
    """

    __slots__ = ("_offset_seconds", "_time_source")

    def __init__(self, offset_seconds: int = 0, *, time_source: TimeSource | None = None) -> None:
        self._offset_seconds = int(offset_seconds)
        self._time_source = time_source or time.time

    @property
    def offset_seconds(self) -> int:
        return self._offset_seconds

    def with_offset(self, offset_seconds: int) -> "OffsetClock":
        """Return a clock sharing this time source with a different offset."""

        return OffsetClock(offset_seconds, time_source=self._time_source)

    def now_ms(self) -> int:
        return int(self._time_source() * 1000) + self._offset_seconds * 1000

    def now_seconds(self) -> int:
        return self.now_ms() // 1000


def temporary_window(now_ms: int) -> int:
    """Four second tick."""

    return now_ms // TEMPORARY_WINDOW_MS


def use_count_window(now_ms: int) -> int:
    """Four second tick rounded down to a 32 tick boundary."""

    return (now_ms // TEMPORARY_WINDOW_MS) & USE_COUNT_WINDOW_MASK


def duration_window(now_ms: int) -> int:
    """Thirty minute tick."""

    return now_ms // DURATION_WINDOW_MS


def period_day(now_ms: int) -> int:
    """Day count of the UTC+8 calendar."""

    return (now_ms // 1000 + UTC8_OFFSET_SECONDS) // SECONDS_PER_DAY
