"""Codes valid for a whole number of half hours from generation."""
from __future__ import annotations

from typing import Final

from ..errors import DurationHoursOutOfRange, DurationMinutesInvalid, DurationTooShort
from ..formatting import format_hours_minutes, format_timestamp_ms
from ..models import SchemeTag, VerificationMatch, from_half_hours
from ..windows import DURATION_WINDOW_MS, duration_window
from .base import WINDOW_VALUE_MASK, SchemeGenerator

__all__ = [
    "DURATION_TAG",
    "DurationScheme",
    "MAX_DURATION_HOURS",
    "to_half_hours",
]


DURATION_TAG: Final[int] = 0x8000_0000
MAX_DURATION_HOURS: Final[int] = 127
ALLOWED_MINUTES: Final[tuple[int, ...]] = (0, 30)
# Half-hour units occupy the low byte of the cipher input.
_WINDOW_STRIDE: Final[int] = 256


def to_half_hours(hours: int, minutes: int) -> int:
    """Encode a duration as ``hours*2 + minutes/30`` after validating it.

    A zero length duration is rejected.
    """

    if not 0 <= hours <= MAX_DURATION_HOURS:
        raise DurationHoursOutOfRange(f"Hours must be between 0 and {MAX_DURATION_HOURS}")
    if minutes not in ALLOWED_MINUTES:
        raise DurationMinutesInvalid("Minutes must be 0 or 30")
    if hours == 0 and minutes == 0:
        raise DurationTooShort("Duration must be at least 30 minutes")
    return hours * 2 + minutes // 30


def _crypto_input(window: int, half_hours: int) -> int:
    return (window * _WINDOW_STRIDE + DURATION_TAG + half_hours) & WINDOW_VALUE_MASK


class DurationScheme(SchemeGenerator):
    tag = SchemeTag.DURATION
    default_tolerance = 2
    default_remaining_tolerance = 5

    @staticmethod
    def expires_at_ms(window: int, half_hours: int) -> int:
        return (window + half_hours) * DURATION_WINDOW_MS

    def generate(self, admin_secret: str, hours: int, minutes: int = 0) -> tuple[str, str, str]:
        self.check_admin_secret(admin_secret)
        half_hours = to_half_hours(hours, minutes)
        window = duration_window(self.clock.now_ms())
        expires_at_ms = self.expires_at_ms(window, half_hours)
        code = self._mint(_crypto_input(window, half_hours), admin_secret)
        expires_at = format_timestamp_ms(expires_at_ms)
        self._log_generated(code, expires_at_ms, hours=hours, minutes=minutes)
        return (
            code,
            expires_at,
            f"Timed code valid for {format_hours_minutes(hours, minutes)}, expires at {expires_at}",
        )

    def _candidate_windows(self, current: int, tolerance: int) -> list[int]:
        windows = [current]
        for step in range(1, tolerance + 1):
            windows.append(current + step)
            if current - step >= 0:
                windows.append(current - step)
        return windows

    def _search(self, plaintext: int, now_ms: int, tolerance: int) -> VerificationMatch | None:
        for window in self._candidate_windows(duration_window(now_ms), tolerance):
            for hours in range(MAX_DURATION_HOURS + 1):
                for minutes in ALLOWED_MINUTES:
                    half_hours = hours * 2 + minutes // 30
                    if _crypto_input(window, half_hours) != plaintext:
                        continue
                    match = self._match(
                        from_half_hours(half_hours),
                        self.expires_at_ms(window, half_hours),
                        now_ms,
                    )
                    if match is not None:
                        return match
        return None

    def current_window_info(self) -> tuple[int, str, str]:
        window = duration_window(self.clock.now_ms())
        start_ms = window * DURATION_WINDOW_MS
        return window, format_timestamp_ms(start_ms), format_timestamp_ms(start_ms + DURATION_WINDOW_MS)
