"""Codes valid until an absolute UTC+8 calendar hour."""
from __future__ import annotations

from datetime import datetime
from typing import Final

from ..errors import EndTimeNotInFuture, EndTimeOutOfRange
from ..formatting import TIMESTAMP_FORMAT
from ..models import AbsolutePeriod, SchemeTag, VerificationMatch
from ..windows import SECONDS_PER_DAY, SECONDS_PER_HOUR, UTC8, period_day
from .base import WINDOW_VALUE_MASK, SchemeGenerator

__all__ = ["MAX_HOUR_OFFSET", "PERIOD_TAG", "PeriodScheme"]


PERIOD_TAG: Final[int] = 0xC000_0000
MAX_HOUR_OFFSET: Final[int] = 32_768
# Added to the hour offset so that the UTC+8 day start maps to 8.
HOUR_OFFSET_BIAS: Final[int] = 8
_DAY_STRIDE: Final[int] = 32_768


def _crypto_input(days: int, hour_offset: int) -> int:
    return (days * _DAY_STRIDE + PERIOD_TAG + hour_offset) & WINDOW_VALUE_MASK


def _end_timestamp(days: int, hour_offset: int) -> int:
    return (hour_offset - HOUR_OFFSET_BIAS) * SECONDS_PER_HOUR + days * SECONDS_PER_DAY


class PeriodScheme(SchemeGenerator):
    tag = SchemeTag.PERIOD
    default_tolerance = 1
    default_remaining_tolerance = 3

    def generate(
        self,
        admin_secret: str,
        year: int,
        month: int,
        day: int,
        hour: int,
    ) -> tuple[str, str, str]:
        self.check_admin_secret(admin_secret)
        end = AbsolutePeriod(year, month, day, hour).end_datetime()
        end_ts = int(end.timestamp())
        now_ms = self.clock.now_ms()
        if end_ts * 1000 <= now_ms:
            raise EndTimeNotInFuture("End time must be later than the current time")

        days = period_day(now_ms)
        hour_offset = (end_ts - days * SECONDS_PER_DAY) // SECONDS_PER_HOUR + HOUR_OFFSET_BIAS
        if hour_offset > MAX_HOUR_OFFSET:
            raise EndTimeOutOfRange("End time is outside the supported range")

        code = self._mint(_crypto_input(days, hour_offset), admin_secret)
        expires_at = end.strftime(TIMESTAMP_FORMAT)
        self._log_generated(code, end_ts * 1000, days=days, hour_offset=hour_offset)
        return code, expires_at, f"Period code valid until {expires_at}"

    def generate_from_string(self, admin_secret: str, end: str) -> tuple[str, str, str]:
        """Generate from ``YYYY-MM-DD HH:MM:SS``; only the hour is significant."""

        period = AbsolutePeriod.parse(end)
        return self.generate(admin_secret, period.year, period.month, period.day, period.hour)

    def _search(self, plaintext: int, now_ms: int, tolerance: int) -> VerificationMatch | None:
        current = period_day(now_ms)
        for back in range(tolerance + 1):
            days = current - back
            if days < 0:
                break
            for hour_offset in range(MAX_HOUR_OFFSET + 1):
                if _crypto_input(days, hour_offset) != plaintext:
                    continue
                end_ts = _end_timestamp(days, hour_offset)
                end = datetime.fromtimestamp(end_ts, tz=UTC8)
                match = self._match(AbsolutePeriod.from_datetime(end), end_ts * 1000, now_ms)
                if match is not None:
                    return match
        return None
