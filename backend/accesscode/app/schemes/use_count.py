"""Codes that carry a use count and stay valid for about twenty hours."""
from __future__ import annotations

from typing import Final

from ..errors import UseCountOutOfRange
from ..formatting import format_timestamp_ms
from ..models import SchemeTag, UseCountLimited, VerificationMatch
from ..windows import TEMPORARY_WINDOW_MS, USE_COUNT_ALIGNMENT, use_count_window
from .base import WINDOW_VALUE_MASK, SchemeGenerator

__all__ = [
    "MAX_USE_COUNT",
    "MIN_USE_COUNT",
    "USE_COUNT_TAG",
    "USE_COUNT_VALIDITY_MS",
    "UseCountScheme",
]


USE_COUNT_TAG: Final[int] = 0x4000_0000
USE_COUNT_VALIDITY_MS: Final[int] = 72_000_000
MIN_USE_COUNT: Final[int] = 1
MAX_USE_COUNT: Final[int] = 31


def _crypto_input(window: int, count: int) -> int:
    return (window + count + USE_COUNT_TAG) & WINDOW_VALUE_MASK


class UseCountScheme(SchemeGenerator):
    tag = SchemeTag.USE_COUNT
    default_tolerance = 2
    default_remaining_tolerance = 5

    @staticmethod
    def validate(count: int) -> None:
        if not MIN_USE_COUNT <= count <= MAX_USE_COUNT:
            raise UseCountOutOfRange(
                f"Use count must be between {MIN_USE_COUNT} and {MAX_USE_COUNT}"
            )

    @staticmethod
    def expires_at_ms(window: int) -> int:
        return window * TEMPORARY_WINDOW_MS + USE_COUNT_VALIDITY_MS

    def generate(self, admin_secret: str, count: int) -> tuple[str, str, str]:
        self.check_admin_secret(admin_secret)
        self.validate(count)
        window = use_count_window(self.clock.now_ms())
        expires_at_ms = self.expires_at_ms(window)
        code = self._mint(_crypto_input(window, count), admin_secret)
        expires_at = format_timestamp_ms(expires_at_ms)
        self._log_generated(code, expires_at_ms, count=count)
        return code, expires_at, f"Use-count code for {count} uses, valid until {expires_at}"

    def _search(self, plaintext: int, now_ms: int, tolerance: int) -> VerificationMatch | None:
        aligned = use_count_window(now_ms)
        for back in range(tolerance + 1):
            window = aligned - back * USE_COUNT_ALIGNMENT
            if window < 0:
                break
            for count in range(MIN_USE_COUNT, MAX_USE_COUNT + 1):
                if _crypto_input(window, count) != plaintext:
                    continue
                match = self._match(UseCountLimited(count), self.expires_at_ms(window), now_ms)
                if match is not None:
                    return match
        return None

    def current_window_info(self) -> tuple[int, str, str]:
        """Aligned window with its start and the expiry of codes minted in it."""

        window = use_count_window(self.clock.now_ms())
        start_ms = window * TEMPORARY_WINDOW_MS
        return window, format_timestamp_ms(start_ms), format_timestamp_ms(self.expires_at_ms(window))
