"""Ten minute codes derived from a four second window."""
from __future__ import annotations

from typing import Final

from ..formatting import format_timestamp_ms
from ..models import SchemeTag, Temporary, VerificationMatch
from ..windows import TEMPORARY_WINDOW_MS, temporary_window
from .base import WINDOW_VALUE_MASK, SchemeGenerator

__all__ = ["TEMPORARY_VALIDITY_MS", "TemporaryScheme"]


TEMPORARY_VALIDITY_MS: Final[int] = 600_000
# Number of four second windows covering the whole validity period.
TEMPORARY_FULL_TOLERANCE: Final[int] = TEMPORARY_VALIDITY_MS // TEMPORARY_WINDOW_MS


class TemporaryScheme(SchemeGenerator):
    """The window value itself is the cipher input; no parameters are encoded."""

    tag = SchemeTag.TEMPORARY
    default_tolerance = 1
    default_remaining_tolerance = TEMPORARY_FULL_TOLERANCE

    @staticmethod
    def expires_at_ms(window: int) -> int:
        return window * TEMPORARY_WINDOW_MS + TEMPORARY_VALIDITY_MS

    def generate(self, admin_secret: str) -> tuple[str, str, str]:
        self.check_admin_secret(admin_secret)
        window = temporary_window(self.clock.now_ms())
        expires_at_ms = self.expires_at_ms(window)
        code = self._mint(window, admin_secret)
        expires_at = format_timestamp_ms(expires_at_ms)
        self._log_generated(code, expires_at_ms)
        return code, expires_at, f"Temporary code valid until {expires_at}"

    def _search(self, plaintext: int, now_ms: int, tolerance: int) -> VerificationMatch | None:
        current = temporary_window(now_ms)
        for back in range(tolerance + 1):
            window = current - back
            if window < 0:
                break
            if window & WINDOW_VALUE_MASK != plaintext:
                continue
            match = self._match(Temporary(), self.expires_at_ms(window), now_ms)
            if match is not None:
                return match
        return None

    def current_window_info(self) -> tuple[int, str, str]:
        """Current window with its start and end rendered as UTC+8 time."""

        window = temporary_window(self.clock.now_ms())
        start_ms = window * TEMPORARY_WINDOW_MS
        return window, format_timestamp_ms(start_ms), format_timestamp_ms(start_ms + TEMPORARY_WINDOW_MS)
