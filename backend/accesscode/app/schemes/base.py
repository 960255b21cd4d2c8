"""Shared plumbing for the credential schemes."""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import ClassVar, Final

from ..cipher import crypt_usercode, format_code, parse_code, recover_usercode
from ..errors import AdminSecretTooShort
from ..formatting import mask_code
from ..logging import get_logger
from ..models import SchemeTag, VerificationMatch
from ..windows import OffsetClock

__all__ = ["MIN_ADMIN_SECRET_LENGTH", "SchemeGenerator", "WINDOW_VALUE_MASK"]


MIN_ADMIN_SECRET_LENGTH: Final[int] = 4
WINDOW_VALUE_MASK: Final[int] = 0xFFFFFFFF

logger = get_logger("accesscode.schemes")


class SchemeGenerator(ABC):
    """Base class for a scheme's generate/verify/remaining-time triple.

    Subclasses build the cipher input from a window and their parameters and
    implement :meth:`_search`, a bounded loop over candidate windows and
    parameters. The code is decrypted once per verification, so each loop
    iteration only compares candidate inputs against the recovered value.
    """

    tag: ClassVar[SchemeTag]
    default_tolerance: ClassVar[int]
    default_remaining_tolerance: ClassVar[int]

    def __init__(
        self,
        clock: OffsetClock | None = None,
        *,
        tolerance: int | None = None,
        remaining_tolerance: int | None = None,
    ) -> None:
        self._clock = clock or OffsetClock()
        self._tolerance = self.default_tolerance if tolerance is None else tolerance
        self._remaining_tolerance = (
            self.default_remaining_tolerance if remaining_tolerance is None else remaining_tolerance
        )
        if self._tolerance < 0 or self._remaining_tolerance < 0:
            raise ValueError("tolerance must not be negative")

    @property
    def clock(self) -> OffsetClock:
        return self._clock

    @property
    def tolerance(self) -> int:
        return self._tolerance

    @staticmethod
    def check_admin_secret(admin_secret: str) -> None:
        if len(admin_secret or "") < MIN_ADMIN_SECRET_LENGTH:
            raise AdminSecretTooShort(
                f"Admin secret must be at least {MIN_ADMIN_SECRET_LENGTH} characters"
            )

    def _mint(self, crypto_input: int, admin_secret: str) -> str:
        return format_code(crypt_usercode(crypto_input & WINDOW_VALUE_MASK, admin_secret))

    def _log_generated(self, code: str, expires_at_ms: int, **params: object) -> None:
        logger.debug(
            "credential_generated",
            scheme=self.tag.value,
            code=mask_code(code),
            expires_at_ms=expires_at_ms,
            offset_seconds=self._clock.offset_seconds,
            **params,
        )

    def _match(self, scheme: object, expires_at_ms: int, now_ms: int) -> VerificationMatch | None:
        if now_ms > expires_at_ms:
            return None
        return VerificationMatch(
            scheme=scheme,  # type: ignore[arg-type]
            expires_at_ms=expires_at_ms,
            remaining=timedelta(milliseconds=expires_at_ms - now_ms),
        )

    @abstractmethod
    def _search(self, plaintext: int, now_ms: int, tolerance: int) -> VerificationMatch | None:
        """Return the first unexpired candidate whose cipher input equals ``plaintext``."""

    def verify(
        self,
        code: str,
        admin_secret: str,
        tolerance: int | None = None,
    ) -> VerificationMatch | None:
        """Recover the scheme parameters of ``code`` or return ``None``.

        ``None`` covers a wrong secret, an expired code and malformed input
        alike.
        """

        if len(admin_secret or "") < MIN_ADMIN_SECRET_LENGTH:
            return None
        cipher_value = parse_code(code)
        if cipher_value is None:
            return None
        window_tolerance = self._tolerance if tolerance is None else max(int(tolerance), 0)
        plaintext = recover_usercode(cipher_value, admin_secret)
        match = self._search(plaintext, self._clock.now_ms(), window_tolerance)
        if match is None:
            logger.debug("credential_rejected", scheme=self.tag.value, code=mask_code(code))
        else:
            logger.debug(
                "credential_verified",
                scheme=self.tag.value,
                code=mask_code(code),
                expires_at_ms=match.expires_at_ms,
            )
        return match

    def remaining_time(self, code: str, admin_secret: str) -> timedelta | None:
        """Time left before ``code`` expires, or ``None`` when it does not verify."""

        match = self.verify(code, admin_secret, self._remaining_tolerance)
        if match is None or match.remaining <= timedelta(0):
            return None
        return match.remaining
