"""Request level credential issuance on top of the engine and the guard."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Final

from .config import Settings, get_settings
from .engine import AccessCodeEngine
from .errors import (
    DurationHoursOutOfRange,
    DurationMinutesInvalid,
    DurationTooShort,
    InvalidCalendarDate,
    MissingParameter,
    UseCountOutOfRange,
)
from .formatting import format_duration
from .guard import IssuanceGuard, IssuanceOutcome
from .logging import get_logger
from .models import (
    AbsolutePeriod,
    DurationLimited,
    GeneratedCredential,
    Scheme,
    SchemeTag,
    Temporary,
    UseCountLimited,
    VerificationMatch,
)
from .schemas.credentials import CredentialRequest, CredentialResponse
from .schemes.duration import ALLOWED_MINUTES, MAX_DURATION_HOURS
from .schemes.use_count import MAX_USE_COUNT, MIN_USE_COUNT
from .storage import build_cache

logger = get_logger("accesscode.service")

MIN_PERIOD_YEAR: Final[int] = 2024
MAX_PERIOD_YEAR: Final[int] = 2099
DEFAULT_RECORD_DURATION: Final[DurationLimited] = DurationLimited(hours=2)


def duration_from_span(start: datetime | None, end: datetime | None) -> DurationLimited:
    """Duration between a record's start and end; two hours when either is unknown."""

    if start is None or end is None:
        return DEFAULT_RECORD_DURATION
    return DurationLimited.from_span(start, end)


def period_from_datetime(end: datetime | None) -> AbsolutePeriod:
    """UTC+8 calendar hour of a record's end instant."""

    if end is None:
        raise MissingParameter("Period codes need an end time", field="end_time")
    return AbsolutePeriod.from_datetime(end)


class CredentialService:
    """Validate requests, pick a scheme and issue codes through the guard.

    ``LONG_TEMPORARY`` requests mint a Temporary code but may be repeated by
    the same subject once the reissue interval has passed. Every other
    scheme is bound to a record and issued at most once.
    """

    def __init__(
        self,
        *,
        engine: AccessCodeEngine | None = None,
        guard: IssuanceGuard | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._engine = engine or AccessCodeEngine(
            self._settings.time_offset_seconds,
            config=self._settings.engine,
        )
        if guard is None:
            guard_cfg = self._settings.guard
            guard = IssuanceGuard(
                cache=build_cache(self._settings.redis_url),
                reissue_interval_seconds=guard_cfg.reissue_interval_seconds,
                record_marker_ttl_seconds=guard_cfg.record_marker_ttl_seconds,
                namespace=guard_cfg.namespace,
            )
        self._guard = guard

    @property
    def engine(self) -> AccessCodeEngine:
        return self._engine

    @property
    def guard(self) -> IssuanceGuard:
        return self._guard

    def _admin_secret(self, candidate: str | None) -> str:
        secret = candidate if candidate is not None else self._settings.admin_secret
        if secret is None:
            raise MissingParameter("An admin secret is required", field="admin_secret")
        return secret

    @staticmethod
    def validate_request(request: CredentialRequest) -> None:
        """Reject requests whose scheme parameters are missing or out of range."""

        auth_type = request.auth_type
        if auth_type is SchemeTag.USE_COUNT:
            if request.times is None:
                raise MissingParameter("Use-count codes need a number of uses", field="times")
            if not MIN_USE_COUNT <= request.times <= MAX_USE_COUNT:
                raise UseCountOutOfRange(
                    f"Use count must be between {MIN_USE_COUNT} and {MAX_USE_COUNT}"
                )
        elif auth_type is SchemeTag.DURATION:
            if request.hours is None:
                if request.start_time is not None and request.end_time is not None:
                    return
                raise MissingParameter("Duration codes need a number of hours", field="hours")
            if not 0 <= request.hours <= MAX_DURATION_HOURS:
                raise DurationHoursOutOfRange(
                    f"Hours must be between 0 and {MAX_DURATION_HOURS}"
                )
            if request.minutes is not None and request.minutes not in ALLOWED_MINUTES:
                raise DurationMinutesInvalid("Minutes must be 0 or 30")
            if request.hours == 0 and not request.minutes:
                raise DurationTooShort("Duration must be at least 30 minutes")
        elif auth_type is SchemeTag.PERIOD:
            fields = (request.end_year, request.end_month, request.end_day, request.end_hour)
            if any(value is None for value in fields):
                if request.end_time is not None:
                    return
                raise MissingParameter("Period codes need a complete end time", field="end")
            if not MIN_PERIOD_YEAR <= request.end_year <= MAX_PERIOD_YEAR:  # type: ignore[operator]
                raise InvalidCalendarDate(
                    f"Year must be between {MIN_PERIOD_YEAR} and {MAX_PERIOD_YEAR}"
                )

    def scheme_for(self, request: CredentialRequest) -> Scheme:
        """Build the engine scheme for ``request`` after validating it."""

        self.validate_request(request)
        auth_type = request.auth_type
        if auth_type in (SchemeTag.TEMPORARY, SchemeTag.LONG_TEMPORARY):
            return Temporary()
        if auth_type is SchemeTag.USE_COUNT:
            return UseCountLimited(count=request.times)  # type: ignore[arg-type]
        if auth_type is SchemeTag.DURATION:
            if request.hours is None:
                return duration_from_span(request.start_time, request.end_time)
            return DurationLimited(hours=request.hours, minutes=request.minutes or 0)
        if request.end_year is None or request.end_month is None \
                or request.end_day is None or request.end_hour is None:
            period = period_from_datetime(request.end_time)
            if not MIN_PERIOD_YEAR <= period.year <= MAX_PERIOD_YEAR:
                raise InvalidCalendarDate(
                    f"Year must be between {MIN_PERIOD_YEAR} and {MAX_PERIOD_YEAR}"
                )
            return period
        return AbsolutePeriod(
            year=request.end_year,
            month=request.end_month,
            day=request.end_day,
            hour=request.end_hour,
        )

    def generate(self, request: CredentialRequest) -> GeneratedCredential:
        """Mint a code without consulting the guard."""

        scheme = self.scheme_for(request)
        return self._engine.generate(self._admin_secret(request.admin_secret), scheme)

    async def issue(
        self,
        request: CredentialRequest,
        *,
        subject: str | None = None,
        record_id: str | None = None,
    ) -> IssuanceOutcome:
        """Mint a code for ``request`` under the guard's rules.

        ``subject`` is required for long-lived temporary codes and
        ``record_id`` for every other scheme.
        """

        scheme = self.scheme_for(request)
        admin_secret = self._admin_secret(request.admin_secret)

        def mint() -> GeneratedCredential:
            return self._engine.generate(admin_secret, scheme)

        if request.auth_type.repeatable:
            if not subject:
                raise MissingParameter("Repeatable codes need a subject", field="subject")
            outcome = await self._guard.issue_repeatable(subject, mint)
        else:
            if not record_id:
                raise MissingParameter("Single-use codes need a record id", field="record_id")
            outcome = await self._guard.issue_once(record_id, mint)
        logger.info(
            "credential_issued",
            auth_type=request.auth_type.value,
            reused=outcome.reused,
        )
        return outcome

    async def issue_response(
        self,
        request: CredentialRequest,
        *,
        subject: str | None = None,
        record_id: str | None = None,
    ) -> CredentialResponse:
        """Like :meth:`issue`, describing a reused code through verification."""

        outcome = await self.issue(request, subject=subject, record_id=record_id)
        match = None
        if outcome.credential is None:
            match = self.verify(outcome.code, request.admin_secret)
        return CredentialResponse.from_outcome(outcome, request.auth_type, match=match)

    def _verification_secret(self, candidate: str | None) -> str | None:
        secret = candidate if candidate is not None else self._settings.admin_secret
        if secret is None:
            logger.warning("verification_without_admin_secret")
        return secret

    def verify(self, code: str, admin_secret: str | None = None) -> VerificationMatch | None:
        """Match ``code``; ``None`` also covers a missing admin secret."""

        secret = self._verification_secret(admin_secret)
        if secret is None:
            return None
        return self._engine.verify(code, secret)

    def remaining_time(self, code: str, admin_secret: str | None = None) -> timedelta | None:
        secret = self._verification_secret(admin_secret)
        if secret is None:
            return None
        return self._engine.remaining_time(code, secret)

    def remaining_time_text(self, code: str, admin_secret: str | None = None) -> str | None:
        remaining = self.remaining_time(code, admin_secret)
        if remaining is None:
            return None
        return format_duration(remaining)


__all__ = [
    "CredentialService",
    "DEFAULT_RECORD_DURATION",
    "MAX_PERIOD_YEAR",
    "MIN_PERIOD_YEAR",
    "duration_from_span",
    "period_from_datetime",
]
