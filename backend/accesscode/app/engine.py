"""Unified entry point dispatching generate/verify calls to the schemes."""
from __future__ import annotations

from datetime import timedelta

from .config import EngineSettings
from .models import (
    AbsolutePeriod,
    DurationLimited,
    GeneratedCredential,
    Scheme,
    Temporary,
    UseCountLimited,
    VerificationMatch,
)
from .schemes import DurationScheme, PeriodScheme, SchemeGenerator, TemporaryScheme, UseCountScheme
from .windows import OffsetClock, TimeSource

__all__ = ["AccessCodeEngine", "code_remaining_time", "generate_code", "verify_code"]


class AccessCodeEngine:
    """Hold one instance of each scheme behind a single offset clock.

    ``verify`` tries Temporary, UseCountLimited, DurationLimited and
    AbsolutePeriod in that order and returns the first match. The tag
    constants keep the schemes' cipher inputs disjoint for honest inputs but
    nothing here guards against a crafted collision.
    """

    def __init__(
        self,
        time_offset_seconds: int = 0,
        *,
        time_source: TimeSource | None = None,
        config: EngineSettings | None = None,
    ) -> None:
        self._config = config or EngineSettings()
        self._time_source = time_source
        self._clock = OffsetClock(time_offset_seconds, time_source=time_source)
        cfg = self._config
        self._temporary = TemporaryScheme(
            self._clock,
            tolerance=cfg.temporary_tolerance,
            remaining_tolerance=cfg.temporary_remaining_tolerance,
        )
        self._use_count = UseCountScheme(
            self._clock,
            tolerance=cfg.use_count_tolerance,
            remaining_tolerance=cfg.use_count_remaining_tolerance,
        )
        self._duration = DurationScheme(
            self._clock,
            tolerance=cfg.duration_tolerance,
            remaining_tolerance=cfg.duration_remaining_tolerance,
        )
        self._period = PeriodScheme(
            self._clock,
            tolerance=cfg.period_tolerance,
            remaining_tolerance=cfg.period_remaining_tolerance,
        )

    @property
    def clock(self) -> OffsetClock:
        return self._clock

    @property
    def temporary(self) -> TemporaryScheme:
        return self._temporary

    @property
    def use_count(self) -> UseCountScheme:
        return self._use_count

    @property
    def duration(self) -> DurationScheme:
        return self._duration

    @property
    def period(self) -> PeriodScheme:
        return self._period

    def with_offset(self, time_offset_seconds: int) -> "AccessCodeEngine":
        """Return an engine sharing configuration and time source with another offset."""

        return AccessCodeEngine(
            time_offset_seconds,
            time_source=self._time_source,
            config=self._config,
        )

    def _verification_order(self) -> tuple[tuple[SchemeGenerator, int], ...]:
        return (
            (self._temporary, self._config.temporary_facade_tolerance),
            (self._use_count, self._use_count.tolerance),
            (self._duration, self._duration.tolerance),
            (self._period, self._period.tolerance),
        )

    def generate(self, admin_secret: str, scheme: Scheme) -> GeneratedCredential:
        """Mint a code for ``scheme``; validation failures propagate unchanged."""

        if isinstance(scheme, Temporary):
            code, expires_at, message = self._temporary.generate(admin_secret)
        elif isinstance(scheme, UseCountLimited):
            code, expires_at, message = self._use_count.generate(admin_secret, scheme.count)
        elif isinstance(scheme, DurationLimited):
            code, expires_at, message = self._duration.generate(
                admin_secret, scheme.hours, scheme.minutes
            )
        elif isinstance(scheme, AbsolutePeriod):
            code, expires_at, message = self._period.generate(
                admin_secret, scheme.year, scheme.month, scheme.day, scheme.hour
            )
        else:
            raise TypeError(f"Unsupported scheme: {scheme!r}")
        return GeneratedCredential(code=code, expires_at=expires_at, message=message, scheme=scheme)

    def verify(self, code: str, admin_secret: str) -> VerificationMatch | None:
        for generator, tolerance in self._verification_order():
            match = generator.verify(code, admin_secret, tolerance)
            if match is not None:
                return match
        return None

    def remaining_time(self, code: str, admin_secret: str) -> timedelta | None:
        for generator in (self._temporary, self._use_count, self._duration, self._period):
            remaining = generator.remaining_time(code, admin_secret)
            if remaining is not None:
                return remaining
        return None


def generate_code(
    admin_secret: str,
    scheme: Scheme,
    time_offset_seconds: int = 0,
) -> GeneratedCredential:
    return AccessCodeEngine(time_offset_seconds).generate(admin_secret, scheme)


def verify_code(
    code: str,
    admin_secret: str,
    time_offset_seconds: int = 0,
) -> VerificationMatch | None:
    return AccessCodeEngine(time_offset_seconds).verify(code, admin_secret)


def code_remaining_time(
    code: str,
    admin_secret: str,
    time_offset_seconds: int = 0,
) -> timedelta | None:
    return AccessCodeEngine(time_offset_seconds).remaining_time(code, admin_secret)
