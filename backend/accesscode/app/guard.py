"""Issuance guard for repeatable and single-use credentials."""
from __future__ import annotations

import asyncio
import math
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Callable

from .errors import ReissueTooSoon
from .formatting import mask_code
from .logging import get_logger
from .models import GeneratedCredential
from .storage import CacheBackend

logger = get_logger("accesscode.guard")

Mint = Callable[[], GeneratedCredential]


@dataclass(frozen=True, slots=True)
class IssuanceOutcome:
    """Result of a guarded issuance.

    ``credential`` is ``None`` when an earlier code was handed back instead
    of minting a new one.
    """

    code: str
    reused: bool
    credential: GeneratedCredential | None = None


class _KeyedLocks:
    """Per-key asyncio locks, dropped once nobody holds or waits on them."""

    def __init__(self) -> None:
        self._locks: dict[str, tuple[asyncio.Lock, int]] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock, users = self._locks.get(key, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[key] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[key]
            if users <= 1:
                del self._locks[key]
            else:
                self._locks[key] = (lock, users - 1)

    def __len__(self) -> int:
        return len(self._locks)


class IssuanceGuard:
    """Enforce reissue intervals and single-use records on top of a cache.

    Repeatable subjects keep the instant of their last issuance under a key
    that expires after ``reissue_interval_seconds``. Single-use records keep
    the code they were issued, so asking again returns the same code.
    """

    def __init__(
        self,
        *,
        cache: CacheBackend,
        reissue_interval_seconds: int = 300,
        record_marker_ttl_seconds: int | None = None,
        namespace: str = "accesscode:guard",
        clock: Callable[[], float] | None = None,
    ) -> None:
        if reissue_interval_seconds < 1:
            raise ValueError("reissue_interval_seconds must be at least 1")
        if record_marker_ttl_seconds is not None and record_marker_ttl_seconds < 1:
            raise ValueError("record_marker_ttl_seconds must be at least 1")
        if not namespace:
            raise ValueError("namespace must not be empty")

        self._cache = cache
        self._reissue_interval_seconds = reissue_interval_seconds
        self._record_marker_ttl_seconds = record_marker_ttl_seconds
        self._namespace = namespace
        self._clock = clock or time.time
        self._locks = _KeyedLocks()

    @property
    def reissue_interval_seconds(self) -> int:
        return self._reissue_interval_seconds

    def _make_key(self, key_type: str, identifier: str) -> str:
        return f"{self._namespace}:{key_type}:{identifier}"

    @staticmethod
    def _normalise(identifier: str) -> str:
        cleaned = (identifier or "").strip()
        if not cleaned:
            raise ValueError("identifier must not be empty")
        return cleaned

    def _retry_after(self, raw: bytes | None) -> int:
        if raw is None:
            return 1
        try:
            issued_at = float(raw.decode("utf-8"))
        except (ValueError, AttributeError):
            return self._reissue_interval_seconds
        remaining = issued_at + self._reissue_interval_seconds - self._clock()
        return max(1, math.ceil(remaining))

    async def seconds_until_reissue(self, subject: str) -> int:
        """Return ``0`` when ``subject`` may be issued a new code right now."""

        key = self._make_key("subject", self._normalise(subject))
        raw = await self._cache.get(key)
        if raw is None:
            return 0
        return self._retry_after(raw)

    async def issue_repeatable(self, subject: str, mint: Mint) -> IssuanceOutcome:
        """Mint a code for ``subject`` unless one was issued inside the interval.

        Raises :class:`ReissueTooSoon` with the seconds left otherwise. A
        failing ``mint`` releases the reservation so the subject can retry.
        """

        subject = self._normalise(subject)
        key = self._make_key("subject", subject)
        async with self._locks.hold(key):
            claimed = await self._cache.set_if_absent(
                key,
                repr(self._clock()).encode("utf-8"),
                self._reissue_interval_seconds,
            )
            if not claimed:
                retry_after = self._retry_after(await self._cache.get(key))
                logger.info("reissue_refused", subject=subject, retry_after_seconds=retry_after)
                raise ReissueTooSoon(subject, retry_after)
            try:
                credential = mint()
            except BaseException:
                await self._cache.delete(key)
                raise
        logger.info("repeatable_issued", subject=subject, code=mask_code(credential.code))
        return IssuanceOutcome(code=credential.code, reused=False, credential=credential)

    async def issue_once(self, record_id: str, mint: Mint) -> IssuanceOutcome:
        """Return the code already bound to ``record_id`` or mint and bind one."""

        record_id = self._normalise(record_id)
        key = self._make_key("record", record_id)
        async with self._locks.hold(key):
            existing = await self._cache.get(key)
            if existing is not None:
                return IssuanceOutcome(code=existing.decode("utf-8"), reused=True)
            credential = mint()
            stored = await self._cache.set_if_absent(
                key,
                credential.code.encode("utf-8"),
                self._record_marker_ttl_seconds,
            )
            if not stored:
                # another process bound a code first
                existing = await self._cache.get(key)
                if existing is not None:
                    return IssuanceOutcome(code=existing.decode("utf-8"), reused=True)
                await self._cache.set(
                    key, credential.code.encode("utf-8"), self._record_marker_ttl_seconds
                )
        logger.info("record_issued", record_id=record_id, code=mask_code(credential.code))
        return IssuanceOutcome(code=credential.code, reused=False, credential=credential)

    async def stored_code(self, record_id: str) -> str | None:
        raw = await self._cache.get(self._make_key("record", self._normalise(record_id)))
        if raw is None:
            return None
        return raw.decode("utf-8")

    async def forget_record(self, record_id: str) -> None:
        await self._cache.delete(self._make_key("record", self._normalise(record_id)))

    async def reset_subject(self, subject: str) -> None:
        await self._cache.delete(self._make_key("subject", self._normalise(subject)))


__all__ = ["IssuanceGuard", "IssuanceOutcome"]
