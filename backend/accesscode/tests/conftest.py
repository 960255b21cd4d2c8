"""Common fixtures for access code engine tests."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

import pytest

from backend.accesscode.app.config import EngineSettings
from backend.accesscode.app.engine import AccessCodeEngine
from backend.accesscode.app.guard import IssuanceGuard
from backend.accesscode.app.storage import MemoryCache
from backend.accesscode.app.windows import UTC8

ADMIN_SECRET = "123456"
OTHER_SECRET = "654321"
FROZEN_START = datetime(2025, 6, 1, 12, 0, tzinfo=UTC8).timestamp()


class FrozenClock:
    """Time source pinned to an instant and moved only by ``advance``."""

    def __init__(self, start: float) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def frozen_clock() -> FrozenClock:
    return FrozenClock(FROZEN_START)


@pytest.fixture
def engine_factory(frozen_clock: FrozenClock) -> Callable[..., AccessCodeEngine]:
    def factory(
        time_offset_seconds: int = 0,
        config: EngineSettings | None = None,
    ) -> AccessCodeEngine:
        return AccessCodeEngine(time_offset_seconds, time_source=frozen_clock, config=config)

    return factory


@pytest.fixture
def engine(engine_factory: Callable[..., AccessCodeEngine]) -> AccessCodeEngine:
    return engine_factory()


@pytest.fixture
def memory_cache(frozen_clock: FrozenClock) -> MemoryCache:
    return MemoryCache(clock=frozen_clock)


@pytest.fixture
def guard(memory_cache: MemoryCache, frozen_clock: FrozenClock) -> IssuanceGuard:
    return IssuanceGuard(
        cache=memory_cache,
        reissue_interval_seconds=300,
        namespace="test:guard",
        clock=frozen_clock,
    )
