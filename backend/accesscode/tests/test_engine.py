from datetime import timedelta

import pytest

from backend.accesscode.app import engine as engine_module
from backend.accesscode.app.config import EngineSettings
from backend.accesscode.app.errors import DurationMinutesInvalid, DurationTooShort, EndTimeNotInFuture
from backend.accesscode.app.models import (
    AbsolutePeriod,
    DurationLimited,
    GeneratedCredential,
    Temporary,
    UseCountLimited,
)

from conftest import ADMIN_SECRET, OTHER_SECRET


def test_temporary_scenario(engine):
    credential = engine.generate(ADMIN_SECRET, Temporary())

    assert isinstance(credential, GeneratedCredential)
    assert len(credential.code) == 10
    assert credential.scheme == Temporary()
    assert engine.verify(credential.code, ADMIN_SECRET).scheme == Temporary()


def test_use_count_scenario(engine):
    credential = engine.generate(ADMIN_SECRET, UseCountLimited(5))

    assert engine.verify(credential.code, ADMIN_SECRET).scheme == UseCountLimited(5)
    assert engine.verify(credential.code, OTHER_SECRET) is None


def test_duration_scenario(engine):
    credential = engine.generate(ADMIN_SECRET, DurationLimited(127, 30))

    assert engine.verify(credential.code, ADMIN_SECRET).scheme == DurationLimited(127, 30)
    with pytest.raises(DurationMinutesInvalid):
        engine.generate(ADMIN_SECRET, DurationLimited(1, 15))


def test_period_scenario(engine):
    with pytest.raises(EndTimeNotInFuture):
        engine.generate(ADMIN_SECRET, AbsolutePeriod(2020, 1, 1, 0))

    credential = engine.generate(ADMIN_SECRET, AbsolutePeriod(2025, 7, 1, 8))
    assert engine.verify(credential.code, ADMIN_SECRET).scheme == AbsolutePeriod(2025, 7, 1, 8)


def test_facade_accepts_temporary_codes_for_their_whole_lifetime(engine, frozen_clock):
    credential = engine.generate(ADMIN_SECRET, Temporary())

    frozen_clock.advance(9 * 60)
    match = engine.verify(credential.code, ADMIN_SECRET)
    assert match is not None
    assert match.remaining == timedelta(minutes=1)
    assert engine.temporary.verify(credential.code, ADMIN_SECRET) is None

    frozen_clock.advance(61)
    assert engine.verify(credential.code, ADMIN_SECRET) is None


def test_facade_tolerance_is_configurable(engine_factory, frozen_clock):
    narrow = engine_factory(config=EngineSettings(temporary_facade_tolerance=1))
    credential = narrow.generate(ADMIN_SECRET, Temporary())

    frozen_clock.advance(60)

    assert narrow.verify(credential.code, ADMIN_SECRET) is None


def test_remaining_time(engine, frozen_clock):
    credential = engine.generate(ADMIN_SECRET, DurationLimited(2))

    frozen_clock.advance(30 * 60)

    assert engine.remaining_time(credential.code, ADMIN_SECRET) == timedelta(hours=1, minutes=30)
    assert engine.remaining_time(credential.code, OTHER_SECRET) is None
    assert engine.remaining_time("garbage", ADMIN_SECRET) is None


def test_offsets_must_agree(engine_factory):
    shifted = engine_factory(time_offset_seconds=3_600)
    credential = shifted.generate(ADMIN_SECRET, Temporary())

    assert shifted.verify(credential.code, ADMIN_SECRET) is not None
    assert engine_factory().verify(credential.code, ADMIN_SECRET) is None
    assert shifted.with_offset(3_600).verify(credential.code, ADMIN_SECRET) is not None


def test_generate_rejects_unknown_scheme(engine):
    with pytest.raises(TypeError):
        engine.generate(ADMIN_SECRET, object())  # type: ignore[arg-type]


@pytest.mark.parametrize("code", ["", "not-a-code", "1234567890", "92949672950"])
def test_verify_never_raises_on_garbage(engine, code):
    assert engine.verify(code, ADMIN_SECRET) is None


def test_module_helpers_use_the_wall_clock():
    credential = engine_module.generate_code(ADMIN_SECRET, Temporary())

    match = engine_module.verify_code(credential.code, ADMIN_SECRET)

    assert match is not None
    assert match.scheme == Temporary()
    remaining = engine_module.code_remaining_time(credential.code, ADMIN_SECRET)
    assert remaining is not None
    assert timedelta(0) < remaining <= timedelta(minutes=10)


def test_zero_length_duration_is_rejected(engine, frozen_clock):
    frozen_clock.advance(60)

    with pytest.raises(DurationTooShort):
        engine.generate(ADMIN_SECRET, DurationLimited(0, 0))
