"""Validation tests for configuration models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from backend.accesscode.app.config import EngineSettings, GuardSettings, Settings


def test_engine_settings_defaults() -> None:
    settings = EngineSettings()

    assert settings.temporary_tolerance == 1
    assert settings.temporary_facade_tolerance == 150
    assert settings.use_count_tolerance == 2
    assert settings.duration_tolerance == 2
    assert settings.period_tolerance == 1
    assert settings.period_remaining_tolerance == 3


@pytest.mark.parametrize(
    "field,value",
    [
        ("temporary_facade_tolerance", 151),
        ("use_count_tolerance", -1),
        ("period_tolerance", 8),
    ],
)
def test_engine_tolerance_out_of_bounds(field: str, value: int) -> None:
    with pytest.raises(ValidationError):
        EngineSettings(**{field: value})


def test_guard_settings_defaults() -> None:
    settings = GuardSettings()

    assert settings.reissue_interval_seconds == 300
    assert settings.record_marker_ttl_seconds is None


@pytest.mark.parametrize("value", [0, -5])
def test_reissue_interval_out_of_bounds(value: int) -> None:
    with pytest.raises(ValidationError):
        GuardSettings(reissue_interval_seconds=value)


@pytest.mark.parametrize("value", ["12a4", "123", "12345678901"])
def test_admin_secret_must_be_digits(value: str) -> None:
    with pytest.raises(ValidationError):
        Settings(admin_secret=value)


def test_blank_admin_secret_is_unset() -> None:
    assert Settings(admin_secret="  ").admin_secret is None
    assert Settings(admin_secret=" 1234 ").admin_secret == "1234"


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ADMIN_SECRET", "24681357")
    monkeypatch.setenv("TIME_OFFSET", "-3600")
    monkeypatch.setenv("GUARD__REISSUE_INTERVAL_SECONDS", "60")
    monkeypatch.setenv("STORAGE__REDIS_URL", "redis://cache:6379/1")

    settings = Settings()

    assert settings.admin_secret == "24681357"
    assert settings.time_offset_seconds == -3600
    assert settings.guard.reissue_interval_seconds == 60
    assert settings.redis_url == "redis://cache:6379/1"
