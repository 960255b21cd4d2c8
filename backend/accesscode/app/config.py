"""Centralized configuration for the access code engine."""
from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_ROOT_DIR = Path(__file__).resolve().parents[3]
_PACKAGE_DIR = _ROOT_DIR / "backend" / "accesscode"
_DEFAULT_ENV_FILES: tuple[Path, ...] = (
    _ROOT_DIR / ".env",
    _PACKAGE_DIR / ".env",
)


class EngineSettings(BaseModel):
    """Verification search widths, in windows of the respective scheme."""

    temporary_tolerance: int = Field(default=1, ge=0, le=150)
    temporary_facade_tolerance: int = Field(
        default=150,
        ge=0,
        le=150,
        description="Tolerance used by the unified verifier; 150 windows cover the full ten minutes.",
    )
    temporary_remaining_tolerance: int = Field(default=150, ge=0, le=150)
    use_count_tolerance: int = Field(default=2, ge=0, le=16)
    use_count_remaining_tolerance: int = Field(default=5, ge=0, le=16)
    duration_tolerance: int = Field(default=2, ge=0, le=16)
    duration_remaining_tolerance: int = Field(default=5, ge=0, le=16)
    period_tolerance: int = Field(default=1, ge=0, le=7)
    period_remaining_tolerance: int = Field(default=3, ge=0, le=7)


class GuardSettings(BaseModel):
    """Issuance guard configuration."""

    reissue_interval_seconds: int = Field(default=300, ge=1)
    record_marker_ttl_seconds: int | None = Field(
        default=None,
        ge=60,
        description="Optional expiry for single-use markers; unset keeps them until deleted.",
    )
    namespace: str = Field(default="accesscode:guard", min_length=1)


class StorageSettings(BaseModel):
    """Backing store for the issuance guard."""

    redis_url: str | None = None


class Settings(BaseSettings):
    """Top level settings."""

    env: str = Field(default="dev", validation_alias=AliasChoices("ENV", "APP_ENV", "env"))
    admin_secret: str | None = Field(
        default=None,
        validation_alias=AliasChoices("ADMIN_SECRET", "admin_secret"),
        description="Deployment wide admin secret (4-10 ASCII digits).",
    )
    time_offset_seconds: int = Field(
        default=0,
        validation_alias=AliasChoices("TIME_OFFSET", "TIME_OFFSET_SECONDS", "time_offset_seconds"),
        description="Seconds added to the wall clock before every generate/verify call.",
    )
    log_level: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))
    engine: EngineSettings = Field(default_factory=EngineSettings)
    guard: GuardSettings = Field(default_factory=GuardSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)

    model_config = SettingsConfigDict(
        env_file=_DEFAULT_ENV_FILES,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @field_validator("admin_secret")
    @classmethod
    def _validate_admin_secret(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = value.strip()
        if not cleaned:
            return None
        if not (4 <= len(cleaned) <= 10) or not (cleaned.isascii() and cleaned.isdigit()):
            raise ValueError("admin secret must be 4-10 ASCII digits")
        return cleaned

    @property
    def redis_url(self) -> str | None:
        return self.storage.redis_url


settings = Settings()


def get_settings() -> Settings:
    return settings


__all__ = [
    "EngineSettings",
    "GuardSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "settings",
]
