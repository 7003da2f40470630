"""Runtime configuration based on environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AnyHttpUrl, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseModel):
    dsn: str = Field(
        default="sqlite+aiosqlite:///smartdine.db",
        description="SQLAlchemy async DSN holding the persisted user profile.",
    )
    echo: bool = False


class ApiSettings(BaseModel):
    base_url: AnyHttpUrl = Field(default="http://localhost:8080/api")
    request_timeout_seconds: int = Field(default=30, ge=1, le=300)
    profile_update_attempts: int = Field(default=3, ge=1, le=10)


class GeocodingSettings(BaseModel):
    base_url: AnyHttpUrl = Field(default="https://nominatim.openstreetmap.org")
    country_codes: str = Field(default="in", min_length=2)
    result_limit: int = Field(default=8, ge=1, le=50)
    user_agent: str = Field(default="smartdine-search/0.1")
    request_timeout_seconds: int = Field(default=10, ge=1, le=60)

    @field_validator("country_codes", mode="before")
    @classmethod
    def _normalize_codes(cls, value):
        if isinstance(value, str):
            return ",".join(part.strip().lower() for part in value.split(",") if part.strip())
        return value


class VoiceSettings(BaseModel):
    language: str = "en-IN"
    max_alternatives: int = Field(default=1, ge=1, le=5)


class SearchSettings(BaseModel):
    processing_floor_seconds: float = Field(default=2.2, ge=0.0, le=30.0)


class SmartDineSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SMARTDINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__"
    )

    environment: Literal["dev", "staging", "prod"] = "dev"
    default_language: str = "en"
    user_id: int = Field(default=1, ge=1)
    profile_update_errors: Literal["surface", "ignore"] = "surface"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    geocoding: GeocodingSettings = Field(default_factory=GeocodingSettings)
    voice: VoiceSettings = Field(default_factory=VoiceSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)

    def api_url(self, path: str) -> str:
        return f"{str(self.api.base_url).rstrip('/')}/{path.lstrip('/')}"


@lru_cache
def get_settings() -> SmartDineSettings:
    """Return cached settings instance."""

    return SmartDineSettings()


__all__ = [
    "ApiSettings",
    "DatabaseSettings",
    "GeocodingSettings",
    "SearchSettings",
    "SmartDineSettings",
    "VoiceSettings",
    "get_settings",
]
