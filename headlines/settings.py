"""
Centralized application settings via pydantic-settings.

All configuration is loaded from ``HEADLINES_``-prefixed environment
variables (or a ``.env`` file) with development defaults. The REST
backend credentials also accept the ``KV_REST_API_URL`` /
``KV_REST_API_TOKEN`` names injected by hosted key-value integrations.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration with env-var binding."""

    model_config = SettingsConfigDict(
        env_prefix="HEADLINES_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # -- Store --
    backend: Literal["file", "rest", "redis"] = "file"
    data_file: str = "headlines.json"
    history_limit: int = Field(50, ge=1)  # global cap, file backend only
    remote_history_limit: Optional[int] = Field(None, ge=1)
    store_timeout: float = Field(5.0, gt=0)

    # -- Remote stores --
    rest_url: Optional[str] = Field(
        None, validation_alias=AliasChoices("headlines_rest_url", "kv_rest_api_url")
    )
    rest_token: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("headlines_rest_token", "kv_rest_api_token"),
    )
    redis_url: str = "redis://localhost:6379/0"

    # -- Headlines --
    max_length: int = Field(500, ge=1)
    recent_limit: int = Field(10, ge=1)

    # -- Geolocation --
    geo_url: str = "http://ip-api.com/json/"
    geo_timeout: float = Field(5.0, gt=0)

    # -- Runtime --
    environment: Literal["development", "production", "testing"] = "development"
    static_dir: str = "public"
    cors_origins: list[str] = ["http://localhost:3000"]

    # -- Logging --
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return a cached singleton Settings instance."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = Settings()
    return _settings
