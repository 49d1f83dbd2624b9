from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "mediacheck"
    app_env: Literal["development", "staging", "production"] = "development"
    app_version: str = "0.1.0"
    debug: bool = False

    api_prefix: str = "/api/v1"
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    database_url: str = "sqlite+aiosqlite:///./mediacheck.db"

    secret_key: str = "changeme_to_64_characters_minimum_for_dev_only"
    access_token_expire_minutes: int = 60 * 24

    openai_api_key: str | None = None
    openai_base_url: str | None = None
    openai_model: str = "gpt-3.5-turbo"
    openai_timeout_seconds: float = 120.0

    # LOADING records older than this are treated as abandoned.
    ai_reply_recency_window_seconds: int = 60
    ai_reply_poll_interval_ms: int = 1000
    # None keeps waiting until the recency window lets a new attempt through.
    ai_reply_max_wait_seconds: float | None = None
    ai_reply_timezone: str = "Asia/Taipei"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
