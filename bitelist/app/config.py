from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Values shipped in the sample .env; treated as "no key configured".
PLACEHOLDER_KEYS = {"your-openai-api-key-here", "your-youtube-api-key-here"}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8-sig",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_MAX_TOKENS: int = 500
    OPENAI_TEMPERATURE: float = 0.1

    YOUTUBE_API_KEY: Optional[str] = None
    YOUTUBE_API_BASE_URL: str = "https://www.googleapis.com/youtube/v3"

    REQUEST_TIMEOUT_SECONDS: float = 30.0
    EXTRACTION_DEADLINE_SECONDS: Optional[float] = 90.0

    MIN_DESCRIPTION_CHARS: int = 50
    MIN_TRANSCRIPT_CHARS: int = 32
    CALL_TO_ACTION_PHRASES: tuple[str, ...] = ("subscribe", "like and comment")

    FRONTEND_CORS_ORIGINS: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
    )

    @field_validator("OPENAI_API_KEY", "YOUTUBE_API_KEY", mode="before")
    @classmethod
    def _blank_or_placeholder_is_missing(cls, value: object) -> object:
        if isinstance(value, str):
            stripped = value.strip().strip('"')
            if not stripped or stripped in PLACEHOLDER_KEYS:
                return None
            return stripped
        return value

    @property
    def is_openai_configured(self) -> bool:
        return bool(self.OPENAI_API_KEY)

    @property
    def is_youtube_configured(self) -> bool:
        return bool(self.YOUTUBE_API_KEY)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
