"""Application settings and configuration management."""
from __future__ import annotations

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    OPENAI_API_KEY: str = Field(default="", repr=False)
    GPT_API_KEY: str = Field(default="", repr=False)

    GRADING_API_URL: str = "https://api.openai.com/v1/chat/completions"
    GRADING_MODEL: str = "gpt-3.5-turbo"
    GRADING_MAX_TOKENS: int = Field(default=1000, ge=1)
    GRADING_TEMPERATURE: float = Field(default=0.3, ge=0.0, le=2.0)
    GRADING_TIMEOUT_S: float = Field(default=60.0, ge=0.1)
    GRADING_MAX_RETRIES: int = Field(default=0, ge=0, le=1)

    QUESTIONS_PATH: str = ""

    SESSION_TTL_SECONDS: int = Field(default=24 * 60 * 60, ge=1)
    SESSION_MAX_COUNT: int = Field(default=10_000, ge=1)

    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", validate_assignment=True)

    def grading_api_key(self) -> str:
        """Return the grader credential, preferring ``OPENAI_API_KEY``."""

        return (self.OPENAI_API_KEY or self.GPT_API_KEY).strip()


settings = Settings()
