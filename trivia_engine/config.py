"""
Configuration settings for the trivia engine.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TRIVIA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Database
    # ========================================
    data_dir: Path = Field(
        default=Path.home() / ".trivia_engine",
        description="Directory holding the local progress database",
    )
    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy async URL (defaults to SQLite under data_dir)",
    )
    database_echo: bool = Field(
        default=False,
        description="Echo SQL statements",
    )

    # ========================================
    # Content
    # ========================================
    default_locale: str = Field(
        default="en",
        description="Locale used when callers do not pass one",
    )
    catalog_delivered_only: bool = Field(
        default=True,
        description="Only expose questions whose fact has been shown to the user",
    )

    # ========================================
    # Session sizes
    # ========================================
    daily_questions: int = Field(default=10, ge=1, description="Questions per daily trivia")
    mixed_questions: int = Field(default=10, ge=1, description="Questions per mixed trivia")
    category_questions: int = Field(default=10, ge=1, description="Questions per category trivia")
    time_per_question_seconds: int = Field(
        default=45,
        description="Average seconds per question, used for duration estimates",
    )

    # ========================================
    # Mastery
    # ========================================
    mastery_policy: Literal["most_recent_correct", "ever_correct", "consecutive_correct"] = Field(
        default="most_recent_correct",
        description="Rule deciding when a question counts as mastered",
    )
    mastery_streak_length: int = Field(
        default=3,
        ge=1,
        description="Consecutive correct answers required by the consecutive_correct policy",
    )

    # ========================================
    # Hints
    # ========================================
    hint_limit_free: int = Field(default=1, ge=0, description="Explanation hints per day (free)")
    hint_limit_premium: int = Field(default=3, ge=0, description="Explanation hints per day (premium)")

    # ========================================
    # History
    # ========================================
    recent_sessions_limit: int = Field(default=10, description="Sessions shown in recent lists")

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # Helper Methods
    # ========================================
    def get_database_url(self) -> str:
        """Return the configured URL or the default SQLite file under data_dir."""
        if self.database_url:
            return self.database_url
        return f"sqlite+aiosqlite:///{self.data_dir / 'trivia.db'}"

    def get_session_sizes(self) -> dict[str, int]:
        """Get per-mode session sizes as a dictionary."""
        return {
            "daily": self.daily_questions,
            "mixed": self.mixed_questions,
            "category": self.category_questions,
        }

    def get_hint_limit(self, is_premium: bool) -> int:
        return self.hint_limit_premium if is_premium else self.hint_limit_free


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
