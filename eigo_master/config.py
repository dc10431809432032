"""Configuration settings using pydantic-settings."""
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Storage
    DATABASE_PATH: str = Field(
        default="data/eigo_master.db",
        description="Path to SQLite database file"
    )

    # Dictionaries
    DICTIONARY_DIR: str = Field(
        default="dictionaries",
        description="Directory with dictionary JSON files"
    )

    # Spelling quiz
    QUIZ_SESSION_SIZE: int = Field(
        default=10,
        ge=1,
        description="Number of questions per quiz session"
    )
    FEEDBACK_DWELL_MS: int = Field(
        default=1500,
        ge=0,
        description="How long answer feedback stays on screen (milliseconds)"
    )
    SHUFFLE_SEED: Optional[int] = Field(
        default=None,
        description="Seed for question shuffling (unset = random every run)"
    )

    # Flashcards
    FLASHCARD_INTERVAL_MS: int = Field(
        default=3000,
        ge=0,
        description="Silent mode: time each card is shown (milliseconds)"
    )
    FLASHCARD_AUDIO_DELAY_MS: int = Field(
        default=500,
        ge=0,
        description="Audio modes: pause before a card is spoken (milliseconds)"
    )

    # Stats
    WEAK_WORDS_LIMIT: int = Field(default=10, ge=1, description="Rows in the weak words list")
    RECENT_SESSIONS_LIMIT: int = Field(default=10, ge=1, description="Rows in the recent sessions list")

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    LOG_FILE: str = Field(
        default="data/logs/eigo_master.log",
        description="Path to log file"
    )

    class Config:
        """Pydantic config."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


# Global settings instance
settings = Settings()
