from pydantic_settings import BaseSettings
from pydantic import ConfigDict, field_validator
from pathlib import Path
from typing import Literal
from functools import lru_cache
from ..validators.config_validators import to_uppercase, to_lowercase


class Settings(BaseSettings):
    """
    Application settings loaded from environment.
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # Database configuration (primary, read-write)
    POSTGRES_DRIVER: str = "psycopg"
    POSTGRES_USERNAME: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "spoke"

    # Full URL overrides (e.g. sqlite+aiosqlite:///./local.db for local runs)
    DATABASE_URL_OVERRIDE: str | None = None
    # Read replica used by the conversation list queries; falls back to the primary
    READONLY_DATABASE_URL: str | None = None

    # SQLAlchemy
    SQLALCHEMY_ECHO: bool = False

    # Conversations
    CONVERSATIONS_RECENT: bool = False
    CONVERSATIONS_COUNT_TIMEOUT_MS: int = 4000
    MAX_CONTACTS_PER_TEXTER: int = 0

    # Assignment cache (Redis). Caching is disabled when REDIS_URL is unset.
    REDIS_URL: str | None = None
    REDIS_CACHE_PREFIX: str = ""

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("/var/log/conversation-engine")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_SQL_LOGGING: bool = False

    # --- Derived settings ---
    @property
    def DATABASE_URL(self) -> str:
        """
        Return the primary (read-write) database URL.

        `DATABASE_URL_OVERRIDE` wins when set; otherwise the URL is assembled
        from the individual POSTGRES_* variables.
        """
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE

        return (
            f"postgresql+{self.POSTGRES_DRIVER}://"
            f"{self.POSTGRES_USERNAME}:{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/"
            f"{self.POSTGRES_DB}"
        )

    @property
    def DATABASE_READONLY_URL(self) -> str:
        """Read replica URL, or the primary URL when no replica is configured."""
        return self.READONLY_DATABASE_URL or self.DATABASE_URL

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: str | None) -> str | None:
        """
        Normalize LOG_LEVEL to uppercase before Literal validation runs, so
        `LOG_LEVEL=debug` in the environment is accepted.
        """
        return to_uppercase(v)

    @field_validator("LOG_FORMAT", mode="before")
    def normalize_log_format(cls, v: str | None) -> str | None:
        return to_lowercase(v)

    model_config = ConfigDict(
        env_file=str(Path(__file__).parent.parent / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Settings are read from the environment once per process.
@lru_cache()
def get_settings() -> Settings:
    return Settings()
