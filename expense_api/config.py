"""
Expense API — Application Configuration
=========================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time.

Note on credentials:
    There is no workspace token here. Every request carries its own token
    as a query parameter and the server never stores one.
"""

from typing import List

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults matching the single deployment this service
    was written for. Attributes are grouped by concern.
    """

    # ── Workspace Databases ───────────────────────────────────────────────
    # What: Names searched for on every request to resolve the database ids
    # Why names (not ids): The caller's workspace decides the ids; only the
    # names are shared between deployments
    expenses_database_name: str = Field(default="Expenses")
    balance_database_name: str = Field(default="Balance")

    # ── Expense Record Defaults ───────────────────────────────────────────
    # What: Values written on new expenses that the form does not supply
    default_card: str = Field(default="Discover it")
    pending_status: str = Field(default="Pending")
    complete_status: str = Field(default="Complete")

    # ── Notion Client ─────────────────────────────────────────────────────
    # What: Notion-Version header sent with every call
    notion_version: str = Field(default="2022-06-28")

    # What: Transport timeout for a single remote call, in milliseconds
    # Why: The only bound on a slow remote call; there is no request timeout
    notion_timeout_ms: int = Field(default=60_000, ge=1_000, le=300_000)

    # ── Retry Configuration ───────────────────────────────────────────────
    # What: Tenacity retry settings for transient transport errors
    # Default of 1 attempt means no retry
    retry_max_attempts: int = Field(default=1, ge=1, le=10)
    retry_min_wait: int = Field(default=1, ge=1, le=30)
    retry_max_wait: int = Field(default=10, ge=1, le=120)

    # ── CORS ──────────────────────────────────────────────────────────────
    # What: Allowed origins for cross-origin requests
    # Format: Comma-separated URLs (parsed by cors_origins_list)
    cors_origins: str = Field(default="https://gleeful-biscuit-12259f.netlify.app")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("backend_port", "port"),
    )

    # What: Controls verbosity of application logging
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("retry_max_wait")
    @classmethod
    def validate_retry_window(cls, v: int, info) -> int:
        """Backoff ceiling may not sit below the floor."""
        floor = info.data.get("retry_min_wait", 1)
        if v < floor:
            raise ValueError(f"retry_max_wait ({v}) must be >= retry_min_wait ({floor})")
        return v

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Singleton instance, imported throughout the application
settings = Settings()
