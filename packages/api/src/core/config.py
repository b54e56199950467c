# This project was developed with assistance from AI tools.
"""
Application configuration.

Values come from the environment or the repo-root .env file. Defaults suit a
local docker-compose Postgres; production must override JWT_SECRET.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve project root .env regardless of CWD
_PROJECT_ROOT = Path(__file__).resolve().parents[4]
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Application settings -- single source of truth for env-driven config."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -- App --
    APP_NAME: str = "gryork"
    DEBUG: bool = Field(default=False, description="FastAPI debug mode (tracebacks on 500s).")
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root log level applied at startup.",
    )

    # -- CORS --
    ALLOWED_HOSTS: list[str] = ["http://localhost:5173"]

    # -- Auth --
    AUTH_DISABLED: bool = Field(
        default=False,
        description="Bypass JWT validation. Set True for tests and local dev.",
    )
    JWT_SECRET: str = Field(
        default="dev-only-secret-change-me-in-production",
        description="Shared secret used to verify bearer tokens.",
    )
    JWT_ALGORITHM: str = "HS256"

    # -- Cases --
    CASE_NUMBER_PREFIX: str = "CWCRF"

    # -- Audit --
    AUDIT_EXPORT_LIMIT: int = Field(
        default=10_000,
        description="Maximum rows returned by a single audit export.",
    )


settings = Settings()
