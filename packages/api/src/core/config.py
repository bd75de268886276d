# This project was developed with assistance from AI tools.
"""
Application configuration.

All settings read from environment variables with sensible local dev defaults.
Group related settings together; each group becomes a section future PRs extend.
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
    APP_NAME: str = "solo-parent-registry"
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root log level applied at startup.",
    )

    # -- CORS --
    ALLOWED_HOSTS: list[str] = ["http://localhost:5173"]

    # -- Transactions (the database URL lives in db.config) --
    RETRY_ATTEMPTS: int = Field(
        default=3,
        description="Attempts for status transitions that hit lock timeouts or deadlocks.",
    )
    RETRY_BACKOFF_SECONDS: float = Field(
        default=1.0,
        description="Fixed delay between transition retry attempts.",
    )

    # -- Auth --
    AUTH_DISABLED: bool = Field(
        default=False,
        description="Bypass JWT validation. Set True for tests and local dev without Keycloak.",
    )
    KEYCLOAK_URL: str = "http://localhost:8080"
    KEYCLOAK_REALM: str = "solo-parent"
    JWKS_CACHE_TTL: int = Field(
        default=300,
        description="JWKS cache lifetime in seconds (default 5 minutes).",
    )

    # -- Email (SMTP) --
    EMAIL_ENABLED: bool = Field(
        default=False,
        description="Send applicant emails. When False, messages are logged and skipped.",
    )
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_START_TLS: bool = True
    SMTP_TIMEOUT: float = 10.0
    EMAIL_FROM: str = "santamariasoloparent@gmail.com"
    EMAIL_FROM_NAME: str = "Santa Maria Solo Parent Office"
    REMARKS_GRACE_DAYS: int = Field(
        default=7,
        description="Days a Pending Remarks applicant has to respond before termination.",
    )


settings = Settings()
