import json
import os
import sys
from typing import Annotated, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _env_file() -> str | None:
    """
    Return ``.env`` for local runs, None under pytest or CI.

    Tests and CI must see the real process environment only, so a missing
    SECRET_KEY fails there instead of being filled in from a developer file.
    """
    running_tests = any("pytest" in str(arg) for arg in sys.argv if arg)
    if running_tests or os.environ.get("CI") in ("1", "true", "True"):
        return None
    return ".env"


class Settings(BaseSettings):
    ENVIRONMENT: str = Field(
        default="development",
        description="One of development, staging, production, test",
    )

    DATABASE_URL: str = "sqlite:///./data/civicreports.db"

    # Sessions are issued by the external auth service; we only verify them.
    SECRET_KEY: str = Field(
        ..., description="JWT secret shared with the auth service"
    )
    ALGORITHM: str = "HS256"
    AUTH_AUDIENCE: str | None = Field(
        default=None,
        description="Expected 'aud' claim of session tokens (e.g. 'authenticated'). "
        "Audience is not checked when unset.",
    )
    SESSION_COOKIE_NAME: str = Field(
        default="session",
        description="Cookie holding the session JWT when no Authorization header is sent",
    )
    # NoDecode hands the raw env string to parse_cors_origins
    CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default=["http://localhost:3000"],
        description="Origins of the web map and admin dashboard",
    )

    # Pool settings, ignored for SQLite
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = Field(default=1800, description="Seconds before reconnect")

    AUTO_CREATE_DB: bool = Field(
        default=False,
        description="Run create_all on startup instead of relying on Alembic",
    )
    SLOW_REQUEST_THRESHOLD: float = Field(
        default=1.0,
        description="Requests slower than this many seconds are logged as warnings",
    )

    DEFAULT_COMMUNITY_RADIUS_KM: float = Field(
        default=5.0,
        description="Radius assigned to new communities that do not specify one",
    )

    # Rate limits (slowapi syntax), keyed by client address
    RATE_LIMIT_CREATE_COMMUNITY: str = "10/hour"
    RATE_LIMIT_CREATE_REPORT: str = "30/hour"
    RATE_LIMIT_INTERACTION: str = Field(
        default="60/minute", description="Shared by join and upvote"
    )

    PROJECT_NAME: str = "CivicReports"
    VERSION: str = "1.0.0"

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | List[str]) -> List[str]:
        """Accept a JSON list or a comma-separated string."""
        if not isinstance(v, str):
            return v
        raw = v.strip()
        if raw.startswith("["):
            return json.loads(raw)
        return [origin.strip() for origin in raw.split(",") if origin.strip()]

    # SENTRY_DSN and friends are read directly from the environment
    model_config = SettingsConfigDict(
        env_file=_env_file(), env_file_encoding="utf-8", extra="ignore"
    )


# Raises pydantic.ValidationError at import time when SECRET_KEY is unset
settings = Settings()  # type: ignore[call-arg]
