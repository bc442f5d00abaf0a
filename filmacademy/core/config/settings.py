"""Application settings loaded from environment with safe fallbacks.

Environment precedence:
- Loads `.env` from the repo root before reading process env vars.
- Most values are pulled straight from env; booleans go through `_env_flag` so `"0"/"false"` work.
- CORS is normalized from `CORS_ORIGINS` (comma-separated) with a conservative default allowlist.

Key expectations (defaults in parentheses):
- `APP_ENV` controls settings class selection (`production` default).
- Database: `DATABASE_URL` or `TEST_DATABASE_URL`; SQLite fallback for local runs.
- Auth: `SECRET_KEY` / `ALGORITHM` (HS256) / `ACCESS_TOKEN_EXPIRE_MINUTES` (60).
- AI gateway: `AI_GATEWAY_URL`, `AI_GATEWAY_API_KEY`; the AI tools answer 503 without a key.
- Academy rules: `COURSE_COMPLETION_THRESHOLD` (95), `DEFAULT_PASSING_SCORE` (70),
  `CERTIFICATE_PREFIX` (FFA), `CERTIFICATE_AUTO_ISSUE` (true).
"""

import logging
import os
from pathlib import Path
from typing import ClassVar, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# (__file__ is filmacademy/core/config/settings.py, so the repo root is three levels up)
BASE_DIR = Path(__file__).resolve().parents[3]


load_dotenv(BASE_DIR / ".env")

logger = logging.getLogger(__name__)


def _env_flag(name: str, *, default: Optional[bool] = False) -> Optional[bool]:
    """
    Helper to parse boolean-like environment variables.
    """
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    Behavior highlights:
    - Loads `.env` at repo root, then lets process env override.
    - Prefers `DATABASE_URL`; tests resolve `TEST_DATABASE_URL` or a local SQLite file.
    - Feature toggles parsed via `_env_flag` to accept common truthy/falsey strings.
    - CORS normalized once to avoid mutation side effects in settings instances.
    """

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: Optional[str] = os.getenv("DATABASE_URL")
    test_database_url: Optional[str] = os.getenv("TEST_DATABASE_URL")
    environment: str = os.getenv("APP_ENV", "production")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_dir: Optional[str] = os.getenv("LOG_DIR", "logs")
    use_json_logs: bool = _env_flag("USE_JSON_LOGS", default=True)
    allowed_origins: list[str] = []
    SITE_NAME: str = os.getenv("SITE_NAME", "Film Academy")

    secret_key: str = os.getenv("SECRET_KEY", "change-me-in-production")
    algorithm: str = os.getenv("ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60))

    ai_gateway_url: str = os.getenv(
        "AI_GATEWAY_URL", "https://ai.gateway.lovable.dev/v1/chat/completions"
    )
    ai_gateway_api_key: Optional[str] = os.getenv("AI_GATEWAY_API_KEY")
    ai_default_model: str = os.getenv("AI_DEFAULT_MODEL", "google/gemini-2.5-flash")
    ai_structured_model: str = os.getenv("AI_STRUCTURED_MODEL", "google/gemini-2.5-pro")
    ai_request_timeout: float = float(os.getenv("AI_REQUEST_TIMEOUT", 60))
    ai_rate_limit: str = os.getenv("AI_RATE_LIMIT", "20/minute")

    COURSE_COMPLETION_THRESHOLD: float = float(
        os.getenv("COURSE_COMPLETION_THRESHOLD", 95)
    )
    DEFAULT_PASSING_SCORE: int = int(os.getenv("DEFAULT_PASSING_SCORE", 70))
    CERTIFICATE_PREFIX: str = os.getenv("CERTIFICATE_PREFIX", "FFA")
    CERTIFICATE_AUTO_ISSUE: bool = bool(
        _env_flag("CERTIFICATE_AUTO_ISSUE", default=True)
    )
    FEATURED_COURSES_LIMIT: int = int(os.getenv("FEATURED_COURSES_LIMIT", 3))

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        env_override = os.getenv("APP_ENV")
        if env_override:
            object.__setattr__(self, "environment", env_override)

        cors_env = os.getenv("CORS_ORIGINS")
        if cors_env:
            origins = [
                origin.strip() for origin in cors_env.split(",") if origin.strip()
            ]
        elif self.allowed_origins:
            origins = self.allowed_origins
        else:
            origins = ["http://localhost:5173", "http://localhost:8080"]
        object.__setattr__(self, "allowed_origins", origins)

        if not self.log_dir:
            object.__setattr__(self, "log_dir", None)

        if (
            self.environment.lower() == "production"
            and self.secret_key == "change-me-in-production"
        ):
            logger.warning("SECRET_KEY is not set; tokens are signed with the default key.")

    def get_database_url(self, *, use_test: bool = False) -> str:
        """Resolve the SQLAlchemy database URL for runtime or tests.

        Priority: `TEST_DATABASE_URL` when a test URL is requested, then `DATABASE_URL`,
        finally a local SQLite file so the app can start without configuration.
        """
        if use_test:
            test_url = self.test_database_url or "sqlite:///./tests/test.db"
            if not test_url.startswith("sqlite") and "_test" not in test_url:
                raise ValueError(
                    "Test database URL must point to a dedicated test database (contains '_test')."
                )
            return test_url

        if self.database_url:
            return self.database_url

        return "sqlite:///./filmacademy.db"
