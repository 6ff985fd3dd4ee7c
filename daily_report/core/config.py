"""
Application settings.

All runtime configuration is read once into a typed Settings object
(environment variables, optionally a .env file) and handed to the
application factory. Nothing else in the package reads os.environ.
"""

from functools import lru_cache
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Development-only signing secret. Tokens signed with it are forgeable by
# anyone who has read this file: set JWT_SECRET in every real deployment.
DEFAULT_JWT_SECRET = "dev-secret-change-in-production"

APP_VERSION = "1.0.0"


class Settings(BaseSettings):
    """Typed application settings loaded from the environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Sales Daily Report API"

    # Database
    database_url: str = "sqlite+aiosqlite:///./daily_report.db"
    sql_debug: bool = False

    # Tokens
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24

    # Auth cookie
    auth_cookie_name: str = "auth-token"
    auth_cookie_secure: bool = False

    # HTTP
    cors_allow_origins: str = "http://localhost:3000"
    enable_docs: bool = True
    enable_hsts: bool = False

    # Logging
    log_level: str = "INFO"

    # First-run manager account
    bootstrap_manager: bool = True
    bootstrap_manager_email: str = "manager@example.com"

    # Pagination
    default_page_size: int = 20
    max_page_size: int = 100

    @field_validator("jwt_secret")
    @classmethod
    def secret_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("JWT_SECRET must not be empty")
        return v

    @field_validator("jwt_expire_hours")
    @classmethod
    def expiry_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("JWT_EXPIRE_HOURS must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def uses_default_secret(self) -> bool:
        return self.jwt_secret == DEFAULT_JWT_SECRET

    @property
    def auth_cookie_max_age(self) -> int:
        """Cookie lifetime in seconds, matched to the token lifetime."""
        return self.jwt_expire_hours * 60 * 60

    def get_cors_allow_origins(self) -> List[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Settings for the process entry point (uvicorn)."""
    return Settings()
