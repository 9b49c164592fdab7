from functools import lru_cache
from pathlib import Path

from pydantic import PostgresDsn, ValidationError, field_validator
from pydantic_settings import BaseSettings

from vip_admin.core.errors import ConfigurationError

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"


class Settings(BaseSettings):
    # Database - allow both PostgreSQL and SQLite for development
    database_url: PostgresDsn | str
    database_pool_size: int = 20
    database_max_overflow: int = 40

    # Application
    app_name: str = "NumbersGuru Admin"
    debug: bool = False
    log_level: str = "INFO"
    logs_dir: Path = Path("logs")

    # Listing
    page_size: int = 10

    # Auth
    admin_email: str
    firebase_api_key: str
    firebase_auth_domain: str | None = None
    firebase_project_id: str | None = None
    identity_base_url: str = IDENTITY_TOOLKIT_URL
    identity_timeout_seconds: float = 15.0

    # Session cookie
    session_secret_key: str
    jwt_algorithm: str = "HS256"
    session_expire_hours: int = 7 * 24

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        if not v:
            raise ValueError("DATABASE_URL must be set")
        return v

    @field_validator("admin_email")
    @classmethod
    def validate_admin_email(cls, v: str) -> str:
        v = v.strip()
        if not v or "@" not in v:
            raise ValueError("ADMIN_EMAIL must be the email address of the dashboard admin")
        return v

    @field_validator("firebase_api_key", "session_secret_key")
    @classmethod
    def validate_secret_present(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("value must not be empty")
        return v.strip()

    @field_validator("page_size")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("PAGE_SIZE must be a positive integer")
        return v


def load_settings(**overrides) -> Settings:
    """Build settings from the environment, failing fast on missing credentials.

    Raises:
        ConfigurationError: naming every missing or invalid variable.
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        problems = []
        for error in e.errors():
            field = ".".join(str(part) for part in error.get("loc", ())) or "settings"
            problems.append(f"{field.upper()}: {error.get('msg')}")
        raise ConfigurationError(
            "Invalid or missing configuration. Set the following environment "
            "variables (or add them to .env) and restart: " + "; ".join(problems),
            details={"fields": problems},
        ) from e


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return load_settings()
