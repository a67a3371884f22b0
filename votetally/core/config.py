"""Application configuration management."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str
    DB_POOL_MIN_SIZE: int = 2
    DB_POOL_MAX_SIZE: int = 10

    # Admin session signing
    SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"

    # Shared admin password. ADMIN_PASSWORD_HASH (argon2) wins when set.
    ADMIN_PASSWORD: str = "admin123"
    ADMIN_PASSWORD_HASH: Optional[str] = None
    ADMIN_SESSION_TTL_SECONDS: int = 86400
    ADMIN_SESSION_COOKIE: str = "admin_session"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Environment
    ENVIRONMENT: str = "development"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]


settings = Settings()


def get_settings() -> Settings:
    return settings
