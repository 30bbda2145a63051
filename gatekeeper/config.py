"""Configuration settings for Gatekeeper."""

import os
import secrets
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./gatekeeper.db")

    # Session store (empty = in-process store)
    REDIS_URL: str = os.getenv("REDIS_URL", "")

    # JWT
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER: str = os.getenv("JWT_ISSUER", "gatekeeper")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))
    REFRESH_TOKEN_EXPIRE_HOURS: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_HOURS", "168"))

    # Password reset
    RESET_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("RESET_TOKEN_EXPIRE_MINUTES", "30"))
    RESET_URL_BASE: str = os.getenv("RESET_URL_BASE", "http://localhost:8000/reset-password")

    # Password hashing
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Application
    APP_ENV: str = os.getenv("APP_ENV", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    def __init__(self) -> None:
        self.secret_generated = not self.JWT_SECRET_KEY
        if self.secret_generated:
            self.JWT_SECRET_KEY = secrets.token_urlsafe(32)

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        errors = []
        if self.secret_generated:
            errors.append("JWT_SECRET_KEY is not set - using auto-generated key (not persistent across restarts)")
        if self.ACCESS_TOKEN_EXPIRE_MINUTES <= 0:
            errors.append("ACCESS_TOKEN_EXPIRE_MINUTES must be positive")
        if self.REFRESH_TOKEN_EXPIRE_HOURS <= 0:
            errors.append("REFRESH_TOKEN_EXPIRE_HOURS must be positive")
        if self.RESET_TOKEN_EXPIRE_MINUTES <= 0:
            errors.append("RESET_TOKEN_EXPIRE_MINUTES must be positive")
        if not self.REDIS_URL:
            errors.append("REDIS_URL is not set - sessions are kept in process memory")
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
