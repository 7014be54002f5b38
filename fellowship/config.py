"""Application configuration"""

import logging
from functools import lru_cache
from typing import List, Literal

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

IN_MEMORY_DATABASE = ":memory:"


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    app_name: str = "Fellowship API"
    debug: bool = False

    # Security
    secret_key: str = "dev-secret-change-me"
    access_token_expire_minutes: int = 60 * 24  # 24 hours

    # Storage
    database_path: str = "/app/data/fellowship.json"
    uploads_dir: str = "/app/data/uploads"
    public_base_url: str = "http://localhost:8000"
    max_upload_bytes: int = 25 * 1024 * 1024  # 25MB

    # Membership rules
    max_family_admins: int = 3
    admin_limit_mode: Literal["warn", "block"] = "warn"

    # Requests
    request_timeout_seconds: float = 30.0
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # First-run setup
    seed_default_families: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


def validate_production_settings(settings: Settings) -> list:
    """Validate that all required settings are configured for production"""
    errors = []

    if settings.secret_key == "dev-secret-change-me":
        errors.append("SECRET_KEY must be changed from default value")

    if settings.database_path == IN_MEMORY_DATABASE:
        errors.append("DATABASE_PATH is in-memory; data will be lost on restart")

    if settings.public_base_url.startswith("http://localhost"):
        errors.append("PUBLIC_BASE_URL should point at the public host serving /uploads")

    return errors


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    base_settings = Settings()

    if not base_settings.debug:
        errors = validate_production_settings(base_settings)
        for error in errors:
            logger.warning(f"Production config warning: {error}")

    return base_settings
