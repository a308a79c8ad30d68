"""
Application configuration using Pydantic Settings.

Supports loading from environment variables and .env files.
"""

from functools import lru_cache
from typing import Optional, List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ============ Application ============
    app_name: str = "Night Owl Gallery"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"  # development, staging, production

    # ============ Server ============
    host: str = "0.0.0.0"
    port: int = 8000

    # ============ Security ============
    secret_key: str = "change-me-in-production-use-a-long-random-string"
    jwt_algorithm: str = "HS256"
    jwt_expire_days: int = 7

    # ============ CORS ============
    cors_origins: List[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: List[str] = ["*"]
    cors_allow_headers: List[str] = ["*"]

    # ============ Redis ============
    redis_url: str = "redis://localhost:6379/0"
    redis_max_connections: int = 10

    # ============ Database ============
    database_enabled: bool = True
    database_url: Optional[str] = None
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_echo: bool = False
    db_create_tables: bool = False

    # ============ Logging ============
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # ============ Galleries ============
    gallery_page_size: int = 20
    favorites_cache_prefix: str = "favorites"
    favorites_cache_ttl: int = 0  # seconds, 0 keeps snapshots until overwritten

    # ============ Trending ============
    trending_limit: int = 12
    trending_fetch_limit: int = 20  # per content kind
    trending_tag_limit: int = 10
    growth_threshold: int = 10  # downloads above which the higher growth band applies

    # ============ Downloads ============
    download_dir: str = "downloads"
    download_timeout: float = 30.0

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_database_configured(self) -> bool:
        """Check if the content database is configured."""
        return bool(self.database_enabled and self.database_url)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
