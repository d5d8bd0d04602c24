"""
Application Configuration

All settings loaded from environment variables.
"""

from functools import lru_cache
from typing import Literal, Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Application
    app_name: str = "FX Pulse Backend"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS
    allowed_origins: list[str] = ["*"]

    # Twelve Data (no key -> demo mode)
    twelve_data_api_key: Optional[str] = None
    twelve_data_base_url: str = "https://api.twelvedata.com"
    http_timeout_seconds: float = 10.0

    # Market data cache
    cache_backend: Literal["redis", "sqlite", "memory"] = "redis"
    market_cache_ttl_seconds: int = 300
    redis_url: str = "redis://localhost:6379"
    sqlite_path: Optional[str] = None  # Defaults to ./data/fxpulse.db

    # Request defaults
    default_timeframe: str = "1D"
    demo_seed: Optional[int] = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @property
    def live_data_enabled(self) -> bool:
        """Live mode requires a non-blank provider key."""
        return bool(self.twelve_data_api_key and self.twelve_data_api_key.strip())


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
