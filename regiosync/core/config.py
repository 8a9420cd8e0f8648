"""
Zentrale Konfiguration für RegioSync
Basiert auf Pydantic Settings mit Environment Variable Support
"""

from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application Settings mit Environment Variable Support"""

    # External results site
    regiowyniki_base_url: str = "https://regiowyniki.pl"
    scraping_user_agent: str = "Mozilla/5.0 (compatible; SmallClubManager/1.0)"
    scraping_accept: str = "text/html,application/xhtml+xml"
    # Total timeout per fetch (seconds); one hung request must not stall a batch
    scraping_timeout: int = 30
    scraping_rate_limit_backoff_seconds: float = 60.0
    search_result_limit: int = 20
    season_label: str = "2025/2026"

    # Sync scheduling
    sync_interval_seconds: int = 24 * 60 * 60
    # Token bucket plus release(): 1 request per 2s leaves 2000ms between clubs
    sync_rate_limit_requests: int = 1
    sync_rate_limit_window_seconds: float = 2.0

    # Registry storage
    registry_backend: Literal["memory", "sql"] = "memory"
    registry_database_url: str = "sqlite:///./regiosync.db"

    # Monitoring
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"
    enable_metrics: bool = False
    metrics_port: int = 8008

    # Application
    environment: str = "development"  # Environment: development, staging, production

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return upper_v

    @field_validator("sync_rate_limit_requests")
    @classmethod
    def validate_rate_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError("sync_rate_limit_requests must be >= 1")
        return v


# Globale Settings Instanz
settings = Settings()
