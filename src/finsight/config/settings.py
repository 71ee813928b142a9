"""Application settings and configuration."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_default_data_dir() -> Path:
    """Return the default data directory based on platform."""
    return Path.home() / ".finsight"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FINSIGHT_",
    )

    app_name: str = "Finsight Prediction & Trading Core"
    app_version: str = "0.1.0"

    # Data directory (all app data lives here)
    data_dir: Optional[Path] = None

    # Database URL (derived from data_dir if not set explicitly)
    database_url: Optional[str] = None

    log_level: str = "INFO"

    # Market data settings
    market_data_provider: str = "stub"  # "stub" or "yfinance"
    market_data_cache_ttl_seconds: int = 60
    # Minimum spacing between provider calls (rate-limited upstreams)
    market_data_min_interval_seconds: float = 0.0

    # Prediction settings
    model_version: str = "rule-based-v1"
    prediction_history_days: int = 250
    prediction_min_history: int = 200
    prediction_horizon_days: int = 7
    prediction_max_workers: int = 4
    watchlist: list[str] = ["AAPL", "MSFT", "NVDA", "AMZN", "TSLA"]

    # Trading settings
    reconcile_max_attempts: int = 3

    # Language model (assistant)
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-pro"
    gemini_timeout_seconds: float = 30.0

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_database_url(self) -> str:
        """Get database URL, deriving from data_dir if not set."""
        if self.database_url:
            return self.database_url
        db_path = self.get_data_dir() / "finsight.db"
        return f"sqlite:///{db_path}"


# Global settings instance (can be replaced at runtime)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None
