"""Application configuration."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_BACKEND_DIR = Path(__file__).parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="AUTOTRADER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Risk configuration (YAML)
    risk_config_path: Path = _BACKEND_DIR / "risk.yaml"

    # Scheduler
    evaluation_interval_seconds: float = 300.0  # 5 minutes
    decision_history_size: int = 20
    trade_history_size: int = 100
    history_lookback: int = 20  # bars requested per instrument

    # Paper broker
    paper_data_dir: Path = _BACKEND_DIR / "data"
    paper_starting_cash: float = 100000.0

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
