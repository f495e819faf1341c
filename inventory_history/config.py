from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class AppConfig(BaseSettings):
    """Application configuration using Pydantic BaseSettings.

    Loads configuration from environment variables and .env file (if present).
    Fields are type-checked and validated. Defaults are provided where appropriate.
    """
    # Application
    app_env: str = "local"
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Data paths
    data_dir: str = "sample_data"
    inventory_file: str = "liveinventory.csv"
    history_dir: str = "history_data"

    # Persistence
    kv_backend: Literal["file", "memory"] = "file"

    # Retention
    max_snapshots: int = 90
    max_events: int = 10

    # Polling
    poll_interval_seconds: float = 300.0

    # Snapshot building
    default_category: str = "Uncategorized"

    # Seed data settings
    default_seed_days: int = 30
    default_seed_products: int = 40
    default_seed_value: int = 42

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

_config: Optional[AppConfig] = None

def get_config() -> AppConfig:
    """Return the AppConfig instance (singleton pattern)."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config

def set_config_for_test(**kwargs):
    """For testing only: override the AppConfig instance with new values."""
    global _config
    _config = AppConfig(**kwargs)
