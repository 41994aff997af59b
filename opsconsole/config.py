from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class AppConfig(BaseSettings):
    """Application configuration using Pydantic BaseSettings.

    Loads configuration from environment variables and .env file (if present).
    Fields are type-checked and validated. Defaults are provided where appropriate.
    """
    # Application
    app_env: str = "local"
    log_level: str = "DEBUG"
    log_file: Optional[str] = None

    # Order API
    order_api_backend: Literal["csv", "http"] = "csv"
    api_base_url: Optional[str] = None
    api_token: Optional[str] = None
    api_timeout_seconds: float = 10.0
    orders_path_prefix: str = "/api/bulk-order"

    # Data paths
    data_dir: str = "sample_data"

    # UI settings
    orders_page_size: int = 20
    min_page_size: int = 5
    max_page_size: int = 100

    # Order lifecycle
    serialize_order_actions: bool = False

    # Seed data settings
    default_seed_orders: int = 60
    default_seed_days: int = 7
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
