from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application configuration"""

    # App Settings
    app_name: str = "Card Snap Wallet"
    app_version: str = "0.0.1"

    # Storage Settings
    db_path: str = "./data/card_snap.db"
    echo_sql: bool = False  # Set to True for SQL debug logging

    # Export Settings
    export_indent: Optional[int] = None  # None keeps exports compact

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="CARD_SNAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )


settings = Settings()
