"""
Configuration module for vinime-bot.

Uses pydantic-settings for environment variable loading and validation.
All settings can be configured via environment variables or a .env file.
"""
from pydantic_settings import BaseSettings


class CommonSettings(BaseSettings):
    """Settings shared by the bot and the REST API."""

    # Logging
    log_level: str = "INFO"
    log_file: str = "vinime_bot.log"

    env: str = "development"
    debug: bool = True

    # Pydantic v2 configuration: accept extra env vars and set env file
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


class Settings(CommonSettings):
    """Application settings loaded from environment variables."""

    # Telegram API credentials (validated when the bot starts)
    tg_api_id: int = 0
    tg_api_hash: str = ""
    tg_bot_token: str = ""
    session_name: str = "vinime_bot"

    # Source site
    base_url: str = "https://otakudesu.cloud"
    request_timeout_seconds: float = 20.0
    request_retries: int = 2
    retry_backoff_seconds: float = 2.0

    # Catalog persistence and seeding
    catalog_file: str = "./data/anime_catalog.json"
    catalog_debounce_seconds: float = 5.0
    catalog_seed_threshold: int = 50
    seed_start_delay_seconds: float = 3.0
    seed_search_delay_seconds: float = 1.5

    # Media relay
    download_dir: str = "./data/downloads"
    max_upload_mb: int = 2000
    max_upload_concurrency: int = 2
    download_timeout_seconds: float = 300.0
    delete_after_upload: bool = True
    file_retention_seconds: int = 24 * 3600

    def has_telegram_credentials(self) -> bool:
        return bool(self.tg_api_id and self.tg_api_hash and self.tg_bot_token)


settings = Settings()
