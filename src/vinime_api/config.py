"""
API configuration module.

Extends the base vinime-bot settings with API-specific configuration.
"""
from vinime_bot.config import Settings


class APISettings(Settings):
    """API-specific settings loaded from environment variables."""

    # API Server settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # CORS settings
    cors_origins: str = "*"

    # Seed the catalog in the background on startup
    seed_on_startup: bool = True

    def cors_origin_list(self) -> list:
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


api_settings = APISettings()
