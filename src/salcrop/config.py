"""salcrop configuration using pydantic-settings.

Process-level settings (logging and a few defaults for crop options) are
strongly typed and support environment variables and .env files.

The crop pipeline itself never reads these settings implicitly; callers
pass a ``CropOptions`` value, optionally seeded from here via
``CropOptions.from_settings``.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"  # "console" or "json"

    # Crop defaults
    WORKING_RESOLUTION_LIMIT: int = 256  # Long side of the analysis image
    TOP_K: int = 1  # Ranked alternatives returned with the best crop
    MAX_WORKERS: int = 1  # Threads used for candidate scoring


# Singleton instance for import convenience
settings = Settings()
