"""Configuration using pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from sheetops.transport import API_BASE, DEFAULT_TIMEOUT


class Settings(BaseSettings):
    """Settings loaded from SHEETOPS_* environment variables or .env."""

    model_config = SettingsConfigDict(
        env_prefix="SHEETOPS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Google API
    access_token: str = ""
    api_base: str = API_BASE
    timeout: int = DEFAULT_TIMEOUT

    # Logging
    log_level: str = "WARNING"
    json_logs: bool = False

    @property
    def has_token(self) -> bool:
        return bool(self.access_token.strip())


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
