"""Process settings for Switchyard."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SWITCHYARD_",
        extra="ignore",
    )

    # Server settings
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=9093)
    log_level: str = Field(default="INFO")

    # Routing configuration
    config_file: str = Field(default="switchyard.yml")

    @property
    def config_path(self) -> Path:
        return Path(self.config_file)


@lru_cache
def get_settings() -> Settings:
    return Settings()
