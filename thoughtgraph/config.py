from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Web UI / HTTP service
    HOST: str = "127.0.0.1"
    PORT: int = Field(default=3000, ge=1, le=65535)
    WEB_UI_ENABLED: bool = False

    # Sync stream
    OBSERVER_QUEUE_SIZE: int = Field(default=1000, ge=1, description="Pending messages per observer before it is dropped")
    SSE_PING_SECONDS: float = Field(default=15.0, gt=0)

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = Field(default="json", description="'json' for production, 'console' for dev")
    LOG_STREAM: Literal["stdout", "stderr"] = "stdout"


def get_settings() -> Settings:
    return Settings()
