"""Configuration management for the deploy tracker."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DeployTrackerSettings(BaseSettings):
    """Runtime configuration sourced from environment variables and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )

    storage_backend: Literal["chroma", "memory"] = Field(
        default="chroma", validation_alias="DEPLOY_TRACKER_STORAGE"
    )
    chroma_persist_path: Path = Field(
        default=Path("./storage/chroma"), validation_alias="CHROMA_PERSIST_PATH"
    )
    chroma_collection: str = Field(
        default="channel_deploys", validation_alias="DEPLOY_TRACKER_COLLECTION"
    )
    log_level: str = Field(default="INFO", validation_alias="DEPLOY_TRACKER_LOG_LEVEL")
    dashboard_host: str = Field(
        default="127.0.0.1", validation_alias="DEPLOY_TRACKER_DASHBOARD_HOST"
    )
    dashboard_port: int = Field(default=8080, validation_alias="DEPLOY_TRACKER_DASHBOARD_PORT")

    @field_validator("storage_backend", mode="before")
    @classmethod
    def _normalize_backend(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(
                "DEPLOY_TRACKER_LOG_LEVEL must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG"
            )
        return normalized

    @field_validator("dashboard_port")
    @classmethod
    def _validate_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError("DEPLOY_TRACKER_DASHBOARD_PORT must be between 1 and 65535")
        return value


@lru_cache(maxsize=1)
def get_settings() -> DeployTrackerSettings:
    """Return cached settings instance."""

    settings = DeployTrackerSettings()
    settings.chroma_persist_path = settings.chroma_persist_path.expanduser().resolve()
    return settings


__all__ = ["DeployTrackerSettings", "get_settings"]
