"""Configuration schema using Pydantic."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageConfig(BaseModel):
    """Where and under which key the capsule collection is kept."""
    data_dir: str = "~/.timecapsule/data"
    key: str = "timecapsule_data_v2"
    max_bytes: int | None = Field(default=None, ge=1, description="Optional storage quota in bytes")


class WatcherConfig(BaseModel):
    """Periodic unlock check."""
    check_interval_s: int = Field(default=3600, ge=1, description="Seconds between unlock sweeps")


class NotificationsConfig(BaseModel):
    """System-level notification channel."""
    system: Literal["desktop", "webhook", "none"] = "desktop"
    webhook_url: str = ""  # e.g. an ntfy or Server酱 push endpoint
    timeout_s: float = 5.0


class Config(BaseSettings):
    """Root configuration for timecapsule."""
    model_config = SettingsConfigDict(env_prefix="TIMECAPSULE_", env_nested_delimiter="__")

    storage: StorageConfig = Field(default_factory=StorageConfig)
    watcher: WatcherConfig = Field(default_factory=WatcherConfig)
    notifications: NotificationsConfig = Field(default_factory=NotificationsConfig)

    @property
    def data_path(self) -> Path:
        """Get expanded data directory."""
        return Path(self.storage.data_dir).expanduser()
