"""Runtime settings loaded from environment variables."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_FILE = "assetsync.toml"
MANIFEST_FILE = "assetsync-manifest.toml"


class Settings(BaseSettings):
    """assetsync runtime settings."""

    model_config = SettingsConfigDict(
        env_prefix="ASSETSYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Credential for the remote asset store (sent as a session cookie)
    auth: str | None = None

    # Remote store
    upload_url: str = "https://data.roblox.com/data/upload/json"
    upload_timeout: float = Field(default=60.0, gt=0)

    debug: bool = False
