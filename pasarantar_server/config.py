"""Configuration loaded from the environment."""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from .toast import DEFAULT_TOAST_SECONDS


class Settings(BaseModel):
    """Runtime settings."""

    api_url: str = Field(default="http://localhost:3000", description="PasarAntar API root")
    server_url: Optional[str] = Field(None, description="Base URL for relative image paths")
    storage_file: str = Field(
        default_factory=lambda: str(Path.home() / ".pasarantar_storage.json"),
        description="Local storage file for cart, checkout info and customer session",
    )
    toast_seconds: float = Field(default=DEFAULT_TOAST_SECONDS, gt=0)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables.

        - PASARANTAR_API_URL
        - PASARANTAR_SERVER_URL (defaults to the API URL)
        - PASARANTAR_STORAGE_FILE
        - PASARANTAR_TOAST_SECONDS
        - PASARANTAR_LOG_LEVEL
        """
        values: dict[str, str] = {}
        env_map = {
            "api_url": "PASARANTAR_API_URL",
            "server_url": "PASARANTAR_SERVER_URL",
            "storage_file": "PASARANTAR_STORAGE_FILE",
            "toast_seconds": "PASARANTAR_TOAST_SECONDS",
            "log_level": "PASARANTAR_LOG_LEVEL",
        }
        for field_name, env_name in env_map.items():
            value = os.environ.get(env_name)
            if value:
                values[field_name] = value
        settings = cls(**values)
        if settings.server_url is None:
            settings.server_url = settings.api_url
        return settings
