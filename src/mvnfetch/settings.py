"""Configuration helpers for mvnfetch."""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from mvnfetch.logconfig import configure_logging

DEFAULT_REPOSITORY_URL = "https://repo.maven.apache.org/maven2"
ENV_VARS = {
    "repository_url": "MVNFETCH_REPOSITORY_URL",
    "log_level": "MVNFETCH_LOG_LEVEL",
    "max_concurrency": "MVNFETCH_MAX_CONCURRENCY",
    "request_timeout": "MVNFETCH_TIMEOUT",
    "deduplicate": "MVNFETCH_DEDUPLICATE",
}


class Settings(BaseModel):
    """Runtime configuration loaded from env vars with sensible defaults."""

    repository_url: str = DEFAULT_REPOSITORY_URL
    log_level: str = "INFO"
    max_concurrency: int = Field(default=4, ge=1)
    request_timeout: float = Field(default=30.0, gt=0)
    deduplicate: bool = True

    @property
    def base_url(self) -> str:
        return self.repository_url.rstrip("/")

    @classmethod
    def load(cls) -> "Settings":
        load_dotenv()
        # raw strings; pydantic coerces and validates them
        values = {field: os.environ[name] for field, name in ENV_VARS.items() if name in os.environ}
        return cls(**values)


def get_settings() -> Settings:
    """Convenience accessor that also wires up logging."""
    settings = Settings.load()
    configure_logging(settings.log_level)
    return settings
