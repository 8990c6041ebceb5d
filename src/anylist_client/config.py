"""Client configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Settings for the HTTP service adapter, loaded from environment variables."""

    anylist_base_url: str = "https://www.anylist.com"
    anylist_api_version: str = "3"
    anylist_timeout_seconds: float = 15.0
    anylist_client_identifier: str | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def normalize_base_url(raw: str) -> str:
    """Strip whitespace and trailing slashes from a configured base URL."""
    cleaned = raw.strip().rstrip("/")
    if not cleaned:
        raise ValueError("anylist_base_url must not be empty")
    return cleaned
