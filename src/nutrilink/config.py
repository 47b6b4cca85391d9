"""Application configuration."""

import os
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    fatsecret_client_id: str
    fatsecret_client_secret: str
    fatsecret_token_url: str = "https://oauth.fatsecret.com/connect/token"
    fatsecret_search_url: str = "https://platform.fatsecret.com/rest/foods/search/v2"
    fatsecret_scope: str = "premier"
    fatsecret_max_results: int = 20
    storage_backend: Literal["file", "supabase"] = "file"
    store_path: Path = Path("data/nutrilink.json")
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    supabase_snapshot_name: str = "default"
    timezone: str = "UTC"
    seed_sample_data: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
