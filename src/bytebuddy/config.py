"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

STORAGE_BACKENDS = frozenset({"file", "supabase"})


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = "low"
    openai_store: bool = False
    openai_web_search: bool = True
    session_secret: str
    session_ttl_hours: int = 720
    storage_backend: str = "file"
    storage_dir: str = ".bytebuddy"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    timezone: str = "UTC"
    water_goal_ml: int = 2500
    calorie_goal_kcal: int = 2000
    memory_context_limit: int = 10
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def supabase_configured(self) -> bool:
        """Return True when remote store credentials are present."""
        return bool(self.supabase_url and self.supabase_service_key)


def parse_storage_backend(raw: str | None) -> str:
    """Normalise the storage backend name from env."""
    cleaned = (raw or "file").strip().lower()
    if cleaned not in STORAGE_BACKENDS:
        raise ValueError(f"Unknown storage backend: {raw!r}")
    return cleaned
