"""Application configuration."""

import os
import tempfile
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    classification_base_url: str
    nutrition_base_url: str = "https://api.edamam.com/api"
    edamam_app_id: str | None = None
    edamam_app_key: str | None = None
    http_timeout_seconds: float = 15.0
    capture_dir: Path = Path(tempfile.gettempdir()) / "fruit-scan"
    reclassify_on_enrich: bool = False
    session_ttl_seconds: int = 1800
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def nutrition_credentials(settings: Settings) -> tuple[str, str] | None:
    """Return the nutrition-data app id and key, or None if either is blank."""
    app_id = (settings.edamam_app_id or "").strip()
    app_key = (settings.edamam_app_key or "").strip()
    if not app_id or not app_key:
        return None
    return app_id, app_key
