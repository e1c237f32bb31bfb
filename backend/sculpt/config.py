"""
Application configuration using Pydantic Settings.
Loads environment variables with validation and type coercion.
"""

from functools import lru_cache
from typing import List
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for development.
    Production deployments MUST set API keys and storage credentials via environment.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Sculpt Animation Backend"
    debug: bool = True
    log_level: str = "INFO"
    api_v1_prefix: str = "/api/v1"

    # CORS
    cors_origins: List[str] = ["http://localhost:3000"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # Groq API
    groq_api_key: str = ""
    groq_scripting_model: str = "llama-3.3-70b-versatile"
    groq_code_model: str = "llama-3.3-70b-versatile"
    groq_max_tokens: int = 4096
    storyboard_temperature: float = 0.5
    code_temperature: float = 0.1
    correction_temperature: float = 0.15

    # Manim render service
    renderer_endpoint: str = "http://localhost:8080"
    renderer_timeout_seconds: float = 300.0

    # Text-to-speech (edge-tts)
    tts_enabled: bool = True
    tts_voice_id: str = "en-US-AriaNeural"
    tts_rate: str = "+0%"
    tts_pitch: str = "+0Hz"

    # File storage
    storage_backend: str = "local"  # local or gcs
    gcs_bucket_name: str = "sculptai-media"
    gcs_credentials_path: str = ""
    gcs_base_url: str = ""
    static_dir: str = "static"
    public_base_url: str = "http://localhost:8000"

    # Scene pipeline
    max_correction_attempts: int = 3
    idea_min_length: int = 10
    idea_max_length: int = 1000
    default_project_topic: str = "User's Animation Project"

    @field_validator("renderer_endpoint", "public_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoints are joined with paths, so drop any trailing slash."""
        return v.rstrip("/")

    @property
    def storage_public_base_url(self) -> str:
        """Base URL for objects uploaded to the GCS bucket."""
        if self.gcs_base_url:
            return self.gcs_base_url.rstrip("/")
        return f"https://storage.googleapis.com/{self.gcs_bucket_name}"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses lru_cache to avoid re-reading environment on every call.
    Clear cache in tests with: get_settings.cache_clear()
    """
    return Settings()


# Export a settings instance
settings = get_settings()
