from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # AI
    ai_mode: str = "mock"  # "mock" or "gemini"
    gemini_api_key: Optional[str] = None
    gemini_text_model: str = "gemini-2.5-flash"
    gemini_media_model: str = "gemini-2.5-flash"

    # Retry policy for rate-limited model calls
    retry_max_attempts: int = 3
    retry_delay_seconds: float = 2.0

    # Per-stage timeouts (seconds)
    caption_timeout_seconds: float = 15.0
    clean_timeout_seconds: float = 10.0
    extract_timeout_seconds: float = 15.0
    audio_timeout_seconds: float = 30.0
    transcribe_timeout_seconds: float = 60.0
    classify_timeout_seconds: float = 10.0
    video_timeout_seconds: float = 90.0

    # Media limits
    max_audio_bytes: int = 25 * 1024 * 1024

    # Page fetch
    http_timeout_seconds: float = 10.0
    http_user_agent: str = (
        "Mozilla/5.0 (compatible; RecipeCapture/0.1; +https://example.invalid/bot)"
    )

    # HTTP surface
    rate_limit: str = "60/minute"
    log_level: str = "INFO"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost",
        "http://127.0.0.1",
    ]


settings = Settings()
