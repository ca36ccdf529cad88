from pydantic_settings import BaseSettings
from functools import lru_cache

from imagestudio.schemas.generation import AspectRatio


class Settings(BaseSettings):
    # App settings
    app_name: str = "Image Generator"
    debug: bool = False
    log_level: str = "INFO"

    # Imagen API settings
    gemini_api_key: str = ""
    gemini_api_url: str = "https://generativelanguage.googleapis.com/v1beta/models"
    imagen_model: str = "imagen-4.0-generate-001"
    output_mime_type: str = "image/jpeg"
    request_timeout: float = 120.0

    # Form defaults
    default_prompt: str = (
        "A sunlit tropical beach with turquoise water at golden hour, "
        "cinematic, detailed, hyper-realistic"
    )
    default_aspect_ratio: AspectRatio = AspectRatio.PORTRAIT_9_16

    # Sessions
    max_sessions: int = 1000
    session_cookie_name: str = "studio_session"
    loading_refresh_seconds: int = 2  # page reload interval while loading

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
