from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Document Chat API"

    # Gemini (API key is normally injected by the hosting environment)
    GEMINI_API_KEY: str = Field(default="")
    GEMINI_API_BASE: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_MODEL: str = "gemini-2.5-flash-preview-09-2025"
    REQUEST_TIMEOUT_S: float = Field(default=30.0, gt=0)

    # Retry Settings
    MAX_RETRIES: int = Field(default=3, ge=1)
    RETRY_BASE_DELAY_S: float = Field(default=1.0, ge=0)
    RETRY_JITTER_MAX_S: float = Field(default=0.5, ge=0)

    # File Upload Settings
    MAX_FILE_SIZE_MB: int = 2
    ALLOWED_EXTENSIONS: List[str] = [".txt", ".pdf"]

    # RAG Settings
    CHUNK_SIZE: int = Field(default=1500, gt=0)

    # CORS
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["*"])

    LOG_LEVEL: str = "INFO"

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def generate_url(self) -> str:
        return f"{self.GEMINI_API_BASE.rstrip('/')}/models/{self.GEMINI_MODEL}:generateContent"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
